"""
SQL DbTable Authentication - Core Library

Verifies identity/credential pairs against a database table, with SQL-side
credential treatments or Python callbacks for the comparison.

Usage:
    from dbauth_core import DbTableAuthAdapter
    from dbauth_core.adapters.duckdb import DuckDBAdapter

    db = DuckDBAdapter("users.duckdb")
    auth = DbTableAuthAdapter(db, "users", "username", "password")
    result = auth.set_identity("alice").set_credential("s3cret").authenticate()
"""

__version__ = "0.1.0"

from .adapter import DbTableAuthAdapter
from .comparators import CallbackCheck, CredentialComparator, CredentialTreatment
from .config import AdapterConfig, load_config, validate_config
from .exceptions import ConfigurationError, DbAuthError, InvalidArgumentError
from .projection import project_row
from .query import LookupQuery
from .result import AuthResult, ResultCode

__all__ = [
    "DbTableAuthAdapter",
    "AdapterConfig",
    "AuthResult",
    "ResultCode",
    "LookupQuery",
    "CredentialComparator",
    "CredentialTreatment",
    "CallbackCheck",
    "ConfigurationError",
    "DbAuthError",
    "InvalidArgumentError",
    "project_row",
    "load_config",
    "validate_config",
    "__version__",
]
