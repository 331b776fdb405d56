"""
DbTable authentication adapter.

Verifies an identity/credential pair against a database table. The
adapter looks up every row whose identity column equals the supplied
identity, then lets the active credential comparator decide which (if any)
of those rows matches the supplied credential.

Usage:
    from dbauth_core import DbTableAuthAdapter
    from dbauth_core.adapters.duckdb import DuckDBAdapter

    db = DuckDBAdapter("users.duckdb")
    auth = DbTableAuthAdapter(db, "users", "username", "password", "MD5(?)")
    result = auth.set_identity("alice").set_credential("s3cret").authenticate()
    if result.is_valid:
        profile = auth.get_result_row(omit_columns="password")
"""

import time
from typing import Any, Callable, Dict, List, Optional, Union

from .adapters.base import DbAdapter, quote_identifier
from .comparators import CallbackCheck, CredentialComparator, CredentialTreatment
from .config import AdapterConfig, validate_fqn, validate_identifier
from .exceptions import ConfigurationError, InvalidArgumentError
from .logger_utils import get_logger
from .projection import ColumnNames, project_row
from .query import LookupQuery
from .result import AuthResult, ResultCode

MSG_SUCCESS = "Authentication successful."
MSG_IDENTITY_NOT_FOUND = "A record with the supplied identity could not be found."
MSG_IDENTITY_AMBIGUOUS = "More than one record matches the supplied identity."
MSG_CREDENTIAL_INVALID = "Supplied credential is invalid."


class DbTableAuthAdapter:
    """
    Authenticate an identity/credential pair against a database table.

    Args:
        db: Database adapter used to run the lookup query
        table_name: Table holding the credentials
        identity_column: Column holding the identity (e.g. username)
        credential_column: Column holding the stored credential
        credential_treatment: SQL expression applied to the supplied
            credential, e.g. ``MD5(?)``. Defaults to plain equality.
        credential_validation_callback: ``callback(supplied, stored) -> bool``
            used instead of a treatment. Cannot be combined with one here;
            use the setters to switch strategies later.
        ambiguity_identity: Allow several rows to share an identity, picking
            the first whose credential matches.

    The instance keeps per-run state (working query, last result row) and
    must not be shared between concurrent authentications.
    """

    def __init__(
        self,
        db: DbAdapter,
        table_name: Optional[str] = None,
        identity_column: Optional[str] = None,
        credential_column: Optional[str] = None,
        credential_treatment: Optional[str] = None,
        credential_validation_callback: Optional[Callable[[str, Any], bool]] = None,
        ambiguity_identity: bool = False,
    ):
        if credential_treatment is not None and credential_validation_callback is not None:
            raise InvalidArgumentError(
                "A credential treatment and a credential validation callback "
                "cannot both be supplied"
            )

        self.db = db
        self.logger = get_logger("DbTableAuthAdapter")

        self.table_name: Optional[str] = None
        self.identity_column: Optional[str] = None
        self.credential_column: Optional[str] = None
        self.ambiguity_identity = False
        self._comparator: CredentialComparator = CredentialTreatment()

        self._identity: Optional[str] = None
        self._credential: Optional[str] = None
        self._query: Optional[LookupQuery] = None
        self._result_row: Optional[Dict[str, Any]] = None

        if table_name is not None:
            self.set_table_name(table_name)
        if identity_column is not None:
            self.set_identity_column(identity_column)
        if credential_column is not None:
            self.set_credential_column(credential_column)
        if credential_treatment is not None:
            self.set_credential_treatment(credential_treatment)
        if credential_validation_callback is not None:
            self.set_credential_validation_callback(credential_validation_callback)
        self.set_ambiguity_identity(ambiguity_identity)

    @classmethod
    def from_config(
        cls, db: DbAdapter, config: Union[AdapterConfig, Dict[str, Any]]
    ) -> "DbTableAuthAdapter":
        """Build an adapter from an AdapterConfig or a config mapping."""
        if not isinstance(config, AdapterConfig):
            config = AdapterConfig.from_dict(config)
        return cls(
            db,
            table_name=config.table,
            identity_column=config.identity_column,
            credential_column=config.credential_column,
            credential_treatment=config.credential_treatment,
            ambiguity_identity=config.ambiguity_identity,
        )

    # ===== Configuration =====

    def set_table_name(self, table_name: str) -> "DbTableAuthAdapter":
        self.table_name = validate_fqn(table_name, "table_name")
        self._query = None
        return self

    def set_identity_column(self, identity_column: str) -> "DbTableAuthAdapter":
        self.identity_column = validate_identifier(identity_column, "identity_column")
        self._query = None
        return self

    def set_credential_column(self, credential_column: str) -> "DbTableAuthAdapter":
        self.credential_column = validate_identifier(credential_column, "credential_column")
        self._query = None
        return self

    def set_credential_treatment(self, treatment: Optional[str]) -> "DbTableAuthAdapter":
        """
        Compare credentials in SQL using ``treatment`` (e.g. ``MD5(?)``).

        Replaces any previously configured strategy, callback included.
        """
        self._comparator = CredentialTreatment(treatment)
        self._query = None
        return self

    def set_credential_validation_callback(
        self, callback: Callable[[str, Any], bool]
    ) -> "DbTableAuthAdapter":
        """
        Compare credentials in Python with ``callback(supplied, stored)``.

        Replaces any previously configured strategy, treatment included.

        Raises:
            InvalidArgumentError: If callback is not callable with two arguments
        """
        self._comparator = CallbackCheck(callback)
        self._query = None
        return self

    def set_ambiguity_identity(self, flag: bool) -> "DbTableAuthAdapter":
        self.ambiguity_identity = bool(flag)
        return self

    def get_ambiguity_identity(self) -> bool:
        return self.ambiguity_identity

    def get_comparator(self) -> CredentialComparator:
        return self._comparator

    def set_identity(self, identity: str) -> "DbTableAuthAdapter":
        self._identity = identity
        return self

    def get_identity(self) -> Optional[str]:
        return self._identity

    def set_credential(self, credential: str) -> "DbTableAuthAdapter":
        self._credential = credential
        return self

    def get_credential(self) -> Optional[str]:
        return self._credential

    # ===== Query provider =====

    def get_query(self) -> LookupQuery:
        """
        Return the working lookup query.

        The same instance is returned until the next authenticate() runs, so
        predicates added to it apply to that run only. Afterwards a fresh
        query is built.
        """
        if self._query is None:
            self._query = LookupQuery(self.table_name)
        return self._query

    # ===== Authentication =====

    def authenticate(self) -> AuthResult:
        """
        Look up the identity and check the credential.

        Returns:
            AuthResult describing success or the reason for failure

        Raises:
            ConfigurationError: If table, columns, identity or credential are
                missing, or the lookup query fails to execute
        """
        self._result_row = None
        self._check_setup()

        start = time.monotonic()
        self.logger.debug(
            "Authenticating identity",
            extra={
                "event": "auth_start",
                "table": self.table_name,
                "identity": self._identity,
                "comparator": self._comparator.name,
            },
        )

        try:
            query = self._build_run_query()
            rows = self._execute(query)
        finally:
            self._query = None

        result = self._validate_result_set(rows)

        self.logger.info(
            f"Authentication finished with code {result.code.name}",
            extra={
                "event": "auth_complete",
                "table": self.table_name,
                "identity": self._identity,
                "code": result.code.name,
                "candidates": len(rows),
                "duration_ms": round((time.monotonic() - start) * 1000, 3),
            },
        )
        return result

    def _check_setup(self) -> None:
        """Raise ConfigurationError if anything needed for a run is missing."""
        if not self.table_name:
            message = "A table must be supplied for the DbTable authentication adapter."
        elif not self.identity_column:
            message = "An identity column must be supplied for the DbTable authentication adapter."
        elif not self.credential_column:
            message = "A credential column must be supplied for the DbTable authentication adapter."
        elif not self._identity:
            message = "A value for the identity was not provided prior to authentication with DbTable."
        elif not self._credential:
            message = "A credential value was not provided prior to authentication with DbTable."
        else:
            return
        raise ConfigurationError(message)

    def _build_run_query(self) -> LookupQuery:
        """Copy the working query and add the comparator columns and identity predicate."""
        dialect = self.db.dialect
        query = self.get_query().copy().from_table(self.table_name)
        self._comparator.augment_query(query, self._credential, self.credential_column, dialect)
        query.where(f"{quote_identifier(self.identity_column, dialect)} = ?", self._identity)
        return query

    def _execute(self, query: LookupQuery) -> List[Dict[str, Any]]:
        try:
            sql, params = query.render(self.db.dialect)
            return list(self.db.query(sql, params))
        except Exception as e:
            self.logger.error(
                f"Lookup query failed: {e}",
                extra={"event": "auth_query_failed", "table": self.table_name, "error": str(e)},
            )
            raise ConfigurationError(
                "The supplied parameters to DbTable failed to produce a valid sql "
                "statement, please check table and column names for validity."
            ) from e

    def _validate_result_set(self, rows: List[Dict[str, Any]]) -> AuthResult:
        if not rows:
            return self._result(ResultCode.FAILURE_IDENTITY_NOT_FOUND, MSG_IDENTITY_NOT_FOUND)

        if len(rows) > 1 and not self.ambiguity_identity:
            return self._result(ResultCode.FAILURE_IDENTITY_AMBIGUOUS, MSG_IDENTITY_AMBIGUOUS)

        for row in rows:
            try:
                matched = self._comparator.evaluate(row, self._credential)
            except Exception as e:
                self.logger.warning(
                    f"Credential comparator raised: {e}",
                    extra={"event": "auth_comparator_failed", "error": str(e)},
                )
                return self._result(ResultCode.FAILURE_UNCATEGORIZED, str(e))
            if matched:
                self._result_row = self._comparator.strip(row)
                return self._result(ResultCode.SUCCESS, MSG_SUCCESS)

        return self._result(ResultCode.FAILURE_CREDENTIAL_INVALID, MSG_CREDENTIAL_INVALID)

    def _result(self, code: ResultCode, message: str) -> AuthResult:
        return AuthResult(code=code, identity=self._identity, messages=[message])

    # ===== Result row =====

    def get_result_row(
        self, return_columns: ColumnNames = None, omit_columns: ColumnNames = None
    ) -> Optional[Dict[str, Any]]:
        """
        Projection of the row matched by the last successful authenticate().

        Returns:
            dict of columns, or None if no authentication has succeeded
        """
        if self._result_row is None:
            return None
        return project_row(self._result_row, return_columns, omit_columns)
