"""
Credential comparison strategies.

Exactly one strategy is active on an adapter at a time:

- CredentialTreatment compares inside the SELECT. The stored column is
  tested against a SQL expression wrapping the supplied credential
  (``?`` by default, ``MD5(?)`` for hashed storage, ...) and the outcome
  comes back as a 0/1 column on every candidate row.
- CallbackCheck fetches the stored value and hands it to a Python
  predicate ``callback(supplied_credential, stored_value)``.
"""

import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Tuple

from .adapters.base import quote_identifier
from .config import validate_sql_expr
from .exceptions import InvalidArgumentError
from .logger_utils import get_logger
from .query import LookupQuery

PLACEHOLDER = "?"
MATCH_COLUMN = "dbauth_credential_match"
STORED_CREDENTIAL_COLUMN = "dbauth_stored_credential"

logger = get_logger("comparators")


class CredentialComparator(ABC):
    """Base class for credential comparison strategies."""

    name = "abstract"

    # Aliases added by augment_query(); stripped from the stored result row.
    bookkeeping_columns: Tuple[str, ...] = ()

    @abstractmethod
    def augment_query(
        self, query: LookupQuery, credential: str, credential_column: str, dialect: str
    ) -> None:
        """Add whatever columns evaluate() needs to the per-run query."""
        pass

    @abstractmethod
    def evaluate(self, row: Dict[str, Any], credential: str) -> bool:
        """Return True if the candidate row matches the supplied credential."""
        pass

    def strip(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in row.items() if key not in self.bookkeeping_columns}


class CredentialTreatment(CredentialComparator):
    """
    SQL-side comparison.

    Args:
        treatment: SQL expression with ``?`` standing for the supplied
            credential. Each ``?`` is bound to the credential. A treatment
            without a placeholder falls back to plain equality.
    """

    name = "treatment"
    bookkeeping_columns = (MATCH_COLUMN,)

    def __init__(self, treatment: str = PLACEHOLDER):
        if treatment:
            validate_sql_expr(treatment, "credential_treatment")
        if not treatment or PLACEHOLDER not in treatment:
            if treatment:
                logger.warning(
                    f"Credential treatment '{treatment}' has no '{PLACEHOLDER}' placeholder; "
                    f"falling back to plain equality",
                    extra={"event": "treatment_fallback", "comparator": self.name},
                )
            treatment = PLACEHOLDER
        self.treatment = treatment

    def augment_query(self, query, credential, credential_column, dialect):
        column = quote_identifier(credential_column, dialect)
        query.add_column(
            f"(CASE WHEN {column} = {self.treatment} THEN 1 ELSE 0 END)",
            MATCH_COLUMN,
            [credential] * self.treatment.count(PLACEHOLDER),
        )

    def evaluate(self, row, credential):
        return bool(row.get(MATCH_COLUMN) == 1)

    def __repr__(self) -> str:
        return f"CredentialTreatment({self.treatment!r})"


def _accepts_two_args(callback: Callable) -> bool:
    try:
        signature = inspect.signature(callback)
    except (TypeError, ValueError):
        # Some builtins expose no signature; trust callable().
        return True
    try:
        signature.bind(None, None)
    except TypeError:
        return False
    return True


class CallbackCheck(CredentialComparator):
    """
    In-process comparison through ``callback(supplied, stored) -> bool``.

    Only a return value of ``True`` counts as a match. Exceptions raised by
    the callback propagate to the adapter, which reports them as an
    uncategorized failure.
    """

    name = "callback"
    bookkeeping_columns = (STORED_CREDENTIAL_COLUMN,)

    def __init__(self, callback: Callable[[str, Any], bool]):
        if not callable(callback) or not _accepts_two_args(callback):
            raise InvalidArgumentError("Invalid callback provided")
        self.callback = callback

    def augment_query(self, query, credential, credential_column, dialect):
        query.add_column(quote_identifier(credential_column, dialect), STORED_CREDENTIAL_COLUMN)

    def evaluate(self, row, credential):
        return self.callback(credential, row.get(STORED_CREDENTIAL_COLUMN)) is True

    def __repr__(self) -> str:
        return f"CallbackCheck({getattr(self.callback, '__name__', self.callback)!r})"
