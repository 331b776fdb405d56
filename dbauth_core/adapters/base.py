"""
Abstract base class for database adapters.

The authentication adapter never talks to a driver directly; it renders a
parameterized SELECT and hands it to one of these adapters for execution.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class DbAdapter(ABC):
    """
    Abstract interface for SQL execution backends.

    Implementations bind positional ``?`` parameters and return rows as
    dicts keyed by column name, preserving the column order of the SELECT.
    """

    @property
    @abstractmethod
    def dialect(self) -> str:
        """
        Return platform name: 'duckdb', 'bigquery', 'snowflake', 'databricks'

        Used to pick identifier quoting when rendering lookup queries.
        """
        pass

    @abstractmethod
    def execute(self, sql: str) -> None:
        """
        Execute a SQL statement that doesn't return results.

        Args:
            sql: SQL statement to execute (DDL, INSERT, UPDATE, etc.)
        """
        pass

    @abstractmethod
    def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """
        Execute a SQL query and return results as list of dicts.

        Args:
            sql: SELECT statement
            params: Optional list of parameters for binding

        Returns:
            List of row dicts with column names as keys
        """
        pass

    @abstractmethod
    def query_one(self, sql: str, params: Optional[List[Any]] = None) -> Any:
        """
        Execute a SQL query and return the first value of first row.

        Returns:
            First column of first row, or None if no results
        """
        pass

    @abstractmethod
    def table_exists(self, table_fqn: str) -> bool:
        """Check if a table exists."""
        pass

    def close(self) -> None:
        """
        Close database connection. Override if cleanup needed.
        """
        pass


# Dialect-specific SQL variations
DIALECT_CONFIG = {
    "duckdb": {
        "identifier_quote": '"',
    },
    "snowflake": {
        "identifier_quote": '"',
    },
    "bigquery": {
        "identifier_quote": "`",
    },
    "databricks": {
        "identifier_quote": "`",
    },
}


def get_dialect_config(dialect: str) -> Dict[str, Any]:
    """Get dialect-specific SQL configuration."""
    if dialect not in DIALECT_CONFIG:
        raise ValueError(f"Unknown dialect: {dialect}. Supported: {list(DIALECT_CONFIG.keys())}")
    return DIALECT_CONFIG[dialect]


def quote_identifier(name: str, dialect: str = "duckdb") -> str:
    """
    Quote a (possibly dotted) identifier for the given dialect.

    ``schema.users`` becomes ``"schema"."users"`` on DuckDB. Embedded quote
    characters are doubled.
    """
    quote = get_dialect_config(dialect)["identifier_quote"]
    parts = []
    for part in name.split("."):
        part = part.strip().strip('"`')
        parts.append(f"{quote}{part.replace(quote, quote * 2)}{quote}")
    return ".".join(parts)
