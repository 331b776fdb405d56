"""
DuckDB adapter for credential lookups.

Supports both file-based and in-memory databases, or an existing
connection handed in by the caller.
"""

from typing import Any, Dict, List, Optional

import duckdb

from .base import DbAdapter


class DuckDBAdapter(DbAdapter):
    """
    DuckDB-specific database adapter.

    Example:
        db = DuckDBAdapter("users.duckdb")
        # or for in-memory:
        db = DuckDBAdapter(":memory:")
    """

    def __init__(self, db_path_or_conn: Any = ":memory:"):
        """
        Initialize DuckDB connection.

        Args:
            db_path_or_conn: Path to DuckDB file (str) or existing connection object
        """
        if isinstance(db_path_or_conn, str):
            self.db_path = db_path_or_conn
            self.conn = duckdb.connect(db_path_or_conn)
        else:
            self.db_path = ":existing_connection:"
            self.conn = db_path_or_conn

    @property
    def dialect(self) -> str:
        return "duckdb"

    def execute(self, sql: str) -> None:
        """Execute a single SQL statement."""
        self.conn.execute(sql)

    def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute SQL and return results as list of dicts."""
        if params:
            result = self.conn.execute(sql, params).fetchdf()
        else:
            result = self.conn.execute(sql).fetchdf()
        # NULLs come back as NaN/NaT; hand callers plain None instead
        result = result.astype(object).where(result.notna(), None)
        return result.to_dict("records")

    def query_one(self, sql: str, params: Optional[List[Any]] = None) -> Any:
        """Execute SQL and return first value of first row."""
        if params:
            result = self.conn.execute(sql, params).fetchone()
        else:
            result = self.conn.execute(sql).fetchone()
        return result[0] if result else None

    def table_exists(self, table_fqn: str) -> bool:
        """Check if table exists."""
        try:
            self.conn.execute(f"SELECT 1 FROM {table_fqn} LIMIT 0")
            return True
        except duckdb.CatalogException:
            return False

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
