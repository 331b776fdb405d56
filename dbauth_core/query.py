"""
Mutable lookup query used by the authentication adapter.

A LookupQuery is a deliberately small SELECT builder: one table, a list of
projected expressions and a list of AND-ed predicates. Expressions are raw
SQL with positional ``?`` placeholders; their bound values travel with them
so ``render()`` can return parameters in placeholder order.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from .adapters.base import quote_identifier
from .exceptions import InvalidArgumentError


@dataclass
class SelectColumn:
    """A projected expression, optionally aliased."""

    expression: str
    alias: Optional[str] = None
    params: List[Any] = field(default_factory=list)


@dataclass
class Predicate:
    """A WHERE clause fragment and its bound values."""

    expression: str
    params: List[Any] = field(default_factory=list)


class LookupQuery:
    """
    SELECT builder for identity lookups.

    Example:
        query = LookupQuery("users")
        query.where("active = ?", True)
        sql, params = query.render("duckdb")
        # SELECT * FROM "users" WHERE (active = ?)   [True]
    """

    def __init__(self, table: Optional[str] = None):
        self.table = table
        self._columns: List[SelectColumn] = [SelectColumn("*")]
        self._predicates: List[Predicate] = []

    def from_table(self, table: str) -> "LookupQuery":
        self.table = table
        return self

    def add_column(
        self, expression: str, alias: Optional[str] = None, params: Sequence[Any] = ()
    ) -> "LookupQuery":
        """Append a projected expression; ``params`` bind its ``?`` placeholders."""
        self._columns.append(SelectColumn(expression, alias, list(params)))
        return self

    def where(self, expression: str, *params: Any) -> "LookupQuery":
        """AND a raw predicate onto the query."""
        if not expression or not expression.strip():
            raise InvalidArgumentError("Predicate expression cannot be empty")
        self._predicates.append(Predicate(expression, list(params)))
        return self

    @property
    def columns(self) -> Tuple[SelectColumn, ...]:
        return tuple(self._columns)

    @property
    def predicates(self) -> Tuple[Predicate, ...]:
        return tuple(self._predicates)

    def copy(self) -> "LookupQuery":
        """Independent copy; mutating it never touches this instance."""
        return copy.deepcopy(self)

    def render(self, dialect: str = "duckdb") -> Tuple[str, List[Any]]:
        """
        Render to SQL text and a flat parameter list.

        Parameters are ordered as their placeholders appear: projected
        columns first, then predicates.
        """
        if not self.table:
            raise InvalidArgumentError("A table must be set before rendering a lookup query")

        params: List[Any] = []
        select_parts = []
        for column in self._columns:
            if column.alias:
                select_parts.append(
                    f"{column.expression} AS {quote_identifier(column.alias, dialect)}"
                )
            else:
                select_parts.append(column.expression)
            params.extend(column.params)

        sql = f"SELECT {', '.join(select_parts)} FROM {quote_identifier(self.table, dialect)}"

        if self._predicates:
            sql += " WHERE " + " AND ".join(f"({p.expression})" for p in self._predicates)
            for predicate in self._predicates:
                params.extend(predicate.params)

        return sql, params

    def __str__(self) -> str:
        return self.render()[0]

    def __repr__(self) -> str:
        return f"LookupQuery(table={self.table!r}, predicates={len(self._predicates)})"
