"""fluentql JoinClause - Conditions of a single join.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from fluentql.query.builder import Builder
from fluentql.query.clauses import Column


class JoinClause(Builder):
    """A Builder scoped to one join's ``on`` / ``where`` conditions.

    Subqueries created inside a join (nested ``where`` groups aside) are
    plain builders produced by the parent query's factory, so they compile
    with ``where`` rather than ``on``.

    Args:
        parent_query: Query the join belongs to
        type: Join type (inner, left, right, cross)
        table: Joined table, or an Expression for joined subqueries
    """

    is_join_clause = True

    def __init__(self, parent_query: Builder, type: str, table: Column):
        super().__init__(parent_query.connection, parent_query.grammar)
        self.type = type
        self.table = table
        self._parent_query_factory: Callable[[], Builder] = parent_query.for_sub_query

    def on(
        self,
        first: Any,
        operator: Optional[str] = None,
        second: Optional[Column] = None,
        boolean: str = "and",
    ) -> JoinClause:
        """Add a column comparison, or a nested group when given a callback.

        ``on("a.id", "b.a_id")`` compares with ``=``.
        """
        if callable(first):
            return self.where_nested(first, boolean)

        return self.where_column(first, operator, second, boolean)

    def or_on(self, first: Any, operator: Optional[str] = None, second: Optional[Column] = None) -> JoinClause:
        """Add an ``or`` column comparison."""
        return self.on(first, operator, second, "or")

    def new_query(self) -> JoinClause:
        """Create an empty join clause of the same type and table."""
        return JoinClause(self.new_parent_query(), self.type, self.table)

    def for_sub_query(self) -> Builder:
        """Create a plain builder for subqueries inside the join."""
        return self.new_parent_query().new_query()

    def new_parent_query(self) -> Builder:
        """Create a fresh query of the parent's kind."""
        return self._parent_query_factory()


__all__ = ["JoinClause"]
