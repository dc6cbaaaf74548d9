"""fluentql SQLite Grammar - SQLite dialect specialization.

SQLite differs from the base grammar in a handful of places:
- date parts are extracted with ``strftime`` and compared as text
- ``insert or ignore`` replaces a plain insert
- JSON paths go through ``json_extract`` / ``json_array_length``
- UPDATE and DELETE cannot carry JOIN or LIMIT, so both are rewritten to
  target ``rowid in (select rowid from <same query>)``
- TRUNCATE does not exist; it becomes a sequence reset plus a DELETE

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Dict, List, Sequence, Tuple

from fluentql.query.clauses import BINDING_TYPES, DateWhere
from fluentql.query.grammars.base import Grammar

if TYPE_CHECKING:
    from fluentql.query.builder import Builder


class SQLiteGrammar(Grammar):
    """Grammar for SQLite 3."""

    def __init__(self, table_prefix: str = ""):
        super().__init__(table_prefix)
        self.operators = [
            "=", "<", ">", "<=", ">=", "<>", "!=",
            "like", "not like", "ilike",
            "&", "|", "<<", ">>",
        ]

    def wrap_union(self, sql: str) -> str:
        """Wrap a union member as a derived select."""
        return f"select * from ({sql})"

    def compile_lock(self, query: "Builder", value: Any) -> str:
        """SQLite has no row locks; nothing is compiled."""
        return ""

    # =========================================================================
    # Date Wheres
    # =========================================================================

    def where_date(self, query: "Builder", where: DateWhere) -> str:
        """Compare ``strftime('%Y-%m-%d', column)``."""
        return self.date_based_where("%Y-%m-%d", query, where)

    def where_day(self, query: "Builder", where: DateWhere) -> str:
        """Compare ``strftime('%d', column)``."""
        return self.date_based_where("%d", query, where)

    def where_month(self, query: "Builder", where: DateWhere) -> str:
        """Compare ``strftime('%m', column)``."""
        return self.date_based_where("%m", query, where)

    def where_year(self, query: "Builder", where: DateWhere) -> str:
        """Compare ``strftime('%Y', column)``."""
        return self.date_based_where("%Y", query, where)

    def where_time(self, query: "Builder", where: DateWhere) -> str:
        """Compare ``strftime('%H:%M:%S', column)``."""
        return self.date_based_where("%H:%M:%S", query, where)

    def date_based_where(self, type: str, query: "Builder", where: DateWhere) -> str:
        """Compare ``strftime(type, column)`` against the value cast to text."""
        column = self.wrap(where.column).replace('"', "")
        value = self.parameter(where.value)
        return f"strftime('{type}', {column}) {where.operator} cast({value} as text)"

    # =========================================================================
    # JSON
    # =========================================================================

    def wrap_json_selector(self, value: str) -> str:
        """Compile ``json_extract(field, '$."a"."b"')``."""
        field, path = self.wrap_json_field_and_path(value)
        return f"json_extract({field}{path})"

    def compile_json_length(self, column: str, operator: str, value: str) -> str:
        """Compile ``json_array_length(field[, path])``."""
        field, path = self.wrap_json_field_and_path(column)
        return f"json_array_length({field}{path}) {operator} {value}"

    # =========================================================================
    # Insert
    # =========================================================================

    def compile_insert_or_ignore(self, query: "Builder", values: Sequence[Dict[str, Any]]) -> str:
        """Rewrite a plain insert to ``insert or ignore``."""
        return self.compile_insert(query, values).replace("insert", "insert or ignore", 1)

    # =========================================================================
    # Update
    # =========================================================================

    def compile_update(self, query: "Builder", values: Dict[str, Any]) -> str:
        """Compile an update, rewriting JOIN/LIMIT forms to a rowid subquery.

        Identifier quotes are stripped from the compiled statement.
        """
        if query.joins or query.limit_count is not None:
            sql = self.compile_update_with_joins_or_limit(query, values)
        else:
            sql = super().compile_update(query, values)

        return sql.replace('"', "")

    def compile_update_columns(self, query: "Builder", values: Dict[str, Any]) -> str:
        """Compile ``set`` assignments against bare column names."""
        return ", ".join(
            f"{self.wrap(key.split('.')[-1])} = {self.parameter(value)}"
            for key, value in values.items()
        )

    def compile_update_with_joins_or_limit(self, query: "Builder", values: Dict[str, Any]) -> str:
        """Compile an update targeting rowids selected by the query."""
        table = self.wrap_table(query.from_table)
        columns = self.compile_update_columns(query, values)
        select_sql = self._compile_rowid_select(query)

        return f"update {table} set {columns} where {self.wrap('rowid')} in ({select_sql})"

    def prepare_bindings_for_update(
        self,
        bindings: Dict[str, List[Any]],
        values: Dict[str, Any],
    ) -> List[Any]:
        """SET values come first; every bucket but select follows in the subquery."""
        remaining = [
            binding for key in BINDING_TYPES if key != "select" for binding in bindings[key]
        ]
        return [*values.values(), *remaining]

    # =========================================================================
    # Delete & Truncate
    # =========================================================================

    def compile_delete(self, query: "Builder") -> str:
        """Compile a delete, using a rowid subquery when joins or a limit are present."""
        if query.joins or query.limit_count is not None:
            return self.compile_delete_with_joins_or_limit(query)
        return super().compile_delete(query)

    def compile_delete_with_joins_or_limit(self, query: "Builder") -> str:
        """Compile a delete targeting rowids selected by the query."""
        table = self.wrap_table(query.from_table)
        select_sql = self._compile_rowid_select(query)

        return f"delete from {table} where {self.wrap('rowid')} in ({select_sql})"

    def compile_sequence_table_check(self) -> str:
        """SQLite creates ``sqlite_sequence`` with the first AUTOINCREMENT table."""
        return "select 1 from sqlite_master where type = 'table' and name = 'sqlite_sequence'"

    def compile_truncate(self, query: "Builder", reset_sequence: bool = True) -> List[Tuple[str, List[Any]]]:
        """Compile truncate as a DELETE, preceded by a sequence reset when requested.

        Args:
            query: Builder whose table is emptied
            reset_sequence: Clear the table's ``sqlite_sequence`` row; only valid
                once an AUTOINCREMENT table has created ``sqlite_sequence``

        Returns:
            Statements to run in one transaction
        """
        statements = [(f"delete from {self.wrap_table(query.from_table)}", [])]

        if reset_sequence:
            statements.insert(0, (
                "delete from sqlite_sequence where name = ?",
                [self.table_prefix + str(query.from_table)],
            ))

        return statements

    def _compile_rowid_select(self, query: "Builder") -> str:
        """Select the target rows' rowids from a copy of the query."""
        alias = re.split(r"\s+as\s+", str(query.from_table), flags=re.IGNORECASE)[-1]
        return self.compile_select(query.clone().select(f"{alias}.rowid"))


__all__ = ["SQLiteGrammar"]
