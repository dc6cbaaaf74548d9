"""fluentql Grammar - Statement model to SQL compiler.

The Grammar turns the state accumulated by a Builder into SQL text with
positional ``?`` placeholders. It never touches a connection and never
mutates the builder it compiles; bindings are produced independently by the
builder, so every fragment here is emitted in the same relative order as the
binding buckets (select, join, where, having, order, union).

Architecture:
    ┌─────────────────────────────────────────────────────────────────────┐
    │                            Grammar                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐                 │
    │  │  Component  │  │   Where /   │  │  Identifier │                 │
    │  │  Compilers  │──│   Having    │──│   Wrapping  │                 │
    │  └─────────────┘  └─────────────┘  └─────────────┘                 │
    │         │               │               │                           │
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐                 │
    │  │   Unions /  │  │   Insert /  │  │   Binding   │                 │
    │  │  Aggregates │──│ Update / Del│──│ Preparation │                 │
    │  └─────────────┘  └─────────────┘  └─────────────┘                 │
    └─────────────────────────────────────────────────────────────────────┘

Dialects subclass Grammar and override the hook points (date extraction,
JSON selectors, insert-or-ignore, multi-table update/delete, truncate).

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence, Tuple

from fluentql.exceptions import UnsupportedOperationError
from fluentql.expression import Expression
from fluentql.query.clauses import (
    BINDING_TYPES,
    Aggregate,
    BasicHaving,
    BasicWhere,
    BetweenHaving,
    BetweenWhere,
    Column,
    ColumnWhere,
    DatePart,
    DateWhere,
    ExistsWhere,
    Having,
    InRawWhere,
    InWhere,
    JsonBooleanWhere,
    JsonContainsWhere,
    JsonLengthWhere,
    NestedWhere,
    NullWhere,
    RawHaving,
    RawOrder,
    RawWhere,
    RowValuesWhere,
    SubWhere,
    UnionQuery,
    Where,
)

if TYPE_CHECKING:
    from fluentql.query.builder import Builder
    from fluentql.query.join_clause import JoinClause


_ALIAS_PATTERN = re.compile(r"\s+as\s+", re.IGNORECASE)
_LEADING_BOOLEAN = re.compile(r"^(and |or )", re.IGNORECASE)


class Grammar:
    """Base SQL grammar.

    Identifiers are quoted with double quotes. Operations a dialect may not
    support (JSON selectors, insert-or-ignore) raise UnsupportedOperationError
    until a subclass overrides them.
    """

    # Order in which select components are emitted
    select_components: Tuple[str, ...] = (
        "aggregate",
        "columns",
        "from",
        "joins",
        "wheres",
        "groups",
        "havings",
        "orders",
        "limit",
        "offset",
        "lock",
    )

    def __init__(self, table_prefix: str = ""):
        """Initialize grammar.

        Args:
            table_prefix: Prefix prepended to every wrapped table name
        """
        self.table_prefix = table_prefix
        self.operators: List[str] = []

    # =========================================================================
    # Select
    # =========================================================================

    def compile_select(self, query: "Builder") -> str:
        """Compile a select statement.

        Args:
            query: Builder to compile

        Returns:
            SQL text with ``?`` placeholders
        """
        if query.unions and query.aggregate_info is not None:
            return self.compile_union_aggregate(query)

        sql = self.concatenate(self.compile_components(query)).strip()

        if query.unions:
            sql = f"{self.wrap_union(sql)} {self.compile_unions(query)}"

        return sql

    def compile_components(self, query: "Builder") -> List[str]:
        """Compile each present select component, in select_components order."""
        sql: List[str] = []

        for component in self.select_components:
            if component == "aggregate" and query.aggregate_info is not None:
                sql.append(self.compile_aggregate(query, query.aggregate_info))
            elif component == "columns" and query.aggregate_info is None:
                sql.append(self.compile_columns(query, query.columns or ["*"]))
            elif component == "from" and query.from_table is not None:
                sql.append(self.compile_from(query, query.from_table))
            elif component == "joins" and query.joins:
                sql.append(self.compile_joins(query, query.joins))
            elif component == "wheres" and query.wheres:
                sql.append(self.compile_wheres(query))
            elif component == "groups" and query.groups:
                sql.append(self.compile_groups(query, query.groups))
            elif component == "havings" and query.havings:
                sql.append(self.compile_havings(query, query.havings))
            elif component == "orders" and query.orders:
                sql.append(self.compile_orders(query, query.orders))
            elif component == "limit" and query.limit_count is not None:
                sql.append(self.compile_limit(query, query.limit_count))
            elif component == "offset" and query.offset_count is not None:
                sql.append(self.compile_offset(query, query.offset_count))
            elif component == "lock" and query.lock_mode is not None:
                sql.append(self.compile_lock(query, query.lock_mode))

        return sql

    def compile_aggregate(self, query: "Builder", aggregate: Aggregate) -> str:
        """Compile ``select fn(columns) as aggregate``, honoring distinct."""
        column = self.columnize(aggregate.columns)

        if isinstance(query.is_distinct, list) and query.is_distinct:
            column = "distinct " + self.columnize(query.is_distinct)
        elif query.is_distinct and column != "*":
            column = "distinct " + column

        return f"select {aggregate.function}({column}) as aggregate"

    def compile_columns(self, query: "Builder", columns: Sequence[Column]) -> str:
        """Compile the select list."""
        select = "select distinct " if query.is_distinct else "select "
        return select + self.columnize(columns)

    def compile_from(self, query: "Builder", table: Column) -> str:
        """Compile the from clause."""
        return "from " + self.wrap_table(table)

    def compile_joins(self, query: "Builder", joins: Sequence["JoinClause"]) -> str:
        """Compile every join, nesting joins that carry their own joins.

        Args:
            query: Builder that owns the joins
            joins: JoinClauses in declaration order

        Returns:
            Join clauses separated by spaces
        """
        sql = []

        for join in joins:
            table = self.wrap_table(join.table)

            if join.joins:
                nested = self.compile_joins(query, join.joins)
                table = f"({table} {nested})"

            sql.append(f"{join.type} join {table} {self.compile_wheres(join)}".strip())

        return " ".join(sql)

    # =========================================================================
    # Wheres
    # =========================================================================

    def compile_wheres(self, query: "Builder") -> str:
        """Compile the where list, prefixed with ``where`` (``on`` for joins)."""
        if not query.wheres:
            return ""

        conjunction = "on" if query.is_join_clause else "where"

        return f"{conjunction} {self.compile_where_conditions(query)}"

    def compile_where_conditions(self, query: "Builder") -> str:
        """Compile the where list without its leading keyword or boolean."""
        sql = " ".join(
            f"{where.boolean} {self.compile_where(query, where)}" for where in query.wheres
        )
        return self.remove_leading_boolean(sql)

    def compile_where(self, query: "Builder", where: Where) -> str:
        """Compile a single where node."""
        if isinstance(where, BasicWhere):
            return self.where_basic(query, where)
        if isinstance(where, JsonBooleanWhere):
            return self.where_json_boolean(query, where)
        if isinstance(where, NullWhere):
            return self.where_null(query, where)
        if isinstance(where, BetweenWhere):
            return self.where_between(query, where)
        if isinstance(where, InWhere):
            return self.where_in(query, where)
        if isinstance(where, InRawWhere):
            return self.where_in_raw(query, where)
        if isinstance(where, DateWhere):
            return self.where_date_part(query, where)
        if isinstance(where, ColumnWhere):
            return self.where_column(query, where)
        if isinstance(where, NestedWhere):
            return self.where_nested(query, where)
        if isinstance(where, SubWhere):
            return self.where_sub(query, where)
        if isinstance(where, ExistsWhere):
            return self.where_exists(query, where)
        if isinstance(where, RawWhere):
            return where.sql
        if isinstance(where, RowValuesWhere):
            return self.where_row_values(query, where)
        if isinstance(where, JsonContainsWhere):
            return self.where_json_contains(query, where)
        if isinstance(where, JsonLengthWhere):
            return self.where_json_length(query, where)

        raise TypeError(f"Unknown where clause: {where!r}")

    def where_basic(self, query: "Builder", where: BasicWhere) -> str:
        """Compile ``column operator ?``."""
        return f"{self.wrap(where.column)} {where.operator} {self.parameter(where.value)}"

    def where_in(self, query: "Builder", where: InWhere) -> str:
        """Compile an IN list; an empty list never matches (NOT IN always does)."""
        if where.values:
            keyword = "not in" if where.negated else "in"
            return f"{self.wrap(where.column)} {keyword} ({self.parameterize(where.values)})"

        return "1 = 1" if where.negated else "0 = 1"

    def where_in_raw(self, query: "Builder", where: InRawWhere) -> str:
        """Compile an IN list of inlined integers."""
        if where.values:
            keyword = "not in" if where.negated else "in"
            values = ", ".join(str(value) for value in where.values)
            return f"{self.wrap(where.column)} {keyword} ({values})"

        return "1 = 1" if where.negated else "0 = 1"

    def where_null(self, query: "Builder", where: NullWhere) -> str:
        """Compile ``is null`` / ``is not null``."""
        suffix = "is not null" if where.negated else "is null"
        return f"{self.wrap(where.column)} {suffix}"

    def where_between(self, query: "Builder", where: BetweenWhere) -> str:
        """Compile ``between ? and ?``."""
        between = "not between" if where.negated else "between"
        low = self.parameter(where.values[0])
        high = self.parameter(where.values[1])
        return f"{self.wrap(where.column)} {between} {low} and {high}"

    def where_date_part(self, query: "Builder", where: DateWhere) -> str:
        """Route a date-based where to the compiler for its date part."""
        if where.part is DatePart.DATE:
            return self.where_date(query, where)
        if where.part is DatePart.TIME:
            return self.where_time(query, where)
        if where.part is DatePart.DAY:
            return self.where_day(query, where)
        if where.part is DatePart.MONTH:
            return self.where_month(query, where)
        return self.where_year(query, where)

    def where_date(self, query: "Builder", where: DateWhere) -> str:
        """Compile a date comparison."""
        return self.date_based_where("date", query, where)

    def where_time(self, query: "Builder", where: DateWhere) -> str:
        """Compile a time comparison."""
        return self.date_based_where("time", query, where)

    def where_day(self, query: "Builder", where: DateWhere) -> str:
        """Compile a day-of-month comparison."""
        return self.date_based_where("day", query, where)

    def where_month(self, query: "Builder", where: DateWhere) -> str:
        """Compile a month comparison."""
        return self.date_based_where("month", query, where)

    def where_year(self, query: "Builder", where: DateWhere) -> str:
        """Compile a year comparison."""
        return self.date_based_where("year", query, where)

    def date_based_where(self, type: str, query: "Builder", where: DateWhere) -> str:
        """Compile ``type(column) operator ?`` for a date part."""
        value = self.parameter(where.value)
        return f"{type}({self.wrap(where.column)}) {where.operator} {value}"

    def where_column(self, query: "Builder", where: ColumnWhere) -> str:
        """Compile a comparison between two columns."""
        return f"{self.wrap(where.first)} {where.operator} {self.wrap(where.second)}"

    def where_nested(self, query: "Builder", where: NestedWhere) -> str:
        """Compile a nested group in parentheses."""
        return f"({self.compile_where_conditions(where.query)})"

    def where_sub(self, query: "Builder", where: SubWhere) -> str:
        """Compile a comparison against a subquery."""
        select = self.compile_select(where.query)
        return f"{self.wrap(where.column)} {where.operator} ({select})"

    def where_exists(self, query: "Builder", where: ExistsWhere) -> str:
        """Compile ``exists (select ...)``."""
        prefix = "not exists" if where.negated else "exists"
        return f"{prefix} ({self.compile_select(where.query)})"

    def where_row_values(self, query: "Builder", where: RowValuesWhere) -> str:
        """Compile ``(a, b) operator (?, ?)``."""
        columns = self.columnize(where.columns)
        values = self.parameterize(where.values)
        return f"({columns}) {where.operator} ({values})"

    def where_json_boolean(self, query: "Builder", where: JsonBooleanWhere) -> str:
        """Compile a JSON path compared against an inlined boolean."""
        column = self.wrap_json_boolean_selector(where.column)
        value = self.wrap_json_boolean_value(self.parameter(where.value))
        return f"{column} {where.operator} {value}"

    def where_json_contains(self, query: "Builder", where: JsonContainsWhere) -> str:
        """Compile a JSON contains check, negated when requested."""
        prefix = "not " if where.negated else ""
        return prefix + self.compile_json_contains(where.column, self.parameter(where.value))

    def compile_json_contains(self, column: str, value: str) -> str:
        """Compile the dialect's JSON contains expression.

        Raises:
            UnsupportedOperationError: Unless a dialect overrides it
        """
        raise UnsupportedOperationError(
            "This database engine does not support JSON contains operations."
        )

    def prepare_binding_for_json_contains(self, binding: Any) -> str:
        """Encode a JSON contains value as JSON text."""
        return json.dumps(binding)

    def where_json_length(self, query: "Builder", where: JsonLengthWhere) -> str:
        """Compile a JSON array length comparison."""
        return self.compile_json_length(
            where.column, where.operator, self.parameter(where.value)
        )

    def compile_json_length(self, column: str, operator: str, value: str) -> str:
        """Compile the dialect's JSON length expression.

        Raises:
            UnsupportedOperationError: Unless a dialect overrides it
        """
        raise UnsupportedOperationError(
            "This database engine does not support JSON length operations."
        )

    # =========================================================================
    # Groups, Havings, Orders, Limits
    # =========================================================================

    def compile_groups(self, query: "Builder", groups: Sequence[Column]) -> str:
        """Compile the group by clause."""
        return "group by " + self.columnize(groups)

    def compile_havings(self, query: "Builder", havings: Sequence[Having]) -> str:
        """Compile the having clause."""
        sql = " ".join(self.compile_having(having) for having in havings)
        return "having " + self.remove_leading_boolean(sql)

    def compile_having(self, having: Having) -> str:
        """Compile one having node with its leading boolean."""
        if isinstance(having, RawHaving):
            return f"{having.boolean} {having.sql}"
        if isinstance(having, BetweenHaving):
            return self.compile_having_between(having)
        return self.compile_basic_having(having)

    def compile_basic_having(self, having: BasicHaving) -> str:
        """Compile ``column operator ?`` for a having."""
        column = self.wrap(having.column)
        parameter = self.parameter(having.value)
        return f"{having.boolean} {column} {having.operator} {parameter}"

    def compile_having_between(self, having: BetweenHaving) -> str:
        """Compile ``between ? and ?`` for a having."""
        between = "not between" if having.negated else "between"
        column = self.wrap(having.column)
        low = self.parameter(having.values[0])
        high = self.parameter(having.values[1])
        return f"{having.boolean} {column} {between} {low} and {high}"

    def compile_orders(self, query: "Builder", orders: Sequence[Any]) -> str:
        """Compile the order by clause."""
        if not orders:
            return ""
        return "order by " + ", ".join(self.compile_orders_to_list(query, orders))

    def compile_orders_to_list(self, query: "Builder", orders: Sequence[Any]) -> List[str]:
        """Compile each order as ``column direction`` or raw SQL."""
        compiled = []
        for order in orders:
            if isinstance(order, RawOrder):
                compiled.append(order.sql)
            else:
                compiled.append(f"{self.wrap(order.column)} {order.direction}")
        return compiled

    def compile_random(self, seed: Any = "") -> str:
        """Return the dialect's random ordering expression."""
        return "RANDOM()"

    def compile_limit(self, query: "Builder", limit: int) -> str:
        """Compile the limit clause."""
        return f"limit {int(limit)}"

    def compile_offset(self, query: "Builder", offset: int) -> str:
        """Compile the offset clause."""
        return f"offset {int(offset)}"

    def compile_lock(self, query: "Builder", value: Any) -> str:
        """Compile a lock clause; only literal lock SQL is emitted."""
        return value if isinstance(value, str) else ""

    # =========================================================================
    # Unions & Exists
    # =========================================================================

    def compile_unions(self, query: "Builder") -> str:
        """Compile the union tail, including union orders, limit and offset.

        Args:
            query: Builder holding the unions

        Returns:
            SQL appended after the first select
        """
        sql = "".join(self.compile_union(union) for union in query.unions or [])

        if query.union_orders:
            sql += " " + self.compile_orders(query, query.union_orders)

        if query.union_limit is not None:
            sql += " " + self.compile_limit(query, query.union_limit)

        if query.union_offset is not None:
            sql += " " + self.compile_offset(query, query.union_offset)

        return sql.lstrip()

    def compile_union(self, union: UnionQuery) -> str:
        """Compile one ``union [all]`` member."""
        conjunction = " union all " if union.all else " union "
        return conjunction + self.wrap_union(self.compile_select(union.query))

    def wrap_union(self, sql: str) -> str:
        """Wrap a union member's select."""
        return f"({sql})"

    def compile_union_aggregate(self, query: "Builder") -> str:
        """Aggregate over the combined union by selecting from a derived table."""
        sql = self.compile_aggregate(query, query.aggregate_info)
        inner = query.clone_without("aggregate_info")
        return f"{sql} from ({self.compile_select(inner)}) as {self.wrap_table('temp_table')}"

    def compile_exists(self, query: "Builder") -> str:
        """Compile ``select exists(...) as "exists"``."""
        select = self.compile_select(query)
        return f"select exists({select}) as {self.wrap('exists')}"

    # =========================================================================
    # Insert, Update, Delete
    # =========================================================================

    def compile_insert(self, query: "Builder", values: Sequence[Dict[str, Any]]) -> str:
        """Compile a batch insert.

        Args:
            query: Builder whose table receives the rows
            values: Records sharing the first record's column order

        Returns:
            Insert statement with one placeholder group per record
        """
        table = self.wrap_table(query.from_table)

        if not values:
            return f"insert into {table} default values"

        columns = self.columnize(list(values[0].keys()))
        parameters = ", ".join(
            f"({self.parameterize(list(record.values()))})" for record in values
        )

        return f"insert into {table} ({columns}) values {parameters}"

    def compile_insert_or_ignore(self, query: "Builder", values: Sequence[Dict[str, Any]]) -> str:
        """Compile an insert that ignores constraint errors.

        Raises:
            UnsupportedOperationError: Unless a dialect overrides it
        """
        raise UnsupportedOperationError(
            "This database engine does not support inserting while ignoring errors."
        )

    def compile_insert_get_id(
        self,
        query: "Builder",
        values: Dict[str, Any],
        sequence: Optional[str] = None,
    ) -> str:
        """Compile an insert whose generated id is read back."""
        return self.compile_insert(query, [values])

    def compile_insert_using(self, query: "Builder", columns: Sequence[Column], sql: str) -> str:
        """Compile ``insert into table (columns) <select>``."""
        return f"insert into {self.wrap_table(query.from_table)} ({self.columnize(columns)}) {sql}"

    def compile_update(self, query: "Builder", values: Dict[str, Any]) -> str:
        """Compile an update statement.

        Args:
            query: Builder whose wheres and joins select the rows
            values: Column/value mapping being written

        Returns:
            Update statement; join forms put the joins before ``set``
        """
        table = self.wrap_table(query.from_table)
        columns = self.compile_update_columns(query, values)
        where = self.compile_wheres(query)

        if query.joins:
            sql = self.compile_update_with_joins(query, table, columns, where)
        else:
            sql = self.compile_update_without_joins(query, table, columns, where)

        return sql.strip()

    def compile_update_columns(self, query: "Builder", values: Dict[str, Any]) -> str:
        """Compile the ``set`` assignments."""
        return ", ".join(
            f"{self.wrap(key)} = {self.parameter(value)}" for key, value in values.items()
        )

    def compile_update_without_joins(self, query: "Builder", table: str, columns: str, where: str) -> str:
        """Compile ``update table set ... where ...``."""
        return f"update {table} set {columns} {where}"

    def compile_update_with_joins(self, query: "Builder", table: str, columns: str, where: str) -> str:
        """Compile ``update table <joins> set ... where ...``."""
        joins = self.compile_joins(query, query.joins or [])
        return f"update {table} {joins} set {columns} {where}"

    def prepare_bindings_for_update(
        self,
        bindings: Dict[str, List[Any]],
        values: Dict[str, Any],
    ) -> List[Any]:
        """Order update bindings as join, then SET values, then the rest.

        Args:
            bindings: Builder binding buckets
            values: Column/value mapping being written

        Returns:
            Flat list aligned with the placeholders of compile_update
        """
        remaining = [
            binding
            for key in BINDING_TYPES
            if key not in ("select", "join")
            for binding in bindings[key]
        ]
        return [*bindings["join"], *values.values(), *remaining]

    def compile_delete(self, query: "Builder") -> str:
        """Compile a delete statement, using the join form when joins are present."""
        table = self.wrap_table(query.from_table)
        where = self.compile_wheres(query)

        if query.joins:
            sql = self.compile_delete_with_joins(query, table, where)
        else:
            sql = self.compile_delete_without_joins(query, table, where)

        return sql.strip()

    def compile_delete_without_joins(self, query: "Builder", table: str, where: str) -> str:
        """Compile ``delete from table where ...``."""
        return f"delete from {table} {where}"

    def compile_delete_with_joins(self, query: "Builder", table: str, where: str) -> str:
        """Compile ``delete alias from table <joins> where ...``."""
        alias = _ALIAS_PATTERN.split(table)[-1]
        joins = self.compile_joins(query, query.joins or [])
        return f"delete {alias} from {table} {joins} {where}"

    def prepare_bindings_for_delete(self, bindings: Dict[str, List[Any]]) -> List[Any]:
        """Flatten every bucket but select for a delete."""
        return [binding for key in BINDING_TYPES if key != "select" for binding in bindings[key]]

    def compile_sequence_table_check(self) -> Optional[str]:
        """Return a select yielding a row when the sequence table exists.

        Dialects that keep autoincrement counters in an ordinary table that
        may be absent return that check; others return None.
        """
        return None

    def compile_truncate(self, query: "Builder", reset_sequence: bool = True) -> List[Tuple[str, List[Any]]]:
        """Compile truncate as a list of ``(sql, bindings)`` statements.

        Args:
            query: Builder whose table is emptied
            reset_sequence: Whether the autoincrement counter is reset too

        Returns:
            Statements to run in one transaction
        """
        return [(f"truncate table {self.wrap_table(query.from_table)}", [])]

    # =========================================================================
    # Savepoints
    # =========================================================================

    def supports_savepoints(self) -> bool:
        """Check whether the dialect supports savepoints."""
        return True

    def compile_savepoint(self, name: str) -> str:
        """Compile a savepoint."""
        return f"SAVEPOINT {name}"

    def compile_savepoint_rollback(self, name: str) -> str:
        """Compile a rollback to a savepoint."""
        return f"ROLLBACK TO SAVEPOINT {name}"

    # =========================================================================
    # Identifier Wrapping
    # =========================================================================

    def wrap(self, value: Column, prefix_alias: bool = False) -> str:
        """Quote an identifier.

        Expressions are inlined verbatim, ``x as y`` aliases are wrapped on
        both sides, ``->`` selects a JSON path, and ``.`` separates a table
        qualifier from the column.

        Args:
            value: Identifier or Expression
            prefix_alias: Apply the table prefix to an alias

        Returns:
            Wrapped identifier
        """
        if self.is_expression(value):
            return self.get_value(value)

        if " as " in value.lower():
            return self.wrap_aliased_value(value, prefix_alias)

        if self.is_json_selector(value):
            return self.wrap_json_selector(value)

        return self.wrap_segments(value.split("."))

    def wrap_segments(self, segments: Sequence[str]) -> str:
        """Wrap ``table.column`` segments; the first of several is a table."""
        wrapped = []
        for index, segment in enumerate(segments):
            if index == 0 and len(segments) > 1:
                wrapped.append(self.wrap_table(segment))
            else:
                wrapped.append(self.wrap_value(segment))
        return ".".join(wrapped)

    def wrap_aliased_value(self, value: str, prefix_alias: bool = False) -> str:
        """Wrap both sides of ``value as alias``."""
        segments = _ALIAS_PATTERN.split(value)

        if prefix_alias:
            segments[1] = self.table_prefix + segments[1]

        return f"{self.wrap(segments[0])} as {self.wrap_value(segments[1])}"

    def wrap_value(self, value: str) -> str:
        """Quote one identifier segment, doubling embedded quotes; ``*`` stays bare."""
        if value != "*":
            return '"' + value.replace('"', '""') + '"'
        return value

    def wrap_table(self, table: Column) -> str:
        """Wrap a table name, applying the table prefix."""
        if not self.is_expression(table):
            return self.wrap(self.table_prefix + table, True)
        return self.get_value(table)

    def columnize(self, columns: Iterable[Column]) -> str:
        """Wrap and comma-join a list of columns."""
        return ", ".join(self.wrap(column) for column in columns)

    def parameterize(self, values: Iterable[Any]) -> str:
        """Comma-join the parameters for a list of values."""
        return ", ".join(self.parameter(value) for value in values)

    def parameter(self, value: Any) -> str:
        """Return ``?`` for a bindable value, or an Expression's literal text."""
        return self.get_value(value) if self.is_expression(value) else "?"

    @staticmethod
    def is_expression(value: Any) -> bool:
        """Check whether a value is an Expression."""
        return isinstance(value, Expression)

    @staticmethod
    def get_value(expression: Expression) -> Any:
        """Return an Expression's literal text."""
        return expression.get_value()

    # =========================================================================
    # JSON Selectors
    # =========================================================================

    @staticmethod
    def is_json_selector(value: str) -> bool:
        """Check whether an identifier selects a JSON path."""
        return "->" in value

    def wrap_json_selector(self, value: str) -> str:
        """Compile a JSON path selector.

        Raises:
            UnsupportedOperationError: Unless a dialect overrides it
        """
        raise UnsupportedOperationError(
            "This database engine does not support JSON operations."
        )

    def wrap_json_boolean_selector(self, value: str) -> str:
        """Compile a JSON selector compared against a boolean."""
        return self.wrap_json_selector(value)

    def wrap_json_boolean_value(self, value: str) -> str:
        """Compile the boolean side of a JSON boolean comparison."""
        return value

    def wrap_json_field_and_path(self, column: str) -> Tuple[str, str]:
        """Split ``field->a->b`` into the wrapped field and a JSON path argument."""
        parts = column.split("->", 1)
        field = self.wrap(parts[0])
        path = ", " + self.wrap_json_path(parts[1], "->") if len(parts) > 1 else ""
        return field, path

    def wrap_json_path(self, value: str, delimiter: str = "->") -> str:
        """Compile a ``->`` path as a quoted ``'$."a"."b"'`` JSON path."""
        value = value.replace("'", "''")
        return "'$.\"" + value.replace(delimiter, '"."') + "\"'"

    # =========================================================================
    # Utilities
    # =========================================================================

    @staticmethod
    def concatenate(segments: Iterable[str]) -> str:
        """Join non-empty segments with single spaces."""
        return " ".join(segment for segment in segments if segment)

    @staticmethod
    def remove_leading_boolean(value: str) -> str:
        """Strip the first ``and `` / ``or `` from compiled conditions."""
        return _LEADING_BOOLEAN.sub("", value, count=1)

    def get_operators(self) -> List[str]:
        """Return the dialect's extra operators."""
        return self.operators


__all__ = ["Grammar"]
