"""fluentql Query Builder - Fluent statement model.

A Builder is the in-memory model of one SELECT/INSERT/UPDATE/DELETE
statement. Clause methods append to its ordered clause lists and binding
buckets and return the builder for chaining; compilation is delegated to a
Grammar and execution to a Connection.

Architecture:
    ┌─────────────────────────────────────────────────────────────────────┐
    │                         Query Builder                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐                 │
    │  │   Clause    │  │   Binding   │  │   Grammar   │                 │
    │  │    API      │──│   Buckets   │──│  (compile)  │                 │
    │  └─────────────┘  └─────────────┘  └─────────────┘                 │
    │         │               │               │                           │
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐                 │
    │  │ JoinClause  │  │ Subqueries  │  │ Connection  │                 │
    │  │  (on/where) │──│ Unions/Aggs │──│  (execute)  │                 │
    │  └─────────────┘  └─────────────┘  └─────────────┘                 │
    └─────────────────────────────────────────────────────────────────────┘

Usage:
    query = (
        Builder(connection, SQLiteGrammar())
        .table("users")
        .where("votes", ">", 100)
        .or_where(lambda q: q.where("name", "Abigail").where("votes", ">", 50))
    )
    sql, bindings = query.collect()
    rows = await query.get()

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import copy
import inspect
import numbers
import re
from datetime import date, datetime, time
from typing import (
    TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, Optional,
    Sequence, Tuple, Union,
)

from fluentql.exceptions import ConnectionNotConfiguredError, InvalidArgumentError
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
    Order,
    RawHaving,
    RawOrder,
    RawWhere,
    RowValuesWhere,
    SubWhere,
    UnionQuery,
    Where,
)
from fluentql.query.grammars.base import Grammar

if TYPE_CHECKING:
    from fluentql.engine import Connection
    from fluentql.query.join_clause import JoinClause

RowType = Dict[str, Any]
Subquery = Union["Builder", Callable[["Builder"], Any], str, Expression]

# Recognized comparison operators; anything else is treated as a value for "="
OPERATORS: Tuple[str, ...] = (
    "=", "<", ">", "<=", ">=", "<>", "!=", "<=>",
    "like", "like binary", "not like", "ilike",
    "&", "|", "^", "<<", ">>",
    "rlike", "regexp", "not regexp",
    "~", "~*", "!~", "!~*",
    "similar to", "not similar to", "not ilike",
    "~~*", "!~~*",
)


class _Missing:
    """Marks an argument the caller did not pass."""

    def __repr__(self) -> str:
        return "<missing>"


MISSING: Any = _Missing()


class Builder:
    """Fluent SQL statement builder.

    Args:
        connection: Connection used by the terminal (async) operations
        grammar: Grammar used to compile the statement; defaults to Grammar()
    """

    is_join_clause = False

    def __init__(
        self,
        connection: Optional["Connection"] = None,
        grammar: Optional[Grammar] = None,
    ):
        self.connection = connection
        self.grammar = grammar if grammar is not None else Grammar()

        self.bindings: Dict[str, List[Any]] = {key: [] for key in BINDING_TYPES}
        self.aggregate_info: Optional[Aggregate] = None
        self.columns: Optional[List[Column]] = None
        self.is_distinct: Union[bool, List[Column]] = False
        self.from_table: Optional[Column] = None
        self.joins: Optional[List["JoinClause"]] = None
        self.wheres: List[Where] = []
        self.groups: Optional[List[Column]] = None
        self.havings: Optional[List[Having]] = None
        self.orders: Optional[List[Union[Order, RawOrder]]] = None
        self.limit_count: Optional[int] = None
        self.offset_count: Optional[int] = None
        self.unions: Optional[List[UnionQuery]] = None
        self.union_limit: Optional[int] = None
        self.union_offset: Optional[int] = None
        self.union_orders: Optional[List[Union[Order, RawOrder]]] = None
        self.lock_mode: Optional[Union[bool, str]] = None

    # =========================================================================
    # Select & From
    # =========================================================================

    def select(self, *columns: Any) -> Builder:
        """Set the selected columns, replacing any previous selection.

        A mapping argument selects ``{alias: column_or_subquery}`` pairs.
        """
        self.columns = []
        self.bindings["select"] = []
        return self.add_select(*(_flatten_columns(columns) or ["*"]))

    def add_select(self, *columns: Any) -> Builder:
        """Append columns to the select list.

        A mapping argument selects ``{alias: column_or_subquery}`` pairs.
        """
        if self.columns is None:
            self.columns = []

        for column in _flatten_columns(columns):
            if isinstance(column, Mapping):
                for alias, target in column.items():
                    if self.is_queryable(target):
                        self.select_sub(target, alias)
                    else:
                        self.columns.append(f"{target} as {alias}")
            else:
                self.columns.append(column)

        return self

    def select_raw(self, expression: str, bindings: Optional[Sequence[Any]] = None) -> Builder:
        """Add a raw select expression with optional select bindings."""
        self.add_select(Expression(expression))

        if bindings:
            self.add_binding(list(bindings), "select")

        return self

    def select_sub(self, query: Subquery, as_: str) -> Builder:
        """Select a subquery as an aliased column."""
        sql, bindings = self.create_sub(query)
        return self.select_raw(f"({sql}) as {self.grammar.wrap(as_)}", bindings)

    def distinct(self, *columns: Column) -> Builder:
        """Force distinct results, optionally scoped to the given columns."""
        self.is_distinct = list(columns) if columns else True
        return self

    def from_(self, table: Column, as_: Optional[str] = None) -> Builder:
        """Set the table the query targets, optionally aliased."""
        self.from_table = f"{table} as {as_}" if as_ else table
        return self

    def table(self, name: Column, as_: Optional[str] = None) -> Builder:
        """Alias of from_()."""
        return self.from_(name, as_)

    @staticmethod
    def raw(value: Any) -> Expression:
        """Wrap literal SQL so it is inlined instead of bound."""
        return Expression(value)

    # =========================================================================
    # Subqueries
    # =========================================================================

    def is_queryable(self, value: Any) -> bool:
        """Check whether a value can be compiled as a subquery."""
        return isinstance(value, Builder) or (callable(value) and not isinstance(value, type))

    def create_sub(self, query: Subquery) -> Tuple[str, List[Any]]:
        """Compile a subquery given as a Builder, callback, string or Expression.

        Returns:
            ``(sql, bindings)`` of the subquery
        """
        if callable(query) and not isinstance(query, Builder):
            callback = query
            query = self.for_sub_query()
            callback(query)

        return self.parse_sub(query)

    def parse_sub(self, query: Any) -> Tuple[str, List[Any]]:
        """Turn a Builder, Expression or SQL string into ``(sql, bindings)``.

        Raises:
            InvalidArgumentError: For any other kind of value
        """
        if isinstance(query, Builder):
            return query.to_sql(), query.get_bindings()
        if isinstance(query, Expression):
            return str(query.get_value()), []
        if isinstance(query, str):
            return query, []

        raise InvalidArgumentError("Invalid argument")

    # =========================================================================
    # Joins
    # =========================================================================

    def join(
        self,
        table: Column,
        first: Any,
        operator: Optional[str] = None,
        second: Optional[Column] = None,
        type: str = "inner",
        where: bool = False,
    ) -> Builder:
        """Add a join clause.

        Args:
            table: Table to join (may carry ``as alias``)
            first: First column, or a callback receiving the JoinClause
            operator: Comparison operator (or the second column, for "=")
            second: Second column (a bound value when ``where`` is set)
            type: Join type (inner, left, right, cross)
            where: Compare ``first`` against a bound value instead of a column

        Returns:
            Self for chaining
        """
        join = self.new_join_clause(self, type, table)

        if callable(first):
            first(join)
        elif where:
            join.where(first, operator, second)
        else:
            join.on(first, operator, second)

        if self.joins is None:
            self.joins = []
        self.joins.append(join)
        self.add_binding(join.get_bindings(), "join")

        return self

    def join_where(
        self,
        table: Column,
        first: Column,
        operator: str,
        second: Any,
        type: str = "inner",
    ) -> Builder:
        """Add a join whose second operand is a bound value."""
        return self.join(table, first, operator, second, type, True)

    def join_sub(
        self,
        query: Subquery,
        as_: str,
        first: Any,
        operator: Optional[str] = None,
        second: Optional[Column] = None,
        type: str = "inner",
        where: bool = False,
    ) -> Builder:
        """Join against a subquery aliased as ``as_``."""
        sql, bindings = self.create_sub(query)
        expression = f"({sql}) as {self.grammar.wrap_table(as_)}"
        self.add_binding(bindings, "join")

        return self.join(Expression(expression), first, operator, second, type, where)

    def left_join(self, table: Column, first: Any, operator: Optional[str] = None, second: Optional[Column] = None) -> Builder:
        """Add a left join clause."""
        return self.join(table, first, operator, second, "left")

    def left_join_where(self, table: Column, first: Column, operator: str, second: Any) -> Builder:
        """Add a left join whose second operand is a bound value."""
        return self.join_where(table, first, operator, second, "left")

    def left_join_sub(self, query: Subquery, as_: str, first: Any, operator: Optional[str] = None, second: Optional[Column] = None) -> Builder:
        """Add a left join against a subquery."""
        return self.join_sub(query, as_, first, operator, second, "left")

    def right_join(self, table: Column, first: Any, operator: Optional[str] = None, second: Optional[Column] = None) -> Builder:
        """Add a right join clause."""
        return self.join(table, first, operator, second, "right")

    def right_join_where(self, table: Column, first: Column, operator: str, second: Any) -> Builder:
        """Add a right join whose second operand is a bound value."""
        return self.join_where(table, first, operator, second, "right")

    def right_join_sub(self, query: Subquery, as_: str, first: Any, operator: Optional[str] = None, second: Optional[Column] = None) -> Builder:
        """Add a right join against a subquery."""
        return self.join_sub(query, as_, first, operator, second, "right")

    def cross_join(self, table: Column, first: Any = None, operator: Optional[str] = None, second: Optional[Column] = None) -> Builder:
        """Add a cross join, with conditions only when ``first`` is given."""
        if first:
            return self.join(table, first, operator, second, "cross")

        if self.joins is None:
            self.joins = []
        self.joins.append(self.new_join_clause(self, "cross", table))

        return self

    def new_join_clause(self, parent_query: Builder, type: str, table: Column) -> "JoinClause":
        """Create the join clause used for a single join."""
        from fluentql.query.join_clause import JoinClause

        return JoinClause(parent_query, type, table)

    # =========================================================================
    # Wheres
    # =========================================================================

    def where(
        self,
        column: Any,
        operator: Any = MISSING,
        value: Any = MISSING,
        boolean: str = "and",
    ) -> Builder:
        """Add a basic where clause.

        ``where(col, value)`` compares with ``=``; ``where(col, op, value)``
        uses ``op`` when it is a recognized operator and otherwise treats it
        as the value. A mapping or list of pairs becomes one nested group and
        a callback builds a nested group directly. ``None`` values become
        ``is null`` / ``is not null``; a callback value becomes a subquery.

        Args:
            column: Column, mapping/list of conditions, or nested callback
            operator: Operator, or the value in the two-argument form
            value: Value to compare against
            boolean: Connective joining this clause to the previous one

        Returns:
            Self for chaining
        """
        if isinstance(column, (Mapping, list, tuple)):
            return self.add_array_of_wheres(column, boolean)

        if callable(column) and not isinstance(column, Expression):
            return self.where_nested(column, boolean)

        if operator is MISSING:
            return self

        value, operator = self.prepare_value_and_operator(value, operator, value is MISSING)

        if self.invalid_operator(operator):
            value, operator = operator, "="

        if self.is_queryable(value):
            return self._where_sub(column, operator, value, boolean)

        if value is None:
            return self.where_null(column, boolean, operator != "=")

        if isinstance(column, str) and "->" in column and isinstance(value, bool):
            value = Expression("true" if value else "false")
            self.wheres.append(JsonBooleanWhere(column, operator, value, boolean))
        else:
            self.wheres.append(BasicWhere(column, operator, value, boolean))

        if not isinstance(value, Expression):
            self.add_binding(value, "where")

        return self

    def or_where(self, column: Any, operator: Any = MISSING, value: Any = MISSING) -> Builder:
        """Add an ``or`` where clause."""
        return self.where(column, operator, value, "or")

    def add_array_of_wheres(self, column: Any, boolean: str, column_wheres: bool = False) -> Builder:
        """Fold a mapping or list of conditions into one nested where group."""

        def build(query: Builder) -> None:
            method = query.where_column if column_wheres else query.where

            if isinstance(column, Mapping):
                for key, value in column.items():
                    method(key, "=", value, boolean)
            else:
                for condition in column:
                    method(*condition)

        return self.where_nested(build, boolean)

    def prepare_value_and_operator(self, value: Any, operator: Any, use_default: bool = False) -> Tuple[Any, Any]:
        """Resolve the two-argument form into ``(value, "=")``."""
        if use_default:
            return operator, "="
        return value, operator

    def invalid_operator(self, operator: Any) -> bool:
        """Check whether an operator is unknown to both the builder and the grammar."""
        return not isinstance(operator, str) or (
            operator not in OPERATORS and operator not in self.grammar.get_operators()
        )

    def where_column(
        self,
        first: Any,
        operator: Optional[str] = None,
        second: Optional[Column] = None,
        boolean: str = "and",
    ) -> Builder:
        """Compare two columns."""
        if isinstance(first, (Mapping, list, tuple)):
            return self.add_array_of_wheres(first, boolean, column_wheres=True)

        if self.invalid_operator(operator):
            second, operator = operator, "="

        self.wheres.append(ColumnWhere(first, operator, second, boolean))
        return self

    def or_where_column(self, first: Any, operator: Optional[str] = None, second: Optional[Column] = None) -> Builder:
        """Add an ``or`` column comparison."""
        return self.where_column(first, operator, second, "or")

    def where_raw(self, sql: str, bindings: Optional[Sequence[Any]] = None, boolean: str = "and") -> Builder:
        """Add a raw where fragment with its bindings."""
        self.wheres.append(RawWhere(sql, boolean))
        self.add_binding(list(bindings or []), "where")
        return self

    def or_where_raw(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> Builder:
        """Add a raw ``or`` where fragment with its bindings."""
        return self.where_raw(sql, bindings, "or")

    def where_in(self, column: Column, values: Any, boolean: str = "and", not_: bool = False) -> Builder:
        """Add an IN clause; ``values`` may be a list or a subquery."""
        if self.is_queryable(values):
            sql, bindings = self.create_sub(values)
            values = [Expression(sql)]
            self.add_binding(bindings, "where")
        else:
            values = list(values)

        self.wheres.append(InWhere(column, values, not_, boolean))
        self.add_binding(self.clean_bindings(values), "where")

        return self

    def or_where_in(self, column: Column, values: Any) -> Builder:
        """Add an ``or ... in`` clause."""
        return self.where_in(column, values, "or")

    def where_not_in(self, column: Column, values: Any, boolean: str = "and") -> Builder:
        """Add a ``not in`` clause."""
        return self.where_in(column, values, boolean, True)

    def or_where_not_in(self, column: Column, values: Any) -> Builder:
        """Add an ``or ... not in`` clause."""
        return self.where_not_in(column, values, "or")

    def where_in_raw(self, column: Column, values: Iterable[Any], boolean: str = "and", not_: bool = False) -> Builder:
        """Add an IN clause with integer values inlined into the SQL."""
        values = [int(value) for value in values]
        self.wheres.append(InRawWhere(column, values, not_, boolean))
        return self

    def where_not_in_raw(self, column: Column, values: Iterable[Any], boolean: str = "and") -> Builder:
        """Add a ``not in`` clause with integer values inlined."""
        return self.where_in_raw(column, values, boolean, True)

    def where_null(self, columns: Any, boolean: str = "and", not_: bool = False) -> Builder:
        """Add ``is null`` checks for one column or a list of columns."""
        if not isinstance(columns, (list, tuple)):
            columns = [columns]

        for column in columns:
            self.wheres.append(NullWhere(column, not_, boolean))

        return self

    def or_where_null(self, column: Any) -> Builder:
        """Add an ``or ... is null`` clause."""
        return self.where_null(column, "or")

    def where_not_null(self, columns: Any, boolean: str = "and") -> Builder:
        """Add ``is not null`` checks for one column or a list of columns."""
        return self.where_null(columns, boolean, True)

    def or_where_not_null(self, column: Any) -> Builder:
        """Add an ``or ... is not null`` clause."""
        return self.where_not_null(column, "or")

    def where_between(self, column: Column, values: Sequence[Any], boolean: str = "and", not_: bool = False) -> Builder:
        """Add a between clause.

        Args:
            column: Column to test
            values: Lower and upper bound; further values are ignored
            boolean: Connective joining this clause to the previous one
            not_: Negate to ``not between``

        Returns:
            Self for chaining
        """
        values = list(values)[:2]
        self.wheres.append(BetweenWhere(column, values, not_, boolean))
        self.add_binding(self.clean_bindings(values), "where")
        return self

    def or_where_between(self, column: Column, values: Sequence[Any]) -> Builder:
        """Add an ``or ... between`` clause."""
        return self.where_between(column, values, "or")

    def where_not_between(self, column: Column, values: Sequence[Any], boolean: str = "and") -> Builder:
        """Add a ``not between`` clause."""
        return self.where_between(column, values, boolean, True)

    def or_where_not_between(self, column: Column, values: Sequence[Any]) -> Builder:
        """Add an ``or ... not between`` clause."""
        return self.where_not_between(column, values, "or")

    # =========================================================================
    # Date Wheres
    # =========================================================================

    def where_date(self, column: Column, operator: Any, value: Any = MISSING, boolean: str = "and") -> Builder:
        """Compare the date part of a column.

        Args:
            column: Date or datetime column
            operator: Operator, or the value in the two-argument form
            value: ``date``/``datetime`` or ``YYYY-MM-DD`` text
            boolean: Connective joining this clause to the previous one

        Returns:
            Self for chaining
        """
        value, operator = self._prepare_date_operands(value, operator)

        if isinstance(value, (date, datetime)):
            value = value.strftime("%Y-%m-%d")

        return self.add_date_based_where(DatePart.DATE, column, operator, value, boolean)

    def or_where_date(self, column: Column, operator: Any, value: Any = MISSING) -> Builder:
        """Add an ``or`` date comparison."""
        return self.where_date(column, operator, value, "or")

    def where_time(self, column: Column, operator: Any, value: Any = MISSING, boolean: str = "and") -> Builder:
        """Compare the time part of a column as ``HH:MM:SS``."""
        value, operator = self._prepare_date_operands(value, operator)

        if isinstance(value, (datetime, time)):
            value = value.strftime("%H:%M:%S")

        return self.add_date_based_where(DatePart.TIME, column, operator, value, boolean)

    def or_where_time(self, column: Column, operator: Any, value: Any = MISSING) -> Builder:
        """Add an ``or`` time comparison."""
        return self.where_time(column, operator, value, "or")

    def where_day(self, column: Column, operator: Any, value: Any = MISSING, boolean: str = "and") -> Builder:
        """Compare the day of month of a column, zero-padded to two digits."""
        value, operator = self._prepare_date_operands(value, operator)

        if isinstance(value, (date, datetime)):
            value = value.strftime("%d")
        elif not isinstance(value, Expression):
            value = str(value).zfill(2)

        return self.add_date_based_where(DatePart.DAY, column, operator, value, boolean)

    def or_where_day(self, column: Column, operator: Any, value: Any = MISSING) -> Builder:
        """Add an ``or`` day comparison."""
        return self.where_day(column, operator, value, "or")

    def where_month(self, column: Column, operator: Any, value: Any = MISSING, boolean: str = "and") -> Builder:
        """Compare the month of a column, zero-padded to two digits."""
        value, operator = self._prepare_date_operands(value, operator)

        if isinstance(value, (date, datetime)):
            value = value.strftime("%m")
        elif not isinstance(value, Expression):
            value = str(value).zfill(2)

        return self.add_date_based_where(DatePart.MONTH, column, operator, value, boolean)

    def or_where_month(self, column: Column, operator: Any, value: Any = MISSING) -> Builder:
        """Add an ``or`` month comparison."""
        return self.where_month(column, operator, value, "or")

    def where_year(self, column: Column, operator: Any, value: Any = MISSING, boolean: str = "and") -> Builder:
        """Compare the year of a column."""
        value, operator = self._prepare_date_operands(value, operator)

        if isinstance(value, (date, datetime)):
            value = value.strftime("%Y")

        return self.add_date_based_where(DatePart.YEAR, column, operator, value, boolean)

    def or_where_year(self, column: Column, operator: Any, value: Any = MISSING) -> Builder:
        """Add an ``or`` year comparison."""
        return self.where_year(column, operator, value, "or")

    def add_date_based_where(self, part: DatePart, column: Column, operator: str, value: Any, boolean: str = "and") -> Builder:
        """Record a date-part where and bind its value."""
        self.wheres.append(DateWhere(part, column, operator, value, boolean))

        if not isinstance(value, Expression):
            self.add_binding(value, "where")

        return self

    def _prepare_date_operands(self, value: Any, operator: Any) -> Tuple[Any, Any]:
        """Normalize operator and value the way where() does."""
        value, operator = self.prepare_value_and_operator(value, operator, value is MISSING)

        if self.invalid_operator(operator):
            value, operator = operator, "="

        return value, operator

    # =========================================================================
    # Nested, Subquery & Exists Wheres
    # =========================================================================

    def where_nested(self, callback: Callable[[Builder], Any], boolean: str = "and") -> Builder:
        """Build a parenthesized where group with a callback.

        The callback receives a fresh builder scoped to the same table. A
        group that ends up with no conditions is dropped.
        """
        query = self.for_nested_where()
        callback(query)

        return self.add_nested_where_query(query, boolean)

    def for_nested_where(self) -> Builder:
        """Create the builder a nested where group is built on."""
        return self.new_query().from_(self.from_table)

    def add_nested_where_query(self, query: Builder, boolean: str = "and") -> Builder:
        """Fold a nested builder's wheres into one parenthesized group."""
        if query.wheres:
            self.wheres.append(NestedWhere(query, boolean))
            self.add_binding(query.get_raw_bindings()["where"], "where")

        return self

    def _where_sub(self, column: Column, operator: str, callback: Any, boolean: str) -> Builder:
        """Compare a column against a correlated subquery."""
        if isinstance(callback, Builder):
            query = callback
        else:
            query = self.for_sub_query()
            callback(query)

        self.wheres.append(SubWhere(column, operator, query, boolean))
        self.add_binding(query.get_bindings(), "where")

        return self

    def where_exists(self, callback: Any, boolean: str = "and", not_: bool = False) -> Builder:
        """Add an exists clause.

        Args:
            callback: Builder, or a callback that fills a fresh sub-builder
            boolean: Connective joining this clause to the previous one
            not_: Negate to ``not exists``

        Returns:
            Self for chaining
        """
        if isinstance(callback, Builder):
            query = callback
        else:
            query = self.for_sub_query()
            callback(query)

        return self.add_where_exists_query(query, boolean, not_)

    def or_where_exists(self, callback: Any, not_: bool = False) -> Builder:
        """Add an ``or exists`` clause."""
        return self.where_exists(callback, "or", not_)

    def where_not_exists(self, callback: Any, boolean: str = "and") -> Builder:
        """Add a ``not exists`` clause."""
        return self.where_exists(callback, boolean, True)

    def or_where_not_exists(self, callback: Any) -> Builder:
        """Add an ``or not exists`` clause."""
        return self.or_where_exists(callback, True)

    def add_where_exists_query(self, query: Builder, boolean: str = "and", not_: bool = False) -> Builder:
        """Add an exists clause for an already built query."""
        self.wheres.append(ExistsWhere(query, not_, boolean))
        self.add_binding(query.get_bindings(), "where")
        return self

    def where_row_values(self, columns: Sequence[Column], operator: str, values: Sequence[Any], boolean: str = "and") -> Builder:
        """Compare a row of columns against a row of values."""
        if len(columns) != len(values):
            raise InvalidArgumentError("The number of columns must match the number of values")

        self.wheres.append(RowValuesWhere(list(columns), operator, list(values), boolean))
        self.add_binding(self.clean_bindings(values), "where")

        return self

    def or_where_row_values(self, columns: Sequence[Column], operator: str, values: Sequence[Any]) -> Builder:
        """Add an ``or`` row value comparison."""
        return self.where_row_values(columns, operator, values, "or")

    # =========================================================================
    # JSON Wheres
    # =========================================================================

    def where_json_contains(self, column: str, value: Any, boolean: str = "and", not_: bool = False) -> Builder:
        """Match rows whose JSON column contains a value."""
        self.wheres.append(JsonContainsWhere(column, value, not_, boolean))

        if not isinstance(value, Expression):
            self.add_binding(self.grammar.prepare_binding_for_json_contains(value), "where")

        return self

    def or_where_json_contains(self, column: str, value: Any) -> Builder:
        """Add an ``or`` JSON contains clause."""
        return self.where_json_contains(column, value, "or")

    def where_json_doesnt_contain(self, column: str, value: Any, boolean: str = "and") -> Builder:
        """Match rows whose JSON column does not contain a value."""
        return self.where_json_contains(column, value, boolean, True)

    def or_where_json_doesnt_contain(self, column: str, value: Any) -> Builder:
        """Add an ``or`` JSON doesn't-contain clause."""
        return self.where_json_doesnt_contain(column, value, "or")

    def where_json_length(self, column: str, operator: Any, value: Any = MISSING, boolean: str = "and") -> Builder:
        """Compare the length of a JSON array.

        Args:
            column: JSON column, optionally with a ``->`` path
            operator: Operator, or the length in the two-argument form
            value: Length to compare against
            boolean: Connective joining this clause to the previous one

        Returns:
            Self for chaining
        """
        value, operator = self.prepare_value_and_operator(value, operator, value is MISSING)

        self.wheres.append(JsonLengthWhere(column, operator, value, boolean))

        if not isinstance(value, Expression):
            self.add_binding(int(value), "where")

        return self

    def or_where_json_length(self, column: str, operator: Any, value: Any = MISSING) -> Builder:
        """Add an ``or`` JSON length comparison."""
        return self.where_json_length(column, operator, value, "or")

    # =========================================================================
    # Groups & Havings
    # =========================================================================

    def group_by(self, *groups: Any) -> Builder:
        """Add group by columns; lists are flattened."""
        if self.groups is None:
            self.groups = []

        for group in groups:
            if isinstance(group, (list, tuple)):
                self.groups.extend(group)
            else:
                self.groups.append(group)

        return self

    def having(self, column: Column, operator: Any = MISSING, value: Any = MISSING, boolean: str = "and") -> Builder:
        """Add a having clause; the operator/value shorthand follows ``where``."""
        if operator is MISSING:
            return self

        value, operator = self.prepare_value_and_operator(value, operator, value is MISSING)

        if self.invalid_operator(operator):
            value, operator = operator, "="

        self._add_having(BasicHaving(column, operator, value, boolean))

        if not isinstance(value, Expression):
            self.add_binding(value, "having")

        return self

    def or_having(self, column: Column, operator: Any = MISSING, value: Any = MISSING) -> Builder:
        """Add an ``or`` having clause."""
        return self.having(column, operator, value, "or")

    def having_between(self, column: Column, values: Sequence[Any], boolean: str = "and", not_: bool = False) -> Builder:
        """Add a having between clause on the first two values."""
        values = list(values)[:2]
        self._add_having(BetweenHaving(column, values, not_, boolean))
        self.add_binding(self.clean_bindings(values), "having")
        return self

    def having_raw(self, sql: str, bindings: Optional[Sequence[Any]] = None, boolean: str = "and") -> Builder:
        """Add a raw having fragment with its bindings."""
        self._add_having(RawHaving(sql, boolean))
        self.add_binding(list(bindings or []), "having")
        return self

    def or_having_raw(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> Builder:
        """Add a raw ``or`` having fragment."""
        return self.having_raw(sql, bindings, "or")

    def _add_having(self, having: Having) -> None:
        if self.havings is None:
            self.havings = []
        self.havings.append(having)

    # =========================================================================
    # Orders, Limits & Offsets
    # =========================================================================

    def order_by(self, column: Any, direction: str = "asc") -> Builder:
        """Add an order by clause.

        Args:
            column: Column, or a subquery (Builder or callback)
            direction: ``asc`` or ``desc``, case-insensitive

        Returns:
            Self for chaining

        Raises:
            InvalidArgumentError: If direction is not asc/desc
        """
        direction = str(direction).lower()

        if direction not in ("asc", "desc"):
            raise InvalidArgumentError('Order direction must be "asc" or "desc".')

        if self.is_queryable(column):
            sql, bindings = self.create_sub(column)
            column = Expression(f"({sql})")
            self.add_binding(bindings, self._order_binding_type())

        self._add_order(Order(column, direction))
        return self

    def order_by_desc(self, column: Any) -> Builder:
        """Order by a column descending."""
        return self.order_by(column, "desc")

    def latest(self, column: Column = "created_at") -> Builder:
        """Order newest first by a timestamp column."""
        return self.order_by(column, "desc")

    def oldest(self, column: Column = "created_at") -> Builder:
        """Order oldest first by a timestamp column."""
        return self.order_by(column, "asc")

    def in_random_order(self, seed: Any = "") -> Builder:
        """Order rows randomly."""
        return self.order_by_raw(self.grammar.compile_random(seed))

    def order_by_raw(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> Builder:
        """Add a raw order by fragment with its bindings."""
        self._add_order(RawOrder(sql))
        self.add_binding(list(bindings or []), self._order_binding_type())
        return self

    def _add_order(self, order: Union[Order, RawOrder]) -> None:
        """Store an order on the statement, or on the union once one exists."""
        if self.unions:
            if self.union_orders is None:
                self.union_orders = []
            self.union_orders.append(order)
        else:
            if self.orders is None:
                self.orders = []
            self.orders.append(order)

    def _order_binding_type(self) -> str:
        return "union" if self.unions else "order"

    def offset(self, value: int) -> Builder:
        """Skip the given number of rows; negative values clamp to zero."""
        value = max(0, int(value))

        if self.unions:
            self.union_offset = value
        else:
            self.offset_count = value

        return self

    def skip(self, value: int) -> Builder:
        """Alias of offset()."""
        return self.offset(value)

    def limit(self, value: int) -> Builder:
        """Limit the number of rows returned."""
        # Negative limits leave any previous limit in place
        if value >= 0:
            if self.unions:
                self.union_limit = int(value)
            else:
                self.limit_count = int(value)

        return self

    def take(self, value: int) -> Builder:
        """Alias of limit()."""
        return self.limit(value)

    def for_page(self, page: int, per_page: int = 15) -> Builder:
        """Paginate with 1-based page numbers."""
        return self.skip((page - 1) * per_page).take(per_page)

    # =========================================================================
    # Unions & Locks
    # =========================================================================

    def union(self, query: Any, all: bool = False) -> Builder:
        """Append a query with UNION.

        Once a union is present, later ordering, limit and offset calls apply
        to the union as a whole.
        """
        if callable(query) and not isinstance(query, Builder):
            callback = query
            query = self.new_query()
            callback(query)

        if self.unions is None:
            self.unions = []
        self.unions.append(UnionQuery(query, all))
        self.add_binding(query.get_bindings(), "union")

        return self

    def union_all(self, query: Any) -> Builder:
        """Append a query with UNION ALL."""
        return self.union(query, True)

    def lock(self, value: Union[bool, str] = True) -> Builder:
        """Lock selected rows; ``True`` for update, ``False`` shared, or literal lock SQL."""
        self.lock_mode = value
        return self

    def lock_for_update(self) -> Builder:
        """Lock selected rows for update."""
        return self.lock(True)

    def shared_lock(self) -> Builder:
        """Take a shared lock on selected rows."""
        return self.lock(False)

    # =========================================================================
    # Bindings
    # =========================================================================

    def get_bindings(self) -> List[Any]:
        """Flatten the binding buckets in placeholder order."""
        return [binding for key in BINDING_TYPES for binding in self.bindings[key]]

    def get_raw_bindings(self) -> Dict[str, List[Any]]:
        """Return the binding buckets keyed by type."""
        return self.bindings

    def set_bindings(self, bindings: Sequence[Any], type: str = "where") -> Builder:
        """Replace one binding bucket."""
        self._check_binding_type(type)
        self.bindings[type] = list(bindings)
        return self

    def add_binding(self, value: Any, type: str = "where") -> Builder:
        """Append a value (or each value of a list) to a binding bucket.

        Raises:
            InvalidArgumentError: If the bucket name is not recognized
        """
        self._check_binding_type(type)

        if isinstance(value, (list, tuple)):
            self.bindings[type].extend(value)
        else:
            self.bindings[type].append(value)

        return self

    def merge_bindings(self, query: Builder) -> Builder:
        """Append every bucket of another builder to this one."""
        for key in BINDING_TYPES:
            self.bindings[key].extend(query.bindings[key])
        return self

    @staticmethod
    def clean_bindings(bindings: Iterable[Any]) -> List[Any]:
        """Drop Expressions, which are inlined rather than bound."""
        return [binding for binding in bindings if not isinstance(binding, Expression)]

    def _check_binding_type(self, type: str) -> None:
        if type not in self.bindings:
            raise InvalidArgumentError(f"Invalid binding type: {type}.")

    # =========================================================================
    # Cloning & Compilation
    # =========================================================================

    def new_query(self) -> Builder:
        """Create an empty builder sharing this builder's connection and grammar."""
        return Builder(self.connection, self.grammar)

    def for_sub_query(self) -> Builder:
        """Create the builder a subquery is built on."""
        return self.new_query()

    def clone(self) -> Builder:
        """Copy the statement; clause lists and binding buckets are not shared."""
        clone = copy.copy(self)
        clone.bindings = {key: list(values) for key, values in self.bindings.items()}

        for attribute in ("columns", "wheres", "joins", "groups", "havings",
                          "orders", "unions", "union_orders", "is_distinct"):
            value = getattr(self, attribute)
            if isinstance(value, list):
                setattr(clone, attribute, list(value))

        return clone

    def clone_without(self, *properties: str) -> Builder:
        """Clone the builder with the named attributes reset."""
        clone = self.clone()

        for name in properties:
            if not hasattr(clone, name):
                raise InvalidArgumentError(f"Unknown builder property: {name}.")
            setattr(clone, name, [] if name == "wheres" else None)

        return clone

    def clone_without_bindings(self, *types: str) -> Builder:
        """Clone the builder with the named binding buckets emptied."""
        clone = self.clone()

        for type in types:
            clone._check_binding_type(type)
            clone.bindings[type] = []

        return clone

    def to_sql(self) -> str:
        """Compile the select statement."""
        return self.grammar.compile_select(self)

    def collect(self) -> Tuple[str, List[Any]]:
        """Return the compiled SQL and its bindings, as handed to a Connection."""
        return self.to_sql(), self.get_bindings()

    def _connection_for(self, operation: str) -> "Connection":
        if self.connection is None:
            raise ConnectionNotConfiguredError(operation)
        return self.connection

    def _once_with_columns(self, columns: Sequence[Any]) -> Builder:
        """Copy the query with columns set, unless a select was already made."""
        if self.columns is not None:
            return self

        query = self.clone()
        query.columns = _flatten_columns(columns) or ["*"]
        return query

    # =========================================================================
    # Retrieval
    # =========================================================================

    async def get(self, *columns: Any) -> List[RowType]:
        """Execute the select and return all rows.

        Args:
            *columns: Columns to select when none were set with select()
        """
        query = self._once_with_columns(columns)
        return await self._connection_for("get").get(query.to_sql(), query.get_bindings())

    async def first(self, *columns: Any) -> Optional[RowType]:
        """Execute the query limited to one row and return it, or None."""
        query = self.take(1)._once_with_columns(columns)
        return await self._connection_for("first").first(query.to_sql(), query.get_bindings())

    async def find(self, id: Any, *columns: Any) -> Optional[RowType]:
        """Find a row by its ``id`` column."""
        return await self.where("id", "=", id).first(*columns)

    async def value(self, column: Column) -> Any:
        """Return a single column's value from the first row."""
        result = await self.first(column)
        if result is None:
            return None
        return result[self._strip_table_for_pluck(column)]

    async def pluck(self, column: Column, key: Optional[Column] = None) -> Union[List[Any], Dict[Any, Any]]:
        """Return one column's values, optionally keyed by another column.

        Returns:
            List of values, or a dict of ``key -> value`` when key is given
        """
        query = self._once_with_columns([column] if key is None else [column, key])
        rows = await self._connection_for("pluck").get(query.to_sql(), query.get_bindings())

        column = self._strip_table_for_pluck(column)

        if key is None:
            return [row[column] for row in rows]

        key = self._strip_table_for_pluck(key)
        return {row[key]: row[column] for row in rows}

    @staticmethod
    def _strip_table_for_pluck(column: Column) -> str:
        return re.split(r"\.| ", str(column))[-1]

    async def exists(self) -> bool:
        """Check whether the query matches any row."""
        sql = self.grammar.compile_exists(self)
        results = await self._connection_for("exists").get(sql, self.get_bindings())

        if results:
            return bool(results[0]["exists"])

        return False

    async def doesnt_exist(self) -> bool:
        """Check whether the query matches no row."""
        return not await self.exists()

    async def exists_or(self, callback: Callable[[], Any]) -> Any:
        """Return True if any row matches, otherwise the callback's result."""
        if await self.exists():
            return True
        return await _resolve(callback())

    async def doesnt_exist_or(self, callback: Callable[[], Any]) -> Any:
        """Return True if no row matches, otherwise the callback's result."""
        if await self.doesnt_exist():
            return True
        return await _resolve(callback())

    # =========================================================================
    # Aggregates
    # =========================================================================

    async def count(self, *columns: Column) -> int:
        """Count matching rows."""
        result = await self.aggregate("count", columns or ("*",))
        return int(result) if result is not None else 0

    async def min(self, column: Column) -> Any:
        """Return the minimum value of a column."""
        return await self.aggregate("min", [column])

    async def max(self, column: Column) -> Any:
        """Return the maximum value of a column."""
        return await self.aggregate("max", [column])

    async def sum(self, column: Column) -> Any:
        """Sum a column; an empty result sums to 0."""
        result = await self.aggregate("sum", [column])
        return result if result is not None else 0

    async def avg(self, column: Column) -> Any:
        """Average a column."""
        return await self.aggregate("avg", [column])

    async def aggregate(self, function: str, columns: Sequence[Column] = ("*",)) -> Any:
        """Run an aggregate function over a copy of the query.

        Selected columns and select bindings are dropped unless the query has
        unions, in which case the aggregate wraps the union.
        """
        query = (
            self.clone_without(*([] if self.unions else ["columns"]))
            .clone_without_bindings(*([] if self.unions else ["select"]))
            .set_aggregate(function, columns)
        )
        results = await query.get(*columns)

        if results:
            return results[0]["aggregate"]

        return None

    def set_aggregate(self, function: str, columns: Sequence[Column]) -> Builder:
        """Mark the query as an aggregate; orders are dropped unless grouped."""
        self.aggregate_info = Aggregate(function, list(columns))

        if not self.groups:
            self.orders = None
            self.bindings["order"] = []

        return self

    # =========================================================================
    # Insert, Update & Delete
    # =========================================================================

    async def insert(self, values: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]) -> bool:
        """Insert one record or a batch of records.

        Records of a batch are key-sorted so that every record compiles its
        values in the same column order.
        """
        if not values:
            return True

        records = self._prepare_insert_records(values)
        sql = self.grammar.compile_insert(self, records)

        return await self._connection_for("insert").insert(sql, self.clean_bindings(_flatten_records(records)))

    async def insert_or_ignore(self, values: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]) -> int:
        """Insert records, skipping rows that violate constraints.

        Returns:
            Number of inserted rows
        """
        if not values:
            return 0

        records = self._prepare_insert_records(values)
        sql = self.grammar.compile_insert_or_ignore(self, records)

        return await self._connection_for("insert_or_ignore").affecting_statement(
            sql, self.clean_bindings(_flatten_records(records))
        )

    async def insert_get_id(self, values: Mapping[str, Any], sequence: Optional[str] = None) -> int:
        """Insert one record and return its generated id.

        Args:
            values: Column/value mapping
            sequence: Name of the id sequence, for drivers that need it

        Returns:
            The id of the inserted row
        """
        values = dict(values)
        sql = self.grammar.compile_insert_get_id(self, values, sequence)
        bindings = self.clean_bindings(values.values())

        return await self._connection_for("insert_get_id").process_insert_get_id(sql, bindings, sequence)

    async def insert_using(self, columns: Sequence[Column], query: Subquery) -> int:
        """Insert rows selected by a subquery."""
        sql, bindings = self.create_sub(query)

        return await self._connection_for("insert_using").affecting_statement(
            self.grammar.compile_insert_using(self, columns, sql),
            self.clean_bindings(bindings),
        )

    def _prepare_insert_records(self, values: Any) -> List[Dict[str, Any]]:
        """Normalize one record or a batch into a list of key-sorted dicts."""
        if isinstance(values, Mapping):
            return [dict(values)]

        records = [dict(sorted(record.items())) for record in values]
        columns = list(records[0].keys())

        for record in records[1:]:
            if list(record.keys()) != columns:
                raise InvalidArgumentError("Every inserted record must have the same columns")

        return records

    async def update(self, values: Mapping[str, Any]) -> int:
        """Update matching rows.

        Returns:
            Number of affected rows
        """
        values = dict(values)
        sql = self.grammar.compile_update(self, values)
        bindings = self.grammar.prepare_bindings_for_update(self.bindings, values)

        return await self._connection_for("update").update(sql, self.clean_bindings(bindings))

    async def increment(self, column: str, amount: Any = 1, extra: Optional[Mapping[str, Any]] = None) -> int:
        """Add ``amount`` to a column, updating extra columns alongside.

        Raises:
            InvalidArgumentError: If amount is not numeric
        """
        if not _is_numeric(amount):
            raise InvalidArgumentError("Non-numeric value passed to increment method.")

        wrapped = self.grammar.wrap(column)
        columns = {column: self.raw(f"{wrapped} + {amount}"), **(extra or {})}

        return await self.update(columns)

    async def decrement(self, column: str, amount: Any = 1, extra: Optional[Mapping[str, Any]] = None) -> int:
        """Subtract ``amount`` from a column, updating extra columns alongside.

        Raises:
            InvalidArgumentError: If amount is not numeric
        """
        if not _is_numeric(amount):
            raise InvalidArgumentError("Non-numeric value passed to decrement method.")

        wrapped = self.grammar.wrap(column)
        columns = {column: self.raw(f"{wrapped} - {amount}"), **(extra or {})}

        return await self.update(columns)

    async def delete(self, id: Any = None) -> int:
        """Delete matching rows, or the row whose ``id`` matches.

        Returns:
            Number of affected rows
        """
        if id is not None:
            self.where(f"{self.from_table}.id", "=", id)

        sql = self.grammar.compile_delete(self)
        bindings = self.grammar.prepare_bindings_for_delete(self.bindings)

        return await self._connection_for("delete").delete(sql, self.clean_bindings(bindings))

    async def truncate(self) -> None:
        """Empty the table and reset its autoincrement counter when one exists."""
        connection = self._connection_for("truncate")

        reset_sequence = True
        check = self.grammar.compile_sequence_table_check()
        if check is not None:
            reset_sequence = bool(await connection.get(check, []))

        statements = self.grammar.compile_truncate(self, reset_sequence)

        await connection.statement(
            [sql for sql, _ in statements],
            [bindings for _, bindings in statements],
        )


# =============================================================================
# Helpers
# =============================================================================


def _flatten_columns(columns: Sequence[Any]) -> List[Any]:
    flattened: List[Any] = []
    for column in columns:
        if isinstance(column, (list, tuple)):
            flattened.extend(column)
        else:
            flattened.append(column)
    return flattened


def _flatten_records(records: Sequence[Mapping[str, Any]]) -> List[Any]:
    return [value for record in records for value in record.values()]


def _is_numeric(value: Any) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


__all__ = ["Builder", "OPERATORS", "MISSING"]
