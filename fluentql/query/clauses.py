"""fluentql Clauses - Statement model nodes.

Every WHERE, HAVING, ORDER BY, UNION and aggregate entry recorded by the
Builder is one of the dataclasses below. The set is closed: the Grammar
compiles each variant through an explicit isinstance match.

Where variants:
    BasicWhere, JsonBooleanWhere, NullWhere, BetweenWhere, InWhere,
    InRawWhere, DateWhere, ColumnWhere, NestedWhere, SubWhere, ExistsWhere,
    RawWhere, RowValuesWhere, JsonContainsWhere, JsonLengthWhere

Having variants:
    BasicHaving, BetweenHaving, RawHaving

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Tuple, Union

from fluentql.expression import Expression

if TYPE_CHECKING:
    from fluentql.query.builder import Builder

Column = Union[str, Expression]

# Binding buckets, in the order their placeholders appear in compiled SQL.
BINDING_TYPES: Tuple[str, ...] = ("select", "join", "where", "having", "order", "union")


# =============================================================================
# Where Clauses
# =============================================================================


class DatePart(Enum):
    """Component extracted by a date-based where."""

    DATE = "date"
    TIME = "time"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


class Where:
    """Base class of every where node."""

    boolean: str


@dataclass
class BasicWhere(Where):
    column: Column
    operator: str
    value: Any
    boolean: str = "and"


@dataclass
class JsonBooleanWhere(Where):
    """Comparison of a JSON path against a literal ``true``/``false``."""

    column: str
    operator: str
    value: Expression
    boolean: str = "and"


@dataclass
class NullWhere(Where):
    column: Column
    negated: bool = False
    boolean: str = "and"


@dataclass
class BetweenWhere(Where):
    column: Column
    values: List[Any]
    negated: bool = False
    boolean: str = "and"


@dataclass
class InWhere(Where):
    column: Column
    values: List[Any]
    negated: bool = False
    boolean: str = "and"


@dataclass
class InRawWhere(Where):
    """IN list whose integer values are inlined rather than bound."""

    column: Column
    values: List[int]
    negated: bool = False
    boolean: str = "and"


@dataclass
class DateWhere(Where):
    part: DatePart
    column: Column
    operator: str
    value: Any
    boolean: str = "and"


@dataclass
class ColumnWhere(Where):
    first: Column
    operator: str
    second: Column
    boolean: str = "and"


@dataclass
class NestedWhere(Where):
    query: "Builder"
    boolean: str = "and"


@dataclass
class SubWhere(Where):
    column: Column
    operator: str
    query: "Builder"
    boolean: str = "and"


@dataclass
class ExistsWhere(Where):
    query: "Builder"
    negated: bool = False
    boolean: str = "and"


@dataclass
class RawWhere(Where):
    sql: str
    boolean: str = "and"


@dataclass
class RowValuesWhere(Where):
    columns: List[Column]
    operator: str
    values: List[Any]
    boolean: str = "and"


@dataclass
class JsonContainsWhere(Where):
    column: str
    value: Any
    negated: bool = False
    boolean: str = "and"


@dataclass
class JsonLengthWhere(Where):
    column: str
    operator: str
    value: Any
    boolean: str = "and"


# =============================================================================
# Having Clauses
# =============================================================================


class Having:
    """Base class of every having node."""

    boolean: str


@dataclass
class BasicHaving(Having):
    column: Column
    operator: str
    value: Any
    boolean: str = "and"


@dataclass
class BetweenHaving(Having):
    column: Column
    values: List[Any]
    negated: bool = False
    boolean: str = "and"


@dataclass
class RawHaving(Having):
    sql: str
    boolean: str = "and"


# =============================================================================
# Ordering, Unions, Aggregates
# =============================================================================


@dataclass
class Order:
    column: Column
    direction: str = "asc"


@dataclass
class RawOrder:
    sql: str


@dataclass
class UnionQuery:
    """A query appended with UNION (or UNION ALL when ``all`` is set)."""

    query: "Builder"
    all: bool = False


@dataclass
class Aggregate:
    function: str
    columns: List[Column]


__all__ = [
    "BINDING_TYPES",
    "Column",
    "DatePart",
    "Where",
    "BasicWhere",
    "JsonBooleanWhere",
    "NullWhere",
    "BetweenWhere",
    "InWhere",
    "InRawWhere",
    "DateWhere",
    "ColumnWhere",
    "NestedWhere",
    "SubWhere",
    "ExistsWhere",
    "RawWhere",
    "RowValuesWhere",
    "JsonContainsWhere",
    "JsonLengthWhere",
    "Having",
    "BasicHaving",
    "BetweenHaving",
    "RawHaving",
    "Order",
    "RawOrder",
    "UnionQuery",
    "Aggregate",
]
