"""fluentql Grammars - Dialect compilers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Type, Union

from fluentql.query.grammars.base import Grammar
from fluentql.query.grammars.sqlite import SQLiteGrammar


class SQLDialect(Enum):
    """Supported SQL dialects."""

    SQLITE = "sqlite"
    STANDARD = "standard"


GRAMMARS: Mapping[SQLDialect, Type[Grammar]] = MappingProxyType({
    SQLDialect.SQLITE: SQLiteGrammar,
    SQLDialect.STANDARD: Grammar,
})


def grammar_for(dialect: Union[SQLDialect, str], table_prefix: str = "") -> Grammar:
    """Create the grammar for a dialect.

    Args:
        dialect: Dialect enum member or its value (e.g. ``"sqlite"``)
        table_prefix: Prefix applied to wrapped table names

    Returns:
        Grammar instance
    """
    return GRAMMARS[SQLDialect(dialect)](table_prefix)


__all__ = ["Grammar", "SQLiteGrammar", "SQLDialect", "GRAMMARS", "grammar_for"]
