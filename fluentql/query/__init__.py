"""fluentql Query - Statement model and compilers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from fluentql.query.builder import MISSING, OPERATORS, Builder
from fluentql.query.clauses import BINDING_TYPES
from fluentql.query.grammars import GRAMMARS, Grammar, SQLDialect, SQLiteGrammar, grammar_for
from fluentql.query.join_clause import JoinClause

__all__ = [
    "Builder",
    "JoinClause",
    "Grammar",
    "SQLiteGrammar",
    "SQLDialect",
    "GRAMMARS",
    "grammar_for",
    "BINDING_TYPES",
    "OPERATORS",
    "MISSING",
]
