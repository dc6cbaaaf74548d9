"""fluentql - Fluent SQL Query Builder for BlackRoad OS.

fluentql models a SQL statement in memory, builds it up through chained
method calls and compiles it to parameterized SQL text plus an ordered
bindings list:
- Select, insert, update and delete statements
- Nested where groups, joins, subqueries, unions and aggregates
- Pluggable dialect grammars (SQLite included)
- Async execution through an injected Connection

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                           fluentql                             │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │   Builder   │  │   Grammar   │  │ Connection  │             │
    │  │  (clauses)  │──│  (compile)  │──│  (execute)  │             │
    │  └─────────────┘  └─────────────┘  └─────────────┘             │
    │         │               │               │                       │
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │ JoinClause  │  │   SQLite    │  │  Database   │             │
    │  │             │──│   Grammar   │──│   Config    │             │
    │  └─────────────┘  └─────────────┘  └─────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Usage:
    from fluentql import Database, DatabaseConfig

    db = Database.from_config(DatabaseConfig(database="app.db"))

    # Compile only
    sql, bindings = db.table("users").where("votes", ">", 100).collect()

    # Execute
    users = await db.table("users").where_in("id", [1, 2, 3]).get()
    await db.table("users").where("id", 1).update({"votes": 5})

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

__version__ = "1.0.0"
__author__ = "BlackRoad OS, Inc."
__email__ = "engineering@blackroad.io"

# Core exports
from fluentql.expression import Expression
from fluentql.exceptions import (
    QueryBuilderError,
    InvalidArgumentError,
    UnsupportedOperationError,
    ConnectionNotConfiguredError,
)

# Query exports
from fluentql.query.builder import Builder, OPERATORS
from fluentql.query.join_clause import JoinClause
from fluentql.query.grammars import Grammar, SQLiteGrammar, SQLDialect, grammar_for

# Engine exports
from fluentql.engine import (
    BackendType,
    DatabaseConfig,
    Connection,
    SQLiteConnection,
    Database,
)

__all__ = [
    # Version
    "__version__",

    # Core
    "Expression",
    "QueryBuilderError",
    "InvalidArgumentError",
    "UnsupportedOperationError",
    "ConnectionNotConfiguredError",

    # Query
    "Builder",
    "OPERATORS",
    "JoinClause",
    "Grammar",
    "SQLiteGrammar",
    "SQLDialect",
    "grammar_for",

    # Engine
    "BackendType",
    "DatabaseConfig",
    "Connection",
    "SQLiteConnection",
    "Database",
]
