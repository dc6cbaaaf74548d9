"""fluentql Engine - Connections, configuration and the Database facade.

The query core never talks to a driver directly. Terminal builder methods
await exactly one call on a Connection, which executes the compiled
``(sql, params)`` pair and returns rows, an affected-row count or the last
inserted id.

Architecture:
    Database
    ├── DatabaseConfig
    │   ├── from_yaml / from_dict
    │   └── from_env (FLUENTQL_*)
    ├── Connection (async capability)
    │   └── SQLiteConnection
    │       ├── sqlite3 driver + threading.Lock
    │       └── run_in_executor for every call
    └── Grammar (per backend)
        └── SQLiteGrammar

Usage:
    config = DatabaseConfig.from_yaml(Path("database.yaml"))
    with Database.from_config(config) as db:
        users = await db.table("users").where("votes", ">", 100).get()

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import (
    Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Type,
    TypeVar, Union,
)

import yaml

from fluentql.expression import Expression
from fluentql.query.builder import Builder
from fluentql.query.grammars import Grammar, SQLDialect, grammar_for

logger = logging.getLogger(__name__)

T = TypeVar("T")
RowType = Dict[str, Any]


class BackendType(Enum):
    """Supported storage backend types."""
    SQLITE = "sqlite"


_TRUE_VALUES = ("1", "true", "yes", "on")


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class DatabaseConfig:
    """Configuration for a database connection."""
    backend: BackendType = BackendType.SQLITE
    database: str = ":memory:"
    table_prefix: str = ""
    timeout: float = 5.0
    foreign_keys: bool = True
    check_same_thread: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DatabaseConfig":
        """Build configuration from a mapping, ignoring unknown keys.

        Args:
            data: Configuration values; ``backend`` may be given by value

        Returns:
            DatabaseConfig instance
        """
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}

        if "backend" in values:
            values["backend"] = BackendType(values["backend"])
        if "database" in values:
            values["database"] = str(values["database"])

        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "DatabaseConfig":
        """Load configuration from YAML file."""
        with Path(path).open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Load configuration from environment variables."""
        import os
        return cls(
            backend=BackendType(os.getenv("FLUENTQL_BACKEND", "sqlite")),
            database=os.getenv("FLUENTQL_DATABASE", ":memory:"),
            table_prefix=os.getenv("FLUENTQL_TABLE_PREFIX", ""),
            timeout=float(os.getenv("FLUENTQL_TIMEOUT", "5.0")),
            foreign_keys=os.getenv("FLUENTQL_FOREIGN_KEYS", "true").lower() in _TRUE_VALUES,
            check_same_thread=os.getenv("FLUENTQL_CHECK_SAME_THREAD", "false").lower() in _TRUE_VALUES,
        )


# =============================================================================
# Connections
# =============================================================================


class Connection(ABC):
    """Asynchronous statement executor consumed by the query builder.

    Every method receives the compiled SQL and its positional bindings.
    """

    @abstractmethod
    async def get(self, sql: str, params: Sequence[Any]) -> List[RowType]:
        """Run a select and return every row."""

    @abstractmethod
    async def first(self, sql: str, params: Sequence[Any]) -> Optional[RowType]:
        """Run a select and return its first row, if any."""

    @abstractmethod
    async def insert(self, sql: str, params: Sequence[Any]) -> bool:
        """Run an insert."""

    @abstractmethod
    async def affecting_statement(self, sql: str, params: Sequence[Any]) -> int:
        """Run a statement and return the number of affected rows."""

    @abstractmethod
    async def update(self, sql: str, params: Sequence[Any]) -> int:
        """Run an update and return the number of affected rows."""

    @abstractmethod
    async def delete(self, sql: str, params: Sequence[Any]) -> int:
        """Run a delete and return the number of affected rows."""

    @abstractmethod
    async def process_insert_get_id(
        self,
        sql: str,
        params: Sequence[Any],
        sequence: Optional[str] = None,
    ) -> int:
        """Run an insert and return the id of the inserted row."""

    @abstractmethod
    async def statement(self, sqls: Sequence[str], params: Sequence[Sequence[Any]]) -> None:
        """Run several statements in one transaction."""

    def close(self) -> None:
        """Release driver resources."""


class SQLiteConnection(Connection):
    """Connection backed by the standard library ``sqlite3`` driver.

    Blocking driver calls run in the default executor; a lock serializes
    access to the single underlying handle.
    """

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self.config = config or DatabaseConfig()
        self._lock = threading.Lock()
        self._closed = False

        self._conn = sqlite3.connect(
            self.config.database,
            timeout=self.config.timeout,
            check_same_thread=self.config.check_same_thread,
            isolation_level=None,
        )
        self._conn.row_factory = sqlite3.Row

        if self.config.foreign_keys:
            self._conn.execute("PRAGMA foreign_keys = ON")

        logger.info(f"SQLite connection opened on {self.config.database}")

    @property
    def is_active(self) -> bool:
        """Check if connection is active and usable."""
        return not self._closed

    # =========================================================================
    # Execution
    # =========================================================================

    def execute(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        handler: Optional[Callable[[sqlite3.Cursor], T]] = None,
    ) -> Any:
        """Execute one statement and pass its cursor to ``handler``.

        Args:
            sql: SQL text with ``?`` placeholders
            params: Positional bindings
            handler: Reads the result off the cursor while the lock is held

        Returns:
            The handler's result, or the cursor when no handler is given
        """
        with self._lock:
            self._ensure_open()
            logger.debug(f"Executing: {sql} bindings={list(params or [])}")

            try:
                cursor = self._conn.execute(sql, list(params or []))
                return handler(cursor) if handler else cursor
            except sqlite3.Error as e:
                logger.error(f"Query execution failed: {e} [{sql}]")
                raise

    async def execute_async(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        handler: Optional[Callable[[sqlite3.Cursor], T]] = None,
    ) -> Any:
        """Execute a statement asynchronously."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            None, lambda: self.execute(sql, params, handler)
        )

    async def get(self, sql: str, params: Sequence[Any]) -> List[RowType]:
        """Run a select and return rows as dicts."""
        return await self.execute_async(
            sql, params, lambda cursor: [dict(row) for row in cursor.fetchall()]
        )

    async def first(self, sql: str, params: Sequence[Any]) -> Optional[RowType]:
        def fetch_one(cursor: sqlite3.Cursor) -> Optional[RowType]:
            row = cursor.fetchone()
            return dict(row) if row is not None else None

        return await self.execute_async(sql, params, fetch_one)

    async def insert(self, sql: str, params: Sequence[Any]) -> bool:
        """Run an insert."""
        await self.execute_async(sql, params, lambda cursor: None)
        return True

    async def affecting_statement(self, sql: str, params: Sequence[Any]) -> int:
        """Run a statement and return the affected row count."""
        return await self.execute_async(sql, params, lambda cursor: cursor.rowcount)

    async def update(self, sql: str, params: Sequence[Any]) -> int:
        return await self.affecting_statement(sql, params)

    async def delete(self, sql: str, params: Sequence[Any]) -> int:
        return await self.affecting_statement(sql, params)

    async def process_insert_get_id(
        self,
        sql: str,
        params: Sequence[Any],
        sequence: Optional[str] = None,
    ) -> int:
        """Run an insert and return the last inserted rowid."""
        return await self.execute_async(sql, params, lambda cursor: cursor.lastrowid)

    async def statement(self, sqls: Sequence[str], params: Sequence[Sequence[Any]]) -> None:
        """Run several statements in one transaction, rolling back on failure."""
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, lambda: self._run_statements(sqls, params))

    async def unprepared(self, sql: str) -> None:
        """Run a raw SQL script without bindings."""
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, lambda: self._run_script(sql))

    def _run_statements(self, sqls: Sequence[str], params: Sequence[Sequence[Any]]) -> None:
        """Execute a statement batch between BEGIN and COMMIT (internal)."""
        with self._lock:
            self._ensure_open()
            self._conn.execute("BEGIN")

            try:
                for index, sql in enumerate(sqls):
                    bindings = list(params[index]) if index < len(params) else []
                    logger.debug(f"Executing: {sql} bindings={bindings}")
                    self._conn.execute(sql, bindings)
                self._conn.execute("COMMIT")
            except sqlite3.Error as e:
                self._conn.execute("ROLLBACK")
                logger.error(f"Statement batch failed, rolled back: {e}")
                raise

        logger.debug(f"Committed {len(sqls)} statements")

    def _run_script(self, sql: str) -> None:
        """Execute a raw script (internal)."""
        with self._lock:
            self._ensure_open()
            logger.debug(f"Executing script: {sql}")

            try:
                self._conn.executescript(sql)
            except sqlite3.Error as e:
                logger.error(f"Script execution failed: {e}")
                raise

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Connection is closed")

    def close(self) -> None:
        """Close the connection."""
        with self._lock:
            if self._closed:
                return
            self._conn.close()
            self._closed = True
        logger.debug(f"SQLite connection on {self.config.database} closed")

    def __enter__(self) -> "SQLiteConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


# =============================================================================
# Database Facade
# =============================================================================


# Backend -> (connection class, grammar dialect)
CONNECTORS: Mapping[BackendType, Tuple[Type[Connection], SQLDialect]] = MappingProxyType({
    BackendType.SQLITE: (SQLiteConnection, SQLDialect.SQLITE),
})


class Database:
    """Pairs a Connection with its Grammar and hands out query builders.

    Example:
        >>> db = Database.from_config(DatabaseConfig())
        >>> db.table("users").where("id", 1).to_sql()
        'select * from "users" where "id" = ?'
    """

    def __init__(self, connection: Connection, grammar: Grammar):
        self.connection = connection
        self.grammar = grammar

    @classmethod
    def from_config(cls, config: Optional[DatabaseConfig] = None) -> "Database":
        """Open the configured backend.

        Args:
            config: Database configuration; defaults to in-memory SQLite

        Returns:
            Database bound to a fresh connection
        """
        config = config or DatabaseConfig()
        connection_class, dialect = CONNECTORS[config.backend]

        database = cls(connection_class(config), grammar_for(dialect, config.table_prefix))
        logger.info(f"Database initialized with {config.backend.value} backend")

        return database

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Database":
        """Open the database described by a YAML file."""
        return cls.from_config(DatabaseConfig.from_yaml(path))

    def query(self) -> Builder:
        """Create an empty query builder."""
        return Builder(self.connection, self.grammar)

    def table(self, name: Union[str, Expression], as_: Optional[str] = None) -> Builder:
        """Begin a fluent query against a table."""
        return self.query().from_(name, as_)

    @staticmethod
    def raw(value: Any) -> Expression:
        """Wrap literal SQL so it is inlined instead of bound."""
        return Expression(value)

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


__all__ = [
    "BackendType",
    "DatabaseConfig",
    "Connection",
    "SQLiteConnection",
    "CONNECTORS",
    "Database",
]
