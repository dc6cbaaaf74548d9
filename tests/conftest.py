"""Shared pytest fixtures for the fluentql test suite."""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pytest
import pytest_asyncio

from fluentql.engine import Connection, Database, DatabaseConfig
from fluentql.query.builder import Builder
from fluentql.query.grammars import Grammar, SQLiteGrammar

SCHEMA = """
create table users (
    id integer primary key autoincrement,
    name text not null unique,
    email text,
    votes integer default 0,
    created_at text,
    options text
);
create table posts (
    id integer primary key autoincrement,
    user_id integer references users(id),
    title text,
    published integer default 0
);
"""


class RecordingConnection(Connection):
    """Connection double that records every call and returns canned results."""

    def __init__(self) -> None:
        self.rows: List[Dict[str, Any]] = []
        self.result: int = 1
        self.calls: List[Tuple[str, Any, Any]] = []

    async def get(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        self.calls.append(("get", sql, list(params)))
        return self.rows

    async def first(self, sql: str, params: Sequence[Any]) -> Optional[Dict[str, Any]]:
        self.calls.append(("first", sql, list(params)))
        return self.rows[0] if self.rows else None

    async def insert(self, sql: str, params: Sequence[Any]) -> bool:
        self.calls.append(("insert", sql, list(params)))
        return True

    async def affecting_statement(self, sql: str, params: Sequence[Any]) -> int:
        self.calls.append(("affecting_statement", sql, list(params)))
        return self.result

    async def update(self, sql: str, params: Sequence[Any]) -> int:
        self.calls.append(("update", sql, list(params)))
        return self.result

    async def delete(self, sql: str, params: Sequence[Any]) -> int:
        self.calls.append(("delete", sql, list(params)))
        return self.result

    async def process_insert_get_id(
        self,
        sql: str,
        params: Sequence[Any],
        sequence: Optional[str] = None,
    ) -> int:
        self.calls.append(("process_insert_get_id", sql, list(params)))
        return self.result

    async def statement(self, sqls: Sequence[str], params: Sequence[Sequence[Any]]) -> None:
        self.calls.append(("statement", list(sqls), [list(p) for p in params]))

    @property
    def last_call(self) -> Tuple[str, Any, Any]:
        return self.calls[-1]


@pytest.fixture
def grammar() -> Grammar:
    """Standard grammar."""
    return Grammar()


@pytest.fixture
def sqlite_grammar() -> SQLiteGrammar:
    """SQLite grammar."""
    return SQLiteGrammar()


@pytest.fixture
def builder(grammar: Grammar) -> Builder:
    """Connection-less builder over the standard grammar."""
    return Builder(grammar=grammar)


@pytest.fixture
def sqlite_builder(sqlite_grammar: SQLiteGrammar) -> Builder:
    """Connection-less builder over the SQLite grammar."""
    return Builder(grammar=sqlite_grammar)


@pytest.fixture
def recorder() -> RecordingConnection:
    """Recording connection double."""
    return RecordingConnection()


@pytest.fixture
def make_query(recorder: RecordingConnection) -> Callable[..., Builder]:
    """Factory for builders wired to the recording connection."""

    def factory(grammar: Optional[Grammar] = None) -> Builder:
        return Builder(recorder, grammar or Grammar())

    return factory


@pytest_asyncio.fixture
async def db():
    """In-memory SQLite database with the users/posts schema."""
    database = Database.from_config(DatabaseConfig())
    await database.connection.unprepared(SCHEMA)
    yield database
    database.close()
