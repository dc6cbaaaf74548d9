"""Tests for DatabaseConfig and the Database facade."""

from pathlib import Path

import pytest

from fluentql.engine import (
    CONNECTORS,
    BackendType,
    Database,
    DatabaseConfig,
    SQLiteConnection,
)
from fluentql.query.grammars import SQLiteGrammar


class TestDatabaseConfig:
    """Tests for configuration loading."""

    def test_defaults(self) -> None:
        config = DatabaseConfig()
        assert config.backend is BackendType.SQLITE
        assert config.database == ":memory:"
        assert config.table_prefix == ""
        assert config.foreign_keys is True
        assert config.check_same_thread is False

    def test_from_dict_ignores_unknown_keys(self) -> None:
        config = DatabaseConfig.from_dict({
            "backend": "sqlite",
            "database": Path("data/app.db"),
            "pool_size": 10,
        })
        assert config.backend is BackendType.SQLITE
        assert config.database == str(Path("data/app.db"))

    def test_from_dict_rejects_unknown_backend(self) -> None:
        with pytest.raises(ValueError):
            DatabaseConfig.from_dict({"backend": "postgresql"})

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "database.yaml"
        path.write_text(
            "backend: sqlite\n"
            "database: app.db\n"
            "table_prefix: app_\n"
            "timeout: 2.5\n"
            "foreign_keys: false\n",
            encoding="utf-8",
        )
        config = DatabaseConfig.from_yaml(path)
        assert config.database == "app.db"
        assert config.table_prefix == "app_"
        assert config.timeout == 2.5
        assert config.foreign_keys is False

    def test_from_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert DatabaseConfig.from_yaml(str(path)) == DatabaseConfig()

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FLUENTQL_DATABASE", "/tmp/fluentql.db")
        monkeypatch.setenv("FLUENTQL_TABLE_PREFIX", "t_")
        monkeypatch.setenv("FLUENTQL_TIMEOUT", "1.5")
        monkeypatch.setenv("FLUENTQL_FOREIGN_KEYS", "no")
        monkeypatch.setenv("FLUENTQL_CHECK_SAME_THREAD", "TRUE")
        config = DatabaseConfig.from_env()
        assert config.database == "/tmp/fluentql.db"
        assert config.table_prefix == "t_"
        assert config.timeout == 1.5
        assert config.foreign_keys is False
        assert config.check_same_thread is True

    def test_from_env_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("FLUENTQL_BACKEND", "FLUENTQL_DATABASE", "FLUENTQL_FOREIGN_KEYS"):
            monkeypatch.delenv(name, raising=False)
        config = DatabaseConfig.from_env()
        assert config.database == ":memory:"
        assert config.foreign_keys is True


class TestDatabase:
    """Tests for the Database facade."""

    def test_connectors_registry(self) -> None:
        assert CONNECTORS[BackendType.SQLITE][0] is SQLiteConnection

    def test_from_yaml_applies_prefix(self, tmp_path: Path) -> None:
        path = tmp_path / "database.yaml"
        path.write_text(
            f"database: {tmp_path / 'app.db'}\ntable_prefix: app_\n", encoding="utf-8"
        )
        with Database.from_yaml(path) as database:
            assert isinstance(database.grammar, SQLiteGrammar)
            assert database.table("users").to_sql() == 'select * from "app_users"'
        assert not database.connection.is_active

    def test_query_and_table(self) -> None:
        with Database.from_config() as database:
            assert database.query().connection is database.connection
            query = database.table("users", "u").where("u.id", 1)
            assert query.collect() == ('select * from "users" as "u" where "u"."id" = ?', [1])

    async def test_foreign_keys_pragma(self) -> None:
        with SQLiteConnection(DatabaseConfig(foreign_keys=False)) as connection:
            assert await connection.get("PRAGMA foreign_keys", []) == [{"foreign_keys": 0}]
        with SQLiteConnection() as connection:
            assert await connection.get("PRAGMA foreign_keys", []) == [{"foreign_keys": 1}]
