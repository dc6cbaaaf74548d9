"""Tests for the SQLite grammar."""

from datetime import date

import pytest

from fluentql.exceptions import UnsupportedOperationError
from fluentql.query.builder import Builder
from fluentql.query.grammars import SQLiteGrammar


class TestSQLiteSelect:
    """Tests for SQLite select compilation."""

    def test_operators(self, sqlite_grammar: SQLiteGrammar) -> None:
        assert "like" in sqlite_grammar.get_operators()
        assert "rlike" not in sqlite_grammar.get_operators()

    def test_union_wraps_as_derived_select(self, sqlite_builder: Builder) -> None:
        sqlite_builder.from_("users").where("id", 1).union(
            Builder(grammar=SQLiteGrammar()).from_("users").where("id", 2)
        )
        assert sqlite_builder.to_sql() == (
            'select * from (select * from "users" where "id" = ?) '
            'union select * from (select * from "users" where "id" = ?)'
        )

    def test_lock_is_not_compiled(self, sqlite_builder: Builder) -> None:
        sqlite_builder.from_("users").lock("for update")
        assert sqlite_builder.to_sql() == 'select * from "users"'


class TestSQLiteDateWheres:
    """Tests for strftime based date wheres."""

    def test_where_date(self, sqlite_builder: Builder) -> None:
        sqlite_builder.from_("users").where_date("created_at", date(2024, 1, 15))
        assert sqlite_builder.to_sql() == (
            "select * from \"users\" where strftime('%Y-%m-%d', created_at) = cast(? as text)"
        )
        assert sqlite_builder.get_bindings() == ["2024-01-15"]

    @pytest.mark.parametrize(
        "method, fmt",
        [
            ("where_day", "%d"),
            ("where_month", "%m"),
            ("where_year", "%Y"),
            ("where_time", "%H:%M:%S"),
        ],
    )
    def test_date_part_formats(self, sqlite_builder: Builder, method: str, fmt: str) -> None:
        getattr(sqlite_builder.from_("users"), method)("users.created_at", ">", "1")
        assert sqlite_builder.to_sql() == (
            f"select * from \"users\" where strftime('{fmt}', users.created_at) > cast(? as text)"
        )


class TestSQLiteJson:
    """Tests for JSON selectors."""

    def test_json_selector(self, sqlite_builder: Builder) -> None:
        sqlite_builder.from_("users").where("options->language", "en")
        assert sqlite_builder.to_sql() == (
            "select * from \"users\" where json_extract(\"options\", '$.\"language\"') = ?"
        )
        assert sqlite_builder.get_bindings() == ["en"]

    def test_json_boolean_is_inlined(self, sqlite_builder: Builder) -> None:
        sqlite_builder.from_("users").where("options->active", True)
        assert sqlite_builder.to_sql() == (
            "select * from \"users\" where json_extract(\"options\", '$.\"active\"') = true"
        )
        assert sqlite_builder.get_bindings() == []

    def test_json_length(self, sqlite_builder: Builder) -> None:
        sqlite_builder.from_("users").where_json_length("tags", 2).or_where_json_length(
            "options->tags", ">", 1
        )
        assert sqlite_builder.to_sql() == (
            "select * from \"users\" where json_array_length(\"tags\") = ? "
            "or json_array_length(\"options\", '$.\"tags\"') > ?"
        )
        assert sqlite_builder.get_bindings() == [2, 1]

    def test_json_contains_unsupported(self, sqlite_builder: Builder) -> None:
        sqlite_builder.from_("users").where_json_doesnt_contain("options->tags", "a")
        with pytest.raises(UnsupportedOperationError):
            sqlite_builder.to_sql()


class TestSQLiteWrites:
    """Tests for SQLite insert, update, delete and truncate."""

    def test_insert_or_ignore(self, sqlite_grammar: SQLiteGrammar, sqlite_builder: Builder) -> None:
        sqlite_builder.from_("users")
        assert sqlite_grammar.compile_insert_or_ignore(sqlite_builder, [{"name": "a"}]) == (
            'insert or ignore into "users" ("name") values (?)'
        )

    def test_update_strips_quotes(self, sqlite_grammar: SQLiteGrammar, sqlite_builder: Builder) -> None:
        sqlite_builder.from_("users").where("id", 1)
        assert sqlite_grammar.compile_update(sqlite_builder, {"users.votes": 5}) == (
            "update users set votes = ? where id = ?"
        )

    def test_update_with_limit_uses_rowid_subquery(
        self, sqlite_grammar: SQLiteGrammar, sqlite_builder: Builder
    ) -> None:
        sqlite_builder.from_("users").where("active", 1).take(2)
        values = {"votes": 0}
        assert sqlite_grammar.compile_update(sqlite_builder, values) == (
            "update users set votes = ? where rowid in "
            "(select users.rowid from users where active = ? limit 2)"
        )
        assert sqlite_grammar.prepare_bindings_for_update(
            sqlite_builder.get_raw_bindings(), values
        ) == [0, 1]

    def test_update_with_join_uses_rowid_subquery(
        self, sqlite_grammar: SQLiteGrammar, sqlite_builder: Builder
    ) -> None:
        sqlite_builder.from_("users").join(
            "contacts", "users.id", "=", "contacts.user_id"
        ).where("contacts.active", 1)
        assert sqlite_grammar.compile_update(sqlite_builder, {"users.votes": 2}) == (
            "update users set votes = ? where rowid in (select users.rowid from users "
            "inner join contacts on users.id = contacts.user_id where contacts.active = ?)"
        )

    def test_update_bindings_put_values_first(self, sqlite_grammar: SQLiteGrammar) -> None:
        bindings = {
            "select": [0], "join": [1], "where": [2],
            "having": [3], "order": [4], "union": [5],
        }
        assert sqlite_grammar.prepare_bindings_for_update(bindings, {"a": 9}) == [9, 1, 2, 3, 4, 5]

    def test_delete_with_limit_uses_rowid_subquery(
        self, sqlite_grammar: SQLiteGrammar, sqlite_builder: Builder
    ) -> None:
        sqlite_builder.from_("users").where("votes", "<", 100).take(1)
        assert sqlite_grammar.compile_delete(sqlite_builder) == (
            'delete from "users" where "rowid" in '
            '(select "users"."rowid" from "users" where "votes" < ? limit 1)'
        )

    def test_delete_with_alias_and_join(
        self, sqlite_grammar: SQLiteGrammar, sqlite_builder: Builder
    ) -> None:
        sqlite_builder.from_("users", "u").join("posts", "posts.user_id", "=", "u.id")
        assert sqlite_grammar.compile_delete(sqlite_builder) == (
            'delete from "users" as "u" where "rowid" in (select "u"."rowid" from "users" as "u" '
            'inner join "posts" on "posts"."user_id" = "u"."id")'
        )

    def test_plain_delete(self, sqlite_grammar: SQLiteGrammar, sqlite_builder: Builder) -> None:
        sqlite_builder.from_("users").where("id", 3)
        assert sqlite_grammar.compile_delete(sqlite_builder) == 'delete from "users" where "id" = ?'

    def test_truncate_resets_sequence(self) -> None:
        grammar = SQLiteGrammar("app_")
        query = Builder(grammar=grammar).from_("users")
        assert grammar.compile_truncate(query) == [
            ("delete from sqlite_sequence where name = ?", ["app_users"]),
            ('delete from "app_users"', []),
        ]

    def test_truncate_without_sequence_reset(self, sqlite_grammar: SQLiteGrammar, sqlite_builder: Builder) -> None:
        sqlite_builder.from_("users")
        assert sqlite_grammar.compile_truncate(sqlite_builder, reset_sequence=False) == [
            ('delete from "users"', []),
        ]
        assert "sqlite_sequence" in sqlite_grammar.compile_sequence_table_check()
