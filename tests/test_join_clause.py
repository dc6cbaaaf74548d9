"""Tests for JoinClause."""

from fluentql.query.builder import Builder
from fluentql.query.join_clause import JoinClause


class TestJoinClause:
    """Tests for join condition construction."""

    def test_join_clause_attributes(self, builder: Builder) -> None:
        join = JoinClause(builder, "left", "contacts")
        assert join.type == "left"
        assert join.table == "contacts"
        assert join.is_join_clause
        assert join.grammar is builder.grammar

    def test_on_compiles_with_on_keyword(self, builder: Builder) -> None:
        join = JoinClause(builder, "inner", "contacts").on("users.id", "=", "contacts.user_id")
        assert builder.grammar.compile_wheres(join) == 'on "users"."id" = "contacts"."user_id"'

    def test_new_query_keeps_join_shape(self, builder: Builder) -> None:
        join = JoinClause(builder, "right", "contacts")
        fresh = join.new_query()
        assert isinstance(fresh, JoinClause)
        assert (fresh.type, fresh.table) == ("right", "contacts")
        assert fresh.wheres == []

    def test_for_sub_query_returns_plain_builder(self, builder: Builder) -> None:
        sub = JoinClause(builder, "inner", "contacts").for_sub_query()
        assert type(sub) is Builder
        assert not sub.is_join_clause

    def test_nested_on_group(self, builder: Builder) -> None:
        builder.from_("users").join(
            "contacts",
            lambda j: j.on(
                lambda q: q.on("users.id", "=", "contacts.user_id").or_on("users.email", "=", "contacts.email")
            ).where("contacts.active", 1),
        )
        assert builder.to_sql() == (
            'select * from "users" inner join "contacts" on ("users"."id" = "contacts"."user_id" '
            'or "users"."email" = "contacts"."email") and "contacts"."active" = ?'
        )
        assert builder.get_raw_bindings()["join"] == [1]

    def test_exists_inside_join_uses_where_keyword(self, builder: Builder) -> None:
        builder.from_("users").join(
            "contacts",
            lambda j: j.on("users.id", "=", "contacts.user_id").where_exists(
                lambda q: q.from_("phones").where_column("phones.contact_id", "contacts.id")
            ),
        )
        assert builder.to_sql() == (
            'select * from "users" inner join "contacts" on "users"."id" = "contacts"."user_id" '
            'and exists (select * from "phones" where "phones"."contact_id" = "contacts"."id")'
        )
