"""Tests for raw SQL expressions."""

import dataclasses

import pytest

from fluentql.expression import Expression
from fluentql.query.builder import Builder


class TestExpression:
    """Tests for Expression."""

    def test_get_value_and_str(self) -> None:
        """The wrapped fragment is returned verbatim."""
        expression = Expression("count(*)")
        assert expression.get_value() == "count(*)"
        assert str(expression) == "count(*)"

    def test_is_immutable(self) -> None:
        """Expressions cannot be modified after creation."""
        expression = Expression("now()")
        with pytest.raises(dataclasses.FrozenInstanceError):
            expression.value = "other"  # type: ignore[misc]

    def test_equality(self) -> None:
        assert Expression("1") == Expression("1")
        assert Expression("1") != Expression("2")

    def test_builder_raw_creates_expression(self) -> None:
        assert Builder.raw("now()") == Expression("now()")

    def test_expression_is_inlined_not_bound(self, builder: Builder) -> None:
        """An Expression value is compiled into the SQL and never bound."""
        builder.from_("users").where("votes", ">", Expression("10"))
        assert builder.to_sql() == 'select * from "users" where "votes" > 10'
        assert builder.get_bindings() == []
