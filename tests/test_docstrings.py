"""Tests that the public query API is documented."""

import inspect

import pytest

from fluentql.query.builder import Builder
from fluentql.query.grammars import Grammar, SQLiteGrammar
from fluentql.query.join_clause import JoinClause


def public_methods(cls: type):
    for name, member in inspect.getmembers(cls):
        if name.startswith("_"):
            continue
        if inspect.isfunction(member) or inspect.ismethod(member):
            yield name, member


class TestPublicDocstrings:
    """Every public method of the query classes carries a docstring."""

    @pytest.mark.parametrize("cls", [Builder, JoinClause, Grammar, SQLiteGrammar])
    def test_public_methods_have_docstrings(self, cls: type) -> None:
        undocumented = [
            name for name, member in public_methods(cls) if not inspect.getdoc(member)
        ]
        assert undocumented == []
