"""
Tests for the opaque expression holders.

Expressions are stored verbatim: no parsing, no validation.
"""

import dataclasses

import pytest
from trace2nta.expressions import (
    Declaration,
    Expression,
    ExpressionKind,
    Guard,
    Update,
)


class TestExpressionHolders:
    """Expressions keep their text untouched."""

    def test_text_is_stored_verbatim(self):
        """Whitespace and operators are not normalized."""
        guard = Guard("  x >= 1 &&   y<2 ")
        assert guard.exp == "  x >= 1 &&   y<2 "
        assert str(guard) == guard.exp

    def test_invalid_syntax_is_accepted(self):
        """No validation is performed on expression content."""
        assert Update(":= := :=").exp == ":= := :="

    def test_kinds(self):
        assert Declaration("int x;").kind is ExpressionKind.DECLARATION
        assert Guard("x > 0").kind is ExpressionKind.GUARD
        assert Update("x := 1").kind is ExpressionKind.UPDATE

    def test_subclasses_share_base(self):
        for cls in (Declaration, Guard, Update):
            assert isinstance(cls("e"), Expression)


class TestExpressionImmutability:

    def test_expressions_are_frozen(self):
        """Expressions are value objects."""
        guard = Guard("x > 0")
        with pytest.raises(dataclasses.FrozenInstanceError):
            guard.exp = "x < 0"

    def test_equality_by_value(self):
        assert Update("x := 1") == Update("x := 1")
        assert Update("x := 1") != Update("x := 2")
