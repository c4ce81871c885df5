"""
Expression holders for the NTA model.

Guards, updates and declarations are carried as opaque text.
Nothing here parses, type-checks or evaluates them: the external
model checker is the only consumer that interprets the text.

ARCHITECTURAL RULE:
    No validation of expression content.
    The builder wraps caller strings, the serializer escapes them.
"""

from dataclasses import dataclass
from enum import Enum


class ExpressionKind(Enum):
    """Role an expression plays in the automaton."""
    DECLARATION = "declaration"
    GUARD = "guard"
    UPDATE = "assignment"


@dataclass(frozen=True)
class Expression:
    """
    Base class for all opaque expressions.

    Properties:
        exp: The raw expression text, stored verbatim
    """

    exp: str

    kind = None

    def __str__(self) -> str:
        return self.exp


@dataclass(frozen=True)
class Declaration(Expression):
    """
    A variable, clock or channel declaration.

    Examples:
        - int x = 0;
        - clock c;
    """

    kind = ExpressionKind.DECLARATION


@dataclass(frozen=True)
class Guard(Expression):
    """
    Boolean condition that must hold for an edge to be taken.

    Example:
        x > 0 && c <= 5
    """

    kind = ExpressionKind.GUARD


@dataclass(frozen=True)
class Update(Expression):
    """
    Assignment executed when an edge is taken.

    Example:
        x := x + 1
    """

    kind = ExpressionKind.UPDATE
