"""Clauses and the chaining connector.

A `Clause` binds one pattern to one handler. It is built with `pattern >> handler`
and attached to a match expression with `expression | clause`, which is the
same as calling `clause(expression)`:

    match(n) | literal(0) >> (lambda _: "zero") | _ >> (lambda _: "nonzero")

`expression | pattern` yields a `PendingClause` that attaches once a handler is
supplied with `>>`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._match import MatchExpression
    from ._patterns import Pattern


def check_handler(handler: object) -> None:
    if not callable(handler):
        msg = f"Clause handler must be callable, got: {handler!r}"
        raise TypeError(msg)


@dataclass(frozen=True, slots=True)
class Clause:
    """A pattern bound to the handler that runs when the pattern accepts."""

    pattern: Pattern
    handler: Callable[..., Any]

    def __post_init__(self) -> None:
        check_handler(self.handler)

    def __call__[E: MatchExpression](self, expression: E) -> E:
        """Attach this clause to `expression` and return it."""
        return expression.case(self.pattern, self.handler)


@dataclass(frozen=True, slots=True)
class PendingClause[E: MatchExpression]:
    """An expression waiting for the handler of its next clause."""

    expression: E
    pattern: Pattern

    def __rshift__(self, handler: Callable[..., Any]) -> E:
        return self.expression.case(self.pattern, handler)
