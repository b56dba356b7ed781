"""Arithmetic expressions as a tagged union.

`Expr` holds exactly one of `Add`, `Sub`, `Mul` or `Div`. Both `evaluate` and
`to_string` dispatch on the active alternative with one `type_tag` clause per
alternative, so every handler receives the payload directly.

Run with:
    matchkit trace examples.variant_match:evaluate_sum 5 3
"""

from dataclasses import dataclass

from matchkit import Variant, match, type_tag


@dataclass(frozen=True)
class Add:
    left: int
    right: int


@dataclass(frozen=True)
class Sub:
    left: int
    right: int


@dataclass(frozen=True)
class Mul:
    left: int
    right: int


@dataclass(frozen=True)
class Div:
    left: int
    right: int


class Expr(Variant[Add, Sub, Mul, Div]):
    __slots__ = ()


def _truncating_div(left: int, right: int) -> int:
    # Integer division rounding toward zero.
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def evaluate(expr: Expr) -> int:
    return (
        match(expr)
        | type_tag(Add) >> (lambda a: a.left + a.right)
        | type_tag(Sub) >> (lambda s: s.left - s.right)
        | type_tag(Mul) >> (lambda m: m.left * m.right)
        | type_tag(Div) >> (lambda d: _truncating_div(d.left, d.right))
    ).materialize(int)


def to_string(expr: Expr) -> str:
    return (
        match(expr)
        | type_tag(Add) >> (lambda a: f"{a.left} + {a.right}")
        | type_tag(Sub) >> (lambda s: f"{s.left} - {s.right}")
        | type_tag(Mul) >> (lambda m: f"{m.left} * {m.right}")
        | type_tag(Div) >> (lambda d: f"{d.left} / {d.right}")
    ).materialize(str)


def evaluate_sum(left: int, right: int) -> int:
    """Evaluate `left + right` through the tagged union."""
    return evaluate(Expr(Add(left, right)))


if __name__ == "__main__":
    for expr in (Expr(Add(5, 3)), Expr(Sub(10, 4)), Expr(Mul(6, 7)), Expr(Div(20, 5))):
        print(f"Expression: {to_string(expr)} = {evaluate(expr)}")  # noqa: T201
