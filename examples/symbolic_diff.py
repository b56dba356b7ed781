"""Symbolic differentiation over a tagged union of expression nodes.

`Expr` is a `Variant` with one alternative per node kind. The operations
`simplify`, `derivative` and `show` are variant matches with one `type_tag`
clause per alternative. `variables` instead uses `Variant.visit`, which picks
the handler by the annotation of its parameter. Simplification rules that
depend on constant operands are written as multi-subject matches over the
operands' constant values, which are `None` for non-constant operands.

Run with:
    matchkit trace examples.symbolic_diff:demo
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from matchkit import Variant, _, guard, literal, match, type_tag

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True)
class Var:
    name: str


@dataclass(frozen=True)
class Const:
    value: float


@dataclass(frozen=True)
class Add:
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Sub:
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Mul:
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Div:
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Pow:
    base: Expr
    exponent: float


@dataclass(frozen=True)
class Sin:
    arg: Expr


@dataclass(frozen=True)
class Cos:
    arg: Expr


@dataclass(frozen=True)
class Exp:
    arg: Expr


class Expr(Variant[Var, Const, Add, Sub, Mul, Div, Pow, Sin, Cos, Exp]):
    __slots__ = ()


# -----------------------------------------------------------------------------
# Constructors
# -----------------------------------------------------------------------------


def var(name: str) -> Expr:
    return Expr(Var(name))


def const(value: float) -> Expr:
    return Expr(Const(float(value)))


def add(left: Expr, right: Expr) -> Expr:
    return Expr(Add(left, right))


def sub(left: Expr, right: Expr) -> Expr:
    return Expr(Sub(left, right))


def mul(left: Expr, right: Expr) -> Expr:
    return Expr(Mul(left, right))


def div(left: Expr, right: Expr) -> Expr:
    return Expr(Div(left, right))


def power(base: Expr, exponent: float) -> Expr:
    return Expr(Pow(base, float(exponent)))


def sin(arg: Expr) -> Expr:
    return Expr(Sin(arg))


def cos(arg: Expr) -> Expr:
    return Expr(Cos(arg))


def exp(arg: Expr) -> Expr:
    return Expr(Exp(arg))


# -----------------------------------------------------------------------------
# Simplification
# -----------------------------------------------------------------------------


def const_value(e: Expr) -> float | None:
    """Return the value of a constant node, or None for any other node."""
    return (
        match(e)
        | type_tag(Const) >> (lambda c: c.value)
        | _ >> (lambda _node: None)
    ).materialize()


def is_const(e: Expr) -> bool:
    return const_value(e) is not None


def _both_constant(left: float | None, right: float | None) -> bool:
    return left is not None and right is not None


def _simplify_add(node: Add) -> Expr:
    left, right = simplify(node.left), simplify(node.right)
    return (
        match(const_value(left), const_value(right))
        | literal(0.0, _) >> (lambda _l, _r: right)
        | literal(_, 0.0) >> (lambda _l, _r: left)
        | guard(_both_constant) >> (lambda l, r: const(l + r))
        | _ >> (lambda _l, _r: add(left, right))
    ).materialize(Expr)


def _simplify_sub(node: Sub) -> Expr:
    left, right = simplify(node.left), simplify(node.right)
    return (
        match(const_value(left), const_value(right))
        | literal(_, 0.0) >> (lambda _l, _r: left)
        | guard(_both_constant) >> (lambda l, r: const(l - r))
        | _ >> (lambda _l, _r: sub(left, right))
    ).materialize(Expr)


def _simplify_mul(node: Mul) -> Expr:
    left, right = simplify(node.left), simplify(node.right)
    return (
        match(const_value(left), const_value(right))
        | literal(0.0, _) >> (lambda _l, _r: const(0.0))
        | literal(_, 0.0) >> (lambda _l, _r: const(0.0))
        | literal(1.0, _) >> (lambda _l, _r: right)
        | literal(_, 1.0) >> (lambda _l, _r: left)
        | guard(_both_constant) >> (lambda l, r: const(l * r))
        | _ >> (lambda _l, _r: mul(left, right))
    ).materialize(Expr)


def _simplify_div(node: Div) -> Expr:
    left, right = simplify(node.left), simplify(node.right)
    return (
        match(const_value(left), const_value(right))
        | literal(0.0, _) >> (lambda _l, _r: const(0.0))
        | literal(_, 1.0) >> (lambda _l, _r: left)
        | guard(lambda l, r: _both_constant(l, r) and r != 0) >> (lambda l, r: const(l / r))
        | _ >> (lambda _l, _r: div(left, right))
    ).materialize(Expr)


def _simplify_pow(node: Pow) -> Expr:
    base = simplify(node.base)
    return (
        match(node.exponent, const_value(base))
        | literal(0.0, _) >> (lambda _n, _b: const(1.0))
        | literal(1.0, _) >> (lambda _n, _b: base)
        | guard(lambda n, b: n > 0 and b == 0.0) >> (lambda _n, _b: const(0.0))
        | literal(_, 1.0) >> (lambda _n, _b: const(1.0))
        | _ >> (lambda n, _b: power(base, n))
    ).materialize(Expr)


def _simplify_call(arg: Expr, fold: Callable[[float], float], build: Callable[[Expr], Expr]) -> Expr:
    arg = simplify(arg)
    return (
        match(const_value(arg))
        | guard(lambda value: value is not None) >> (lambda value: const(fold(value)))
        | _ >> (lambda _value: build(arg))
    ).materialize(Expr)


def simplify(e: Expr) -> Expr:
    """Fold constants and drop neutral operands, bottom-up."""
    return (
        match(e)
        | type_tag(Var) >> (lambda _v: e)
        | type_tag(Const) >> (lambda _c: e)
        | type_tag(Add) >> _simplify_add
        | type_tag(Sub) >> _simplify_sub
        | type_tag(Mul) >> _simplify_mul
        | type_tag(Div) >> _simplify_div
        | type_tag(Pow) >> _simplify_pow
        | type_tag(Sin) >> (lambda s: _simplify_call(s.arg, math.sin, sin))
        | type_tag(Cos) >> (lambda c: _simplify_call(c.arg, math.cos, cos))
        | type_tag(Exp) >> (lambda x: _simplify_call(x.arg, math.exp, exp))
    ).materialize(Expr)


# -----------------------------------------------------------------------------
# Differentiation
# -----------------------------------------------------------------------------


def derivative(e: Expr, name: str) -> Expr:
    """Differentiate `e` with respect to the variable `name` and simplify."""

    def d(sub_expr: Expr) -> Expr:
        return derivative(sub_expr, name)

    result = (
        match(e)
        | type_tag(Var) >> (lambda v: const(1.0 if v.name == name else 0.0))
        | type_tag(Const) >> (lambda _c: const(0.0))
        | type_tag(Add) >> (lambda a: add(d(a.left), d(a.right)))
        # (f - g)' = f' - g'
        | type_tag(Sub) >> (lambda s: sub(d(s.left), d(s.right)))
        # (f * g)' = f' * g + f * g'
        | type_tag(Mul) >> (lambda m: add(mul(d(m.left), m.right), mul(m.left, d(m.right))))
        # (f / g)' = (f' * g - f * g') / g^2
        | type_tag(Div)
        >> (lambda q: div(sub(mul(d(q.left), q.right), mul(q.left, d(q.right))), power(q.right, 2)))
        # (f^n)' = n * f' * f^(n-1)
        | type_tag(Pow) >> (lambda p: mul(const(p.exponent), mul(d(p.base), power(p.base, p.exponent - 1))))
        # sin(f)' = cos(f) * f'
        | type_tag(Sin) >> (lambda s: mul(cos(s.arg), d(s.arg)))
        # cos(f)' = -sin(f) * f'
        | type_tag(Cos) >> (lambda c: mul(mul(const(-1.0), sin(c.arg)), d(c.arg)))
        # exp(f)' = exp(f) * f'
        | type_tag(Exp) >> (lambda x: mul(exp(x.arg), d(x.arg)))
    ).materialize(Expr)
    return simplify(result)


def variables(e: Expr) -> frozenset[str]:
    """Names of the variables occurring in `e`."""

    def of_var(v: Var) -> frozenset[str]:
        return frozenset({v.name})

    def of_const(_c: Const) -> frozenset[str]:
        return frozenset()

    def of_binary(node: Add | Sub | Mul | Div) -> frozenset[str]:
        return variables(node.left) | variables(node.right)

    def of_power(p: Pow) -> frozenset[str]:
        return variables(p.base)

    def of_call(call: Sin | Cos | Exp) -> frozenset[str]:
        return variables(call.arg)

    return e.visit(of_var, of_const, of_binary, of_power, of_call)


# -----------------------------------------------------------------------------
# Display
# -----------------------------------------------------------------------------

PREC_ATOM = 100
PREC_CALL = 90
PREC_POW = 80
PREC_MUL = 70
PREC_ADD = 60


def precedence(e: Expr) -> int:
    return (
        match(e)
        | type_tag(Var) >> (lambda _v: PREC_ATOM)
        | type_tag(Const) >> (lambda c: PREC_ATOM if c.value >= 0 else PREC_ADD)
        | type_tag(Add) >> (lambda _a: PREC_ADD)
        | type_tag(Sub) >> (lambda _s: PREC_ADD)
        | type_tag(Mul) >> (lambda _m: PREC_MUL)
        | type_tag(Div) >> (lambda _d: PREC_MUL)
        | type_tag(Pow) >> (lambda _p: PREC_POW)
        | _ >> (lambda _call: PREC_CALL)
    ).materialize(int)


def _wrap(e: Expr, parent: int, *, right: bool = False) -> str:
    # Right operands of - and / also need parentheses at equal precedence.
    prec = precedence(e)
    text = show(e)
    if prec < parent or (right and prec == parent):
        return f"({text})"
    return text


def _binary(left: Expr, op: str, right: Expr, prec: int, *, associative: bool) -> str:
    return f"{_wrap(left, prec)} {op} {_wrap(right, prec, right=not associative)}"


def show(e: Expr) -> str:
    """Render `e` with the minimum parentheses."""
    return (
        match(e)
        | type_tag(Var) >> (lambda v: v.name)
        | type_tag(Const) >> (lambda c: f"{c.value:g}")
        | type_tag(Add) >> (lambda a: _binary(a.left, "+", a.right, PREC_ADD, associative=True))
        | type_tag(Sub) >> (lambda s: _binary(s.left, "-", s.right, PREC_ADD, associative=False))
        | type_tag(Mul) >> (lambda m: _binary(m.left, "*", m.right, PREC_MUL, associative=True))
        | type_tag(Div) >> (lambda q: _binary(q.left, "/", q.right, PREC_MUL, associative=False))
        | type_tag(Pow) >> (lambda p: f"{_wrap(p.base, PREC_POW, right=True)}^{p.exponent:g}")
        | type_tag(Sin) >> (lambda s: f"sin({show(s.arg)})")
        | type_tag(Cos) >> (lambda c: f"cos({show(c.arg)})")
        | type_tag(Exp) >> (lambda x: f"exp({show(x.arg)})")
    ).materialize(str)


def demo() -> str:
    """Differentiate `sin(x^2) * cos(x) + exp(x)` and render the result."""
    x = var("x")
    return show(derivative(add(mul(sin(power(x, 2)), cos(x)), exp(x)), "x"))


if __name__ == "__main__":
    x = var("x")
    expr = add(mul(sin(power(x, 2)), cos(x)), exp(x))
    print(f"Original function: {show(expr)}")  # noqa: T201
    print(f"Derivative:        {show(derivative(expr, 'x'))}")  # noqa: T201

    expr2 = cos(exp(cos(mul(const(2), add(const(1), power(x, 3))))))
    print(f"Original:   {show(expr2)}")  # noqa: T201
    print(f"Derivative: {show(derivative(expr2, 'x'))}")  # noqa: T201
