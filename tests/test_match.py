"""Tests for match expressions."""

import logging
from dataclasses import dataclass

import pytest

from matchkit import (
    MatchNotResolvedError,
    MultiMatch,
    PendingClause,
    ResultTypeMismatchError,
    SingleMatch,
    Variant,
    VariantMatch,
    _,
    guard,
    literal,
    match,
    type_tag,
    wildcard,
)


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


class CountingGuard:
    """Guard predicate that records how often it ran."""

    def __init__(self, *, result: bool) -> None:
        self.result = result
        self.calls = 0

    def __call__(self, *subjects: object) -> bool:
        self.calls += 1
        return self.result


class TestMatchFactory:
    """Tests for the match function."""

    def test_single_subject(self) -> None:
        assert isinstance(match(5), SingleMatch)

    def test_multiple_subjects(self) -> None:
        expr = match(2.0, 1.0)
        assert isinstance(expr, MultiMatch)
        assert expr.subjects == (2.0, 1.0)

    def test_variant_subject(self) -> None:
        assert isinstance(match(Expr(Add(1, 2))), VariantMatch)

    def test_no_subject(self) -> None:
        with pytest.raises(TypeError, match="at least one subject"):
            match()

    def test_single_tuple_subject_is_single_match(self) -> None:
        assert isinstance(match((1, 2)), SingleMatch)


class TestFirstMatchWins:
    """The first accepting clause decides the result."""

    def test_literal_then_wildcard(self) -> None:
        result = (match(5) | literal(0) >> (lambda _n: "zero") | wildcard() >> (lambda _n: "nonzero")).materialize(str)

        assert result == "nonzero"

    def test_literal_accepts(self) -> None:
        result = (match(0) | literal(0) >> (lambda _n: "zero") | _ >> (lambda _n: "nonzero")).materialize(str)

        assert result == "zero"

    def test_earlier_clause_wins_over_later(self) -> None:
        result = (
            match(10)
            | guard(lambda n: n > 5) >> (lambda _n: "first")
            | guard(lambda n: n > 1) >> (lambda _n: "second")
            | _ >> (lambda _n: "third")
        ).materialize()

        assert result == "first"

    def test_handler_receives_subject(self) -> None:
        assert (match(21) | _ >> (lambda n: n * 2)).materialize(int) == 42

    def test_handler_runs_exactly_once(self) -> None:
        calls: list[int] = []

        def handler(n: int) -> int:
            calls.append(n)
            return n

        (match(3) | _ >> handler | _ >> handler).materialize()

        assert calls == [3]


class TestShortCircuit:
    """Clauses after resolution run neither guards nor handlers."""

    def test_later_guard_not_invoked(self) -> None:
        late = CountingGuard(result=True)

        expr = match(1) | literal(1) >> (lambda _n: "one") | guard(late) >> (lambda _n: "late")

        assert expr.materialize() == "one"
        assert late.calls == 0

    def test_guard_invoked_once_when_it_accepts(self) -> None:
        accepting = CountingGuard(result=True)
        later = CountingGuard(result=True)

        expr = match(1) | guard(accepting) >> (lambda _n: "a") | guard(later) >> (lambda _n: "b")
        expr.materialize()
        expr.materialize()

        assert accepting.calls == 1
        assert later.calls == 0

    def test_ten_clauses_third_accepts(self) -> None:
        guards = [CountingGuard(result=index == 2) for index in range(10)]
        expr = match("subject")
        for index, predicate in enumerate(guards):
            expr = expr | guard(predicate) >> (lambda _s, index=index: index)

        assert expr.materialize(int) == 2
        assert [g.calls for g in guards] == [1, 1, 1, 0, 0, 0, 0, 0, 0, 0]
        assert expr.clause_count == 10

    def test_later_handler_not_invoked(self) -> None:
        def fail(_n: int) -> str:
            msg = "should not run"
            raise AssertionError(msg)

        assert (match(0) | literal(0) >> (lambda _n: "zero") | literal(0) >> fail).materialize() == "zero"


class TestWildcardTotality:
    """A wildcard clause alone always resolves."""

    @pytest.mark.parametrize("subject", [0, -1, "text", None, [1, 2], {"k": "v"}, 3.5])
    def test_single(self, subject: object) -> None:
        assert (match(subject) | _ >> (lambda s: s)).materialize() == subject

    def test_multi(self) -> None:
        assert (match(1, "a", None) | _ >> (lambda *subjects: subjects)).materialize() == (1, "a", None)

    def test_variant(self) -> None:
        payload = Div(20, 5)
        assert (match(Expr(payload)) | _ >> (lambda p: p)).materialize() is payload


class TestUnresolved:
    """Failure to match is reported only on materialization."""

    def test_raises_on_materialize(self) -> None:
        expr = match(7) | literal(5) >> (lambda _n: "five")

        assert not expr.resolved
        with pytest.raises(MatchNotResolvedError, match="Pattern match failed"):
            expr.materialize()

    def test_no_clauses(self) -> None:
        with pytest.raises(MatchNotResolvedError):
            match(7).materialize()

    def test_error_reports_clause_count(self) -> None:
        expr = match(7) | literal(5) >> (lambda _n: "five") | literal(6) >> (lambda _n: "six")

        with pytest.raises(MatchNotResolvedError) as excinfo:
            expr.materialize()

        assert excinfo.value.clause_count == 2
        assert excinfo.value.kind == "single"

    def test_int_conversion_of_unresolved(self) -> None:
        with pytest.raises(MatchNotResolvedError):
            int(match(7) | literal(5) >> (lambda _n: 5))


class TestErrorPropagation:
    """Errors from guards and handlers reach the caller unchanged."""

    def test_guard_error_leaves_expression_unresolved(self) -> None:
        def broken(_n: int) -> bool:
            msg = "guard failed"
            raise ValueError(msg)

        expr = match(1)
        with pytest.raises(ValueError, match="guard failed"):
            expr.case(guard(broken), lambda _n: "never")

        assert not expr.resolved
        assert (expr | _ >> (lambda _n: "fallback")).materialize() == "fallback"

    def test_handler_error_leaves_expression_unresolved(self) -> None:
        def broken(_n: int) -> str:
            msg = "handler failed"
            raise KeyError(msg)

        expr = match(1)
        with pytest.raises(KeyError, match="handler failed"):
            expr.case(_, broken)

        assert not expr.resolved


class TestMaterialize:
    """Tests for typed materialization."""

    def test_matching_type(self) -> None:
        assert (match(1) | _ >> (lambda _n: "one")).materialize(str) == "one"

    def test_mismatched_type(self) -> None:
        expr = match(1) | _ >> (lambda _n: "one")

        with pytest.raises(ResultTypeMismatchError):
            expr.materialize(int)

    def test_repeatable(self) -> None:
        expr = match(1) | _ >> (lambda _n: [1])

        assert expr.materialize() is expr.materialize()

    def test_int_and_float_conversion(self) -> None:
        assert int(match(1) | _ >> (lambda n: n + 1)) == 2
        assert float(match(1) | _ >> (lambda _n: 2.5)) == 2.5

    def test_int_conversion_of_bool_result(self) -> None:
        result = int(match(1) | _ >> (lambda _n: True))

        assert result == 1
        assert type(result) is int

    def test_float_conversion_of_int_result(self) -> None:
        result = float(match(1) | _ >> (lambda n: n))

        assert result == 1.0
        assert type(result) is float

    def test_typed_read_returns_handler_result(self) -> None:
        handler_result = [1, 2]
        expr = match(0) | _ >> (lambda _n: handler_result)

        assert expr.materialize(list[int]) is handler_result
        assert expr.materialize(list[int] | None) is handler_result


class TestChaining:
    """Tests for the different ways of attaching clauses."""

    def test_case_method(self) -> None:
        expr = match(0).case(literal(0), lambda _n: "zero").case(_, lambda _n: "other")

        assert expr.materialize() == "zero"

    def test_case_with_plain_value(self) -> None:
        assert match("a").case("a", lambda _s: 1).materialize() == 1

    def test_case_with_predicate_runs_it_as_guard(self) -> None:
        result = match(3).case(lambda n: n > 0, lambda _n: "positive").otherwise(lambda _n: "other")

        assert result.materialize() == "positive"

    def test_case_with_rejecting_predicate(self) -> None:
        result = match(-3).case(lambda n: n > 0, lambda _n: "positive").otherwise(lambda _n: "other")

        assert result.materialize() == "other"

    def test_case_with_class_compares_by_equality(self) -> None:
        assert match(int).case(int, lambda _t: "int type").materialize() == "int type"

    def test_case_with_predicate_on_variant_is_rejected(self) -> None:
        with pytest.raises(TypeError, match="only type_tag"):
            match(Expr(Add(1, 2))).case(lambda _e: True, lambda _p: 0)

    def test_otherwise(self) -> None:
        assert match(3).case(0, lambda _n: "zero").otherwise(lambda _n: "other").materialize() == "other"

    def test_pending_clause(self) -> None:
        pending = match(0) | literal(0)
        assert isinstance(pending, PendingClause)

        expr = pending >> (lambda _n: "zero")
        assert expr.materialize() == "zero"

    def test_prebuilt_clause(self) -> None:
        zero = literal(0) >> (lambda _n: "zero")

        assert zero(match(0)).materialize() == "zero"
        assert (match(0) | zero).materialize() == "zero"

    def test_clause_reused_across_expressions(self) -> None:
        zero = literal(0) >> (lambda _n: "zero")
        rest = _ >> (lambda _n: "other")

        assert (match(0) | zero | rest).materialize() == "zero"
        assert (match(1) | zero | rest).materialize() == "other"

    def test_or_with_unrelated_value(self) -> None:
        with pytest.raises(TypeError):
            match(0) | 5  # noqa: B018

    def test_non_callable_handler(self) -> None:
        with pytest.raises(TypeError, match="must be callable"):
            match(0).case(_, "zero")  # ty: ignore[invalid-argument-type]

    def test_chain_returns_same_expression(self) -> None:
        expr = match(0)
        assert expr.case(_, lambda _n: 0) is expr

    def test_clause_count_includes_skipped(self) -> None:
        expr = match(0) | _ >> (lambda _n: 0) | _ >> (lambda _n: 1)

        assert expr.clause_count == 2


class TestMultiMatch:
    """Tests for multi-subject matches."""

    def test_single_subject_accepts_whole_tuple_literal(self) -> None:
        expr = MultiMatch(5) | literal((5,)) >> (lambda n: n * 2) | _ >> (lambda _n: -1)

        assert expr.materialize(int) == 10

    def test_single_subject_accepts_lone_field_literal(self) -> None:
        expr = MultiMatch(5) | literal(5) >> (lambda n: n * 2) | _ >> (lambda _n: -1)

        assert expr.materialize(int) == 10

    def test_guard_receives_all_subjects(self) -> None:
        result = (
            match(4.0, 2.0)
            | guard(lambda x, g: abs(g * g - x) < 0.0001) >> (lambda _x, g: g)
            | _ >> (lambda _x, _g: -1.0)
        ).materialize(float)

        assert result == 2.0

    def test_literal_with_wildcard_field(self) -> None:
        selected = (1, 3)

        result = (
            match([(2, 3), (4, 5)], 0)
            | literal(_, 0) >> (lambda _items, _capacity: (0, selected))
            | _ >> (lambda _items, _capacity: (-1, ()))
        ).materialize(tuple[int, tuple[int, ...]])

        assert result == (0, selected)

    def test_type_tag_rejected(self) -> None:
        with pytest.raises(TypeError, match="tagged-union"):
            match(1, 2).case(type_tag(Add), lambda *_: None)

    def test_requires_subject(self) -> None:
        with pytest.raises(TypeError):
            MultiMatch()


class TestVariantMatch:
    """Tests for matches over tagged unions."""

    @staticmethod
    def evaluate(expr: Expr) -> int:
        return (
            match(expr)
            | type_tag(Add) >> (lambda a: a.left + a.right)
            | type_tag(Sub) >> (lambda s: s.left - s.right)
            | type_tag(Mul) >> (lambda m: m.left * m.right)
            | type_tag(Div) >> (lambda d: d.left // d.right)
        ).materialize(int)

    def test_dispatches_to_add(self) -> None:
        called: list[str] = []

        result = (
            match(Expr(Add(5, 3)))
            | type_tag(Add) >> (lambda a: called.append("add") or a.left + a.right)
            | type_tag(Sub) >> (lambda s: called.append("sub") or s.left - s.right)
            | type_tag(Mul) >> (lambda m: called.append("mul") or m.left * m.right)
            | type_tag(Div) >> (lambda d: called.append("div") or d.left // d.right)
        ).materialize(int)

        assert result == 8
        assert called == ["add"]

    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            (Add(5, 3), 8),
            (Sub(10, 4), 6),
            (Mul(6, 7), 42),
            (Div(20, 5), 4),
        ],
    )
    def test_exhaustive_chain_resolves_every_alternative(self, payload: object, expected: int) -> None:
        assert self.evaluate(Expr(payload)) == expected

    def test_handler_receives_stored_payload(self) -> None:
        payload = Mul(6, 7)

        received = (
            match(Expr(payload))
            | type_tag(Add) >> (lambda a: a)
            | type_tag(Sub) >> (lambda s: s)
            | type_tag(Mul) >> (lambda m: m)
            | type_tag(Div) >> (lambda d: d)
        ).materialize()

        assert received is payload

    def test_missing_alternative_is_unresolved(self) -> None:
        expr = match(Expr(Div(1, 1))) | type_tag(Add) >> (lambda a: a.left)

        with pytest.raises(MatchNotResolvedError, match="variant"):
            expr.materialize()

    def test_wildcard_fallback(self) -> None:
        result = (
            match(Expr(Sub(3, 1)))
            | type_tag(Add) >> (lambda _a: "add")
            | _ >> (lambda payload: type(payload).__name__)
        ).materialize(str)

        assert result == "Sub"

    def test_foreign_alternative_rejected(self) -> None:
        with pytest.raises(TypeError, match="not an alternative of Expr"):
            match(Expr(Add(1, 2))).case(type_tag(int), lambda n: n)

    def test_literal_rejected(self) -> None:
        with pytest.raises(TypeError, match="only type_tag"):
            match(Expr(Add(1, 2))).case(literal(Add(1, 2)), lambda a: a)

    def test_guard_rejected(self) -> None:
        with pytest.raises(TypeError, match="only type_tag"):
            match(Expr(Add(1, 2))).case(guard(lambda _v: True), lambda a: a)

    def test_requires_variant(self) -> None:
        with pytest.raises(TypeError, match="requires a Variant"):
            VariantMatch(Add(1, 2))  # ty: ignore[invalid-argument-type]


class TestLogging:
    """Tests for debug logging of clause evaluation."""

    def test_clause_outcomes_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="matchkit"):
            (match(5) | literal(0) >> (lambda _n: "zero") | _ >> (lambda _n: "other") | _ >> str).materialize()

        messages = [record.getMessage() for record in caplog.records]
        assert "Created single match" in messages
        assert any("Clause 0 (literal(0)) rejected" in m for m in messages)
        assert any("Clause 1 (_) accepted" in m for m in messages)
        assert any("Skipping clause 2" in m for m in messages)
