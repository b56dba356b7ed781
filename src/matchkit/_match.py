"""Match expressions.

A match expression holds its subject(s) and the result of the first clause
whose pattern accepted them. Clauses are attached one at a time, in order:

    result = (
        match(n)
        | literal(0) >> (lambda _: "zero")
        | _ >> (lambda _: "nonzero")
    ).materialize(str)

Once a clause has accepted, later clauses are skipped without running their
predicates or handlers. Reading the result of an expression that no clause
accepted raises `MatchNotResolvedError`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Self, overload

from ._clause import Clause, PendingClause, check_handler
from ._patterns import PATTERN_TYPES, TypeTag, Wildcard, as_pattern
from ._result import ResultCell
from ._trace import ClauseOutcome, start_trace
from ._variant import Variant

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._patterns import Pattern
    from ._trace import MatchTrace

logger = logging.getLogger(__name__)


class MatchExpression(ABC):
    """Shared clause-attachment protocol of the three match flavors."""

    __slots__ = ("_cell", "_clause_count", "_trace")

    kind: ClassVar[str]

    def __init__(self) -> None:
        self._cell = ResultCell()
        self._clause_count = 0
        self._trace: MatchTrace | None = start_trace(self.kind, self._trace_subject())
        logger.debug("Created %s match", self.kind)

    @property
    def resolved(self) -> bool:
        """Whether a clause has accepted the subject."""
        return self._cell.filled

    @property
    def clause_count(self) -> int:
        """Number of clauses attached so far, including skipped ones."""
        return self._clause_count

    def case(self, pattern: Pattern | object, handler: Callable[..., Any]) -> Self:
        """Attach one clause.

        If the expression is still unresolved and `pattern` accepts the subject,
        `handler` runs and its return value becomes the result. Otherwise this
        is a no-op. Errors raised by the pattern or the handler propagate and
        leave the expression unresolved.

        Args:
            pattern: A pattern, a predicate to run as a guard, or any other
                value to compare by equality.
            handler: Called with the subject shape of this expression.

        Returns:
            This expression, to allow chaining.

        Raises:
            TypeError: If `handler` is not callable or the pattern kind cannot
                be used with this kind of expression.

        """
        pattern = as_pattern(pattern)
        check_handler(handler)
        self._check_pattern(pattern)

        index = self._clause_count
        self._clause_count += 1

        if self._cell.filled:
            logger.debug("Skipping clause %d (%s): already resolved", index, pattern.describe())
            self._record(index, pattern, ClauseOutcome.SKIPPED)
            return self

        if not self._accepts(pattern):
            logger.debug("Clause %d (%s) rejected %s subject", index, pattern.describe(), self.kind)
            self._record(index, pattern, ClauseOutcome.REJECTED)
            return self

        value = self._invoke(pattern, handler)
        self._cell.store(value)
        logger.debug("Clause %d (%s) accepted %s subject, result: %r", index, pattern.describe(), self.kind, value)
        self._record(index, pattern, ClauseOutcome.ACCEPTED)
        if self._trace is not None:
            self._trace.record_result(value)
        return self

    def otherwise(self, handler: Callable[..., Any]) -> Self:
        """Attach a catch-all clause."""
        return self.case(Wildcard(), handler)

    @overload
    def materialize(self, result_type: None = None) -> Any: ...

    @overload
    def materialize[R](self, result_type: type[R]) -> R: ...

    def materialize(self, result_type: Any = None) -> Any:
        """Return the result of the winning clause.

        Args:
            result_type: Expected type of the result. When given, the result
                is checked against it.

        Raises:
            MatchNotResolvedError: If no clause accepted the subject.
            ResultTypeMismatchError: If the result does not conform to `result_type`.

        """
        return self._cell.read(result_type, kind=self.kind, clause_count=self._clause_count)

    def __or__(self, other: object) -> Any:
        if isinstance(other, Clause):
            return other(self)
        if isinstance(other, PATTERN_TYPES):
            return PendingClause(self, other)
        return NotImplemented

    def __int__(self) -> int:
        return int(self.materialize(int))

    def __float__(self) -> float:
        return float(self.materialize(float))

    def _record(self, index: int, pattern: Pattern, outcome: ClauseOutcome) -> None:
        if self._trace is not None:
            self._trace.record(index, pattern.describe(), outcome)

    def _check_pattern(self, pattern: Pattern) -> None:
        if isinstance(pattern, TypeTag):
            msg = f"type_tag() patterns require a tagged-union subject, not a {self.kind} match"
            raise TypeError(msg)

    @abstractmethod
    def _trace_subject(self) -> object: ...

    @abstractmethod
    def _accepts(self, pattern: Pattern) -> bool: ...

    @abstractmethod
    def _invoke(self, pattern: Pattern, handler: Callable[..., Any]) -> Any: ...


class SingleMatch[T](MatchExpression):
    """Match over one subject. Guards and handlers receive the subject."""

    __slots__ = ("_subject",)

    kind = "single"

    def __init__(self, subject: T) -> None:
        self._subject = subject
        super().__init__()

    @property
    def subject(self) -> T:
        return self._subject

    def _trace_subject(self) -> object:
        return self._subject

    def _accepts(self, pattern: Pattern) -> bool:
        return pattern.accepts(self._subject)

    def _invoke(self, pattern: Pattern, handler: Callable[..., Any]) -> Any:  # noqa: ARG002
        return handler(self._subject)

    def __repr__(self) -> str:
        return f"SingleMatch({self._subject!r}, resolved={self.resolved})"


class MultiMatch(MatchExpression):
    """Match over a fixed number of subjects.

    Guards and handlers receive every subject positionally. Literal patterns
    compare all subjects at once, field by field.
    """

    __slots__ = ("_subjects",)

    kind = "multi"

    def __init__(self, *subjects: Any) -> None:
        if not subjects:
            msg = "MultiMatch requires at least one subject"
            raise TypeError(msg)
        self._subjects = subjects
        super().__init__()

    @property
    def subjects(self) -> tuple[Any, ...]:
        return self._subjects

    def _trace_subject(self) -> object:
        return self._subjects

    def _accepts(self, pattern: Pattern) -> bool:
        return pattern.accepts_all(self._subjects)

    def _invoke(self, pattern: Pattern, handler: Callable[..., Any]) -> Any:  # noqa: ARG002
        return handler(*self._subjects)

    def __repr__(self) -> str:
        subjects = ", ".join(repr(s) for s in self._subjects)
        return f"MultiMatch({subjects}, resolved={self.resolved})"


class VariantMatch[V: Variant](MatchExpression):
    """Match over a tagged union, dispatching on the active alternative.

    Clauses are `type_tag(Alternative) >> handler` pairs whose handler receives
    the payload rather than the variant. A wildcard clause may be added as a
    fallback; its handler receives the active payload.
    """

    __slots__ = ("_variant",)

    kind = "variant"

    def __init__(self, variant: V) -> None:
        if not isinstance(variant, Variant):
            msg = f"VariantMatch requires a Variant subject, got: {type(variant).__name__}"
            raise TypeError(msg)
        self._variant = variant
        super().__init__()

    @property
    def variant(self) -> V:
        return self._variant

    def _trace_subject(self) -> object:
        return self._variant

    def _check_pattern(self, pattern: Pattern) -> None:
        if isinstance(pattern, Wildcard):
            return
        if not isinstance(pattern, TypeTag):
            msg = f"Variant matches accept only type_tag() and wildcard patterns, got: {pattern.describe()}"
            raise TypeError(msg)
        if pattern.alternative not in self._variant.alternatives:
            names = ", ".join(alt.__name__ for alt in self._variant.alternatives)
            msg = (
                f"{pattern.alternative.__name__} is not an alternative of "
                f"{type(self._variant).__name__} (expected one of: {names})"
            )
            raise TypeError(msg)

    def _accepts(self, pattern: Pattern) -> bool:
        return pattern.accepts(self._variant)

    def _invoke(self, pattern: Pattern, handler: Callable[..., Any]) -> Any:
        if isinstance(pattern, TypeTag):
            return handler(pattern.extract(self._variant))
        return handler(self._variant.value)

    def __repr__(self) -> str:
        return f"VariantMatch({self._variant!r}, resolved={self.resolved})"


@overload
def match[V: Variant](subject: V, /) -> VariantMatch[V]: ...


@overload
def match[T](subject: T, /) -> SingleMatch[T]: ...


@overload
def match(first: Any, second: Any, /, *rest: Any) -> MultiMatch: ...


def match(*subjects: Any) -> MatchExpression:
    """Start a match expression over one or more subjects.

    One `Variant` subject gives a `VariantMatch`, any other single subject a
    `SingleMatch`, and two or more subjects a `MultiMatch`.
    """
    if not subjects:
        msg = "match() requires at least one subject"
        raise TypeError(msg)
    if len(subjects) > 1:
        return MultiMatch(*subjects)
    (subject,) = subjects
    if isinstance(subject, Variant):
        return VariantMatch(subject)
    return SingleMatch(subject)


