"""Patterns tested against match subjects.

There are four kinds of pattern:

- `Literal`: accepts when the subject equals the expected value(s).
- `Wildcard`: always accepts.
- `Guard`: accepts when a predicate over the subject returns a truthy value.
- `TypeTag`: accepts a `Variant` whose active alternative is a given type.

Every pattern can test a single subject (`accepts`) or the ordered subjects
of a multi-subject match (`accepts_all`). Binding a pattern to a handler with
`>>` produces a `Clause`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._clause import Clause
from ._errors import InvalidExtractionError
from ._variant import Variant

if TYPE_CHECKING:
    from collections.abc import Sequence


class _PatternBase:
    __slots__ = ()

    def __rshift__(self, handler: Callable[..., Any]) -> Clause:
        return Clause(self, handler)  # ty: ignore[invalid-argument-type]


@dataclass(frozen=True, slots=True)
class Literal(_PatternBase):
    """Accepts subjects equal to `expected`.

    `expected` holds one value per subject field. Fields that are themselves
    patterns (e.g. `_` or `guard(...)`) are tested with their own `accepts`,
    so `literal(_, 0)` accepts any pair whose second element is 0.
    """

    expected: tuple[Any, ...]

    def accepts(self, subject: Any) -> bool:
        if len(self.expected) == 1:
            return _field_accepts(self.expected[0], subject)
        return _field_accepts(self.expected, subject)

    def accepts_all(self, subjects: tuple[Any, ...]) -> bool:
        if len(self.expected) == len(subjects) and _fields_accept(self.expected, subjects):
            return True
        if len(self.expected) == 1 and type(self.expected[0]) is tuple:
            # A whole tuple given as a single expected value.
            return _field_accepts(self.expected[0], subjects)
        return False

    def describe(self) -> str:
        return f"literal({', '.join(_describe_field(field) for field in self.expected)})"


@dataclass(frozen=True, slots=True)
class Wildcard(_PatternBase):
    """Accepts any subject."""

    def accepts(self, subject: Any) -> bool:  # noqa: ARG002
        return True

    def accepts_all(self, subjects: tuple[Any, ...]) -> bool:  # noqa: ARG002
        return True

    def describe(self) -> str:
        return "_"


@dataclass(frozen=True, slots=True)
class Guard(_PatternBase):
    """Accepts subjects for which `predicate` returns a truthy value.

    For multi-subject matches the predicate receives every subject positionally.
    """

    predicate: Callable[..., object]

    def __post_init__(self) -> None:
        if not callable(self.predicate):
            msg = f"guard() requires a callable predicate, got: {self.predicate!r}"
            raise TypeError(msg)

    def accepts(self, subject: Any) -> bool:
        return bool(self.predicate(subject))

    def accepts_all(self, subjects: tuple[Any, ...]) -> bool:
        return bool(self.predicate(*subjects))

    def describe(self) -> str:
        name = getattr(self.predicate, "__qualname__", None) or repr(self.predicate)
        return f"guard({name})"


@dataclass(frozen=True, slots=True)
class TypeTag(_PatternBase):
    """Accepts a `Variant` whose active alternative is `alternative`.

    Only the tag is inspected; the payload value is never compared.
    """

    alternative: type

    def __post_init__(self) -> None:
        if not isinstance(self.alternative, type):
            msg = f"type_tag() requires a class, got: {self.alternative!r}"
            raise TypeError(msg)

    def accepts(self, subject: Any) -> bool:
        return isinstance(subject, Variant) and subject.holds(self.alternative)

    def accepts_all(self, subjects: tuple[Any, ...]) -> bool:
        return len(subjects) == 1 and self.accepts(subjects[0])

    def extract(self, subject: Variant) -> Any:
        """Return the payload of `subject` for this pattern's alternative.

        Raises:
            InvalidExtractionError: If `subject` holds another alternative.

        """
        if not subject.holds(self.alternative):
            raise InvalidExtractionError(requested=self.alternative, active=subject.tag)
        return subject.value

    def describe(self) -> str:
        return f"type_tag({self.alternative.__name__})"


type Pattern = Literal | Wildcard | Guard | TypeTag

PATTERN_TYPES = (Literal, Wildcard, Guard, TypeTag)

_ = Wildcard()


def _field_accepts(expected: Any, actual: Any) -> bool:
    if isinstance(expected, PATTERN_TYPES):
        return expected.accepts(actual)
    if type(expected) is tuple and isinstance(actual, tuple) and _has_pattern_field(expected):
        return len(expected) == len(actual) and _fields_accept(expected, actual)
    return bool(expected == actual)


def _fields_accept(expected: Sequence[Any], actual: Sequence[Any]) -> bool:
    return all(_field_accepts(e, a) for e, a in zip(expected, actual, strict=True))


def _has_pattern_field(values: tuple[Any, ...]) -> bool:
    return any(
        isinstance(value, PATTERN_TYPES) or (type(value) is tuple and _has_pattern_field(value)) for value in values
    )


def _describe_field(value: Any) -> str:
    if isinstance(value, PATTERN_TYPES):
        return value.describe()
    if type(value) is tuple:
        return f"({', '.join(_describe_field(v) for v in value)}{',' if len(value) == 1 else ''})"
    return repr(value)


def literal(*values: Any) -> Literal:
    """Build a pattern accepting subjects equal to `values`.

    Examples:
        >>> literal(0).accepts(0)
        True
        >>> literal(_, 0).accepts_all(([1, 2], 0))
        True

    """
    if not values:
        msg = "literal() requires at least one expected value"
        raise TypeError(msg)
    return Literal(values)


def wildcard() -> Wildcard:
    """Build a pattern accepting every subject."""
    return Wildcard()


def guard(predicate: Callable[..., object]) -> Guard:
    """Build a pattern accepting subjects for which `predicate` is truthy."""
    return Guard(predicate)


def type_tag(alternative: type) -> TypeTag:
    """Build a pattern accepting variants holding `alternative`."""
    return TypeTag(alternative)


def as_pattern(value: Any) -> Pattern:
    """Coerce `value` into a pattern.

    Patterns are returned unchanged. Callables other than classes become a
    `Guard`, so `expr.case(lambda n: n > 0, handler)` runs the predicate. Any
    other value becomes a one-field `Literal`; use `literal(fn)` to compare
    against a function object by equality.
    """
    if isinstance(value, PATTERN_TYPES):
        return value
    if callable(value) and not isinstance(value, type):
        return Guard(value)
    return Literal((value,))
