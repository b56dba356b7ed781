"""Errors raised by the matching engine.

Errors raised inside guard predicates or handlers are never wrapped:
they propagate to the caller unchanged.
"""

from typing import Any


class MatchError(Exception):
    """Base class for errors raised by the matching engine itself."""


class MatchNotResolvedError(MatchError):
    """Raised when a result is requested but no clause accepted the subject."""

    def __init__(self, kind: str, clause_count: int) -> None:
        self.kind = kind
        self.clause_count = clause_count
        super().__init__(
            f"Pattern match failed: none of the {clause_count} clause(s) of this {kind} match accepted the subject",
        )


class ResultTypeMismatchError(MatchError, TypeError):
    """Raised when the stored result is incompatible with the requested type."""

    def __init__(self, expected: Any, actual: type) -> None:
        self.expected = expected
        self.actual = actual
        expected_name = getattr(expected, "__name__", repr(expected))
        super().__init__(f"Match result of type '{actual.__name__}' is not compatible with '{expected_name}'")


class InvalidExtractionError(MatchError, LookupError):
    """Raised when extracting the payload of an alternative that is not active."""

    def __init__(self, requested: type, active: type) -> None:
        self.requested = requested
        self.active = active
        super().__init__(f"Cannot extract '{requested.__name__}': the variant holds '{active.__name__}'")
