"""Runtime pattern-matching expressions."""

__all__ = [
    "Clause",
    "ClauseEvent",
    "ClauseOutcome",
    "Guard",
    "InvalidExtractionError",
    "Literal",
    "MatchError",
    "MatchExpression",
    "MatchNotResolvedError",
    "MatchTrace",
    "MultiMatch",
    "Pattern",
    "PendingClause",
    "ResultCell",
    "ResultTypeMismatchError",
    "SingleMatch",
    "TypeTag",
    "Variant",
    "VariantMatch",
    "Wildcard",
    "_",
    "as_pattern",
    "guard",
    "literal",
    "match",
    "tracing",
    "type_tag",
    "wildcard",
]

from ._clause import Clause, PendingClause
from ._errors import InvalidExtractionError, MatchError, MatchNotResolvedError, ResultTypeMismatchError
from ._match import MatchExpression, MultiMatch, SingleMatch, VariantMatch, match
from ._patterns import Guard, Literal, Pattern, TypeTag, Wildcard, _, as_pattern, guard, literal, type_tag, wildcard
from ._result import ResultCell
from ._trace import ClauseEvent, ClauseOutcome, MatchTrace, tracing
from ._variant import Variant
