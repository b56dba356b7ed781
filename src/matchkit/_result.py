"""Write-once storage for the result of a match expression.

The cell does not know the type of the value it holds. The type is checked
only when the value is read back with a requested type: plain instances are
returned as they are, anything else is checked with pydantic in strict mode
so that parametrized types such as `tuple[int, list[str]]` can be requested.
"""

import logging
from functools import cache
from typing import Any, Final

from pydantic import ConfigDict, PydanticSchemaGenerationError, TypeAdapter, ValidationError

from ._errors import MatchNotResolvedError, ResultTypeMismatchError

logger = logging.getLogger(__name__)

_EMPTY: Final = object()

_UNCHECKED_TYPES: Final = (None, Any, object)


class ResultCell:
    """Holds at most one value, written once by the winning clause."""

    __slots__ = ("_value",)

    def __init__(self) -> None:
        self._value: Any = _EMPTY

    @property
    def filled(self) -> bool:
        return self._value is not _EMPTY

    def store(self, value: object) -> None:
        if self.filled:
            msg = "Result cell already holds a value"
            raise RuntimeError(msg)
        self._value = value

    def read(self, result_type: Any = None, *, kind: str = "single", clause_count: int = 0) -> Any:
        """Return the stored value, checked against `result_type` when given.

        Args:
            result_type: Type the caller expects. `None`, `Any` and `object` skip the check.
            kind: Flavor of the owning match expression, used in error messages.
            clause_count: Number of clauses attached so far, used in error messages.

        Raises:
            MatchNotResolvedError: If no value was stored.
            ResultTypeMismatchError: If the value does not conform to `result_type`.

        """
        if not self.filled:
            logger.debug("Read of unresolved %s match with %d clause(s)", kind, clause_count)
            raise MatchNotResolvedError(kind=kind, clause_count=clause_count)
        return convert_result(self._value, result_type)


def convert_result(value: object, result_type: Any) -> Any:
    """Check `value` against `result_type` and return it.

    The stored object itself is returned, never a copy rebuilt by validation.
    """
    if any(result_type is unchecked for unchecked in _UNCHECKED_TYPES):
        return value
    if isinstance(result_type, type):
        try:
            is_instance = isinstance(value, result_type)
        except TypeError as e:
            # e.g. a Protocol that is not runtime_checkable
            raise ResultTypeMismatchError(expected=result_type, actual=type(value)) from e
        if is_instance:
            return value

    try:
        adapter = _adapter_for(result_type)
    except TypeError as e:
        # Unhashable type expressions cannot be cached.
        logger.debug("Building uncached adapter for %r: %s", result_type, e)
        adapter = _build_adapter(result_type)

    try:
        adapter.validate_python(value, strict=True)
    except ValidationError as e:
        raise ResultTypeMismatchError(expected=result_type, actual=type(value)) from e
    return value


@cache
def _adapter_for(result_type: Any) -> TypeAdapter[Any]:
    return _build_adapter(result_type)


def _build_adapter(result_type: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(result_type)
    except PydanticSchemaGenerationError:
        # Plain classes unknown to pydantic are checked with isinstance().
        return TypeAdapter(result_type, config=ConfigDict(arbitrary_types_allowed=True))
