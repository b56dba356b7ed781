"""Closed tagged unions.

A variant is declared by subclassing `Variant` with its alternatives:

    class Shape(Variant[Circle, Square]):
        pass

    shape = Shape(Circle(radius=1.0))
    shape.tag      # Circle
    shape.value    # Circle(radius=1.0)

Handlers can also be picked by the annotation of their first parameter:

    def area(c: Circle) -> float: ...
    def side_area(s: Square) -> float: ...

    shape.visit(area, side_area)
"""

import inspect
from collections.abc import Callable
from types import UnionType
from typing import Any, ClassVar, Union, get_args, get_origin, get_type_hints

from ._errors import InvalidExtractionError


class Variant[*Ts]:
    """A value holding exactly one payload out of a fixed set of alternatives."""

    __slots__ = ("_index", "_value")

    alternatives: ClassVar[tuple[type, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for base in cls.__dict__.get("__orig_bases__", ()):
            if get_origin(base) is Variant:
                cls.alternatives = _validate_alternatives(cls.__name__, get_args(base))
                break

    def __init__(self, value: object) -> None:
        if not self.alternatives:
            msg = (
                f"{type(self).__name__} declares no alternatives. "
                "Subclass Variant with them, e.g. 'class Shape(Variant[Circle, Square])'"
            )
            raise TypeError(msg)
        self._index = self._resolve_index(value)
        self._value = value

    @classmethod
    def _resolve_index(cls, value: object) -> int:
        # Exact type first so that e.g. bool is not captured by an int alternative.
        for index, alternative in enumerate(cls.alternatives):
            if type(value) is alternative:
                return index
        for index, alternative in enumerate(cls.alternatives):
            if isinstance(value, alternative):
                return index
        names = ", ".join(alt.__name__ for alt in cls.alternatives)
        msg = f"{type(value).__name__} is not an alternative of {cls.__name__} (expected one of: {names})"
        raise TypeError(msg)

    @property
    def index(self) -> int:
        """Position of the active alternative in `alternatives`."""
        return self._index

    @property
    def tag(self) -> type:
        """The active alternative."""
        return self.alternatives[self._index]

    @property
    def value(self) -> Any:
        """The payload of the active alternative."""
        return self._value

    def holds(self, alternative: type) -> bool:
        return self.tag is alternative

    def get[T](self, alternative: type[T]) -> T:
        """Return the payload if `alternative` is active.

        Raises:
            InvalidExtractionError: If another alternative is active.

        """
        if not self.holds(alternative):
            raise InvalidExtractionError(requested=alternative, active=self.tag)
        return self._value

    def visit[R](self, *handlers: Callable[[Any], R]) -> R:
        """Call the handler whose first parameter is annotated with the active alternative.

        A handler annotated with a union (`Add | Sub`) covers each member. Every
        alternative must be covered by exactly one handler, whichever is active.

        Raises:
            TypeError: If an alternative has no handler or more than one, or a
                handler's first parameter is missing, unannotated, or annotated
                with a type outside the alternatives.

        """
        arms = _handler_arms(type(self), handlers)
        return arms[self.tag](self._value)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._index == other._index and self._value == other._value

    def __hash__(self) -> int:
        return hash((type(self), self._index, self._value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


def _validate_alternatives(owner: str, alternatives: tuple[Any, ...]) -> tuple[type, ...]:
    if not alternatives:
        msg = f"{owner} must declare at least one alternative"
        raise TypeError(msg)
    for alternative in alternatives:
        if not isinstance(alternative, type):
            msg = f"Alternatives of {owner} must be classes, got: {alternative!r}"
            raise TypeError(msg)
    if len(set(alternatives)) != len(alternatives):
        msg = f"{owner} declares duplicate alternatives: {alternatives}"
        raise TypeError(msg)
    return tuple(alternatives)


def _handler_arms(owner: type[Variant], handlers: tuple[Callable[..., Any], ...]) -> dict[type, Callable[..., Any]]:
    arms: dict[type, Callable[..., Any]] = {}
    for handler in handlers:
        for alternative in _handled_alternatives(owner, handler):
            if alternative in arms:
                msg = f"Multiple handlers for {alternative.__name__} in {owner.__name__}.visit()"
                raise TypeError(msg)
            arms[alternative] = handler
    missing = [alt.__name__ for alt in owner.alternatives if alt not in arms]
    if missing:
        msg = f"No handler for {', '.join(missing)} in {owner.__name__}.visit()"
        raise TypeError(msg)
    return arms


def _handled_alternatives(owner: type[Variant], handler: Callable[..., Any]) -> tuple[type, ...]:
    if not callable(handler):
        msg = f"Handlers must be callable, got: {handler!r}"
        raise TypeError(msg)
    name = getattr(handler, "__qualname__", repr(handler))
    parameters = list(inspect.signature(handler).parameters.values())
    if not parameters:
        msg = f"Handler {name} takes no parameters"
        raise TypeError(msg)
    annotated = handler if inspect.isroutine(handler) else type(handler).__call__
    annotation = get_type_hints(annotated).get(parameters[0].name)
    if annotation is None:
        msg = f"Handler {name} has no annotation on its first parameter"
        raise TypeError(msg)

    members = get_args(annotation) if get_origin(annotation) in (Union, UnionType) else (annotation,)
    for member in members:
        if member not in owner.alternatives:
            msg = f"Handler {name} is annotated with {member!r}, which is not an alternative of {owner.__name__}"
            raise TypeError(msg)
    return members
