"""Opt-in recording of clause evaluation.

Inside a `tracing()` block, every match expression created in the current
context records which of its clauses accepted, rejected or were skipped:

    with tracing() as traces:
        classify(7)
    traces[0].winner  # index of the clause that fired

Recorders are kept in a context variable, so they are isolated per thread
and per asyncio task.
"""

from __future__ import annotations

import reprlib
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

_recorder_var: ContextVar[list[MatchTrace] | None] = ContextVar("match_recorder", default=None)

_repr = reprlib.Repr(maxstring=80, maxother=80, maxlist=8, maxtuple=8, maxdict=8)


class ClauseOutcome(StrEnum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class ClauseEvent:
    """What happened to one clause of a traced expression."""

    index: int
    pattern: str
    outcome: ClauseOutcome


@dataclass(slots=True)
class MatchTrace:
    """Clause-by-clause record of one match expression."""

    kind: str
    subject: str
    events: list[ClauseEvent] = field(default_factory=list)
    result: str | None = None

    @property
    def resolved(self) -> bool:
        return self.winner is not None

    @property
    def winner(self) -> int | None:
        """Index of the clause that accepted the subject, if any."""
        for event in self.events:
            if event.outcome is ClauseOutcome.ACCEPTED:
                return event.index
        return None

    def count(self, outcome: ClauseOutcome) -> int:
        return sum(1 for event in self.events if event.outcome is outcome)

    def record(self, index: int, pattern: str, outcome: ClauseOutcome) -> None:
        self.events.append(ClauseEvent(index=index, pattern=pattern, outcome=outcome))

    def record_result(self, value: object) -> None:
        self.result = _repr.repr(value)


def start_trace(kind: str, subject: object) -> MatchTrace | None:
    """Register a new trace with the active recorder, if there is one."""
    recorder = _recorder_var.get()
    if recorder is None:
        return None
    trace = MatchTrace(kind=kind, subject=_repr.repr(subject))
    recorder.append(trace)
    return trace


@contextmanager
def tracing() -> Iterator[list[MatchTrace]]:
    """Record every match expression created inside the block.

    Nested blocks record into the innermost list only.
    """
    traces: list[MatchTrace] = []
    token = _recorder_var.set(traces)
    try:
        yield traces
    finally:
        _recorder_var.reset(token)
