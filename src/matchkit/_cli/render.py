"""Rendering of recorded match traces."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from matchkit._trace import ClauseOutcome

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import Console

    from matchkit._trace import ClauseEvent, MatchTrace


def _outcome_style(outcome: ClauseOutcome) -> str:
    match outcome:
        case ClauseOutcome.ACCEPTED:
            return "green"
        case ClauseOutcome.REJECTED:
            return "red"
        case ClauseOutcome.SKIPPED:
            return "dim"


def _outcome_symbol(outcome: ClauseOutcome) -> str:
    match outcome:
        case ClauseOutcome.ACCEPTED:
            return "✓"
        case ClauseOutcome.REJECTED:
            return "✗"
        case ClauseOutcome.SKIPPED:
            return "·"


def _format_event(event: ClauseEvent) -> str:
    style = _outcome_style(event.outcome)
    return f"[{style}]{_outcome_symbol(event.outcome)} {event.index}: {escape(event.pattern)}[/{style}]"


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: max(width - 3, 0)] + "..."


def format_clauses(trace: MatchTrace, *, show_skipped: bool = False) -> str:
    """Format the clause events of one trace, one per line."""
    events = [e for e in trace.events if show_skipped or e.outcome is not ClauseOutcome.SKIPPED]
    lines = [_format_event(e) for e in events]
    skipped = trace.count(ClauseOutcome.SKIPPED)
    if skipped and not show_skipped:
        lines.append(f"[dim]({skipped} skipped)[/dim]")
    return "\n".join(lines) if lines else "[dim]-[/dim]"


def render_trace_table(
    traces: Sequence[MatchTrace],
    console: Console,
    *,
    show_skipped: bool = False,
    subject_width: int = 60,
) -> None:
    """Print one row per traced match expression.

    Args:
        traces: Recorded traces, in creation order.
        console: Rich console to print to.
        show_skipped: If True, list clauses skipped after resolution.
        subject_width: Maximum width of the subject and result columns.

    """
    if not traces:
        console.print("[dim]No match expressions were evaluated[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind")
    table.add_column("Subject")
    table.add_column("Clauses")
    table.add_column("Result")

    for number, trace in enumerate(traces):
        result = (
            escape(_truncate(trace.result or "", subject_width))
            if trace.resolved
            else "[red]unresolved[/red]"
        )
        table.add_row(
            str(number),
            trace.kind,
            escape(_truncate(trace.subject, subject_width)),
            format_clauses(trace, show_skipped=show_skipped),
            result,
        )

    console.print(table)


def render_trace_summary(traces: Sequence[MatchTrace], console: Console) -> None:
    """Print totals over all traces."""
    resolved = sum(1 for t in traces if t.resolved)
    summary_lines = [
        f"Match expressions: {len(traces)}",
        f"[green]✓ Resolved:[/green] {resolved}",
        f"[red]✗ Unresolved:[/red] {len(traces) - resolved}",
        f"Clauses evaluated: {sum(len(t.events) - t.count(ClauseOutcome.SKIPPED) for t in traces)}",
        f"[dim]Clauses skipped: {sum(t.count(ClauseOutcome.SKIPPED) for t in traces)}[/dim]",
    ]
    console.print(Panel("\n".join(summary_lines), title="Summary", border_style="cyan"))
