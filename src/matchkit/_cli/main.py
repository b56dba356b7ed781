import ast
import logging
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from matchkit._errors import MatchError
from matchkit._trace import MatchTrace, tracing

from .config import ConfigError, MatchkitConfig, ModuleTarget, ScriptTarget, get_config
from .discover import load_function_from_module_path, load_function_from_script, load_function_from_target
from .render import render_trace_summary, render_trace_table

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Matchkit CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _looks_like_target(value: str) -> bool:
    return ":" in value or value.endswith(".py")


def _parse_argument(raw: str) -> object:
    """Interpret a command line argument as a Python literal, else keep the string."""
    try:
        return ast.literal_eval(raw)
    except (ValueError, SyntaxError):
        return raw


def _load_function(
    target: str | None,
    config: MatchkitConfig,
    function_name: str | None,
) -> Callable[..., Any]:
    """Load the function to trace from the CLI target or the config."""
    if target is not None:
        if ":" in target:
            err_console.print(f"[cyan]Loading function from module:[/cyan] {target}")
            return load_function_from_module_path(target)
        script_path = Path(target)
        err_console.print(f"[cyan]Loading function from script:[/cyan] {script_path}")
        return load_function_from_script(script_path, function_name)

    configured = config.target
    match configured:
        case ScriptTarget(script=script):
            if function_name:
                configured = replace(configured, function=function_name)
            err_console.print(f"[cyan]Loading function from script (from config):[/cyan] {script}")
        case ModuleTarget(module_path=module_path):
            err_console.print(f"[cyan]Loading function from module (from config):[/cyan] {module_path}")
        case None:
            msg = (
                "No target specified. "
                "Provide a target argument or configure [tool.matchkit].target in pyproject.toml."
            )
            raise typer.BadParameter(msg)

    return load_function_from_target(configured)


@app.command()
def trace(  # noqa: PLR0913
    target: Annotated[
        str | None,
        typer.Argument(help="Module path (e.g., examples.sqrt:mysqrt) or path to a Python script"),
    ] = None,
    args: Annotated[
        list[str] | None,
        typer.Argument(help="Arguments for the function, parsed as Python literals when possible"),
    ] = None,
    *,
    function: Annotated[
        str | None,
        typer.Option("-f", "--function", help="Name of the function (for script paths only)"),
    ] = None,
    show_skipped: Annotated[
        bool | None,
        typer.Option("--show-skipped/--hide-skipped", help="List clauses skipped after a match resolved"),
    ] = None,
    summary: Annotated[
        bool,
        typer.Option("--summary", help="Print totals after the trace table"),
    ] = False,
) -> None:
    """Call a function and show which clause of each match expression fired."""
    err_console.print()

    try:
        config = get_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    raw_args = list(args or [])
    if target is not None and not _looks_like_target(target) and config.target is not None:
        # Only arguments were given; the function comes from the config.
        raw_args.insert(0, target)
        target = None

    try:
        func = _load_function(target, config, function)
    except (typer.BadParameter, ImportError, ValueError, TypeError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    arguments = [_parse_argument(raw) for raw in raw_args]
    name = getattr(func, "__qualname__", repr(func))
    err_console.print(f"[cyan]Calling:[/cyan] {escape(name)}({escape(', '.join(repr(a) for a in arguments))})")
    err_console.print()

    failure: MatchError | None = None
    traces: list[MatchTrace]
    with tracing() as traces:
        try:
            result = func(*arguments)
        except MatchError as e:
            logger.debug("Match failure while tracing %s", name, exc_info=True)
            failure = e

    render_trace_table(
        traces,
        out_console,
        show_skipped=config.show_skipped if show_skipped is None else show_skipped,
        subject_width=config.subject_width,
    )
    if summary:
        out_console.print()
        render_trace_summary(traces, out_console)

    out_console.print()
    if failure is not None:
        err_console.print(f"[red]✗ {escape(str(failure))}[/red]")
        raise typer.Exit(code=1)

    out_console.print(f"[green]Result:[/green] {escape(repr(result))}")


def main() -> None:
    app()
