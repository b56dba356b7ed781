"""Configuration loading from the [tool.matchkit] table of pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast


class ConfigError(Exception):
    """Error in matchkit configuration."""


@dataclass(slots=True, frozen=True)
class ScriptTarget:
    """Function defined in a script, optionally named."""

    script: Path
    function: str | None = None


@dataclass(slots=True, frozen=True)
class ModuleTarget:
    """Function given as 'module.path:function'."""

    module_path: str


TraceTarget = ScriptTarget | ModuleTarget

DEFAULT_SUBJECT_WIDTH = 60


@dataclass(slots=True, frozen=True)
class MatchkitConfig:
    """Settings for the `matchkit` command.

    Relative script paths are resolved from the directory containing pyproject.toml.
    """

    target: TraceTarget | None = None
    show_skipped: bool = False
    subject_width: int = DEFAULT_SUBJECT_WIDTH
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Return the nearest pyproject.toml at or above `start_dir` (default: cwd)."""
    current = (start_dir or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def parse_target(value: object, project_root: Path | None = None) -> TraceTarget:
    """Parse a trace target given as a string or a `{ script, function }` table.

    Raises:
        ConfigError: If the value has neither form.

    """
    if isinstance(value, str):
        if ":" not in value:
            msg = f"Invalid target '{value}'. Expected format: 'module.path:function'"
            raise ConfigError(msg)
        return ModuleTarget(module_path=value)

    if isinstance(value, dict):
        table = cast("dict[str, object]", value)
        script_value = table.get("script")
        if not isinstance(script_value, str):
            msg = "Invalid [tool.matchkit].target.script: expected string path"
            raise ConfigError(msg)
        script = Path(script_value)
        if project_root is not None and not script.is_absolute():
            script = project_root / script

        function = table.get("function")
        if function is not None and not isinstance(function, str):
            msg = "Invalid [tool.matchkit].target.function: expected string"
            raise ConfigError(msg)
        return ScriptTarget(script=script, function=function)

    msg = "Invalid [tool.matchkit].target. Expected 'module.path:function' or a table with a 'script' key."
    raise ConfigError(msg)


def _get_bool(section: dict[str, Any], key: str, default: bool) -> bool:  # noqa: FBT001
    value = section.get(key, default)
    if not isinstance(value, bool):
        msg = f"Invalid [tool.matchkit].{key}: expected true or false"
        raise ConfigError(msg)
    return value


def _get_positive_int(section: dict[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        msg = f"Invalid [tool.matchkit].{key}: expected a positive integer"
        raise ConfigError(msg)
    return value


def load_config(pyproject_path: Path) -> MatchkitConfig:
    """Load and validate [tool.matchkit] from `pyproject_path`.

    Raises:
        ConfigError: If the file is not valid TOML or a setting is invalid.

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("matchkit", {})
    if not isinstance(section, dict):
        msg = "Invalid [tool.matchkit]: expected a table"
        raise ConfigError(msg)

    target = parse_target(section["target"], project_root) if "target" in section else None

    return MatchkitConfig(
        target=target,
        show_skipped=_get_bool(section, "show-skipped", default=False),
        subject_width=_get_positive_int(section, "subject-width", DEFAULT_SUBJECT_WIDTH),
        project_root=project_root,
    )


def get_config() -> MatchkitConfig:
    """Load the configuration of the current project.

    Returns an empty config if there is no pyproject.toml or no [tool.matchkit] table.
    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return MatchkitConfig()
    return load_config(pyproject_path)
