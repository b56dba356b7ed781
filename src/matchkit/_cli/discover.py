"""Locate the function to trace from a script path or a module path.

`get_module_data_from_path` was adapted from `fastapi_cli.discover` of package `fastapi-cli` version 0.0.8 (77e6d1f).
"""

from __future__ import annotations

import importlib
import inspect
import logging
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .config import ModuleTarget, ScriptTarget

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path
    from types import ModuleType

    from .config import TraceTarget

logger = logging.getLogger(__name__)


@dataclass
class ModuleData:
    """Import information for a Python file."""

    module_import_str: str
    extra_sys_path: Path
    module_paths: list[Path]


def get_module_data_from_path(path: Path) -> ModuleData:
    """Get module data from a file path.

    Package directories (those with an __init__.py) above the file become
    part of the import string.
    """
    use_path = path.resolve()
    module_path = use_path
    if use_path.is_file() and use_path.stem == "__init__":
        module_path = use_path.parent
    module_paths = [module_path]
    extra_sys_path = module_path.parent
    for parent in module_path.parents:
        init_path = parent / "__init__.py"
        if init_path.is_file():
            module_paths.insert(0, parent)
            extra_sys_path = parent.parent
        else:
            break

    module_str = ".".join(p.stem for p in module_paths)
    return ModuleData(
        module_import_str=module_str,
        extra_sys_path=extra_sys_path.resolve(),
        module_paths=module_paths,
    )


def _public_functions(module: ModuleType) -> list[str]:
    return [
        name
        for name, obj in vars(module).items()
        if not name.startswith("_") and inspect.isfunction(obj) and obj.__module__ == module.__name__
    ]


def _get_callable(module: ModuleType, name: str) -> Callable[..., Any]:
    if not hasattr(module, name):
        msg = f"Could not find function '{name}' in {module.__name__}"
        raise ValueError(msg)
    func = getattr(module, name)
    if not callable(func):
        msg = f"'{name}' in {module.__name__} is not callable"
        raise TypeError(msg)
    return func


def load_function_from_script(script_path: Path, function_name: str | None = None) -> Callable[..., Any]:
    """Import a script and return one of its functions.

    Without `function_name`, the script must define exactly one public function.

    Raises:
        ImportError: If the module cannot be imported.
        ValueError: If the function cannot be determined.
        TypeError: If the named attribute is not callable.

    """
    module_data = get_module_data_from_path(script_path)
    sys.path.insert(0, str(module_data.extra_sys_path))

    try:
        module = importlib.import_module(module_data.module_import_str)
    except (ImportError, ValueError):
        logger.exception("Import error")
        logger.warning("Ensure all the package directories have an __init__.py file")
        raise

    if function_name:
        return _get_callable(module, function_name)

    candidates = _public_functions(module)
    if len(candidates) != 1:
        msg = (
            f"Found {len(candidates)} public functions in {module_data.module_import_str} "
            f"({', '.join(candidates) or 'none'}), try using --function"
        )
        raise ValueError(msg)
    logger.debug(f"Found function: {candidates[0]}")
    return getattr(module, candidates[0])


def load_function_from_module_path(module_path: str) -> Callable[..., Any]:
    """Return the function named by 'module.path:function'.

    Raises:
        ValueError: If the module path is malformed or the function is missing.
        TypeError: If the named attribute is not callable.

    """
    module_name, sep, function_name = module_path.partition(":")
    if not sep or not module_name or not function_name:
        msg = "Module path must be in format 'module.path:function'"
        raise ValueError(msg)

    module = importlib.import_module(module_name)
    return _get_callable(module, function_name)


def load_function_from_target(target: TraceTarget) -> Callable[..., Any]:
    """Load the function described by a configured target."""
    match target:
        case ScriptTarget(script=script, function=function):
            return load_function_from_script(script, function)
        case ModuleTarget(module_path=module_path):
            return load_function_from_module_path(module_path)
