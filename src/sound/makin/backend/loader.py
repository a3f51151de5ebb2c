"""
Module Registry Loader

Imports every Python file in a directory and hands each module to a registration
callback. Both the route mount adapter and the model registration adapter are built on
this.

Loading is best-effort: a file that fails to import or register is logged and recorded
in the returned LoadReport, and loading continues with the next file. Callers decide what
a partial load means for them (the server reports it through its readiness endpoint).
"""

import importlib.util
import inspect
import logging
import os
import sys
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

PLUGIN_NAMESPACE = "_makin_plugins"

ApplyFn = Callable[[ModuleType, str], Union[None, Awaitable[Any]]]


@dataclass
class LoadReport:
    """Outcome of loading one directory of modules."""

    directory: str
    loaded: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> Dict[str, Any]:
        return {
            "directory": self.directory,
            "loaded": list(self.loaded),
            "errors": dict(self.errors),
        }


def module_slug(filename: str) -> str:
    """
    Return the identifier derived from a module filename.

    Everything from the first "." on is dropped, so "users.py" and "users.admin.py"
    both yield "users".
    """
    return filename.split(".")[0]


def list_modules(directory: str) -> List[str]:
    """List loadable module filenames in directory, sorted."""
    return sorted(
        filename
        for filename in os.listdir(directory)
        if filename.endswith(".py")
        and not filename.startswith("_")
        and os.path.isfile(os.path.join(directory, filename))
    )


def import_file(path: str) -> ModuleType:
    """Import a Python file by path under a private module namespace."""
    directory, filename = os.path.split(os.path.abspath(path))
    module_name = ".".join(
        [
            PLUGIN_NAMESPACE,
            os.path.basename(directory),
            filename[: -len(".py")].replace(".", "_"),
        ]
    )

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load module from {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


async def load_and_apply(
    directory: str, apply_fn: ApplyFn, report: Optional[LoadReport] = None
) -> LoadReport:
    """
    Import each module in directory and call apply_fn(module, filename) on it.

    Files are processed one at a time in sorted filename order. When apply_fn returns an
    awaitable it is awaited before the next file is imported.

    Args:
        directory: Directory containing the modules to load
        apply_fn: Registration callback, sync or async
        report: Existing report to append to

    Returns:
        LoadReport listing loaded files and errors keyed by filename. A directory that
        cannot be listed is recorded under the directory path itself.
    """
    if report is None:
        report = LoadReport(directory=directory)

    try:
        filenames = list_modules(directory)
    except OSError as e:
        logger.exception("Unable to list modules in %s", directory)
        report.errors[directory] = f"{type(e).__name__}: {e}"
        return report

    for filename in filenames:
        try:
            module = import_file(os.path.join(directory, filename))
            result = apply_fn(module, filename)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.exception("Error loading %s from %s", filename, directory)
            report.errors[filename] = f"{type(e).__name__}: {e}"
            continue

        logger.debug("Loaded %s from %s", filename, directory)
        report.loaded.append(filename)

    return report
