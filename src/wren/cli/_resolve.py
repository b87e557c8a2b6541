"""App import resolution for ``wren routes`` and ``wren run``."""

import importlib
import importlib.util
import os
import sys
from pathlib import Path
from types import ModuleType

from wren.app import App


def _load_module(target: str) -> ModuleType:
    """Import *target* as a dotted module name or a ``.py`` file path."""
    if target.endswith(".py"):
        path = Path(target).resolve()
        if not path.is_file():
            msg = f"No module file at {target!r}"
            raise ModuleNotFoundError(msg)
        spec = importlib.util.spec_from_file_location(path.stem, path)
        assert spec is not None
        assert spec.loader is not None
        module = importlib.util.module_from_spec(spec)
        sys.modules[path.stem] = module
        spec.loader.exec_module(module)
        return module

    # Console scripts do not put the working directory on sys.path.
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    return importlib.import_module(target)


def resolve_app(import_string: str) -> App:
    """Resolve ``"module:attr"`` or ``"path/to/app.py:attr"`` to an App.

    The attribute defaults to ``app``. A callable that is not an App is
    treated as a factory and called with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a wren ``App``.
    """
    target, _, attr_name = import_string.rpartition(":")
    if not target:
        target, attr_name = attr_name, "app"

    obj = getattr(_load_module(target), attr_name)

    if callable(obj) and not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"App factory {import_string!r} failed: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a wren.App instance"
        raise TypeError(msg)

    return obj
