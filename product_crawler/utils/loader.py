from __future__ import annotations

import importlib
from typing import Any


def load_symbol(dotted: str) -> Any:
    """
    Resolve an engine or exporter class from a dotted path.
    Accepts "package.module:ClassName" and "package.module.ClassName".
    Raises ImportError when the module or attribute cannot be found.
    """
    if ":" in dotted:
        module_name, symbol_name = dotted.split(":", 1)
    elif "." in dotted:
        module_name, symbol_name = dotted.rsplit(".", 1)
    else:
        raise ImportError(f"not a dotted path: {dotted!r}")

    module = importlib.import_module(module_name)
    try:
        return getattr(module, symbol_name)
    except AttributeError as exc:
        raise ImportError(f"module {module_name!r} has no attribute {symbol_name!r}") from exc
