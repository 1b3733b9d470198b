"""Pipeline entry points for lofting corset patterns."""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple

__all__ = [
    "LoftJob",
    "LoftResult",
    "add_build_arguments",
    "build_loft",
    "build_loft_main",
    "format_ring_table",
    "load_job",
    "run_loft",
]

_LAZY_IMPORTS: Dict[str, Tuple[str, str]] = {
    "LoftJob": ("corsetloft.pipelines.build_loft", "LoftJob"),
    "LoftResult": ("corsetloft.pipelines.build_loft", "LoftResult"),
    "build_loft": ("corsetloft.pipelines.build_loft", "build_loft"),
    "build_loft_main": ("corsetloft.pipelines.build_loft", "main"),
    "add_build_arguments": ("corsetloft.pipelines.build_loft", "add_build_arguments"),
    "format_ring_table": ("corsetloft.pipelines.build_loft", "format_ring_table"),
    "load_job": ("corsetloft.pipelines.build_loft", "load_job"),
    "run_loft": ("corsetloft.pipelines.build_loft", "run_loft"),
}


def __getattr__(name: str) -> Any:  # pragma: no cover - simple delegation
    try:
        module_name, attribute = _LAZY_IMPORTS[name]
    except KeyError as exc:  # pragma: no cover - attribute errors fall through
        raise AttributeError(f"module 'corsetloft.pipelines' has no attribute {name!r}") from exc

    module = import_module(module_name)
    value = getattr(module, attribute)
    globals()[name] = value
    return value


def __dir__() -> list[str]:  # pragma: no cover - interactive helper
    return sorted(__all__)
