"""Half-corset ring loft: command line app and pipelines."""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
