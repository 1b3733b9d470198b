"""Exceptions raised by the ring-loft engine."""

from __future__ import annotations

__all__ = ["LoftBuildError"]


class LoftBuildError(RuntimeError):
    """Raised when panel data cannot support any radius or angular window."""
