"""Test helper utilities exposed for import convenience."""
from .panels import rectangle_panel, two_panel_pattern

__all__ = [
    "rectangle_panel",
    "two_panel_pattern",
]
