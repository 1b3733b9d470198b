"""Flat-pattern panel model and naming conventions."""

from __future__ import annotations

from .model import Curve, CurveSlot, Panel, Point2D, Point3D, require_unique_panel_ids
from .topology import PanelId, PanelTopology, panels_from_curve_map

__all__ = [
    "Curve",
    "CurveSlot",
    "Panel",
    "PanelId",
    "PanelTopology",
    "Point2D",
    "Point3D",
    "panels_from_curve_map",
    "require_unique_panel_ids",
]
