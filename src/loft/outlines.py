"""Re-project real top/bottom edge curves onto the lofted surface."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from panels.model import Panel, Point3D, require_unique_panel_ids

from .config import BuildConfig
from .polyline import PolylineArray, as_polyline_array, sample_by_arc_length
from .rings import PanelSeams, build_panel_seams, resolve_order

__all__ = [
    "DEFAULT_OUTLINE_SAMPLES",
    "build_edge_outlines",
    "build_panel_edge_outline",
    "orient_edge_left_to_right",
]

DEFAULT_OUTLINE_SAMPLES = 200
_MIN_WIDTH = 1e-6


def orient_edge_left_to_right(points: PolylineArray, seams: PanelSeams) -> PolylineArray:
    """Reverse *points* when they run from the right seam toward the left one."""

    first = points[0]
    last = points[-1]
    span0 = seams.sample_span(float(first[1]))
    span1 = seams.sample_span(float(last[1]))
    if span0 is None or span1 is None:
        return points

    mid0 = 0.5 * (span0[0] + span0[1])
    mid1 = 0.5 * (span1[0] + span1[1])
    if (first[0] - mid0) > (last[0] - mid1):
        return points[::-1].copy()
    return points


def _normalised_width(seams: PanelSeams, y: float) -> float | None:
    span = seams.sample_span(y)
    if span is None:
        return None
    width = abs(span[1] - span[0])
    if width < _MIN_WIDTH:
        return None
    return width


def _flush(out: list[list[Point3D]], current: list[Point3D]) -> list[Point3D]:
    if len(current) >= 2:
        out.append(current)
    return []


def build_panel_edge_outline(
    panel_index: int,
    edge_points: PolylineArray | None,
    all_seams: Sequence[PanelSeams],
    config: BuildConfig,
    samples_per_panel: int,
    *,
    order: Sequence[int] | None = None,
) -> list[list[Point3D]]:
    """Project one panel edge; each invalid sample splits the output into runs."""

    if samples_per_panel < 2:
        raise ValueError("samples_per_panel must be >= 2")
    if edge_points is None or len(edge_points) < 2:
        return []

    resolved_order = resolve_order(len(all_seams), order)
    position = resolved_order.index(panel_index)
    before = set(resolved_order[:position])

    own = all_seams[panel_index]
    oriented = orient_edge_left_to_right(edge_points, own)

    out: list[list[Point3D]] = []
    current: list[Point3D] = []
    for fraction in np.linspace(0.0, 1.0, samples_per_panel):
        cp = sample_by_arc_length(oriented, float(fraction))
        if cp is None:
            current = _flush(out, current)
            continue

        y = cp.y
        own_width = _normalised_width(own, y)
        if own_width is None:
            current = _flush(out, current)
            continue

        cum = 0.0
        circumference = 0.0
        for j, seams in enumerate(all_seams):
            width = _normalised_width(seams, y)
            if width is None:
                continue
            if j in before:
                cum += width
            circumference += width

        if circumference <= _MIN_WIDTH:
            current = _flush(out, current)
            continue

        s_pos = cum + float(fraction) * own_width
        theta = config.theta_start_rad + (s_pos / circumference) * math.pi
        radius = circumference / math.pi
        height = -(own.waist_y - y) * config.scale

        current.append(
            Point3D(
                radius * math.cos(theta) * config.scale,
                height,
                radius * math.sin(theta) * config.scale,
            )
        )

    _flush(out, current)
    return out


def build_edge_outlines(
    panels: Sequence[Panel],
    config: BuildConfig,
    *,
    top_edge: bool,
    samples_per_panel: int = DEFAULT_OUTLINE_SAMPLES,
    order: Sequence[int] | None = None,
) -> dict[str, list[list[Point3D]]]:
    """Re-project the top (or bottom) edge of every panel.

    Curves are walked by arc length rather than by ring, and the panel-local
    fraction is the arc-length fraction itself, so edges that are not
    monotonic in X still land inside their panel's window.
    """

    if samples_per_panel < 2:
        raise ValueError("samples_per_panel must be >= 2")
    if not panels:
        return {}
    require_unique_panel_ids(panels)

    all_seams = [build_panel_seams(panel) for panel in panels]
    outlines: dict[str, list[list[Point3D]]] = {}
    for i, panel in enumerate(panels):
        outlines[panel.panel_id] = build_panel_edge_outline(
            i,
            as_polyline_array(panel.edge(top_edge)),
            all_seams,
            config,
            samples_per_panel,
            order=order,
        )
    return outlines
