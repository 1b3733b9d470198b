"""Arc-length helpers for 2-D polylines."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from panels.model import Curve, Point2D

PolylineArray = np.ndarray

__all__ = [
    "as_polyline_array",
    "cumulative_lengths",
    "sample_by_arc_length",
]


def as_polyline_array(
    points: Curve | Sequence[Point2D] | Iterable[Sequence[float]] | np.ndarray | None,
) -> PolylineArray | None:
    """Convert *points* to an ``(N, 2)`` float array, or ``None`` when absent.

    Fewer than two points cannot describe a segment and count as absent.
    """

    if points is None:
        return None
    if isinstance(points, Curve):
        points = points.points
    if isinstance(points, np.ndarray):
        array = np.asarray(points, dtype=float)
    else:
        rows = [p.as_tuple() if isinstance(p, Point2D) else (float(p[0]), float(p[1])) for p in points]
        array = np.asarray(rows, dtype=float).reshape(-1, 2)
    if array.ndim != 2 or array.shape[1] != 2:
        raise ValueError("Polyline points must be shaped (N, 2).")
    if array.shape[0] < 2:
        return None
    return array


def cumulative_lengths(points: PolylineArray) -> np.ndarray:
    """Return the arc length at every vertex, starting at ``0.0``."""

    segments = np.linalg.norm(np.diff(points, axis=0), axis=1)
    return np.concatenate(([0.0], np.cumsum(segments)))


def sample_by_arc_length(points: PolylineArray | None, fraction: float) -> Point2D | None:
    """Sample *points* at normalised arc length ``fraction`` in ``[0, 1]``."""

    if points is None or len(points) < 2:
        return None
    if fraction <= 0.0:
        return Point2D(float(points[0, 0]), float(points[0, 1]))
    if fraction >= 1.0:
        return Point2D(float(points[-1, 0]), float(points[-1, 1]))

    cumulative = cumulative_lengths(points)
    total = float(cumulative[-1])
    if total < 1e-9:
        return Point2D(float(points[0, 0]), float(points[0, 1]))

    target = fraction * total
    for idx in range(len(points) - 1):
        seg = float(cumulative[idx + 1] - cumulative[idx])
        if seg < 1e-12:
            continue
        if cumulative[idx] + seg >= target:
            u = (target - float(cumulative[idx])) / seg
            start = points[idx]
            end = points[idx + 1]
            return Point2D(
                float(start[0] + u * (end[0] - start[0])),
                float(start[1] + u * (end[1] - start[1])),
            )
    return Point2D(float(points[-1, 0]), float(points[-1, 1]))
