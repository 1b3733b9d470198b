"""Continuous seam polylines and horizontal height sampling."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from panels.model import Curve, Point2D

from .polyline import PolylineArray, as_polyline_array, cumulative_lengths

__all__ = [
    "SeamHit",
    "SeamPolyline",
    "build_seam_polyline",
    "intersect_horizontal",
    "pick_closest_to_waist",
    "sample_at_y",
]

_JUNCTION_EPS = 1e-6
_HORIZONTAL_EPS = 1e-12


@dataclass(frozen=True, slots=True)
class SeamPolyline:
    """Seam side merged across the waist, with the junction's arc-length position."""

    points: PolylineArray = field(repr=False)
    waist_param: float
    cumulative: np.ndarray = field(repr=False)

    @classmethod
    def from_points(cls, points: PolylineArray, waist_param: float) -> "SeamPolyline":
        return cls(points=points, waist_param=float(waist_param), cumulative=cumulative_lengths(points))

    @property
    def length(self) -> float:
        return float(self.cumulative[-1])


@dataclass(frozen=True, slots=True)
class SeamHit:
    """Crossing of a seam with a horizontal line."""

    x: float
    y: float
    param: float


def _orient_end_at_waist(points: PolylineArray, waist_y: float) -> PolylineArray:
    if abs(points[-1, 1] - waist_y) <= abs(points[0, 1] - waist_y):
        return points
    return points[::-1].copy()


def _orient_start_at_waist(points: PolylineArray, waist_y: float) -> PolylineArray:
    if abs(points[0, 1] - waist_y) <= abs(points[-1, 1] - waist_y):
        return points
    return points[::-1].copy()


def build_seam_polyline(
    up: Curve | PolylineArray | None,
    down: Curve | PolylineArray | None,
    waist_y: float,
) -> SeamPolyline | None:
    """Merge the up and down halves of one seam side around the waist point.

    The up half is oriented to end at the waist and the down half to start
    there. A missing half yields the other half alone; with both halves
    missing the side has no polyline and ``None`` is returned.
    """

    up_pts = as_polyline_array(up)
    down_pts = as_polyline_array(down)

    if up_pts is None and down_pts is None:
        return None
    if down_pts is None:
        oriented = _orient_end_at_waist(up_pts, waist_y)
        return SeamPolyline.from_points(oriented, float(cumulative_lengths(oriented)[-1]))
    if up_pts is None:
        return SeamPolyline.from_points(_orient_start_at_waist(down_pts, waist_y), 0.0)

    up_oriented = _orient_end_at_waist(up_pts, waist_y)
    down_oriented = _orient_start_at_waist(down_pts, waist_y)

    junction = up_oriented[-1]
    if np.all(np.abs(junction - down_oriented[0]) < _JUNCTION_EPS):
        down_oriented = down_oriented[1:]
    merged = np.vstack((up_oriented, down_oriented))

    waist_param = float(cumulative_lengths(up_oriented)[-1])
    return SeamPolyline.from_points(merged, waist_param)


def intersect_horizontal(seam: SeamPolyline, target_y: float) -> list[SeamHit]:
    """Return every crossing of *seam* with ``y == target_y``.

    Horizontal segments contribute no crossing. Each hit carries its
    arc-length position along the seam.
    """

    points = seam.points
    start = points[:-1]
    end = points[1:]
    dy = end[:, 1] - start[:, 1]
    low = np.minimum(start[:, 1], end[:, 1])
    high = np.maximum(start[:, 1], end[:, 1])

    mask = (np.abs(dy) >= _HORIZONTAL_EPS) & (target_y >= low) & (target_y <= high)
    if not mask.any():
        return []

    indices = np.nonzero(mask)[0]
    t = (target_y - start[indices, 1]) / dy[indices]
    xs = start[indices, 0] + t * (end[indices, 0] - start[indices, 0])
    seg_lengths = seam.cumulative[indices + 1] - seam.cumulative[indices]
    params = seam.cumulative[indices] + t * seg_lengths

    return [
        SeamHit(x=float(x), y=float(target_y), param=float(param))
        for x, param in zip(xs, params)
    ]


def pick_closest_to_waist(hits: list[SeamHit], waist_param: float) -> SeamHit | None:
    """Choose the hit nearest (in arc length) to the waist junction; first wins ties."""

    if not hits:
        return None
    best = hits[0]
    best_dist = abs(best.param - waist_param)
    for hit in hits[1:]:
        dist = abs(hit.param - waist_param)
        if dist < best_dist:
            best = hit
            best_dist = dist
    return best


def sample_at_y(seam: SeamPolyline | None, target_y: float) -> Point2D | None:
    """Sample *seam* at height *target_y*; ``None`` when the seam is absent or not crossed."""

    if seam is None:
        return None
    hit = pick_closest_to_waist(intersect_horizontal(seam, target_y), seam.waist_param)
    if hit is None:
        return None
    return Point2D(hit.x, hit.y)
