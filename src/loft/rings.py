"""Per-ring panel widths, half-circumferences and radii."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from panels.model import Panel

from .config import BuildConfig
from .errors import LoftBuildError
from .seams import SeamPolyline, build_seam_polyline, sample_at_y

__all__ = [
    "CIRCUMFERENCE_EPS",
    "PanelSeams",
    "RADIUS_EPS",
    "RingMetrics",
    "build_panel_seams",
    "compute_ring_metrics",
    "estimate_waist_y",
    "resolve_metrics",
    "resolve_order",
]

#: Below this half-circumference a ring cannot act as an angular denominator.
CIRCUMFERENCE_EPS = 1e-9
#: Below this half-circumference a ring borrows the waist radius.
RADIUS_EPS = 1e-6


def estimate_waist_y(panel: Panel) -> float:
    """Average Y of the waist curve's two side anchors."""

    waist = panel.waist
    if waist is None or len(waist) < 2:
        raise LoftBuildError(f"Panel {panel.panel_id}: WAIST curve missing or too short.")
    return 0.5 * (waist.first.y + waist.last.y)


@dataclass(frozen=True, slots=True)
class PanelSeams:
    """Left/right seam polylines of a panel together with its waist height."""

    panel_id: str
    waist_y: float
    left: SeamPolyline | None
    right: SeamPolyline | None

    def sample_span(self, y: float) -> tuple[float, float] | None:
        """Return ``(left_x, right_x)`` at *y* or ``None`` when either seam misses."""

        left = sample_at_y(self.left, y)
        right = sample_at_y(self.right, y)
        if left is None or right is None:
            return None
        return (left.x, right.x)


def build_panel_seams(panel: Panel) -> PanelSeams:
    waist_y = estimate_waist_y(panel)
    return PanelSeams(
        panel_id=panel.panel_id,
        waist_y=waist_y,
        left=build_seam_polyline(panel.seam_to_prev_up, panel.seam_to_prev_down, waist_y),
        right=build_seam_polyline(panel.seam_to_next_up, panel.seam_to_next_down, waist_y),
    )


def resolve_order(panel_count: int, order: Sequence[int] | None) -> tuple[int, ...]:
    """Validate an explicit panel ordering, defaulting to input order."""

    if order is None:
        return tuple(range(panel_count))
    resolved = tuple(int(idx) for idx in order)
    if sorted(resolved) != list(range(panel_count)):
        raise ValueError(f"Panel order must be a permutation of 0..{panel_count - 1}, got {list(resolved)}.")
    return resolved


@dataclass(frozen=True, slots=True)
class RingMetrics:
    """Dense width tables shared by the mesh builder and the outline projector.

    ``width``, ``valid`` and ``s_start`` are indexed ``[ring, panel]`` with
    panels in input order; ``s_start`` accumulates along ``order``.
    """

    offsets_mm: tuple[float, ...]
    order: tuple[int, ...]
    width: np.ndarray = field(repr=False)
    valid: np.ndarray = field(repr=False)
    s_start: np.ndarray = field(repr=False)
    c_half: np.ndarray = field(repr=False)
    radius: np.ndarray = field(repr=False)
    reference_ring: int
    waist_radius: float

    @property
    def ring_count(self) -> int:
        return len(self.offsets_mm)

    @property
    def panel_count(self) -> int:
        return int(self.width.shape[1])

    def denominator(self, ring: int) -> float:
        c_half = float(self.c_half[ring])
        return c_half if c_half > CIRCUMFERENCE_EPS else float(self.c_half[self.reference_ring])

    def to_dict(self) -> dict[str, object]:
        return {
            "offsets_mm": list(self.offsets_mm),
            "order": list(self.order),
            "reference_ring": self.reference_ring,
            "waist_radius": self.waist_radius,
            "c_half": self.c_half.tolist(),
            "radius": self.radius.tolist(),
            "width": self.width.tolist(),
            "valid": self.valid.tolist(),
        }


def compute_ring_metrics(
    panels: Sequence[Panel],
    config: BuildConfig,
    *,
    order: Sequence[int] | None = None,
    seams: Sequence[PanelSeams] | None = None,
) -> RingMetrics:
    """Measure every panel at every ring and derive half-circumferences and radii."""

    panel_count = len(panels)
    if panel_count == 0:
        raise ValueError("At least one panel is required to compute ring metrics.")
    resolved_order = resolve_order(panel_count, order)
    if seams is None:
        seams = [build_panel_seams(panel) for panel in panels]

    rings = config.ring_count
    width = np.zeros((rings, panel_count), dtype=float)
    valid = np.zeros((rings, panel_count), dtype=bool)

    for k, offset in enumerate(config.offsets_mm):
        for i, panel_seams in enumerate(seams):
            span = panel_seams.sample_span(panel_seams.waist_y - offset)
            if span is None:
                continue
            valid[k, i] = True
            width[k, i] = abs(span[1] - span[0])

    c_half = np.where(valid, width, 0.0).sum(axis=1)

    reference = config.reference_ring
    c_half_waist = float(c_half[reference])
    if c_half_waist <= CIRCUMFERENCE_EPS:
        raise LoftBuildError("Waist half-circumference is zero.")
    waist_radius = c_half_waist / math.pi

    radius = np.where(c_half > RADIUS_EPS, c_half / math.pi, waist_radius)

    s_start = np.zeros((rings, panel_count), dtype=float)
    for k in range(rings):
        cum = 0.0
        for i in resolved_order:
            s_start[k, i] = cum
            if valid[k, i]:
                cum += width[k, i]

    return RingMetrics(
        offsets_mm=config.offsets_mm,
        order=resolved_order,
        width=width,
        valid=valid,
        s_start=s_start,
        c_half=c_half,
        radius=radius,
        reference_ring=reference,
        waist_radius=waist_radius,
    )


def resolve_metrics(
    panels: Sequence[Panel],
    config: BuildConfig,
    *,
    order: Sequence[int] | None = None,
    metrics: RingMetrics | None = None,
) -> RingMetrics:
    """Return *metrics* after checking it matches the inputs, or compute it."""

    if metrics is None:
        return compute_ring_metrics(panels, config, order=order)
    if metrics.offsets_mm != config.offsets_mm:
        raise ValueError(
            f"Ring metrics offsets {list(metrics.offsets_mm)} do not match config offsets {list(config.offsets_mm)}."
        )
    if metrics.panel_count != len(panels):
        raise ValueError(f"Ring metrics cover {metrics.panel_count} panels, received {len(panels)}.")
    if order is not None and resolve_order(len(panels), order) != metrics.order:
        raise ValueError(f"Panel order {list(order)} does not match the ring metrics order {list(metrics.order)}.")
    return metrics
