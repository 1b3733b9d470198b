"""Angular windows assigned to each panel on each ring."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .config import BuildConfig
from .rings import RingMetrics

__all__ = ["AngularWindow", "allocate_windows", "panel_window"]


@dataclass(frozen=True, slots=True)
class AngularWindow:
    """Arc ``[theta0, theta1]`` a panel occupies on one ring.

    ``height`` is already in world units. ``degraded`` marks panels that had
    no sample at the ring and were collapsed onto the reference ring at the
    waist plane.
    """

    theta0: float
    theta1: float
    radius: float
    height: float
    degraded: bool = False

    def theta_at(self, fraction: float) -> float:
        return self.theta0 + (self.theta1 - self.theta0) * fraction


def _theta_span(metrics: RingMetrics, config: BuildConfig, ring: int, panel: int) -> tuple[float, float]:
    denom = metrics.denominator(ring)
    s0 = float(metrics.s_start[ring, panel])
    width = float(metrics.width[ring, panel]) if metrics.valid[ring, panel] else 0.0
    theta0 = config.theta_start_rad + (s0 / denom) * math.pi
    theta1 = config.theta_start_rad + ((s0 + width) / denom) * math.pi
    return theta0, theta1


def panel_window(metrics: RingMetrics, config: BuildConfig, ring: int, panel: int) -> AngularWindow:
    if metrics.valid[ring, panel]:
        theta0, theta1 = _theta_span(metrics, config, ring, panel)
        return AngularWindow(
            theta0=theta0,
            theta1=theta1,
            radius=float(metrics.radius[ring]),
            height=-metrics.offsets_mm[ring] * config.scale,
        )

    theta0, theta1 = _theta_span(metrics, config, metrics.reference_ring, panel)
    return AngularWindow(
        theta0=theta0,
        theta1=theta1,
        radius=metrics.waist_radius,
        height=0.0,
        degraded=True,
    )


def allocate_windows(metrics: RingMetrics, config: BuildConfig) -> list[list[AngularWindow]]:
    """Return windows indexed ``[ring][panel]``."""

    return [
        [panel_window(metrics, config, k, i) for i in range(metrics.panel_count)]
        for k in range(metrics.ring_count)
    ]
