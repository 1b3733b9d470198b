"""Build configuration for the ring loft."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

__all__ = [
    "BuildConfig",
    "DEFAULT_OFFSETS_MM",
    "DEFAULT_PANEL_SUBDIV",
    "DEFAULT_THETA_START_RAD",
]

DEFAULT_OFFSETS_MM: tuple[float, ...] = (-120.0, -80.0, -40.0, 0.0, 40.0, 80.0, 120.0)
DEFAULT_THETA_START_RAD = -math.pi / 2.0
DEFAULT_PANEL_SUBDIV = 8


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Ring offsets and angular layout controlling a loft build.

    Attributes
    ----------
    offsets_mm:
        Signed heights relative to each panel's waist line. Positive offsets
        sit above the waist. The offset with the smallest magnitude is the
        reference ring.
    theta_start_rad:
        Angle at which the first panel starts.
    scale:
        Millimetre to world-unit factor.
    panel_subdiv:
        Angular segments emitted per panel per ring.
    """

    offsets_mm: tuple[float, ...] = DEFAULT_OFFSETS_MM
    theta_start_rad: float = DEFAULT_THETA_START_RAD
    scale: float = 1.0
    panel_subdiv: int = DEFAULT_PANEL_SUBDIV

    def __post_init__(self) -> None:
        offsets = tuple(float(value) for value in self.offsets_mm)
        if len(offsets) < 2:
            raise ValueError("offsets_mm must contain at least 2 rings.")
        if not all(math.isfinite(value) for value in offsets):
            raise ValueError("offsets_mm must be finite.")
        scale = float(self.scale)
        if not math.isfinite(scale) or scale <= 0.0:
            raise ValueError("scale must be a positive finite number.")
        subdiv = int(self.panel_subdiv)
        if subdiv < 1:
            raise ValueError("panel_subdiv must be >= 1")

        object.__setattr__(self, "offsets_mm", offsets)
        object.__setattr__(self, "theta_start_rad", float(self.theta_start_rad))
        object.__setattr__(self, "scale", scale)
        object.__setattr__(self, "panel_subdiv", subdiv)

    @property
    def ring_count(self) -> int:
        return len(self.offsets_mm)

    @property
    def reference_ring(self) -> int:
        """Index of the offset closest to zero (first one on ties)."""

        best = 0
        best_abs = abs(self.offsets_mm[0])
        for idx, value in enumerate(self.offsets_mm[1:], start=1):
            if abs(value) < best_abs:
                best = idx
                best_abs = abs(value)
        return best

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> "BuildConfig":
        """Create a config from a job payload, falling back to defaults."""

        payload = payload or {}
        offsets: Sequence[float] = payload.get("offsets_mm", DEFAULT_OFFSETS_MM)
        return cls(
            offsets_mm=tuple(offsets),
            theta_start_rad=payload.get("theta_start_rad", DEFAULT_THETA_START_RAD),
            scale=payload.get("scale", 1.0),
            panel_subdiv=payload.get("panel_subdiv", DEFAULT_PANEL_SUBDIV),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "offsets_mm": list(self.offsets_mm),
            "theta_start_rad": self.theta_start_rad,
            "scale": self.scale,
            "panel_subdiv": self.panel_subdiv,
        }
