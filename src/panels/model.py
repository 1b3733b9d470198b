"""Flat-pattern panel schema consumed by the ring-loft engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Sequence

__all__ = [
    "Curve",
    "CurveSlot",
    "Panel",
    "Point2D",
    "Point3D",
    "require_unique_panel_ids",
]


@dataclass(frozen=True, slots=True)
class Point2D:
    """Pattern-space point in millimetres (SVG orientation, +Y points down)."""

    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True, slots=True)
class Point3D:
    """World-space point produced by the loft."""

    x: float
    y: float
    z: float

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


class CurveSlot(str, Enum):
    """Named curve slots carried by every :class:`Panel`."""

    TOP = "top"
    BOTTOM = "bottom"
    WAIST = "waist"
    SEAM_TO_PREV_UP = "seam_to_prev_up"
    SEAM_TO_PREV_DOWN = "seam_to_prev_down"
    SEAM_TO_NEXT_UP = "seam_to_next_up"
    SEAM_TO_NEXT_DOWN = "seam_to_next_down"


@dataclass(frozen=True, slots=True)
class Curve:
    """Named polyline; point order is not assumed monotonic in either axis."""

    name: str
    points: tuple[Point2D, ...]

    @classmethod
    def from_points(cls, name: str, points: Iterable[Sequence[float] | Point2D]) -> "Curve":
        converted: list[Point2D] = []
        for entry in points:
            if isinstance(entry, Point2D):
                converted.append(entry)
                continue
            if len(entry) != 2:
                raise ValueError(f"Curve {name!r} points must be (x, y) pairs, received {entry!r}.")
            converted.append(Point2D(float(entry[0]), float(entry[1])))
        return cls(name=str(name), points=tuple(converted))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point2D]:
        return iter(self.points)

    @property
    def first(self) -> Point2D:
        return self.points[0]

    @property
    def last(self) -> Point2D:
        return self.points[-1]

    def reversed(self) -> "Curve":
        return Curve(name=self.name, points=tuple(reversed(self.points)))

    def as_pairs(self) -> list[tuple[float, float]]:
        return [point.as_tuple() for point in self.points]


@dataclass(frozen=True, slots=True)
class Panel:
    """One pattern piece; every curve slot is optional."""

    panel_id: str
    top: Curve | None = None
    bottom: Curve | None = None
    waist: Curve | None = None
    seam_to_prev_up: Curve | None = None
    seam_to_prev_down: Curve | None = None
    seam_to_next_up: Curve | None = None
    seam_to_next_down: Curve | None = None

    def curve(self, slot: CurveSlot | str) -> Curve | None:
        """Return the curve stored in *slot* or ``None`` when it is absent."""

        return getattr(self, CurveSlot(slot).value)

    def present_slots(self) -> tuple[CurveSlot, ...]:
        return tuple(slot for slot in CurveSlot if self.curve(slot) is not None)

    def edge(self, top: bool) -> Curve | None:
        return self.top if top else self.bottom


def require_unique_panel_ids(panels: Iterable[Panel]) -> None:
    """Raise ``ValueError`` when two panels share a ``panel_id``."""

    seen: set[str] = set()
    for panel in panels:
        if panel.panel_id in seen:
            raise ValueError(f"Duplicate panel id: {panel.panel_id!r}")
        seen.add(panel.panel_id)
