"""Pattern naming conventions linking curve identifiers to panel slots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from .model import Curve, CurveSlot, Panel

__all__ = [
    "PanelId",
    "PanelTopology",
    "panels_from_curve_map",
]


@dataclass(frozen=True, slots=True, order=True)
class PanelId:
    """Single-letter panel identifier (``A`` .. ``Z``)."""

    letter: str

    def __post_init__(self) -> None:
        letter = str(self.letter).upper()
        if len(letter) != 1 or not ("A" <= letter <= "Z"):
            raise ValueError(f"PanelId must be A..Z, got: {self.letter!r}")
        object.__setattr__(self, "letter", letter)

    @property
    def name(self) -> str:
        return self.letter

    def prev(self) -> "PanelId | None":
        if self.letter == "A":
            return None
        return PanelId(chr(ord(self.letter) - 1))

    def next(self) -> "PanelId | None":
        if self.letter == "Z":
            return None
        return PanelId(chr(ord(self.letter) + 1))

    @classmethod
    def range_inclusive(cls, max_letter: str) -> list["PanelId"]:
        last = cls(max_letter)
        return [cls(chr(code)) for code in range(ord("A"), ord(last.letter) + 1)]

    def __str__(self) -> str:
        return self.letter


class PanelTopology:
    """Resolve curve identifiers for an ordered chain of panels.

    Interior seams are named after the panel and its neighbour (``BA`` is the
    left seam of ``B``, ``BC`` its right seam). The outermost seams reuse the
    panel's own letter (``AA``, ``FF``).
    """

    def __init__(self, order: Sequence[str | PanelId]) -> None:
        letters = [PanelId(str(entry)).letter for entry in order]
        if not letters:
            raise ValueError("Panel order must contain at least one panel.")
        if len(set(letters)) != len(letters):
            raise ValueError(f"Panel order contains duplicates: {letters}")
        self.order: tuple[str, ...] = tuple(letters)

    def _index(self, panel: str) -> int:
        try:
            return self.order.index(PanelId(panel).letter)
        except ValueError as exc:
            raise ValueError(f"Panel not in order: {panel}") from exc

    def left_seam_base(self, panel: str) -> str:
        idx = self._index(panel)
        letter = self.order[idx]
        if idx == 0:
            return letter + letter
        return letter + self.order[idx - 1]

    def right_seam_base(self, panel: str) -> str:
        idx = self._index(panel)
        letter = self.order[idx]
        if idx == len(self.order) - 1:
            return letter + letter
        return letter + self.order[idx + 1]

    @staticmethod
    def waist_id(panel: str) -> str:
        return f"{panel}_WAIST"

    @staticmethod
    def top_id(panel: str) -> str:
        return f"{panel}_TOP"

    @staticmethod
    def bottom_id(panel: str) -> str:
        return f"{panel}_BOTTOM"

    @staticmethod
    def seam_up_id(seam_base: str) -> str:
        return f"{seam_base}_UP"

    @staticmethod
    def seam_down_id(seam_base: str) -> str:
        return f"{seam_base}_DOWN"

    def slot_ids(self, panel: str) -> dict[CurveSlot, str]:
        """Map every curve slot of *panel* to the identifier it is stored under."""

        letter = PanelId(panel).letter
        left = self.left_seam_base(letter)
        right = self.right_seam_base(letter)
        return {
            CurveSlot.TOP: self.top_id(letter),
            CurveSlot.BOTTOM: self.bottom_id(letter),
            CurveSlot.WAIST: self.waist_id(letter),
            CurveSlot.SEAM_TO_PREV_UP: self.seam_up_id(left),
            CurveSlot.SEAM_TO_PREV_DOWN: self.seam_down_id(left),
            CurveSlot.SEAM_TO_NEXT_UP: self.seam_up_id(right),
            CurveSlot.SEAM_TO_NEXT_DOWN: self.seam_down_id(right),
        }


def panels_from_curve_map(
    curves: Mapping[str, Sequence[Sequence[float]]],
    order: Sequence[str | PanelId],
) -> list[Panel]:
    """Assemble :class:`Panel` objects from a flat ``{curve_id: points}`` mapping.

    Curves that are not present in *curves* are left empty; the loft treats
    them as missing data rather than errors.
    """

    topology = PanelTopology(order)
    panels: list[Panel] = []
    for letter in topology.order:
        slots: dict[str, Any] = {}
        for slot, curve_id in topology.slot_ids(letter).items():
            points = curves.get(curve_id)
            slots[slot.value] = None if points is None else Curve.from_points(curve_id, points)
        panels.append(Panel(panel_id=letter, **slots))
    return panels
