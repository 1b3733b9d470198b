from __future__ import annotations

import pytest

from panels.model import CurveSlot
from panels.topology import PanelId, PanelTopology, panels_from_curve_map


def test_panel_id_neighbours() -> None:
    assert PanelId("b").letter == "B"
    assert PanelId("A").prev() is None
    assert PanelId("Z").next() is None
    assert PanelId("C").next() == PanelId("D")
    assert [str(pid) for pid in PanelId.range_inclusive("D")] == ["A", "B", "C", "D"]


@pytest.mark.parametrize("letter", ["", "AB", "1"])
def test_panel_id_rejects_non_letters(letter) -> None:
    with pytest.raises(ValueError):
        PanelId(letter)


def test_outermost_seams_reuse_own_letter() -> None:
    topology = PanelTopology("ABCDEF")

    assert topology.left_seam_base("A") == "AA"
    assert topology.right_seam_base("A") == "AB"
    assert topology.left_seam_base("C") == "CB"
    assert topology.right_seam_base("C") == "CD"
    assert topology.right_seam_base("F") == "FF"


def test_slot_ids_follow_naming_convention() -> None:
    ids = PanelTopology(["A", "B"]).slot_ids("B")

    assert ids == {
        CurveSlot.TOP: "B_TOP",
        CurveSlot.BOTTOM: "B_BOTTOM",
        CurveSlot.WAIST: "B_WAIST",
        CurveSlot.SEAM_TO_PREV_UP: "BA_UP",
        CurveSlot.SEAM_TO_PREV_DOWN: "BA_DOWN",
        CurveSlot.SEAM_TO_NEXT_UP: "BB_UP",
        CurveSlot.SEAM_TO_NEXT_DOWN: "BB_DOWN",
    }


def test_topology_rejects_bad_orders() -> None:
    with pytest.raises(ValueError):
        PanelTopology([])
    with pytest.raises(ValueError):
        PanelTopology(["A", "A"])
    with pytest.raises(ValueError):
        PanelTopology(["A"]).left_seam_base("B")


def test_curve_map_assembles_panels_with_missing_slots() -> None:
    curves = {
        "A_WAIST": [[0, 0], [50, 0]],
        "AA_UP": [[0, -100], [0, 0]],
        "AB_DOWN": [[50, 0], [50, 100]],
        "B_TOP": [[80, -90], [130, -90]],
    }

    panel_a, panel_b = panels_from_curve_map(curves, ["A", "B"])

    assert panel_a.panel_id == "A"
    assert panel_a.waist.as_pairs() == [(0.0, 0.0), (50.0, 0.0)]
    assert panel_a.seam_to_prev_up.name == "AA_UP"
    assert panel_a.seam_to_next_down.name == "AB_DOWN"
    assert panel_a.seam_to_prev_down is None
    assert panel_b.present_slots() == (CurveSlot.TOP,)
