from __future__ import annotations

import math

import numpy as np
import pytest

from loft.config import BuildConfig
from loft.mesh import PALETTE, build_panel_meshes, build_ring_polylines, build_textured_panel_meshes
from loft.rings import compute_ring_metrics
from tests.helpers import rectangle_panel


def test_full_panels_get_two_triangles_per_cell(config, two_panels) -> None:
    meshes = build_panel_meshes(two_panels, config)

    assert [mesh.panel_id for mesh in meshes] == ["A", "B"]
    for mesh in meshes:
        assert mesh.vertices.shape == (3 * 5, 3)
        assert mesh.faces.shape == (2 * 2 * config.panel_subdiv, 3)
        assert mesh.ring_ok == (True, True, True)
        assert mesh.uvs is None
        assert mesh.texture is None
        assert mesh.faces.max() < len(mesh.vertices)


def test_vertices_follow_the_angular_windows(config, two_panels) -> None:
    first, second = build_panel_meshes(two_panels, config)
    radius = 100.0 / math.pi

    np.testing.assert_allclose(first.vertices[0], [radius, 80.0, 0.0], atol=1e-9)
    np.testing.assert_allclose(first.vertices[4], [0.0, 80.0, radius], atol=1e-9)
    np.testing.assert_allclose(second.vertices[14], [-radius, -80.0, 0.0], atol=1e-9)
    np.testing.assert_allclose(np.hypot(first.vertices[:, 0], first.vertices[:, 2]), radius)


def test_faces_only_span_consecutive_valid_rings(config) -> None:
    panels = [
        rectangle_panel("A", 0.0, 50.0, left_up_height=50.0),
        rectangle_panel("B", 80.0, 50.0),
    ]

    short, full = build_panel_meshes(panels, config)

    assert short.ring_ok == (True, True, False)
    assert len(short.faces_between(0)) == 2 * config.panel_subdiv
    assert len(short.faces_between(1)) == 0
    assert len(full.faces) == 4 * config.panel_subdiv

    # Degraded ring collapses onto the waist plane.
    np.testing.assert_allclose(short.vertices[10:, 1], 0.0)


def test_panel_without_two_valid_rings_is_empty(config) -> None:
    panels = [
        rectangle_panel("A", 0.0, 50.0, up_height=10.0, down_height=10.0),
        rectangle_panel("B", 80.0, 50.0),
    ]

    meshes = build_panel_meshes(panels, config)

    assert meshes[0].ring_ok == (False, True, False)
    assert meshes[0].faces.shape == (0, 3)


def test_palette_cycles_by_input_index(config) -> None:
    panels = [rectangle_panel(chr(ord("A") + i), 60.0 * i, 50.0) for i in range(8)]

    meshes = build_panel_meshes(panels, config)

    assert [mesh.color for mesh in meshes] == [PALETTE[i % len(PALETTE)] for i in range(8)]
    assert meshes[0].color == (255, 0, 0)


def test_textured_meshes_carry_one_uv_per_vertex(config, two_panels) -> None:
    requested: list[str] = []

    def supplier(panel):
        requested.append(panel.panel_id)
        return None if panel.panel_id == "B" else f"texture-{panel.panel_id}"

    meshes = build_textured_panel_meshes(two_panels, config, supplier)

    assert requested == ["A", "B"]
    assert meshes[0].texture == "texture-A"
    assert meshes[1].texture is None
    for mesh in meshes:
        assert mesh.uvs.shape == (len(mesh.vertices), 2)
        np.testing.assert_allclose(mesh.uvs[:5, 0], [0.0, 0.25, 0.5, 0.75, 1.0])
        np.testing.assert_allclose(mesh.uvs[::5, 1], [0.0, 0.5, 1.0])


def test_textured_meshes_without_supplier_fall_back_to_palette(config, two_panels) -> None:
    meshes = build_textured_panel_meshes(two_panels, config)

    assert all(mesh.texture is None for mesh in meshes)
    assert meshes[1].color == PALETTE[1]


def test_empty_panel_list_builds_nothing(config) -> None:
    assert build_panel_meshes([], config) == []
    assert build_textured_panel_meshes([], config) == []
    assert build_ring_polylines([], config) == []


def test_precomputed_metrics_are_reused(config, two_panels) -> None:
    metrics = compute_ring_metrics(two_panels, config, order=[1, 0])

    first, second = build_panel_meshes(two_panels, config, metrics=metrics)

    assert second.vertices[0, 0] == pytest.approx(100.0 / math.pi)
    assert first.vertices[0, 0] == pytest.approx(0.0, abs=1e-9)


def test_ring_polylines_skip_unsampled_panels(config) -> None:
    panels = [
        rectangle_panel("A", 0.0, 50.0, left_up_height=50.0),
        rectangle_panel("B", 80.0, 50.0),
    ]

    rings = build_ring_polylines(panels, config)

    assert [len(ring) for ring in rings] == [10, 10, 5]
    assert all(point.y == pytest.approx(-80.0) for point in rings[2])
    assert rings[1][0].as_tuple() == pytest.approx((100.0 / math.pi, 0.0, 0.0))
    assert rings[2][0].as_tuple() == pytest.approx((50.0 / math.pi, -80.0, 0.0))


def test_precomputed_metrics_must_match_offsets(two_panels) -> None:
    metrics = compute_ring_metrics(two_panels, BuildConfig(offsets_mm=(-40.0, 0.0, 40.0)))
    other = BuildConfig(offsets_mm=(-80.0, 0.0, 80.0))

    with pytest.raises(ValueError, match="offsets"):
        build_panel_meshes(two_panels, other, metrics=metrics)
    with pytest.raises(ValueError, match="offsets"):
        build_ring_polylines(two_panels, other, metrics=metrics)


def test_precomputed_metrics_must_match_order_and_panels(config, two_panels) -> None:
    metrics = compute_ring_metrics(two_panels, config, order=[1, 0])

    assert build_panel_meshes(two_panels, config, order=[1, 0], metrics=metrics)
    with pytest.raises(ValueError, match="order"):
        build_textured_panel_meshes(two_panels, config, order=[0, 1], metrics=metrics)
    with pytest.raises(ValueError, match="panels"):
        build_panel_meshes(two_panels[:1], config, metrics=metrics)
