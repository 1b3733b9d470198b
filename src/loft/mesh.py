"""Triangle strips lofted between consecutive valid rings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

import numpy as np

from panels.model import Panel, Point3D

from .config import BuildConfig
from .rings import RingMetrics, resolve_metrics
from .windows import AngularWindow, allocate_windows, panel_window

__all__ = [
    "PALETTE",
    "PanelMesh",
    "TextureSupplier",
    "build_panel_meshes",
    "build_ring_polylines",
    "build_textured_panel_meshes",
    "pick_color",
]

#: red, orange, green, dodger blue, purple, brown
PALETTE: tuple[tuple[int, int, int], ...] = (
    (255, 0, 0),
    (255, 165, 0),
    (0, 128, 0),
    (30, 144, 255),
    (128, 0, 128),
    (165, 42, 42),
)

TextureSupplier = Callable[[Panel], Any]


def pick_color(index: int) -> tuple[int, int, int]:
    return PALETTE[index % len(PALETTE)]


@dataclass(frozen=True, slots=True)
class PanelMesh:
    """Lofted surface for a single panel.

    ``uvs`` is only populated by the textured builder and then holds exactly
    one UV per vertex.
    """

    panel_id: str
    vertices: np.ndarray = field(repr=False)
    faces: np.ndarray = field(repr=False)
    ring_ok: tuple[bool, ...]
    color: tuple[int, int, int]
    uvs: np.ndarray | None = field(default=None, repr=False)
    texture: Any = field(default=None, repr=False)

    @property
    def columns(self) -> int:
        return len(self.vertices) // len(self.ring_ok)

    def faces_between(self, ring: int) -> np.ndarray:
        """Faces spanning rings ``ring`` and ``ring + 1``."""

        cols = self.columns
        lower = ring * cols
        upper = (ring + 2) * cols
        mask = np.all((self.faces >= lower) & (self.faces < upper), axis=1)
        return self.faces[mask]


def _ring_vertices(window: AngularWindow, cols: int, scale: float) -> np.ndarray:
    fractions = np.linspace(0.0, 1.0, cols)
    thetas = window.theta0 + (window.theta1 - window.theta0) * fractions
    x = window.radius * np.cos(thetas) * scale
    z = window.radius * np.sin(thetas) * scale
    y = np.full(cols, window.height)
    return np.column_stack((x, y, z))


def _strip_faces(ring_ok: Sequence[bool], cols: int) -> np.ndarray:
    faces: list[tuple[int, int, int]] = []
    for k in range(len(ring_ok) - 1):
        if not ring_ok[k] or not ring_ok[k + 1]:
            continue
        for s in range(cols - 1):
            v00 = k * cols + s
            v01 = v00 + 1
            v10 = v00 + cols
            v11 = v10 + 1
            faces.append((v00, v01, v11))
            faces.append((v00, v11, v10))
    return np.asarray(faces, dtype=np.int64).reshape(-1, 3)


def _build(
    panels: Sequence[Panel],
    config: BuildConfig,
    *,
    order: Sequence[int] | None,
    metrics: RingMetrics | None,
    with_uvs: bool,
    texture_for_panel: TextureSupplier | None,
) -> list[PanelMesh]:
    if not panels:
        return []
    metrics = resolve_metrics(panels, config, order=order, metrics=metrics)

    windows = allocate_windows(metrics, config)
    rings = metrics.ring_count
    cols = config.panel_subdiv + 1

    meshes: list[PanelMesh] = []
    for i, panel in enumerate(panels):
        ring_ok = tuple(bool(metrics.valid[k, i]) for k in range(rings))
        vertices = np.vstack([_ring_vertices(windows[k][i], cols, config.scale) for k in range(rings)])
        faces = _strip_faces(ring_ok, cols)

        uvs = None
        texture = None
        if with_uvs:
            u = np.tile(np.linspace(0.0, 1.0, cols), rings)
            v = np.repeat(np.arange(rings, dtype=float) / float(rings - 1), cols)
            uvs = np.column_stack((u, v))
            if texture_for_panel is not None:
                texture = texture_for_panel(panel)

        meshes.append(
            PanelMesh(
                panel_id=panel.panel_id,
                vertices=vertices,
                faces=faces,
                ring_ok=ring_ok,
                color=pick_color(i),
                uvs=uvs,
                texture=texture,
            )
        )
    return meshes


def build_panel_meshes(
    panels: Sequence[Panel],
    config: BuildConfig,
    *,
    order: Sequence[int] | None = None,
    metrics: RingMetrics | None = None,
) -> list[PanelMesh]:
    """Build one flat-coloured mesh per panel."""

    return _build(panels, config, order=order, metrics=metrics, with_uvs=False, texture_for_panel=None)


def build_textured_panel_meshes(
    panels: Sequence[Panel],
    config: BuildConfig,
    texture_for_panel: TextureSupplier | None = None,
    *,
    order: Sequence[int] | None = None,
    metrics: RingMetrics | None = None,
) -> list[PanelMesh]:
    """Build meshes carrying 1:1 UVs and the image returned by *texture_for_panel*.

    A supplier returning ``None`` (or no supplier) leaves ``texture`` unset so
    renderers fall back to the palette colour.
    """

    return _build(
        panels,
        config,
        order=order,
        metrics=metrics,
        with_uvs=True,
        texture_for_panel=texture_for_panel,
    )


def build_ring_polylines(
    panels: Sequence[Panel],
    config: BuildConfig,
    *,
    order: Sequence[int] | None = None,
    metrics: RingMetrics | None = None,
) -> list[list[Point3D]]:
    """Cross-section polyline per ring; panels without a sample at a ring are skipped."""

    if not panels:
        return []
    metrics = resolve_metrics(panels, config, order=order, metrics=metrics)

    cols = config.panel_subdiv + 1
    polylines: list[list[Point3D]] = []
    for k in range(metrics.ring_count):
        ring_points: list[Point3D] = []
        for i in metrics.order:
            if not metrics.valid[k, i]:
                continue
            window = panel_window(metrics, config, k, i)
            for x, y, z in _ring_vertices(window, cols, config.scale):
                ring_points.append(Point3D(float(x), float(y), float(z)))
        polylines.append(ring_points)
    return polylines
