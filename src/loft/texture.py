"""Rasterise panel textures in the same UV space as the lofted meshes.

``u`` is the fraction across the panel between its left and right seam at a
given pattern height and ``v`` is the ring-index fraction, interpolated
linearly between ring heights. A texture rendered here therefore lines up
with :func:`loft.mesh.build_textured_panel_meshes` without any resampling.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Sequence

import numpy as np

from panels.model import Curve, Panel

from .config import BuildConfig
from .mesh import TextureSupplier
from .rings import PanelSeams, build_panel_seams
from .seams import SeamPolyline

__all__ = [
    "MIN_TEXTURE_SIZE",
    "SAFE_SCAN_STEPS",
    "find_safe_top_bottom_y",
    "panel_texture_supplier",
    "render_panel_texture",
    "ring_heights",
    "u_of_x_at_y",
    "v_of_y",
]

MIN_TEXTURE_SIZE = 128
SAFE_SCAN_STEPS = 200

_BACKGROUND = (255, 255, 255, 255)
_FILL = (0, 0, 0, round(0.18 * 255))
_GRID = (0, 0, 0, round(0.05 * 255))
_BORDER = (0, 0, 0, round(0.12 * 255))
_SCANLINE = (0, 0, 0, round(0.22 * 255))
_OUTLINE = (0, 0, 0, round(0.95 * 255))
_SEAM = (0, 0, 0, round(0.95 * 255))
_WAIST = (217, 26, 26, round(0.95 * 255))
_LABEL = (0, 0, 0, round(0.65 * 255))

_OUTLINE_WIDTH = 8
_SEAM_WIDTH = 6
_WAIST_WIDTH = 4
_WAIST_DASH = (14.0, 10.0)
_SCANLINES = 6


def _lazy_import_pillow() -> Any:
    try:
        from PIL import Image, ImageDraw
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise ModuleNotFoundError(
            "Pillow is required to render panel textures. Install the 'pillow' dependency."
        ) from exc
    return Image, ImageDraw


def ring_heights(waist_y: float, config: BuildConfig) -> np.ndarray:
    """Pattern-space Y of every ring for a panel whose waist sits at *waist_y*."""

    return waist_y - np.asarray(config.offsets_mm, dtype=float)


def u_of_x_at_y(x: float, y: float, seams: PanelSeams) -> float:
    span = seams.sample_span(y)
    if span is None:
        return 0.5
    lx, rx = sorted(span)
    width = rx - lx
    if width < 1e-9:
        return 0.5
    return (x - lx) / width


def v_of_y(y: float, y_ring: Sequence[float]) -> float | None:
    """Map pattern Y to the ring-index fraction, clamping outside the ring stack."""

    if y_ring is None or len(y_ring) < 2:
        return None
    count = len(y_ring)
    first = float(y_ring[0])
    last = float(y_ring[-1])
    decreasing = first > last

    if decreasing:
        if y >= first:
            return 0.0
        if y <= last:
            return 1.0
    else:
        if y <= first:
            return 0.0
        if y >= last:
            return 1.0

    for k in range(count - 1):
        y0 = float(y_ring[k])
        y1 = float(y_ring[k + 1])
        inside = (y1 <= y <= y0) if decreasing else (y0 <= y <= y1)
        if not inside:
            continue
        denom = y1 - y0
        if abs(denom) < 1e-12:
            return k / (count - 1)
        t = (y - y0) / denom
        v0 = k / (count - 1)
        v1 = (k + 1) / (count - 1)
        return v0 + (v1 - v0) * t

    return 0.5


def find_safe_top_bottom_y(
    seams: PanelSeams,
    y_ring: Sequence[float],
    *,
    steps: int = SAFE_SCAN_STEPS,
) -> tuple[float, float]:
    """Scan inward from both ends of the ring range for heights sampled by both seams.

    Falls back to the range ends when no height qualifies and insets the
    result by 0.1% of the range.
    """

    y_min = min(float(y_ring[0]), float(y_ring[-1]))
    y_max = max(float(y_ring[0]), float(y_ring[-1]))
    span = y_max - y_min

    y_top = math.nan
    for i in range(steps + 1):
        y = y_min + span * (i / steps)
        if seams.sample_span(y) is not None:
            y_top = y
            break

    y_bot = math.nan
    for i in range(steps + 1):
        y = y_max - span * (i / steps)
        if seams.sample_span(y) is not None:
            y_bot = y
            break

    if not math.isfinite(y_top):
        y_top = y_min
    if not math.isfinite(y_bot):
        y_bot = y_max

    inset = 0.001 * span
    return y_top + inset, y_bot - inset


def _clamp01(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def _to_pixels(uv: Iterable[tuple[float, float]], size: int) -> list[tuple[float, float]]:
    return [(_clamp01(u) * (size - 1), _clamp01(v) * (size - 1)) for u, v in uv]


def _points_to_uv(
    points: Iterable[tuple[float, float]],
    seams: PanelSeams,
    y_ring: Sequence[float],
) -> list[tuple[float, float]]:
    uv: list[tuple[float, float]] = []
    for x, y in points:
        v = v_of_y(y, y_ring)
        if v is None:
            continue
        uv.append((u_of_x_at_y(x, y, seams), v))
    return uv


def _seam_uv(seam: SeamPolyline | None, seams: PanelSeams, y_ring: Sequence[float]) -> list[tuple[float, float]]:
    if seam is None:
        return []
    return _points_to_uv(((float(x), float(y)) for x, y in seam.points), seams, y_ring)


def _curve_uv(curve: Curve | None, seams: PanelSeams, y_ring: Sequence[float]) -> list[tuple[float, float]]:
    if curve is None or len(curve) < 2:
        return []
    return _points_to_uv(curve.as_pairs(), seams, y_ring)


def _stroke(draw: Any, pixels: list[tuple[float, float]], color: tuple[int, ...], width: int) -> None:
    if len(pixels) < 2:
        return
    draw.line(pixels, fill=color, width=width, joint="curve")


def _stroke_dashed(
    draw: Any,
    pixels: list[tuple[float, float]],
    color: tuple[int, ...],
    width: int,
    pattern: tuple[float, float],
) -> None:
    if len(pixels) < 2:
        return
    dash, gap = pattern
    period = dash + gap
    travelled = 0.0
    for (x0, y0), (x1, y1) in zip(pixels[:-1], pixels[1:]):
        seg = math.hypot(x1 - x0, y1 - y0)
        if seg < 1e-9:
            continue
        pos = 0.0
        while pos < seg:
            phase = (travelled + pos) % period
            if phase < dash:
                step = min(dash - phase, seg - pos)
                a = pos / seg
                b = (pos + step) / seg
                draw.line(
                    [(x0 + (x1 - x0) * a, y0 + (y1 - y0) * a), (x0 + (x1 - x0) * b, y0 + (y1 - y0) * b)],
                    fill=color,
                    width=width,
                )
            else:
                step = min(period - phase, seg - pos)
            pos += max(step, 1e-6)
        travelled += seg


def render_panel_texture(panel: Panel, config: BuildConfig, size_px: int = 512) -> Any:
    """Render *panel* into a square RGBA :class:`PIL.Image.Image`."""

    if panel is None:
        raise ValueError("panel is None")
    Image, ImageDraw = _lazy_import_pillow()

    size = max(int(size_px), MIN_TEXTURE_SIZE)
    seams = build_panel_seams(panel)
    y_ring = ring_heights(seams.waist_y, config)

    image = Image.new("RGB", (size, size), _BACKGROUND[:3])
    draw = ImageDraw.Draw(image, "RGBA")
    last = size - 1

    for i in range(1, 10):
        pos = i / 10.0 * last
        draw.line([(pos, 0), (pos, last)], fill=_GRID, width=1)
        draw.line([(0, pos), (last, pos)], fill=_GRID, width=1)
    draw.rectangle([(0, 0), (last, last)], outline=_BORDER, width=1)

    left_uv = _seam_uv(seams.left, seams, y_ring)
    right_uv = _seam_uv(seams.right, seams, y_ring)
    if len(left_uv) >= 2 and len(right_uv) >= 2:
        polygon = _to_pixels(left_uv + right_uv[::-1], size)
        if len(polygon) >= 3:
            draw.polygon(polygon, fill=_FILL)

    for i in range(1, _SCANLINES + 1):
        pos = i / (_SCANLINES + 1) * last
        draw.line([(0, pos), (last, pos)], fill=_SCANLINE, width=2)

    _stroke(draw, _to_pixels(left_uv, size), _SEAM, _SEAM_WIDTH)
    _stroke(draw, _to_pixels(right_uv, size), _SEAM, _SEAM_WIDTH)

    _stroke_dashed(
        draw,
        _to_pixels(_curve_uv(panel.waist, seams, y_ring), size),
        _WAIST,
        _WAIST_WIDTH,
        _WAIST_DASH,
    )

    _stroke(draw, _to_pixels(_curve_uv(panel.top, seams, y_ring), size), _OUTLINE, _OUTLINE_WIDTH)
    _stroke(draw, _to_pixels(_curve_uv(panel.bottom, seams, y_ring), size), _OUTLINE, _OUTLINE_WIDTH)

    y_top, y_bot = find_safe_top_bottom_y(seams, y_ring)
    for y in (y_top, y_bot):
        v = v_of_y(y, y_ring)
        if v is None:
            continue
        row = _clamp01(v) * last
        draw.line([(0, row), (last, row)], fill=_OUTLINE, width=_OUTLINE_WIDTH)

    draw.text((12, 8), str(panel.panel_id), fill=_LABEL)
    return image.convert("RGBA")


def panel_texture_supplier(config: BuildConfig, size_px: int = 512) -> TextureSupplier:
    """Texture strategy for :func:`loft.mesh.build_textured_panel_meshes`."""

    def supplier(panel: Panel) -> Any:
        return render_panel_texture(panel, config, size_px)

    return supplier
