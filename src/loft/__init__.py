"""Ring-loft reconstruction of half-garment surfaces from flat panels."""

from __future__ import annotations

from importlib import import_module

__all__ = [
    "AngularWindow",
    "BuildConfig",
    "LoftBuildError",
    "PanelMesh",
    "PanelSeams",
    "RingMetrics",
    "SeamPolyline",
    "allocate_windows",
    "build_edge_outlines",
    "build_panel_meshes",
    "build_panel_seams",
    "build_ring_polylines",
    "build_seam_polyline",
    "build_textured_panel_meshes",
    "compute_ring_metrics",
    "estimate_waist_y",
    "panel_texture_supplier",
    "render_panel_texture",
    "sample_at_y",
]

_ATTRIBUTE_MODULES: dict[str, str] = {
    "AngularWindow": ".windows",
    "BuildConfig": ".config",
    "LoftBuildError": ".errors",
    "PanelMesh": ".mesh",
    "PanelSeams": ".rings",
    "RingMetrics": ".rings",
    "SeamPolyline": ".seams",
    "allocate_windows": ".windows",
    "build_edge_outlines": ".outlines",
    "build_panel_meshes": ".mesh",
    "build_panel_seams": ".rings",
    "build_ring_polylines": ".mesh",
    "build_seam_polyline": ".seams",
    "build_textured_panel_meshes": ".mesh",
    "compute_ring_metrics": ".rings",
    "estimate_waist_y": ".rings",
    "panel_texture_supplier": ".texture",
    "render_panel_texture": ".texture",
    "sample_at_y": ".seams",
}


def __getattr__(name: str):
    try:
        module_name = _ATTRIBUTE_MODULES[name]
    except KeyError as exc:
        raise AttributeError(f"module 'loft' has no attribute {name!r}") from exc

    module = import_module(module_name, __name__)
    value = getattr(module, name)
    globals()[name] = value
    return value
