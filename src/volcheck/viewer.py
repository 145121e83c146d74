"""Assemble a placement tree into a ``trimesh.Scene`` and show or export it."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np
import trimesh

from volcheck.errors import SolidError
from volcheck.mesh import DEFAULT_SECTIONS, solid_to_mesh
from volcheck.placement import Placement
from volcheck.xform import Matrix

logger = logging.getLogger(__name__)

# name: (theta, phi, up) -- viewpoint direction in spherical angles (deg)
VIEWS: Dict[str, Tuple[float, float, Tuple[float, float, float]]] = {
    "front": (180.0, 0.0, (0.0, 1.0, 0.0)),
    "rear": (0.0, 0.0, (0.0, 1.0, 0.0)),
    "right": (90.0, 180.0, (0.0, 1.0, 0.0)),
    "left": (-90.0, 180.0, (0.0, 1.0, 0.0)),
    "bottom": (-90.0, 90.0, (1.0, 0.0, 0.0)),
    "top": (90.0, 90.0, (1.0, 0.0, 0.0)),
}


def _rgba(colour) -> np.ndarray:
    return np.clip(np.round(np.asarray(colour, dtype=float) * 255.0), 0, 255).astype(np.uint8)


def build_scene(root: Placement, sections: int = DEFAULT_SECTIONS) -> "trimesh.Scene":
    """Flatten the visible placements below ``root`` into a scene.

    Each placement's mesh is coloured with its display colour and placed
    with the composition of all transforms from ``root`` down.  Solids that
    cannot be tessellated are logged and left out.
    """

    scene = trimesh.Scene()
    cache: Dict[int, "trimesh.Trimesh"] = {}
    counter = [0]

    def visit(node: Placement, parent_xform: Matrix, path: str) -> None:
        xform = parent_xform.compose(node.xform)
        label = f"{path}/{node.name}" if path else node.name
        if node.vis.visible:
            key = id(node.solid)
            mesh = cache.get(key)
            if mesh is None:
                try:
                    mesh = solid_to_mesh(node.solid, sections)
                except SolidError as exc:
                    logger.warning("skipping %s: %s", label, exc)
                else:
                    cache[key] = mesh
            if mesh is not None:
                instance = mesh.copy()
                instance.visual.face_colors = _rgba(node.vis.colour)
                counter[0] += 1
                scene.add_geometry(instance,
                                   node_name=f"{label}#{counter[0]}",
                                   geom_name=f"{node.solid.name}#{counter[0]}",
                                   transform=np.asarray(xform.tolist(), dtype=float))
        for child in node.children:
            visit(child, xform, label)

    visit(root, Matrix(), "")
    logger.debug("scene holds %d mesh(es)", len(scene.geometry))
    return scene


def _viewpoint(theta: float, phi: float) -> np.ndarray:
    t = math.radians(theta)
    p = math.radians(phi)
    return np.array([math.sin(t) * math.cos(p), math.sin(t) * math.sin(p), math.cos(t)])


def view_rotation(view: str) -> np.ndarray:
    """Camera rotation (4x4) looking at the origin from a named view."""
    if view not in VIEWS:
        raise ValueError(f"unknown view {view!r}; choose one of {sorted(VIEWS)}")
    theta, phi, up = VIEWS[view]
    z_axis = _viewpoint(theta, phi)
    up_vec = np.asarray(up, dtype=float)
    x_axis = np.cross(up_vec, z_axis)
    x_axis /= np.linalg.norm(x_axis)
    y_axis = np.cross(z_axis, x_axis)
    rotation = np.eye(4)
    rotation[:3, 0] = x_axis
    rotation[:3, 1] = y_axis
    rotation[:3, 2] = z_axis
    return rotation


def set_view(scene: "trimesh.Scene", view: str) -> None:
    if scene.is_empty:
        return
    scene.camera_transform = trimesh.scene.cameras.look_at(
        scene.bounds, fov=scene.camera.fov, rotation=view_rotation(view))


def add_axes(scene: "trimesh.Scene") -> None:
    """Add coordinate axes at the origin, sized to the scene."""
    size = float(scene.scale) * 0.01 if not scene.is_empty else 1.0
    scene.add_geometry(trimesh.creation.axis(origin_size=size), node_name="axes")


def show_scene(scene: "trimesh.Scene", view: Optional[str] = None, axes: bool = True) -> None:
    """Open the interactive trimesh viewer (needs pyglet<2)."""
    if axes:
        add_axes(scene)
    if view:
        set_view(scene, view)
    scene.show()


def export_scene(scene: "trimesh.Scene", path: Path | str) -> Path:
    """Write ``scene`` in the format implied by the file suffix."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    scene.export(file_obj=str(path))
    logger.info("scene written to %s", path)
    return path


__all__ = ["VIEWS", "build_scene", "view_rotation", "set_view", "add_axes", "show_scene", "export_scene"]
