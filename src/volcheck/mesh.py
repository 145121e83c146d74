"""Tessellation of volcheck solids into ``trimesh.Trimesh`` meshes.

Primitives are built with :mod:`trimesh.creation`.  Subtractions and
intersections are dispatched to :mod:`trimesh.boolean`, which needs one of
its boolean backends (e.g. manifold3d) to be installed; without one, those
solids raise :class:`~volcheck.errors.SolidError` and callers skip them.
"""

from __future__ import annotations

import numpy as np
import trimesh

from volcheck.boolean import DisplacedSolid, IntersectionSolid, ScaledSolid, SubtractionSolid
from volcheck.errors import SolidError
from volcheck.solids import Box, Orb, Solid, Sphere, Tube

DEFAULT_SECTIONS = 24


def engines_available() -> set[str]:
    """Return the set of trimesh boolean backends that are operational."""
    return set(trimesh.boolean.engines_available)


def _matrix(xform) -> np.ndarray:
    return np.asarray(xform.tolist(), dtype=float)


def _sphere(radius: float, sections: int) -> "trimesh.Trimesh":
    return trimesh.creation.uv_sphere(radius=radius, count=[sections, sections])


def _boolean(operation: str, a: "trimesh.Trimesh", b: "trimesh.Trimesh", name: str) -> "trimesh.Trimesh":
    if not engines_available():
        raise SolidError(f"cannot tessellate '{name}': no trimesh boolean backend is available; "
                         "install manifold3d or another supported engine")
    try:
        if operation == "difference":
            result = trimesh.boolean.difference([a, b], check_volume=False)
        else:
            result = trimesh.boolean.intersection([a, b], check_volume=False)
    except Exception as exc:
        raise SolidError(f"trimesh {operation} failed for '{name}': {exc}") from exc
    if result is None or len(result.faces) == 0:
        raise SolidError(f"trimesh {operation} for '{name}' produced an empty mesh")
    return result


def solid_to_mesh(solid: Solid, sections: int = DEFAULT_SECTIONS) -> "trimesh.Trimesh":
    """Tessellate ``solid`` in its local frame.

    ``sections`` is the number of segments used for circles.
    """

    if isinstance(solid, Box):
        return trimesh.creation.box(extents=[2.0*solid.dx, 2.0*solid.dy, 2.0*solid.dz])
    if isinstance(solid, Orb):
        return _sphere(solid.r, sections)
    if isinstance(solid, Sphere):
        outer = _sphere(solid.rmax, sections)
        if solid.rmin <= 0.0:
            return outer
        return _boolean("difference", outer, _sphere(solid.rmin, sections), solid.name)
    if isinstance(solid, Tube):
        if solid.rmin <= 0.0:
            return trimesh.creation.cylinder(radius=solid.rmax, height=2.0*solid.dz,
                                             sections=sections)
        return trimesh.creation.annulus(r_min=solid.rmin, r_max=solid.rmax,
                                        height=2.0*solid.dz, sections=sections)
    if isinstance(solid, DisplacedSolid):
        mesh = solid_to_mesh(solid.solid, sections).copy()
        mesh.apply_transform(_matrix(solid.xform))
        return mesh
    if isinstance(solid, ScaledSolid):
        mesh = solid_to_mesh(solid.solid, sections).copy()
        center = np.asarray(solid.center[:3], dtype=float)
        matrix = np.eye(4)
        matrix[:3, :3] *= solid.factor
        matrix[:3, 3] = center - solid.factor * center
        mesh.apply_transform(matrix)
        return mesh
    if isinstance(solid, SubtractionSolid):
        return _boolean("difference", solid_to_mesh(solid.a, sections),
                        solid_to_mesh(solid.b, sections), solid.name)
    if isinstance(solid, IntersectionSolid):
        return _boolean("intersection", solid_to_mesh(solid.a, sections),
                        solid_to_mesh(solid.b, sections), solid.name)
    raise SolidError(f"don't know how to tessellate {solid!r}")


__all__ = ["DEFAULT_SECTIONS", "engines_available", "solid_to_mesh"]
