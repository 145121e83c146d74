"""Derived solids: displacement, subtraction, intersection and scaling.

These are evaluated lazily from their operands, the way CSG trees are
evaluated in particle-transport geometry kernels; nothing is tessellated.
Distances for subtraction and intersection are the usual CSG safety
estimates: they never exceed the true distance to the boundary, and are
exact whenever one operand dominates.

``point_on_surface`` samples the operands' surfaces (weighted by area) and
keeps only points that lie on the combined boundary.
"""

from __future__ import annotations

from volcheck.errors import SolidError
from volcheck.geom import add, bbox, bboxcenter, bboxcorners, bboxintersect, dist, point, scale3, sub
from volcheck.solids import (
    DEFAULT_VOLUME_SAMPLES,
    SURFACE_TOLERANCE,
    EInside,
    Solid,
    _rng,
    _unit,
    issolid,
)
from volcheck.xform import Matrix

MAX_SURFACE_ATTEMPTS = 1000
NORMAL_TOLERANCE = 1e-6
CENTROID_SAMPLES = 64


def _require_solid(x, role: str) -> None:
    if not issolid(x):
        raise SolidError(f"{role} operand is not a solid: {x!r}")


def _boundary_distance(solid: Solid, p) -> float:
    return solid.distance_to_in(p) + solid.distance_to_out(p)


def _opposite(n) -> list:
    return scale3(n, -1.0)


class DisplacedSolid(Solid):
    """``solid`` placed by the rigid transform ``xform`` (operand-local
    coordinates to this solid's frame)."""

    def __init__(self, solid: Solid, xform: Matrix, name: str | None = None):
        _require_solid(solid, "displaced")
        super().__init__(name or f"{solid.name}_displaced")
        self.solid = solid
        self.xform = Matrix(xform)
        try:
            self._inverse = self.xform.inverse()
        except ValueError as exc:
            raise SolidError(f"cannot displace '{solid.name}': {exc}") from exc

    def _local(self, p):
        return self._inverse.transform_point(p)

    def inside(self, p) -> EInside:
        return self.solid.inside(self._local(p))

    def distance_to_in(self, p) -> float:
        return self.solid.distance_to_in(self._local(p))

    def distance_to_out(self, p) -> float:
        return self.solid.distance_to_out(self._local(p))

    def point_on_surface(self, rng=None) -> list:
        return self.xform.transform_point(self.solid.point_on_surface(rng))

    def surface_normal(self, p) -> list:
        n = self.xform.transform_vector(self.solid.surface_normal(self._local(p)))
        return _unit(n[0], n[1], n[2])

    def extent(self) -> list:
        return bbox([self.xform.transform_point(c)
                     for c in bboxcorners(self.solid.extent())])

    def surface_area(self) -> float:
        return self.solid.surface_area()


class _BooleanSolid(Solid):

    _op = "?"

    def __init__(self, name: str | None, a: Solid, b: Solid, xform: Matrix | None = None):
        _require_solid(a, "first")
        _require_solid(b, "second")
        super().__init__(name or f"{a.name}{self._op}{b.name}")
        self.a = a
        if xform is not None and not Matrix(xform).isidentity(tol=1e-12):
            b = DisplacedSolid(b, xform)
        self.b = b

    def surface_area(self) -> float:
        # upper bound, used only to weight surface sampling
        return self.a.surface_area() + self.b.surface_area()

    def point_on_surface(self, rng=None) -> list:
        rng = _rng(rng)
        area_a = self.a.surface_area()
        area_b = self.b.surface_area()
        for _ in range(MAX_SURFACE_ATTEMPTS):
            if rng.uniform(0.0, area_a + area_b) < area_a:
                p = self.a.point_on_surface(rng)
            else:
                p = self.b.point_on_surface(rng)
            if self.inside(p) is EInside.SURFACE:
                return p
        raise SolidError(f"no surface point found on '{self.name}' after "
                         f"{MAX_SURFACE_ATTEMPTS} attempts")


class SubtractionSolid(_BooleanSolid):
    """``a`` minus ``b``."""

    _op = "-"

    def inside(self, p) -> EInside:
        in_a = self.a.inside(p)
        if in_a is EInside.OUTSIDE:
            return EInside.OUTSIDE
        in_b = self.b.inside(p)
        if in_b is EInside.INSIDE:
            return EInside.OUTSIDE
        if in_b is EInside.OUTSIDE:
            return in_a
        if in_a is EInside.INSIDE:
            return EInside.SURFACE
        # on both boundaries: coincident faces with the same outward
        # normal leave no material behind
        if dist(self.a.surface_normal(p), self.b.surface_normal(p)) < NORMAL_TOLERANCE:
            return EInside.OUTSIDE
        return EInside.SURFACE

    def distance_to_in(self, p) -> float:
        d = self.a.distance_to_in(p)
        if self.b.inside(p) is not EInside.OUTSIDE:
            d = max(d, self.b.distance_to_out(p))
        return d

    def distance_to_out(self, p) -> float:
        return min(self.a.distance_to_out(p), self.b.distance_to_in(p))

    def surface_normal(self, p) -> list:
        if _boundary_distance(self.a, p) <= _boundary_distance(self.b, p):
            return self.a.surface_normal(p)
        return _opposite(self.b.surface_normal(p))

    def extent(self) -> list:
        return self.a.extent()


class IntersectionSolid(_BooleanSolid):
    """Common part of ``a`` and ``b``."""

    _op = "*"

    def __init__(self, name: str | None, a: Solid, b: Solid, xform: Matrix | None = None):
        super().__init__(name, a, b, xform)
        box = bboxintersect(self.a.extent(), self.b.extent())
        if box is None or any(box[1][i] - box[0][i] <= SURFACE_TOLERANCE for i in range(3)):
            raise SolidError(f"intersection '{self.name}' of '{a.name}' and '{b.name}' is empty")
        self._extent = box

    def inside(self, p) -> EInside:
        in_a = self.a.inside(p)
        if in_a is EInside.OUTSIDE:
            return EInside.OUTSIDE
        in_b = self.b.inside(p)
        if in_b is EInside.OUTSIDE:
            return EInside.OUTSIDE
        if in_a is EInside.INSIDE:
            return in_b
        if in_b is EInside.INSIDE:
            return EInside.SURFACE
        # faces meeting back to back enclose nothing
        if dist(self.a.surface_normal(p), _opposite(self.b.surface_normal(p))) < NORMAL_TOLERANCE:
            return EInside.OUTSIDE
        return EInside.SURFACE

    def distance_to_in(self, p) -> float:
        return max(self.a.distance_to_in(p), self.b.distance_to_in(p))

    def distance_to_out(self, p) -> float:
        return min(self.a.distance_to_out(p), self.b.distance_to_out(p))

    def surface_normal(self, p) -> list:
        if _boundary_distance(self.a, p) <= _boundary_distance(self.b, p):
            return self.a.surface_normal(p)
        return self.b.surface_normal(p)

    def extent(self) -> list:
        return [list(self._extent[0]), list(self._extent[1])]


class ScaledSolid(Solid):
    """``solid`` scaled uniformly by ``factor`` about ``center``.

    ``center`` defaults to the centre of the operand's extent, so a
    convex operand scaled by ``factor > 1`` strictly contains the
    unscaled operand.
    """

    def __init__(self, solid: Solid, factor: float, center=None, name: str | None = None):
        _require_solid(solid, "scaled")
        if isinstance(factor, bool) or not isinstance(factor, (int, float)) or factor <= 0.0:
            raise SolidError(f"scale factor must be positive, got {factor!r}")
        super().__init__(name or f"{solid.name}_scaled")
        self.solid = solid
        self.factor = float(factor)
        self.center = list(center) if center is not None else bboxcenter(solid.extent())

    def _local(self, p):
        return add(self.center, scale3(sub(p, self.center), 1.0/self.factor))

    def _global(self, p):
        return add(self.center, scale3(sub(p, self.center), self.factor))

    def inside(self, p) -> EInside:
        return self.solid.inside(self._local(p))

    def distance_to_in(self, p) -> float:
        return self.factor * self.solid.distance_to_in(self._local(p))

    def distance_to_out(self, p) -> float:
        return self.factor * self.solid.distance_to_out(self._local(p))

    def point_on_surface(self, rng=None) -> list:
        return self._global(self.solid.point_on_surface(rng))

    def surface_normal(self, p) -> list:
        return self.solid.surface_normal(self._local(p))

    def extent(self) -> list:
        lo, hi = self.solid.extent()
        return [self._global(lo), self._global(hi)]

    def surface_area(self) -> float:
        return self.factor**2 * self.solid.surface_area()

    def cubic_volume(self, rng=None, samples: int = DEFAULT_VOLUME_SAMPLES) -> float:
        return self.factor**3 * self.solid.cubic_volume(rng, samples)


def subtract(a: Solid, b: Solid, xform: Matrix | None = None, name: str | None = None) -> SubtractionSolid:
    """``a`` minus ``b``, with ``b`` placed in ``a``'s frame by ``xform``."""
    return SubtractionSolid(name, a, b, xform)


def intersect(a: Solid, b: Solid, xform: Matrix | None = None, name: str | None = None) -> IntersectionSolid:
    """``a`` intersected with ``b``, ``b`` placed in ``a``'s frame by ``xform``."""
    return IntersectionSolid(name, a, b, xform)


def scale(solid: Solid, factor: float, center=None, name: str | None = None) -> ScaledSolid:
    return ScaledSolid(solid, factor, center, name)


def surface_centroid(solid: Solid, rng=None, samples: int = CENTROID_SAMPLES) -> list:
    """Mean of ``samples`` points drawn from the surface of ``solid``.

    For a convex solid this lies inside it, which makes it a safe centre
    for ``scale``.  Sampling failures raise ``SolidError``.
    """
    rng = _rng(rng)
    sx = sy = sz = 0.0
    for _ in range(samples):
        p = solid.point_on_surface(rng)
        sx += p[0]
        sy += p[1]
        sz += p[2]
    return point(sx/samples, sy/samples, sz/samples)


__all__ = [
    "MAX_SURFACE_ATTEMPTS",
    "NORMAL_TOLERANCE",
    "CENTROID_SAMPLES",
    "DisplacedSolid",
    "SubtractionSolid",
    "IntersectionSolid",
    "ScaledSolid",
    "subtract",
    "intersect",
    "scale",
    "surface_centroid",
]
