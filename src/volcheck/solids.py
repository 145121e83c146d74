"""Solid primitives and the solid capability interface.

Every solid answers the same small set of questions, in its own local
frame (lengths in mm):

``inside(p)``
    classify a point as :attr:`EInside.INSIDE`, :attr:`EInside.SURFACE`
    or :attr:`EInside.OUTSIDE`.  Points within :data:`SURFACE_TOLERANCE`
    of the boundary are on the surface.
``distance_to_in(p)``
    distance from an outside point to the boundary (0 for points that
    are not outside).
``distance_to_out(p)``
    distance from an inside point to the boundary (0 for points that
    are not inside).
``point_on_surface(rng=None)``
    a random point on the boundary, area weighted.
``surface_normal(p)``
    outward unit normal of the boundary nearest to ``p``; on an edge,
    the normalized sum of the normals of the faces meeting there.
``extent()``
    local axis-aligned bounding box ``[pmin, pmax]``.

Derived solids (subtraction, intersection, scaling, displacement) live in
:mod:`volcheck.boolean`.  Solids are immutable once constructed.
"""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from enum import Enum

from volcheck.errors import SolidError
from volcheck.geom import isgoodnum, point

SURFACE_TOLERANCE = 1e-9
DEFAULT_VOLUME_SAMPLES = 100000


class EInside(Enum):
    INSIDE = "inside"
    SURFACE = "surface"
    OUTSIDE = "outside"


def _rng(rng):
    return random if rng is None else rng


def _classify(signed_distance: float) -> EInside:
    if signed_distance > SURFACE_TOLERANCE:
        return EInside.OUTSIDE
    if signed_distance < -SURFACE_TOLERANCE:
        return EInside.INSIDE
    return EInside.SURFACE


def _positive(name: str, **dims: float) -> None:
    for key, value in dims.items():
        if not isgoodnum(value) or value <= 0.0:
            raise SolidError(f"solid '{name}': {key} must be a positive number, got {value!r}")


def _unit(x, y, z) -> list:
    norm = math.sqrt(x*x + y*y + z*z)
    if norm < 1e-12:
        return point(0.0, 0.0, 1.0)
    return point(x/norm, y/norm, z/norm)


def _sum_normals(normals) -> list:
    return _unit(sum(n[0] for n in normals),
                 sum(n[1] for n in normals),
                 sum(n[2] for n in normals))


def _uniform_direction(rng):
    """uniformly distributed unit vector"""
    while True:
        x, y, z = rng.gauss(0.0, 1.0), rng.gauss(0.0, 1.0), rng.gauss(0.0, 1.0)
        norm = math.sqrt(x*x + y*y + z*z)
        if norm > 1e-12:
            return x/norm, y/norm, z/norm


class Solid(ABC):
    """Abstract solid.  Subclasses implement the queries listed in the
    module docstring."""

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    @abstractmethod
    def inside(self, p) -> EInside:
        ...

    @abstractmethod
    def distance_to_in(self, p) -> float:
        ...

    @abstractmethod
    def distance_to_out(self, p) -> float:
        ...

    @abstractmethod
    def point_on_surface(self, rng=None) -> list:
        ...

    @abstractmethod
    def surface_normal(self, p) -> list:
        ...

    @abstractmethod
    def extent(self) -> list:
        ...

    @abstractmethod
    def surface_area(self) -> float:
        ...

    def cubic_volume(self, rng=None, samples: int = DEFAULT_VOLUME_SAMPLES) -> float:
        """Monte Carlo volume estimate over the solid's extent."""
        rng = _rng(rng)
        lo, hi = self.extent()
        box_volume = (hi[0] - lo[0]) * (hi[1] - lo[1]) * (hi[2] - lo[2])
        if box_volume <= 0.0 or samples <= 0:
            return 0.0
        hits = 0
        for _ in range(samples):
            p = point(rng.uniform(lo[0], hi[0]),
                      rng.uniform(lo[1], hi[1]),
                      rng.uniform(lo[2], hi[2]))
            if self.inside(p) is not EInside.OUTSIDE:
                hits += 1
        return box_volume * hits / samples


class Box(Solid):
    """Axis-aligned box with half-lengths ``dx``, ``dy``, ``dz``."""

    def __init__(self, name: str, dx: float, dy: float, dz: float):
        super().__init__(name)
        _positive(name, dx=dx, dy=dy, dz=dz)
        self.dx = float(dx)
        self.dy = float(dy)
        self.dz = float(dz)

    def _excess(self, p):
        return (abs(p[0]) - self.dx, abs(p[1]) - self.dy, abs(p[2]) - self.dz)

    def inside(self, p) -> EInside:
        return _classify(max(self._excess(p)))

    def distance_to_in(self, p) -> float:
        ex, ey, ez = (max(e, 0.0) for e in self._excess(p))
        return math.sqrt(ex*ex + ey*ey + ez*ez)

    def distance_to_out(self, p) -> float:
        return max(0.0, -max(self._excess(p)))

    def point_on_surface(self, rng=None) -> list:
        rng = _rng(rng)
        dx, dy, dz = self.dx, self.dy, self.dz
        areas = (dy*dz, dx*dz, dx*dy)
        pick = rng.uniform(0.0, sum(areas))
        sign = -1.0 if rng.random() < 0.5 else 1.0
        u = rng.uniform(-1.0, 1.0)
        v = rng.uniform(-1.0, 1.0)
        if pick < areas[0]:
            return point(sign*dx, u*dy, v*dz)
        if pick < areas[0] + areas[1]:
            return point(u*dx, sign*dy, v*dz)
        return point(u*dx, v*dy, sign*dz)

    def surface_normal(self, p) -> list:
        excess = self._excess(p)
        faces = [i for i in range(3) if abs(excess[i]) <= SURFACE_TOLERANCE]
        if not faces:
            faces = [max(range(3), key=lambda i: excess[i])]
        normals = []
        for i in faces:
            n = [0.0, 0.0, 0.0]
            n[i] = 1.0 if p[i] >= 0.0 else -1.0
            normals.append(n)
        return _sum_normals(normals)

    def extent(self) -> list:
        return [point(-self.dx, -self.dy, -self.dz),
                point(self.dx, self.dy, self.dz)]

    def surface_area(self) -> float:
        return 8.0 * (self.dx*self.dy + self.dy*self.dz + self.dz*self.dx)

    def cubic_volume(self, rng=None, samples: int = DEFAULT_VOLUME_SAMPLES) -> float:
        return 8.0 * self.dx * self.dy * self.dz


class Orb(Solid):
    """Full solid sphere of radius ``r``."""

    def __init__(self, name: str, r: float):
        super().__init__(name)
        _positive(name, r=r)
        self.r = float(r)

    def inside(self, p) -> EInside:
        return _classify(math.sqrt(p[0]*p[0] + p[1]*p[1] + p[2]*p[2]) - self.r)

    def distance_to_in(self, p) -> float:
        return max(0.0, math.sqrt(p[0]*p[0] + p[1]*p[1] + p[2]*p[2]) - self.r)

    def distance_to_out(self, p) -> float:
        return max(0.0, self.r - math.sqrt(p[0]*p[0] + p[1]*p[1] + p[2]*p[2]))

    def point_on_surface(self, rng=None) -> list:
        x, y, z = _uniform_direction(_rng(rng))
        return point(x*self.r, y*self.r, z*self.r)

    def surface_normal(self, p) -> list:
        return _unit(p[0], p[1], p[2])

    def extent(self) -> list:
        return [point(-self.r, -self.r, -self.r), point(self.r, self.r, self.r)]

    def surface_area(self) -> float:
        return 4.0 * math.pi * self.r**2

    def cubic_volume(self, rng=None, samples: int = DEFAULT_VOLUME_SAMPLES) -> float:
        return 4.0 / 3.0 * math.pi * self.r**3


class Sphere(Solid):
    """Spherical shell between ``rmin`` and ``rmax`` (``rmin`` may be 0)."""

    def __init__(self, name: str, rmin: float, rmax: float):
        super().__init__(name)
        _positive(name, rmax=rmax)
        if not isgoodnum(rmin) or rmin < 0.0 or rmin >= rmax:
            raise SolidError(f"solid '{name}': need 0 <= rmin < rmax, got rmin={rmin!r}, rmax={rmax!r}")
        self.rmin = float(rmin)
        self.rmax = float(rmax)

    def _signed(self, r):
        if self.rmin > 0.0:
            return max(r - self.rmax, self.rmin - r)
        return r - self.rmax

    def inside(self, p) -> EInside:
        return _classify(self._signed(math.sqrt(p[0]*p[0] + p[1]*p[1] + p[2]*p[2])))

    def distance_to_in(self, p) -> float:
        return max(0.0, self._signed(math.sqrt(p[0]*p[0] + p[1]*p[1] + p[2]*p[2])))

    def distance_to_out(self, p) -> float:
        return max(0.0, -self._signed(math.sqrt(p[0]*p[0] + p[1]*p[1] + p[2]*p[2])))

    def point_on_surface(self, rng=None) -> list:
        rng = _rng(rng)
        x, y, z = _uniform_direction(rng)
        outer = self.rmax**2
        inner = self.rmin**2
        r = self.rmax if rng.uniform(0.0, outer + inner) < outer else self.rmin
        return point(x*r, y*r, z*r)

    def surface_normal(self, p) -> list:
        r = math.sqrt(p[0]*p[0] + p[1]*p[1] + p[2]*p[2])
        if self.rmin > 0.0 and abs(r - self.rmin) < abs(r - self.rmax):
            return _unit(-p[0], -p[1], -p[2])
        return _unit(p[0], p[1], p[2])

    def extent(self) -> list:
        return [point(-self.rmax, -self.rmax, -self.rmax),
                point(self.rmax, self.rmax, self.rmax)]

    def surface_area(self) -> float:
        return 4.0 * math.pi * (self.rmax**2 + self.rmin**2)

    def cubic_volume(self, rng=None, samples: int = DEFAULT_VOLUME_SAMPLES) -> float:
        return 4.0 / 3.0 * math.pi * (self.rmax**3 - self.rmin**3)


class Tube(Solid):
    """Cylinder (``rmin == 0``) or annulus along z with half-length ``dz``.

    In the (r, z) half-plane the tube is the rectangle
    ``[rmin, rmax] x [-dz, dz]``, so both distances are exact.
    """

    def __init__(self, name: str, rmin: float, rmax: float, dz: float):
        super().__init__(name)
        _positive(name, rmax=rmax, dz=dz)
        if not isgoodnum(rmin) or rmin < 0.0 or rmin >= rmax:
            raise SolidError(f"solid '{name}': need 0 <= rmin < rmax, got rmin={rmin!r}, rmax={rmax!r}")
        self.rmin = float(rmin)
        self.rmax = float(rmax)
        self.dz = float(dz)

    def _excess(self, p):
        r = math.hypot(p[0], p[1])
        radial = r - self.rmax
        if self.rmin > 0.0:
            radial = max(radial, self.rmin - r)
        return radial, abs(p[2]) - self.dz

    def inside(self, p) -> EInside:
        return _classify(max(self._excess(p)))

    def distance_to_in(self, p) -> float:
        radial, axial = self._excess(p)
        return math.hypot(max(radial, 0.0), max(axial, 0.0))

    def distance_to_out(self, p) -> float:
        return max(0.0, -max(self._excess(p)))

    def point_on_surface(self, rng=None) -> list:
        rng = _rng(rng)
        height = 2.0 * self.dz
        outer = 2.0 * math.pi * self.rmax * height
        inner = 2.0 * math.pi * self.rmin * height
        cap = math.pi * (self.rmax**2 - self.rmin**2)
        pick = rng.uniform(0.0, outer + inner + 2.0*cap)
        phi = rng.uniform(0.0, 2.0 * math.pi)
        if pick < outer + inner:
            r = self.rmax if pick < outer else self.rmin
            z = rng.uniform(-self.dz, self.dz)
        else:
            r = math.sqrt(rng.uniform(self.rmin**2, self.rmax**2))
            z = self.dz if pick < outer + inner + cap else -self.dz
        return point(r*math.cos(phi), r*math.sin(phi), z)

    def surface_normal(self, p) -> list:
        r = math.hypot(p[0], p[1])
        ux, uy = (p[0]/r, p[1]/r) if r > 1e-12 else (1.0, 0.0)
        candidates = [(abs(r - self.rmax), (ux, uy, 0.0)),
                      (abs(abs(p[2]) - self.dz), (0.0, 0.0, 1.0 if p[2] >= 0.0 else -1.0))]
        if self.rmin > 0.0:
            candidates.append((abs(r - self.rmin), (-ux, -uy, 0.0)))
        normals = [n for d, n in candidates if d <= SURFACE_TOLERANCE]
        if not normals:
            normals = [min(candidates)[1]]
        return _sum_normals(normals)

    def extent(self) -> list:
        return [point(-self.rmax, -self.rmax, -self.dz),
                point(self.rmax, self.rmax, self.dz)]

    def surface_area(self) -> float:
        return (2.0 * math.pi * (self.rmax + self.rmin) * 2.0 * self.dz
                + 2.0 * math.pi * (self.rmax**2 - self.rmin**2))

    def cubic_volume(self, rng=None, samples: int = DEFAULT_VOLUME_SAMPLES) -> float:
        return math.pi * (self.rmax**2 - self.rmin**2) * 2.0 * self.dz


def issolid(x) -> bool:
    return isinstance(x, Solid)


__all__ = [
    "SURFACE_TOLERANCE",
    "EInside",
    "Solid",
    "Box",
    "Orb",
    "Sphere",
    "Tube",
    "issolid",
]
