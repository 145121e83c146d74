import random

import pytest

from volcheck.boolean import (
    DisplacedSolid,
    IntersectionSolid,
    ScaledSolid,
    SubtractionSolid,
    intersect,
    scale,
    subtract,
    surface_centroid,
)
from volcheck.errors import SolidError
from volcheck.geom import point
from volcheck.solids import Box, EInside, Orb, Sphere
from volcheck.xform import Rotation, Translation


def _approx(v, expected):
    return v[:3] == pytest.approx(list(expected), abs=1e-9)


def _unit_boxes():
    return Box('a', 1, 1, 1), Box('b', 1, 1, 1)


def _flush_cut():
    # a minus its own copy shifted to -x; the y and z faces of both coincide
    return subtract(Box('a', 1, 1, 1), Box('w', 1, 1, 1), Translation(point(-0.5, 0, 0)))


class TestDisplaced:

    def test_translation(self):
        d = DisplacedSolid(Box('b', 1, 1, 1), Translation(point(5, 0, 0)))
        assert d.inside(point(5, 0, 0)) is EInside.INSIDE
        assert d.inside(point(0, 0, 0)) is EInside.OUTSIDE
        assert d.distance_to_in(point(2, 0, 0)) == pytest.approx(2.0)
        lo, hi = d.extent()
        assert lo[0] == pytest.approx(4.0)
        assert hi[0] == pytest.approx(6.0)

    def test_rotated_extent(self):
        d = DisplacedSolid(Box('b', 2, 1, 1), Rotation(point(0, 0, 1), 90))
        lo, hi = d.extent()
        assert lo[0] == pytest.approx(-1.0)
        assert hi[1] == pytest.approx(2.0)
        assert d.inside(point(0, 1.5, 0)) is EInside.INSIDE
        assert d.inside(point(1.5, 0, 0)) is EInside.OUTSIDE

    def test_surface_points(self):
        d = DisplacedSolid(Orb('o', 1), Translation(point(0, 0, 3)))
        rng = random.Random(11)
        for _ in range(100):
            assert d.inside(d.point_on_surface(rng)) is EInside.SURFACE

    def test_rotated_normal(self):
        d = DisplacedSolid(Box('b', 2, 1, 1), Rotation(point(0, 0, 1), 90))
        assert _approx(d.surface_normal(point(0, 2, 0)), (0, 1, 0))
        assert _approx(d.surface_normal(point(1, 0, 0)), (1, 0, 0))


class TestSubtraction:

    def test_inside(self):
        a, b = _unit_boxes()
        s = subtract(a, b, Translation(point(1, 0, 0)))
        assert isinstance(s, SubtractionSolid)
        assert s.name == 'a-b'
        assert s.inside(point(-0.5, 0, 0)) is EInside.INSIDE
        assert s.inside(point(0.5, 0, 0)) is EInside.OUTSIDE
        assert s.inside(point(0, 0, 0)) is EInside.SURFACE
        assert s.inside(point(5, 0, 0)) is EInside.OUTSIDE

    def test_distances(self):
        a, b = _unit_boxes()
        s = subtract(a, b, Translation(point(1, 0, 0)))
        assert s.distance_to_in(point(0.5, 0, 0)) == pytest.approx(0.5)
        assert s.distance_to_out(point(-0.5, 0, 0)) == pytest.approx(0.5)

    def test_surface_points(self):
        a, b = _unit_boxes()
        s = subtract(a, b, Translation(point(1, 0, 0)))
        rng = random.Random(5)
        for _ in range(200):
            p = s.point_on_surface(rng)
            assert s.inside(p) is EInside.SURFACE

    def test_coincident_faces(self):
        s = _flush_cut()
        assert s.inside(point(-0.3, 0.2, -1.0)) is EInside.OUTSIDE
        assert s.inside(point(0.75, 0.2, -1.0)) is EInside.SURFACE
        assert s.inside(point(0.5, 0.2, 0)) is EInside.SURFACE
        assert s.inside(point(0.75, 0.2, 0)) is EInside.INSIDE

    def test_coincident_faces_sampling(self):
        s = _flush_cut()
        rng = random.Random(6)
        for _ in range(300):
            assert s.point_on_surface(rng)[0] >= 0.5 - 1e-9
        assert s.cubic_volume(random.Random(2), samples=20000) == pytest.approx(2.0, rel=0.05)

    def test_normals(self):
        s = _flush_cut()
        assert _approx(s.surface_normal(point(0.5, 0.2, 0)), (-1, 0, 0))
        assert _approx(s.surface_normal(point(1.0, 0.2, 0)), (1, 0, 0))
        assert _approx(s.surface_normal(point(0.75, 0.2, -1.0)), (0, 0, -1))

    def test_identity_transform_keeps_operand(self):
        a, b = _unit_boxes()
        s = subtract(a, b)
        assert s.b is b

    def test_bad_operand(self):
        with pytest.raises(SolidError):
            subtract(Box('a', 1, 1, 1), [0, 0, 0])


class TestIntersection:

    def test_inside(self):
        a, b = _unit_boxes()
        i = intersect(a, b, Translation(point(1, 0, 0)))
        assert isinstance(i, IntersectionSolid)
        assert i.inside(point(0.5, 0, 0)) is EInside.INSIDE
        assert i.inside(point(-0.5, 0, 0)) is EInside.OUTSIDE
        assert i.inside(point(1.0, 0, 0)) is EInside.SURFACE
        assert i.distance_to_out(point(0.5, 0, 0)) == pytest.approx(0.5)
        assert i.distance_to_in(point(-0.5, 0, 0)) == pytest.approx(0.5)

    def test_extent_and_volume(self):
        a, b = _unit_boxes()
        i = intersect(a, b, Translation(point(1, 0, 0)))
        lo, hi = i.extent()
        assert lo[:3] == [0.0, -1.0, -1.0]
        assert hi[:3] == [1.0, 1.0, 1.0]
        # the extent is exactly the overlap cuboid
        assert i.cubic_volume(random.Random(1), samples=2000) == pytest.approx(4.0)

    def test_surface_points(self):
        a, b = _unit_boxes()
        i = intersect(a, b, Translation(point(1, 0, 0)))
        rng = random.Random(7)
        for _ in range(200):
            assert i.inside(i.point_on_surface(rng)) is EInside.SURFACE

    def test_coincident_faces(self):
        a, b = _unit_boxes()
        i = intersect(a, b, Translation(point(1, 0, 0)))
        # both +y faces: the shared face bounds the intersection
        assert i.inside(point(0.5, 1.0, 0)) is EInside.SURFACE
        assert _approx(i.surface_normal(point(0.5, 1.0, 0)), (0, 1, 0))
        assert _approx(i.surface_normal(point(1.0, 0.2, 0)), (1, 0, 0))

    def test_back_to_back_faces(self):
        # the box face x = 1 touches the inner wall of the shell there
        i = intersect(Box('a', 1, 1, 1), Sphere('s', 1.0, 2.0))
        assert i.inside(point(1.0, 0, 0)) is EInside.OUTSIDE
        assert i.inside(point(0.9, 0.9, 0.9)) is EInside.INSIDE

    def test_disjoint(self):
        a, b = _unit_boxes()
        with pytest.raises(SolidError):
            intersect(a, b, Translation(point(3, 0, 0)))

    def test_touching_is_empty(self):
        a, b = _unit_boxes()
        with pytest.raises(SolidError):
            intersect(a, b, Translation(point(2, 0, 0)))

    def test_surface_sampling_gives_up(self):
        # extents overlap but the solids do not
        a = Orb('a', 1.0)
        b = Orb('b', 1.0)
        i = intersect(a, b, Translation(point(1.9, 1.9, 0)))
        assert i.inside(point(0.95, 0.95, 0)) is EInside.OUTSIDE
        with pytest.raises(SolidError):
            i.point_on_surface(random.Random(2))


class TestScaled:

    def test_scale_about_extent_center(self):
        s = scale(Box('b', 1, 1, 1), 2.0)
        assert isinstance(s, ScaledSolid)
        assert s.inside(point(1.5, 0, 0)) is EInside.INSIDE
        assert s.inside(point(2.5, 0, 0)) is EInside.OUTSIDE
        assert s.distance_to_out(point(0, 0, 0)) == pytest.approx(2.0)
        assert s.distance_to_in(point(3, 0, 0)) == pytest.approx(1.0)
        assert s.cubic_volume() == pytest.approx(64.0)

    def test_scale_about_given_center(self):
        s = scale(Box('b', 1, 1, 1), 2.0, center=point(1, 0, 0))
        lo, hi = s.extent()
        assert lo[0] == pytest.approx(-3.0)
        assert hi[0] == pytest.approx(1.0)

    def test_inflated_region_contains_boundary(self):
        a, b = _unit_boxes()
        region = intersect(a, b, Translation(point(1, 0, 0)))
        inflated = scale(region, 1.001)
        rng = random.Random(9)
        for _ in range(300):
            assert inflated.inside(region.point_on_surface(rng)) is EInside.INSIDE

    def test_bad_factor(self):
        with pytest.raises(SolidError):
            scale(Box('b', 1, 1, 1), 0)
        with pytest.raises(SolidError):
            scale(Box('b', 1, 1, 1), -1.5)


class TestCentroid:

    def test_inside_flush_cut(self):
        s = _flush_cut()
        c = surface_centroid(s, random.Random(3))
        assert c[0] == pytest.approx(0.75, abs=0.1)
        assert s.inside(c) is EInside.INSIDE

    def test_scaling_about_centroid(self):
        s = _flush_cut()
        rng = random.Random(12)
        inflated = scale(s, 1.001, center=surface_centroid(s, rng))
        for _ in range(300):
            assert inflated.inside(s.point_on_surface(rng)) is EInside.INSIDE

    def test_empty_region_raises(self):
        i = intersect(Orb('a', 1.0), Orb('b', 1.0), Translation(point(1.9, 1.9, 0)))
        with pytest.raises(SolidError):
            surface_centroid(i, random.Random(2))
