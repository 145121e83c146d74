import math

import numpy as np
import pytest

from volcheck.boolean import DisplacedSolid, intersect, scale, subtract
from volcheck.errors import SolidError
from volcheck.geom import point
from volcheck.mesh import engines_available, solid_to_mesh
from volcheck.placement import Placement, VisAttributes
from volcheck.solids import Box, Orb, Tube
from volcheck.viewer import VIEWS, build_scene, export_scene, view_rotation
from volcheck.xform import RigidTransform, Translation

needs_engine = pytest.mark.skipif(not engines_available(),
                                  reason="no trimesh boolean backend installed")


class TestPrimitives:

    def test_box(self):
        mesh = solid_to_mesh(Box('b', 1, 2, 3))
        assert mesh.is_watertight
        assert mesh.volume == pytest.approx(48.0)
        assert np.allclose(mesh.bounds, [[-1, -2, -3], [1, 2, 3]])

    def test_orb(self):
        mesh = solid_to_mesh(Orb('o', 2.0))
        assert mesh.volume == pytest.approx(4.0 / 3.0 * math.pi * 8.0, rel=0.05)

    def test_tubes(self):
        cyl = solid_to_mesh(Tube('t', 0, 1.0, 2.0), sections=64)
        assert cyl.volume == pytest.approx(math.pi * 4.0, rel=0.01)
        ring = solid_to_mesh(Tube('t', 0.5, 1.0, 2.0), sections=64)
        assert ring.volume == pytest.approx(math.pi * 0.75 * 4.0, rel=0.01)

    def test_displaced(self):
        mesh = solid_to_mesh(DisplacedSolid(Box('b', 1, 1, 1), Translation(point(5, 0, 0))))
        assert np.allclose(mesh.bounds, [[4, -1, -1], [6, 1, 1]])

    def test_scaled(self):
        mesh = solid_to_mesh(scale(Box('b', 1, 1, 1), 2.0, center=point(1, 0, 0)))
        assert np.allclose(mesh.bounds, [[-3, -2, -2], [1, 2, 2]])

    def test_mesh_is_cacheable(self):
        box = Box('b', 1, 1, 1)
        first = solid_to_mesh(box)
        first.apply_translation([10, 0, 0])
        assert np.allclose(solid_to_mesh(box).bounds, [[-1, -1, -1], [1, 1, 1]])


class TestBooleanMeshes:

    @needs_engine
    def test_subtraction(self):
        s = subtract(Box('a', 1, 1, 1), Box('b', 1, 1, 1), Translation(point(1, 0, 0)))
        assert solid_to_mesh(s).volume == pytest.approx(4.0, rel=1e-3)

    @needs_engine
    def test_intersection(self):
        i = intersect(Box('a', 1, 1, 1), Box('b', 1, 1, 1), Translation(point(1, 0, 0)))
        assert solid_to_mesh(i).volume == pytest.approx(4.0, rel=1e-3)

    @pytest.mark.skipif(bool(engines_available()), reason="a boolean backend is installed")
    def test_without_engine(self):
        s = subtract(Box('a', 1, 1, 1), Box('b', 1, 1, 1), Translation(point(1, 0, 0)))
        with pytest.raises(SolidError):
            solid_to_mesh(s)


def _tree():
    world = Placement('world', Box('world', 10, 10, 10))
    a = world.add_child(Placement('A', Box('a', 1, 1, 1), RigidTransform((2, 0, 0))))
    a.add_child(Placement('A1', Orb('o', 0.5), RigidTransform((0, 0, 0.2))))
    world.add_child(Placement('B', Box('b', 1, 1, 1), RigidTransform((-2, 0, 0)),
                              vis=VisAttributes(visible=False)))
    return world


class TestViewer:

    def test_build_scene(self):
        world = _tree()
        world.children[0].vis.colour = (1.0, 0.0, 0.0, 0.5)
        scene = build_scene(world)
        assert len(scene.geometry) == 3
        # nested transforms are composed
        assert np.allclose(scene.bounds, [[-10, -10, -10], [10, 10, 10]])
        red = [g for g in scene.geometry.values()
               if tuple(g.visual.face_colors[0]) == (255, 0, 0, 128)]
        assert len(red) == 1

    def test_child_transform(self):
        world = _tree()
        world.solid = Box('world', 0.1, 0.1, 0.1)
        scene = build_scene(world)
        assert scene.bounds[1][0] == pytest.approx(3.0)
        assert scene.bounds[1][2] == pytest.approx(1.0)

    def test_untessellated_solid_is_skipped(self, monkeypatch, caplog):
        import volcheck.viewer as viewer

        def refuse(solid, sections):
            if isinstance(solid, Orb):
                raise SolidError('no backend')
            return solid_to_mesh(solid, sections)

        monkeypatch.setattr(viewer, 'solid_to_mesh', refuse)
        scene = build_scene(_tree())
        assert len(scene.geometry) == 2
        assert 'skipping world/A/A1' in caplog.text

    def test_view_rotation(self):
        for name in VIEWS:
            r = view_rotation(name)
            assert np.allclose(r[:3, :3].T @ r[:3, :3], np.eye(3))
        assert np.allclose(view_rotation('top')[:3, 2], [0, 1, 0])
        with pytest.raises(ValueError):
            view_rotation('sideways')

    def test_export(self, tmp_path):
        path = export_scene(build_scene(_tree()), tmp_path / 'out' / 'scene.glb')
        assert path.exists()
        assert path.stat().st_size > 0
