import pytest
from volcheck.xform import *
## unit tests for volcheck xform.py


def _approx_point(p, q, tol=1e-9):
    return all(abs(p[i] - q[i]) < tol for i in range(3))


class TestXform:
    """unit tests for volcheck matrix operations"""

    def test_matrix(self):
        foo = Matrix([1,2,3,4,5,6,7,8,9,10,11,12,13,14,15,16])
        bar = Matrix([[1,0,0,1],[0,1,0,1],[0,0,1,1],[0,0,0,1]])
        baz = geom.vect(1,2,3)
        I = Matrix()
        assert(I.mul(bar).m == bar.m)
        assert(I.mul(foo).m == foo.m)
        assert(I.mul(I).m == I.m)
        assert(foo.mul(bar).m == [[1,2,3,10],[5,6,7,26],[9,10,11,42],[13,14,15,58]])
        assert(foo.mul(baz) == [18, 46, 74, 102])
        assert(foo.mul(10.0).m[0] == [10.0,20.0,30.0,40.0])
        assert(I.mul(baz) == baz)

    def test_bad_matrix(self):
        with pytest.raises(ValueError):
            Matrix([1,2,3])
        with pytest.raises(ValueError):
            Matrix().set(4,0,1.0)
        with pytest.raises(ValueError):
            Matrix().set(0,0,True)

    def test_translation(self):
        T = Translation(geom.point(1,2,3))
        assert T.transform_point(geom.point(0,0,0)) == [1,2,3,1.0]
        Ti = Translation(geom.point(1,2,3),inverse=True)
        assert Ti.transform_point(geom.point(1,2,3)) == [0,0,0,1.0]

    def test_rotation(self):
        R = Rotation(geom.point(0,0,1),90)
        assert _approx_point(R.transform_point(geom.point(1,0,0)),[0,1,0])
        Ri = Rotation(geom.point(0,0,2),90,inverse=True)
        assert _approx_point(Ri.transform_point(geom.point(0,1,0)),[1,0,0])
        with pytest.raises(ValueError):
            Rotation(geom.point(0,0,0),45)

    def test_compose_order(self):
        T = Translation(geom.point(1,0,0))
        R = Rotation(geom.point(0,0,1),90)
        # rotation first, then translation
        assert _approx_point(T.compose(R).transform_point(geom.point(1,0,0)),[1,1,0])
        # translation first, then rotation
        assert _approx_point(R.compose(T).transform_point(geom.point(1,0,0)),[0,2,0])

    def test_rotation_xyz(self):
        R = RotationXYZ([90,0,0])
        assert _approx_point(R.transform_point(geom.point(0,1,0)),[0,0,1])
        R = RotationXYZ([90,90,0])
        # x first: y -> z, then y: z -> x
        assert _approx_point(R.transform_point(geom.point(0,1,0)),[1,0,0])
        assert RotationXYZ([0,0,0]).isidentity()

    def test_inverse(self):
        M = RigidTransform([1,2,3],[10,20,30])
        assert M.compose(M.inverse()).isidentity(tol=1e-9)
        assert M.inverse().compose(M).isidentity(tol=1e-9)
        p = geom.point(0.3,-4,7)
        assert _approx_point(M.inverse().transform_point(M.transform_point(p)),p)

    def test_scale_inverse(self):
        S = Scale(2.0)
        assert S.transform_point(geom.point(1,1,1)) == [2.0,2.0,2.0,1.0]
        assert _approx_point(S.inverse().transform_point(geom.point(2,2,2)),[1,1,1])
        assert Scale(2.0,inverse=True).transform_point(geom.point(2,4,6)) == [1.0,2.0,3.0,1.0]
        with pytest.raises(ValueError):
            Scale(0).inverse()

    def test_transform_vector_ignores_translation(self):
        M = RigidTransform([5,5,5],[0,0,90])
        assert _approx_point(M.transform_vector(geom.vect(1,0,0)),[0,1,0])
        assert _approx_point(M.translation(),[5,5,5])
