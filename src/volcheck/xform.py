## affine transformations for 3D homogeneous coordinates in volcheck

## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

from math import cos, sin

import volcheck.geom as geom

## a matrix is represented as a list of four four-vectors (rows).
## Vectors are plain lists, so Mx implies a column vector.

## Placement transforms map points from a child's local frame into its
## mother's frame.  compose() follows function composition:
## A.compose(B) applies B first, then A.


class Matrix:
    """4x4 transformation matrix for homogeneous 3D coordinates"""

    def __init__(self, a=False):
        self.m = [[1, 0, 0, 0],
                  [0, 1, 0, 0],
                  [0, 0, 1, 0],
                  [0, 0, 0, 1]]

        if isinstance(a, Matrix):
            self.m = [list(row) for row in a.m]

        elif isinstance(a, (tuple, list)):
            if len(a) == 4 and all(isinstance(r, (tuple, list)) and len(r) == 4 for r in a):
                for i in range(4):
                    for j in range(4):
                        self.set(i, j, a[i][j])
            elif len(a) == 16:
                for i in range(4):
                    for j in range(4):
                        self.set(i, j, a[i*4+j])
            else:
                raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
        elif a is not False:
            raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))

    def __repr__(self):
        return "Matrix({},{},{},{})".format(self.m[0], self.m[1],
                                            self.m[2], self.m[3])

    def __eq__(self, other):
        return isinstance(other, Matrix) and self.m == other.m

    def get(self, i, j):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to get: {},{}'.format(i, j))
        return self.m[i][j]

    def set(self, i, j, x):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to set: {},{}'.format(i, j))
        if not geom.isgoodnum(x):
            raise ValueError('bad value passed to set: {}'.format(x))
        self.m[i][j] = x

    def getcol(self, j):
        return [self.m[0][j], self.m[1][j], self.m[2][j], self.m[3][j]]

    # matrix multiply.  If x is a matrix, compute MX.  If x is a
    # vector, compute Mx.  If x is a scalar, compute xM.
    def mul(self, x):
        if isinstance(x, Matrix):
            result = Matrix()
            for i in range(4):
                for j in range(4):
                    result.m[i][j] = geom.dot4(self.m[i], x.getcol(j))
            return result
        elif geom.isvect(x):
            return [geom.dot4(self.m[i], x) for i in range(4)]
        elif geom.isgoodnum(x):
            return Matrix([[c*x for c in row] for row in self.m])

        raise ValueError('bad thing passed to mul(): {}'.format(x))

    def compose(self, other):
        """return the transform that applies ``other`` first, then ``self``"""
        return self.mul(other)

    def transform_point(self, p):
        """map point ``p`` through this (affine) transform"""
        m = self.m
        x, y, z = p[0], p[1], p[2]
        return [m[0][0]*x + m[0][1]*y + m[0][2]*z + m[0][3],
                m[1][0]*x + m[1][1]*y + m[1][2]*z + m[1][3],
                m[2][0]*x + m[2][1]*y + m[2][2]*z + m[2][3],
                1.0]

    def transform_vector(self, v):
        """map direction ``v``, ignoring the translation part"""
        m = self.m
        return [m[0][0]*v[0] + m[0][1]*v[1] + m[0][2]*v[2],
                m[1][0]*v[0] + m[1][1]*v[1] + m[1][2]*v[2],
                m[2][0]*v[0] + m[2][1]*v[1] + m[2][2]*v[2],
                1.0]

    def translation(self):
        return geom.point(self.m[0][3], self.m[1][3], self.m[2][3])

    def inverse(self):
        """inverse of an affine transform (bottom row ``0 0 0 1``)"""
        a = self.m
        c00 = a[1][1]*a[2][2] - a[1][2]*a[2][1]
        c01 = a[1][2]*a[2][0] - a[1][0]*a[2][2]
        c02 = a[1][0]*a[2][1] - a[1][1]*a[2][0]
        det = a[0][0]*c00 + a[0][1]*c01 + a[0][2]*c02
        if abs(det) < 1e-12:
            raise ValueError('singular matrix has no inverse: {}'.format(self))
        inv = [[c00/det,
                (a[0][2]*a[2][1] - a[0][1]*a[2][2])/det,
                (a[0][1]*a[1][2] - a[0][2]*a[1][1])/det],
               [c01/det,
                (a[0][0]*a[2][2] - a[0][2]*a[2][0])/det,
                (a[0][2]*a[1][0] - a[0][0]*a[1][2])/det],
               [c02/det,
                (a[0][1]*a[2][0] - a[0][0]*a[2][1])/det,
                (a[0][0]*a[1][1] - a[0][1]*a[1][0])/det]]
        t = [a[0][3], a[1][3], a[2][3]]
        rows = []
        for i in range(3):
            ti = -(inv[i][0]*t[0] + inv[i][1]*t[1] + inv[i][2]*t[2])
            rows.append([inv[i][0], inv[i][1], inv[i][2], ti])
        rows.append([0, 0, 0, 1])
        return Matrix(rows)

    def isidentity(self, tol=geom.epsilon):
        ident = Matrix()
        return all(geom.close(self.m[i][j], ident.m[i][j], tol)
                   for i in range(4) for j in range(4))

    def tolist(self):
        return [list(row) for row in self.m]


# return the generalized 4x4 arbitrary axis rotation matrix, angle in
# degrees
def Rotation(axis, angle, inverse=False):
    m = geom.mag(axis)
    if m < geom.epsilon:
        raise ValueError('zero-length rotation axis not allowed')
    u = axis
    if not geom.close(m, 1.0):
        u = geom.scale3(axis, 1.0/m)

    if inverse:
        angle *= -1.0
    rad = (angle % 360.0)*geom.pi2/360.0

    ux = u[0]
    uy = u[1]
    uz = u[2]

    cang = cos(rad)
    cmin = 1.0-cang
    sang = sin(rad)

    # see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    R = [[cang + ux*ux*cmin, ux*uy*cmin-uz*sang, ux*uz*cmin+uy*sang, 0],
         [uy*ux*cmin+uz*sang, cang + uy*uy*cmin, uy*uz*cmin - ux*sang, 0],
         [uz*ux*cmin-uy*sang, uz*uy*cmin+ux*sang, cang+uz*uz*cmin, 0],
         [0, 0, 0, 1]]

    return Matrix(R)


def Translation(delta, inverse=False):
    if inverse:
        delta = geom.scale3(delta, -1.0)
    T = [[1, 0, 0, delta[0]],
         [0, 1, 0, delta[1]],
         [0, 0, 1, delta[2]],
         [0, 0, 0, 1]]
    return Matrix(T)


def Scale(x, y=False, z=False, inverse=False):
    if geom.isgoodnum(x):
        sx = x
        if geom.isgoodnum(y) and geom.isgoodnum(z):
            sy = y
            sz = z
        else:
            sy = sz = x
    elif isinstance(x, (tuple, list)):
        sx, sy, sz = x[0], x[1], x[2]
    else:
        raise ValueError('bad scaling values passed to Scale')

    if inverse:
        sx = 1.0/sx
        sy = 1.0/sy
        sz = 1.0/sz

    S = [[sx, 0, 0, 0],
         [0, sy, 0, 0],
         [0, 0, sz, 0],
         [0, 0, 0, 1.0]]
    return Matrix(S)


## rotation about x, then y, then z (angles in degrees)
def RotationXYZ(angles):
    rx, ry, rz = angles[0], angles[1], angles[2]
    R = Matrix()
    if rx:
        R = Rotation(geom.point(1, 0, 0), rx).compose(R)
    if ry:
        R = Rotation(geom.point(0, 1, 0), ry).compose(R)
    if rz:
        R = Rotation(geom.point(0, 0, 1), rz).compose(R)
    return R


## rigid placement: rotate in the local frame, then translate
def RigidTransform(position=(0, 0, 0), angles=(0, 0, 0)):
    return Translation(geom.point(position)).compose(RotationXYZ(angles))
