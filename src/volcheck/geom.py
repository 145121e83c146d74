## foundational vector and point operations for volcheck
## Copyright (c) 2020 Richard DeVaul
## Copyright (c) 2020 yapCAD contributors

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

"""point, vector and bounding-box primitives for **volcheck**

Points and vectors are homogeneous coordinate 4-lists,
``[x, y, z, w]``.  Points live in the ``w = 1`` hyperplane; the R^3
operations below ignore ``w`` on input and always return ``w = 1``.

Bounding boxes are two-element lists of points, ``[pmin, pmax]``.
"""

from math import sqrt, pi

## constants
epsilon = 0.000005
pi2 = 2.0*pi

## operations on scalars
## ---------------------

def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n, bool)) and isinstance(n, (int, float))


def close(a, b, tol=epsilon):
    """ are two scalars the same within ``tol``
    """
    return abs(a-b) < tol


## operations on vectors and points
## --------------------------------

def vect(a=False, b=False, c=False, d=False):
    """make a homogeneous 4 vector from scalars or a sequence"""
    r = [0, 0, 0, 1]
    if isgoodnum(a):
        r[0] = a
        if isgoodnum(b):
            r[1] = b
            if isgoodnum(c):
                r[2] = c
                if isgoodnum(d):
                    r[3] = d
    elif isinstance(a, (tuple, list)):
        for i in range(min(4, len(a))):
            if isgoodnum(a[i]):
                r[i] = a[i]
    return r


def isvect(x):
    return isinstance(x, list) and len(x) == 4 and all(isgoodnum(c) for c in x)


def point(x=False, y=False, z=False):
    """make a point in the ``w = 1`` hyperplane.  Accepts scalars, or a
    point / sequence of up to three coordinates."""
    if isinstance(x, (tuple, list)):
        coords = [float(c) for c in list(x)[:3]]
        coords.extend([0.0] * (3 - len(coords)))
        return [coords[0], coords[1], coords[2], 1.0]
    r = vect(x, y, z)
    r[3] = 1.0
    return r


def add(a, b):
    """ 3 vector, `a + b`"""
    return [a[0]+b[0], a[1]+b[1], a[2]+b[2], 1.0]


def sub(a, b):
    """ 3 vector, `a - b`"""
    return [a[0]-b[0], a[1]-b[1], a[2]-b[2], 1.0]


def scale3(a, c):
    """ 3 vector ``a`` times scalar ``c``"""
    return [a[0]*c, a[1]*c, a[2]*c, 1.0]


def dot4(a, b):
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]+a[3]*b[3]


def mag(a):
    """ magnitude of 3 vector ``a``"""
    return sqrt(a[0]*a[0]+a[1]*a[1]+a[2]*a[2])


def dist(a, b):
    """ euclidean distance between 3 vector points ``a`` and ``b``"""
    return mag(sub(a, b))


## bounding boxes
## --------------

def bbox(points):
    """axis-aligned bounding box of a non-empty sequence of points"""
    if not points:
        raise ValueError('bbox of empty point list')
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    zs = [p[2] for p in points]
    return [point(min(xs), min(ys), min(zs)),
            point(max(xs), max(ys), max(zs))]


def bboxcorners(box):
    """the eight corner points of ``box``"""
    lo, hi = box
    return [point(x, y, z)
            for x in (lo[0], hi[0])
            for y in (lo[1], hi[1])
            for z in (lo[2], hi[2])]


def bboxcenter(box):
    lo, hi = box
    return point((lo[0]+hi[0])/2.0, (lo[1]+hi[1])/2.0, (lo[2]+hi[2])/2.0)


def bboxintersect(a, b):
    """intersection of two boxes, or ``None`` if they are disjoint"""
    lo = [max(a[0][i], b[0][i]) for i in range(3)]
    hi = [min(a[1][i], b[1][i]) for i in range(3)]
    if any(lo[i] > hi[i] for i in range(3)):
        return None
    return [point(lo), point(hi)]
