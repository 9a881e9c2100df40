# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Combinatorial mesh item neighborhood iterators.

Helpers that walk the index structure of a :class:`~hedge.hds.Mesh`.
Half-edges of a face loop are visited following ``next``, half-edges
leaving a vertex are visited by rotating with ``twin`` and ``next``.

Note
----
The iterators do not guard against corrupt connectivity. Use
:mod:`hedge.validation` to diagnose a mesh first.
"""

from hedge.kernel import VertexIndex
from hedge.kernel import EdgeIndex
from hedge.kernel import FaceIndex


def loop(mesh, edge):
    """ Half-edge loop iterator.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    edge : EdgeIndex
        First half-edge of the traversal.

    Yields
    ------
    EdgeIndex
        Half-edges of the face or boundary loop that contains `edge`,
        starting with `edge`.
    """
    h = edge

    while True:
        yield h
        h = mesh[h].next

        if h == edge:
            return


def _ring(mesh, vertex):
    """ Outgoing half-edge iterator.
    """
    start = mesh[vertex].edge

    if start is None:
        return

    h = start

    while True:
        yield h
        h = mesh[mesh[h].twin].next

        if h == start:
            return


def halfs(mesh, item):
    """ Half-edge iterator.

    The returned iterator traverses incident half-edges of `item`
    depending on its type:

    .. table::
       :width: 100%
       :widths: 20, 80

       =================== ============================================
       :class:`VertexIndex` traversal of outward pointing half-edges
       ------------------- --------------------------------------------
       :class:`FaceIndex`  traversal of the face loop from its root
       ------------------- --------------------------------------------
       :class:`EdgeIndex`  traversal of the loop containing the edge
       =================== ============================================

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    item : VertexIndex or EdgeIndex or FaceIndex
        The base item.

    Yields
    ------
    EdgeIndex
    """
    if isinstance(item, VertexIndex):
        return _ring(mesh, item)

    if isinstance(item, FaceIndex):
        return loop(mesh, mesh[item].edge)

    if isinstance(item, EdgeIndex):
        return loop(mesh, item)

    raise TypeError(f'cannot iterate half-edges of {item!r}')


def verts(mesh, item=None):
    """ Vertex iterator.

    Adjacent vertices of a vertex, the vertices of a face in loop order
    starting with the origin of its root edge, or all vertices of the
    mesh if `item` is not given.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    item : VertexIndex or FaceIndex, optional
        The base item.

    Yields
    ------
    VertexIndex
    """
    if item is None:
        return iter(mesh.vertices.indices())

    if isinstance(item, VertexIndex):
        return (mesh[h].vertex for h in _ring(mesh, item))

    if isinstance(item, FaceIndex):
        return (mesh[mesh[h].twin].vertex for h in halfs(mesh, item))

    raise TypeError(f'cannot iterate vertices of {item!r}')


def faces(mesh, item=None):
    """ Face iterator.

    Incident faces of a vertex or all faces of the mesh if `item` is
    not given.

    Yields
    ------
    FaceIndex
    """
    if item is None:
        return iter(mesh.faces.indices())

    if isinstance(item, VertexIndex):
        return (mesh[h].face for h in _ring(mesh, item)
                if mesh[h].face is not None)

    raise TypeError(f'cannot iterate faces of {item!r}')


def edges(mesh):
    """ Edge iterator.

    Formally, an undirected edge is defined as a pair of oppositely
    oriented half-edges. To visit the edges of a mesh, this iterator
    yields exactly one of the two half-edge representatives of an edge,
    the one with the smaller index.

    Yields
    ------
    EdgeIndex
    """
    return (h for h, edge in mesh.edges if h < edge.twin)
