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

""" Mesh operations.

Operations are immutable descriptions of a change to the mesh. They are
applied with :meth:`Mesh.add <hedge.hds.Mesh.add>` or
:meth:`Mesh.remove <hedge.hds.Mesh.remove>`, which hand them an
:class:`~hedge.hds.Editor`. All writes go through the editor and are
undone if the operation raises.

>>> from hedge.hds import Mesh
>>> mesh = Mesh()
>>> f = mesh.add(AddTriangle())
>>> mesh.remove(RemoveFace(f, cascade=True, prune_vertices=True))
>>> mesh.size
(0, 0, 0)
"""

from dataclasses import dataclass

from hedge.errors import InvalidIndexError
from hedge.errors import NonManifoldEdgeError
from hedge.errors import NonManifoldVertexError
from hedge.errors import EdgeBoundsFaceError
from hedge.errors import VertexInUseError
from hedge.iterators import halfs
from hedge.kernel import VertexIndex
from hedge.kernel import EdgeIndex
from hedge.kernel import FaceIndex


@dataclass(frozen=True)
class Operation:
    """ Operation base class.
    """

    def apply(self, editor):
        """ Perform the operation.

        Parameters
        ----------
        editor : Editor
            Mutation capability of the target mesh.

        Returns
        -------
        Index or None
        """
        raise NotImplementedError


@dataclass(frozen=True)
class AddOperation(Operation):
    """ Base class of operations that create mesh items.
    """


@dataclass(frozen=True)
class RemoveOperation(Operation):
    """ Base class of operations that delete mesh items.
    """


@dataclass(frozen=True)
class AddVertex(AddOperation):
    """ Create an isolated vertex.

    Attributes
    ----------
    data : object
        Opaque vertex payload.
    """

    data: object = None

    def apply(self, editor):
        return editor.add_vertex(self.data)


@dataclass(frozen=True)
class AddFace(AddOperation):
    """ Create a polygonal face.

    Attributes
    ----------
    vertices : tuple
        Vertex loop in counter-clockwise order. :obj:`None` entries
        request a new vertex.
    """

    vertices: tuple

    def __post_init__(self):
        object.__setattr__(self, 'vertices', tuple(self.vertices))

    def apply(self, editor):
        return _add_face(editor, self.vertices)


@dataclass(frozen=True)
class AddTriangle(AddOperation):
    """ Create a triangle.

    Vertices that are not given are created.
    """

    a: VertexIndex = None
    b: VertexIndex = None
    c: VertexIndex = None

    def apply(self, editor):
        return _add_face(editor, (self.a, self.b, self.c))


@dataclass(frozen=True)
class RemoveFace(RemoveOperation):
    """ Delete a face.

    The half-edges of the face loop become boundary half-edges.

    Attributes
    ----------
    face : FaceIndex
        Face to be removed.
    cascade : bool
        Also remove edges that are left without a face on both sides.
    prune_vertices : bool
        Remove vertices that are left isolated.
    """

    face: object
    cascade: bool = False
    prune_vertices: bool = False

    def apply(self, editor):
        _expect(self.face, FaceIndex)
        _remove_face(editor, self.face, self.cascade, self.prune_vertices)


@dataclass(frozen=True)
class RemoveEdge(RemoveOperation):
    """ Delete an edge, i.e., a pair of half-edges.

    Attributes
    ----------
    edge : EdgeIndex
        Either half of the edge.
    cascade : bool
        Remove the faces bounded by the edge first.
    prune_vertices : bool
        Remove end points that are left isolated.
    """

    edge: object
    cascade: bool = False
    prune_vertices: bool = False

    def apply(self, editor):
        _expect(self.edge, EdgeIndex)

        mesh = editor.mesh
        edge = mesh[self.edge]
        twin = mesh[edge.twin]

        bounded = [f for f in (edge.face, twin.face) if f is not None]

        if bounded and not self.cascade:
            raise EdgeBoundsFaceError(f'{self.edge!r} bounds {bounded!r}')

        for face in dict.fromkeys(bounded):
            _remove_face(editor, face)

        ends = (twin.vertex, edge.vertex)
        _remove_edge_pair(editor, self.edge)

        if self.prune_vertices:
            _prune_vertices(editor, ends)


@dataclass(frozen=True)
class RemoveVertex(RemoveOperation):
    """ Delete a vertex.

    Attributes
    ----------
    vertex : VertexIndex
        Vertex to be removed.
    cascade : bool
        Remove all incident edges and faces first. Neighbors are left
        in place, possibly isolated.
    """

    vertex: object
    cascade: bool = False

    def apply(self, editor):
        _expect(self.vertex, VertexIndex)

        mesh = editor.mesh

        if not mesh[self.vertex].isolated:
            if not self.cascade:
                raise VertexInUseError(f'{self.vertex!r} has edges')

            while mesh[self.vertex].edge is not None:
                RemoveEdge(mesh[self.vertex].edge, cascade=True).apply(editor)

        editor.remove_vertex(self.vertex)


def _expect(index, index_type):
    if not isinstance(index, index_type):
        raise TypeError(f'expected {index_type.__name__}, got {index!r}')


def _is_free(mesh, vertex):
    """ Whether a face can be attached at a vertex.
    """
    edge = mesh[vertex].edge
    return edge is None or mesh[edge].face is None


def _add_face(editor, vertices):
    """ Insert a face into the mesh.

    Existing boundary half-edges are reused. Boundary patches that meet
    at a vertex are reordered if necessary, so that the half-edges of
    the new face become consecutive.
    """
    mesh = editor.mesh
    n = len(vertices)

    if n < 3:
        raise ValueError(f'a face needs at least 3 vertices, got {n}')

    given = [v for v in vertices if v is not None]

    for v in given:
        _expect(v, VertexIndex)
        if v not in mesh:
            raise InvalidIndexError(f'{v!r} does not refer to a vertex')

    if len(set(given)) != len(given):
        raise ValueError(f'repeated vertices in {vertices!r}')

    verts = [editor.add_vertex() if v is None else v for v in vertices]

    halfs = [None] * n
    is_new = [True] * n

    for i in range(n):
        h = mesh.find_edge(verts[i], verts[(i + 1) % n])

        if h is not None:
            if mesh[h].face is not None:
                raise NonManifoldEdgeError(f'{h!r} already bounds a face')

            halfs[i] = h
            is_new[i] = False

    for v in verts:
        if not _is_free(mesh, v):
            raise NonManifoldVertexError(f'{v!r} is an interior vertex')

    # Reused half-edges of consecutive sides have to be consecutive in
    # their boundary loop. Otherwise, the patch between them is moved
    # to another gap of the boundary around the common vertex.
    for i in range(n):
        ii = (i + 1) % n

        if is_new[i] or is_new[ii]:
            continue

        inner_prev = halfs[i]
        inner_next = halfs[ii]

        if mesh[inner_prev].next == inner_next:
            continue

        boundary_prev = mesh[inner_next].twin

        for _ in range(mesh.edge_count):
            boundary_prev = mesh[mesh[boundary_prev].next].twin

            if mesh[boundary_prev].face is None:
                break
        else:
            raise NonManifoldVertexError(f'no gap at {verts[ii]!r}')

        boundary_next = mesh[boundary_prev].next

        # inner_prev ends the fan of inner_next, no gap to move the patch to.
        if boundary_prev == inner_prev or boundary_next == inner_next:
            raise NonManifoldVertexError(
                f'patch re-linking failed at {verts[ii]!r}')

        patch_start = mesh[inner_prev].next
        patch_end = mesh[inner_next].prev

        editor.set_next(boundary_prev, patch_start)
        editor.set_next(patch_end, boundary_next)
        editor.set_next(inner_prev, inner_next)

    for i in range(n):
        if is_new[i]:
            halfs[i], _ = editor.add_edge_pair(verts[i], verts[(i + 1) % n])

    face = editor.add_face(halfs[0])

    # Links are collected first, the cases below read the links of the
    # mesh as it was before insertion.
    links = []
    adjust = []

    for i in range(n):
        ii = (i + 1) % n
        v = verts[ii]

        inner_prev = halfs[i]
        inner_next = halfs[ii]

        case = is_new[i] | is_new[ii] << 1

        if case:
            outer_prev = mesh[inner_next].twin
            outer_next = mesh[inner_prev].twin

            if case == 1:
                links.append((mesh[inner_next].prev, outer_next))
                editor.set_outgoing(v, outer_next)
            elif case == 2:
                boundary_next = mesh[inner_prev].next
                links.append((outer_prev, boundary_next))
                editor.set_outgoing(v, boundary_next)
            elif mesh[v].edge is None:
                links.append((outer_prev, outer_next))
                editor.set_outgoing(v, outer_next)
            else:
                boundary_next = mesh[v].edge
                links.append((mesh[boundary_next].prev, outer_next))
                links.append((outer_prev, boundary_next))

            links.append((inner_prev, inner_next))
        elif mesh[v].edge == inner_next:
            adjust.append(v)

        editor.set_face(inner_prev, face)

    for a, b in links:
        editor.set_next(a, b)

    for v in adjust:
        _adjust_outgoing(editor, v)

    return face


def _adjust_outgoing(editor, vertex):
    """ Point a vertex to a boundary half-edge, if it has one.
    """
    mesh = editor.mesh

    for h in halfs(mesh, vertex):
        if mesh[h].face is None:
            if h != mesh[vertex].edge:
                editor.set_outgoing(vertex, h)
            return


def _remove_face(editor, face, cascade=False, prune_vertices=False):
    mesh = editor.mesh
    loop = list(halfs(mesh, face))

    for h in loop:
        editor.set_face(h, None)

    editor.remove_face(face)

    for h in loop:
        _adjust_outgoing(editor, mesh[h].vertex)

    if not cascade:
        return

    ends = []

    for h in loop:
        if mesh[mesh[h].twin].face is None:
            ends.extend((mesh[mesh[h].twin].vertex, mesh[h].vertex))
            _remove_edge_pair(editor, h)

    if prune_vertices:
        _prune_vertices(editor, ends)


def _remove_edge_pair(editor, a):
    """ Unlink and delete a faceless pair of half-edges.

    The loops passing through the pair are closed around it.
    """
    mesh = editor.mesh
    b = mesh[a].twin

    u = mesh[b].vertex
    v = mesh[a].vertex

    an, ap = mesh[a].next, mesh[a].prev
    bn, bp = mesh[b].next, mesh[b].prev

    if an != b:
        editor.set_next(bp, an)
    if bn != a:
        editor.set_next(ap, bn)

    if mesh[u].edge == a:
        editor.set_outgoing(u, None if bn == a else bn)
    if mesh[v].edge == b:
        editor.set_outgoing(v, None if an == b else an)

    editor.remove_edge_pair(a)

    _adjust_outgoing(editor, u)
    _adjust_outgoing(editor, v)


def _prune_vertices(editor, vertices):
    mesh = editor.mesh

    for v in dict.fromkeys(vertices):
        if v in mesh and mesh[v].isolated:
            editor.remove_vertex(v)
