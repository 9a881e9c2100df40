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

""" Half-edge data structure.

A polygonal surface is described by three index addressed containers
managed by the :class:`Mesh` class:

    - an :class:`~hedge.kernel.ElementBuffer` of :class:`Vertex` items,
    - an :class:`~hedge.kernel.ElementBuffer` of :class:`Edge` items
      (half-edges, always created and removed in twin pairs),
    - and an :class:`~hedge.kernel.ElementBuffer` of :class:`Face` items.

Items refer to each other by index, never by object reference. The
topology is changed exclusively by applying operations from
:mod:`hedge.ops` via :meth:`Mesh.add` and :meth:`Mesh.remove`. Each
operation is applied as a transaction: it either completes or leaves the
mesh untouched.

Note
----
To ease debugging, every operation is followed by a consistency check of
the modified region of the mesh. The checks are skipped when running in
optimized mode via the "-O" command line argument, or for meshes created
with ``checked=False``.
"""

from copy import copy

import numpy as np

import hedge.validation as validation

from hedge.errors import ValidationError
from hedge.flags import Check
from hedge.iterators import halfs
from hedge.kernel import ElementBuffer
from hedge.kernel import VertexIndex
from hedge.kernel import EdgeIndex
from hedge.kernel import FaceIndex
from hedge.logging_utils import get_logger
from hedge.ops import AddFace
from hedge.ops import AddOperation
from hedge.ops import RemoveOperation

log = get_logger(__name__)


class Mesh:
    """ Mesh kernel.

    Parameters
    ----------
    name : str, optional
        Name tag.
    checked : bool, optional
        Validate the mesh after each operation. Defaults to
        ``__debug__``, i.e., checks are on unless Python runs with
        the "-O" flag.


    A single triangle is built from three bootstrapped vertices:

    >>> from hedge.ops import AddTriangle
    >>> mesh = Mesh()
    >>> a, b, c = (mesh.add(Vertex()) for _ in range(3))
    >>> f = mesh.add(AddTriangle(a, b, c))
    >>> mesh.size
    (3, 6, 1)
    """

    def __init__(self, *, name=None, checked=None):
        self._verts = ElementBuffer(VertexIndex)
        self._edges = ElementBuffer(EdgeIndex)
        self._faces = ElementBuffer(FaceIndex)

        self.checked = __debug__ if checked is None else bool(checked)
        self.name = name

    def __repr__(self):
        v, e, f = self.size
        return f'Mesh({v} vertices, {e} edges, {f} faces)'

    def __iter__(self):
        """ Face iterator.

        Visits the indices of all active faces in ascending order.

        Yields
        ------
        FaceIndex
        """
        return iter(self._faces.indices())

    def __contains__(self, index):
        return index in self._buffer(index)

    def __getitem__(self, index):
        """ Item lookup.

        Raises
        ------
        InvalidIndexError
            If `index` does not refer to an active item.
        """
        return self._buffer(index)[index]

    def __copy__(self):
        return self.copy()

    @property
    def vertices(self):
        """ Vertex buffer.

        Read access to the vertex container. Iterating over it yields
        ``(VertexIndex, Vertex)`` pairs of active vertices.

        :type: ElementBuffer
        """
        return self._verts

    @property
    def edges(self):
        """ Half-edge buffer.

        :type: ElementBuffer
        """
        return self._edges

    @property
    def faces(self):
        """ Face buffer.

        :type: ElementBuffer
        """
        return self._faces

    @property
    def size(self):
        """ Mesh size.

        Number of active vertices, half-edges, and faces. The number of
        undirected edges is half the number of half-edges.

        :type: (int, int, int)
        """
        assert len(self._edges) % 2 == 0

        return len(self._verts), len(self._edges), len(self._faces)

    @property
    def vertex_count(self):
        return len(self._verts)

    @property
    def edge_count(self):
        return len(self._edges)

    @property
    def face_count(self):
        return len(self._faces)

    @classmethod
    def from_faces(cls, faces, num_vertices=None, **kwargs):
        """ Build mesh from face definitions.

        Parameters
        ----------
        faces : list[list[int]]
            Face definitions, 0-based vertex numbering.
        num_vertices : int, optional
            Number of vertices. Defaults to one more than the largest
            vertex number used.
        **kwargs
            Passed on to the constructor.

        Raises
        ------
        NonManifoldError
            When trying to initialize a mesh from non-manifold data.

        Returns
        -------
        Mesh
            A mesh whose vertex ``i`` has index ``VertexIndex(i)``.
        """
        faces = [list(face) for face in faces]

        if num_vertices is None:
            num_vertices = 1 + max((max(face) for face in faces if face),
                                   default=-1)

        mesh = cls(**kwargs)
        verts = [mesh.add(Vertex()) for _ in range(num_vertices)]

        for face in faces:
            mesh.add(AddFace([verts[i] for i in face]))

        # Typically one does not expect isolated vertices in a mesh.
        isolated = sum(1 for _, v in mesh._verts if v.isolated)

        if isolated:
            log.warning('there are %d isolated vertices', isolated)

        return mesh

    def get(self, index):
        """ Item lookup.

        Parameters
        ----------
        index : VertexIndex or EdgeIndex or FaceIndex
            Item index.

        Returns
        -------
        Vertex or Edge or Face or None
            :obj:`None` if `index` does not refer to an active item.
        """
        return self._buffer(index).get(index)

    def add(self, item):
        """ Add mesh items.

        Parameters
        ----------
        item : Vertex or AddOperation
            An unconnected vertex to bootstrap, or an operation that
            creates mesh items.

        Raises
        ------
        MeshError
            If the operation could not be applied. The mesh is not
            modified in this case.
        ValidationError
            If the operation corrupted the mesh (checked mode only).

        Returns
        -------
        VertexIndex or FaceIndex
            Index returned by the operation.
        """
        if isinstance(item, Vertex):
            if item._edge is not None:
                raise ValueError('only unconnected vertices can be added')

            return self._verts.add(item)

        if not isinstance(item, AddOperation):
            raise TypeError(f'cannot add {item!r}')

        return self._apply(item)

    def remove(self, item):
        """ Remove mesh items.

        Parameters
        ----------
        item : RemoveOperation
            Operation that removes mesh items.

        Raises
        ------
        MeshError
            If the operation could not be applied. The mesh is not
            modified in this case.
        ValidationError
            If the operation corrupted the mesh (checked mode only).
        """
        if not isinstance(item, RemoveOperation):
            raise TypeError(f'cannot remove {item!r}')

        self._apply(item)

    def defragment_all(self):
        """ Garbage collection.

        Compacts the vertex, the edge, and the face container, in this
        order. After compacting a container all references to its items
        are rewritten. Previously obtained indices may become invalid.

        Returns
        -------
        vmap : dict
            Maps old to new vertex indices.
        emap : dict
            Maps old to new edge indices.
        fmap : dict
            Maps old to new face indices.

        Note
        ----
        Use sparingly.
        """
        vmap = self._verts.defragment()

        for _, edge in self._edges:
            edge._vertex = vmap[edge._vertex]

        # Edges refer to edges. Twin, next, and prev are rewritten in
        # the same pass as references held by vertices and faces.
        emap = self._edges.defragment()

        for _, vertex in self._verts:
            if vertex._edge is not None:
                vertex._edge = emap[vertex._edge]

        for _, edge in self._edges:
            edge._twin = emap[edge._twin]
            edge._next = emap[edge._next]
            edge._prev = emap[edge._prev]

        for _, face in self._faces:
            face._edge = emap[face._edge]

        fmap = self._faces.defragment()

        for _, edge in self._edges:
            if edge._face is not None:
                edge._face = fmap[edge._face]

        log.debug('defragmented %r', self)

        if self.checked:
            self._check(validation.check_mesh(self))

        return vmap, emap, fmap

    def find_edge(self, u, v):
        """ Half-edge lookup.

        Parameters
        ----------
        u : VertexIndex
            Origin vertex.
        v : VertexIndex
            Target vertex.

        Returns
        -------
        EdgeIndex or None
            The half-edge pointing from `u` to `v`, if any.
        """
        for h in halfs(self, u):
            if self._edges[h]._vertex == v:
                return h

        return None

    def origin(self, edge):
        """ Origin vertex of a half-edge.

        Returns
        -------
        VertexIndex
            The target of the twin half-edge.
        """
        return self[self[edge]._twin]._vertex

    def is_boundary(self, edge):
        """ Whether either half of an edge is a boundary half-edge.
        """
        return validation.is_boundary(self, edge)

    def is_connected(self, edge):
        """ Whether a half-edge is linked into a loop.
        """
        return validation.is_connected(self, edge)

    def validate(self, checks=Check.ALL):
        """ Full consistency sweep.

        Raises
        ------
        ValidationError
            If an invariant of the half-edge structure does not hold.
        """
        validation.validate_mesh(self, checks)

    def tables(self):
        """ Connectivity tables.

        Index-for-index dump of the three containers. Rows of inactive
        slots and missing references hold the value -1.

        Returns
        -------
        vertices : ~numpy.ndarray
            Outgoing edge of each vertex slot, shape ``(n,)``.
        edges : ~numpy.ndarray
            Columns vertex, twin, next, prev, and face of each edge
            slot, shape ``(m, 5)``.
        faces : ~numpy.ndarray
            Root edge of each face slot, shape ``(k,)``.
        """
        def offset(index):
            return -1 if index is None else int(index)

        vtab = np.full(self._verts.capacity, -1, dtype=np.int64)
        etab = np.full((self._edges.capacity, 5), -1, dtype=np.int64)
        ftab = np.full(self._faces.capacity, -1, dtype=np.int64)

        for v, vertex in self._verts:
            vtab[v] = offset(vertex._edge)

        for h, edge in self._edges:
            etab[h] = [offset(edge._vertex), offset(edge._twin),
                       offset(edge._next), offset(edge._prev),
                       offset(edge._face)]

        for f, face in self._faces:
            ftab[f] = offset(face._edge)

        return vtab, etab, ftab

    def copy(self):
        """ Return mesh copy.

        Duplicate the mesh combinatorics. Slot layout, including free
        slots, is identical, hence indices of the original refer to the
        same items in the copy. Vertex payloads are shared.

        Returns
        -------
        Mesh
            Copy of the mesh.
        """
        other = self.__class__(name=self.name, checked=self.checked)

        other._verts = self._verts.copy(copy)
        other._edges = self._edges.copy(copy)
        other._faces = self._faces.copy(copy)

        return other

    def clear(self):
        """ Remove all mesh items.
        """
        self._verts.clear()
        self._edges.clear()
        self._faces.clear()

    def _buffer(self, index):
        """ Container addressed by an index.
        """
        if isinstance(index, VertexIndex):
            return self._verts
        elif isinstance(index, EdgeIndex):
            return self._edges
        elif isinstance(index, FaceIndex):
            return self._faces

        raise TypeError(f'{index!r} is not a mesh index')

    def _apply(self, operation):
        """ Run an operation as a transaction.
        """
        editor = Editor(self)

        try:
            result = operation.apply(editor)
        except Exception:
            editor.rollback()
            log.debug('rolled back %r', operation)
            raise

        log.debug('applied %r', operation)

        if self.checked:
            self._check(validation.check_region(self, *editor.region()))

        return result

    def _check(self, problems):
        if problems:
            for problem in problems:
                log.error(problem)

            raise ValidationError(problems)


class Editor:
    """ Mutation capability.

    Handed to :meth:`~hedge.ops.Operation.apply` by the mesh. This is the
    only place where connectivity attributes of mesh items are written.
    Every change is recorded, :meth:`rollback` undoes all of them.

    Parameters
    ----------
    mesh : Mesh
        The mesh to be modified.
    """

    def __init__(self, mesh):
        self._mesh = mesh
        self._journal = []

        # Items created or modified. Used to limit validation to the
        # affected region.
        self._verts = set()
        self._edges = set()
        self._faces = set()

    @property
    def mesh(self):
        """ The mesh being modified, for read access.

        :type: Mesh
        """
        return self._mesh

    def add_vertex(self, data=None):
        """ Create an isolated vertex.

        Returns
        -------
        VertexIndex
        """
        return self._add(self._mesh._verts, Vertex(data), self._verts)

    def add_edge_pair(self, u, v):
        """ Create a pair of twin half-edges.

        The two half-edges form a closed loop of length two until
        relinked with :meth:`set_next`. Neither is attached to a face
        and the vertices' outgoing half-edges are left alone.

        Parameters
        ----------
        u : VertexIndex
            Origin of the first half-edge.
        v : VertexIndex
            Target of the first half-edge.

        Returns
        -------
        (EdgeIndex, EdgeIndex)
            The half-edge from `u` to `v` and its twin.
        """
        assert u != v
        assert u in self._mesh and v in self._mesh

        a = Edge(v)
        b = Edge(u)

        ia = self._add(self._mesh._edges, a, self._edges)
        ib = self._add(self._mesh._edges, b, self._edges)

        # Fresh items, retracting them on rollback is enough.
        a._twin = a._next = a._prev = ib
        b._twin = b._next = b._prev = ia

        self._verts.update((u, v))

        return ia, ib

    def add_face(self, root):
        """ Create a face.

        Parameters
        ----------
        root : EdgeIndex
            Root half-edge of the face loop. Edge face attributes are
            set with :meth:`set_face`.

        Returns
        -------
        FaceIndex
        """
        return self._add(self._mesh._faces, Face(root), self._faces)

    def set_next(self, a, b):
        """ Link half-edge `b` as successor of `a`.
        """
        edges = self._mesh._edges

        self._set(edges[a], '_next', b)
        self._set(edges[b], '_prev', a)
        self._edges.update((a, b))

    def set_face(self, edge, face):
        self._set(self._mesh._edges[edge], '_face', face)
        self._edges.add(edge)

    def set_root(self, face, edge):
        self._set(self._mesh._faces[face], '_edge', edge)
        self._faces.add(face)

    def set_outgoing(self, vertex, edge):
        self._set(self._mesh._verts[vertex], '_edge', edge)
        self._verts.add(vertex)

    def remove_edge_pair(self, edge):
        """ Remove a half-edge together with its twin.

        Both half-edges have to be unlinked from faces already. Links
        of neighboring half-edges and vertices are not repaired here.
        """
        edges = self._mesh._edges
        twin = edges[edge]._twin

        assert edges[edge]._face is None and edges[twin]._face is None

        self._remove(edges, edge, self._edges)
        self._remove(edges, twin, self._edges)

    def remove_face(self, face):
        self._remove(self._mesh._faces, face, self._faces)

    def remove_vertex(self, vertex):
        """ Remove an isolated vertex.

        In checked mode, half-edges that still end at the vertex are
        added to the region, so that they are reported as dangling.
        """
        mesh = self._mesh
        assert mesh._verts[vertex]._edge is None

        if mesh.checked:
            self._edges.update(h for h, edge in mesh._edges
                               if edge._vertex == vertex)

        self._remove(mesh._verts, vertex, self._verts)

    def region(self):
        """ Items touched so far that are still active.

        Returns
        -------
        (list, list, list)
            Vertex, edge, and face indices.
        """
        mesh = self._mesh

        return ([v for v in self._verts if v in mesh._verts],
                [h for h in self._edges if h in mesh._edges],
                [f for f in self._faces if f in mesh._faces])

    def rollback(self):
        """ Undo all recorded changes, most recent first.
        """
        while self._journal:
            action, target, key, value = self._journal.pop()

            if action == 'set':
                setattr(target, key, value)
            elif action == 'add':
                target._retract(key, value)
            else:
                target._restore(key, value)

        self._verts.clear()
        self._edges.clear()
        self._faces.clear()

    def _add(self, buffer, item, touched):
        reused = buffer.has_inactive_cells
        index = buffer.add(item)

        self._journal.append(('add', buffer, index, reused))
        touched.add(index)

        return index

    def _remove(self, buffer, index, touched):
        item = buffer.remove(index)

        self._journal.append(('remove', buffer, index, item))
        touched.discard(index)

        return item

    def _set(self, item, attr, value):
        self._journal.append(('set', item, attr, getattr(item, attr)))
        setattr(item, attr, value)


class Vertex:
    """ Vertex item.

    Parameters
    ----------
    data : object, optional
        Opaque payload, e.g., vertex coordinates. Never inspected by the
        mesh.

    Note
    ----
    Only unconnected vertices can be passed to :meth:`Mesh.add`.
    """

    __slots__ = ('_edge', 'data')

    def __init__(self, data=None):
        self._edge = None
        self.data = data

    def __repr__(self):
        return f'Vertex(edge={self._edge!r}, data={self.data!r})'

    @property
    def edge(self):
        """ Outward pointing half-edge.

        A half-edge that starts at the vertex or :obj:`None` for isolated
        vertices. For boundary vertices this is a boundary half-edge.

        :type: EdgeIndex
        """
        return self._edge

    @property
    def isolated(self):
        """ Topological state.

        A vertex is isolated if it has no outgoing half-edge.

        :type: bool
        """
        return self._edge is None


class Edge:
    """ Half-edge item.

    Half-edges store the index of the vertex they point to, the index
    of their successor, predecessor, and twin half-edge as well as the
    index of the face to their left. A closed loop of half-edges defines
    a face or a boundary curve.

    Parameters
    ----------
    vertex : VertexIndex
        Target vertex of the half-edge.
    """

    __slots__ = ('_vertex', '_twin', '_next', '_prev', '_face')

    def __init__(self, vertex):
        self._vertex = vertex

        self._twin = None
        self._next = None
        self._prev = None
        self._face = None

    def __repr__(self):
        return (f'Edge(vertex={self._vertex!r}, twin={self._twin!r}, '
                f'next={self._next!r}, prev={self._prev!r}, '
                f'face={self._face!r})')

    @property
    def vertex(self):
        """ Target vertex.

        :type: VertexIndex
        """
        return self._vertex

    @property
    def twin(self):
        """ Oppositely oriented half-edge of the same edge.

        :type: EdgeIndex
        """
        return self._twin

    @property
    def next(self):
        """ Successor in the face or boundary loop.

        :type: EdgeIndex
        """
        return self._next

    @property
    def prev(self):
        """ Predecessor in the face or boundary loop.

        :type: EdgeIndex
        """
        return self._prev

    @property
    def face(self):
        """ Face to the left.

        :obj:`None` for boundary half-edges.

        :type: FaceIndex
        """
        return self._face

    @property
    def boundary(self):
        """ Topological state.

        A half-edge is called a boundary half-edge if its :attr:`face`
        attribute evaluates to :obj:`None`.

        :type: bool
        """
        return self._face is None


class Face:
    """ Face item.

    Parameters
    ----------
    edge : EdgeIndex
        Root half-edge, any half-edge of the face loop.
    """

    __slots__ = ('_edge',)

    def __init__(self, edge=None):
        self._edge = edge

    def __repr__(self):
        return f'Face(edge={self._edge!r})'

    @property
    def edge(self):
        """ Root half-edge of the face loop.

        :type: EdgeIndex
        """
        return self._edge
