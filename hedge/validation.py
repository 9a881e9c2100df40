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

""" Consistency checks for half-edge meshes.

All functions are read-only. The ``check_*`` functions return a list of
human readable problem descriptions, an empty list means the checked
items are consistent. Traversals are bounded by the number of half-edges
of the mesh, hence corrupt ``next`` links cannot cause endless loops.
"""

from hedge.errors import ValidationError
from hedge.flags import Check
from hedge.logging_utils import get_logger

log = get_logger(__name__)


def _refers(buffer, index):
    """ Whether `index` is an active index of `buffer`.
    """
    return isinstance(index, buffer.index_type) and index in buffer


def _walk(mesh, edge, step):
    """ Bounded half-edge traversal.

    Returns the visited half-edges or :obj:`None` if the walk does not
    return to `edge`.
    """
    visited = []
    h = edge

    for _ in range(max(mesh.edge_count, 1)):
        visited.append(h)
        h = step(h)

        if h == edge:
            return visited

        if not _refers(mesh.edges, h):
            return None

    return None


def _next(mesh):
    return lambda h: mesh[h].next


def _rotate(mesh):
    return lambda h: mesh[mesh[h].twin].next


def is_boundary(mesh, edge):
    """ Boundary test.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    edge : EdgeIndex
        Either half of an edge.

    Returns
    -------
    bool
        :obj:`True` if the half-edge or its twin has no face.
    """
    return mesh[edge].face is None or mesh[mesh[edge].twin].face is None


def is_connected(mesh, edge):
    """ Whether a half-edge is part of a closed loop.
    """
    return loop_length(mesh, edge) is not None


def loop_length(mesh, edge):
    """ Length of the loop through a half-edge.

    Returns
    -------
    int or None
        Number of half-edges in the loop, :obj:`None` if following
        ``next`` does not lead back to `edge`.
    """
    if not _refers(mesh.edges, mesh[edge].next):
        return None

    visited = _walk(mesh, edge, _next(mesh))
    return None if visited is None else len(visited)


def check_references(mesh, verts=None, edges=None, faces=None):
    """ Dangling reference check.

    Items not given default to all items of the mesh.
    """
    problems = []

    for v in _items(mesh.vertices, verts):
        e = mesh[v].edge

        if e is not None and not _refers(mesh.edges, e):
            problems.append(f'{v!r}: dangling edge {e!r}')

    for h in _items(mesh.edges, edges):
        edge = mesh[h]

        if not _refers(mesh.vertices, edge.vertex):
            problems.append(f'{h!r}: dangling vertex {edge.vertex!r}')

        for name in ('twin', 'next', 'prev'):
            other = getattr(edge, name)

            if not _refers(mesh.edges, other):
                problems.append(f'{h!r}: dangling {name} {other!r}')

        if edge.face is not None and not _refers(mesh.faces, edge.face):
            problems.append(f'{h!r}: dangling face {edge.face!r}')

    for f in _items(mesh.faces, faces):
        e = mesh[f].edge

        if not _refers(mesh.edges, e):
            problems.append(f'{f!r}: dangling root {e!r}')

    return problems


def check_twins(mesh, edges=None):
    """ Twin symmetry check.
    """
    problems = []

    for h in _items(mesh.edges, edges):
        twin = mesh[h].twin

        if twin == h:
            problems.append(f'{h!r} is its own twin')
        elif mesh[twin].twin != h:
            problems.append(f'{h!r}: twin {twin!r} does not point back')
        elif mesh[twin].vertex == mesh[h].vertex:
            problems.append(f'{h!r}: both halves end at {mesh[h].vertex!r}')

    return problems


def check_loops(mesh, edges=None):
    """ Loop consistency check.

    Following ``next`` has to be inverse to following ``prev``, the
    successor has to start where a half-edge ends, loops have to close,
    and all half-edges of a loop have to agree on the face.
    """
    problems = []

    for h in _items(mesh.edges, edges):
        edge = mesh[h]

        if mesh[edge.next].prev != h:
            problems.append(f'{h!r}: next {edge.next!r} has another prev')
        if mesh[edge.prev].next != h:
            problems.append(f'{h!r}: prev {edge.prev!r} has another next')

        if mesh[mesh[edge.next].twin].vertex != edge.vertex:
            problems.append(f'{h!r}: next {edge.next!r} does not start '
                            f'at {edge.vertex!r}')

        visited = _walk(mesh, h, _next(mesh))

        if visited is None:
            problems.append(f'{h!r}: loop does not close')
        elif any(mesh[e].face != edge.face for e in visited):
            problems.append(f'{h!r}: loop has more than one face')

    return problems


def check_vertices(mesh, verts=None, edges=None):
    """ Vertex consistency check.

    The outgoing half-edge has to start at the vertex, the ring of
    outgoing half-edges has to close, and a boundary half-edge has to be
    the outgoing half-edge whenever the ring contains one. Every
    half-edge in `edges` has to be part of the ring of its origin.
    """
    problems = []
    rings = {}

    for v in _items(mesh.vertices, verts):
        e = mesh[v].edge

        if e is None:
            continue

        if mesh[mesh[e].twin].vertex != v:
            problems.append(f'{v!r}: edge {e!r} does not start here')
            continue

        ring = rings[v] = _ring(mesh, v)

        if ring is None:
            problems.append(f'{v!r}: edge ring does not close')
        elif mesh[e].face is not None and \
                any(mesh[h].face is None for h in ring):
            problems.append(f'{v!r}: boundary vertex without boundary edge')

    for h in _items(mesh.edges, edges):
        v = mesh[mesh[h].twin].vertex

        if v not in rings:
            rings[v] = _ring(mesh, v)

        if rings[v] is not None and h not in rings[v]:
            problems.append(f'{h!r}: not in the edge ring of {v!r}')

    return problems


def _ring(mesh, vertex):
    """ Outgoing half-edges of a vertex as a set, None if broken.
    """
    e = mesh[vertex].edge

    if e is None:
        return set()

    if mesh[mesh[e].twin].vertex != vertex:
        return None

    ring = _walk(mesh, e, _rotate(mesh))
    return None if ring is None else set(ring)


def check_faces(mesh, faces=None):
    """ Face root check.
    """
    problems = []

    for f in _items(mesh.faces, faces):
        e = mesh[f].edge

        if mesh[e].face != f:
            problems.append(f'{f!r}: root {e!r} is not part of the face')

    return problems


def check_mesh(mesh, checks=Check.ALL):
    """ Collect problems of the whole mesh.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    checks : Check, optional
        Selection of checks. Dangling references are reported in any
        case, the other checks cannot run without valid references.

    Returns
    -------
    list[str]
    """
    return _run(mesh, checks, None, None, None)


def check_region(mesh, verts, edges, faces):
    """ Collect problems of a part of the mesh.

    The region is closed under twins and extended by the end points and
    faces of its half-edges before checking.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    verts : iterable
        Vertex indices.
    edges : iterable
        Half-edge indices.
    faces : iterable
        Face indices.

    Returns
    -------
    list[str]
    """
    verts = {v for v in verts if _refers(mesh.vertices, v)}
    faces = {f for f in faces if _refers(mesh.faces, f)}
    edges = {h for h in edges if _refers(mesh.edges, h)}

    problems = check_references(mesh, verts, edges, faces)

    if problems:
        return problems

    edges |= {mesh[h].twin for h in edges}
    verts |= {mesh[h].vertex for h in edges}
    faces |= {mesh[h].face for h in edges if mesh[h].face is not None}

    return _run(mesh, Check.ALL, sorted(verts), sorted(edges), sorted(faces))


def validate_mesh(mesh, checks=Check.ALL):
    """ Full consistency sweep.

    Raises
    ------
    ValidationError
        If any of the selected checks fails.
    """
    problems = check_mesh(mesh, checks)

    if problems:
        for problem in problems:
            log.error(problem)

        raise ValidationError(problems)


def is_well_formed(mesh):
    """ Whether all checks pass.

    Returns
    -------
    bool
    """
    return not check_mesh(mesh)


def _items(buffer, items):
    return buffer.indices() if items is None else items


def _run(mesh, checks, verts, edges, faces):
    # Later checks follow references, they are not run on dangling ones.
    problems = check_references(mesh, verts, edges, faces)

    if problems:
        return problems

    if Check.TWINS in checks:
        problems += check_twins(mesh, edges)

    if Check.LOOPS in checks:
        problems += check_loops(mesh, edges)

    if Check.VERTICES in checks:
        problems += check_vertices(mesh, verts, edges)

    if Check.FACES in checks:
        problems += check_faces(mesh, faces)

    return problems
