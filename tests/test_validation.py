import logging

from dataclasses import dataclass

import pytest

from hedge.errors import MeshError
from hedge.errors import ValidationError
from hedge.flags import Check
from hedge.hds import Editor
from hedge.hds import Mesh
from hedge.hds import Vertex
from hedge.kernel import VertexIndex
from hedge.kernel import EdgeIndex
from hedge.kernel import FaceIndex
from hedge.ops import AddOperation
from hedge.ops import RemoveOperation
from hedge.validation import check_faces
from hedge.validation import check_loops
from hedge.validation import check_mesh
from hedge.validation import check_references
from hedge.validation import check_region
from hedge.validation import check_twins
from hedge.validation import check_vertices
from hedge.validation import is_boundary
from hedge.validation import is_connected
from hedge.validation import is_well_formed
from hedge.validation import loop_length
from hedge.validation import validate_mesh


class BrokenEdge(AddOperation):
    """Creates an edge pair and breaks its loop."""

    def __init__(self, u, v):
        object.__setattr__(self, 'u', u)
        object.__setattr__(self, 'v', v)

    def apply(self, editor):
        a, _ = editor.add_edge_pair(self.u, self.v)
        editor.set_next(a, a)
        return a


class SplitRing(AddOperation):
    """Detaches the second fan of the bowtie at vertex 0."""

    def apply(self, editor):
        _split_ring(editor)


@dataclass(frozen=True)
class DetachVertex(RemoveOperation):
    """Removes a vertex that half-edges still end at."""

    vertex: object

    def apply(self, editor):
        editor.set_outgoing(self.vertex, None)
        editor.remove_vertex(self.vertex)


BOWTIE = [[0, 1, 2], [0, 3, 4]]


def _split_ring(editor):
    mesh = editor.mesh
    v = [VertexIndex(i) for i in range(5)]

    pairs = [(mesh.find_edge(v[1], v[0]), mesh.find_edge(v[0], v[2])),
             (mesh.find_edge(v[3], v[0]), mesh.find_edge(v[0], v[4]))]

    # each fan gets its own boundary loop
    for a, b in pairs:
        editor.set_next(a, b)


def test_empty_and_isolated_are_valid(mesh):
    assert is_well_formed(mesh)

    mesh.add(Vertex())
    validate_mesh(mesh)
    assert check_mesh(mesh) == []


def test_well_formed_fixtures(triangle, grid, tetra):
    for mesh in (triangle[0], grid, tetra):
        assert is_well_formed(mesh)


def test_predicates(triangle):
    mesh, (a, b, c), f = triangle
    h = mesh.find_edge(a, b)

    assert is_boundary(mesh, h)
    assert is_connected(mesh, h)
    assert loop_length(mesh, h) == 3
    assert loop_length(mesh, mesh[h].twin) == 3


def test_interior_edge_is_not_boundary(tetra):
    h = tetra.find_edge(VertexIndex(0), VertexIndex(1))

    assert not is_boundary(tetra, h)


def test_broken_next_is_detected(triangle):
    mesh, (a, b, c), f = triangle
    h = mesh.find_edge(a, b)
    mesh[h]._next = mesh[h].twin

    assert check_loops(mesh)
    assert not is_well_formed(mesh)

    with pytest.raises(ValidationError) as info:
        validate_mesh(mesh)

    assert info.value.problems
    assert not isinstance(info.value, MeshError)
    assert isinstance(info.value, AssertionError)


def test_broken_twin_is_detected(triangle):
    mesh, (a, b, c), f = triangle
    h = mesh.find_edge(a, b)
    mesh[h]._twin = mesh.find_edge(b, c)

    problems = check_twins(mesh)
    assert any(repr(h) in p for p in problems)


def test_dangling_reference_is_detected(triangle):
    mesh, (a, b, c), f = triangle
    mesh[a]._edge = EdgeIndex(99)

    assert check_references(mesh) == [f'{a!r}: dangling edge EdgeIndex(99)']

    # other checks are not run on dangling references
    assert check_mesh(mesh, Check.VERTICES) == check_references(mesh)


def test_boundary_convention_is_detected(grid):
    v = VertexIndex(1)
    h = grid[v].edge

    # rotate to an outgoing half-edge with a face
    while grid[h].boundary:
        h = grid[grid[h].twin].next

    grid[v]._edge = h

    assert check_vertices(grid) == \
        [f'{v!r}: boundary vertex without boundary edge']
    assert check_vertices(grid, [VertexIndex(4)]) == []


def test_face_root_is_detected(triangle):
    mesh, (a, b, c), f = triangle
    mesh[f]._edge = mesh.find_edge(b, a)

    assert check_faces(mesh) == [f'{f!r}: root {mesh[f].edge!r} is not '
                                 'part of the face']


def test_selected_checks(triangle):
    mesh, (a, b, c), f = triangle
    mesh[f]._edge = mesh.find_edge(b, a)

    assert check_mesh(mesh, Check.TWINS | Check.LOOPS) == []
    assert check_mesh(mesh, Check.FACES)
    assert Check.ALL & Check.FACES


def test_region_check(triangle):
    mesh, (a, b, c), f = triangle
    h = mesh.find_edge(a, b)

    assert check_region(mesh, [a], [h], [f]) == []
    assert check_region(mesh, [], [], [FaceIndex(5)]) == []

    mesh[h]._next = h
    assert check_region(mesh, [], [h], [])


def test_checked_mesh_raises_after_broken_operation(caplog):
    mesh = Mesh(checked=True)
    u, v = mesh.add(Vertex()), mesh.add(Vertex())

    with caplog.at_level(logging.ERROR, logger='hedge'):
        with pytest.raises(ValidationError):
            mesh.add(BrokenEdge(u, v))

    assert caplog.records


def test_unchecked_mesh_trusts_operations():
    mesh = Mesh(checked=False)
    u, v = mesh.add(Vertex()), mesh.add(Vertex())

    mesh.add(BrokenEdge(u, v))

    assert not is_well_formed(mesh)


def test_split_vertex_ring_is_detected():
    mesh = Mesh.from_faces(BOWTIE, checked=True)
    _split_ring(Editor(mesh))

    # loops, twins and faces are still consistent
    assert check_loops(mesh) == []
    assert check_twins(mesh) == []

    with pytest.raises(ValidationError) as info:
        validate_mesh(mesh)

    assert any('not in the edge ring of VertexIndex(0)' in p
               for p in info.value.problems)


def test_checked_mesh_rejects_split_vertex_ring():
    mesh = Mesh.from_faces(BOWTIE, checked=True)

    with pytest.raises(ValidationError):
        mesh.add(SplitRing())


def test_checked_mesh_reports_half_edges_of_removed_vertex(triangle):
    mesh, (a, b, c), f = triangle

    with pytest.raises(ValidationError) as info:
        mesh.remove(DetachVertex(a))

    assert any(f'dangling vertex {a!r}' in p for p in info.value.problems)
