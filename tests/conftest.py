import pytest

from hedge.hds import Mesh
from hedge.hds import Vertex
from hedge.ops import AddTriangle


# 6 7 8
# 3 4 5
# 0 1 2
GRID = [[0, 1, 4, 3], [1, 2, 5, 4], [3, 4, 7, 6], [4, 5, 8, 7]]

TETRA = [[0, 2, 1], [0, 1, 3], [1, 2, 3], [0, 3, 2]]


@pytest.fixture
def mesh():
    return Mesh(checked=True)


@pytest.fixture
def triangle(mesh):
    """Single triangle on three bootstrapped vertices."""
    a, b, c = (mesh.add(Vertex()) for _ in range(3))
    f = mesh.add(AddTriangle(a, b, c))
    return mesh, (a, b, c), f


@pytest.fixture
def grid():
    return Mesh.from_faces(GRID, checked=True)


@pytest.fixture
def tetra():
    return Mesh.from_faces(TETRA, checked=True)


def snapshot(mesh):
    """Everything a rollback has to restore."""
    vtab, etab, ftab = mesh.tables()
    buffers = (mesh.vertices, mesh.edges, mesh.faces)
    return (vtab.tolist(), etab.tolist(), ftab.tolist(),
            [b.mask.tolist() for b in buffers],
            [list(b._free) for b in buffers])
