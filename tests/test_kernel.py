import copy

import numpy as np
import pytest

from hedge.errors import InvalidIndexError
from hedge.errors import MeshError
from hedge.kernel import ElementBuffer
from hedge.kernel import VertexIndex
from hedge.kernel import EdgeIndex
from hedge.kernel import FaceIndex


def test_index_equality_respects_kind():
    assert VertexIndex(3) == VertexIndex(3)
    assert VertexIndex(3) != VertexIndex(4)
    assert VertexIndex(3) != EdgeIndex(3)
    assert EdgeIndex(3) != 3
    assert len({VertexIndex(1), VertexIndex(1), FaceIndex(1)}) == 2


def test_index_conversions():
    h = EdgeIndex(4)
    assert repr(h) == 'EdgeIndex(4)'
    assert int(h) == 4
    assert h.offset == 4
    assert [10, 11, 12, 13, 14][h] == 14
    assert copy.deepcopy(h) is h


def test_index_ordering_within_kind():
    assert sorted([FaceIndex(2), FaceIndex(0), FaceIndex(1)]) == \
        [FaceIndex(0), FaceIndex(1), FaceIndex(2)]

    with pytest.raises(TypeError):
        FaceIndex(0) < VertexIndex(1)


def test_negative_offset_rejected():
    with pytest.raises(ValueError):
        VertexIndex(-1)


def test_add_appends_then_reuses_last_freed():
    buf = ElementBuffer(VertexIndex)
    idx = [buf.add(name) for name in 'abcd']
    assert idx == [VertexIndex(i) for i in range(4)]

    assert buf.remove(idx[1]) == 'b'
    assert buf.remove(idx[3]) == 'd'
    assert buf.has_inactive_cells
    assert len(buf) == 2
    assert buf.capacity == 4

    # most recently freed first
    assert buf.add('x') == idx[3]
    assert buf.add('y') == idx[1]
    assert buf.add('z') == VertexIndex(4)
    assert not buf.has_inactive_cells


def test_get_never_raises_for_stale_indices():
    buf = ElementBuffer(FaceIndex)
    f = buf.add('face')
    buf.remove(f)

    assert buf.get(f) is None
    assert buf.get(FaceIndex(100)) is None
    assert f not in buf

    with pytest.raises(InvalidIndexError):
        buf[f]


def test_remove_twice_raises():
    buf = ElementBuffer(EdgeIndex)
    h = buf.add(1)
    buf.remove(h)

    with pytest.raises(InvalidIndexError) as info:
        buf.remove(h)

    assert isinstance(info.value, MeshError)
    assert isinstance(info.value, IndexError)


def test_wrong_index_kind_is_a_type_error():
    buf = ElementBuffer(VertexIndex)
    buf.add('v')

    with pytest.raises(TypeError):
        buf.get(EdgeIndex(0))

    with pytest.raises(TypeError):
        ElementBuffer(int)


def test_iteration_and_mask():
    buf = ElementBuffer(VertexIndex, capacity=2)

    for i in range(5):
        buf.add(i)

    buf.remove(VertexIndex(2))

    assert [(int(v), x) for v, x in buf] == [(0, 0), (1, 1), (3, 3), (4, 4)]
    assert buf.indices() == [VertexIndex(i) for i in (0, 1, 3, 4)]
    assert np.array_equal(buf.mask, [True, True, False, True, True])

    # copies, not views
    mask = buf.mask
    mask[:] = False
    assert len(buf) == 4


def test_defragment_preserves_order():
    buf = ElementBuffer(EdgeIndex)

    for name in 'abcdef':
        buf.add(name)

    for i in (0, 2, 3):
        buf.remove(EdgeIndex(i))

    remap = buf.defragment()

    assert remap == {EdgeIndex(1): EdgeIndex(0),
                     EdgeIndex(4): EdgeIndex(1),
                     EdgeIndex(5): EdgeIndex(2)}
    assert [x for _, x in buf] == ['b', 'e', 'f']
    assert buf.capacity == 3
    assert not buf.has_inactive_cells
    assert buf.add('g') == EdgeIndex(3)


def test_defragment_dense_buffer_is_identity():
    buf = ElementBuffer(FaceIndex)
    idx = [buf.add(i) for i in range(3)]

    assert buf.defragment() == {f: f for f in idx}


def test_copy_is_independent():
    buf = ElementBuffer(VertexIndex)
    buf.add([1])
    buf.add([2])
    buf.remove(VertexIndex(0))

    other = buf.copy(copy.copy)
    other.add([3])

    assert len(buf) == 1
    assert len(other) == 2
    assert buf[VertexIndex(1)] is not other[VertexIndex(1)]
    assert buf[VertexIndex(1)] == other[VertexIndex(1)]


def test_retract_and_restore_are_exact():
    buf = ElementBuffer(VertexIndex)

    for i in range(3):
        buf.add(i)

    buf.remove(VertexIndex(0))
    before = (list(buf._cells), buf.mask.tolist(), list(buf._free))

    reused = buf.has_inactive_cells
    a = buf.add('a')
    appended = buf.add('b')
    item = buf.remove(VertexIndex(1))

    buf._restore(VertexIndex(1), item)
    buf._retract(appended, False)
    buf._retract(a, reused)

    assert (list(buf._cells), buf.mask.tolist(), list(buf._free)) == before


def test_clear():
    buf = ElementBuffer(VertexIndex)
    buf.add(0)
    buf.clear()

    assert len(buf) == 0
    assert buf.capacity == 0
    assert buf.add(1) == VertexIndex(0)
