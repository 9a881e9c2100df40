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

""" Index based element storage.

Mesh items are stored in arenas, one :class:`ElementBuffer` per item
kind. Items are addressed by typed indices

    - :class:`VertexIndex`,
    - :class:`EdgeIndex`,
    - and :class:`FaceIndex`.

An index is just a slot number. It stays valid until the item is removed
or the buffer is compacted by :meth:`ElementBuffer.defragment`. Stale
indices are detected at lookup time: a lookup of an inactive slot reports
absence instead of returning unrelated data.

Note
----
Slots of removed items are reused by later insertions. Do not hold on to
the index of a removed item.
"""

import numpy as np

from hedge.errors import InvalidIndexError


class Index:
    """ Index base class.

    Parameters
    ----------
    offset : int
        Slot number, non-negative.

    Note
    ----
    Indices of different kinds never compare equal, even if their slot
    numbers coincide.
    """

    __slots__ = ('_offset',)

    kind = None

    def __init__(self, offset):
        offset = int(offset)

        if offset < 0:
            raise ValueError(f'negative offset {offset}')

        self._offset = offset

    def __repr__(self):
        return f'{self.__class__.__name__}({self._offset})'

    def __index__(self):
        """ Slot number.

        Indices can be used directly as list and array indices, i.e.,
        one can write ``some_list[e]`` instead of ``some_list[e.offset]``.

        Returns
        -------
        int
            Slot number.
        """
        return self._offset

    def __int__(self):
        return self._offset

    def __eq__(self, other):
        if not isinstance(other, Index):
            return NotImplemented

        return other.kind == self.kind and other._offset == self._offset

    def __lt__(self, other):
        if not isinstance(other, Index) or other.kind != self.kind:
            return NotImplemented

        return self._offset < other._offset

    def __hash__(self):
        return hash((self.kind, self._offset))

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    @property
    def offset(self):
        """ Slot number.

        :type: int
        """
        return self._offset


class VertexIndex(Index):
    """ Index of a vertex.
    """

    __slots__ = ()
    kind = 'vertex'


class EdgeIndex(Index):
    """ Index of a half-edge.
    """

    __slots__ = ()
    kind = 'edge'


class FaceIndex(Index):
    """ Index of a face.
    """

    __slots__ = ()
    kind = 'face'


class ElementBuffer:
    """ Arena for a single kind of mesh item.

    Cells are either active (hold an item) or inactive (free for reuse).
    Activity is tracked by a boolean mask whose capacity grows by doubling.
    Free slots are reused in most-recently-freed-first order.

    Parameters
    ----------
    index_type : type
        Subclass of :class:`Index` used to address cells.
    capacity : int, optional
        Initial size of the activity mask.
    """

    def __init__(self, index_type, capacity=8):
        if not issubclass(index_type, Index):
            raise TypeError(f'{index_type!r} is not an index type')

        self._index_type = index_type
        self._cells = []
        self._active = np.zeros(max(int(capacity), 1), dtype=bool)
        self._free = []

    def __repr__(self):
        return (f'ElementBuffer<{self._index_type.__name__}> '
                f'{{ {len(self)} items }}')

    def __len__(self):
        """ Number of active cells.

        The number of allocated cells, see :attr:`capacity`, may be
        larger.
        """
        return len(self._cells) - len(self._free)

    def __iter__(self):
        """ Active cell iterator.

        Yields
        ------
        Index
            Index of the cell.
        object
            Item stored in the cell.
        """
        for offset in np.flatnonzero(self._active[:len(self._cells)]):
            yield self._index_type(offset), self._cells[offset]

    def __contains__(self, index):
        return self._lookup(index) is not None

    def __getitem__(self, index):
        offset = self._lookup(index)

        if offset is None:
            raise InvalidIndexError(f'{index!r} does not refer to an item')

        return self._cells[offset]

    @property
    def index_type(self):
        """ Index type of this buffer.

        :type: type
        """
        return self._index_type

    @property
    def capacity(self):
        """ Number of allocated cells, active or not.

        :type: int
        """
        return len(self._cells)

    @property
    def mask(self):
        """ Activity mask.

        Copy of the mask, ``mask[i]`` is :obj:`True` if slot ``i`` holds
        an item.

        :type: ~numpy.ndarray
        """
        return self._active[:len(self._cells)].copy()

    @property
    def has_inactive_cells(self):
        """ Whether some slots are free for reuse.

        :type: bool
        """
        return bool(self._free)

    def indices(self):
        """ List of indices of all active cells in slot order.
        """
        return [self._index_type(offset) for offset in
                np.flatnonzero(self._active[:len(self._cells)])]

    def get(self, index):
        """ Look up an item.

        Parameters
        ----------
        index : Index
            Index of the buffer's index type.

        Returns
        -------
        object or None
            The stored item or :obj:`None` if the slot is out of range
            or inactive.

        Raises
        ------
        TypeError
            If `index` is of the wrong kind.
        """
        offset = self._lookup(index)
        return None if offset is None else self._cells[offset]

    def add(self, item):
        """ Store item.

        Parameters
        ----------
        item : object
            Item to be stored.

        Returns
        -------
        Index
            Index of the cell holding `item`.
        """
        if self._free:
            offset = self._free.pop()
            self._cells[offset] = item
        else:
            offset = len(self._cells)
            self._cells.append(item)

            if offset == len(self._active):
                # Amortized doubling. In-place resizing pads with False.
                self._active.resize(2 * len(self._active), refcheck=False)

        self._active[offset] = True

        return self._index_type(offset)

    def remove(self, index):
        """ Deactivate cell.

        Parameters
        ----------
        index : Index
            Index of an active cell.

        Raises
        ------
        InvalidIndexError
            If `index` is out of range or refers to an inactive cell.

        Returns
        -------
        object
            The removed item.
        """
        offset = self._lookup(index)

        if offset is None:
            raise InvalidIndexError(f'{index!r} does not refer to an item')

        item = self._cells[offset]
        self._cells[offset] = None
        self._active[offset] = False
        self._free.append(offset)

        return item

    def defragment(self):
        """ Compact storage.

        Active cells are moved to the front of the buffer, preserving
        their relative order. Inactive cells are dropped.

        Returns
        -------
        dict
            Maps the old index of each surviving item to its new index.
        """
        n = len(self._cells)
        keep = np.flatnonzero(self._active[:n])

        remap = {self._index_type(old): self._index_type(new)
                 for new, old in enumerate(keep)}

        self._cells[:] = [self._cells[offset] for offset in keep]
        self._active[:] = False
        self._active[:len(keep)] = True
        self._free.clear()

        return remap

    def copy(self, item_copy=None):
        """ Buffer copy.

        Parameters
        ----------
        item_copy : callable, optional
            Applied to every active item. Items are shared if not given.

        Returns
        -------
        ElementBuffer
            Independent buffer with identical slot layout.
        """
        other = self.__class__(self._index_type, len(self._active))

        if item_copy is None:
            other._cells = list(self._cells)
        else:
            other._cells = [None if item is None else item_copy(item)
                            for item in self._cells]

        other._active[:] = self._active
        other._free = list(self._free)

        return other

    def clear(self):
        """ Remove all cells.
        """
        self._cells.clear()
        self._active[:] = False
        self._free.clear()

    def _lookup(self, index):
        """ Offset of an active cell or None.
        """
        if not isinstance(index, self._index_type):
            raise TypeError(f'expected {self._index_type.__name__}, '
                            f'got {index!r}')

        offset = index._offset

        if offset < len(self._cells) and self._active[offset]:
            return offset

        return None

    def _retract(self, index, reused):
        """ Undo :meth:`add`.

        Parameters
        ----------
        index : Index
            Index returned by the add to be undone.
        reused : bool
            Whether that add took its slot from the free stack.

        Note
        ----
        Undo steps have to be applied in reverse order of the original
        calls to leave the buffer exactly as it was.
        """
        offset = index._offset
        assert self._active[offset]

        self._active[offset] = False

        if reused:
            self._cells[offset] = None
            self._free.append(offset)
        else:
            assert offset == len(self._cells) - 1
            self._cells.pop()

    def _restore(self, index, item):
        """ Undo :meth:`remove`.
        """
        offset = index._offset
        assert self._free and self._free[-1] == offset

        self._free.pop()
        self._cells[offset] = item
        self._active[offset] = True
