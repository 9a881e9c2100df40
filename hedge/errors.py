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

""" Mesh exceptions.

Recoverable conditions derive from :class:`MeshError`. An operation that
raises one of these leaves the mesh untouched.

:class:`ValidationError` is not part of this hierarchy. It signals a broken
invariant after an operation reported success, i.e., a defect in the
operation itself, and should not be caught by user code.
"""


class MeshError(Exception):
    """ Mesh exception base class.
    """

    pass


class InvalidIndexError(MeshError, IndexError):
    """ Raised for indices that are out of range or refer to an inactive
    cell.
    """

    pass


class NonManifoldError(MeshError):
    """ Manifold exception base class.

    Raised if an operation results in a topological configuration that
    violates the manifold condition.
    """

    pass


class NonManifoldEdgeError(NonManifoldError):
    """ Raised when an edge would be bounded by more than two faces.
    """

    pass


class NonManifoldVertexError(NonManifoldError):
    """ Raised when a face would be attached to an interior vertex.
    """

    pass


class EdgeBoundsFaceError(MeshError):
    """ Raised when removing an edge that bounds a face without requesting
    removal of that face.
    """

    pass


class VertexInUseError(MeshError):
    """ Raised when removing a vertex that still has incident edges.
    """

    pass


class ValidationError(AssertionError):
    """ Broken mesh invariant.

    Parameters
    ----------
    problems : list[str]
        Human readable descriptions of all detected problems.
    """

    def __init__(self, problems):
        self.problems = list(problems)

        head = f'{len(self.problems)} invariant violation(s)'
        super().__init__('\n  '.join([head, *self.problems]))
