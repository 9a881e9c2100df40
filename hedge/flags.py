# Copyright 2022-2024, m3sh76
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

""" Validation flags.

Note
----
Pass a combination of flags to :func:`~hedge.validation.validate_mesh`
to restrict the sweep to a subset of the checks.
"""

from enum import Flag
from enum import auto


class Check(Flag):
    """ Consistency check enumeration.
    """

    REFERENCES = auto()
    """ Reference flag.

    Every index stored in a live item refers to an active item."""

    TWINS = auto()
    """ Twin flag.

    Twins are mutual and connect distinct vertices."""

    LOOPS = auto()
    """ Loop flag.

    Following ``next`` closes up, visits a single face and agrees with
    ``prev``."""

    VERTICES = auto()
    """ Vertex flag. """

    FACES = auto()
    """ Face flag. """

    ALL = REFERENCES | TWINS | LOOPS | VERTICES | FACES
    """ All checks. """
