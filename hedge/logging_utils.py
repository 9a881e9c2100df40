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

""" Logging utilities.

Loggers of this package live below the ``hedge`` logger. Nothing is
printed unless an application configures logging itself or calls
:func:`configure_logging`. The process root logger is never modified.
"""

import logging
import sys

_FORMAT = logging.Formatter('%(levelname)s %(name)s: %(message)s')

logging.getLogger('hedge').addHandler(logging.NullHandler())


def _to_level(level, default=logging.INFO):
    if level is None:
        return default

    if isinstance(level, int):
        return level

    value = getattr(logging, str(level).upper(), None)

    return value if isinstance(value, int) else default


def configure_logging(level='INFO', stream=None):
    """ Attach a stream handler to the ``hedge`` logger.

    Parameters
    ----------
    level : str or int, optional
        Logging level name or number.
    stream : file-like, optional
        Output stream, defaults to :data:`sys.stdout`.

    Returns
    -------
    logging.Logger
        The ``hedge`` logger.
    """
    root = logging.getLogger('hedge')

    for handler in list(root.handlers):
        if isinstance(handler, logging.StreamHandler):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stdout if stream is None
                                    else stream)
    handler.setFormatter(_FORMAT)

    root.addHandler(handler)
    root.setLevel(_to_level(level))
    root.propagate = False

    return root


def get_logger(name, level=None):
    """ Logger below the ``hedge`` namespace.

    Parameters
    ----------
    name : str
        Logger name, usually ``__name__`` of the calling module.
    level : str or int, optional
        Explicit level. Inherited from ``hedge`` if not given.

    Returns
    -------
    logging.Logger
    """
    if name != 'hedge' and not name.startswith('hedge.'):
        name = f'hedge.{name}'

    log = logging.getLogger(name)
    log.setLevel(logging.NOTSET if level is None else _to_level(level))

    return log
