from __future__ import annotations

from collections.abc import Sequence as _SequenceABC
from typing import Any

import numpy as np

_EMPTY_SHAPE = (0, 0)


def is_sequence_like(value: Any) -> bool:
    return isinstance(value, _SequenceABC) and not isinstance(value, (str, bytes, bytearray))


def empty_matrix() -> np.ndarray:
    """The default (unset) matrix content: a 0x0 float array."""
    return frozen(np.empty(_EMPTY_SHAPE, dtype=float))


def frozen(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


def coerce_matrix(candidate: Any) -> np.ndarray:
    """Return a private, read-only 2-D copy of ``candidate``.

    No shape or invertibility validation happens here: a 1-D input is viewed
    as a single row and scalars as 1x1, everything else is kept as-is and left
    for the inverter to judge.
    """

    if candidate is None:
        return empty_matrix()

    if isinstance(candidate, np.ndarray):
        array = np.array(candidate, copy=True)
    elif is_sequence_like(candidate) and len(candidate) == 0:
        return empty_matrix()
    else:
        array = np.array(candidate)

    if array.ndim < 2:
        array = np.atleast_2d(array)
    return frozen(array)


def coerce_inverse(candidate: Any) -> Any:
    """Read-only inverse for the cache, keeping the inverter's type.

    An array owning its memory is frozen in place and kept as the same
    object. An array sharing someone else's buffer (a view, even a read-only
    one) is copied first, subclass preserved. Other objects are kept as-is.
    """

    if not isinstance(candidate, np.ndarray):
        return candidate
    if candidate.flags.owndata:
        return frozen(candidate)
    return frozen(np.array(candidate, copy=True, subok=True))
