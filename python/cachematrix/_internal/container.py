from __future__ import annotations

import threading
from typing import Any

import numpy as np

from .coercion import coerce_inverse, coerce_matrix
from .memoize import cache_solve


class CachedMatrix:
    """A matrix that can hold its own memoized inverse.

    The stored matrix and the cached inverse are kept as private read-only
    arrays. Replacing the matrix through ``set`` clears the cached inverse
    under the same lock, so a cached inverse never outlives the matrix it was
    computed from. The inverse itself is filled in by ``cache_solve``.

    The default content is an empty 0x0 matrix, which is not invertible:
    call ``set`` with a real matrix before asking for the inverse.
    """

    def __init__(self, matrix: Any = None) -> None:
        self._lock = threading.RLock()
        self._matrix = coerce_matrix(matrix)
        self._cached_inverse: Any = None
        self._epoch = 0

    @property
    def lock(self) -> threading.RLock:
        """Reentrant lock guarding the matrix, its cached inverse and the epoch."""
        return self._lock

    @property
    def epoch(self) -> int:
        """Number of ``set`` calls so far."""
        with self._lock:
            return self._epoch

    @property
    def shape(self) -> tuple[int, ...]:
        with self._lock:
            return tuple(self._matrix.shape)

    @property
    def has_cached_inverse(self) -> bool:
        with self._lock:
            return self._cached_inverse is not None

    def set(self, new_matrix: Any) -> None:
        """Replace the matrix content and drop any cached inverse."""
        matrix = coerce_matrix(new_matrix)
        with self._lock:
            self._matrix = matrix
            self._cached_inverse = None
            self._epoch += 1

    def get(self) -> np.ndarray:
        """Return the current matrix (read-only)."""
        with self._lock:
            return self._matrix

    def get_cached_inverse(self) -> Any:
        """Return the memoized inverse, or None if it is not known yet."""
        with self._lock:
            return self._cached_inverse

    def set_cached_inverse(self, inverse: Any) -> None:
        """Store an inverse computed for the current matrix."""
        stored = coerce_inverse(inverse)
        with self._lock:
            self._cached_inverse = stored

    def inverse(self, **options: Any) -> Any:
        """Memoized inverse; same as ``cache_solve(self, **options)``."""
        return cache_solve(self, **options)

    def __repr__(self) -> str:
        with self._lock:
            cached = self._cached_inverse is not None
            return f"CachedMatrix(shape={tuple(self._matrix.shape)}, cached_inverse={cached}, epoch={self._epoch})"


def make_cache_matrix(matrix: Any = None) -> CachedMatrix:
    """Create a CachedMatrix holding ``matrix`` (empty when omitted)."""
    return CachedMatrix(matrix)
