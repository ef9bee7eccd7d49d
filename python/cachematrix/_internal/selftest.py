from __future__ import annotations

import numpy as np

from .container import CachedMatrix
from .inversion import invert
from .observability import CacheObservability
from .memoize import cache_solve

# Row-major; column-major this is c(1, 3, 8, -2).
SAMPLE_MATRIX = ((1.0, 8.0), (3.0, -2.0))


def self_check() -> bool:
    """Invert a known 2x2 matrix directly and through a CachedMatrix.

    True when both cached results equal the direct inverse and the second
    request was served from cache.
    """

    expected = invert(SAMPLE_MATRIX)
    cm = CachedMatrix(SAMPLE_MATRIX)
    obs = CacheObservability()

    first = cache_solve(cm, observability=obs)
    second = cache_solve(cm, observability=obs)

    served_from_cache = obs.stats()["hit"] == 1 and second is first
    return bool(np.array_equal(first, expected) and np.array_equal(second, expected) and served_from_cache)
