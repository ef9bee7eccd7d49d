"""cachematrix warning categories.

These exist so users can filter/suppress cachematrix warnings without
catching all UserWarning.

Keep this module lightweight and dependency-free to avoid import cycles.
"""


class CacheMatrixWarning(UserWarning):
    """Base warning category for all cachematrix user-facing warnings."""


class CacheMatrixCacheHitWarning(CacheMatrixWarning):
    """Diagnostic emitted when an inverse is served from cache (verbose mode only)."""


class CacheMatrixStaleInverseWarning(CacheMatrixWarning):
    """The matrix changed while its inverse was being computed; result not cached."""
