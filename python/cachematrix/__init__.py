"""Matrices that memoize their own inverse."""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _dist_version
from typing import Any

try:
    __version__ = _dist_version("cachematrix")
except PackageNotFoundError:  # pragma: no cover - running from an uninstalled checkout
    __version__ = "unknown"

from ._internal import observability as _observability
from ._internal import settings as _settings
from ._internal.container import CachedMatrix, make_cache_matrix
from ._internal.errors import InversionError
from ._internal.inversion import invert
from ._internal.memoize import cache_solve
from ._internal.selftest import self_check
from ._internal.settings import METHODS
from ._internal.warnings import (
    CacheMatrixWarning,
    CacheMatrixCacheHitWarning,
    CacheMatrixStaleInverseWarning,
)


def last_cache_trace(event: str | None = None) -> dict[str, Any] | None:
    """Latest cache trace record, optionally for one event kind ("hit", "miss", "error", "stale")."""
    return _observability.default_instance().last(event)


def clear_cache_traces() -> None:
    _observability.default_instance().clear()


def cache_stats() -> dict[str, int]:
    """Counts of cache events recorded since the last ``clear_cache_traces``."""
    return _observability.default_instance().stats()


def get_settings() -> dict[str, object]:
    return _settings.default_instance().as_dict()


def set_default_method(method: str) -> None:
    _settings.default_instance().method = method


def set_default_rtol(rtol: float | None) -> None:
    _settings.default_instance().rtol = rtol


def set_verbose(flag: bool) -> None:
    """Emit CacheMatrixCacheHitWarning on every cache hit when enabled."""
    _settings.default_instance().verbose = flag


def reset_settings() -> None:
    """Drop programmatic overrides; defaults are re-read from the environment."""
    _settings.default_instance().reset()


__all__ = [
    "CachedMatrix",
    "make_cache_matrix",
    "cache_solve",
    "invert",
    "self_check",
    "InversionError",
    "METHODS",
    "CacheMatrixWarning",
    "CacheMatrixCacheHitWarning",
    "CacheMatrixStaleInverseWarning",
    "last_cache_trace",
    "clear_cache_traces",
    "cache_stats",
    "get_settings",
    "set_default_method",
    "set_default_rtol",
    "set_verbose",
    "reset_settings",
]
