from __future__ import annotations

import warnings
from typing import Any, Callable

from . import observability as _observability
from . import settings as _settings
from .inversion import invert
from .settings import normalize_method
from .warnings import CacheMatrixCacheHitWarning, CacheMatrixStaleInverseWarning


def _method_label(inverter: Callable[..., Any] | None, options: dict[str, Any], cfg: _settings.Settings) -> str | None:
    if inverter is None:
        method = options.get("method")
        if method is None:
            return cfg.method
        try:
            return normalize_method(method)
        except ValueError:
            # invert raises the real error for an unknown method.
            return str(method)
    return getattr(inverter, "__name__", type(inverter).__name__)


def cache_solve(
    cached_matrix: Any,
    *,
    inverter: Callable[..., Any] | None = None,
    observability: _observability.CacheObservability | None = None,
    settings: _settings.Settings | None = None,
    **options: Any,
) -> Any:
    """Return the inverse of ``cached_matrix``, computing it at most once.

    On a cache hit the stored inverse is returned as-is (the same object on
    every call). On a miss the matrix is inverted with ``inverter`` (default
    ``invert``), receiving ``options`` verbatim; the result is stored and then
    returned exactly as the inverter produced it. Arrays owning their memory
    are frozen and cached as that same object, views are cached as a private
    copy. Inverter failures propagate unchanged and leave the cache empty.

    The check-compute-store sequence runs under ``cached_matrix.lock``, so it
    cannot interleave with ``cached_matrix.set``.
    """

    obs = observability if observability is not None else _observability.default_instance()
    cfg = settings if settings is not None else _settings.default_instance()
    method = _method_label(inverter, options, cfg)

    with cached_matrix.lock:
        inverse = cached_matrix.get_cached_inverse()
        if inverse is not None:
            obs.record("hit", cached_matrix, method=method)
            if cfg.verbose:
                warnings.warn("getting cached data", CacheMatrixCacheHitWarning, stacklevel=2)
            return inverse

        epoch = cached_matrix.epoch
        matrix = cached_matrix.get()
        try:
            if inverter is None:
                result = invert(matrix, settings=cfg, **options)
            else:
                result = inverter(matrix, **options)
        except Exception as exc:
            obs.record("error", cached_matrix, method=method, error=exc)
            raise

        # Only reachable when the inverter itself replaced the matrix.
        if cached_matrix.epoch != epoch:
            obs.record("stale", cached_matrix, method=method)
            warnings.warn(
                "matrix was replaced while its inverse was being computed; result not cached",
                CacheMatrixStaleInverseWarning,
                stacklevel=2,
            )
            return result

        cached_matrix.set_cached_inverse(result)
        obs.record("miss", cached_matrix, method=method)
        return result
