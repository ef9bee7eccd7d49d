from __future__ import annotations

import warnings
from typing import Any, Callable

import numpy as np
from scipy import linalg as _sla

from .errors import InversionError
from .settings import Settings, default_instance, normalize_method


def _as_square_array(matrix: Any, *, check_finite: bool) -> np.ndarray:
    try:
        array = np.asarray(matrix)
    except (TypeError, ValueError) as exc:
        raise InversionError(f"Matrix data is not numeric: {exc}", reason="non_numeric") from exc

    if array.dtype.kind == "c":
        array = array.astype(np.complex128)
    else:
        try:
            array = array.astype(np.float64)
        except (TypeError, ValueError) as exc:
            raise InversionError(
                f"Matrix data is not numeric (dtype {array.dtype})", reason="non_numeric", shape=array.shape
            ) from exc

    if array.ndim != 2:
        raise InversionError(
            f"Matrix must be 2-D, got {array.ndim}-D input", reason="not_2d", shape=array.shape
        )
    if array.size == 0:
        raise InversionError(
            "Matrix is empty; set a matrix before requesting its inverse",
            reason="empty",
            shape=array.shape,
        )
    rows, cols = array.shape
    if rows != cols:
        raise InversionError(
            f"Matrix must be square (rows == columns), got {rows}x{cols}",
            reason="not_square",
            shape=array.shape,
        )
    if check_finite and not np.isfinite(array).all():
        raise InversionError("Matrix contains NaN or infinite entries", reason="non_finite", shape=array.shape)
    return array


def _singular(shape: tuple[int, ...], detail: str = "") -> InversionError:
    msg = "Matrix is singular or near-singular"
    if detail:
        msg = f"{msg} ({detail})"
    return InversionError(msg, reason="singular", shape=shape)


def reciprocal_condition(array: np.ndarray) -> float:
    """Ratio of smallest to largest singular value (0.0 for a zero matrix)."""
    s = np.linalg.svd(array, compute_uv=False)
    if s[0] == 0:
        return 0.0
    return float(s[-1] / s[0])


def default_rtol(array: np.ndarray) -> float:
    return max(array.shape[0], 1) * float(np.finfo(array.dtype).eps)


def _invert_lu(a: np.ndarray) -> np.ndarray:
    identity = np.eye(a.shape[0], dtype=a.dtype)
    with warnings.catch_warnings():
        # lu_factor only warns on an exactly zero pivot.
        warnings.simplefilter("error", _sla.LinAlgWarning)
        try:
            lu, piv = _sla.lu_factor(a, check_finite=False)
            return _sla.lu_solve((lu, piv), identity, check_finite=False)
        except (np.linalg.LinAlgError, _sla.LinAlgWarning) as exc:
            raise _singular(a.shape, str(exc)) from exc


def _invert_numpy(a: np.ndarray) -> np.ndarray:
    try:
        return np.linalg.inv(a)
    except np.linalg.LinAlgError as exc:
        raise _singular(a.shape, str(exc)) from exc


def _invert_qr(a: np.ndarray) -> np.ndarray:
    q, r = np.linalg.qr(a)
    try:
        return _sla.solve_triangular(r, q.conj().T, check_finite=False)
    except np.linalg.LinAlgError as exc:
        raise _singular(a.shape, str(exc)) from exc


def _invert_gauss(a: np.ndarray) -> np.ndarray:
    """Gauss-Jordan elimination with partial pivoting."""
    n = a.shape[0]
    aug = np.hstack([a.copy(), np.eye(n, dtype=a.dtype)])

    for i in range(n):
        pivot = int(np.argmax(np.abs(aug[i:, i]))) + i
        if aug[pivot, i] == 0:
            raise _singular(a.shape, f"zero pivot in column {i}")
        if pivot != i:
            aug[[i, pivot]] = aug[[pivot, i]]

        aug[i] /= aug[i, i]
        for j in range(n):
            if j != i:
                aug[j] -= aug[i] * aug[j, i]

    return aug[:, n:]


_ROUTES: dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "lu": _invert_lu,
    "auto": _invert_lu,
    "numpy": _invert_numpy,
    "qr": _invert_qr,
    "gauss": _invert_gauss,
}


def invert(
    matrix: Any,
    *,
    method: str | None = None,
    rtol: float | None = None,
    check_finite: bool = True,
    settings: Settings | None = None,
) -> np.ndarray:
    """Return the inverse of a square matrix as a new array.

    ``method`` selects the route ("lu", "numpy", "qr", "gauss"; "auto" is
    "lu"); ``None`` uses the configured default. ``rtol`` is the smallest
    accepted reciprocal condition number; ``None`` uses the configured default
    or ``n * eps`` when none is configured.

    Raises ``InversionError`` for empty, non-square, non-finite, non-numeric
    or (near-)singular input, and ``ValueError`` for an unknown method.
    """

    cfg = settings if settings is not None else default_instance()
    route = normalize_method(method) if method is not None else cfg.method
    if rtol is None:
        rtol = cfg.rtol
    elif rtol < 0:
        raise ValueError("rtol must be non-negative")

    a = _as_square_array(matrix, check_finite=check_finite)
    if rtol is None:
        rtol = default_rtol(a)

    if np.isfinite(a).all():
        rcond = reciprocal_condition(a)
        if rcond <= rtol:
            raise _singular(a.shape, f"reciprocal condition {rcond:.3g} <= rtol {rtol:.3g}")

    result = _ROUTES[route](a)
    if not result.flags.owndata:
        result = result.copy()
    if check_finite and not np.isfinite(result).all():
        raise _singular(a.shape, "inverse has non-finite entries")
    return result
