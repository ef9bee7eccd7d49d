from __future__ import annotations

import numpy as np


class InversionError(np.linalg.LinAlgError, ValueError):
    """Raised when a matrix cannot be inverted.

    ``reason`` is a short tag (``"empty"``, ``"not_2d"``, ``"not_square"``,
    ``"non_finite"``, ``"non_numeric"``, ``"singular"``) and ``shape`` is the
    offending matrix shape when known.
    """

    def __init__(self, message: str, *, reason: str, shape: tuple[int, ...] | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.shape = shape
