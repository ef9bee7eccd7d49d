from __future__ import annotations

import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

EVENTS: tuple[str, ...] = ("hit", "miss", "error", "stale")


@dataclass
class CacheRecord:
    event: str
    shape: Tuple[int, ...] | None
    epoch: int
    method: str | None
    trace_tag: str
    error: str | None
    timestamp: float


def _shape(obj: Any) -> Tuple[int, ...] | None:
    try:
        shape_attr = getattr(obj, "shape", None)
        if isinstance(shape_attr, tuple):
            return tuple(int(x) for x in shape_attr)
    except (TypeError, ValueError):
        pass
    return None


class CacheObservability:
    """Records the latest cache event per kind plus running counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counter = 0
        self._counts: Dict[str, int] = {event: 0 for event in EVENTS}
        self._last: dict[str, dict[str, Any]] = {}

    def clear(self) -> None:
        with self._lock:
            self._counter = 0
            self._counts = {event: 0 for event in EVENTS}
            self._last.clear()

    def _record(self, record: CacheRecord) -> dict[str, Any]:
        payload = asdict(record)
        self._last["__latest__"] = payload
        self._last[record.event] = payload
        return payload

    def record(
        self,
        event: str,
        cached_matrix: Any,
        *,
        method: str | None = None,
        error: BaseException | None = None,
    ) -> dict[str, Any]:
        if event not in self._counts:
            raise ValueError(f"Unknown cache event: {event!r}")

        shape = _shape(cached_matrix)
        epoch = int(getattr(cached_matrix, "epoch", 0))

        with self._lock:
            self._counter += 1
            self._counts[event] += 1

            record = CacheRecord(
                event=event,
                shape=shape,
                epoch=epoch,
                method=method,
                trace_tag=f"{event}:{self._counter}",
                error=type(error).__name__ if error is not None else None,
                timestamp=time.time(),
            )
            return self._record(record)

    def last(self, event: str | None = None) -> dict[str, Any] | None:
        key = event or "__latest__"
        with self._lock:
            payload = self._last.get(key)
        if payload is None:
            return None
        return dict(payload)

    def stats(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)


# Module-level singleton helpers (optional convenience)
_default_observability = CacheObservability()


def default_instance() -> CacheObservability:
    return _default_observability
