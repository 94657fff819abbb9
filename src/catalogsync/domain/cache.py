"""Time-bound lookup cache injected into services that repeat store lookups."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

type Clock = Callable[[], float]

_MISSING = object()


@dataclass(slots=True)
class _Slot[V]:
    value: V
    expires_at: float


@dataclass(slots=True)
class TtlCache[K, V]:
    """Map with per-entry expiry.

    ``clock`` returns monotonic seconds; tests pass a fake to control time. A
    ``ttl_seconds`` of zero disables caching entirely.
    """

    ttl_seconds: float
    clock: Clock = time.monotonic
    _slots: dict[K, _Slot[V]] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def get(self, key: K, default: V | None = None) -> V | None:
        with self._lock:
            slot = self._slots.get(key)
            if slot is None:
                return default
            if slot.expires_at <= self.clock():
                del self._slots[key]
                return default
            return slot.value

    def set(self, key: K, value: V) -> None:
        if self.ttl_seconds <= 0:
            return
        with self._lock:
            self._slots[key] = _Slot(value=value, expires_at=self.clock() + self.ttl_seconds)

    def get_or_load(self, key: K, loader: Callable[[], V | None]) -> V | None:
        """Return the cached value or load, cache (if not ``None``) and return it."""

        cached = self.get(key, _MISSING)  # type: ignore[arg-type]
        if cached is not _MISSING:
            return cached
        value = loader()
        if value is not None:
            self.set(key, value)
        return value

    def invalidate(self, key: K) -> None:
        with self._lock:
            self._slots.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._slots.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)
