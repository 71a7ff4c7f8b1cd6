"""Thread-safe compute-if-absent map."""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class MemoizingCache(Generic[K, V]):
    """Lazily populated key -> value map held for the process lifetime.

    A value is computed at most once per key while it is being populated;
    None results and exceptions are not stored, so the next call retries.
    No eviction.
    """

    def __init__(self) -> None:
        self._values: dict[K, V] = {}
        self._lock = threading.RLock()

    def get(self, key: K) -> V | None:
        return self._values.get(key)

    def get_or_compute(self, key: K, compute: Callable[[K], V | None]) -> V | None:
        value = self._values.get(key)
        if value is not None:
            return value
        with self._lock:
            value = self._values.get(key)
            if value is None:
                value = compute(key)
                if value is not None:
                    self._values[key] = value
            return value

    def invalidate(self, key: K | None = None) -> None:
        with self._lock:
            if key is None:
                self._values.clear()
            else:
                self._values.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
