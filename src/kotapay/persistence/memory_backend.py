"""In-memory cache backend — process-local, thread-safe."""

from __future__ import annotations

import threading
import time
from typing import Callable


class MemoryCacheBackend:
    """Dict-backed ICacheBackend.

    Suitable for single-process deployments and unit tests. Expiry uses an
    injectable monotonic clock so tests can move time forward.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._store: dict[str, tuple[str, float | None]] = {}
        self._lock = threading.Lock()
        self._fill_locks: dict[str, threading.Lock] = {}

    def _live(self, key: str) -> tuple[str, float | None] | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._store[key]
            return None
        return entry

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._live(key)
            return entry[0] if entry else None

    def setex(self, key: str, ttl: int, value: str) -> None:
        with self._lock:
            self._store[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def incr(self, key: str) -> int:
        with self._lock:
            entry = self._live(key)
            if entry is None:
                count, expires_at = 1, None
            else:
                count, expires_at = int(entry[0]) + 1, entry[1]
            self._store[key] = (str(count), expires_at)
            return count

    def expire(self, key: str, ttl: int) -> None:
        with self._lock:
            entry = self._live(key)
            if entry is not None:
                self._store[key] = (entry[0], self._clock() + ttl)

    def ttl(self, key: str) -> float | None:
        """Seconds until *key* expires; None if missing or persistent."""
        with self._lock:
            entry = self._live(key)
            if entry is None or entry[1] is None:
                return None
            return entry[1] - self._clock()

    def remember(self, key: str, ttl: int, factory: Callable[[], str]) -> str:
        cached = self.get(key)
        if cached is not None:
            return cached

        with self._lock:
            fill_lock = self._fill_locks.setdefault(key, threading.Lock())

        with fill_lock:
            # another caller may have filled it while we waited
            cached = self.get(key)
            if cached is not None:
                return cached
            value = factory()
            self.setex(key, ttl, value)
            return value
