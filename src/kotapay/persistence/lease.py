"""Lease-based fill-once for networked cache backends.

A short-lived lease key guards the factory call so that only one caller across
all processes sharing the store performs it; everyone else polls the value.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Callable

from kotapay.core.exceptions import CacheError

_LOG = logging.getLogger(__name__)


class LeasedCacheMixin:
    """Implements ``remember`` on top of ``get``/``setex`` and a lease primitive."""

    LEASE_TTL = 30  # seconds; covers one token exchange at the default timeout
    LEASE_WAIT = 35.0
    POLL_INTERVAL = 0.05

    _sleep: Callable[[float], None] = staticmethod(time.sleep)
    _lock_guard = threading.Lock()

    def _local_lock(self) -> threading.Lock:
        with self._lock_guard:
            lock = getattr(self, "_process_lock", None)
            if lock is None:
                lock = self._process_lock = threading.Lock()
            return lock

    def _try_lease(self, key: str, owner: str, ttl: int) -> bool:
        raise NotImplementedError

    def _release_lease(self, key: str, owner: str) -> None:
        raise NotImplementedError

    def remember(self, key: str, ttl: int, factory: Callable[[], str]) -> str:
        cached = self.get(key)
        if cached is not None:
            return cached

        lease_key = f"{key}:lease"
        owner = uuid.uuid4().hex
        deadline = time.monotonic() + self.LEASE_WAIT

        # threads of this process queue locally instead of polling the store
        with self._local_lock():
            while True:
                cached = self.get(key)
                if cached is not None:
                    return cached
                if self._try_lease(lease_key, owner, self.LEASE_TTL):
                    break
                if time.monotonic() >= deadline:
                    raise CacheError(f"Timed out waiting for lease on key={key!r}")
                self._sleep(self.POLL_INTERVAL)

            try:
                cached = self.get(key)
                if cached is not None:
                    return cached
                value = factory()
                self.setex(key, ttl, value)
                return value
            finally:
                try:
                    self._release_lease(lease_key, owner)
                except CacheError:
                    _LOG.warning("Failed to release cache lease %s; it will expire", lease_key)
