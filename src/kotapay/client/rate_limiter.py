"""Client-side hourly request quota."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from kotapay.core.exceptions import RateLimitError
from kotapay.core.protocols import ICacheBackend

_LOG = logging.getLogger(__name__)


class RateLimiter:
    """Counts requests per clock hour in the shared cache.

    The first writer of a window sets its expiry, so no separate existence
    check is needed and concurrent callers cannot race past the quota.
    """

    WINDOW_SECONDS = 3600
    KEY_PREFIX = "kotapay_rate_limit_"

    def __init__(
        self,
        cache: ICacheBackend,
        *,
        max_per_hour: int = 1000,
        enabled: bool = True,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._cache = cache
        self._max = max_per_hour
        self._enabled = enabled
        self._now = now

    def window_key(self) -> str:
        return f"{self.KEY_PREFIX}{self._now():%Y%m%d%H}"

    def admit(self) -> None:
        """Count one request; raise RateLimitError once the hour's quota is spent."""
        if not self._enabled:
            return

        key = self.window_key()
        count = self._cache.incr(key)
        if count == 1:
            self._cache.expire(key, self.WINDOW_SECONDS)

        if count > self._max:
            _LOG.warning("Kotapay rate limit exceeded; window=%s count=%d max=%d", key, count, self._max)
            raise RateLimitError(self._max)
