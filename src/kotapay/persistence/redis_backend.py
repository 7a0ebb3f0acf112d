"""Redis cache backend implementing ICacheBackend."""

from __future__ import annotations

import logging

import redis

from kotapay.core.exceptions import CacheError
from kotapay.persistence.lease import LeasedCacheMixin

_LOG = logging.getLogger(__name__)


class RedisCacheBackend(LeasedCacheMixin):
    """Production ICacheBackend backed by Redis, shared across processes."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0) -> None:
        self._host = host
        self._port = port
        self._db = db
        self._client = redis.Redis(
            host=host, port=port, db=db, decode_responses=True,
        )

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(key)
        except Exception as exc:
            raise CacheError(f"Redis GET failed for key={key!r}: {exc}") from exc

    def setex(self, key: str, ttl: int, value: str) -> None:
        try:
            self._client.setex(key, ttl, value)
        except Exception as exc:
            raise CacheError(f"Redis SETEX failed for key={key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except Exception as exc:
            raise CacheError(f"Redis DELETE failed for key={key!r}: {exc}") from exc

    def incr(self, key: str) -> int:
        try:
            return int(self._client.incr(key))
        except Exception as exc:
            raise CacheError(f"Redis INCR failed for key={key!r}: {exc}") from exc

    def expire(self, key: str, ttl: int) -> None:
        try:
            self._client.expire(key, ttl)
        except Exception as exc:
            raise CacheError(f"Redis EXPIRE failed for key={key!r}: {exc}") from exc

    def ttl(self, key: str) -> int | None:
        try:
            remaining = self._client.ttl(key)
        except Exception as exc:
            raise CacheError(f"Redis TTL failed for key={key!r}: {exc}") from exc
        return remaining if remaining >= 0 else None

    def _try_lease(self, key: str, owner: str, ttl: int) -> bool:
        try:
            return bool(self._client.set(key, owner, nx=True, ex=ttl))
        except Exception as exc:
            raise CacheError(f"Redis SET NX failed for key={key!r}: {exc}") from exc

    def _release_lease(self, key: str, owner: str) -> None:
        try:
            with self._client.pipeline() as pipe:
                pipe.watch(key)
                if pipe.get(key) != owner:
                    pipe.unwatch()
                    return
                pipe.multi()
                pipe.delete(key)
                pipe.execute()
        except redis.WatchError:
            # lease expired and was re-acquired between GET and EXEC; it is no longer ours
            _LOG.info("Cache lease %s changed owner before release", key)
        except Exception as exc:
            raise CacheError(f"Redis lease release failed for key={key!r}: {exc}") from exc
