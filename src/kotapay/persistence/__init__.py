"""Pluggable shared-cache backends behind the ICacheBackend protocol."""

from __future__ import annotations

from kotapay.core.config import AppSettings
from kotapay.core.protocols import ICacheBackend
from kotapay.persistence.dynamodb_backend import DynamoDBCacheBackend
from kotapay.persistence.memory_backend import MemoryCacheBackend
from kotapay.persistence.redis_backend import RedisCacheBackend

__all__ = ["DynamoDBCacheBackend", "MemoryCacheBackend", "RedisCacheBackend", "create_cache"]


def create_cache(settings: AppSettings | None = None) -> ICacheBackend:
    """Create the token / rate-limit store selected by ``settings.cache.backend``."""
    if settings is None:
        settings = AppSettings()

    cfg = settings.cache
    if cfg.backend == "redis":
        return RedisCacheBackend(host=cfg.redis_host, port=cfg.redis_port, db=cfg.redis_db)
    if cfg.backend == "dynamodb":
        return DynamoDBCacheBackend(
            table_name=cfg.dynamodb_table,
            region=cfg.dynamodb_region,
            endpoint_url=cfg.dynamodb_endpoint_url,
        )
    return MemoryCacheBackend()
