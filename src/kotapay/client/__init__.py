"""Kotapay API client: token cache, quota, transport and retry wiring."""

from __future__ import annotations

import time
from typing import Callable, Optional

import httpx

from kotapay.client.rate_limiter import RateLimiter
from kotapay.client.retry import RetryOrchestrator
from kotapay.client.token_manager import TokenManager
from kotapay.client.transport import HttpTransport
from kotapay.core.config import AppSettings
from kotapay.core.protocols import ICacheBackend
from kotapay.models.credentials import Credentials
from kotapay.persistence import create_cache

__all__ = ["HttpTransport", "RateLimiter", "RetryOrchestrator", "TokenManager", "create_api_client"]


def create_api_client(
    settings: AppSettings | None = None,
    cache: ICacheBackend | None = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RetryOrchestrator:
    """Build a retrying API client from settings.

    Args:
        settings: resolved settings; read from the environment when omitted.
        cache: shared token / rate-limit store; built from ``settings.cache``
            when omitted.
        transport: optional httpx transport (tests pass ``httpx.MockTransport``).
        sleep: backoff sleep function.
    """
    if settings is None:
        settings = AppSettings()
    if cache is None:
        cache = create_cache(settings)

    api = settings.api
    credentials = Credentials.from_settings(settings)

    tokens = TokenManager(
        credentials,
        cache,
        cache_key=api.token_cache_key,
        ttl=api.token_cache_ttl,
        timeout=api.timeout,
        transport=transport,
    )
    http = HttpTransport(credentials.base_url, tokens, timeout=api.timeout, transport=transport)
    limiter = RateLimiter(
        cache,
        max_per_hour=settings.rate_limit.per_hour,
        enabled=settings.rate_limit.enabled,
    )
    return RetryOrchestrator(
        http,
        limiter,
        tokens,
        company_id=credentials.company_id,
        enabled=settings.retry.enabled,
        max_attempts=settings.retry.max_attempts,
        delay_ms=settings.retry.delay_ms,
        sleep=sleep,
    )
