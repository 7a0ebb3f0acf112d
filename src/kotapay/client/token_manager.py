"""Bearer token acquisition and caching for the Kotapay API.

Tokens come from a password-grant exchange and live 300 seconds on the vendor
side. They are cached under a fixed key for a shorter TTL so a cached token is
never used at the edge of its lifetime.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from kotapay.client.responses import failure_message, parse_json_body
from kotapay.core.exceptions import AuthError, NetworkError
from kotapay.core.protocols import ICacheBackend
from kotapay.models.credentials import Credentials

_LOG = logging.getLogger(__name__)

__all__ = ["TokenManager"]


class TokenManager:
    """Obtains, caches and invalidates the shared access token."""

    TOKEN_PATH = "/v1/auth/token"

    def __init__(
        self,
        credentials: Credentials,
        cache: ICacheBackend,
        *,
        cache_key: str = "kotapay_access_token",
        ttl: int = 270,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._credentials = credentials
        self._cache = cache
        self._cache_key = cache_key
        self._ttl = ttl
        self._client = httpx.Client(base_url=credentials.base_url, timeout=timeout, transport=transport)

    def get_token(self) -> str:
        """Return the cached token, exchanging credentials on a miss.

        Concurrent callers that miss together share a single exchange.
        """
        return self._cache.remember(self._cache_key, self._ttl, self._fetch_token)

    def invalidate(self) -> None:
        """Evict the cached token, e.g. after the API answered 401."""
        self._cache.delete(self._cache_key)

    def _fetch_token(self) -> str:
        creds = self._credentials
        form = {
            "grant_type": "password",
            "client_id": creds.client_id,
            "client_secret": creds.client_secret,
            "username": creds.username,
            "password": creds.password,
        }
        try:
            resp = self._client.post(self.TOKEN_PATH, data=form)
        except httpx.TransportError as exc:
            raise NetworkError(f"Kotapay token request failed: {exc}") from exc

        if not resp.is_success:
            # body is not logged; it may echo credentials
            _LOG.error("Kotapay auth failed; status=%s", resp.status_code)
            raise AuthError(
                f"Failed to authenticate with Kotapay API. Status: {resp.status_code}",
                status_code=resp.status_code,
            )

        payload = parse_json_body(resp)
        if payload.get("status") != "success":
            raise AuthError(f"Kotapay auth failed: {failure_message(payload)}")

        data = payload.get("data")
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthError("No access token in Kotapay response")

        _LOG.info("Kotapay access token obtained; expires_in=%s", data.get("expires_in", 300))
        return str(token)

    def close(self) -> None:
        self._client.close()
