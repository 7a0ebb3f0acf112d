"""Retrying API client: quota check, bounded retry and token refresh on 401.

Backoff is deterministic exponential: ``delay_ms * 2 ** (n - 1)`` before the
n-th retry (100, 200, 400 ms with the defaults). Network errors, 429 and 5xx
are retried while attempts remain; other 4xx are terminal. The first 401 of a
call evicts the cached token and retries immediately without consuming an
attempt; a second 401 is terminal. A failed token exchange is retried like a
request when it answered 5xx or 429, or reported a failure with no HTTP status.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from kotapay.core.exceptions import AuthError, KotapayError, NetworkError, VendorError
from kotapay.core.protocols import IRateLimiter, ITokenProvider, ITransport

_LOG = logging.getLogger(__name__)

__all__ = ["RetryOrchestrator", "is_retryable", "is_retryable_auth"]


def is_retryable(exc: KotapayError) -> bool:
    return exc.status_code >= 500 or exc.status_code == 429


def is_retryable_auth(exc: AuthError) -> bool:
    return exc.status_code == 0 or is_retryable(exc)


class RetryOrchestrator:
    """Wraps a transport with rate limiting, retry/backoff and 401 handling."""

    def __init__(
        self,
        transport: ITransport,
        rate_limiter: IRateLimiter,
        token_provider: ITokenProvider,
        *,
        company_id: str = "",
        enabled: bool = True,
        max_attempts: int = 3,
        delay_ms: int = 100,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport = transport
        self._rate_limiter = rate_limiter
        self._token_provider = token_provider
        self._company_id = company_id
        self._max_attempts = max(1, max_attempts) if enabled else 1
        self._delay_ms = delay_ms
        self._sleep = sleep

    @property
    def company_id(self) -> str:
        return self._company_id

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def backoff_ms(self, attempt: int) -> int:
        """Delay before retrying after the ``attempt``-th failed attempt."""
        return self._delay_ms * 2 ** (attempt - 1)

    def execute(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        query: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        attempts = 0
        refreshed = False
        last_error: Optional[KotapayError] = None

        while attempts < self._max_attempts:
            self._rate_limiter.admit()
            try:
                return self._transport.send(method, path, body, query)
            except NetworkError as exc:
                attempts += 1
                _LOG.warning(
                    "Kotapay API connection error; attempt=%d/%d endpoint=%s error=%s",
                    attempts, self._max_attempts, path, exc,
                    extra={"endpoint": path, "attempt": attempts},
                )
                if attempts >= self._max_attempts:
                    raise KotapayError(
                        f"Kotapay API connection failed after {attempts} attempts: {exc}",
                    ) from exc
                self._backoff(attempts)
            except AuthError as exc:
                last_error = exc
                attempts += 1
                if not is_retryable_auth(exc) or attempts >= self._max_attempts:
                    raise
                _LOG.warning(
                    "Kotapay token exchange failed, retrying; attempt=%d/%d status=%d",
                    attempts, self._max_attempts, exc.status_code,
                    extra={"endpoint": path, "attempt": attempts},
                )
                self._backoff(attempts)
            except VendorError as exc:
                last_error = exc
                if exc.status_code == 401:
                    if refreshed:
                        raise
                    refreshed = True
                    _LOG.warning(
                        "Kotapay token rejected, refreshing; endpoint=%s", path, extra={"endpoint": path},
                    )
                    self._token_provider.invalidate()
                    continue

                attempts += 1
                if not is_retryable(exc) or attempts >= self._max_attempts:
                    raise
                _LOG.warning(
                    "Kotapay API retry; attempt=%d/%d endpoint=%s status=%d",
                    attempts, self._max_attempts, path, exc.status_code,
                    extra={"endpoint": path, "attempt": attempts},
                )
                self._backoff(attempts)

        raise last_error or KotapayError("Request failed after retries")

    def test_connection(self) -> bool:
        """Return True if a token can be obtained."""
        try:
            self._token_provider.get_token()
        except KotapayError as exc:
            _LOG.error("Kotapay connection test failed: %s", exc)
            return False
        return True

    def _backoff(self, attempt: int) -> None:
        self._sleep(self.backoff_ms(attempt) / 1000)

    def close(self) -> None:
        """Release the HTTP clients held by the transport and token provider."""
        for part in (self._transport, self._token_provider):
            close = getattr(part, "close", None)
            if close is not None:
                close()

    def __enter__(self) -> RetryOrchestrator:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- verb helpers ----------------------------------------------------

    def get(self, path: str, query: dict[str, Any] | None = None) -> dict[str, Any]:
        return self.execute("GET", path, query=query)

    def post(self, path: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
        return self.execute("POST", path, body=data or {})

    def put(self, path: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
        return self.execute("PUT", path, body=data or {})

    def patch(self, path: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
        return self.execute("PATCH", path, body=data or {})

    def delete(self, path: str) -> dict[str, Any]:
        return self.execute("DELETE", path)
