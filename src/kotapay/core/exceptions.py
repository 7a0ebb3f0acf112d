"""Kotapay client exception hierarchy."""

from __future__ import annotations

from typing import Any


class KotapayError(Exception):
    """Base exception for all Kotapay errors.

    Carries an HTTP-like ``status_code`` (0 when the failure did not come from
    an HTTP response) and the vendor ``response`` payload when one exists.
    """

    def __init__(
        self,
        message: str = "",
        *,
        status_code: int = 0,
        response: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.response = response or {}
        super().__init__(message)


class ConfigurationError(KotapayError):
    """Required credentials or settings are missing."""


class AuthError(KotapayError):
    """Token exchange with the vendor failed."""


class RateLimitError(KotapayError):
    """Client-side hourly quota exhausted; never retried internally."""

    def __init__(self, max_requests: int) -> None:
        self.max_requests = max_requests
        super().__init__(
            f"API rate limit exceeded. Maximum {max_requests} requests per hour.",
            status_code=429,
        )


class NetworkError(KotapayError):
    """Connection-level failure (DNS, connect, timeout, reset)."""


class VendorError(KotapayError):
    """Vendor returned a non-2xx status or a logical failure in the body."""


class ValidationError(KotapayError):
    """Payment instruction failed validation; never sent over the network."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=422)


class PaymentFailedError(KotapayError):
    """A payment operation failed."""

    @classmethod
    def wrap(cls, prefix: str, exc: KotapayError) -> PaymentFailedError:
        """Build from a lower-level error, keeping its status and payload."""
        return cls(f"{prefix}: {exc.message}", status_code=exc.status_code, response=exc.response)


class ReportDiscoveryError(KotapayError):
    """Every candidate report type code was rejected."""

    def __init__(self, report: str, attempted: list[str], last_error: KotapayError | None) -> None:
        self.attempted = list(attempted)
        self.last_error = last_error
        last = last_error.message if last_error is not None else "Unknown"
        super().__init__(
            f"Failed to fetch {report}. Tried types: {', '.join(attempted)}. Last error: {last}",
        )


class CacheError(KotapayError):
    """Shared cache backend operation failed."""
