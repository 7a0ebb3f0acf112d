"""Protocol interfaces for the injectable Kotapay collaborators.

The token cache and the rate-limit counter are shared resources that may be
process-wide or, with a networked backend, shared across processes. They are
passed in as an ``ICacheBackend`` rather than reached for as globals.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

from kotapay.core.types import JsonDict


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Key-value store with per-key expiry and atomic primitives."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def incr(self, key: str) -> int: ...

    def expire(self, key: str, ttl: int) -> None: ...

    def remember(self, key: str, ttl: int, factory: Callable[[], str]) -> str:
        """Return the cached value or fill it with ``factory()`` exactly once."""
        ...


# ---------------------------------------------------------------------------
# Client layers
# ---------------------------------------------------------------------------

@runtime_checkable
class ITokenProvider(Protocol):
    """Bearer token source."""

    def get_token(self) -> str: ...

    def invalidate(self) -> None: ...


@runtime_checkable
class IRateLimiter(Protocol):
    def admit(self) -> None: ...


@runtime_checkable
class ITransport(Protocol):
    """Single HTTP exchange with the vendor API."""

    def send(
        self,
        method: str,
        path: str,
        body: JsonDict | None = None,
        query: JsonDict | None = None,
    ) -> JsonDict: ...


@runtime_checkable
class IApiClient(Protocol):
    """Retrying vendor API client used by the payment and report services."""

    @property
    def company_id(self) -> str: ...

    def execute(
        self,
        method: str,
        path: str,
        body: JsonDict | None = None,
        query: JsonDict | None = None,
    ) -> JsonDict: ...


# ---------------------------------------------------------------------------
# Notification sink
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventSink(Protocol):
    """Receives payment lifecycle records (created / voided / failed)."""

    def emit(self, event: Any) -> None: ...
