"""Single HTTP exchange with the Kotapay REST API.

Uses ``httpx.Client`` with the bearer token from the token provider and a
fixed timeout. Connection-level failures and HTTP failures are raised as
different error types because they are retried differently.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from kotapay.client.responses import parse_json_body
from kotapay.core.exceptions import KotapayError, NetworkError, VendorError
from kotapay.core.protocols import ITokenProvider

_LOG = logging.getLogger(__name__)

__all__ = ["HttpTransport", "SUPPORTED_METHODS"]

SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})
_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class HttpTransport:
    def __init__(
        self,
        base_url: str,
        token_provider: ITokenProvider,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._token_provider = token_provider
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def send(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        query: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise KotapayError(f"Unsupported HTTP method: {method}")

        token = self._token_provider.get_token()
        kwargs: dict[str, Any] = {"headers": {"Authorization": f"Bearer {token}"}}
        if query:
            kwargs["params"] = query
        if method in _BODY_METHODS:
            kwargs["json"] = body or {}

        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            raise NetworkError(f"Kotapay API connection error on {method} {path}: {exc}") from exc

        result = parse_json_body(resp)
        if not resp.is_success:
            message = result.get("message") or resp.text
            _LOG.error(
                "Kotapay API request failed; method=%s endpoint=%s status=%s message=%s",
                method, path, resp.status_code, message,
            )
            raise VendorError(
                f"Kotapay API error: {message}", status_code=resp.status_code, response=result,
            )
        return result

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
