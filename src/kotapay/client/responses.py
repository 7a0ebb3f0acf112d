"""Helpers for the vendor's ``{status, message, data, code}`` envelope."""

from __future__ import annotations

import json

import httpx

from kotapay.core.types import JsonDict

FAILURE_STATUSES = frozenset({"fail", "error"})


def parse_json_body(resp: httpx.Response) -> JsonDict:
    """Decode a JSON object body; anything else yields an empty dict."""
    try:
        payload = resp.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


def is_logical_failure(response: JsonDict) -> bool:
    """True when an HTTP-successful body reports ``fail`` or ``error``."""
    return response.get("status") in FAILURE_STATUSES


def failure_message(response: JsonDict, default: str = "Unknown error") -> str:
    return str(response.get("message") or default)


def failure_code(response: JsonDict) -> int:
    """Numeric ``code`` from a failure body, 0 when absent or non-numeric."""
    code = response.get("code")
    if isinstance(code, bool):
        return 0
    if isinstance(code, int):
        return code
    if isinstance(code, str) and code.isdigit():
        return int(code)
    return 0
