"""Type aliases used across the Kotapay client."""

from __future__ import annotations

from typing import Any

JsonDict = dict[str, Any]
TransactionId = str
ReportTypeCode = str
