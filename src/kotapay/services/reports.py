"""Vendor report execution and response normalization.

Reports run through ``POST /v1/Reports/{type}``:

* ``far``: File Acknowledgement Report (summary, or detail via FileUniqueID)
* ``pbr``: Processed Batches Report (summary, or detail via BatchUniqueID)
* ``ret``: Returns Report (EntryID, return Code, Reason)
* ``cor``: Corrections Report (NOC entries)

The File Acknowledgement type code is not documented by the vendor, so it is
discovered by trying an ordered list of candidates from configuration.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Sequence

from kotapay.client.responses import failure_code, failure_message, is_logical_failure
from kotapay.core.config import DEFAULT_FAR_REPORT_TYPES
from kotapay.core.exceptions import (
    AuthError,
    KotapayError,
    RateLimitError,
    ReportDiscoveryError,
    VendorError,
)
from kotapay.core.protocols import IApiClient
from kotapay.core.types import JsonDict, ReportTypeCode
from kotapay.models.report import ReportResult

_LOG = logging.getLogger(__name__)

# A candidate answering with one of these is not the problem; stop probing.
SYSTEMIC_STATUSES = frozenset({401, 403, 500})


def _day_start(value: date | str) -> str:
    day = value.isoformat() if isinstance(value, date) else value
    return f"{day}T00:00:00"


def _day_end(value: date | str) -> str:
    day = value.isoformat() if isinstance(value, date) else value
    return f"{day}T23:59:59"


def _is_systemic(exc: KotapayError) -> bool:
    return isinstance(exc, (AuthError, RateLimitError)) or exc.status_code in SYSTEMIC_STATUSES


def _as_int(value: Any, fallback: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _normalize(data: Any, raw: Any) -> ReportResult:
    if not data:
        return ReportResult(row_count=0, rows=[], raw=raw)

    if isinstance(data, list):
        return ReportResult(row_count=len(data), rows=data, raw=raw)

    if isinstance(data, dict):
        if "rowCount" in data:
            rows = data.get("rows") or []
            if isinstance(rows, dict):
                rows = [rows]
            elif not isinstance(rows, list):
                rows = []
            return ReportResult(row_count=_as_int(data["rowCount"], len(rows)), rows=rows, raw=raw)
        return ReportResult(row_count=1, rows=[data], raw=raw)

    if isinstance(data, str):
        try:
            decoded = json.loads(data)
        except ValueError:
            decoded = None
        if isinstance(decoded, (dict, list)):
            return _normalize(decoded, raw)
        # CSV or some other text format
        return ReportResult(row_count=0, rows=[], raw=raw, raw_data=data)

    return ReportResult(row_count=0, rows=[], raw=raw)


def parse_report_response(response: Any) -> ReportResult:
    """Normalize a report body into ``rowCount``/``rows``/``raw``.

    ``data`` may be absent, a list of rows, an object carrying its own
    ``rowCount``/``rows``, a single flat row, or a JSON-encoded string of any
    of those. ``raw`` is always the original payload.
    """
    data = response.get("data") if isinstance(response, dict) else None
    return _normalize(data, response)


class ReportService:
    """Runs vendor reports and returns normalized results."""

    def __init__(self, api: IApiClient, far_report_types: Sequence[str] | None = None) -> None:
        self._api = api
        self._far_report_types = list(far_report_types or DEFAULT_FAR_REPORT_TYPES)

    @property
    def far_report_types(self) -> list[str]:
        return list(self._far_report_types)

    def run_report(self, report_type: ReportTypeCode, params: JsonDict | None = None) -> JsonDict:
        """Execute a report and return the raw vendor body."""
        params = params or {}
        try:
            response = self._api.execute("POST", f"/v1/Reports/{report_type}", body=params)
        except KotapayError as exc:
            _LOG.error("Kotapay report request failed; type=%s params=%s error=%s", report_type, params, exc)
            raise
        _LOG.info(
            "Kotapay report executed; type=%s params=%s status=%s",
            report_type, params, response.get("status"),
        )
        return response

    # ---- Returns / Corrections ----

    def get_returns_report(self, start_date: date | str, end_date: date | str | None = None) -> ReportResult:
        """ACH entries returned by the receiving bank (R01, R02, ...)."""
        return self._fetch("ret", self._dated_json_params(start_date, end_date), "Returns report")

    def get_corrections_report(self, start_date: date | str, end_date: date | str | None = None) -> ReportResult:
        """Notification of Change entries with corrected bank details."""
        return self._fetch("cor", self._dated_json_params(start_date, end_date), "Corrections report")

    # ---- Processed Batches ----

    def get_processed_batches_summary(self, start_date: date | str, end_date: date | str) -> ReportResult:
        params = {"startDate": _day_start(start_date), "endDate": _day_end(end_date)}
        return self._fetch("pbr", params, "Processed batches report")

    def get_processed_batch_detail(self, batch_unique_id: int) -> ReportResult:
        return self._fetch("pbr", {"BatchUniqueID": batch_unique_id}, "Processed batch detail")

    # ---- File Acknowledgement ----

    def get_file_acknowledgement_report(self, start_date: date | str, end_date: date | str) -> ReportResult:
        params = {
            "startDate": _day_start(start_date),
            "endDate": _day_end(end_date),
            "isTest": False,
        }
        return self._discover(params, "FAR report")

    def get_file_acknowledgement_detail(self, file_unique_id: int) -> ReportResult:
        return self._discover({"FileUniqueID": file_unique_id}, "FAR detail")

    parse_report_response = staticmethod(parse_report_response)

    # ---- internals ----

    @staticmethod
    def _dated_json_params(start_date: date | str, end_date: date | str | None) -> dict[str, Any]:
        params: dict[str, Any] = {
            "startDate": _day_start(start_date),
            "ReportFormat": "JSON",
            "IsTest": False,
        }
        if end_date is not None:
            params["endDate"] = _day_end(end_date)
        return params

    def _fetch(self, report_type: ReportTypeCode, params: JsonDict, label: str) -> ReportResult:
        response = self.run_report(report_type, params)
        if is_logical_failure(response):
            raise VendorError(
                f"{label} failed: {failure_message(response)}",
                status_code=failure_code(response),
                response=response,
            )
        return parse_report_response(response)

    def _discover(self, params: dict[str, Any], label: str) -> ReportResult:
        """Try each candidate type code; first success wins, systemic errors abort."""
        attempted: list[str] = []
        last_error: KotapayError | None = None

        for report_type in self._far_report_types:
            attempted.append(report_type)
            try:
                response = self.run_report(report_type, params)
            except KotapayError as exc:
                _LOG.info(
                    "Kotapay FAR report type failed; type=%s status=%s error=%s",
                    report_type, exc.status_code, exc,
                    extra={"report_type": report_type},
                )
                if _is_systemic(exc):
                    raise
                last_error = exc
                continue

            if is_logical_failure(response):
                message = failure_message(response)
                last_error = VendorError(
                    f"Report type '{report_type}' failed: {message}",
                    status_code=failure_code(response),
                    response=response,
                )
                if _is_systemic(last_error):
                    raise last_error
                _LOG.info("Kotapay FAR report type rejected; type=%s message=%s", report_type, message)
                continue

            _LOG.info(
                "Kotapay FAR report type accepted; type=%s", report_type, extra={"report_type": report_type},
            )
            return parse_report_response(response)

        raise ReportDiscoveryError(label, attempted, last_error) from last_error
