"""Tests for logging setup."""

from __future__ import annotations

import json
import logging

import pytest

from kotapay.core.logging import JsonFormatter, configure_logging


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_formatter_includes_context_fields():
    record = logging.LogRecord("kotapay.client.retry", logging.WARNING, __file__, 1, "retry %d", (2,), None)
    record.endpoint = "/v1/Reports/ret"
    record.attempt = 2
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "WARNING"
    assert payload["message"] == "retry 2"
    assert payload["endpoint"] == "/v1/Reports/ret"
    assert payload["attempt"] == 2
    assert "report_type" not in payload


def test_configure_json_logging(restore_root):
    configure_logging("json", "debug")
    assert restore_root.level == logging.DEBUG
    assert isinstance(restore_root.handlers[0].formatter, JsonFormatter)
    assert logging.getLogger("httpx").level == logging.WARNING


def test_configure_text_logging(restore_root):
    configure_logging()
    assert len(restore_root.handlers) == 1
    assert not isinstance(restore_root.handlers[0].formatter, JsonFormatter)
