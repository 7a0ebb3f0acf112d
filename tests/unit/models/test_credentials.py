"""Tests for the Credentials model."""

from __future__ import annotations

import pytest

from kotapay.core.config import AppSettings, KotapayApiConfig
from kotapay.core.exceptions import ConfigurationError
from kotapay.models.credentials import Credentials

FULL = dict(client_id="cid", client_secret="s3cret", username="u", password="p4ss", company_id="CO123")


def test_trailing_slash_stripped():
    assert Credentials(base_url="https://api.test/").base_url == "https://api.test"


def test_empty_base_url_falls_back_to_default():
    assert Credentials(base_url="").base_url == "https://api.kotapay.com"


def test_repr_hides_secrets():
    text = repr(Credentials(**FULL))
    assert "s3cret" not in text
    assert "p4ss" not in text
    assert "cid" in text


def test_frozen():
    creds = Credentials(**FULL)
    with pytest.raises(Exception):
        creds.company_id = "other"


@pytest.mark.parametrize(
    "missing, hint",
    [
        ("client_secret", "KOTAPAY_API_CLIENT_SECRET"),
        ("username", "KOTAPAY_API_USERNAME"),
        ("company_id", "KOTAPAY_API_COMPANY_ID"),
    ],
)
def test_require_complete_names_missing_setting(missing, hint):
    creds = Credentials(**{**FULL, missing: ""})
    with pytest.raises(ConfigurationError, match=hint):
        creds.require_complete()


def test_from_settings_skips_validation_when_disabled():
    creds = Credentials.from_settings(AppSettings(api=KotapayApiConfig(enabled=False)))
    assert creds.client_id == ""


def test_from_settings_validates_when_enabled():
    with pytest.raises(ConfigurationError):
        Credentials.from_settings(AppSettings(api=KotapayApiConfig(enabled=True)))


def test_from_settings_copies_fields():
    api = KotapayApiConfig(enabled=True, base_url="https://sandbox.test/", **FULL)
    creds = Credentials.from_settings(AppSettings(api=api))
    assert creds.base_url == "https://sandbox.test"
    assert creds.company_id == "CO123"
