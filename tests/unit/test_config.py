"""Tests for configuration defaults and env overrides."""

from __future__ import annotations

from decimal import Decimal

from kotapay.core.config import AppSettings, KotapayApiConfig, ReportConfig, RetryConfig


def test_default_settings():
    settings = AppSettings()
    assert settings.environment == "dev"
    assert settings.api.enabled is False
    assert settings.cache.backend == "memory"


def test_api_config_defaults():
    config = KotapayApiConfig()
    assert config.base_url == "https://api.kotapay.com"
    assert config.token_cache_key == "kotapay_access_token"
    assert config.token_cache_ttl == 270
    assert config.timeout == 30


def test_retry_and_limits_defaults():
    settings = AppSettings()
    assert settings.retry.max_attempts == 3
    assert settings.retry.delay_ms == 100
    assert settings.rate_limit.per_hour == 1000
    assert settings.payment.max_amount == Decimal("100000.00")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("KOTAPAY_RETRY_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("KOTAPAY_RETRY_ENABLED", "false")
    config = RetryConfig()
    assert config.max_attempts == 5
    assert config.enabled is False


def test_far_report_types_from_env(monkeypatch):
    monkeypatch.setenv("KOTAPAY_REPORT_FAR_REPORT_TYPES", '["AchFar", "FAR"]')
    assert ReportConfig().far_report_types == ["AchFar", "FAR"]


def test_far_report_types_default_order():
    types = ReportConfig().far_report_types
    assert types[0] == "FAR"
    assert types[-1] == "ACH_FAR"
    assert len(types) == 8
