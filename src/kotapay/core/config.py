"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings

DEFAULT_FAR_REPORT_TYPES = [
    "FAR",
    "far",
    "FileAcknowledgement",
    "FileAcknowledgementReport",
    "file-acknowledgement",
    "file_acknowledgement",
    "AchFar",
    "ACH_FAR",
]


class KotapayApiConfig(BaseSettings):
    """Vendor API credentials, endpoint and token cache settings."""

    model_config = {"env_prefix": "KOTAPAY_API_"}

    enabled: bool = False
    base_url: str = "https://api.kotapay.com"
    client_id: str = ""
    client_secret: str = ""
    username: str = ""
    password: str = ""
    company_id: str = ""
    timeout: float = 30.0
    token_cache_key: str = "kotapay_access_token"
    token_cache_ttl: int = 270  # vendor tokens live 300s; 30s safety buffer


class RateLimitConfig(BaseSettings):
    """Client-side hourly request quota."""

    model_config = {"env_prefix": "KOTAPAY_RATE_LIMIT_"}

    enabled: bool = True
    per_hour: int = 1000


class RetryConfig(BaseSettings):
    """Retry behavior for transient API failures."""

    model_config = {"env_prefix": "KOTAPAY_RETRY_"}

    enabled: bool = True
    max_attempts: int = 3
    delay_ms: int = 100


class PaymentConfig(BaseSettings):
    """Payment instruction validation limits."""

    model_config = {"env_prefix": "KOTAPAY_PAYMENT_"}

    max_amount: Decimal = Decimal("100000.00")
    max_effective_days: int = 30


class ReportConfig(BaseSettings):
    """Report endpoint settings."""

    model_config = {"env_prefix": "KOTAPAY_REPORT_"}

    # Ordered candidates for the undocumented File Acknowledgement report code
    far_report_types: list[str] = list(DEFAULT_FAR_REPORT_TYPES)


class CacheConfig(BaseSettings):
    """Shared token / rate-limit store configuration."""

    model_config = {"env_prefix": "KOTAPAY_CACHE_"}

    backend: Literal["memory", "redis", "dynamodb"] = "memory"
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    dynamodb_table: str = "kotapay-cache"
    dynamodb_region: str = "us-east-1"
    dynamodb_endpoint_url: str | None = None  # LocalStack override


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "KOTAPAY_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    log_format: Literal["text", "json"] = "text"

    api: KotapayApiConfig = KotapayApiConfig()
    rate_limit: RateLimitConfig = RateLimitConfig()
    retry: RetryConfig = RetryConfig()
    payment: PaymentConfig = PaymentConfig()
    reports: ReportConfig = ReportConfig()
    cache: CacheConfig = CacheConfig()
