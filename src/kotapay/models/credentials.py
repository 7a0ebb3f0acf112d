"""Vendor API credentials."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from kotapay.core.config import AppSettings
from kotapay.core.exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://api.kotapay.com"


class Credentials(BaseModel):
    """OAuth2 password-grant credentials plus the company scope. Immutable."""

    model_config = {"frozen": True}

    base_url: str = DEFAULT_BASE_URL
    client_id: str = ""
    client_secret: str = Field("", repr=False)
    username: str = ""
    password: str = Field("", repr=False)
    company_id: str = ""

    @field_validator("base_url")
    @classmethod
    def _strip_base_url(cls, value: str) -> str:
        return (value or DEFAULT_BASE_URL).rstrip("/")

    def require_complete(self) -> None:
        """Fail fast when any credential needed for a live call is empty."""
        if not self.client_id or not self.client_secret:
            raise ConfigurationError(
                "Kotapay OAuth2 credentials are required. Set KOTAPAY_API_CLIENT_ID "
                "and KOTAPAY_API_CLIENT_SECRET."
            )
        if not self.username or not self.password:
            raise ConfigurationError(
                "Kotapay API credentials are required. Set KOTAPAY_API_USERNAME "
                "and KOTAPAY_API_PASSWORD."
            )
        if not self.company_id:
            raise ConfigurationError(
                "Kotapay company ID is required. Set KOTAPAY_API_COMPANY_ID."
            )

    @classmethod
    def from_settings(cls, settings: AppSettings) -> Credentials:
        api = settings.api
        creds = cls(
            base_url=api.base_url,
            client_id=api.client_id,
            client_secret=api.client_secret,
            username=api.username,
            password=api.password,
            company_id=api.company_id,
        )
        # validation is deferred while the integration is switched off
        if api.enabled:
            creds.require_complete()
        return creds
