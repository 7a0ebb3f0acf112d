"""Payment and report services built on the retrying API client."""

from __future__ import annotations

from kotapay.client import create_api_client
from kotapay.core.config import AppSettings
from kotapay.core.protocols import ICacheBackend
from kotapay.services.billing import AchBillingService
from kotapay.services.payments import PaymentService
from kotapay.services.reports import ReportService, parse_report_response
from kotapay.services.validator import PaymentValidator

__all__ = [
    "AchBillingService",
    "PaymentService",
    "PaymentValidator",
    "ReportService",
    "create_services",
    "parse_report_response",
]


def create_services(settings: AppSettings | None = None, cache: ICacheBackend | None = None, **client_kwargs):
    """Create wired-up services from application settings.

    Returns:
        Tuple of (payment_service, report_service).
    """
    if settings is None:
        settings = AppSettings()

    api = create_api_client(settings, cache, **client_kwargs)
    validator = PaymentValidator(
        max_amount=settings.payment.max_amount,
        max_effective_days=settings.payment.max_effective_days,
    )
    payments = PaymentService(api, validator)
    reports = ReportService(api, far_report_types=settings.reports.far_report_types)
    return payments, reports
