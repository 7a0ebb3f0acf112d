"""Cents-based charge helpers that also build lifecycle notification records."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from kotapay.core.exceptions import KotapayError, PaymentFailedError
from kotapay.core.protocols import IEventSink
from kotapay.models.events import PaymentCreated, PaymentFailed, PaymentVoided
from kotapay.models.payment import BankAccountDetails, PaymentRequest, PaymentResult
from kotapay.services.payments import PaymentService

_LOG = logging.getLogger(__name__)

CENTS = Decimal(100)


class AchBillingService:
    """Charges an initiator (customer, invoice, ...) via ACH.

    Lifecycle records are passed to ``sink`` when one is configured; the
    service never dispatches them anywhere else.
    """

    def __init__(self, payments: PaymentService, sink: IEventSink | None = None) -> None:
        self._payments = payments
        self._sink = sink

    def _emit(self, event: Any) -> None:
        if self._sink is not None:
            self._sink.emit(event)

    def charge_ach(
        self,
        initiator: Any,
        bank_details: BankAccountDetails,
        amount_cents: int,
        **options: Any,
    ) -> PaymentResult:
        """Charge ``amount_cents`` to the given bank account.

        ``options`` are extra PaymentRequest fields (description, addenda,
        effective_date, order_number, idempotency_key, ...).
        """
        amount = Decimal(amount_cents) / CENTS
        request = PaymentRequest.from_bank_details(bank_details, amount, **options)
        try:
            result = self._payments.create_payment(request)
        except KotapayError as exc:
            self._emit(PaymentFailed(error=exc, initiator=initiator, amount=amount))
            raise

        self._emit(PaymentCreated(
            response=result.raw,
            initiator=initiator,
            amount=amount,
            transaction_id=result.transaction_id,
        ))
        return result

    def charge_ach_with_payment_method(
        self,
        initiator: Any,
        payment_method: Any,
        amount_cents: int,
        **options: Any,
    ) -> PaymentResult:
        """Charge a saved payment method object (``type == "ach"`` plus bank fields)."""
        if payment_method is None:
            raise PaymentFailedError("Payment method is required.")
        if getattr(payment_method, "type", None) != "ach":
            raise PaymentFailedError("Payment method is not an ACH/bank account")

        details = BankAccountDetails(
            routing_number=payment_method.routing_number,
            account_number=payment_method.account_number,
            account_type=getattr(payment_method, "account_type", None) or "Checking",
            account_name=(
                getattr(payment_method, "account_name", None)
                or getattr(initiator, "name", None)
                or "Account Holder"
            ),
        )
        return self.charge_ach(initiator, details, amount_cents, **options)

    def void_ach_payment(self, initiator: Any, transaction_id: str) -> PaymentResult:
        result = self._payments.void_payment(transaction_id)
        self._emit(PaymentVoided(response=result.raw, initiator=initiator, transaction_id=transaction_id))
        return result

    def get_ach_payment_status(self, transaction_id: str) -> PaymentResult:
        return self._payments.get_payment(transaction_id)
