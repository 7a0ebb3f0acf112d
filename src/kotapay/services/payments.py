"""ACH payment operations: create, get, list, void."""

from __future__ import annotations

import json
import logging
import uuid

from kotapay.client.responses import failure_message, is_logical_failure
from kotapay.core.exceptions import KotapayError, PaymentFailedError, ValidationError
from kotapay.core.protocols import IApiClient
from kotapay.core.types import JsonDict, TransactionId
from kotapay.models.payment import AccountType, PaymentRequest, PaymentResult
from kotapay.services.validator import PaymentValidator, is_valid_transaction_id, parse_amount

_LOG = logging.getLogger(__name__)


class PaymentService:
    """Validates instructions and drives the payment endpoints.

    Every response body is checked for a logical failure: the vendor can
    answer HTTP 200 with ``status: fail``.
    """

    def __init__(self, api: IApiClient, validator: PaymentValidator | None = None) -> None:
        self._api = api
        self._validator = validator or PaymentValidator()

    def _base_path(self) -> str:
        return f"/v1/Ach/{self._api.company_id}/payment"

    def create_payment(self, request: PaymentRequest) -> PaymentResult:
        """Submit an ACH debit.

        Raises:
            PaymentFailedError: the instruction is malformed (status 422, caused by
                a ValidationError, nothing sent), the vendor rejected the payment,
                or the call failed.
        """
        try:
            self._validator.validate(request)
        except ValidationError as exc:
            raise PaymentFailedError(exc.message, status_code=exc.status_code) from exc

        clean = self._validator.sanitize(request)

        idempotency_key = request.idempotency_key or str(uuid.uuid4())
        order_number = request.order_number or str(uuid.uuid4())
        payload: JsonDict = {
            "amount": float(parse_amount(request.amount)),
            "routingNumber": clean["routing_number"],
            "accountNumber": clean["account_number"],
            "accountType": AccountType.normalize(request.account_type).value,
            "accountName": clean["account_name"],
            "description": clean["description"],
            "addenda": clean["addenda"],
            "orderNumber": order_number,
            "accountNameId": request.account_name_id,
            "storageCustomerRecordId": request.storage_customer_record_id,
            "idempotencyKey": idempotency_key,
        }
        if request.effective_date:
            payload["effectiveDate"] = request.effective_date
        if request.application_id:
            payload["applicationId"] = request.application_id

        try:
            response = self._api.execute("POST", self._base_path(), body=payload)
        except KotapayError as exc:
            raise PaymentFailedError.wrap("Kotapay payment failed", exc) from exc

        if is_logical_failure(response):
            errors = response.get("data")
            detail = f" - {json.dumps(errors)}" if errors else ""
            raise PaymentFailedError(
                f"Kotapay payment rejected: {failure_message(response, 'Kotapay payment rejected')}{detail}",
                response=response,
            )

        result = PaymentResult.from_response(
            response, idempotency_key=idempotency_key, order_number=order_number,
        )
        _LOG.info(
            "Kotapay ACH payment created; amount=%s transaction_id=%s idempotency_key=%s",
            payload["amount"], result.transaction_id, idempotency_key,
            extra={"transaction_id": result.transaction_id},
        )
        return result

    def get_payment(self, transaction_id: TransactionId) -> PaymentResult:
        self._require_transaction_id(transaction_id)
        response = self._call("Failed to get payment", "GET", f"{self._base_path()}/{transaction_id}")
        return PaymentResult.from_response(response, transaction_id=transaction_id)

    def list_payments(self) -> PaymentResult:
        response = self._call("Failed to get payments", "GET", self._base_path())
        return PaymentResult.from_response(response)

    def void_payment(self, transaction_id: TransactionId) -> PaymentResult:
        self._require_transaction_id(transaction_id)
        response = self._call(
            "Failed to void payment", "DELETE", f"{self._base_path()}/void/{transaction_id}",
        )
        _LOG.info(
            "Kotapay payment voided; transaction_id=%s", transaction_id,
            extra={"transaction_id": transaction_id},
        )
        return PaymentResult.from_response(response, transaction_id=transaction_id)

    @staticmethod
    def _require_transaction_id(transaction_id: TransactionId) -> None:
        if not is_valid_transaction_id(transaction_id):
            raise PaymentFailedError("Invalid transaction ID format.", status_code=422)

    def _call(self, prefix: str, method: str, path: str) -> JsonDict:
        try:
            response = self._api.execute(method, path)
        except KotapayError as exc:
            raise PaymentFailedError.wrap(prefix, exc) from exc
        if is_logical_failure(response):
            raise PaymentFailedError(f"{prefix}: {failure_message(response)}", response=response)
        return response
