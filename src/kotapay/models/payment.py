"""Payment instruction and result models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, Field

VENDOR_NAME = "kotapay"


class AccountType(StrEnum):
    """Single-letter account type codes the vendor API expects."""

    CHECKING = "C"
    SAVINGS = "S"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Accept Checking/Savings or C/S, case-insensitively."""
        return value.strip().lower() in {"checking", "savings", "c", "s"}

    @classmethod
    def normalize(cls, value: Optional[str]) -> AccountType:
        """Savings forms map to S; anything else, including None, maps to C."""
        if value is not None and value.strip().lower() in {"savings", "s"}:
            return cls.SAVINGS
        return cls.CHECKING

    @property
    def label(self) -> str:
        return "Savings" if self is AccountType.SAVINGS else "Checking"


class TransactionStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    VOIDED = "voided"
    RETURNED = "returned"

    @property
    def is_terminal(self) -> bool:
        return self in {
            TransactionStatus.COMPLETED,
            TransactionStatus.FAILED,
            TransactionStatus.VOIDED,
            TransactionStatus.RETURNED,
        }

    @property
    def is_successful(self) -> bool:
        return self is TransactionStatus.COMPLETED

    @property
    def can_be_voided(self) -> bool:
        return self is TransactionStatus.PENDING


class BankAccountDetails(BaseModel):
    """Bank account fields a caller keeps on file for repeat charges."""

    routing_number: str
    account_number: str
    account_type: str = AccountType.CHECKING.label
    account_name: str = ""

    model_config = {"str_strip_whitespace": True}

    @property
    def last_four(self) -> str:
        digits = "".join(ch for ch in self.account_number if ch.isdigit())
        return digits[-4:]

    def display_name(self) -> str:
        """Masked label, e.g. ``Jane Doe Checking ****6789``."""
        return f"{self.account_name} {AccountType.normalize(self.account_type).label} ****{self.last_four}"


class PaymentRequest(BaseModel):
    """ACH debit instruction as supplied by the caller (unvalidated)."""

    # --- Required ---
    amount: Any = None  # dollars; numeric or numeric string
    routing_number: str = ""
    account_number: str = ""
    account_name: str = ""

    # --- Optional ---
    account_type: Optional[str] = None  # Checking/Savings/C/S, default Checking
    description: Optional[str] = None  # max 10 chars after truncation
    addenda: Optional[str] = None  # max 80 chars after truncation
    effective_date: Optional[str] = None  # Y-m-d, today..today+30
    idempotency_key: Optional[str] = None
    order_number: Optional[str] = None

    # --- Vendor pass-through ---
    account_name_id: str = ""
    storage_customer_record_id: str = ""
    application_id: Optional[str] = None

    model_config = {"str_strip_whitespace": True}

    @classmethod
    def from_bank_details(cls, details: BankAccountDetails, amount: Any, **options: Any) -> PaymentRequest:
        return cls(
            amount=amount,
            routing_number=details.routing_number,
            account_number=details.account_number,
            account_type=details.account_type,
            account_name=details.account_name,
            **options,
        )


class PaymentResult(BaseModel):
    """Normalized vendor response for a payment operation."""

    transaction_id: Optional[str] = None
    status: str = ""
    message: str = ""
    vendor: str = VENDOR_NAME
    idempotency_key: Optional[str] = None
    order_number: Optional[str] = None
    data: Any = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, response: dict[str, Any], **extra: Any) -> PaymentResult:
        data = response.get("data")
        txn_id = extra.pop("transaction_id", None)
        if txn_id is None and isinstance(data, dict):
            txn_id = data.get("transactionId", data.get("TransactionId"))
        return cls(
            transaction_id=str(txn_id) if txn_id is not None else None,
            status=str(response.get("status") or ""),
            message=str(response.get("message") or ""),
            data=data,
            raw=response,
            **extra,
        )
