"""Payment instruction validation and sanitization.

The vendor API accepts malformed instructions and then fails to move money
without telling anyone, so everything is checked here before submission.
Rules run in a fixed order and the first violation is reported.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from kotapay.core.exceptions import ValidationError
from kotapay.models.payment import AccountType, PaymentRequest

REQUIRED_FIELDS = ("amount", "routing_number", "account_number", "account_name")
DATE_FORMAT = "%Y-%m-%d"
DEFAULT_MEMO = "PAYMENT"
DESCRIPTION_MAX = 10
ADDENDA_MAX = 80
ACCOUNT_NUMBER_MIN = 4
ACCOUNT_NUMBER_MAX = 17

_NON_DIGITS = re.compile(r"\D")
_NAME_DISALLOWED = re.compile(r"[^a-zA-Z0-9\s\-.,'&]")
_TRANSACTION_ID = re.compile(r"^[a-zA-Z0-9\-_]+$")


def digits_only(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def is_valid_routing_number(routing: str) -> bool:
    """ABA check: 3(d1+d4+d7) + 7(d2+d5+d8) + (d3+d6+d9) must be divisible by 10."""
    digits = digits_only(routing)
    if len(digits) != 9:
        return False
    d = [int(ch) for ch in digits]
    total = 3 * (d[0] + d[3] + d[6]) + 7 * (d[1] + d[4] + d[7]) + (d[2] + d[5] + d[8])
    return total % 10 == 0


def is_valid_transaction_id(transaction_id: str) -> bool:
    return bool(transaction_id) and _TRANSACTION_ID.match(transaction_id) is not None


def sanitize_account_name(name: str) -> str:
    return _NAME_DISALLOWED.sub("", name or "")


def parse_amount(value: Any) -> Optional[Decimal]:
    """Return the amount as a finite Decimal, or None if it is not numeric."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


class PaymentValidator:
    """Checks a PaymentRequest and produces the sanitized field values."""

    def __init__(
        self,
        *,
        max_amount: Decimal = Decimal("100000.00"),
        max_effective_days: int = 30,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._max_amount = Decimal(max_amount)
        self._max_effective_days = max_effective_days
        self._today = today

    def validate(self, request: PaymentRequest) -> None:
        for field in REQUIRED_FIELDS:
            value = getattr(request, field)
            if value is None or (isinstance(value, str) and not value):
                raise ValidationError(f"Missing required field: {field}")

        amount = parse_amount(request.amount)
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be a positive number")
        if amount > self._max_amount:
            raise ValidationError(f"Amount exceeds maximum allowed (${self._max_amount:,.2f})")

        if not is_valid_routing_number(request.routing_number):
            raise ValidationError("Invalid routing number. Must be 9 digits with valid ABA checksum.")

        account = digits_only(request.account_number)
        if not ACCOUNT_NUMBER_MIN <= len(account) <= ACCOUNT_NUMBER_MAX:
            raise ValidationError(
                f"Account number must be {ACCOUNT_NUMBER_MIN}-{ACCOUNT_NUMBER_MAX} digits"
            )

        if request.account_type and not AccountType.is_valid(request.account_type):
            raise ValidationError("Account type must be Checking or Savings")

        if request.effective_date:
            self.validate_effective_date(request.effective_date)

    def validate_effective_date(self, value: str) -> date:
        try:
            parsed = datetime.strptime(value, DATE_FORMAT).date()
        except ValueError:
            parsed = None
        # strptime accepts unpadded fields; require the canonical form
        if parsed is None or parsed.strftime(DATE_FORMAT) != value:
            raise ValidationError("Invalid effective_date format. Expected Y-m-d (e.g., 2024-01-15)")

        today = self._today()
        if parsed < today:
            raise ValidationError("Effective date cannot be in the past")
        if parsed > today + timedelta(days=self._max_effective_days):
            raise ValidationError(
                f"Effective date cannot be more than {self._max_effective_days} days in the future"
            )
        return parsed

    def sanitize(self, request: PaymentRequest) -> dict[str, str]:
        """Strip and truncate fields for submission. Does not validate."""
        description = request.description if request.description is not None else DEFAULT_MEMO
        addenda = request.addenda if request.addenda is not None else DEFAULT_MEMO
        return {
            "routing_number": digits_only(request.routing_number),
            "account_number": digits_only(request.account_number),
            "account_name": sanitize_account_name(request.account_name),
            "description": description[:DESCRIPTION_MAX],
            "addenda": addenda[:ADDENDA_MAX],
        }
