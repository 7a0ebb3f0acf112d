"""Payment lifecycle records handed to the notification collaborator."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from kotapay.core.exceptions import KotapayError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentCreated(BaseModel):
    """An ACH payment was accepted by the vendor."""

    model_config = {"arbitrary_types_allowed": True}

    response: dict[str, Any]
    initiator: Any = None
    amount: Decimal
    transaction_id: Optional[str] = None
    occurred_at: datetime = Field(default_factory=_utcnow)


class PaymentVoided(BaseModel):
    """A pending ACH payment was voided."""

    model_config = {"arbitrary_types_allowed": True}

    response: dict[str, Any]
    initiator: Any = None
    transaction_id: str
    occurred_at: datetime = Field(default_factory=_utcnow)


class PaymentFailed(BaseModel):
    """An ACH payment could not be created."""

    model_config = {"arbitrary_types_allowed": True}

    error: KotapayError
    initiator: Any = None
    amount: Decimal
    occurred_at: datetime = Field(default_factory=_utcnow)

    @property
    def message(self) -> str:
        return self.error.message
