"""Normalized report output."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class ReportResult(BaseModel):
    """Report rows in one shape regardless of how the vendor encoded them."""

    model_config = {"populate_by_name": True}

    row_count: int = Field(0, alias="rowCount")
    rows: list[Any] = Field(default_factory=list)
    raw: Any = None  # original vendor payload, kept for forensics
    raw_data: Optional[str] = None  # undecodable string payload (CSV etc.)
