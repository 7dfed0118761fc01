"""Pydantic schemas for the client directory."""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from invoicegen.schemas.invoice import Money, Percentage


class PaymentRegularity(str, Enum):
    """Derived from overdue unpaid invoice history."""
    REGULAR = "regular"
    IRREGULAR = "irregular"


class ClientEntry(BaseModel):
    """Explicitly saved directory entry, keyed by email."""

    id: Optional[str] = None
    company: str = ""
    name: str = ""
    email: str = Field(..., min_length=3, max_length=254)
    phone: str = ""
    notes: str = ""
    preferred_payment_method: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    def to_document(self) -> dict:
        return self.model_dump(mode="json", exclude={"id"})


class ClientSummary(BaseModel):
    """Client as shown in the directory: stored entry merged with invoice figures."""

    id: Optional[str] = None
    company: str = ""
    name: str = ""
    email: str
    phone: str = ""
    notes: str = ""
    total_spent: Money = Decimal("0")
    last_payment: Optional[dt.date] = None
    payment_regularity: PaymentRegularity = PaymentRegularity.REGULAR
    preferred_payment_method: Optional[str] = None
    late_fee_percentage: Optional[Percentage] = None
    invoice_count: int = 0
