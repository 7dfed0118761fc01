# ==== INVOICE SCHEMAS ==== #

"""
Pydantic schemas for invoices, line items and payment terms.

Derived amounts (``subtotal``, ``tax_amount``, ``total``) are computed fields:
they are recalculated from ``items`` and ``tax_rate`` on every access and are
ignored when supplied as input.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import (
    BaseModel,
    Field,
    PlainSerializer,
    computed_field,
    field_validator,
    model_validator,
)

from invoicegen.services.totals import (
    InvoiceTotals,
    compute_totals,
    line_total,
    quantize_money,
    to_decimal,
    to_quantity,
)


# Decimal in Python, 2-digit float on the wire and in stored documents
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(quantize_money(v)), return_type=float, when_used="json"),
]

# Rates are entered by the user and kept at full precision
Percentage = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]

DEFAULT_PAYMENT_DAYS = 30


# ==== LINE ITEMS ==== #


class InvoiceItem(BaseModel):
    """Single billable line; identified only by its position."""

    description: str = ""
    quantity: int = 0
    price: Money = Decimal("0")

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v: Any) -> int:
        return to_quantity(v)

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> Decimal:
        return to_decimal(v)

    @property
    def line_total(self) -> Decimal:
        return line_total(self)


# ==== PAYMENT TERMS ==== #


class PaymentMethod(str, Enum):
    """Independently toggleable payment-term sections."""
    BANK_TRANSFER = "bank_transfer"
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"
    LATE_FEE = "late_fee"


class BankTransferDetails(BaseModel):
    account_name: str = ""
    account_number: str = ""
    bank_name: str = ""
    routing_number: str = ""


class PayPalDetails(BaseModel):
    email: str = ""


class PaymentTerms(BaseModel):
    """
    Payment methods offered on an invoice.

    ``None`` means the merchant does not offer the method. A present value,
    even with empty fields, means it is offered. For ``credit_card`` an empty
    list is "offered, no brand selected yet".
    """

    bank_transfer: Optional[BankTransferDetails] = None
    credit_card: Optional[List[str]] = None
    paypal: Optional[PayPalDetails] = None
    late_fee_percentage: Optional[Percentage] = None

    @field_validator("bank_transfer", mode="before")
    @classmethod
    def accept_bare_bank_string(cls, v: Any) -> Any:
        # Older documents stored free text here
        if isinstance(v, str):
            return {"account_name": v}
        return v

    @field_validator("paypal", mode="before")
    @classmethod
    def accept_bare_paypal_email(cls, v: Any) -> Any:
        if isinstance(v, str):
            return {"email": v}
        return v

    @field_validator("credit_card", mode="before")
    @classmethod
    def normalize_brands(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        brands: List[str] = []
        for brand in v:
            brand = str(brand).strip()
            # [''] was the legacy "enabled, nothing picked" sentinel
            if brand and brand not in brands:
                brands.append(brand)
        return brands

    @field_validator("late_fee_percentage", mode="before")
    @classmethod
    def coerce_late_fee(cls, v: Any) -> Optional[Decimal]:
        if v is None:
            return None
        return to_decimal(v)


# ==== INVOICE ==== #


class Invoice(BaseModel):
    """Invoice document as stored and returned by the API."""

    id: Optional[str] = None
    owner_id: Optional[str] = None

    # --► BUSINESS PROFILE
    business_name: str = ""
    business_address: str = ""
    business_phone: str = ""

    # --► IDENTIFICATION AND DATES
    invoice_number: str = ""
    date: dt.date = Field(default_factory=dt.date.today)
    due_date: Optional[dt.date] = None

    # --► CLIENT
    client_name: str = ""
    client_email: str = ""

    # --► CONTENT
    items: List[InvoiceItem] = Field(default_factory=list)
    notes: str = ""
    tax_rate: Percentage = Decimal("0")

    # --► PAYMENT
    payment_terms: PaymentTerms = Field(default_factory=PaymentTerms)
    show_watermark: bool = True
    payment_provider: Optional[str] = None
    payment_account_id: Optional[str] = None
    paid: bool = False

    @field_validator("tax_rate", mode="before")
    @classmethod
    def coerce_tax_rate(cls, v: Any) -> Decimal:
        return to_decimal(v)

    @field_validator("client_email", mode="before")
    @classmethod
    def strip_email(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def default_due_date(self) -> "Invoice":
        if self.due_date is None:
            self.due_date = self.date + dt.timedelta(days=DEFAULT_PAYMENT_DAYS)
        return self

    # --► DERIVED AMOUNTS

    @property
    def totals(self) -> InvoiceTotals:
        return compute_totals(self.items, self.tax_rate)

    @computed_field
    @property
    def subtotal(self) -> Money:
        return self.totals.subtotal

    @computed_field
    @property
    def tax_amount(self) -> Money:
        return self.totals.tax_amount

    @computed_field
    @property
    def total(self) -> Money:
        return self.totals.total

    def to_document(self) -> dict:
        """JSON-safe body for the document store (id and owner live in columns)."""
        return self.model_dump(mode="json", exclude={"id", "owner_id"})


class InvoicePreview(BaseModel):
    """Draft invoice with its derived amounts and the payment sections to render."""

    invoice: Invoice
    enabled_payment_methods: List[PaymentMethod]
