# ==== INVOICE LISTING SERVICE ==== #

"""
Dashboard filtering, search and sorting over an owner's invoices.

All filters combine with AND. Sorting is stable, numeric for totals and
locale-aware (``locale.strxfrm``) for client names.
"""

import datetime as dt
import locale
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, model_validator

from invoicegen.schemas.invoice import Invoice


class StatusFilter(str, Enum):
    ALL = "all"
    PAID = "paid"
    PENDING = "pending"


class SortField(str, Enum):
    DATE = "date"
    TOTAL = "total"
    CLIENT_NAME = "client_name"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class InvoiceQuery(BaseModel):
    """Filter and sort configuration for one listing request."""

    query: str = ""
    status: StatusFilter = StatusFilter.ALL
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    sort_field: SortField = SortField.DATE
    sort_direction: SortDirection = SortDirection.DESC

    @model_validator(mode="after")
    def check_range(self) -> "InvoiceQuery":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


def matches(invoice: Invoice, config: InvoiceQuery) -> bool:
    """Whether an invoice passes every filter in ``config``."""
    needle = config.query.strip().casefold()
    if needle and not (
        needle in invoice.client_name.casefold()
        or needle in invoice.invoice_number.casefold()
    ):
        return False

    if config.status is StatusFilter.PAID and not invoice.paid:
        return False
    if config.status is StatusFilter.PENDING and invoice.paid:
        return False

    if config.start_date and invoice.date < config.start_date:
        return False
    if config.end_date and invoice.date > config.end_date:
        return False

    return True


def _sort_key(field: SortField):
    if field is SortField.TOTAL:
        return lambda inv: inv.totals.total
    if field is SortField.CLIENT_NAME:
        return lambda inv: locale.strxfrm(inv.client_name.casefold())
    return lambda inv: inv.date


def list_invoices(invoices: Iterable[Invoice], config: InvoiceQuery) -> List[Invoice]:
    """
    Filter and sort invoices for the dashboard.

    Args:
        invoices (Iterable[Invoice]): The owner's full invoice set
        config (InvoiceQuery): Filter and sort configuration

    Returns:
        List[Invoice]: Matching invoices in display order
    """
    selected = [inv for inv in invoices if matches(inv, config)]
    # list.sort stays stable with reverse=True
    selected.sort(
        key=_sort_key(config.sort_field),
        reverse=config.sort_direction is SortDirection.DESC,
    )
    return selected
