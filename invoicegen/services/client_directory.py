# ==== CLIENT DIRECTORY SERVICE ==== #

"""
Client directory projection for InvoiceGen.

Clients are materialized on read: invoices are grouped by client email and
merged with any explicitly saved directory entries. Figures derivable from
invoices always win; directory entries only contribute what invoices cannot
(phone, notes, names, an explicit preferred method).
"""

import datetime as dt
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from invoicegen.schemas.client import ClientEntry, ClientSummary, PaymentRegularity
from invoicegen.schemas.invoice import Invoice
from invoicegen.services.payment_terms import preferred_payment_method


def email_key(email: str) -> str:
    """Directory key for an email address."""
    return email.strip().casefold()


def is_overdue(invoice: Invoice, today: dt.date) -> bool:
    """Unpaid and due strictly before ``today``."""
    return not invoice.paid and invoice.due_date is not None and invoice.due_date < today


def _most_recent(invoices: List[Invoice]) -> Invoice:
    # max() keeps the first maximum; reversed() makes the latest arrival win ties
    return max(reversed(invoices), key=lambda inv: inv.date)


def summarize_client(
    invoices: List[Invoice],
    entry: Optional[ClientEntry] = None,
    today: Optional[dt.date] = None,
) -> ClientSummary:
    """
    Build one client summary from that client's invoices and directory entry.

    Args:
        invoices (List[Invoice]): All invoices addressed to the client's email
        entry (Optional[ClientEntry]): Saved directory entry, if any
        today (Optional[dt.date]): Reference date for overdue checks

    Returns:
        ClientSummary: Merged client view
    """
    today = today or dt.date.today()
    if not invoices and entry is None:
        raise ValueError("A client needs invoices or a directory entry")

    email = entry.email if entry else invoices[0].client_email

    if not invoices:
        return ClientSummary(
            id=entry.id,
            company=entry.company,
            name=entry.name,
            email=email,
            phone=entry.phone,
            notes=entry.notes,
            preferred_payment_method=entry.preferred_payment_method,
        )

    latest = _most_recent(invoices)
    paid_dates = [inv.date for inv in invoices if inv.paid]
    irregular = any(is_overdue(inv, today) for inv in invoices)

    summary = ClientSummary(
        company=latest.client_name,
        name=latest.client_name,
        email=email,
        total_spent=sum((inv.totals.total for inv in invoices), Decimal("0")),
        last_payment=max(paid_dates) if paid_dates else None,
        payment_regularity=(
            PaymentRegularity.IRREGULAR if irregular else PaymentRegularity.REGULAR
        ),
        preferred_payment_method=preferred_payment_method(latest.payment_terms),
        late_fee_percentage=latest.payment_terms.late_fee_percentage,
        invoice_count=len(invoices),
    )

    if entry is not None:
        summary.id = entry.id
        summary.company = entry.company or summary.company
        summary.name = entry.name or summary.name
        summary.phone = entry.phone
        summary.notes = entry.notes
        if entry.preferred_payment_method:
            summary.preferred_payment_method = entry.preferred_payment_method

    return summary


def build_client_directory(
    invoices: Iterable[Invoice],
    entries: Iterable[ClientEntry] = (),
    today: Optional[dt.date] = None,
) -> List[ClientSummary]:
    """
    Project one client per distinct email from invoices and directory entries.

    Invoices without a client email are skipped. Clients are ordered by total
    spent, highest first, then by name.

    Args:
        invoices (Iterable[Invoice]): The owner's invoices
        entries (Iterable[ClientEntry]): The owner's saved directory entries
        today (Optional[dt.date]): Reference date for overdue checks

    Returns:
        List[ClientSummary]: Merged client summaries
    """
    today = today or dt.date.today()

    grouped: Dict[str, List[Invoice]] = {}
    for invoice in invoices:
        if not invoice.client_email:
            continue
        grouped.setdefault(email_key(invoice.client_email), []).append(invoice)

    by_email: Dict[str, ClientEntry] = {}
    for entry in entries:
        by_email.setdefault(email_key(entry.email), entry)

    clients = [
        summarize_client(grouped.get(key, []), by_email.get(key), today)
        for key in {**grouped, **by_email}
    ]

    clients.sort(key=lambda c: (c.name or c.company).casefold())
    clients.sort(key=lambda c: c.total_spent, reverse=True)
    return clients
