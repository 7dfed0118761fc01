# ==== DASHBOARD ANALYTICS ==== #

"""
Revenue and client statistics for the owner dashboard.

Pure functions over an owner's invoice list; nothing here touches storage.
"""

import datetime as dt
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from invoicegen.schemas.dashboard import (
    AnalyticsReport,
    ClientMetrics,
    DashboardSummary,
    MonthlyRevenue,
    Timeframe,
)
from invoicegen.schemas.invoice import Invoice
from invoicegen.services.client_directory import email_key, is_overdue
from invoicegen.services.totals import quantize_money


ACTIVE_CLIENT_DAYS = 30


def summarize(invoices: Iterable[Invoice], today: Optional[dt.date] = None) -> DashboardSummary:
    """Headline figures: revenue billed, paid/pending/overdue counts."""
    today = today or dt.date.today()
    summary = DashboardSummary()
    revenue = Decimal("0")

    for invoice in invoices:
        revenue += invoice.totals.total
        summary.invoice_count += 1
        if invoice.paid:
            summary.paid_count += 1
        else:
            summary.pending_count += 1
            if is_overdue(invoice, today):
                summary.overdue_count += 1

    summary.total_revenue = revenue
    return summary


def monthly_revenue(invoices: Iterable[Invoice]) -> List[MonthlyRevenue]:
    """Revenue and invoice count per calendar month of the issue date, oldest first."""
    buckets: Dict[str, List[Invoice]] = {}
    for invoice in invoices:
        buckets.setdefault(invoice.date.strftime("%Y-%m"), []).append(invoice)

    return [
        MonthlyRevenue(
            month=month,
            revenue=sum((inv.totals.total for inv in bucket), Decimal("0")),
            invoice_count=len(bucket),
        )
        for month, bucket in sorted(buckets.items())
    ]


def client_metrics(invoices: List[Invoice], today: Optional[dt.date] = None) -> ClientMetrics:
    """Client counts, average invoice value and repeat-client rate (percent)."""
    today = today or dt.date.today()
    if not invoices:
        return ClientMetrics()

    counts: Dict[str, int] = {}
    for invoice in invoices:
        if invoice.client_email:
            key = email_key(invoice.client_email)
            counts[key] = counts.get(key, 0) + 1

    active_since = today - dt.timedelta(days=ACTIVE_CLIENT_DAYS)
    active = {
        email_key(inv.client_email)
        for inv in invoices
        if inv.client_email and inv.date >= active_since
    }

    repeat = sum(1 for count in counts.values() if count > 1)
    total = sum((inv.totals.total for inv in invoices), Decimal("0"))

    return ClientMetrics(
        total_clients=len(counts),
        active_clients=len(active),
        average_invoice_value=quantize_money(total / len(invoices)),
        repeat_client_rate=(
            quantize_money(Decimal(repeat * 100) / len(counts)) if counts else Decimal("0")
        ),
    )


def analytics_report(
    invoices: Iterable[Invoice],
    timeframe: Timeframe = Timeframe.MONTH,
    today: Optional[dt.date] = None,
) -> AnalyticsReport:
    """Analytics restricted to invoices issued within ``timeframe`` of ``today``."""
    today = today or dt.date.today()
    since = today - dt.timedelta(days=timeframe.days)
    window = [inv for inv in invoices if since <= inv.date <= today]

    return AnalyticsReport(
        timeframe=timeframe,
        monthly_revenue=monthly_revenue(window),
        client_metrics=client_metrics(window, today),
    )
