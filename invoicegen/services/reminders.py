"""Payment reminder schedule for unpaid invoices."""

import datetime as dt
from typing import Iterable, List, Optional

from invoicegen.schemas.dashboard import Reminder, ReminderType
from invoicegen.schemas.invoice import Invoice
from invoicegen.settings import settings


def reminder_for(invoice: Invoice, today: dt.date, lead_days: int) -> Optional[Reminder]:
    """Reminder for one invoice, or ``None`` if it is paid or not yet due soon."""
    if invoice.paid or invoice.due_date is None:
        return None

    days_from_due = (today - invoice.due_date).days
    if days_from_due > 0:
        kind = ReminderType.OVERDUE
    elif -days_from_due <= lead_days:
        kind = ReminderType.UPCOMING
    else:
        return None

    return Reminder(
        type=kind,
        invoice_id=invoice.id,
        invoice_number=invoice.invoice_number,
        client_name=invoice.client_name,
        client_email=invoice.client_email,
        amount=invoice.totals.total,
        due_date=invoice.due_date,
        days_from_due=days_from_due,
    )


def upcoming_reminders(
    invoices: Iterable[Invoice],
    today: Optional[dt.date] = None,
    lead_days: Optional[int] = None,
) -> List[Reminder]:
    """
    Overdue invoices and invoices due within ``lead_days``, earliest due first.

    Args:
        invoices (Iterable[Invoice]): Invoices to scan
        today (Optional[dt.date]): Reference date
        lead_days (Optional[int]): Window for upcoming reminders,
            defaults to ``settings.REMINDER_LEAD_DAYS``
    """
    today = today or dt.date.today()
    lead_days = settings.REMINDER_LEAD_DAYS if lead_days is None else lead_days

    reminders = [
        reminder
        for reminder in (reminder_for(inv, today, lead_days) for inv in invoices)
        if reminder is not None
    ]
    reminders.sort(key=lambda r: r.due_date)
    return reminders
