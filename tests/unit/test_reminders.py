"""Unit tests for payment reminder classification."""

import datetime as dt

import pytest

from invoicegen.schemas.dashboard import ReminderType
from invoicegen.services.reminders import upcoming_reminders
from tests.factories.data_factories import InvoiceFactory


TODAY = dt.date(2024, 6, 15)


@pytest.mark.unit
class TestUpcomingReminders:

    def test_classifies_overdue_and_upcoming(self):
        factory = InvoiceFactory()
        overdue = factory.create(invoice_number="LATE", due_date=TODAY - dt.timedelta(days=2))
        soon = factory.create(invoice_number="SOON", due_date=TODAY + dt.timedelta(days=3))
        later = factory.create(invoice_number="LATER", due_date=TODAY + dt.timedelta(days=10))
        paid = factory.create(invoice_number="PAID", due_date=TODAY - dt.timedelta(days=5), paid=True)

        reminders = upcoming_reminders([later, soon, paid, overdue], today=TODAY, lead_days=3)

        assert [r.invoice_number for r in reminders] == ["LATE", "SOON"]
        assert reminders[0].type == ReminderType.OVERDUE
        assert reminders[0].days_from_due == 2
        assert reminders[1].type == ReminderType.UPCOMING
        assert reminders[1].days_from_due == -3

    def test_due_today_is_upcoming(self):
        invoice = InvoiceFactory().create(due_date=TODAY)

        [reminder] = upcoming_reminders([invoice], today=TODAY, lead_days=0)

        assert reminder.type == ReminderType.UPCOMING

    def test_amount_is_invoice_total(self):
        invoice = InvoiceFactory().create(
            items=[{"quantity": 2, "price": 10}], tax_rate=10, due_date=TODAY
        )

        [reminder] = upcoming_reminders([invoice], today=TODAY)

        assert str(reminder.amount) == "22.00"
