"""Pydantic schemas for dashboard statistics, analytics and reminders."""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import List

from pydantic import BaseModel

from invoicegen.schemas.invoice import Money


class DashboardSummary(BaseModel):
    total_revenue: Money = Decimal("0")
    invoice_count: int = 0
    paid_count: int = 0
    pending_count: int = 0
    overdue_count: int = 0


class Timeframe(str, Enum):
    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    YEAR = "1y"

    @property
    def days(self) -> int:
        return {"7d": 7, "30d": 30, "90d": 90, "1y": 365}[self.value]


class MonthlyRevenue(BaseModel):
    month: str  # YYYY-MM
    revenue: Money
    invoice_count: int


class ClientMetrics(BaseModel):
    total_clients: int = 0
    active_clients: int = 0
    average_invoice_value: Money = Decimal("0")
    repeat_client_rate: Money = Decimal("0")


class AnalyticsReport(BaseModel):
    timeframe: Timeframe
    monthly_revenue: List[MonthlyRevenue]
    client_metrics: ClientMetrics


class ReminderType(str, Enum):
    OVERDUE = "overdue"
    UPCOMING = "upcoming"


class Reminder(BaseModel):
    """Unpaid invoice that needs a nudge; delivery happens elsewhere."""

    type: ReminderType
    invoice_id: str | None
    invoice_number: str
    client_name: str
    client_email: str
    amount: Money
    due_date: dt.date
    days_from_due: int  # negative before the due date
