# ==== PREFECT FLOWS PACKAGE ==== #

"""
Prefect flows for InvoiceGen batch jobs.

- payment_reminders_nightly: Overdue and upcoming payment reminder scan
"""

from .payment_reminders_nightly import payment_reminders_nightly

__all__ = [
    "payment_reminders_nightly"
]
