# ==== PREFECT NIGHTLY PAYMENT REMINDERS FLOW ==== #

"""
Prefect flow for the nightly payment reminder scan in InvoiceGen.

Scans every owner's unpaid invoices, classifies them as overdue or due soon,
recomputes client payment regularity and publishes the overdue count.
Reminder delivery (email) is not performed; each reminder is emitted as a
business event for a downstream notifier.
"""

import argparse
import asyncio
import datetime as dt
from typing import Any, Dict, List, Optional

from prefect import flow, task, get_run_logger

from invoicegen.observability.logging import log_business_event
from invoicegen.observability.metrics import overdue_invoices
from invoicegen.schemas.client import PaymentRegularity
from invoicegen.schemas.dashboard import Reminder, ReminderType
from invoicegen.schemas.invoice import Invoice
from invoicegen.services.client_directory import build_client_directory
from invoicegen.services.reminders import upcoming_reminders
from invoicegen.storage.db import get_session
from invoicegen.storage.documents import DocumentStore, INVOICES


# ==== TASK DEFINITIONS ==== #


@task
async def fetch_all_invoices() -> List[Dict[str, Any]]:
    """
    Fetch every invoice document across owners.

    Returns:
        List[Dict[str, Any]]: Raw invoice documents with ``id`` and ``owner_id``
    """
    logger = get_run_logger()

    async with get_session() as db:
        docs = await DocumentStore(db).query_all(INVOICES)

    logger.info(f"Found {len(docs)} invoices to scan")
    return docs


def group_by_owner(docs: List[Dict[str, Any]]) -> Dict[str, List[Invoice]]:
    """Validate documents and bucket them by owning user."""
    grouped: Dict[str, List[Invoice]] = {}
    for doc in docs:
        invoice = Invoice.model_validate(doc)
        grouped.setdefault(invoice.owner_id or "unknown", []).append(invoice)
    return grouped


def scan_owner(
    owner_id: str,
    invoices: List[Invoice],
    today: dt.date,
    lead_days: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Reminders and irregular-payer count for one owner.

    Args:
        owner_id (str): Owning user identifier
        invoices (List[Invoice]): The owner's invoices
        today (dt.date): Reference date for due-date comparisons
        lead_days (Optional[int]): Upcoming window override

    Returns:
        Dict[str, Any]: ``reminders``, ``overdue`` and ``irregular_clients``
    """
    reminders = upcoming_reminders(invoices, today=today, lead_days=lead_days)
    clients = build_client_directory(invoices, today=today)

    return {
        "owner_id": owner_id,
        "reminders": reminders,
        "overdue": sum(1 for r in reminders if r.type == ReminderType.OVERDUE),
        "irregular_clients": sum(
            1 for c in clients if c.payment_regularity == PaymentRegularity.IRREGULAR
        ),
    }


@task
async def compute_owner_reminders(
    owner_id: str,
    invoices: List[Invoice],
    today: dt.date,
    lead_days: Optional[int] = None,
) -> Dict[str, Any]:
    return scan_owner(owner_id, invoices, today, lead_days)


@task
async def publish_reminders(owner_id: str, reminders: List[Reminder]) -> int:
    """
    Emit one business event per reminder.

    Returns:
        int: Number of reminders published
    """
    for reminder in reminders:
        log_business_event(
            f"payment_reminder_{reminder.type.value}",
            owner_id,
            invoice_id=reminder.invoice_id,
            invoice_number=reminder.invoice_number,
            client_email=reminder.client_email,
            amount=str(reminder.amount),
            due_date=reminder.due_date.isoformat(),
            days_from_due=reminder.days_from_due,
        )
    return len(reminders)


# ==== MAIN REMINDER FLOW ==== #


@flow(name="payment-reminders-nightly", log_prints=True)
async def payment_reminders_nightly(
    today: Optional[dt.date] = None,
    lead_days: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Main flow for the nightly payment reminder scan.

    Args:
        today (Optional[dt.date]): Reference date, defaults to the current date
        lead_days (Optional[int]): Upcoming window, defaults to ``REMINDER_LEAD_DAYS``

    Returns:
        Dict[str, Any]: Flow execution summary
    """
    logger = get_run_logger()
    today = today or dt.date.today()
    logger.info(f"Starting payment reminder scan for {today.isoformat()}")

    flow_start_time = asyncio.get_event_loop().time()

    docs = await fetch_all_invoices()
    grouped = group_by_owner(docs)

    results = await asyncio.gather(*[
        compute_owner_reminders(owner_id, invoices, today, lead_days)
        for owner_id, invoices in grouped.items()
    ])

    published = 0
    for result in results:
        published += await publish_reminders(result["owner_id"], result["reminders"])

    overdue_total = sum(r["overdue"] for r in results)
    overdue_invoices.set(overdue_total)

    summary = {
        "status": "success",
        "owners_scanned": len(grouped),
        "invoices_scanned": len(docs),
        "reminders_published": published,
        "overdue_invoices": overdue_total,
        "irregular_clients": sum(r["irregular_clients"] for r in results),
        "flow_duration_seconds": asyncio.get_event_loop().time() - flow_start_time,
    }
    logger.info(
        f"Reminder scan completed: {published} reminders, {overdue_total} overdue invoices"
    )
    return summary


# ==== COMMAND LINE INTERFACE ==== #


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Payment reminder flow")
    parser.add_argument("--run", action="store_true", help="Run flow locally")
    parser.add_argument("--serve", action="store_true", help="Serve flow locally")
    parser.add_argument("--lead-days", type=int, default=None, help="Upcoming reminder window (days)")

    args = parser.parse_args()

    if args.serve:
        print("Serving payment reminder flow locally...")
        payment_reminders_nightly.serve(
            name="local-payment-reminders",
            tags=["invoice", "reminders", "local"],
            cron="0 6 * * *"
        )

    elif args.run:
        print("Running payment reminder flow locally...")
        result = asyncio.run(payment_reminders_nightly(lead_days=args.lead_days))
        print(f"Flow completed: {result}")

    else:
        print("Usage: python flows/payment_reminders_nightly.py [--run|--serve] [options]")
        print("  --run: Execute flow once locally")
        print("  --serve: Start flow server for scheduled execution")
        print("  --lead-days N: Upcoming reminder window in days")
