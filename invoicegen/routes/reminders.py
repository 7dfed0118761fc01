# ==== REMINDER ROUTES MODULE ==== #

"""
Payment reminder listing. Reminders are computed on read; nothing is sent.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from invoicegen.middleware.ownership import get_owner_id
from invoicegen.schemas.dashboard import Reminder
from invoicegen.services.invoices import InvoiceService
from invoicegen.services.reminders import upcoming_reminders
from invoicegen.storage.documents import DocumentStore, get_document_store


router = APIRouter()


@router.get("", response_model=List[Reminder])
async def list_reminders(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
    lead_days: Optional[int] = Query(None, ge=0, le=365, description="Upcoming window in days"),
) -> List[Reminder]:
    invoices = await InvoiceService(store).list_for_owner(get_owner_id(request))
    return upcoming_reminders(invoices, lead_days=lead_days)
