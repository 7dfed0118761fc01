# ==== PUBLIC INVOICE ROUTES MODULE ==== #

"""
Read-only invoice view for the invoice's recipient.

No owner header is required; anyone holding the invoice id can view it.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from invoicegen.schemas.invoice import Invoice
from invoicegen.services.invoices import InvoiceService
from invoicegen.services.payment_providers import AccountService
from invoicegen.settings import settings
from invoicegen.storage.documents import DocumentStore, get_document_store


router = APIRouter()


class PublicInvoiceView(BaseModel):
    invoice: Invoice
    watermark: Optional[str] = None
    pay_now_available: bool = False
    payment_provider: Optional[str] = None


@router.get("/invoices/{invoice_id}", response_model=PublicInvoiceView)
async def view_invoice(
    invoice_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> PublicInvoiceView:
    """
    Public invoice page data.

    "Pay Now" is offered only when the invoice owner has a connected payment
    provider.
    """
    invoice = await InvoiceService(store).get_public(invoice_id)
    provider = await AccountService(store).get_connected_provider(invoice.owner_id)

    return PublicInvoiceView(
        invoice=invoice,
        watermark=settings.WATERMARK_TEXT if invoice.show_watermark else None,
        pay_now_available=provider is not None,
        payment_provider=provider.provider if provider else None,
    )
