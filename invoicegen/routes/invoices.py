# ==== INVOICE ROUTES MODULE ==== #

"""
Invoice routes for InvoiceGen.

Owner-scoped CRUD, dashboard listing, form edit operations, payment-term
toggles, payment status and PDF export.
"""

import datetime as dt
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response
from pydantic import BaseModel, ValidationError

from invoicegen.middleware.ownership import get_owner_id
from invoicegen.observability.tracing import get_tracer
from invoicegen.schemas.invoice import Invoice, InvoiceItem, InvoicePreview, PaymentMethod
from invoicegen.services import invoices as invoice_ops
from invoicegen.services.invoice_listing import (
    InvoiceQuery,
    SortDirection,
    SortField,
    StatusFilter,
    list_invoices,
)
from invoicegen.services.invoices import InvoiceService
from invoicegen.services.payment_providers import AccountService
from invoicegen.services.payment_terms import enabled_methods
from invoicegen.services.pdf_export import pdf_filename, render_invoice_pdf
from invoicegen.storage.documents import DocumentStore, get_document_store


router = APIRouter()
tracer = get_tracer(__name__)


class TaxRateUpdate(BaseModel):
    tax_rate: Any = 0


class PaidUpdate(BaseModel):
    paid: bool = True


# ==== LISTING AND CRUD ==== #


@router.get("", response_model=List[Invoice])
async def get_invoices(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
    query: str = Query("", description="Search client name or invoice number"),
    status: StatusFilter = Query(StatusFilter.ALL, description="Filter by payment status"),
    start_date: Optional[dt.date] = Query(None, description="Earliest invoice date (inclusive)"),
    end_date: Optional[dt.date] = Query(None, description="Latest invoice date (inclusive)"),
    sort_field: SortField = Query(SortField.DATE),
    sort_direction: SortDirection = Query(SortDirection.DESC),
) -> List[Invoice]:
    """
    List the owner's invoices with search, filters and sorting.

    Raises:
        HTTPException: 422 if the date range is inverted
    """
    owner_id = get_owner_id(request)

    try:
        config = InvoiceQuery(
            query=query,
            status=status,
            start_date=start_date,
            end_date=end_date,
            sort_field=sort_field,
            sort_direction=sort_direction,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    with tracer.start_as_current_span("list_invoices") as span:
        span.set_attribute("owner_id", owner_id)
        invoices = await InvoiceService(store).list_for_owner(owner_id)
        result = list_invoices(invoices, config)
        span.set_attribute("result_count", len(result))
        return result


@router.post("", response_model=Invoice, status_code=201)
async def create_invoice(
    invoice: Invoice,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Invoice:
    """Create an invoice; the watermark follows the owner's subscription tier."""
    owner_id = get_owner_id(request)
    account = await AccountService(store).get(owner_id)
    return await InvoiceService(store).create(owner_id, invoice, subscribed=account.subscribed)


@router.post("/preview", response_model=InvoicePreview)
async def preview_invoice(invoice: Invoice) -> InvoicePreview:
    """Compute totals and visible payment sections for an unsaved draft."""
    return InvoicePreview(
        invoice=invoice,
        enabled_payment_methods=enabled_methods(invoice.payment_terms),
    )


@router.get("/{invoice_id}", response_model=Invoice)
async def get_invoice(
    invoice_id: str,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Invoice:
    return await InvoiceService(store).get(get_owner_id(request), invoice_id)


@router.put("/{invoice_id}", response_model=Invoice)
async def update_invoice(
    invoice_id: str,
    invoice: Invoice,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Invoice:
    """Replace the whole invoice document."""
    return await InvoiceService(store).save(get_owner_id(request), invoice_id, invoice)


@router.delete("/{invoice_id}", status_code=204)
async def delete_invoice(
    invoice_id: str,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Response:
    await InvoiceService(store).delete(get_owner_id(request), invoice_id)
    return Response(status_code=204)


# ==== FORM EDIT OPERATIONS ==== #


async def _edit(store: DocumentStore, owner_id: str, invoice_id: str, operation: str, edit) -> Invoice:
    service = InvoiceService(store)
    invoice = await service.get(owner_id, invoice_id)
    try:
        edited = edit(invoice)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await service.save(owner_id, invoice_id, edited, operation=operation)


@router.post("/{invoice_id}/items", response_model=Invoice)
async def add_item(
    invoice_id: str,
    request: Request,
    item: Optional[InvoiceItem] = Body(None),
    store: DocumentStore = Depends(get_document_store),
) -> Invoice:
    return await _edit(
        store, get_owner_id(request), invoice_id, "add_item",
        lambda inv: invoice_ops.add_item(inv, item),
    )


@router.patch("/{invoice_id}/items/{index}", response_model=Invoice)
async def update_item(
    invoice_id: str,
    index: int,
    request: Request,
    fields: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_document_store),
) -> Invoice:
    """Edit description, quantity or price of one line item."""
    allowed = {k: v for k, v in fields.items() if k in InvoiceItem.model_fields}
    return await _edit(
        store, get_owner_id(request), invoice_id, "update_item",
        lambda inv: invoice_ops.update_item(inv, index, **allowed),
    )


@router.delete("/{invoice_id}/items/{index}", response_model=Invoice)
async def remove_item(
    invoice_id: str,
    index: int,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Invoice:
    return await _edit(
        store, get_owner_id(request), invoice_id, "remove_item",
        lambda inv: invoice_ops.remove_item(inv, index),
    )


@router.put("/{invoice_id}/tax-rate", response_model=Invoice)
async def set_tax_rate(
    invoice_id: str,
    update: TaxRateUpdate,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Invoice:
    return await _edit(
        store, get_owner_id(request), invoice_id, "set_tax_rate",
        lambda inv: invoice_ops.set_tax_rate(inv, update.tax_rate),
    )


# ==== PAYMENT TERMS AND STATUS ==== #


@router.post("/{invoice_id}/payment-terms/{method}/toggle", response_model=Invoice)
async def toggle_payment_method(
    invoice_id: str,
    method: PaymentMethod,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Invoice:
    """Switch a payment method between not offered and offered-with-defaults."""
    return await InvoiceService(store).toggle_payment_method(
        get_owner_id(request), invoice_id, method
    )


@router.post("/{invoice_id}/payment-terms/credit-card/{brand}/toggle", response_model=Invoice)
async def toggle_card_brand(
    invoice_id: str,
    brand: str,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Invoice:
    """
    Check or uncheck an accepted card brand.

    Raises:
        HTTPException: 422 for a blank brand, 409 if credit cards are not
            enabled on the invoice
    """
    if not brand.strip():
        raise HTTPException(status_code=422, detail="Card brand must not be empty")
    try:
        return await InvoiceService(store).toggle_card_brand(
            get_owner_id(request), invoice_id, brand
        )
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{invoice_id}/mark-paid", response_model=Invoice)
async def mark_paid(
    invoice_id: str,
    request: Request,
    update: Optional[PaidUpdate] = None,
    store: DocumentStore = Depends(get_document_store),
) -> Invoice:
    """Mark the invoice paid, or unpaid with ``{"paid": false}``."""
    paid = update.paid if update is not None else True
    return await InvoiceService(store).set_paid(get_owner_id(request), invoice_id, paid)


# ==== EXPORT ==== #


@router.get("/{invoice_id}/pdf")
async def export_pdf(
    invoice_id: str,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> Response:
    """Download the invoice as a PDF document."""
    invoice = await InvoiceService(store).get(get_owner_id(request), invoice_id)

    with tracer.start_as_current_span("render_invoice_pdf") as span:
        span.set_attribute("invoice_id", invoice_id)
        content = render_invoice_pdf(invoice)

    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(invoice)}"'},
    )
