# ==== INVOICE SERVICE ==== #

"""
Invoice lifecycle operations for InvoiceGen.

Owner-scoped CRUD over the document store plus the edit operations of the
invoice form. Every edit returns a new ``Invoice`` whose derived amounts are
recomputed from its items and tax rate.
"""

from typing import Any, Dict, List

from invoicegen.business.errors import InvoiceNotFoundError
from invoicegen.observability.logging import ContextualLogger, log_business_event
from invoicegen.observability.metrics import (
    invoice_total_amount,
    invoices_created_total,
    invoices_deleted_total,
    invoices_updated_total,
)
from invoicegen.observability.tracing import get_tracer
from invoicegen.schemas.invoice import Invoice, InvoiceItem, PaymentMethod
from invoicegen.services import payment_terms
from invoicegen.storage.documents import DocumentStore, INVOICES


tracer = get_tracer(__name__)
logger = ContextualLogger(__name__)


# ==== FORM EDIT OPERATIONS ==== #


def add_item(invoice: Invoice, item: InvoiceItem | None = None) -> Invoice:
    """Append a line item (blank by default)."""
    return invoice.model_copy(update={"items": [*invoice.items, item or InvoiceItem()]})


def update_item(invoice: Invoice, index: int, **fields: Any) -> Invoice:
    """
    Change fields of the line item at ``index``.

    Values go through the same coercion as API input.

    Raises:
        IndexError: If there is no item at ``index``
    """
    if not 0 <= index < len(invoice.items):
        raise IndexError(f"No line item at position {index}")

    items = list(invoice.items)
    items[index] = InvoiceItem.model_validate({**items[index].model_dump(), **fields})
    return invoice.model_copy(update={"items": items})


def remove_item(invoice: Invoice, index: int) -> Invoice:
    """Drop the line item at ``index``."""
    if not 0 <= index < len(invoice.items):
        raise IndexError(f"No line item at position {index}")
    return invoice.model_copy(
        update={"items": [item for i, item in enumerate(invoice.items) if i != index]}
    )


def set_tax_rate(invoice: Invoice, tax_rate: Any) -> Invoice:
    """Replace the tax rate (percent), coercing invalid input to zero."""
    return Invoice.model_validate({**invoice.model_dump(), "tax_rate": tax_rate})


# ==== PERSISTENCE ==== #


def _from_document(doc: Dict[str, Any]) -> Invoice:
    return Invoice.model_validate(doc)


class InvoiceService:
    """Owner-scoped invoice persistence."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_for_owner(self, owner_id: str) -> List[Invoice]:
        docs = await self.store.query_by_owner(INVOICES, owner_id)
        return [_from_document(doc) for doc in docs]

    async def get_public(self, invoice_id: str) -> Invoice:
        """Fetch an invoice by id regardless of owner (public view)."""
        doc = await self.store.get(INVOICES, invoice_id)
        if doc is None:
            raise InvoiceNotFoundError(invoice_id)
        return _from_document(doc)

    async def get(self, owner_id: str, invoice_id: str) -> Invoice:
        """
        Fetch one of the owner's invoices.

        Raises:
            InvoiceNotFoundError: Missing, or owned by someone else
        """
        invoice = await self.get_public(invoice_id)
        if invoice.owner_id != owner_id:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    async def create(self, owner_id: str, invoice: Invoice, subscribed: bool = False) -> Invoice:
        """
        Persist a new invoice for ``owner_id``.

        Free-tier owners always get the watermark.
        """
        with tracer.start_as_current_span("create_invoice") as span:
            span.set_attribute("owner_id", owner_id)

            invoice = invoice.model_copy(
                update={"owner_id": owner_id, "show_watermark": not subscribed}
            )
            invoice_id = await self.store.create(INVOICES, owner_id, invoice.to_document())
            invoice = invoice.model_copy(update={"id": invoice_id})

            invoices_created_total.inc()
            invoice_total_amount.observe(float(invoice.total))
            span.set_attribute("invoice_id", invoice_id)
            log_business_event(
                "invoice_created",
                owner_id,
                invoice_id=invoice_id,
                invoice_number=invoice.invoice_number,
                total=str(invoice.total),
            )
            return invoice

    async def save(self, owner_id: str, invoice_id: str, invoice: Invoice, operation: str = "update") -> Invoice:
        """
        Overwrite an existing invoice document (last writer wins).

        The stored watermark flag is kept; callers cannot remove it.
        """
        current = await self.get(owner_id, invoice_id)
        invoice = invoice.model_copy(
            update={
                "id": invoice_id,
                "owner_id": owner_id,
                "show_watermark": current.show_watermark,
            }
        )
        await self.store.update(INVOICES, invoice_id, invoice.to_document())

        invoices_updated_total.labels(operation=operation).inc()
        logger.info(
            "Invoice saved",
            owner_id=owner_id,
            invoice_id=invoice_id,
            operation=operation,
        )
        return invoice

    async def delete(self, owner_id: str, invoice_id: str) -> None:
        await self.get(owner_id, invoice_id)
        await self.store.delete(INVOICES, invoice_id)
        invoices_deleted_total.inc()
        log_business_event("invoice_deleted", owner_id, invoice_id=invoice_id)

    async def toggle_payment_method(
        self, owner_id: str, invoice_id: str, method: PaymentMethod
    ) -> Invoice:
        invoice = await self.get(owner_id, invoice_id)
        terms = payment_terms.toggle_payment_method(invoice.payment_terms, method)
        return await self.save(
            owner_id,
            invoice_id,
            invoice.model_copy(update={"payment_terms": terms}),
            operation="toggle_payment_method",
        )

    async def toggle_card_brand(self, owner_id: str, invoice_id: str, brand: str) -> Invoice:
        invoice = await self.get(owner_id, invoice_id)
        terms = payment_terms.toggle_card_brand(invoice.payment_terms, brand)
        return await self.save(
            owner_id,
            invoice_id,
            invoice.model_copy(update={"payment_terms": terms}),
            operation="toggle_card_brand",
        )

    async def set_paid(self, owner_id: str, invoice_id: str, paid: bool = True) -> Invoice:
        invoice = await self.get(owner_id, invoice_id)
        invoice = await self.save(
            owner_id,
            invoice_id,
            invoice.model_copy(update={"paid": paid}),
            operation="mark_paid" if paid else "mark_unpaid",
        )
        if paid:
            log_business_event(
                "invoice_paid", owner_id, invoice_id=invoice_id, total=str(invoice.total)
            )
        return invoice
