"""Unit tests for PDF export."""

import pytest

from invoicegen.schemas.invoice import BankTransferDetails, PaymentTerms
from invoicegen.services.pdf_export import pdf_filename, render_invoice_pdf
from tests.factories.data_factories import InvoiceFactory


@pytest.mark.unit
class TestPdfExport:

    def test_renders_pdf_document(self):
        invoice = InvoiceFactory().create(
            items=[{"description": "Design <b>work</b> & more", "quantity": 2, "price": 10}],
            tax_rate=10,
            payment_terms=PaymentTerms(
                bank_transfer=BankTransferDetails(account_name="Acme"),
                credit_card=["Visa"],
            ),
        )

        content = render_invoice_pdf(invoice)

        assert content.startswith(b"%PDF")
        assert content.rstrip().endswith(b"%%EOF")

    def test_empty_invoice_renders(self):
        invoice = InvoiceFactory().create(items=[])
        assert render_invoice_pdf(invoice).startswith(b"%PDF")

    def test_watermark_changes_output(self):
        invoice = InvoiceFactory().create()
        with_mark = render_invoice_pdf(invoice.model_copy(update={"show_watermark": True}))
        without = render_invoice_pdf(invoice.model_copy(update={"show_watermark": False}))
        assert len(with_mark) != len(without)

    def test_filename_from_invoice_number(self):
        invoice = InvoiceFactory().create(invoice_number="INV/2024 01")
        assert pdf_filename(invoice) == "invoice_INV_2024_01.pdf"
