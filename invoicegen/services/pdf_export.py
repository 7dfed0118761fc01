"""PDF rendering of finalized invoices with ReportLab."""

from html import escape
from io import BytesIO
from decimal import Decimal

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from invoicegen.schemas.invoice import Invoice
from invoicegen.services.totals import quantize_money
from invoicegen.settings import settings


HEADER_BLUE = colors.HexColor("#4472C4")


def _money(value: Decimal) -> str:
    return f"${quantize_money(value):,.2f}"


def pdf_filename(invoice: Invoice) -> str:
    number = invoice.invoice_number or invoice.id or "draft"
    safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in number)
    return f"invoice_{safe}.pdf"


def _payment_lines(invoice: Invoice) -> list[str]:
    terms = invoice.payment_terms
    lines = []
    if terms.bank_transfer is not None:
        bank = terms.bank_transfer
        lines.append(
            "<b>Bank transfer:</b> "
            f"{escape(bank.account_name)} / {escape(bank.bank_name)} / "
            f"Account {escape(bank.account_number)} / Routing {escape(bank.routing_number)}"
        )
    if terms.credit_card is not None:
        brands = ", ".join(escape(b) for b in terms.credit_card) or "All major cards"
        lines.append(f"<b>Credit card:</b> {brands}")
    if terms.paypal is not None:
        lines.append(f"<b>PayPal:</b> {escape(terms.paypal.email)}")
    if terms.late_fee_percentage is not None:
        lines.append(
            f"<b>Late fee:</b> {quantize_money(terms.late_fee_percentage)}% on overdue balances"
        )
    return lines


def render_invoice_pdf(invoice: Invoice) -> bytes:
    """
    Render an invoice to PDF bytes.

    Echoes business and client details, the line item table, totals, notes
    and enabled payment terms. Adds the promotional watermark line when the
    invoice carries ``show_watermark``.
    """
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=A4,
        leftMargin=18 * mm, rightMargin=18 * mm,
        topMargin=16 * mm, bottomMargin=16 * mm,
        title=f"Invoice {invoice.invoice_number}",
    )

    styles = getSampleStyleSheet()
    style_n = styles["Normal"]
    style_right = ParagraphStyle("right", parent=style_n, alignment=TA_RIGHT)
    style_title = ParagraphStyle("InvoiceTitle", parent=styles["Title"], fontSize=20)
    style_watermark = ParagraphStyle(
        "Watermark", parent=style_n, fontSize=9, textColor=colors.HexColor("#969696")
    )

    story = []

    if invoice.show_watermark:
        story.append(Paragraph(escape(settings.WATERMARK_TEXT), style_watermark))
        story.append(Spacer(1, 4 * mm))

    story.append(Paragraph("Invoice", style_title))

    business = [escape(invoice.business_name)]
    business += [escape(part) for part in (invoice.business_address, invoice.business_phone) if part]
    header = Table(
        [[
            Paragraph("<br/>".join(business), style_n),
            Paragraph(
                f"Invoice Number: {escape(invoice.invoice_number)}<br/>"
                f"Date: {invoice.date.isoformat()}<br/>"
                f"Due Date: {invoice.due_date.isoformat() if invoice.due_date else ''}",
                style_right,
            ),
        ]],
        colWidths=[90 * mm, 84 * mm],
    )
    story.append(header)
    story.append(Spacer(1, 8 * mm))

    story.append(Paragraph("<b>Bill To:</b>", style_n))
    story.append(Paragraph(escape(invoice.client_name), style_n))
    story.append(Paragraph(escape(invoice.client_email), style_n))
    story.append(Spacer(1, 8 * mm))

    rows = [["Description", "Quantity", "Price", "Total"]]
    for item in invoice.items:
        rows.append([
            Paragraph(escape(item.description), style_n),
            str(item.quantity),
            _money(item.price),
            _money(item.line_total),
        ])

    totals = invoice.totals
    rows.append(["", "", "Subtotal:", _money(totals.subtotal)])
    rows.append(["", "", f"Tax ({quantize_money(invoice.tax_rate)}%):", _money(totals.tax_amount)])
    rows.append(["", "", "Total:", _money(totals.total)])

    item_count = len(invoice.items)
    table = Table(rows, colWidths=[84 * mm, 25 * mm, 30 * mm, 35 * mm], repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_BLUE),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("GRID", (0, 0), (-1, item_count), 0.5, colors.grey),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("LINEABOVE", (2, item_count + 1), (-1, item_count + 1), 0.75, colors.black),
        ("FONTNAME", (2, -1), (-1, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
    ]))
    story.append(table)

    if invoice.notes:
        story.append(Spacer(1, 8 * mm))
        story.append(Paragraph("<b>Notes:</b>", style_n))
        story.append(Paragraph(escape(invoice.notes).replace("\n", "<br/>"), style_n))

    payment_lines = _payment_lines(invoice)
    if payment_lines:
        story.append(Spacer(1, 8 * mm))
        story.append(Paragraph("<b>Payment Terms</b>", style_n))
        story.extend(Paragraph(line, style_n) for line in payment_lines)

    doc.build(story)
    return buf.getvalue()
