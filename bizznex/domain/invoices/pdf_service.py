"""
Invoice PDF Generator
Renders a normalized invoice payload into a branded PDF with reportlab
"""

import io
import logging
from datetime import date
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .schemas import InvoiceDocumentPayload

logger = logging.getLogger(__name__)


def _money(value: float) -> str:
    return f"${value:,.2f}"


def _date(value: Optional[date]) -> str:
    return value.strftime("%B %d, %Y") if value else "N/A"


class InvoicePDFGenerator:
    """Generate invoice PDFs"""

    def __init__(self, payload: InvoiceDocumentPayload):
        self.payload = payload

        # PDF settings
        self.page_width, self.page_height = letter
        self.margin = 0.75 * inch
        self.content_width = self.page_width - (2 * self.margin)

        # Brand color (green)
        self.brand_color = colors.HexColor("#16a34a")
        self.dark_gray = colors.HexColor("#1e293b")
        self.light_gray = colors.HexColor("#f1f5f9")

        styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            "InvoiceTitle",
            parent=styles["Heading1"],
            fontSize=24,
            textColor=self.brand_color,
            spaceAfter=12,
            alignment=2,  # Right
        )
        self.company_style = ParagraphStyle(
            "Company",
            parent=styles["Heading2"],
            fontSize=16,
            textColor=self.dark_gray,
            spaceAfter=4,
        )
        self.body_style = ParagraphStyle(
            "InvoiceBody",
            parent=styles["Normal"],
            fontSize=10,
            textColor=self.dark_gray,
            spaceAfter=4,
        )
        self.cell_style = ParagraphStyle(
            "Cell", parent=self.body_style, spaceAfter=0, leading=12
        )

    def generate(self) -> bytes:
        """Generate PDF and return bytes"""
        logger.info(f"📄 Generating invoice PDF for {self.payload.invoice_number}")

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=f"Invoice {self.payload.invoice_number}",
        )

        story = []
        story.extend(self._header())
        story.append(Spacer(1, 0.3 * inch))
        story.append(self._details_table())
        story.append(Spacer(1, 0.3 * inch))
        story.append(self._items_table())
        story.append(Spacer(1, 0.2 * inch))
        story.append(self._totals_table())

        if self.payload.notes:
            story.append(Spacer(1, 0.3 * inch))
            story.append(Paragraph("<b>Notes</b>", self.body_style))
            story.append(Paragraph(escape(self.payload.notes), self.body_style))

        story.append(Spacer(1, 0.4 * inch))
        story.append(Paragraph("Thank you for your business!", self.body_style))

        doc.build(story)
        pdf_bytes = buffer.getvalue()
        buffer.close()

        logger.info(f"✅ Invoice PDF generated: {len(pdf_bytes)} bytes")
        return pdf_bytes

    def _header(self) -> list:
        business = self.payload.business
        flowables = [Paragraph("INVOICE", self.title_style)]

        name = business.company or business.full_name
        if name:
            flowables.append(Paragraph(escape(name), self.company_style))

        # Only print the business fields that are filled in
        lines = [business.address]
        if business.phone:
            lines.append(f"Phone: {business.phone}")
        if business.email:
            lines.append(f"Email: {business.email}")
        if business.website:
            lines.append(f"Website: {business.website}")
        if business.tax_id:
            lines.append(f"Tax ID: {business.tax_id}")
        for line in lines:
            if line:
                flowables.append(Paragraph(escape(line), self.body_style))
        return flowables

    def _details_table(self) -> Table:
        client = self.payload.client
        bill_to = [f"<b>{escape(client.name)}</b>"]
        for line in (client.address, client.email, client.phone):
            if line:
                bill_to.append(escape(line))

        details = (
            f"<b>Invoice Number:</b> {escape(self.payload.invoice_number)}<br/>"
            f"<b>Invoice Date:</b> {_date(self.payload.invoice_date)}<br/>"
            f"<b>Due Date:</b> {_date(self.payload.due_date)}<br/>"
            f"<b>Status:</b> {escape(self.payload.status)}"
        )

        table = Table(
            [
                [Paragraph("<b>BILL TO</b>", self.cell_style), Paragraph("<b>DETAILS</b>", self.cell_style)],
                [Paragraph("<br/>".join(bill_to), self.cell_style), Paragraph(details, self.cell_style)],
            ],
            colWidths=[self.content_width / 2, self.content_width / 2],
        )
        table.setStyle(
            TableStyle(
                [
                    ("TEXTCOLOR", (0, 0), (-1, 0), self.brand_color),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        return table

    def _items_table(self) -> Table:
        data = [["Description", "Qty", "Rate", "Amount"]]
        for item in self.payload.items:
            data.append(
                [
                    Paragraph(escape(item.description), self.cell_style),
                    str(item.quantity),
                    _money(item.rate),
                    _money(item.amount),
                ]
            )

        desc_width = self.content_width - 3.6 * inch
        table = Table(
            data, colWidths=[desc_width, 0.8 * inch, 1.4 * inch, 1.4 * inch], repeatRows=1
        )
        table.setStyle(
            TableStyle(
                [
                    # Header row
                    ("BACKGROUND", (0, 0), (-1, 0), self.brand_color),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 10),
                    # Body rows
                    ("FONT", (0, 1), (-1, -1), "Helvetica", 10),
                    ("TEXTCOLOR", (0, 1), (-1, -1), self.dark_gray),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, self.light_gray]),
                    ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                    ("TOPPADDING", (0, 0), (-1, -1), 6),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        return table

    def _totals_table(self) -> Table:
        payload = self.payload
        rows = [["Subtotal:", _money(payload.subtotal)]]
        for tax in payload.tax_items:
            rows.append([f"{tax.name} ({tax.rate:g}%):", _money(tax.amount)])
        rows.append(["Total:", _money(payload.total)])
        if payload.amount_paid:
            rows.append(["Amount Paid:", _money(payload.amount_paid)])
            rows.append(["Balance Due:", _money(payload.balance_due)])

        table = Table(
            rows,
            colWidths=[self.content_width - 1.4 * inch, 1.4 * inch],
        )
        total_row = len(payload.tax_items) + 1
        table.setStyle(
            TableStyle(
                [
                    ("FONT", (0, 0), (-1, -1), "Helvetica", 10),
                    ("FONT", (0, total_row), (-1, total_row), "Helvetica-Bold", 12),
                    ("TEXTCOLOR", (0, total_row), (-1, total_row), self.brand_color),
                    ("LINEABOVE", (0, total_row), (-1, total_row), 1, self.dark_gray),
                    ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                ]
            )
        )
        return table


def render_invoice_pdf(payload: InvoiceDocumentPayload) -> bytes:
    return InvoicePDFGenerator(payload).generate()
