"""
PDF Invoice Export

Renders a fully assembled invoice into a printable A4 document.

The renderer only prints what the record already holds: tp,
total_price_per_piece, row_total and the aggregates come straight from
the invoice. It never reprices anything, so the PDF always matches what
the editor showed and what was saved.
"""

import re
from decimal import Decimal
from pathlib import Path
from typing import Optional

import structlog
from fpdf import FPDF

from hisaab.config import ExportSettings, get_settings
from hisaab.models.invoice import Invoice


logger = structlog.get_logger(__name__)


# Column layout of the items table: (header, width in mm, alignment)
ITEM_COLUMNS = [
    ("#", 8, "C"),
    ("Item Name", 52, "L"),
    ("Qty", 16, "R"),
    ("Rate", 20, "R"),
    ("Disc %", 18, "R"),
    ("T.P", 20, "R"),
    ("Total/Unit", 24, "R"),
    ("Amount", 24, "R"),
]

HEADER_FILL = (15, 23, 42)
TABLE_HEAD_FILL = (30, 41, 59)
ALT_ROW_FILL = (241, 245, 249)
PAID_HEAD_FILL = (71, 85, 105)


def _latin1(text: str) -> str:
    """Core PDF fonts are latin-1 only; replace anything else."""
    return text.encode("latin-1", "replace").decode("latin-1")


def _plain(value: Optional[Decimal]) -> str:
    """Input value as entered; empty when unset."""
    if value is None:
        return ""
    return format(value, "f")


def _money(value: Decimal) -> str:
    return f"{value:,.2f}"


class _InvoicePdf(FPDF):
    """FPDF with the invoice footer on every page."""

    def __init__(self, footer_text: str):
        super().__init__(orientation="P", unit="mm", format="A4")
        self._footer_text = footer_text

    def footer(self):
        self.set_y(-12)
        self.set_font("Helvetica", "", 8)
        self.set_text_color(100, 100, 100)
        self.cell(0, 5, _latin1(self._footer_text), align="C")


class InvoicePdfRenderer:
    """
    Builds invoice PDFs with fpdf2.

    Layout: dark header band with company name, date and status; the
    invoice name; the items table; the payment history (if any); and a
    summary of grand total, total paid and balance due.
    """

    def __init__(self, settings: Optional[ExportSettings] = None):
        self._settings = settings or get_settings().export

    def render(self, invoice: Invoice) -> bytes:
        """Render the invoice and return the PDF bytes."""
        pdf = _InvoicePdf(self._settings.footer_text)
        pdf.set_margins(14, 14, 14)
        pdf.set_auto_page_break(auto=True, margin=18)
        pdf.add_page()

        self._draw_header(pdf, invoice)
        self._draw_items(pdf, invoice)
        if invoice.paid_amounts:
            self._draw_payments(pdf, invoice)
        self._draw_summary(pdf, invoice)

        return bytes(pdf.output())

    def filename_for(self, invoice: Invoice) -> str:
        """Download name: whitespace in the invoice name becomes underscores."""
        stem = re.sub(r"\s+", "_", invoice.name)
        return f"{stem}_invoice.pdf"

    def export(self, invoice: Invoice, directory: Optional[Path] = None) -> Path:
        """Write the PDF to disk and return its path."""
        directory = Path(directory or self._settings.output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename_for(invoice)
        path.write_bytes(self.render(invoice))
        logger.info("invoice_exported", invoice_id=invoice.id, path=str(path))
        return path

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    def _draw_header(self, pdf: FPDF, invoice: Invoice) -> None:
        pdf.set_fill_color(*HEADER_FILL)
        pdf.rect(0, 0, 210, 40, style="F")

        pdf.set_text_color(255, 255, 255)
        pdf.set_xy(14, 12)
        pdf.set_font("Helvetica", "B", 24)
        pdf.cell(120, 10, _latin1(self._settings.company_name))
        pdf.set_font("Helvetica", "", 10)
        pdf.cell(0, 10, f"Date: {invoice.invoice_date.isoformat()}", align="R",
                 new_x="LMARGIN", new_y="NEXT")
        pdf.cell(120, 6, _latin1(self._settings.subtitle))
        pdf.cell(0, 6, f"Status: {invoice.status.value}", align="R",
                 new_x="LMARGIN", new_y="NEXT")

        pdf.set_text_color(0, 0, 0)
        pdf.set_xy(14, 45)
        pdf.set_font("Helvetica", "B", 14)
        pdf.cell(0, 8, _latin1(f"Invoice: {invoice.name}"), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(2)

    def _draw_items(self, pdf: FPDF, invoice: Invoice) -> None:
        pdf.set_font("Helvetica", "B", 9)
        pdf.set_fill_color(*TABLE_HEAD_FILL)
        pdf.set_text_color(255, 255, 255)
        for header, width, _ in ITEM_COLUMNS:
            pdf.cell(width, 7, header, border=0, align="C", fill=True)
        pdf.ln()

        pdf.set_font("Helvetica", "", 9)
        pdf.set_text_color(0, 0, 0)
        pdf.set_fill_color(*ALT_ROW_FILL)
        for index, item in enumerate(invoice.items):
            values = [
                str(index + 1),
                _latin1(item.item_name)[:30],
                _plain(item.qty),
                _plain(item.rate),
                _plain(item.discount_percent) if item.discount_percent else "-",
                _money(item.tp),
                _money(item.total_price_per_piece),
                _money(item.row_total),
            ]
            fill = index % 2 == 1
            for value, (_, width, align) in zip(values, ITEM_COLUMNS):
                pdf.cell(width, 6, value, align=align, fill=fill)
            pdf.ln()
        pdf.ln(6)

    def _draw_payments(self, pdf: FPDF, invoice: Invoice) -> None:
        pdf.set_font("Helvetica", "B", 12)
        pdf.cell(0, 7, "Paid History", new_x="LMARGIN", new_y="NEXT")

        pdf.set_font("Helvetica", "B", 9)
        pdf.set_fill_color(*PAID_HEAD_FILL)
        pdf.set_text_color(255, 255, 255)
        pdf.cell(132, 7, "Narration", border=1, fill=True)
        pdf.cell(50, 7, "Amount", border=1, align="R", fill=True,
                 new_x="LMARGIN", new_y="NEXT")

        pdf.set_font("Helvetica", "", 9)
        pdf.set_text_color(0, 0, 0)
        for payment in invoice.paid_amounts:
            amount = _money(payment.amount) if payment.amount is not None else ""
            pdf.cell(132, 6, _latin1(payment.narration), border=1)
            pdf.cell(50, 6, amount, border=1, align="R",
                     new_x="LMARGIN", new_y="NEXT")
        pdf.ln(6)

    def _draw_summary(self, pdf: FPDF, invoice: Invoice) -> None:
        currency = _latin1(self._settings.currency_symbol)
        rows = [
            ("Grand Total:", invoice.grand_total, 11, ""),
            ("Total Paid:", invoice.total_paid, 11, ""),
            ("Balance Due:", invoice.balance, 14, "B"),
        ]
        for label, value, size, style in rows:
            pdf.set_font("Helvetica", style, size)
            pdf.set_x(120)
            pdf.cell(35, 8, label)
            pdf.cell(0, 8, f"{currency} {_money(value)}", align="R",
                     new_x="LMARGIN", new_y="NEXT")
