# invoice_engine/domain/services/invoice_pdf.py
"""
Render assembled invoice pages to PDF with ReportLab.

The renderer is a thin consumer of ``Page`` records: every pagination and
tax decision has already been made by the engine.  Each ``Page`` becomes
one physical page (explicit page breaks); a page whose estimated height
fell short is shrunk to fit its frame.  Visual styles differ only in
their ``RenderStyle``.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    KeepInFrame,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from invoice_engine.domain.models.document import (
    BankAndSignature,
    Header,
    ItemRows,
    Notes,
    Page,
    PageNumber,
    TableHeader,
    TaxSummary,
    TotalsRow,
    WordsLine,
)
from invoice_engine.domain.models.invoice import TaxRegime
from invoice_engine.domain.services.formatting import FormattingPort, IndianFormatter
from invoice_engine.domain.services.invoice_document import InvoiceDocument

logger = logging.getLogger("invoice_pdf")


@dataclass(frozen=True)
class RenderStyle:
    name: str
    accent: colors.Color
    accent_text: colors.Color
    grid: colors.Color
    label_bg: colors.Color
    total_bg: colors.Color
    font: str = "Helvetica"
    bold_font: str = "Helvetica-Bold"
    title_size: int = 16
    body_size: int = 8
    small_size: int = 7


CLASSIC_STYLE = RenderStyle(
    name="classic",
    accent=colors.Color(0.2, 0.3, 0.5),
    accent_text=colors.white,
    grid=colors.Color(0.8, 0.8, 0.8),
    label_bg=colors.Color(0.95, 0.95, 0.95),
    total_bg=colors.Color(0.9, 0.95, 1.0),
)

MONO_STYLE = RenderStyle(
    name="mono",
    accent=colors.black,
    accent_text=colors.white,
    grid=colors.black,
    label_bg=colors.white,
    total_bg=colors.Color(0.9, 0.9, 0.9),
    font="Courier",
    bold_font="Courier-Bold",
    title_size=14,
)

# Item table widths (points) per regime; they sum to the A4 content width
_ITEM_COL_WIDTHS = {
    TaxRegime.IGST: [22, 150, 50, 40, 50, 55, 35, 50, 63],
    TaxRegime.CGST_SGST: [22, 120, 45, 35, 45, 50, 30, 40, 30, 40, 58],
    TaxRegime.NONE: [25, 215, 55, 45, 55, 60, 60],
}

# Platypus frames pad 6pt on every side
_FRAME_PADDING = 6

# Notes allow a small HTML subset; anything else is printed literally
_INLINE_TAGS = {
    tag: re.compile(rf"&lt;{tag}&gt;(.*?)&lt;/{tag}&gt;", re.IGNORECASE | re.DOTALL)
    for tag in ("b", "i", "u")
}
_BREAK_RE = re.compile(r"&lt;br\s*/?&gt;|&lt;/p&gt;|\n", re.IGNORECASE)
_LIST_ITEM_RE = re.compile(r"&lt;li&gt;", re.IGNORECASE)
_DROPPED_RE = re.compile(r"&lt;/?(?:p|ul|ol)&gt;|&lt;/li&gt;", re.IGNORECASE)
_EDGE_BREAKS_RE = re.compile(r"^(?:<br/>)+|(?:<br/>)+$")


def notes_markup(text: str) -> str:
    """Convert note text to Paragraph markup.

    ``<br>``, ``<p>``, ``<b>``, ``<i>``, ``<u>`` and ``<ul>/<li>`` are kept
    (list items become bullets); all other markup is escaped.
    """
    markup = escape(text or "").replace("\r\n", "\n")
    for tag, pattern in _INLINE_TAGS.items():
        markup = pattern.sub(rf"<{tag}>\1</{tag}>", markup)
    markup = _BREAK_RE.sub("<br/>", markup)
    markup = _LIST_ITEM_RE.sub("<br/>• ", markup)
    markup = _DROPPED_RE.sub("", markup)
    return _EDGE_BREAKS_RE.sub("", markup)


class _Renderer:
    def __init__(self, style: RenderStyle, formatter: FormattingPort):
        self.style = style
        self.fmt = formatter
        styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            "InvoiceTitle",
            parent=styles["Heading1"],
            fontName=style.bold_font,
            fontSize=style.title_size,
            alignment=1,  # center
            spaceAfter=8,
        )
        self.body_style = ParagraphStyle(
            "Body",
            parent=styles["Normal"],
            fontName=style.font,
            fontSize=style.body_size,
            leading=style.body_size + 2,
        )
        self.small_style = ParagraphStyle(
            "Small",
            parent=self.body_style,
            fontSize=style.small_size,
            leading=style.small_size + 2,
            textColor=colors.grey,
        )
        # Item descriptions, sized like the estimator's detail lines
        self.detail_style = ParagraphStyle(
            "Detail",
            parent=self.body_style,
            fontSize=6,
            leading=8,
            textColor=colors.grey,
        )
        self.footer_style = ParagraphStyle(
            "Footer",
            parent=self.small_style,
            alignment=2,  # right
        )

    def _p(self, text: str, style: Optional[ParagraphStyle] = None) -> Paragraph:
        return Paragraph(escape(text or "").replace("\n", "<br/>"), style or self.body_style)

    def _money(self, value) -> str:
        return self.fmt.format_currency(value)

    def _grid(self, header_row: bool = True, total_row: bool = False) -> list:
        s = self.style
        cmds = [
            ("FONTNAME", (0, 0), (-1, -1), s.font),
            ("FONTSIZE", (0, 0), (-1, -1), s.body_size),
            ("GRID", (0, 0), (-1, -1), 0.5, s.grid),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
            ("LEFTPADDING", (0, 0), (-1, -1), 3),
            ("RIGHTPADDING", (0, 0), (-1, -1), 3),
        ]
        if header_row:
            cmds += [
                ("BACKGROUND", (0, 0), (-1, 0), s.accent),
                ("TEXTCOLOR", (0, 0), (-1, 0), s.accent_text),
                ("FONTNAME", (0, 0), (-1, 0), s.bold_font),
            ]
        if total_row:
            cmds += [
                ("BACKGROUND", (0, -1), (-1, -1), s.total_bg),
                ("FONTNAME", (0, -1), (-1, -1), s.bold_font),
            ]
        return cmds

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def header(self, section: Header) -> list:
        d = section.data
        company, party = d.company, d.party
        shipping = d.shipping.address if d.shipping and d.shipping.address else party.billing_address
        rows = [
            ["Invoice No", d.invoice_number, "Invoice Date", d.invoice_date],
            ["Supplier", company.name or "-", "Buyer", party.name or "-"],
            ["Supplier GSTIN", company.gstin or "-", "Buyer GSTIN", party.gstin or "-"],
            ["State", f"{company.state or '-'} ({d.company_state_code})", "Place of Supply", d.place_of_supply],
            ["Phone", d.company_phone, "Phone", d.party_phone],
            ["Address", self._p(company.address or "-"), "Ship To", self._p(shipping or "-")],
            ["Due Date", d.due_date, "PO No", d.po_number],
            ["Buyer PAN", d.party_pan, "E-Way Bill No", d.eway_number],
        ]
        table = Table(rows, colWidths=[70, 185, 70, 185])
        table.setStyle(
            TableStyle(
                self._grid(header_row=False)
                + [
                    ("BACKGROUND", (0, 0), (0, -1), self.style.label_bg),
                    ("BACKGROUND", (2, 0), (2, -1), self.style.label_bg),
                    ("TEXTCOLOR", (0, 0), (0, -1), colors.grey),
                    ("TEXTCOLOR", (2, 0), (2, -1), colors.grey),
                ]
            )
        )
        return [Paragraph(escape(d.title), self.title_style), table, Spacer(1, 8)]

    def item_table(
        self,
        table_header: TableHeader,
        rows: ItemRows,
        totals: Optional[TotalsRow],
    ) -> list:
        regime = table_header.regime
        data: list[list] = [list(table_header.columns)]
        for serial, line in rows.numbered():
            name_cell: list = [self._p(line.name)]
            if line.description and line.description.strip():
                name_cell.append(self._p(line.description, self.detail_style))
            row = [
                str(serial),
                name_cell,
                line.code or "-",
                self.fmt.format_quantity(line.quantity, line.unit),
                self._money(line.unit_price),
                self._money(line.taxable_value),
            ]
            if regime is TaxRegime.IGST:
                row += [f"{line.gst_rate}%", self._money(line.igst)]
            elif regime is TaxRegime.CGST_SGST:
                half = line.gst_rate / 2
                row += [f"{half}%", self._money(line.cgst), f"{half}%", self._money(line.sgst)]
            row.append(self._money(line.total))
            data.append(row)

        if totals is not None:
            t = totals.totals
            row = ["", "Total", "", self.fmt.format_quantity(t.total_quantity), "", self._money(t.taxable_value)]
            if regime is TaxRegime.IGST:
                row += ["", self._money(t.igst)]
            elif regime is TaxRegime.CGST_SGST:
                row += ["", self._money(t.cgst), "", self._money(t.sgst)]
            row.append(self._money(t.total))
            data.append(row)

        table = Table(data, colWidths=_ITEM_COL_WIDTHS[regime], repeatRows=1)
        table.setStyle(
            TableStyle(
                self._grid(total_row=totals is not None)
                + [("ALIGN", (3, 0), (-1, -1), "RIGHT")]
            )
        )
        return [table, Spacer(1, 6)]

    def tax_summary(self, section: TaxSummary) -> list:
        if not section.applicable or not section.rows:
            return []
        if section.regime is TaxRegime.IGST:
            data = [["HSN/SAC", "Taxable", "IGST %", "IGST", "Total Tax"]]
        else:
            data = [["HSN/SAC", "Taxable", "GST %", "CGST", "SGST", "Total Tax"]]
        for r in section.rows:
            rate = "" if r.rate is None else f"{r.rate}%"
            if section.regime is TaxRegime.IGST:
                data.append([r.code, self._money(r.taxable_value), rate, self._money(r.igst), self._money(r.tax_amount)])
            else:
                data.append([
                    r.code, self._money(r.taxable_value), rate,
                    self._money(r.cgst), self._money(r.sgst), self._money(r.tax_amount),
                ])
        table = Table(data)
        table.setStyle(TableStyle(self._grid(total_row=True) + [("ALIGN", (1, 0), (-1, -1), "RIGHT")]))
        return [table, Spacer(1, 6)]

    def words(self, section: WordsLine) -> list:
        return [self._p(f"Amount in words: {section.text}"), Spacer(1, 6)]

    def bank_and_signature(self, section: BankAndSignature) -> list:
        bank_lines: list[str] = []
        if section.show_bank and section.bank is not None:
            b = section.bank
            for label, value in (
                ("Bank", b.bank_name),
                ("Branch", b.branch_address),
                ("Acc. No", b.account_number),
                ("IFSC", b.ifsc_code),
                ("UPI ID", b.upi_id),
                ("UPI Name", b.upi_name),
                ("UPI Mobile", b.upi_mobile),
            ):
                if value:
                    bank_lines.append(f"{label}: {value}")
        left = self._p("\n".join(bank_lines)) if bank_lines else ""
        right = self._p(f"For {section.signatory}\n\n\n\nAuthorised Signatory")
        table = Table([[left, right]], colWidths=[255, 255])
        table.setStyle(TableStyle(self._grid(header_row=False) + [("VALIGN", (0, 0), (-1, -1), "TOP")]))
        return [table, Spacer(1, 6)]

    def notes(self, section: Notes) -> list:
        return [Paragraph(notes_markup(section.text), self.small_style), Spacer(1, 4)]

    def page_number(self, section: PageNumber) -> list:
        return [Paragraph(section.label(), self.footer_style)]

    def page(self, page: Page) -> list:
        flow: list = []
        table_header = page.section(TableHeader.kind)
        totals = page.section(TotalsRow.kind)
        for section in page.sections:
            if isinstance(section, Header):
                flow += self.header(section)
            elif isinstance(section, ItemRows) and table_header is not None:
                flow += self.item_table(table_header, section, totals)
            elif isinstance(section, TaxSummary):
                flow += self.tax_summary(section)
            elif isinstance(section, WordsLine):
                flow += self.words(section)
            elif isinstance(section, BankAndSignature):
                flow += self.bank_and_signature(section)
            elif isinstance(section, Notes):
                flow += self.notes(section)
            elif isinstance(section, PageNumber):
                flow += self.page_number(section)
            # TableHeader and TotalsRow are drawn as part of the item table
        return flow


def render_invoice_pdf(
    document: InvoiceDocument,
    style: Optional[RenderStyle] = None,
    formatter: Optional[FormattingPort] = None,
) -> bytes:
    """Render an assembled invoice to PDF bytes, one physical page per ``Page``."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=10 * mm,
        bottomMargin=10 * mm,
        title=document.title,
    )
    renderer = _Renderer(style or CLASSIC_STYLE, formatter or IndianFormatter())

    elements: list = []
    # Each page is shrunk into a single frame so it can never spill over
    max_width = doc.width - 2 * _FRAME_PADDING
    max_height = doc.height - 2 * _FRAME_PADDING - 1
    for page in document.pages:
        if elements:
            elements.append(PageBreak())
        elements.append(KeepInFrame(max_width, max_height, renderer.page(page), mode="shrink"))

    doc.build(elements)
    logger.info("Rendered %s with %d pages (%s style)", document.title, document.page_count, renderer.style.name)
    return buf.getvalue()
