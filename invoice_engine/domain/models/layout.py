# invoice_engine/domain/models/layout.py
"""
Layout budgets: estimated heights (in points) of the fixed page sections and
the tunables of the text-wrap heuristic.

Defaults match the ReportLab renderer: an A4 page (842pt) with 10mm margins
and 6pt frame padding leaves about 773pt; the header block (title plus the
eight-row party table) takes about 165pt.  ``table_header_height`` covers the
column row, its spacer and the page number line.
Callers override any subset, e.g. ``LayoutBudgets(header_height=150)`` or
``budgets.model_copy(update={...})``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LayoutBudgets(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Page frame
    page_usable_height: float = 770.0
    header_height: float = 175.0
    table_header_height: float = 35.0

    # Text-wrap heuristic
    line_height_constant: float = 10.0
    vertical_padding_constant: float = 8.0
    char_width_factor: float = 0.5
    column_padding: float = 8.0
    min_column_width: float = 20.0

    # Item table
    name_column_width: float = 120.0  # narrowest item column (CGST+SGST layout)
    name_font_size: float = 8.0
    detail_font_size: float = 6.0
    detail_line_height: float = 8.0

    # Last-page reserve: totals row + words line + bank/signature
    # + page footer + safety buffer
    last_page_footer_reserve: float = 240.0
    tax_summary_height: float = 100.0
    notes_height: float = 40.0
    notes_column_width: float = 500.0
    notes_font_size: float = 8.0

    # Pagination rules
    fallback_items_per_page: int = Field(34, ge=1)
    min_last_page_items: int = Field(2, ge=1)

    @property
    def item_area_height(self) -> float:
        """Height left for item rows on a page without footer sections."""
        return self.page_usable_height - self.header_height - self.table_header_height

    @property
    def single_line_row_height(self) -> float:
        return self.line_height_constant + self.vertical_padding_constant
