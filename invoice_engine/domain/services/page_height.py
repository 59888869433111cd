# invoice_engine/domain/services/page_height.py
"""
Text-wrap height estimation without a layout pass.

This is a heuristic, not text shaping: every character is assumed to be
``font_size * char_width_factor`` wide, and words are filled greedily into
lines.  Callers must not rely on pixel accuracy.  The estimate is monotone:
extending a text never reduces its line count, and widening the column
never increases it.
"""

from __future__ import annotations

import re
from typing import Optional

from invoice_engine.domain.models.invoice import LineItem
from invoice_engine.domain.models.layout import LayoutBudgets

# Note markup that starts a new line when rendered
_BR_RE = re.compile(r"<br\s*/?>|</p>|<li>", re.IGNORECASE)


class PageHeightEstimator:
    def __init__(self, budgets: Optional[LayoutBudgets] = None):
        self.budgets = budgets or LayoutBudgets()

    def _usable_width(self, column_width: float) -> float:
        b = self.budgets
        return max(b.min_column_width, column_width - b.column_padding)

    def _segment_lines(self, segment: str, width: float, char_width: float) -> int:
        lines = 1
        used = 0.0
        for word in segment.split():
            # word plus its trailing space
            word_width = (len(word) + 1) * char_width
            if used > 0 and used + word_width > width:
                lines += 1
                used = word_width
            else:
                used += word_width
        return lines

    def estimate_lines(self, text: Optional[str], column_width: float, font_size: float) -> int:
        """Number of wrapped lines ``text`` occupies in a column (at least 1)."""
        if not text:
            return 1
        normalized = _BR_RE.sub("\n", str(text)).replace("\r\n", "\n")
        width = self._usable_width(column_width)
        char_width = font_size * self.budgets.char_width_factor
        total = sum(
            self._segment_lines(segment, width, char_width)
            for segment in normalized.split("\n")
        )
        return max(1, total)

    def row_height(self, text: Optional[str], column_width: float, font_size: float) -> float:
        b = self.budgets
        lines = self.estimate_lines(text, column_width, font_size)
        return lines * b.line_height_constant + b.vertical_padding_constant

    def block_height(self, text: Optional[str], column_width: float, font_size: float) -> float:
        """Height of a free-text block such as notes; zero for empty text."""
        if not text or not str(text).strip():
            return 0.0
        return self.row_height(text, column_width, font_size)

    def item_row_height(self, line: LineItem) -> float:
        """Height of one item-table row: wrapped name plus optional description."""
        b = self.budgets
        height = b.vertical_padding_constant
        height += self.estimate_lines(line.name, b.name_column_width, b.name_font_size) * b.line_height_constant
        if line.description and line.description.strip():
            detail_lines = self.estimate_lines(
                line.description, b.name_column_width, b.detail_font_size
            )
            height += detail_lines * b.detail_line_height
        return height
