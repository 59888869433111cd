# invoice_engine/domain/services/pagination_planner.py
"""
Split computed line items into fixed-size pages.

Two page shapes exist:
  - regular page: header + table header + item rows
  - last page:    the same plus totals, tax summary, amount in words,
                  bank/signature, notes (when present) and page footer

Algorithm (greedy with one-step lookahead), repeated while items remain:
  1. If every remaining row fits in the last-page room, emit the last page.
  2. Otherwise fill a regular page greedily (always at least one row).
  3. Lookahead guard: a regular page may not swallow every remaining row
     (that would force an empty continuation carrying only the footer), and
     when the remainder fits a last page but holds fewer than
     ``min_last_page_items`` rows, rows are pulled back from the current page.

When the budgets leave no room for even one single-line row on a last page,
the plan falls back to ``fallback_items_per_page`` rows per page and is
flagged ``layout_degenerate``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from invoice_engine.domain.errors import LAYOUT_DEGENERATE
from invoice_engine.domain.models.document import CLOSING_SECTIONS, SectionKind
from invoice_engine.domain.models.invoice import ComputedLine
from invoice_engine.domain.models.layout import LayoutBudgets
from invoice_engine.domain.services.page_height import PageHeightEstimator

logger = logging.getLogger("pagination_planner")


@dataclass(frozen=True)
class PagePlan:
    """Which lines and which sections one physical page carries."""
    page_number: int
    page_count: int
    start_index: int
    lines: tuple[ComputedLine, ...]
    is_last: bool
    sections: tuple[SectionKind, ...]

    @property
    def item_count(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class PaginationResult:
    pages: tuple[PagePlan, ...]
    degenerate: bool = False
    flags: tuple[str, ...] = ()

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def chunk_sizes(self) -> list[int]:
        return [p.item_count for p in self.pages]


def _fit_count(heights: Sequence[float], start: int, room: float) -> int:
    used = 0.0
    count = 0
    for h in heights[start:]:
        if used + h > room:
            break
        used += h
        count += 1
    return count


def _guard(
    heights: Sequence[float],
    pos: int,
    take: int,
    last_room: float,
    min_last: int,
) -> int:
    """Pull rows back from a regular page so the last page is never starved."""
    n = len(heights)

    # A full regular page must leave something for the last page
    while take > 1 and pos + take >= n:
        take -= 1

    end = pos + take
    if end < n and sum(heights[end:]) <= last_room:
        while (
            take > 1
            and n - (pos + take) < min_last
            and sum(heights[pos + take - 1:]) <= last_room
        ):
            take -= 1
    return take


def split_heights(
    heights: Sequence[float],
    regular_room: float,
    last_room: float,
    min_last: int = 2,
) -> tuple[list[int], bool]:
    """Return ``(page_sizes, overflowed)`` for a sequence of row heights.

    ``overflowed`` is True when a row had to be placed on a page it does not
    fit (a single row taller than the room).
    """
    n = len(heights)
    if n == 0:
        return [0], False

    sizes: list[int] = []
    overflowed = False
    pos = 0
    while pos < n:
        if sum(heights[pos:]) <= last_room:
            sizes.append(n - pos)
            return sizes, overflowed

        take = _fit_count(heights, pos, regular_room)
        if take == 0:
            take = 1
            overflowed = True
        take = _guard(heights, pos, take, last_room, min_last)
        sizes.append(take)
        pos += take

    # Loop ran out without a fitting last page: the final page overflows
    return sizes, True


class PaginationPlanner:
    def __init__(
        self,
        budgets: Optional[LayoutBudgets] = None,
        estimator: Optional[PageHeightEstimator] = None,
    ):
        self.budgets = budgets or LayoutBudgets()
        self.estimator = estimator or PageHeightEstimator(self.budgets)

    def last_page_reserve(self, *, tax_applies: bool = True, notes: str = "") -> float:
        b = self.budgets
        reserve = b.last_page_footer_reserve
        if tax_applies:
            reserve += b.tax_summary_height
        if notes and notes.strip():
            reserve += max(
                b.notes_height,
                self.estimator.block_height(notes, b.notes_column_width, b.notes_font_size),
            )
        return reserve

    def plan(
        self,
        lines: Sequence[ComputedLine],
        *,
        tax_applies: bool = True,
        notes: str = "",
    ) -> PaginationResult:
        b = self.budgets
        lines = tuple(lines)
        has_notes = bool(notes and notes.strip())

        regular_room = b.item_area_height
        last_room = regular_room - self.last_page_reserve(tax_applies=tax_applies, notes=notes)

        degenerate = last_room < b.single_line_row_height
        if degenerate:
            logger.warning(
                "Layout budgets leave no room for item rows (last-page room=%.1f); "
                "falling back to %d items per page",
                last_room, b.fallback_items_per_page,
            )
            heights: list[float] = [1.0] * len(lines)
            regular_room = last_room = float(b.fallback_items_per_page)
        else:
            heights = [self.estimator.item_row_height(line) for line in lines]

        sizes, overflowed = split_heights(heights, regular_room, last_room, b.min_last_page_items)
        if overflowed and not degenerate:
            logger.warning("Some item rows exceed the page budget and overflow their page")
            degenerate = True

        pages: list[PagePlan] = []
        start = 0
        count = len(sizes)
        for number, size in enumerate(sizes, start=1):
            is_last = number == count
            kinds = [SectionKind.HEADER, SectionKind.TABLE_HEADER, SectionKind.ITEM_ROWS]
            if is_last:
                kinds.extend(CLOSING_SECTIONS)
                if has_notes:
                    kinds.append(SectionKind.NOTES)
            kinds.append(SectionKind.PAGE_NUMBER)
            pages.append(
                PagePlan(
                    page_number=number,
                    page_count=count,
                    start_index=start,
                    lines=lines[start:start + size],
                    is_last=is_last,
                    sections=tuple(kinds),
                )
            )
            start += size

        logger.debug("Planned %d items into pages %s", len(lines), sizes)
        return PaginationResult(
            pages=tuple(pages),
            degenerate=degenerate,
            flags=(LAYOUT_DEGENERATE,) if degenerate else (),
        )


def plan(
    lines: Sequence[ComputedLine],
    budgets: Optional[LayoutBudgets] = None,
    *,
    tax_applies: bool = True,
    notes: str = "",
) -> PaginationResult:
    return PaginationPlanner(budgets).plan(lines, tax_applies=tax_applies, notes=notes)
