# invoice_engine/domain/services/document_assembler.py
"""
Turn a page plan into resolved page records.

A pure fold over the plan: no tax or height logic lives here.  The caller
must hand in the full aggregate bundle with every plan; a last page without
totals is a programming error and raises ``AssemblyContractViolation``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from invoice_engine.domain.errors import AssemblyContractViolation
from invoice_engine.domain.models.document import (
    BankAndSignature,
    DocumentHeader,
    Header,
    HsnSummaryRow,
    ItemRows,
    Notes,
    Page,
    PageNumber,
    PageSection,
    SectionKind,
    TableHeader,
    TaxSummary,
    TaxTotals,
    TotalsRow,
    WordsLine,
)
from invoice_engine.domain.models.invoice import BankDetails, TaxRegime
from invoice_engine.domain.services.pagination_planner import PagePlan, PaginationResult

logger = logging.getLogger("document_assembler")


@dataclass(frozen=True)
class AggregateBundle:
    """Document-level figures rendered on the last page."""
    regime: TaxRegime
    totals: Optional[TaxTotals]
    hsn_rows: Optional[tuple[HsnSummaryRow, ...]]
    amount_in_words: Optional[str]


def _check_plan(pages: Sequence[PagePlan]) -> None:
    if not pages:
        raise AssemblyContractViolation("plan", "empty page plan")

    count = len(pages)
    expected_start = 0
    for position, page in enumerate(pages, start=1):
        if page.page_number != position or page.page_count != count:
            raise AssemblyContractViolation(
                "plan",
                f"page {page.page_number}/{page.page_count} out of sequence at position {position}/{count}",
            )
        if page.start_index != expected_start:
            raise AssemblyContractViolation(
                "plan", f"page {position} starts at item {page.start_index}, expected {expected_start}"
            )
        expected_start += page.item_count

    last_pages = [p.page_number for p in pages if p.is_last]
    if last_pages != [count]:
        raise AssemblyContractViolation(
            "plan", f"expected exactly the final page to be last, got {last_pages}"
        )


def _check_aggregates(aggregates: Optional[AggregateBundle]) -> AggregateBundle:
    if aggregates is None:
        raise AssemblyContractViolation("aggregates", "last page planned but no aggregates supplied")
    for name in ("totals", "hsn_rows", "amount_in_words"):
        if getattr(aggregates, name) is None:
            raise AssemblyContractViolation(name, "required on the last page")
    return aggregates


def assemble(
    plan: Union[PaginationResult, Sequence[PagePlan]],
    header: DocumentHeader,
    aggregates: Optional[AggregateBundle],
    notes: str = "",
    bank: Optional[BankDetails] = None,
    *,
    show_bank: bool = True,
) -> list[Page]:
    pages = plan.pages if isinstance(plan, PaginationResult) else tuple(plan)
    _check_plan(pages)
    bundle = _check_aggregates(aggregates)

    bank_visible = show_bank and bank is not None and bank.is_available
    header_section = Header(data=header)
    table_header = TableHeader(regime=bundle.regime)

    out: list[Page] = []
    for page in pages:
        sections: list[PageSection] = []
        for kind in page.sections:
            if kind is SectionKind.HEADER:
                sections.append(header_section)
            elif kind is SectionKind.TABLE_HEADER:
                sections.append(table_header)
            elif kind is SectionKind.ITEM_ROWS:
                sections.append(ItemRows(lines=page.lines, start_index=page.start_index))
            elif kind is SectionKind.TOTALS_ROW:
                sections.append(TotalsRow(totals=bundle.totals))
            elif kind is SectionKind.TAX_SUMMARY:
                sections.append(TaxSummary(rows=tuple(bundle.hsn_rows), regime=bundle.regime))
            elif kind is SectionKind.WORDS_LINE:
                sections.append(WordsLine(text=bundle.amount_in_words))
            elif kind is SectionKind.BANK_AND_SIGNATURE:
                sections.append(
                    BankAndSignature(
                        bank=bank,
                        show_bank=bank_visible,
                        signatory=header.company.name,
                    )
                )
            elif kind is SectionKind.NOTES:
                sections.append(Notes(text=notes))
            elif kind is SectionKind.PAGE_NUMBER:
                sections.append(PageNumber(index=page.page_number, total=page.page_count))
        out.append(Page(number=page.page_number, total=page.page_count, sections=tuple(sections)))

    logger.debug("Assembled %d pages", len(out))
    return out
