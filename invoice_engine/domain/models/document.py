# invoice_engine/domain/models/document.py
"""
Derived records shared by the planner, the assembler and the renderers:
aggregate totals, HSN summary rows and the page section variants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Iterator, Optional, Union

from invoice_engine.domain.models.invoice import (
    BankDetails,
    CompanyProfile,
    ComputedLine,
    PartyProfile,
    ShippingAddress,
    TaxRegime,
)

ZERO = Decimal("0")
GRAND_TOTAL_CODE = "Total"


@dataclass(frozen=True)
class TaxTotals:
    """Document-level sums over all computed lines."""
    taxable_value: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO
    total: Decimal = ZERO
    item_count: int = 0
    total_quantity: Decimal = ZERO

    @property
    def tax_amount(self) -> Decimal:
        return self.cgst + self.sgst + self.igst

    def to_dict(self) -> dict:
        return {
            "taxable_value": float(self.taxable_value),
            "cgst": float(self.cgst),
            "sgst": float(self.sgst),
            "igst": float(self.igst),
            "tax_amount": float(self.tax_amount),
            "total": float(self.total),
            "item_count": self.item_count,
            "total_quantity": float(self.total_quantity),
        }


@dataclass(frozen=True)
class HsnSummaryRow:
    code: str
    rate: Optional[Decimal]
    taxable_value: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO
    total: Decimal = ZERO
    is_grand_total: bool = False

    @property
    def tax_amount(self) -> Decimal:
        return self.cgst + self.sgst + self.igst


class SectionKind(str, Enum):
    HEADER = "header"
    TABLE_HEADER = "table_header"
    ITEM_ROWS = "item_rows"
    TOTALS_ROW = "totals_row"
    TAX_SUMMARY = "tax_summary"
    WORDS_LINE = "words_line"
    BANK_AND_SIGNATURE = "bank_and_signature"
    NOTES = "notes"
    PAGE_NUMBER = "page_number"


# Sections carried by the last page only
CLOSING_SECTIONS = (
    SectionKind.TOTALS_ROW,
    SectionKind.TAX_SUMMARY,
    SectionKind.WORDS_LINE,
    SectionKind.BANK_AND_SIGNATURE,
)


@dataclass(frozen=True)
class DocumentHeader:
    """Resolved header block: title, parties and transaction metadata."""
    title: str
    company: CompanyProfile
    party: PartyProfile
    shipping: Optional[ShippingAddress] = None
    invoice_number: str = "-"
    invoice_date: str = "-"
    due_date: str = "-"
    po_number: str = "-"
    eway_number: str = "-"
    party_pan: str = "-"
    company_state_code: str = "-"
    party_state_code: str = "-"
    place_of_supply: str = "-"
    company_phone: str = "-"
    party_phone: str = "-"


@dataclass(frozen=True)
class Header:
    kind: ClassVar[SectionKind] = SectionKind.HEADER
    data: DocumentHeader


@dataclass(frozen=True)
class TableHeader:
    kind: ClassVar[SectionKind] = SectionKind.TABLE_HEADER
    regime: TaxRegime

    @property
    def columns(self) -> tuple[str, ...]:
        base = ("Sr.", "Item", "HSN/SAC", "Qty", "Rate", "Taxable")
        if self.regime is TaxRegime.IGST:
            return base + ("IGST %", "IGST", "Total")
        if self.regime is TaxRegime.CGST_SGST:
            return base + ("CGST %", "CGST", "SGST %", "SGST", "Total")
        return base + ("Total",)


@dataclass(frozen=True)
class ItemRows:
    kind: ClassVar[SectionKind] = SectionKind.ITEM_ROWS
    lines: tuple[ComputedLine, ...] = ()
    start_index: int = 0

    def numbered(self) -> Iterator[tuple[int, ComputedLine]]:
        """Yield ``(serial_number, line)``; serials continue across pages."""
        for offset, line in enumerate(self.lines):
            yield self.start_index + offset + 1, line


@dataclass(frozen=True)
class TotalsRow:
    kind: ClassVar[SectionKind] = SectionKind.TOTALS_ROW
    totals: TaxTotals


@dataclass(frozen=True)
class TaxSummary:
    kind: ClassVar[SectionKind] = SectionKind.TAX_SUMMARY
    rows: tuple[HsnSummaryRow, ...] = ()
    regime: TaxRegime = TaxRegime.NONE

    @property
    def applicable(self) -> bool:
        return self.regime is not TaxRegime.NONE


@dataclass(frozen=True)
class WordsLine:
    kind: ClassVar[SectionKind] = SectionKind.WORDS_LINE
    text: str


@dataclass(frozen=True)
class BankAndSignature:
    kind: ClassVar[SectionKind] = SectionKind.BANK_AND_SIGNATURE
    bank: Optional[BankDetails] = None
    show_bank: bool = False
    signatory: str = ""


@dataclass(frozen=True)
class Notes:
    kind: ClassVar[SectionKind] = SectionKind.NOTES
    text: str


@dataclass(frozen=True)
class PageNumber:
    kind: ClassVar[SectionKind] = SectionKind.PAGE_NUMBER
    index: int
    total: int

    def label(self) -> str:
        return f"{self.index} / {self.total} page"


PageSection = Union[
    Header,
    TableHeader,
    ItemRows,
    TotalsRow,
    TaxSummary,
    WordsLine,
    BankAndSignature,
    Notes,
    PageNumber,
]


@dataclass(frozen=True)
class Page:
    """One physical page: resolved sections in rendering order."""
    number: int
    total: int
    sections: tuple[PageSection, ...] = field(default_factory=tuple)

    def section(self, kind: SectionKind) -> Optional[PageSection]:
        for s in self.sections:
            if s.kind is kind:
                return s
        return None

    def has(self, kind: SectionKind) -> bool:
        return self.section(kind) is not None

    @property
    def is_last(self) -> bool:
        return self.has(SectionKind.TOTALS_ROW)

    @property
    def item_rows(self) -> ItemRows:
        rows = self.section(SectionKind.ITEM_ROWS)
        return rows if rows is not None else ItemRows()
