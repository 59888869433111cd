# invoice_engine/domain/services/invoice_document.py
"""
Invoice document generation: the full pipeline in one call.

    classify -> aggregate -> plan -> assemble

The result carries the ordered pages plus everything presentation code needs
to pick tax columns (regime), show totals, and surface diagnostics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from invoice_engine.config.settings import default_layout_budgets
from invoice_engine.domain.errors import INDETERMINATE_TAX_CONTEXT, LAYOUT_DEGENERATE
from invoice_engine.domain.models.document import DocumentHeader, HsnSummaryRow, Page, TaxTotals
from invoice_engine.domain.models.invoice import (
    BankDetails,
    CompanyProfile,
    PartyProfile,
    ShippingAddress,
    TaxContext,
    TaxRegime,
    Transaction,
    TransactionType,
)
from invoice_engine.domain.models.layout import LayoutBudgets
from invoice_engine.domain.services.document_assembler import AggregateBundle, assemble
from invoice_engine.domain.services.formatting import FormattingPort, IndianFormatter
from invoice_engine.domain.services.hsn_aggregator import aggregate
from invoice_engine.domain.services.pagination_planner import PaginationPlanner
from invoice_engine.domain.services.tax_classifier import classify

logger = logging.getLogger("invoice_document")


@dataclass(frozen=True)
class InvoiceDocument:
    title: str
    pages: tuple[Page, ...]
    regime: TaxRegime
    totals: TaxTotals
    hsn_rows: tuple[HsnSummaryRow, ...]
    flags: tuple[str, ...] = ()

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def indeterminate(self) -> bool:
        return INDETERMINATE_TAX_CONTEXT in self.flags

    @property
    def degenerate(self) -> bool:
        return LAYOUT_DEGENERATE in self.flags


def document_title(transaction_type: TransactionType, regime: TaxRegime) -> str:
    if transaction_type is TransactionType.PROFORMA:
        return "PROFORMA INVOICE"
    if regime is not TaxRegime.NONE:
        return "TAX INVOICE"
    return "INVOICE"


def build_tax_context(
    transaction: Transaction,
    company: CompanyProfile,
    party: PartyProfile,
    shipping: Optional[ShippingAddress] = None,
    gst_enabled: Optional[bool] = None,
) -> TaxContext:
    """GST applies when the company is registered, unless told otherwise."""
    if gst_enabled is None:
        gst_enabled = bool((company.gstin or "").strip())
    return TaxContext(
        company_state=company.state,
        party_state=party.state,
        shipping_state=shipping.state if shipping else None,
        transaction_type=transaction.type,
        gst_enabled=gst_enabled,
    )


def build_header(
    title: str,
    transaction: Transaction,
    company: CompanyProfile,
    party: PartyProfile,
    shipping: Optional[ShippingAddress],
    ctx: TaxContext,
    formatter: FormattingPort,
) -> DocumentHeader:
    supply_state = ctx.place_of_supply
    supply_code = formatter.state_code(supply_state)
    if supply_state:
        place_of_supply = f"{supply_state} ({supply_code})" if supply_code != "-" else supply_state
    else:
        place_of_supply = "-"

    return DocumentHeader(
        title=title,
        company=company,
        party=party,
        shipping=shipping,
        invoice_number=transaction.invoice_number or "-",
        invoice_date=formatter.format_date(transaction.invoice_date),
        due_date=formatter.format_date(transaction.due_date),
        po_number=transaction.po_number or "-",
        eway_number=transaction.eway_number or "-",
        party_pan=(party.pan or "").strip().upper() or "-",
        company_state_code=formatter.state_code(company.state),
        party_state_code=formatter.state_code(party.state),
        place_of_supply=place_of_supply,
        company_phone=formatter.format_phone(company.phone),
        party_phone=formatter.format_phone(party.phone),
    )


def generate_invoice_document(
    transaction: Transaction,
    company: CompanyProfile,
    party: PartyProfile,
    shipping: Optional[ShippingAddress] = None,
    bank: Optional[BankDetails] = None,
    budgets: Optional[LayoutBudgets] = None,
    formatter: Optional[FormattingPort] = None,
    *,
    gst_enabled: Optional[bool] = None,
) -> InvoiceDocument:
    """Compute taxes, paginate and assemble the pages of one invoice.

    Raises ``ValidationError`` for malformed lines.  Missing state data and
    degenerate layout budgets are reported through ``flags``.
    """
    formatter = formatter or IndianFormatter()
    budgets = budgets or default_layout_budgets()

    ctx = build_tax_context(transaction, company, party, shipping, gst_enabled)
    computation = classify(transaction.line_items, ctx)
    hsn_rows = tuple(aggregate(computation.lines))

    pagination = PaginationPlanner(budgets).plan(
        computation.lines,
        tax_applies=computation.regime is not TaxRegime.NONE,
        notes=transaction.notes,
    )

    title = document_title(transaction.type, computation.regime)
    header = build_header(title, transaction, company, party, shipping, ctx, formatter)
    bundle = AggregateBundle(
        regime=computation.regime,
        totals=computation.totals,
        hsn_rows=hsn_rows,
        amount_in_words=formatter.number_to_words(computation.totals.total),
    )
    pages = assemble(
        pagination,
        header,
        bundle,
        notes=transaction.notes,
        bank=bank,
        show_bank=transaction.type is not TransactionType.PROFORMA,
    )

    flags = computation.flags + pagination.flags
    logger.info(
        "Generated %s %s: %d items, %d pages, regime=%s%s",
        title,
        header.invoice_number,
        computation.totals.item_count,
        len(pages),
        computation.regime.value,
        f", flags={list(flags)}" if flags else "",
    )
    return InvoiceDocument(
        title=title,
        pages=tuple(pages),
        regime=computation.regime,
        totals=computation.totals,
        hsn_rows=hsn_rows,
        flags=flags,
    )
