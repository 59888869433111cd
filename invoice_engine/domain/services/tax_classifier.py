# invoice_engine/domain/services/tax_classifier.py
"""
GST regime selection and per-line tax computation.

One regime applies to the whole document:
  - NONE       GST disabled for the company, or a non-supply voucher
               (receipt / payment / journal)
  - CGST_SGST  place of supply is in the company's state (intra-state);
               each half-rate component is levied separately
  - IGST       place of supply is in another state (inter-state)

Missing state data does not fail the call: the regime defaults to CGST_SGST
and the result carries the ``indeterminate_tax_context`` flag.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from invoice_engine.domain.errors import INDETERMINATE_TAX_CONTEXT, ValidationError
from invoice_engine.domain.models.document import TaxTotals
from invoice_engine.domain.models.invoice import (
    ComputedLine,
    ItemType,
    LineItem,
    TaxContext,
    TaxRegime,
    TransactionType,
)

logger = logging.getLogger("tax_classifier")

ZERO = Decimal("0")
ONE = Decimal("1")
TWO = Decimal("2")
HUNDRED = Decimal("100")
PAISE = Decimal("0.01")

# Tolerance when comparing document totals against recomputed sums
ROUNDING_EPSILON = Decimal("0.01")

_NON_SUPPLY_TYPES = frozenset(
    {TransactionType.RECEIPT, TransactionType.PAYMENT, TransactionType.JOURNAL}
)

_NUMERIC_FIELDS = ("quantity", "unit_price", "override_amount", "gst_rate")


@dataclass(frozen=True)
class TaxComputation:
    """Result of classifying one document's lines."""
    lines: tuple[ComputedLine, ...]
    regime: TaxRegime
    totals: TaxTotals
    indeterminate: bool = False
    flags: tuple[str, ...] = ()


def _q(value: Decimal) -> Decimal:
    return value.quantize(PAISE, rounding=ROUND_HALF_UP)


def normalize_state(name: Optional[str]) -> str:
    """Trim, case-fold and collapse inner whitespace. No fuzzy matching."""
    if not name:
        return ""
    return re.sub(r"\s+", " ", name.strip()).casefold()


def select_regime(ctx: TaxContext) -> tuple[TaxRegime, bool]:
    """Return ``(regime, indeterminate)`` for a tax context."""
    if not ctx.gst_enabled or ctx.transaction_type in _NON_SUPPLY_TYPES:
        return TaxRegime.NONE, False

    company_state = normalize_state(ctx.company_state)
    supply_state = normalize_state(ctx.place_of_supply)
    if not company_state or not supply_state:
        return TaxRegime.CGST_SGST, True

    if company_state == supply_state:
        return TaxRegime.CGST_SGST, False
    return TaxRegime.IGST, False


def _coerce_line(index: int, raw: Union[LineItem, Mapping[str, Any]]) -> LineItem:
    if isinstance(raw, LineItem):
        return raw
    if isinstance(raw, Mapping):
        try:
            return LineItem.model_validate(raw)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            loc = first.get("loc") or ("line",)
            raise ValidationError(index, str(loc[0]), first.get("msg", "")) from exc
    raise ValidationError(index, "line", f"unsupported type {type(raw).__name__}")


def _validate_line(index: int, item: LineItem) -> None:
    for name in _NUMERIC_FIELDS:
        value = getattr(item, name)
        if value is None:
            continue
        if not value.is_finite():
            raise ValidationError(index, name, "must be a finite number")
        if value < 0:
            raise ValidationError(index, name, "must not be negative")


def compute_line(item: LineItem, regime: TaxRegime) -> ComputedLine:
    """Resolve taxable value and tax components of a single line."""
    quantity = item.quantity if item.quantity is not None else ONE
    if item.override_amount is not None:
        taxable = _q(item.override_amount)
    else:
        taxable = _q(quantity * item.unit_price)

    cgst = sgst = igst = ZERO
    if regime is TaxRegime.IGST:
        igst = _q(taxable * item.gst_rate / HUNDRED)
    elif regime is TaxRegime.CGST_SGST:
        cgst = sgst = _q(taxable * (item.gst_rate / TWO) / HUNDRED)

    return ComputedLine(
        **item.model_dump(include=set(LineItem.model_fields)),
        taxable_value=taxable,
        cgst=cgst,
        sgst=sgst,
        igst=igst,
        total=taxable + cgst + sgst + igst,
    )


def summarize(lines: Iterable[ComputedLine]) -> TaxTotals:
    taxable = cgst = sgst = igst = total = quantity = ZERO
    count = 0
    for line in lines:
        count += 1
        taxable += line.taxable_value
        cgst += line.cgst
        sgst += line.sgst
        igst += line.igst
        total += line.total
        if line.item_type is ItemType.PRODUCT and line.quantity is not None:
            quantity += line.quantity
    return TaxTotals(
        taxable_value=taxable,
        cgst=cgst,
        sgst=sgst,
        igst=igst,
        total=total,
        item_count=count,
        total_quantity=quantity,
    )


def classify(
    lines: Iterable[Union[LineItem, Mapping[str, Any]]],
    ctx: TaxContext,
) -> TaxComputation:
    """Compute every line's GST components under a single document regime.

    Raises ``ValidationError`` (naming the line index) before any line is
    computed if one of them is malformed.
    """
    items = [_coerce_line(i, raw) for i, raw in enumerate(lines)]
    for i, item in enumerate(items):
        _validate_line(i, item)

    regime, indeterminate = select_regime(ctx)
    flags: tuple[str, ...] = ()
    if indeterminate:
        flags = (INDETERMINATE_TAX_CONTEXT,)
        logger.warning(
            "Tax context indeterminate (company_state=%r, place_of_supply=%r); "
            "defaulting to CGST+SGST",
            ctx.company_state,
            ctx.place_of_supply,
        )

    computed = tuple(compute_line(item, regime) for item in items)
    totals = summarize(computed)

    logger.debug(
        "Classified %d lines under %s: taxable=%s tax=%s total=%s",
        totals.item_count, regime.value, totals.taxable_value,
        totals.tax_amount, totals.total,
    )
    return TaxComputation(
        lines=computed,
        regime=regime,
        totals=totals,
        indeterminate=indeterminate,
        flags=flags,
    )
