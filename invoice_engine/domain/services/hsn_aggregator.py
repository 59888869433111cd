# invoice_engine/domain/services/hsn_aggregator.py
"""
HSN/SAC-wise tax summary.

Rows follow the order in which each (code, rate) pair is first seen, then a
single grand-total row whose code is the literal "Total".
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from invoice_engine.domain.models.document import GRAND_TOTAL_CODE, HsnSummaryRow
from invoice_engine.domain.models.invoice import ComputedLine

ZERO = Decimal("0")
MISSING_CODE = "-"


def _group_key(line: ComputedLine) -> tuple[str, Decimal]:
    code = (line.code or "").strip() or MISSING_CODE
    return code, line.gst_rate


def aggregate(lines: Iterable[ComputedLine]) -> list[HsnSummaryRow]:
    # dicts keep insertion order, which gives first-seen ordering
    groups: dict[tuple[str, Decimal], list[Decimal]] = {}
    for line in lines:
        sums = groups.setdefault(_group_key(line), [ZERO] * 5)
        sums[0] += line.taxable_value
        sums[1] += line.cgst
        sums[2] += line.sgst
        sums[3] += line.igst
        sums[4] += line.total

    if not groups:
        return []

    rows = [
        HsnSummaryRow(
            code=code,
            rate=rate,
            taxable_value=s[0],
            cgst=s[1],
            sgst=s[2],
            igst=s[3],
            total=s[4],
        )
        for (code, rate), s in groups.items()
    ]
    rows.append(
        HsnSummaryRow(
            code=GRAND_TOTAL_CODE,
            rate=None,
            taxable_value=sum((r.taxable_value for r in rows), ZERO),
            cgst=sum((r.cgst for r in rows), ZERO),
            sgst=sum((r.sgst for r in rows), ZERO),
            igst=sum((r.igst for r in rows), ZERO),
            total=sum((r.total for r in rows), ZERO),
            is_grand_total=True,
        )
    )
    return rows
