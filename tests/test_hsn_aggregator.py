"""Tests for the HSN/SAC-wise tax summary."""

from decimal import Decimal

from invoice_engine.domain.models.invoice import ItemType, LineItem
from invoice_engine.domain.services.hsn_aggregator import aggregate
from invoice_engine.domain.services.tax_classifier import classify


class TestHsnAggregation:

    def test_empty_input(self):
        assert aggregate([]) == []

    def test_groups_by_code_and_rate_in_first_seen_order(self, sample_items, intra_ctx):
        rows = aggregate(classify(sample_items, intra_ctx).lines)
        assert [(r.code, r.rate) for r in rows[:-1]] == [
            ("8471", Decimal("18")),
            ("998713", Decimal("18")),
            ("8544", Decimal("12")),
        ]

    def test_same_code_different_rate_kept_apart(self, intra_ctx):
        lines = [
            LineItem(code="1001", unit_price=Decimal("100"), gst_rate=Decimal("5")),
            LineItem(code="1001", unit_price=Decimal("100"), gst_rate=Decimal("12")),
        ]
        rows = aggregate(classify(lines, intra_ctx).lines)
        assert len(rows) == 3

    def test_grand_total_equals_document_totals(self, sample_items, inter_ctx):
        result = classify(sample_items, inter_ctx)
        rows = aggregate(result.lines)
        grand = rows[-1]
        assert grand.is_grand_total
        assert grand.code == "Total"
        assert grand.rate is None
        assert grand.taxable_value == result.totals.taxable_value
        assert grand.igst == result.totals.igst
        assert grand.total == result.totals.total
        assert sum(r.total for r in rows[:-1]) == grand.total

    def test_missing_code_grouped_under_dash(self, intra_ctx):
        lines = [
            LineItem(item_type=ItemType.SERVICE, unit_price=Decimal("10")),
            LineItem(item_type=ItemType.SERVICE, code="  ", unit_price=Decimal("20")),
        ]
        rows = aggregate(classify(lines, intra_ctx).lines)
        assert rows[0].code == "-"
        assert rows[0].taxable_value == Decimal("30.00")
        assert len(rows) == 2

    def test_two_codes_worked_example(self, intra_ctx):
        lines = [
            LineItem(code="A", unit_price=Decimal("100"), gst_rate=Decimal("18")),
            LineItem(code="B", unit_price=Decimal("200"), gst_rate=Decimal("12")),
            LineItem(code="A", unit_price=Decimal("50"), gst_rate=Decimal("18")),
        ]
        rows = aggregate(classify(lines, intra_ctx).lines)
        assert [(r.code, r.taxable_value) for r in rows] == [
            ("A", Decimal("150.00")),
            ("B", Decimal("200.00")),
            ("Total", Decimal("350.00")),
        ]
