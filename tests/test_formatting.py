"""Tests for Indian invoice formatting."""

from datetime import date
from decimal import Decimal

import pytest

from invoice_engine.domain.services.formatting import IndianFormatter


@pytest.fixture
def fmt() -> IndianFormatter:
    return IndianFormatter()


class TestCurrency:

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("0"), "0.00"),
            (Decimal("999.5"), "999.50"),
            (Decimal("1000"), "1,000.00"),
            (Decimal("123456.789"), "1,23,456.79"),
            (Decimal("12345678"), "1,23,45,678.00"),
            (Decimal("-1500"), "-1,500.00"),
        ],
    )
    def test_indian_grouping(self, fmt, amount, expected):
        assert fmt.format_currency(amount) == expected


class TestWords:

    def test_zero(self, fmt):
        assert fmt.number_to_words(Decimal("0")) == "Zero Rupees Only"

    def test_rupees_and_paise(self, fmt):
        words = fmt.number_to_words(Decimal("101.50"))
        assert words.startswith("One Hundred")
        assert "Rupees and Fifty Paise Only" in words

    def test_lakh(self, fmt):
        assert "Lakh" in fmt.number_to_words(Decimal("150000"))

    def test_paise_only(self, fmt):
        assert fmt.number_to_words(Decimal("0.25")) == "Twenty Five Paise Only"


class TestMisc:

    def test_quantity(self, fmt):
        assert fmt.format_quantity(None) == "-"
        assert fmt.format_quantity(Decimal("2.000"), "Nos") == "2 Nos"
        assert fmt.format_quantity(Decimal("2.50")) == "2.5"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("9876543210", "+91 98765 43210"),
            ("+91-98765-43210", "+91 98765 43210"),
            (" 12345 ", "12345"),
            ("", "-"),
            (None, "-"),
        ],
    )
    def test_phone(self, fmt, raw, expected):
        assert fmt.format_phone(raw) == expected

    @pytest.mark.parametrize(
        "state, code",
        [
            ("Telangana", "36"),
            ("andhra pradesh", "37"),
            ("Jammu & Kashmir", "01"),
            ("7", "07"),
            ("Atlantis", "-"),
            (None, "-"),
        ],
    )
    def test_state_code(self, fmt, state, code):
        assert fmt.state_code(state) == code

    def test_dates(self, fmt):
        assert fmt.format_date(date(2025, 3, 9)) == "09/03/2025"
        assert fmt.format_date("2025-03-09T10:00:00Z") == "09/03/2025"
        assert fmt.format_date(None) == "-"
