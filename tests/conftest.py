"""Shared test fixtures for the invoice engine test suite."""

from decimal import Decimal

import pytest

from invoice_engine.domain.models.invoice import (
    BankDetails,
    CompanyProfile,
    ComputedLine,
    ItemType,
    LineItem,
    PartyProfile,
    TaxContext,
    Transaction,
)
from invoice_engine.domain.models.layout import LayoutBudgets


def make_line(name: str = "Item", height_words: int = 0, **kwargs) -> ComputedLine:
    """A computed line with zero tax; ``height_words`` lengthens the name."""
    if height_words:
        name = " ".join(["word"] * height_words)
    return ComputedLine(
        name=name,
        unit_price=Decimal("10"),
        quantity=Decimal("1"),
        taxable_value=Decimal("10"),
        total=Decimal("10"),
        **kwargs,
    )


@pytest.fixture
def budgets() -> LayoutBudgets:
    """Budgets with an item area of 720pt: 40 single-line rows (18pt each).

    With tax the last page keeps 380pt (21 rows); without tax 480pt (26 rows).
    """
    return LayoutBudgets(
        page_usable_height=870.0,
        header_height=115.0,
        table_header_height=35.0,
        name_column_width=180.0,
    )


@pytest.fixture
def company() -> CompanyProfile:
    return CompanyProfile(
        name="ABC Traders Pvt Ltd",
        address="Banjara Hills, Hyderabad",
        state="Telangana",
        gstin="36AABCU9603R1ZM",
        phone="9876543210",
    )


@pytest.fixture
def local_party() -> PartyProfile:
    return PartyProfile(name="Local Stores", billing_address="Secunderabad", state="Telangana")


@pytest.fixture
def remote_party() -> PartyProfile:
    return PartyProfile(
        name="XYZ Enterprises",
        billing_address="Andheri, Mumbai",
        state="Maharashtra",
        gstin="27AADCB2230M1ZP",
    )


@pytest.fixture
def bank() -> BankDetails:
    return BankDetails(bank_name="State Bank of India", account_number="12345678901", ifsc_code="SBIN0000123")


@pytest.fixture
def intra_ctx() -> TaxContext:
    return TaxContext(company_state="Telangana", party_state="Telangana")


@pytest.fixture
def inter_ctx() -> TaxContext:
    return TaxContext(company_state="Telangana", party_state="Maharashtra")


@pytest.fixture
def sample_items() -> list[LineItem]:
    return [
        LineItem(name="Laptop", code="8471", quantity=Decimal("2"), unit="Nos",
                 unit_price=Decimal("45000"), gst_rate=Decimal("18")),
        LineItem(name="Mouse", code="8471", quantity=Decimal("3"), unit="Nos",
                 unit_price=Decimal("333.33"), gst_rate=Decimal("18")),
        LineItem(item_type=ItemType.SERVICE, name="Installation", code="998713",
                 unit_price=Decimal("1500"), gst_rate=Decimal("18")),
        LineItem(name="Cable", code="8544", quantity=Decimal("5"), unit="Mtr",
                 unit_price=Decimal("49.99"), gst_rate=Decimal("12")),
    ]


@pytest.fixture
def sales_transaction(sample_items) -> Transaction:
    return Transaction(invoice_number="INV-2025-001", line_items=sample_items)


@pytest.fixture
def line_factory():
    return make_line
