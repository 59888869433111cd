# invoice_engine/domain/models/invoice.py
"""
Input records for invoice document generation.

All models are frozen: the engine never mutates what the caller hands in.
Numeric line fields are not range-checked here; the tax classifier does that
so it can name the offending line index.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemType(str, Enum):
    PRODUCT = "product"
    SERVICE = "service"


class TransactionType(str, Enum):
    SALES = "sales"
    PURCHASE = "purchase"
    PROFORMA = "proforma"
    RECEIPT = "receipt"
    PAYMENT = "payment"
    JOURNAL = "journal"


class TaxRegime(str, Enum):
    IGST = "igst"
    CGST_SGST = "cgst_sgst"
    NONE = "none"


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_type: ItemType = ItemType.PRODUCT
    name: str = "Item"
    description: str = ""
    code: Optional[str] = Field(None, description="HSN (goods) or SAC (services)")
    quantity: Optional[Decimal] = Field(None, description="Products only; missing counts as 1")
    unit: str = ""
    unit_price: Decimal = Decimal("0")
    gst_rate: Decimal = Field(Decimal("0"), description="Percent, e.g. 18")
    override_amount: Optional[Decimal] = Field(
        None, description="Taxable value used instead of quantity x price"
    )


class ComputedLine(LineItem):
    """A line item with its taxable value and tax components resolved."""

    taxable_value: Decimal
    cgst: Decimal = Decimal("0")
    sgst: Decimal = Decimal("0")
    igst: Decimal = Decimal("0")
    total: Decimal


class TaxContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    company_state: Optional[str] = None
    party_state: Optional[str] = None
    shipping_state: Optional[str] = None
    transaction_type: TransactionType = TransactionType.SALES
    gst_enabled: bool = True

    @property
    def place_of_supply(self) -> Optional[str]:
        """Shipping state wins over the party's billing state when present."""
        if self.shipping_state and self.shipping_state.strip():
            return self.shipping_state
        return self.party_state


class CompanyProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    address: str = ""
    state: Optional[str] = None
    gstin: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class PartyProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    billing_address: str = ""
    state: Optional[str] = None
    gstin: Optional[str] = None
    pan: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class ShippingAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str = ""
    address: str = ""
    state: Optional[str] = None


class BankDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    bank_name: Optional[str] = None
    branch_address: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    upi_id: Optional[str] = None
    upi_name: Optional[str] = None
    upi_mobile: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return any(
            (v or "").strip()
            for v in (
                self.bank_name,
                self.branch_address,
                self.account_number,
                self.ifsc_code,
                self.upi_id,
            )
        )


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: TransactionType = TransactionType.SALES
    invoice_number: Optional[str] = None
    po_number: Optional[str] = None
    eway_number: Optional[str] = Field(None, description="E-way bill number")
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: str = ""
    line_items: list[LineItem] = Field(default_factory=list)
