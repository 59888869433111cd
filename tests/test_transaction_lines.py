"""Tests for normalizing backend transactions into line items."""

from datetime import date
from decimal import Decimal

import pydantic
import pytest

from invoice_engine.domain.models.invoice import ItemType, TransactionType
from invoice_engine.domain.services.transaction_lines import (
    line_items_from_transaction,
    transaction_from_backend,
)


class TestProductRows:

    def test_products_with_nested_product(self):
        tx = {
            "products": [
                {
                    "product": {"_id": "p1", "name": "Laptop", "hsn": "8471"},
                    "quantity": 2,
                    "unitType": "Nos",
                    "pricePerUnit": "45000",
                    "gstPercentage": 18,
                }
            ]
        }
        (line,) = line_items_from_transaction(tx)
        assert line.item_type is ItemType.PRODUCT
        assert line.name == "Laptop"
        assert line.code == "8471"
        assert line.quantity == Decimal("2")
        assert line.unit == "Nos"
        assert line.unit_price == Decimal("45000")
        assert line.gst_rate == Decimal("18")
        assert line.override_amount is None

    def test_hsn_from_master_list(self):
        tx = {"products": [{"product": "p1", "productName": "Mouse", "quantity": 1, "pricePerUnit": 300}]}
        (line,) = line_items_from_transaction(tx, products=[{"_id": "p2", "hsn": "0000"}, {"_id": "p1", "hsnCode": "8471"}])
        assert line.code == "8471"

    def test_legacy_items_need_a_product(self):
        tx = {"items": [{"product": "p1", "productName": "Pen", "quantity": 3, "pricePerUnit": 10}, {"quantity": 5}]}
        lines = line_items_from_transaction(tx)
        assert [line.name for line in lines] == ["Pen"]

    def test_explicit_amount_differing_from_price_becomes_override(self):
        tx = {"products": [{"productName": "Box", "quantity": 2, "pricePerUnit": 100, "amount": 180}]}
        (line,) = line_items_from_transaction(tx)
        assert line.override_amount == Decimal("180")

    def test_matching_amount_is_not_an_override(self):
        tx = {"products": [{"productName": "Box", "quantity": 2, "pricePerUnit": 100, "amount": 200}]}
        (line,) = line_items_from_transaction(tx)
        assert line.override_amount is None

    def test_price_derived_from_amount(self):
        tx = {"products": [{"productName": "Box", "quantity": 4, "amount": 100}]}
        (line,) = line_items_from_transaction(tx)
        assert line.unit_price == Decimal("25")

    def test_unparseable_numbers_become_zero(self):
        tx = {"products": [{"productName": "Box", "quantity": 1, "pricePerUnit": "abc", "gstPercentage": "NaN"}]}
        (line,) = line_items_from_transaction(tx)
        assert line.unit_price == Decimal("0")
        assert line.gst_rate == Decimal("0")

    def test_missing_name_defaults(self):
        (line,) = line_items_from_transaction({"products": [{"quantity": 1}]})
        assert line.name == "Item"


class TestServiceRows:

    def test_service_by_id(self):
        tx = {"services": [{"service": "s1", "amount": 500, "gstPercentage": 18, "description": "Monthly"}]}
        (line,) = line_items_from_transaction(
            tx,
            service_names={"s1": "Consulting"},
            services=[{"_id": "s1", "sac": "998311"}],
        )
        assert line.item_type is ItemType.SERVICE
        assert line.name == "Consulting"
        assert line.code == "998311"
        assert line.quantity is None
        assert line.override_amount == Decimal("500")
        assert line.description == "Monthly"

    def test_singular_service_key(self):
        tx = {"service": [{"serviceName": "Audit", "amount": 1000}]}
        (line,) = line_items_from_transaction(tx)
        assert line.name == "Audit"
        assert line.override_amount == Decimal("1000")

    def test_nested_service(self):
        tx = {"services": [{"service": {"_id": "s9", "serviceName": "Repair", "sacCode": "998719"}, "amount": 50}]}
        (line,) = line_items_from_transaction(tx)
        assert (line.name, line.code) == ("Repair", "998719")


class TestFallbacks:

    def test_order_products_then_services(self):
        tx = {
            "services": [{"serviceName": "Setup", "amount": 100}],
            "products": [{"productName": "Router", "quantity": 1, "pricePerUnit": 2000}],
        }
        assert [line.name for line in line_items_from_transaction(tx)] == ["Router", "Setup"]

    def test_transaction_level_amount(self):
        tx = {"amount": 750, "gstPercentage": 5, "description": "Freight"}
        (line,) = line_items_from_transaction(tx)
        assert line.item_type is ItemType.SERVICE
        assert line.name == "Freight"
        assert line.override_amount == Decimal("750")
        assert line.gst_rate == Decimal("5")

    def test_not_a_mapping(self):
        assert line_items_from_transaction(None) == []


class TestTransactionFromBackend:

    def test_header_fields(self):
        tx = {
            "type": "proforma",
            "invoiceNumber": 1042,
            "poNumber": "PO-77",
            "ewayNumber": "331000123456",
            "date": "2025-01-15T10:30:00.000Z",
            "dueDate": "2025-02-14",
            "notes": "Net 30",
            "products": [{"productName": "Router", "quantity": 1, "pricePerUnit": 2000}],
        }
        result = transaction_from_backend(tx)
        assert result.type is TransactionType.PROFORMA
        assert result.invoice_number == "1042"
        assert result.po_number == "PO-77"
        assert result.eway_number == "331000123456"
        assert result.invoice_date == date(2025, 1, 15)
        assert result.due_date == date(2025, 2, 14)
        assert result.notes == "Net 30"
        assert [line.name for line in result.line_items] == ["Router"]

    def test_defaults(self):
        result = transaction_from_backend({"date": "", "dueDate": None})
        assert result.type is TransactionType.SALES
        assert result.invoice_number is None
        assert result.eway_number is None
        assert result.invoice_date is None
        assert result.due_date is None
        assert result.notes == ""

    def test_service_names_resolve(self):
        tx = {"services": [{"service": "s1", "amount": 500}]}
        result = transaction_from_backend(tx, service_names={"s1": "Installation"})
        assert result.line_items[0].name == "Installation"

    def test_non_string_date_fails_validation(self):
        with pytest.raises(pydantic.ValidationError):
            transaction_from_backend({"date": [2025, 1, 15]})
