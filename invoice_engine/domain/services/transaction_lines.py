# invoice_engine/domain/services/transaction_lines.py
"""
Normalize a raw backend transaction into engine ``LineItem`` records.

Backend transactions carry lines in several shapes:
  - legacy ``items[]`` entries with a ``product``
  - ``products[]`` entries, ``product`` either an id or a nested object
  - ``services[]`` (or ``service[]``) entries, ``service`` either an id,
    a name or a nested object
When none of them is present, a single service line is built from the
transaction-level ``amount`` / ``gstPercentage`` / ``description``.
``transaction_from_backend`` adds the header fields (number, dates, PO,
e-way bill, notes).

Unparseable numbers fall back to zero here; range validation happens in the
tax classifier.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence

from invoice_engine.domain.models.invoice import ItemType, LineItem, Transaction, TransactionType

ZERO = Decimal("0")


def _num(value: Any, default: Decimal = ZERO) -> Decimal:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return default
    try:
        parsed = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default
    return parsed if parsed.is_finite() else default


def _first(*values: Any) -> Any:
    for v in values:
        if v is not None and v != "":
            return v
    return None


def _nested(row: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = row.get(key)
    return value if isinstance(value, Mapping) else {}


def _master_code(entry_id: Any, master: Sequence[Mapping[str, Any]], keys: tuple[str, str]) -> Optional[str]:
    if entry_id is None or entry_id == "":
        return None
    for entry in master:
        if entry and entry.get("_id") is not None and str(entry["_id"]) == str(entry_id):
            return _first(entry.get(keys[0]), entry.get(keys[1]))
    return None


def _build_line(
    row: Mapping[str, Any],
    item_type: ItemType,
    service_names: Mapping[str, str],
    products: Sequence[Mapping[str, Any]],
    services: Sequence[Mapping[str, Any]],
) -> LineItem:
    is_service = item_type is ItemType.SERVICE
    product = _nested(row, "product")
    service = _nested(row, "service")

    name = _first(row.get("name"), row.get("productName"), product.get("name"))
    if name is None and is_service:
        raw_service = row.get("service")
        looked_up = None
        if raw_service is not None and not isinstance(raw_service, Mapping):
            looked_up = service_names.get(str(raw_service))
        name = _first(row.get("serviceName"), service.get("serviceName"), looked_up)

    quantity = None if is_service else _first(row.get("quantity"))
    qty = _num(quantity) if quantity is not None else None

    explicit_amount = _num(row.get("amount"))
    price = _num(row.get("pricePerUnit"))
    amount = explicit_amount or price * (qty or Decimal("1"))
    if not price:
        price = amount / qty if qty else amount

    if is_service:
        service_ref = service.get("_id") if service else row.get("service")
        code = _first(
            row.get("sac"),
            row.get("sacCode"),
            service.get("sac"),
            service.get("sacCode"),
            _master_code(service_ref, services, ("sac", "sacCode")),
        )
    else:
        product_ref = product.get("_id") if product else _first(row.get("product"), row.get("productId"))
        code = _first(
            row.get("hsn"),
            row.get("hsnCode"),
            product.get("hsn"),
            product.get("hsnCode"),
            _master_code(product_ref, products, ("hsn", "hsnCode")),
        )

    override = None
    if is_service or (explicit_amount and explicit_amount != price * (qty or Decimal("1"))):
        override = amount

    return LineItem(
        item_type=item_type,
        name=str(name) if name is not None else "Item",
        description=str(row.get("description") or ""),
        code=str(code) if code is not None else None,
        quantity=qty,
        unit=str(_first(row.get("unitType"), row.get("unit"), row.get("unitName")) or ""),
        unit_price=price,
        gst_rate=_num(row.get("gstPercentage")),
        override_amount=override,
    )


def line_items_from_transaction(
    tx: Mapping[str, Any],
    service_names: Optional[Mapping[str, str]] = None,
    products: Sequence[Mapping[str, Any]] = (),
    services: Sequence[Mapping[str, Any]] = (),
) -> list[LineItem]:
    """Build engine line items from every line shape a transaction may carry."""
    if not isinstance(tx, Mapping):
        return []
    service_names = service_names or {}
    out: list[LineItem] = []

    for row in tx.get("items") or []:
        if row and row.get("product"):
            out.append(_build_line(row, ItemType.PRODUCT, service_names, products, services))

    for row in tx.get("products") or []:
        if row:
            out.append(_build_line(row, ItemType.PRODUCT, service_names, products, services))

    service_rows = tx.get("service") if isinstance(tx.get("service"), list) else tx.get("services")
    for row in service_rows or []:
        if row:
            out.append(_build_line(row, ItemType.SERVICE, service_names, products, services))

    if not out:
        amount = _num(tx.get("amount"))
        out.append(
            LineItem(
                item_type=ItemType.SERVICE,
                name=str(tx.get("description") or "Item"),
                unit_price=amount,
                gst_rate=_num(tx.get("gstPercentage")),
                override_amount=amount,
            )
        )
    return out


def _text(value: Any) -> Optional[str]:
    value = _first(value)
    return str(value) if value is not None else None


def _date_part(value: Any) -> Any:
    # ISO timestamps ("2025-01-15T10:00:00.000Z") keep their date part;
    # anything else is left for model validation
    if isinstance(value, str):
        return value[:10] or None
    return value


def transaction_from_backend(
    tx: Mapping[str, Any],
    service_names: Optional[Mapping[str, str]] = None,
    products: Sequence[Mapping[str, Any]] = (),
    services: Sequence[Mapping[str, Any]] = (),
) -> Transaction:
    """Build a ``Transaction`` (header fields plus line items) from a backend record."""
    return Transaction(
        type=tx.get("type") or TransactionType.SALES,
        invoice_number=_text(tx.get("invoiceNumber")),
        po_number=_text(tx.get("poNumber")),
        eway_number=_text(tx.get("ewayNumber")),
        invoice_date=_date_part(tx.get("date")),
        due_date=_date_part(tx.get("dueDate")),
        notes=str(tx.get("notes") or ""),
        line_items=line_items_from_transaction(tx, service_names, products, services),
    )
