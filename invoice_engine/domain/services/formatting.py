# invoice_engine/domain/services/formatting.py
"""
Formatting port consumed by the document engine.

The engine only depends on the ``FormattingPort`` protocol.  ``IndianFormatter``
is the default implementation: Indian digit grouping (12,34,567.89), amounts in
words via num2words (``en_IN``), GST state codes and DD/MM/YYYY dates.
Tests are free to pass a stub instead.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Protocol, Union

from num2words import num2words

PAISE = Decimal("0.01")

# GST state codes (first two digits of a GSTIN)
_STATE_CODES: dict[str, str] = {
    "jammu and kashmir": "01", "himachal pradesh": "02", "punjab": "03",
    "chandigarh": "04", "uttarakhand": "05", "haryana": "06",
    "delhi": "07", "rajasthan": "08", "uttar pradesh": "09",
    "bihar": "10", "sikkim": "11", "arunachal pradesh": "12",
    "nagaland": "13", "manipur": "14", "mizoram": "15",
    "tripura": "16", "meghalaya": "17", "assam": "18",
    "west bengal": "19", "jharkhand": "20", "odisha": "21",
    "chhattisgarh": "22", "madhya pradesh": "23", "gujarat": "24",
    "daman and diu": "25", "dadra and nagar haveli": "26",
    "dadra and nagar haveli and daman and diu": "26",
    "maharashtra": "27", "karnataka": "29", "goa": "30",
    "lakshadweep": "31", "kerala": "32", "tamil nadu": "33",
    "puducherry": "34", "andaman and nicobar islands": "35",
    "andaman and nicobar": "35", "telangana": "36",
    "andhra pradesh": "37", "ladakh": "38", "other territory": "97",
    # Common spellings
    "orissa": "21", "pondicherry": "34", "new delhi": "07",
    "nct of delhi": "07", "uttaranchal": "05",
}

Dateish = Union[date, datetime, str, None]


class FormattingPort(Protocol):
    def format_currency(self, amount: Decimal) -> str: ...

    def format_quantity(self, quantity: Optional[Decimal], unit: str = "") -> str: ...

    def number_to_words(self, amount: Decimal) -> str: ...

    def format_phone(self, phone: Optional[str]) -> str: ...

    def state_code(self, state_name: Optional[str]) -> str: ...

    def format_date(self, value: Dateish) -> str: ...


def _group_indian(digits: str) -> str:
    """Group an integer digit string the Indian way: 1234567 -> 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def _state_key(name: str) -> str:
    key = name.strip().lower().replace("&", " and ")
    return re.sub(r"\s+", " ", key).strip()


class IndianFormatter:
    """Default ``FormattingPort`` for Indian GST invoices."""

    def format_currency(self, amount: Decimal) -> str:
        value = _to_decimal(amount).quantize(PAISE, rounding=ROUND_HALF_UP)
        sign = "-" if value < 0 else ""
        whole, _, frac = f"{abs(value):.2f}".partition(".")
        return f"{sign}{_group_indian(whole)}.{frac}"

    def format_quantity(self, quantity: Optional[Decimal], unit: str = "") -> str:
        if quantity is None:
            return "-"
        value = _to_decimal(quantity)
        if value == value.to_integral_value():
            text = str(int(value))
        else:
            text = format(value.normalize(), "f")
        return f"{text} {unit}".strip() if unit else text

    def number_to_words(self, amount: Decimal) -> str:
        value = abs(_to_decimal(amount)).quantize(PAISE, rounding=ROUND_HALF_UP)
        rupees = int(value)
        paise = int((value - rupees) * 100)

        def _words(n: int) -> str:
            text = num2words(n, lang="en_IN")
            return text.replace("-", " ").replace(",", "").title()

        parts = []
        if rupees > 0:
            parts.append(f"{_words(rupees)} Rupees")
        if paise > 0:
            parts.append(f"{_words(paise)} Paise")
        if not parts:
            return "Zero Rupees Only"
        return " and ".join(parts) + " Only"

    def format_phone(self, phone: Optional[str]) -> str:
        if not phone or not phone.strip():
            return "-"
        digits = re.sub(r"\D", "", phone)
        if len(digits) == 12 and digits.startswith("91"):
            digits = digits[2:]
        if len(digits) == 10:
            return f"+91 {digits[:5]} {digits[5:]}"
        return phone.strip()

    def state_code(self, state_name: Optional[str]) -> str:
        if not state_name or not state_name.strip():
            return "-"
        raw = state_name.strip()
        if raw.isdigit() and len(raw) <= 2:
            return raw.zfill(2)
        return _STATE_CODES.get(_state_key(raw), "-")

    def format_date(self, value: Dateish) -> str:
        if value is None or value == "":
            return "-"
        if isinstance(value, str):
            try:
                value = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return value
        return value.strftime("%d/%m/%Y")
