# scripts/render_invoice.py
#
# Render an invoice PDF from a JSON payload:
#   python scripts/render_invoice.py payload.json out.pdf [--mono]
#
# Payload keys: "transaction" (backend shape with items/products/services),
# "company", "party", optional "shipping", "bank", "products", "services"
# and "serviceNames" (service id -> name).

import json
import os
import sys
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

# Ensure project root (the folder containing 'invoice_engine') is on sys.path
CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from invoice_engine.core.logging_config import setup_logging
from invoice_engine.domain.errors import InvoiceEngineError
from invoice_engine.domain.models.invoice import (
    BankDetails,
    CompanyProfile,
    PartyProfile,
    ShippingAddress,
)
from invoice_engine.domain.services.invoice_document import generate_invoice_document
from invoice_engine.domain.services.invoice_pdf import CLASSIC_STYLE, MONO_STYLE, render_invoice_pdf
from invoice_engine.domain.services.transaction_lines import transaction_from_backend


def load_payload(path: str) -> dict:
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def render(payload: dict, out_path: str, mono: bool = False) -> int:
    transaction = transaction_from_backend(
        payload.get("transaction") or {},
        service_names=payload.get("serviceNames") or {},
        products=payload.get("products") or (),
        services=payload.get("services") or (),
    )
    shipping = payload.get("shipping")
    bank = payload.get("bank")

    document = generate_invoice_document(
        transaction,
        CompanyProfile(**(payload.get("company") or {})),
        PartyProfile(**(payload.get("party") or {})),
        shipping=ShippingAddress(**shipping) if shipping else None,
        bank=BankDetails(**bank) if bank else None,
    )
    for flag in document.flags:
        logger.warning(f"Document flag: {flag}")

    pdf = render_invoice_pdf(document, style=MONO_STYLE if mono else CLASSIC_STYLE)
    with open(out_path, "wb") as fh:
        fh.write(pdf)
    logger.success(f"Wrote {out_path}: {document.page_count} page(s), total {document.totals.total}")
    return 0


def main(argv: list[str]) -> int:
    args = [a for a in argv if not a.startswith("--")]
    if len(args) != 2:
        logger.error("usage: render_invoice.py payload.json out.pdf [--mono]")
        return 2
    setup_logging()
    try:
        return render(load_payload(args[0]), args[1], mono="--mono" in argv)
    except (InvoiceEngineError, PydanticValidationError) as exc:
        logger.error(f"Invoice generation failed: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
