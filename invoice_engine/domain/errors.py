# invoice_engine/domain/errors.py
"""
Exception taxonomy and diagnostic flags for the invoice document engine.

Fatal conditions are exceptions.  Recoverable ones (missing state data,
degenerate layout budgets) are reported as string flags on the result
objects so the presentation layer can decide whether to warn the user.
"""

from __future__ import annotations

INDETERMINATE_TAX_CONTEXT = "indeterminate_tax_context"
LAYOUT_DEGENERATE = "layout_degenerate"


class InvoiceEngineError(Exception):
    """Base class for every error raised by the engine."""


class ValidationError(InvoiceEngineError):
    """A line item is malformed (negative or non-finite numbers, bad shape)."""

    def __init__(self, line_index: int, field: str, message: str = ""):
        self.line_index = line_index
        self.field = field
        detail = message or "invalid value"
        super().__init__(f"Line {line_index}: {field}: {detail}")


class AssemblyContractViolation(InvoiceEngineError):
    """The page plan and the aggregate bundle passed to the assembler disagree."""

    def __init__(self, field: str, message: str = ""):
        self.field = field
        super().__init__(f"{field}: {message}" if message else field)
