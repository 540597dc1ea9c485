"""Invoice editing package."""

from hisaab.invoices.service import (
    InvoiceError,
    InvoiceNotFoundError,
    InvoiceService,
    InvoiceValidationError,
)

__all__ = [
    "InvoiceError",
    "InvoiceNotFoundError",
    "InvoiceService",
    "InvoiceValidationError",
]
