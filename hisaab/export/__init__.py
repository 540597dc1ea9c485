"""Document export package."""

from hisaab.export.pdf import InvoicePdfRenderer

__all__ = ["InvoicePdfRenderer"]
