"""
Data Models Package

Pydantic models for everything the editor works with and the stores persist.
"""

from hisaab.models.invoice import (
    Invoice,
    InvoiceItem,
    InvoiceStatus,
    PaidAmount,
    SessionUser,
    User,
)

__all__ = [
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "PaidAmount",
    "SessionUser",
    "User",
]
