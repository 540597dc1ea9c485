"""
In-Memory Storage

Dict-backed implementations of the storage interfaces. Used by the
tests and anywhere a throwaway store is enough.

Records are copied on the way in and on the way out, so callers
editing an invoice in memory never change what is stored until
they save.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog

from hisaab.models.invoice import Invoice, User
from hisaab.services.storage.interface import (
    InvoiceStorageInterface,
    UserStorageInterface,
)


logger = structlog.get_logger(__name__)


class InMemoryInvoiceStorage(InvoiceStorageInterface):
    """Invoices in a dict keyed by id, in insertion order."""

    def __init__(self, invoices: Optional[list[Invoice]] = None):
        self._invoices: dict[str, Invoice] = {}
        for invoice in invoices or []:
            self._invoices[invoice.id] = invoice.model_copy(deep=True)

    def list_by_owner(self, user_id: str) -> list[Invoice]:
        return [
            invoice.model_copy(deep=True)
            for invoice in self._invoices.values()
            if invoice.user_id == user_id
        ]

    def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        invoice = self._invoices.get(invoice_id)
        return invoice.model_copy(deep=True) if invoice else None

    def save(self, invoice: Invoice) -> Invoice:
        stored = invoice.model_copy(deep=True).recalculate()
        stored.updated_at = datetime.now(timezone.utc)
        # Reassigning an existing key keeps its position
        self._invoices[stored.id] = stored
        logger.debug("invoice_stored", invoice_id=stored.id, backend="memory")
        return stored.model_copy(deep=True)

    def delete(self, invoice_id: str) -> bool:
        return self._invoices.pop(invoice_id, None) is not None


class InMemoryUserStorage(UserStorageInterface):
    """Users in a dict keyed by username."""

    def __init__(self):
        self._users: dict[str, User] = {}

    def get_user(self, username: str) -> Optional[User]:
        user = self._users.get(username)
        return user.model_copy() if user else None

    def add_user(self, user: User) -> None:
        self._users[user.username] = user.model_copy()
