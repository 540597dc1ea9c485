"""
Invoice Editing Service

This module holds the editor and dashboard flows:
1. Open an invoice (blank for a new one, ownership-checked for an existing one)
2. Edit rows and payments in memory, repricing on every change
3. Save the whole record on an explicit save
4. List, toggle status and delete from the dashboard

DESIGN DECISION: The service enforces the boundaries the UI relies on:
- An invoice owned by someone else is reported as not found
- Nothing is persisted until save_invoice() is called
- Aggregates are recomputed before every save, never trusted
"""

from datetime import date
from typing import Any, Optional

import structlog

from hisaab.models.invoice import (
    Invoice,
    InvoiceItem,
    PaidAmount,
    SessionUser,
)
from hisaab.services.storage import InvoiceStorageInterface


logger = structlog.get_logger(__name__)


class InvoiceError(Exception):
    """Base exception for invoice operations."""
    pass


class InvoiceNotFoundError(InvoiceError):
    """No invoice with that id belongs to the current user."""
    pass


class InvoiceValidationError(InvoiceError):
    """The invoice is missing something required before it can be saved."""
    pass


PAYMENT_FIELDS = frozenset({"narration", "amount"})


class InvoiceService:
    """
    Editor and dashboard operations over an invoice store.

    Row and payment operations change the invoice passed in, recompute
    its aggregates and return it. Only save_invoice(), toggle_status()
    and delete_invoice() touch storage.
    """

    def __init__(self, storage: InvoiceStorageInterface):
        self._storage = storage

    # -------------------------------------------------------------------------
    # Opening and listing
    # -------------------------------------------------------------------------

    def new_invoice(
        self,
        user: SessionUser,
        name: str = "",
        invoice_date: Optional[date] = None,
    ) -> Invoice:
        """Unsaved invoice for this user, starting with one blank row."""
        return Invoice(
            user_id=user.username,
            name=name,
            invoice_date=invoice_date or date.today(),
            items=[InvoiceItem()],
        )

    def load_invoice(self, invoice_id: str, user: SessionUser) -> Invoice:
        """
        Load an invoice the user owns.

        Raises:
            InvoiceNotFoundError: If missing or owned by another user
        """
        invoice = self._storage.get_by_id(invoice_id)
        if invoice is None or invoice.user_id != user.username:
            logger.info(
                "invoice_not_found",
                invoice_id=invoice_id,
                username=user.username,
                exists=invoice is not None,
            )
            raise InvoiceNotFoundError("Invoice not found")
        return invoice

    def open_invoice(self, invoice_id: Optional[str], user: SessionUser) -> Invoice:
        """New invoice when no id is given, else the user's stored one."""
        if invoice_id is None:
            return self.new_invoice(user)
        return self.load_invoice(invoice_id, user)

    def list_invoices(
        self,
        user: SessionUser,
        search: Optional[str] = None,
    ) -> list[Invoice]:
        """
        The user's invoices, newest date first.

        Args:
            search: Case-insensitive substring to match against the name
        """
        invoices = self._storage.list_by_owner(user.username)
        if search and search.strip():
            needle = search.strip().lower()
            invoices = [inv for inv in invoices if needle in inv.name.lower()]
        invoices.sort(key=lambda inv: inv.invoice_date, reverse=True)
        return invoices

    # -------------------------------------------------------------------------
    # Rows
    # -------------------------------------------------------------------------

    def update_item(self, invoice: Invoice, index: int, **changes: Any) -> Invoice:
        """Change input fields of one row and reprice it."""
        invoice.items[index] = invoice.items[index].edit(**changes)
        return invoice.recalculate()

    def add_item(self, invoice: Invoice) -> Invoice:
        invoice.items.append(InvoiceItem())
        return invoice.recalculate()

    def remove_item(self, invoice: Invoice, index: int) -> Invoice:
        """Remove a row. The last remaining row is kept."""
        if len(invoice.items) > 1:
            del invoice.items[index]
        return invoice.recalculate()

    def duplicate_item(self, invoice: Invoice, index: int) -> Invoice:
        """Insert a copy of a row directly below it."""
        invoice.items.insert(index + 1, invoice.items[index].duplicate())
        return invoice.recalculate()

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def add_paid_amount(
        self,
        invoice: Invoice,
        narration: str = "",
        amount: Any = None,
    ) -> Invoice:
        invoice.paid_amounts.append(PaidAmount(narration=narration, amount=amount))
        return invoice.recalculate()

    def update_paid_amount(self, invoice: Invoice, index: int, **changes: Any) -> Invoice:
        """
        Change narration and/or amount of one payment.

        Raises:
            ValueError: If a field other than narration or amount is given
        """
        unknown = set(changes) - PAYMENT_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be edited: {sorted(unknown)}")
        data = invoice.paid_amounts[index].model_dump()
        data.update(changes)
        invoice.paid_amounts[index] = PaidAmount.model_validate(data)
        return invoice.recalculate()

    def remove_paid_amount(self, invoice: Invoice, index: int) -> Invoice:
        del invoice.paid_amounts[index]
        return invoice.recalculate()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save_invoice(self, invoice: Invoice, user: SessionUser) -> Invoice:
        """
        Validate and persist the whole invoice.

        Returns:
            The stored record, with fresh aggregates and updated_at

        Raises:
            InvoiceValidationError: If the name is blank
            InvoiceNotFoundError: If the invoice belongs to another user
        """
        if invoice.user_id != user.username:
            raise InvoiceNotFoundError("Invoice not found")
        if not invoice.name.strip():
            raise InvoiceValidationError("Invoice name required")

        existing = self._storage.get_by_id(invoice.id)
        if existing is not None:
            if existing.user_id != user.username:
                raise InvoiceNotFoundError("Invoice not found")
            invoice.created_at = existing.created_at

        stored = self._storage.save(invoice.recalculate())
        logger.info(
            "invoice_saved",
            invoice_id=stored.id,
            username=user.username,
            items=len(stored.items),
            grand_total=str(stored.grand_total),
            balance=str(stored.balance),
            created=existing is None,
        )
        return stored

    def toggle_status(self, invoice_id: str, user: SessionUser) -> Invoice:
        """Flip Paid/Pending on a stored invoice and save it."""
        invoice = self.load_invoice(invoice_id, user)
        invoice.status = invoice.status.toggled()
        stored = self._storage.save(invoice)
        logger.info("invoice_status_changed", invoice_id=invoice_id, status=stored.status.value)
        return stored

    def delete_invoice(self, invoice_id: str, user: SessionUser) -> bool:
        """
        Delete one of the user's invoices.

        Raises:
            InvoiceNotFoundError: If missing or owned by another user
        """
        self.load_invoice(invoice_id, user)
        deleted = self._storage.delete(invoice_id)
        logger.info("invoice_deleted", invoice_id=invoice_id, username=user.username)
        return deleted
