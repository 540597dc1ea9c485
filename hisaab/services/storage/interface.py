"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep invoices in local JSON files for the application
2. Use in-memory storage for testing
3. Swap in a real database later without touching pricing or the editor

The interface is intentionally small: the editor only ever reads and
writes whole invoice records.
"""

from abc import ABC, abstractmethod
from typing import Optional

from hisaab.models.invoice import Invoice, User


class InvoiceStorageInterface(ABC):
    """
    Abstract interface for invoice storage operations.

    Records are keyed by invoice id and scoped by owner (user_id).
    Missing records are reported as None or an empty list, never as errors.
    """

    @abstractmethod
    def list_by_owner(self, user_id: str) -> list[Invoice]:
        """
        List every invoice owned by a user.

        Args:
            user_id: Owner's username

        Returns:
            Matching invoices in storage order. Callers sort.
        """
        pass

    @abstractmethod
    def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        """
        Retrieve an invoice by its ID.

        No ownership filtering happens here; callers must compare
        invoice.user_id with the current user.

        Returns:
            The invoice if found, None otherwise
        """
        pass

    @abstractmethod
    def save(self, invoice: Invoice) -> Invoice:
        """
        Insert or replace an invoice by id.

        Implementations recalculate the aggregates and set updated_at
        to the current time before writing.

        Returns:
            The record as stored

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, invoice_id: str) -> bool:
        """
        Delete an invoice by ID.

        Returns:
            True if a record was removed, False if there was none
        """
        pass


class UserStorageInterface(ABC):
    """Abstract interface for the stored logins."""

    @abstractmethod
    def get_user(self, username: str) -> Optional[User]:
        """Return the user with this exact username, or None."""
        pass

    @abstractmethod
    def add_user(self, user: User) -> None:
        """
        Store a new user.

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptStoreError(StorageError):
    """The backing collection exists but cannot be read as records."""
    pass
