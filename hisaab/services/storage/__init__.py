"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
JSON files back the application; the in-memory stores back the tests.
"""

from hisaab.services.storage.interface import (
    CorruptStoreError,
    InvoiceStorageInterface,
    StorageError,
    UserStorageInterface,
)
from hisaab.services.storage.json_file import (
    JsonFileClient,
    JsonFileInvoiceStorage,
    JsonFileUserStorage,
)
from hisaab.services.storage.memory import (
    InMemoryInvoiceStorage,
    InMemoryUserStorage,
)

__all__ = [
    # Interfaces
    "InvoiceStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "CorruptStoreError",
    "StorageError",
    # JSON file implementation
    "JsonFileClient",
    "JsonFileInvoiceStorage",
    "JsonFileUserStorage",
    # In-memory implementation
    "InMemoryInvoiceStorage",
    "InMemoryUserStorage",
]
