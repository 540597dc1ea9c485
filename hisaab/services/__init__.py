"""Services package."""

from hisaab.services.storage import (
    CorruptStoreError,
    InMemoryInvoiceStorage,
    InMemoryUserStorage,
    InvoiceStorageInterface,
    JsonFileClient,
    JsonFileInvoiceStorage,
    JsonFileUserStorage,
    StorageError,
    UserStorageInterface,
)

__all__ = [
    "CorruptStoreError",
    "InMemoryInvoiceStorage",
    "InMemoryUserStorage",
    "InvoiceStorageInterface",
    "JsonFileClient",
    "JsonFileInvoiceStorage",
    "JsonFileUserStorage",
    "StorageError",
    "UserStorageInterface",
]
