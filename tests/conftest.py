"""Shared fixtures."""

from datetime import date
from decimal import Decimal

import pytest

from hisaab.config import ExportSettings, StorageSettings
from hisaab.models.invoice import Invoice, InvoiceItem, PaidAmount, SessionUser
from hisaab.services.storage import (
    InMemoryInvoiceStorage,
    InMemoryUserStorage,
    JsonFileClient,
    JsonFileInvoiceStorage,
    JsonFileUserStorage,
)


@pytest.fixture
def alice() -> SessionUser:
    return SessionUser(username="alice")


@pytest.fixture
def bob() -> SessionUser:
    return SessionUser(username="bob")


@pytest.fixture
def storage_settings(tmp_path) -> StorageSettings:
    return StorageSettings(data_dir=tmp_path / "data", retry_attempts=1)


@pytest.fixture
def json_client(storage_settings) -> JsonFileClient:
    return JsonFileClient(storage_settings)


@pytest.fixture(params=["memory", "json"])
def invoice_storage(request, json_client):
    """Every invoice store must honour the same contract."""
    if request.param == "memory":
        return InMemoryInvoiceStorage()
    return JsonFileInvoiceStorage(json_client)


@pytest.fixture(params=["memory", "json"])
def user_storage(request, json_client):
    if request.param == "memory":
        return InMemoryUserStorage()
    return JsonFileUserStorage(json_client)


@pytest.fixture
def export_settings(tmp_path) -> ExportSettings:
    return ExportSettings(output_dir=tmp_path / "exports")


@pytest.fixture
def sample_invoice() -> Invoice:
    """Two priced rows (171.00 + 187.00) and one payment of 100."""
    return Invoice(
        user_id="alice",
        name="March stock",
        invoice_date=date(2025, 3, 14),
        items=[
            InvoiceItem(item_name="Panadol 500mg", rate=100, qty=2),
            InvoiceItem(item_name="Brufen 400mg", rate=100, qty=2, discount_percent=10),
        ],
        paid_amounts=[PaidAmount(narration="Cash", amount=Decimal("100"))],
    )
