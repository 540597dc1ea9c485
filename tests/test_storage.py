"""
Tests for the invoice and user stores.

The contract tests run against both the in-memory and the JSON file
implementations; the JSON-specific tests cover corruption handling.
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from hisaab.models.invoice import Invoice, InvoiceItem, User
from hisaab.services.storage import (
    CorruptStoreError,
    JsonFileInvoiceStorage,
    JsonFileUserStorage,
    StorageError,
)


def _invoice(user_id: str, name: str, day: int = 1) -> Invoice:
    return Invoice(
        user_id=user_id,
        name=name,
        invoice_date=date(2025, 1, day),
        items=[InvoiceItem(item_name="Row", rate=100, qty=1)],
    )


class TestInvoiceStorageContract:
    """Behaviour every invoice store shares."""

    def test_get_missing_returns_none(self, invoice_storage):
        assert invoice_storage.get_by_id("nope") is None

    def test_list_empty(self, invoice_storage):
        assert invoice_storage.list_by_owner("alice") == []

    def test_round_trip(self, invoice_storage, sample_invoice):
        """Test saved then fetched is equal apart from updated_at."""
        invoice_storage.save(sample_invoice)
        fetched = invoice_storage.get_by_id(sample_invoice.id)

        assert fetched is not None
        assert fetched.model_dump(exclude={"updated_at"}) == sample_invoice.model_dump(
            exclude={"updated_at"}
        )
        assert fetched.updated_at >= sample_invoice.updated_at

    def test_save_refreshes_updated_at(self, invoice_storage, sample_invoice):
        sample_invoice.updated_at = datetime(2000, 1, 1, tzinfo=timezone.utc)
        stored = invoice_storage.save(sample_invoice)
        assert stored.updated_at > datetime(2000, 1, 1, tzinfo=timezone.utc)

    def test_save_recomputes_stale_aggregates(self, invoice_storage, sample_invoice):
        """Test a tampered cache is corrected at save time."""
        sample_invoice.grand_total = Decimal("1")
        sample_invoice.balance = Decimal("1")
        stored = invoice_storage.save(sample_invoice)
        assert stored.grand_total == Decimal("358.00")
        assert stored.balance == Decimal("258.00")

    def test_balance_invariant(self, invoice_storage, sample_invoice):
        invoice_storage.save(sample_invoice)
        fetched = invoice_storage.get_by_id(sample_invoice.id)
        assert fetched.balance == fetched.grand_total - fetched.total_paid

    def test_save_replaces_in_place(self, invoice_storage):
        """Test an upsert keeps the record's position and count."""
        first = _invoice("alice", "First")
        second = _invoice("alice", "Second")
        invoice_storage.save(first)
        invoice_storage.save(second)

        first.name = "First (edited)"
        invoice_storage.save(first)

        names = [inv.name for inv in invoice_storage.list_by_owner("alice")]
        assert names == ["First (edited)", "Second"]

    def test_list_by_owner_filters(self, invoice_storage):
        invoice_storage.save(_invoice("alice", "A1"))
        invoice_storage.save(_invoice("bob", "B1"))
        invoice_storage.save(_invoice("alice", "A2"))

        alice_names = {inv.name for inv in invoice_storage.list_by_owner("alice")}
        assert alice_names == {"A1", "A2"}
        assert [inv.name for inv in invoice_storage.list_by_owner("bob")] == ["B1"]

    def test_get_by_id_does_not_filter_owner(self, invoice_storage):
        """Test ownership checks are left to the caller."""
        invoice = _invoice("bob", "Bob's")
        invoice_storage.save(invoice)
        assert invoice_storage.get_by_id(invoice.id).user_id == "bob"

    def test_delete(self, invoice_storage):
        invoice = _invoice("alice", "Gone")
        invoice_storage.save(invoice)
        assert invoice_storage.delete(invoice.id) is True
        assert invoice_storage.get_by_id(invoice.id) is None

    def test_delete_missing_is_noop(self, invoice_storage):
        invoice_storage.save(_invoice("alice", "Kept"))
        assert invoice_storage.delete("nope") is False
        assert len(invoice_storage.list_by_owner("alice")) == 1

    def test_caller_changes_do_not_leak_into_store(self, invoice_storage, sample_invoice):
        """Test unsaved edits stay out of storage."""
        invoice_storage.save(sample_invoice)
        fetched = invoice_storage.get_by_id(sample_invoice.id)
        fetched.name = "Unsaved edit"
        assert invoice_storage.get_by_id(sample_invoice.id).name == "March stock"


class TestUserStorageContract:
    """Behaviour every user store shares."""

    def test_missing_user(self, user_storage):
        assert user_storage.get_user("nobody") is None

    def test_add_and_get(self, user_storage):
        user_storage.add_user(User(username="alice", password="pw"))
        user = user_storage.get_user("alice")
        assert user.username == "alice"
        assert user.password == "pw"

    def test_lookup_is_case_sensitive(self, user_storage):
        user_storage.add_user(User(username="alice", password="pw"))
        assert user_storage.get_user("Alice") is None


class TestJsonFileStorage:
    """JSON file specifics: on-disk shape and corrupt files."""

    def test_missing_file_is_empty(self, json_client):
        assert json_client.read_collection(json_client.invoices_path) == []

    def test_empty_file_is_empty(self, json_client):
        json_client.invoices_path.parent.mkdir(parents=True)
        json_client.invoices_path.write_text("", encoding="utf-8")
        assert json_client.read_collection(json_client.invoices_path) == []

    def test_writes_camel_case_array(self, json_client, sample_invoice):
        JsonFileInvoiceStorage(json_client).save(sample_invoice)

        data = json.loads(json_client.invoices_path.read_text(encoding="utf-8"))
        assert isinstance(data, list)
        assert data[0]["id"] == sample_invoice.id
        assert data[0]["userId"] == "alice"
        assert data[0]["grandTotal"] == "358.00"

    def test_no_temp_files_left(self, json_client, sample_invoice):
        JsonFileInvoiceStorage(json_client).save(sample_invoice)
        leftovers = [p for p in json_client.invoices_path.parent.iterdir() if p.suffix == ".tmp"]
        assert leftovers == []

    def test_persists_across_instances(self, json_client, sample_invoice):
        JsonFileInvoiceStorage(json_client).save(sample_invoice)
        reopened = JsonFileInvoiceStorage(json_client)
        assert reopened.get_by_id(sample_invoice.id).name == "March stock"

    def test_invalid_json_raises(self, json_client):
        json_client.invoices_path.parent.mkdir(parents=True)
        json_client.invoices_path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CorruptStoreError):
            JsonFileInvoiceStorage(json_client).list_by_owner("alice")

    def test_non_array_raises(self, json_client):
        json_client.users_path.parent.mkdir(parents=True)
        json_client.users_path.write_text('{"alice": "pw"}', encoding="utf-8")
        with pytest.raises(CorruptStoreError):
            JsonFileUserStorage(json_client).get_user("alice")

    def test_corrupt_store_is_a_storage_error(self):
        assert issubclass(CorruptStoreError, StorageError)

    def test_malformed_record_skipped_in_list(self, json_client, sample_invoice):
        """Test one bad record does not hide the others."""
        storage = JsonFileInvoiceStorage(json_client)
        storage.save(sample_invoice)

        records = json.loads(json_client.invoices_path.read_text(encoding="utf-8"))
        records.append({"id": "bad", "userId": "alice", "date": "not-a-date"})
        json_client.invoices_path.write_text(json.dumps(records), encoding="utf-8")

        invoices = storage.list_by_owner("alice")
        assert [inv.id for inv in invoices] == [sample_invoice.id]

    def test_malformed_record_raises_on_get(self, json_client):
        json_client.invoices_path.parent.mkdir(parents=True)
        json_client.invoices_path.write_text(
            json.dumps([{"id": "bad", "userId": "alice", "date": "not-a-date"}]),
            encoding="utf-8",
        )
        with pytest.raises(CorruptStoreError):
            JsonFileInvoiceStorage(json_client).get_by_id("bad")

    def test_stale_totals_on_disk_recomputed(self, json_client, sample_invoice):
        """Test a hand-edited file cannot feed wrong totals back."""
        storage = JsonFileInvoiceStorage(json_client)
        storage.save(sample_invoice)

        records = json.loads(json_client.invoices_path.read_text(encoding="utf-8"))
        records[0]["grandTotal"] = "9999.00"
        records[0]["items"][0]["rowTotal"] = "0.00"
        json_client.invoices_path.write_text(json.dumps(records), encoding="utf-8")

        loaded = storage.get_by_id(sample_invoice.id)
        assert loaded.items[0].row_total == Decimal("171.00")
        assert loaded.grand_total == Decimal("358.00")

    def test_write_failure_raises_storage_error(self, json_client, tmp_path):
        """Test a data dir that is really a file surfaces as StorageError."""
        blocker = tmp_path / "data"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileUserStorage(json_client).add_user(User(username="alice", password="pw"))
