"""
JSON File Storage Implementation

DESIGN DECISION: Each collection (users, invoices) is one JSON array in
the data directory, mirroring the flat collections the tool has always
kept. This gives:
1. Zero setup: no database server
2. Files a user can open, back up or copy to another machine
3. A format anyone can inspect when something looks wrong

TRADEOFFS:
- Every operation reads and rewrites the whole collection
- No locking: two processes writing at once lose one of the writes
- Fine for one shop's invoices, not for anything shared

Writes go to a temporary file that is then moved over the collection,
so a crash mid-write leaves the previous version intact.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import structlog
from pydantic import ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from hisaab.config import StorageSettings, get_settings
from hisaab.models.invoice import Invoice, User
from hisaab.services.storage.interface import (
    CorruptStoreError,
    InvoiceStorageInterface,
    StorageError,
    UserStorageInterface,
)


logger = structlog.get_logger(__name__)


class JsonFileClient:
    """
    Low-level reader/writer for JSON array collections.

    Transient OS errors are retried with exponential backoff.
    Content errors (bad JSON, wrong shape) are not retried.
    """

    def __init__(self, settings: Optional[StorageSettings] = None):
        self._settings = settings or get_settings().storage

    @property
    def users_path(self) -> Path:
        return self._settings.users_path

    @property
    def invoices_path(self) -> Path:
        return self._settings.invoices_path

    def _call_with_retry(self, fn: Callable[..., Any], *args: Any) -> Any:
        retryer = Retrying(
            retry=retry_if_exception_type(OSError),
            stop=stop_after_attempt(self._settings.retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            reraise=True,
        )
        return retryer(fn, *args)

    def read_collection(self, path: Path) -> list[dict]:
        """
        Read a collection. A missing file is an empty collection.

        Raises:
            StorageError: If the file cannot be read
            CorruptStoreError: If the file is not a JSON array
        """
        if not path.exists():
            return []

        try:
            text = self._call_with_retry(path.read_text, "utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

        if not text.strip():
            return []

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptStoreError(f"{path} is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise CorruptStoreError(
                f"{path} must hold a JSON array, found {type(data).__name__}"
            )
        return data

    def write_collection(self, path: Path, records: list[dict]) -> None:
        """
        Replace a collection with the given records.

        Raises:
            StorageError: If the write fails after retries
        """
        try:
            self._call_with_retry(self._write_atomic, path, records)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

    @staticmethod
    def _write_atomic(path: Path, records: list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


class JsonFileInvoiceStorage(InvoiceStorageInterface):
    """
    Invoices stored as camelCase records in one JSON array.

    Aggregates and derived row fields are recomputed whenever a record
    is loaded, so an edited or outdated file cannot feed stale totals
    back into the editor.
    """

    def __init__(self, client: Optional[JsonFileClient] = None):
        self._client = client or JsonFileClient()

    def _read(self) -> list[dict]:
        return self._client.read_collection(self._client.invoices_path)

    def _write(self, records: list[dict]) -> None:
        self._client.write_collection(self._client.invoices_path, records)

    def list_by_owner(self, user_id: str) -> list[Invoice]:
        invoices = []
        for record in self._read():
            if not isinstance(record, dict) or record.get("userId") != user_id:
                continue
            try:
                invoices.append(Invoice.from_record(record))
            except ValidationError as e:
                # Skip malformed records so one bad row doesn't hide the rest
                logger.warning(
                    "store_record_skipped",
                    invoice_id=record.get("id"),
                    error_count=e.error_count(),
                )
        return invoices

    def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        for record in self._read():
            if isinstance(record, dict) and record.get("id") == invoice_id:
                try:
                    return Invoice.from_record(record)
                except ValidationError as e:
                    raise CorruptStoreError(
                        f"Stored invoice {invoice_id} is malformed: {e}"
                    ) from e
        return None

    def save(self, invoice: Invoice) -> Invoice:
        stored = invoice.model_copy(deep=True).recalculate()
        stored.updated_at = datetime.now(timezone.utc)
        new_record = stored.to_record()

        records = self._read()
        for index, record in enumerate(records):
            if isinstance(record, dict) and record.get("id") == stored.id:
                records[index] = new_record
                break
        else:
            records.append(new_record)

        self._write(records)
        logger.debug("invoice_stored", invoice_id=stored.id, backend="json")
        return stored

    def delete(self, invoice_id: str) -> bool:
        records = self._read()
        remaining = [
            r for r in records
            if not (isinstance(r, dict) and r.get("id") == invoice_id)
        ]
        if len(remaining) == len(records):
            return False
        self._write(remaining)
        return True


class JsonFileUserStorage(UserStorageInterface):
    """Users stored as {"username", "password"} records in one JSON array."""

    def __init__(self, client: Optional[JsonFileClient] = None):
        self._client = client or JsonFileClient()

    def get_user(self, username: str) -> Optional[User]:
        records = self._client.read_collection(self._client.users_path)
        for record in records:
            if isinstance(record, dict) and record.get("username") == username:
                try:
                    return User.model_validate(record)
                except ValidationError as e:
                    raise CorruptStoreError(
                        f"Stored user {username!r} is malformed"
                    ) from e
        return None

    def add_user(self, user: User) -> None:
        records = self._client.read_collection(self._client.users_path)
        records.append(user.to_record())
        self._client.write_collection(self._client.users_path, records)
