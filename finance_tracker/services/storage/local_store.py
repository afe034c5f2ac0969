"""
Local Storage Implementation

DESIGN DECISION: The ledger lives in a single named slot of a local
key-value store, serialized as a JSON array. This mirrors how a browser
app keeps its state in localStorage:
1. No database setup required
2. The file is human-readable
3. Full-replace writes keep the format trivial

TRADEOFFS:
- Every change rewrites the whole ledger (fine for personal use)
- Last write wins; there is no concurrency control
- No schema version - a format change is a breaking change

Reads are best-effort: corrupted data must never lock the user out,
so load() logs the problem and returns an empty ledger.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Sequence, Union

import structlog
from pydantic import TypeAdapter, ValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.models.transaction import Transaction
from finance_tracker.services.storage.interface import (
    KeyValueStore,
    StorageError,
    StorageReadError,
    StorageWriteError,
    TransactionStorageInterface,
)


logger = structlog.get_logger(__name__)

DEFAULT_SLOT_NAME = "finance_transactions"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+$")

_LEDGER_ADAPTER = TypeAdapter(list[Transaction])


def _check_key(key: str) -> str:
    if not _KEY_PATTERN.match(key):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed key-value store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._slots: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._slots.get(_check_key(key))

    async def set(self, key: str, value: str) -> None:
        self._slots[_check_key(key)] = value

    async def delete(self, key: str) -> None:
        self._slots.pop(_check_key(key), None)


class FileKeyValueStore(KeyValueStore):
    """
    Key-value store keeping one UTF-8 file per key.

    Layout: {directory}/{key}.json

    Writes go to a temporary file in the same directory which then
    replaces the slot file, so a crash mid-write leaves the previous
    value intact.
    """

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        return self._directory / f"{_check_key(key)}.json"

    async def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {path}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageWriteError(f"Failed to write {path}: {e}") from e

    async def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to delete {path}: {e}") from e


class LocalTransactionStorage(TransactionStorageInterface):
    """
    Ledger persistence on top of a key-value store.

    Stored format: a JSON array of
    {id, description, amount, kind, occurred_on, category} objects,
    in insertion order. Amounts are written as decimal strings.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        slot_name: str = DEFAULT_SLOT_NAME,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._kv_store = kv_store
        self._slot_name = _check_key(slot_name)
        self._audit_logger = audit_logger

    @property
    def slot_name(self) -> str:
        return self._slot_name

    async def load(self) -> list[Transaction]:
        """
        Read the persisted ledger.

        Missing, unreadable and malformed data all yield an empty list.
        """
        try:
            raw = await self._kv_store.get(self._slot_name)
        except StorageError as e:
            self._report_load_failure("ledger_read_failed", e)
            return []

        if raw is None:
            return []

        try:
            return _LEDGER_ADAPTER.validate_json(raw)
        except ValidationError as e:
            self._report_load_failure("ledger_deserialization_failed", e)
            return []

    def _report_load_failure(self, reason: str, error: Exception) -> None:
        logger.warning(reason, slot=self._slot_name, error=str(error))
        if self._audit_logger:
            self._audit_logger.log_ledger_load_failed(self._slot_name, error)

    async def save(self, transactions: Sequence[Transaction]) -> None:
        """Overwrite the slot with the full ledger."""
        payload = _LEDGER_ADAPTER.dump_json(list(transactions), indent=2)
        await self._kv_store.set(self._slot_name, payload.decode("utf-8"))
        logger.debug(
            "ledger_saved",
            slot=self._slot_name,
            count=len(transactions),
        )
