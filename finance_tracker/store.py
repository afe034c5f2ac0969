"""
Transaction Store

The in-memory ledger. It is the single source of truth during a session:
the UI reads from it, and every mutation is written through to storage.

DESIGN DECISION: The store is an explicit object with an injected storage
port. It is created once at startup, opened (loaded), passed to whoever
needs it and closed (final flush) on shutdown. There is no module-level
instance.

GUARANTEES:
- Insertion order is preserved; nothing here sorts
- No two transactions share an id
- Mutations never raise - a failed write is logged and the in-memory
  ledger stays authoritative (last write wins on the next mutation)

Access is single-actor and sequential. There is no locking.
"""

from typing import Iterator, Optional

import structlog

from finance_tracker.audit import AuditLogger
from finance_tracker.models.transaction import Transaction, TransactionDraft
from finance_tracker.services.storage import (
    StorageError,
    TransactionStorageInterface,
)


logger = structlog.get_logger(__name__)


class TransactionStore:
    """Ordered, append-and-remove ledger with write-through persistence."""

    def __init__(
        self,
        storage: TransactionStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._transactions: list[Transaction] = []
        self._opened = False

    @property
    def is_open(self) -> bool:
        return self._opened

    async def open(self) -> None:
        """
        Load the persisted ledger.

        Call once at startup. Loaded records with an id already seen are
        dropped so the uniqueness guarantee holds even for hand-edited data.
        """
        loaded = await self._storage.load()

        seen: set[str] = set()
        transactions: list[Transaction] = []
        for transaction in loaded:
            if transaction.id in seen:
                logger.warning("duplicate_transaction_dropped", transaction_id=transaction.id)
                continue
            seen.add(transaction.id)
            transactions.append(transaction)

        self._transactions = transactions
        self._opened = True

        if self._audit_logger:
            self._audit_logger.log_ledger_loaded(
                slot_name=getattr(self._storage, "slot_name", "ledger"),
                count=len(transactions),
            )

    async def close(self) -> None:
        """Flush the whole ledger on shutdown."""
        flushed = await self._write_through()
        if flushed and self._audit_logger:
            self._audit_logger.log_ledger_flushed(count=len(self._transactions))
        self._opened = False

    async def add(self, draft: TransactionDraft) -> Transaction:
        """
        Append a new transaction.

        A fresh id is assigned here. Returns the stored record.
        """
        transaction = Transaction.from_draft(draft)
        self._transactions.append(transaction)

        if self._audit_logger:
            self._audit_logger.log_transaction_added(
                transaction_id=transaction.id,
                kind=transaction.kind.value,
                amount=str(transaction.amount),
                occurred_on=transaction.occurred_on.isoformat(),
            )

        await self._write_through()
        return transaction

    async def remove(self, transaction_id: str) -> None:
        """Remove a transaction by id. Unknown ids are ignored."""
        for index, transaction in enumerate(self._transactions):
            if transaction.id == transaction_id:
                del self._transactions[index]
                break
        else:
            logger.debug("remove_unknown_transaction", transaction_id=transaction_id)
            return

        if self._audit_logger:
            self._audit_logger.log_transaction_removed(transaction_id=transaction_id)

        await self._write_through()

    def all(self) -> tuple[Transaction, ...]:
        """All transactions in insertion order."""
        return tuple(self._transactions)

    def recent(self, limit: int = 5) -> tuple[Transaction, ...]:
        """The last `limit` transactions added, oldest first."""
        if limit <= 0:
            return ()
        return tuple(self._transactions[-limit:])

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(tuple(self._transactions))

    def __contains__(self, transaction_id: object) -> bool:
        return any(t.id == transaction_id for t in self._transactions)

    async def _write_through(self) -> bool:
        """Save the whole ledger. Returns False if the write failed."""
        snapshot = tuple(self._transactions)
        try:
            await self._storage.save(snapshot)
        except StorageError as e:
            logger.error("ledger_write_failed", error=str(e), count=len(snapshot))
            if self._audit_logger:
                self._audit_logger.log_ledger_save_failed(count=len(snapshot), error=e)
            return False
        return True
