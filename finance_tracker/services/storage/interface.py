"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Swap the local file store for browser storage or a database later
2. Use in-memory storage for testing
3. Keep the transaction store decoupled from the storage medium

There are two layers:
- KeyValueStore: a dumb named-slot store (get / set / delete of text)
- TransactionStorageInterface: load / save of the whole ledger

The ledger is always written as a whole. There is no incremental update,
no versioning and no migration.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from finance_tracker.models.transaction import Transaction


class KeyValueStore(ABC):
    """Named slots holding text values."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read a slot.

        Returns:
            The stored text, or None if the slot was never written

        Raises:
            StorageReadError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Overwrite a slot.

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a slot. Removing a missing slot is not an error."""
        pass


class TransactionStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def load(self) -> list[Transaction]:
        """
        Read the persisted ledger.

        Returns:
            Transactions in their stored order. An empty list if nothing
            was stored or the stored data cannot be read.
        """
        pass

    @abstractmethod
    async def save(self, transactions: Sequence[Transaction]) -> None:
        """
        Replace the persisted ledger with the given transactions.

        Raises:
            StorageWriteError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Could not read from the storage backend."""
    pass


class StorageWriteError(StorageError):
    """Could not write to the storage backend."""
    pass
