"""
Storage Services Package

Provides abstract interfaces and concrete implementations for ledger storage.
Currently implements a local file-backed key-value store, but designed to be
swappable.
"""

from finance_tracker.services.storage.interface import (
    KeyValueStore,
    StorageError,
    StorageReadError,
    StorageWriteError,
    TransactionStorageInterface,
)
from finance_tracker.services.storage.local_store import (
    DEFAULT_SLOT_NAME,
    FileKeyValueStore,
    InMemoryKeyValueStore,
    LocalTransactionStorage,
)

__all__ = [
    # Interfaces
    "KeyValueStore",
    "TransactionStorageInterface",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Local implementation
    "DEFAULT_SLOT_NAME",
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "LocalTransactionStorage",
]
