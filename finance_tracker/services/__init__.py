"""Services package."""

from finance_tracker.services.image import (
    GeminiImageEditor,
    ImageEditConfigurationError,
    ImageEditError,
    InvalidEditRequestError,
)
from finance_tracker.services.storage import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    LocalTransactionStorage,
    StorageError,
    StorageReadError,
    StorageWriteError,
    TransactionStorageInterface,
)

__all__ = [
    # Image services
    "GeminiImageEditor",
    "ImageEditConfigurationError",
    "ImageEditError",
    "InvalidEditRequestError",
    # Storage services
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "LocalTransactionStorage",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "TransactionStorageInterface",
]
