"""Services package."""

from expense_ledger.services.storage import (
    ConnectionError,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorage,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "KeyValueStorage",
    "StorageError",
]
