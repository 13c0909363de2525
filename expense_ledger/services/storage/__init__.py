"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
The app uses JSON files on disk; tests use the in-memory backend.
"""

from expense_ledger.services.storage.interface import (
    ConnectionError,
    KeyValueStorage,
    StorageError,
)
from expense_ledger.services.storage.json_file import JsonFileKeyValueStorage
from expense_ledger.services.storage.memory import InMemoryKeyValueStorage

__all__ = [
    # Interface
    "KeyValueStorage",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
]
