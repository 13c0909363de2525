"""Persistence package."""

from expense_ledger.persistence.adapter import (
    DEFAULT_STORAGE_KEY,
    PersistenceAdapter,
    UnsupportedSchemaError,
    deserialize_records,
    serialize_records,
)

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "PersistenceAdapter",
    "UnsupportedSchemaError",
    "deserialize_records",
    "serialize_records",
]
