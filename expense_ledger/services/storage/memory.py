"""
In-Memory Storage Implementation

Dict-backed KeyValueStorage. Nothing survives the process; used for
tests and for throwaway sessions (EXPENSE_LEDGER_STORAGE_BACKEND=memory).
"""

from typing import Optional

from expense_ledger.services.storage.interface import KeyValueStorage


class InMemoryKeyValueStorage(KeyValueStorage):
    """KeyValueStorage kept in a plain dict."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self.write_count = 0

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.write_count += 1

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def snapshot(self) -> dict[str, str]:
        """Copy of everything stored."""
        return dict(self._data)
