"""
Abstract Key-Value Storage Interface

DESIGN DECISION: The ledger only needs a durable key-value store.
The whole ledger is one value under one key, so the interface is four
operations. This allows us to:
1. Use plain JSON files on disk in the app
2. Use in-memory storage for testing
3. Swap in another backend without touching the persistence adapter

All operations are async so a slow backend never blocks the caller.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorage(ABC):
    """
    Abstract interface for key-value storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Implementations must replace the value atomically: a reader sees
        either the old value or the new one, never a partial write.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if a value was removed, False if the key was absent
        """
        pass

    async def exists(self, key: str) -> bool:
        """Check whether a value is stored under the key."""
        return await self.get(key) is not None


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
