"""
JSON File Storage Implementation

DESIGN DECISION: Each key is one file in a data directory.

TRADEOFFS:
- Whole-value rewrites only (fine: the ledger is rewritten on every change anyway)
- No cross-process locking (single user, single writer)

Writes go to a temp file in the same directory and are moved into place
with os.replace, so a crash mid-write leaves the previous value intact.
Blocking file I/O runs in a worker thread.
"""

import asyncio
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from expense_ledger.services.storage.interface import (
    ConnectionError,
    KeyValueStorage,
    StorageError,
)


_VALID_KEY = re.compile(r"^[A-Za-z0-9._-]+$")


class JsonFileKeyValueStorage(KeyValueStorage):
    """
    KeyValueStorage backed by one `<key>.json` file per key.
    """

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """File that holds the value for a key."""
        if not _VALID_KEY.match(key) or key in (".", ".."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    async def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        return await asyncio.to_thread(self._read, path)

    async def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        await asyncio.to_thread(self._write_atomic, path, value)

    async def delete(self, key: str) -> bool:
        path = self.path_for(key)
        return await asyncio.to_thread(self._unlink, path)

    def _read(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def _write_atomic(self, path: Path, value: str) -> None:
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConnectionError(f"Storage directory unavailable: {self._directory}: {e}") from e

        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory,
                prefix=f".{path.stem}.",
                suffix=".tmp",
            )
        except OSError as e:
            raise StorageError(f"Failed to create temp file for {path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except (OSError, UnicodeEncodeError) as e:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise StorageError(f"Failed to write {path}: {e}") from e

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e
