"""
Persistence Adapter

Writes the whole ledger as one versioned JSON document under a single
storage key, and reads it back at startup.

GUARANTEES:
- Saves are applied in the order they were issued
- Storage never goes back to a state older than the newest completed save
  (every save carries a sequence number; a save that is not newer than
  the high-water mark is dropped)
- load() never raises: unreadable, unversioned or invalid state means an
  empty ledger
- save() never raises: storage errors are retried, then any failure is reported
"""

import asyncio
import json
from typing import Iterable, Optional

from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_ledger.events.logger import EventLogger
from expense_ledger.models.event import LedgerEventBuilder
from expense_ledger.models.expense import SCHEMA_VERSION, ExpenseRecord, LedgerDocument
from expense_ledger.services.storage import KeyValueStorage, StorageError


DEFAULT_STORAGE_KEY = "expense-storage"


class UnsupportedSchemaError(ValueError):
    """Persisted document has a missing or unknown schemaVersion."""
    pass


def serialize_records(records: Iterable[ExpenseRecord]) -> str:
    """Render records as the persisted JSON document."""
    document = LedgerDocument(schema_version=SCHEMA_VERSION, records=list(records))
    return document.model_dump_json(by_alias=True)


def deserialize_records(raw: str) -> list[ExpenseRecord]:
    """
    Parse a persisted JSON document.

    Raises:
        ValueError: malformed JSON, wrong schema version or invalid records
    """
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise UnsupportedSchemaError("Persisted ledger is not a JSON object")

    version = payload.get("schemaVersion")
    if version != SCHEMA_VERSION:
        raise UnsupportedSchemaError(f"Unsupported schemaVersion: {version!r}")

    return LedgerDocument.model_validate(payload).records


class PersistenceAdapter:
    """
    Durable home of the ledger.

    The RecordStore calls schedule_save() after every mutation
    (write-through). Callers that need durability await drain().
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = DEFAULT_STORAGE_KEY,
        retry_attempts: int = 3,
        retry_wait_min: float = 0.5,
        retry_wait_max: float = 5.0,
        event_logger: Optional[EventLogger] = None,
    ):
        self._storage = storage
        self._key = key
        self._retry_attempts = retry_attempts
        self._retry_wait_min = retry_wait_min
        self._retry_wait_max = retry_wait_max
        self._events = event_logger or EventLogger()

        self._issued = 0
        self._high_water = 0
        self._pending: set[asyncio.Task] = set()
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

        self.last_error: Optional[str] = None
        self.last_save_ok = True

    @property
    def key(self) -> str:
        return self._key

    @property
    def completed_sequence(self) -> int:
        """Sequence number of the newest write that reached storage."""
        return self._high_water

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    async def load(self) -> list[ExpenseRecord]:
        """
        Restore the persisted ledger.

        Returns an empty list if nothing is stored or the stored state
        cannot be used.
        """
        try:
            raw = await self._storage.get(self._key)
        except (StorageError, ValueError) as e:
            self._events.log(LedgerEventBuilder.load_failed(self._key, str(e)))
            return []

        if raw is None:
            return []

        try:
            records = deserialize_records(raw)
        except (ValueError, ValidationError) as e:
            self._events.log(LedgerEventBuilder.load_failed(self._key, str(e)))
            return []

        self._events.log(LedgerEventBuilder.ledger_loaded(len(records), self._key))
        return records

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    async def save(self, records: Iterable[ExpenseRecord]) -> bool:
        """
        Write the full record sequence, replacing any previous value.

        Returns True once the snapshot (or a newer one) is durable.
        """
        sequence = self._next_sequence()
        snapshot = list(records)
        return await self._write(sequence, serialize_records(snapshot), len(snapshot))

    def schedule_save(self, records: Iterable[ExpenseRecord]) -> Optional[asyncio.Task]:
        """
        Write-through hook: queue a save of this snapshot.

        The snapshot and its place in the write order are fixed now.
        With a running event loop the write happens in a background task
        (returned); without one it is performed before returning.
        """
        sequence = self._next_sequence()
        snapshot = list(records)
        payload = serialize_records(snapshot)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._write(sequence, payload, len(snapshot)))
            return None

        task = loop.create_task(self._write(sequence, payload, len(snapshot)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> bool:
        """Wait for every queued save; True if the newest one succeeded."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
        return self.last_save_ok

    async def clear(self) -> bool:
        """
        Erase the persisted ledger.

        Saves issued before this call are superseded and will not
        resurrect the data. In-memory state is not touched.
        """
        sequence = self._next_sequence()
        async with self._write_lock():
            if sequence <= self._high_water:
                return True
            try:
                await self._storage.delete(self._key)
            except Exception as e:
                self.last_error = str(e)
                self.last_save_ok = False
                self._events.log(LedgerEventBuilder.save_failed(sequence, str(e)))
                return False
            self._high_water = sequence
            self.last_save_ok = True
        self._events.log(LedgerEventBuilder.ledger_reset(self._key))
        return True

    def _next_sequence(self) -> int:
        self._issued += 1
        return self._issued

    def _write_lock(self) -> asyncio.Lock:
        # asyncio.Lock belongs to one loop; schedule_save may run writes
        # under asyncio.run, which creates a fresh loop each time.
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def _write(self, sequence: int, payload: str, record_count: int) -> bool:
        async with self._write_lock():
            if sequence <= self._high_water:
                # A newer snapshot is already durable
                return True

            try:
                await self._put_with_retry(payload)
            except Exception as e:
                # Storage errors were retried; anything reaching here is reported, not raised
                self.last_error = str(e)
                self.last_save_ok = False
                self._events.log(LedgerEventBuilder.save_failed(sequence, str(e)))
                return False

            self._high_water = sequence
            self.last_save_ok = True
            self.last_error = None

        self._events.log(LedgerEventBuilder.save_completed(sequence, record_count))
        return True

    async def _put_with_retry(self, payload: str) -> None:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(
                multiplier=self._retry_wait_min,
                min=self._retry_wait_min,
                max=self._retry_wait_max,
            ),
            retry=retry_if_exception_type(StorageError),
            reraise=True,
        ):
            with attempt:
                await self._storage.set(self._key, payload)
