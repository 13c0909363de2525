"""
Tests for the PersistenceAdapter.
"""

import asyncio
import json
from datetime import datetime
from decimal import Decimal

import pytest

from conftest import FlakyStorage, make_expense
from expense_ledger.models import ExpenseRecord, LedgerEventType
from expense_ledger.persistence import (
    PersistenceAdapter,
    UnsupportedSchemaError,
    deserialize_records,
    serialize_records,
)
from expense_ledger.services.storage import (
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    StorageError,
)


KEY = "expense-storage"


def make_records(count: int) -> list[ExpenseRecord]:
    return [
        ExpenseRecord(**make_expense(
            amount=f"{i + 1}.50",
            description=f"expense {i}",
            when=datetime(2024, 12, 1 + i),
            receipt_url="r-0" if i == 0 else None,
        ))
        for i in range(count)
    ]


class SlowStorage(InMemoryKeyValueStorage):
    """Storage whose writes take longer the earlier they are issued."""

    def __init__(self):
        super().__init__()
        self.history: list[int] = []

    async def set(self, key: str, value: str) -> None:
        count = len(json.loads(value)["records"])
        # Earlier (smaller) snapshots sleep longer
        await asyncio.sleep(0.01 * max(0, 5 - count))
        self.history.append(count)
        await super().set(key, value)


class BrokenReadStorage(InMemoryKeyValueStorage):
    async def get(self, key: str):
        raise StorageError("backend offline")


class BuggyWriteStorage(InMemoryKeyValueStorage):
    """Backend that fails with something other than StorageError."""

    async def set(self, key: str, value: str) -> None:
        raise RuntimeError("driver bug")


def adapter_for(storage, **kwargs) -> PersistenceAdapter:
    kwargs.setdefault("retry_wait_min", 0)
    kwargs.setdefault("retry_wait_max", 0)
    return PersistenceAdapter(storage, **kwargs)


class TestSerialization:
    """Tests for the persisted document format."""

    def test_document_layout(self):
        """Test the versioned envelope."""
        payload = json.loads(serialize_records(make_records(1)))
        assert payload["schemaVersion"] == 1
        record = payload["records"][0]
        assert set(record) == {"id", "amount", "description", "date", "category", "receiptUrl"}
        assert record["amount"] == "1.50"

    def test_round_trip(self):
        """Test that deserialize(serialize(x)) == x."""
        records = make_records(3)
        assert deserialize_records(serialize_records(records)) == records

    def test_missing_version_rejected(self):
        """Test that an unversioned document is not trusted."""
        with pytest.raises(UnsupportedSchemaError):
            deserialize_records(json.dumps({"records": []}))

    def test_unknown_version_rejected(self):
        """Test that a newer schema version is not guessed at."""
        with pytest.raises(UnsupportedSchemaError):
            deserialize_records(json.dumps({"schemaVersion": 2, "records": []}))


class TestLoad:
    """Tests for PersistenceAdapter.load."""

    @pytest.mark.asyncio
    async def test_nothing_stored(self):
        """Test that a fresh install loads an empty ledger."""
        assert await adapter_for(InMemoryKeyValueStorage()).load() == []

    @pytest.mark.asyncio
    async def test_round_trip_through_storage(self):
        """Test that save then load reconstructs the same records in order."""
        storage = InMemoryKeyValueStorage()
        records = make_records(4)

        assert await adapter_for(storage).save(records) is True
        assert await adapter_for(storage).load() == records

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", [
        "{not json",
        "[]",
        json.dumps({"records": []}),
        json.dumps({"schemaVersion": 99, "records": []}),
        json.dumps({"schemaVersion": 1, "records": [{"amount": "-1"}]}),
    ])
    async def test_unusable_state_loads_empty(self, raw, events):
        """Test that bad persisted state degrades to an empty ledger."""
        storage = InMemoryKeyValueStorage({KEY: raw})
        adapter = adapter_for(storage, event_logger=events)

        assert await adapter.load() == []
        assert events.recent_events(1)[0].event_type == LedgerEventType.LOAD_FAILED

    @pytest.mark.asyncio
    async def test_storage_unavailable_loads_empty(self, events):
        """Test that a read failure does not crash startup."""
        adapter = adapter_for(BrokenReadStorage(), event_logger=events)
        assert await adapter.load() == []
        assert events.recent_events(1)[0].error_message == "backend offline"

    @pytest.mark.asyncio
    async def test_undecodable_file_loads_empty(self, tmp_path, events):
        """Test that a ledger file that is not UTF-8 does not crash startup."""
        (tmp_path / f"{KEY}.json").write_bytes(b"\xff\xfe\x00garbage")
        adapter = adapter_for(JsonFileKeyValueStorage(tmp_path), event_logger=events)

        assert await adapter.load() == []
        assert events.recent_events(1)[0].event_type == LedgerEventType.LOAD_FAILED


class TestSave:
    """Tests for PersistenceAdapter.save."""

    @pytest.mark.asyncio
    async def test_save_is_idempotent(self):
        """Test that saving the same records twice stores the same bytes."""
        storage = InMemoryKeyValueStorage()
        adapter = adapter_for(storage)
        records = make_records(2)

        await adapter.save(records)
        first = storage.snapshot()
        await adapter.save(records)

        assert storage.snapshot() == first

    @pytest.mark.asyncio
    async def test_overwrites_previous_value(self):
        """Test that each save replaces the whole document."""
        storage = InMemoryKeyValueStorage()
        adapter = adapter_for(storage)
        await adapter.save(make_records(3))
        await adapter.save(make_records(1))
        assert len(await adapter.load()) == 1

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self):
        """Test that a failed write is retried until it succeeds."""
        storage = FlakyStorage(failures=2)
        adapter = adapter_for(storage, retry_attempts=3)

        assert await adapter.save(make_records(1)) is True
        assert storage.attempts == 3
        assert adapter.last_error is None

    @pytest.mark.asyncio
    async def test_persistent_failure_is_reported_not_raised(self, events):
        """Test that exhausting retries returns False and logs save_failed."""
        storage = FlakyStorage(failures=100)
        adapter = adapter_for(storage, retry_attempts=2, event_logger=events)

        assert await adapter.save(make_records(1)) is False
        assert storage.attempts == 2
        assert adapter.last_save_ok is False
        assert "failed" in adapter.last_error
        assert events.last_error().event_type == LedgerEventType.SAVE_FAILED

    @pytest.mark.asyncio
    async def test_unexpected_backend_error_is_reported(self, events):
        """Test that a non-storage exception is surfaced as save_failed, not raised."""
        adapter = adapter_for(BuggyWriteStorage(), event_logger=events)

        adapter.schedule_save(make_records(1))

        assert await adapter.drain() is False
        assert adapter.last_error == "driver bug"
        assert events.last_error().event_type == LedgerEventType.SAVE_FAILED

    @pytest.mark.asyncio
    async def test_failure_then_success_recovers(self):
        """Test that a later successful save clears the error state."""
        storage = FlakyStorage(failures=1)
        adapter = adapter_for(storage, retry_attempts=1)

        assert await adapter.save(make_records(1)) is False
        assert await adapter.save(make_records(2)) is True
        assert adapter.last_save_ok is True
        assert len(await adapter.load()) == 2


class TestOrdering:
    """Tests for write ordering and the high-water mark."""

    @pytest.mark.asyncio
    async def test_background_saves_apply_in_issue_order(self):
        """Test that a slow early save cannot overwrite a later one."""
        storage = SlowStorage()
        adapter = adapter_for(storage)
        records = make_records(4)

        for count in range(1, 5):
            adapter.schedule_save(records[:count])
        assert await adapter.drain() is True

        assert storage.history == [1, 2, 3, 4]
        assert len(await adapter.load()) == 4
        assert adapter.completed_sequence == 4

    @pytest.mark.asyncio
    async def test_snapshot_is_taken_when_scheduled(self):
        """Test that later changes to the caller's list do not leak into a queued save."""
        storage = InMemoryKeyValueStorage()
        adapter = adapter_for(storage)
        records = make_records(2)

        adapter.schedule_save(records)
        records.pop()
        await adapter.drain()

        assert len(await adapter.load()) == 2

    @pytest.mark.asyncio
    async def test_clear_supersedes_earlier_saves(self):
        """Test that a queued save cannot resurrect cleared data."""
        storage = InMemoryKeyValueStorage({KEY: serialize_records(make_records(1))})
        adapter = adapter_for(storage)

        adapter.schedule_save(make_records(3))
        assert await adapter.clear() is True
        await adapter.drain()

        assert await storage.get(KEY) is None
        assert await adapter.load() == []

    def test_schedule_without_event_loop_writes_immediately(self):
        """Test the synchronous fallback used outside an event loop."""
        storage = InMemoryKeyValueStorage()
        adapter = adapter_for(storage)

        assert adapter.schedule_save(make_records(2)) is None
        document = json.loads(storage.snapshot()[KEY])
        assert len(document["records"]) == 2
        assert document["records"][0]["amount"] == str(Decimal("1.50"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
