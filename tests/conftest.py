"""
Shared fixtures for Expense Ledger tests.

Test strategy:
1. Unit tests per component (models, validator, store, aggregation, persistence)
2. Integration tests through ExpenseLedger with in-memory or temp-dir storage
3. Time is always injected; no test depends on today's date
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

import pytest

from expense_ledger.categories import default_catalog
from expense_ledger.events import EventLogger
from expense_ledger.persistence import PersistenceAdapter
from expense_ledger.services.storage import InMemoryKeyValueStorage, StorageError
from expense_ledger.store import RecordStore
from expense_ledger.validation import ExpenseValidator


NOW = datetime(2024, 12, 15, 12, 0, 0)


def fixed_clock() -> datetime:
    return NOW


def make_expense(
    amount: str = "10.00",
    description: str = "Coffee",
    when: datetime = datetime(2024, 12, 1, 9, 30),
    category: str = "food",
    receipt_url: Optional[str] = None,
) -> dict:
    expense = {
        "amount": Decimal(amount),
        "description": description,
        "date": when,
        "category": category,
    }
    if receipt_url is not None:
        expense["receipt_url"] = receipt_url
    return expense


class FlakyStorage(InMemoryKeyValueStorage):
    """In-memory storage whose first `failures` writes raise."""

    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures
        self.attempts = 0

    async def set(self, key: str, value: str) -> None:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise StorageError(f"write {self.attempts} failed")
        await super().set(key, value)


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def events():
    return EventLogger()


@pytest.fixture
def storage():
    return InMemoryKeyValueStorage()


@pytest.fixture
def persistence(storage, events):
    return PersistenceAdapter(
        storage,
        retry_attempts=3,
        retry_wait_min=0,
        retry_wait_max=0,
        event_logger=events,
    )


@pytest.fixture
def validator(catalog):
    return ExpenseValidator(catalog, clock=fixed_clock)


@pytest.fixture
def store(catalog, validator, events):
    """Store without persistence."""
    return RecordStore(catalog, validator=validator, event_logger=events)


@pytest.fixture
def persisted_store(catalog, validator, persistence, events):
    """Store that writes through to in-memory storage."""
    return RecordStore(
        catalog,
        validator=validator,
        persistence=persistence,
        event_logger=events,
    )
