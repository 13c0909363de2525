"""
Application Root for Expense Ledger

Builds and owns the ledger components:
- RecordStore (CRUD, write-through to persistence)
- AggregationEngine (totals, recomputed on read)
- PersistenceAdapter (one versioned JSON document)

DESIGN DECISION: There is no module-level ledger. The app root creates
one ExpenseLedger and hands it to whatever needs it; tests build their
own isolated instances.
"""

from datetime import datetime
from typing import Callable, Optional

from expense_ledger.categories import CategoryCatalog, default_catalog
from expense_ledger.config import Settings, get_settings
from expense_ledger.events import EventLogger, configure_logging
from expense_ledger.persistence import PersistenceAdapter
from expense_ledger.queries import AggregationEngine
from expense_ledger.services.storage import (
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorage,
)
from expense_ledger.store import RecordStore
from expense_ledger.validation import ExpenseValidator


class ExpenseLedger:
    """
    The ledger as one object.

    Lifecycle:
    1. open()   → restore persisted expenses into the store
    2. records  → create / update / delete / list (each change is saved)
    3. aggregates → totals for the summary screens
    4. flush()  → wait until every change is on disk
    5. reset()  → erase everything ("Clear All Data")
    """

    def __init__(
        self,
        records: RecordStore,
        aggregates: AggregationEngine,
        persistence: PersistenceAdapter,
        catalog: CategoryCatalog,
        events: EventLogger,
    ):
        self.records = records
        self.aggregates = aggregates
        self.persistence = persistence
        self.catalog = catalog
        self.events = events

    async def open(self) -> int:
        """
        Load persisted expenses into the store.

        Unreadable state starts an empty ledger. Returns the number of
        expenses restored.
        """
        restored = await self.persistence.load()
        self.records.hydrate(restored)
        return len(self.records)

    async def flush(self) -> bool:
        """Wait for pending saves. False if the newest one failed."""
        return await self.persistence.drain()

    async def reset(self) -> bool:
        """
        Erase persisted state and empty the in-memory store.

        Returns False if storage could not be cleared; the in-memory
        store is emptied regardless.
        """
        await self.persistence.drain()
        cleared = await self.persistence.clear()
        self.records.clear(persist=False)
        return cleared


def create_storage(settings: Settings) -> KeyValueStorage:
    """Storage backend selected by configuration."""
    storage_settings = settings.storage
    if storage_settings.backend == "memory":
        return InMemoryKeyValueStorage()
    return JsonFileKeyValueStorage(storage_settings.data_dir)


def create_ledger(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
    clock: Optional[Callable[[], datetime]] = None,
    catalog: Optional[CategoryCatalog] = None,
) -> ExpenseLedger:
    """
    Factory function to create all ledger components.

    Args:
        settings: Configuration; get_settings() if None
        storage: Storage backend; chosen from settings if None
        clock: Source of "now" for validation and monthly totals
        catalog: Category catalog; the default catalog if None

    Returns:
        An ExpenseLedger that still needs `await ledger.open()`
    """
    settings = settings or get_settings()
    app_settings = settings.app
    persistence_settings = settings.persistence

    configure_logging(app_settings.effective_log_level)

    catalog = catalog or default_catalog()
    events = EventLogger()

    persistence = PersistenceAdapter(
        storage=storage or create_storage(settings),
        key=settings.storage.key,
        retry_attempts=persistence_settings.retry_attempts,
        retry_wait_min=persistence_settings.retry_wait_min,
        retry_wait_max=persistence_settings.retry_wait_max,
        event_logger=events,
    )
    validator = ExpenseValidator(
        catalog,
        future_date_tolerance_days=app_settings.future_date_tolerance_days,
        max_expense_amount=app_settings.max_expense_amount,
        clock=clock,
    )
    records = RecordStore(
        catalog,
        validator=validator,
        persistence=persistence,
        event_logger=events,
    )
    aggregates = AggregationEngine(
        records,
        catalog,
        clock=clock,
        default_window=app_settings.monthly_window,
    )

    return ExpenseLedger(
        records=records,
        aggregates=aggregates,
        persistence=persistence,
        catalog=catalog,
        events=events,
    )
