"""
Record Store

The canonical, in-memory collection of expenses.

- Newest-inserted expense comes first; insertion order (not the expense
  date) is the default list order
- Ids are assigned here and never change
- Every successful mutation hands a full snapshot to the persistence
  adapter (write-through)
- update/delete of an unknown id is a no-op, never an exception

The store is synchronous and does no I/O itself.
"""

from typing import Any, Callable, Iterable, List, Mapping, Optional, Union
from uuid import UUID, uuid4

from expense_ledger.categories import CategoryCatalog
from expense_ledger.events.logger import EventLogger
from expense_ledger.models.event import LedgerEventBuilder
from expense_ledger.models.expense import (
    ExpenseDraft,
    ExpenseRecord,
    ExpenseUpdate,
)
from expense_ledger.persistence.adapter import PersistenceAdapter
from expense_ledger.validation import (
    ExpenseValidationError,
    ExpenseValidator,
    parse_model,
)


ExpenseId = Union[UUID, str]


class RecordStore:
    """
    CRUD over the ledger's expense records.
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        validator: Optional[ExpenseValidator] = None,
        persistence: Optional[PersistenceAdapter] = None,
        event_logger: Optional[EventLogger] = None,
        id_factory: Callable[[], UUID] = uuid4,
    ):
        """
        Args:
            catalog: Categories new and edited expenses must belong to
            validator: Semantic validator; built from the catalog if None
            persistence: Write-through target. If None, nothing is saved.
            event_logger: Where mutation events go
            id_factory: Source of new ids
        """
        self._catalog = catalog
        self._validator = validator or ExpenseValidator(catalog)
        self._persistence = persistence
        self._events = event_logger or EventLogger()
        self._id_factory = id_factory

        self._records: list[ExpenseRecord] = []
        self._index: dict[UUID, ExpenseRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, expense_id: object) -> bool:
        if not isinstance(expense_id, (UUID, str)):
            return False
        return self.get_by_id(expense_id) is not None

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_by_id(self, expense_id: ExpenseId) -> Optional[ExpenseRecord]:
        """Point lookup. Malformed ids simply find nothing."""
        key = self._coerce_id(expense_id)
        if key is None:
            return None
        return self._index.get(key)

    def list(self) -> List[ExpenseRecord]:
        """All expenses, newest-inserted first."""
        return list(self._records)

    def list_page(self, limit: int = 10, offset: int = 0) -> tuple[List[ExpenseRecord], int]:
        """
        One page of list() plus the total number of expenses.

        Raises:
            ValueError: on a negative limit or offset
        """
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must be non-negative")
        return self._records[offset:offset + limit], len(self._records)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create(self, draft: Union[ExpenseDraft, Mapping[str, Any]]) -> ExpenseRecord:
        """
        Add a new expense at the front of the ledger.

        Raises:
            ExpenseValidationError: if the expense is malformed or its
                category is unknown
        """
        draft = self._parse(ExpenseDraft, draft, "create")
        self._check(draft, "create")

        record = ExpenseRecord(id=self._fresh_id(), **draft.model_dump(exclude={"id"}))
        self._records.insert(0, record)
        self._index[record.id] = record

        self._events.log(LedgerEventBuilder.expense_created(
            expense_id=record.id,
            amount=str(record.amount),
            category=record.category,
        ))
        self._persist()
        return record

    def update(
        self,
        expense_id: ExpenseId,
        changes: Union[ExpenseUpdate, Mapping[str, Any]],
    ) -> Optional[ExpenseRecord]:
        """
        Merge the supplied fields into an existing expense.

        Fields not supplied keep their values. The record keeps its
        position in the list. The category is checked against the
        catalog only when it is among the changes, so restored records
        in a retired category stay editable.

        Returns:
            The updated record, or None if no expense has this id

        Raises:
            ExpenseValidationError: if the merged expense is invalid
        """
        existing = self.get_by_id(expense_id)
        if existing is None:
            self._events.log(LedgerEventBuilder.expense_not_found(str(expense_id), "update"))
            return None

        update = self._parse(ExpenseUpdate, changes, "update")
        fields = update.changes()

        merged = existing.model_dump()
        merged.update(fields)
        merged["id"] = existing.id
        record = self._parse(ExpenseRecord, merged, "update")
        self._check(record, "update", check_category="category" in fields)

        position = self._records.index(existing)
        self._records[position] = record
        self._index[record.id] = record

        self._events.log(LedgerEventBuilder.expense_updated(record.id, sorted(fields)))
        self._persist()
        return record

    def delete(self, expense_id: ExpenseId) -> bool:
        """
        Remove an expense permanently.

        Returns:
            True if an expense was removed, False if the id was unknown
        """
        existing = self.get_by_id(expense_id)
        if existing is None:
            self._events.log(LedgerEventBuilder.expense_not_found(str(expense_id), "delete"))
            return False

        self._records.remove(existing)
        del self._index[existing.id]

        self._events.log(LedgerEventBuilder.expense_deleted(existing.id))
        self._persist()
        return True

    def hydrate(self, records: Iterable[ExpenseRecord]) -> None:
        """
        Replace the whole collection with a restored snapshot.

        Used at startup; does not write back to storage. Later duplicates
        of an id are dropped.
        """
        self._records = []
        self._index = {}
        for record in records:
            if record.id in self._index:
                continue
            self._records.append(record)
            self._index[record.id] = record

    def clear(self, persist: bool = True) -> None:
        """Drop every expense; optionally persist the empty ledger."""
        self._records = []
        self._index = {}
        if persist:
            self._persist()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _parse(self, model, data, operation: str):
        try:
            return parse_model(model, data)
        except ExpenseValidationError as e:
            self._events.log(LedgerEventBuilder.validation_failed(
                operation,
                [issue.model_dump() for issue in e.issues],
            ))
            raise

    def _check(self, expense: ExpenseDraft, operation: str, check_category: bool = True) -> None:
        result = self._validator.validate(expense, check_category=check_category)
        if result.has_errors:
            errors = [issue for issue in result.issues if issue.severity == "error"]
            self._events.log(LedgerEventBuilder.validation_failed(
                operation,
                [issue.model_dump() for issue in errors],
            ))
            raise ExpenseValidationError(errors)
        if result.warnings:
            self._events.log(LedgerEventBuilder.validation_warning(
                getattr(expense, "id", None),
                result.warnings,
            ))

    def _fresh_id(self) -> UUID:
        new_id = self._id_factory()
        while new_id in self._index:
            new_id = self._id_factory()
        return new_id

    def _persist(self) -> None:
        if self._persistence is not None:
            self._persistence.schedule_save(self._records)

    @staticmethod
    def _coerce_id(expense_id: ExpenseId) -> Optional[UUID]:
        if isinstance(expense_id, UUID):
            return expense_id
        try:
            return UUID(str(expense_id))
        except ValueError:
            return None
