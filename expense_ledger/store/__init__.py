"""Record store package."""

from expense_ledger.store.record_store import ExpenseId, RecordStore

__all__ = ["ExpenseId", "RecordStore"]
