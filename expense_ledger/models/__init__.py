"""
Data Models Package

This package contains all Pydantic models used by the Expense Ledger.
All data flowing through the ledger must conform to these schemas.
"""

from expense_ledger.models.expense import (
    CENT,
    SCHEMA_VERSION,
    CategoryDefinition,
    CategoryTotal,
    ExpenseDraft,
    ExpenseRecord,
    ExpenseUpdate,
    LedgerDocument,
    MonthlyTotal,
    MonthOverMonth,
    ValidationIssue,
    ValidationResult,
)
from expense_ledger.models.event import (
    EventSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)

__all__ = [
    "CENT",
    "SCHEMA_VERSION",
    # Expense models
    "CategoryDefinition",
    "CategoryTotal",
    "ExpenseDraft",
    "ExpenseRecord",
    "ExpenseUpdate",
    "LedgerDocument",
    "MonthlyTotal",
    "MonthOverMonth",
    "ValidationIssue",
    "ValidationResult",
    # Event models
    "EventSeverity",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
]
