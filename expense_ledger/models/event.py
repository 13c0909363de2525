"""
Ledger Event Models

Every mutation and every persistence outcome produces a LedgerEvent.
Events go to the structured log and to a short in-memory history the
presentation layer can read (e.g. to tell the user a save failed).

DESIGN DECISION: Events describe what happened to the ledger.
They are not stored with the records and are not a history of record
versions.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events the ledger emits."""
    # Record store
    EXPENSE_CREATED = "expense_created"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSE_NOT_FOUND = "expense_not_found"
    VALIDATION_FAILED = "validation_failed"
    VALIDATION_WARNING = "validation_warning"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    LOAD_FAILED = "load_failed"
    SAVE_COMPLETED = "save_completed"
    SAVE_FAILED = "save_failed"
    LEDGER_RESET = "ledger_reset"


class EventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LedgerEvent(BaseModel):
    """A single ledger event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: LedgerEventType
    severity: EventSeverity = EventSeverity.INFO

    # The expense this is about, if any
    entity_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.expense_created(expense_id, "12.50", "food")
        event = LedgerEventBuilder.save_failed(sequence, "disk full")
    """

    @staticmethod
    def expense_created(
        expense_id: UUID,
        amount: str,
        category: str,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_CREATED,
            entity_id=expense_id,
            description=f"Expense created: {amount} in {category}",
            details={
                "amount": amount,
                "category": category,
            },
        )

    @staticmethod
    def expense_updated(
        expense_id: UUID,
        fields: list[str],
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_UPDATED,
            entity_id=expense_id,
            description=f"Expense updated: {', '.join(fields) or 'no fields'}",
            details={"fields": fields},
        )

    @staticmethod
    def expense_deleted(expense_id: UUID) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_DELETED,
            entity_id=expense_id,
            description="Expense deleted",
        )

    @staticmethod
    def expense_not_found(expense_id: str, operation: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_NOT_FOUND,
            severity=EventSeverity.WARNING,
            description=f"{operation.capitalize()} ignored: no expense with id {expense_id}",
            details={
                "expense_id": expense_id,
                "operation": operation,
            },
        )

    @staticmethod
    def validation_failed(
        operation: str,
        issues: list[dict],
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.VALIDATION_FAILED,
            severity=EventSeverity.WARNING,
            description=f"{operation.capitalize()} rejected with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
        )

    @staticmethod
    def validation_warning(
        expense_id: Optional[UUID],
        warnings: list[str],
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.VALIDATION_WARNING,
            severity=EventSeverity.WARNING,
            entity_id=expense_id,
            description=f"Expense accepted with {len(warnings)} warnings",
            details={"warnings": warnings},
        )

    @staticmethod
    def ledger_loaded(record_count: int, key: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_LOADED,
            description=f"Ledger loaded with {record_count} expenses",
            details={
                "record_count": record_count,
                "key": key,
            },
        )

    @staticmethod
    def load_failed(key: str, reason: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LOAD_FAILED,
            severity=EventSeverity.WARNING,
            description="Persisted ledger could not be read; starting empty",
            error_message=reason,
            details={"key": key},
        )

    @staticmethod
    def save_completed(sequence: int, record_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SAVE_COMPLETED,
            severity=EventSeverity.DEBUG,
            description=f"Ledger saved ({record_count} expenses)",
            details={
                "sequence": sequence,
                "record_count": record_count,
            },
        )

    @staticmethod
    def save_failed(sequence: int, reason: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SAVE_FAILED,
            severity=EventSeverity.ERROR,
            description="Ledger changes could not be saved",
            error_message=reason,
            details={"sequence": sequence},
        )

    @staticmethod
    def ledger_reset(key: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_RESET,
            severity=EventSeverity.WARNING,
            description="All ledger data cleared",
            details={"key": key},
        )
