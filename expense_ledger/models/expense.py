"""
Core Data Models for Expense Ledger

These models define the strict schemas for all data flowing through the ledger.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Amounts are Decimal quantized to cents, never floats.
Totals are summed exactly, so 25.50 + 15.00 is always 40.50.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


CENT = Decimal("0.01")

SCHEMA_VERSION = 1


# =============================================================================
# REFERENCE DATA
# =============================================================================

class CategoryDefinition(BaseModel):
    """
    A spending category.

    Categories are static reference data, loaded once at process start.
    Expenses point at them by id and never embed them.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Stable category identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Display name"
    )
    color: str = Field(
        ...,
        pattern=r"^#[0-9A-Fa-f]{6}$",
        description="Hex color used by charts"
    )
    icon: str = Field(
        default="",
        description="Icon name used by the presentation layer"
    )


# =============================================================================
# EXPENSE RECORDS
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    An expense as entered by the user, before it has an id.

    `date` is when the expense happened, not when it was entered.
    All monthly bucketing uses it.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    amount: Annotated[
        Decimal,
        Field(gt=0, max_digits=14, decimal_places=2, description="Amount spent (required, > 0)")
    ]
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What the money was spent on"
    )
    date: datetime = Field(
        ...,
        description="When the expense occurred"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Id of a CategoryDefinition"
    )
    receipt_url: Optional[str] = Field(
        default=None,
        alias="receiptUrl",
        description="Reference to an attached receipt image"
    )

    @field_validator('amount')
    @classmethod
    def quantize_amount(cls, v: Decimal) -> Decimal:
        """Store every amount with exactly two decimal places."""
        return v.quantize(CENT)

    @field_validator('date', mode='before')
    @classmethod
    def promote_plain_date(cls, v):
        """A calendar date without a time means midnight of that day."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.min)
        return v

    @field_validator('receipt_url')
    @classmethod
    def blank_receipt_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class ExpenseRecord(ExpenseDraft):
    """
    A stored expense.

    The id is assigned by the RecordStore at creation and never changes.
    Records are frozen: edits produce a new, re-validated record.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )


class ExpenseUpdate(BaseModel):
    """
    A partial edit of an expense.

    Only fields that were explicitly supplied are applied.
    Passing receipt_url=None removes the receipt.
    """
    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    amount: Optional[Decimal] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    category: Optional[str] = None
    receipt_url: Optional[str] = Field(default=None, alias="receiptUrl")

    @field_validator('date', mode='before')
    @classmethod
    def promote_plain_date(cls, v):
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.min)
        return v

    def changes(self) -> dict:
        """Field-name keyed dict of the fields the caller actually set."""
        return self.model_dump(exclude_unset=True, by_alias=False)


# =============================================================================
# DERIVED AGGREGATES (never stored)
# =============================================================================

class MonthlyTotal(BaseModel):
    """Total spent in one calendar month."""

    month_label: str = Field(
        ...,
        description="Short label, e.g. 'Dec 24'"
    )
    year: int
    month: int = Field(ge=1, le=12)
    total: Decimal = Field(default=Decimal("0.00"))


class CategoryTotal(BaseModel):
    """Total spent in one category."""

    category_id: str
    name: str
    total: Decimal
    color: str


class MonthOverMonth(BaseModel):
    """This month against last month, as shown on the summary card."""

    current: MonthlyTotal
    previous: MonthlyTotal
    percent_change: float = Field(
        ...,
        description="Change in percent; 0.0 when last month had no spending"
    )

    @property
    def increased(self) -> bool:
        return self.percent_change > 0


# =============================================================================
# PERSISTED ENVELOPE
# =============================================================================

class LedgerDocument(BaseModel):
    """
    The single document the whole ledger is persisted as.

    Layout: {"schemaVersion": 1, "records": [...]}
    """
    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(
        default=SCHEMA_VERSION,
        alias="schemaVersion"
    )
    records: list[ExpenseRecord] = Field(default_factory=list)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'unknown_category', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (types, required fields)
    Stage 2: Semantic validation (catalog and sanity checks)
    """

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def is_valid(self) -> bool:
        return self.schema_valid and self.semantic_valid

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        """Messages of the non-blocking issues."""
        return [issue.message for issue in self.issues if issue.severity == "warning"]
