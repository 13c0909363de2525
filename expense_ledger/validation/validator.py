"""
Two-Stage Expense Validation

STAGE 1 - SCHEMA VALIDATION:
- Types, required fields, amount > 0 with at most two decimals,
  non-empty description
- Done by the pydantic models; errors are converted to ValidationIssues

STAGE 2 - SEMANTIC VALIDATION:
- Category must exist in the catalog (error)
- Date far in the future (warning)
- Absurdly large amount (warning)

Errors reject the expense at the RecordStore boundary.
Warnings never block; they are logged so the UI can show them.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from expense_ledger.categories import CategoryCatalog
from expense_ledger.models.expense import (
    ExpenseDraft,
    ValidationIssue,
    ValidationResult,
)


class ExpenseValidationError(ValueError):
    """An expense was rejected. `issues` says why."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        summary = "; ".join(f"{issue.field}: {issue.message}" for issue in issues)
        super().__init__(f"Invalid expense: {summary}")


def issues_from_pydantic(error: ValidationError) -> list[ValidationIssue]:
    """Translate pydantic errors into ValidationIssues."""
    issues = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail.get("loc", ())) or "expense"
        issues.append(ValidationIssue(
            field=field,
            issue_type=detail.get("type", "invalid"),
            message=detail.get("msg", "Invalid value"),
            severity="error",
        ))
    return issues


def parse_model(model: type[BaseModel], data: Union[BaseModel, Mapping[str, Any]]) -> Any:
    """
    Stage 1: build a model from user input.

    Raises:
        ExpenseValidationError: if the input does not fit the schema
    """
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ExpenseValidationError(issues_from_pydantic(e)) from e


class ExpenseValidator:
    """
    Semantic checks for expenses that already passed schema validation.
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        future_date_tolerance_days: int = 7,
        max_expense_amount: Union[Decimal, float] = Decimal("1000000"),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._catalog = catalog
        self._future_tolerance = timedelta(days=future_date_tolerance_days)
        self._max_amount = Decimal(str(max_expense_amount))
        self._clock = clock or datetime.now

    def validate(self, expense: ExpenseDraft, check_category: bool = True) -> ValidationResult:
        """
        Run stage 2 on an expense.

        Args:
            expense: Expense that passed schema validation
            check_category: False skips the catalog check, for edits that
                leave a restored record's retired category untouched
        """
        is_valid, issues = self._validate_semantic(expense, check_category)
        return ValidationResult(
            schema_valid=True,
            semantic_valid=is_valid,
            issues=issues,
        )

    def _validate_semantic(
        self,
        expense: ExpenseDraft,
        check_category: bool = True,
    ) -> tuple[bool, list[ValidationIssue]]:
        issues = []

        if check_category and expense.category not in self._catalog:
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"Unknown category: {expense.category}",
                severity="error",
                suggested_fix=f"Use one of: {', '.join(self._catalog.ids())}",
            ))

        now = self._now_like(expense.date)
        if expense.date > now + self._future_tolerance:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Expense date ({expense.date.date()}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        if expense.amount > self._max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount {expense.amount} is unusually large",
                severity="warning",
                suggested_fix="Check the decimal point",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _now_like(self, moment: datetime) -> datetime:
        """Current time, aware or naive to match `moment`."""
        now = self._clock()
        if moment.tzinfo is not None and now.tzinfo is None:
            return now.astimezone()
        if moment.tzinfo is None and now.tzinfo is not None:
            return now.astimezone().replace(tzinfo=None)
        return now
