"""Expense validation package."""

from expense_ledger.validation.validator import (
    ExpenseValidationError,
    ExpenseValidator,
    issues_from_pydantic,
    parse_model,
)

__all__ = [
    "ExpenseValidationError",
    "ExpenseValidator",
    "issues_from_pydantic",
    "parse_model",
]
