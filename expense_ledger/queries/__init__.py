"""Ledger aggregation package."""

from expense_ledger.queries.aggregation import (
    MONTH_ABBREVIATIONS,
    AggregationEngine,
    month_label,
    shift_month,
)

__all__ = [
    "MONTH_ABBREVIATIONS",
    "AggregationEngine",
    "month_label",
    "shift_month",
]
