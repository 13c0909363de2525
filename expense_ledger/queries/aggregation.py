"""
Aggregation Engine

Derived numbers for the summary screens:
- total to date
- totals for the last N calendar months
- totals per category
- this month vs last month

DESIGN DECISION: Nothing is cached. Every call recomputes from the
current RecordStore snapshot, so a total can never disagree with the
list the user is looking at. At hundreds to low thousands of expenses
this is cheap.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from expense_ledger.categories import (
    FALLBACK_CATEGORY_COLOR,
    UNRECOGNIZED_CATEGORY_ID,
    UNRECOGNIZED_CATEGORY_NAME,
    CategoryCatalog,
)
from expense_ledger.models.expense import (
    CategoryTotal,
    MonthlyTotal,
    MonthOverMonth,
)
from expense_ledger.store import RecordStore


ZERO = Decimal("0.00")

# Fixed English abbreviations; labels must not depend on the process locale
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def month_label(year: int, month: int) -> str:
    """Short label such as 'Dec 24'."""
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year % 100:02d}"


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by delta months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def to_local(moment: datetime) -> datetime:
    """Aware datetimes in local time; naive ones are already local."""
    if moment.tzinfo is not None:
        return moment.astimezone()
    return moment


class AggregationEngine:
    """
    Read-only summaries over a RecordStore.
    """

    def __init__(
        self,
        store: RecordStore,
        catalog: CategoryCatalog,
        clock: Optional[Callable[[], datetime]] = None,
        default_window: int = 6,
    ):
        """
        Args:
            store: The ledger to summarize
            catalog: Categories, in tie-break order
            clock: Returns "now"; datetime.now if None
            default_window: Months returned by monthly_totals() by default
        """
        self._store = store
        self._catalog = catalog
        self._clock = clock or datetime.now
        self._default_window = default_window

    def total_to_date(self) -> Decimal:
        """Sum of every expense amount, whatever its date."""
        return sum((record.amount for record in self._store.list()), ZERO)

    def monthly_totals(self, window_size: Optional[int] = None) -> list[MonthlyTotal]:
        """
        Totals for the `window_size` most recent calendar months,
        current month first.

        Expenses dated outside the window are ignored.
        """
        if window_size is None:
            window_size = self._default_window
        if window_size < 0:
            raise ValueError("window_size must not be negative")

        now = to_local(self._clock())

        # Keyed by (year, month); the label is display only
        buckets: dict[tuple[int, int], Decimal] = {}
        for offset in range(window_size):
            buckets[shift_month(now.year, now.month, -offset)] = ZERO

        for record in self._store.list():
            when = to_local(record.date)
            key = (when.year, when.month)
            if key in buckets:
                buckets[key] += record.amount

        return [
            MonthlyTotal(
                month_label=month_label(year, month),
                year=year,
                month=month,
                total=total,
            )
            for (year, month), total in buckets.items()
        ]

    def category_totals(self) -> list[CategoryTotal]:
        """
        Totals per category, largest first.

        Categories with nothing spent are left out. Ties keep catalog
        order. Expenses whose category is not in the catalog are summed
        under a synthetic 'unrecognized' entry, ranked after real
        categories on ties.
        """
        totals: dict[str, Decimal] = {category.id: ZERO for category in self._catalog}
        unrecognized = ZERO

        for record in self._store.list():
            if record.category in totals:
                totals[record.category] += record.amount
            else:
                unrecognized += record.amount

        entries = [
            CategoryTotal(
                category_id=category.id,
                name=category.name,
                total=totals[category.id],
                color=category.color,
            )
            for category in self._catalog
        ]
        entries.append(CategoryTotal(
            category_id=UNRECOGNIZED_CATEGORY_ID,
            name=UNRECOGNIZED_CATEGORY_NAME,
            total=unrecognized,
            color=FALLBACK_CATEGORY_COLOR,
        ))

        non_zero = [entry for entry in entries if entry.total != 0]
        # sorted() is stable, so equal totals keep catalog order
        return sorted(non_zero, key=lambda entry: entry.total, reverse=True)

    def month_over_month(self) -> MonthOverMonth:
        """This month's total against last month's."""
        current, previous = self.monthly_totals(2)
        if previous.total:
            change = (current.total - previous.total) / previous.total * 100
            percent_change = round(float(change), 1)
        else:
            percent_change = 0.0
        return MonthOverMonth(
            current=current,
            previous=previous,
            percent_change=percent_change,
        )
