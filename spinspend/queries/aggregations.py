"""
Ledger Aggregations

Pure queries over a snapshot of the ledger. Nothing here reads the clock
or mutates its input; every month-scoped function takes the reference
instant explicitly. Results are recomputed on every call.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from spinspend.models.expense import Expense, ExpenseCategory
from spinspend.models.query import CategoryTotal, MonthSummary
from spinspend.periods import DateLike, as_date, days_back, same_month

ZERO = Decimal("0")

Number = Union[Decimal, int, float, str]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _sum(expenses: Iterable[Expense]) -> Decimal:
    return sum((e.amount for e in expenses), ZERO)


def month_expenses(expenses: Iterable[Expense], now: DateLike) -> list[Expense]:
    """Expenses dated in ``now``'s calendar month, in ledger order."""
    return [e for e in expenses if same_month(e.date, now)]


def month_total(expenses: Iterable[Expense], now: DateLike) -> Decimal:
    return _sum(month_expenses(expenses, now))


def unnecessary_total(expenses: Iterable[Expense], now: DateLike) -> Decimal:
    """Sum of this month's expenses the user tagged as unnecessary."""
    return _sum(e for e in month_expenses(expenses, now) if e.is_unnecessary)


def unnecessary_share(expenses: Sequence[Expense], now: DateLike) -> float:
    """Unnecessary spending as a fraction of the month total (0 for an empty month)."""
    total = month_total(expenses, now)
    if total <= 0:
        return 0.0
    return float(unnecessary_total(expenses, now) / total)


def limit_progress(
    expenses: Iterable[Expense],
    now: DateLike,
    limit: Optional[Number],
) -> Optional[float]:
    """
    How much of the monthly limit is used, as a ratio capped at 1.0.

    Returns None when no limit is set (None or <= 0). None means
    "no limit", not 0%.
    """
    if limit is None:
        return None
    limit = _to_decimal(limit)
    if limit <= 0:
        return None
    return min(float(month_total(expenses, now) / limit), 1.0)


def recent_expenses(expenses: Iterable[Expense], count: int = 5) -> list[Expense]:
    """
    The ``count`` most recent expenses across the whole ledger.

    Sorted newest first. The sort is stable, so expenses sharing a
    timestamp keep their ledger order.
    """
    return sorted(expenses, key=lambda e: e.date, reverse=True)[:max(count, 0)]


def category_totals(
    expenses: Iterable[Expense],
    now: DateLike,
) -> list[tuple[ExpenseCategory, Decimal]]:
    """
    This month's spending per category, largest first.

    Categories with no expenses this month are left out.
    """
    totals: dict[ExpenseCategory, Decimal] = {}
    for expense in month_expenses(expenses, now):
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount

    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def category_breakdown(expenses: Iterable[Expense], now: DateLike) -> list[CategoryTotal]:
    """Same as category_totals, with the number of expenses per category."""
    current = month_expenses(expenses, now)
    counts: dict[ExpenseCategory, int] = {}
    for expense in current:
        counts[expense.category] = counts.get(expense.category, 0) + 1

    return [
        CategoryTotal(category=category, total=total, count=counts[category])
        for category, total in category_totals(current, now)
    ]


def streak(expenses: Iterable[Expense], today: DateLike) -> int:
    """
    Consecutive calendar days, ending today, with at least one expense.

    0 when today itself has no expense.
    """
    active_days = {as_date(e.date) for e in expenses}

    count = 0
    for day in days_back(today):
        if day not in active_days:
            break
        count += 1
    return count


def month_summary(
    expenses: Sequence[Expense],
    now: datetime,
    limit: Optional[Number] = None,
) -> MonthSummary:
    """Bundle every dashboard aggregation for ``now``'s month."""
    current = month_expenses(expenses, now)
    has_limit = limit is not None and _to_decimal(limit) > 0

    return MonthSummary(
        reference_time=now,
        expense_count=len(current),
        total=_sum(current),
        unnecessary_total=unnecessary_total(current, now),
        unnecessary_share=unnecessary_share(current, now),
        limit=_to_decimal(limit) if has_limit else None,
        limit_progress=limit_progress(current, now, limit),
        category_totals=category_breakdown(current, now),
        streak=streak(expenses, now),
    )
