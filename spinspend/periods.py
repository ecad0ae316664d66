"""
Calendar helpers shared by the billing engine and the aggregations.

Everything here is pure: callers pass the reference instant in.
Datetimes keep whatever tzinfo they were given; comparisons between
naive and aware values are the caller's problem.
"""

from datetime import date, datetime, timedelta
from typing import Iterator, Union

DateLike = Union[date, datetime]


def same_month(a: DateLike, b: DateLike) -> bool:
    """True when both fall in the same calendar year and month."""
    return a.year == b.year and a.month == b.month


def day_in_month(now: datetime, day: int) -> datetime:
    """
    Midnight of ``day`` in ``now``'s year and month.

    ``day`` must exist in that month; billing days are capped at 28
    so this never overflows.
    """
    return now.replace(day=day, hour=0, minute=0, second=0, microsecond=0)


def start_of_month(now: datetime) -> datetime:
    return day_in_month(now, 1)


def as_date(value: DateLike) -> date:
    """Calendar day of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_back(start: DateLike) -> Iterator[date]:
    """Yield start, start - 1 day, start - 2 days, ... without end."""
    day = as_date(start)
    while True:
        yield day
        day -= timedelta(days=1)
