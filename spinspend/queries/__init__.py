"""Ledger aggregation and query execution package."""

from spinspend.queries.aggregations import (
    category_breakdown,
    category_totals,
    limit_progress,
    month_expenses,
    month_summary,
    month_total,
    recent_expenses,
    streak,
    unnecessary_share,
    unnecessary_total,
)
from spinspend.queries.executor import QueryExecutionError, QueryExecutor

__all__ = [
    "QueryExecutionError",
    "QueryExecutor",
    "category_breakdown",
    "category_totals",
    "limit_progress",
    "month_expenses",
    "month_summary",
    "month_total",
    "recent_expenses",
    "streak",
    "unnecessary_share",
    "unnecessary_total",
]
