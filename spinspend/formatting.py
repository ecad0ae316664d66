"""Display helpers shared by the Streamlit pages."""

from datetime import date, datetime
from decimal import ROUND_DOWN, Decimal
from typing import Optional, Union

from spinspend.models.expense import Expense, ExpenseCategory
from spinspend.models.query import MonthSummary

Amount = Union[Decimal, int, float]


def format_amount(amount: Amount, symbol: str = "₺", decimals: int = 0) -> str:
    """
    "₺ 119" style amount.

    With decimals=0 the fraction is dropped, not rounded (119.99 -> 119).
    """
    value = Decimal(str(amount))
    if decimals <= 0:
        return f"{symbol} {int(value)}"
    quantum = Decimal(1).scaleb(-decimals)
    return f"{symbol} {value.quantize(quantum, rounding=ROUND_DOWN):,}"


def format_percentage(ratio: Optional[float]) -> str:
    """0.42 -> "42%". None (no limit) -> "—"."""
    if ratio is None:
        return "—"
    return f"{round(ratio * 100)}%"


def month_label(now: Union[date, datetime]) -> str:
    """e.g. "October 2026"."""
    return now.strftime("%B %Y")


def category_label(category: ExpenseCategory) -> str:
    return f"{category.emoji} {category.display_name}"


def expense_line(expense: Expense, symbol: str = "₺") -> str:
    """One-line description used by the recent and monthly lists."""
    flag = " ⚠️" if expense.is_unnecessary else ""
    return (
        f"{expense.category.emoji} {expense.title} · {expense.category.display_name}"
        f" · {expense.date:%d %b %Y} · {format_amount(expense.amount, symbol)}{flag}"
    )


def streak_label(days: int) -> str:
    if days == 0:
        return "No streak yet. Log an expense today to start one."
    if days == 1:
        return "🔥 1 day streak"
    return f"🔥 {days} day streak"


def limit_label(summary: MonthSummary, symbol: str = "₺") -> str:
    """Caption under the limit progress bar."""
    if not summary.has_limit:
        return "No monthly limit set"
    spent = format_amount(summary.total, symbol)
    limit = format_amount(summary.limit, symbol)
    if summary.total > summary.limit:
        over = format_amount(summary.total - summary.limit, symbol)
        return f"{spent} of {limit} · over by {over}"
    return f"{spent} of {limit} · {format_percentage(summary.limit_progress)} used"
