"""
Query Models

A SummaryQuery names one aggregation and the instant it is evaluated at.
The executor runs it against a ledger snapshot and answers with a
QueryResult. MonthSummary bundles everything the dashboard shows.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from spinspend.models.expense import ExpenseCategory, utcnow


QUERY_TYPES = (
    "month_expenses",
    "month_total",
    "unnecessary_total",
    "limit_progress",
    "recent",
    "category_totals",
    "streak",
    "summary",
)


class SummaryQuery(BaseModel):
    """
    A structured read over the ledger.

    reference_time is the "now" every month-scoped aggregation uses.
    """

    query_id: UUID = Field(
        default_factory=uuid4
    )
    query_type: str = Field(
        ...,
        pattern="^(" + "|".join(QUERY_TYPES) + ")$",
        description="Which aggregation to run"
    )
    reference_time: datetime = Field(
        ...,
        description="Instant the query is evaluated at"
    )
    limit: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Monthly spending limit (limit_progress and summary)"
    )
    count: int = Field(
        default=5,
        ge=1,
        le=100,
        description="How many recent expenses to return"
    )


class QueryResult(BaseModel):
    """Result of executing a SummaryQuery."""

    query_id: UUID
    executed_at: datetime = Field(
        default_factory=utcnow
    )

    # Success/failure
    success: bool
    error_message: Optional[str] = None

    # Results
    data_found: bool = Field(
        ...,
        description="Was any data found?"
    )
    result_count: int = Field(
        ge=0,
        description="Number of results"
    )
    results: list[dict] = Field(
        default_factory=list,
        description="Query results as list of dicts"
    )
    aggregation_result: Optional[dict] = None

    query_description: str = Field(
        ...,
        description="Human-readable description of what was queried"
    )


class CategoryTotal(BaseModel):
    """Spending in one category for a month."""

    category: ExpenseCategory
    total: Decimal
    count: int = Field(ge=1)


class MonthSummary(BaseModel):
    """Everything the dashboard needs for one month."""

    reference_time: datetime
    expense_count: int = Field(ge=0)
    total: Decimal
    unnecessary_total: Decimal
    unnecessary_share: float = Field(ge=0.0, le=1.0)
    limit: Optional[Decimal] = None
    limit_progress: Optional[float] = Field(
        default=None,
        description="Spent / limit, capped at 1.0; None when no limit is set"
    )
    category_totals: list[CategoryTotal] = Field(default_factory=list)
    streak: int = Field(ge=0)

    @property
    def has_limit(self) -> bool:
        return self.limit_progress is not None

    @property
    def remaining(self) -> Optional[Decimal]:
        """What is left under the limit, never negative."""
        if self.limit is None or self.limit <= 0:
            return None
        return max(self.limit - self.total, Decimal("0"))
