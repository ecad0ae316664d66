"""
Summary Query Engine

DESIGN DECISION: Every read the UI makes goes through one entry point.
A SummaryQuery names the aggregation and the reference instant; the
executor runs it against a ledger snapshot and returns a QueryResult.

GUARANTEES:
- Only reports what is in the ledger
- Never reads the clock (reference_time comes from the query)
- Failures come back as success=False results, never as exceptions
"""

from decimal import Decimal
from typing import Callable, Optional

import structlog

from spinspend.models.expense import Expense
from spinspend.models.query import QueryResult, SummaryQuery
from spinspend.queries import aggregations
from spinspend.services.storage import LedgerInterface

logger = structlog.get_logger(__name__)


class QueryExecutionError(Exception):
    """Error during query execution."""
    pass


class QueryExecutor:
    """
    Executes summary queries against the expense ledger.

    default_limit is used when a limit-aware query carries no limit.
    """

    def __init__(
        self,
        ledger: LedgerInterface,
        default_limit: Optional[Decimal] = None,
    ):
        self._ledger = ledger
        self._default_limit = default_limit
        self._handlers: dict[str, Callable[[SummaryQuery, list[Expense]], QueryResult]] = {
            "month_expenses": self._execute_month_expenses,
            "month_total": self._execute_month_total,
            "unnecessary_total": self._execute_unnecessary_total,
            "limit_progress": self._execute_limit_progress,
            "recent": self._execute_recent,
            "category_totals": self._execute_category_totals,
            "streak": self._execute_streak,
            "summary": self._execute_summary,
        }

    def execute(self, query: SummaryQuery) -> QueryResult:
        """Execute a summary query and return its result."""
        try:
            handler = self._handlers.get(query.query_type)
            if handler is None:
                raise QueryExecutionError(f"Unsupported query type: {query.query_type}")
            return handler(query, self._ledger.list_expenses())

        except Exception as e:
            logger.error(
                "query_failed",
                query_id=str(query.query_id),
                query_type=query.query_type,
                error=str(e),
            )
            return QueryResult(
                query_id=query.query_id,
                success=False,
                error_message=str(e),
                data_found=False,
                result_count=0,
                query_description=f"Query failed: {str(e)}",
            )

    def _limit_for(self, query: SummaryQuery) -> Optional[Decimal]:
        return query.limit if query.limit is not None else self._default_limit

    def _execute_month_expenses(self, query: SummaryQuery, expenses: list[Expense]) -> QueryResult:
        current = aggregations.month_expenses(expenses, query.reference_time)
        current = sorted(current, key=lambda e: e.date, reverse=True)
        results = [self._expense_to_dict(e) for e in current]

        return QueryResult(
            query_id=query.query_id,
            success=True,
            data_found=len(results) > 0,
            result_count=len(results),
            results=results,
            query_description=f"Expenses {self._month_str(query)}",
        )

    def _execute_month_total(self, query: SummaryQuery, expenses: list[Expense]) -> QueryResult:
        current = aggregations.month_expenses(expenses, query.reference_time)
        total = aggregations.month_total(current, query.reference_time)

        return QueryResult(
            query_id=query.query_id,
            success=True,
            data_found=len(current) > 0,
            result_count=len(current),
            aggregation_result={"total_amount": total, "expense_count": len(current)},
            query_description=f"Total spending {self._month_str(query)}",
        )

    def _execute_unnecessary_total(self, query: SummaryQuery, expenses: list[Expense]) -> QueryResult:
        current = aggregations.month_expenses(expenses, query.reference_time)
        flagged = [e for e in current if e.is_unnecessary]

        return QueryResult(
            query_id=query.query_id,
            success=True,
            data_found=len(flagged) > 0,
            result_count=len(flagged),
            results=[self._expense_to_dict(e) for e in flagged],
            aggregation_result={
                "unnecessary_total": aggregations.unnecessary_total(current, query.reference_time),
                "unnecessary_share": aggregations.unnecessary_share(current, query.reference_time),
            },
            query_description=f"Unnecessary spending {self._month_str(query)}",
        )

    def _execute_limit_progress(self, query: SummaryQuery, expenses: list[Expense]) -> QueryResult:
        limit = self._limit_for(query)
        progress = aggregations.limit_progress(expenses, query.reference_time, limit)

        return QueryResult(
            query_id=query.query_id,
            success=True,
            data_found=progress is not None,
            result_count=0,
            aggregation_result={
                "has_limit": progress is not None,
                "limit": limit if progress is not None else None,
                "progress": progress,
                "spent": aggregations.month_total(expenses, query.reference_time),
            },
            query_description=(
                f"Limit progress {self._month_str(query)}"
                if progress is not None
                else "No monthly limit set"
            ),
        )

    def _execute_recent(self, query: SummaryQuery, expenses: list[Expense]) -> QueryResult:
        recent = aggregations.recent_expenses(expenses, query.count)

        return QueryResult(
            query_id=query.query_id,
            success=True,
            data_found=len(recent) > 0,
            result_count=len(recent),
            results=[self._expense_to_dict(e) for e in recent],
            query_description=f"{query.count} most recent expenses",
        )

    def _execute_category_totals(self, query: SummaryQuery, expenses: list[Expense]) -> QueryResult:
        breakdown = aggregations.category_breakdown(expenses, query.reference_time)
        results = [
            {"category": row.category.value, "total_amount": row.total, "count": row.count}
            for row in breakdown
        ]

        return QueryResult(
            query_id=query.query_id,
            success=True,
            data_found=len(results) > 0,
            result_count=len(results),
            results=results,
            aggregation_result={"breakdown": {r["category"]: r["total_amount"] for r in results}},
            query_description=f"Spending by category {self._month_str(query)}",
        )

    def _execute_streak(self, query: SummaryQuery, expenses: list[Expense]) -> QueryResult:
        days = aggregations.streak(expenses, query.reference_time)

        return QueryResult(
            query_id=query.query_id,
            success=True,
            data_found=days > 0,
            result_count=days,
            aggregation_result={"streak_days": days},
            query_description=f"Logging streak up to {query.reference_time:%d %b %Y}",
        )

    def _execute_summary(self, query: SummaryQuery, expenses: list[Expense]) -> QueryResult:
        summary = aggregations.month_summary(
            expenses, query.reference_time, self._limit_for(query)
        )

        return QueryResult(
            query_id=query.query_id,
            success=True,
            data_found=summary.expense_count > 0,
            result_count=summary.expense_count,
            aggregation_result=summary.model_dump(),
            query_description=f"Summary {self._month_str(query)}",
        )

    def _expense_to_dict(self, expense: Expense) -> dict:
        """Convert an expense to a dictionary for results."""
        return {
            "id": str(expense.id),
            "title": expense.title,
            "category": expense.category.value,
            "amount": expense.amount,
            "date": expense.date.isoformat(),
            "is_unnecessary": expense.is_unnecessary,
        }

    def _month_str(self, query: SummaryQuery) -> str:
        return f"in {query.reference_time.strftime('%B %Y')}"
