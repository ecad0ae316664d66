"""
Main Orchestrator for SpinSpend

This module ties together all the components and exposes the command
and query surface the UI talks to:
1. Expenses (add, delete)
2. Subscriptions (add, pause/resume, delete)
3. Billing (tick: charge every due subscription)
4. Reads (month totals, limit progress, category breakdown, streak, ...)

DESIGN DECISION: The tracker enforces the boundaries:
- No record reaches the ledger or registry without validation
- A rejected or not-found operation changes nothing
- Every mutation is audited
- "now" is always a parameter; the tracker never reads the clock

One RLock guards the ledger+registry pair. Streamlit runs each session
on its own worker thread, and the lock keeps a billing run and a user
edit from interleaving.
"""

import threading
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog

from spinspend.audit import AuditLogger, configure_logging, create_correlation_id
from spinspend.billing import apply_due_subscriptions, billing_date_for
from spinspend.billing.engine import already_charged
from spinspend.config import BudgetSettings, get_settings
from spinspend.models.audit import AuditEvent
from spinspend.models.expense import Expense, ExpenseCategory, Subscription
from spinspend.models.query import MonthSummary, QueryResult, SummaryQuery
from spinspend.queries import QueryExecutor, aggregations
from spinspend.services.storage import (
    InMemoryAuditStorage,
    InMemoryLedger,
    InMemorySubscriptionRegistry,
    LedgerInterface,
    NotFoundError,
    SubscriptionRegistryInterface,
)
from spinspend.validation import RecordValidationError, RecordValidator
from spinspend.validation.validator import AmountInput

logger = structlog.get_logger(__name__)


class ExpenseTracker:
    """
    Owns one ledger and one subscription registry.

    All mutations go through this class. Reads take a snapshot of the
    ledger under the lock and aggregate outside it.
    """

    def __init__(
        self,
        ledger: Optional[LedgerInterface] = None,
        registry: Optional[SubscriptionRegistryInterface] = None,
        validator: Optional[RecordValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        budget_settings: Optional[BudgetSettings] = None,
    ):
        self._ledger = ledger if ledger is not None else InMemoryLedger()
        self._registry = registry if registry is not None else InMemorySubscriptionRegistry()
        self._validator = validator or RecordValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._budget = budget_settings or get_settings().budget
        self._monthly_limit: Optional[Decimal] = (
            self._budget.monthly_limit if self._budget.has_limit else None
        )
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def currency_symbol(self) -> str:
        return self._budget.currency_symbol

    @property
    def validator(self) -> RecordValidator:
        return self._validator

    @property
    def monthly_limit(self) -> Optional[Decimal]:
        """The active limit, or None when there is none."""
        return self._monthly_limit

    @monthly_limit.setter
    def monthly_limit(self, value: Optional[Decimal]) -> None:
        if value is not None:
            value = Decimal(str(value))
            if value < 0:
                raise ValueError("Monthly limit cannot be negative")
            if value == 0:
                value = None
        self._monthly_limit = value
        logger.info("monthly_limit_changed", limit=str(value) if value else None)

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def add_expense(
        self,
        amount: AmountInput,
        category: ExpenseCategory,
        now: datetime,
        title: Optional[str] = None,
        date: Optional[datetime] = None,
        is_unnecessary: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Validate and record a new expense.

        Raises:
            RecordValidationError: Input was rejected; the ledger is unchanged
        """
        try:
            expense = self._validator.build_expense(
                amount=amount,
                category=category,
                now=now,
                title=title,
                date=date,
                is_unnecessary=is_unnecessary,
            )
        except RecordValidationError as e:
            self._audit_logger.log_validation_failed(
                record_type="expense",
                issues=[issue.model_dump() for issue in e.result.issues],
                correlation_id=correlation_id,
            )
            raise

        with self._lock:
            self._ledger.add_expense(expense)

        self._audit_logger.log_expense_added(expense, correlation_id=correlation_id)
        return expense

    def delete_expense(
        self,
        expense_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Remove an expense.

        Raises:
            NotFoundError: No expense has this id; nothing was removed
        """
        try:
            with self._lock:
                expense = self._ledger.delete_expense(expense_id)
        except NotFoundError:
            self._audit_logger.log_not_found("expense", expense_id, "delete", correlation_id)
            raise

        self._audit_logger.log_expense_deleted(expense, correlation_id=correlation_id)
        return expense

    def expenses(self) -> list[Expense]:
        """Snapshot of the ledger in insertion order."""
        with self._lock:
            return self._ledger.list_expenses()

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def add_subscription(
        self,
        name: str,
        amount: AmountInput,
        category: ExpenseCategory,
        billing_day: int,
        correlation_id: Optional[UUID] = None,
    ) -> Subscription:
        """
        Validate and register a new, never-charged subscription.

        Returns a copy; the registry keeps its own instance.

        Raises:
            RecordValidationError: Input was rejected; the registry is unchanged
        """
        try:
            subscription = self._validator.build_subscription(
                name=name,
                amount=amount,
                category=category,
                billing_day=billing_day,
            )
        except RecordValidationError as e:
            self._audit_logger.log_validation_failed(
                record_type="subscription",
                issues=[issue.model_dump() for issue in e.result.issues],
                correlation_id=correlation_id,
            )
            raise

        with self._lock:
            self._registry.add_subscription(subscription)

        self._audit_logger.log_subscription_added(subscription, correlation_id=correlation_id)
        return subscription.model_copy()

    def set_subscription_active(
        self,
        subscription_id: UUID,
        is_active: bool,
        correlation_id: Optional[UUID] = None,
    ) -> Subscription:
        """
        Pause or resume a subscription.

        Raises:
            NotFoundError: No subscription has this id
        """
        with self._lock:
            current = self._registry.get_subscription(subscription_id)
            if current is None:
                self._audit_logger.log_not_found(
                    "subscription", subscription_id, "update", correlation_id
                )
                raise NotFoundError("subscription", subscription_id)

            updated = current.model_copy(update={"is_active": is_active})
            self._registry.update_subscription(updated)

        self._audit_logger.log_subscription_toggled(updated, correlation_id=correlation_id)
        return updated.model_copy()

    def delete_subscription(
        self,
        subscription_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> Subscription:
        """
        Remove a subscription. Expenses it already produced stay in the ledger.

        Raises:
            NotFoundError: No subscription has this id
        """
        try:
            with self._lock:
                subscription = self._registry.delete_subscription(subscription_id)
        except NotFoundError:
            self._audit_logger.log_not_found(
                "subscription", subscription_id, "delete", correlation_id
            )
            raise

        self._audit_logger.log_subscription_deleted(subscription, correlation_id=correlation_id)
        return subscription

    def subscriptions(self) -> list[Subscription]:
        """Snapshot of the registry in insertion order."""
        with self._lock:
            return [s.model_copy() for s in self._registry.list_subscriptions()]

    def upcoming_subscriptions(self, now: datetime) -> list[tuple[Subscription, datetime]]:
        """
        Active subscriptions still to be charged later in ``now``'s month.

        Sorted by billing date.
        """
        upcoming = []
        for subscription in self.subscriptions():
            if not subscription.is_active or already_charged(subscription, now):
                continue
            billing_date = billing_date_for(subscription, now)
            if billing_date > now:
                upcoming.append((subscription, billing_date))
        return sorted(upcoming, key=lambda pair: pair[1])

    # ------------------------------------------------------------------
    # Billing
    # ------------------------------------------------------------------

    def tick(self, now: datetime) -> list[Expense]:
        """
        Run the billing engine once at ``now``.

        Returns the expenses synthesized by this run. Calling it again in
        the same month returns an empty list for subscriptions already
        charged.
        """
        correlation_id = create_correlation_id()

        with self._lock:
            subscriptions = self._registry.list_subscriptions()
            before = {s.id: s.last_charged_date for s in subscriptions}

            charged = apply_due_subscriptions(now, subscriptions, self._ledger.list_expenses())
            charged_subscriptions = [
                s for s in subscriptions if s.last_charged_date != before[s.id]
            ]

            for subscription, expense in zip(charged_subscriptions, charged):
                self._ledger.add_expense(expense)
                self._registry.update_subscription(subscription)

        for subscription, expense in zip(charged_subscriptions, charged):
            self._audit_logger.log_subscription_charged(subscription, expense, correlation_id)
        self._audit_logger.log_billing_run(now, len(charged), correlation_id)

        return charged

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _resolve_limit(self, limit: Optional[Decimal]) -> Optional[Decimal]:
        return limit if limit is not None else self._monthly_limit

    def month_expenses(self, now: datetime) -> list[Expense]:
        """This month's expenses, newest first."""
        current = aggregations.month_expenses(self.expenses(), now)
        return sorted(current, key=lambda e: e.date, reverse=True)

    def month_total(self, now: datetime) -> Decimal:
        return aggregations.month_total(self.expenses(), now)

    def unnecessary_total(self, now: datetime) -> Decimal:
        return aggregations.unnecessary_total(self.expenses(), now)

    def unnecessary_expenses(self, now: datetime) -> list[Expense]:
        return [e for e in self.month_expenses(now) if e.is_unnecessary]

    def limit_progress(self, now: datetime, limit: Optional[Decimal] = None) -> Optional[float]:
        return aggregations.limit_progress(self.expenses(), now, self._resolve_limit(limit))

    def recent_expenses(self, count: Optional[int] = None) -> list[Expense]:
        return aggregations.recent_expenses(
            self.expenses(), count if count is not None else self._budget.recent_expenses_count
        )

    def category_totals(self, now: datetime) -> list[tuple[ExpenseCategory, Decimal]]:
        return aggregations.category_totals(self.expenses(), now)

    def streak(self, today: datetime) -> int:
        return aggregations.streak(self.expenses(), today)

    def summary(self, now: datetime, limit: Optional[Decimal] = None) -> MonthSummary:
        return aggregations.month_summary(self.expenses(), now, self._resolve_limit(limit))

    def query(self, query: SummaryQuery) -> QueryResult:
        """Run a structured summary query against the current ledger."""
        with self._lock:
            snapshot = InMemoryLedger(self._ledger.list_expenses())
        executor = QueryExecutor(snapshot, default_limit=self._monthly_limit)
        return executor.execute(query)

    def audit_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent audit events, newest first (empty without audit storage)."""
        storage = self._audit_logger.storage
        if storage is None:
            return []
        return storage.get_recent_events(limit)

    # ------------------------------------------------------------------
    # Demo data
    # ------------------------------------------------------------------

    def load_sample_data(self, now: datetime) -> None:
        """Seed a few expenses and subscriptions around ``now``."""
        correlation_id = create_correlation_id()

        samples = [
            ("Starbucks", "85", ExpenseCategory.COFFEE, 0, False),
            ("Uber", "140", ExpenseCategory.TRANSPORT, 1, False),
            ("Burger", "210", ExpenseCategory.FOOD, 2, False),
            ("Steam sale", "350", ExpenseCategory.ENTERTAINMENT, 4, True),
            ("Sneakers", "1200", ExpenseCategory.SHOPPING, 9, True),
        ]
        for title, amount, category, days_ago, unnecessary in samples:
            self.add_expense(
                amount=amount,
                category=category,
                now=now,
                title=title,
                date=now - timedelta(days=days_ago),
                is_unnecessary=unnecessary,
                correlation_id=correlation_id,
            )

        self.add_subscription("Netflix", "119.99", ExpenseCategory.ENTERTAINMENT, 5,
                              correlation_id=correlation_id)
        self.add_subscription("Spotify", "59.99", ExpenseCategory.ENTERTAINMENT, 15,
                              correlation_id=correlation_id)
        self.add_subscription("iCloud", "39.99", ExpenseCategory.OTHER, 28,
                              correlation_id=correlation_id)

        logger.info("sample_data_loaded", expenses=len(samples), subscriptions=3)


def create_tracker(
    now: Optional[datetime] = None,
    with_audit_storage: bool = True,
) -> ExpenseTracker:
    """
    Factory function to create a fully wired tracker.

    Args:
        now: Reference instant for sample data. Required when
             BUDGET_LOAD_SAMPLE_DATA is enabled.
        with_audit_storage: Keep an in-memory audit trail.
                            Set to False for local-only logging.
    """
    settings = get_settings()
    configure_logging(settings.app)

    audit_logger = AuditLogger(InMemoryAuditStorage() if with_audit_storage else None)
    tracker = ExpenseTracker(audit_logger=audit_logger, budget_settings=settings.budget)

    if settings.budget.load_sample_data:
        if now is None:
            raise ValueError("now is required to load sample data")
        tracker.load_sample_data(now)

    return tracker
