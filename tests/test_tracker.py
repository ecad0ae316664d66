"""Integration tests for ExpenseTracker with in-memory storage."""

import pytest
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from spinspend.audit import AuditLogger
from spinspend.config import BudgetSettings
from spinspend.models.audit import AuditEventType
from spinspend.models.expense import ExpenseCategory
from spinspend.models.query import SummaryQuery
from spinspend.orchestrator import ExpenseTracker
from spinspend.services.storage import InMemoryAuditStorage, NotFoundError
from spinspend.validation import RecordValidationError

NOW = datetime(2026, 3, 10, 14, 30)


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def tracker(audit_storage):
    return ExpenseTracker(
        audit_logger=AuditLogger(audit_storage),
        budget_settings=BudgetSettings(monthly_limit=Decimal("1000"), recent_expenses_count=5),
    )


class TestExpenseCommands:
    """Adding and deleting expenses."""

    def test_add_expense(self, tracker, audit_storage):
        expense = tracker.add_expense(
            amount="85", category=ExpenseCategory.COFFEE, now=NOW, title="Starbucks"
        )
        assert tracker.expenses() == [expense]
        assert expense.date == NOW

        events = audit_storage.get_events_by_entity("expense", expense.id)
        assert events[0].event_type == AuditEventType.EXPENSE_ADDED

    def test_zero_amount_leaves_ledger_unchanged(self, tracker, audit_storage):
        """Rejected construction: nothing reaches the ledger."""
        with pytest.raises(RecordValidationError):
            tracker.add_expense(amount="0", category=ExpenseCategory.FOOD, now=NOW)

        assert tracker.expenses() == []
        recent = audit_storage.get_recent_events(1)
        assert recent[0].event_type == AuditEventType.VALIDATION_FAILED

    def test_overlong_title_is_a_validation_error(self, tracker, audit_storage):
        with pytest.raises(RecordValidationError):
            tracker.add_expense(
                amount="10", category=ExpenseCategory.FOOD, now=NOW, title="x" * 201
            )

        assert tracker.expenses() == []
        event = audit_storage.get_recent_events(1)[0]
        assert event.event_type == AuditEventType.VALIDATION_FAILED
        assert "Title is too long" in event.error_message

    def test_delete_expense(self, tracker):
        expense = tracker.add_expense(amount="10", category=ExpenseCategory.FOOD, now=NOW)
        assert tracker.delete_expense(expense.id) == expense
        assert tracker.expenses() == []

    def test_delete_unknown_expense(self, tracker, audit_storage):
        """Not-found is an error, but nothing changes."""
        kept = tracker.add_expense(amount="10", category=ExpenseCategory.FOOD, now=NOW)

        with pytest.raises(NotFoundError):
            tracker.delete_expense(uuid4())

        assert tracker.expenses() == [kept]
        assert audit_storage.get_recent_events(1)[0].event_type == AuditEventType.RECORD_NOT_FOUND


class TestSubscriptionCommands:
    """Registering, toggling and deleting subscriptions."""

    def test_add_subscription(self, tracker):
        subscription = tracker.add_subscription(
            name="Netflix", amount="119.99", category=ExpenseCategory.ENTERTAINMENT, billing_day=5
        )
        assert [s.id for s in tracker.subscriptions()] == [subscription.id]

    def test_invalid_billing_day_rejected(self, tracker):
        with pytest.raises(RecordValidationError):
            tracker.add_subscription(
                name="Gym", amount="450", category=ExpenseCategory.OTHER, billing_day=31
            )
        assert tracker.subscriptions() == []

    def test_toggle(self, tracker):
        subscription = tracker.add_subscription(
            name="Gym", amount="450", category=ExpenseCategory.OTHER, billing_day=1
        )
        paused = tracker.set_subscription_active(subscription.id, False)
        assert paused.is_active is False
        assert tracker.subscriptions()[0].is_active is False

    def test_returned_subscriptions_are_copies(self, tracker):
        """Only tracker methods change the registry."""
        added = tracker.add_subscription(
            name="Netflix", amount="119.99", category=ExpenseCategory.ENTERTAINMENT, billing_day=5
        )
        added.is_active = False
        assert tracker.subscriptions()[0].is_active is True

        paused = tracker.set_subscription_active(added.id, False)
        paused.is_active = True
        assert tracker.subscriptions()[0].is_active is False

    def test_overlong_name_rejected(self, tracker):
        with pytest.raises(RecordValidationError):
            tracker.add_subscription(
                name="n" * 201, amount="10", category=ExpenseCategory.OTHER, billing_day=1
            )
        assert tracker.subscriptions() == []

    def test_toggle_unknown(self, tracker):
        with pytest.raises(NotFoundError):
            tracker.set_subscription_active(uuid4(), False)

    def test_delete_keeps_charged_expenses(self, tracker):
        subscription = tracker.add_subscription(
            name="Netflix", amount="119.99", category=ExpenseCategory.ENTERTAINMENT, billing_day=5
        )
        tracker.tick(NOW)
        tracker.delete_subscription(subscription.id)

        assert tracker.subscriptions() == []
        assert len(tracker.expenses()) == 1

    def test_delete_unknown_subscription(self, tracker):
        with pytest.raises(NotFoundError):
            tracker.delete_subscription(uuid4())

    def test_snapshot_copies_do_not_leak(self, tracker):
        tracker.add_subscription(
            name="Netflix", amount="119.99", category=ExpenseCategory.ENTERTAINMENT, billing_day=5
        )
        tracker.subscriptions()[0].is_active = False
        assert tracker.subscriptions()[0].is_active is True


class TestTick:
    """Billing through the tracker."""

    def test_netflix_example(self, tracker):
        """Charged once on the 10th, dated the 5th; nothing more on the 20th."""
        subscription = tracker.add_subscription(
            name="Netflix", amount="119.99", category=ExpenseCategory.ENTERTAINMENT, billing_day=5
        )

        charged = tracker.tick(NOW)

        assert len(charged) == 1
        assert charged[0].title == "Netflix"
        assert charged[0].amount == Decimal("119.99")
        assert charged[0].date == datetime(2026, 3, 5)
        assert charged[0].is_unnecessary is False
        assert tracker.expenses() == charged
        assert tracker.subscriptions()[0].last_charged_date == NOW
        assert tracker.subscriptions()[0].id == subscription.id

        assert tracker.tick(datetime(2026, 3, 20)) == []
        assert len(tracker.expenses()) == 1

    def test_paused_subscription_not_charged(self, tracker):
        subscription = tracker.add_subscription(
            name="Gym", amount="450", category=ExpenseCategory.OTHER, billing_day=1
        )
        tracker.set_subscription_active(subscription.id, False)

        assert tracker.tick(NOW) == []
        assert tracker.subscriptions()[0].last_charged_date is None

    def test_charges_are_audited_under_one_correlation_id(self, tracker, audit_storage):
        netflix = tracker.add_subscription(
            name="Netflix", amount="119.99", category=ExpenseCategory.ENTERTAINMENT, billing_day=5
        )
        tracker.add_subscription(
            name="Gym", amount="450", category=ExpenseCategory.OTHER, billing_day=1
        )

        tracker.tick(NOW)

        charge_events = audit_storage.get_events_by_entity("subscription", netflix.id)
        charge_event = next(
            e for e in charge_events if e.event_type == AuditEventType.SUBSCRIPTION_CHARGED
        )
        run_events = audit_storage.get_events_by_correlation_id(charge_event.correlation_id)
        assert [e.event_type for e in run_events] == [
            AuditEventType.SUBSCRIPTION_CHARGED,
            AuditEventType.SUBSCRIPTION_CHARGED,
            AuditEventType.BILLING_RUN_COMPLETED,
        ]
        assert run_events[-1].details["charged_count"] == 2

    def test_upcoming_subscriptions(self, tracker):
        tracker.add_subscription(
            name="Netflix", amount="119.99", category=ExpenseCategory.ENTERTAINMENT, billing_day=5
        )
        tracker.add_subscription(
            name="iCloud", amount="39.99", category=ExpenseCategory.OTHER, billing_day=28
        )
        tracker.add_subscription(
            name="Spotify", amount="59.99", category=ExpenseCategory.ENTERTAINMENT, billing_day=15
        )

        upcoming = tracker.upcoming_subscriptions(NOW)

        assert [(s.name, d.day) for s, d in upcoming] == [("Spotify", 15), ("iCloud", 28)]


class TestReads:
    """Aggregations through the tracker."""

    def test_summary_uses_configured_limit(self, tracker):
        tracker.add_expense(amount="250", category=ExpenseCategory.FOOD, now=NOW)
        tracker.add_expense(
            amount="250", category=ExpenseCategory.SHOPPING, now=NOW, is_unnecessary=True
        )

        summary = tracker.summary(NOW)

        assert summary.total == Decimal("500")
        assert summary.limit_progress == pytest.approx(0.5)
        assert summary.unnecessary_total == Decimal("250")
        assert summary.streak == 1
        assert tracker.limit_progress(NOW) == pytest.approx(0.5)
        assert tracker.unnecessary_expenses(NOW)[0].category == ExpenseCategory.SHOPPING

    def test_limit_override(self, tracker):
        tracker.add_expense(amount="250", category=ExpenseCategory.FOOD, now=NOW)
        assert tracker.limit_progress(NOW, limit=Decimal("100")) == 1.0

    def test_setting_limit_to_zero_removes_it(self, tracker):
        tracker.monthly_limit = Decimal("0")
        assert tracker.monthly_limit is None
        assert tracker.limit_progress(NOW) is None

    def test_negative_limit_rejected(self, tracker):
        with pytest.raises(ValueError):
            tracker.monthly_limit = Decimal("-1")

    def test_month_expenses_and_totals(self, tracker):
        tracker.add_expense(
            amount="40", category=ExpenseCategory.COFFEE, now=NOW, date=datetime(2026, 3, 2)
        )
        tracker.add_expense(
            amount="60", category=ExpenseCategory.FOOD, now=NOW, date=datetime(2026, 3, 9)
        )
        tracker.add_expense(
            amount="999", category=ExpenseCategory.FOOD, now=NOW, date=datetime(2026, 2, 28, 23, 59)
        )

        assert [e.amount for e in tracker.month_expenses(NOW)] == [Decimal("60"), Decimal("40")]
        assert tracker.month_total(NOW) == Decimal("100")
        assert tracker.category_totals(NOW)[0] == (ExpenseCategory.FOOD, Decimal("60"))
        assert len(tracker.recent_expenses()) == 3

    def test_recent_expenses_count(self, tracker):
        tracker.add_expense(amount="10", category=ExpenseCategory.FOOD, now=NOW)
        assert tracker.recent_expenses(0) == []
        assert len(tracker.recent_expenses()) == 1

    def test_query(self, tracker):
        tracker.add_expense(amount="250", category=ExpenseCategory.FOOD, now=NOW)
        result = tracker.query(SummaryQuery(query_type="limit_progress", reference_time=NOW))
        assert result.aggregation_result["progress"] == pytest.approx(0.25)

    def test_audit_events(self, tracker):
        tracker.add_expense(amount="1", category=ExpenseCategory.FOOD, now=NOW)
        assert tracker.audit_events(limit=10)[0].event_type == AuditEventType.EXPENSE_ADDED


class TestSampleData:
    def test_load_sample_data(self, tracker):
        tracker.load_sample_data(NOW)

        assert len(tracker.expenses()) == 5
        assert [s.name for s in tracker.subscriptions()] == ["Netflix", "Spotify", "iCloud"]
        assert tracker.streak(NOW) == 3

        charged = tracker.tick(NOW)
        assert [e.title for e in charged] == ["Netflix"]
