"""Tests for in-memory storage and the audit logger."""

import pytest
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from spinspend.audit import AuditLogger, create_correlation_id
from spinspend.models.audit import AuditEvent, AuditEventType
from spinspend.models.expense import Expense, ExpenseCategory, Subscription
from spinspend.services.storage import (
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryLedger,
    InMemorySubscriptionRegistry,
    NotFoundError,
    StorageError,
)


def make_expense(title: str = "Lunch") -> Expense:
    return Expense(
        title=title,
        amount=Decimal("120"),
        category=ExpenseCategory.FOOD,
        date=datetime(2026, 3, 10),
    )


def make_subscription(name: str = "Netflix") -> Subscription:
    return Subscription(
        name=name,
        amount=Decimal("119.99"),
        category=ExpenseCategory.ENTERTAINMENT,
        billing_day=5,
    )


class TestInMemoryLedger:
    """Tests for InMemoryLedger."""

    def test_add_and_list_in_order(self):
        ledger = InMemoryLedger()
        first, second = make_expense("first"), make_expense("second")
        ledger.add_expense(first)
        ledger.add_expense(second)
        assert ledger.list_expenses() == [first, second]
        assert len(ledger) == 2

    def test_list_is_a_snapshot(self):
        ledger = InMemoryLedger([make_expense()])
        snapshot = ledger.list_expenses()
        snapshot.append(make_expense())
        assert len(ledger) == 1

    def test_duplicate_id_rejected(self):
        expense = make_expense()
        ledger = InMemoryLedger([expense])
        with pytest.raises(DuplicateError):
            ledger.add_expense(expense)

    def test_delete(self):
        expense = make_expense()
        ledger = InMemoryLedger([expense])
        assert ledger.delete_expense(expense.id) == expense
        assert ledger.get_expense(expense.id) is None

    def test_delete_unknown_id(self):
        ledger = InMemoryLedger([make_expense()])
        missing = uuid4()
        with pytest.raises(NotFoundError) as exc_info:
            ledger.delete_expense(missing)
        assert exc_info.value.record_id == missing
        assert isinstance(exc_info.value, StorageError)
        assert len(ledger) == 1


class TestInMemorySubscriptionRegistry:
    """Tests for InMemorySubscriptionRegistry."""

    def test_add_get_list(self):
        netflix, spotify = make_subscription("Netflix"), make_subscription("Spotify")
        registry = InMemorySubscriptionRegistry([netflix, spotify])
        assert registry.get_subscription(spotify.id) is spotify
        assert [s.name for s in registry.list_subscriptions()] == ["Netflix", "Spotify"]

    def test_list_hands_out_stored_objects(self):
        """The billing engine stamps markers on these objects in place."""
        netflix = make_subscription()
        registry = InMemorySubscriptionRegistry([netflix])
        registry.list_subscriptions()[0].last_charged_date = datetime(2026, 3, 10)
        assert registry.get_subscription(netflix.id).last_charged_date == datetime(2026, 3, 10)

    def test_update_replaces(self):
        netflix = make_subscription()
        registry = InMemorySubscriptionRegistry([netflix])
        paused = netflix.model_copy(update={"is_active": False})
        registry.update_subscription(paused)
        assert registry.get_subscription(netflix.id).is_active is False

    def test_update_unknown(self):
        with pytest.raises(NotFoundError):
            InMemorySubscriptionRegistry().update_subscription(make_subscription())

    def test_delete_unknown(self):
        with pytest.raises(NotFoundError):
            InMemorySubscriptionRegistry().delete_subscription(uuid4())

    def test_duplicate_id_rejected(self):
        netflix = make_subscription()
        registry = InMemorySubscriptionRegistry([netflix])
        with pytest.raises(DuplicateError):
            registry.add_subscription(netflix)


class TestInMemoryAuditStorage:
    """Tests for InMemoryAuditStorage."""

    def test_recent_events_newest_first(self):
        storage = InMemoryAuditStorage()
        for i in range(3):
            storage.append_event(AuditEvent(
                event_type=AuditEventType.EXPENSE_ADDED,
                description=f"event {i}",
            ))
        recent = storage.get_recent_events(limit=2)
        assert [e.description for e in recent] == ["event 2", "event 1"]

    def test_lookup_by_correlation_and_entity(self):
        storage = InMemoryAuditStorage()
        correlation_id = create_correlation_id()
        entity_id = uuid4()
        storage.append_event(AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_CHARGED,
            description="charged",
            entity_type="subscription",
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))
        storage.append_event(AuditEvent(
            event_type=AuditEventType.BILLING_RUN_COMPLETED,
            description="run",
            correlation_id=correlation_id,
        ))

        assert len(storage.get_events_by_correlation_id(correlation_id)) == 2
        assert len(storage.get_events_by_entity("subscription", entity_id)) == 1
        assert storage.get_events_by_entity("expense", entity_id) == []


class FailingAuditStorage(InMemoryAuditStorage):
    def append_event(self, event: AuditEvent) -> bool:
        raise RuntimeError("disk full")


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_logs_to_storage(self):
        storage = InMemoryAuditStorage()
        audit = AuditLogger(storage)
        expense = make_expense()

        audit.log_expense_added(expense)

        events = storage.get_events_by_entity("expense", expense.id)
        assert events[0].event_type == AuditEventType.EXPENSE_ADDED
        assert events[0].details["amount"] == "120"

    def test_first_event_reaches_empty_storage(self):
        """An empty store is still a configured store."""
        storage = InMemoryAuditStorage()
        assert len(storage) == 0

        event = AuditEvent(event_type=AuditEventType.EXPENSE_ADDED, description="first")
        assert AuditLogger(storage).log(event) is True

        assert storage.get_recent_events(1) == [event]

    def test_without_storage(self):
        event = AuditEvent(event_type=AuditEventType.EXPENSE_ADDED, description="x")
        assert AuditLogger().log(event) is True

    def test_storage_failure_is_swallowed(self):
        event = AuditEvent(event_type=AuditEventType.EXPENSE_ADDED, description="x")
        assert AuditLogger(FailingAuditStorage()).log(event) is False
