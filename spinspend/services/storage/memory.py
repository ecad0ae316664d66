"""
In-Memory Storage

Process-lifetime implementations of the storage interfaces.
State is lost when the process exits.

The registry hands out the stored Subscription objects themselves, so
the billing engine can stamp last_charged_date in place. The ledger's
list_expenses returns a new list each call; expenses are frozen anyway.
"""

from typing import Optional
from uuid import UUID

import structlog

from spinspend.models.audit import AuditEvent
from spinspend.models.expense import Expense, Subscription
from spinspend.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerInterface,
    NotFoundError,
    SubscriptionRegistryInterface,
)

logger = structlog.get_logger(__name__)


class InMemoryLedger(LedgerInterface):
    """Expense ledger backed by a list."""

    def __init__(self, expenses: Optional[list[Expense]] = None):
        self._expenses: list[Expense] = []
        for expense in expenses or []:
            self.add_expense(expense)

    def __len__(self) -> int:
        return len(self._expenses)

    def _index_of(self, expense_id: UUID) -> Optional[int]:
        for i, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return i
        return None

    def add_expense(self, expense: Expense) -> Expense:
        if self._index_of(expense.id) is not None:
            raise DuplicateError(f"Expense {expense.id} is already in the ledger")
        self._expenses.append(expense)
        logger.debug("expense_stored", expense_id=str(expense.id))
        return expense

    def get_expense(self, expense_id: UUID) -> Optional[Expense]:
        index = self._index_of(expense_id)
        return self._expenses[index] if index is not None else None

    def delete_expense(self, expense_id: UUID) -> Expense:
        index = self._index_of(expense_id)
        if index is None:
            raise NotFoundError("expense", expense_id)
        return self._expenses.pop(index)

    def list_expenses(self) -> list[Expense]:
        return list(self._expenses)


class InMemorySubscriptionRegistry(SubscriptionRegistryInterface):
    """Subscription registry backed by an insertion-ordered dict."""

    def __init__(self, subscriptions: Optional[list[Subscription]] = None):
        self._subscriptions: dict[UUID, Subscription] = {}
        for subscription in subscriptions or []:
            self.add_subscription(subscription)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def add_subscription(self, subscription: Subscription) -> Subscription:
        if subscription.id in self._subscriptions:
            raise DuplicateError(f"Subscription {subscription.id} is already registered")
        self._subscriptions[subscription.id] = subscription
        logger.debug("subscription_stored", subscription_id=str(subscription.id))
        return subscription

    def get_subscription(self, subscription_id: UUID) -> Optional[Subscription]:
        return self._subscriptions.get(subscription_id)

    def update_subscription(self, subscription: Subscription) -> Subscription:
        if subscription.id not in self._subscriptions:
            raise NotFoundError("subscription", subscription.id)
        self._subscriptions[subscription.id] = subscription
        return subscription

    def delete_subscription(self, subscription_id: UUID) -> Subscription:
        try:
            return self._subscriptions.pop(subscription_id)
        except KeyError:
            raise NotFoundError("subscription", subscription_id) from None

    def list_subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions.values())


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log backed by a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def __len__(self) -> int:
        return len(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_events_by_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events[-limit:])) if limit > 0 else []
