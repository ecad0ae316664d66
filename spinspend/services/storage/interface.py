"""
Abstract Storage Interface

DESIGN DECISION: The ledger, the registry and the audit log sit behind
abstract interfaces. This allows us to:
1. Keep everything in memory today
2. Add a durable backend later without touching the tracker
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple. Expenses are append/delete only;
subscriptions can be replaced wholesale via update_subscription.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from spinspend.models.audit import AuditEvent
from spinspend.models.expense import Expense, Subscription


class LedgerInterface(ABC):
    """Ordered collection of expenses."""

    @abstractmethod
    def add_expense(self, expense: Expense) -> Expense:
        """
        Append an expense to the ledger.

        Raises:
            DuplicateError: If an expense with the same id exists
        """
        pass

    @abstractmethod
    def get_expense(self, expense_id: UUID) -> Optional[Expense]:
        """Return the expense, or None if no such id."""
        pass

    @abstractmethod
    def delete_expense(self, expense_id: UUID) -> Expense:
        """
        Remove an expense by id and return it.

        Raises:
            NotFoundError: If the id is unknown
        """
        pass

    @abstractmethod
    def list_expenses(self) -> list[Expense]:
        """Snapshot of all expenses in insertion order."""
        pass


class SubscriptionRegistryInterface(ABC):
    """Collection of recurring subscriptions."""

    @abstractmethod
    def add_subscription(self, subscription: Subscription) -> Subscription:
        """
        Register a subscription.

        Raises:
            DuplicateError: If a subscription with the same id exists
        """
        pass

    @abstractmethod
    def get_subscription(self, subscription_id: UUID) -> Optional[Subscription]:
        pass

    @abstractmethod
    def update_subscription(self, subscription: Subscription) -> Subscription:
        """
        Replace the stored subscription with the same id.

        Raises:
            NotFoundError: If the id is unknown
        """
        pass

    @abstractmethod
    def delete_subscription(self, subscription_id: UUID) -> Subscription:
        """
        Remove a subscription by id and return it.

        Raises:
            NotFoundError: If the id is unknown
        """
        pass

    @abstractmethod
    def list_subscriptions(self) -> list[Subscription]:
        """Snapshot of all subscriptions in insertion order."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        """Events sharing a correlation id, oldest first."""
        pass

    @abstractmethod
    def get_events_by_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEvent]:
        """Events about one expense or subscription, oldest first."""
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events, newest first."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""

    def __init__(self, record_type: str, record_id: UUID):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(f"No {record_type} with id {record_id}")


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
