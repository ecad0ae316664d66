"""
Audit Models for SpinSpend

Every mutation of the ledger or the registry is logged for audit purposes.
This provides:
1. Traceability of who changed what (user vs. billing engine)
2. Debugging information when a charge looks wrong
3. A way to reconstruct the history of a subscription

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from spinspend.models.expense import utcnow


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"

    # Registry
    SUBSCRIPTION_ADDED = "subscription_added"
    SUBSCRIPTION_TOGGLED = "subscription_toggled"
    SUBSCRIPTION_DELETED = "subscription_deleted"

    # Billing engine
    BILLING_RUN_COMPLETED = "billing_run_completed"
    SUBSCRIPTION_CHARGED = "subscription_charged"

    # Failures
    VALIDATION_FAILED = "validation_failed"
    RECORD_NOT_FOUND = "record_not_found"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Column headers matching AuditEvent.to_row()
AUDIT_ROW_COLUMNS = (
    "event_id", "timestamp", "event_type", "severity", "entity_type", "entity_id",
    "correlation_id", "description", "details", "error_message", "is_user_action",
)


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity ('expense' or 'subscription')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all charges in one billing run)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_row(self) -> list[str]:
        """
        Flatten to a row of strings for the audit trail table.

        Columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(
            expense_id=expense.id,
            title=expense.title,
            amount=str(expense.amount),
            correlation_id=correlation_id,
        )
    """

    @staticmethod
    def expense_added(
        expense_id: UUID,
        title: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense recorded: {title} ({amount})",
            details={"title": title, "amount": amount, "category": category},
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(
        expense_id: UUID,
        title: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense deleted: {title}",
            details={"title": title},
            is_user_action=True,
        )

    @staticmethod
    def subscription_added(
        subscription_id: UUID,
        name: str,
        amount: str,
        billing_day: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_ADDED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription added: {name} ({amount} on day {billing_day})",
            details={"name": name, "amount": amount, "billing_day": billing_day},
            is_user_action=True,
        )

    @staticmethod
    def subscription_toggled(
        subscription_id: UUID,
        name: str,
        is_active: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        state = "activated" if is_active else "paused"
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_TOGGLED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription {state}: {name}",
            details={"name": name, "is_active": is_active},
            is_user_action=True,
        )

    @staticmethod
    def subscription_deleted(
        subscription_id: UUID,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_DELETED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription deleted: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def subscription_charged(
        subscription_id: UUID,
        expense_id: UUID,
        name: str,
        amount: str,
        billing_date: datetime,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_CHARGED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription charged: {name} ({amount})",
            details={
                "expense_id": str(expense_id),
                "amount": amount,
                "billing_date": billing_date.isoformat(),
            },
            is_user_action=False,
        )

    @staticmethod
    def billing_run_completed(
        reference_time: datetime,
        charged_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILLING_RUN_COMPLETED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Billing run at {reference_time.isoformat()} charged {charged_count} subscription(s)",
            details={
                "reference_time": reference_time.isoformat(),
                "charged_count": charged_count,
            },
        )

    @staticmethod
    def validation_failed(
        record_type: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=record_type,
            correlation_id=correlation_id,
            description=f"Rejected {record_type} input ({len(issues)} issue(s))",
            details={"issues": issues},
            error_code="VALIDATION_FAILED",
            error_message="; ".join(issue.get("message", "") for issue in issues),
            is_user_action=True,
        )

    @staticmethod
    def record_not_found(
        record_type: str,
        record_id: UUID,
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type=record_type,
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Cannot {operation} {record_type}: no record with id {record_id}",
            error_code="NOT_FOUND",
            is_user_action=True,
        )
