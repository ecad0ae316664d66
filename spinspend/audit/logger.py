"""
Audit Logger

DESIGN DECISION: Every mutation of the ledger or the registry is logged.
This provides:
1. Complete traceability of user edits and automatic charges
2. Debugging capability when a charge looks wrong
3. A history the user can browse on the audit page

The audit logger:
- Always logs locally through structlog
- Gracefully handles storage failures (never crashes the caller)
- Supports correlation IDs to tie the charges of one billing run together
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

import structlog

from spinspend.config import AppSettings
from spinspend.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from spinspend.models.expense import Expense, Subscription
from spinspend.services.storage import AuditStorageInterface


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """
    Configure structlog for local logging.

    Safe to call more than once; the last call wins.
    """
    settings = settings or AppSettings()

    logging.basicConfig(format="%(message)s", level=settings.effective_log_level)
    logging.getLogger().setLevel(settings.effective_log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for the in-app history), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for the audit trail.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage is not None:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_expense_added(self, expense: Expense, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense.id,
            title=expense.title,
            amount=str(expense.amount),
            category=expense.category.value,
            correlation_id=correlation_id,
        ))

    def log_expense_deleted(self, expense: Expense, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.expense_deleted(
            expense_id=expense.id,
            title=expense.title,
            correlation_id=correlation_id,
        ))

    def log_subscription_added(
        self,
        subscription: Subscription,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.subscription_added(
            subscription_id=subscription.id,
            name=subscription.name,
            amount=str(subscription.amount),
            billing_day=subscription.billing_day,
            correlation_id=correlation_id,
        ))

    def log_subscription_toggled(
        self,
        subscription: Subscription,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.subscription_toggled(
            subscription_id=subscription.id,
            name=subscription.name,
            is_active=subscription.is_active,
            correlation_id=correlation_id,
        ))

    def log_subscription_deleted(
        self,
        subscription: Subscription,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.subscription_deleted(
            subscription_id=subscription.id,
            name=subscription.name,
            correlation_id=correlation_id,
        ))

    def log_subscription_charged(
        self,
        subscription: Subscription,
        expense: Expense,
        correlation_id: UUID,
    ) -> None:
        """Log one automatic charge made by the billing engine."""
        self.log(AuditEventBuilder.subscription_charged(
            subscription_id=subscription.id,
            expense_id=expense.id,
            name=subscription.name,
            amount=str(expense.amount),
            billing_date=expense.date,
            correlation_id=correlation_id,
        ))

    def log_billing_run(
        self,
        reference_time: datetime,
        charged_count: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.billing_run_completed(
            reference_time=reference_time,
            charged_count=charged_count,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        record_type: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            record_type=record_type,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_not_found(
        self,
        record_type: str,
        record_id: UUID,
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_not_found(
            record_type=record_type,
            record_id=record_id,
            operation=operation,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a billing run or a user action and pass it
    through every event the action produces.
    """
    return uuid4()
