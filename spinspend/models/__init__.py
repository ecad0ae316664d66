"""
Data Models Package

This package contains all Pydantic models used in SpinSpend.
All records in the ledger and the registry conform to these schemas.
"""

from spinspend.models.expense import (
    Expense,
    ExpenseCategory,
    Subscription,
    ValidationIssue,
    ValidationResult,
)
from spinspend.models.query import (
    CategoryTotal,
    MonthSummary,
    QueryResult,
    SummaryQuery,
)
from spinspend.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger and registry models
    "Expense",
    "ExpenseCategory",
    "Subscription",
    "ValidationIssue",
    "ValidationResult",
    # Query models
    "CategoryTotal",
    "MonthSummary",
    "QueryResult",
    "SummaryQuery",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
