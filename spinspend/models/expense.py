"""
Core Data Models for SpinSpend

These models define the strict schemas for the ledger and the registry.
They are designed to:
1. Enforce the amount and billing-day bounds at runtime
2. Provide clear validation error messages
3. Be serializable for logging and the audit trail

DESIGN DECISION: Expenses are frozen once created. The only way to change
an expense is to delete it and record a new one. Subscriptions stay
mutable because the billing engine stamps their last-charged marker.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

MAX_TEXT_LENGTH = 200


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp for record metadata."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    The set is closed. Display metadata lives in ``_CATEGORY_DISPLAY``
    and every member must have an entry there.
    """
    COFFEE = "coffee"
    FOOD = "food"
    TRANSPORT = "transport"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        """Human-readable category name."""
        return _CATEGORY_DISPLAY[self][0]

    @property
    def emoji(self) -> str:
        """Icon shown next to the category."""
        return _CATEGORY_DISPLAY[self][1]


_CATEGORY_DISPLAY: dict[ExpenseCategory, tuple[str, str]] = {
    ExpenseCategory.COFFEE: ("Coffee", "☕️"),
    ExpenseCategory.FOOD: ("Food", "🍔"),
    ExpenseCategory.TRANSPORT: ("Transport", "🚕"),
    ExpenseCategory.ENTERTAINMENT: ("Entertainment", "🎮"),
    ExpenseCategory.SHOPPING: ("Shopping", "🛍️"),
    ExpenseCategory.OTHER: ("Other", "📦"),
}


# =============================================================================
# LEDGER AND REGISTRY RECORDS
# =============================================================================

class Expense(BaseModel):
    """
    A single recorded expense.

    Created by the user or synthesized by the billing engine.
    Build these through ``RecordValidator.build_expense`` so a blank
    title falls back to the category name.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=MAX_TEXT_LENGTH,
        description="What the money was spent on"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent (currency-agnostic)"
    )
    category: ExpenseCategory
    date: datetime = Field(
        ...,
        description="When the expense happened"
    )
    is_unnecessary: bool = Field(
        default=False,
        description="User marked this as discretionary spending"
    )


class Subscription(BaseModel):
    """
    A recurring monthly charge.

    billing_day is capped at 28 so the billing date exists in every month.
    last_charged_date is None until the billing engine charges it.
    """
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique subscription ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=MAX_TEXT_LENGTH,
        description="Service name (e.g., Netflix)"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount charged every month"
    )
    category: ExpenseCategory
    billing_day: int = Field(
        ...,
        ge=1,
        le=28,
        description="Day of month the charge recurs on"
    )
    is_active: bool = Field(
        default=True,
        description="Inactive subscriptions are never charged"
    )
    last_charged_date: Optional[datetime] = Field(
        default=None,
        description="When the billing engine last charged this subscription"
    )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating user input for a new record.

    Only error-level issues block construction. Warnings are shown
    to the user but the record is still created.
    """

    record_type: str = Field(
        ...,
        pattern="^(expense|subscription)$",
        description="Which kind of record was validated"
    )
    validated_at: datetime = Field(
        default_factory=utcnow
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def error_fields(self) -> list[str]:
        return [issue.field for issue in self.issues if issue.severity == "error"]
