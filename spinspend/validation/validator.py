"""
Record Validation

DESIGN DECISION: Expenses and subscriptions are only ever built through
RecordValidator. It checks user input, reports every problem it finds as
a ValidationIssue, and raises RecordValidationError instead of building a
record when any issue is an error.

IMPORTANT: Validation NEVER silently fixes invalid input.
The one normalization is the documented one: a blank expense title
becomes the category name.

The pydantic models enforce the same bounds, so a record that slips past
the validator still cannot hold an invalid amount or billing day.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from spinspend.models.expense import (
    MAX_TEXT_LENGTH,
    Expense,
    ExpenseCategory,
    Subscription,
    ValidationIssue,
    ValidationResult,
)

MIN_BILLING_DAY = 1
MAX_BILLING_DAY = 28

AmountInput = Union[Decimal, int, float, str, None]


class RecordValidationError(ValueError):
    """User input was rejected. Carries the full ValidationResult."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"Invalid {result.record_type}: {messages}")


def parse_amount(value: AmountInput) -> Optional[Decimal]:
    """
    Parse an amount typed by the user.

    Accepts a comma as decimal separator ("12,5" -> 12.5).
    Returns None for blank or unparsable input; the sign is kept so the
    validator can report non-positive amounts.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        text = value.strip().replace(",", ".")
        if not text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None

    if not amount.is_finite():
        return None
    return amount


def _amount_issues(amount: Optional[Decimal]) -> list[ValidationIssue]:
    if amount is None:
        return [ValidationIssue(
            field="amount",
            issue_type="missing",
            message="Amount is required",
            severity="error",
            suggested_fix="Enter a number such as 45 or 12,50",
        )]
    if amount <= 0:
        return [ValidationIssue(
            field="amount",
            issue_type="invalid_value",
            message="Amount must be greater than zero",
            severity="error",
            suggested_fix="Enter a positive amount",
        )]
    return []


def _category_issues(category) -> list[ValidationIssue]:
    if category is None:
        return [ValidationIssue(
            field="category",
            issue_type="missing",
            message="Category is required",
            severity="error",
            suggested_fix="Pick a category",
        )]
    try:
        ExpenseCategory(category)
    except ValueError:
        return [ValidationIssue(
            field="category",
            issue_type="invalid_value",
            message=f"Unknown category: {category}",
            severity="error",
            suggested_fix="Pick one of: " + ", ".join(c.value for c in ExpenseCategory),
        )]
    return []


def _length_issues(field: str, text: Optional[str]) -> list[ValidationIssue]:
    if text is None or len(text.strip()) <= MAX_TEXT_LENGTH:
        return []
    return [ValidationIssue(
        field=field,
        issue_type="too_long",
        message=f"{field.capitalize()} is too long ({len(text.strip())} characters)",
        severity="error",
        suggested_fix=f"Use at most {MAX_TEXT_LENGTH} characters",
    )]


def _result(record_type: str, issues: list[ValidationIssue]) -> ValidationResult:
    return ValidationResult(
        record_type=record_type,
        is_valid=not any(issue.severity == "error" for issue in issues),
        issues=issues,
        warnings=[issue.message for issue in issues if issue.severity == "warning"],
    )


class RecordValidator:
    """
    Validates user input and builds Expense and Subscription records.

    validate_* only report; build_* validate and then construct.
    """

    def validate_expense(
        self,
        amount: AmountInput,
        category: Optional[ExpenseCategory],
        date: Optional[datetime] = None,
        now: Optional[datetime] = None,
        title: Optional[str] = None,
    ) -> ValidationResult:
        """
        Check expense input.

        Errors: missing or non-positive amount, missing category, title
        over the length cap.
        Warning: expense dated after ``now``.
        """
        issues = []
        issues.extend(_amount_issues(parse_amount(amount)))
        issues.extend(_category_issues(category))
        issues.extend(_length_issues("title", title))

        if date is not None and now is not None and date > now:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Expense date ({date:%Y-%m-%d}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        return _result("expense", issues)

    def validate_subscription(
        self,
        name: Optional[str],
        amount: AmountInput,
        category: Optional[ExpenseCategory],
        billing_day: Optional[int],
    ) -> ValidationResult:
        """
        Check subscription input.

        Errors: blank or overlong name, missing or non-positive amount, missing
        category, billing day outside 1..28.
        """
        issues = []

        if name is None or not name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Subscription name is required",
                severity="error",
                suggested_fix="Enter the service name, e.g. Netflix",
            ))
        else:
            issues.extend(_length_issues("name", name))

        issues.extend(_amount_issues(parse_amount(amount)))
        issues.extend(_category_issues(category))

        if billing_day is None:
            issues.append(ValidationIssue(
                field="billing_day",
                issue_type="missing",
                message="Billing day is required",
                severity="error",
                suggested_fix=f"Pick a day between {MIN_BILLING_DAY} and {MAX_BILLING_DAY}",
            ))
        elif (
            isinstance(billing_day, bool)
            or not isinstance(billing_day, int)
            or not MIN_BILLING_DAY <= billing_day <= MAX_BILLING_DAY
        ):
            issues.append(ValidationIssue(
                field="billing_day",
                issue_type="out_of_range",
                message=(
                    f"Billing day must be between {MIN_BILLING_DAY} and "
                    f"{MAX_BILLING_DAY} (got {billing_day})"
                ),
                severity="error",
                suggested_fix="Days 29-31 do not exist in every month; use 28 instead",
            ))

        return _result("subscription", issues)

    def build_expense(
        self,
        amount: AmountInput,
        category: ExpenseCategory,
        now: datetime,
        title: Optional[str] = None,
        date: Optional[datetime] = None,
        is_unnecessary: bool = False,
    ) -> Expense:
        """
        Validate and build an expense.

        A blank title becomes the category's display name; date defaults
        to ``now``.

        Raises:
            RecordValidationError: If any error-level issue was found
        """
        result = self.validate_expense(amount, category, date=date, now=now, title=title)
        if not result.is_valid:
            raise RecordValidationError(result)

        category = ExpenseCategory(category)
        final_title = title.strip() if title and title.strip() else category.display_name

        return Expense(
            title=final_title,
            amount=parse_amount(amount),
            category=category,
            date=date or now,
            is_unnecessary=is_unnecessary,
        )

    def build_subscription(
        self,
        name: str,
        amount: AmountInput,
        category: ExpenseCategory,
        billing_day: int,
        is_active: bool = True,
    ) -> Subscription:
        """
        Validate and build a subscription that has never been charged.

        Raises:
            RecordValidationError: If any error-level issue was found
        """
        result = self.validate_subscription(name, amount, category, billing_day)
        if not result.is_valid:
            raise RecordValidationError(result)

        return Subscription(
            name=name.strip(),
            amount=parse_amount(amount),
            category=ExpenseCategory(category),
            billing_day=billing_day,
            is_active=is_active,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what the add-expense and add-subscription forms show.
        """
        if result.is_valid and not result.warnings:
            return "✅ Looks good!"

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
