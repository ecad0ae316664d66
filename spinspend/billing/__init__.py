"""Subscription billing package."""

from spinspend.billing.engine import (
    already_charged,
    apply_due_subscriptions,
    billing_date_for,
    charge,
    is_due,
)

__all__ = [
    "already_charged",
    "apply_due_subscriptions",
    "billing_date_for",
    "charge",
    "is_due",
]
