"""
Subscription Billing Engine

Walks the subscription registry and charges every subscription whose
billing day has arrived in the current calendar month.

GUARANTEES:
- A subscription is charged at most once per calendar month
  (its last_charged_date is checked before charging)
- Inactive subscriptions are never charged and never touched
- The synthesized expense is dated on the nominal billing day,
  not on the instant the engine ran
- A subscription whose billing day is still ahead keeps its marker,
  so a later run in the same month can charge it
"""

from datetime import datetime
from typing import MutableSequence

import structlog

from spinspend.models.expense import Expense, Subscription
from spinspend.periods import day_in_month, same_month

logger = structlog.get_logger(__name__)


def billing_date_for(subscription: Subscription, now: datetime) -> datetime:
    """The subscription's billing date in ``now``'s month."""
    return day_in_month(now, subscription.billing_day)


def already_charged(subscription: Subscription, now: datetime) -> bool:
    """Has this subscription been charged in ``now``'s month?"""
    last = subscription.last_charged_date
    return last is not None and same_month(last, now)


def is_due(subscription: Subscription, now: datetime) -> bool:
    """
    Should the billing engine charge this subscription at ``now``?

    Active, not yet charged this month, and the billing day has arrived.
    """
    if not subscription.is_active:
        return False
    if already_charged(subscription, now):
        return False
    return billing_date_for(subscription, now) <= now


def charge(subscription: Subscription, now: datetime) -> Expense:
    """
    Build the expense for one due subscription and stamp its marker.

    The marker is set to ``now`` (the check time), not the billing date.
    """
    expense = Expense(
        title=subscription.name,
        amount=subscription.amount,
        category=subscription.category,
        date=billing_date_for(subscription, now),
        is_unnecessary=False,
    )
    subscription.last_charged_date = now
    return expense


def apply_due_subscriptions(
    now: datetime,
    subscriptions: MutableSequence[Subscription],
    expenses: MutableSequence[Expense],
) -> list[Expense]:
    """
    Charge every due subscription.

    Mutates both collections in place: due subscriptions get their
    last_charged_date set to ``now`` and one expense each is appended
    to ``expenses``.

    Returns the newly appended expenses, in registry order.
    Calling it again within the same month appends nothing.
    """
    charged = []

    for subscription in subscriptions:
        if not is_due(subscription, now):
            continue

        expense = charge(subscription, now)
        expenses.append(expense)
        charged.append(expense)

        logger.info(
            "subscription_charged",
            subscription_id=str(subscription.id),
            name=subscription.name,
            amount=str(subscription.amount),
            billing_date=expense.date.isoformat(),
        )

    return charged
