"""
Streamlit Frontend for SpinSpend

A thin view over ExpenseTracker. Every page reads "now" once per rerun
and passes it down; the tracker itself never reads the clock.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages when input is rejected
3. Subscriptions are charged when the dashboard opens, never silently
   in the background
"""

from datetime import datetime, time
from decimal import Decimal

import streamlit as st

from spinspend.config import get_settings, validate_all_settings
from spinspend.formatting import (
    category_label,
    expense_line,
    format_amount,
    format_percentage,
    limit_label,
    month_label,
    streak_label,
)
from spinspend.models.audit import AUDIT_ROW_COLUMNS
from spinspend.models.expense import ExpenseCategory
from spinspend.orchestrator import ExpenseTracker, create_tracker
from spinspend.services.storage import NotFoundError
from spinspend.validation import RecordValidationError


# Page configuration
st.set_page_config(
    page_title="SpinSpend",
    page_icon="💸",
    layout="centered",
    initial_sidebar_state="expanded",
)


def get_tracker() -> ExpenseTracker:
    """One tracker per browser session; state lives only as long as the session."""
    if "tracker" not in st.session_state:
        st.session_state.tracker = create_tracker(now=datetime.now())
    return st.session_state.tracker


def show_validation_error(tracker: ExpenseTracker, error: RecordValidationError) -> None:
    st.error(tracker.validator.get_user_friendly_summary(error.result))


def main():
    """Main application entry point."""
    tracker = get_tracker()
    now = datetime.now()

    st.sidebar.title("💸 SpinSpend")
    app_settings = get_settings().app
    if not app_settings.is_production:
        st.sidebar.caption(f"Environment: {app_settings.app_environment}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "🏠 Dashboard",
            "➕ Add Expense",
            "📅 This Month",
            "🧾 Unnecessary Spending",
            "🔁 Subscriptions",
            "⚙️ Settings",
        ],
        index=0,
    )

    if page == "🏠 Dashboard":
        render_dashboard(tracker, now)
    elif page == "➕ Add Expense":
        render_add_expense_page(tracker, now)
    elif page == "📅 This Month":
        render_month_page(tracker, now)
    elif page == "🧾 Unnecessary Spending":
        render_unnecessary_page(tracker, now)
    elif page == "🔁 Subscriptions":
        render_subscriptions_page(tracker, now)
    elif page == "⚙️ Settings":
        render_settings_page(tracker)


def render_dashboard(tracker: ExpenseTracker, now: datetime):
    """Monthly card, limit bar, streak and recent expenses."""
    charged = tracker.tick(now)
    for expense in charged:
        st.toast(f"Charged {expense.title}: {format_amount(expense.amount, tracker.currency_symbol)}")

    summary = tracker.summary(now)
    symbol = tracker.currency_symbol

    st.caption(month_label(now))
    st.title("This Month's Spending")
    st.metric(
        label=f"{summary.expense_count} expenses this month",
        value=format_amount(summary.total, symbol),
    )

    if summary.has_limit:
        st.progress(summary.limit_progress, text=limit_label(summary, symbol))
    else:
        st.caption(limit_label(summary, symbol))

    st.markdown(f"**{streak_label(summary.streak)}**")

    st.markdown("---")
    st.subheader("Recent Expenses")
    recent = tracker.recent_expenses()
    if not recent:
        st.info("No expenses yet. Use ➕ Add Expense to add your first one.")
    for expense in recent:
        st.markdown(expense_line(expense, symbol))


def render_add_expense_page(tracker: ExpenseTracker, now: datetime):
    """Expense form. Amount accepts a comma as decimal separator."""
    st.title("➕ New Expense")

    with st.form("add_expense", clear_on_submit=True):
        category = st.selectbox(
            "Category *",
            options=list(ExpenseCategory),
            index=list(ExpenseCategory).index(ExpenseCategory.FOOD),
            format_func=category_label,
        )
        amount_text = st.text_input(f"Amount ({tracker.currency_symbol}) *", placeholder="0")
        title = st.text_input("Note (optional)", placeholder="e.g. Starbucks, Uber, Steam...")
        day = st.date_input("Date", value=now.date(), max_value=now.date())
        is_unnecessary = st.checkbox("I didn't really need this")

        submitted = st.form_submit_button("Save Expense", type="primary")

    if submitted:
        when = now if day == now.date() else datetime.combine(day, time(12, 0))
        try:
            expense = tracker.add_expense(
                amount=amount_text,
                category=category,
                now=now,
                title=title,
                date=when,
                is_unnecessary=is_unnecessary,
            )
            st.success(f"Saved {expense.title}: {format_amount(expense.amount, tracker.currency_symbol, 2)}")
        except RecordValidationError as e:
            show_validation_error(tracker, e)


def render_month_page(tracker: ExpenseTracker, now: datetime):
    """All of this month's expenses plus the category breakdown."""
    symbol = tracker.currency_symbol
    expenses = tracker.month_expenses(now)

    st.title("📅 This Month")
    st.metric("Total this month", format_amount(tracker.month_total(now), symbol))

    st.subheader("By category")
    totals = tracker.category_totals(now)
    if not totals:
        st.caption("Nothing spent yet.")
    for category, total in totals:
        st.markdown(f"{category_label(category)}: **{format_amount(total, symbol)}**")

    st.subheader("All expenses this month")
    if not expenses:
        st.info("No expenses recorded for this month yet.")
    for expense in expenses:
        col1, col2 = st.columns([5, 1])
        with col1:
            st.markdown(expense_line(expense, symbol))
        with col2:
            if st.button("🗑️", key=f"delete_{expense.id}"):
                try:
                    tracker.delete_expense(expense.id)
                    st.rerun()
                except NotFoundError as e:
                    st.warning(str(e))


def render_unnecessary_page(tracker: ExpenseTracker, now: datetime):
    symbol = tracker.currency_symbol
    summary = tracker.summary(now)

    st.title("🧾 Unnecessary Spending")
    st.metric(
        "Spent on things you didn't need",
        format_amount(summary.unnecessary_total, symbol),
        delta=f"{format_percentage(summary.unnecessary_share)} of this month",
        delta_color="off",
    )

    flagged = tracker.unnecessary_expenses(now)
    if not flagged:
        st.success("Nothing flagged this month. Nice!")
    for expense in flagged:
        st.markdown(expense_line(expense, symbol))


def render_subscriptions_page(tracker: ExpenseTracker, now: datetime):
    """Register, pause and remove recurring charges."""
    symbol = tracker.currency_symbol
    st.title("🔁 Subscriptions")

    with st.form("add_subscription", clear_on_submit=True):
        name = st.text_input("Name *", placeholder="e.g. Netflix")
        amount_text = st.text_input(f"Monthly amount ({symbol}) *")
        category = st.selectbox(
            "Category *",
            options=list(ExpenseCategory),
            index=list(ExpenseCategory).index(ExpenseCategory.ENTERTAINMENT),
            format_func=category_label,
        )
        billing_day = st.number_input("Billing day *", min_value=1, max_value=28, value=1, step=1)
        submitted = st.form_submit_button("Add Subscription", type="primary")

    if submitted:
        try:
            subscription = tracker.add_subscription(
                name=name,
                amount=amount_text,
                category=category,
                billing_day=int(billing_day),
            )
            st.success(f"Added {subscription.name}")
        except RecordValidationError as e:
            show_validation_error(tracker, e)

    upcoming = tracker.upcoming_subscriptions(now)
    if upcoming:
        st.subheader("Coming up this month")
        for subscription, billing_date in upcoming:
            st.markdown(
                f"{subscription.category.emoji} {subscription.name} · "
                f"{billing_date:%d %b} · {format_amount(subscription.amount, symbol)}"
            )

    st.subheader("All subscriptions")
    subscriptions = tracker.subscriptions()
    if not subscriptions:
        st.info("No subscriptions yet.")
    for subscription in subscriptions:
        col1, col2, col3 = st.columns([4, 1, 1])
        with col1:
            last = (
                f"last charged {subscription.last_charged_date:%d %b %Y}"
                if subscription.last_charged_date
                else "never charged"
            )
            st.markdown(
                f"{category_label(subscription.category)} **{subscription.name}** · "
                f"{format_amount(subscription.amount, symbol, 2)} on day "
                f"{subscription.billing_day} · {last}"
            )
        with col2:
            active = st.toggle("Active", value=subscription.is_active, key=f"active_{subscription.id}")
        with col3:
            delete = st.button("🗑️", key=f"delete_sub_{subscription.id}")

        try:
            if active != subscription.is_active:
                tracker.set_subscription_active(subscription.id, active)
                st.rerun()
            if delete:
                tracker.delete_subscription(subscription.id)
                st.rerun()
        except NotFoundError as e:
            st.warning(str(e))


def render_settings_page(tracker: ExpenseTracker):
    st.title("⚙️ Settings")

    st.markdown("### Monthly limit")
    current = tracker.monthly_limit or Decimal("0")
    new_limit = st.number_input(
        f"Limit ({tracker.currency_symbol}), 0 for no limit",
        min_value=0.0,
        value=float(current),
        step=100.0,
    )
    if st.button("Save limit"):
        tracker.monthly_limit = Decimal(str(new_limit))
        st.success("Limit saved for this session.")

    st.markdown("### Configuration")
    status = validate_all_settings()
    for key in ("budget", "app"):
        if status.get(key, False):
            st.success(f"✅ {key} settings loaded")
        else:
            st.error(f"❌ {key} settings - {status.get(f'{key}_error', 'invalid')}")

    with st.expander("📜 Audit trail"):
        events = tracker.audit_events(limit=50)
        if not events:
            st.info("No events recorded yet.")
        else:
            st.dataframe(
                [dict(zip(AUDIT_ROW_COLUMNS, event.to_row())) for event in events],
                use_container_width=True,
                hide_index=True,
            )


if __name__ == "__main__":
    main()
