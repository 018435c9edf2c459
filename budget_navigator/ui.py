"""Streamlit screens for Budget Navigator.

:class:`FinanceUI` renders each tab of the app from lists that have already
been fetched through :mod:`budget_navigator.session`.  Mutations go through
:mod:`budget_navigator.forms`, whose :class:`~budget_navigator.forms.FormResult`
is shown as a toast; a successful mutation drops the cached rows and reruns
so every view re-derives from a fresh fetch.
"""

from __future__ import annotations

from datetime import date
from typing import List, Sequence

import pandas as pd
import streamlit as st
from streamlit.errors import StreamlitAPIException

from . import config, forms, reports, session
from .analytics import FinanceAnalytics, goal_progress
from .formatting import (
    format_currency,
    format_days_left,
    format_display_date,
    format_signed_currency,
)
from .models import BUDGET_PERIODS, EXPENSE, INCOME, Budget, Goal, Transaction, User
from .store import AuthError, FinanceStore, StoreError, fetch_bills, fetch_recurring_transactions
from .visualization import (
    create_budget_distribution_chart,
    create_category_pie_chart,
    create_monthly_trend_chart,
    create_weekly_spending_chart,
)

STATUS_ICONS = {
    'Over Budget': '🔴',
    'Alert': '🟠',
    'Warning': '🟡',
    'On Track': '🟢',
}


class FinanceUI:
    """UI components for the budget tracker."""
    _PAGE_CONFIGURED = False

    def __init__(self, store: FinanceStore, *, configure_page: bool = False):
        self.store = store
        if configure_page:
            self.setup_page_config()

    def setup_page_config(self) -> None:
        """Configure Streamlit page settings once per process."""
        if FinanceUI._PAGE_CONFIGURED:
            return
        try:
            st.set_page_config(
                page_title=config.APP_TITLE,
                page_icon="💰",
                layout="wide",
                initial_sidebar_state="collapsed",
            )
        except StreamlitAPIException:
            # Already configured upstream
            pass
        finally:
            FinanceUI._PAGE_CONFIGURED = True

    def _show_result(self, result: forms.FormResult, *tables: str) -> None:
        """Toast a form outcome; on success drop cached rows and rerun."""
        if result.success:
            st.toast(f"{result.title}: {result.message}", icon="✅")
            session.refresh(*tables)
            st.rerun()
        else:
            st.toast(f"{result.title}: {result.message}", icon="⚠️")
            st.error(result.message)

    # -- auth -------------------------------------------------------------
    def render_auth(self) -> None:
        """Sign-in and sign-up forms shown before anything else."""
        st.title(f"💰 {config.APP_TITLE}")
        st.markdown("Track spending, stay on budget and reach your savings goals.")

        sign_in_tab, sign_up_tab = st.tabs(["Sign In", "Sign Up"])
        with sign_in_tab:
            with st.form("sign_in_form"):
                email = st.text_input("Email")
                password = st.text_input("Password", type="password")
                submitted = st.form_submit_button("Sign In")
            if submitted:
                try:
                    with st.spinner("Signing in..."):
                        self.store.sign_in(email, password)
                except AuthError as e:
                    st.error(f"Sign in failed: {e}")
                else:
                    session.refresh()
                    st.rerun()

        with sign_up_tab:
            with st.form("sign_up_form"):
                full_name = st.text_input("Full name")
                email = st.text_input("Email", key="sign_up_email")
                password = st.text_input("Password", type="password", key="sign_up_password")
                submitted = st.form_submit_button("Create Account")
            if submitted:
                try:
                    with st.spinner("Creating account..."):
                        self.store.sign_up(email, password, full_name or None)
                except AuthError as e:
                    st.error(f"Sign up failed: {e}")
                else:
                    st.success("Account created. Welcome aboard!")
                    session.refresh()
                    st.rerun()

    def render_header(self, user: User) -> None:
        col1, col2 = st.columns([4, 1])
        with col1:
            st.title(f"💰 {config.APP_TITLE}")
            st.caption(f"Signed in as {user.full_name or user.email}")
        with col2:
            if st.button("Sign Out"):
                try:
                    self.store.sign_out()
                except AuthError as e:
                    st.error(str(e))
                else:
                    session.refresh()
                    st.rerun()

    # -- dashboard --------------------------------------------------------
    def render_overview(self, transactions: Sequence[Transaction]) -> None:
        """Income, expense, balance and savings-rate cards."""
        totals = FinanceAnalytics(transactions).calculate_totals()
        col1, col2, col3, col4 = st.columns(4)
        col1.metric("💰 Total Income", format_currency(totals['income']))
        col2.metric("💸 Total Expenses", format_currency(totals['expenses']))
        col3.metric("📈 Balance", format_currency(totals['balance']))
        col4.metric(
            "💾 Savings Rate",
            f"{totals['savings_rate']:.1f}%",
            help="Share of income left after expenses",
        )

    def render_recent_transactions(self, transactions: Sequence[Transaction]) -> None:
        st.subheader("🕒 Recent Transactions")
        recent = FinanceAnalytics(transactions).recent_transactions(config.RECENT_TRANSACTION_COUNT)
        if not recent:
            st.info("No transactions yet. Add your first one below.")
            return
        for txn in recent:
            col_a, col_b = st.columns([3, 1])
            col_a.markdown(f"**{txn.description}**  \n{txn.category} · {format_display_date(txn.date)}")
            col_b.markdown(format_signed_currency(txn.amount, txn.is_income))

    def render_category_chart(self, transactions: Sequence[Transaction]) -> None:
        st.subheader("💳 Spending by Category")
        breakdown = FinanceAnalytics(transactions).calculate_category_breakdown(
            days=config.DASHBOARD_CATEGORY_DAYS
        )
        if breakdown.empty:
            st.info(f"No expenses in the last {config.DASHBOARD_CATEGORY_DAYS} days.")
            return
        st.plotly_chart(
            create_category_pie_chart(breakdown, f"Last {config.DASHBOARD_CATEGORY_DAYS} Days"),
            use_container_width=True,
        )

    def render_transaction_form(self) -> None:
        st.subheader("➕ Add Transaction")
        txn_type = st.radio(
            "Type",
            [EXPENSE, INCOME],
            format_func=str.capitalize,
            horizontal=True,
            key="txn_form_type",
        )
        categories = config.INCOME_CATEGORIES if txn_type == INCOME else config.EXPENSE_CATEGORIES
        with st.form("add_transaction_form", clear_on_submit=True):
            category = st.selectbox("Category", categories, key="txn_form_category")
            description = st.text_input("Description")
            amount = st.number_input("Amount", min_value=0.0, step=100.0, format="%.2f")
            txn_date = st.date_input("Date", value=date.today())
            submitted = st.form_submit_button("Add Transaction")
        if submitted:
            with st.spinner("Saving transaction..."):
                result = forms.submit_transaction(self.store, txn_type, category, description, amount, txn_date)
            self._show_result(result, 'transactions')

    def render_transaction_list(self, transactions: Sequence[Transaction]) -> None:
        """Searchable list with per-row delete behind a confirmation."""
        st.subheader("📋 Transactions")
        analytics = FinanceAnalytics(transactions)

        col1, col2, col3 = st.columns([2, 1, 1])
        search = col1.text_input("Search", placeholder="Description or category", key="txn_search")
        type_filter = col2.selectbox("Type", ["all", INCOME, EXPENSE], format_func=str.capitalize, key="txn_type_filter")
        category_filter = col3.selectbox(
            "Category",
            ['all'] + analytics.categories(),
            format_func=lambda c: 'All' if c == 'all' else c,
            key="txn_category_filter",
        )

        matches = analytics.filter_transactions(search, type_filter, category_filter)
        if not matches:
            st.info("No transactions match the current filters.")
            return

        pending = session.confirmation(session.TRANSACTION_DELETE_KEY)
        for txn in matches:
            col_a, col_b, col_c = st.columns([4, 2, 1])
            col_a.markdown(f"**{txn.description}**  \n{txn.category} · {format_display_date(txn.date)}")
            col_b.markdown(format_signed_currency(txn.amount, txn.is_income))
            if pending.is_confirming(txn.id):
                yes, no = col_c.columns(2)
                if yes.button("✔", key=f"confirm_del_txn_{txn.id}", help="Confirm delete"):
                    target, _ = pending.confirm()
                    pending.reset()
                    self._show_result(forms.submit_transaction_deletion(self.store, target), 'transactions')
                if no.button("✖", key=f"cancel_del_txn_{txn.id}", help="Keep"):
                    pending.cancel()
                    pending.reset()
                    st.rerun()
            elif col_c.button("🗑️", key=f"del_txn_{txn.id}", help="Delete transaction",
                              disabled=pending.is_confirming()):
                pending.request(txn.id)
                st.rerun()

    # -- budgets ----------------------------------------------------------
    def render_budget_form(self) -> None:
        st.subheader("🎯 New Budget")
        with st.form("budget_form", clear_on_submit=True):
            category = st.selectbox("Category", config.EXPENSE_CATEGORIES, key="budget_form_category")
            amount = st.number_input("Budget amount", min_value=0.0, step=500.0, format="%.2f")
            period = st.selectbox("Period", BUDGET_PERIODS, index=1, format_func=str.capitalize)
            submitted = st.form_submit_button("Create Budget")
        if submitted:
            with st.spinner("Saving budget..."):
                result = forms.submit_budget(self.store, category, amount, period)
            self._show_result(result, 'budgets')

    def render_budget_manager(self, transactions: Sequence[Transaction], budgets: Sequence[Budget]) -> None:
        """Progress bar and status for every budget."""
        st.subheader("📊 Budgets")
        if not budgets:
            st.info("No budgets yet. Create one to start tracking a category.")
            return
        analytics = FinanceAnalytics(transactions)
        for budget in budgets:
            progress = analytics.calculate_budget_progress(budget)
            icon = STATUS_ICONS.get(progress.status, '')
            st.markdown(
                f"**{budget.category}** · {budget.period.capitalize()} · "
                f"{icon} {progress.status}"
            )
            st.progress(int(round(progress.percentage)))
            col1, col2, col3 = st.columns(3)
            col1.caption(f"Spent: {format_currency(progress.spent)}")
            col2.caption(f"Budget: {format_currency(budget.amount)}")
            if progress.over_by > 0:
                col3.caption(f"Over by: {format_currency(progress.over_by)}")
            else:
                col3.caption(f"Remaining: {format_currency(progress.remaining)}")
            if progress.needs_attention:
                st.warning(f"You have used {progress.percentage:.0f}% of your {budget.category} budget.")

    def render_scheduled_items(self) -> None:
        """Read-only listing of recurring transactions and bills."""
        with st.expander("🔁 Recurring transactions and bills"):
            try:
                recurring = fetch_recurring_transactions(self.store)
                bills = fetch_bills(self.store)
            except StoreError as e:
                st.error(f"Could not load scheduled items: {e}")
                return
            if not recurring and not bills:
                st.info("Nothing scheduled.")
                return
            if recurring:
                st.markdown("**Recurring transactions**")
                st.dataframe(pd.DataFrame([
                    {
                        'Description': r.description,
                        'Category': r.category,
                        'Amount': format_currency(r.amount),
                        'Frequency': r.frequency,
                        'Next due': format_display_date(r.next_due_date),
                        'Active': r.is_active,
                    }
                    for r in recurring
                ]), use_container_width=True, hide_index=True)
            if bills:
                st.markdown("**Bills**")
                st.dataframe(pd.DataFrame([
                    {
                        'Name': b.name,
                        'Category': b.category,
                        'Amount': format_currency(b.amount),
                        'Due': format_display_date(b.due_date),
                        'Paid': b.is_paid,
                    }
                    for b in bills
                ]), use_container_width=True, hide_index=True)

    # -- analytics --------------------------------------------------------
    def render_charts(self, transactions: Sequence[Transaction], budgets: Sequence[Budget]) -> None:
        st.subheader("📈 Analytics")
        analytics = FinanceAnalytics(transactions)
        col1, col2 = st.columns(2)
        with col1:
            st.plotly_chart(
                create_monthly_trend_chart(analytics.calculate_monthly_trend(config.MONTHLY_TREND_BUCKETS)),
                use_container_width=True,
            )
        with col2:
            st.plotly_chart(
                create_weekly_spending_chart(analytics.calculate_weekly_spending(config.WEEKLY_TREND_BUCKETS)),
                use_container_width=True,
            )
        col3, col4 = st.columns(2)
        with col3:
            st.plotly_chart(
                create_category_pie_chart(analytics.calculate_category_breakdown(), "Spending by Category"),
                use_container_width=True,
            )
        with col4:
            st.plotly_chart(
                create_budget_distribution_chart(analytics.calculate_budget_distribution(budgets)),
                use_container_width=True,
            )

    # -- goals ------------------------------------------------------------
    def render_goal_form(self) -> None:
        st.subheader("🎯 New Goal")
        with st.form("goal_form", clear_on_submit=True):
            name = st.text_input("Goal name")
            description = st.text_area("Description (optional)")
            target_amount = st.number_input("Target amount", min_value=0.0, step=1000.0, format="%.2f")
            has_deadline = st.checkbox("Set a target date")
            target_date = st.date_input("Target date", value=date.today())
            submitted = st.form_submit_button("Create Goal")
        if submitted:
            with st.spinner("Saving goal..."):
                result = forms.submit_goal(
                    self.store,
                    name,
                    target_amount,
                    description,
                    target_date if has_deadline else None,
                )
            self._show_result(result, 'goals')

    def render_goals_manager(self, goals: Sequence[Goal]) -> None:
        """Goal cards with add-progress and delete, both confirmed first."""
        st.subheader("🏁 Savings Goals")
        if not goals:
            st.info("No goals yet. Set one to start saving toward it.")
            return

        progress_confirm = session.confirmation(session.GOAL_PROGRESS_KEY)
        delete_confirm = session.confirmation(session.GOAL_DELETE_KEY)
        busy = progress_confirm.is_confirming() or delete_confirm.is_confirming()

        for goal in goals:
            progress = goal_progress(goal)
            with st.container(border=True):
                st.markdown(f"**{goal.name}** · {progress.status}")
                if goal.description:
                    st.caption(goal.description)
                st.progress(int(round(progress.display_percentage)))
                col1, col2, col3 = st.columns(3)
                col1.caption(f"Saved: {format_currency(goal.current_amount)}")
                col2.caption(f"Target: {format_currency(goal.target_amount)}")
                if progress.days_left is not None and not goal.is_completed:
                    col3.caption(format_days_left(progress.days_left))
                elif not goal.is_completed:
                    col3.caption(f"To go: {format_currency(max(progress.remaining, 0.0))}")

                if progress_confirm.is_confirming(goal.id):
                    self._render_progress_confirmation(goal, progress_confirm)
                elif delete_confirm.is_confirming(goal.id):
                    self._render_delete_confirmation(goal, delete_confirm)
                else:
                    add_col, btn_col, del_col = st.columns([2, 1, 1])
                    increment = add_col.number_input(
                        "Add amount",
                        min_value=0.0,
                        step=100.0,
                        format="%.2f",
                        key=f"goal_increment_{goal.id}",
                        label_visibility="collapsed",
                        disabled=goal.is_completed,
                    )
                    if btn_col.button("Add Progress", key=f"goal_add_{goal.id}",
                                      disabled=busy or goal.is_completed or increment <= 0):
                        progress_confirm.request(goal.id, increment)
                        st.rerun()
                    if del_col.button("🗑️ Delete", key=f"goal_del_{goal.id}", disabled=busy):
                        delete_confirm.request(goal.id)
                        st.rerun()

    def _render_progress_confirmation(self, goal: Goal, pending) -> None:
        st.info(f"Add {format_currency(pending.payload)} to {goal.name}?")
        yes, no = st.columns(2)
        if yes.button("Confirm", key=f"goal_add_yes_{goal.id}"):
            _, increment = pending.confirm()
            pending.reset()
            self._show_result(forms.submit_goal_progress(self.store, goal, increment), 'goals')
        if no.button("Cancel", key=f"goal_add_no_{goal.id}"):
            pending.cancel()
            pending.reset()
            st.rerun()

    def _render_delete_confirmation(self, goal: Goal, pending) -> None:
        st.warning(f"Delete the goal '{goal.name}'? This cannot be undone.")
        yes, no = st.columns(2)
        if yes.button("Delete", key=f"goal_del_yes_{goal.id}"):
            target, _ = pending.confirm()
            pending.reset()
            self._show_result(forms.submit_goal_deletion(self.store, target), 'goals')
        if no.button("Cancel", key=f"goal_del_no_{goal.id}"):
            pending.cancel()
            pending.reset()
            st.rerun()

    # -- export -----------------------------------------------------------
    def render_export_panel(self, transactions: List[Transaction]) -> None:
        """CSV and PDF downloads for a chosen date range."""
        st.subheader("📤 Export Data")
        date_range = st.selectbox(
            "Date range",
            list(reports.DATE_RANGES),
            index=list(reports.DATE_RANGES).index('all'),
            format_func=reports.DATE_RANGES.get,
        )
        selected = reports.filter_by_date_range(transactions, date_range)
        st.caption(f"{len(selected)} transactions selected")
        disabled = len(selected) == 0

        col1, col2 = st.columns(2)
        with col1:
            try:
                csv_text = reports.build_csv(selected)
            except Exception as e:
                print(f"CSV export failed: {e}")
                st.error(f"Export failed: {e}")
            else:
                st.download_button(
                    "⬇️ Download CSV",
                    data=csv_text,
                    file_name=reports.export_filename('csv', date_range),
                    mime=reports.CSV_MIME,
                    disabled=disabled,
                )
        with col2:
            user = session.current_user()
            signature = reports.export_signature(selected, date_range, user.id if user else None)
            if st.button("📄 Prepare PDF", disabled=disabled):
                try:
                    with st.spinner("Rendering report..."):
                        session.remember_pdf(signature, reports.build_pdf(selected, date_range))
                except Exception as e:
                    print(f"PDF export failed: {e}")
                    st.error(f"Export failed: {e}")
            pdf_bytes = session.prepared_pdf(signature)
            if pdf_bytes is not None and not disabled:
                st.download_button(
                    "⬇️ Download PDF",
                    data=pdf_bytes,
                    file_name=reports.export_filename('pdf', date_range),
                    mime=reports.PDF_MIME,
                )
