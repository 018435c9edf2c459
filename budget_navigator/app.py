"""Budget Navigator - main Streamlit app.

Gates everything behind sign-in, then renders the Dashboard, Budget,
Analytics, Goals and Export tabs from the rows cached for this session.
"""

from __future__ import annotations

import streamlit as st

from . import config, session
from .store import StoreError
from .ui import FinanceUI


def main():
    """Main entry point for the budget tracker."""
    config.ensure_data_directories()

    try:
        store = session.get_store()
    except (StoreError, ValueError) as e:
        FinanceUI(None, configure_page=True)
        st.error(f"Could not connect to the {config.BACKEND} backend: {e}")
        return

    ui = FinanceUI(store, configure_page=True)
    user = session.current_user()
    if user is None:
        ui.render_auth()
        return

    ui.render_header(user)
    try:
        with st.spinner("Loading your data..."):
            transactions = session.load_transactions()
            budgets = session.load_budgets()
            goals = session.load_goals()
    except StoreError as e:
        st.error(f"Failed to load your data: {e}")
        if st.button("Retry"):
            session.refresh()
            st.rerun()
        return

    dashboard_tab, budget_tab, analytics_tab, goals_tab, export_tab = st.tabs(
        ["📊 Dashboard", "📋 Budget", "📈 Analytics", "🎯 Goals", "📤 Export"]
    )
    with dashboard_tab:
        ui.render_overview(transactions)
        col1, col2 = st.columns([1, 1])
        with col1:
            ui.render_recent_transactions(transactions)
        with col2:
            ui.render_category_chart(transactions)
        ui.render_transaction_form()
        ui.render_transaction_list(transactions)
    with budget_tab:
        ui.render_budget_form()
        ui.render_budget_manager(transactions, budgets)
        ui.render_scheduled_items()
    with analytics_tab:
        ui.render_charts(transactions, budgets)
    with goals_tab:
        ui.render_goal_form()
        ui.render_goals_manager(goals)
    with export_tab:
        ui.render_export_panel(transactions)


if __name__ == "__main__":
    main()
