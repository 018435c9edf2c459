"""Plotly chart builders for Budget Navigator.

Every function takes the output of a
:class:`~budget_navigator.analytics.FinanceAnalytics` aggregation and
returns a ``plotly.graph_objects.Figure`` ready for ``st.plotly_chart``.
Empty input produces a blank figure titled "No data to display" rather
than raising.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .config import CURRENCY_LABEL

INCOME_COLOR = "#22c55e"
EXPENSE_COLOR = "#ef4444"
BALANCE_COLOR = "#3b82f6"


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_category_pie_chart(series: pd.Series, title: str | None = None) -> go.Figure:
    """Pie chart of expense totals per category.

    Parameters
    ----------
    series : pandas.Series
        Series indexed by category with summed expense amounts.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart.
    """
    if series.empty:
        return _empty_figure()
    df = series.reset_index()
    df.columns = ["Category", "Amount"]
    fig = px.pie(
        df,
        names="Category",
        values="Amount",
        color_discrete_sequence=px.colors.qualitative.Set3,
    )
    fig.update_traces(textposition="inside", textinfo="percent+label")
    fig.update_layout(title=title or "Spending by Category")
    return fig


def create_monthly_trend_chart(monthly: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Income, expenses and balance lines over the trailing months.

    Parameters
    ----------
    monthly : pandas.DataFrame
        Output of ``FinanceAnalytics.calculate_monthly_trend`` with
        ``label``, ``income``, ``expenses`` and ``balance`` columns.
    title : str, optional
        Chart title.
    """
    if monthly.empty:
        return _empty_figure()
    fig = go.Figure()
    for column, name, color in (
        ("income", "Income", INCOME_COLOR),
        ("expenses", "Expenses", EXPENSE_COLOR),
        ("balance", "Balance", BALANCE_COLOR),
    ):
        fig.add_trace(go.Scatter(
            x=monthly["label"],
            y=monthly[column],
            mode="lines+markers",
            name=name,
            line=dict(color=color, width=2),
        ))
    fig.update_layout(
        title=title or "Monthly Trend",
        xaxis_title="Month",
        yaxis_title=f"Amount ({CURRENCY_LABEL})",
        hovermode="x unified",
    )
    return fig


def create_weekly_spending_chart(weekly: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Bar chart of expense totals per week bucket."""
    if weekly.empty:
        return _empty_figure()
    fig = px.bar(weekly, x="label", y="amount", color_discrete_sequence=[EXPENSE_COLOR])
    fig.update_layout(
        title=title or "Weekly Spending",
        xaxis_title="Week",
        yaxis_title=f"Amount ({CURRENCY_LABEL})",
    )
    return fig


def create_budget_distribution_chart(distribution: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Donut chart of budgeted amounts, with spending shown on hover."""
    if distribution.empty:
        return _empty_figure()
    fig = go.Figure(go.Pie(
        labels=distribution["name"],
        values=distribution["value"],
        customdata=distribution[["spent", "remaining"]].to_numpy(),
        hole=0.4,
        hovertemplate=(
            "%{label}<br>Budget: %{value:,.2f}"
            "<br>Spent: %{customdata[0]:,.2f}"
            "<br>Remaining: %{customdata[1]:,.2f}<extra></extra>"
        ),
    ))
    fig.update_layout(title=title or "Budget Distribution")
    return fig
