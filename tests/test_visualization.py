import pandas as pd

from budget_navigator.analytics import FinanceAnalytics
from budget_navigator.models import MONTHLY, Budget
from budget_navigator.visualization import (
    create_budget_distribution_chart,
    create_category_pie_chart,
    create_monthly_trend_chart,
    create_weekly_spending_chart,
)


def test_empty_inputs_give_placeholder_figures():
    assert create_category_pie_chart(pd.Series(dtype=float)).layout.title.text == 'No data to display'
    assert create_monthly_trend_chart(pd.DataFrame()).layout.title.text == 'No data to display'
    assert create_weekly_spending_chart(pd.DataFrame()).layout.title.text == 'No data to display'
    assert create_budget_distribution_chart(pd.DataFrame()).layout.title.text == 'No data to display'


def test_monthly_trend_has_three_lines(sample_transactions):
    fig = create_monthly_trend_chart(FinanceAnalytics(sample_transactions).calculate_monthly_trend())
    assert [trace.name for trace in fig.data] == ['Income', 'Expenses', 'Balance']


def test_category_and_budget_charts(sample_transactions):
    analytics = FinanceAnalytics(sample_transactions)
    pie = create_category_pie_chart(analytics.calculate_category_breakdown())
    assert list(pie.data[0].labels) == ['Food & Dining', 'Transportation']

    budget = Budget(category='Food & Dining', amount=500, period=MONTHLY,
                    start_date=pd.Timestamp('2025-01-01').date(), end_date=pd.Timestamp('2025-01-31').date())
    dist = analytics.calculate_budget_distribution([budget], today=pd.Timestamp('2025-01-31').date())
    fig = create_budget_distribution_chart(dist)
    assert list(fig.data[0].values) == [500]
