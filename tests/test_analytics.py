from datetime import date, datetime, timedelta

import pytest

from budget_navigator.analytics import (
    FinanceAnalytics,
    budget_status,
    days_until,
    goal_progress,
    month_key,
    week_key,
)
from budget_navigator.models import EXPENSE, INCOME, MONTHLY, Budget, Goal, Transaction


def expense(category, amount, when, description='Spend'):
    return Transaction(type=EXPENSE, category=category, description=description, amount=amount, date=when)


def income(amount, when, category='Salary'):
    return Transaction(type=INCOME, category=category, description='Pay', amount=amount, date=when)


def test_totals_scenario(sample_transactions):
    totals = FinanceAnalytics(sample_transactions).calculate_totals()
    assert totals['income'] == 1000
    assert totals['expenses'] == 300
    assert totals['balance'] == 700
    assert totals['savings_rate'] == pytest.approx(70.0)


def test_totals_without_income_have_zero_savings_rate():
    totals = FinanceAnalytics([expense('Shopping', 50, date(2025, 1, 1))]).calculate_totals()
    assert totals['balance'] == -50
    assert totals['savings_rate'] == 0


def test_totals_on_empty_list():
    totals = FinanceAnalytics([]).calculate_totals()
    assert totals == {'income': 0.0, 'expenses': 0.0, 'balance': 0.0, 'savings_rate': 0.0}


def test_category_breakdown_sums_to_expense_total():
    txns = [
        expense('Food & Dining', 120, date(2025, 1, 2)),
        expense('Shopping', 300, date(2025, 1, 3)),
        expense('Food & Dining', 80, date(2025, 1, 4)),
        income(999, date(2025, 1, 5)),
    ]
    analytics = FinanceAnalytics(txns)
    breakdown = analytics.calculate_category_breakdown()
    assert list(breakdown.index) == ['Shopping', 'Food & Dining']
    assert breakdown['Food & Dining'] == 200
    assert breakdown.sum() == analytics.calculate_totals()['expenses']


def test_category_breakdown_window_drops_old_expenses():
    txns = [
        expense('Food & Dining', 50, date(2025, 3, 10)),
        expense('Travel', 500, date(2025, 1, 1)),
    ]
    breakdown = FinanceAnalytics(txns).calculate_category_breakdown(days=30, today=date(2025, 3, 15))
    assert list(breakdown.index) == ['Food & Dining']


def test_category_breakdown_empty():
    assert FinanceAnalytics([]).calculate_category_breakdown().empty


def test_monthly_trend_keeps_last_six_months_in_order():
    txns = [expense('Other', 10 * m, date(2024, m, 15)) for m in range(1, 13)]
    txns.append(income(500, date(2024, 12, 1)))
    trend = FinanceAnalytics(txns).calculate_monthly_trend()
    assert list(trend['month']) == ['2024-07', '2024-08', '2024-09', '2024-10', '2024-11', '2024-12']
    assert list(trend['label'])[0] == 'Jul 24'
    december = trend.iloc[-1]
    assert december['income'] == 500
    assert december['expenses'] == 120
    assert december['balance'] == 380


def test_week_key_uses_sunday_weeks_from_january_first():
    # 1 January 2025 is a Wednesday
    assert week_key(date(2025, 1, 1)) == '2025-W01'
    assert week_key(date(2025, 1, 4)) == '2025-W01'
    assert week_key(date(2025, 1, 5)) == '2025-W02'
    assert month_key(date(2025, 3, 9)) == '2025-03'


def test_weekly_spending_buckets_expenses_only():
    txns = [
        expense('Food & Dining', 10, date(2025, 1, 1)),
        expense('Food & Dining', 15, date(2025, 1, 4)),
        expense('Food & Dining', 20, date(2025, 1, 6)),
        income(1000, date(2025, 1, 2)),
    ]
    weekly = FinanceAnalytics(txns).calculate_weekly_spending()
    assert list(weekly['week']) == ['2025-W01', '2025-W02']
    assert list(weekly['amount']) == [25, 20]
    assert list(weekly['label']) == ['2025 W01', '2025 W02']


def test_weekly_spending_limits_buckets():
    txns = [expense('Other', 5, date(2025, 1, 1) + timedelta(weeks=i)) for i in range(10)]
    assert len(FinanceAnalytics(txns).calculate_weekly_spending(limit=8)) == 8


@pytest.mark.parametrize('percentage, status', [
    (0, 'On Track'),
    (59.9, 'On Track'),
    (60, 'Warning'),
    (80, 'Alert'),
    (100, 'Over Budget'),
])
def test_budget_status_thresholds(percentage, status):
    assert budget_status(percentage) == status


def test_budget_progress_scenario_over_budget():
    budget = Budget(category='Food', amount=250, period=MONTHLY, start_date=date(2025, 1, 1), end_date=date(2025, 1, 31))
    txns = [
        expense('Food', 200, date(2025, 1, 5)),
        expense('Food', 100, date(2025, 1, 20)),
        expense('Food', 999, date(2024, 12, 31)),
        expense('Rent', 999, date(2025, 1, 2)),
    ]
    progress = FinanceAnalytics(txns).calculate_budget_progress(budget, today=date(2025, 1, 25))
    assert progress.spent == 300
    assert progress.percentage == 100
    assert progress.status == 'Over Budget'
    assert progress.over_by == 50


def test_budget_progress_with_zero_amount():
    budget = Budget(category='Food', amount=0, period=MONTHLY, start_date=date(2025, 1, 1), end_date=date(2025, 1, 31))
    progress = FinanceAnalytics([expense('Food', 10, date(2025, 1, 5))]).calculate_budget_progress(budget, today=date(2025, 1, 6))
    assert progress.percentage == 0
    assert progress.status == 'On Track'


def test_budget_distribution_clamps_remaining():
    budgets = [
        Budget(category='Food', amount=100, period=MONTHLY, start_date=date(2025, 1, 1), end_date=date(2025, 1, 31)),
        Budget(category='Travel', amount=500, period=MONTHLY, start_date=date(2025, 1, 1), end_date=date(2025, 1, 31)),
    ]
    txns = [expense('Food', 150, date(2025, 1, 3)), expense('Travel', 200, date(2025, 1, 3))]
    dist = FinanceAnalytics(txns).calculate_budget_distribution(budgets, today=date(2025, 1, 10))
    assert list(dist['remaining']) == [0.0, 300.0]


def test_goal_progress_completed_scenario():
    goal = Goal(name='Laptop', target_amount=1000, current_amount=1000, is_completed=True)
    progress = goal_progress(goal)
    assert progress.percentage == 100
    assert progress.status == 'Completed'


def test_goal_progress_statuses():
    now = datetime(2025, 1, 1, 12, 0)
    assert goal_progress(Goal(name='a', target_amount=100, current_amount=80), now).status == 'Almost There'
    assert goal_progress(Goal(name='b', target_amount=100, current_amount=50), now).status == 'On Track'
    assert goal_progress(Goal(name='c', target_amount=100, current_amount=10), now).status == 'Just Started'
    late = Goal(name='d', target_amount=100, current_amount=90, target_date=date(2024, 12, 1))
    assert goal_progress(late, now).status == 'Overdue'


def test_goal_progress_is_uncapped_but_display_is_clamped():
    progress = goal_progress(Goal(name='a', target_amount=100, current_amount=150))
    assert progress.percentage == 150
    assert progress.display_percentage == 100


def test_goal_with_zero_target():
    progress = goal_progress(Goal(name='a', target_amount=0, current_amount=10))
    assert progress.percentage == 0
    assert progress.status == 'Just Started'


def test_days_until_rounds_up():
    assert days_until(date(2025, 1, 3), datetime(2025, 1, 1, 12, 0)) == 2
    assert days_until(date(2024, 12, 30), datetime(2025, 1, 1, 12, 0)) == -2


def test_filter_transactions(sample_transactions):
    analytics = FinanceAnalytics(sample_transactions)
    assert [t.id for t in analytics.filter_transactions('groc')] == ['t2']
    assert [t.id for t in analytics.filter_transactions(type_filter=EXPENSE)] == ['t2', 't3']
    assert [t.id for t in analytics.filter_transactions(category_filter='Salary')] == ['t1']
    assert analytics.filter_transactions('TRANSPORT', type_filter=INCOME) == []


def test_recent_transactions_and_categories(sample_transactions):
    analytics = FinanceAnalytics(sample_transactions)
    assert [t.id for t in analytics.recent_transactions(2)] == ['t1', 't2']
    assert analytics.categories() == ['Salary', 'Food & Dining', 'Transportation']
