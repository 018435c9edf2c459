"""Personal finance analytics over the in-memory transaction list.

Everything here is pure computation: the caller hands over the
transactions it already fetched and gets back totals, category groupings,
monthly/weekly buckets and budget/goal progress.  Nothing is cached, so
the view layer simply rebuilds a :class:`FinanceAnalytics` on every rerun.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .formatting import format_month_label, format_week_label
from .models import EXPENSE, INCOME, Budget, Goal, Transaction

FRAME_COLUMNS = ['id', 'type', 'category', 'description', 'amount', 'date']

# Budget status thresholds, evaluated highest first (inclusive lower bounds)
BUDGET_STATUS_THRESHOLDS = [
    (100.0, 'Over Budget'),
    (80.0, 'Alert'),
    (60.0, 'Warning'),
]
BUDGET_ON_TRACK = 'On Track'
BUDGET_WARNING_LEVEL = 80.0

GOAL_COMPLETED = 'Completed'
GOAL_OVERDUE = 'Overdue'
GOAL_ALMOST_THERE = 'Almost There'
GOAL_ON_TRACK = 'On Track'
GOAL_JUST_STARTED = 'Just Started'


@dataclass
class BudgetProgress:
    """Spending against one budget for the current calendar month."""

    budget: Budget
    spent: float
    percentage: float
    status: str

    @property
    def remaining(self) -> float:
        return self.budget.amount - self.spent

    @property
    def over_by(self) -> float:
        return max(0.0, self.spent - self.budget.amount)

    @property
    def needs_attention(self) -> bool:
        return self.percentage >= BUDGET_WARNING_LEVEL


@dataclass
class GoalProgress:
    """Progress and deadline status of a savings goal."""

    goal: Goal
    percentage: float
    days_left: Optional[int]
    status: str

    @property
    def display_percentage(self) -> float:
        return min(max(self.percentage, 0.0), 100.0)

    @property
    def remaining(self) -> float:
        return self.goal.remaining_amount


def week_key(value: date) -> str:
    """Return the ``YYYY-Www`` bucket for a date.

    Weeks start on Sunday and week 1 is the (possibly partial) week holding
    1 January, so this is not an ISO-8601 week number.
    """
    jan1 = date(value.year, 1, 1)
    days_since_jan1 = (value - jan1).days
    jan1_weekday = (jan1.weekday() + 1) % 7  # Sunday = 0
    week_number = math.ceil((days_since_jan1 + jan1_weekday + 1) / 7)
    return f"{value.year}-W{week_number:02d}"


def month_key(value: date) -> str:
    return f"{value.year}-{value.month:02d}"


def budget_status(percentage: float) -> str:
    """Map a consumption percentage to its status label."""
    for threshold, label in BUDGET_STATUS_THRESHOLDS:
        if percentage >= threshold:
            return label
    return BUDGET_ON_TRACK


def days_until(target: date, now: Optional[datetime] = None) -> int:
    """Whole days from ``now`` until midnight of ``target``, rounded up."""
    now = now or datetime.now()
    delta = datetime.combine(target, time()) - now
    return math.ceil(delta.total_seconds() / 86400)


def goal_progress(goal: Goal, now: Optional[datetime] = None) -> GoalProgress:
    """Calculate the percentage, deadline and status of a goal.

    The completed flag wins over everything, then an overdue deadline, then
    the uncapped percentage (75 / 50 thresholds).
    """
    if goal.target_amount > 0:
        percentage = goal.current_amount / goal.target_amount * 100
    else:
        percentage = 0.0
    days_left = days_until(goal.target_date, now) if goal.target_date else None

    if goal.is_completed:
        status = GOAL_COMPLETED
    elif days_left is not None and days_left < 0:
        status = GOAL_OVERDUE
    elif percentage >= 75:
        status = GOAL_ALMOST_THERE
    elif percentage >= 50:
        status = GOAL_ON_TRACK
    else:
        status = GOAL_JUST_STARTED
    return GoalProgress(goal=goal, percentage=percentage, days_left=days_left, status=status)


class FinanceAnalytics:
    """Aggregations over a list of :class:`Transaction` records."""

    def __init__(self, transactions: Iterable[Transaction]):
        self.transactions: List[Transaction] = list(transactions)
        self.data = self._prepare_data(self.transactions)

    @staticmethod
    def _prepare_data(transactions: List[Transaction]) -> pd.DataFrame:
        """Build the working frame with a signed amount column."""
        data = pd.DataFrame(
            [
                {
                    'id': t.id,
                    'type': t.type,
                    'category': t.category,
                    'description': t.description,
                    'amount': float(t.amount),
                    'date': pd.Timestamp(t.date),
                }
                for t in transactions
            ],
            columns=FRAME_COLUMNS,
        )
        data['amount'] = pd.to_numeric(data['amount'], errors='coerce').fillna(0.0)
        data['date'] = pd.to_datetime(data['date'])
        data['signed_amount'] = np.where(data['type'] == INCOME, data['amount'], -data['amount'])
        return data

    def _expense_rows(self, df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
        source = df if df is not None else self.data
        return source[source['type'] == EXPENSE]

    def _income_rows(self, df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
        source = df if df is not None else self.data
        return source[source['type'] == INCOME]

    def calculate_totals(self) -> Dict[str, float]:
        """Income, expenses, balance and savings rate over every transaction."""
        income = float(self._income_rows()['amount'].sum())
        expenses = float(self._expense_rows()['amount'].sum())
        balance = income - expenses
        savings_rate = (balance / income * 100) if income > 0 else 0.0
        return {
            'income': income,
            'expenses': expenses,
            'balance': balance,
            'savings_rate': savings_rate,
        }

    def calculate_category_breakdown(self, days: Optional[int] = None, today: Optional[date] = None) -> pd.Series:
        """Sum expenses per category, largest first.

        When ``days`` is given only expenses dated on or after
        ``today - days`` are counted.
        """
        expenses = self._expense_rows()
        if days is not None:
            cutoff = pd.Timestamp((today or date.today()) - timedelta(days=days))
            expenses = expenses[expenses['date'] >= cutoff]
        if expenses.empty:
            return pd.Series(dtype=float, name='amount')
        breakdown = expenses.groupby('category', sort=False)['amount'].sum()
        return breakdown.sort_values(ascending=False, kind='stable')

    def calculate_monthly_trend(self, limit: int = 6) -> pd.DataFrame:
        """Income, expenses and balance for the most recent ``limit`` months."""
        columns = ['month', 'label', 'income', 'expenses', 'balance']
        if self.data.empty:
            return pd.DataFrame(columns=columns)
        working = self.data.copy()
        working['month'] = working['date'].dt.date.map(month_key)
        working['income'] = np.where(working['type'] == INCOME, working['amount'], 0.0)
        working['expenses'] = np.where(working['type'] == INCOME, 0.0, working['amount'])

        monthly = working.groupby('month')[['income', 'expenses']].sum().sort_index().tail(limit)
        monthly['balance'] = monthly['income'] - monthly['expenses']
        monthly = monthly.reset_index()
        monthly['label'] = monthly['month'].map(format_month_label)
        return monthly[columns]

    def calculate_weekly_spending(self, limit: int = 8) -> pd.DataFrame:
        """Expense totals for the most recent ``limit`` week buckets."""
        columns = ['week', 'label', 'amount']
        expenses = self._expense_rows()
        if expenses.empty:
            return pd.DataFrame(columns=columns)
        keys = expenses['date'].dt.date.map(week_key)
        weekly = expenses.groupby(keys)['amount'].sum().sort_index().tail(limit)
        weekly.index.name = 'week'
        weekly = weekly.reset_index()
        weekly['label'] = weekly['week'].map(format_week_label)
        return weekly[columns]

    def calculate_budget_progress(self, budget: Budget, today: Optional[date] = None) -> BudgetProgress:
        """Spending in the budget's category during the current calendar month."""
        today = today or date.today()
        expenses = self._expense_rows()
        mask = (
            (expenses['category'] == budget.category)
            & (expenses['date'].dt.month == today.month)
            & (expenses['date'].dt.year == today.year)
        )
        spent = float(expenses.loc[mask, 'amount'].sum())
        if budget.amount > 0:
            percentage = min(spent / budget.amount * 100, 100.0)
        else:
            percentage = 0.0
        return BudgetProgress(budget=budget, spent=spent, percentage=percentage, status=budget_status(percentage))

    def calculate_budget_distribution(self, budgets: Iterable[Budget], today: Optional[date] = None) -> pd.DataFrame:
        """Budgeted amount, spending and headroom per budget for the pie chart."""
        rows = []
        for budget in budgets:
            progress = self.calculate_budget_progress(budget, today)
            rows.append({
                'name': budget.category,
                'value': budget.amount,
                'spent': progress.spent,
                'remaining': max(0.0, budget.amount - progress.spent),
            })
        return pd.DataFrame(rows, columns=['name', 'value', 'spent', 'remaining'])

    def filter_transactions(self, search: str = '', type_filter: str = 'all', category_filter: str = 'all') -> List[Transaction]:
        """Search over description/category plus optional type and category filters."""
        needle = search.strip().lower()
        matches = []
        for txn in self.transactions:
            if needle and needle not in txn.description.lower() and needle not in txn.category.lower():
                continue
            if type_filter != 'all' and txn.type != type_filter:
                continue
            if category_filter != 'all' and txn.category != category_filter:
                continue
            matches.append(txn)
        return matches

    def categories(self) -> List[str]:
        """Distinct categories in first-seen order."""
        return list(dict.fromkeys(t.category for t in self.transactions))

    def recent_transactions(self, count: int = 5) -> List[Transaction]:
        """The first ``count`` transactions (the store returns newest first)."""
        return self.transactions[:count]
