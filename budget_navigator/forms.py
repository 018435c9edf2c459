"""Form validation and record construction.

Each ``submit_*`` helper validates the raw field values, fills in derived
fields, writes a single row through the store and returns a
:class:`FormResult` describing what to tell the user.  Failures never
escape as exceptions; validation problems and backend errors are both
folded into an unsuccessful result.
"""

from __future__ import annotations

import math
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional, Tuple

from .models import BUDGET_PERIODS, TRANSACTION_TYPES, WEEKLY, Budget, Goal, Transaction
from .store import BUDGETS, GOALS, TRANSACTIONS, DuplicateBudgetError, FinanceStore, StoreError


@dataclass
class FormResult:
    """Outcome of a form submission, shaped for a toast notification."""

    success: bool
    title: str
    message: str


def _require_text(value: Optional[str], field_name: str) -> str:
    text = (value or '').strip()
    if not text:
        raise ValueError(f"{field_name} is required")
    return text


def _require_amount(value: Any, field_name: str, allow_zero: bool = False) -> float:
    if value is None or value == '':
        raise ValueError(f"{field_name} is required")
    try:
        amount = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be a number") from exc
    if not math.isfinite(amount):
        raise ValueError(f"{field_name} must be a number")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValueError(f"{field_name} must be greater than zero")
    return amount


def budget_period_dates(period: str, today: Optional[date] = None) -> Tuple[date, date]:
    """Start and end dates for a budget created ``today``.

    Weekly budgets run from the most recent Sunday for seven days; monthly
    budgets cover the current calendar month.

    Example:
        >>> budget_period_dates('weekly', date(2025, 1, 15))
        (datetime.date(2025, 1, 12), datetime.date(2025, 1, 18))
    """
    today = today or date.today()
    if period == WEEKLY:
        days_since_sunday = (today.weekday() + 1) % 7
        start = today - timedelta(days=days_since_sunday)
        return start, start + timedelta(days=6)
    last_day = monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def build_transaction(txn_type: str, category: str, description: str, amount: Any, txn_date: Optional[date]) -> Transaction:
    if txn_type not in TRANSACTION_TYPES:
        raise ValueError("Type must be income or expense")
    if txn_date is None:
        raise ValueError("Date is required")
    return Transaction(
        type=txn_type,
        category=_require_text(category, 'Category'),
        description=_require_text(description, 'Description'),
        amount=_require_amount(amount, 'Amount'),
        date=txn_date,
    )


def build_budget(category: str, amount: Any, period: str, today: Optional[date] = None) -> Budget:
    if period not in BUDGET_PERIODS:
        raise ValueError("Period must be weekly or monthly")
    start_date, end_date = budget_period_dates(period, today)
    return Budget(
        category=_require_text(category, 'Category'),
        amount=_require_amount(amount, 'Budget amount'),
        period=period,
        start_date=start_date,
        end_date=end_date,
    )


def build_goal(name: str, target_amount: Any, description: Optional[str] = None, target_date: Optional[date] = None) -> Goal:
    return Goal(
        name=_require_text(name, 'Goal name'),
        description=(description or '').strip() or None,
        target_amount=_require_amount(target_amount, 'Target amount'),
        target_date=target_date,
    )


def _not_signed_in(what: str) -> FormResult:
    return FormResult(False, "Error", f"You must be logged in to {what}")


def submit_transaction(store: FinanceStore, txn_type: str, category: str, description: str,
                       amount: Any, txn_date: Optional[date]) -> FormResult:
    user = store.current_user()
    if user is None:
        return _not_signed_in("add transactions")
    try:
        transaction = build_transaction(txn_type, category, description, amount, txn_date)
    except ValueError as exc:
        return FormResult(False, "Invalid transaction", str(exc))
    transaction.user_id = user.id
    try:
        store.insert(TRANSACTIONS, transaction.to_row())
    except StoreError:
        return FormResult(False, "Error", "Failed to add transaction")
    return FormResult(True, "Success", "Transaction added successfully")


def submit_budget(store: FinanceStore, category: str, amount: Any, period: str,
                  today: Optional[date] = None) -> FormResult:
    user = store.current_user()
    if user is None:
        return _not_signed_in("create budgets")
    try:
        budget = build_budget(category, amount, period, today)
    except ValueError as exc:
        return FormResult(False, "Invalid budget", str(exc))
    budget.user_id = user.id
    try:
        store.insert(BUDGETS, budget.to_row())
    except DuplicateBudgetError:
        return FormResult(
            False,
            "Budget already exists",
            f"You already have a {budget.period} budget for {budget.category}",
        )
    except StoreError:
        return FormResult(False, "Error", "Failed to create budget")
    return FormResult(True, "Success", "Budget created successfully")


def submit_goal(store: FinanceStore, name: str, target_amount: Any, description: Optional[str] = None,
                target_date: Optional[date] = None) -> FormResult:
    user = store.current_user()
    if user is None:
        return _not_signed_in("create goals")
    try:
        goal = build_goal(name, target_amount, description, target_date)
    except ValueError as exc:
        return FormResult(False, "Invalid goal", str(exc))
    goal.user_id = user.id
    try:
        store.insert(GOALS, goal.to_row())
    except StoreError:
        return FormResult(False, "Error", "Failed to create goal")
    return FormResult(True, "Success", "Goal created successfully")


def apply_goal_progress(goal: Goal, increment: Any) -> Tuple[float, bool]:
    """New current amount and completion flag after adding ``increment``."""
    try:
        increment = float(increment)
    except (TypeError, ValueError) as exc:
        raise ValueError("Amount must be a number") from exc
    if not math.isfinite(increment) or increment <= 0:
        raise ValueError("Amount must be greater than zero")
    new_amount = goal.current_amount + increment
    return new_amount, new_amount >= goal.target_amount


def submit_goal_progress(store: FinanceStore, goal: Goal, increment: Any) -> FormResult:
    try:
        new_amount, completed = apply_goal_progress(goal, increment)
    except ValueError as exc:
        return FormResult(False, "Invalid amount", str(exc))
    try:
        store.update(GOALS, goal.id, {'current_amount': new_amount, 'is_completed': completed})
    except StoreError:
        return FormResult(False, "Error", "Failed to update goal progress")
    return FormResult(True, "Progress updated", "Goal progress has been updated successfully")


def submit_goal_deletion(store: FinanceStore, goal_id: str) -> FormResult:
    try:
        store.delete(GOALS, goal_id)
    except StoreError:
        return FormResult(False, "Error", "Failed to delete goal")
    return FormResult(True, "Goal deleted", "Goal has been deleted successfully")


def submit_transaction_deletion(store: FinanceStore, transaction_id: str) -> FormResult:
    try:
        store.delete(TRANSACTIONS, transaction_id)
    except StoreError:
        return FormResult(False, "Error", "Failed to delete transaction")
    return FormResult(True, "Success", "Transaction deleted successfully")
