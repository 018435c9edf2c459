"""Persistence backend contract and shared helpers.

The application never talks to a database directly.  It receives a store
object (``SQLiteStore`` for local use, ``SupabaseStore`` for the hosted
backend, or a fake in tests) and goes through the small CRUD and auth
surface defined by :class:`FinanceStore`.  Reads are always scoped to the
signed-in user.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from .models import Bill, Budget, Goal, RecurringTransaction, Transaction, User

TRANSACTIONS = 'transactions'
BUDGETS = 'budgets'
GOALS = 'goals'
RECURRING_TRANSACTIONS = 'recurring_transactions'
BILLS = 'bills'
PROFILES = 'profiles'

TABLES = (TRANSACTIONS, BUDGETS, GOALS, RECURRING_TRANSACTIONS, BILLS, PROFILES)

SessionCallback = Callable[[Optional[User]], None]


class StoreError(Exception):
    """A read or write against the backend failed."""


class DuplicateBudgetError(StoreError):
    """A budget for the same user, category and period already exists."""


class AuthError(StoreError):
    """Sign-in, sign-up or an operation needing a signed-in user failed."""


class FinanceStore:
    """Row-level CRUD plus session handling, implemented per backend."""

    def __init__(self) -> None:
        self._listeners: List[SessionCallback] = []

    # -- auth -------------------------------------------------------------
    def current_user(self) -> Optional[User]:
        raise NotImplementedError

    def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> User:
        raise NotImplementedError

    def sign_in(self, email: str, password: str) -> User:
        raise NotImplementedError

    def sign_out(self) -> None:
        raise NotImplementedError

    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]:
        """Register ``callback`` for sign-in/sign-out transitions.

        Returns a function that removes the subscription.
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, user: Optional[User]) -> None:
        for callback in list(self._listeners):
            callback(user)

    # -- rows -------------------------------------------------------------
    def select(self, table: str, order_by: Optional[str] = None, descending: bool = False) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def update(self, table: str, row_id: str, values: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, table: str, row_id: str) -> None:
        raise NotImplementedError

    def require_user(self) -> User:
        user = self.current_user()
        if user is None:
            raise AuthError("Not signed in")
        return user


def fetch_transactions(store: FinanceStore) -> List[Transaction]:
    return [Transaction.from_row(row) for row in store.select(TRANSACTIONS, order_by='date', descending=True)]


def fetch_budgets(store: FinanceStore) -> List[Budget]:
    return [Budget.from_row(row) for row in store.select(BUDGETS, order_by='created_at', descending=True)]


def fetch_goals(store: FinanceStore) -> List[Goal]:
    return [Goal.from_row(row) for row in store.select(GOALS, order_by='created_at', descending=True)]


def fetch_recurring_transactions(store: FinanceStore) -> List[RecurringTransaction]:
    rows = store.select(RECURRING_TRANSACTIONS, order_by='next_due_date')
    return [RecurringTransaction.from_row(row) for row in rows]


def fetch_bills(store: FinanceStore) -> List[Bill]:
    return [Bill.from_row(row) for row in store.select(BILLS, order_by='due_date')]


def create_store(backend: Optional[str] = None) -> FinanceStore:
    """Build the store selected by configuration."""
    from . import config

    backend = (backend or config.BACKEND).lower()
    if backend == 'supabase':
        from .supabase_store import SupabaseStore

        return SupabaseStore.from_config()
    if backend == 'sqlite':
        from .db import SQLiteStore

        return SQLiteStore(config.DB_PATH)
    raise ValueError(f"Unsupported backend '{backend}'. Use 'sqlite' or 'supabase'.")
