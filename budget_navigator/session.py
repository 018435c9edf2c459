"""Per-browser-session state shared by every part of the UI.

Streamlit reruns the script on every interaction, so the store handle and
the fetched rows are parked in ``st.session_state``.  Fetched rows are kept
in a :class:`SessionCache` until a mutation or a sign-in/sign-out clears
them, after which the next read goes back to the store.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

import streamlit as st

from .confirmation import ConfirmationState
from .models import Budget, Goal, Transaction, User
from .store import FinanceStore, create_store, fetch_budgets, fetch_goals, fetch_transactions

STORE_KEY = 'finance_store'
CACHE_KEY = 'finance_cache'
GOAL_PROGRESS_KEY = 'confirm_goal_progress'
GOAL_DELETE_KEY = 'confirm_goal_delete'
TRANSACTION_DELETE_KEY = 'confirm_transaction_delete'


class SessionCache:
    """Fetched rows plus the last known user for one browser session.

    Plain Python state, so the session-change callback may update it from
    whatever thread the auth client fires on.
    """

    def __init__(self) -> None:
        self.user: Optional[User] = None
        self.rows: Dict[str, List[Any]] = {}
        self.unsubscribe: Optional[Callable[[], None]] = None
        self.pdf_export: Optional[Tuple[Hashable, bytes]] = None

    def on_session_change(self, user: Optional[User]) -> None:
        self.user = user
        self.rows.clear()
        self.pdf_export = None

    def invalidate(self, *names: str) -> None:
        # any change to the rows makes a prepared report stale
        self.pdf_export = None
        if not names:
            self.rows.clear()
            return
        for name in names:
            self.rows.pop(name, None)


def get_cache() -> SessionCache:
    if CACHE_KEY not in st.session_state:
        st.session_state[CACHE_KEY] = SessionCache()
    return st.session_state[CACHE_KEY]


def get_store() -> FinanceStore:
    """Return this session's store, creating and subscribing it once."""
    if STORE_KEY not in st.session_state:
        store = create_store()
        cache = get_cache()
        cache.unsubscribe = store.on_session_change(cache.on_session_change)
        cache.user = store.current_user()
        st.session_state[STORE_KEY] = store
    return st.session_state[STORE_KEY]


def current_user() -> Optional[User]:
    return get_cache().user


def _load(name: str, fetch: Callable[[FinanceStore], List[Any]], force: bool = False) -> List[Any]:
    cache = get_cache()
    if force or name not in cache.rows:
        cache.rows[name] = fetch(get_store())
    return cache.rows[name]


def load_transactions(force: bool = False) -> List[Transaction]:
    return _load('transactions', fetch_transactions, force)


def load_budgets(force: bool = False) -> List[Budget]:
    return _load('budgets', fetch_budgets, force)


def load_goals(force: bool = False) -> List[Goal]:
    return _load('goals', fetch_goals, force)


def refresh(*names: str) -> None:
    """Drop cached rows so the next load re-fetches them."""
    get_cache().invalidate(*names)


def confirmation(key: str) -> ConfirmationState:
    return ConfirmationState(st.session_state, key)


def remember_pdf(signature: Hashable, payload: bytes) -> None:
    get_cache().pdf_export = (signature, payload)


def prepared_pdf(signature: Hashable) -> Optional[bytes]:
    """The prepared report for ``signature``, or ``None`` if it is stale."""
    entry = get_cache().pdf_export
    if entry is None or entry[0] != signature:
        return None
    return entry[1]
