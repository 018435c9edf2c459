from types import SimpleNamespace

import pytest

from budget_navigator import session
from budget_navigator.models import EXPENSE
from budget_navigator.store import TRANSACTIONS


@pytest.fixture
def fake_st(monkeypatch):
    fake = SimpleNamespace(session_state={})
    monkeypatch.setattr(session, 'st', fake)
    return fake


@pytest.fixture
def session_store(monkeypatch, fake_st, signed_out_store):
    monkeypatch.setattr(session, 'create_store', lambda: signed_out_store)
    return signed_out_store


def add_row(store, description):
    store.insert(TRANSACTIONS, {'type': EXPENSE, 'category': 'Other', 'description': description,
                                'amount': 5.0, 'date': '2025-01-01'})


def test_store_is_created_once_per_session(session_store, fake_st):
    assert session.get_store() is session_store
    assert session.get_store() is session_store
    assert session.STORE_KEY in fake_st.session_state
    assert session.current_user() is None


def test_sign_in_updates_cached_user(session_store):
    session.get_store()
    session_store.sign_in('jane@example.com', 'pw')
    assert session.current_user().email == 'jane@example.com'
    session_store.sign_out()
    assert session.current_user() is None


def test_rows_are_cached_until_refresh(session_store):
    session.get_store()
    session_store.sign_in('jane@example.com', 'pw')
    add_row(session_store, 'first')
    assert [t.description for t in session.load_transactions()] == ['first']

    add_row(session_store, 'second')
    assert len(session.load_transactions()) == 1

    session.refresh('transactions')
    assert len(session.load_transactions()) == 2


def test_session_change_clears_cached_rows(session_store):
    session.get_store()
    session_store.sign_in('jane@example.com', 'pw')
    session.load_budgets()
    assert 'budgets' in session.get_cache().rows
    session_store.sign_out()
    assert session.get_cache().rows == {}


def test_confirmation_lives_in_session_state(fake_st):
    pending = session.confirmation(session.GOAL_DELETE_KEY)
    pending.request('goal-1')
    assert fake_st.session_state[session.GOAL_DELETE_KEY]['target'] == 'goal-1'
    assert session.confirmation(session.GOAL_DELETE_KEY).is_confirming('goal-1')


def test_prepared_pdf_is_dropped_on_refresh_and_session_change(session_store):
    session.get_store()
    session.remember_pdf(('alice', 'all', ()), b'%PDF')
    assert session.prepared_pdf(('alice', 'all', ())) == b'%PDF'
    assert session.prepared_pdf(('bob', 'all', ())) is None

    session.refresh('goals')
    assert session.prepared_pdf(('alice', 'all', ())) is None

    session.remember_pdf(('alice', 'all', ()), b'%PDF')
    session_store.sign_in('bob@example.com', 'pw')
    assert session.prepared_pdf(('alice', 'all', ())) is None
