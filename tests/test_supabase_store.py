from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from budget_navigator import config
from budget_navigator.store import BUDGETS, TRANSACTIONS, AuthError, DuplicateBudgetError, StoreError
from budget_navigator.supabase_store import SupabaseStore


def auth_user(user_id='u1'):
    return SimpleNamespace(id=user_id, email='jane@example.com', user_metadata={'full_name': 'Jane'})


@pytest.fixture
def client():
    mock = MagicMock()
    mock.auth.get_user.return_value = SimpleNamespace(user=auth_user())
    return mock


def test_current_user_reads_metadata(client):
    user = SupabaseStore(client).current_user()
    assert user.id == 'u1'
    assert user.full_name == 'Jane'


def test_current_user_when_signed_out(client):
    client.auth.get_user.return_value = None
    assert SupabaseStore(client).current_user() is None


def test_select_orders_rows(client):
    query = client.table.return_value.select.return_value
    query.order.return_value.execute.return_value = SimpleNamespace(data=[{'id': '1'}])

    rows = SupabaseStore(client).select(TRANSACTIONS, order_by='date', descending=True)

    client.table.assert_called_with(TRANSACTIONS)
    query.order.assert_called_once_with('date', desc=True)
    assert rows == [{'id': '1'}]


def test_insert_adds_user_id(client):
    execute = client.table.return_value.insert.return_value.execute
    execute.return_value = SimpleNamespace(data=[{'id': 'new'}])

    created = SupabaseStore(client).insert(TRANSACTIONS, {'amount': 10})

    client.table.return_value.insert.assert_called_once_with({'amount': 10, 'user_id': 'u1'})
    assert created == {'id': 'new'}


def test_unique_violation_on_budgets(client):
    client.table.return_value.insert.return_value.execute.side_effect = APIError(
        {'code': '23505', 'message': 'duplicate key value violates unique constraint'}
    )
    with pytest.raises(DuplicateBudgetError):
        SupabaseStore(client).insert(BUDGETS, {'category': 'Food', 'period': 'monthly'})


def test_other_api_errors_are_store_errors(client):
    client.table.return_value.insert.return_value.execute.side_effect = APIError(
        {'code': '42501', 'message': 'permission denied'}
    )
    with pytest.raises(StoreError) as excinfo:
        SupabaseStore(client).insert(BUDGETS, {'category': 'Food', 'period': 'monthly'})
    assert not isinstance(excinfo.value, DuplicateBudgetError)


def test_update_and_delete_filter_by_id(client):
    store = SupabaseStore(client)
    store.update('goals', 'g1', {'current_amount': 5})
    client.table.return_value.update.return_value.eq.assert_called_once_with('id', 'g1')
    store.delete('goals', 'g1')
    client.table.return_value.delete.return_value.eq.assert_called_once_with('id', 'g1')


def test_writes_require_a_user(client):
    client.auth.get_user.return_value = SimpleNamespace(user=None)
    with pytest.raises(AuthError):
        SupabaseStore(client).insert(TRANSACTIONS, {'amount': 1})


def test_sign_in_failure(client):
    client.auth.sign_in_with_password.side_effect = Exception('Invalid login credentials')
    with pytest.raises(AuthError):
        SupabaseStore(client).sign_in('jane@example.com', 'bad')


def test_session_change_subscription(client):
    subscription = MagicMock()
    client.auth.on_auth_state_change.return_value = subscription
    seen = []

    unsubscribe = SupabaseStore(client).on_session_change(seen.append)
    handler = client.auth.on_auth_state_change.call_args[0][0]
    handler('SIGNED_IN', SimpleNamespace(user=auth_user('u2')))
    handler('SIGNED_OUT', None)

    assert [u.id if u else None for u in seen] == ['u2', None]
    unsubscribe()
    subscription.unsubscribe.assert_called_once()


def test_from_config_requires_credentials(monkeypatch):
    monkeypatch.setattr(config, 'SUPABASE_URL', None)
    monkeypatch.setattr(config, 'SUPABASE_KEY', None)
    with pytest.raises(StoreError):
        SupabaseStore.from_config()
