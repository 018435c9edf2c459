"""Hosted backend built on the Supabase client.

Row security on the hosted tables already limits every query to the
signed-in user, so reads here are plain ``select`` calls.  Postgres
unique-violation errors on ``budgets`` are translated to
``DuplicateBudgetError``; every other failure becomes ``StoreError``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client

from .models import User
from .store import BUDGETS, AuthError, DuplicateBudgetError, FinanceStore, SessionCallback, StoreError

UNIQUE_VIOLATION = '23505'


def _user_from_auth(auth_user: Any) -> Optional[User]:
    if auth_user is None:
        return None
    metadata = getattr(auth_user, 'user_metadata', None) or {}
    return User(
        id=str(auth_user.id),
        email=getattr(auth_user, 'email', '') or '',
        full_name=metadata.get('full_name'),
        metadata=metadata,
    )


class SupabaseStore(FinanceStore):
    """Finance store that delegates to a Supabase project."""

    def __init__(self, client: Client):
        super().__init__()
        self.client = client

    @classmethod
    def from_config(cls) -> 'SupabaseStore':
        from . import config

        if not config.SUPABASE_URL or not config.SUPABASE_KEY:
            raise StoreError("SUPABASE_URL and SUPABASE_KEY must be set to use the hosted backend")
        return cls(create_client(config.SUPABASE_URL, config.SUPABASE_KEY))

    # -- auth -------------------------------------------------------------
    def current_user(self) -> Optional[User]:
        try:
            response = self.client.auth.get_user()
        except Exception as e:
            print(f"Error fetching current user: {e}")
            return None
        return _user_from_auth(getattr(response, 'user', None)) if response else None

    def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> User:
        try:
            response = self.client.auth.sign_up({
                'email': email,
                'password': password,
                'options': {'data': {'full_name': full_name}},
            })
        except Exception as e:
            raise AuthError(str(e)) from e
        user = _user_from_auth(response.user)
        if user is None:
            raise AuthError("Sign up did not return a user")
        return user

    def sign_in(self, email: str, password: str) -> User:
        try:
            response = self.client.auth.sign_in_with_password({'email': email, 'password': password})
        except Exception as e:
            raise AuthError(str(e)) from e
        user = _user_from_auth(response.user)
        if user is None:
            raise AuthError("Invalid email or password")
        return user

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except Exception as e:
            raise AuthError(f"Failed to sign out: {e}") from e

    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]:
        def handler(event: Any, session: Any) -> None:
            callback(_user_from_auth(session.user) if session else None)

        subscription = self.client.auth.on_auth_state_change(handler)
        return subscription.unsubscribe

    # -- rows -------------------------------------------------------------
    def select(self, table: str, order_by: Optional[str] = None, descending: bool = False) -> List[Dict[str, Any]]:
        self.require_user()
        try:
            query = self.client.table(table).select('*')
            if order_by:
                query = query.order(order_by, desc=descending)
            response = query.execute()
        except Exception as e:
            print(f"Error reading {table} from Supabase: {e}")
            raise StoreError(f"Failed to read {table}") from e
        return response.data or []

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        user = self.require_user()
        payload = dict(row, user_id=user.id)
        try:
            response = self.client.table(table).insert(payload).execute()
        except APIError as e:
            if table == BUDGETS and str(getattr(e, 'code', '')) == UNIQUE_VIOLATION:
                raise DuplicateBudgetError(
                    f"A {payload.get('period')} budget for {payload.get('category')} already exists"
                ) from e
            print(f"Error inserting into {table} on Supabase: {e}")
            raise StoreError(f"Failed to insert into {table}") from e
        except Exception as e:
            print(f"Error inserting into {table} on Supabase: {e}")
            raise StoreError(f"Failed to insert into {table}") from e
        return response.data[0] if response.data else payload

    def update(self, table: str, row_id: str, values: Dict[str, Any]) -> None:
        self.require_user()
        try:
            self.client.table(table).update(values).eq('id', row_id).execute()
        except Exception as e:
            print(f"Error updating {table} row {row_id} on Supabase: {e}")
            raise StoreError(f"Failed to update {table}") from e

    def delete(self, table: str, row_id: str) -> None:
        self.require_user()
        try:
            self.client.table(table).delete().eq('id', row_id).execute()
        except Exception as e:
            print(f"Error deleting {table} row {row_id} on Supabase: {e}")
            raise StoreError(f"Failed to delete from {table}") from e
