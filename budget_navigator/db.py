"""Local SQLite backend.

Implements the :class:`~budget_navigator.store.FinanceStore` contract on a
single SQLite file so the app runs without a hosted backend.  Accounts
live in a ``users`` table with werkzeug password hashes, and the budget
uniqueness rule is a unique index, surfaced as ``DuplicateBudgetError``.
"""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from werkzeug.security import check_password_hash, generate_password_hash

from .models import User
from .store import (
    BUDGETS,
    AuthError,
    DuplicateBudgetError,
    TABLES,
    FinanceStore,
    StoreError,
)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    full_name TEXT,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    type TEXT NOT NULL,
    category TEXT NOT NULL,
    description TEXT NOT NULL,
    amount REAL NOT NULL,
    date TEXT NOT NULL,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS budgets (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    category TEXT NOT NULL,
    amount REAL NOT NULL,
    period TEXT NOT NULL DEFAULT 'monthly',
    start_date TEXT NOT NULL,
    end_date TEXT NOT NULL,
    created_at TEXT,
    updated_at TEXT
);

CREATE UNIQUE INDEX IF NOT EXISTS ux_budget_user_category_period
ON budgets (user_id, category, period);

CREATE TABLE IF NOT EXISTS goals (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    category TEXT,
    target_amount REAL NOT NULL,
    current_amount REAL NOT NULL DEFAULT 0,
    target_date TEXT,
    is_completed INTEGER NOT NULL DEFAULT 0,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS recurring_transactions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    type TEXT NOT NULL,
    category TEXT NOT NULL,
    description TEXT NOT NULL,
    amount REAL NOT NULL,
    frequency TEXT NOT NULL,
    start_date TEXT NOT NULL,
    end_date TEXT,
    next_due_date TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS bills (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    category TEXT NOT NULL,
    amount REAL NOT NULL,
    frequency TEXT NOT NULL,
    due_date TEXT NOT NULL,
    is_paid INTEGER NOT NULL DEFAULT 0,
    reminder_days INTEGER NOT NULL DEFAULT 3,
    created_at TEXT,
    updated_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_txn_user_date ON transactions (user_id, date);
CREATE INDEX IF NOT EXISTS ix_goal_user ON goals (user_id);
"""

BOOLEAN_COLUMNS = {'is_completed', 'is_active', 'is_paid'}


class SQLiteStore(FinanceStore):
    """Finance store backed by a local SQLite file."""

    def __init__(self, db_path: Union[str, Path]):
        super().__init__()
        self.db_path = Path(db_path)
        self._user: Optional[User] = None
        self._columns: Dict[str, List[str]] = {}
        self.init_db()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
            for table in TABLES:
                rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
                self._columns[table] = [row[1] for row in rows]

    def _table_columns(self, table: str) -> List[str]:
        if table not in self._columns:
            raise StoreError(f"Unknown table '{table}'")
        return self._columns[table]

    # -- auth -------------------------------------------------------------
    def current_user(self) -> Optional[User]:
        return self._user

    def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> User:
        email = (email or '').strip().lower()
        if not email or not password:
            raise AuthError("Email and password are required")
        now = _timestamp()
        user_id = str(uuid.uuid4())
        with self.connect() as conn:
            try:
                conn.execute(
                    "INSERT INTO users (id, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
                    (user_id, email, generate_password_hash(password), now),
                )
            except sqlite3.IntegrityError as exc:
                raise AuthError(f"An account for {email} already exists") from exc
            conn.execute(
                "INSERT INTO profiles (id, user_id, full_name, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (str(uuid.uuid4()), user_id, full_name, now, now),
            )
            conn.commit()
        self._user = User(id=user_id, email=email, full_name=full_name)
        self._notify(self._user)
        return self._user

    def sign_in(self, email: str, password: str) -> User:
        email = (email or '').strip().lower()
        with self.connect() as conn:
            row = conn.execute(
                "SELECT u.id, u.email, u.password_hash, p.full_name "
                "FROM users u LEFT JOIN profiles p ON p.user_id = u.id WHERE u.email = ?",
                (email,),
            ).fetchone()
        if row is None or not check_password_hash(row['password_hash'], password or ''):
            raise AuthError("Invalid email or password")
        self._user = User(id=row['id'], email=row['email'], full_name=row['full_name'])
        self._notify(self._user)
        return self._user

    def sign_out(self) -> None:
        self._user = None
        self._notify(None)

    # -- rows -------------------------------------------------------------
    def select(self, table: str, order_by: Optional[str] = None, descending: bool = False) -> List[Dict[str, Any]]:
        user = self.require_user()
        columns = self._table_columns(table)
        sql = f"SELECT * FROM {table} WHERE user_id = ?"
        if order_by:
            if order_by not in columns:
                raise StoreError(f"Cannot order {table} by unknown column '{order_by}'")
            direction = 'DESC' if descending else 'ASC'
            sql += f" ORDER BY {order_by} {direction}, rowid {direction}"
        try:
            with self.connect() as conn:
                rows = conn.execute(sql, (user.id,)).fetchall()
        except sqlite3.Error as exc:
            print(f"Error reading {table}: {exc}")
            raise StoreError(f"Failed to read {table}") from exc
        return [_row_to_dict(row) for row in rows]

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        user = self.require_user()
        columns = self._table_columns(table)
        now = _timestamp()
        record = {key: value for key, value in row.items() if key in columns}
        record.update({
            'id': str(uuid.uuid4()),
            'user_id': user.id,
            'created_at': now,
            'updated_at': now,
        })
        placeholders = ', '.join('?' for _ in record)
        sql = f"INSERT INTO {table} ({', '.join(record)}) VALUES ({placeholders})"
        with self.connect() as conn:
            try:
                conn.execute(sql, [_to_db_value(v) for v in record.values()])
                conn.commit()
            except sqlite3.IntegrityError as exc:
                if table == BUDGETS and 'UNIQUE' in str(exc).upper():
                    raise DuplicateBudgetError(
                        f"A {record.get('period')} budget for {record.get('category')} already exists"
                    ) from exc
                print(f"Error inserting into {table}: {exc}")
                raise StoreError(f"Failed to insert into {table}") from exc
            except sqlite3.Error as exc:
                print(f"Error inserting into {table}: {exc}")
                raise StoreError(f"Failed to insert into {table}") from exc
        return record

    def update(self, table: str, row_id: str, values: Dict[str, Any]) -> None:
        user = self.require_user()
        columns = self._table_columns(table)
        changes = {key: value for key, value in values.items() if key in columns and key not in {'id', 'user_id'}}
        if not changes:
            return
        changes['updated_at'] = _timestamp()
        assignments = ', '.join(f"{key} = ?" for key in changes)
        params = [_to_db_value(v) for v in changes.values()] + [row_id, user.id]
        try:
            with self.connect() as conn:
                cursor = conn.execute(f"UPDATE {table} SET {assignments} WHERE id = ? AND user_id = ?", params)
                conn.commit()
        except sqlite3.Error as exc:
            print(f"Error updating {table} row {row_id}: {exc}")
            raise StoreError(f"Failed to update {table}") from exc
        if cursor.rowcount == 0:
            raise StoreError(f"No {table} row with id {row_id}")

    def delete(self, table: str, row_id: str) -> None:
        user = self.require_user()
        self._table_columns(table)
        try:
            with self.connect() as conn:
                conn.execute(f"DELETE FROM {table} WHERE id = ? AND user_id = ?", (row_id, user.id))
                conn.commit()
        except sqlite3.Error as exc:
            print(f"Error deleting {table} row {row_id}: {exc}")
            raise StoreError(f"Failed to delete from {table}") from exc


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_db_value(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    return value


def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
    record = dict(row)
    for key in BOOLEAN_COLUMNS & record.keys():
        record[key] = bool(record[key])
    return record
