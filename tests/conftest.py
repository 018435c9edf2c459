from datetime import date

import pytest

from budget_navigator.models import EXPENSE, INCOME, Transaction, User
from budget_navigator.store import BUDGETS, DuplicateBudgetError, FinanceStore, StoreError


class FakeStore(FinanceStore):
    """In-memory store with the same contract as the real backends."""

    def __init__(self, user=None):
        super().__init__()
        self.user = user
        self.tables = {}
        self.fail_writes = False
        self._next_id = 0

    def current_user(self):
        return self.user

    def sign_up(self, email, password, full_name=None):
        return self.sign_in(email, password)

    def sign_in(self, email, password):
        self.user = User(id=f"user-{email}", email=email)
        self._notify(self.user)
        return self.user

    def sign_out(self):
        self.user = None
        self._notify(None)

    def select(self, table, order_by=None, descending=False):
        user = self.require_user()
        rows = [dict(r) for r in self.tables.get(table, []) if r['user_id'] == user.id]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by) or '', reverse=descending)
        return rows

    def insert(self, table, row):
        user = self.require_user()
        if self.fail_writes:
            raise StoreError("backend unavailable")
        record = dict(row, user_id=user.id)
        if table == BUDGETS:
            for existing in self.tables.get(BUDGETS, []):
                if (existing['user_id'], existing['category'], existing['period']) == (
                    user.id, record['category'], record['period']
                ):
                    raise DuplicateBudgetError("duplicate budget")
        self._next_id += 1
        record['id'] = str(self._next_id)
        record['created_at'] = f"2025-01-01T00:00:{self._next_id:02d}"
        self.tables.setdefault(table, []).append(record)
        return record

    def update(self, table, row_id, values):
        self.require_user()
        if self.fail_writes:
            raise StoreError("backend unavailable")
        for record in self.tables.get(table, []):
            if record['id'] == row_id:
                record.update(values)
                return
        raise StoreError(f"No {table} row with id {row_id}")

    def delete(self, table, row_id):
        self.require_user()
        if self.fail_writes:
            raise StoreError("backend unavailable")
        self.tables[table] = [r for r in self.tables.get(table, []) if r['id'] != row_id]


@pytest.fixture
def user():
    return User(id='user-1', email='jane@example.com', full_name='Jane')


@pytest.fixture
def store(user):
    return FakeStore(user=user)


@pytest.fixture
def signed_out_store():
    return FakeStore()


@pytest.fixture
def sample_transactions():
    return [
        Transaction(type=INCOME, category='Salary', description='January pay', amount=1000.0, date=date(2025, 1, 25), id='t1'),
        Transaction(type=EXPENSE, category='Food & Dining', description='Groceries', amount=200.0, date=date(2025, 1, 20), id='t2'),
        Transaction(type=EXPENSE, category='Transportation', description='Bus fare', amount=100.0, date=date(2025, 1, 10), id='t3'),
    ]
