"""Row models for the entities owned by the persistence backend.

Rows travel to and from the store as plain dictionaries with ISO date
strings.  The dataclasses below are the typed, in-memory copies the rest
of the application works with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional

INCOME = 'income'
EXPENSE = 'expense'
TRANSACTION_TYPES = (INCOME, EXPENSE)

WEEKLY = 'weekly'
MONTHLY = 'monthly'
BUDGET_PERIODS = (WEEKLY, MONTHLY)


def parse_date(value: Any) -> Optional[date]:
    """Coerce a stored date value (ISO string, date or datetime) to ``date``."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def iso_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _to_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == '':
        return default
    return float(value)


@dataclass
class Transaction:
    """A single dated money movement, typed as income or expense."""

    type: str
    category: str
    description: str
    amount: float
    date: date
    id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def is_income(self) -> bool:
        return self.type == INCOME

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Transaction':
        return cls(
            id=_optional_str(row.get('id')),
            user_id=_optional_str(row.get('user_id')),
            type=str(row.get('type') or ''),
            category=str(row.get('category') or ''),
            description=str(row.get('description') or ''),
            amount=_to_float(row.get('amount')),
            date=parse_date(row.get('date')),
            created_at=row.get('created_at'),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'type': self.type,
            'category': self.category,
            'description': self.description,
            'amount': self.amount,
            'date': iso_date(self.date),
        }


@dataclass
class Budget:
    """A per-category spending ceiling for a weekly or monthly period."""

    category: str
    amount: float
    period: str
    start_date: date
    end_date: date
    id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Budget':
        return cls(
            id=_optional_str(row.get('id')),
            user_id=_optional_str(row.get('user_id')),
            category=str(row.get('category') or ''),
            amount=_to_float(row.get('amount')),
            period=str(row.get('period') or MONTHLY),
            start_date=parse_date(row.get('start_date')),
            end_date=parse_date(row.get('end_date')),
            created_at=row.get('created_at'),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'category': self.category,
            'amount': self.amount,
            'period': self.period,
            'start_date': iso_date(self.start_date),
            'end_date': iso_date(self.end_date),
        }


@dataclass
class Goal:
    """A savings target with incremental progress tracking."""

    name: str
    target_amount: float
    current_amount: float = 0.0
    description: Optional[str] = None
    target_date: Optional[date] = None
    is_completed: bool = False
    category: Optional[str] = None
    id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def remaining_amount(self) -> float:
        return self.target_amount - self.current_amount

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Goal':
        return cls(
            id=_optional_str(row.get('id')),
            user_id=_optional_str(row.get('user_id')),
            name=str(row.get('name') or ''),
            description=row.get('description') or None,
            category=row.get('category') or None,
            target_amount=_to_float(row.get('target_amount')),
            current_amount=_to_float(row.get('current_amount')),
            target_date=parse_date(row.get('target_date')),
            is_completed=bool(row.get('is_completed')),
            created_at=row.get('created_at'),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'target_amount': self.target_amount,
            'current_amount': self.current_amount,
            'target_date': iso_date(self.target_date),
            'is_completed': self.is_completed,
        }


@dataclass
class RecurringTransaction:
    """A future-dated repeating income or expense (read-only here)."""

    type: str
    category: str
    description: str
    amount: float
    frequency: str
    start_date: date
    next_due_date: date
    end_date: Optional[date] = None
    is_active: bool = True
    id: Optional[str] = None
    user_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'RecurringTransaction':
        return cls(
            id=_optional_str(row.get('id')),
            user_id=_optional_str(row.get('user_id')),
            type=str(row.get('type') or ''),
            category=str(row.get('category') or ''),
            description=str(row.get('description') or ''),
            amount=_to_float(row.get('amount')),
            frequency=str(row.get('frequency') or ''),
            start_date=parse_date(row.get('start_date')),
            next_due_date=parse_date(row.get('next_due_date')),
            end_date=parse_date(row.get('end_date')),
            is_active=bool(row.get('is_active', True)),
        )


@dataclass
class Bill:
    """A dated obligation with a paid flag (read-only here)."""

    name: str
    category: str
    amount: float
    frequency: str
    due_date: date
    is_paid: bool = False
    reminder_days: int = 3
    id: Optional[str] = None
    user_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Bill':
        reminder = row.get('reminder_days')
        return cls(
            id=_optional_str(row.get('id')),
            user_id=_optional_str(row.get('user_id')),
            name=str(row.get('name') or ''),
            category=str(row.get('category') or ''),
            amount=_to_float(row.get('amount')),
            frequency=str(row.get('frequency') or ''),
            due_date=parse_date(row.get('due_date')),
            is_paid=bool(row.get('is_paid')),
            reminder_days=int(reminder) if reminder is not None else 3,
        )


@dataclass
class User:
    """The signed-in account as reported by the backend."""

    id: str
    email: str
    full_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
