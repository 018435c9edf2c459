"""Formatting utilities for currency, dates and display text."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from .config import CURRENCY_LABEL


def format_currency(amount: Union[float, int], include_label: bool = True, label: Optional[str] = None) -> str:
    """Format a currency amount with grouped thousands.

    Args:
        amount: The amount to format
        include_label: Whether to prefix the currency label
        label: Override for the configured currency label

    Returns:
        Formatted currency string (e.g., "KSh 1,234.56" or "1,234.56")

    Example:
        >>> format_currency(1234.56)
        'KSh 1,234.56'
        >>> format_currency(1234.56, include_label=False)
        '1,234.56'
    """
    formatted = f"{amount:,.2f}"
    if not include_label:
        return formatted
    return f"{label or CURRENCY_LABEL} {formatted}"


def format_signed_currency(amount: Union[float, int], is_income: bool) -> str:
    """Format an amount with a leading + for income and - for expenses."""
    return f"{'+' if is_income else '-'}{format_currency(amount)}"


def format_display_date(value: Union[date, datetime, None]) -> str:
    """Human-readable date for lists and captions (e.g. "Oct 17, 2026")."""
    if value is None:
        return ""
    return value.strftime("%b %d, %Y")


def format_month_label(month_key: str) -> str:
    """Turn a ``YYYY-MM`` bucket key into a short label like ``Jan 25``."""
    return datetime.strptime(f"{month_key}-01", "%Y-%m-%d").strftime("%b %y")


def format_week_label(week_key: str) -> str:
    """Turn ``2025-W03`` into the axis label ``2025 W03``."""
    return week_key.replace("-W", " W")


def format_days_left(days_left: Optional[int]) -> str:
    """Caption for a goal deadline."""
    if days_left is None:
        return ""
    if days_left > 0:
        return f"{days_left} days left"
    return f"{abs(days_left)} days overdue"
