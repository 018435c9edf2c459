"""Configuration management for Budget Navigator.

This module centralizes all configuration values including paths,
backend selection, display defaults, and environment variable overrides.
A ``.env`` file in the working directory is loaded first so hosted
backend credentials do not have to be exported by hand.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Base project root - assumes this file is in budget_navigator/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("BUDGET_NAVIGATOR_DATA_DIR", _PROJECT_ROOT / "data"))
REPORTS_DIR = DATA_DIR / "reports"

# Database (local backend)
DB_PATH = Path(
    os.getenv("BUDGET_NAVIGATOR_DB_PATH", DATA_DIR / "budget_navigator.db")
).resolve()

# Backend selection: "sqlite" (local file) or "supabase" (hosted)
BACKEND = os.getenv("BUDGET_NAVIGATOR_BACKEND", "sqlite").strip().lower()

# Hosted backend credentials
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Display
CURRENCY_LABEL = os.getenv("BUDGET_NAVIGATOR_CURRENCY", "KSh")
APP_TITLE = "Savvy Budget Navigator"

# Category choices offered by the forms
EXPENSE_CATEGORIES = [
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Other",
]
INCOME_CATEGORIES = [
    "Salary",
    "Freelance",
    "Business",
    "Investments",
    "Gifts",
    "Other",
]

# Aggregation windows
DASHBOARD_CATEGORY_DAYS = 30
RECENT_TRANSACTION_COUNT = 5
MONTHLY_TREND_BUCKETS = 6
WEEKLY_TREND_BUCKETS = 8


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, REPORTS_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def get_db_path() -> str:
    """Get the database path as a string."""
    return str(DB_PATH)
