#!/usr/bin/env python3
"""Export a local user's transactions as CSV or PDF without the UI."""

from __future__ import annotations

import argparse
import getpass
import sys
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budget_navigator import config, reports
from budget_navigator.db import SQLiteStore
from budget_navigator.store import StoreError, fetch_transactions


def main(email: str, password: str, fmt: str = 'csv', date_range: str = 'all',
         output_dir: Path | None = None, db_path: Path | None = None) -> int:
    store = SQLiteStore(db_path or config.get_db_path())
    try:
        store.sign_in(email, password)
        transactions = reports.filter_by_date_range(fetch_transactions(store), date_range)
    except StoreError as e:
        print(f"❌ {e}")
        return 1

    if not transactions:
        print("No transactions in the selected range; writing an empty report.")

    if output_dir is None:
        config.ensure_data_directories()
        output_dir = config.REPORTS_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / reports.export_filename(fmt, date_range, date.today())

    if fmt == 'csv':
        target.write_text(reports.build_csv(transactions), encoding='utf-8')
    else:
        target.write_bytes(reports.build_pdf(transactions, date_range))
    print(f"✅ Wrote {len(transactions)} transactions to {target}")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Export transactions from the local database.')
    parser.add_argument('email', help='Account email')
    parser.add_argument('--format', dest='fmt', choices=['csv', 'pdf'], default='csv')
    parser.add_argument('--range', dest='date_range', choices=list(reports.DATE_RANGES), default='all')
    parser.add_argument('--output-dir', type=Path, default=None, help='Defaults to the reports directory')
    parser.add_argument('--db', type=Path, default=None, help='SQLite database path')
    args = parser.parse_args()
    password = getpass.getpass('Password: ')
    sys.exit(main(args.email, password, args.fmt, args.date_range, args.output_dir, args.db))
