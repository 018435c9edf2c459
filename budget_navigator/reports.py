"""CSV and PDF report exports.

Both exporters work on data that is already in memory: the caller passes
the fetched transactions, the exporter narrows them to the chosen date
range and returns the encoded payload for ``st.download_button``.  An empty
selection is a valid export, not an error.
"""

from __future__ import annotations

import io
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

import pandas as pd
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from .analytics import FinanceAnalytics
from .formatting import format_currency
from .models import Transaction

DATE_RANGES = {
    'month': 'Last Month',
    'quarter': 'Last 3 Months',
    'year': 'Last Year',
    'all': 'All Time',
}
_RANGE_OFFSETS = {
    'month': pd.DateOffset(months=1),
    'quarter': pd.DateOffset(months=3),
    'year': pd.DateOffset(years=1),
}

CSV_HEADERS = ['Date', 'Type', 'Category', 'Description', 'Amount']
CSV_MIME = 'text/csv'
PDF_MIME = 'application/pdf'

# Page geometry in millimetres (A4 portrait)
PAGE_WIDTH_MM = 210.0
PAGE_HEIGHT_MM = 297.0
MM_PER_INCH = 25.4
MARGIN_MM = 15.0
FIRST_TABLE_TOP_MM = 95.0
ROW_HEIGHT_MM = 6.0
HEADER_COLOR = (66 / 255, 139 / 255, 202 / 255)
# (left edge in mm, max characters) for each table column
TABLE_COLUMNS = [(14.0, 12), (40.0, 10), (62.0, 20), (100.0, 34), (160.0, 18)]


def range_cutoff(date_range: str, now: Optional[datetime] = None) -> Optional[date]:
    """Earliest included date for ``date_range``; ``None`` means no cutoff."""
    if date_range not in DATE_RANGES:
        raise ValueError(f"Unknown date range '{date_range}'")
    if date_range == 'all':
        return None
    now = now or datetime.now()
    return (pd.Timestamp(now) - _RANGE_OFFSETS[date_range]).date()


def filter_by_date_range(transactions: Iterable[Transaction], date_range: str,
                         now: Optional[datetime] = None) -> List[Transaction]:
    """Keep transactions dated on or after the range cutoff."""
    cutoff = range_cutoff(date_range, now)
    if cutoff is None:
        return list(transactions)
    return [t for t in transactions if t.date >= cutoff]


def export_signature(transactions: Sequence[Transaction], date_range: str, user_id: Optional[str]) -> tuple:
    """Identity of an export: who asked, which range and exactly which rows."""
    rows = tuple((t.id, t.type, t.category, t.description, t.amount, t.date) for t in transactions)
    return (user_id, date_range, rows)


def report_period_label(date_range: str) -> str:
    """Period line of the PDF report, e.g. ``Month`` or ``All``."""
    if date_range not in DATE_RANGES:
        raise ValueError(f"Unknown date range '{date_range}'")
    return date_range.capitalize()


def export_filename(kind: str, date_range: str, today: Optional[date] = None) -> str:
    """``financial-data-month-2025-01-31.csv`` / ``financial-report-...pdf``."""
    stamp = (today or date.today()).isoformat()
    if kind == 'csv':
        return f"financial-data-{date_range}-{stamp}.csv"
    if kind == 'pdf':
        return f"financial-report-{date_range}-{stamp}.pdf"
    raise ValueError(f"Unknown export format '{kind}'")


def build_csv(transactions: Sequence[Transaction]) -> str:
    """Encode transactions as CSV with a header row.

    Free-text fields holding a comma, quote or newline are wrapped in
    quotes with embedded quotes doubled.
    """
    frame = pd.DataFrame(
        [[t.date.isoformat(), t.type, t.category, t.description, t.amount] for t in transactions],
        columns=CSV_HEADERS,
    )
    return frame.to_csv(index=False, lineterminator='\n', float_format='%.2f')


def paginate_rows(rows: Sequence, first_page_rows: int, rows_per_page: int) -> List[list]:
    """Split table rows into pages; there is always at least one page."""
    pages = [list(rows[:first_page_rows])]
    remaining = rows[first_page_rows:]
    for start in range(0, len(remaining), rows_per_page):
        pages.append(list(remaining[start:start + rows_per_page]))
    return pages


def _rows_that_fit(top_mm: float) -> int:
    usable = PAGE_HEIGHT_MM - MARGIN_MM - top_mm - ROW_HEIGHT_MM
    return max(1, int(usable // ROW_HEIGHT_MM))


def _fx(mm: float) -> float:
    return mm / PAGE_WIDTH_MM


def _fy(mm: float) -> float:
    return 1 - mm / PAGE_HEIGHT_MM


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit - 1] + '…'


def _table_row(txn: Transaction) -> List[str]:
    return [
        txn.date.isoformat(),
        txn.type.capitalize(),
        txn.category,
        txn.description,
        format_currency(txn.amount),
    ]


def _draw_summary(fig: Figure, transactions: Sequence[Transaction], date_range: str, now: datetime) -> None:
    totals = FinanceAnalytics(transactions).calculate_totals()
    fig.text(_fx(20), _fy(20), "Financial Report", fontsize=20, va='baseline')
    lines = [
        (35, f"Report Period: {report_period_label(date_range)}"),
        (45, f"Generated on: {now.strftime('%b %d, %Y %H:%M')}"),
        (60, f"Total Income: {format_currency(totals['income'])}"),
        (70, f"Total Expenses: {format_currency(totals['expenses'])}"),
        (80, f"Net Balance: {format_currency(totals['balance'])}"),
    ]
    for top_mm, text in lines:
        fig.text(_fx(20), _fy(top_mm), text, fontsize=12, va='baseline')


def _draw_table(fig: Figure, rows: Sequence[List[str]], top_mm: float) -> None:
    left = TABLE_COLUMNS[0][0]
    fig.add_artist(Rectangle(
        (_fx(left), _fy(top_mm + ROW_HEIGHT_MM)),
        _fx(PAGE_WIDTH_MM - 2 * left),
        ROW_HEIGHT_MM / PAGE_HEIGHT_MM,
        transform=fig.transFigure,
        facecolor=HEADER_COLOR,
        edgecolor='none',
    ))
    baseline = top_mm + ROW_HEIGHT_MM * 0.7
    for (x_mm, _), header in zip(TABLE_COLUMNS, CSV_HEADERS):
        fig.text(_fx(x_mm + 1), _fy(baseline), header, fontsize=8, color='white', fontweight='bold')

    for index, row in enumerate(rows, start=1):
        y_mm = top_mm + ROW_HEIGHT_MM * index
        if index % 2 == 0:
            fig.add_artist(Rectangle(
                (_fx(left), _fy(y_mm + ROW_HEIGHT_MM)),
                _fx(PAGE_WIDTH_MM - 2 * left),
                ROW_HEIGHT_MM / PAGE_HEIGHT_MM,
                transform=fig.transFigure,
                facecolor='#f5f5f5',
                edgecolor='none',
            ))
        for (x_mm, limit), value in zip(TABLE_COLUMNS, row):
            fig.text(_fx(x_mm + 1), _fy(y_mm + ROW_HEIGHT_MM * 0.7), _clip(value, limit), fontsize=8)


def build_pdf(transactions: Sequence[Transaction], date_range: str, now: Optional[datetime] = None) -> bytes:
    """Render the paginated PDF report and return its bytes."""
    if date_range not in DATE_RANGES:
        raise ValueError(f"Unknown date range '{date_range}'")
    now = now or datetime.now()
    rows = [_table_row(t) for t in transactions]
    pages = paginate_rows(rows, _rows_that_fit(FIRST_TABLE_TOP_MM), _rows_that_fit(MARGIN_MM))

    buffer = io.BytesIO()
    with PdfPages(buffer, metadata={'Title': 'Financial Report'}) as pdf:
        for page_number, page_rows in enumerate(pages):
            fig = Figure(figsize=(PAGE_WIDTH_MM / MM_PER_INCH, PAGE_HEIGHT_MM / MM_PER_INCH))
            if page_number == 0:
                _draw_summary(fig, transactions, date_range, now)
                top_mm = FIRST_TABLE_TOP_MM
            else:
                top_mm = MARGIN_MM
            _draw_table(fig, page_rows, top_mm)
            fig.text(0.5, _fy(PAGE_HEIGHT_MM - 8), f"Page {page_number + 1} of {len(pages)}",
                     fontsize=8, ha='center', color='grey')
            pdf.savefig(fig)
    return buffer.getvalue()
