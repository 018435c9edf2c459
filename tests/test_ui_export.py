from contextlib import nullcontext
from datetime import date
from types import SimpleNamespace

import pytest

from budget_navigator import reports, session, ui
from budget_navigator.models import EXPENSE, Transaction, User


class FakeStreamlit(SimpleNamespace):
    """Just enough of the streamlit API to render the export panel."""

    def __init__(self):
        super().__init__(session_state={}, clicks=set(), downloads=[], errors=[])

    def subheader(self, *args, **kwargs):
        pass

    def caption(self, *args, **kwargs):
        pass

    def selectbox(self, label, options, index=0, **kwargs):
        return options[index]

    def columns(self, spec):
        return [nullcontext() for _ in range(spec)]

    def button(self, label, **kwargs):
        return label in self.clicks

    def spinner(self, text):
        return nullcontext()

    def download_button(self, label, data, **kwargs):
        self.downloads.append((label, data))

    def error(self, message):
        self.errors.append(message)


@pytest.fixture
def fake_st(monkeypatch):
    fake = FakeStreamlit()
    monkeypatch.setattr(ui, 'st', fake)
    monkeypatch.setattr(session, 'st', fake)
    monkeypatch.setattr(reports, 'build_pdf', lambda rows, date_range: ','.join(t.description for t in rows).encode())
    return fake


def txn(description, amount=100.0):
    return Transaction(type=EXPENSE, category='Other', description=description, amount=amount,
                       date=date(2025, 1, 10), id=description)


def render(fake, transactions, click=False):
    fake.downloads.clear()
    fake.clicks = {"📄 Prepare PDF"} if click else set()
    ui.FinanceUI(store=None).render_export_panel(transactions)
    return [data for label, data in fake.downloads if 'PDF' in label]


def sign_in(name):
    session.get_cache().on_session_change(User(id=name, email=f"{name}@example.com"))


def test_prepared_pdf_is_reused_for_the_same_rows(fake_st):
    sign_in('alice')
    assert render(fake_st, [txn('rent')], click=True) == [b'rent']
    assert render(fake_st, [txn('rent')]) == [b'rent']


def test_prepared_pdf_is_not_offered_for_different_rows_of_equal_count(fake_st):
    sign_in('alice')
    render(fake_st, [txn('rent')], click=True)
    assert render(fake_st, [txn('groceries')]) == []


def test_prepared_pdf_is_not_offered_to_the_next_user(fake_st):
    sign_in('alice')
    render(fake_st, [txn('alice salary')], click=True)
    sign_in('bob')
    assert render(fake_st, [txn('bob salary')]) == []


def test_refresh_discards_prepared_pdf(fake_st):
    sign_in('alice')
    render(fake_st, [txn('rent')], click=True)
    session.refresh('transactions')
    assert render(fake_st, [txn('rent')]) == []


def test_csv_failure_is_reported(fake_st, monkeypatch):
    def broken(rows):
        raise RuntimeError("disk full")

    monkeypatch.setattr(reports, 'build_csv', broken)
    sign_in('alice')
    render(fake_st, [txn('rent')])
    assert fake_st.errors == ["Export failed: disk full"]
    assert not any("CSV" in label for label, _ in fake_st.downloads)
