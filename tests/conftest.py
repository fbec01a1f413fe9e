"""Shared pytest fixtures for ledgerkit tests."""

import tempfile
import os
from datetime import date
import pytest

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.postings import PostingService
from ledgerkit.domain.reconciliation import ReconciliationService
from ledgerkit.domain.reports import ReportService


# (code, name, type, parent code)
SAMPLE_CHART = [
    ("1000", "Current Assets", "asset", None),
    ("1010", "Cash", "asset", "1000"),
    ("1020", "Bank Checking", "asset", "1000"),
    ("1100", "Accounts Receivable", "asset", "1000"),
    ("1500", "Equipment", "asset", None),
    ("2000", "Accounts Payable", "liability", None),
    ("2500", "Bank Loan", "liability", None),
    ("3000", "Owner's Equity", "equity", None),
    ("4000", "Sales Revenue", "revenue", None),
    ("5000", "Rent Expense", "expense", None),
    ("5100", "Supplies Expense", "expense", None),
]


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def journal_service(temp_db):
    """Create a JournalService with a temporary database."""
    return JournalService(temp_db)


@pytest.fixture
def report_service(temp_db):
    """Create a ReportService with a temporary database."""
    return ReportService(temp_db)


@pytest.fixture
def reconciliation_service(temp_db):
    """Create a ReconciliationService with a temporary database."""
    return ReconciliationService(temp_db)


@pytest.fixture
def posting_service(temp_db):
    """Create a PostingService with a temporary database."""
    return PostingService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account for testing."""
    return account_service.create_account(code="1000", name="Cash", account_type="asset")


@pytest.fixture
def chart(account_service):
    """Create the sample chart of accounts and return it keyed by code."""
    accounts = {}
    for code, name, account_type, parent_code in SAMPLE_CHART:
        parent_id = accounts[parent_code].id if parent_code else None
        accounts[code] = account_service.create_account(
            code=code, name=name, account_type=account_type, parent_id=parent_id
        )
    return accounts


@pytest.fixture
def post(journal_service):
    """Return a helper that posts a two-line entry (debit one account, credit another)."""

    def _post(debit_account, credit_account, amount, entry_date=date(2024, 1, 15), **kwargs):
        return journal_service.create_journal_entry(
            date=entry_date,
            lines=[
                {"account_id": debit_account.id, "type": "debit", "amount": amount},
                {"account_id": credit_account.id, "type": "credit", "amount": amount},
            ],
            **kwargs,
        )

    return _post


@pytest.fixture
def balance_of(account_service):
    """Return a helper that reads an account's current balance."""

    def _balance_of(account):
        return account_service.get_account_by_id(account.id).balance

    return _balance_of


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
