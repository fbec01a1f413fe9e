"""Domain layer for ledgerkit application."""

from ledgerkit.domain.account import AccountService
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.reports import ReportService
from ledgerkit.domain.reconciliation import ReconciliationService
from ledgerkit.domain.postings import PostingService

__all__ = [
    "AccountService",
    "JournalService",
    "ReportService",
    "ReconciliationService",
    "PostingService",
]
