"""Ledger postings recorded on behalf of sales and purchasing.

Order workflows record settled payments through ``PostingService``. The
accounts involved are discovered from the chart of accounts by name and
code. A chart that lacks them, or a posting that fails, must never block
the caller: both cases are logged and ``None`` is returned.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from ledgerkit.domain.account import AccountService, flatten_account_tree
from ledgerkit.domain.entities import Account, AccountType, JournalEntry, JournalLineInput, LineType
from ledgerkit.domain.journal import JournalService, to_money

if TYPE_CHECKING:
    from ledgerkit.database.base import Database

logger = logging.getLogger(__name__)


def _words(account: Account) -> set[str]:
    return set(re.findall(r"[a-z0-9]+", f"{account.code} {account.name}".lower()))


def _mentions(account: Account, keyword: str) -> bool:
    return keyword in account.code.lower() or keyword in account.name.lower()


def find_cash_account(accounts: Sequence[Account]) -> Optional[Account]:
    """First account whose code mentions cash, or an asset named cash."""
    for account in accounts:
        if "cash" in account.code.lower():
            return account
        if account.type == AccountType.ASSET and "cash" in account.name.lower():
            return account
    return None


def find_receivable_account(accounts: Sequence[Account]) -> Optional[Account]:
    """First account mentioning receivable, or an asset abbreviated AR."""
    for account in accounts:
        if _mentions(account, "receivable"):
            return account
        if account.type == AccountType.ASSET and "ar" in _words(account):
            return account
    return None


def find_payable_account(accounts: Sequence[Account]) -> Optional[Account]:
    """First account mentioning payable, or a liability abbreviated AP."""
    for account in accounts:
        if _mentions(account, "payable"):
            return account
        if account.type == AccountType.LIABILITY and "ap" in _words(account):
            return account
    return None


class PostingService:
    """Service recording payment receipts and disbursements in the ledger."""

    def __init__(self, db: Database):
        """Initialize posting service.

        Args:
            db: Database instance
        """
        self.db = db
        self.account_service = AccountService(db)
        self.journal_service = JournalService(db)

    def _post_payment(
        self,
        kind: str,
        debit_finder: Callable[[Sequence[Account]], Optional[Account]],
        credit_finder: Callable[[Sequence[Account]], Optional[Account]],
        amount: Any,
        payment_date: date,
        reference: Optional[str],
        description: Optional[str],
    ) -> Optional[JournalEntry]:
        try:
            accounts = flatten_account_tree(self.account_service.get_accounts_tree())
            debit_account = debit_finder(accounts)
            credit_account = credit_finder(accounts)
            if debit_account is None or credit_account is None:
                logger.warning(
                    "Accounts for %s not found; skipping journal entry for %s",
                    kind,
                    reference or "payment",
                )
                return None

            money = to_money(amount)
            return self.journal_service.create_journal_entry(
                date=payment_date,
                reference=reference,
                description=description,
                lines=[
                    JournalLineInput(debit_account.id, LineType.DEBIT, money, description),
                    JournalLineInput(credit_account.id, LineType.CREDIT, money, description),
                ],
            )
        except Exception:
            logger.exception("Failed to record %s for %s", kind, reference or "payment")
            return None

    def record_payment_received(
        self,
        amount: Any,
        payment_date: date,
        reference: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[JournalEntry]:
        """Record a customer payment: debit cash, credit accounts receivable.

        Returns:
            The posted entry, or None if the accounts are missing or the
            posting failed
        """
        return self._post_payment(
            "payment received",
            find_cash_account,
            find_receivable_account,
            amount,
            payment_date,
            reference,
            description,
        )

    def record_payment_made(
        self,
        amount: Any,
        payment_date: date,
        reference: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[JournalEntry]:
        """Record a supplier payment: debit accounts payable, credit cash.

        Returns:
            The posted entry, or None if the accounts are missing or the
            posting failed
        """
        return self._post_payment(
            "payment made",
            find_payable_account,
            find_cash_account,
            amount,
            payment_date,
            reference,
            description,
        )
