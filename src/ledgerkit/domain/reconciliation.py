"""Account reconciliation domain service."""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from ledgerkit.domain.balances import line_delta
from ledgerkit.domain.entities import (
    BALANCE_TOLERANCE,
    ReconciliationLine,
    ReconciliationResult,
)
from ledgerkit.domain.errors import NotFoundError, ValidationError, account_not_found
from ledgerkit.domain.journal import to_money

if TYPE_CHECKING:
    from ledgerkit.database.base import Database

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Service for comparing book balances with external statements."""

    def __init__(self, db: Database):
        """Initialize reconciliation service.

        Args:
            db: Database instance
        """
        self.db = db

    def reconcile_account(
        self, account_id: int, statement_balance: Any, statement_date: date
    ) -> ReconciliationResult:
        """Compare an account's book balance against a statement balance.

        The book balance is the account's current stored balance. The lines
        returned are the account's postings dated on or before
        ``statement_date``; ``ledger_balance`` is their net signed total.

        Args:
            account_id: Account ID to reconcile
            statement_balance: Balance reported by the external statement
            statement_date: Statement closing date

        Returns:
            ReconciliationResult; ``reconciled`` is True when the difference
            is below one cent

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the balance or date is missing or invalid
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        statement_balance = to_money(statement_balance)
        if statement_date is None:
            raise ValidationError("Statement date is required")
        if isinstance(statement_date, datetime):
            statement_date = statement_date.date()

        entries = self.db.list_journal_entries(
            account_id=account_id, end_date=statement_date, ascending=True
        )
        lines = tuple(
            ReconciliationLine(
                journal_entry_id=entry.id,
                date=entry.date,
                reference=entry.reference,
                description=line.description or entry.description,
                type=line.type,
                amount=line.amount,
            )
            for entry in entries
            for line in entry.lines
            if line.account_id == account_id
        )
        ledger_balance = sum(
            (line_delta(line.type, line.amount) for line in lines), Decimal("0.00")
        )

        book_balance = account.balance
        difference = statement_balance - book_balance
        reconciled = abs(difference) < BALANCE_TOLERANCE

        logger.info(
            "Reconciled account %s as of %s: statement=%s book=%s difference=%s",
            account.code,
            statement_date.isoformat(),
            statement_balance,
            book_balance,
            difference,
        )
        return ReconciliationResult(
            account=account,
            statement_date=statement_date,
            statement_balance=statement_balance,
            book_balance=book_balance,
            ledger_balance=ledger_balance,
            difference=difference,
            reconciled=reconciled,
            lines=lines,
        )
