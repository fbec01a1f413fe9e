"""Financial report domain service.

Reports are read-only derivations over current account balances and the
journal history. Stored balances follow the uniform convention (debits
positive, credits negative); the statements below flip signs where a
conventional presentation expects credit-side figures to be positive.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional

from ledgerkit.domain.balances import line_delta
from ledgerkit.domain.entities import (
    BALANCE_TOLERANCE,
    CREDIT_SIDE_TYPES,
    DEBIT_SIDE_TYPES,
    Account,
    AccountType,
    BalanceSheet,
    CashFlowActivity,
    CashFlowItem,
    CashFlowStatement,
    IncomeStatement,
    JournalEntry,
    LineType,
    StatementLine,
    TrialBalance,
    TrialBalanceRow,
)
from ledgerkit.utils.date_parser import resolve_date_range

if TYPE_CHECKING:
    from ledgerkit.database.base import Database

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

CASH_KEYWORDS = ("cash", "bank")

COUNTERPARTY_ACTIVITY = {
    AccountType.REVENUE: CashFlowActivity.OPERATING,
    AccountType.EXPENSE: CashFlowActivity.OPERATING,
    AccountType.ASSET: CashFlowActivity.INVESTING,
    AccountType.LIABILITY: CashFlowActivity.FINANCING,
    AccountType.EQUITY: CashFlowActivity.FINANCING,
}


def is_cash_account(account: Account) -> bool:
    """Asset accounts whose name or code mentions cash or bank."""
    if account.type != AccountType.ASSET:
        return False
    name = account.name.lower()
    code = account.code.lower()
    return any(keyword in name or keyword in code for keyword in CASH_KEYWORDS)


def _total(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def _statement_line(account: Account, amount: Decimal) -> StatementLine:
    return StatementLine(account_id=account.id, code=account.code, name=account.name, amount=amount)


class ReportService:
    """Service for deriving financial statements."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db

    def resolve_date_range(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        fiscal_year: int | str | None = None,
    ) -> tuple[Optional[date], Optional[date]]:
        """Resolve a report range; a fiscal year overrides explicit dates."""
        return resolve_date_range(start_date, end_date, fiscal_year)

    def _entries(
        self, start_date: Optional[date], end_date: Optional[date]
    ) -> list[JournalEntry]:
        return self.db.list_journal_entries(
            start_date=start_date, end_date=end_date, ascending=True
        )

    def get_trial_balance(self) -> TrialBalance:
        """List every account balance with debit-side and credit-side totals.

        Debit-side totals cover asset and expense accounts; credit-side totals
        cover liability, equity and revenue accounts and are sign-normalized
        so that a balanced ledger reports equal totals.
        """
        accounts = self.db.list_accounts()
        rows = tuple(
            TrialBalanceRow(
                account_id=account.id,
                code=account.code,
                name=account.name,
                type=account.type,
                balance=account.balance,
            )
            for account in accounts
        )
        total_debits = _total(a.balance for a in accounts if a.type in DEBIT_SIDE_TYPES)
        total_credits = ZERO - _total(
            a.balance for a in accounts if a.type in CREDIT_SIDE_TYPES
        )
        return TrialBalance(rows=rows, total_debits=total_debits, total_credits=total_credits)

    def get_balance_sheet(
        self,
        as_of: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        fiscal_year: int | str | None = None,
    ) -> BalanceSheet:
        """Build a balance sheet from current account balances.

        When a date range is given, only accounts with at least one journal
        line dated within the range are included. Revenue and expense
        balances not yet closed to equity are reported as
        ``current_earnings`` and counted in total equity.
        """
        start_date, end_date = self.resolve_date_range(start_date, end_date, fiscal_year)
        accounts = self.db.list_accounts()

        if start_date is not None or end_date is not None:
            active_ids = {
                line.account_id
                for entry in self._entries(start_date, end_date)
                for line in entry.lines
            }
            accounts = [account for account in accounts if account.id in active_ids]

        accounts = sorted(accounts, key=lambda account: account.code)
        assets = tuple(
            _statement_line(a, a.balance) for a in accounts if a.type == AccountType.ASSET
        )
        liabilities = tuple(
            _statement_line(a, ZERO - a.balance)
            for a in accounts
            if a.type == AccountType.LIABILITY
        )
        equity = tuple(
            _statement_line(a, ZERO - a.balance) for a in accounts if a.type == AccountType.EQUITY
        )
        current_earnings = ZERO - _total(
            a.balance for a in accounts if a.type in (AccountType.REVENUE, AccountType.EXPENSE)
        )

        total_assets = _total(line.amount for line in assets)
        total_liabilities = _total(line.amount for line in liabilities)
        equity_accounts_total = _total(line.amount for line in equity)
        # Unclosed earnings belong to equity until a closing entry moves them.
        total_equity = equity_accounts_total + current_earnings
        is_balanced = abs(total_assets - (total_liabilities + total_equity)) < BALANCE_TOLERANCE

        logger.debug(
            "Balance sheet: assets=%s liabilities=%s equity=%s balanced=%s",
            total_assets,
            total_liabilities,
            total_equity,
            is_balanced,
        )
        return BalanceSheet(
            as_of=as_of or end_date or date.today(),
            start_date=start_date,
            end_date=end_date,
            assets=assets,
            liabilities=liabilities,
            equity=equity,
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            equity_accounts_total=equity_accounts_total,
            current_earnings=current_earnings,
            total_equity=total_equity,
            is_balanced=is_balanced,
        )

    def get_income_statement(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        fiscal_year: int | str | None = None,
    ) -> IncomeStatement:
        """Sum revenue and expense activity over a date range.

        Revenue accounts accumulate credits minus debits; expense accounts
        accumulate debits minus credits.
        """
        start_date, end_date = self.resolve_date_range(start_date, end_date, fiscal_year)
        accounts = {account.id: account for account in self.db.list_accounts()}

        revenue: dict[int, Decimal] = defaultdict(lambda: ZERO)
        expenses: dict[int, Decimal] = defaultdict(lambda: ZERO)
        for entry in self._entries(start_date, end_date):
            for line in entry.lines:
                account = accounts.get(line.account_id)
                if account is None:
                    continue
                if account.type == AccountType.REVENUE:
                    revenue[account.id] -= line_delta(line.type, line.amount)
                elif account.type == AccountType.EXPENSE:
                    expenses[account.id] += line_delta(line.type, line.amount)

        def to_lines(amounts: dict[int, Decimal]) -> tuple[StatementLine, ...]:
            ordered = sorted(amounts, key=lambda account_id: accounts[account_id].code)
            return tuple(_statement_line(accounts[i], amounts[i]) for i in ordered)

        revenue_lines = to_lines(revenue)
        expense_lines = to_lines(expenses)
        total_revenue = _total(line.amount for line in revenue_lines)
        total_expenses = _total(line.amount for line in expense_lines)

        return IncomeStatement(
            start_date=start_date,
            end_date=end_date,
            revenue=revenue_lines,
            expenses=expense_lines,
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            net_income=total_revenue - total_expenses,
        )

    def get_cash_flow_statement(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        fiscal_year: int | str | None = None,
    ) -> CashFlowStatement:
        """Classify movements of cash accounts into activity buckets.

        Each line on a cash account is classified by the first line of the
        same entry on a non-cash account: revenue and expense counterparties
        are operating, other assets investing, liabilities and equity
        financing. Debits to cash are inflows and credits outflows. Entries
        that only move money between cash accounts are not cash flows.
        """
        start_date, end_date = self.resolve_date_range(start_date, end_date, fiscal_year)
        accounts = {account.id: account for account in self.db.list_accounts()}
        cash_ids = {account_id for account_id, acc in accounts.items() if is_cash_account(acc)}

        totals = {activity: ZERO for activity in CashFlowActivity}
        details: list[CashFlowItem] = []
        for entry in self._entries(start_date, end_date):
            for line in entry.lines:
                if line.account_id not in cash_ids:
                    continue
                counterpart = next(
                    (other for other in entry.lines if other.account_id not in cash_ids), None
                )
                if counterpart is None or counterpart.account_id not in accounts:
                    logger.debug("Entry %d line %d is a cash transfer, skipped", entry.id, line.id)
                    continue

                activity = COUNTERPARTY_ACTIVITY[accounts[counterpart.account_id].type]
                amount = line_delta(line.type, line.amount)
                totals[activity] += amount
                details.append(
                    CashFlowItem(
                        date=entry.date,
                        journal_entry_id=entry.id,
                        account_id=line.account_id,
                        account_name=accounts[line.account_id].name,
                        counterparty_account_id=counterpart.account_id,
                        activity=activity,
                        type=LineType(line.type),
                        amount=amount,
                        description=line.description or entry.description,
                    )
                )

        net_cash_flow = _total(totals.values())
        if start_date is not None:
            prior = self._entries(None, start_date - timedelta(days=1))
            beginning_cash = _total(
                line_delta(line.type, line.amount)
                for entry in prior
                for line in entry.lines
                if line.account_id in cash_ids
            )
        else:
            current_cash = _total(accounts[account_id].balance for account_id in cash_ids)
            beginning_cash = current_cash - net_cash_flow

        return CashFlowStatement(
            start_date=start_date,
            end_date=end_date,
            operating=totals[CashFlowActivity.OPERATING],
            investing=totals[CashFlowActivity.INVESTING],
            financing=totals[CashFlowActivity.FINANCING],
            net_cash_flow=net_cash_flow,
            beginning_cash=beginning_cash,
            ending_cash=beginning_cash + net_cash_flow,
            details=tuple(details),
        )
