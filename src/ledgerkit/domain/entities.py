"""Domain model entities for ledgerkit.

These are pure data classes representing bookkeeping concepts, independent of
database schema. Services and reports work only with these types; the
database layer converts ORM rows into them through the mappers.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


# Two statement figures within this distance are considered equal.
BALANCE_TOLERANCE = Decimal("0.01")

# Largest single line amount. Ten integer digits keep every stored value
# and balance exact on SQLite, which keeps NUMERIC columns as doubles.
MAX_LINE_AMOUNT = Decimal("9999999999.99")


class AccountType(str, Enum):
    """Account classification driving report placement."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class LineType(str, Enum):
    """Direction of a journal entry line."""

    DEBIT = "debit"
    CREDIT = "credit"


class CashFlowActivity(str, Enum):
    """Cash-flow statement bucket."""

    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"


DEBIT_SIDE_TYPES = frozenset({AccountType.ASSET, AccountType.EXPENSE})
CREDIT_SIDE_TYPES = frozenset(
    {AccountType.LIABILITY, AccountType.EQUITY, AccountType.REVENUE}
)


@dataclass(frozen=True)
class Account:
    """Chart of accounts entry."""

    id: int
    code: str
    name: str
    type: AccountType
    balance: Decimal
    parent_id: Optional[int]
    created_at: datetime
    updated_at: datetime


@dataclass
class AccountNode:
    """Account with its direct children, as assembled into a forest."""

    account: Account
    children: list["AccountNode"] = field(default_factory=list)

    @property
    def id(self) -> int:
        return self.account.id


@dataclass(frozen=True)
class JournalLineInput:
    """A line as supplied by a caller, before it is persisted."""

    account_id: int
    type: LineType
    amount: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class JournalEntryLine:
    """One debit or credit movement against one account."""

    id: int
    journal_entry_id: int
    account_id: int
    type: LineType
    amount: Decimal
    description: Optional[str]
    account: Optional[Account] = None


@dataclass(frozen=True)
class JournalEntry:
    """Balanced set of lines recorded on one date."""

    id: int
    code: Optional[str]
    date: date
    reference: Optional[str]
    description: Optional[str]
    lines: tuple[JournalEntryLine, ...]
    created_at: datetime
    updated_at: datetime

    @property
    def total_debits(self) -> Decimal:
        return sum(
            (line.amount for line in self.lines if line.type == LineType.DEBIT),
            Decimal("0"),
        )

    @property
    def total_credits(self) -> Decimal:
        return sum(
            (line.amount for line in self.lines if line.type == LineType.CREDIT),
            Decimal("0"),
        )


@dataclass(frozen=True)
class LedgerRow:
    """One line of an account's general ledger with the running balance."""

    journal_entry_id: int
    date: date
    reference: Optional[str]
    description: Optional[str]
    type: LineType
    amount: Decimal
    running_balance: Decimal


@dataclass(frozen=True)
class GeneralLedger:
    """Chronological postings against a single account."""

    account: Account
    rows: tuple[LedgerRow, ...]


@dataclass(frozen=True)
class TrialBalanceRow:
    """Trial balance listing for one account."""

    account_id: int
    code: str
    name: str
    type: AccountType
    balance: Decimal


@dataclass(frozen=True)
class TrialBalance:
    """All account balances with debit-side and credit-side totals.

    ``total_credits`` is sign-normalized: credit-side balances are stored as
    negative numbers, so the total is reported as their negated sum.
    """

    rows: tuple[TrialBalanceRow, ...]
    total_debits: Decimal
    total_credits: Decimal

    @property
    def is_balanced(self) -> bool:
        return abs(self.total_debits - self.total_credits) < BALANCE_TOLERANCE


@dataclass(frozen=True)
class StatementLine:
    """Account figure as presented on a financial statement."""

    account_id: int
    code: str
    name: str
    amount: Decimal


@dataclass(frozen=True)
class BalanceSheet:
    """Assets, liabilities and equity with conventional (positive) signs.

    ``equity_accounts_total`` sums the equity accounts only. ``total_equity``
    adds ``current_earnings`` (unclosed revenue less expenses) to it, and
    ``is_balanced`` compares assets against liabilities plus ``total_equity``.
    """

    as_of: date
    start_date: Optional[date]
    end_date: Optional[date]
    assets: tuple[StatementLine, ...]
    liabilities: tuple[StatementLine, ...]
    equity: tuple[StatementLine, ...]
    total_assets: Decimal
    total_liabilities: Decimal
    equity_accounts_total: Decimal
    current_earnings: Decimal
    total_equity: Decimal
    is_balanced: bool


@dataclass(frozen=True)
class IncomeStatement:
    """Revenue and expenses over a date range."""

    start_date: Optional[date]
    end_date: Optional[date]
    revenue: tuple[StatementLine, ...]
    expenses: tuple[StatementLine, ...]
    total_revenue: Decimal
    total_expenses: Decimal
    net_income: Decimal


@dataclass(frozen=True)
class CashFlowItem:
    """A single classified movement of a cash account."""

    date: date
    journal_entry_id: int
    account_id: int
    account_name: str
    counterparty_account_id: int
    activity: CashFlowActivity
    type: LineType
    amount: Decimal
    description: Optional[str]


@dataclass(frozen=True)
class CashFlowStatement:
    """Cash movements grouped into operating, investing and financing."""

    start_date: Optional[date]
    end_date: Optional[date]
    operating: Decimal
    investing: Decimal
    financing: Decimal
    net_cash_flow: Decimal
    beginning_cash: Decimal
    ending_cash: Decimal
    details: tuple[CashFlowItem, ...]


@dataclass(frozen=True)
class ReconciliationLine:
    """Journal line considered during a reconciliation."""

    journal_entry_id: int
    date: date
    reference: Optional[str]
    description: Optional[str]
    type: LineType
    amount: Decimal


@dataclass(frozen=True)
class ReconciliationResult:
    """Comparison of an account's book balance with a statement balance."""

    account: Account
    statement_date: date
    statement_balance: Decimal
    book_balance: Decimal
    ledger_balance: Decimal
    difference: Decimal
    reconciled: bool
    lines: tuple[ReconciliationLine, ...]
