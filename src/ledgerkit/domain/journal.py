"""Journal posting domain service.

All posting, revision and removal of journal entries goes through
``JournalService``; it is the only code that asks the database to change
account balances. Every check (line shape, debit/credit balance, account
existence, code uniqueness) runs before the database is asked to mutate
anything, and the database applies each request as one transaction.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, Union

from ledgerkit.domain.balances import line_delta, sum_by_type
from ledgerkit.domain.entities import (
    GeneralLedger,
    JournalEntry,
    JournalLineInput,
    LedgerRow,
    LineType,
    MAX_LINE_AMOUNT,
)
from ledgerkit.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    duplicate_journal_code,
    journal_entry_not_found,
    unbalanced_entry,
)

if TYPE_CHECKING:
    from ledgerkit.database.base import Database

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

LineSpec = Union[JournalLineInput, Mapping[str, Any]]


def to_money(value: Any) -> Decimal:
    """Convert a numeric value to a Decimal quantized to two places.

    Raises:
        ValidationError: If the value is not numeric
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Invalid amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    try:
        return amount.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"Amount out of range: {value!r}")


def parse_line_type(value: LineType | str | None) -> LineType:
    """Parse 'debit' or 'credit', case-insensitively."""
    if isinstance(value, LineType):
        return value
    try:
        return LineType(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid line type '{value}'. Expected 'debit' or 'credit'")


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_line(line: LineSpec) -> JournalLineInput:
    """Validate one caller-supplied line and return its normalized form.

    Lines may be JournalLineInput instances or mappings with ``account_id``,
    ``type``, ``amount`` and optional ``description`` keys.
    """
    if isinstance(line, JournalLineInput):
        account_id, line_type, amount, description = (
            line.account_id,
            line.type,
            line.amount,
            line.description,
        )
    elif isinstance(line, Mapping):
        account_id = line.get("account_id")
        line_type = line.get("type")
        amount = line.get("amount")
        description = line.get("description")
    else:
        raise ValidationError(f"Invalid journal line: {line!r}")

    if account_id is None:
        raise ValidationError("Journal line is missing account_id")
    try:
        account_id = int(account_id)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid account_id: {account_id!r}")

    money = to_money(amount)
    if money <= 0:
        raise ValidationError(f"Journal line amount must be positive, got {money}")
    if money > MAX_LINE_AMOUNT:
        raise ValidationError(
            f"Journal line amount {money} exceeds the maximum of {MAX_LINE_AMOUNT}"
        )

    return JournalLineInput(
        account_id=account_id,
        type=parse_line_type(line_type),
        amount=money,
        description=_clean_text(description),
    )


class JournalService:
    """Service for posting, revising and removing journal entries."""

    def __init__(self, db: Database):
        """Initialize journal service.

        Args:
            db: Database instance
        """
        self.db = db

    def _validate_date(self, entry_date: Optional[date]) -> date:
        if entry_date is None:
            raise ValidationError("Journal entry date is required")
        if isinstance(entry_date, datetime):
            return entry_date.date()
        if not isinstance(entry_date, date):
            raise ValidationError(f"Invalid journal entry date: {entry_date!r}")
        return entry_date

    def _validate_lines(self, lines: Optional[Sequence[LineSpec]]) -> list[JournalLineInput]:
        """Normalize a line set and check balance and account existence."""
        if not lines:
            raise ValidationError("Journal entry must contain at least one line")

        normalized = [normalize_line(line) for line in lines]

        total_debits, total_credits = sum_by_type(normalized)
        if total_debits != total_credits:
            raise ValidationError(unbalanced_entry(total_debits, total_credits))

        account_ids = {line.account_id for line in normalized}
        found = {account.id for account in self.db.get_accounts(sorted(account_ids))}
        missing = sorted(account_ids - found)
        if missing:
            raise NotFoundError(account_not_found(missing[0]))

        return normalized

    def _validate_code(self, code: Optional[str], entry_id: Optional[int] = None) -> Optional[str]:
        code = _clean_text(code)
        if code is not None and self.db.journal_code_exists(code, exclude_entry_id=entry_id):
            raise ConflictError(duplicate_journal_code(code))
        return code

    def create_journal_entry(
        self,
        date: date,
        lines: Sequence[LineSpec],
        reference: Optional[str] = None,
        description: Optional[str] = None,
        code: Optional[str] = None,
    ) -> JournalEntry:
        """Post a balanced journal entry.

        Args:
            date: Entry date
            lines: Debit and credit lines; debits must equal credits
            reference: Optional external reference
            description: Optional narrative
            code: Optional unique entry code

        Returns:
            The posted entry, with lines resolved to their accounts

        Raises:
            ValidationError: If a line is malformed or the entry is unbalanced
            NotFoundError: If a line references a missing account
            ConflictError: If the code is already used
        """
        entry_date = self._validate_date(date)
        normalized = self._validate_lines(lines)
        code = self._validate_code(code)

        entry_id = self.db.create_journal_entry(
            date=entry_date,
            lines=normalized,
            code=code,
            reference=_clean_text(reference),
            description=_clean_text(description),
        )
        total_debits, _ = sum_by_type(normalized)
        logger.info(
            "Posted journal entry %d on %s: %d lines, %s",
            entry_id,
            entry_date.isoformat(),
            len(normalized),
            total_debits,
        )
        return self.db.get_journal_entry(entry_id)

    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry by ID.

        Args:
            entry_id: Journal entry ID

        Returns:
            Journal entry or None if not found
        """
        return self.db.get_journal_entry(entry_id)

    def _require_entry(self, entry_id: int) -> JournalEntry:
        entry = self.db.get_journal_entry(entry_id)
        if entry is None:
            raise NotFoundError(journal_entry_not_found(entry_id))
        return entry

    def update_journal_entry(
        self,
        entry_id: int,
        date: Optional[date] = None,
        reference: Optional[str] = None,
        description: Optional[str] = None,
        lines: Optional[Sequence[LineSpec]] = None,
        code: Optional[str] = None,
    ) -> JournalEntry:
        """Revise a journal entry.

        Header fields are patched independently. When ``lines`` is given the
        whole line set is replaced: the old lines' balance effects are
        reverted and the new lines' effects applied in one transaction, after
        the new set has been fully validated.

        Raises:
            NotFoundError: If the entry or a referenced account does not exist
            ValidationError: If the new line set is malformed or unbalanced
            ConflictError: If the new code is already used
        """
        self._require_entry(entry_id)

        entry_date = self._validate_date(date) if date is not None else None
        normalized = self._validate_lines(lines) if lines is not None else None
        code = self._validate_code(code, entry_id=entry_id)

        self.db.update_journal_entry(
            entry_id=entry_id,
            date=entry_date,
            code=code,
            reference=_clean_text(reference),
            description=_clean_text(description),
            lines=normalized,
        )
        if normalized is not None:
            logger.info("Revised journal entry %d with %d new lines", entry_id, len(normalized))
        else:
            logger.info("Updated journal entry %d", entry_id)
        return self._require_entry(entry_id)

    def delete_journal_entry(self, entry_id: int) -> None:
        """Delete a journal entry, reverting its balance effects.

        Raises:
            NotFoundError: If the entry does not exist
        """
        self._require_entry(entry_id)
        self.db.delete_journal_entry(entry_id)
        logger.info("Deleted journal entry %d", entry_id)

    def get_journal_entries(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[JournalEntry]:
        """List journal entries, newest first.

        Args:
            account_id: Only entries touching this account
            start_date: Inclusive start date
            end_date: Inclusive end date
        """
        return self.db.list_journal_entries(
            account_id=account_id, start_date=start_date, end_date=end_date
        )

    def get_journal_entries_by_date_range(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[JournalEntry]:
        """List journal entries within an inclusive range, oldest first."""
        return self.db.list_journal_entries(
            start_date=start_date, end_date=end_date, ascending=True
        )

    def get_general_ledger(self, account_id: int) -> GeneralLedger:
        """Get every posting against an account with a running balance.

        Raises:
            NotFoundError: If the account does not exist
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        entries = self.db.list_journal_entries(account_id=account_id, ascending=True)
        rows: list[LedgerRow] = []
        running = Decimal("0.00")
        for entry in entries:
            for line in entry.lines:
                if line.account_id != account_id:
                    continue
                running += line_delta(line.type, line.amount)
                rows.append(
                    LedgerRow(
                        journal_entry_id=entry.id,
                        date=entry.date,
                        reference=entry.reference,
                        description=line.description or entry.description,
                        type=line.type,
                        amount=line.amount,
                        running_balance=running,
                    )
                )
        return GeneralLedger(account=account, rows=tuple(rows))
