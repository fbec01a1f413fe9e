"""Tests for the journal posting service."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from ledgerkit.domain.entities import MAX_LINE_AMOUNT, JournalLineInput, LineType
from ledgerkit.domain.errors import ConflictError, NotFoundError, ValidationError
from ledgerkit.domain.journal import normalize_line, to_money


def _debit(account, amount, description=None):
    return {"account_id": account.id, "type": "debit", "amount": amount, "description": description}


def _credit(account, amount, description=None):
    return {"account_id": account.id, "type": "credit", "amount": amount, "description": description}


class TestCreateJournalEntry:
    """Tests for posting journal entries."""

    def test_post_updates_balances(self, journal_service, chart, balance_of):
        """Debits raise and credits lower account balances by the line amount."""
        entry = journal_service.create_journal_entry(
            date=date(2024, 1, 15),
            lines=[_debit(chart["1010"], "250.00"), _credit(chart["4000"], "250.00")],
            reference="INV-1",
            description="Cash sale",
        )

        assert entry.id is not None
        assert entry.date == date(2024, 1, 15)
        assert entry.reference == "INV-1"
        assert entry.description == "Cash sale"
        assert len(entry.lines) == 2
        assert entry.total_debits == entry.total_credits == Decimal("250.00")
        assert balance_of(chart["1010"]) == Decimal("250.00")
        assert balance_of(chart["4000"]) == Decimal("-250.00")

    def test_posted_lines_carry_accounts(self, journal_service, chart):
        """Returned lines are resolved to their accounts."""
        entry = journal_service.create_journal_entry(
            date=date(2024, 1, 15),
            lines=[_debit(chart["5000"], "80.00", "January rent"), _credit(chart["1010"], "80.00")],
        )

        debit_line = next(line for line in entry.lines if line.type == LineType.DEBIT)
        assert debit_line.account.code == "5000"
        assert debit_line.description == "January rent"

    def test_post_accepts_line_inputs_and_datetimes(self, journal_service, chart):
        """Lines may be JournalLineInput objects and dates may be datetimes."""
        entry = journal_service.create_journal_entry(
            date=datetime(2024, 2, 1, 9, 30),
            lines=[
                JournalLineInput(chart["1500"].id, LineType.DEBIT, Decimal("1000")),
                JournalLineInput(chart["2500"].id, LineType.CREDIT, Decimal("1000")),
            ],
        )

        assert entry.date == date(2024, 2, 1)

    def test_multi_line_entry(self, journal_service, chart, balance_of):
        """An entry may have more than two lines as long as it balances."""
        journal_service.create_journal_entry(
            date=date(2024, 1, 20),
            lines=[
                _debit(chart["5000"], "60.00"),
                _debit(chart["5100"], "40.00"),
                _credit(chart["1010"], "100.00"),
            ],
        )

        assert balance_of(chart["5000"]) == Decimal("60.00")
        assert balance_of(chart["5100"]) == Decimal("40.00")
        assert balance_of(chart["1010"]) == Decimal("-100.00")

    def test_unbalanced_entry_rejected_without_effects(self, journal_service, chart, balance_of):
        """Unbalanced entries fail and leave balances and history untouched."""
        with pytest.raises(ValidationError, match="Debits and credits must be equal"):
            journal_service.create_journal_entry(
                date=date(2024, 1, 15),
                lines=[_debit(chart["1010"], "100.00"), _credit(chart["4000"], "90.00")],
            )

        assert balance_of(chart["1010"]) == Decimal("0")
        assert balance_of(chart["4000"]) == Decimal("0")
        assert journal_service.get_journal_entries() == []

    def test_empty_lines_rejected(self, journal_service):
        """An entry needs at least one line."""
        with pytest.raises(ValidationError, match="at least one line"):
            journal_service.create_journal_entry(date=date(2024, 1, 15), lines=[])

    def test_missing_date_rejected(self, journal_service, chart):
        """The entry date is required."""
        with pytest.raises(ValidationError, match="date is required"):
            journal_service.create_journal_entry(
                date=None, lines=[_debit(chart["1010"], "1"), _credit(chart["4000"], "1")]
            )

    @pytest.mark.parametrize("amount", ["0", "-5.00", "abc", None])
    def test_non_positive_or_invalid_amount_rejected(self, journal_service, chart, amount):
        """Line amounts must be positive numbers."""
        with pytest.raises(ValidationError):
            journal_service.create_journal_entry(
                date=date(2024, 1, 15),
                lines=[_debit(chart["1010"], amount), _credit(chart["4000"], amount)],
            )

    def test_amount_above_maximum_rejected(self, journal_service, chart, balance_of):
        """Line amounts are capped at MAX_LINE_AMOUNT and nothing is posted above it."""
        too_big = MAX_LINE_AMOUNT + Decimal("0.01")

        with pytest.raises(ValidationError, match="exceeds the maximum"):
            journal_service.create_journal_entry(
                date=date(2024, 1, 15),
                lines=[_debit(chart["1010"], too_big), _credit(chart["3000"], too_big)],
            )

        assert balance_of(chart["1010"]) == Decimal("0")
        assert journal_service.get_journal_entries() == []

    def test_invalid_line_type_rejected(self, journal_service, chart):
        """Line types other than debit/credit are rejected."""
        with pytest.raises(ValidationError, match="Invalid line type"):
            journal_service.create_journal_entry(
                date=date(2024, 1, 15),
                lines=[
                    {"account_id": chart["1010"].id, "type": "sideways", "amount": "5"},
                    _credit(chart["4000"], "5"),
                ],
            )

    def test_unknown_account_rejected(self, journal_service, chart, balance_of):
        """Lines referencing missing accounts fail with NotFoundError."""
        with pytest.raises(NotFoundError, match="Account 999 not found"):
            journal_service.create_journal_entry(
                date=date(2024, 1, 15),
                lines=[_debit(chart["1010"], "10"), {"account_id": 999, "type": "credit", "amount": "10"}],
            )

        assert balance_of(chart["1010"]) == Decimal("0")

    def test_duplicate_code_rejected(self, post, chart):
        """Entry codes are unique."""
        post(chart["1010"], chart["4000"], "10", code="JE-1")

        with pytest.raises(ConflictError, match="JE-1"):
            post(chart["1010"], chart["4000"], "10", code="JE-1")

    def test_amounts_are_rounded_to_cents(self, journal_service, chart, balance_of):
        """Amounts are quantized to two places before validation."""
        journal_service.create_journal_entry(
            date=date(2024, 1, 15),
            lines=[_debit(chart["1010"], "10.005"), _credit(chart["4000"], "10.01")],
        )

        assert balance_of(chart["1010"]) == Decimal("10.01")


class TestUpdateJournalEntry:
    """Tests for revising journal entries."""

    def test_replacing_lines_moves_balances(self, journal_service, chart, post, balance_of):
        """Balances equal what posting only the new line set would produce."""
        entry = post(chart["1010"], chart["4000"], "100.00")

        journal_service.update_journal_entry(
            entry.id,
            lines=[_debit(chart["1020"], "75.00"), _credit(chart["4000"], "75.00")],
        )

        assert balance_of(chart["1010"]) == Decimal("0")
        assert balance_of(chart["1020"]) == Decimal("75.00")
        assert balance_of(chart["4000"]) == Decimal("-75.00")

    def test_replacing_with_identical_lines_keeps_balances(
        self, journal_service, chart, post, balance_of
    ):
        """Reverting and reapplying the same line set is a no-op on balances."""
        entry = post(chart["5000"], chart["1010"], "42.10")

        journal_service.update_journal_entry(
            entry.id,
            lines=[_debit(chart["5000"], "42.10"), _credit(chart["1010"], "42.10")],
        )

        assert balance_of(chart["5000"]) == Decimal("42.10")
        assert balance_of(chart["1010"]) == Decimal("-42.10")

    def test_update_header_only_keeps_lines(self, journal_service, chart, post, balance_of):
        """Header-only updates leave lines and balances alone."""
        entry = post(chart["1010"], chart["4000"], "100.00", reference="R-1")

        updated = journal_service.update_journal_entry(
            entry.id, date=date(2024, 3, 1), description="Corrected", code="JE-9"
        )

        assert updated.date == date(2024, 3, 1)
        assert updated.description == "Corrected"
        assert updated.reference == "R-1"
        assert updated.code == "JE-9"
        assert len(updated.lines) == 2
        assert balance_of(chart["1010"]) == Decimal("100.00")

    def test_failed_update_leaves_entry_and_balances(self, journal_service, chart, post, balance_of):
        """An unbalanced revision is rejected before anything changes."""
        entry = post(chart["1010"], chart["4000"], "100.00")

        with pytest.raises(ValidationError):
            journal_service.update_journal_entry(
                entry.id,
                lines=[_debit(chart["1020"], "75.00"), _credit(chart["4000"], "70.00")],
            )

        assert balance_of(chart["1010"]) == Decimal("100.00")
        assert balance_of(chart["1020"]) == Decimal("0")
        unchanged = journal_service.get_journal_entry(entry.id)
        assert {line.account_id for line in unchanged.lines} == {chart["1010"].id, chart["4000"].id}

    def test_update_with_unknown_account_leaves_balances(self, journal_service, chart, post, balance_of):
        """A revision referencing a missing account is rejected."""
        entry = post(chart["1010"], chart["4000"], "100.00")

        with pytest.raises(NotFoundError):
            journal_service.update_journal_entry(
                entry.id,
                lines=[_debit(chart["1010"], "5"), {"account_id": 999, "type": "credit", "amount": "5"}],
            )

        assert balance_of(chart["1010"]) == Decimal("100.00")

    def test_update_missing_entry(self, journal_service, chart):
        """Updating an unknown entry is not found."""
        with pytest.raises(NotFoundError, match="Journal entry 999 not found"):
            journal_service.update_journal_entry(999, description="x")

    def test_update_code_conflict(self, journal_service, chart, post):
        """Changing to another entry's code is a conflict."""
        post(chart["1010"], chart["4000"], "1", code="JE-1")
        second = post(chart["1010"], chart["4000"], "1", code="JE-2")

        with pytest.raises(ConflictError):
            journal_service.update_journal_entry(second.id, code="JE-1")

        # Keeping an entry's own code is not a conflict
        journal_service.update_journal_entry(second.id, code="JE-2")


class TestDeleteJournalEntry:
    """Tests for removing journal entries."""

    def test_post_then_delete_restores_balances(self, journal_service, chart, post, balance_of):
        """Deleting an entry reverts its balance effects exactly."""
        post(chart["1010"], chart["3000"], "500.00")
        entry = post(chart["5000"], chart["1010"], "120.00")

        journal_service.delete_journal_entry(entry.id)

        assert balance_of(chart["1010"]) == Decimal("500.00")
        assert balance_of(chart["5000"]) == Decimal("0")
        assert journal_service.get_journal_entry(entry.id) is None

    def test_delete_large_entry_keeps_cents(self, journal_service, chart, post, balance_of):
        """Removing a maximum-size entry leaves smaller postings exact to the cent."""
        big = post(chart["1010"], chart["3000"], MAX_LINE_AMOUNT)
        post(chart["1010"], chart["3000"], "0.01")
        for _ in range(20):
            post(chart["1010"], chart["3000"], "1234567.89")
            post(chart["3000"], chart["1010"], "1234567.89")

        journal_service.delete_journal_entry(big.id)

        assert balance_of(chart["1010"]) == Decimal("0.01")
        assert balance_of(chart["3000"]) == Decimal("-0.01")

    def test_delete_missing_entry(self, journal_service):
        """Deleting an unknown entry is not found."""
        with pytest.raises(NotFoundError):
            journal_service.delete_journal_entry(999)

    def test_delete_frees_account_for_deletion(self, journal_service, account_service, chart, post):
        """Once its lines are gone an account can be deleted."""
        entry = post(chart["5100"], chart["1010"], "10")
        journal_service.delete_journal_entry(entry.id)

        account_service.delete_account(chart["5100"].id)

        assert account_service.get_account(chart["5100"].id) is None


class TestJournalQueries:
    """Tests for listing entries and the general ledger."""

    def test_entries_listed_newest_first(self, journal_service, chart, post):
        """Default listing is by date descending."""
        first = post(chart["1010"], chart["4000"], "1", entry_date=date(2024, 1, 1))
        second = post(chart["1010"], chart["4000"], "1", entry_date=date(2024, 2, 1))

        assert [e.id for e in journal_service.get_journal_entries()] == [second.id, first.id]

    def test_entries_filtered_by_account_and_dates(self, journal_service, chart, post):
        """Filters narrow by touched account and inclusive date range."""
        jan = post(chart["1010"], chart["4000"], "1", entry_date=date(2024, 1, 31))
        feb = post(chart["5000"], chart["1010"], "1", entry_date=date(2024, 2, 1))
        post(chart["1500"], chart["2500"], "1", entry_date=date(2024, 2, 15))

        by_account = journal_service.get_journal_entries(account_id=chart["1010"].id)
        assert {e.id for e in by_account} == {jan.id, feb.id}

        in_range = journal_service.get_journal_entries(
            start_date=date(2024, 1, 31), end_date=date(2024, 2, 1)
        )
        assert {e.id for e in in_range} == {jan.id, feb.id}

    def test_entries_by_date_range_oldest_first(self, journal_service, chart, post):
        """Range listing is by date ascending."""
        later = post(chart["1010"], chart["4000"], "1", entry_date=date(2024, 3, 1))
        earlier = post(chart["1010"], chart["4000"], "1", entry_date=date(2024, 1, 1))

        entries = journal_service.get_journal_entries_by_date_range(end_date=date(2024, 12, 31))

        assert [e.id for e in entries] == [earlier.id, later.id]

    def test_general_ledger_running_balance(self, journal_service, chart, post, balance_of):
        """The ledger shows each posting with a running balance ending at the book balance."""
        post(chart["1010"], chart["3000"], "1000.00", entry_date=date(2024, 1, 1))
        post(chart["5000"], chart["1010"], "300.00", entry_date=date(2024, 1, 5))
        post(chart["1010"], chart["4000"], "50.00", entry_date=date(2024, 1, 10))

        ledger = journal_service.get_general_ledger(chart["1010"].id)

        assert ledger.account.id == chart["1010"].id
        assert [row.running_balance for row in ledger.rows] == [
            Decimal("1000.00"),
            Decimal("700.00"),
            Decimal("750.00"),
        ]
        assert ledger.rows[-1].running_balance == balance_of(chart["1010"])

    def test_general_ledger_unknown_account(self, journal_service):
        """The ledger of an unknown account is not found."""
        with pytest.raises(NotFoundError):
            journal_service.get_general_ledger(999)


class TestLineNormalization:
    """Tests for line validation helpers."""

    def test_to_money_rounds_half_up(self):
        """Amounts are rounded half up to cents."""
        assert to_money("1.005") == Decimal("1.01")
        assert to_money(2) == Decimal("2.00")

    def test_to_money_rejects_booleans(self):
        """Booleans are not amounts."""
        with pytest.raises(ValidationError):
            to_money(True)

    def test_to_money_rejects_out_of_range(self):
        """Values too large to quantize to cents are invalid."""
        with pytest.raises(ValidationError, match="out of range"):
            to_money("1e40")

    def test_normalize_line_requires_account(self):
        """Lines without an account are rejected."""
        with pytest.raises(ValidationError, match="missing account_id"):
            normalize_line({"type": "debit", "amount": "1"})

    def test_normalize_line_cleans_description(self):
        """Blank descriptions are dropped and line types parsed."""
        line = normalize_line({"account_id": "3", "type": "CREDIT", "amount": "4.5", "description": "  "})

        assert line == JournalLineInput(3, LineType.CREDIT, Decimal("4.50"), None)
