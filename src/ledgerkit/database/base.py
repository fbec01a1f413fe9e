"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from datetime import date

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerkit.domain.entities import (
    Account,
    AccountType,
    JournalEntry,
    JournalLineInput,
)


class Database(ABC):
    """Abstract database interface for ledgerkit.

    Every mutating method is one unit of work: it either commits all of its
    effects or none of them.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self, code: str, name: str, account_type: AccountType, parent_id: Optional[int] = None
    ) -> int:
        """Create a new account with a zero balance. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_code(self, code: str) -> Optional[Account]:
        """Get account by its unique code."""
        pass

    @abstractmethod
    def get_accounts(self, account_ids: Sequence[int]) -> list[Account]:
        """Get the accounts that exist among the given IDs."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts ordered by code."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: int,
        code: Optional[str] = None,
        name: Optional[str] = None,
        parent_id: Optional[int] = None,
        update_parent: bool = False,
    ) -> None:
        """Update account fields.

        Args:
            update_parent: If True, set parent_id even if it is None (to clear it)
        """
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account that has no children and no journal lines."""
        pass

    @abstractmethod
    def get_account_child_count(self, account_id: int) -> int:
        """Get count of accounts whose parent is this account."""
        pass

    @abstractmethod
    def get_account_line_count(self, account_id: int) -> int:
        """Get count of journal lines referencing an account."""
        pass

    # Journal operations
    @abstractmethod
    def create_journal_entry(
        self,
        date: date,
        lines: Sequence[JournalLineInput],
        code: Optional[str] = None,
        reference: Optional[str] = None,
        description: Optional[str] = None,
    ) -> int:
        """Persist an entry with its lines and apply their balance deltas.

        Returns journal entry ID.
        """
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry by ID, with lines and their accounts."""
        pass

    @abstractmethod
    def journal_code_exists(self, code: str, exclude_entry_id: Optional[int] = None) -> bool:
        """Check if a journal entry other than ``exclude_entry_id`` uses the code."""
        pass

    @abstractmethod
    def update_journal_entry(
        self,
        entry_id: int,
        date: Optional[date] = None,
        code: Optional[str] = None,
        reference: Optional[str] = None,
        description: Optional[str] = None,
        lines: Optional[Sequence[JournalLineInput]] = None,
    ) -> None:
        """Update entry fields; when ``lines`` is given, replace the line set.

        Replacing lines reverts the old lines' balance deltas and applies the
        new ones in the same transaction.
        """
        pass

    @abstractmethod
    def delete_journal_entry(self, entry_id: int) -> None:
        """Revert the entry's balance deltas and delete it with its lines."""
        pass

    @abstractmethod
    def list_journal_entries(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        ascending: bool = False,
    ) -> list[JournalEntry]:
        """List journal entries with optional filters.

        Args:
            account_id: Only entries with at least one line on this account
            start_date: Inclusive lower bound on entry date
            end_date: Inclusive upper bound on entry date
            ascending: Order by date ascending instead of descending
        """
        pass
