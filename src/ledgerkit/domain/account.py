"""Account domain service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from ledgerkit.domain.entities import Account, AccountNode, AccountType
from ledgerkit.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    duplicate_account_code,
    parent_account_cycle,
    parent_account_not_found,
)

if TYPE_CHECKING:
    from ledgerkit.database.base import Database

logger = logging.getLogger(__name__)


def parse_account_type(value: AccountType | str | None) -> AccountType:
    """Parse an account type name, case-insensitively.

    Raises:
        ValidationError: If the value is missing or not a known account type
    """
    if isinstance(value, AccountType):
        return value
    if value is None or not str(value).strip():
        raise ValidationError("Missing required fields: type")
    try:
        return AccountType(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in AccountType)
        raise ValidationError(f"Invalid account type '{value}'. Expected one of: {allowed}")


def build_account_tree(accounts: Sequence[Account]) -> list[AccountNode]:
    """Assemble accounts into a forest in a single pass.

    Builds an ID index of nodes, then links every node under its parent or
    into the root list. Accounts whose parent is not in ``accounts`` become
    roots. Children keep the order of ``accounts``.
    """
    index = {account.id: AccountNode(account=account) for account in accounts}
    roots: list[AccountNode] = []
    for account in accounts:
        node = index[account.id]
        parent = index.get(account.parent_id) if account.parent_id is not None else None
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)
    return roots


def flatten_account_tree(nodes: Sequence[AccountNode]) -> list[Account]:
    """Return accounts of a forest in depth-first order."""
    result: list[Account] = []
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        result.append(node.account)
        stack.extend(reversed(node.children))
    return result


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_text(self, **fields: Optional[str]) -> dict[str, str]:
        missing = [name for name, value in fields.items() if value is None or not value.strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        return {name: value.strip() for name, value in fields.items()}

    def create_account(
        self,
        code: str,
        name: str,
        account_type: AccountType | str,
        parent_id: Optional[int] = None,
    ) -> Account:
        """Create a new account with a zero balance.

        Args:
            code: Unique account code
            name: Account name
            account_type: One of asset, liability, equity, revenue, expense
            parent_id: Optional parent account ID

        Returns:
            The created account

        Raises:
            ValidationError: If a required field is missing or the type is invalid
            NotFoundError: If the parent account does not exist
            ConflictError: If the code is already used
        """
        values = self._require_text(code=code, name=name)
        parsed_type = parse_account_type(account_type)

        if parent_id is not None and self.db.get_account(parent_id) is None:
            raise NotFoundError(parent_account_not_found(parent_id))

        if self.db.get_account_by_code(values["code"]) is not None:
            raise ConflictError(duplicate_account_code(values["code"]))

        account_id = self.db.create_account(
            code=values["code"],
            name=values["name"],
            account_type=parsed_type,
            parent_id=parent_id,
        )
        logger.info("Created account %s '%s' (ID: %d)", values["code"], values["name"], account_id)
        return self.db.get_account(account_id)

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def get_account_by_id(self, account_id: int) -> Account:
        """Get account by ID, raising NotFoundError if it does not exist."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def get_account_by_code(self, code: str) -> Optional[Account]:
        """Get account by code, or None if not found."""
        return self.db.get_account_by_code(code.strip())

    def list_accounts(self) -> list[Account]:
        """List all accounts ordered by code."""
        return self.db.list_accounts()

    def get_account_balances(self) -> list[Account]:
        """Current balance of every account, ordered by code."""
        return self.db.list_accounts()

    def get_trial_balance_base_data(self) -> list[Account]:
        """Accounts with their current balances, as consumed by the trial balance."""
        return self.db.list_accounts()

    def get_accounts_tree(self) -> list[AccountNode]:
        """Get the chart of accounts as a forest of root nodes."""
        return build_account_tree(self.db.list_accounts())

    def update_account(
        self,
        account_id: int,
        code: Optional[str] = None,
        name: Optional[str] = None,
        account_type: AccountType | str | None = None,
        parent_id: Optional[int] = None,
        clear_parent: bool = False,
    ) -> Account:
        """Update account fields.

        Args:
            account_id: Account ID to update
            code: Optional new code
            name: Optional new name
            account_type: Must match the current type if given; types are
                fixed at creation
            parent_id: Optional new parent account ID
            clear_parent: If True, make the account a root (parent_id must be None)

        Returns:
            The updated account

        Raises:
            NotFoundError: If the account or the new parent does not exist
            ValidationError: If a field is blank, the type changes, or the new
                parent would create a cycle
            ConflictError: If the new code is already used
        """
        account = self.get_account_by_id(account_id)

        if code is not None:
            code = self._require_text(code=code)["code"]
        if name is not None:
            name = self._require_text(name=name)["name"]

        if account_type is not None:
            parsed_type = parse_account_type(account_type)
            if parsed_type != account.type:
                raise ValidationError(
                    f"Account type is fixed at creation; account {account_id} is '{account.type.value}'"
                )

        if clear_parent and parent_id is not None:
            raise ValidationError("Cannot set both parent_id and clear_parent")

        update_parent = clear_parent
        if parent_id is not None:
            self._validate_parent(account_id, parent_id)
            update_parent = True

        if code is not None and code != account.code:
            existing = self.db.get_account_by_code(code)
            if existing is not None and existing.id != account_id:
                raise ConflictError(duplicate_account_code(code))

        self.db.update_account(
            account_id=account_id,
            code=code,
            name=name,
            parent_id=parent_id,
            update_parent=update_parent,
        )
        logger.info("Updated account %d", account_id)
        return self.get_account_by_id(account_id)

    def _validate_parent(self, account_id: int, parent_id: int) -> None:
        """Reject a parent that does not exist or would close a cycle."""
        if parent_id == account_id:
            raise ValidationError(parent_account_cycle(account_id, parent_id))

        accounts = {acc.id: acc for acc in self.db.list_accounts()}
        if parent_id not in accounts:
            raise NotFoundError(parent_account_not_found(parent_id))

        # Walk up from the proposed parent; reaching the account means a cycle
        seen: set[int] = set()
        current: Optional[int] = parent_id
        while current is not None and current not in seen:
            if current == account_id:
                raise ValidationError(parent_account_cycle(account_id, parent_id))
            seen.add(current)
            current = accounts[current].parent_id if current in accounts else None

    def delete_account(self, account_id: int) -> None:
        """Delete an account.

        Args:
            account_id: Account ID to delete

        Raises:
            NotFoundError: If the account does not exist
            DependencyError: If the account has child accounts or journal lines
        """
        self.get_account_by_id(account_id)

        child_count = self.db.get_account_child_count(account_id)
        line_count = self.db.get_account_line_count(account_id)
        if child_count > 0 or line_count > 0:
            raise DependencyError(account_delete_blocked(account_id, child_count, line_count))

        self.db.delete_account(account_id)
        logger.info("Deleted account %d", account_id)
