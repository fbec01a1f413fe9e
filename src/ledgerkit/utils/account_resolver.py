"""Utility for resolving account codes to IDs."""

from ledgerkit.domain.account import AccountService


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve account code or ID to account ID.

    A value that is an account code wins over the same value read as an ID,
    since numeric codes ("1000") are common in charts of accounts.

    Args:
        account_service: AccountService instance
        account: Account code (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        ValueError: If account is not found
    """
    if isinstance(account, int):
        if account_service.get_account(account) is None:
            raise ValueError(f"Account ID {account} not found")
        return account

    by_code = account_service.get_account_by_code(account)
    if by_code is not None:
        return by_code.id

    try:
        account_id = int(account)
    except (ValueError, TypeError):
        raise ValueError(f"Account '{account}' not found")

    if account_service.get_account(account_id) is None:
        raise ValueError(f"Account ID {account_id} not found")
    return account_id
