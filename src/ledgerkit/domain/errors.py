"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(ConflictError):
    """Operation blocked due to dependent domain data."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def parent_account_not_found(parent_id: int) -> str:
    """Return message for missing parent account."""
    return f"Parent account {parent_id} not found"


def journal_entry_not_found(entry_id: int) -> str:
    """Return message for missing journal entry."""
    return f"Journal entry {entry_id} not found"


def duplicate_account_code(code: str) -> str:
    """Return message for duplicate account code."""
    return f"Account with code '{code}' already exists"


def duplicate_journal_code(code: str) -> str:
    """Return message for duplicate journal entry code."""
    return f"Journal entry with code '{code}' already exists"


def unbalanced_entry(total_debits: Decimal, total_credits: Decimal) -> str:
    """Return message for a journal entry whose debits and credits differ."""
    return (
        "Debits and credits must be equal "
        f"(debits={total_debits}, credits={total_credits})"
    )


def account_delete_blocked(account_id: int, child_count: int, line_count: int) -> str:
    """Return message when account has child accounts or journal lines."""
    parts = []
    if child_count > 0:
        parts.append(f"{child_count} child account{'s' if child_count != 1 else ''}")
    if line_count > 0:
        parts.append(f"{line_count} journal line{'s' if line_count != 1 else ''}")
    return (
        f"Cannot delete account {account_id}: it has {', '.join(parts)}. "
        "Please reassign or delete them first."
    )


def parent_account_cycle(account_id: int, parent_id: int) -> str:
    """Return message when a new parent would make an account its own ancestor."""
    if parent_id == account_id:
        return f"Account {account_id} cannot be its own parent"
    return (
        f"Account {parent_id} is a descendant of account {account_id} "
        "and cannot become its parent"
    )
