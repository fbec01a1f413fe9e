"""Chart of accounts commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error, resolve_account_or_exit
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import AccountNode, AccountType
from ledgerkit.domain.errors import DomainError

ACCOUNT_TYPES = [t.value for t in AccountType]


def print_account_tree(nodes: list[AccountNode], indent: int = 0) -> None:
    """Recursively print the account tree."""
    for node in nodes:
        prefix = "  " * indent
        account = node.account
        label = f"{prefix}{account.code} {account.name}"
        click.echo(f"{label:<50} {account.type.value:<10} {account.balance:>14,.2f}")
        if node.children:
            print_account_tree(node.children, indent + 1)


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("code", metavar="CODE")
@click.argument("name", metavar="NAME")
@click.option(
    "--type",
    "account_type",
    required=True,
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    help="Account type",
)
@click.option("--parent", help="Parent account code or ID")
@click.pass_context
def create_account(ctx, code: str, name: str, account_type: str, parent: str | None):
    """Create a new account with a zero balance.

    Examples:
        ledgerkit account create 1000 "Cash" --type asset
        ledgerkit account create 1010 "Petty Cash" --type asset --parent 1000
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    parent_id = None
    if parent is not None:
        parent_id = resolve_account_or_exit(ctx, service, parent)

    try:
        account = service.create_account(
            code=code, name=name, account_type=account_type, parent_id=parent_id
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account {account.code} '{account.name}' (ID: {account.id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their balances."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.get_account_balances()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.code:<10s} | {acc.name:<30s} | {acc.type.value:<9s} | {acc.balance:>14,.2f}"
        )


@account_group.command("tree")
@click.pass_context
def account_tree(ctx):
    """Show the chart of accounts as a tree."""
    db = ctx.obj["db"]
    service = AccountService(db)

    tree = service.get_accounts_tree()
    if not tree:
        click.echo("No accounts found.")
        return

    print_account_tree(tree)


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--code", help="New account code")
@click.option("--name", help="New account name")
@click.option("--parent", help="New parent account code or ID")
@click.option("--no-parent", is_flag=True, help="Make the account a top-level account")
@click.pass_context
def update_account(
    ctx, account: str, code: str | None, name: str | None, parent: str | None, no_parent: bool
) -> None:
    """Update an account.

    ACCOUNT can be an account code or ID. The account type cannot be changed.

    Examples:
        ledgerkit account update 1000 --name "Cash on Hand"
        ledgerkit account update 1010 --no-parent
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    if parent is not None and no_parent:
        click.echo("Error: --parent and --no-parent cannot be combined.", err=True)
        ctx.exit(1)

    account_id = resolve_account_or_exit(ctx, service, account)
    parent_id = None
    if parent is not None:
        parent_id = resolve_account_or_exit(ctx, service, parent)

    try:
        updated = service.update_account(
            account_id=account_id,
            code=code,
            name=name,
            parent_id=parent_id,
            clear_parent=no_parent,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated account {updated.code} '{updated.name}'")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account code or ID.

    The account can only be deleted if it has no child accounts and no
    journal lines reference it.

    Examples:
        ledgerkit account delete 1010
        ledgerkit account delete 7 --yes
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account {account_obj.code} '{account_obj.name}'?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account {account_obj.code} '{account_obj.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
