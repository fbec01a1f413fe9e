"""Reconciliation command."""

import click
from ledgerkit.cli.error_handling import handle_domain_error, resolve_account_or_exit
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.reconciliation import ReconciliationService
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date


@click.command("reconcile")
@click.argument("account", metavar="ACCOUNT")
@click.option("--statement-balance", required=True, help="Closing balance on the statement")
@click.option("--statement-date", required=True, help="Statement closing date")
@click.option("--verbose", "-v", is_flag=True, help="List the postings up to the statement date")
@click.pass_context
def reconcile(ctx, account: str, statement_balance: str, statement_date: str, verbose: bool):
    """Compare an account's book balance with a statement balance.

    ACCOUNT can be an account code or ID.

    Examples:
        ledgerkit reconcile 1000 --statement-balance 1250.00 --statement-date 2024-01-31
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    service = ReconciliationService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    try:
        balance = parse_amount(statement_balance)
        closing_date = parse_date(statement_date)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        result = service.reconcile_account(account_id, balance, closing_date)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nReconciliation: {result.account.code} {result.account.name} as of {result.statement_date}")
    click.echo("-" * 60)
    click.echo(f"{'Statement balance':<30} {result.statement_balance:>16,.2f}")
    click.echo(f"{'Book balance':<30} {result.book_balance:>16,.2f}")
    click.echo(f"{'Ledger balance to date':<30} {result.ledger_balance:>16,.2f}")
    click.echo(f"{'Difference':<30} {result.difference:>16,.2f}")
    click.echo("Reconciled" if result.reconciled else "NOT RECONCILED")

    if verbose:
        click.echo(f"\n{len(result.lines)} posting(s):")
        for line in result.lines:
            description = line.description or ""
            click.echo(
                f"{line.date} | {line.journal_entry_id:4d} | {line.type.value:<6s} | {description:<30.30s} | {line.amount:>12,.2f}"
            )


def register_commands(cli):
    """Register reconcile command with main CLI."""
    cli.add_command(reconcile)
