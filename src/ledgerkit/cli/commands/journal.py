"""Journal entry commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error, resolve_account_or_exit
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import JournalEntry, JournalLineInput, LineType
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.journal import JournalService
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date


def _parse_lines(
    ctx, account_service: AccountService, debits: tuple[str, ...], credits: tuple[str, ...]
) -> list[JournalLineInput]:
    """Turn ACCOUNT=AMOUNT option values into journal lines."""
    lines = []
    for line_type, values in ((LineType.DEBIT, debits), (LineType.CREDIT, credits)):
        for value in values:
            account, sep, amount = value.rpartition("=")
            if not sep or not account:
                click.echo(f"Error: Expected ACCOUNT=AMOUNT, got '{value}'", err=True)
                ctx.exit(1)
            account_id = resolve_account_or_exit(ctx, account_service, account)
            try:
                parsed = parse_amount(amount)
            except ValueError as e:
                click.echo(f"Error: Invalid amount format: {e}", err=True)
                ctx.exit(1)
            lines.append(JournalLineInput(account_id=account_id, type=line_type, amount=parsed))

    if len(lines) < 2:
        click.echo("Error: A journal entry needs at least two lines.", err=True)
        ctx.exit(1)
    return lines


def _parse_date_or_exit(ctx, value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def _print_entry(entry: JournalEntry) -> None:
    header = f"Entry {entry.id} | {entry.date}"
    if entry.code:
        header += f" | {entry.code}"
    if entry.reference:
        header += f" | Ref: {entry.reference}"
    click.echo(header)
    if entry.description:
        click.echo(f"  {entry.description}")
    for line in entry.lines:
        account = f"{line.account.code} {line.account.name}" if line.account else str(line.account_id)
        debit = f"{line.amount:,.2f}" if line.type == LineType.DEBIT else ""
        credit = f"{line.amount:,.2f}" if line.type == LineType.CREDIT else ""
        click.echo(f"    {account:<40} {debit:>14} {credit:>14}")


@click.group()
def journal_group():
    """Post and manage journal entries."""
    pass


@journal_group.command("post")
@click.option("--date", "entry_date", required=True, help="Entry date (YYYY-MM-DD or relative like 'today')")
@click.option("--debit", "debits", multiple=True, metavar="ACCOUNT=AMOUNT", help="Debit line (repeatable)")
@click.option("--credit", "credits", multiple=True, metavar="ACCOUNT=AMOUNT", help="Credit line (repeatable)")
@click.option("--reference", help="External reference")
@click.option("--description", help="Entry description")
@click.option("--code", help="Unique entry code")
@click.pass_context
def post_entry(
    ctx,
    entry_date: str,
    debits: tuple[str, ...],
    credits: tuple[str, ...],
    reference: str | None,
    description: str | None,
    code: str | None,
):
    """Post a balanced journal entry.

    ACCOUNT can be an account code or ID. Debits must equal credits.

    Examples:
        ledgerkit journal post --date 2024-01-05 --debit 1000=500 --credit 4000=500
        ledgerkit journal post --date today --debit 5000=120.50 --credit 1000=120.50 --reference INV-7
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    journal_service = JournalService(db)

    parsed_date = _parse_date_or_exit(ctx, entry_date)
    lines = _parse_lines(ctx, account_service, debits, credits)

    try:
        entry = journal_service.create_journal_entry(
            date=parsed_date,
            lines=lines,
            reference=reference,
            description=description,
            code=code,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Posted journal entry {entry.id} ({entry.total_debits:,.2f})")


@journal_group.command("list")
@click.option("--account", help="Only entries touching this account (code or ID)")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@click.pass_context
def list_entries(ctx, account: str | None, start_date: str | None, end_date: str | None):
    """List journal entries, newest first."""
    db = ctx.obj["db"]
    account_service = AccountService(db)
    journal_service = JournalService(db)

    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, account_service, account)
    start = _parse_date_or_exit(ctx, start_date) if start_date else None
    end = _parse_date_or_exit(ctx, end_date) if end_date else None

    entries = journal_service.get_journal_entries(
        account_id=account_id, start_date=start, end_date=end
    )
    if not entries:
        click.echo("No journal entries found.")
        return

    click.echo(f"\nFound {len(entries)} journal entr{'y' if len(entries) == 1 else 'ies'}:")
    click.echo("-" * 80)
    for entry in entries:
        reference = entry.reference or ""
        description = entry.description or ""
        click.echo(
            f"ID: {entry.id:4d} | {entry.date} | {reference:<12s} | {description:<30.30s} | {entry.total_debits:>12,.2f}"
        )


@journal_group.command("show")
@click.argument("entry_id", type=int)
@click.pass_context
def show_entry(ctx, entry_id: int):
    """Show a journal entry with its lines."""
    db = ctx.obj["db"]
    journal_service = JournalService(db)

    entry = journal_service.get_journal_entry(entry_id)
    if entry is None:
        click.echo(f"Error: Journal entry {entry_id} not found", err=True)
        ctx.exit(1)
    _print_entry(entry)


@journal_group.command("update")
@click.argument("entry_id", type=int)
@click.option("--date", "entry_date", help="New entry date")
@click.option("--debit", "debits", multiple=True, metavar="ACCOUNT=AMOUNT", help="Replacement debit line (repeatable)")
@click.option("--credit", "credits", multiple=True, metavar="ACCOUNT=AMOUNT", help="Replacement credit line (repeatable)")
@click.option("--reference", help="New reference")
@click.option("--description", help="New description")
@click.option("--code", help="New unique entry code")
@click.pass_context
def update_entry(
    ctx,
    entry_id: int,
    entry_date: str | None,
    debits: tuple[str, ...],
    credits: tuple[str, ...],
    reference: str | None,
    description: str | None,
    code: str | None,
):
    """Update a journal entry.

    Header fields are updated only when given. Passing any --debit or
    --credit replaces the entire line set.

    Examples:
        ledgerkit journal update 3 --description "Corrected memo"
        ledgerkit journal update 3 --debit 1000=450 --credit 4000=450
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    journal_service = JournalService(db)

    parsed_date = _parse_date_or_exit(ctx, entry_date) if entry_date else None
    lines = None
    if debits or credits:
        lines = _parse_lines(ctx, account_service, debits, credits)

    try:
        journal_service.update_journal_entry(
            entry_id=entry_id,
            date=parsed_date,
            reference=reference,
            description=description,
            lines=lines,
            code=code,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated journal entry {entry_id}")


@journal_group.command("delete")
@click.argument("entry_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_entry(ctx, entry_id: int, yes: bool):
    """Delete a journal entry and revert its balance effects."""
    db = ctx.obj["db"]
    journal_service = JournalService(db)

    if not yes and not click.confirm(f"Are you sure you want to delete journal entry {entry_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        journal_service.delete_journal_entry(entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted journal entry {entry_id}")


@journal_group.command("ledger")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def general_ledger(ctx, account: str):
    """Show every posting to an account with a running balance.

    ACCOUNT can be an account code or ID.
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    journal_service = JournalService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    try:
        ledger = journal_service.get_general_ledger(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nGeneral ledger: {ledger.account.code} {ledger.account.name}")
    click.echo("-" * 90)
    if not ledger.rows:
        click.echo("No postings.")
        return
    for row in ledger.rows:
        description = row.description or ""
        debit = f"{row.amount:,.2f}" if row.type == LineType.DEBIT else ""
        credit = f"{row.amount:,.2f}" if row.type == LineType.CREDIT else ""
        click.echo(
            f"{row.date} | {row.journal_entry_id:4d} | {description:<25.25s} | {debit:>12} | {credit:>12} | {row.running_balance:>14,.2f}"
        )


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
