"""Financial report commands."""

import click
from ledgerkit.cli.date_filters import period_options, resolve_cli_date_range
from ledgerkit.domain.entities import StatementLine
from ledgerkit.domain.reports import ReportService
from ledgerkit.utils.date_parser import parse_date

AMOUNT_WIDTH = 16


def _range_from_options(ctx, options: dict) -> tuple:
    period_flags = {
        "this-month": options["this_month"],
        "this-quarter": options["this_quarter"],
        "this-year": options["this_year"],
        "last-month": options["last_month"],
        "last-quarter": options["last_quarter"],
        "last-year": options["last_year"],
    }
    return resolve_cli_date_range(
        ctx,
        start_date=options["start_date"],
        end_date=options["end_date"],
        period_flags=period_flags,
        fiscal_year=options["fiscal_year"],
    )


def _period_label(start, end) -> str:
    if start is None and end is None:
        return "all dates"
    return f"{start or '...'} to {end or '...'}"


def _echo_amount(label: str, amount, indent: int = 0) -> None:
    width = 50 - indent
    click.echo(f"{' ' * indent}{label:<{width}} {amount:>{AMOUNT_WIDTH},.2f}")


def _echo_section(title: str, lines: tuple[StatementLine, ...], total_label: str, total) -> None:
    click.echo(title)
    for line in lines:
        _echo_amount(f"{line.code} {line.name}", line.amount, indent=4)
    _echo_amount(total_label, total, indent=2)


@click.group()
def report_group():
    """Financial reports."""
    pass


@report_group.command("trial-balance")
@click.pass_context
def trial_balance(ctx):
    """Show every account balance with debit and credit totals."""
    service = ReportService(ctx.obj["db"])
    report = service.get_trial_balance()

    click.echo("\nTrial Balance")
    click.echo("=" * 90)
    for row in report.rows:
        click.echo(
            f"{row.code:<10s} {row.name:<40.40s} {row.type.value:<10s} {row.balance:>{AMOUNT_WIDTH},.2f}"
        )
    click.echo("-" * 90)
    _echo_amount("Total debits", report.total_debits)
    _echo_amount("Total credits", report.total_credits)
    click.echo("Balanced" if report.is_balanced else "NOT BALANCED")


@report_group.command("balance-sheet")
@click.option("--as-of", help="Report date shown in the header")
@period_options
@click.pass_context
def balance_sheet(ctx, as_of: str | None, **options):
    """Show assets, liabilities and equity.

    With a date range, only accounts with postings in the range are shown.
    """
    service = ReportService(ctx.obj["db"])
    start, end = _range_from_options(ctx, options)

    as_of_date = None
    if as_of:
        try:
            as_of_date = parse_date(as_of)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    report = service.get_balance_sheet(as_of=as_of_date, start_date=start, end_date=end)

    click.echo(f"\nBalance Sheet as of {report.as_of}")
    click.echo("=" * 70)
    _echo_section("Assets", report.assets, "Total assets", report.total_assets)
    _echo_section("Liabilities", report.liabilities, "Total liabilities", report.total_liabilities)
    click.echo("Equity")
    for line in report.equity:
        _echo_amount(f"{line.code} {line.name}", line.amount, indent=4)
    _echo_amount("Current earnings", report.current_earnings, indent=4)
    _echo_amount("Total equity", report.total_equity, indent=2)
    click.echo("-" * 70)
    click.echo("Balanced" if report.is_balanced else "NOT BALANCED")


@report_group.command("income-statement")
@period_options
@click.pass_context
def income_statement(ctx, **options):
    """Show revenue, expenses and net income for a period."""
    service = ReportService(ctx.obj["db"])
    start, end = _range_from_options(ctx, options)
    report = service.get_income_statement(start_date=start, end_date=end)

    click.echo(f"\nIncome Statement ({_period_label(report.start_date, report.end_date)})")
    click.echo("=" * 70)
    _echo_section("Revenue", report.revenue, "Total revenue", report.total_revenue)
    _echo_section("Expenses", report.expenses, "Total expenses", report.total_expenses)
    click.echo("-" * 70)
    _echo_amount("Net income", report.net_income)


@report_group.command("cash-flow")
@period_options
@click.option("--details", is_flag=True, help="List each classified cash movement")
@click.pass_context
def cash_flow(ctx, details: bool, **options):
    """Show cash movements by operating, investing and financing activity."""
    service = ReportService(ctx.obj["db"])
    start, end = _range_from_options(ctx, options)
    report = service.get_cash_flow_statement(start_date=start, end_date=end)

    click.echo(f"\nCash Flow Statement ({_period_label(report.start_date, report.end_date)})")
    click.echo("=" * 70)
    _echo_amount("Beginning cash", report.beginning_cash)
    _echo_amount("Operating activities", report.operating, indent=2)
    _echo_amount("Investing activities", report.investing, indent=2)
    _echo_amount("Financing activities", report.financing, indent=2)
    _echo_amount("Net cash flow", report.net_cash_flow)
    _echo_amount("Ending cash", report.ending_cash)

    if details and report.details:
        click.echo("\nDetails:")
        for item in report.details:
            description = item.description or ""
            click.echo(
                f"{item.date} | {item.journal_entry_id:4d} | {item.activity.value:<9s} | {item.account_name:<20.20s} | {description:<25.25s} | {item.amount:>12,.2f}"
            )


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
