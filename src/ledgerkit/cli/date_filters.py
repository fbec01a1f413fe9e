"""CLI helpers for report date range resolution."""

from datetime import date

import click

from ledgerkit.utils.date_parser import fiscal_year_range, get_date_range, parse_date


def period_options(command):
    """Attach --start-date/--end-date, period flags and --fiscal-year to a command."""
    options = [
        click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')"),
        click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')"),
        click.option("--this-month", is_flag=True, help="Filter to current month"),
        click.option("--this-quarter", is_flag=True, help="Filter to current quarter"),
        click.option("--this-year", is_flag=True, help="Filter to current year"),
        click.option("--last-month", is_flag=True, help="Filter to previous month"),
        click.option("--last-quarter", is_flag=True, help="Filter to previous quarter"),
        click.option("--last-year", is_flag=True, help="Filter to previous year"),
        click.option("--fiscal-year", help="Fiscal year (January 1 to December 31); overrides dates"),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    fiscal_year: str | None = None,
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from a fiscal year, period flags or explicit dates."""
    period_count = sum(1 for is_set in period_flags.values() if is_set)

    if period_count > 1:
        click.echo(
            "Error: Only one period option (--this-month, --this-quarter, --this-year, --last-month, --last-quarter, --last-year) can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if period_count > 0 and (start_date or end_date or fiscal_year):
        click.echo(
            "Error: Period options (--this-month, --this-year, etc.) cannot be combined with --start-date, --end-date or --fiscal-year.",
            err=True,
        )
        ctx.exit(1)

    if fiscal_year:
        try:
            return fiscal_year_range(fiscal_year)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

    start = None
    end = None

    if period_count == 1:
        for period, is_set in period_flags.items():
            if is_set:
                start, end = get_date_range(period)
                break
    else:
        if start_date:
            try:
                start = parse_date(start_date)
            except ValueError as e:
                click.echo(f"Error: Invalid start date: {e}", err=True)
                ctx.exit(1)

        if end_date:
            try:
                end = parse_date(end_date)
            except ValueError as e:
                click.echo(f"Error: Invalid end date: {e}", err=True)
                ctx.exit(1)

        if start is None and end is None and default_range is not None:
            start, end = default_range

    return start, end
