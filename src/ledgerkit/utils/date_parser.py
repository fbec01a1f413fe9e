"""Date parsing and reporting-period utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = ("this-month", "this-year", "last-month", "last-year", "this-quarter", "last-quarter")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and a few
    relative ones: "today", "yesterday", "tomorrow", and "this/last/next"
    followed by "month" or "year" (first day of that period).

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    for prefix, offset in (("last ", -1), ("this ", 0), ("next ", 1)):
        if date_str.startswith(prefix):
            period = date_str[len(prefix):]
            if period == "month":
                return (today + relativedelta(months=offset)).replace(day=1)
            if period == "year":
                return today.replace(month=1, day=1) + relativedelta(years=offset)

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def fiscal_year_range(fiscal_year: int | str) -> tuple[date, date]:
    """Return the inclusive calendar range of a fiscal year.

    Fiscal years run January 1 through December 31.

    Raises:
        ValueError: If the year is not a four-digit year
    """
    try:
        year = int(str(fiscal_year).strip())
    except ValueError:
        raise ValueError(f"Invalid fiscal year '{fiscal_year}'")
    if not 1000 <= year <= 9999:
        raise ValueError(f"Invalid fiscal year '{fiscal_year}'")
    return date(year, 1, 1), date(year, 12, 31)


def resolve_date_range(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    fiscal_year: int | str | None = None,
) -> tuple[Optional[date], Optional[date]]:
    """Resolve a report range; a fiscal year takes precedence over explicit dates."""
    if fiscal_year is not None:
        return fiscal_year_range(fiscal_year)
    return start_date, end_date


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: One of this-month, this-year, this-quarter, last-month,
            last-year, last-quarter
        today: Reference date (defaults to today)

    Returns:
        Tuple of (start_date, end_date); "this-*" periods end today

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()
    quarter_start = today.replace(month=3 * ((today.month - 1) // 3) + 1, day=1)

    if period == "this-month":
        return today.replace(day=1), today
    if period == "this-year":
        return today.replace(month=1, day=1), today
    if period == "this-quarter":
        return quarter_start, today
    if period == "last-month":
        start = (today - relativedelta(months=1)).replace(day=1)
        return start, today.replace(day=1) - timedelta(days=1)
    if period == "last-year":
        return fiscal_year_range(today.year - 1)
    if period == "last-quarter":
        start = quarter_start - relativedelta(months=3)
        return start, quarter_start - timedelta(days=1)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
