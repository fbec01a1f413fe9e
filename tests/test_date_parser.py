"""Tests for date parser, reporting periods and fiscal years."""

import pytest
from datetime import date, timedelta
from dateutil.relativedelta import relativedelta
from ledgerkit.utils.date_parser import (
    fiscal_year_range,
    get_date_range,
    parse_date,
    resolve_date_range,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2024-01-15", date(2024, 1, 15)),
        ("January 15, 2024", date(2024, 1, 15)),
        ("15/01/2024", date(2024, 1, 15)),
        ("  2023-12-31  ", date(2023, 12, 31)),
    ],
)
def test_parse_absolute_dates(text, expected):
    """Statement and entry dates are accepted in common formats."""
    assert parse_date(text) == expected


def test_parse_relative_days():
    """Test 'today', 'yesterday' and 'tomorrow' resolve around today."""
    today = date.today()
    assert parse_date("Today") == today
    assert parse_date("yesterday") == today - timedelta(days=1)
    assert parse_date("tomorrow") == today + timedelta(days=1)


def test_parse_relative_periods_start_on_first_day():
    """Test 'last month' and 'next year' resolve to the first day of the period."""
    today = date.today()
    assert parse_date("last month") == (today - relativedelta(months=1)).replace(day=1)
    assert parse_date("this month") == today.replace(day=1)
    assert parse_date("Next Year") == date(today.year + 1, 1, 1)


@pytest.mark.parametrize("text", ["last invalid", "end of quarter", ""])
def test_parse_invalid_dates(text):
    """Unparseable input raises ValueError."""
    with pytest.raises(ValueError):
        parse_date(text)


def test_fiscal_year_range():
    """Test that a fiscal year spans January 1 to December 31."""
    assert fiscal_year_range(2024) == (date(2024, 1, 1), date(2024, 12, 31))
    assert fiscal_year_range(" 2023 ") == (date(2023, 1, 1), date(2023, 12, 31))


@pytest.mark.parametrize("value", ["24", "abcd", "20245"])
def test_fiscal_year_range_invalid(value):
    """Test that malformed fiscal years are rejected."""
    with pytest.raises(ValueError, match="Invalid fiscal year"):
        fiscal_year_range(value)


def test_resolve_date_range_prefers_fiscal_year():
    """Test that a fiscal year overrides explicit dates."""
    start, end = resolve_date_range(date(2020, 5, 1), date(2020, 5, 31), fiscal_year=2021)
    assert (start, end) == (date(2021, 1, 1), date(2021, 12, 31))

    assert resolve_date_range(date(2020, 5, 1), None) == (date(2020, 5, 1), None)


def test_get_date_range_this_month():
    """Test get_date_range for this-month."""
    today = date.today()
    start, end = get_date_range("this-month")
    assert start == date(today.year, today.month, 1)
    assert end == today


def test_get_date_range_this_year():
    """Test get_date_range for this-year."""
    today = date.today()
    start, end = get_date_range("this-year")
    assert start == date(today.year, 1, 1)
    assert end == today


def test_get_date_range_quarters():
    """Test get_date_range for this-quarter and last-quarter."""
    reference = date(2024, 5, 20)

    assert get_date_range("this-quarter", today=reference) == (date(2024, 4, 1), reference)
    assert get_date_range("last-quarter", today=reference) == (date(2024, 1, 1), date(2024, 3, 31))
    assert get_date_range("last-quarter", today=date(2024, 2, 1)) == (
        date(2023, 10, 1),
        date(2023, 12, 31),
    )


def test_get_date_range_last_month():
    """Test get_date_range for last-month."""
    today = date.today()
    start, end = get_date_range("last-month")
    # First day of last month
    expected_start = (today - relativedelta(months=1)).replace(day=1)
    # Last day of last month (day before first day of current month)
    expected_end = today.replace(day=1) - timedelta(days=1)
    assert start == expected_start
    assert end == expected_end
    assert end.month == expected_start.month
    assert end.year == expected_start.year


def test_get_date_range_last_month_across_year_boundary():
    """Test last-month in January reaches back into December."""
    start, end = get_date_range("last-month", today=date(2024, 1, 15))
    assert (start, end) == (date(2023, 12, 1), date(2023, 12, 31))


def test_get_date_range_last_year():
    """Test get_date_range for last-year."""
    today = date.today()
    start, end = get_date_range("last-year")
    assert start == date(today.year - 1, 1, 1)
    assert end == date(today.year - 1, 12, 31)


def test_get_date_range_invalid_period():
    """Test get_date_range with invalid period."""
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("invalid-period")
