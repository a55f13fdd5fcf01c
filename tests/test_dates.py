"""Tests for date expression resolution."""

from datetime import date, datetime

import pytest

from next_tasks.tasks.dates import DateOrder, compare_ymd, parse_iso_date, resolve_expr

TODAY = date(2024, 2, 27)


def test_resolve_iso_date() -> None:
    """Test plain YYYY-MM-DD."""
    assert resolve_expr("2024-03-05", TODAY) == date(2024, 3, 5)


def test_resolve_iso_date_ignores_time_suffix() -> None:
    """Test that a time component does not affect the calendar day."""
    assert resolve_expr("2024-03-05T09:30", TODAY) == date(2024, 3, 5)


def test_resolve_relative_date_crosses_month() -> None:
    """Test today+Nd in a leap February."""
    assert resolve_expr("today+3d", TODAY) == date(2024, 3, 1)


def test_resolve_relative_date_is_case_insensitive() -> None:
    """Test TODAY+0d resolves to today."""
    assert resolve_expr("TODAY+0d", TODAY) == TODAY
    assert resolve_expr(" Today+1D ", TODAY) == date(2024, 2, 28)


@pytest.mark.parametrize(
    "expr",
    ["2024-02-30", "2023-02-29", "2024-13-01", "2024-00-10", "tomorrow", "today-1d", "", None],
)
def test_resolve_rejects_malformed(expr: str | None) -> None:
    """Test that invalid or unknown expressions impose no date."""
    assert resolve_expr(expr, TODAY) is None


def test_resolve_relative_date_out_of_range() -> None:
    """Test an offset past year 9999 imposes no date instead of raising."""
    assert resolve_expr("today+99999999d", TODAY) is None
    assert resolve_expr("today+1d", date(9999, 12, 31)) is None


def test_parse_iso_date_accepts_leap_day() -> None:
    """Test Feb 29 in a leap year is a real date."""
    assert parse_iso_date("2024-02-29") == date(2024, 2, 29)


def test_compare_ymd_ignores_time_of_day() -> None:
    """Test that late in the day is still the same calendar day."""
    assert compare_ymd(datetime(2024, 1, 1, 23, 59), date(2024, 1, 1)) is DateOrder.SAME
    assert compare_ymd(date(2024, 1, 1), datetime(2024, 1, 1, 0, 1)) is DateOrder.SAME


def test_compare_ymd_orders_lexicographically() -> None:
    """Test year, then month, then day ordering."""
    assert compare_ymd(date(2023, 12, 31), date(2024, 1, 1)) is DateOrder.BEFORE
    assert compare_ymd(date(2024, 2, 1), date(2024, 1, 31)) is DateOrder.AFTER
