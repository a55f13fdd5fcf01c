"""Tests for recurrence rule parsing and scheduling."""

from datetime import date, timedelta

import pytest

from next_tasks.tasks.recurrence import (
    AnchoredIntervalRule,
    IntervalRule,
    IntervalUnit,
    MonthlyRule,
    WeekdayRule,
    YearlyRule,
    next_occurrence,
    parse_rule,
)

TODAY = date(2024, 2, 1)


def test_parse_each_shape() -> None:
    """Test that each payload maps to exactly one rule shape."""
    assert parse_rule("3d") == IntervalRule(3, IntervalUnit.DAY)
    assert parse_rule("2W") == IntervalRule(2, IntervalUnit.WEEK)
    assert parse_rule("from:2024-01-01,every:7d") == AnchoredIntervalRule(
        date(2024, 1, 1), 7, IntervalUnit.DAY
    )
    assert parse_rule("monthly, day=last") == MonthlyRule(None)
    assert parse_rule("monthly,day=15") == MonthlyRule(15)
    assert parse_rule("yearly,month=Mar,day=1") == YearlyRule(3, 1)
    assert parse_rule("yearly, month=2, day=last") == YearlyRule(2, None)
    assert parse_rule("mon, wed,FRI") == WeekdayRule(frozenset({0, 2, 4}))


@pytest.mark.parametrize(
    "payload",
    [
        "",
        None,
        "0d",
        "every day",
        "3x",
        "monthly,day=0",
        "monthly",
        "yearly,month=13,day=1",
        "yearly,month=foo,day=1",
        "mon,funday",
        "from:2024-02-30,every:7d",
        "from:2024-01-01,every:0d",
    ],
)
def test_parse_malformed_rules(payload: str | None) -> None:
    """Test that malformed payloads are non-recurring."""
    assert parse_rule(payload) is None
    assert next_occurrence(payload, TODAY, TODAY) is None


def test_interval_days_and_weeks() -> None:
    """Test day and week steps from the anchor."""
    assert next_occurrence("3d", date(2024, 2, 27), TODAY) == date(2024, 3, 1)
    assert next_occurrence("2w", date(2024, 1, 1), TODAY) == date(2024, 1, 15)


def test_interval_month_clamps_in_leap_year() -> None:
    """Test Jan 31 + 1 month lands on Feb 29, not March."""
    assert next_occurrence("1m", date(2024, 1, 31), TODAY) == date(2024, 2, 29)


def test_interval_month_clamps_in_common_year() -> None:
    """Test Jan 31 + 1 month lands on Feb 28 outside leap years."""
    assert next_occurrence("1m", date(2023, 1, 31), TODAY) == date(2023, 2, 28)


def test_interval_year_from_leap_day() -> None:
    """Test Feb 29 + 1 year lands on Feb 28."""
    assert next_occurrence("1y", date(2024, 2, 29), TODAY) == date(2025, 2, 28)


def test_interval_month_rolls_over_year() -> None:
    """Test Dec + 2 months lands in February of the next year."""
    assert next_occurrence("2m", date(2024, 12, 31), TODAY) == date(2025, 2, 28)


def test_monthly_last_day() -> None:
    """Test monthly,day=last from mid February."""
    assert next_occurrence("monthly,day=last", date(2024, 2, 15), TODAY) == date(2024, 3, 31)


def test_monthly_day_clamps_to_short_month() -> None:
    """Test day 31 in a 29-day February."""
    assert next_occurrence("monthly,day=31", date(2024, 1, 10), TODAY) == date(2024, 2, 29)


def test_monthly_rolls_over_december() -> None:
    """Test that December's next month is January of the next year."""
    assert next_occurrence("monthly,day=15", date(2024, 12, 20), TODAY) == date(2025, 1, 15)


def test_yearly_always_advances_a_year() -> None:
    """Test that yearly targets next year even if the date is still ahead."""
    assert next_occurrence("yearly,month=mar,day=1", date(2024, 1, 10), TODAY) == date(2025, 3, 1)


def test_yearly_last_day_of_february() -> None:
    """Test yearly,day=last picks up the leap day."""
    assert next_occurrence("yearly,month=2,day=last", date(2023, 5, 1), TODAY) == date(2024, 2, 29)


def test_weekdays_pick_nearest_following_day() -> None:
    """Test Wednesday with mon,wed,fri moves to Friday."""
    wednesday = date(2024, 1, 3)
    assert next_occurrence("mon,wed,fri", wednesday, TODAY) == date(2024, 1, 5)


def test_weekdays_same_day_is_a_week_later() -> None:
    """Test that the anchor's own weekday never yields a zero offset."""
    wednesday = date(2024, 1, 3)
    assert next_occurrence("wed", wednesday, TODAY) == date(2024, 1, 10)


def test_weekdays_wrap_into_next_week() -> None:
    """Test Friday with mon moves to the following Monday."""
    assert next_occurrence("mon", date(2024, 1, 5), TODAY) == date(2024, 1, 8)


def test_anchored_catches_up_missed_periods() -> None:
    """Test the first 7-day grid date after 2024-03-01."""
    result = next_occurrence("from:2024-01-01,every:7d", date(2024, 1, 1), date(2024, 3, 1))
    assert result == date(2024, 3, 4)
    assert (result - date(2024, 1, 1)).days % 7 == 0


def test_anchored_on_grid_day_moves_to_next_period() -> None:
    """Test that a grid date equal to today is not strictly after it."""
    result = next_occurrence("from:2024-01-01,every:1w", date(2024, 1, 1), date(2024, 3, 4))
    assert result == date(2024, 3, 11)


def test_anchored_ignores_task_anchor() -> None:
    """Test that the embedded date, not the task start, defines the grid."""
    result = next_occurrence("from:2024-01-01,every:10d", date(2024, 2, 28), date(2024, 1, 5))
    assert result == date(2024, 1, 11)


def test_anchored_future_anchor_is_next() -> None:
    """Test an anchor still ahead of today is itself the next occurrence."""
    result = next_occurrence("from:2024-06-01,every:1m", TODAY, TODAY)
    assert result == date(2024, 6, 1)


def test_anchored_months_do_not_drift() -> None:
    """Test month-end anchors stay on month ends after clamping."""
    rule = "from:2024-01-31,every:1m"
    assert next_occurrence(rule, TODAY, date(2024, 4, 15)) == date(2024, 4, 30)
    assert next_occurrence(rule, TODAY, date(2024, 5, 1)) == date(2024, 5, 31)


def test_anchored_years_from_leap_day() -> None:
    """Test yearly grid anchored on Feb 29."""
    rule = "from:2020-02-29,every:1y"
    assert next_occurrence(rule, TODAY, date(2023, 3, 1)) == date(2024, 2, 29)


def test_next_occurrence_accepts_parsed_rule() -> None:
    """Test passing a rule object instead of a payload."""
    assert next_occurrence(MonthlyRule(None), date(2024, 1, 5), TODAY) == date(2024, 2, 29)


@pytest.mark.parametrize(
    "payload", ["1d", "3w", "1m", "2y", "monthly,day=1", "yearly,month=jan,day=1", "sun,sat"]
)
def test_next_occurrence_is_strictly_after_anchor(payload: str) -> None:
    """Test every anchored-on-start shape advances past its anchor."""
    anchor = date(2023, 12, 25)
    for offset in range(0, 400, 13):
        current = anchor + timedelta(days=offset)
        result = next_occurrence(payload, current, TODAY)
        assert result is not None
        assert result > current


@pytest.mark.parametrize(
    ("payload", "anchor"),
    [
        ("9999y", TODAY),
        ("99999999d", TODAY),
        ("1m", date(9999, 12, 15)),
        ("monthly,day=1", date(9999, 12, 15)),
        ("yearly,month=jan,day=1", date(9999, 3, 1)),
        ("fri", date(9999, 12, 31)),
        ("from:2024-01-01,every:99999999d", TODAY),
    ],
)
def test_next_occurrence_out_of_range_is_none(payload: str, anchor: date) -> None:
    """Test steps past year 9999 degrade to non-recurring."""
    assert next_occurrence(payload, anchor, TODAY) is None
