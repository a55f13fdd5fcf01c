"""Recurrence rules and next-occurrence scheduling.

A rule is the payload of an ``@recur(...)`` decoration. Exactly one of five
shapes matches a well-formed payload:

- ``IntervalRule``: ``3d``, ``2w``, ``1m``, ``1y``
- ``AnchoredIntervalRule``: ``from:2024-01-01,every:7d``
- ``MonthlyRule``: ``monthly,day=15`` / ``monthly,day=last``
- ``YearlyRule``: ``yearly,month=mar,day=1`` / ``yearly,month=2,day=last``
- ``WeekdayRule``: ``mon,wed,fri``

Anything else parses to None and the task is treated as non-recurring.
"""

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Union

from dateutil.relativedelta import relativedelta

from next_tasks.tasks.dates import parse_iso_date

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = {"mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6}
MONTH_NAMES = {
    name: number
    for number, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}

_WEEKDAY = r"(?:mon|tue|wed|thu|fri|sat|sun)"

INTERVAL_PATTERN = re.compile(r"^(\d+)\s*([dwmy])$", re.IGNORECASE)
ANCHORED_PATTERN = re.compile(
    r"^from:\s*(\d{4}-\d{2}-\d{2})\s*,\s*every:\s*(\d+)\s*([dwmy])$", re.IGNORECASE
)
MONTHLY_PATTERN = re.compile(r"^monthly\s*,\s*day=(\d+|last)$", re.IGNORECASE)
YEARLY_PATTERN = re.compile(
    r"^yearly\s*,\s*month=(\d{1,2}|[a-z]{3})\s*,\s*day=(\d+|last)$", re.IGNORECASE
)
WEEKDAY_PATTERN = re.compile(rf"^{_WEEKDAY}(?:\s*,\s*{_WEEKDAY})*$", re.IGNORECASE)


class IntervalUnit(str, Enum):
    """Step unit of an interval rule."""

    DAY = "d"
    WEEK = "w"
    MONTH = "m"
    YEAR = "y"

    def delta(self, count: int) -> relativedelta:
        """Return a relativedelta of ``count`` units.

        Month and year steps clamp to the last day of the target month, so
        Jan 31 + 1m lands on Feb 28/29 instead of spilling into March.
        """
        if self is IntervalUnit.DAY:
            return relativedelta(days=count)
        if self is IntervalUnit.WEEK:
            return relativedelta(weeks=count)
        if self is IntervalUnit.MONTH:
            return relativedelta(months=count)
        return relativedelta(years=count)


@dataclass(frozen=True)
class IntervalRule:
    """Every N units, counted from the task's current start date."""

    count: int
    unit: IntervalUnit


@dataclass(frozen=True)
class AnchoredIntervalRule:
    """Every N units on a fixed grid starting at ``anchor``."""

    anchor: date
    count: int
    unit: IntervalUnit


@dataclass(frozen=True)
class MonthlyRule:
    """A day of the following month; ``day=None`` means the last day."""

    day: int | None


@dataclass(frozen=True)
class YearlyRule:
    """A month/day of the following year; ``day=None`` means the last day."""

    month: int
    day: int | None


@dataclass(frozen=True)
class WeekdayRule:
    """The next of a set of weekdays (0=Monday .. 6=Sunday)."""

    weekdays: frozenset[int]


RecurrenceRule = Union[IntervalRule, AnchoredIntervalRule, MonthlyRule, YearlyRule, WeekdayRule]


def _parse_day(value: str) -> int | None:
    return None if value.lower() == "last" else int(value)


def _parse_month(value: str) -> int | None:
    if value.isdigit():
        month = int(value)
        return month if 1 <= month <= 12 else None
    return MONTH_NAMES.get(value.lower())


def parse_rule(text: str | None) -> RecurrenceRule | None:
    """Parse a recurrence payload into one rule shape, or None if malformed."""
    if not text:
        return None
    text = text.strip()

    interval = INTERVAL_PATTERN.match(text)
    if interval:
        count = int(interval.group(1))
        if count < 1:
            return _malformed(text)
        return IntervalRule(count=count, unit=IntervalUnit(interval.group(2).lower()))

    anchored = ANCHORED_PATTERN.match(text)
    if anchored:
        anchor = parse_iso_date(anchored.group(1))
        count = int(anchored.group(2))
        if anchor is None or count < 1:
            return _malformed(text)
        return AnchoredIntervalRule(
            anchor=anchor, count=count, unit=IntervalUnit(anchored.group(3).lower())
        )

    monthly = MONTHLY_PATTERN.match(text)
    if monthly:
        day = _parse_day(monthly.group(1))
        if day is not None and day < 1:
            return _malformed(text)
        return MonthlyRule(day=day)

    yearly = YEARLY_PATTERN.match(text)
    if yearly:
        month = _parse_month(yearly.group(1))
        day = _parse_day(yearly.group(2))
        if month is None or (day is not None and day < 1):
            return _malformed(text)
        return YearlyRule(month=month, day=day)

    if WEEKDAY_PATTERN.match(text):
        names = (name.strip().lower() for name in text.split(","))
        return WeekdayRule(weekdays=frozenset(WEEKDAY_NAMES[name] for name in names))

    return _malformed(text)


def _malformed(text: str) -> None:
    logger.debug(f"[Recurrence] Ignoring malformed rule: {text!r}")
    return None


def _clamped(year: int, month: int, day: int | None) -> date:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, last if day is None else min(day, last))


def _next_interval(rule: IntervalRule, anchor: date) -> date:
    return anchor + rule.unit.delta(rule.count)


def _steps_elapsed(rule: AnchoredIntervalRule, today: date) -> int:
    """Lower bound on whole steps between the anchor and today."""
    if rule.unit is IntervalUnit.DAY:
        return (today - rule.anchor).days // rule.count
    if rule.unit is IntervalUnit.WEEK:
        return (today - rule.anchor).days // (7 * rule.count)
    if rule.unit is IntervalUnit.MONTH:
        months = (today.year - rule.anchor.year) * 12 + (today.month - rule.anchor.month)
        return months // rule.count
    return (today.year - rule.anchor.year) // rule.count


def _next_anchored(rule: AnchoredIntervalRule, today: date) -> date:
    """First grid date strictly after today.

    Every candidate is computed from the anchor itself so month clamping
    (Jan 31 -> Feb 29 -> Mar 31) never drifts across steps.
    """
    if rule.anchor > today:
        return rule.anchor

    step = _steps_elapsed(rule, today)
    candidate = rule.anchor + rule.unit.delta(rule.count * step)
    while candidate <= today:
        step += 1
        candidate = rule.anchor + rule.unit.delta(rule.count * step)
    return candidate


def _next_monthly(rule: MonthlyRule, anchor: date) -> date:
    following = anchor.replace(day=1) + relativedelta(months=1)
    return _clamped(following.year, following.month, rule.day)


def _next_yearly(rule: YearlyRule, anchor: date) -> date:
    # Always the following year, even if the month/day is still ahead this year
    return _clamped(anchor.year + 1, rule.month, rule.day)


def _next_weekday(rule: WeekdayRule, anchor: date) -> date:
    # Same weekday counts as a full week ahead, never zero days
    offset = min((weekday - anchor.weekday()) % 7 or 7 for weekday in rule.weekdays)
    return anchor + timedelta(days=offset)


def next_occurrence(
    rule: RecurrenceRule | str | None, anchor: date, today: date
) -> date | None:
    """Compute the next start date for a recurring task.

    Args:
        rule: A parsed rule or the raw ``@recur`` payload
        anchor: The task's current start date, or today if it has none
        today: The current calendar day

    Returns:
        The next start date, strictly after ``anchor`` (strictly after
        ``today`` for anchored intervals), or None if the rule is malformed
    """
    if rule is None or isinstance(rule, str):
        rule = parse_rule(rule)
        if rule is None:
            return None

    # Steps past year 9999 cannot be represented; the task stops recurring
    try:
        if isinstance(rule, IntervalRule):
            return _next_interval(rule, anchor)
        if isinstance(rule, AnchoredIntervalRule):
            return _next_anchored(rule, today)
        if isinstance(rule, MonthlyRule):
            return _next_monthly(rule, anchor)
        if isinstance(rule, YearlyRule):
            return _next_yearly(rule, anchor)
        return _next_weekday(rule, anchor)
    except (OverflowError, ValueError):
        return _malformed(str(rule))
