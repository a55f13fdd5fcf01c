"""Resolve date expressions to calendar dates."""

import logging
import re
from datetime import date, datetime, timedelta
from enum import Enum

logger = logging.getLogger(__name__)

ISO_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
RELATIVE_PATTERN = re.compile(r"^today\+(\d+)d$", re.IGNORECASE)


class DateOrder(Enum):
    """Result of comparing two calendar days."""

    BEFORE = -1
    SAME = 0
    AFTER = 1


def parse_iso_date(value: str) -> date | None:
    """Parse a leading YYYY-MM-DD, ignoring any time suffix.

    Impossible calendar values (2024-02-30, month 13) are rejected rather than
    rolled over into a neighbouring month.
    """
    match = ISO_PATTERN.match(value.strip())
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        logger.debug(f"[Dates] Invalid calendar date: {value!r}")
        return None


def resolve_expr(expr: str | None, today: date) -> date | None:
    """Resolve YYYY-MM-DD[Thh:mm] or today+Nd; anything else is None."""
    if not expr:
        return None

    iso = parse_iso_date(expr)
    if iso is not None:
        return iso

    relative = RELATIVE_PATTERN.match(expr.strip())
    if relative:
        try:
            return today + timedelta(days=int(relative.group(1)))
        except OverflowError:
            logger.debug(f"[Dates] Date expression out of range: {expr!r}")
            return None

    logger.debug(f"[Dates] Unparseable date expression: {expr!r}")
    return None


def _ymd(value: date) -> tuple[int, int, int]:
    return (value.year, value.month, value.day)


def compare_ymd(a: date | datetime, b: date | datetime) -> DateOrder:
    """Compare two values by calendar day only, ignoring time of day."""
    left, right = _ymd(a), _ymd(b)
    if left < right:
        return DateOrder.BEFORE
    if left > right:
        return DateOrder.AFTER
    return DateOrder.SAME
