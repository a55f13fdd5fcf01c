"""Calendar clock used to evaluate start dates and recurrences."""

from datetime import date
from typing import Protocol


class Clock(Protocol):
    """Protocol for reading the current calendar day."""

    def today(self) -> date:
        """Return the current local calendar day."""
        ...


class SystemClock:
    """Clock backed by the local system date."""

    def today(self) -> date:
        return date.today()
