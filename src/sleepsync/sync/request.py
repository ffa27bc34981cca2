"""
Run requests: the fully-formed answer to "which nights, and go ahead?".

The CLI (interactive or flags) produces a RunRequest; the services only
ever see the request, never a prompt.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from sleepsync.analysis.weeks import (
    NightRange,
    parse_compact_date,
    single_day_boundaries,
    week_boundaries,
)
from sleepsync.errors import InvalidSelection, InvalidWeekNumber

MODE_DATE = "date"
MODE_WEEK = "week"


@dataclass
class RunRequest:
    mode: str  # MODE_DATE or MODE_WEEK
    year: int
    week_number: Optional[int] = None
    night_date: Optional[Union[str, date]] = None  # date or "DD-MM-YY"
    confirmed: bool = False

    def resolve_scope(self) -> NightRange:
        """
        Turn the request into a night range.

        Raises:
            InvalidSelection: unknown mode or missing value for the mode.
            InvalidWeekNumber / InvalidDateFormat: bad value.
        """
        if self.mode == MODE_DATE:
            if self.night_date is None:
                raise InvalidSelection("A night-of date is required for date mode")
            night = self.night_date
            if isinstance(night, str):
                night = parse_compact_date(night)
            return single_day_boundaries(night)

        if self.mode == MODE_WEEK:
            if self.week_number is None:
                raise InvalidWeekNumber("A week number is required for week mode")
            return week_boundaries(self.year, self.week_number)

        raise InvalidSelection(f"Unknown selection mode {self.mode!r}; use 'date' or 'week'")


def parse_week_number(text: str) -> int:
    """Parse a typed week number, e.g. "25"."""
    try:
        return int(str(text).strip())
    except ValueError as exc:
        raise InvalidWeekNumber(f"Invalid week number {text!r}") from exc


def as_night_range(scope: Union[RunRequest, NightRange]) -> NightRange:
    if isinstance(scope, RunRequest):
        return scope.resolve_scope()
    return scope
