"""
Night ranges: ISO weeks, single nights, and the compact DD-MM-YY date format.

A night range is a pair of inclusive calendar dates. Each date names a
"night of" (the evening the sleeper went to bed), never the morning the
tracker files the session under. Instants derived from a range run from
00:00 on the first day to 23:59:59.999999 on the last.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List

from sleepsync.errors import InvalidDateFormat, InvalidWeekNumber

MIN_WEEK = 1
MAX_WEEK = 52
DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class NightRange:
    """Inclusive range of night-of dates."""
    start: date
    end: date

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.start, time.min)

    @property
    def end_at(self) -> datetime:
        return datetime.combine(self.end, time.max)

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    @property
    def label(self) -> str:
        if self.start == self.end:
            return f"Night of {self.start:%a %b %d %Y}"
        return f"{self.start:%a %b %d %Y} - {self.end:%a %b %d %Y}"

    def __contains__(self, day: object) -> bool:
        if isinstance(day, datetime):
            day = day.date()
        if not isinstance(day, date):
            return False
        return self.start <= day <= self.end


@dataclass(frozen=True)
class Week(NightRange):
    """A Monday-to-Sunday ISO week. end is always start + 6 days."""
    year: int = 0
    week_number: int = 0

    @property
    def label(self) -> str:
        return f"Week {self.week_number} ({self.start:%b %d} - {self.end:%b %d})"


def week_boundaries(year: int, week_number: int) -> Week:
    """
    Return the Monday-based ISO week `week_number` of `year`.

    Raises:
        InvalidWeekNumber: if week_number is not an int in 1..52.
    """
    if isinstance(week_number, bool) or not isinstance(week_number, int):
        raise InvalidWeekNumber(f"Week number must be an integer, got {week_number!r}")
    if not MIN_WEEK <= week_number <= MAX_WEEK:
        raise InvalidWeekNumber(
            f"Week number must be between {MIN_WEEK} and {MAX_WEEK}, got {week_number}"
        )
    monday = date.fromisocalendar(year, week_number, 1)
    return Week(
        start=monday,
        end=monday + timedelta(days=DAYS_PER_WEEK - 1),
        year=year,
        week_number=week_number,
    )


def single_day_boundaries(day: date) -> NightRange:
    """Return a range covering exactly one night."""
    if isinstance(day, datetime):
        day = day.date()
    return NightRange(start=day, end=day)


def parse_compact_date(text: str) -> date:
    """
    Parse "DD-MM-YY" into a date. Two-digit years map to 20YY.

    Raises:
        InvalidDateFormat: wrong token count, non-numeric fields, day outside
            1..31, month outside 1..12, or a date that does not exist.
    """
    if not isinstance(text, str):
        raise InvalidDateFormat(f"Expected a DD-MM-YY string, got {text!r}")

    parts = text.strip().split("-")
    if len(parts) != 3:
        raise InvalidDateFormat(f"Invalid date format {text!r}. Use DD-MM-YY (e.g. 15-03-25)")
    if not all(p.isdigit() for p in parts):
        raise InvalidDateFormat(f"Invalid date {text!r}: day, month and year must be numbers")

    day, month, year = (int(p) for p in parts)
    if not 1 <= day <= 31:
        raise InvalidDateFormat(f"Invalid day {day} in {text!r}")
    if not 1 <= month <= 12:
        raise InvalidDateFormat(f"Invalid month {month} in {text!r}")
    if year > 99:
        raise InvalidDateFormat(f"Invalid year {year} in {text!r}: use two digits")

    try:
        return date(2000 + year, month, day)
    except ValueError as exc:
        raise InvalidDateFormat(f"Invalid date {text!r}: {exc}") from exc


def week_options(year: int) -> List[Week]:
    """All selectable weeks of `year`, in order."""
    return [week_boundaries(year, n) for n in range(MIN_WEEK, MAX_WEEK + 1)]


def current_week_number(today: date) -> int:
    """ISO week number of `today`, clamped into the selectable range."""
    return min(max(today.isocalendar()[1], MIN_WEEK), MAX_WEEK)
