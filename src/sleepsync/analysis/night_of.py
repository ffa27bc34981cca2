"""
Night-of resolution.

A session that starts in the small hours belongs to the previous evening:
going to bed at 02:30 on Tuesday is still "Monday night". The cutoff is
exclusive on the previous-day side, so a bedtime of exactly 06:00 is
attributed to the same day.

resolve_night_of() is the single source of night-of dates. Window
filtering, table rows, labels and the duplicate checks all go through it.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

DEFAULT_CUTOFF_HOUR = 6
DEFAULT_WAKE_THRESHOLD_HOUR = 7


@dataclass(frozen=True)
class NightRules:
    """Hour thresholds used to interpret a session, plus the tracker's timezone."""
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR
    wake_threshold_hour: int = DEFAULT_WAKE_THRESHOLD_HOUR
    tz: Optional[tzinfo] = None

    @classmethod
    def from_settings(cls, settings) -> "NightRules":
        return cls(
            cutoff_hour=settings.night_cutoff_hour,
            wake_threshold_hour=settings.wake_threshold_hour,
            tz=ZoneInfo(settings.timezone) if settings.timezone else None,
        )

    def night_of(self, bedtime_start: datetime) -> date:
        return resolve_night_of(bedtime_start, cutoff_hour=self.cutoff_hour, tz=self.tz)


def to_local(instant: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Express `instant` in the tracker's local time.

    Aware datetimes keep their own offset unless `tz` is given. Naive
    datetimes are assumed to already be local.
    """
    if tz is not None and instant.tzinfo is not None:
        return instant.astimezone(tz)
    return instant


def resolve_night_of(
    bedtime_start: datetime,
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
    tz: Optional[tzinfo] = None,
) -> date:
    """
    Return the calendar date of the night a session belongs to.

    Args:
        bedtime_start: When the session began.
        cutoff_hour: Local hours strictly before this go to the previous day.
        tz: Optional timezone to convert bedtime_start into first.
    """
    local = to_local(bedtime_start, tz)
    if local.hour < cutoff_hour:
        return local.date() - timedelta(days=1)
    return local.date()
