"""
Fetch-window expansion.

Oura files a sleep session under the morning it ended, one day after the
night of. To see every session whose night of lies in [night_start,
night_end] we ask the API for [night_start + 1, night_end + 2]: the +1
shifts onto Oura's day buckets, the extra trailing day catches sessions
that end very late the next morning.

The result over-fetches on purpose. Callers must narrow it back down with
sessions.filter_in_window() before exporting anything.
"""
from dataclasses import dataclass
from datetime import date, timedelta

from sleepsync.analysis.weeks import NightRange

API_START_OFFSET_DAYS = 1
API_END_OFFSET_DAYS = 2


@dataclass(frozen=True)
class FetchWindow:
    """Date range sent to the telemetry API (inclusive, Oura day buckets)."""
    api_start: date
    api_end: date

    @property
    def start_str(self) -> str:
        return self.api_start.isoformat()

    @property
    def end_str(self) -> str:
        return self.api_end.isoformat()


def expand_fetch_window(night_start: date, night_end: date) -> FetchWindow:
    """Map a night-of range onto the API day range that covers it."""
    return FetchWindow(
        api_start=night_start + timedelta(days=API_START_OFFSET_DAYS),
        api_end=night_end + timedelta(days=API_END_OFFSET_DAYS),
    )


def fetch_window_for(night_range: NightRange) -> FetchWindow:
    return expand_fetch_window(night_range.start, night_range.end)
