"""
Sleep-session filtering and wake-time classification.

Pipeline applied to a raw fetch:
  1. filter_primary()    drop naps/rests; only the main night's sleep counts
  2. filter_in_window()  drop sessions whose night of is outside the target
                         range (the fetch window over-fetches on purpose)
  3. classify_wake()     label each survivor by wake time; routing only
"""
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from sleepsync.analysis.night_of import (
    DEFAULT_WAKE_THRESHOLD_HOUR,
    NightRules,
    to_local,
)
from sleepsync.analysis.weeks import NightRange

PRIMARY_SLEEP_TYPE = "long_sleep"


class WakeCategory(str, Enum):
    NORMAL_WAKE_UP = "Normal Wake Up"
    EARLY_RISER = "Normal Wake Up"  # alias of NORMAL_WAKE_UP
    SLEEP_IN = "Sleep In"


@dataclass(frozen=True)
class RawSleepSession:
    """One sleep period as reported by the tracker."""
    id: str
    day: date  # Oura's bucket date (the morning), NOT the night of
    type: str
    bedtime_start: datetime
    bedtime_end: datetime

    total_sleep_seconds: Optional[int] = None
    deep_sleep_seconds: Optional[int] = None
    rem_sleep_seconds: Optional[int] = None
    light_sleep_seconds: Optional[int] = None
    awake_seconds: Optional[int] = None
    time_in_bed_seconds: Optional[int] = None
    efficiency: Optional[int] = None
    average_heart_rate: Optional[float] = None
    lowest_heart_rate: Optional[int] = None
    average_hrv: Optional[float] = None
    average_breath: Optional[float] = None

    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_primary(self) -> bool:
        return self.type == PRIMARY_SLEEP_TYPE


def filter_primary(sessions: Iterable[RawSleepSession]) -> List[RawSleepSession]:
    """Keep only long_sleep sessions. Naps must never be reconciled as nights."""
    return [s for s in sessions if s.is_primary]


def filter_in_window(
    sessions: Iterable[RawSleepSession],
    night_range: NightRange,
    rules: Optional[NightRules] = None,
) -> List[RawSleepSession]:
    """Keep sessions whose resolved night of falls inside night_range (inclusive)."""
    rules = rules or NightRules()
    return [s for s in sessions if rules.night_of(s.bedtime_start) in night_range]


def classify_wake(
    bedtime_end: datetime,
    threshold_hour: int = DEFAULT_WAKE_THRESHOLD_HOUR,
    tz: Optional[tzinfo] = None,
) -> WakeCategory:
    """Wake-ups before threshold_hour (local) are normal, anything later is a sleep-in."""
    if to_local(bedtime_end, tz).hour < threshold_hour:
        return WakeCategory.NORMAL_WAKE_UP
    return WakeCategory.SLEEP_IN
