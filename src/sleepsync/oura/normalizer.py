"""
Oura API response normalizer.

Converts raw dicts from the Oura v2 usercollection endpoints into plain
Python values. No network access here; oura.client handles I/O.

  /v2/usercollection/sleep items:
    - id, day ("YYYY-MM-DD", the morning the session ended), type
    - bedtime_start / bedtime_end: ISO 8601 with the ring's UTC offset,
      e.g. "2025-06-16T23:12:30.000-04:00"
    - *_duration fields and awake_time in seconds

  /v2/usercollection/daily_sleep items:
    - day, score (0-100, may be null), contributors {...}
"""
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

from sleepsync.analysis.sessions import RawSleepSession


def parse_oura_datetime(s: str) -> datetime:
    """Parse an Oura timestamp, keeping its UTC offset.

    Handles a trailing "Z" and fractional seconds of any length.
    """
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    if "." in s:
        base, rest = s.split(".", 1)
        # keep the offset, drop the fraction
        offset_at = max(rest.find("+"), rest.find("-"))
        s = base + (rest[offset_at:] if offset_at >= 0 else "")
    return datetime.fromisoformat(s)


def parse_oura_day(s: str) -> date:
    return datetime.strptime(s, "%Y-%m-%d").date()


def _int_or_none(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def normalize_sleep_session(raw: Dict[str, Any]) -> RawSleepSession:
    """
    Normalize one /sleep item into a RawSleepSession.

    Raises:
        KeyError: if the item has no id, day or bedtime timestamps.
    """
    return RawSleepSession(
        id=str(raw["id"]),
        day=parse_oura_day(raw["day"]),
        type=raw.get("type") or "",
        bedtime_start=parse_oura_datetime(raw["bedtime_start"]),
        bedtime_end=parse_oura_datetime(raw["bedtime_end"]),
        total_sleep_seconds=_int_or_none(raw.get("total_sleep_duration")),
        deep_sleep_seconds=_int_or_none(raw.get("deep_sleep_duration")),
        rem_sleep_seconds=_int_or_none(raw.get("rem_sleep_duration")),
        light_sleep_seconds=_int_or_none(raw.get("light_sleep_duration")),
        awake_seconds=_int_or_none(raw.get("awake_time")),
        time_in_bed_seconds=_int_or_none(raw.get("time_in_bed")),
        efficiency=_int_or_none(raw.get("efficiency")),
        average_heart_rate=raw.get("average_heart_rate"),
        lowest_heart_rate=_int_or_none(raw.get("lowest_heart_rate")),
        average_hrv=raw.get("average_hrv"),
        average_breath=raw.get("average_breath"),
        raw=raw,
    )


def daily_scores_by_day(items: Iterable[Dict[str, Any]]) -> Dict[date, int]:
    """Map Oura bucket date -> daily sleep score. Items without a score are left out."""
    scores: Dict[date, int] = {}
    for item in items:
        score = item.get("score")
        day = item.get("day")
        if score is None or not day:
            continue
        scores[parse_oura_day(day)] = int(score)
    return scores
