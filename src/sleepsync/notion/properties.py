"""
NightRecord <-> Notion page property payloads.

Pure functions, no API access, so the mapping is testable on its own.

Database columns (property name -> Notion type):
  Long Sleep Name   title      "Monday, June 16, 2025 (ET)"
  Date              date       night of, "YYYY-MM-DD"
  Bedtime           rich_text  "10:30 PM"
  Wake Time         rich_text  "5:45 AM"
  Bedtime ISO       rich_text  full instant with offset
  Wake Time ISO     rich_text  full instant with offset
  Sleep Duration    number     hours, one decimal
  Sleep Score / Efficiency / Deep Sleep / REM Sleep / Light Sleep /
  Awake Time / Heart Rate Avg / Heart Rate Low / HRV / Respiratory Rate
                    number     (stage durations in minutes)
  Wake Category     select     "Normal Wake Up" | "Sleep In"
  Sleep ID          rich_text  Oura session id
  Oura Day          date       Oura bucket date
  Calendar Created  checkbox
"""
from datetime import date, datetime
from typing import Any, Dict, Optional

from sleepsync.models.night import NightRecord

_NUMBER_COLUMNS = {
    "Sleep Duration": "sleep_duration_hours",
    "Sleep Score": "sleep_score",
    "Efficiency": "efficiency",
    "Deep Sleep": "deep_sleep_minutes",
    "REM Sleep": "rem_sleep_minutes",
    "Light Sleep": "light_sleep_minutes",
    "Awake Time": "awake_minutes",
    "Heart Rate Avg": "avg_hr",
    "Heart Rate Low": "low_hr",
    "HRV": "hrv",
    "Respiratory Rate": "respiratory_rate",
}


def format_long_sleep_name(night_of: date, timezone_label: str = "ET") -> str:
    return f"{night_of:%A}, {night_of:%B} {night_of.day}, {night_of.year} ({timezone_label})"


def format_clock(instant: datetime) -> str:
    """12-hour clock without a leading zero: "10:30 PM", "5:45 AM"."""
    return instant.strftime("%I:%M %p").lstrip("0")


def _text(content: str) -> Dict[str, Any]:
    return {"rich_text": [{"text": {"content": content}}]}


def _plain_text(prop: Optional[Dict[str, Any]]) -> Optional[str]:
    if not prop:
        return None
    parts = prop.get("rich_text") or prop.get("title") or []
    if not parts:
        return None
    return "".join(p.get("plain_text") or p.get("text", {}).get("content", "") for p in parts)


def _number(prop: Optional[Dict[str, Any]]) -> Optional[float]:
    if not prop:
        return None
    return prop.get("number")


def _date(prop: Optional[Dict[str, Any]]) -> Optional[date]:
    value = ((prop or {}).get("date") or {}).get("start")
    if not value:
        return None
    return datetime.strptime(value[:10], "%Y-%m-%d").date()


def record_to_properties(record: NightRecord, timezone_label: str = "ET") -> Dict[str, Any]:
    """Build the `properties` payload for pages.create()."""
    bedtime = record.bedtime_at
    wake_time = record.wake_time_at

    properties: Dict[str, Any] = {
        "Long Sleep Name": {
            "title": [{"text": {"content": format_long_sleep_name(record.night_of, timezone_label)}}]
        },
        "Date": {"date": {"start": record.night_of.isoformat()}},
        "Bedtime": _text(format_clock(bedtime)),
        "Wake Time": _text(format_clock(wake_time)),
        "Bedtime ISO": _text(record.bedtime),
        "Wake Time ISO": _text(record.wake_time),
        "Wake Category": {"select": {"name": record.wake_category}},
        "Sleep ID": _text(record.source_id),
        "Calendar Created": {"checkbox": record.calendar_created},
    }
    if record.oura_day is not None:
        properties["Oura Day"] = {"date": {"start": record.oura_day.isoformat()}}
    for column, attr in _NUMBER_COLUMNS.items():
        properties[column] = {"number": getattr(record, attr)}
    return properties


def page_to_record(page: Dict[str, Any]) -> NightRecord:
    """Rebuild a NightRecord from a page returned by databases.query()."""
    props = page.get("properties", {})

    numbers = {}
    for column, attr in _NUMBER_COLUMNS.items():
        value = _number(props.get(column))
        if value is not None:
            numbers[attr] = value
    # Integer columns come back from Notion as floats
    for attr in ("sleep_score", "efficiency", "deep_sleep_minutes", "rem_sleep_minutes",
                 "light_sleep_minutes", "awake_minutes", "low_hr"):
        if attr in numbers:
            numbers[attr] = int(numbers[attr])

    wake_category = ((props.get("Wake Category") or {}).get("select") or {}).get("name")

    return NightRecord(
        table_id=page["id"],
        source_id=_plain_text(props.get("Sleep ID")) or "",
        night_of=_date(props.get("Date")),
        oura_day=_date(props.get("Oura Day")),
        bedtime=_plain_text(props.get("Bedtime ISO")) or "",
        wake_time=_plain_text(props.get("Wake Time ISO")) or "",
        wake_category=wake_category or "Unknown",
        calendar_created=bool((props.get("Calendar Created") or {}).get("checkbox")),
        **numbers,
    )
