"""Calendar event content for a NightRecord."""
from dataclasses import dataclass
from typing import Any, Dict

from sleepsync.analysis.sessions import WakeCategory
from sleepsync.models.night import NightRecord


@dataclass(frozen=True)
class CalendarSelector:
    """Maps a wake category onto a destination calendar id."""
    normal_wake_up_calendar_id: str
    sleep_in_calendar_id: str

    @classmethod
    def from_settings(cls, settings) -> "CalendarSelector":
        return cls(
            normal_wake_up_calendar_id=settings.normal_wake_up_calendar_id,
            sleep_in_calendar_id=settings.sleep_in_calendar_id,
        )

    def calendar_for(self, wake_category: str) -> str:
        if wake_category == WakeCategory.NORMAL_WAKE_UP.value:
            return self.normal_wake_up_calendar_id
        return self.sleep_in_calendar_id


def _fmt_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_event_title(record: NightRecord) -> str:
    return (
        f"Sleep - {_fmt_number(record.sleep_duration_hours)}hrs "
        f"({_fmt_number(record.efficiency or 0)}% efficiency)"
    )


def format_event_description(record: NightRecord) -> str:
    lines = [
        f"😴 Night of {record.night_of.isoformat()}",
        f"⏱️ Duration: {_fmt_number(record.sleep_duration_hours)} hours",
        f"📊 Efficiency: {_fmt_number(record.efficiency or 0)}%",
        f"⭐ Sleep Score: {record.sleep_score}",
        "",
        "🛌 Sleep Stages:",
        f"• Deep Sleep: {record.deep_sleep_minutes} min",
        f"• REM Sleep: {record.rem_sleep_minutes} min",
        f"• Light Sleep: {record.light_sleep_minutes} min",
        f"• Awake Time: {record.awake_minutes} min",
        "",
        "❤️ Biometrics:",
        f"• Avg Heart Rate: {_fmt_number(record.avg_hr)} bpm",
        f"• Low Heart Rate: {record.low_hr} bpm",
        f"• HRV: {_fmt_number(record.hrv)} ms",
        f"• Respiratory Rate: {_fmt_number(record.respiratory_rate)} breaths/min",
        "",
        f"🔗 Sleep ID: {record.source_id}",
    ]
    return "\n".join(lines)


def build_event_body(record: NightRecord) -> Dict[str, Any]:
    """Google Calendar events.insert() body spanning bedtime to wake time."""
    return {
        "summary": format_event_title(record),
        "description": format_event_description(record),
        "start": {"dateTime": record.bedtime_at.isoformat()},
        "end": {"dateTime": record.wake_time_at.isoformat()},
    }
