"""Night-of sleep record: one row per primary sleep session."""
from datetime import date, datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from sleepsync.models.sync import utc_now


class NightRecord(SQLModel, table=True):
    """A sleep session attributed to the night it began.

    Bedtime and wake time are kept as ISO 8601 strings with their UTC offset
    so the instant survives storage backends that drop tzinfo (SQLite, Notion
    rich text).
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    table_id: Optional[str] = Field(default=None, index=True)  # Notion page id or str(id)
    source_id: str = Field(index=True)  # Oura sleep session id
    night_of: date = Field(index=True)  # the night of (date you went to bed)
    oura_day: Optional[date] = None  # Oura's bucket date, usually night_of + 1

    bedtime: str
    wake_time: str
    wake_category: str  # WakeCategory value

    sleep_duration_hours: float = 0.0
    efficiency: Optional[int] = None
    sleep_score: int = 0
    deep_sleep_minutes: int = 0
    rem_sleep_minutes: int = 0
    light_sleep_minutes: int = 0
    awake_minutes: int = 0

    avg_hr: float = 0.0
    low_hr: int = 0
    hrv: float = 0.0
    respiratory_rate: float = 0.0

    calendar_created: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def bedtime_at(self) -> datetime:
        return datetime.fromisoformat(self.bedtime)

    @property
    def wake_time_at(self) -> datetime:
        return datetime.fromisoformat(self.wake_time)
