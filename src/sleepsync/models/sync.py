"""Run audit log model."""
from datetime import date, datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Timezone-aware UTC now."""
    return datetime.now(timezone.utc)


class SyncLog(SQLModel, table=True):
    """Records each collect / calendar run for audit and debugging."""

    id: Optional[int] = Field(default=None, primary_key=True)
    kind: str = "collect"  # "collect", "calendar"
    night_start: Optional[date] = None
    night_end: Optional[date] = None
    started_at: datetime = Field(default_factory=utc_now)
    finished_at: Optional[datetime] = None
    status: str = "running"  # "running", "success", "partial", "error"
    records_saved: int = 0
    records_skipped: int = 0
    records_failed: int = 0
    error_message: Optional[str] = None
