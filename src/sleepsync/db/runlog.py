"""SyncLog helpers shared by the collect and calendar services."""
import logging
from typing import Optional

from sqlmodel import Session

from sleepsync.analysis.weeks import NightRange
from sleepsync.models.sync import SyncLog, utc_now

logger = logging.getLogger(__name__)


def start_run(engine, kind: str, night_range: NightRange) -> Optional[SyncLog]:
    """Insert a "running" SyncLog row. No-op (returns None) without an engine."""
    if engine is None:
        return None
    log = SyncLog(
        kind=kind,
        night_start=night_range.start,
        night_end=night_range.end,
        started_at=utc_now(),
        status="running",
    )
    with Session(engine) as s:
        s.add(log)
        s.commit()
        s.refresh(log)
    return log


def finish_run(
    engine,
    log: Optional[SyncLog],
    *,
    status: str,
    saved: int = 0,
    skipped: int = 0,
    failed: int = 0,
    error_message: Optional[str] = None,
) -> None:
    if engine is None or log is None:
        return
    with Session(engine) as s:
        db_log = s.get(SyncLog, log.id)
        if db_log is None:
            logger.warning("SyncLog %s not found; run status %r not recorded", log.id, status)
            return
        db_log.status = status
        db_log.finished_at = utc_now()
        db_log.records_saved = saved
        db_log.records_skipped = skipped
        db_log.records_failed = failed
        db_log.error_message = error_message
        s.add(db_log)
        s.commit()
