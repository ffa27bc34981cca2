"""
CalendarExportService: turns saved NightRecords into calendar events, once.

For each record in the range with calendar_created = False:
  1. create the event on the calendar picked by its wake category
  2. only then flip calendar_created on the table row

Marking after the event exists means a crash in between can at worst
produce one duplicate event on the next run, never a silently lost one.
Records that are already marked are never queried, so re-running a week
creates nothing new.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from sleepsync.analysis.weeks import NightRange
from sleepsync.calendar.events import CalendarSelector, build_event_body
from sleepsync.db.runlog import finish_run, start_run
from sleepsync.errors import PerRecordExportError
from sleepsync.models.night import NightRecord
from sleepsync.sync.request import RunRequest, as_night_range

logger = logging.getLogger(__name__)


@dataclass
class CalendarReport:
    night_range: NightRange
    total: int = 0
    created: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)
    cancelled: bool = False

    @property
    def failed(self) -> int:
        return len(self.failures)


class CalendarExportService:
    """Orchestrates sleep table → calendar export for one night range."""

    def __init__(self, table, calendar, selector: CalendarSelector, engine=None):
        """
        Args:
            table: NotionSleepTable / SqlSleepTable (or AsyncMock in tests).
            calendar: GoogleCalendarClient (or AsyncMock in tests).
            selector: Wake category → calendar id mapping.
            engine: Optional SQLAlchemy engine for SyncLog rows.
        """
        self.table = table
        self.calendar = calendar
        self.selector = selector
        self.engine = engine

    async def export(self, scope: Union[RunRequest, NightRange]) -> CalendarReport:
        """
        Create one calendar event per not-yet-exported record in `scope`.

        Raises:
            ValidationError: if the request cannot be resolved.
        """
        night_range = as_night_range(scope)
        report = CalendarReport(night_range=night_range)
        if isinstance(scope, RunRequest) and not scope.confirmed:
            logger.info("Calendar export for %s not confirmed; nothing done", night_range.label)
            report.cancelled = True
            return report

        log = start_run(self.engine, "calendar", night_range)
        try:
            records = await self.table.query(night_range, calendar_created=False)
            pending = [r for r in records if not r.calendar_created]
            report.total = len(pending)
            if not pending:
                logger.info("No sleep records without calendar events for %s", night_range.label)

            for i, record in enumerate(pending, start=1):
                try:
                    await self._export_one(record)
                except PerRecordExportError as exc:
                    logger.warning("[%d/%d] Failed to create calendar event for %s", i, len(pending), exc)
                    report.failures.append((exc.identifier, exc.message))
                    continue
                report.created += 1
        except Exception as exc:
            finish_run(
                self.engine, log, status="error", saved=report.created,
                failed=report.failed, error_message=str(exc),
            )
            raise

        finish_run(
            self.engine, log, status="partial" if report.failures else "success",
            saved=report.created, failed=report.failed,
        )
        logger.info("Created %d/%d calendar events for %s", report.created, report.total, night_range.label)
        return report

    async def _export_one(self, record: NightRecord) -> str:
        identifier = f"night of {record.night_of} ({record.source_id})"
        calendar_id = self.selector.calendar_for(record.wake_category)
        try:
            event_id = await self.calendar.create_event(build_event_body(record), calendar_id)
        except Exception as exc:
            raise PerRecordExportError(identifier, f"event not created: {exc}") from exc

        try:
            await self.table.mark_calendar_created(record.table_id)
        except Exception as exc:
            raise PerRecordExportError(
                identifier, f"event {event_id} created but record not marked: {exc}"
            ) from exc
        record.calendar_created = True
        return event_id
