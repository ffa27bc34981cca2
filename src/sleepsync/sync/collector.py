"""
SleepCollectService: fetches Oura sessions and saves one NightRecord per night.

Flow for one run:
  1. Resolve the request into a night range (single night or ISO week)
  2. Expand it into the Oura fetch window (+1 / +2 days)
  3. Fetch sleep sessions and daily scores concurrently
  4. Keep long_sleep sessions whose night of is inside the range, build a
     NightRecord for each (daily score matched on Oura's day, 0 if absent)
  5. Insert each record into the table, one at a time
  6. Return a CollectReport

Validation and fetch errors propagate before anything is written. A record
that fails to insert is logged and counted; the loop always moves on.

Idempotency: source ids already present in the table for the range are
skipped, so re-running a week doesn't duplicate rows.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from sleepsync.analysis.fetch_window import FetchWindow, fetch_window_for
from sleepsync.analysis.night_of import NightRules
from sleepsync.analysis.sessions import (
    RawSleepSession,
    classify_wake,
    filter_in_window,
    filter_primary,
)
from sleepsync.analysis.weeks import NightRange
from sleepsync.db.runlog import finish_run, start_run
from sleepsync.errors import PerRecordExportError
from sleepsync.models.night import NightRecord
from sleepsync.oura.normalizer import daily_scores_by_day
from sleepsync.sync.request import RunRequest, as_night_range

logger = logging.getLogger(__name__)


@dataclass
class CollectReport:
    night_range: NightRange
    fetch_window: Optional[FetchWindow] = None
    fetched: int = 0  # sessions returned by Oura
    total: int = 0  # candidates after filtering
    saved: int = 0
    skipped: int = 0  # already in the table
    failures: List[Tuple[str, str]] = field(default_factory=list)
    cancelled: bool = False

    @property
    def filtered_out(self) -> int:
        return self.fetched - self.total

    @property
    def failed(self) -> int:
        return len(self.failures)


def _minutes(seconds: Optional[int]) -> int:
    return int(round((seconds or 0) / 60))


def build_night_record(
    session: RawSleepSession,
    rules: NightRules,
    sleep_score: Optional[int] = None,
) -> NightRecord:
    """Derive the NightRecord for one primary session."""
    return NightRecord(
        source_id=session.id,
        night_of=rules.night_of(session.bedtime_start),
        oura_day=session.day,
        bedtime=session.bedtime_start.isoformat(),
        wake_time=session.bedtime_end.isoformat(),
        wake_category=classify_wake(
            session.bedtime_end, threshold_hour=rules.wake_threshold_hour, tz=rules.tz
        ).value,
        sleep_duration_hours=round((session.total_sleep_seconds or 0) / 3600, 1),
        efficiency=session.efficiency,
        sleep_score=sleep_score or 0,
        deep_sleep_minutes=_minutes(session.deep_sleep_seconds),
        rem_sleep_minutes=_minutes(session.rem_sleep_seconds),
        light_sleep_minutes=_minutes(session.light_sleep_seconds),
        awake_minutes=_minutes(session.awake_seconds),
        avg_hr=session.average_heart_rate or 0,
        low_hr=session.lowest_heart_rate or 0,
        hrv=session.average_hrv or 0,
        respiratory_rate=session.average_breath or 0,
        calendar_created=False,
    )


class SleepCollectService:
    """Orchestrates Oura → sleep table collection for one night range."""

    def __init__(self, source, table, rules: Optional[NightRules] = None, engine=None):
        """
        Args:
            source: OuraClient instance (or AsyncMock in tests).
            table: NotionSleepTable / SqlSleepTable (or AsyncMock in tests).
            rules: Night-of cutoff and wake threshold.
            engine: Optional SQLAlchemy engine; when given, each run is recorded
                in the SyncLog table.
        """
        self.source = source
        self.table = table
        self.rules = rules or NightRules()
        self.engine = engine

    async def collect(
        self,
        scope: Union[RunRequest, NightRange],
        include_scores: bool = True,
    ) -> CollectReport:
        """
        Fetch, filter and save every night in `scope`.

        Raises:
            ValidationError: if the request cannot be resolved.
            ConnectivityError: if Oura cannot be read (nothing has been written).
        """
        night_range = as_night_range(scope)
        report = CollectReport(night_range=night_range)
        if isinstance(scope, RunRequest) and not scope.confirmed:
            logger.info("Collection for %s not confirmed; nothing done", night_range.label)
            report.cancelled = True
            return report

        log = start_run(self.engine, "collect", night_range)
        try:
            candidates = await self._fetch_candidates(report, include_scores)
            await self._save_all(report, candidates)
        except Exception as exc:
            finish_run(
                self.engine, log, status="error", saved=report.saved,
                skipped=report.skipped, failed=report.failed, error_message=str(exc),
            )
            raise

        finish_run(
            self.engine, log, status="partial" if report.failures else "success",
            saved=report.saved, skipped=report.skipped, failed=report.failed,
        )
        logger.info(
            "Collected %s: %d saved, %d skipped, %d failed of %d",
            night_range.label, report.saved, report.skipped, report.failed, report.total,
        )
        return report

    # ─── Internal helpers ─────────────────────────────────────────────────────

    async def _fetch_candidates(
        self, report: CollectReport, include_scores: bool
    ) -> List[NightRecord]:
        window = fetch_window_for(report.night_range)
        report.fetch_window = window
        logger.info(
            "Fetching Oura days %s to %s for %s",
            window.start_str, window.end_str, report.night_range.label,
        )

        if include_scores:
            sessions, daily = await asyncio.gather(
                self.source.get_sleep_sessions(window.start_str, window.end_str),
                self.source.get_daily_sleep(window.start_str, window.end_str),
            )
            scores: Dict = daily_scores_by_day(daily)
        else:
            sessions = await self.source.get_sleep_sessions(window.start_str, window.end_str)
            scores = {}

        report.fetched = len(sessions)
        in_range = filter_in_window(filter_primary(sessions), report.night_range, self.rules)
        report.total = len(in_range)
        return [build_night_record(s, self.rules, scores.get(s.day)) for s in in_range]

    async def _save_all(self, report: CollectReport, candidates: List[NightRecord]) -> None:
        existing = await self.table.query(report.night_range, calendar_created=None)
        seen = {r.source_id for r in existing}

        for i, record in enumerate(candidates, start=1):
            if record.source_id in seen:
                logger.info(
                    "[%d/%d] Skipping night of %s (sleep %s already saved)",
                    i, len(candidates), record.night_of, record.source_id,
                )
                report.skipped += 1
                continue
            try:
                await self._save_one(record)
            except PerRecordExportError as exc:
                logger.warning("[%d/%d] Failed to save %s", i, len(candidates), exc)
                report.failures.append((exc.identifier, exc.message))
                continue
            seen.add(record.source_id)
            report.saved += 1
            logger.info(
                "[%d/%d] Saved night of %s from Oura day %s: %shrs | %s%% efficiency | %s",
                i, len(candidates), record.night_of, record.oura_day,
                record.sleep_duration_hours, record.efficiency, record.wake_category,
            )

    async def _save_one(self, record: NightRecord) -> str:
        try:
            return await self.table.insert(record)
        except Exception as exc:
            raise PerRecordExportError(record.source_id, str(exc)) from exc
