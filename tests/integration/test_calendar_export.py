"""
Integration tests for CalendarExportService.

Records live in the sqlite sleep table on an in-memory DB; the calendar is
an AsyncMock.
"""
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlmodel import Session, select

from sleepsync.analysis.weeks import single_day_boundaries, week_boundaries
from sleepsync.calendar.events import CalendarSelector
from sleepsync.db.table import SqlSleepTable
from sleepsync.models.night import NightRecord
from sleepsync.models.sync import SyncLog
from sleepsync.sync.calendar_export import CalendarExportService
from sleepsync.sync.request import MODE_DATE, RunRequest

WEEK_25 = week_boundaries(2025, 25)
SELECTOR = CalendarSelector(normal_wake_up_calendar_id="cal-normal", sleep_in_calendar_id="cal-late")


def _record(night: date, source_id: str, wake_category: str = "Normal Wake Up", **kw) -> NightRecord:
    nxt = date.fromordinal(night.toordinal() + 1)
    return NightRecord(
        source_id=source_id,
        night_of=night,
        oura_day=nxt,
        bedtime=f"{night.isoformat()}T23:00:00-04:00",
        wake_time=f"{nxt.isoformat()}T06:30:00-04:00",
        wake_category=wake_category,
        sleep_duration_hours=7.0,
        efficiency=90,
        **kw,
    )


@pytest.fixture
def table(engine):
    return SqlSleepTable(engine)


@pytest_asyncio.fixture
async def seeded(table):
    await table.insert(_record(date(2025, 6, 16), "sleep-0616"))
    await table.insert(_record(date(2025, 6, 17), "sleep-0617", "Sleep In"))
    await table.insert(_record(date(2025, 6, 18), "sleep-0618", calendar_created=True))
    await table.insert(_record(date(2025, 6, 23), "sleep-0623"))
    return table


@pytest.fixture
def calendar():
    client = AsyncMock()
    client.create_event = AsyncMock(side_effect=lambda body, calendar_id: f"evt-{body['start']['dateTime'][:10]}")
    return client


def _flags(engine):
    with Session(engine) as s:
        return {r.source_id: r.calendar_created for r in s.exec(select(NightRecord)).all()}


class TestExport:
    @pytest.mark.asyncio
    async def test_creates_events_for_unexported_records_in_range(self, seeded, calendar, engine):
        report = await CalendarExportService(seeded, calendar, SELECTOR).export(WEEK_25)

        assert report.total == 2
        assert report.created == 2
        assert report.failures == []
        assert _flags(engine) == {
            "sleep-0616": True, "sleep-0617": True, "sleep-0618": True, "sleep-0623": False,
        }

    @pytest.mark.asyncio
    async def test_routes_by_wake_category(self, seeded, calendar):
        await CalendarExportService(seeded, calendar, SELECTOR).export(WEEK_25)

        routed = {
            call.args[0]["start"]["dateTime"][:10]: call.args[1]
            for call in calendar.create_event.await_args_list
        }
        assert routed == {"2025-06-16": "cal-normal", "2025-06-17": "cal-late"}

    @pytest.mark.asyncio
    async def test_event_spans_the_sleep(self, seeded, calendar):
        await CalendarExportService(seeded, calendar, SELECTOR).export(single_day_boundaries(date(2025, 6, 16)))

        body = calendar.create_event.await_args.args[0]
        assert body["start"] == {"dateTime": "2025-06-16T23:00:00-04:00"}
        assert body["end"] == {"dateTime": "2025-06-17T06:30:00-04:00"}
        assert body["summary"] == "Sleep - 7hrs (90% efficiency)"

    @pytest.mark.asyncio
    async def test_rerun_creates_nothing(self, seeded, calendar):
        service = CalendarExportService(seeded, calendar, SELECTOR)
        await service.export(WEEK_25)
        report = await service.export(WEEK_25)

        assert report.total == 0
        assert calendar.create_event.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_event_leaves_record_unmarked(self, seeded, calendar, engine):
        calendar.create_event = AsyncMock(side_effect=[RuntimeError("403 forbidden"), "evt-2"])
        service = CalendarExportService(seeded, calendar, SELECTOR)

        report = await service.export(WEEK_25)

        assert report.created == 1
        assert report.failures[0][0] == "night of 2025-06-16 (sleep-0616)"
        assert "403 forbidden" in report.failures[0][1]
        assert _flags(engine)["sleep-0616"] is False
        assert _flags(engine)["sleep-0617"] is True

        calendar.create_event = AsyncMock(return_value="evt-3")
        retry = await service.export(WEEK_25)
        assert retry.total == 1
        assert retry.created == 1


class TestMarkAfterCreate:
    @pytest.mark.asyncio
    async def test_event_created_before_record_marked(self):
        table = AsyncMock()
        table.query.return_value = [_record(date(2025, 6, 16), "sleep-0616", table_id="p1")]
        calendar = AsyncMock()
        calendar.create_event.return_value = "evt-1"
        order = MagicMock()
        order.attach_mock(calendar.create_event, "create_event")
        order.attach_mock(table.mark_calendar_created, "mark_calendar_created")

        await CalendarExportService(table, calendar, SELECTOR).export(WEEK_25)

        assert [c[0] for c in order.mock_calls] == ["create_event", "mark_calendar_created"]
        table.mark_calendar_created.assert_awaited_once_with("p1")

    @pytest.mark.asyncio
    async def test_mark_failure_is_reported_per_record(self):
        table = AsyncMock()
        table.query.return_value = [
            _record(date(2025, 6, 16), "sleep-0616", table_id="p1"),
            _record(date(2025, 6, 17), "sleep-0617", table_id="p2"),
        ]
        table.mark_calendar_created.side_effect = [RuntimeError("conflict"), None]
        calendar = AsyncMock()
        calendar.create_event.side_effect = ["evt-1", "evt-2"]

        report = await CalendarExportService(table, calendar, SELECTOR).export(WEEK_25)

        assert report.created == 1
        assert "evt-1 created but record not marked" in report.failures[0][1]

    @pytest.mark.asyncio
    async def test_already_marked_rows_skipped_even_if_returned(self):
        table = AsyncMock()
        table.query.return_value = [_record(date(2025, 6, 16), "sleep-0616", table_id="p1", calendar_created=True)]
        calendar = AsyncMock()

        report = await CalendarExportService(table, calendar, SELECTOR).export(WEEK_25)

        assert report.total == 0
        calendar.create_event.assert_not_awaited()


class TestExportRequest:
    @pytest.mark.asyncio
    async def test_unconfirmed_request_is_cancelled(self, seeded, calendar):
        request = RunRequest(mode=MODE_DATE, year=2025, night_date="16-06-25")
        report = await CalendarExportService(seeded, calendar, SELECTOR).export(request)
        assert report.cancelled is True
        calendar.create_event.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_run_is_logged(self, seeded, calendar, engine):
        request = RunRequest(mode=MODE_DATE, year=2025, night_date="16-06-25", confirmed=True)
        await CalendarExportService(seeded, calendar, SELECTOR, engine=engine).export(request)

        with Session(engine) as s:
            log = s.exec(select(SyncLog)).one()
        assert log.kind == "calendar"
        assert log.status == "success"
        assert log.records_saved == 1
