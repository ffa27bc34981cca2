"""Tests for DB models."""
from datetime import date, datetime, timedelta, timezone

from sqlmodel import Session, select

from sleepsync.models.night import NightRecord
from sleepsync.models.sync import SyncLog


class TestNightRecord:
    def test_defaults(self):
        record = NightRecord(
            source_id="x",
            night_of=date(2025, 6, 16),
            bedtime="2025-06-16T23:00:00-04:00",
            wake_time="2025-06-17T06:30:00-04:00",
            wake_category="Normal Wake Up",
        )
        assert record.calendar_created is False
        assert record.table_id is None
        assert record.efficiency is None
        assert record.sleep_score == 0
        assert record.oura_day is None

    def test_instants_keep_their_offset(self, night_record):
        assert night_record.bedtime_at.utcoffset() == timedelta(hours=-4)
        assert night_record.bedtime_at.hour == 23
        assert night_record.wake_time_at == datetime.fromisoformat("2025-06-17T06:40:00-04:00")

    def test_persists_and_retrieves_from_db(self, test_session: Session, night_record):
        test_session.add(night_record)
        test_session.commit()

        row = test_session.exec(select(NightRecord).where(NightRecord.source_id == "sleep-0616")).one()
        assert row.night_of == date(2025, 6, 16)
        assert row.bedtime == "2025-06-16T23:05:00-04:00"
        assert row.bedtime_at.utcoffset() == timedelta(hours=-4)
        assert row.avg_hr == 54.25


class TestSyncLog:
    def test_defaults(self):
        log = SyncLog()
        assert log.kind == "collect"
        assert log.status == "running"
        assert log.records_saved == 0
        assert log.finished_at is None

    def test_persists(self, test_session: Session):
        test_session.add(SyncLog(kind="calendar", night_start=date(2025, 6, 16), night_end=date(2025, 6, 22)))
        test_session.commit()
        row = test_session.exec(select(SyncLog)).one()
        assert row.kind == "calendar"
        assert row.night_end == date(2025, 6, 22)


class TestTimestamps:
    def test_defaults_are_timezone_aware(self, night_record):
        assert night_record.created_at.tzinfo is not None
        assert SyncLog().started_at.utcoffset() == timedelta(0)

    def test_aware_timestamps_persist(self, test_session: Session, night_record):
        log = SyncLog(kind="collect", started_at=datetime.now(timezone.utc))
        log.finished_at = datetime.now(timezone.utc)
        test_session.add(log)
        test_session.add(night_record)
        test_session.commit()

        assert test_session.exec(select(SyncLog)).one().finished_at is not None
        assert test_session.exec(select(NightRecord)).one().created_at is not None
