"""Shared test fixtures."""
import json
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Generator, List

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel.metadata knows about them
from sleepsync.models.night import NightRecord  # noqa: F401
from sleepsync.models.sync import SyncLog  # noqa: F401
from sleepsync.analysis.sessions import RawSleepSession
from sleepsync.oura.normalizer import normalize_sleep_session

FIXTURES_DIR = Path(__file__).parent / "fixtures"

EDT = timezone(timedelta(hours=-4))


def load_fixture(name: str) -> dict:
    return json.loads((FIXTURES_DIR / name).read_text())


def make_session(
    session_id: str = "sleep-1",
    bedtime_start: datetime = datetime(2025, 6, 16, 23, 0, tzinfo=EDT),
    bedtime_end: datetime = datetime(2025, 6, 17, 6, 30, tzinfo=EDT),
    type: str = "long_sleep",
    day: date = None,
    **biometrics,
) -> RawSleepSession:
    """Build a RawSleepSession; day defaults to the date bedtime_end falls on."""
    return RawSleepSession(
        id=session_id,
        day=day or bedtime_end.date(),
        type=type,
        bedtime_start=bedtime_start,
        bedtime_end=bedtime_end,
        **biometrics,
    )


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="test_session")
def test_session_fixture(engine) -> Generator[Session, None, None]:
    """Provides a DB session connected to in-memory SQLite."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="raw_week_sessions")
def raw_week_sessions_fixture() -> List[dict]:
    """Oura /sleep items fetched for week 25 of 2025 (Oura days 06-17..06-24)."""
    return load_fixture("oura_sleep.json")["data"]


@pytest.fixture(name="raw_week_scores")
def raw_week_scores_fixture() -> List[dict]:
    return load_fixture("oura_daily_sleep.json")["data"]


@pytest.fixture(name="week_sessions")
def week_sessions_fixture(raw_week_sessions) -> List[RawSleepSession]:
    return [normalize_sleep_session(item) for item in raw_week_sessions]


@pytest.fixture(name="night_record")
def night_record_fixture() -> NightRecord:
    """An unsaved NightRecord for the night of 2025-06-16."""
    return NightRecord(
        source_id="sleep-0616",
        night_of=date(2025, 6, 16),
        oura_day=date(2025, 6, 17),
        bedtime="2025-06-16T23:05:00-04:00",
        wake_time="2025-06-17T06:40:00-04:00",
        wake_category="Normal Wake Up",
        sleep_duration_hours=7.0,
        efficiency=92,
        sleep_score=82,
        deep_sleep_minutes=90,
        rem_sleep_minutes=105,
        light_sleep_minutes=225,
        awake_minutes=35,
        avg_hr=54.25,
        low_hr=48,
        hrv=61,
        respiratory_rate=14.5,
    )
