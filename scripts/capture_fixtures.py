"""
Capture real Oura API responses and save them as test fixtures.

Run this script with OURA_ACCESS_TOKEN set (or in .env):

    python scripts/capture_fixtures.py --week 25 [--year 2025]

Outputs (overwrite tests/fixtures/):
    oura_sleep.json         /v2/usercollection/sleep for the week's fetch window
    oura_daily_sleep.json   /v2/usercollection/daily_sleep for the same window

Session ids and timestamps are kept as returned, so review the files before
committing them.
"""
import argparse
import asyncio
import json
import sys
from datetime import date
from pathlib import Path

# Allow running from repo root without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sleepsync.analysis.fetch_window import fetch_window_for
from sleepsync.analysis.weeks import week_boundaries
from sleepsync.config import get_settings
from sleepsync.errors import SleepSyncError
from sleepsync.oura.client import OuraClient

FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "fixtures"


def _save(name: str, items: list) -> None:
    path = FIXTURES_DIR / name
    path.write_text(json.dumps({"data": items, "next_token": None}, indent=2))
    print(f"  ✅ Saved {path} ({len(items)} items)")


async def capture(year: int, week_number: int) -> None:
    settings = get_settings()
    if not settings.oura_access_token:
        print("❌ OURA_ACCESS_TOKEN is not set")
        sys.exit(1)

    week = week_boundaries(year, week_number)
    window = fetch_window_for(week)
    print(f"🔍 {week.label}: Oura days {window.start_str} to {window.end_str}")

    async with OuraClient(settings.oura_access_token, base_url=settings.oura_base_url) as oura:
        sessions = await oura.get_raw_sleep_sessions(window.start_str, window.end_str)
        daily = await oura.get_daily_sleep(window.start_str, window.end_str)

    FIXTURES_DIR.mkdir(parents=True, exist_ok=True)
    _save("oura_sleep.json", sessions)
    _save("oura_daily_sleep.json", daily)


def main() -> None:
    parser = argparse.ArgumentParser(description="Capture real Oura API fixtures")
    parser.add_argument("--week", type=int, required=True, help="Week number (1-52)")
    parser.add_argument("--year", type=int, default=date.today().year)
    args = parser.parse_args()
    try:
        asyncio.run(capture(args.year, args.week))
    except SleepSyncError as exc:
        print(f"❌ {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
