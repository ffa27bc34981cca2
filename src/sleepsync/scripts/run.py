"""
Command-line runs: collect sleep into the table, or export it to the calendar.

Usage:
    python -m sleepsync collect                     # interactive
    python -m sleepsync collect --week 25 --yes
    python -m sleepsync collect --date 15-03-25
    python -m sleepsync calendar --week 25 --yes
    python -m sleepsync check                       # connectivity only

Exit codes: 0 done or cancelled, 1 invalid input or failed connectivity,
2 finished but at least one record failed.
"""
import argparse
import asyncio
from datetime import date
from typing import List, Optional

from sleepsync.analysis.night_of import NightRules
from sleepsync.calendar.events import CalendarSelector
from sleepsync.config import Settings, get_settings
from sleepsync.errors import ConnectivityError, ValidationError
from sleepsync.sync.request import MODE_DATE, MODE_WEEK, RunRequest

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_PARTIAL = 2


def build_table(settings: Settings, engine):
    if settings.table_backend == "sqlite":
        from sleepsync.db.table import SqlSleepTable
        return SqlSleepTable(engine)
    if settings.table_backend == "notion":
        from sleepsync.notion.table import NotionSleepTable
        return NotionSleepTable(
            token=settings.notion_token,
            database_id=settings.notion_database_id,
            timezone_label=settings.timezone_label,
        )
    raise ValidationError(f"Unknown table backend {settings.table_backend!r}; use 'notion' or 'sqlite'")


def build_oura(settings: Settings):
    from sleepsync.oura.client import OuraClient
    return OuraClient(
        settings.oura_access_token,
        base_url=settings.oura_base_url,
        timeout=settings.http_timeout_seconds,
    )


def build_calendar(settings: Settings):
    from sleepsync.calendar.client import GoogleCalendarClient, build_credentials
    credentials = build_credentials(
        settings.google_client_id,
        settings.google_client_secret,
        settings.google_refresh_token,
    )
    return GoogleCalendarClient(credentials)


def request_from_args(args: argparse.Namespace) -> Optional[RunRequest]:
    """RunRequest from --date/--week flags, or None when neither was given."""
    if args.date and args.week is not None:
        raise ValidationError("Use either --date or --week, not both")
    if args.date:
        return RunRequest(mode=MODE_DATE, year=args.year, night_date=args.date, confirmed=args.yes)
    if args.week is not None:
        return RunRequest(mode=MODE_WEEK, year=args.year, week_number=args.week, confirmed=args.yes)
    return None


def _resolve_request(args: argparse.Namespace, action: str, show_oura_dates: bool) -> RunRequest:
    from sleepsync.scripts.prompts import confirm, print_summary, prompt_run_request

    request = request_from_args(args)
    if request is None:
        return prompt_run_request(action, args.year, show_oura_dates=show_oura_dates)
    request.resolve_scope()
    if not request.confirmed:
        print_summary(request, show_oura_dates=show_oura_dates)
        request.confirmed = confirm(f"Proceed with {action} for this period?")
    return request


def _print_failures(failures) -> None:
    for identifier, message in failures:
        print(f"   ❌ {identifier}: {message}")


async def _collect(args: argparse.Namespace, settings: Settings, engine) -> int:
    from sleepsync.sync.collector import SleepCollectService

    table = build_table(settings, engine)
    oura = build_oura(settings)
    try:
        print("Testing connections...")
        await oura.check_connection()
        await table.check_connection()

        request = _resolve_request(args, "collecting sleep data", show_oura_dates=True)
        if not request.confirmed:
            print("❌ Operation cancelled.")
            return EXIT_OK

        service = SleepCollectService(oura, table, NightRules.from_settings(settings), engine=engine)
        report = await service.collect(request, include_scores=not args.no_scores)
    finally:
        await oura.aclose()

    if report.total == 0:
        print("📭 No sleep sessions found for this period")
        return EXIT_OK
    print(f"\n✅ Successfully saved {report.saved}/{report.total} sleep sessions!")
    if report.skipped:
        print(f"ℹ️  Skipped {report.skipped} sessions already in the table")
    if report.filtered_out:
        print(f"ℹ️  Ignored {report.filtered_out} naps or sessions outside the period")
    if report.failures:
        _print_failures(report.failures)
        return EXIT_PARTIAL
    print("🎯 Next: run `python -m sleepsync calendar` to add them to your calendar")
    return EXIT_OK


async def _calendar(args: argparse.Namespace, settings: Settings, engine) -> int:
    from sleepsync.sync.calendar_export import CalendarExportService

    table = build_table(settings, engine)
    calendar = build_calendar(settings)
    selector = CalendarSelector.from_settings(settings)

    print("Testing connections...")
    await table.check_connection()
    await calendar.check_connection(
        [selector.normal_wake_up_calendar_id, selector.sleep_in_calendar_id]
    )

    request = _resolve_request(args, "creating calendar events", show_oura_dates=False)
    if not request.confirmed:
        print("❌ Operation cancelled.")
        return EXIT_OK

    service = CalendarExportService(table, calendar, selector, engine=engine)
    report = await service.export(request)

    if report.total == 0:
        print("📭 No sleep records found without calendar events for this period")
        print("💡 Try running `python -m sleepsync collect` first to gather sleep data")
        return EXIT_OK
    print(f"\n✅ Successfully created {report.created}/{report.total} calendar events!")
    if report.failures:
        _print_failures(report.failures)
        return EXIT_PARTIAL
    return EXIT_OK


async def _check(settings: Settings, engine) -> int:
    table = build_table(settings, engine)
    oura = build_oura(settings)
    try:
        await oura.check_connection()
    finally:
        await oura.aclose()
    await table.check_connection()
    await build_calendar(settings).check_connection(
        [settings.normal_wake_up_calendar_id, settings.sleep_in_calendar_id]
    )
    print("✅ All connections OK")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sleepsync", description="Oura → Notion → Google Calendar sleep sync")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("collect", "Save Oura sleep sessions to the sleep table"),
        ("calendar", "Create calendar events for saved sleep records"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--date", help="Night of date in DD-MM-YY format")
        p.add_argument("--week", type=int, help="Week number (1-52)")
        p.add_argument("--year", type=int, default=date.today().year, help="Year for --week (default: this year)")
        p.add_argument("--yes", action="store_true", help="Skip the confirmation question")
        if name == "collect":
            p.add_argument("--no-scores", action="store_true", help="Don't fetch daily sleep scores")

    sub.add_parser("check", help="Test Oura, table and calendar connectivity")
    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or get_settings()

    from sleepsync.db.engine import get_engine
    engine = get_engine(settings.database_url)

    try:
        if args.command == "collect":
            return asyncio.run(_collect(args, settings, engine))
        if args.command == "calendar":
            return asyncio.run(_calendar(args, settings, engine))
        return asyncio.run(_check(settings, engine))
    except ValidationError as exc:
        print(f"❌ {exc}")
        return EXIT_INVALID
    except ConnectivityError as exc:
        print(f"❌ Connection failed: {exc}. Please check your .env file.")
        return EXIT_INVALID
