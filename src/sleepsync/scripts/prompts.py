"""
Interactive questions that produce a RunRequest.

    ? Choose option (1 or 2): 2
    ? Which week? (enter week number, default 25): 25
    ? Proceed with collecting sleep data for this period? (y/n): y

`ask` defaults to input(); tests pass a scripted replacement.
"""
from datetime import date, timedelta
from typing import Callable

from sleepsync.analysis.fetch_window import fetch_window_for
from sleepsync.analysis.weeks import Week, current_week_number, week_options
from sleepsync.errors import InvalidSelection
from sleepsync.sync.request import MODE_DATE, MODE_WEEK, RunRequest, parse_week_number

Ask = Callable[[str], str]

_YES = {"y", "yes"}


def ask_selection_mode(ask: Ask = input) -> str:
    print("\n📅 Choose your selection method:")
    print("  1. Enter a specific Night of Date (DD-MM-YY format)")
    print("  2. Select by week number")
    choice = ask("? Choose option (1 or 2): ").strip()
    if choice == "1":
        return MODE_DATE
    if choice == "2":
        return MODE_WEEK
    raise InvalidSelection(f"Invalid option {choice!r}. Please choose 1 or 2.")


def print_week_options(year: int) -> None:
    weeks = week_options(year)
    print("\n📅 Available weeks:")
    for week in weeks[:5]:
        print(f"  {week.week_number} - {week.label}")
    print("  ...")
    print(f"  {weeks[-1].week_number} - {weeks[-1].label}\n")


def confirm(question: str, ask: Ask = input) -> bool:
    return ask(f"\n? {question} (y/n): ").strip().lower() in _YES


def print_summary(request: RunRequest, show_oura_dates: bool = False) -> None:
    night_range = request.resolve_scope()
    print("\n📋 Summary:")
    if isinstance(night_range, Week):
        print(f"📊 Total days: {night_range.days} days")
        print(f"📅 Night of Date range: {night_range.start:%a %b %d %Y} - {night_range.end:%a %b %d %Y}")
    else:
        print("📊 Single day operation")
        print(f"🌙 Night of Date: {night_range.start:%a %b %d %Y}")
        if show_oura_dates:
            oura_day = night_range.start + timedelta(days=1)
            print(f"📱 Oura Date: {oura_day:%a %b %d %Y} ({oura_day.isoformat()})")
    if show_oura_dates:
        window = fetch_window_for(night_range)
        print(f"🔄 Oura fetch window: {window.start_str} to {window.end_str}")


def prompt_run_request(action: str, year: int, ask: Ask = input, show_oura_dates: bool = False) -> RunRequest:
    """
    Ask for a selection mode, a date or week, and a confirmation.

    Args:
        action: Verb phrase for the confirmation, e.g. "collecting sleep data".
        year: Year the week numbers refer to.

    Raises:
        ValidationError: on an invalid option, week number or date.
    """
    mode = ask_selection_mode(ask)
    if mode == MODE_DATE:
        text = ask("? Enter Night of Date in DD-MM-YY format (e.g., 15-03-25): ")
        request = RunRequest(mode=MODE_DATE, year=year, night_date=text.strip())
    else:
        print_week_options(year)
        default_week = current_week_number(date.today())
        answer = ask(f"? Which week? (enter week number, default {default_week}): ").strip()
        week_number = parse_week_number(answer) if answer else default_week
        request = RunRequest(mode=MODE_WEEK, year=year, week_number=week_number)

    print_summary(request, show_oura_dates=show_oura_dates)  # validates the value
    request.confirmed = confirm(f"Proceed with {action} for this period?", ask)
    return request
