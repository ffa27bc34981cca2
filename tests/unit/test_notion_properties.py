"""Tests for NightRecord <-> Notion property mapping."""
from datetime import date, datetime

from sleepsync.notion.properties import (
    format_clock,
    format_long_sleep_name,
    page_to_record,
    record_to_properties,
)


def _as_page(properties: dict, page_id: str = "page-1") -> dict:
    """Turn a create() payload into what databases.query() returns for that page."""
    page_props = {}
    for name, prop in properties.items():
        prop = dict(prop)
        for key in ("title", "rich_text"):
            if key in prop:
                prop[key] = [{"plain_text": t["text"]["content"]} for t in prop[key]]
        page_props[name] = prop
    return {"id": page_id, "properties": page_props}


class TestFormatting:
    def test_long_sleep_name(self):
        assert format_long_sleep_name(date(2025, 6, 16)) == "Monday, June 16, 2025 (ET)"

    def test_long_sleep_name_single_digit_day(self):
        assert format_long_sleep_name(date(2025, 5, 2), "PT") == "Friday, May 2, 2025 (PT)"

    def test_clock(self):
        assert format_clock(datetime(2025, 6, 16, 22, 30)) == "10:30 PM"
        assert format_clock(datetime(2025, 6, 17, 5, 45)) == "5:45 AM"
        assert format_clock(datetime(2025, 6, 17, 12, 5)) == "12:05 PM"


class TestRecordToProperties:
    def test_core_columns(self, night_record):
        props = record_to_properties(night_record)
        assert props["Long Sleep Name"]["title"][0]["text"]["content"] == "Monday, June 16, 2025 (ET)"
        assert props["Date"] == {"date": {"start": "2025-06-16"}}
        assert props["Oura Day"] == {"date": {"start": "2025-06-17"}}
        assert props["Bedtime"]["rich_text"][0]["text"]["content"] == "11:05 PM"
        assert props["Wake Time"]["rich_text"][0]["text"]["content"] == "6:40 AM"
        assert props["Bedtime ISO"]["rich_text"][0]["text"]["content"] == "2025-06-16T23:05:00-04:00"
        assert props["Wake Category"] == {"select": {"name": "Normal Wake Up"}}
        assert props["Sleep ID"]["rich_text"][0]["text"]["content"] == "sleep-0616"
        assert props["Calendar Created"] == {"checkbox": False}

    def test_number_columns(self, night_record):
        props = record_to_properties(night_record)
        assert props["Sleep Duration"] == {"number": 7.0}
        assert props["Sleep Score"] == {"number": 82}
        assert props["Deep Sleep"] == {"number": 90}
        assert props["Heart Rate Low"] == {"number": 48}
        assert props["Respiratory Rate"] == {"number": 14.5}

    def test_title_uses_night_of_not_oura_day(self, night_record):
        props = record_to_properties(night_record)
        assert "June 16" in props["Long Sleep Name"]["title"][0]["text"]["content"]


class TestPageToRecord:
    def test_round_trips_through_a_page(self, night_record):
        record = page_to_record(_as_page(record_to_properties(night_record), "abc-123"))
        assert record.table_id == "abc-123"
        assert record.source_id == "sleep-0616"
        assert record.night_of == date(2025, 6, 16)
        assert record.oura_day == date(2025, 6, 17)
        assert record.bedtime == "2025-06-16T23:05:00-04:00"
        assert record.wake_category == "Normal Wake Up"
        assert record.sleep_score == 82
        assert record.efficiency == 92
        assert record.calendar_created is False

    def test_float_numbers_become_ints_where_needed(self):
        page = {
            "id": "p",
            "properties": {
                "Date": {"date": {"start": "2025-06-16"}},
                "Sleep Score": {"number": 81.0},
                "Deep Sleep": {"number": 92.0},
                "Calendar Created": {"checkbox": True},
            },
        }
        record = page_to_record(page)
        assert record.sleep_score == 81
        assert isinstance(record.deep_sleep_minutes, int)
        assert record.calendar_created is True

    def test_missing_properties_fall_back(self):
        record = page_to_record({"id": "p", "properties": {"Date": {"date": {"start": "2025-06-16"}}}})
        assert record.wake_category == "Unknown"
        assert record.source_id == ""
        assert record.sleep_score == 0
        assert record.oura_day is None
