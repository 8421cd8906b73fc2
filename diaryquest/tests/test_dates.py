from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from diaryquest.core.dates import (
    days_between,
    format_day,
    hour_of_day,
    iter_days,
    parse_day,
    resolve_today,
    week_start_for,
)


def test_parse_day_accepts_strings_dates_and_datetimes():
    assert parse_day("2024-02-29") == date(2024, 2, 29)
    assert parse_day(date(2024, 2, 29)) == date(2024, 2, 29)
    assert parse_day(datetime(2024, 2, 29, 23, 59)) == date(2024, 2, 29)
    assert format_day(date(2024, 1, 5)) == "2024-01-05"


def test_days_between_crosses_month_and_leap_day():
    assert days_between("2024-03-01", "2024-02-28") == 2
    assert days_between("2024-01-01", "2024-01-03") == -2


def test_iter_days_inclusive_and_empty_when_reversed():
    assert list(iter_days("2024-01-30", "2024-02-01")) == [
        date(2024, 1, 30),
        date(2024, 1, 31),
        date(2024, 2, 1),
    ]
    assert list(iter_days("2024-01-02", "2024-01-01")) == []


def test_week_start_for_sunday_and_monday_conventions():
    wednesday = date(2024, 3, 13)
    assert week_start_for(wednesday) == date(2024, 3, 10)
    assert week_start_for(wednesday, week_start=0) == date(2024, 3, 11)
    assert week_start_for(date(2024, 3, 10)) == date(2024, 3, 10)


def test_hour_of_day_respects_zone():
    ts = int(datetime(2024, 1, 1, 23, 30, tzinfo=timezone.utc).timestamp() * 1000)
    assert hour_of_day(ts) == 23
    assert hour_of_day(ts, ZoneInfo("Europe/Berlin")) == 0


def test_resolve_today_prefers_explicit_value():
    assert resolve_today("2024-05-05") == date(2024, 5, 5)
    assert isinstance(resolve_today(), date)
