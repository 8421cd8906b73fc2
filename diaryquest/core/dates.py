"""
Calendar-day helpers shared by the streak calculator and achievement replayer.

Days travel through the system as "YYYY-MM-DD" strings; these helpers convert
at the edges and do day arithmetic on `datetime.date`.
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterator, Optional, Union

DayLike = Union[str, date, datetime]


def parse_day(value: DayLike) -> date:
    """Coerce a YYYY-MM-DD string, date or datetime into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def format_day(value: DayLike) -> str:
    return parse_day(value).isoformat()


def days_between(later: DayLike, earlier: DayLike) -> int:
    """Whole calendar days from `earlier` to `later` (negative if reversed)."""
    return (parse_day(later) - parse_day(earlier)).days


def iter_days(start: DayLike, end: DayLike) -> Iterator[date]:
    """Every calendar day from start to end, both inclusive."""
    current = parse_day(start)
    last = parse_day(end)
    one = timedelta(days=1)
    while current <= last:
        yield current
        current += one


def week_start_for(day: DayLike, week_start: int = 6) -> date:
    """First day of the week containing `day`; `week_start` is a Python weekday (Sunday=6)."""
    d = parse_day(day)
    offset = (d.weekday() - week_start) % 7
    return d - timedelta(days=offset)


def hour_of_day(timestamp_ms: int, tz: Optional[tzinfo] = None) -> int:
    """Local hour (0-23) of an epoch-millis instant."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz or timezone.utc)
    return moment.hour


def resolve_today(today: Optional[DayLike] = None, tz: Optional[tzinfo] = None) -> date:
    """Caller-supplied reference day, or the current calendar day in `tz`."""
    if today is not None:
        return parse_day(today)
    return datetime.now(tz or timezone.utc).date()


def now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)
