# diaryquest/conftest.py
from datetime import date, datetime, timezone
from itertools import count

import pytest

from diaryquest.models.entry import ActivityEntry, SkipReason, SkipRecord


def ms(year, month, day, hour=12, minute=0) -> int:
    """Epoch millis for a UTC wall-clock time."""
    return int(datetime(year, month, day, hour, minute, tzinfo=timezone.utc).timestamp() * 1000)


@pytest.fixture
def fixed_today():
    """Fixed reference day for deterministic testing."""
    return date(2024, 3, 15)


@pytest.fixture
def make_entry():
    """
    Factory for entries. Timestamp defaults to noon UTC on the entry's day,
    offset by a running sequence so entries created in order sort in order.
    """
    seq = count(1)

    def _make(day, tags=(), timestamp=None, content="did a thing", entry_id=None):
        n = next(seq)
        d = date.fromisoformat(day) if isinstance(day, str) else day
        return ActivityEntry(
            id=entry_id or f"e-{n}",
            date=d.isoformat(),
            content=content,
            tags=list(tags),
            timestamp=timestamp if timestamp is not None else ms(d.year, d.month, d.day) + n,
        )

    return _make


@pytest.fixture
def make_skip():
    def _make(day, reason=SkipReason.HOLIDAY, created_at=0):
        d = date.fromisoformat(day) if isinstance(day, str) else day
        return SkipRecord(date=d.isoformat(), reason=reason, created_at=created_at)

    return _make


@pytest.fixture(autouse=True)
def no_database_url(monkeypatch):
    """Tests default to the in-memory repository."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("TEST_DATABASE_URL", raising=False)


@pytest.fixture
def at():
    """ms(year, month, day, hour=12, minute=0) helper."""
    return ms
