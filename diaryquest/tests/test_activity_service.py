"""
diaryquest/tests/test_activity_service.py

Tests for mutation + recompute orchestration.
"""

import logging
from datetime import date, timedelta

import pytest

from diaryquest.core.config import Settings
from diaryquest.core.errors import NotFoundError, SnapshotVersionError, ValidationError
from diaryquest.features.activity.repository import InMemoryActivityRepository
from diaryquest.features.activity.service import ActivityService, build_activity_service
from diaryquest.models.entry import SkipReason


@pytest.fixture
def clock():
    """Deterministic epoch-millis clock advancing one second per call."""
    state = {"now": 1_710_000_000_000}

    def _tick():
        state["now"] += 1000
        return state["now"]

    return _tick


@pytest.fixture
def service(clock):
    return ActivityService(InMemoryActivityRepository(), clock=clock)


class TestEntries:
    def test_add_entry_trims_and_recomputes(self, service, fixed_today):
        entry = service.add_entry("  shipped the parser  ", ["development"], fixed_today)
        assert entry.content == "shipped the parser"
        assert entry.id.startswith(f"entry-{entry.timestamp}-")
        stats = service.stats(fixed_today)
        assert stats.current_streak == 1
        assert stats.longest_streak == 1
        first = next(a for a in stats.achievements if a.id == "first-entry")
        assert first.unlocked_at == entry.timestamp

    def test_update_entry_changes_day(self, service, fixed_today):
        entry = service.add_entry("x", [], fixed_today - timedelta(days=5))
        assert service.stats(fixed_today).current_streak == 0
        updated = service.update_entry(entry.id, date=fixed_today)
        assert updated.date == fixed_today.isoformat()
        assert updated.timestamp == entry.timestamp
        assert service.stats(fixed_today).current_streak == 1

    def test_update_missing_entry(self, service):
        with pytest.raises(NotFoundError):
            service.update_entry("nope", content="x")

    def test_delete_entry(self, service, fixed_today):
        entry = service.add_entry("x", [], fixed_today)
        service.delete_entry(entry.id)
        assert service.list_entries() == []
        assert service.stats(fixed_today).current_streak == 0
        with pytest.raises(NotFoundError):
            service.delete_entry(entry.id)

    def test_entries_between_newest_first(self, service):
        older = service.add_entry("a", [], "2024-01-01")
        newer = service.add_entry("b", [], "2024-01-02")
        service.add_entry("c", [], "2024-02-01")
        found = service.entries_between("2024-01-01", "2024-01-31")
        assert [e.id for e in found] == [newer.id, older.id]

    def test_entries_between_rejects_reversed_range(self, service):
        with pytest.raises(ValidationError):
            service.entries_between("2024-02-01", "2024-01-01")


class TestSkips:
    def test_skip_bridges_current_streak(self, service):
        service.add_entry("a", [], "2024-01-01")
        service.add_entry("b", [], "2024-01-03")
        assert service.recompute("2024-01-03").current_streak == 1
        service.add_skip("2024-01-02", SkipReason.HOLIDAY)
        assert service.recompute("2024-01-03").current_streak == 2
        service.remove_skip("2024-01-02")
        assert service.recompute("2024-01-03").current_streak == 1

    def test_remove_missing_skip(self, service):
        with pytest.raises(NotFoundError):
            service.remove_skip("2024-01-02")


class TestDerivedState:
    def test_recompute_is_idempotent(self, service, fixed_today):
        for i in range(12):
            service.add_entry("x", ["testing"], fixed_today - timedelta(days=i % 4))
        first = service.recompute(fixed_today)
        second = service.recompute(fixed_today)
        assert first.model_dump_json() == second.model_dump_json()

    def test_deleting_every_entry_unsets_all_badges(self, service, fixed_today):
        entry = service.add_entry("x", [], fixed_today)
        assert service.recompute(fixed_today).unlocked_count == 1
        service.delete_entry(entry.id)
        stats = service.recompute(fixed_today)
        assert [a.id for a in stats.achievements if a.unlocked] == []

    def test_warm_and_cold_services_agree(self, service, clock, fixed_today):
        for i in range(7):
            service.add_entry("x", [], fixed_today - timedelta(days=i))
        service.recompute(fixed_today)
        later = fixed_today + timedelta(days=5)

        warm = service.recompute(later)
        cold = ActivityService(InMemoryActivityRepository(service.repository.snapshot()), clock=clock).recompute(later)
        assert warm == cold
        assert {a.id: a.unlocked_at for a in warm.achievements}["week-streak"] is None

    def test_stats_cached_per_reference_day(self, service, fixed_today):
        service.add_entry("x", [], fixed_today)
        first = service.stats(fixed_today)
        assert service.stats(fixed_today) is first
        assert service.stats(fixed_today + timedelta(days=1)).computed_for == (fixed_today + timedelta(days=1)).isoformat()

    def test_recompute_logs_summary(self, service, fixed_today, caplog):
        with caplog.at_level(logging.INFO, logger="diaryquest"):
            service.add_entry("x", [], fixed_today)
        records = [r for r in caplog.records if r.getMessage() == "stats.recomputed"]
        assert records
        assert records[-1].entries == 1

    def test_mutations_log_structured_events(self, service, fixed_today, caplog):
        with caplog.at_level(logging.INFO, logger="diaryquest"):
            entry = service.add_entry("x", [], fixed_today)
            service.delete_entry(entry.id)
        events = {r.getMessage(): r for r in caplog.records}
        assert events["entry.added"].entry_id == entry.id
        assert events["entry.added"].day == fixed_today.isoformat()
        assert events["entry.deleted"].event_type == "entry.deleted"


class TestSnapshots:
    def test_import_legacy_payload(self, service):
        payload = {
            "version": 1,
            "entries": [
                {"id": "a", "date": "2024-01-01", "content": "x", "tags": ["testing"], "timestamp": 10},
                {"id": "b", "date": "2024-01-02", "content": "y", "timestamp": 20},
            ],
            "skips": [{"date": "2024-01-03", "reason": "leave", "createdAt": 1}],
            "achievements": [{"id": "analyst", "unlockedAt": 99}],
        }
        service.import_snapshot(payload)
        assert [e.id for e in service.list_entries()] == ["a", "b"]
        stats = service.recompute("2024-01-03")
        assert (stats.current_streak, stats.longest_streak) == (2, 2)
        # Persisted derived state is discarded, never trusted
        assert {a.id: a.unlocked_at for a in stats.achievements}["analyst"] is None

    def test_import_replaces_and_clears_earned(self, service, fixed_today):
        for i in range(7):
            service.add_entry("x", [], fixed_today - timedelta(days=i))
        service.recompute(fixed_today)
        stats = service.import_snapshot({"schema_version": 3, "entries": [], "skips": {}})
        assert stats.current_streak == 0
        assert all(a.unlocked_at is None for a in stats.achievements)

    def test_export_round_trip(self, service, clock):
        service.add_entry("x", ["learning"], "2024-01-01")
        service.add_skip("2024-01-02", SkipReason.LEAVE)
        exported = service.export_snapshot()
        other = ActivityService(InMemoryActivityRepository(), clock=clock)
        other.import_snapshot(exported)
        assert other.export_snapshot() == exported

    def test_import_invalid_entry(self, service):
        with pytest.raises(ValidationError):
            service.import_snapshot({"schema_version": 3, "entries": [{"id": "a", "date": "nope", "timestamp": 1}]})

    def test_import_future_version(self, service):
        with pytest.raises(SnapshotVersionError):
            service.import_snapshot({"schema_version": 99})


def test_build_from_settings_applies_week_start():
    service = build_activity_service(Settings(WEEK_START="monday", LOCAL_TIMEZONE="Europe/Berlin"))
    weekly = next(b for b in service.catalog.badges if b.id == "productive-week")
    assert weekly.rule.week_start == 0
    assert isinstance(service.repository, InMemoryActivityRepository)


def test_build_from_settings_uses_database():
    from diaryquest.core import database
    from diaryquest.features.activity.persistence import SqlActivityRepository

    database.dispose_engine()
    try:
        service = build_activity_service(Settings(DATABASE_URL="sqlite://"))
        assert isinstance(service.repository, SqlActivityRepository)
        service.add_entry("x", [], date(2024, 1, 1))
        assert len(service.list_entries()) == 1
    finally:
        database.drop_all_tables()
        database.dispose_engine()
