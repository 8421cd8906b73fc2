"""
Activity service

Owns the repository, applies mutations, and explicitly recomputes streaks and
achievements from a fresh snapshot after every change and on cold load.
The engine itself never schedules its own recomputation.
"""

import logging
import threading
from datetime import tzinfo
from typing import Any, Callable, Dict, Iterable, List, Optional
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from diaryquest.core.config import Settings, settings
from diaryquest.core.dates import DayLike, format_day, now_ms, resolve_today
from diaryquest.core.errors import NotFoundError, ValidationError
from diaryquest.core.logging import log_event
from diaryquest.features.achievements.catalog import DEFAULT_CATALOG, with_week_start
from diaryquest.features.achievements.replayer import compute_achievements
from diaryquest.features.activity.migrations import dump_snapshot, load_snapshot
from diaryquest.features.activity.repository import ActivityRepository, InMemoryActivityRepository
from diaryquest.features.streaks.calculator import compute_streaks
from diaryquest.models.achievement import BadgeCatalog
from diaryquest.models.entry import ActivityEntry, SkipReason, SkipRecord
from diaryquest.models.snapshot import DashboardStats

logger = logging.getLogger("diaryquest")


class ActivityService:
    """Entry/skip mutations with recompute-after-change."""

    def __init__(
        self,
        repository: Optional[ActivityRepository] = None,
        catalog: Optional[BadgeCatalog] = None,
        *,
        tz: Optional[tzinfo] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.repository = repository if repository is not None else InMemoryActivityRepository()
        self.catalog = catalog or DEFAULT_CATALOG
        self._tz = tz
        self._clock = clock
        self._stats: Optional[DashboardStats] = None
        # Serializes mutation + recompute so each recompute sees one consistent snapshot
        self._lock = threading.RLock()

    # Entries ----------------------------------------------------------
    def list_entries(self) -> List[ActivityEntry]:
        return self.repository.load_entries()

    def add_entry(
        self,
        content: str,
        tags: Iterable[str] = (),
        day: Optional[DayLike] = None,
        *,
        now: Optional[int] = None,
    ) -> ActivityEntry:
        timestamp = now if now is not None else self._clock()
        entry = ActivityEntry(
            id=f"entry-{timestamp}-{uuid4().hex[:9]}",
            date=format_day(resolve_today(day, self._tz)),
            content=content.strip(),
            tags=list(tags),
            timestamp=timestamp,
        )
        with self._lock:
            self.repository.upsert_entry(entry)
            log_event("info", "entry.added", entry_id=entry.id, event_type="entry.added", extra={"day": entry.date})
            self.recompute()
        return entry

    def update_entry(self, entry_id: str, **changes: Any) -> ActivityEntry:
        with self._lock:
            current = self.repository.get_entry(entry_id)
            if current is None:
                raise NotFoundError(f"Entry {entry_id} not found")
            updates = {key: value for key, value in changes.items() if value is not None}
            if "content" in updates:
                updates["content"] = updates["content"].strip()
            if "date" in updates:
                updates["date"] = format_day(updates["date"])
            try:
                entry = ActivityEntry.model_validate({**current.model_dump(), **updates, "id": entry_id})
            except PydanticValidationError as exc:
                raise ValidationError(f"Invalid entry update: {exc.errors()[0]['msg']}")
            self.repository.upsert_entry(entry)
            log_event(
                "info",
                "entry.updated",
                entry_id=entry_id,
                event_type="entry.updated",
                extra={"fields": ",".join(sorted(updates))},
            )
            self.recompute()
        return entry

    def delete_entry(self, entry_id: str) -> None:
        with self._lock:
            if not self.repository.delete_entry(entry_id):
                raise NotFoundError(f"Entry {entry_id} not found")
            log_event("info", "entry.deleted", entry_id=entry_id, event_type="entry.deleted")
            self.recompute()

    def entries_between(self, start: DayLike, end: DayLike) -> List[ActivityEntry]:
        """Entries dated within [start, end], newest timestamp first."""
        first, last = format_day(start), format_day(end)
        if first > last:
            raise ValidationError(f"start {first} is after end {last}")
        matching = [e for e in self.repository.load_entries() if first <= e.date <= last]
        return sorted(matching, key=lambda e: e.timestamp, reverse=True)

    # Skips ------------------------------------------------------------
    def list_skips(self) -> Dict[str, SkipRecord]:
        return self.repository.load_skips()

    def add_skip(self, day: DayLike, reason: SkipReason, *, now: Optional[int] = None) -> SkipRecord:
        record = SkipRecord(
            date=format_day(day),
            reason=SkipReason(reason),
            created_at=now if now is not None else self._clock(),
        )
        with self._lock:
            self.repository.upsert_skip(record)
            log_event("info", "skip.added", event_type="skip.added", extra={"day": record.date, "reason": record.reason.value})
            self.recompute()
        return record

    def remove_skip(self, day: DayLike) -> None:
        key = format_day(day)
        with self._lock:
            if not self.repository.delete_skip(key):
                raise NotFoundError(f"No skip recorded for {key}")
            log_event("info", "skip.removed", event_type="skip.removed", extra={"day": key})
            self.recompute()

    # Derived state ----------------------------------------------------
    def recompute(self, today: Optional[DayLike] = None) -> DashboardStats:
        """Rebuild streaks and achievements from a fresh snapshot."""
        with self._lock:
            reference = resolve_today(today, self._tz)
            snapshot = self.repository.snapshot()
            streaks = compute_streaks(snapshot.entries, snapshot.skips, reference)
            achievements = compute_achievements(
                snapshot.entries,
                self.catalog,
                reference,
                tz=self._tz,
            )
            self._stats = DashboardStats(
                current_streak=streaks.current_streak,
                longest_streak=streaks.longest_streak,
                achievements=achievements,
                catalog_version=self.catalog.version,
                computed_for=reference.isoformat(),
            )
            logger.info(
                "stats.recomputed",
                extra={
                    "entries": len(snapshot.entries),
                    "skips": len(snapshot.skips),
                    "current_streak": self._stats.current_streak,
                    "longest_streak": self._stats.longest_streak,
                    "unlocked": self._stats.unlocked_count,
                },
            )
            return self._stats

    def stats(self, today: Optional[DayLike] = None) -> DashboardStats:
        """Cached stats for the reference day, recomputed when the day rolls over."""
        reference = resolve_today(today, self._tz).isoformat()
        with self._lock:
            if self._stats is None or self._stats.computed_for != reference:
                return self.recompute(reference)
            return self._stats

    # Snapshots --------------------------------------------------------
    def export_snapshot(self) -> Dict[str, Any]:
        return dump_snapshot(self.repository.snapshot())

    def import_snapshot(self, payload: Dict[str, Any]) -> DashboardStats:
        """Replace all entries and skips with an (upgraded) stored snapshot."""
        try:
            snapshot = load_snapshot(payload)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            raise ValidationError(f"Invalid snapshot at {location}: {first['msg']}")
        with self._lock:
            self.repository.replace_all(snapshot)
            self._stats = None
            log_event(
                "info",
                "snapshot.imported",
                event_type="snapshot.imported",
                extra={"entries": len(snapshot.entries), "skips": len(snapshot.skips)},
            )
            return self.recompute()


def build_activity_service(cfg: Optional[Settings] = None) -> ActivityService:
    """Service wired from settings: SQL storage when DATABASE_URL is set."""
    cfg = cfg or settings
    repository: ActivityRepository
    if cfg.DATABASE_URL:
        from diaryquest.core.database import create_all_tables, init_engine
        from diaryquest.features.activity.persistence import SqlActivityRepository

        init_engine(cfg.DATABASE_URL)
        create_all_tables()
        repository = SqlActivityRepository()
    else:
        repository = InMemoryActivityRepository()

    catalog = with_week_start(DEFAULT_CATALOG, cfg.week_start_index)
    return ActivityService(repository, catalog, tz=cfg.tzinfo)


_service: Optional[ActivityService] = None


def get_activity_service() -> ActivityService:
    """Process-wide service used by routes."""
    global _service
    if _service is None:
        _service = build_activity_service()
    return _service


def reset_activity_service(service: Optional[ActivityService] = None) -> None:
    global _service
    _service = service
