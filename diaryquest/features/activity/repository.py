"""
Activity repository protocol and in-memory implementation.

The repository owns entries and skip records. It hands the engine immutable
snapshots; it never computes streaks or badges itself.
"""
from typing import Dict, Iterable, List, Optional, Protocol

from diaryquest.core.logging import log_event
from diaryquest.models.entry import ActivityEntry, SkipRecord
from diaryquest.models.snapshot import ActivitySnapshot


class ActivityRepository(Protocol):
    """
    Storage for entries and skip records.

    Implementations must:
    - keep entries in insertion order (replay tie-break on equal timestamps)
    - keep at most one skip record per day (last write wins)
    """

    def load_entries(self) -> List[ActivityEntry]:
        ...

    def get_entry(self, entry_id: str) -> Optional[ActivityEntry]:
        ...

    def upsert_entry(self, entry: ActivityEntry) -> None:
        """Insert, or replace in place keeping the original position."""
        ...

    def delete_entry(self, entry_id: str) -> bool:
        """Returns False when no entry had that id."""
        ...

    def load_skips(self) -> Dict[str, SkipRecord]:
        ...

    def upsert_skip(self, record: SkipRecord) -> None:
        ...

    def delete_skip(self, day: str) -> bool:
        ...

    def snapshot(self) -> ActivitySnapshot:
        ...

    def replace_all(self, snapshot: ActivitySnapshot) -> None:
        ...


def unique_entries(entries: Iterable[ActivityEntry]) -> Dict[str, ActivityEntry]:
    """Key entries by id; a repeated id keeps its first position and its last value."""
    unique: Dict[str, ActivityEntry] = {}
    collapsed = 0
    for entry in entries:
        if entry.id in unique:
            collapsed += 1
        unique[entry.id] = entry
    if collapsed:
        log_event(
            "warning",
            "snapshot.duplicate_entry_ids",
            event_type="snapshot.duplicate_entry_ids",
            extra={"collapsed": collapsed, "kept": len(unique)},
        )
    return unique


class InMemoryActivityRepository:
    """Dict-backed repository (default when DATABASE_URL is unset)."""

    def __init__(self, snapshot: Optional[ActivitySnapshot] = None):
        self._entries: Dict[str, ActivityEntry] = {}
        self._skips: Dict[str, SkipRecord] = {}
        if snapshot is not None:
            self.replace_all(snapshot)

    def load_entries(self) -> List[ActivityEntry]:
        return list(self._entries.values())

    def get_entry(self, entry_id: str) -> Optional[ActivityEntry]:
        return self._entries.get(entry_id)

    def upsert_entry(self, entry: ActivityEntry) -> None:
        # dict assignment to an existing key keeps its position
        self._entries[entry.id] = entry

    def delete_entry(self, entry_id: str) -> bool:
        return self._entries.pop(entry_id, None) is not None

    def load_skips(self) -> Dict[str, SkipRecord]:
        return dict(self._skips)

    def upsert_skip(self, record: SkipRecord) -> None:
        self._skips[record.date] = record

    def delete_skip(self, day: str) -> bool:
        return self._skips.pop(day, None) is not None

    def snapshot(self) -> ActivitySnapshot:
        return ActivitySnapshot(entries=tuple(self._entries.values()), skips=dict(self._skips))

    def replace_all(self, snapshot: ActivitySnapshot) -> None:
        self._entries = unique_entries(snapshot.entries)
        self._skips = dict(snapshot.skips)
