"""
diaryquest/features/activity/persistence.py

SQL persistence for entries and skip records.

Same contract as InMemoryActivityRepository, backed by the tables in
diaryquest.core.database.
"""

from typing import Dict, List, Optional

from sqlalchemy import delete, func, insert, select, update

from diaryquest.core.database import activity_entries, get_db_session, skip_records
from diaryquest.features.activity.repository import unique_entries
from diaryquest.models.entry import ActivityEntry, SkipRecord
from diaryquest.models.snapshot import ActivitySnapshot


def _row_to_entry(row) -> ActivityEntry:
    return ActivityEntry(
        id=row.id,
        date=row.day,
        content=row.content,
        tags=row.tags or [],
        timestamp=row.timestamp,
    )


def _row_to_skip(row) -> SkipRecord:
    return SkipRecord(date=row.day, reason=row.reason, created_at=row.created_at)


def _entry_values(entry: ActivityEntry) -> dict:
    return {
        'day': entry.date,
        'content': entry.content,
        'tags': list(entry.tags),
        'timestamp': entry.timestamp,
    }


class SqlActivityRepository:
    """
    Database-backed activity repository.

    Entries keep a monotonically increasing `seq` so insertion order survives
    round trips; updates keep the original `seq`.
    """

    def load_entries(self) -> List[ActivityEntry]:
        with get_db_session() as session:
            rows = session.execute(select(activity_entries).order_by(activity_entries.c.seq)).all()
        return [_row_to_entry(row) for row in rows]

    def get_entry(self, entry_id: str) -> Optional[ActivityEntry]:
        with get_db_session() as session:
            row = session.execute(
                select(activity_entries).where(activity_entries.c.id == entry_id)
            ).first()
        return _row_to_entry(row) if row else None

    def upsert_entry(self, entry: ActivityEntry) -> None:
        with get_db_session() as session:
            result = session.execute(
                update(activity_entries)
                .where(activity_entries.c.id == entry.id)
                .values(**_entry_values(entry))
            )
            if result.rowcount == 0:
                next_seq = session.execute(
                    select(func.coalesce(func.max(activity_entries.c.seq), 0) + 1)
                ).scalar_one()
                session.execute(
                    insert(activity_entries).values(id=entry.id, seq=next_seq, **_entry_values(entry))
                )

    def delete_entry(self, entry_id: str) -> bool:
        with get_db_session() as session:
            result = session.execute(delete(activity_entries).where(activity_entries.c.id == entry_id))
        return result.rowcount > 0

    def load_skips(self) -> Dict[str, SkipRecord]:
        with get_db_session() as session:
            rows = session.execute(select(skip_records).order_by(skip_records.c.day)).all()
        return {row.day: _row_to_skip(row) for row in rows}

    def upsert_skip(self, record: SkipRecord) -> None:
        values = {'reason': record.reason.value, 'created_at': record.created_at}
        with get_db_session() as session:
            result = session.execute(
                update(skip_records).where(skip_records.c.day == record.date).values(**values)
            )
            if result.rowcount == 0:
                session.execute(insert(skip_records).values(day=record.date, **values))

    def delete_skip(self, day: str) -> bool:
        with get_db_session() as session:
            result = session.execute(delete(skip_records).where(skip_records.c.day == day))
        return result.rowcount > 0

    def snapshot(self) -> ActivitySnapshot:
        return ActivitySnapshot(entries=tuple(self.load_entries()), skips=self.load_skips())

    def replace_all(self, snapshot: ActivitySnapshot) -> None:
        with get_db_session() as session:
            session.execute(delete(activity_entries))
            session.execute(delete(skip_records))
            unique = unique_entries(snapshot.entries)
            for seq, entry in enumerate(unique.values(), start=1):
                session.execute(
                    insert(activity_entries).values(id=entry.id, seq=seq, **_entry_values(entry))
                )
            for record in snapshot.skips.values():
                session.execute(
                    insert(skip_records).values(
                        day=record.date, reason=record.reason.value, created_at=record.created_at
                    )
                )
