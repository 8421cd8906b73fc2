"""
diaryquest/models/snapshot.py
Immutable view of the activity store handed to the engine, and the derived dashboard.
"""

from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from diaryquest.models.achievement import Achievement
from diaryquest.models.entry import ActivityEntry, SkipRecord

CURRENT_SCHEMA_VERSION = 3


class ActivitySnapshot(BaseModel):
    """Entries in insertion order plus skip records keyed by day."""

    model_config = ConfigDict(frozen=True)

    schema_version: int = Field(default=CURRENT_SCHEMA_VERSION)
    entries: Tuple[ActivityEntry, ...] = ()
    skips: Dict[str, SkipRecord] = Field(default_factory=dict)


class DashboardStats(BaseModel):
    """Everything the presentation layer renders after a recompute."""

    model_config = ConfigDict(frozen=True)

    current_streak: int = Field(ge=0)
    longest_streak: int = Field(ge=0)
    achievements: List[Achievement]
    catalog_version: int
    computed_for: str = Field(description="Reference day (YYYY-MM-DD) used as 'today'")

    @property
    def unlocked_count(self) -> int:
        return sum(1 for achievement in self.achievements if achievement.unlocked)
