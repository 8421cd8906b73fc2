"""
diaryquest/models/achievement.py
Badge catalog definitions and resolved achievements.

A catalog is a versioned list of BadgeDefinition; each carries one rule whose
`kind` selects the counter the replayer maintains for it.
"""

from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Rule(BaseModel):
    model_config = ConfigDict(frozen=True)


class TotalCountRule(_Rule):
    kind: Literal["total_count"] = "total_count"
    threshold: int = Field(ge=1)


class TagCountRule(_Rule):
    kind: Literal["tag_count"] = "tag_count"
    tag: str = Field(min_length=1)
    threshold: int = Field(ge=1)


class TimeOfDayRule(_Rule):
    """Counts entries logged before `before_hour` or at/after `from_hour` (local clock)."""

    kind: Literal["time_of_day"] = "time_of_day"
    before_hour: Optional[int] = Field(default=None, ge=0, le=24)
    from_hour: Optional[int] = Field(default=None, ge=0, le=23)
    threshold: int = Field(ge=1)

    @model_validator(mode="after")
    def _one_window(self):
        if (self.before_hour is None) == (self.from_hour is None):
            raise ValueError("time_of_day rule needs exactly one of before_hour/from_hour")
        return self

    def matches(self, hour: int) -> bool:
        if self.before_hour is not None:
            return hour < self.before_hour
        return hour >= self.from_hour


class TagCoverageRule(_Rule):
    kind: Literal["tag_coverage"] = "tag_coverage"
    required_tags: Tuple[str, ...] = Field(min_length=1)


class DistinctDaysRule(_Rule):
    kind: Literal["distinct_days"] = "distinct_days"
    threshold: int = Field(ge=1)


class WeeklyVolumeRule(_Rule):
    kind: Literal["weekly_volume"] = "weekly_volume"
    threshold: int = Field(ge=1)
    week_start: int = Field(default=6, ge=0, le=6, description="Python weekday, Monday=0; default Sunday")


class StreakLengthRule(_Rule):
    kind: Literal["streak_length"] = "streak_length"
    threshold: int = Field(ge=1)


BadgeRule = Annotated[
    Union[
        TotalCountRule,
        TagCountRule,
        TimeOfDayRule,
        TagCoverageRule,
        DistinctDaysRule,
        WeeklyVolumeRule,
        StreakLengthRule,
    ],
    Field(discriminator="kind"),
]


class BadgeDefinition(BaseModel):
    """Catalog row: display metadata plus the unlock rule."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Stable catalog key")
    title: str
    description: str
    icon: str
    rule: BadgeRule


class BadgeCatalog(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: int = Field(ge=1)
    badges: Tuple[BadgeDefinition, ...]

    @model_validator(mode="after")
    def _unique_ids(self):
        ids = [badge.id for badge in self.badges]
        duplicates = sorted({badge_id for badge_id in ids if ids.count(badge_id) > 1})
        if duplicates:
            raise ValueError(f"duplicate badge ids: {', '.join(duplicates)}")
        return self

    def ids(self) -> List[str]:
        return [badge.id for badge in self.badges]


class Achievement(BaseModel):
    """A catalog badge with its resolved unlock timestamp (derived state)."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    icon: str
    unlocked_at: Optional[int] = Field(default=None, description="Epoch millis of the triggering entry")

    @property
    def unlocked(self) -> bool:
        return self.unlocked_at is not None
