"""
diaryquest/models/entry.py
Activity entries and skip records. Owned by the repository; the engine only reads them.
"""

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

DAY_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class SkipReason(str, Enum):
    HOLIDAY = "holiday"
    LEAVE = "leave"


class ActivityEntry(BaseModel):
    """A short logged activity on a calendar day."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Unique entry id")
    date: str = Field(pattern=DAY_PATTERN, description="Semantic day, YYYY-MM-DD")
    content: str = Field(default="", description="Free text")
    tags: Tuple[str, ...] = Field(default=(), description="Category tags (set semantics)")
    timestamp: int = Field(description="Creation/modification instant, epoch millis")

    @field_validator("tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value):
        if value is None:
            return ()
        seen = []
        for tag in value:
            if tag not in seen:
                seen.append(tag)
        return tuple(seen)


class SkipRecord(BaseModel):
    """A calendar day exempted from breaking a streak."""

    model_config = ConfigDict(frozen=True)

    date: str = Field(pattern=DAY_PATTERN)
    reason: SkipReason
    created_at: int = Field(description="Epoch millis")
