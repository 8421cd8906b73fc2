from pydantic import BaseModel, ConfigDict, Field


class StreakSummary(BaseModel):
    """Current and longest consecutive-day streaks."""

    model_config = ConfigDict(frozen=True)

    current_streak: int = Field(ge=0)
    longest_streak: int = Field(ge=0)
