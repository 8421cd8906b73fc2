"""
diaryquest/features/achievements/catalog.py

Default badge catalog. Order here is the order achievements are returned in.
Ids are stable keys: edit titles/icons freely, never rename an id.

Version history:
- 1: first-entry, week-streak, month-streak, coding-focus, testing-pro,
     productive-week, diverse-learner, marathon-coder, consistent-logger
- 2: adds tag, time-of-day, volume and long-streak badges
"""

from diaryquest.models.achievement import (
    BadgeCatalog,
    BadgeDefinition,
    DistinctDaysRule,
    StreakLengthRule,
    TagCountRule,
    TagCoverageRule,
    TimeOfDayRule,
    TotalCountRule,
    WeeklyVolumeRule,
)

RECOGNIZED_TAGS = (
    "development",
    "testing",
    "analysis",
    "debugging",
    "learning",
    "work-items",
    "deployment",
)

MORNING_CUTOFF_HOUR = 8
LATE_CUTOFF_HOUR = 22
SUNDAY = 6


DEFAULT_CATALOG = BadgeCatalog(
    version=2,
    badges=(
        BadgeDefinition(
            id="first-entry",
            title="First Step",
            description="Logged your first activity",
            icon="🚀",
            rule=TotalCountRule(threshold=1),
        ),
        BadgeDefinition(
            id="week-streak",
            title="Week Warrior",
            description="Maintained a 7-day streak",
            icon="🔥",
            rule=StreakLengthRule(threshold=7),
        ),
        BadgeDefinition(
            id="month-streak",
            title="Monthly Master",
            description="Maintained a 30-day streak",
            icon="👑",
            rule=StreakLengthRule(threshold=30),
        ),
        BadgeDefinition(
            id="coding-focus",
            title="Code Ninja",
            description="Logged 10 development activities",
            icon="💻",
            rule=TagCountRule(tag="development", threshold=10),
        ),
        BadgeDefinition(
            id="testing-pro",
            title="Bug Hunter",
            description="Logged 10 testing activities",
            icon="🐛",
            rule=TagCountRule(tag="testing", threshold=10),
        ),
        BadgeDefinition(
            id="productive-week",
            title="Productivity Beast",
            description="Logged 20+ activities in a week",
            icon="⚡",
            rule=WeeklyVolumeRule(threshold=20, week_start=SUNDAY),
        ),
        BadgeDefinition(
            id="diverse-learner",
            title="Renaissance Dev",
            description="Used all activity types",
            icon="🎭",
            rule=TagCoverageRule(required_tags=RECOGNIZED_TAGS),
        ),
        BadgeDefinition(
            id="marathon-coder",
            title="Marathon Coder",
            description="Logged 100 total activities",
            icon="🏃‍♂️",
            rule=TotalCountRule(threshold=100),
        ),
        BadgeDefinition(
            id="consistent-logger",
            title="Habit Master",
            description="Logged activity 50 days total",
            icon="📅",
            rule=DistinctDaysRule(threshold=50),
        ),
        BadgeDefinition(
            id="bug-squasher",
            title="Bug Squasher",
            description="25 debugging activities",
            icon="🐞",
            rule=TagCountRule(tag="debugging", threshold=25),
        ),
        BadgeDefinition(
            id="analyst",
            title="Insight Seeker",
            description="25 analysis activities",
            icon="🔎",
            rule=TagCountRule(tag="analysis", threshold=25),
        ),
        BadgeDefinition(
            id="early-bird",
            title="Early Bird",
            description="Logged before 08:00 AM 10 times",
            icon="☀️",
            rule=TimeOfDayRule(before_hour=MORNING_CUTOFF_HOUR, threshold=10),
        ),
        BadgeDefinition(
            id="night-owl",
            title="Night Owl",
            description="Logged after 10:00 PM 10 times",
            icon="🌙",
            rule=TimeOfDayRule(from_hour=LATE_CUTOFF_HOUR, threshold=10),
        ),
        BadgeDefinition(
            id="starter-10",
            title="Getting Warmed Up",
            description="Logged 10 total activities",
            icon="💪",
            rule=TotalCountRule(threshold=10),
        ),
        BadgeDefinition(
            id="prolific-50",
            title="On a Roll",
            description="Logged 50 total activities",
            icon="🚴‍♂️",
            rule=TotalCountRule(threshold=50),
        ),
        BadgeDefinition(
            id="century-100",
            title="Century Club",
            description="Logged 100 total activities",
            icon="🏆",
            rule=TotalCountRule(threshold=100),
        ),
        BadgeDefinition(
            id="two-week-streak",
            title="Two-Week Streak",
            description="Maintained a 14-day streak",
            icon="📆",
            rule=StreakLengthRule(threshold=14),
        ),
        BadgeDefinition(
            id="hundred-streak",
            title="100-Day Legend",
            description="Maintained a 100-day streak",
            icon="💯",
            rule=StreakLengthRule(threshold=100),
        ),
    ),
)


def with_week_start(catalog: BadgeCatalog, week_start: int) -> BadgeCatalog:
    """Copy of `catalog` with every weekly-volume rule bucketed from `week_start`."""
    badges = tuple(
        badge.model_copy(update={"rule": badge.rule.model_copy(update={"week_start": week_start})})
        if badge.rule.kind == "weekly_volume"
        else badge
        for badge in catalog.badges
    )
    return catalog.model_copy(update={"badges": badges})
