"""
diaryquest/features/achievements/replayer.py

Replays the full entry history to resolve badge unlock timestamps.
(entries, catalog, today) -> [Achievement], one per catalog id, catalog order.

Entries are visited once in ascending timestamp order (ties keep input order).
Each badge gets a tracker chosen by its rule kind; the first entry that makes a
tracker's condition true supplies the unlock timestamp. Recording the
triggering entry's timestamp rather than "now" is what makes replay
idempotent no matter when it runs.

Weekly-volume and streak-length rules depend on the whole history, so their
trackers only collect during the pass and resolve in `finalize`.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence, Set, Type, Union

from diaryquest.core.dates import DayLike, hour_of_day, parse_day, resolve_today, week_start_for
from diaryquest.features.streaks.calculator import streak_chain
from diaryquest.models.achievement import Achievement, BadgeCatalog, BadgeDefinition
from diaryquest.models.entry import ActivityEntry


@dataclass(frozen=True)
class ReplayContext:
    today: date
    tz: Optional[tzinfo] = None


class _Tracker:
    """Running counter for one badge. `observe` returns True once the rule is met."""

    def __init__(self, rule, context: ReplayContext):
        self.rule = rule
        self.context = context

    def observe(self, entry: ActivityEntry) -> bool:
        return False

    def finalize(self) -> Optional[int]:
        return None


class _TotalCountTracker(_Tracker):
    def __init__(self, rule, context):
        super().__init__(rule, context)
        self.count = 0

    def observe(self, entry):
        self.count += 1
        return self.count >= self.rule.threshold


class _TagCountTracker(_Tracker):
    def __init__(self, rule, context):
        super().__init__(rule, context)
        self.count = 0

    def observe(self, entry):
        if self.rule.tag in entry.tags:
            self.count += 1
        return self.count >= self.rule.threshold


class _TimeOfDayTracker(_Tracker):
    def __init__(self, rule, context):
        super().__init__(rule, context)
        self.count = 0

    def observe(self, entry):
        if self.rule.matches(hour_of_day(entry.timestamp, self.context.tz)):
            self.count += 1
        return self.count >= self.rule.threshold


class _TagCoverageTracker(_Tracker):
    def __init__(self, rule, context):
        super().__init__(rule, context)
        self.missing: Set[str] = set(rule.required_tags)

    def observe(self, entry):
        self.missing.difference_update(entry.tags)
        return not self.missing


class _DistinctDaysTracker(_Tracker):
    def __init__(self, rule, context):
        super().__init__(rule, context)
        self.days: Set[str] = set()

    def observe(self, entry):
        self.days.add(entry.date)
        return len(self.days) >= self.rule.threshold


class _WeeklyVolumeTracker(_Tracker):
    def __init__(self, rule, context):
        super().__init__(rule, context)
        self.weeks: Dict[date, List[int]] = defaultdict(list)

    def observe(self, entry):
        # Buckets fill in pass order, i.e. already sorted by timestamp
        self.weeks[week_start_for(entry.date, self.rule.week_start)].append(entry.timestamp)
        return False

    def finalize(self):
        for week in sorted(self.weeks):
            bucket = self.weeks[week]
            if len(bucket) >= self.rule.threshold:
                return bucket[self.rule.threshold - 1]
        return None


class _StreakLengthTracker(_Tracker):
    def __init__(self, rule, context):
        super().__init__(rule, context)
        self.first_on_day: Dict[date, int] = {}

    def observe(self, entry):
        self.first_on_day.setdefault(parse_day(entry.date), entry.timestamp)
        return False

    def finalize(self):
        chain = streak_chain(self.first_on_day, self.context.today)
        if len(chain) < self.rule.threshold:
            return None
        return self.first_on_day[chain[self.rule.threshold - 1]]


_TRACKERS: Dict[str, Type[_Tracker]] = {
    "total_count": _TotalCountTracker,
    "tag_count": _TagCountTracker,
    "time_of_day": _TimeOfDayTracker,
    "tag_coverage": _TagCoverageTracker,
    "distinct_days": _DistinctDaysTracker,
    "weekly_volume": _WeeklyVolumeTracker,
    "streak_length": _StreakLengthTracker,
}


def compute_achievements(
    entries: Iterable[ActivityEntry],
    catalog: Union[BadgeCatalog, Sequence[BadgeDefinition]],
    today: Optional[DayLike] = None,
    *,
    tz: Optional[tzinfo] = None,
) -> List[Achievement]:
    """
    Resolve every catalog badge against the entry history.

    Pure function: same entries + catalog + today => identical output.

    Args:
        entries: All activity entries, any order
        catalog: BadgeCatalog or ordered badge definitions
        today: Reference day for streak-length badges (defaults to today in `tz`)
        tz: Zone for the time-of-day clock (defaults to UTC)

    Returns:
        One Achievement per catalog id, in catalog order
    """
    badges = catalog.badges if isinstance(catalog, BadgeCatalog) else tuple(catalog)
    context = ReplayContext(today=resolve_today(today, tz), tz=tz)
    unlocked = replay_unlocks(entries, badges, context)

    return [
        Achievement(
            id=badge.id,
            title=badge.title,
            description=badge.description,
            icon=badge.icon,
            unlocked_at=unlocked.get(badge.id),
        )
        for badge in badges
    ]


def replay_unlocks(
    entries: Iterable[ActivityEntry],
    badges: Sequence[BadgeDefinition],
    context: ReplayContext,
) -> Dict[str, int]:
    """Badge id -> unlock timestamp for every badge the history satisfies."""
    trackers = {badge.id: _TRACKERS[badge.rule.kind](badge.rule, context) for badge in badges}
    pending = dict(trackers)
    unlocked: Dict[str, int] = {}

    # sorted() is stable, so equal timestamps keep their input order
    for entry in sorted(entries, key=lambda e: e.timestamp):
        if not pending:
            break
        for badge_id, tracker in list(pending.items()):
            if tracker.observe(entry):
                unlocked[badge_id] = entry.timestamp
                del pending[badge_id]

    for badge_id, tracker in pending.items():
        resolved = tracker.finalize()
        if resolved is not None:
            unlocked[badge_id] = resolved

    return unlocked
