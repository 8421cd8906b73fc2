"""
diaryquest/features/streaks/calculator.py

Pure streak computation over an entry/skip snapshot.
(entries, skips, today) -> StreakSummary. Same inputs => identical output.

Current streak walks backward from today over distinct entry dates and lets a
gap through only when every day inside it is protected by a skip record.
Longest streak walks forward over every calendar day from the earliest known
date (entry or skip) to today; a skip day neither extends nor resets the run.
"""

from datetime import date, timedelta
from typing import Iterable, List, Mapping, Optional, Set

from diaryquest.core.dates import DayLike, days_between, iter_days, parse_day, resolve_today
from diaryquest.models.entry import ActivityEntry, SkipRecord
from diaryquest.models.streak import StreakSummary


def compute_streaks(
    entries: Iterable[ActivityEntry],
    skips: Mapping[str, SkipRecord],
    today: Optional[DayLike] = None,
) -> StreakSummary:
    """
    Compute current and longest streaks.

    Args:
        entries: Activity entries in any order
        skips: Skip records keyed by YYYY-MM-DD
        today: Reference day (defaults to the current UTC calendar day)

    Returns:
        StreakSummary (immutable)
    """
    reference = resolve_today(today)
    entry_days = {parse_day(entry.date) for entry in entries}
    skip_days = {parse_day(day) for day in skips}

    return StreakSummary(
        current_streak=current_streak(entry_days, skip_days, reference),
        longest_streak=longest_streak(entry_days, skip_days, reference),
    )


def current_streak(entry_days: Set[date], skip_days: Set[date], today: date) -> int:
    if not entry_days:
        return 0

    streak = 0
    cursor = today
    for day in sorted(entry_days, reverse=True):
        gap = days_between(cursor, day)
        if gap < 0:
            # Dated after the reference day; not part of the chain yet
            continue
        if gap <= 1 or _gap_is_protected(day, cursor, skip_days):
            streak += 1
            cursor = day
            continue
        break
    return streak


def longest_streak(entry_days: Set[date], skip_days: Set[date], today: date) -> int:
    all_days = entry_days | skip_days
    if not all_days:
        return 0

    best = 0
    run = 0
    for day in iter_days(min(all_days), today):
        if day in entry_days:
            run += 1
            best = max(best, run)
        elif day not in skip_days:
            run = 0
    return best


def streak_chain(entry_days: Iterable[date], today: date) -> List[date]:
    """
    Days of the unbroken run ending today or yesterday, most recent first.

    Same backward walk as the current streak but without skip bridging; used
    by streak-length badges.
    """
    chain: List[date] = []
    cursor = today
    for day in sorted(set(entry_days), reverse=True):
        gap = days_between(cursor, day)
        if gap < 0:
            continue
        if gap > 1:
            break
        chain.append(day)
        cursor = day
    return chain


def _gap_is_protected(day: date, cursor: date, skip_days: Set[date]) -> bool:
    inner_start = day + timedelta(days=1)
    inner_end = cursor - timedelta(days=1)
    return all(d in skip_days for d in iter_days(inner_start, inner_end))
