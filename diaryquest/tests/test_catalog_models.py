"""Tests for the badge catalog and rule models."""

import pytest
from pydantic import ValidationError

from diaryquest.features.achievements.catalog import DEFAULT_CATALOG, RECOGNIZED_TAGS, with_week_start
from diaryquest.models.achievement import BadgeCatalog, BadgeDefinition, TimeOfDayRule, WeeklyVolumeRule
from diaryquest.models.entry import ActivityEntry


def test_default_catalog_ids_are_unique_and_stable():
    ids = DEFAULT_CATALOG.ids()
    assert len(ids) == len(set(ids)) == 18
    assert ids[0] == "first-entry"
    assert ids[-1] == "hundred-streak"


def test_every_tag_badge_uses_a_recognized_tag():
    tags = {badge.rule.tag for badge in DEFAULT_CATALOG.badges if badge.rule.kind == "tag_count"}
    assert tags <= set(RECOGNIZED_TAGS)


def test_duplicate_badge_ids_rejected():
    badge = DEFAULT_CATALOG.badges[0]
    with pytest.raises(ValidationError, match="duplicate badge ids: first-entry"):
        BadgeCatalog(version=1, badges=(badge, badge))


def test_rule_parsed_from_plain_dict():
    badge = BadgeDefinition.model_validate(
        {
            "id": "x",
            "title": "X",
            "description": "",
            "icon": "?",
            "rule": {"kind": "tag_count", "tag": "learning", "threshold": 3},
        }
    )
    assert badge.rule.kind == "tag_count"
    assert badge.rule.threshold == 3


def test_unknown_rule_kind_rejected():
    with pytest.raises(ValidationError):
        BadgeDefinition.model_validate(
            {"id": "x", "title": "X", "description": "", "icon": "?", "rule": {"kind": "moon_phase"}}
        )


def test_time_of_day_rule_needs_exactly_one_window():
    with pytest.raises(ValidationError):
        TimeOfDayRule(threshold=1)
    with pytest.raises(ValidationError):
        TimeOfDayRule(threshold=1, before_hour=8, from_hour=22)
    assert TimeOfDayRule(threshold=1, before_hour=8).matches(7)
    assert not TimeOfDayRule(threshold=1, from_hour=22).matches(21)


def test_with_week_start_only_touches_weekly_rules():
    monday = with_week_start(DEFAULT_CATALOG, 0)
    weekly = [b.rule for b in monday.badges if isinstance(b.rule, WeeklyVolumeRule)]
    assert weekly and all(rule.week_start == 0 for rule in weekly)
    others = [(a, b) for a, b in zip(DEFAULT_CATALOG.badges, monday.badges) if a.rule.kind != "weekly_volume"]
    assert all(a == b for a, b in others)
    assert monday.version == DEFAULT_CATALOG.version


def test_entry_tags_have_set_semantics():
    entry = ActivityEntry(id="e", date="2024-01-01", tags=["dev", "dev", "testing"], timestamp=1)
    assert entry.tags == ("dev", "testing")


def test_entry_rejects_malformed_day():
    with pytest.raises(ValidationError):
        ActivityEntry(id="e", date="01/02/2024", timestamp=1)
