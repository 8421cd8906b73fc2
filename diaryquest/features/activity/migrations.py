"""
diaryquest/features/activity/migrations.py

Schema upgrades for persisted/exported activity snapshots.

Version history:
- 1: legacy client store. camelCase keys, `tags` optional and `dev` for
     development, skips as a list, derived state (achievements, streak
     counts) persisted alongside entries.
- 2: skips keyed by day.
- 3: snake_case keys, derived state dropped (it is always recomputed).

Each step takes the previous version's dict and returns the next one; they
never mutate their input.
"""

import logging
from typing import Any, Callable, Dict

from diaryquest.core.errors import SnapshotVersionError
from diaryquest.models.snapshot import CURRENT_SCHEMA_VERSION, ActivitySnapshot

logger = logging.getLogger("diaryquest")

DERIVED_KEYS = ("achievements", "currentStreak", "longestStreak")

# Tag ids the legacy client wrote that differ from the catalog vocabulary
LEGACY_TAG_ALIASES = {"dev": "development"}


def _upgrade_v1_to_v2(payload: Dict[str, Any]) -> Dict[str, Any]:
    entries = [
        {**entry, "tags": [LEGACY_TAG_ALIASES.get(tag, tag) for tag in entry.get("tags") or []]}
        for entry in payload.get("entries") or []
    ]

    skips_in = payload.get("skips") or []
    if isinstance(skips_in, dict):
        skips_in = list(skips_in.values())
    # Last write wins: later createdAt, then later position in the list
    ordered = sorted(enumerate(skips_in), key=lambda pair: (pair[1].get("createdAt", 0), pair[0]))
    skips = {record["date"]: dict(record) for _, record in ordered}

    return {**payload, "version": 2, "entries": entries, "skips": skips}


def _upgrade_v2_to_v3(payload: Dict[str, Any]) -> Dict[str, Any]:
    dropped = [key for key in DERIVED_KEYS if key in payload]
    if dropped:
        logger.info("snapshot.derived_state_dropped", extra={"keys": ",".join(dropped)})

    skips = {
        day: {
            "date": record.get("date", day),
            "reason": record.get("reason"),
            "created_at": record.get("createdAt", record.get("created_at", 0)),
        }
        for day, record in (payload.get("skips") or {}).items()
    }
    return {
        "schema_version": 3,
        "entries": [dict(entry) for entry in payload.get("entries") or []],
        "skips": skips,
    }


UPGRADES: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    1: _upgrade_v1_to_v2,
    2: _upgrade_v2_to_v3,
}


def detect_version(payload: Dict[str, Any]) -> int:
    """Legacy payloads carry `version`; current ones `schema_version`; neither means 1."""
    version = payload.get("schema_version", payload.get("version", 1))
    try:
        return int(version)
    except (TypeError, ValueError):
        raise SnapshotVersionError(f"Unreadable snapshot version: {version!r}")


def upgrade_snapshot(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Run upgrade steps until the payload is at CURRENT_SCHEMA_VERSION."""
    version = detect_version(payload)
    if version > CURRENT_SCHEMA_VERSION or version < 1:
        raise SnapshotVersionError(
            f"Snapshot schema version {version} is not supported (current is {CURRENT_SCHEMA_VERSION})"
        )

    upgraded = dict(payload)
    while version < CURRENT_SCHEMA_VERSION:
        upgraded = UPGRADES[version](upgraded)
        logger.info("snapshot.upgraded", extra={"from_version": version, "to_version": version + 1})
        version += 1
    return upgraded


def load_snapshot(payload: Dict[str, Any]) -> ActivitySnapshot:
    """Upgrade then validate a stored payload."""
    return ActivitySnapshot.model_validate(upgrade_snapshot(payload))


def dump_snapshot(snapshot: ActivitySnapshot) -> Dict[str, Any]:
    return snapshot.model_dump(mode="json")
