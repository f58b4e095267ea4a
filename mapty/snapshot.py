"""Whole-collection snapshots of workouts as a JSON array of flat records.

The record layout matches what the browser version of the app kept in
localStorage, so its exported data loads without conversion:

    {"id", "date", "coords": [lat, lng], "distance", "duration", "clicks",
     "type", "description", "cadence" + "pace" | "elevationGain" + "speed"}

Derived values (pace, speed, description) are written for convenience but
are recomputed on load. A record whose cadence is not a whole number is
rejected on load rather than rounded.
"""

import json
from datetime import datetime, timezone

from mapty.models import Cycling, Running

# Record key holding each variant's specific field
VARIANT_RECORD_KEYS = {
    Running.type: "cadence",
    Cycling.type: "elevationGain",
}


class SnapshotError(ValueError):
    """The stored snapshot exists but is not a JSON array of records."""


def format_timestamp(dt: datetime) -> str:
    """Format as ISO-8601 UTC with milliseconds, e.g. 2024-04-14T09:30:00.123Z."""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_timestamp(value) -> datetime:
    """Parse a stored timestamp. Naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def serialize_workout(workout) -> dict:
    """Flatten a workout into a plain JSON-safe record."""
    record = {
        "id": workout.id,
        "date": format_timestamp(workout.created_at),
        "coords": [workout.lat, workout.lng],
        "distance": workout.distance,
        "duration": workout.duration,
        "clicks": workout.clicks,
        "type": workout.type,
        "description": workout.description,
    }
    if isinstance(workout, Running):
        record["cadence"] = workout.cadence
        record["pace"] = workout.pace
    elif isinstance(workout, Cycling):
        record["elevationGain"] = workout.elevation_gain
        record["speed"] = workout.speed
    return record


class SnapshotStore:
    """Read/write/erase the whole workout collection under one key."""

    def __init__(self, kv, key: str = "workouts"):
        self.kv = kv
        self.key = key

    def write(self, workouts) -> int:
        records = [serialize_workout(w) for w in workouts]
        self.kv.set(self.key, json.dumps(records, ensure_ascii=False))
        return len(records)

    def read(self) -> list:
        """Return the stored raw records, or [] when nothing was saved yet."""
        raw = self.kv.get(self.key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Snapshot under {self.key!r} is not valid JSON: {e}") from e
        if data is None:
            return []
        if not isinstance(data, list):
            raise SnapshotError(
                f"Snapshot under {self.key!r} must be a JSON array, got {type(data).__name__}")
        return data

    def erase(self):
        self.kv.delete(self.key)
