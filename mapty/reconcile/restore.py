"""Restore fully capable workouts from records that lost their class on the way through storage."""

import math
from collections.abc import Mapping
from dataclasses import replace

from mapty.models import WORKOUT_TYPES, Running, Workout, build_workout
from mapty.snapshot import VARIANT_RECORD_KEYS, parse_timestamp, serialize_workout


class ReconciliationError(ValueError):
    """A stored record cannot be turned back into a workout."""

    def __init__(self, message: str, record_id=None):
        if record_id is not None:
            message = f"record {record_id}: {message}"
        super().__init__(message)
        self.record_id = record_id


def _as_record(obj) -> Mapping:
    """View a dict, a workout, or a plain attribute object as a flat record."""
    if isinstance(obj, Mapping):
        return obj
    if isinstance(obj, Workout):
        return serialize_workout(obj)
    try:
        return vars(obj)
    except TypeError:
        raise ReconciliationError(f"not a workout record: {type(obj).__name__}") from None


def is_capable(obj) -> bool:
    """True if obj is already a proper instance of the class its type names."""
    workout_type = getattr(obj, "type", None)
    if not isinstance(workout_type, str):
        return False
    cls = WORKOUT_TYPES.get(workout_type)
    return cls is not None and isinstance(obj, cls)


def _finite(value) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite number {value!r}")
    return number


def _coords(value) -> tuple[float, float]:
    lat, lng = value
    return _finite(lat), _finite(lng)


def _cadence(value) -> int:
    number = _finite(value)
    if not number.is_integer():
        raise ValueError(f"cadence must be a whole number, got {value!r}")
    return int(number)


def reconcile(obj) -> Workout:
    """Return a capable workout equivalent to ``obj``.

    Already-capable workouts come back unchanged. Anything else is rebuilt
    from its base and variant fields, which recomputes the description and
    derived metrics, and then gets the original id, created_at and click
    count copied onto it.

    Raises:
        ReconciliationError: unknown type, or missing / unusable fields.
    """
    if is_capable(obj):
        return obj

    record = _as_record(obj)
    record_id = record.get("id")
    workout_type = record.get("type")
    if not isinstance(workout_type, str) or workout_type not in WORKOUT_TYPES:
        raise ReconciliationError(f"unknown workout type {workout_type!r}", record_id)
    if record_id is None or record_id == "":
        raise ReconciliationError("missing field 'id'")

    extra_key = VARIANT_RECORD_KEYS[workout_type]
    try:
        coords = _coords(record["coords"])
        distance = _finite(record["distance"])
        duration = _finite(record["duration"])
        if workout_type == Running.type:
            extra = _cadence(record[extra_key])
        else:
            extra = _finite(record[extra_key])
        created_at = parse_timestamp(record["date"])
        clicks = int(_finite(record.get("clicks") or 0))
    except KeyError as e:
        raise ReconciliationError(f"missing field {e.args[0]!r}", record_id) from None
    except (TypeError, ValueError, OverflowError) as e:
        raise ReconciliationError(f"unusable field value ({e})", record_id) from e

    fresh = build_workout(workout_type, coords, distance, duration, extra,
                          created_at=created_at)

    # Identity comes from the record, not from the rebuild
    return replace(fresh, id=str(record_id), created_at=created_at, clicks=clicks)
