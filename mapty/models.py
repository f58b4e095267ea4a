"""Workout entities: the base record plus the running and cycling variants.

Entities are frozen dataclasses. Derived metrics (pace, speed) are pure
functions of the stored fields, so a flat record and its ``type`` tag are
enough to rebuild a fully capable entity (see mapty.reconcile.restore).
The interaction counter is the only value that changes after creation,
and it changes by producing an updated copy via ``click()``.
"""

import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import ClassVar

MONTH_NAMES = [
    "", "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


class ValidationError(ValueError):
    """Raised when workout input is rejected; no workout is created."""


def utc_now() -> datetime:
    """Current UTC time truncated to milliseconds (the stored precision)."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def new_workout_id() -> str:
    return uuid.uuid4().hex


def format_description(workout_type: str, created_at: datetime) -> str:
    """Format a description like 'Running on April 14'."""
    return f"{workout_type.capitalize()} on {MONTH_NAMES[created_at.month]} {created_at.day}"


@dataclass(frozen=True, kw_only=True)
class Workout:
    type: ClassVar[str] = "workout"
    extra_field: ClassVar[str] = ""

    coords: tuple[float, float]
    distance: float  # km
    duration: float  # min
    id: str = field(default_factory=new_workout_id)
    created_at: datetime = field(default_factory=utc_now)
    clicks: int = 0
    description: str = ""

    def __post_init__(self):
        # Computed once; replace() carries the stored value forward unchanged.
        if not self.description:
            object.__setattr__(self, "description",
                               format_description(self.type, self.created_at))

    @property
    def lat(self) -> float:
        return self.coords[0]

    @property
    def lng(self) -> float:
        return self.coords[1]

    def click(self):
        """Return a copy with the interaction counter bumped by one."""
        return replace(self, clicks=self.clicks + 1)


@dataclass(frozen=True, kw_only=True)
class Running(Workout):
    type: ClassVar[str] = "running"
    extra_field: ClassVar[str] = "cadence"

    cadence: int  # steps per minute

    @property
    def pace(self) -> float:
        """Pace in min/km."""
        return self.duration / self.distance


@dataclass(frozen=True, kw_only=True)
class Cycling(Workout):
    type: ClassVar[str] = "cycling"
    extra_field: ClassVar[str] = "elevation_gain"

    elevation_gain: float  # m

    @property
    def speed(self) -> float:
        """Speed labelled km/h.

        Distance is in km and duration in minutes, so the value is km/min
        despite the label.
        """
        return self.distance / self.duration


WORKOUT_TYPES = {
    Running.type: Running,
    Cycling.type: Cycling,
}


def _to_number(value, name: str) -> float:
    """Coerce raw form input to a finite float."""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValidationError(f"{name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return number


def _to_positive(value, name: str) -> float:
    number = _to_number(value, name)
    if number <= 0:
        raise ValidationError(f"{name} must be positive, got {value!r}")
    return number


def _to_coords(coords) -> tuple[float, float]:
    try:
        lat, lng = coords
    except (TypeError, ValueError):
        raise ValidationError(f"coords must be a (lat, lng) pair, got {coords!r}") from None
    return _to_number(lat, "lat"), _to_number(lng, "lng")


def build_workout(workout_type: str, coords, distance: float, duration: float,
                  extra, created_at: datetime | None = None) -> Workout:
    """Construct a workout without validating its inputs.

    A fresh id is always generated. ``created_at`` defaults to now; passing
    it keeps the description tied to an existing timestamp.
    """
    cls = WORKOUT_TYPES[workout_type]
    kwargs = {cls.extra_field: extra}
    if created_at is not None:
        kwargs["created_at"] = created_at
    return cls(coords=tuple(coords), distance=distance, duration=duration, **kwargs)


def create_workout(workout_type: str, coords, distance, duration, extra) -> Workout:
    """Validate raw input and construct a new workout.

    Args:
        workout_type: 'running' or 'cycling'.
        coords: (lat, lng) where the workout was placed on the map.
        distance: Distance in km (number or numeric string), must be > 0.
        duration: Duration in minutes (number or numeric string), must be > 0.
        extra: Cadence in spm for running (positive integer) or elevation
            gain in m for cycling (zero or more).

    Raises:
        ValidationError: on any invalid input.
    """
    if workout_type not in WORKOUT_TYPES:
        raise ValidationError(f"Unknown workout type: {workout_type!r}")

    coords = _to_coords(coords)
    distance = _to_positive(distance, "distance")
    duration = _to_positive(duration, "duration")

    if workout_type == Running.type:
        cadence = _to_positive(extra, "cadence")
        if not cadence.is_integer():
            raise ValidationError(f"cadence must be a whole number, got {extra!r}")
        extra = int(cadence)
    else:
        elevation = _to_number(extra, "elevation gain")
        if elevation < 0:
            raise ValidationError(f"elevation gain must not be negative, got {extra!r}")
        extra = elevation

    return build_workout(workout_type, coords, distance, duration, extra)
