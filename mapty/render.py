"""Text projections of workouts for the map widget and the workout list."""

from mapty.models import Cycling, Running

ICONS = {
    Running.type: "🏃‍♂️",
    Cycling.type: "🚴‍♀️",
}

DEFAULT_ZOOM = 13


def _fmt(value) -> str:
    """Show whole numbers without a trailing .0 (10.0 -> '10')."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return f"{value:g}"


def map_view(coords, zoom: int = DEFAULT_ZOOM) -> dict:
    """Center/pan command for the map widget."""
    lat, lng = coords
    return {
        "center": [lat, lng],
        "zoom": zoom,
        "animate": True,
        "pan": {"duration": 1},
    }


def marker_label(workout) -> str:
    return f"{ICONS.get(workout.type, '')} {workout.description}".strip()


def popup_options(workout) -> dict:
    return {
        "maxWidth": 250,
        "minWidth": 100,
        "autoClose": False,
        "closeOnClick": False,
        "className": f"{workout.type}-popup",
    }


def format_workout(workout) -> str:
    """Multi-line list entry, one metric per line."""
    lines = [
        f"{workout.description}  [{workout.id}]",
        f"  {ICONS.get(workout.type, '')} {_fmt(workout.distance)} km",
        f"  ⏱ {_fmt(workout.duration)} min",
    ]
    if isinstance(workout, Running):
        lines.append(f"  ⚡️ {workout.pace:.1f} min/km")
        lines.append(f"  🦶🏼 {workout.cadence} spm")
    elif isinstance(workout, Cycling):
        lines.append(f"  ⚡️ {workout.speed:.1f} km/h")
        lines.append(f"  ⛰ {_fmt(workout.elevation_gain)} m")
    return "\n".join(lines)
