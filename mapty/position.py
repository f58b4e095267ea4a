"""One-shot current-position lookup used to center the map."""


class LocationError(RuntimeError):
    """No usable position; callers report it once and carry on uncentered."""


def current_position(config) -> tuple[float, float]:
    """Return (lat, lng) from the ``location`` section of config."""
    location = (config or {}).get("location")
    if not location:
        raise LocationError("No location configured")
    try:
        return float(location["lat"]), float(location["lng"])
    except (KeyError, TypeError, ValueError) as e:
        raise LocationError(f"Invalid location in config: {e!r}") from e
