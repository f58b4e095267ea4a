import os
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "config.yaml"


def _expand(value):
    """Recursively expand ~ and env vars in string values."""
    if isinstance(value, str):
        return os.path.expandvars(os.path.expanduser(value))
    if isinstance(value, dict):
        return {k: _expand(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand(v) for v in value]
    return value


def load_config(path=None):
    """Load YAML config, expanding ~ and $ENV_VARS in all string values."""
    path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return _expand(raw)


def load_config_or_default(path=None):
    """Like load_config, but a missing file yields an empty config."""
    try:
        return load_config(path)
    except FileNotFoundError:
        return {}


def get_storage_key(config=None) -> str:
    return (config or {}).get("storage", {}).get("key") or "workouts"


def get_map_zoom(config=None) -> int:
    return int((config or {}).get("map", {}).get("zoom", 13))
