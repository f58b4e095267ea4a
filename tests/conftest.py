"""Shared fixtures: a throwaway sqlite database and a workout log on top of it."""

import sqlite3

import pytest

from mapty.db import KeyValueStore
from mapty.snapshot import SnapshotStore
from mapty.workout_log import WorkoutLog


@pytest.fixture
def config(tmp_path):
    return {"paths": {"db": str(tmp_path / "data" / "mapty.db")}}


@pytest.fixture
def conn(tmp_path):
    connection = sqlite3.connect(str(tmp_path / "kv.db"))
    yield connection
    connection.close()


@pytest.fixture
def kv(conn):
    return KeyValueStore(conn)


@pytest.fixture
def store(kv):
    return SnapshotStore(kv)


@pytest.fixture
def log(store):
    return WorkoutLog(store)


@pytest.fixture
def running_record():
    return {
        "id": "1713087000",
        "date": "2024-04-14T09:30:00.123Z",
        "coords": [51.505, -0.09],
        "distance": 10,
        "duration": 50,
        "clicks": 2,
        "type": "running",
        "description": "Running on April 14",
        "cadence": 178,
        "pace": 5,
    }


@pytest.fixture
def cycling_record():
    return {
        "id": "1713173400",
        "date": "2024-04-15T18:05:10.000Z",
        "coords": [51.51, -0.1],
        "distance": 20,
        "duration": 60,
        "clicks": 0,
        "type": "cycling",
        "description": "Cycling on April 15",
        "elevationGain": 320,
        "speed": 0.3333333333333333,
    }
