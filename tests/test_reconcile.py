import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from mapty.models import Cycling, Running, create_workout
from mapty.reconcile.restore import ReconciliationError, is_capable, reconcile
from mapty.snapshot import serialize_workout

COORDS = (51.505, -0.09)


def test_capable_workout_returned_unchanged():
    run = create_workout("running", COORDS, 10, 50, 178)
    assert reconcile(run) is run


def test_running_record_restored(running_record):
    run = reconcile(running_record)
    assert isinstance(run, Running)
    assert run.id == "1713087000"
    assert run.created_at == datetime(2024, 4, 14, 9, 30, 0, 123000, tzinfo=timezone.utc)
    assert run.clicks == 2
    assert run.coords == (51.505, -0.09)
    assert run.cadence == 178
    assert run.pace == 5.0
    assert run.description == "Running on April 14"


def test_cycling_record_restored(cycling_record):
    ride = reconcile(cycling_record)
    assert isinstance(ride, Cycling)
    assert ride.id == "1713173400"
    assert ride.elevation_gain == 320.0
    assert ride.speed == 20 / 60
    assert ride.description == "Cycling on April 15"


@pytest.mark.parametrize("workout_type, extra", [("running", 178), ("cycling", 42.5)])
def test_round_trip_through_json(workout_type, extra):
    original = create_workout(workout_type, COORDS, 7.3, 41, extra).click()
    record = json.loads(json.dumps(serialize_workout(original)))

    restored = reconcile(record)

    assert restored == original
    assert type(restored) is type(original)
    assert restored.description == original.description
    if workout_type == "running":
        assert restored.pace == original.pace
    else:
        assert restored.speed == original.speed


def test_stored_derived_values_are_not_trusted(running_record):
    running_record["pace"] = 999
    running_record["description"] = "Stale"
    run = reconcile(running_record)
    assert run.pace == 5.0
    assert run.description == "Running on April 14"


def test_missing_clicks_defaults_to_zero(running_record):
    del running_record["clicks"]
    assert reconcile(running_record).clicks == 0


def test_attribute_object_is_restored(running_record):
    stale = SimpleNamespace(**running_record)
    assert not is_capable(stale)
    run = reconcile(stale)
    assert isinstance(run, Running)
    assert run.id == running_record["id"]


@pytest.mark.parametrize("bad_type", ["swimming", ["running"], {"kind": "running"}, None, 1])
def test_unknown_type_fails(running_record, bad_type):
    running_record["type"] = bad_type
    with pytest.raises(ReconciliationError, match="unknown workout type") as exc_info:
        reconcile(running_record)
    assert exc_info.value.record_id == "1713087000"


@pytest.mark.parametrize("key", ["coords", "distance", "duration", "date", "cadence"])
def test_missing_field_fails(running_record, key):
    del running_record[key]
    with pytest.raises(ReconciliationError, match=key):
        reconcile(running_record)


def test_missing_id_fails(cycling_record):
    del cycling_record["id"]
    with pytest.raises(ReconciliationError, match="id"):
        reconcile(cycling_record)


def test_garbled_field_fails(cycling_record):
    cycling_record["distance"] = "far"
    with pytest.raises(ReconciliationError):
        reconcile(cycling_record)


def test_running_record_with_cycling_field_only_fails(cycling_record):
    cycling_record["type"] = "running"
    with pytest.raises(ReconciliationError, match="cadence"):
        reconcile(cycling_record)


def test_non_record_fails():
    with pytest.raises(ReconciliationError):
        reconcile(42)


def test_attribute_object_with_unhashable_type_fails(running_record):
    stale = SimpleNamespace(**dict(running_record, type=["running"]))
    assert not is_capable(stale)
    with pytest.raises(ReconciliationError, match="unknown workout type"):
        reconcile(stale)


@pytest.mark.parametrize("key, value", [
    ("cadence", float("nan")),
    ("cadence", float("inf")),
    ("distance", float("nan")),
    ("duration", float("-inf")),
    ("clicks", float("inf")),
    ("coords", [float("nan"), -0.09]),
])
def test_non_finite_values_fail(running_record, key, value):
    running_record[key] = value
    with pytest.raises(ReconciliationError, match="unusable field value"):
        reconcile(running_record)


def test_overflowing_cadence_from_json_fails(running_record):
    raw = json.dumps(running_record).replace('"cadence": 178', '"cadence": 1e400')
    with pytest.raises(ReconciliationError):
        reconcile(json.loads(raw))


def test_fractional_cadence_fails(running_record):
    running_record["cadence"] = 170.5
    with pytest.raises(ReconciliationError, match="whole number"):
        reconcile(running_record)


def test_whole_float_cadence_restored_as_int(running_record):
    running_record["cadence"] = 178.0
    run = reconcile(running_record)
    assert run.cadence == 178
    assert isinstance(run.cadence, int)


def test_non_finite_elevation_fails(cycling_record):
    cycling_record["elevationGain"] = float("nan")
    with pytest.raises(ReconciliationError):
        reconcile(cycling_record)
