from __future__ import annotations

import math

import pytest
from conftest import T0, at
from workout_map.errors import StorageCorruptError, ValidationError
from workout_map.workouts import (
    WorkoutType,
    create_workout,
    cycling_speed,
    describe,
    generate_workout_id,
    workout_from_dict,
)


# -------- helpers --------
def _running(**kw):
    args = {"coords": (41.9, 12.5), "distance": 5.2, "duration": 24, "extra": 178, "now": T0}
    args.update(kw)
    return create_workout("running", **args)


def _cycling(**kw):
    args = {"coords": (41.9, 12.5), "distance": 27, "duration": 95, "extra": 178, "now": T0}
    args.update(kw)
    return create_workout("cycling", **args)


# -------- tests --------
@pytest.mark.parametrize(
    ("distance", "duration", "cadence"),
    [(5.2, 24, 178), (0.4, 3.5, 160), (42.195, 201, 181), (1, 1, 1)],
)
def test_running_pace_is_duration_over_distance(distance, duration, cadence) -> None:
    w = _running(distance=distance, duration=duration, extra=cadence)
    assert w.pace == duration / distance
    assert w.speed is None


def test_five_k_run() -> None:
    w = _running()
    assert w.type is WorkoutType.RUNNING
    assert w.coords == (41.9, 12.5)
    assert w.cadence == 178
    assert w.elevation_gain is None
    assert w.pace == pytest.approx(4.615, abs=1e-3)
    assert w.description == "Running on April 14"
    assert w.click_count == 0


def test_cycling_speed_uses_the_stored_formula() -> None:
    w = _cycling()
    # distance / (duration * 60), not km/h
    assert w.speed == 27 / (95 * 60)
    assert w.speed == cycling_speed(27, 95)
    assert w.pace is None
    assert w.elevation_gain == 178
    assert w.description == "Cycling on April 14"


def test_id_is_last_ten_digits_of_epoch_millis() -> None:
    assert generate_workout_id(T0) == "3081600000"
    assert _running().id == "3081600000"
    assert _running(now=at(1)).id != _running(now=at(2)).id


@pytest.mark.parametrize(
    ("month", "day", "expected"),
    [(1, 1, "Running on January 1"), (12, 31, "Running on December 31")],
)
def test_description_only_depends_on_type_and_date(month, day, expected) -> None:
    created = T0.replace(month=month, day=day)
    assert describe("running", created) == expected

    w = _running(now=created)
    w.distance = 99.0
    w.duration = 1.0
    assert w.description == expected


def test_recompute_derived_follows_edited_fields() -> None:
    w = _running()
    w.distance = 10.0
    w.duration = 50.0
    assert w.recompute_derived() == 5.0
    assert w.pace == 5.0

    c = _cycling()
    c.duration = 60.0
    assert c.recompute_derived() == 27 / 3600
    assert c.speed == 27 / 3600


def test_derived_metrics_cannot_be_set() -> None:
    w = _running()
    with pytest.raises(AttributeError):
        w.pace = 1.0


@pytest.mark.parametrize("name", ["type", "coords", "id", "created_at"])
def test_identity_fields_are_frozen(name) -> None:
    w = _running()
    before = getattr(w, name)
    with pytest.raises(AttributeError):
        setattr(w, name, before)
    assert getattr(w, name) == before


def test_click_only_increments_counter() -> None:
    w = _running()
    before = w.to_dict()
    w.click()
    w.click()
    after = w.to_dict()
    assert w.click_count == 2
    assert after.pop("clickCount") == 2
    before.pop("clickCount")
    assert before == after


def test_invalid_input_builds_nothing() -> None:
    with pytest.raises(ValidationError):
        _running(distance=0)
    with pytest.raises(ValidationError):
        _cycling(duration=math.nan)
    with pytest.raises(ValidationError):
        create_workout("swimming", (0, 0), 1, 1, 1, now=T0)
    with pytest.raises(ValidationError):
        _running(coords=(math.nan, 12.5))


def test_to_dict_shape() -> None:
    assert _running().to_dict() == {
        "type": "running",
        "coords": [41.9, 12.5],
        "distance": 5.2,
        "duration": 24.0,
        "cadence": 178.0,
        "pace": 24 / 5.2,
        "id": "3081600000",
        "createdAt": "2024-04-14T08:00:00+00:00",
        "description": "Running on April 14",
        "clickCount": 0,
    }
    data = _cycling().to_dict()
    assert data["elevationGain"] == 178.0
    assert data["speed"] == 27 / (95 * 60)
    assert "cadence" not in data
    assert "pace" not in data


def test_from_dict_rederives_values() -> None:
    data = _running().to_dict()
    data["pace"] = 999.0
    data["description"] = "Swimming on Mars"
    data["clickCount"] = 3

    w = workout_from_dict(data)
    assert w.pace == 24 / 5.2
    assert w.description == "Running on April 14"
    assert w.click_count == 3
    assert w.id == "3081600000"
    assert w.created_at == T0


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("distance"),
        lambda d: d.update(type="swimming"),
        lambda d: d.update(coords=[1.0]),
        lambda d: d.update(distance="5"),
        lambda d: d.update(distance=-1),
        lambda d: d.update(id=42),
        lambda d: d.update(createdAt="yesterday"),
        lambda d: d.pop("cadence"),
        lambda d: d.update(clickCount=-5),
    ],
    ids=["missing", "type", "coords", "string", "negative", "id", "date", "variant", "click-count"],
)
def test_from_dict_rejects_shape_mismatch(mutate) -> None:
    data = _running().to_dict()
    mutate(data)
    with pytest.raises(StorageCorruptError):
        workout_from_dict(data)
