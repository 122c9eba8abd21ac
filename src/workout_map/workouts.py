from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from workout_map.errors import StorageCorruptError, ValidationError
from workout_map.validation import validate

MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


class WorkoutType(str, Enum):
    RUNNING = "running"
    CYCLING = "cycling"

    @property
    def icon(self) -> str:
        return "🏃‍♂️" if self is WorkoutType.RUNNING else "🚴‍♀️"

    @property
    def variant_field(self) -> str:
        return "cadence" if self is WorkoutType.RUNNING else "elevation_gain"


# Fields that identify a workout and never change once it exists
_FROZEN_FIELDS = frozenset({"type", "coords", "id", "created_at"})

# Python attribute -> persisted key, where they differ
WIRE_NAMES = {
    "elevation_gain": "elevationGain",
    "created_at": "createdAt",
    "click_count": "clickCount",
}


def generate_workout_id(now: datetime) -> str:
    """Last 10 digits of the creation time in epoch milliseconds."""
    return str(int(now.timestamp() * 1000))[-10:]


def describe(workout_type: WorkoutType | str, created_at: datetime) -> str:
    name = WorkoutType(workout_type).value
    return f"{name[:1].upper()}{name[1:]} on {MONTHS[created_at.month - 1]} {created_at.day}"


def running_pace(distance: float, duration: float) -> float:
    # min/km
    return duration / distance


def cycling_speed(distance: float, duration: float) -> float:
    # Historical formula, every stored cycling workout was computed with it.
    return distance / (duration * 60)


@dataclass(eq=False)
class Workout:
    type: WorkoutType
    coords: tuple[float, float]
    distance: float  # km
    duration: float  # min
    id: str
    created_at: datetime
    cadence: float | None = None  # spm, running only
    elevation_gain: float | None = None  # m, cycling only
    click_count: int = 0

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _FROZEN_FIELDS and name in self.__dict__:
            raise AttributeError(f"'{name}' cannot be changed after a workout is created")
        super().__setattr__(name, value)

    # ---- derived values ----
    @property
    def description(self) -> str:
        return describe(self.type, self.created_at)

    @property
    def pace(self) -> float | None:
        if self.type is not WorkoutType.RUNNING:
            return None
        return running_pace(self.distance, self.duration)

    @property
    def speed(self) -> float | None:
        if self.type is not WorkoutType.CYCLING:
            return None
        return cycling_speed(self.distance, self.duration)

    @property
    def metric_fields(self) -> tuple[str, ...]:
        return ("distance", "duration", self.type.variant_field)

    @property
    def extra(self) -> float:
        """The variant payload: cadence for running, elevation gain for cycling."""
        return getattr(self, self.type.variant_field)

    def recompute_derived(self) -> float:
        """
        Recalculate the derived metric (pace or speed) from the current distance and
        duration. The metric is never cached, so this also serves as a consistency
        check after the metric fields were edited.
        """
        if self.type is WorkoutType.RUNNING:
            return running_pace(self.distance, self.duration)
        return cycling_speed(self.distance, self.duration)

    def click(self) -> None:
        self.click_count += 1

    # ---- persistence ----
    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type.value,
            "coords": [self.coords[0], self.coords[1]],
            "distance": self.distance,
            "duration": self.duration,
        }
        if self.type is WorkoutType.RUNNING:
            data["cadence"] = self.cadence
            data["pace"] = self.pace
        else:
            data["elevationGain"] = self.elevation_gain
            data["speed"] = self.speed
        data["id"] = self.id
        data["createdAt"] = self.created_at.isoformat()
        data["description"] = self.description
        data["clickCount"] = self.click_count
        return data


def is_finite_coords(coords: Any) -> bool:
    try:
        lat, lng = coords
    except (TypeError, ValueError):
        return False
    return all(
        isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
        for v in (lat, lng)
    )


def _build(
    workout_type: WorkoutType | str,
    coords: tuple[float, float] | list[float],
    distance: float,
    duration: float,
    extra: float,
    *,
    workout_id: str,
    created_at: datetime,
    click_count: int = 0,
) -> Workout:
    validate(workout_type, distance, duration, extra)
    if not is_finite_coords(coords):
        raise ValidationError(f"Invalid map position: {coords!r}")
    lat, lng = coords
    wt = WorkoutType(workout_type)
    variant = {wt.variant_field: float(extra)}
    return Workout(
        type=wt,
        coords=(float(lat), float(lng)),
        distance=float(distance),
        duration=float(duration),
        id=workout_id,
        created_at=created_at,
        click_count=click_count,
        **variant,
    )


def create_workout(
    workout_type: WorkoutType | str,
    coords: tuple[float, float] | list[float],
    distance: float,
    duration: float,
    extra: float,
    *,
    now: datetime | None = None,
) -> Workout:
    """
    Validate the inputs and build a new workout of the given type at `coords`.
    `extra` is the cadence for running and the elevation gain for cycling.
    Raises ValidationError, in which case nothing is constructed.
    """
    created_at = now or datetime.now().astimezone()
    return _build(
        workout_type,
        coords,
        distance,
        duration,
        extra,
        workout_id=generate_workout_id(created_at),
        created_at=created_at,
    )


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)


def workout_from_dict(data: dict[str, Any]) -> Workout:
    """
    Rebuild a live workout from its persisted plain form. Goes through the same
    construction path as a new workout, so stored pace/speed/description are
    ignored and re-derived. Raises StorageCorruptError on any shape mismatch.
    """
    try:
        wt = WorkoutType(data["type"])
        lat, lng = data["coords"]
        extra_key = WIRE_NAMES.get(wt.variant_field, wt.variant_field)
        workout_id = data["id"]
        if not isinstance(workout_id, str):
            raise TypeError(f"workout id must be a string, got {workout_id!r}")
        click_count = data.get("clickCount", 0)
        if isinstance(click_count, bool) or not isinstance(click_count, int):
            raise TypeError(f"clickCount must be an integer, got {click_count!r}")
        if click_count < 0:
            raise ValueError(f"clickCount cannot be negative, got {click_count}")
        created_at = datetime.fromisoformat(data["createdAt"])
        return _build(
            wt,
            (_number(lat), _number(lng)),
            _number(data["distance"]),
            _number(data["duration"]),
            _number(data[extra_key]),
            workout_id=workout_id,
            created_at=created_at,
            click_count=click_count,
        )
    except (AttributeError, KeyError, RecursionError, TypeError, ValueError, ValidationError) as e:
        raise StorageCorruptError(f"Unreadable workout record: {e}") from e

