from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from typing import Protocol

from workout_map.workouts import Workout, WorkoutType

# ---------- Helpers / small data structures ----------


@dataclasses.dataclass(frozen=True)
class WorkoutDetail:
    icon: str
    value: str
    unit: str


@dataclasses.dataclass(frozen=True)
class WorkoutEntry:
    id: str
    type: WorkoutType
    title: str
    details: tuple[WorkoutDetail, ...]

    @property
    def css_class(self) -> str:
        return f"workout--{self.type.value}"


class WorkoutListView(Protocol):
    def set_entries(self, entries: list[WorkoutEntry]) -> None: ...

    def prepend_entry(self, entry: WorkoutEntry) -> None: ...

    def clear_entries(self) -> None: ...


def _format_number(v: float | None, digits: int | None = None) -> str:
    if v is None:
        return "—"
    if digits is None:
        # 5.0 -> "5", 5.25 -> "5.25"
        return f"{v:g}"
    return f"{v:.{digits}f}"


def entry_for(workout: Workout) -> WorkoutEntry:
    details = [
        WorkoutDetail(workout.type.icon, _format_number(workout.distance), "km"),
        WorkoutDetail("⏱", _format_number(workout.duration), "min"),
    ]
    if workout.type is WorkoutType.RUNNING:
        details += [
            WorkoutDetail("⚡️", _format_number(workout.pace, 1), "min/km"),
            WorkoutDetail("🦶🏼", _format_number(workout.cadence), "spm"),
        ]
    else:
        details += [
            WorkoutDetail("⚡️", _format_number(workout.speed, 1), "km/h"),
            WorkoutDetail("⛰", _format_number(workout.elevation_gain), "m"),
        ]
    return WorkoutEntry(
        id=workout.id,
        type=workout.type,
        title=workout.description,
        details=tuple(details),
    )


class ListRenderer:
    """Shows workouts newest first, right below the form."""

    def __init__(self, view: WorkoutListView):
        self.view = view

    def render(self, workouts: Iterable[Workout]) -> list[WorkoutEntry]:
        entries = [entry_for(w) for w in reversed(list(workouts))]
        self.view.set_entries(entries)
        return entries

    def render_one(self, workout: Workout) -> WorkoutEntry:
        entry = entry_for(workout)
        self.view.prepend_entry(entry)
        return entry

    def clear(self) -> None:
        self.view.clear_entries()
