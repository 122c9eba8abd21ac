from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from typing import Protocol

from loguru import logger

from workout_map.errors import DuplicateWorkoutError, NotFoundError, StorageCorruptError
from workout_map.validation import validate
from workout_map.workouts import WIRE_NAMES, Workout, workout_from_dict

STORAGE_KEY = "workout"

# persisted key -> attribute, so patches may use either spelling
_PATCH_ALIASES = {wire: attr for attr, wire in WIRE_NAMES.items()}


class Storage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


def serialize_workouts(workouts: Iterable[Workout]) -> str:
    return json.dumps([w.to_dict() for w in workouts], ensure_ascii=False)


class WorkoutStore:
    """
    The authoritative, ordered list of workouts (insertion order is display order).

    Every mutation is written through to `storage` before it returns; if the write
    fails the in-memory list is left as it was and the error propagates.
    """

    def __init__(self, storage: Storage, key: str = STORAGE_KEY):
        self._storage = storage
        self._key = key
        self._workouts: list[Workout] = []

    # ---- read access ----
    @property
    def workouts(self) -> tuple[Workout, ...]:
        return tuple(self._workouts)

    def __len__(self) -> int:
        return len(self._workouts)

    def __iter__(self) -> Iterator[Workout]:
        return iter(tuple(self._workouts))

    def __contains__(self, workout_id: object) -> bool:
        return any(w.id == workout_id for w in self._workouts)

    def _index_of(self, workout_id: str) -> int:
        for i, w in enumerate(self._workouts):
            if w.id == workout_id:
                return i
        raise NotFoundError(workout_id)

    def get(self, workout_id: str) -> Workout:
        return self._workouts[self._index_of(workout_id)]

    # ---- persistence ----
    def serialize(self) -> str:
        return serialize_workouts(self._workouts)

    @staticmethod
    def deserialize(blob: str) -> list[Workout]:
        """
        Turn a persisted blob back into live workouts. Each record is rebuilt through
        the regular construction path so derived values are recomputed.
        """
        try:
            data = json.loads(blob)
        except (RecursionError, TypeError, ValueError) as e:
            raise StorageCorruptError(f"Stored workouts are not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise StorageCorruptError(f"Stored workouts must be a list, got {type(data).__name__}")

        workouts = [workout_from_dict(item) for item in data]
        ids = [w.id for w in workouts]
        if len(set(ids)) != len(ids):
            raise StorageCorruptError("Stored workouts contain duplicate ids")
        return workouts

    def load(self) -> tuple[Workout, ...]:
        """Replace the in-memory list with the persisted one. Unreadable data loads as empty."""
        blob = self._storage.get_item(self._key)
        if blob is None:
            self._workouts = []
            return self.workouts

        try:
            self._workouts = self.deserialize(blob)
        except StorageCorruptError as e:
            logger.warning("Ignoring unreadable stored workouts: {}", e)
            self._workouts = []
        else:
            logger.info("Loaded {} workouts", len(self._workouts))
        return self.workouts

    def _commit(self, workouts: list[Workout]) -> None:
        self._storage.set_item(self._key, serialize_workouts(workouts))
        self._workouts = workouts

    # ---- mutations ----
    def add(self, workout: Workout) -> Workout:
        if workout.id in self:
            raise DuplicateWorkoutError(workout.id)
        self._commit([*self._workouts, workout])
        logger.info("Added {} workout {}", workout.type.value, workout.id)
        return workout

    def edit(self, workout_id: str, patch: Mapping[str, float]) -> Workout:
        """
        Update the metric fields of one workout. Keys that do not belong to the
        workout's type (e.g. cadence on a cycling workout) are ignored. The merged
        values are validated like a new workout before anything changes.
        """
        workout = self.get(workout_id)

        changes: dict[str, float] = {}
        for key, value in patch.items():
            attr = _PATCH_ALIASES.get(key, key)
            if attr in workout.metric_fields:
                changes[attr] = value

        merged = {f: changes.get(f, getattr(workout, f)) for f in workout.metric_fields}
        validate(workout.type, merged["distance"], merged["duration"], merged[workout.type.variant_field])

        previous = {f: getattr(workout, f) for f in changes}
        for attr, value in changes.items():
            setattr(workout, attr, float(value))
        workout.recompute_derived()

        try:
            self._commit(self._workouts)
        except Exception:
            for attr, value in previous.items():
                setattr(workout, attr, value)
            raise

        logger.info("Edited workout {}: {}", workout_id, sorted(changes))
        return workout

    def delete(self, workout_id: str) -> Workout:
        index = self._index_of(workout_id)
        removed = self._workouts[index]
        self._commit(self._workouts[:index] + self._workouts[index + 1 :])
        logger.info("Deleted workout {}", workout_id)
        return removed

    def reset(self) -> None:
        self._storage.remove_item(self._key)
        self._workouts = []
        logger.info("Removed all workouts")
