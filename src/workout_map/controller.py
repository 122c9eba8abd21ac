from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from loguru import logger

from workout_map.errors import GeolocationError, NoMapEventError, WorkoutError
from workout_map.list_renderer import ListRenderer
from workout_map.map_sync import Coords, MapSync, MapWidget
from workout_map.store import WorkoutStore
from workout_map.validation import format_number, parse_number
from workout_map.workouts import Workout, WorkoutType, create_workout, is_finite_coords

DEFAULT_ZOOM_LEVEL = 16
DEFAULT_TILE_URL = "https://tile.openstreetmap.fr/hot/{z}/{x}/{y}.png"
DEFAULT_ATTRIBUTION = "© OpenStreetMap contributors"


@dataclass
class FormValues:
    """Raw form contents, exactly as typed."""

    type: str = WorkoutType.RUNNING.value
    distance: str = ""
    duration: str = ""
    cadence: str = ""
    elevation_gain: str = ""

    @classmethod
    def from_workout(cls, workout: Workout) -> FormValues:
        values = cls(
            type=workout.type.value,
            distance=format_number(workout.distance),
            duration=format_number(workout.duration),
        )
        setattr(values, workout.type.variant_field, format_number(workout.extra))
        return values

    def extra_for(self, workout_type: WorkoutType | str) -> str:
        return self.cadence if workout_type == WorkoutType.RUNNING else self.elevation_gain


class WorkoutFormView(Protocol):
    def show(self) -> None: ...

    def hide(self) -> None: ...

    def clear(self) -> None: ...

    def fill(self, values: FormValues) -> None: ...

    def show_variant_fields(self, workout_type: WorkoutType) -> None: ...

    def lock_type(self, workout_type: WorkoutType | None) -> None: ...


class AlertView(Protocol):
    def show_alert(self, message: str) -> None: ...


@dataclass
class ViewPorts:
    form: WorkoutFormView
    alerts: AlertView
    map: MapWidget


class FormState(Enum):
    IDLE = "idle"
    AWAITING_FORM = "awaiting_form"
    EDITING = "editing"


class SessionController:
    """
    Turns user actions into store operations and keeps the list and the map in step
    with the store.

    New workouts follow a small state machine: a map click moves IDLE -> AWAITING_FORM
    and remembers the clicked position; a valid submit creates the workout and goes
    back to IDLE, an invalid one raises an alert and keeps the form (and the position).
    Editing is entered from the list and takes over the same form.
    """

    def __init__(
        self,
        store: WorkoutStore,
        map_sync: MapSync,
        renderer: ListRenderer,
        ports: ViewPorts,
        *,
        zoom_level: int = DEFAULT_ZOOM_LEVEL,
        tile_url: str = DEFAULT_TILE_URL,
        attribution: str = DEFAULT_ATTRIBUTION,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.map_sync = map_sync
        self.renderer = renderer
        self.ports = ports
        self.zoom_level = zoom_level
        self.tile_url = tile_url
        self.attribution = attribution
        self._clock = clock

        self._state = FormState.IDLE
        self._pending_click: Coords | None = None
        self._editing_id: str | None = None

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def pending_click(self) -> Coords | None:
        return self._pending_click

    @property
    def editing_id(self) -> str | None:
        return self._editing_id

    def _alert(self, error: WorkoutError) -> None:
        logger.info("{}: {}", type(error).__name__, error)
        self.ports.alerts.show_alert(str(error))

    def _close_form(self) -> None:
        self.ports.form.clear()
        self.ports.form.hide()
        self.ports.form.lock_type(None)
        self._state = FormState.IDLE
        self._pending_click = None
        self._editing_id = None

    # ---- startup ----
    def start(self) -> None:
        """Load the stored workouts and list them. Markers wait for the map."""
        self.store.load()
        self.renderer.render(self.store.workouts)

    def on_position(self, coords: Coords) -> None:
        map_widget = self.ports.map
        map_widget.create_map(coords, self.zoom_level)
        map_widget.add_tile_layer(self.tile_url, self.attribution)
        map_widget.on_click(self.on_map_click)
        self.map_sync.attach(map_widget)
        placed = self.map_sync.place_markers(self.store.workouts)
        logger.info("Map ready at {}, {} markers placed", coords, placed)

    def on_position_error(self, message: str | None = None) -> None:
        if message:
            logger.warning("Position request failed: {}", message)
        self._alert(GeolocationError())

    # ---- new workout ----
    def on_map_click(self, coords: Coords) -> None:
        if not is_finite_coords(coords):
            logger.warning("Ignoring map click at {}", coords)
            return
        if self._state is FormState.EDITING:
            # a map click abandons the edit and starts a new workout
            self.ports.form.clear()
            self.ports.form.lock_type(None)
            self._editing_id = None
        self._pending_click = (coords[0], coords[1])
        self._state = FormState.AWAITING_FORM
        self.ports.form.show()

    def type_changed(self, workout_type: str) -> None:
        try:
            wt = WorkoutType(workout_type)
        except ValueError:
            logger.warning("Unknown workout type {!r}", workout_type)
            return
        self.ports.form.show_variant_fields(wt)

    def submit(self, values: FormValues) -> Workout | None:
        try:
            if self._state is FormState.EDITING:
                return self._submit_edit(values)
            if self._pending_click is None:
                raise NoMapEventError()
            return self._submit_new(values)
        except WorkoutError as e:
            self._alert(e)
            return None

    def _submit_new(self, values: FormValues) -> Workout:
        workout = create_workout(
            values.type,
            self._pending_click,
            parse_number(values.distance),
            parse_number(values.duration),
            parse_number(values.extra_for(values.type)),
            now=self._clock() if self._clock else None,
        )
        self.store.add(workout)
        self.map_sync.place_marker(workout)
        self.renderer.render_one(workout)
        self._close_form()
        return workout

    # ---- edit ----
    def edit_clicked(self, workout_id: str) -> None:
        try:
            workout = self.store.get(workout_id)
        except WorkoutError as e:
            self._alert(e)
            return

        self._state = FormState.EDITING
        self._editing_id = workout_id
        self._pending_click = None
        self.ports.form.lock_type(workout.type)
        self.ports.form.show_variant_fields(workout.type)
        self.ports.form.fill(FormValues.from_workout(workout))
        self.ports.form.show()

    def _submit_edit(self, values: FormValues) -> Workout:
        workout = self.store.get(self._editing_id)
        patch = {
            "distance": parse_number(values.distance),
            "duration": parse_number(values.duration),
            workout.type.variant_field: parse_number(values.extra_for(workout.type)),
        }
        self.store.edit(workout.id, patch)
        self.renderer.render(self.store.workouts)
        self._close_form()
        return workout

    def cancel_form(self) -> None:
        self._close_form()

    # ---- delete / reset ----
    def delete_clicked(self, workout_id: str) -> None:
        try:
            self.store.delete(workout_id)
        except WorkoutError as e:
            self._alert(e)
            return

        self.map_sync.remove_marker(workout_id)
        self.renderer.render(self.store.workouts)
        if self._editing_id == workout_id:
            self._close_form()

    def delete_all_clicked(self) -> None:
        self.store.reset()
        self.map_sync.clear()
        self.renderer.clear()
        self._close_form()

    # ---- navigation ----
    def recenter_clicked(self) -> None:
        self.map_sync.fit(self.store.workouts)

    def workout_selected(self, workout_id: str) -> None:
        try:
            workout = self.store.get(workout_id)
        except WorkoutError as e:
            self._alert(e)
            return
        self.map_sync.move_to(workout, self.zoom_level)
