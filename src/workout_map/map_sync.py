from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from loguru import logger

from workout_map.bounds import Bounds
from workout_map.workouts import Workout

Coords = tuple[float, float]


@dataclass(frozen=True)
class PopupOptions:
    class_name: str
    max_width: int = 260
    min_width: int = 100
    auto_close: bool = False
    close_on_click: bool = False


class MapWidget(Protocol):
    """What the app needs from a slippy map widget."""

    def create_map(self, center: Coords, zoom: int) -> None: ...

    def add_tile_layer(self, url: str, attribution: str) -> None: ...

    def on_click(self, handler: Callable[[Coords], None]) -> None: ...

    def add_marker(self, coords: Coords) -> Any: ...

    def bind_popup(self, marker: Any, options: PopupOptions, html: str) -> None: ...

    def remove_marker(self, marker: Any) -> None: ...

    def set_view(self, coords: Coords, zoom: int, animate: bool = True) -> None: ...

    def fit_bounds(self, bounds: Bounds) -> None: ...


def popup_content(workout: Workout) -> str:
    return f"{workout.type.icon} {workout.description}"


class MapSync:
    """
    Keeps one marker per workout on the map. Markers are keyed by workout id, so
    placing a workout twice is a no-op. Before a map is attached (the position
    request has not come back yet) nothing is drawn; the controller places all
    markers once the map exists.
    """

    def __init__(self) -> None:
        self._map: MapWidget | None = None
        self._markers: dict[str, Any] = {}

    @property
    def has_map(self) -> bool:
        return self._map is not None

    def attach(self, map_widget: MapWidget) -> None:
        self._map = map_widget
        self._markers.clear()

    @property
    def marker_ids(self) -> tuple[str, ...]:
        return tuple(self._markers)

    def place_marker(self, workout: Workout) -> bool:
        if self._map is None:
            logger.debug("No map yet, marker for {} deferred", workout.id)
            return False
        if workout.id in self._markers:
            return False

        marker = self._map.add_marker(workout.coords)
        self._map.bind_popup(
            marker,
            PopupOptions(class_name=f"{workout.type.value}-popup"),
            popup_content(workout),
        )
        self._markers[workout.id] = marker
        return True

    def place_markers(self, workouts: Iterable[Workout]) -> int:
        return sum(1 for w in workouts if self.place_marker(w))

    def remove_marker(self, workout_id: str) -> bool:
        marker = self._markers.pop(workout_id, None)
        if marker is None or self._map is None:
            return False
        self._map.remove_marker(marker)
        return True

    def clear(self) -> None:
        if self._map is not None:
            for marker in self._markers.values():
                self._map.remove_marker(marker)
        self._markers.clear()

    @staticmethod
    def compute_bounds(workouts: Iterable[Workout]) -> Bounds | None:
        return Bounds.from_coords(w.coords for w in workouts)

    def fit(self, workouts: Iterable[Workout]) -> Bounds | None:
        bounds = self.compute_bounds(workouts)
        if bounds is None or self._map is None:
            return None
        self._map.fit_bounds(bounds)
        return bounds

    def move_to(self, workout: Workout, zoom: int) -> None:
        if self._map is None:
            return
        self._map.set_view(workout.coords, zoom, animate=True)
