from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from itertools import count
from zoneinfo import ZoneInfo

import pytest
from workout_map.controller import FormValues, SessionController, ViewPorts
from workout_map.database import DatabaseManager
from workout_map.list_renderer import ListRenderer, WorkoutEntry
from workout_map.map_sync import MapSync
from workout_map.store import WorkoutStore

T0 = datetime(2024, 4, 14, 8, 0, tzinfo=ZoneInfo("UTC"))


def at(minutes: int) -> datetime:
    """A creation time `minutes` after T0 (distinct times give distinct ids)."""
    return T0 + timedelta(minutes=minutes)


# -------- fakes for the view ports --------
@dataclass(eq=False)
class FakeMarker:
    coords: tuple[float, float]
    popup: str | None = None
    options: object = None


@dataclass
class FakeMapWidget:
    created: tuple | None = None
    tile_layers: list = field(default_factory=list)
    click_handlers: list = field(default_factory=list)
    markers: list[FakeMarker] = field(default_factory=list)
    views: list = field(default_factory=list)
    fitted: list = field(default_factory=list)

    def create_map(self, center, zoom):
        self.created = (center, zoom)

    def add_tile_layer(self, url, attribution):
        self.tile_layers.append((url, attribution))

    def on_click(self, handler):
        self.click_handlers.append(handler)

    def add_marker(self, coords):
        marker = FakeMarker(coords)
        self.markers.append(marker)
        return marker

    def bind_popup(self, marker, options, html):
        marker.options = options
        marker.popup = html

    def remove_marker(self, marker):
        self.markers.remove(marker)

    def set_view(self, coords, zoom, animate=True):
        self.views.append((coords, zoom, animate))

    def fit_bounds(self, bounds):
        self.fitted.append(bounds)

    def click(self, coords):
        for handler in self.click_handlers:
            handler(coords)


@dataclass
class FakeForm:
    visible: bool = False
    values: FormValues | None = None
    variant: object = None
    locked: object = None
    cleared: int = 0

    def show(self):
        self.visible = True

    def hide(self):
        self.visible = False

    def clear(self):
        self.cleared += 1
        self.values = None

    def fill(self, values):
        self.values = values

    def show_variant_fields(self, workout_type):
        self.variant = workout_type

    def lock_type(self, workout_type):
        self.locked = workout_type


@dataclass
class FakeAlerts:
    messages: list[str] = field(default_factory=list)

    def show_alert(self, message):
        self.messages.append(message)


@dataclass
class FakeListView:
    entries: list[WorkoutEntry] = field(default_factory=list)

    def set_entries(self, entries):
        self.entries = list(entries)

    def prepend_entry(self, entry):
        self.entries.insert(0, entry)

    def clear_entries(self):
        self.entries = []

    @property
    def ids(self) -> list[str]:
        return [e.id for e in self.entries]


# -------- fixtures --------
@pytest.fixture
def db(tmp_path) -> DatabaseManager:
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'workouts.db'}")
    yield manager
    manager.close()


@pytest.fixture
def store(db) -> WorkoutStore:
    return WorkoutStore(db)


@dataclass
class Session:
    controller: SessionController
    store: WorkoutStore
    map: FakeMapWidget
    form: FakeForm
    alerts: FakeAlerts
    list_view: FakeListView


@pytest.fixture
def session(store) -> Session:
    map_widget = FakeMapWidget()
    form = FakeForm()
    alerts = FakeAlerts()
    list_view = FakeListView()
    controller = SessionController(
        store,
        MapSync(),
        ListRenderer(list_view),
        ViewPorts(form=form, alerts=alerts, map=map_widget),
        clock=lambda ticks=count(): at(next(ticks)),
    )
    return Session(controller, store, map_widget, form, alerts, list_view)
