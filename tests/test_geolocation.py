from __future__ import annotations

import pytest

gi = pytest.importorskip("gi")
from gi.repository import GLib  # noqa: E402
from workout_map import geolocation  # noqa: E402
from workout_map.geolocation import deliver_once, request_position  # noqa: E402


# -------- helpers --------
class Calls:
    def __init__(self) -> None:
        self.successes: list = []
        self.errors: list = []

    def success(self, coords) -> None:
        self.successes.append(coords)

    def error(self, message) -> None:
        self.errors.append(message)


def _drain() -> None:
    ctx = GLib.MainContext.default()
    while ctx.iteration(False):
        pass


# -------- tests --------
def test_first_callback_wins() -> None:
    calls = Calls()
    success, error = deliver_once(calls.success, calls.error)

    assert success((41.9, 12.5)) is False
    assert error("late failure") is False
    assert success((0.0, 0.0)) is False

    assert calls.successes == [(41.9, 12.5)]
    assert calls.errors == []


def test_error_is_delivered_only_once() -> None:
    calls = Calls()
    success, error = deliver_once(calls.success, calls.error)
    error("denied")
    error("denied again")
    success((41.9, 12.5))
    assert calls.errors == ["denied"]
    assert calls.successes == []


def test_fixed_position_arrives_on_the_main_loop() -> None:
    calls = Calls()
    request_position("io.Luigi311.WorkoutMap", calls.success, calls.error, fixed=(41.9, 12.5))
    assert calls.successes == []

    _drain()
    assert calls.successes == [(41.9, 12.5)]
    assert calls.errors == []


def test_missing_geoclue_reports_one_error(monkeypatch) -> None:
    def _no_geoclue(namespace, version):
        raise ValueError(f"Namespace {namespace} not available")

    monkeypatch.setattr(geolocation.gi, "require_version", _no_geoclue)
    calls = Calls()
    request_position("io.Luigi311.WorkoutMap", calls.success, calls.error)
    _drain()

    assert calls.successes == []
    assert calls.errors == ["Namespace Geoclue not available"]
