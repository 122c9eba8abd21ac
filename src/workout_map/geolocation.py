from __future__ import annotations

from collections.abc import Callable

import gi
from gi.repository import GLib
from loguru import logger

Coords = tuple[float, float]


def deliver_once(
    on_success: Callable[[Coords], None],
    on_error: Callable[[str], None],
) -> tuple[Callable[[Coords], bool], Callable[[str], bool]]:
    """
    Wrap the two callbacks so that only the first call to either one goes through.
    The wrappers return False so they can be handed to GLib.idle_add directly.
    """
    done = False

    def _deliver(callback, value) -> bool:
        nonlocal done
        if done:
            logger.debug("Position already delivered, dropping {!r}", value)
            return False
        done = True
        callback(value)
        return False

    return (lambda coords: _deliver(on_success, coords)), (lambda message: _deliver(on_error, message))


def request_position(
    desktop_id: str,
    on_success: Callable[[Coords], None],
    on_error: Callable[[str], None],
    *,
    fixed: Coords | None = None,
) -> None:
    """
    Ask GeoClue once for the current position. Exactly one of the callbacks is
    invoked, on the GLib main loop. No retry and no continuous tracking.
    `fixed` skips GeoClue entirely (used by --position).
    """
    success, error = deliver_once(on_success, on_error)

    if fixed is not None:
        GLib.idle_add(success, fixed)
        return

    try:
        gi.require_version("Geoclue", "2.0")
        from gi.repository import Geoclue
    except (ImportError, ValueError) as e:
        logger.warning("GeoClue is not available: {}", e)
        GLib.idle_add(error, str(e))
        return

    def _on_ready(_source, result):
        try:
            simple = Geoclue.Simple.new_finish(result)
        except GLib.Error as e:
            error(e.message)
            return
        location = simple.get_location()
        coords = (location.get_property("latitude"), location.get_property("longitude"))
        logger.info("GeoClue position {}", coords)
        success(coords)

    Geoclue.Simple.new(desktop_id, Geoclue.AccuracyLevel.EXACT, None, _on_ready)
