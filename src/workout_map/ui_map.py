from __future__ import annotations

from collections.abc import Callable

import gi
from loguru import logger

from workout_map.bounds import MAX_ZOOM, TILE_SIZE, Bounds
from workout_map.map_sync import Coords, PopupOptions

gi.require_versions({"Gtk": "4.0", "Adw": "1", "Shumate": "1.0"})
from gi.repository import Adw, Gtk, Pango, Shumate  # noqa: E402

LICENSE_URI = "https://www.openstreetmap.org/copyright"


class ShumateMapWidget(Gtk.Box):
    """
    libshumate implementation of the MapWidget port. Shows a placeholder until
    create_map() is called (the position request has succeeded).
    """

    def __init__(self) -> None:
        super().__init__(orientation=Gtk.Orientation.VERTICAL)
        self.set_hexpand(True)
        self.set_vexpand(True)

        self._placeholder = Adw.StatusPage()
        self._placeholder.set_icon_name("find-location-symbolic")
        self._placeholder.set_title("Waiting for your position")
        self._placeholder.set_vexpand(True)
        self.append(self._placeholder)

        self._map: Shumate.Map | None = None
        self._viewport: Shumate.Viewport | None = None
        self._marker_layer: Shumate.MarkerLayer | None = None
        self._click_handlers: list[Callable[[Coords], None]] = []

    def show_unavailable(self, message: str) -> None:
        self._placeholder.set_icon_name("location-services-disabled-symbolic")
        self._placeholder.set_title("Map unavailable")
        self._placeholder.set_description(message)

    # ---- MapWidget ----
    def create_map(self, center: Coords, zoom: int) -> None:
        self._map = Shumate.Map()
        self._map.set_hexpand(True)
        self._map.set_vexpand(True)
        self._viewport = self._map.get_viewport()
        self._viewport.set_max_zoom_level(MAX_ZOOM)
        self._viewport.set_zoom_level(zoom)
        self._map.center_on(center[0], center[1])

        self._marker_layer = Shumate.MarkerLayer.new(self._viewport)
        self._map.add_layer(self._marker_layer)

        click = Gtk.GestureClick()
        click.connect("released", self._on_released)
        self._map.add_controller(click)

        self.remove(self._placeholder)
        self.append(self._map)

    def add_tile_layer(self, url: str, attribution: str) -> None:
        source = Shumate.RasterRenderer.new_full_from_url(
            "workout-map-tiles",
            "Workout Map tiles",
            attribution,
            LICENSE_URI,
            0,
            MAX_ZOOM,
            TILE_SIZE,
            Shumate.MapProjection.MERCATOR,
            url,
        )
        self._viewport.set_reference_map_source(source)
        layer = Shumate.MapLayer.new(source, self._viewport)
        # tiles below the markers
        self._map.insert_layer_behind(layer, self._marker_layer)

    def on_click(self, handler: Callable[[Coords], None]) -> None:
        self._click_handlers.append(handler)

    def add_marker(self, coords: Coords) -> Shumate.Marker:
        marker = Shumate.Marker()
        marker.set_location(coords[0], coords[1])

        pin = Gtk.Image.new_from_icon_name("mark-location-symbolic")
        pin.set_pixel_size(32)
        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=2)
        box.append(pin)
        marker.set_child(box)

        self._marker_layer.add_marker(marker)
        return marker

    def bind_popup(self, marker: Shumate.Marker, options: PopupOptions, html: str) -> None:
        # Popups stay open (auto_close / close_on_click are both False), so they are
        # drawn as a bubble above the pin rather than as a Gtk.Popover.
        label = Gtk.Label(label=html)
        label.set_wrap(True)
        label.set_wrap_mode(Pango.WrapMode.WORD_CHAR)
        label.set_max_width_chars(max(options.max_width // 8, 1))
        label.set_width_chars(max(options.min_width // 8, 1))

        bubble = Gtk.Box()
        bubble.add_css_class("map-popup")
        bubble.add_css_class(options.class_name)
        bubble.append(label)

        box = marker.get_child()
        box.prepend(bubble)

    def remove_marker(self, marker: Shumate.Marker) -> None:
        self._marker_layer.remove_marker(marker)

    def set_view(self, coords: Coords, zoom: int, animate: bool = True) -> None:
        if self._map is None:
            return
        if animate:
            self._map.go_to_full(coords[0], coords[1], zoom)
        else:
            self._viewport.set_zoom_level(zoom)
            self._map.center_on(coords[0], coords[1])

    def fit_bounds(self, bounds: Bounds) -> None:
        if self._map is None:
            return
        zoom = bounds.zoom_to_fit(
            self._map.get_width(),
            self._map.get_height(),
            padding_px=32,
            max_zoom=int(self._viewport.get_max_zoom_level()),
        )
        lat, lng = bounds.center
        logger.debug("Fitting {} at zoom {}", bounds, zoom)
        self._map.go_to_full(lat, lng, zoom)

    # ---- signals ----
    def _on_released(self, _gesture, _n_press, x, y):
        lat, lng = self._viewport.widget_coords_to_location(self._map, x, y)
        for handler in self._click_handlers:
            handler((lat, lng))
