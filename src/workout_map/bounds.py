from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

TILE_SIZE = 256
MAX_ZOOM = 19


def _mercator_lat(lat: float) -> float:
    """Latitude -> Web-Mercator y in [-pi/2, pi/2]."""
    s = math.sin(math.radians(lat))
    rad = math.log((1 + s) / (1 - s)) / 2 if abs(s) < 1 else math.copysign(math.pi, s)
    return max(min(rad, math.pi), -math.pi) / 2


@dataclass(frozen=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_coords(cls, coords: Iterable[tuple[float, float]]) -> Bounds | None:
        """Smallest bounds covering every coordinate, or None when there are none."""
        bounds = None
        for lat, lng in coords:
            bounds = cls(lat, lng, lat, lng) if bounds is None else bounds.extend((lat, lng))
        return bounds

    def extend(self, coords: tuple[float, float]) -> Bounds:
        lat, lng = coords
        return Bounds(
            south=min(self.south, lat),
            west=min(self.west, lng),
            north=max(self.north, lat),
            east=max(self.east, lng),
        )

    @property
    def center(self) -> tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)

    @property
    def is_point(self) -> bool:
        return self.south == self.north and self.west == self.east

    def contains(self, coords: tuple[float, float]) -> bool:
        lat, lng = coords
        return self.south <= lat <= self.north and self.west <= lng <= self.east

    def zoom_to_fit(
        self,
        width_px: float,
        height_px: float,
        *,
        tile_size: int = TILE_SIZE,
        padding_px: float = 0,
        max_zoom: int = MAX_ZOOM,
    ) -> int:
        """
        Largest whole zoom level at which these bounds fit a viewport of the given
        size (Web-Mercator). A single point gets `max_zoom`.
        """
        width = max(width_px - 2 * padding_px, 1)
        height = max(height_px - 2 * padding_px, 1)

        lat_fraction = (_mercator_lat(self.north) - _mercator_lat(self.south)) / math.pi
        lng_fraction = (self.east - self.west) / 360

        def _zoom(px: float, fraction: float) -> float:
            if fraction <= 0:
                return math.inf
            return math.log2(px / tile_size / fraction)

        zoom = min(_zoom(height, lat_fraction), _zoom(width, lng_fraction), max_zoom)
        return max(0, math.floor(zoom))
