"""Data models shared by the tile mosaic components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np

Bounds = Tuple[float, float, float, float]


@dataclass(frozen=True)
class GeoPoint:
    """WGS84 coordinate in degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeoBoundingBox:
    """Geographic bounds with min <= max on both axes."""

    min: GeoPoint
    max: GeoPoint

    @property
    def bounds(self) -> Bounds:
        """Return (min_lon, min_lat, max_lon, max_lat)."""
        return (self.min.longitude, self.min.latitude, self.max.longitude, self.max.latitude)


@dataclass(frozen=True)
class ProjectedPoint:
    """Web Mercator coordinate in meters."""

    x: float
    y: float


@dataclass(frozen=True)
class TileIndex:
    """Slippy-map tile address."""

    x: int
    y: int
    zoom: int

    def __str__(self) -> str:
        return f"{self.zoom}/{self.x}/{self.y}"


@dataclass(frozen=True)
class MosaicPlan:
    """Tile range and canvas geometry resolved for one run."""

    bbox: GeoBoundingBox
    zoom: int
    tile_size: int
    tile_range_x: Tuple[int, int]
    tile_range_y: Tuple[int, int]
    pixel_offset: Tuple[int, int]
    width: int
    height: int

    @property
    def tile_count(self) -> int:
        x1, x2 = self.tile_range_x
        y1, y2 = self.tile_range_y
        return (x2 - x1 + 1) * (y2 - y1 + 1)

    def tile_cells(self) -> Iterator[Tuple[int, int]]:
        """Yield raw grid cells (x, y) in row-major order."""
        x1, x2 = self.tile_range_x
        y1, y2 = self.tile_range_y
        for y in range(y1, y2 + 1):
            for x in range(x1, x2 + 1):
                yield x, y

    def tile_offset(self, x: int, y: int) -> Tuple[int, int]:
        """Return the canvas offset of the upper-left pixel of cell (x, y)."""
        xa, ya = self.pixel_offset
        return (
            (x - self.tile_range_x[0]) * self.tile_size - xa,
            (y - self.tile_range_y[0]) * self.tile_size - ya,
        )

    def tile_index(self, x: int, y: int) -> TileIndex | None:
        """Return the addressable tile for a cell, or None if y is off the grid."""
        n = 1 << self.zoom
        if y < 0 or y >= n:
            return None
        return TileIndex(x=x % n, y=y, zoom=self.zoom)


@dataclass(frozen=True)
class DecodedTileImage:
    """Decoded tile pixels shaped (height, width, depth)."""

    pixels: np.ndarray

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def depth(self) -> int:
        return int(self.pixels.shape[2])


@dataclass(frozen=True)
class ElevationStats:
    """Summary of Terrarium-encoded values across a canvas."""

    min: int
    max: int
    average: float
    sample_count: int


@dataclass(frozen=True)
class ElevationReport:
    """Human-oriented elevation diagnostics in meters."""

    min_meters: float
    max_meters: float
    span_meters: float
    average_meters: float
    midpoint: float


@dataclass(frozen=True)
class Georeference:
    """Pixel size and upper-left tie point in Web Mercator meters."""

    pixel_size_x: float
    pixel_size_y: float
    origin_x: float
    origin_y: float
