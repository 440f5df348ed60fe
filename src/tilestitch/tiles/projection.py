"""Slippy-map tile indexing and Web Mercator projection helpers."""

from __future__ import annotations

import math
from typing import Tuple

from tilestitch.errors import InputError
from tilestitch.tiles.models import GeoPoint, ProjectedPoint, TileIndex

# Half the projected width of the world: pi * 6378137.
ORIGIN_SHIFT = 20037508.342789244
MAX_MERCATOR_LATITUDE = 85.0511287798066


def _check_zoom(zoom: int) -> None:
    """Reject negative zoom levels."""
    if zoom < 0:
        raise InputError(f"Zoom {zoom} less than 0")


def latlon_to_tile_fraction(lat: float, lon: float, zoom: int) -> Tuple[float, float]:
    """Return the untruncated tile coordinate of a point at a zoom level."""
    _check_zoom(zoom)
    if not -90.0 < lat < 90.0:
        raise InputError(f"Latitude {lat} is outside the Web Mercator domain")
    lat_rad = lat * math.pi / 180
    n = float(1 << zoom)
    x = n * ((lon + 180) / 360)
    y = n * (1 - (math.log(math.tan(lat_rad) + 1 / math.cos(lat_rad)) / math.pi)) / 2
    return x, y


def latlon_to_tile(lat: float, lon: float, zoom: int) -> TileIndex:
    """Return the tile containing a point.

    Longitudes outside [-180, 180) wrap around the grid. Latitudes beyond
    the Mercator limit land in the first or last row.
    """
    fx, fy = latlon_to_tile_fraction(lat, lon, zoom)
    n = 1 << zoom
    return TileIndex(x=math.floor(fx) % n, y=min(max(math.floor(fy), 0), n - 1), zoom=zoom)


def tile_to_latlon(x: float, y: float, zoom: int) -> GeoPoint:
    """Return the upper-left corner of tile (x, y); fractional indices allowed."""
    _check_zoom(zoom)
    n = float(1 << zoom)
    lon = 360.0 * x / n - 180.0
    lat_rad = math.atan(math.sinh(math.pi * (1 - 2.0 * y / n)))
    return GeoPoint(latitude=lat_rad * 180 / math.pi, longitude=lon)


def project_latlon(lat: float, lon: float) -> ProjectedPoint:
    """Convert WGS84 degrees to spherical Web Mercator meters."""
    if not -90.0 < lat < 90.0:
        raise InputError(f"Latitude {lat} cannot be projected to Web Mercator")
    x = lon * ORIGIN_SHIFT / 180.0
    y = math.log(math.tan((90 + lat) * math.pi / 360.0)) / (math.pi / 180.0)
    y = y * ORIGIN_SHIFT / 180.0
    return ProjectedPoint(x=x, y=y)


def tile_angular_width(zoom: int) -> float:
    """Return the longitude span of one tile in degrees."""
    _check_zoom(zoom)
    return 360.0 / (1 << zoom)
