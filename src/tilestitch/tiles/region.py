"""Resolve a requested region into a tile range and canvas geometry.

Corner positions are tracked on a fixed 32-bit world grid (``2**32`` units
per axis). Shifting those values right recovers tile indices at the working
zoom, while the 8 bits below the tile index give the position inside a tile
in 1/256 steps, which are then scaled to the configured tile size.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from tilestitch.config import DEFAULT_MAX_PIXELS
from tilestitch.errors import InputError
from tilestitch.tiles.models import GeoBoundingBox, GeoPoint, MosaicPlan
from tilestitch.tiles.projection import latlon_to_tile_fraction, tile_to_latlon

LOGGER = logging.getLogger(__name__)

WORLD_BITS = 32
SUBTILE_BITS = 8
SUBTILE_STEPS = 1 << SUBTILE_BITS
MAX_ZOOM = WORLD_BITS - SUBTILE_BITS
DEFAULT_TILE_SIZE = 256


@dataclass(frozen=True)
class WorldCorners:
    """Upper-left and lower-right corners on the 32-bit world grid."""

    x1: int
    y1: int
    x2: int
    y2: int


def check_zoom(zoom: int) -> None:
    """Validate that a zoom level fits the 32-bit world grid."""
    if zoom < 0:
        raise InputError(f"Zoom {zoom} less than 0")
    if zoom > MAX_ZOOM:
        raise InputError(f"Zoom {zoom} greater than {MAX_ZOOM}")


def world_coordinate(lat: float, lon: float) -> tuple[int, int]:
    """Return the 32-bit world grid position of a point.

    x is left unbounded so regions crossing the antimeridian keep their
    width; tile columns wrap later. y is clamped to the grid.
    """
    limit = (1 << WORLD_BITS) - 1
    fx, fy = latlon_to_tile_fraction(lat, lon, WORLD_BITS)
    y = min(max(math.floor(fy), 0), limit)
    return math.floor(fx), y


def bbox_from_corners(
    min_lat: float,
    min_lon: float,
    max_lat: float,
    max_lon: float,
) -> GeoBoundingBox:
    """Build a bounding box, swapping reversed corners per axis."""
    if min_lat > max_lat:
        min_lat, max_lat = max_lat, min_lat
    if min_lon > max_lon:
        min_lon, max_lon = max_lon, min_lon
    return GeoBoundingBox(
        min=GeoPoint(latitude=min_lat, longitude=min_lon),
        max=GeoPoint(latitude=max_lat, longitude=max_lon),
    )


def corners_for_bbox(bbox: GeoBoundingBox) -> WorldCorners:
    """Return world grid corners for a bounding box."""
    x1, y1 = world_coordinate(bbox.max.latitude, bbox.min.longitude)
    x2, y2 = world_coordinate(bbox.min.latitude, bbox.max.longitude)
    return WorldCorners(x1=x1, y1=y1, x2=x2, y2=y2)


def corners_for_center(
    lat: float,
    lon: float,
    width: int,
    height: int,
    zoom: int,
) -> WorldCorners:
    """Expand a center point by a pixel size at the given zoom."""
    check_zoom(zoom)
    if width <= 0 or height <= 0:
        raise InputError(f"Width/height less than 0: {width} {height}")
    x, y = world_coordinate(lat, lon)
    shift = WORLD_BITS - (zoom + SUBTILE_BITS)
    half_width = (width << shift) // 2
    half_height = (height << shift) // 2
    return WorldCorners(
        x1=x - half_width,
        y1=y - half_height,
        x2=x + half_width,
        y2=y + half_height,
    )


def bbox_for_corners(corners: WorldCorners) -> GeoBoundingBox:
    """Convert world grid corners back to a geographic bounding box."""
    upper_left = tile_to_latlon(corners.x1, corners.y1, WORLD_BITS)
    lower_right = tile_to_latlon(corners.x2, corners.y2, WORLD_BITS)
    return GeoBoundingBox(
        min=GeoPoint(latitude=lower_right.latitude, longitude=upper_left.longitude),
        max=GeoPoint(latitude=upper_left.latitude, longitude=lower_right.longitude),
    )


def bbox_from_center(
    lat: float,
    lon: float,
    width: int,
    height: int,
    zoom: int,
) -> GeoBoundingBox:
    """Return the bounding box covered by a centered pixel window."""
    return bbox_for_corners(corners_for_center(lat, lon, width, height, zoom))


def plan_from_corners(
    corners: WorldCorners,
    bbox: GeoBoundingBox,
    zoom: int,
    *,
    tile_size: int = DEFAULT_TILE_SIZE,
    max_pixels: int = DEFAULT_MAX_PIXELS,
) -> MosaicPlan:
    """Derive tile range, sub-tile offset, and canvas size from world corners."""
    check_zoom(zoom)
    if tile_size <= 0:
        raise InputError(f"Tile size {tile_size} must be positive")
    if tile_size != DEFAULT_TILE_SIZE:
        LOGGER.warning(
            "Tile size %s: sub-tile offsets are quantized to 1/%s of a tile.",
            tile_size,
            SUBTILE_STEPS,
        )
    pixel_shift = WORLD_BITS - (zoom + SUBTILE_BITS)
    px1 = corners.x1 >> pixel_shift
    py1 = corners.y1 >> pixel_shift
    px2 = corners.x2 >> pixel_shift
    py2 = corners.y2 >> pixel_shift

    xa = (px1 & (SUBTILE_STEPS - 1)) * tile_size // SUBTILE_STEPS
    ya = (py1 & (SUBTILE_STEPS - 1)) * tile_size // SUBTILE_STEPS
    width = (px2 - px1) * tile_size // SUBTILE_STEPS
    height = (py2 - py1) * tile_size // SUBTILE_STEPS
    if width <= 0 or height <= 0:
        raise InputError(f"Region resolves to an empty raster ({width}x{height})")
    if width * height > max_pixels:
        raise InputError(
            f"Raster {width}x{height} exceeds the {max_pixels} pixel limit; "
            "shrink the region or lower the zoom"
        )
    return MosaicPlan(
        bbox=bbox,
        zoom=zoom,
        tile_size=tile_size,
        tile_range_x=(px1 >> SUBTILE_BITS, (px2 - 1) >> SUBTILE_BITS),
        tile_range_y=(py1 >> SUBTILE_BITS, (py2 - 1) >> SUBTILE_BITS),
        pixel_offset=(xa, ya),
        width=width,
        height=height,
    )


def resolve_plan(
    bbox: GeoBoundingBox,
    zoom: int,
    *,
    tile_size: int = DEFAULT_TILE_SIZE,
    max_pixels: int = DEFAULT_MAX_PIXELS,
) -> MosaicPlan:
    """Resolve a corner-mode bounding box into a MosaicPlan.

    The plan carries the bounding box of the resolved grid corners, so
    latitudes past the Mercator limit are pulled in to the grid edge.
    """
    check_zoom(zoom)
    corners = corners_for_bbox(bbox)
    return plan_from_corners(
        corners,
        bbox_for_corners(corners),
        zoom,
        tile_size=tile_size,
        max_pixels=max_pixels,
    )


def resolve_centered_plan(
    lat: float,
    lon: float,
    width: int,
    height: int,
    zoom: int,
    *,
    tile_size: int = DEFAULT_TILE_SIZE,
    max_pixels: int = DEFAULT_MAX_PIXELS,
) -> MosaicPlan:
    """Resolve a centered pixel window into a MosaicPlan."""
    corners = corners_for_center(lat, lon, width, height, zoom)
    return plan_from_corners(
        corners,
        bbox_for_corners(corners),
        zoom,
        tile_size=tile_size,
        max_pixels=max_pixels,
    )
