"""Georeferencing values and world-file output for stitched rasters."""

from __future__ import annotations

from pathlib import Path

from pyproj import CRS

from tilestitch.errors import InputError, OutputError
from tilestitch.tiles.models import GeoBoundingBox, Georeference
from tilestitch.tiles.projection import project_latlon

WEB_MERCATOR_EPSG = 3857
WORLD_FILE_EXTENSIONS = {"png": ".pnw", "geotiff": ".tfw"}


def web_mercator_crs() -> CRS:
    """Return the CRS that stitched rasters are referenced in."""
    return CRS.from_epsg(WEB_MERCATOR_EPSG)


def compute_georeference(bbox: GeoBoundingBox, width: int, height: int) -> Georeference:
    """Derive pixel size and the upper-left tie point for a canvas."""
    if width <= 0 or height <= 0:
        raise InputError(f"Raster size must be positive, got {width}x{height}")
    lower_left = project_latlon(bbox.min.latitude, bbox.min.longitude)
    upper_right = project_latlon(bbox.max.latitude, bbox.max.longitude)
    return Georeference(
        pixel_size_x=(upper_right.x - lower_left.x) / width,
        pixel_size_y=abs(upper_right.y - lower_left.y) / height,
        origin_x=lower_left.x,
        origin_y=upper_right.y,
    )


def world_file_values(georef: Georeference) -> tuple[float, ...]:
    """Return the six world-file terms (y pixel size is negated)."""
    return (
        georef.pixel_size_x,
        0.0,
        0.0,
        -georef.pixel_size_y,
        georef.origin_x,
        georef.origin_y,
    )


def world_file_path(output_path: Path, output_format: str) -> Path:
    """Return the sidecar path for a raster, swapping or adding the extension."""
    try:
        extension = WORLD_FILE_EXTENSIONS[output_format]
    except KeyError as exc:
        raise InputError(f"Unknown output format: {output_format}") from exc
    return output_path.with_suffix(extension)


def write_world_file(path: Path, georef: Georeference) -> Path:
    """Write a world file next to a raster."""
    text = "".join(f"{value:24.10f}\n" for value in world_file_values(georef))
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Failed to open World File `{path}': {exc}") from exc
    return path
