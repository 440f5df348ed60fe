"""Tile geometry, compositing, and georeferencing helpers."""

from tilestitch.tiles.canvas import MosaicCanvas
from tilestitch.tiles.elevation import elevation_stats, normalize_elevation, remap_elevation
from tilestitch.tiles.georef import compute_georeference, world_file_path, write_world_file
from tilestitch.tiles.models import (
    DecodedTileImage,
    ElevationReport,
    ElevationStats,
    GeoBoundingBox,
    GeoPoint,
    Georeference,
    MosaicPlan,
    ProjectedPoint,
    TileIndex,
)
from tilestitch.tiles.projection import latlon_to_tile, project_latlon, tile_to_latlon
from tilestitch.tiles.region import (
    bbox_from_center,
    bbox_from_corners,
    resolve_centered_plan,
    resolve_plan,
)

__all__ = [
    "DecodedTileImage",
    "ElevationReport",
    "ElevationStats",
    "GeoBoundingBox",
    "GeoPoint",
    "Georeference",
    "MosaicCanvas",
    "MosaicPlan",
    "ProjectedPoint",
    "TileIndex",
    "bbox_from_center",
    "bbox_from_corners",
    "compute_georeference",
    "elevation_stats",
    "latlon_to_tile",
    "normalize_elevation",
    "project_latlon",
    "remap_elevation",
    "resolve_centered_plan",
    "resolve_plan",
    "tile_to_latlon",
    "world_file_path",
    "write_world_file",
]
