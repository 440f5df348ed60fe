"""PNG and GeoTIFF writers for stitched canvases."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

import numpy as np
import rasterio
from PIL import Image
from rasterio.transform import from_origin

from tilestitch.errors import OutputError
from tilestitch.tiles.georef import web_mercator_crs
from tilestitch.tiles.models import Georeference

OUTPUT_FORMATS = ("png", "geotiff")
GEOTIFF_ROWS_PER_STRIP = 20


def _check_rgba(rgba: np.ndarray) -> None:
    """Raise OutputError unless the raster is (height, width, 4) uint8."""
    if rgba.ndim != 3 or rgba.shape[2] != 4 or rgba.dtype != np.uint8:
        raise OutputError(f"Expected a (height, width, 4) uint8 raster, got {rgba.shape}")


def write_png(rgba: np.ndarray, destination: Path | BinaryIO) -> None:
    """Write an RGBA raster as PNG to a path or binary stream."""
    _check_rgba(rgba)
    image = Image.fromarray(rgba)
    try:
        if isinstance(destination, Path):
            destination.parent.mkdir(parents=True, exist_ok=True)
        image.save(destination, format="PNG")
    except OSError as exc:
        raise OutputError(f"Can't write PNG to {destination}: {exc}") from exc


def write_geotiff(rgba: np.ndarray, path: Path | None, georef: Georeference) -> None:
    """Write an RGBA raster as an LZW-compressed EPSG:3857 GeoTIFF."""
    _check_rgba(rgba)
    if path is None:
        raise OutputError("Can't write TIFF to stdout, sorry")
    height, width = rgba.shape[:2]
    profile = {
        "driver": "GTiff",
        "width": width,
        "height": height,
        "count": 4,
        "dtype": "uint8",
        "crs": web_mercator_crs().to_wkt(),
        "transform": from_origin(
            georef.origin_x,
            georef.origin_y,
            georef.pixel_size_x,
            georef.pixel_size_y,
        ),
        "compress": "lzw",
        "predictor": 2,
        "photometric": "RGB",
        "alpha": "YES",
        "blockysize": GEOTIFF_ROWS_PER_STRIP,
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with rasterio.open(path, "w", **profile) as dataset:
            dataset.write(np.moveaxis(rgba, -1, 0))
    except OSError as exc:
        raise OutputError(f"TIF failure ({path}): {exc}") from exc
