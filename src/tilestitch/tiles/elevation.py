"""Terrarium elevation statistics and 8-bit normalization."""

from __future__ import annotations

import numpy as np

from tilestitch.errors import InputError
from tilestitch.tiles.canvas import MosaicCanvas
from tilestitch.tiles.models import ElevationReport, ElevationStats

TERRARIUM_SCALE = 256.0
TERRARIUM_OFFSET = 32768.0


def terrarium_meters(value: float) -> float:
    """Convert a packed 24-bit Terrarium value to meters."""
    return value / TERRARIUM_SCALE - TERRARIUM_OFFSET


def encoded_values(canvas: MosaicCanvas) -> np.ndarray:
    """Return R*65536 + G*256 + B for every canvas pixel."""
    rgb = canvas.pixels[..., :3].astype(np.uint32)
    return (rgb[..., 0] << 16) + (rgb[..., 1] << 8) + rgb[..., 2]


def elevation_stats(canvas: MosaicCanvas) -> ElevationStats:
    """Collect min, max, and mean of the encoded values in one pass."""
    values = encoded_values(canvas)
    if values.size == 0:
        raise InputError("Cannot compute elevation statistics on an empty canvas")
    return ElevationStats(
        min=int(values.min()),
        max=int(values.max()),
        average=float(values.mean(dtype=np.float64)),
        sample_count=int(values.size),
    )


def normalization_ratio(stats: ElevationStats) -> float:
    """Return the scale mapping [min, max] onto [0, 255]; 1 for flat regions."""
    if stats.max > stats.min:
        return 255.0 / (stats.max - stats.min)
    return 1.0


def normalize_elevation(canvas: MosaicCanvas, stats: ElevationStats) -> float:
    """Rewrite RGB as an 8-bit grayscale ramp in place and return the ratio."""
    ratio = normalization_ratio(stats)
    values = encoded_values(canvas).astype(np.float64)
    scaled = np.floor((values - stats.min) * ratio + 0.5)
    gray = np.clip(scaled, 0, 255).astype(np.uint8)
    canvas.pixels[..., 0] = gray
    canvas.pixels[..., 1] = gray
    canvas.pixels[..., 2] = gray
    return ratio


def elevation_report(stats: ElevationStats) -> ElevationReport:
    """Express statistics in meters for diagnostics."""
    ratio = normalization_ratio(stats)
    return ElevationReport(
        min_meters=terrarium_meters(stats.min),
        max_meters=terrarium_meters(stats.max),
        span_meters=(stats.max - stats.min) / TERRARIUM_SCALE,
        average_meters=terrarium_meters(stats.average),
        midpoint=(stats.average - stats.min) * ratio / 255.0,
    )


def format_elevation_report(report: ElevationReport) -> list[str]:
    """Return the elevation diagnostics as log lines."""
    return [
        f"==Elevation range: [{report.min_meters:.4f}; {report.max_meters:.4f}] "
        f"--> {report.span_meters:.4f}",
        f"==Average elevation: {report.average_meters:.4f}",
        f"==Midpoint in [0; 1] range: {report.midpoint:.4f}",
    ]


def remap_elevation(canvas: MosaicCanvas) -> tuple[ElevationStats, ElevationReport]:
    """Run the statistics and normalization passes over a canvas."""
    stats = elevation_stats(canvas)
    report = elevation_report(stats)
    normalize_elevation(canvas, stats)
    return stats, report
