"""RGBA mosaic canvas with clipped tile compositing."""

from __future__ import annotations

import threading

import numpy as np

from tilestitch.errors import InputError, TileFormatError
from tilestitch.tiles.models import DecodedTileImage

SUPPORTED_DEPTHS = (1, 3, 4)


def _to_bytes(values: np.ndarray) -> np.ndarray:
    """Scale unit floats to rounded uint8 values."""
    return np.clip(np.rint(values * 255.0), 0, 255).astype(np.uint8)


def _source_over(src: np.ndarray, dst: np.ndarray) -> np.ndarray:
    """Blend straight-alpha RGBA src over dst (Porter-Duff "over")."""
    src_f = src.astype(np.float64) / 255.0
    dst_f = dst.astype(np.float64) / 255.0
    src_a = src_f[..., 3:4]
    dst_a = dst_f[..., 3:4]
    out_a = src_a + dst_a * (1.0 - src_a)
    premultiplied = src_f[..., :3] * src_a + dst_f[..., :3] * dst_a * (1.0 - src_a)
    with np.errstate(divide="ignore", invalid="ignore"):
        color = np.where(out_a > 0.0, premultiplied / out_a, 0.0)
    out = np.empty_like(dst)
    out[..., :3] = _to_bytes(color)
    out[..., 3] = _to_bytes(out_a[..., 0])
    return out


def _clip_span(offset: int, length: int, limit: int) -> tuple[int, int, int, int] | None:
    """Return (dst_start, dst_stop, src_start, src_stop) along one axis."""
    dst_start = max(offset, 0)
    dst_stop = min(offset + length, limit)
    if dst_start >= dst_stop:
        return None
    return dst_start, dst_stop, dst_start - offset, dst_stop - offset


class MosaicCanvas:
    """Zero-initialized RGBA raster that tiles are composited onto."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise InputError(f"Canvas size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)
        self._lock = threading.Lock()

    def composite_tile(self, image: DecodedTileImage, offset_x: int, offset_y: int) -> bool:
        """Blend a tile at (offset_x, offset_y); return False if fully off-canvas."""
        depth = image.depth
        if depth not in SUPPORTED_DEPTHS:
            raise TileFormatError(f"Unsupported tile channel depth {depth}")
        span_x = _clip_span(offset_x, image.width, self.width)
        span_y = _clip_span(offset_y, image.height, self.height)
        if span_x is None or span_y is None:
            return False
        dx0, dx1, sx0, sx1 = span_x
        dy0, dy1, sy0, sy1 = span_y
        src = image.pixels[sy0:sy1, sx0:sx1]
        with self._lock:
            dst = self.pixels[dy0:dy1, dx0:dx1]
            if depth == 4:
                dst[...] = _source_over(src, dst)
            elif depth == 3:
                dst[..., :3] = src
                dst[..., 3] = 255
            else:
                dst[..., :3] = src[..., :1]
                dst[..., 3] = 255
        return True

    def rows(self) -> np.ndarray:
        """Return the canvas as a (height, width, 4) uint8 array."""
        return self.pixels
