"""Tile payload sniffing and decoding with Pillow."""

from __future__ import annotations

import io

import numpy as np
from PIL import Image, UnidentifiedImageError

from tilestitch.errors import DecodeError, TileSizeMismatchError
from tilestitch.tiles.models import DecodedTileImage

PNG_MAGIC = b"\x89PNG"
JPEG_MAGIC = b"\xff\xd8"


def sniff_format(payload: bytes) -> str | None:
    """Identify PNG or JPEG payloads by their leading magic bytes."""
    if payload[:4] == PNG_MAGIC:
        return "png"
    if payload[:2] == JPEG_MAGIC:
        return "jpeg"
    return None


def _expand(image: Image.Image) -> Image.Image:
    """Convert modes to 8-bit gray, RGB, or RGBA."""
    mode = image.mode
    if mode in {"L", "RGB", "RGBA"}:
        return image
    if mode == "P":
        return image.convert("RGBA" if "transparency" in image.info else "RGB")
    if mode in {"LA", "PA", "RGBa", "La"}:
        return image.convert("RGBA")
    if mode == "1":
        return image.convert("L")
    if mode.startswith("I;16") or mode == "I":
        data = np.asarray(image, dtype=np.uint32) >> 8
        return Image.fromarray(np.clip(data, 0, 255).astype(np.uint8))
    return image.convert("RGB")


def decode_tile(payload: bytes) -> DecodedTileImage | None:
    """Decode a PNG/JPEG tile; return None for unrecognized payloads."""
    kind = sniff_format(payload)
    if kind is None:
        return None
    try:
        with Image.open(io.BytesIO(payload)) as image:
            image.load()
            pixels = np.array(_expand(image), dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeError(f"{kind.upper()} error: {exc}") from exc
    if pixels.ndim == 2:
        pixels = pixels[..., np.newaxis]
    return DecodedTileImage(pixels=pixels)


def check_tile_size(image: DecodedTileImage, tile_size: int) -> None:
    """Raise if a tile is not tile_size pixels square."""
    if image.width != tile_size or image.height != tile_size:
        raise TileSizeMismatchError(
            f"Got {image.width}x{image.height} tile, not {tile_size}"
        )
