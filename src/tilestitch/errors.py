"""Exception types raised by tilestitch components."""

from __future__ import annotations


class TileStitchError(RuntimeError):
    """Base class for failures that abort a stitch run."""

    pass


class InputError(TileStitchError, ValueError):
    """Raised for invalid user input such as a bad zoom or region."""

    pass


class FetchError(TileStitchError):
    """Raised when a tile cannot be retrieved."""

    pass


class DecodeError(TileStitchError):
    """Raised when a recognized PNG/JPEG payload fails to decode."""

    pass


class TileFormatError(TileStitchError):
    """Raised when a decoded tile has an unsupported channel depth."""

    pass


class TileSizeMismatchError(TileStitchError):
    """Raised when a decoded tile does not match the configured tile size."""

    pass


class OutputError(TileStitchError):
    """Raised when the raster or its world file cannot be written."""

    pass
