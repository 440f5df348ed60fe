"""Stitch slippy-map tiles into a single georeferenced raster."""

__version__ = "1.0.0"
