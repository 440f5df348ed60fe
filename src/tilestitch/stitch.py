"""End-to-end stitch pipeline: plan, fetch, composite, remap, encode."""

from __future__ import annotations

import logging
import random
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Sequence

from tilestitch.config import StitchConfig
from tilestitch.decode import check_tile_size, decode_tile
from tilestitch.encode import OUTPUT_FORMATS, write_geotiff, write_png
from tilestitch.errors import InputError
from tilestitch.fetch import TileFetcher
from tilestitch.presets import resolve_source
from tilestitch.sources import expand_url, validate_template
from tilestitch.tiles.canvas import MosaicCanvas
from tilestitch.tiles.elevation import format_elevation_report, remap_elevation
from tilestitch.tiles.georef import compute_georeference, world_file_path, write_world_file
from tilestitch.tiles.models import (
    DecodedTileImage,
    ElevationReport,
    Georeference,
    MosaicPlan,
    TileIndex,
)
from tilestitch.tiles.projection import project_latlon
from tilestitch.tiles.region import (
    DEFAULT_TILE_SIZE,
    bbox_from_corners,
    resolve_centered_plan,
    resolve_plan,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class StitchRequest:
    """Everything needed for one stitch run.

    In corner mode ``region`` is (min_lat, min_lon, max_lat, max_lon); in
    centered mode it is (lat, lon, width_px, height_px).
    """

    region: tuple[float, float, float, float]
    zoom: int
    sources: tuple[str, ...]
    centered: bool = False
    tile_size: int = DEFAULT_TILE_SIZE
    output_path: Path | None = None
    output_format: str = "png"
    elevation: bool = False
    world_file: bool = False


@dataclass(frozen=True)
class TileWork:
    """One fetch/decode unit: a grid cell for one source template."""

    tile: TileIndex
    template: str
    offset: tuple[int, int]


@dataclass(frozen=True)
class StitchResult:
    """Outputs and counters from a stitch run."""

    plan: MosaicPlan
    georeference: Georeference
    output_path: Path | None
    world_file_path: Path | None
    elevation: ElevationReport | None
    tiles_composited: int
    tiles_skipped: int


def plan_request(request: StitchRequest, config: StitchConfig) -> MosaicPlan:
    """Resolve a request into a MosaicPlan without touching the network."""
    if request.output_format not in OUTPUT_FORMATS:
        raise InputError(f"Unknown output format: {request.output_format}")
    if not request.sources:
        raise InputError("At least one tile source is required.")
    a, b, c, d = request.region
    if request.centered:
        return resolve_centered_plan(
            a,
            b,
            int(c),
            int(d),
            request.zoom,
            tile_size=request.tile_size,
            max_pixels=config.max_pixels,
        )
    return resolve_plan(
        bbox_from_corners(a, b, c, d),
        request.zoom,
        tile_size=request.tile_size,
        max_pixels=config.max_pixels,
    )


def _log_plan(plan: MosaicPlan, georef: Georeference) -> None:
    """Log the resolved geometry in the classic `==` diagnostic format."""
    bbox = plan.bbox
    lower_left = project_latlon(bbox.min.latitude, bbox.min.longitude)
    upper_right = project_latlon(bbox.max.latitude, bbox.max.longitude)
    LOGGER.info(
        "==Geodetic Bounds  (EPSG:4326): %.17g,%.17g to %.17g,%.17g",
        bbox.min.latitude,
        bbox.min.longitude,
        bbox.max.latitude,
        bbox.max.longitude,
    )
    LOGGER.info(
        "==Projected Bounds (EPSG:3857): %.17g,%.17g to %.17g,%.17g",
        lower_left.y,
        lower_left.x,
        upper_right.y,
        upper_right.x,
    )
    LOGGER.info("==Zoom Level: %s", plan.zoom)
    LOGGER.info("==Upper Left Tile: x:%s y:%s", plan.tile_range_x[0], plan.tile_range_y[0])
    LOGGER.info("==Lower Right Tile: x:%s y:%s", plan.tile_range_x[1], plan.tile_range_y[1])
    LOGGER.info("==Raster Size: %sx%s", plan.width, plan.height)
    LOGGER.info(
        "==Pixel Size: x:%.17g y:%.17g",
        georef.pixel_size_x,
        georef.pixel_size_y,
    )


def tile_work(plan: MosaicPlan, templates: Sequence[str]) -> list[TileWork]:
    """List fetch units in composite order: grid row-major, then source order."""
    work: list[TileWork] = []
    for x, y in plan.tile_cells():
        tile = plan.tile_index(x, y)
        if tile is None:
            LOGGER.warning("Skipping row y=%s outside the zoom %s grid.", y, plan.zoom)
            continue
        offset = plan.tile_offset(x, y)
        for template in templates:
            work.append(TileWork(tile=tile, template=template, offset=offset))
    return work


def _tile_loader(
    fetcher: TileFetcher,
    tile_size: int,
    rng: random.Random,
) -> Callable[[TileWork], DecodedTileImage | None]:
    """Return a callable that fetches, decodes and size-checks one work item."""

    def load(item: TileWork) -> DecodedTileImage | None:
        url = expand_url(item.template, item.tile, rng=rng)
        LOGGER.info("%s", url, extra={"tile": str(item.tile)})
        image = decode_tile(fetcher.fetch(url))
        if image is None:
            LOGGER.warning("Don't recognize file format of %s", url, extra={"tile": str(item.tile)})
            return None
        check_tile_size(image, tile_size)
        return image

    return load


def _loaded_images(
    work: list[TileWork],
    load: Callable[[TileWork], DecodedTileImage | None],
    jobs: int,
) -> Iterable[DecodedTileImage | None]:
    """Yield decoded tiles in work order, optionally fetched on a thread pool."""
    if jobs <= 1 or len(work) <= 1:
        for item in work:
            yield load(item)
        return
    with ThreadPoolExecutor(max_workers=min(jobs, len(work))) as executor:
        yield from executor.map(load, work)


def build_canvas(
    plan: MosaicPlan,
    templates: Sequence[str],
    fetcher: TileFetcher,
    *,
    jobs: int = 1,
    rng: random.Random | None = None,
) -> tuple[MosaicCanvas, int, int]:
    """Fetch every tile and composite it; return (canvas, composited, skipped)."""
    for template in templates:
        validate_template(template)
    canvas = MosaicCanvas(plan.width, plan.height)
    work = tile_work(plan, templates)
    load = _tile_loader(fetcher, plan.tile_size, rng or random.Random())
    composited = skipped = 0
    for item, image in zip(work, _loaded_images(work, load, jobs)):
        if image is None:
            skipped += 1
            continue
        canvas.composite_tile(image, *item.offset)
        composited += 1
    return canvas, composited, skipped


def _write_output(
    canvas: MosaicCanvas,
    request: StitchRequest,
    georef: Georeference,
    stdout: BinaryIO | None,
) -> None:
    """Encode the canvas to the requested file or to standard output."""
    if request.output_format == "geotiff":
        write_geotiff(canvas.rows(), request.output_path, georef)
        LOGGER.info("Output TIFF: %s", request.output_path)
        return
    if request.output_path is not None:
        write_png(canvas.rows(), request.output_path)
        LOGGER.info("Output PNG: %s", request.output_path)
        return
    write_png(canvas.rows(), stdout or sys.stdout.buffer)
    LOGGER.info("Output PNG: stdout")


def run_stitch(
    request: StitchRequest,
    *,
    config: StitchConfig | None = None,
    fetcher: TileFetcher | None = None,
    stdout: BinaryIO | None = None,
) -> StitchResult:
    """Run the whole pipeline for one request."""
    config = config or StitchConfig()
    if request.output_format == "geotiff" and request.output_path is None:
        raise InputError("Can't write TIFF to stdout, sorry")
    templates = tuple(resolve_source(source) for source in request.sources)
    plan = plan_request(request, config)
    georef = compute_georeference(plan.bbox, plan.width, plan.height)
    _log_plan(plan, georef)

    fetcher = fetcher or TileFetcher(user_agent=config.user_agent, timeout=config.timeout)
    canvas, composited, skipped = build_canvas(plan, templates, fetcher, jobs=config.jobs)

    report: ElevationReport | None = None
    if request.elevation:
        _, report = remap_elevation(canvas)
        for line in format_elevation_report(report):
            LOGGER.info("%s", line)

    _write_output(canvas, request, georef, stdout)

    sidecar: Path | None = None
    if request.world_file:
        if request.output_path is None:
            LOGGER.warning("Can't write a worldfile when writing to stdout")
        else:
            sidecar = write_world_file(
                world_file_path(request.output_path, request.output_format),
                georef,
            )
            LOGGER.info("World file written to '%s'.", sidecar)

    return StitchResult(
        plan=plan,
        georeference=georef,
        output_path=request.output_path,
        world_file_path=sidecar,
        elevation=report,
        tiles_composited=composited,
        tiles_skipped=skipped,
    )
