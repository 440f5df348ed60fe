"""Command-line interface for tilestitch."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from tilestitch import __version__
from tilestitch.config import load_config
from tilestitch.encode import OUTPUT_FORMATS
from tilestitch.errors import TileStitchError
from tilestitch.logging_utils import LogOptions, configure_logging
from tilestitch.presets import format_preset_table, list_presets, preset_as_dict
from tilestitch.stitch import StitchRequest, run_stitch
from tilestitch.tiles.region import DEFAULT_TILE_SIZE

LOGGER = logging.getLogger("tilestitch.cli")

USAGE = """\
%(prog)s [options] minlat minlon maxlat maxlon zoom SOURCE [SOURCE ...]
       %(prog)s [options] -c lat lon width height zoom SOURCE [SOURCE ...]
       %(prog)s --list-presets [text|json]"""


class _ListPresetsAction(argparse.Action):
    """Print the preset catalog and exit, like --version."""

    def __init__(self, option_strings: Sequence[str], dest: str, **kwargs: Any) -> None:
        super().__init__(
            option_strings,
            dest,
            nargs="?",
            const="text",
            choices=("text", "json"),
            default=argparse.SUPPRESS,
            **kwargs,
        )

    def __call__(self, parser, namespace, values, option_string=None) -> None:
        presets = list_presets()
        if values == "json":
            print(json.dumps([preset_as_dict(preset) for preset in presets], indent=2))
        else:
            print(format_preset_table(presets))
        parser.exit()


def _epilog() -> str:
    return (
        "SOURCE is a URL template using {z}, {x}, {y} and {s} (random a/b/c "
        "subdomain), or one of the following presets:\n\n"
        + format_preset_table(list_presets(include_user=False))
    )


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the tilestitch command."""
    parser = argparse.ArgumentParser(
        prog="tilestitch",
        usage=USAGE,
        description="Stitch slippy-map tiles into one georeferenced PNG or GeoTIFF.",
        epilog=_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "region",
        nargs=4,
        type=float,
        metavar="COORD",
        help="minlat minlon maxlat maxlon, or lat lon width height with -c.",
    )
    parser.add_argument("zoom", type=int, help="Tile zoom level.")
    parser.add_argument(
        "sources",
        nargs="+",
        metavar="SOURCE",
        help="Tile URL template or preset name; later sources draw over earlier ones.",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output file (PNG defaults to standard output).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=OUTPUT_FORMATS,
        default="png",
        help="Output format (default: png).",
    )
    parser.add_argument(
        "-t",
        "--tile-size",
        type=int,
        default=DEFAULT_TILE_SIZE,
        help="Expected tile size in pixels (default: 256).",
    )
    parser.add_argument(
        "-c",
        "--centered",
        action="store_true",
        help="Interpret the region as a center point and a pixel size.",
    )
    parser.add_argument(
        "-e",
        "--elevation",
        action="store_true",
        help="Treat tiles as Terrarium elevation and normalize to grayscale.",
    )
    parser.add_argument(
        "-w",
        "--world-file",
        action="store_true",
        help="Write a .pnw/.tfw world file next to the output.",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help="Parallel tile downloads (compositing stays sequential).",
    )
    parser.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds.")
    parser.add_argument("--user-agent", default=None, help="HTTP User-Agent header.")
    parser.add_argument(
        "--max-pixels",
        type=int,
        default=None,
        help="Refuse rasters larger than this many pixels.",
    )
    parser.add_argument("--config", help="Path to a JSON config file.")
    parser.add_argument(
        "--list-presets",
        action=_ListPresetsAction,
        metavar="FORMAT",
        help="List tile source presets (text or json) and exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (repeatable).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce log output to warnings and errors.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON on stderr.",
    )
    parser.add_argument("--log-file", help="Optional path for JSON log output.")
    return parser


def _request_from_args(args: argparse.Namespace) -> StitchRequest:
    """Normalize parsed arguments into a StitchRequest."""
    return StitchRequest(
        region=tuple(args.region),
        zoom=args.zoom,
        sources=tuple(args.sources),
        centered=args.centered,
        tile_size=args.tile_size,
        output_path=Path(args.output) if args.output else None,
        output_format=args.format,
        elevation=args.elevation,
        world_file=args.world_file,
    )


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entrypoint and return an exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(
        LogOptions(
            verbose=args.verbose or 0,
            quiet=bool(args.quiet),
            log_file=Path(args.log_file) if args.log_file else None,
            json_console=bool(args.log_json),
        )
    )

    if args.output is None and args.format == "png" and sys.stdout.isatty():
        LOGGER.error("Didn't specify -o and standard output is a terminal")
        return 1

    config = load_config(Path(args.config) if args.config else None).with_overrides(
        jobs=args.jobs,
        timeout=args.timeout,
        user_agent=args.user_agent,
        max_pixels=args.max_pixels,
    )
    try:
        result = run_stitch(_request_from_args(args), config=config)
    except TileStitchError as exc:
        LOGGER.error("%s", exc)
        return 1
    if result.tiles_skipped:
        LOGGER.warning("Skipped %s tile(s) with unrecognized payloads.", result.tiles_skipped)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
