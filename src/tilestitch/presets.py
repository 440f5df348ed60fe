"""Named tile-source presets."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class TileSourcePreset:
    """Named URL template for a public tile service."""

    name: str
    summary: str
    url: str


ENV_PRESETS_PATH = "TILESTITCH_PRESETS_PATH"


def _builtin(name: str, summary: str, url: str) -> tuple[str, TileSourcePreset]:
    """Return a (name, preset) pair for the built-in catalog."""
    return name, TileSourcePreset(name=name, summary=summary, url=url)


_PRESETS: Mapping[str, TileSourcePreset] = MappingProxyType(
    dict(
        [
            _builtin(
                "aws:terrarium",
                "Amazon AWS open elevation map (Terrarium format)",
                "https://s3.amazonaws.com/elevation-tiles-prod/terrarium/{z}/{x}/{y}.png",
            ),
            _builtin(
                "aws:normal",
                "Amazon AWS open elevation map (normal vector format)",
                "https://s3.amazonaws.com/elevation-tiles-prod/normal/{z}/{x}/{y}.png",
            ),
            _builtin(
                "gmaps",
                "Google Maps standard road map",
                "http://mt.google.com/vt/lyrs=m&x={x}&y={y}&z={z}",
            ),
            _builtin(
                "gmaps:satellite",
                "Google Maps satellite imagery",
                "http://mt.google.com/vt/lyrs=s&x={x}&y={y}&z={z}",
            ),
            _builtin(
                "gmaps:hybrid",
                "Google Maps hybrid map",
                "http://mt.google.com/vt/lyrs=y&x={x}&y={y}&z={z}",
            ),
            _builtin(
                "ocm",
                "OpenCycleMaps tiles (watermarked)",
                "http://tile.thunderforest.com/cycle/{z}/{x}/{y}.png",
            ),
            _builtin(
                "osm",
                "OpenStreetMaps standard tiles",
                "http://tile.openstreetmap.org/{z}/{x}/{y}.png",
            ),
            _builtin(
                "stamen:terrain",
                "Stamen terrain tiles",
                "http://tile.stamen.com/terrain/{z}/{x}/{y}.jpg",
            ),
            _builtin(
                "stamen:toner",
                "Stamen toner tiles",
                "http://tile.stamen.com/toner/{z}/{x}/{y}.png",
            ),
            _builtin(
                "stamen:watercolor",
                "Stamen watercolor tiles",
                "http://tile.stamen.com/watercolor/{z}/{x}/{y}.jpg",
            ),
            _builtin(
                "tf:landscape",
                "Thunderforest landscape map tiles (watermarked)",
                "http://tile.thunderforest.com/landscape/{z}/{x}/{y}.png",
            ),
            _builtin(
                "tf:outdoors",
                "Thunderforest outdoors map tiles (watermarked)",
                "http://tile.thunderforest.com/outdoors/{z}/{x}/{y}.png",
            ),
            _builtin(
                "tf:transport",
                "Thunderforest transport map tiles (watermarked)",
                "http://tile.thunderforest.com/transport/{z}/{x}/{y}.png",
            ),
        ]
    )
)


def default_user_presets_path() -> Path:
    """Return the default user preset file path."""
    return Path.home() / ".tilestitch" / "presets.json"


def _candidate_preset_paths(explicit_path: Path | None) -> list[Path]:
    """Return candidate preset files in priority order."""
    if explicit_path is not None:
        return [explicit_path]
    candidates: list[Path] = []
    env_path = os.environ.get(ENV_PRESETS_PATH)
    if env_path:
        candidates.append(Path(env_path))
    candidates.append(default_user_presets_path())
    return candidates


def _preset_from_mapping(data: Mapping[str, Any]) -> TileSourcePreset | None:
    """Build a preset from a mapping, returning None for invalid entries."""
    name = data.get("name")
    url = data.get("url")
    if not isinstance(name, str) or not isinstance(url, str) or not name.strip():
        return None
    summary = data.get("summary")
    return TileSourcePreset(
        name=name.strip().lower(),
        summary=summary.strip() if isinstance(summary, str) else "",
        url=url.strip(),
    )


def _presets_from_payload(payload: Any) -> dict[str, TileSourcePreset]:
    """Parse a preset payload into a mapping keyed by name."""
    if isinstance(payload, dict) and isinstance(payload.get("presets"), list):
        items = [item for item in payload["presets"] if isinstance(item, Mapping)]
    elif isinstance(payload, list):
        items = [item for item in payload if isinstance(item, Mapping)]
    else:
        return {}
    parsed: dict[str, TileSourcePreset] = {}
    for item in items:
        preset = _preset_from_mapping(item)
        if preset:
            parsed[preset.name] = preset
    return parsed


def load_presets_file(path: Path) -> dict[str, TileSourcePreset]:
    """Load presets from an explicit JSON file."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    return _presets_from_payload(payload)


def load_user_presets(path: Path | None = None) -> dict[str, TileSourcePreset]:
    """Load user-defined presets from disk, if available."""
    for candidate in _candidate_preset_paths(path):
        if not candidate.exists():
            continue
        try:
            return load_presets_file(candidate)
        except (OSError, json.JSONDecodeError):
            continue
    return {}


def list_presets(
    *, include_user: bool = True, user_path: Path | None = None
) -> tuple[TileSourcePreset, ...]:
    """Return built-in presets in catalog order, then user-only presets."""
    merged = dict(_PRESETS)
    if include_user:
        merged.update(load_user_presets(user_path))
    return tuple(merged.values())


def get_preset(
    name: str, *, include_user: bool = True, user_path: Path | None = None
) -> TileSourcePreset | None:
    """Return a preset by name, case-insensitive; user presets win."""
    key = name.strip().lower()
    if include_user:
        user_presets = load_user_presets(user_path)
        if key in user_presets:
            return user_presets[key]
    return _PRESETS.get(key)


def resolve_source(value: str, *, user_path: Path | None = None) -> str:
    """Return the URL template for a preset name, or the value unchanged."""
    preset = get_preset(value, user_path=user_path)
    return preset.url if preset else value


def preset_as_dict(preset: TileSourcePreset) -> dict[str, Any]:
    """Return a JSON-serializable representation of a preset."""
    return {"name": preset.name, "summary": preset.summary, "url": preset.url}


def format_preset_table(presets: tuple[TileSourcePreset, ...]) -> str:
    """Format presets as an aligned name/summary listing."""
    return "\n".join(f"    {preset.name:<20} {preset.summary}" for preset in presets)
