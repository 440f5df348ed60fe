"""Runtime configuration defaults and JSON overrides."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

ENV_CONFIG_PATH = "TILESTITCH_CONFIG"
DEFAULT_MAX_PIXELS = 10000 * 10000
DEFAULT_USER_AGENT = "tile-stitch/1.0.0"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class StitchConfig:
    """Limits and network settings shared by a stitch run."""

    max_pixels: int = DEFAULT_MAX_PIXELS
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT
    jobs: int = 1

    def with_overrides(self, **overrides: Any) -> "StitchConfig":
        """Return a copy with non-None overrides applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **_coerce_values(values)) if values else self


def _default_candidate_paths() -> list[Path]:
    """Return default config locations in priority order."""
    return [
        Path.cwd() / "tilestitch.json",
        Path.home() / ".tilestitch" / "config.json",
    ]


def _coerce_values(raw: dict[str, Any]) -> dict[str, Any]:
    """Keep known keys and coerce them to the field types."""
    known = {field.name for field in fields(StitchConfig)}
    result: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known or value is None:
            continue
        if key in {"max_pixels", "jobs"}:
            result[key] = int(value)
        elif key == "timeout":
            result[key] = float(value)
        else:
            result[key] = str(value)
    return result


def _load_candidate(candidate: Path) -> dict[str, Any] | None:
    """Load a config mapping from a single candidate path."""
    if not candidate.exists():
        return None
    try:
        data = json.loads(candidate.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}
    try:
        return _coerce_values(data)
    except (TypeError, ValueError):
        return {}


def load_config(path: Path | None = None) -> StitchConfig:
    """Load a StitchConfig from JSON, falling back to defaults."""
    if path:
        return StitchConfig(**(_load_candidate(path) or {}))
    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        return StitchConfig(**(_load_candidate(Path(env_path)) or {}))
    for candidate in _default_candidate_paths():
        values = _load_candidate(candidate)
        if values is not None:
            return StitchConfig(**values)
    return StitchConfig()
