from __future__ import annotations

import json
from pathlib import Path

from tilestitch import presets


def test_builtin_catalog_order() -> None:
    names = [preset.name for preset in presets.list_presets()]
    assert len(names) == 13
    assert names[0] == "aws:terrarium"
    assert names[-1] == "tf:transport"
    assert "osm" in names


def test_get_preset_case_insensitive() -> None:
    preset = presets.get_preset("OSM")
    assert preset is not None
    assert preset.url == "http://tile.openstreetmap.org/{z}/{x}/{y}.png"


def test_resolve_source_passes_templates_through() -> None:
    template = "https://tiles.example/{z}/{x}/{y}.png"
    assert presets.resolve_source(template) == template
    assert presets.resolve_source("aws:terrarium").endswith("terrarium/{z}/{x}/{y}.png")


def test_preset_as_dict() -> None:
    preset = presets.get_preset("gmaps")
    assert preset is not None
    payload = presets.preset_as_dict(preset)
    assert payload == {"name": "gmaps", "summary": preset.summary, "url": preset.url}


def test_format_preset_table() -> None:
    table = presets.format_preset_table(presets.list_presets())
    lines = table.splitlines()
    assert len(lines) == 13
    assert lines[0].startswith("    aws:terrarium")
    assert "Amazon AWS open elevation map" in lines[0]


def test_load_user_presets_from_file(tmp_path: Path) -> None:
    payload = {
        "version": 1,
        "presets": [
            {"name": "Local", "summary": "Local tiles", "url": "http://localhost/{z}/{x}/{y}.png"},
            {"name": "broken"},
        ],
    }
    path = tmp_path / "presets.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    loaded = presets.load_user_presets(path)
    assert list(loaded) == ["local"]
    assert loaded["local"].summary == "Local tiles"


def test_user_presets_from_env_override_builtins(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "user_presets.json"
    path.write_text(
        json.dumps([{"name": "osm", "url": "http://mirror.test/{z}/{x}/{y}.png"}]),
        encoding="utf-8",
    )
    monkeypatch.setenv(presets.ENV_PRESETS_PATH, str(path))
    assert presets.resolve_source("osm") == "http://mirror.test/{z}/{x}/{y}.png"
    assert presets.get_preset("osm", include_user=False).url.startswith("http://tile.openstreetmap")
    names = [preset.name for preset in presets.list_presets()]
    assert names.count("osm") == 1


def test_user_only_presets_listed_after_builtins(tmp_path: Path) -> None:
    path = tmp_path / "presets.json"
    path.write_text(json.dumps([{"name": "zz", "url": "http://zz/{z}/{x}/{y}"}]), encoding="utf-8")
    names = [preset.name for preset in presets.list_presets(user_path=path)]
    assert names[-1] == "zz"
    assert len(names) == 14


def test_invalid_user_presets_ignored(tmp_path: Path) -> None:
    path = tmp_path / "presets.json"
    path.write_text("{not json", encoding="utf-8")
    assert presets.load_user_presets(path) == {}
    assert presets.get_preset("osm", user_path=path) is not None


def test_home_presets_used_without_env(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv(presets.ENV_PRESETS_PATH)
    path = presets.default_user_presets_path()
    path.parent.mkdir(parents=True)
    entries = [{"name": "home", "url": "http://home/{z}/{x}/{y}"}]
    path.write_text(json.dumps(entries), encoding="utf-8")
    assert presets.get_preset("home") is not None
