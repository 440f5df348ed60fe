from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pytest

from tests.utils import FakeOpener, encode_image, solid_tile, with_src_env
from tilestitch import cli, stitch
from tilestitch.fetch import TileFetcher

TEMPLATE = "http://cli.test/{z}/{x}/{y}.png"
REGION_ARGS = ["-40", "-90", "40", "90", "1"]


def _install_fetcher(monkeypatch) -> FakeOpener:
    responses = {
        f"http://cli.test/1/{x}/{y}.png": encode_image(solid_tile((50, 60, 70)))
        for x in (0, 1)
        for y in (0, 1)
    }
    opener = FakeOpener(responses)

    def factory(**kwargs) -> TileFetcher:
        return TileFetcher(opener=opener, **kwargs)

    monkeypatch.setattr(stitch, "TileFetcher", factory)
    return opener


class _Terminal:
    def isatty(self) -> bool:
        return True

    def write(self, data: str) -> int:
        return len(data)

    def flush(self) -> None:
        pass


def test_main_writes_png_and_world_file(tmp_path: Path, monkeypatch) -> None:
    opener = _install_fetcher(monkeypatch)
    output = tmp_path / "out.png"
    exit_code = cli.main(
        ["-o", str(output), "-w", "--user-agent", "cli-test/1", "-j", "2", *REGION_ARGS, TEMPLATE]
    )
    assert exit_code == 0
    assert output.read_bytes().startswith(b"\x89PNG")
    assert (tmp_path / "out.pnw").exists()
    assert len(opener.calls) == 4
    assert {call["user_agent"] for call in opener.calls} == {"cli-test/1"}


def test_main_logs_plan_to_stderr(tmp_path: Path, monkeypatch, capsys) -> None:
    _install_fetcher(monkeypatch)
    assert cli.main(["-o", str(tmp_path / "out.png"), *REGION_ARGS, TEMPLATE]) == 0
    err = capsys.readouterr().err
    assert "==Raster Size: 256x125" in err
    assert "[1/1/1] INFO: http://cli.test/1/1/1.png" in err


def test_main_rejects_bad_zoom(tmp_path: Path, capsys) -> None:
    exit_code = cli.main(["-o", str(tmp_path / "out.png"), "0", "0", "1", "1", "30", TEMPLATE])
    assert exit_code == 1
    assert "Zoom 30 greater than 24" in capsys.readouterr().err


def test_main_honors_config_pixel_limit(tmp_path: Path, monkeypatch, capsys) -> None:
    opener = _install_fetcher(monkeypatch)
    config_path = tmp_path / "limits.json"
    config_path.write_text(json.dumps({"max_pixels": 1000}), encoding="utf-8")
    exit_code = cli.main(
        ["--config", str(config_path), "-o", str(tmp_path / "out.png"), *REGION_ARGS, TEMPLATE]
    )
    assert exit_code == 1
    assert "pixel limit" in capsys.readouterr().err
    assert opener.calls == []


def test_main_refuses_png_to_terminal(monkeypatch) -> None:
    opener = _install_fetcher(monkeypatch)
    monkeypatch.setattr(sys, "stdout", _Terminal())
    assert cli.main([*REGION_ARGS, TEMPLATE]) == 1
    assert opener.calls == []


def test_main_geotiff_requires_output(monkeypatch, capsys) -> None:
    _install_fetcher(monkeypatch)
    assert cli.main(["-f", "geotiff", *REGION_ARGS, TEMPLATE]) == 1
    assert "Can't write TIFF to stdout" in capsys.readouterr().err


def test_list_presets_text(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--list-presets"])
    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert "aws:terrarium" in out
    assert "tf:transport" in out


def test_list_presets_json(capsys) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--list-presets", "json"])
    payload = json.loads(capsys.readouterr().out)
    assert len(payload) == 13
    assert payload[0]["name"] == "aws:terrarium"


def test_help_lists_presets(capsys) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--help"])
    out = capsys.readouterr().out
    assert "minlat minlon maxlat maxlon zoom" in out
    assert "stamen:watercolor" in out


def test_module_entrypoint_version() -> None:
    result = subprocess.run(
        [sys.executable, "-m", "tilestitch", "--version"],
        capture_output=True,
        text=True,
        env=with_src_env(),
        check=False,
    )
    assert result.returncode == 0
    assert result.stdout.strip() == "1.0.0"
