from __future__ import annotations

import random

import pytest

from tilestitch.errors import InputError
from tilestitch.sources import SUBDOMAINS, expand_url, validate_template
from tilestitch.tiles.models import TileIndex


def test_expand_url_substitutes_tokens() -> None:
    tile = TileIndex(x=3, y=5, zoom=4)
    url = expand_url("https://example.test/{z}/{x}/{y}.png", tile)
    assert url == "https://example.test/4/3/5.png"


def test_expand_url_query_style() -> None:
    tile = TileIndex(x=12, y=7, zoom=9)
    url = expand_url("http://mt.google.com/vt/lyrs=m&x={x}&y={y}&z={z}", tile)
    assert url == "http://mt.google.com/vt/lyrs=m&x=12&y=7&z=9"


def test_subdomain_drawn_from_abc() -> None:
    rng = random.Random(7)
    tile = TileIndex(x=0, y=0, zoom=0)
    seen = {expand_url("{s}", tile, rng=rng) for _ in range(60)}
    assert seen <= set(SUBDOMAINS)
    assert len(seen) > 1


def test_unmatched_braces_are_literal() -> None:
    tile = TileIndex(x=1, y=2, zoom=3)
    assert expand_url("a{zz}b{", tile) == "a{zz}b{"


def test_unknown_token_rejected() -> None:
    with pytest.raises(InputError, match="Unknown format token q"):
        validate_template("https://example.test/{q}/{x}/{y}.png")
    with pytest.raises(InputError):
        expand_url("{q}", TileIndex(x=0, y=0, zoom=0))


def test_validate_template_accepts_known_tokens() -> None:
    validate_template("https://{s}.tile.test/{z}/{x}/{y}.png")
