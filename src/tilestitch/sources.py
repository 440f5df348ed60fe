"""URL template expansion for tile sources."""

from __future__ import annotations

import random
from typing import Iterator

from tilestitch.errors import InputError
from tilestitch.tiles.models import TileIndex

SUBDOMAINS = "abc"
TOKENS = frozenset("zxys")


def _scan(template: str) -> Iterator[tuple[str, str | None]]:
    """Yield (literal, token) pairs; token is the letter inside ``{?}``."""
    index = 0
    literal: list[str] = []
    while index < len(template):
        if template[index] == "{" and template[index + 2 : index + 3] == "}":
            yield "".join(literal), template[index + 1]
            literal = []
            index += 3
        else:
            literal.append(template[index])
            index += 1
    if literal:
        yield "".join(literal), None


def validate_template(template: str) -> None:
    """Raise InputError if a template uses an unknown token."""
    for _, token in _scan(template):
        if token is not None and token not in TOKENS:
            raise InputError(f"Unknown format token {token} in {template}")


def expand_url(template: str, tile: TileIndex, *, rng: random.Random | None = None) -> str:
    """Substitute {z}, {x}, {y}, and a random {s} subdomain into a template."""
    chooser = rng or random
    parts: list[str] = []
    for literal, token in _scan(template):
        parts.append(literal)
        if token is None:
            continue
        if token == "z":
            parts.append(str(tile.zoom))
        elif token == "x":
            parts.append(str(tile.x))
        elif token == "y":
            parts.append(str(tile.y))
        elif token == "s":
            parts.append(chooser.choice(SUBDOMAINS))
        else:
            raise InputError(f"Unknown format token {token} in {template}")
    return "".join(parts)
