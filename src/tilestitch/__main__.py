"""Module entrypoint for `python -m tilestitch`."""

from __future__ import annotations

from tilestitch.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
