from __future__ import annotations

import io
import os
import threading
from email.message import Message
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.request import Request

import numpy as np
from PIL import Image


def solid_tile(color: tuple[int, ...], size: int = 256) -> np.ndarray:
    """Return a (size, size, len(color)) uint8 tile filled with one color."""
    return np.tile(np.array(color, dtype=np.uint8), (size, size, 1))


def encode_image(data: np.ndarray, fmt: str = "PNG") -> bytes:
    """Encode an array with Pillow and return the file bytes."""
    if data.ndim == 3 and data.shape[2] == 1:
        data = data[..., 0]
    buffer = io.BytesIO()
    Image.fromarray(data).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200) -> None:
        self.content = content
        self.status = status_code

    def read(self) -> bytes:
        return self.content

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None


class FakeOpener:
    """Stand-in for urllib.request.urlopen that serves canned responses by URL."""

    def __init__(self, responses: dict[str, FakeResponse | bytes] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[dict[str, object]] = []
        self._lock = threading.Lock()

    def __call__(self, request: Request, timeout: float | None = None) -> FakeResponse:
        url = request.full_url
        with self._lock:
            self.calls.append(
                {"url": url, "user_agent": request.get_header("User-agent"), "timeout": timeout}
            )
        if url not in self.responses:
            raise URLError(f"no route to {url}")
        value = self.responses[url]
        if isinstance(value, bytes):
            return FakeResponse(value)
        if value.status >= 400:
            raise HTTPError(url, value.status, "error", Message(), None)
        return value


def with_src_env(base_env: dict[str, str] | None = None) -> dict[str, str]:
    """Return an environment with repo src/ on PYTHONPATH."""
    env = dict(base_env or os.environ)
    repo_root = Path(__file__).resolve().parents[1]
    src_path = repo_root / "src"
    if src_path.exists():
        existing = env.get("PYTHONPATH", "")
        entries = [entry for entry in existing.split(os.pathsep) if entry]
        src_str = str(src_path)
        if src_str not in entries:
            entries.insert(0, src_str)
        env["PYTHONPATH"] = os.pathsep.join(entries)
    return env
