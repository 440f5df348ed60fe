"""HTTP retrieval of tile payloads."""

from __future__ import annotations

import logging
from typing import Callable
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from tilestitch.config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from tilestitch.errors import FetchError

LOGGER = logging.getLogger(__name__)


class TileFetcher:
    """Fetch tile bytes over HTTP(S), following redirects."""

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT,
        opener: Callable[..., object] = urlopen,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self.opener = opener

    def fetch(self, url: str) -> bytes:
        """Return the response body for a URL, raising FetchError on failure."""
        try:
            request = Request(url, headers={"User-Agent": self.user_agent})
            with self.opener(request, timeout=self.timeout) as response:  # noqa: S310
                status = response.status
                payload = response.read()
        except HTTPError as exc:
            raise FetchError(f"Can't retrieve {url}: HTTP {exc.code}") from exc
        except (URLError, OSError, ValueError) as exc:
            raise FetchError(f"Can't retrieve {url}: {exc}") from exc
        if not 200 <= status < 300:
            raise FetchError(f"Can't retrieve {url}: HTTP {status}")
        LOGGER.debug("Fetched %s (%s bytes)", url, len(payload))
        return payload
