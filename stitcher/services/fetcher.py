"""
Source Fetcher
Downloads audio and image sources over HTTP(S) into scratch files.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse

import httpx

from stitcher.core.config import settings
from stitcher.core.exceptions import FetchError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
SOURCE_SCHEMES = ("http", "https")


def is_remote_source(url: str) -> bool:
    """True for an absolute http(s) URL with a host."""
    parsed = urlparse(url.strip())
    return parsed.scheme.lower() in SOURCE_SCHEMES and bool(parsed.netloc)


class SourceFetcher:
    """
    Streams http(s) sources to disk.

    Each download is bounded twice: by a wall-clock deadline covering the
    whole transfer, and by a maximum body size. Anything that is not an
    http(s) URL is refused, so the server's own filesystem is never read.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
        max_bytes: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.timeout = timeout if timeout is not None else settings.DOWNLOAD_TIMEOUT
        self.max_bytes = max_bytes if max_bytes is not None else settings.MAX_DOWNLOAD_BYTES
        self._client = client
        self._clock = clock

    def _http_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout, follow_redirects=True)
        return self._client

    def fetch(self, url: str, dest: Path) -> Path:
        """
        Download a source to dest.

        Args:
            url: http(s) source URL
            dest: Local destination path

        Returns:
            dest

        Raises:
            FetchError: Naming the url and, for HTTP failures, the status code
        """
        if not is_remote_source(url):
            raise FetchError(url, "only http(s) sources are supported")

        dest = Path(dest)
        try:
            self._download(url, dest)
        except FetchError:
            dest.unlink(missing_ok=True)
            raise
        logger.debug(f"[Fetcher] {url} -> {dest}")
        return dest

    def _download(self, url: str, dest: Path) -> None:
        deadline = self._clock() + self.timeout
        try:
            with self._http_client().stream("GET", url) as response:
                if response.status_code >= 400:
                    raise FetchError(url, response.reason_phrase, status_code=response.status_code)

                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > self.max_bytes:
                    raise FetchError(url, f"body exceeds {self.max_bytes} bytes")

                received = 0
                with open(dest, "wb") as f:
                    for chunk in response.iter_bytes(CHUNK_SIZE):
                        received += len(chunk)
                        if received > self.max_bytes:
                            raise FetchError(url, f"body exceeds {self.max_bytes} bytes")
                        if self._clock() > deadline:
                            raise FetchError(url, f"timed out after {self.timeout}s")
                        f.write(chunk)
        except httpx.TimeoutException as e:
            raise FetchError(url, f"timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e
        except OSError as e:
            raise FetchError(url, f"could not write {dest.name}: {e}") from e

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


__all__ = ["SourceFetcher", "is_remote_source"]
