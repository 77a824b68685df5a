"""Streaming HTTP downloader for plugin and tool artifacts."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path

import httpx

from plugin_patcher import __version__
from plugin_patcher.errors import ChecksumError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_USER_AGENT = f"plugin-patcher/{__version__}"
_CHUNK_SIZE = 64 * 1024


@dataclass(slots=True)
class DownloadResult:
    """Result of a completed download."""

    url: str
    path: Path
    size: int
    sha256: str


class ArtifactDownloader:
    """HTTP client wrapper that streams responses straight to disk."""

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        self._client = httpx.Client(
            timeout=self._timeout,
            headers={"User-Agent": user_agent},
            transport=transport or httpx.HTTPTransport(retries=max_retries),
            follow_redirects=True,
        )

    def download(self, url: str, dest: Path) -> DownloadResult:
        """Fetch ``url`` into ``dest``, replacing any existing file."""

        dest.parent.mkdir(parents=True, exist_ok=True)
        partial = dest.with_name(dest.name + ".part")
        digest = hashlib.sha256()
        size = 0
        logger.info("Downloading %s -> %s", url, dest)
        try:
            with self._client.stream("GET", url) as response:
                if not response.is_success:
                    raise NetworkError(f"Download of {url} failed: HTTP {response.status_code}")
                with partial.open("wb") as handle:
                    for chunk in response.iter_bytes(_CHUNK_SIZE):
                        handle.write(chunk)
                        digest.update(chunk)
                        size += len(chunk)
        except httpx.TimeoutException as error:
            partial.unlink(missing_ok=True)
            raise NetworkError(f"Download of {url} timed out") from error
        except httpx.HTTPError as error:
            partial.unlink(missing_ok=True)
            raise NetworkError(f"Download of {url} failed: {error}") from error
        except NetworkError:
            partial.unlink(missing_ok=True)
            raise

        partial.replace(dest)
        return DownloadResult(url=url, path=dest, size=size, sha256=digest.hexdigest())

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ArtifactDownloader:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def verify_sha256(result: DownloadResult, expected: str) -> None:
    """Compare a download against ``expected``; an empty digest skips the check."""

    if not expected:
        return
    if result.sha256 != expected.lower():
        raise ChecksumError(
            f"Checksum mismatch for {result.path.name}: "
            f"expected sha256 {expected.lower()}, got {result.sha256}",
        )
