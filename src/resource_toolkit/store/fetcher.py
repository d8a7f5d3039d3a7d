"""
HTTP file fetcher.

Downloads a remote file into a temporary local file with a fixed deadline.
Any network failure, non-2xx status or timeout becomes ``DownloadError``;
the caller logs it against the row and moves on.
"""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import quote, unquote, urlparse

import requests

from resource_toolkit.core.exceptions import DownloadError
from resource_toolkit.logging import get_logger

log = get_logger("file_fetcher")

DEFAULT_TIMEOUT = 120
DEFAULT_CHUNK_SIZE = 64 * 1024

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_url(url: str) -> str:
    """Re-encode the last path segment so spaces and unicode survive the request."""
    head, sep, filename = url.strip().rpartition("/")
    return f"{head}{sep}{quote(unquote(filename), safe='')}"


def extract_filename(url: str) -> str:
    """Decoded, filesystem-safe basename of the URL path."""
    name = os.path.basename(unquote(urlparse(url).path or ""))
    name = _UNSAFE_FILENAME_RE.sub("-", name.strip()).strip("-.")
    return name or "download"


class HttpFileFetcher:
    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        download_dir: Optional[Path] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.download_dir = download_dir
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg) -> "HttpFileFetcher":
        downloads = getattr(cfg, "downloads", {}) or {}
        return cls(
            timeout=float(downloads.get("timeout", DEFAULT_TIMEOUT)),
            chunk_size=int(downloads.get("chunk_size", DEFAULT_CHUNK_SIZE)),
        )

    def download(self, url: str) -> Path:
        safe_url = sanitize_url(url)
        suffix = Path(extract_filename(url)).suffix
        log.debug("Downloading %s", safe_url)

        try:
            response = self.session.get(safe_url, stream=True, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DownloadError(f"Could not download {safe_url}: {exc}") from exc

        fd, tmp_name = tempfile.mkstemp(prefix="rit-", suffix=suffix, dir=self.download_dir)
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as out:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        out.write(chunk)
        except (requests.RequestException, OSError) as exc:
            tmp_path.unlink(missing_ok=True)
            raise DownloadError(f"Download of {safe_url} was interrupted: {exc}") from exc
        finally:
            response.close()

        return tmp_path
