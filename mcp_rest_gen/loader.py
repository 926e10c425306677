"""Read the raw OpenAPI description from disk or over HTTP(S)."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from .errors import SpecLoadError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def is_url(source: str) -> bool:
    """Return True for http:// and https:// sources."""
    return source.startswith(("http://", "https://"))


def _fetch(url: str, timeout: float) -> bytes:
    logger.info("Loading OpenAPI spec from URL: %s", url)
    try:
        resp = httpx.get(url, follow_redirects=True, timeout=timeout)
    except httpx.HTTPError as exc:
        raise SpecLoadError(f"error fetching {url}: {exc}") from exc
    if resp.status_code != 200:
        raise SpecLoadError(
            f"error fetching {url}: HTTP {resp.status_code} {resp.reason_phrase}"
        )
    return resp.content


def _read_file(path: Path) -> bytes:
    logger.info("Loading OpenAPI spec from file: %s", path)
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise SpecLoadError(
            f"spec file not found: {path}",
            suggestion="pass a path to an existing file or an http(s) URL",
        ) from exc
    except OSError as exc:
        raise SpecLoadError(f"error reading {path}: {exc}") from exc


def read_source(source: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Return the description bytes from a local path or an http(s) URL."""
    if is_url(source):
        return _fetch(source, timeout)
    return _read_file(Path(source))
