import logging
import threading
from typing import Iterator
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config.settings import FETCH_MAX_BYTES, FETCH_TIMEOUT_SECONDS, FETCH_USER_AGENT
from playlist.models import Playlist
from playlist.parser import M3UPlaylistParser

logger = logging.getLogger(__name__)


class PlaylistFetchError(Exception):
    """Remote playlist could not be downloaded."""


class PlaylistTooLargeError(PlaylistFetchError):
    pass


def build_session() -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.4,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        respect_retry_after_header=True,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def validate_playlist_url(url: str | None) -> str:
    value = str(url or "").strip()
    if not value:
        raise ValueError("url is required")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("url must be an absolute http(s) URL")
    return value


def fetch_playlist(
    url: str,
    *,
    parser: M3UPlaylistParser,
    session: requests.Session | None = None,
    cancel_event: threading.Event | None = None,
    max_bytes: int = FETCH_MAX_BYTES,
    timeout_seconds: float = FETCH_TIMEOUT_SECONDS,
) -> Playlist:
    """Download ``url`` and parse its body while it streams in."""
    target = validate_playlist_url(url)
    http = session or build_session()
    try:
        resp = http.get(
            target,
            headers={"User-Agent": FETCH_USER_AGENT},
            timeout=timeout_seconds,
            stream=True,
        )
    except requests.RequestException as exc:
        logger.info(f"[FETCH] url={target} status=error")
        raise PlaylistFetchError(f"download failed: {exc}") from exc

    try:
        status = int(resp.status_code)
        logger.info(f"[FETCH] url={target} status={status}")
        if status != 200:
            raise PlaylistFetchError(f"unexpected status {status}")
        declared = resp.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > max_bytes:
            raise PlaylistTooLargeError("playlist exceeds size limit")
        try:
            return parser.parse(_bounded_lines(resp, max_bytes), cancel_event)
        except requests.RequestException as exc:
            raise PlaylistFetchError(f"download interrupted: {exc}") from exc
    finally:
        resp.close()


def _bounded_lines(resp: requests.Response, max_bytes: int) -> Iterator[bytes]:
    received = 0
    for line in resp.iter_lines():
        received += len(line) + 1
        if received > max_bytes:
            raise PlaylistTooLargeError("playlist exceeds size limit")
        yield line
