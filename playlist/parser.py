"""Streaming Extended M3U parser."""

from __future__ import annotations

import io
import logging
import threading
from enum import Enum
from typing import Any, Iterable, Iterator

from playlist.attributes import (
    ExtinfMetadata,
    attribute_value,
    infer_media_type,
    is_extinf_line,
    parse_extinf_line,
    strip_country_prefix,
)
from playlist.models import DEFAULT_PLAYLIST_ID, Playlist, Track

logger = logging.getLogger(__name__)

_COMMENT_MARKER = "#"


class PlaylistParseCancelled(Exception):
    """Raised when parsing stops because the cancel event was set."""


class ParserState(Enum):
    AWAITING_METADATA = "awaiting_metadata"
    AWAITING_URL = "awaiting_url"


class M3UPlaylistParser:
    """Parse Extended M3U playlists line by line.

    The parser keeps no state between calls, so a single instance can be
    shared across threads. Input streams are read lazily and never closed.
    """

    def parse(self, stream: Iterable[Any], cancel_event: threading.Event | None = None) -> Playlist:
        """Parse ``stream`` into a :class:`Playlist`.

        ``stream`` may be a text or binary file object, or any iterable of
        ``str``/``bytes`` lines. Errors raised while reading propagate
        unchanged; a set ``cancel_event`` raises :class:`PlaylistParseCancelled`.
        """
        if stream is None:
            raise ValueError("stream is required")
        if isinstance(stream, (str, bytes, bytearray)):
            raise TypeError("stream must be a file object or an iterable of lines, not raw text")

        tracks: list[Track] = []
        state = ParserState.AWAITING_METADATA
        pending: ExtinfMetadata | None = None
        dropped = 0

        for line in _iter_lines(stream, cancel_event):
            if not line:
                continue

            if is_extinf_line(line):
                if state is ParserState.AWAITING_URL:
                    dropped += 1
                pending = parse_extinf_line(line)
                state = ParserState.AWAITING_URL
                continue

            if line.startswith(_COMMENT_MARKER):
                continue

            if state is ParserState.AWAITING_URL and pending is not None:
                tracks.append(build_track(pending, line))
                pending = None
                state = ParserState.AWAITING_METADATA

        if state is ParserState.AWAITING_URL:
            dropped += 1
        logger.debug(
            "[PLAYLIST] parsed tracks=%s dropped_metadata=%s", len(tracks), dropped
        )
        return Playlist(playlist_id=DEFAULT_PLAYLIST_ID, tracks=tuple(tracks))

    def parse_text(self, text: str, cancel_event: threading.Event | None = None) -> Playlist:
        if text is None:
            raise ValueError("text is required")
        return self.parse(io.StringIO(text), cancel_event)


def build_track(metadata: ExtinfMetadata, stream_url: str) -> Track:
    """Resolve track fields from EXTINF metadata; explicit attributes beat heuristics."""
    attributes = metadata.attributes

    raw_name = attribute_value(attributes, "tvg-name") or metadata.display_name or ""
    name, prefix_country, prefix_language = strip_country_prefix(raw_name)

    country = attribute_value(attributes, "tvg-country")
    country = country.strip().upper() if country else prefix_country

    language = attribute_value(attributes, "tvg-language")
    language = language.strip().lower() if language else prefix_language

    group_title = attribute_value(attributes, "group-title")

    return Track(
        id=_resolve_identifier(attributes, name, stream_url),
        name=name,
        media_type=infer_media_type(group_title),
        stream_url=stream_url,
        country_code=country,
        language_code=language,
        group_title=group_title,
        logo_url=attribute_value(attributes, "tvg-logo"),
        attributes=attributes,
    )


def _resolve_identifier(attributes, name: str, stream_url: str) -> str:
    tvg_id = attribute_value(attributes, "tvg-id")
    if tvg_id:
        return tvg_id.strip()
    if name.strip():
        return name
    return stream_url


def _iter_lines(stream: Iterable[Any], cancel_event: threading.Event | None) -> Iterator[str]:
    iterator = iter(stream)
    first = True
    while True:
        # Checked before every read so no line is consumed once cancelled.
        if cancel_event is not None and cancel_event.is_set():
            raise PlaylistParseCancelled("playlist parsing cancelled")
        try:
            raw = next(iterator)
        except StopIteration:
            return
        if isinstance(raw, (bytes, bytearray)):
            raw = bytes(raw).decode("utf-8", errors="replace")
        line = str(raw)
        if first:
            line = line.lstrip("\ufeff")
            first = False
        yield line.strip()


_DEFAULT_PARSER = M3UPlaylistParser()


def parse_playlist(stream: Iterable[Any], cancel_event: threading.Event | None = None) -> Playlist:
    return _DEFAULT_PARSER.parse(stream, cancel_event)
