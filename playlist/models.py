"""Typed records produced by the M3U parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from requests.structures import CaseInsensitiveDict

DEFAULT_PLAYLIST_ID = "default"


class MediaType(Enum):
    LIVE_CHANNEL = "LiveChannel"
    MOVIE = "Movie"
    SERIES = "Series"
    UNKNOWN = "Unknown"


def freeze_attributes(attributes: Mapping[str, str] | None) -> Mapping[str, str]:
    """Return a read-only, case-insensitive copy of ``attributes``."""
    return MappingProxyType(CaseInsensitiveDict(attributes or {}))


@dataclass(frozen=True)
class Track:
    """One playable entry of a playlist (channel, movie or series episode)."""

    id: str
    name: str
    media_type: MediaType
    stream_url: str
    country_code: str | None = None
    language_code: str | None = None
    group_title: str | None = None
    logo_url: str | None = None
    attributes: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not str(self.id or "").strip():
            raise ValueError("track id is required")
        if not str(self.stream_url or "").strip():
            raise ValueError("stream_url is required")
        # Frozen dataclass: bypass __setattr__ to normalize the mapping.
        object.__setattr__(self, "attributes", freeze_attributes(self.attributes))

    @property
    def is_live(self) -> bool:
        return self.media_type is MediaType.LIVE_CHANNEL

    @property
    def is_vod(self) -> bool:
        return self.media_type in (MediaType.MOVIE, MediaType.SERIES)


@dataclass(frozen=True)
class Playlist:
    """Parsed playlist: an identifier plus its tracks in source order."""

    playlist_id: str
    tracks: tuple[Track, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "tracks", tuple(self.tracks or ()))
