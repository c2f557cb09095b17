"""M3U playlist parsing and grouping."""

from playlist.grouping import (
    UNSPECIFIED_KEY,
    ChannelGroup,
    group_by_country,
    group_by_key,
    group_by_language,
    group_live_channels_by_country,
    representative_language,
)
from playlist.models import MediaType, Playlist, Track
from playlist.parser import M3UPlaylistParser, PlaylistParseCancelled, parse_playlist

__all__ = [
    "UNSPECIFIED_KEY",
    "ChannelGroup",
    "M3UPlaylistParser",
    "MediaType",
    "Playlist",
    "PlaylistParseCancelled",
    "Track",
    "group_by_country",
    "group_by_key",
    "group_by_language",
    "group_live_channels_by_country",
    "parse_playlist",
    "representative_language",
]
