"""Group parsed tracks by country or language without mutating the playlist."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Callable, Iterable

from playlist.models import MediaType, Playlist, Track

UNSPECIFIED_KEY = "UNSPECIFIED"

KeySelector = Callable[[Track], "str | None"]


@dataclass(frozen=True)
class ChannelGroup:
    key: str
    tracks: tuple[Track, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "tracks", tuple(self.tracks or ()))

    @property
    def language(self) -> str | None:
        return representative_language(self.tracks)


def group_by_key(playlist: Playlist, key_selector: KeySelector) -> list[ChannelGroup]:
    """Partition ``playlist`` tracks by ``key_selector``.

    Keys compare case-insensitively and keep the casing seen first. Tracks
    without a key land in :data:`UNSPECIFIED_KEY`. Groups are returned in
    first-seen order and tracks keep their playlist order.
    """
    if playlist is None:
        raise ValueError("playlist is required")
    if key_selector is None:
        raise ValueError("key_selector is required")
    return _group_tracks(playlist.tracks, key_selector)


def group_by_country(playlist: Playlist) -> list[ChannelGroup]:
    return group_by_key(playlist, lambda track: track.country_code)


def group_by_language(playlist: Playlist) -> list[ChannelGroup]:
    return group_by_key(playlist, lambda track: track.language_code)


def group_live_channels_by_country(playlist: Playlist) -> list[ChannelGroup]:
    """Country groups restricted to live channels; movies and series are left out."""
    if playlist is None:
        raise ValueError("playlist is required")
    live = [track for track in playlist.tracks if track.media_type is MediaType.LIVE_CHANNEL]
    return _group_tracks(live, lambda track: track.country_code)


def filter_vod(playlist: Playlist) -> list[Track]:
    if playlist is None:
        raise ValueError("playlist is required")
    return [track for track in playlist.tracks if track.is_vod]


def find_group(groups: Iterable[ChannelGroup], key: str) -> ChannelGroup | None:
    wanted = _normalize_key(key)
    for group in groups:
        if _normalize_key(group.key) == wanted:
            return group
    return None


def representative_language(tracks: Iterable[Track]) -> str | None:
    """Most frequent language among ``tracks``; ties go to the smallest code."""
    counts = Counter(
        track.language_code.strip().lower()
        for track in tracks
        if track is not None and track.language_code and track.language_code.strip()
    )
    if not counts:
        return None
    return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]


def _group_tracks(tracks: Iterable[Track], key_selector: KeySelector) -> list[ChannelGroup]:
    keys: dict[str, str] = {}
    buckets: dict[str, list[Track]] = {}
    for track in tracks:
        if track is None:
            continue
        raw_key = key_selector(track)
        key = raw_key.strip() if raw_key and raw_key.strip() else UNSPECIFIED_KEY
        normalized = _normalize_key(key)
        if normalized not in buckets:
            keys[normalized] = key
            buckets[normalized] = []
        buckets[normalized].append(track)
    return [ChannelGroup(keys[normalized], tuple(bucket)) for normalized, bucket in buckets.items()]


def _normalize_key(key: str | None) -> str:
    return (key or "").strip().casefold()
