"""Request and response payloads exposed by the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from playlist.grouping import ChannelGroup
from playlist.models import Track


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PlaylistFromUrlRequest(_ApiModel):
    url: str


class CountrySummary(_ApiModel):
    code: str
    language: str | None = None
    channel_count: int = Field(alias="channelCount")


class LanguageSummary(_ApiModel):
    code: str
    channel_count: int = Field(alias="channelCount")


class PlaylistSummaryResponse(_ApiModel):
    playlist_id: str = Field(alias="playlistId")
    countries: list[CountrySummary] = Field(default_factory=list)


class LanguageSummaryResponse(_ApiModel):
    playlist_id: str = Field(alias="playlistId")
    languages: list[LanguageSummary] = Field(default_factory=list)


class Channel(_ApiModel):
    id: str
    name: str
    country_code: str | None = Field(default=None, alias="countryCode")
    language_code: str | None = Field(default=None, alias="languageCode")
    group_title: str | None = Field(default=None, alias="groupTitle")
    logo_url: str | None = Field(default=None, alias="logoUrl")
    stream_url: str = Field(alias="streamUrl")
    media_type: str = Field(alias="mediaType")


def channel_from_track(track: Track) -> Channel:
    return Channel(
        id=track.id,
        name=track.name,
        country_code=track.country_code,
        language_code=track.language_code,
        group_title=track.group_title,
        logo_url=track.logo_url,
        stream_url=track.stream_url,
        media_type=track.media_type.value,
    )


def country_summary_from_group(group: ChannelGroup) -> CountrySummary:
    return CountrySummary(code=group.key, language=group.language, channel_count=len(group.tracks))


def language_summary_from_group(group: ChannelGroup) -> LanguageSummary:
    return LanguageSummary(code=group.key, channel_count=len(group.tracks))
