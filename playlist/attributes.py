"""EXTINF tokenizing and locale/media heuristics."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, NamedTuple

from requests.structures import CaseInsensitiveDict

from playlist.models import MediaType

EXTINF_PREFIX = "#EXTINF:"

_ATTRIBUTE_RE = re.compile(r'(?P<key>[A-Za-z0-9._:-]+)\s*=\s*"(?P<value>[^"]*)"')
_PREFIX_SEPARATORS = " |-:"

# Checked in order; first category matching the group title wins.
_MEDIA_TYPE_KEYWORDS: tuple[tuple[MediaType, tuple[str, ...]], ...] = (
    (MediaType.SERIES, ("series", "séries")),
    (MediaType.MOVIE, ("vod", "movies", "films")),
)


class CountryPrefix(NamedTuple):
    token: str
    country: str
    language: str | None


# Extend by adding rows; matching logic is table driven.
COUNTRY_PREFIXES: tuple[CountryPrefix, ...] = (
    CountryPrefix("FR", "FR", "fr"),
)


class PrefixMatch(NamedTuple):
    name: str
    country: str | None
    language: str | None


@dataclass(frozen=True)
class ExtinfMetadata:
    attributes: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    display_name: str | None = None


def split_extinf_content(content: str) -> tuple[str, str | None]:
    """Split EXTINF content on the first comma outside double quotes.

    Returns ``(attribute_section, display_name)``; ``display_name`` is
    ``None`` when no unquoted comma exists.
    """
    in_quotes = False
    for idx, ch in enumerate(content):
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            return content[:idx], content[idx + 1 :].strip()
    return content, None


def parse_attributes(section: str) -> CaseInsensitiveDict:
    attributes: CaseInsensitiveDict = CaseInsensitiveDict()
    for match in _ATTRIBUTE_RE.finditer(section or ""):
        key = match.group("key")
        # CaseInsensitiveDict keeps the casing of the last assignment.
        attributes[key] = match.group("value")
    return attributes


def parse_extinf_line(line: str) -> ExtinfMetadata:
    content = line[len(EXTINF_PREFIX) :] if is_extinf_line(line) else line
    section, display_name = split_extinf_content(content)
    return ExtinfMetadata(attributes=parse_attributes(section), display_name=display_name)


def is_extinf_line(line: str) -> bool:
    return line[: len(EXTINF_PREFIX)].upper() == EXTINF_PREFIX


def attribute_value(attributes, key: str) -> str | None:
    """Return the attribute value for ``key`` unless missing or blank."""
    value = attributes.get(key)
    if value is None or not str(value).strip():
        return None
    return value


def infer_media_type(group_title: str | None) -> MediaType:
    if not group_title or not group_title.strip():
        return MediaType.LIVE_CHANNEL
    lowered = group_title.casefold()
    for media_type, keywords in _MEDIA_TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return media_type
    return MediaType.LIVE_CHANNEL


def strip_country_prefix(
    name: str | None,
    prefixes: Iterable[CountryPrefix] = COUNTRY_PREFIXES,
) -> PrefixMatch:
    """Remove leading country markers such as ``[FR]`` or ``FR |`` from ``name``.

    Markers are stripped repeatedly so the result never carries another
    recognizable prefix. The country/language of the first marker found are
    reported; both are ``None`` when nothing matched.
    """
    table = tuple(prefixes)
    remaining = (name or "").strip()
    country: str | None = None
    language: str | None = None
    matched = True
    while matched:
        matched = False
        for prefix in table:
            remainder = _match_prefix(remaining, prefix.token)
            if remainder is None:
                continue
            if country is None and language is None:
                country, language = prefix.country, prefix.language
            remaining = remainder.strip()
            matched = True
            break
    return PrefixMatch(remaining, country, language)


def _match_prefix(value: str, token: str) -> str | None:
    text = value.lstrip()
    if not text or not token:
        return None
    size = len(token)

    bracketed = text[: size + 2]
    if (
        len(bracketed) == size + 2
        and bracketed[0] == "["
        and bracketed[-1] == "]"
        and bracketed[1:-1].casefold() == token.casefold()
    ):
        return text[size + 2 :].lstrip()

    if text[:size].casefold() != token.casefold():
        return None
    after = text[size:]
    stripped = after.lstrip(_PREFIX_SEPARATORS)
    if len(stripped) == len(after):
        return None
    return stripped.lstrip()
