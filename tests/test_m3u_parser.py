from __future__ import annotations

import io
import threading

import pytest

from playlist.models import MediaType
from playlist.parser import M3UPlaylistParser, ParserState, PlaylistParseCancelled, parse_playlist


def _parse(content: str):
    return M3UPlaylistParser().parse(io.BytesIO(content.encode("utf-8")))


def test_parse_basic_playlist() -> None:
    content = """#EXTM3U
#EXTINF:-1 tvg-id="canal" tvg-name="Canal+" tvg-logo="https://logo.test/canal.png" tvg-country="fr" tvg-language="fr",FR | Canal+
http://stream.test/canal.m3u8
"""

    result = _parse(content)

    assert result.playlist_id == "default"
    assert len(result.tracks) == 1
    track = result.tracks[0]
    assert track.id == "canal"
    assert track.name == "Canal+"
    assert track.media_type is MediaType.LIVE_CHANNEL
    assert track.country_code == "FR"
    assert track.language_code == "fr"
    assert track.logo_url == "https://logo.test/canal.png"
    assert track.stream_url == "http://stream.test/canal.m3u8"
    assert track.attributes["tvg-country"] == "fr"
    assert track.attributes["TVG-NAME"] == "Canal+"


def test_parse_extracts_attributes_and_group() -> None:
    content = """#EXTM3U
#EXTINF:-1 tvg-id="movie-1" group-title="VOD Movies" custom="value",Movie One
http://stream.test/movie1.m3u8
"""

    track = _parse(content).tracks[0]

    assert track.id == "movie-1"
    assert track.name == "Movie One"
    assert track.media_type is MediaType.MOVIE
    assert track.attributes["custom"] == "value"
    assert track.group_title == "VOD Movies"


def test_parse_detects_series_from_group_title() -> None:
    content = """#EXTM3U
#EXTINF:-1 group-title="Séries FR",Séries Show
http://stream.test/series.m3u8
"""

    assert _parse(content).tracks[0].media_type is MediaType.SERIES


def test_parse_uses_prefix_heuristics_without_attributes() -> None:
    content = """#EXTM3U
#EXTINF:-1 ,[FR] Film Club
http://stream.test/filmclub.m3u8
"""

    track = _parse(content).tracks[0]

    assert track.name == "Film Club"
    assert track.country_code == "FR"
    assert track.language_code == "fr"
    assert dict(track.attributes) == {}


def test_attribute_language_wins_over_prefix() -> None:
    content = """#EXTM3U
#EXTINF:-1 tvg-language="en",FR - English News
http://stream.test/news.m3u8
"""

    track = _parse(content).tracks[0]

    assert track.language_code == "en"
    assert track.country_code == "FR"
    assert track.name == "English News"


def test_attribute_country_wins_over_prefix() -> None:
    content = """#EXTINF:-1 tvg-country=" be ",[FR] Bilingue
http://stream.test/be.m3u8
"""

    track = _parse(content).tracks[0]

    assert track.country_code == "BE"
    assert track.language_code == "fr"
    assert track.name == "Bilingue"


def test_metadata_without_url_yields_no_track() -> None:
    content = """#EXTM3U
#EXTINF:-1 tvg-id="orphan",Orphan"""

    result = _parse(content)

    assert result.tracks == ()


def test_new_metadata_replaces_pending_metadata() -> None:
    content = """#EXTINF:-1 tvg-id="first",First
#EXTINF:-1 tvg-id="second",Second
http://stream.test/second.m3u8
"""

    result = _parse(content)

    assert [track.id for track in result.tracks] == ["second"]


def test_urls_without_metadata_and_comments_are_ignored() -> None:
    content = """#EXTM3U
http://stream.test/lonely.m3u8
#EXTINF:-1,News

#EXTVLCOPT:http-user-agent=VLC
# a comment
   http://stream.test/news.m3u8
http://stream.test/after.m3u8
"""

    result = _parse(content)

    assert len(result.tracks) == 1
    assert result.tracks[0].name == "News"
    assert result.tracks[0].stream_url == "http://stream.test/news.m3u8"


def test_identifier_falls_back_to_name_then_url() -> None:
    content = """#EXTINF:-1 tvg-id="  ",Named Channel
http://stream.test/named.m3u8
#EXTINF:-1 tvg-id="",[FR]
http://stream.test/anonymous.m3u8
"""

    first, second = _parse(content).tracks

    assert first.id == "Named Channel"
    assert second.name == ""
    assert second.id == "http://stream.test/anonymous.m3u8"
    assert second.country_code == "FR"


def test_tvg_name_preferred_over_display_name() -> None:
    content = """#EXTINF:-1 tvg-name="FR: Arte",Something Else
http://stream.test/arte.m3u8
"""

    track = _parse(content).tracks[0]

    assert track.name == "Arte"
    assert track.country_code == "FR"


def test_quoted_comma_does_not_split_display_name() -> None:
    content = """#EXTINF:-1 tvg-id="x" group-title="News, World",World News
http://stream.test/world.m3u8
"""

    track = _parse(content).tracks[0]

    assert track.group_title == "News, World"
    assert track.name == "World News"


def test_extinf_marker_is_case_insensitive() -> None:
    content = """#extinf:-1 tvg-id="lower",Lower
http://stream.test/lower.m3u8
"""

    assert [track.id for track in _parse(content).tracks] == ["lower"]


def test_parse_accepts_text_streams_and_line_iterables() -> None:
    content = '\ufeff#EXTM3U\r\n#EXTINF:-1 tvg-id="a",A\r\nhttp://stream.test/a\r\n'

    from_text = M3UPlaylistParser().parse(io.StringIO(content))
    from_lines = parse_playlist(iter(content.encode("utf-8").splitlines()))

    assert [t.id for t in from_text.tracks] == ["a"]
    assert [t.id for t in from_lines.tracks] == ["a"]
    assert from_text.tracks[0].stream_url == "http://stream.test/a"


def test_parse_preserves_source_order() -> None:
    lines = ["#EXTM3U"]
    for idx in range(50):
        lines.append(f'#EXTINF:-1 tvg-id="ch-{idx}",Channel {idx}')
        lines.append(f"http://stream.test/{idx}.m3u8")

    result = M3UPlaylistParser().parse_text("\n".join(lines))

    assert [track.id for track in result.tracks] == [f"ch-{idx}" for idx in range(50)]


def test_parse_does_not_close_stream() -> None:
    stream = io.BytesIO(b'#EXTINF:-1,A\nhttp://stream.test/a\n')

    M3UPlaylistParser().parse(stream)

    assert stream.closed is False


def test_parse_rejects_missing_stream() -> None:
    with pytest.raises(ValueError, match="stream is required"):
        M3UPlaylistParser().parse(None)


def test_parse_rejects_raw_text() -> None:
    with pytest.raises(TypeError):
        M3UPlaylistParser().parse("#EXTM3U\n")


def test_parse_stops_when_cancelled() -> None:
    cancel = threading.Event()
    consumed: list[str] = []

    def _lines():
        for line in ['#EXTINF:-1,A', 'http://stream.test/a', '#EXTINF:-1,B', 'http://stream.test/b']:
            consumed.append(line)
            if len(consumed) == 2:
                cancel.set()
            yield line

    with pytest.raises(PlaylistParseCancelled):
        M3UPlaylistParser().parse(_lines(), cancel)

    assert consumed == ['#EXTINF:-1,A', 'http://stream.test/a']


def test_parse_propagates_read_errors() -> None:
    def _lines():
        yield "#EXTINF:-1,A"
        raise OSError("disk gone")

    with pytest.raises(OSError, match="disk gone"):
        M3UPlaylistParser().parse(_lines())


def test_parser_states_are_explicit() -> None:
    assert {state.name for state in ParserState} == {"AWAITING_METADATA", "AWAITING_URL"}


def test_parser_instance_is_reusable() -> None:
    parser = M3UPlaylistParser()
    first = parser.parse_text('#EXTINF:-1,A\n')
    second = parser.parse_text('http://stream.test/b\n')

    assert first.tracks == ()
    assert second.tracks == ()
