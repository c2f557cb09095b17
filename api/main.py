#!/usr/bin/env python3
import logging
import os
import threading

import anyio
from fastapi import FastAPI, File, HTTPException, UploadFile

from api.contracts import (
    Channel,
    LanguageSummaryResponse,
    PlaylistFromUrlRequest,
    PlaylistSummaryResponse,
    channel_from_track,
    country_summary_from_group,
    language_summary_from_group,
)
from config.settings import LOG_DIR, MAX_UPLOAD_BYTES, PLAYLIST_TTL_SECONDS
from db.memory_playlist_store import InMemoryPlaylistStore
from download.remote_playlist import (
    PlaylistFetchError,
    PlaylistTooLargeError,
    build_session,
    fetch_playlist,
)
from engine.runtime import get_runtime_info
from playlist.grouping import (
    filter_vod,
    find_group,
    group_by_language,
    group_live_channels_by_country,
)
from playlist.models import Playlist
from playlist.parser import M3UPlaylistParser, PlaylistParseCancelled

APP_NAME = "M3UPlayer.Api"

app = FastAPI(
    title=APP_NAME,
    description="Upload or fetch IPTV M3U playlists and browse channels by country.",
)
app.state.parser = M3UPlaylistParser()
app.state.playlist_store = InMemoryPlaylistStore(PLAYLIST_TTL_SECONDS)
app.state.http_session = None
app.state.stop_event = threading.Event()

_HTTP_SESSION_LOCK = threading.Lock()


def _env_or_default(name, default):
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _setup_logging(log_dir):
    os.makedirs(log_dir, exist_ok=True)
    root = logging.getLogger("")
    log_path = os.path.join(log_dir, "m3u-player.log")
    root.setLevel(logging.INFO)
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler):
            if os.path.abspath(getattr(handler, "baseFilename", "")) == os.path.abspath(log_path):
                return
    file_handler = logging.FileHandler(log_path)
    file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    file_handler.setLevel(logging.INFO)
    root.addHandler(file_handler)


@app.on_event("startup")
async def startup():
    _setup_logging(_env_or_default("M3U_PLAYER_LOG_DIR", LOG_DIR))
    app.state.stop_event.clear()
    logging.info("Playlist store ready (ttl=%ss)", app.state.playlist_store.ttl_seconds)


@app.on_event("shutdown")
async def shutdown():
    # Running parses observe this between lines and abort.
    app.state.stop_event.set()
    with _HTTP_SESSION_LOCK:
        session = app.state.http_session
        app.state.http_session = None
    if session is not None:
        session.close()


def _get_http_session():
    session = app.state.http_session
    if session is not None:
        return session
    with _HTTP_SESSION_LOCK:
        if app.state.http_session is None:
            app.state.http_session = build_session()
        return app.state.http_session


def _get_playlist_or_404(playlist_id: str) -> Playlist:
    try:
        playlist = app.state.playlist_store.get(playlist_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="playlist_id is required")
    if playlist is None:
        raise HTTPException(status_code=404, detail="playlist_not_found")
    return playlist


def _summary(playlist: Playlist) -> PlaylistSummaryResponse:
    groups = group_live_channels_by_country(playlist)
    return PlaylistSummaryResponse(
        playlist_id=playlist.playlist_id,
        countries=[country_summary_from_group(group) for group in groups],
    )


def _store_and_summarize(playlist: Playlist) -> PlaylistSummaryResponse:
    playlist_id = app.state.playlist_store.save(playlist)
    return _summary(_get_playlist_or_404(playlist_id))


def _upload_size(upload: UploadFile) -> int:
    handle = upload.file
    handle.seek(0, os.SEEK_END)
    size = handle.tell()
    handle.seek(0)
    return size


@app.get("/api/health")
async def api_health():
    return {"status": "OK", "service": APP_NAME}


@app.get("/healthz")
async def healthz():
    return {"status": "OK"}


@app.get("/api/version")
async def api_version():
    return get_runtime_info()


@app.post("/api/playlists/from-file", response_model=PlaylistSummaryResponse)
async def upload_playlist(file: UploadFile = File(...)):
    size = await anyio.to_thread.run_sync(_upload_size, file)
    if size == 0:
        raise HTTPException(status_code=400, detail="empty_file")
    if size > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="file_too_large")
    try:
        playlist = await anyio.to_thread.run_sync(
            app.state.parser.parse,
            file.file,
            app.state.stop_event,
        )
    except PlaylistParseCancelled:
        raise HTTPException(status_code=503, detail="parse_cancelled")
    except OSError as exc:
        logging.exception("Playlist upload read failed: %s", exc)
        raise HTTPException(status_code=500, detail="playlist_read_failed")
    finally:
        await file.close()
    logging.info("Playlist uploaded filename=%s tracks=%s", file.filename, len(playlist.tracks))
    return _store_and_summarize(playlist)


@app.post("/api/playlists/from-url", response_model=PlaylistSummaryResponse)
async def playlist_from_url(payload: PlaylistFromUrlRequest):
    try:
        playlist = await anyio.to_thread.run_sync(
            lambda: fetch_playlist(
                payload.url,
                parser=app.state.parser,
                session=_get_http_session(),
                cancel_event=app.state.stop_event,
            )
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except PlaylistTooLargeError:
        raise HTTPException(status_code=413, detail="file_too_large")
    except PlaylistFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    except PlaylistParseCancelled:
        raise HTTPException(status_code=503, detail="parse_cancelled")
    return _store_and_summarize(playlist)


@app.get("/api/playlists/{playlist_id}/countries", response_model=PlaylistSummaryResponse)
async def playlist_countries(playlist_id: str):
    return _summary(_get_playlist_or_404(playlist_id))


@app.get(
    "/api/playlists/{playlist_id}/countries/{country_code}/channels",
    response_model=list[Channel],
)
async def playlist_country_channels(playlist_id: str, country_code: str):
    playlist = _get_playlist_or_404(playlist_id)
    group = find_group(group_live_channels_by_country(playlist), country_code)
    if group is None:
        return []
    return [channel_from_track(track) for track in group.tracks]


@app.get("/api/playlists/{playlist_id}/languages", response_model=LanguageSummaryResponse)
async def playlist_languages(playlist_id: str):
    playlist = _get_playlist_or_404(playlist_id)
    return LanguageSummaryResponse(
        playlist_id=playlist.playlist_id,
        languages=[language_summary_from_group(group) for group in group_by_language(playlist)],
    )


@app.get("/api/playlists/{playlist_id}/vod", response_model=list[Channel])
async def playlist_vod(playlist_id: str):
    playlist = _get_playlist_or_404(playlist_id)
    return [channel_from_track(track) for track in filter_vod(playlist)]


if __name__ == "__main__":
    import uvicorn

    host = _env_or_default("M3U_PLAYER_HOST", "127.0.0.1")
    port = int(_env_or_default("M3U_PLAYER_PORT", "8000"))
    uvicorn.run("api.main:app", host=host, port=port, reload=False)
