"""In-memory playlist cache with a fixed time-to-live."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from typing import Callable
from uuid import uuid4

from config.settings import PLAYLIST_TTL_SECONDS
from playlist.models import Playlist

logger = logging.getLogger(__name__)


class InMemoryPlaylistStore:
    """Keep parsed playlists for ``ttl_seconds`` under generated identifiers.

    Nothing is persisted. Expired entries are dropped on lookup, swept on every
    save and by :meth:`purge_expired`.
    """

    def __init__(
        self,
        ttl_seconds: int | float = PLAYLIST_TTL_SECONDS,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.ttl_seconds = max(1.0, float(ttl_seconds))
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, Playlist]] = {}

    def save(self, playlist: Playlist) -> str:
        if playlist is None:
            raise ValueError("playlist is required")
        playlist_id = uuid4().hex
        snapshot = replace(playlist, playlist_id=playlist_id)
        now = self._clock()
        with self._lock:
            purged = self._drop_expired_locked(now)
            self._entries[playlist_id] = (now + self.ttl_seconds, snapshot)
        if purged:
            logger.debug(f"[STORE] purged expired={purged}")
        logger.info(f"[STORE] saved playlist={playlist_id} tracks={len(snapshot.tracks)}")
        return playlist_id

    def get(self, playlist_id: str) -> Playlist | None:
        key = str(playlist_id or "").strip()
        if not key:
            raise ValueError("playlist_id is required")
        now = self._clock()
        with self._lock:
            row = self._entries.get(key)
            if row is None:
                return None
            expires_at, playlist = row
            if expires_at <= now:
                self._entries.pop(key, None)
                logger.debug(f"[STORE] expired playlist={key}")
                return None
            return playlist

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            purged = self._drop_expired_locked(now)
        if purged:
            logger.debug(f"[STORE] purged expired={purged}")
        return purged

    def _drop_expired_locked(self, now: float) -> int:
        # Caller holds self._lock.
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
