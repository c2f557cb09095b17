"""Storage helpers for parsed playlists."""

from db.memory_playlist_store import InMemoryPlaylistStore

__all__ = ["InMemoryPlaylistStore"]
