"""Remote playlist download helpers."""

from download.remote_playlist import PlaylistFetchError, PlaylistTooLargeError, fetch_playlist

__all__ = ["PlaylistFetchError", "PlaylistTooLargeError", "fetch_playlist"]
