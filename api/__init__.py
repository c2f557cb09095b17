"""HTTP API for uploading and browsing M3U playlists."""
