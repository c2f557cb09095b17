"""Application settings constants."""

from __future__ import annotations

import os

# Lifetime of a parsed playlist in the in-memory store.
PLAYLIST_TTL_SECONDS = int(os.getenv("M3U_PLAYER_PLAYLIST_TTL_SECONDS", str(30 * 60)))

# Upper bound for uploaded playlist files.
MAX_UPLOAD_BYTES = int(os.getenv("M3U_PLAYER_MAX_UPLOAD_BYTES", str(100 * 1024 * 1024)))

# Remote playlist download limits.
FETCH_TIMEOUT_SECONDS = float(os.getenv("M3U_PLAYER_FETCH_TIMEOUT_SECONDS", "30"))
FETCH_MAX_BYTES = int(os.getenv("M3U_PLAYER_FETCH_MAX_BYTES", str(100 * 1024 * 1024)))
FETCH_USER_AGENT = os.getenv("M3U_PLAYER_USER_AGENT", "M3UPlayer/1.0")

LOG_DIR = os.getenv("M3U_PLAYER_LOG_DIR", os.path.join(os.getcwd(), "logs"))
