"""Version and limit report served by ``/api/version``."""

import os
import platform

import fastapi
import pydantic
import requests

from config.settings import FETCH_MAX_BYTES, MAX_UPLOAD_BYTES, PLAYLIST_TTL_SECONDS

APP_VERSION_ENV = "M3U_PLAYER_VERSION"


def get_runtime_info():
    return {
        "app_version": os.environ.get(APP_VERSION_ENV, "0.1.0"),
        "python_version": platform.python_version(),
        "libraries": {
            "fastapi": fastapi.__version__,
            "pydantic": pydantic.VERSION,
            "requests": requests.__version__,
        },
        "limits": {
            "playlist_ttl_seconds": PLAYLIST_TTL_SECONDS,
            "max_upload_bytes": MAX_UPLOAD_BYTES,
            "fetch_max_bytes": FETCH_MAX_BYTES,
        },
    }
