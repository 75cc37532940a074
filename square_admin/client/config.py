"""
client/config.py - Client-side settings.

SQR_API_URL points at the backend's /api/v1 prefix. A .env file in the
working directory is honoured the same way the backend config does.
"""

import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_API_URL = "http://localhost:5000/api/v1"
DEFAULT_TIMEOUT = 30


def api_url() -> str:
    return os.getenv("SQR_API_URL", DEFAULT_API_URL).rstrip("/")


def request_timeout() -> int:
    raw = os.getenv("SQR_API_TIMEOUT", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(
            f"SQR_API_TIMEOUT must be an integer number of seconds, got {raw!r}."
        )
