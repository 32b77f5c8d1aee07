# scorer_api/config.py
from __future__ import annotations

import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _get_env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


# -------------------------
# Document store
# -------------------------
# JSON file holding players / teams / match / history.
# Empty -> memory-only store (nothing survives a restart).
SCORER_STORE_PATH: str = _get_env("SCORER_STORE_PATH", "data/scorer_store.json")


# -------------------------
# Live view (viewers poll GET /api/live)
# -------------------------
LIVE_VIEW_CACHE_TTL_SECONDS: int = _get_env_int("LIVE_VIEW_CACHE_TTL_SECONDS", 2)


# -------------------------
# Logging
# -------------------------
LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO").upper()
VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


# -------------------------
# HTTP client (scorer_client.py)
# -------------------------
SCORER_API_BASE_URL: str = _get_env("SCORER_API_BASE_URL", "http://localhost:8000/api")
SCORER_API_TIMEOUT_SECONDS: int = _get_env_int("SCORER_API_TIMEOUT_SECONDS", 10)


def validate_config() -> None:
    if not SCORER_API_BASE_URL.startswith("http"):
        raise RuntimeError("SCORER_API_BASE_URL must start with http/https")

    if LOG_LEVEL not in VALID_LOG_LEVELS:
        raise RuntimeError(f"LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}")

    if LIVE_VIEW_CACHE_TTL_SECONDS <= 0:
        raise RuntimeError("LIVE_VIEW_CACHE_TTL_SECONDS must be positive")

    if SCORER_API_TIMEOUT_SECONDS <= 0:
        raise RuntimeError("SCORER_API_TIMEOUT_SECONDS must be positive")

    if SCORER_STORE_PATH and os.path.isdir(SCORER_STORE_PATH):
        raise RuntimeError("SCORER_STORE_PATH must point to a file, not a directory")
