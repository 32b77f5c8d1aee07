# scorer_api/cache.py
from __future__ import annotations

import time
from typing import Any, Dict, Optional, Tuple

# In-memory TTL cache for the polled live view (single-instance deploys)
# key -> (expires_at_epoch, value)
_cache: Dict[str, Tuple[float, Any]] = {}


def make_key(*parts: str) -> str:
    """
    Namespaced cache key.
    Example:
      make_key("live", "current") -> "live:current"
    """
    key = ":".join([str(p).strip() for p in parts if str(p).strip()])
    if not key:
        raise ValueError("Cache key must be non-empty")
    return key


def get(key: str) -> Optional[Any]:
    item = _cache.get(key)
    if not item:
        return None

    expires_at, value = item
    if time.time() > expires_at:
        _cache.pop(key, None)
        return None

    return value


def set(key: str, value: Any, ttl_seconds: int = 2) -> None:
    if ttl_seconds <= 0:
        # Do not cache if TTL is invalid
        return
    _cache[key] = (time.time() + ttl_seconds, value)


def invalidate(prefix: str) -> int:
    """Drop every key starting with `prefix`; returns how many were removed."""
    doomed = [k for k in _cache if k.startswith(prefix)]
    for k in doomed:
        _cache.pop(k, None)
    return len(doomed)


def clear() -> None:
    _cache.clear()
