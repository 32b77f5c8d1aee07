# scorer_api/scorer_client.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from scorer_api.config import SCORER_API_BASE_URL, SCORER_API_TIMEOUT_SECONDS


class ScorerClientError(Exception):
    """Raised when a call to the scoring API fails or returns an error."""
    pass


def _url(endpoint: str, base_url: Optional[str] = None) -> str:
    base = (base_url or SCORER_API_BASE_URL).rstrip("/")
    if not base.startswith("http"):
        raise ScorerClientError("SCORER_API_BASE_URL must start with http/https")
    return f"{base}/{endpoint.lstrip('/')}"


def _decode(resp: requests.Response) -> Any:
    if not 200 <= resp.status_code < 300:
        try:
            detail = resp.json().get("detail")
        except Exception:
            detail = None
        raise ScorerClientError(f"HTTP {resp.status_code}: {detail or resp.text}")

    try:
        return resp.json()
    except Exception as e:
        raise ScorerClientError(f"Invalid JSON response: {e}") from e


def get_json(endpoint: str, params: Optional[Dict[str, Any]] = None, *, base_url: Optional[str] = None) -> Any:
    try:
        resp = requests.get(_url(endpoint, base_url), params=params, timeout=SCORER_API_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        raise ScorerClientError(f"Network error: {e}") from e
    return _decode(resp)


def send_json(
    method: str,
    endpoint: str,
    body: Optional[Dict[str, Any]] = None,
    *,
    base_url: Optional[str] = None,
) -> Any:
    """POST / PUT / DELETE with an optional JSON body."""
    try:
        resp = requests.request(
            method.upper(),
            _url(endpoint, base_url),
            json=body,
            timeout=SCORER_API_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        raise ScorerClientError(f"Network error: {e}") from e
    return _decode(resp)


# -----------------------------
# Named helpers
# -----------------------------
def list_players(**kw: Any) -> List[Dict[str, Any]]:
    return get_json("players", **kw)


def add_player(name: str, **kw: Any) -> Dict[str, Any]:
    return send_json("POST", "players", {"name": name}, **kw)


def get_match(**kw: Any) -> Dict[str, Any]:
    return get_json("match", **kw)


def record_delivery(
    runs: int,
    *,
    is_no_ball: bool = False,
    is_wide: bool = False,
    is_wicket: bool = False,
    **kw: Any,
) -> Dict[str, Any]:
    body = {"runs": runs, "isNoBall": is_no_ball, "isWide": is_wide, "isWicket": is_wicket}
    return send_json("POST", "match/deliveries", body, **kw)


def undo_delivery(**kw: Any) -> Dict[str, Any]:
    return send_json("POST", "match/undo", **kw)


def get_live(**kw: Any) -> Dict[str, Any]:
    return get_json("live", **kw)


def get_history(**kw: Any) -> List[Dict[str, Any]]:
    return get_json("history", **kw)
