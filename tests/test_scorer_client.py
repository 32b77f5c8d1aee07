import pytest
import requests

from scorer_api import scorer_client
from scorer_api.scorer_client import ScorerClientError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def test_get_json_builds_url(monkeypatch):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params, timeout))
        return FakeResponse(payload=[{"id": "p1"}])

    monkeypatch.setattr(scorer_client.requests, "get", fake_get)
    out = scorer_client.list_players(base_url="http://scorer.test/api/")
    assert out == [{"id": "p1"}]
    assert calls[0][0] == "http://scorer.test/api/players"
    assert calls[0][2] == scorer_client.SCORER_API_TIMEOUT_SECONDS


def test_record_delivery_sends_camel_case_body(monkeypatch):
    calls = []

    def fake_request(method, url, json=None, timeout=None):
        calls.append((method, url, json))
        return FakeResponse(payload={"match": {"totalRuns": 1}})

    monkeypatch.setattr(scorer_client.requests, "request", fake_request)
    out = scorer_client.record_delivery(0, is_wide=True, base_url="http://scorer.test/api")
    assert out["match"]["totalRuns"] == 1
    assert calls == [(
        "POST",
        "http://scorer.test/api/match/deliveries",
        {"runs": 0, "isNoBall": False, "isWide": True, "isWicket": False},
    )]


def test_error_detail_is_raised(monkeypatch):
    monkeypatch.setattr(
        scorer_client.requests,
        "request",
        lambda *a, **kw: FakeResponse(409, {"detail": "Cannot record a delivery"}),
    )
    with pytest.raises(ScorerClientError, match="HTTP 409: Cannot record a delivery"):
        scorer_client.undo_delivery(base_url="http://scorer.test/api")


def test_network_error_is_wrapped(monkeypatch):
    def boom(*a, **kw):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(scorer_client.requests, "get", boom)
    with pytest.raises(ScorerClientError, match="Network error"):
        scorer_client.get_live(base_url="http://scorer.test/api")


def test_invalid_json_and_bad_base_url(monkeypatch):
    monkeypatch.setattr(scorer_client.requests, "get", lambda *a, **kw: FakeResponse(200, None, "oops"))
    with pytest.raises(ScorerClientError, match="Invalid JSON"):
        scorer_client.get_match(base_url="http://scorer.test/api")

    with pytest.raises(ScorerClientError):
        scorer_client.get_history(base_url="ftp://scorer.test")
