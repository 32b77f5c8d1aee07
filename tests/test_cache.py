import pytest

from scorer_api import cache


def test_set_and_get():
    cache.set("live:current", {"runs": 4}, ttl_seconds=30)
    assert cache.get("live:current") == {"runs": 4}
    assert cache.get("live:other") is None


def test_expired_entries_are_dropped(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(cache.time, "time", lambda: now[0])
    cache.set("k", 1, ttl_seconds=2)
    now[0] += 3
    assert cache.get("k") is None
    assert "k" not in cache._cache


def test_non_positive_ttl_is_not_cached():
    cache.set("k", 1, ttl_seconds=0)
    assert cache.get("k") is None


def test_invalidate_by_prefix():
    cache.set(cache.make_key("live", "current"), 1, ttl_seconds=30)
    cache.set(cache.make_key("history"), 2, ttl_seconds=30)
    assert cache.invalidate("live") == 1
    assert cache.get("live:current") is None
    assert cache.get("history") == 2


def test_make_key():
    assert cache.make_key(" live ", "", "current") == "live:current"
    with pytest.raises(ValueError):
        cache.make_key("", " ")
