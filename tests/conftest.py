from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import main
from scorer_api import cache
from scorer_api.store import DocumentStore
from tests.factories import make_players, make_teams


@pytest.fixture(autouse=True)
def clear_live_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def players():
    return make_players("a1", "a2", "a3", "b1", "b2", "b3")


@pytest.fixture
def teams():
    return make_teams(["a1", "a2", "a3"], ["b1", "b2", "b3"])


@pytest.fixture
def store():
    return DocumentStore()


@pytest.fixture
def client(store):
    main.app.dependency_overrides[main.get_store] = lambda: store
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()
