import json
from datetime import datetime, timezone

import pytest

from scorer_api.errors import StoreError
from scorer_api.models import MatchState, Player
from scorer_api.store import DocumentStore
from tests.factories import make_live_match, make_players, make_teams


def test_memory_store_reports_memory_only(store):
    result = store.save_players(make_players("a1"))
    assert result.status == "memory_only"
    assert result.ok is True
    assert [p.id for p in store.get_players()] == ["a1"]


def test_reads_are_copies(store):
    store.save_players(make_players("a1"))
    players = store.get_players()
    players[0].runs = 99
    assert store.get_players()[0].runs == 0


def test_file_store_round_trip(tmp_path):
    path = tmp_path / "store.json"
    teams = make_teams(["a1", "a2"], ["b1"])
    players = make_players("a1", "a2", "b1")

    store = DocumentStore(path)
    assert store.get_match() == MatchState()
    result = store.save(players=players, teams=teams, match=make_live_match(teams))
    assert result.status == "persisted"

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["teams"]["_id"] == "config"
    assert raw["match"]["_id"] == "current"

    reloaded = DocumentStore(path)
    assert reloaded.get_players() == players
    assert reloaded.get_teams() == teams
    assert reloaded.get_match().status == "live"
    assert reloaded.get_match().current_batsman_ids == ["a1", "a2"]


def test_missing_file_starts_with_defaults(tmp_path):
    store = DocumentStore(tmp_path / "nested" / "store.json")
    assert store.get_players() == []
    assert store.get_match() == MatchState()
    assert store.save_players(make_players("a1")).status == "persisted"


def test_empty_file_starts_with_defaults(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("", encoding="utf-8")
    assert DocumentStore(path).get_players() == []


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        DocumentStore(path)


def test_failed_write_keeps_memory_state(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")

    store = DocumentStore(tmp_path / "store.json")
    store.path = blocker / "store.json"

    result = store.save_players(make_players("a1"))
    assert result.status == "failed"
    assert result.ok is False
    assert result.error
    assert [p.id for p in store.get_players()] == ["a1"]


def test_archive_is_independent_snapshot(store):
    teams = make_teams(["a1"], ["b1"])
    players = [Player("a1", "A1", runs=20), Player("b1", "B1")]
    match = make_live_match(teams, non_striker=None)

    entry, sync = store.archive(match, players, teams)
    assert sync.status == "memory_only"

    players[0].runs = 0
    match.total_runs = 500
    stored = store.get_history()[0]
    assert stored.id == entry.id
    assert stored.players[0].runs == 20
    assert stored.match.total_runs == 0


def test_history_newest_first(store):
    teams = make_teams([], [])
    older = datetime(2024, 1, 1, tzinfo=timezone.utc)
    newer = datetime(2024, 6, 1, tzinfo=timezone.utc)

    first, _ = store.archive(MatchState(name="old"), [], teams, now=older)
    second, _ = store.archive(MatchState(name="new"), [], teams, now=newer)

    assert [h.id for h in store.get_history()] == [second.id, first.id]
    assert store.get_history()[1].date == older.isoformat()


def test_history_ties_keep_latest_first(store):
    teams = make_teams([], [])
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)
    first, _ = store.archive(MatchState(), [], teams, now=when)
    second, _ = store.archive(MatchState(), [], teams, now=when)
    assert [h.id for h in store.get_history()] == [second.id, first.id]


def test_reset_all_keeps_history(store):
    teams = make_teams(["a1"], [])
    store.save(players=make_players("a1"), teams=teams)
    store.archive(MatchState(), [], teams)

    store.reset_all()
    assert store.get_players() == []
    assert store.get_teams().team_a.player_ids == []
    assert store.get_match() == MatchState()
    assert len(store.get_history()) == 1
