import pytest

from scorer_api.classifier import classify_delivery
from scorer_api.errors import ValidationError
from scorer_api.models import Delivery, Player
from scorer_api.player_stats import (
    apply_deltas,
    compute_deltas,
    deltas_for_delivery,
    invert_deltas,
    reset_player_stats,
)
from tests.factories import make_players


def _by_id(players):
    return {p.id: p for p in players}


def test_boundary_credits_striker_and_charges_bowler():
    players = make_players("bat", "bowl")
    deltas = compute_deltas(classify_delivery(4), "bat", "bowl")
    out = _by_id(apply_deltas(players, deltas))

    assert (out["bat"].runs, out["bat"].balls, out["bat"].fours, out["bat"].sixes) == (4, 1, 1, 0)
    assert (out["bowl"].overs_bowled, out["bowl"].runs_conceded, out["bowl"].wickets) == (1, 4, 0)


def test_no_ball_six_is_not_a_ball_faced():
    players = make_players("bat", "bowl")
    deltas = compute_deltas(classify_delivery(6, is_no_ball=True), "bat", "bowl")
    out = _by_id(apply_deltas(players, deltas))

    assert out["bat"].runs == 6
    assert out["bat"].balls == 0
    assert out["bat"].sixes == 1
    assert out["bowl"].overs_bowled == 0
    assert out["bowl"].runs_conceded == 7


def test_wicket_marks_out_and_credits_bowler():
    players = make_players("bat", "bowl")
    deltas = compute_deltas(classify_delivery(0, is_wicket=True), "bat", "bowl")
    out = _by_id(apply_deltas(players, deltas))

    assert out["bat"].is_out is True
    assert out["bowl"].wickets == 1


def test_inverse_restores_original_records():
    players = make_players("bat", "bowl")
    delivery = Delivery("d1", 4, False, False, True, "bat", "bowl", 0)

    after = apply_deltas(players, deltas_for_delivery(delivery))
    restored = apply_deltas(after, invert_deltas(deltas_for_delivery(delivery)))

    assert restored == players


def test_apply_is_all_or_nothing():
    players = make_players("bat")
    deltas = compute_deltas(classify_delivery(1), "bat", "ghost")
    with pytest.raises(ValidationError):
        apply_deltas(players, deltas)
    assert players[0].runs == 0


def test_counters_never_go_negative():
    players = make_players("bat", "bowl")
    undo = invert_deltas(compute_deltas(classify_delivery(2), "bat", "bowl"))
    out = _by_id(apply_deltas(players, undo))
    assert out["bat"].runs == 0
    assert out["bowl"].runs_conceded == 0


def test_reset_player_stats_keeps_identity():
    players = [Player("p1", "Ann", runs=30, balls=20, is_out=True, wickets=2, overs_bowled=12, runs_conceded=18)]
    reset = reset_player_stats(players)
    assert reset == [Player("p1", "Ann")]
