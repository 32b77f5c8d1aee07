import pytest

from scorer_api.errors import ValidationError
from scorer_api.models import Player, TEAM_A, TEAM_B
from scorer_api.roster import (
    add_player,
    assign_to_team,
    delete_player,
    remove_from_team,
    rename_team,
    team_players,
    unassigned_players,
    update_player,
    validate_teams,
)
from tests.factories import make_players, make_teams


def test_add_player_trims_and_generates_id():
    players, player = add_player([], "  Virat  ")
    assert player.name == "Virat"
    assert player.id
    assert players == [player]


@pytest.mark.parametrize("name", ["", "   ", None])
def test_add_player_requires_name(name):
    with pytest.raises(ValidationError):
        add_player([], name)


def test_duplicate_names_are_case_insensitive():
    players, _ = add_player([], "Rohit")
    with pytest.raises(ValidationError):
        add_player(players, "rOHIT ")


def test_update_player_merges_fields():
    players = [Player("p1", "Ann"), Player("p2", "Bea")]
    players, updated = update_player(players, "p1", {"runs": 12, "isOut": True, "id": "ignored"})
    assert updated.id == "p1"
    assert (updated.runs, updated.is_out) == (12, True)
    assert players[0] is updated


def test_update_player_rejects_clashing_rename_and_unknown_field():
    players = [Player("p1", "Ann"), Player("p2", "Bea")]
    with pytest.raises(ValidationError):
        update_player(players, "p1", {"name": "BEA"})
    with pytest.raises(ValidationError):
        update_player(players, "p1", {"captain": True})
    with pytest.raises(ValidationError):
        update_player(players, "p9", {"runs": 1})

    _, same = update_player(players, "p1", {"name": "ANN"})
    assert same.name == "ANN"


def test_delete_cascades_out_of_teams():
    players = make_players("a1", "b1")
    teams = make_teams(["a1"], ["b1"])
    players, teams = delete_player(players, teams, "a1")
    assert [p.id for p in players] == ["b1"]
    assert teams.team_a.player_ids == []
    assert teams.team_b.player_ids == ["b1"]


def test_assign_moves_player_between_teams():
    players = make_players("x")
    teams = make_teams(["x"], [])
    moved = assign_to_team(teams, players, "x", TEAM_B)
    assert moved.team_a.player_ids == []
    assert moved.team_b.player_ids == ["x"]
    assert teams.team_a.player_ids == ["x"]  # input untouched

    again = assign_to_team(moved, players, "x", TEAM_B)
    assert again.team_b.player_ids == ["x"]


def test_assign_unknown_player_or_team():
    players = make_players("x")
    teams = make_teams([], [])
    with pytest.raises(ValidationError):
        assign_to_team(teams, players, "ghost", TEAM_A)
    with pytest.raises(ValidationError):
        assign_to_team(teams, players, "x", "team-z")


def test_remove_from_team():
    teams = remove_from_team(make_teams(["a1", "a2"], []), "a1", TEAM_A)
    assert teams.team_a.player_ids == ["a2"]


def test_rename_team():
    teams = rename_team(make_teams([], []), TEAM_B, " Chasers ")
    assert teams.team_b.name == "Chasers"
    assert teams.team_b.id == TEAM_B
    with pytest.raises(ValidationError):
        rename_team(teams, TEAM_A, " ")


def test_validate_teams_and_lookups():
    players = make_players("a1", "b1", "free")
    teams = make_teams(["a1"], ["b1"])
    validate_teams(teams, players)
    assert [p.id for p in team_players(teams, players, TEAM_A)] == ["a1"]
    assert [p.id for p in unassigned_players(teams, players)] == ["free"]

    with pytest.raises(ValidationError):
        validate_teams(make_teams(["ghost"], []), players)
