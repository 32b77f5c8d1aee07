# scorer_api/roster.py
from __future__ import annotations

import copy
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Tuple

from scorer_api.errors import ValidationError
from scorer_api.models import Player, TeamsConfig

# Fields an operator may edit directly through a whole-field merge.
EDITABLE_FIELDS = {
    "name": "name",
    "runs": "runs",
    "balls": "balls",
    "fours": "fours",
    "sixes": "sixes",
    "isOut": "is_out",
    "wickets": "wickets",
    "oversBowled": "overs_bowled",
    "runsConceded": "runs_conceded",
}


def _normalize_player_name(name: str) -> str:
    cleaned = str(name or "").strip()
    if not cleaned:
        raise ValidationError("Player name is required")
    return cleaned


def _ensure_unique_name(players: List[Player], name: str, *, exclude_id: str | None = None) -> None:
    key = name.lower()
    for p in players:
        if p.id != exclude_id and p.name.lower() == key:
            raise ValidationError(f"Player already exists: {p.name}")


def find_player(players: List[Player], player_id: str) -> Player:
    for p in players:
        if p.id == player_id:
            return p
    raise ValidationError(f"Unknown player id: {player_id}")


def add_player(players: List[Player], name: str) -> Tuple[List[Player], Player]:
    cleaned = _normalize_player_name(name)
    _ensure_unique_name(players, cleaned)
    player = Player(id=uuid.uuid4().hex, name=cleaned)
    return [*players, player], player


def update_player(players: List[Player], player_id: str, updates: Dict[str, Any]) -> Tuple[List[Player], Player]:
    """
    Merge `updates` (camelCase document fields) into one player.
    `id` is never changed; renames are revalidated.
    """
    current = find_player(players, player_id)

    merged = current.to_dict()
    for key, value in (updates or {}).items():
        if key in ("id", "_id"):
            continue
        if key not in EDITABLE_FIELDS:
            raise ValidationError(f"Unknown player field: {key}")
        merged[key] = value

    updated = Player.from_dict(merged)
    if updated.name.lower() != current.name.lower():
        _ensure_unique_name(players, updated.name, exclude_id=player_id)

    return [updated if p.id == player_id else p for p in players], updated


def delete_player(players: List[Player], teams: TeamsConfig, player_id: str) -> Tuple[List[Player], TeamsConfig]:
    """Remove a player and cascade the id out of both teams."""
    find_player(players, player_id)
    new_teams = copy.deepcopy(teams)
    for team in (new_teams.team_a, new_teams.team_b):
        team.player_ids = [pid for pid in team.player_ids if pid != player_id]
    return [p for p in players if p.id != player_id], new_teams


def assign_to_team(teams: TeamsConfig, players: List[Player], player_id: str, team_id: str) -> TeamsConfig:
    """Add a player to a team, taking it off the other team first."""
    find_player(players, player_id)
    new_teams = copy.deepcopy(teams)
    target = new_teams.get(team_id)
    other = new_teams.other(team_id)

    other.player_ids = [pid for pid in other.player_ids if pid != player_id]
    if player_id not in target.player_ids:
        target.player_ids.append(player_id)
    return new_teams


def remove_from_team(teams: TeamsConfig, player_id: str, team_id: str) -> TeamsConfig:
    new_teams = copy.deepcopy(teams)
    team = new_teams.get(team_id)
    team.player_ids = [pid for pid in team.player_ids if pid != player_id]
    return new_teams


def rename_team(teams: TeamsConfig, team_id: str, name: str) -> TeamsConfig:
    cleaned = str(name or "").strip()
    if not cleaned:
        raise ValidationError("Team name is required")
    new_teams = copy.deepcopy(teams)
    team = new_teams.get(team_id)
    if team_id == new_teams.team_a.id:
        new_teams.team_a = replace(team, name=cleaned)
    else:
        new_teams.team_b = replace(team, name=cleaned)
    return new_teams


def validate_teams(teams: TeamsConfig, players: List[Player]) -> None:
    """Every team member must exist in the roster."""
    known = {p.id for p in players}
    unknown = sorted(
        pid for team in (teams.team_a, teams.team_b) for pid in team.player_ids if pid not in known
    )
    if unknown:
        raise ValidationError(f"Unknown player id(s) in teams: {unknown}")


def team_players(teams: TeamsConfig, players: List[Player], team_id: str) -> List[Player]:
    by_id = {p.id: p for p in players}
    return [by_id[pid] for pid in teams.get(team_id).player_ids if pid in by_id]


def unassigned_players(teams: TeamsConfig, players: List[Player]) -> List[Player]:
    assigned = set(teams.team_a.player_ids) | set(teams.team_b.player_ids)
    return [p for p in players if p.id not in assigned]
