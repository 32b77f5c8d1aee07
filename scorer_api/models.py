# scorer_api/models.py
from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Optional

from scorer_api.errors import ValidationError


# -----------------------------
# Fixed identities
# -----------------------------
TEAM_A = "team-a"
TEAM_B = "team-b"
TEAM_IDS = (TEAM_A, TEAM_B)

MatchStatus = Literal["setup", "live", "innings_complete", "complete"]
MATCH_STATUSES = ("setup", "live", "innings_complete", "complete")


# -----------------------------
# Boundary helpers
# -----------------------------
def _as_int(raw: Dict[str, Any], key: str, default: int = 0, *, minimum: int = 0) -> int:
    value = raw.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ValidationError(f"{key} must be an integer, got {value!r}")
    if int(value) < minimum:
        raise ValidationError(f"{key} must be >= {minimum}, got {value!r}")
    return int(value)


def _as_bool(raw: Dict[str, Any], key: str, default: bool = False) -> bool:
    value = raw.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be a boolean, got {value!r}")
    return value


def _as_optional_str(raw: Dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None or value == "":
        return None
    return str(value)


def _as_team_id(raw: Dict[str, Any], key: str) -> Optional[str]:
    value = _as_optional_str(raw, key)
    if value is not None and value not in TEAM_IDS:
        raise ValidationError(f"{key} must be one of {list(TEAM_IDS)}, got {value!r}")
    return value


# -----------------------------
# Player
# -----------------------------
@dataclass
class Player:
    id: str
    name: str

    # batting
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    is_out: bool = False

    # bowling (overs_bowled is stored as a BALL count)
    wickets: int = 0
    overs_bowled: int = 0
    runs_conceded: int = 0

    def with_reset_stats(self) -> "Player":
        return replace(
            self,
            runs=0,
            balls=0,
            fours=0,
            sixes=0,
            is_out=False,
            wickets=0,
            overs_bowled=0,
            runs_conceded=0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "runs": self.runs,
            "balls": self.balls,
            "fours": self.fours,
            "sixes": self.sixes,
            "isOut": self.is_out,
            "wickets": self.wickets,
            "oversBowled": self.overs_bowled,
            "runsConceded": self.runs_conceded,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Player":
        player_id = _as_optional_str(raw, "id")
        if player_id is None:
            raise ValidationError("Player id is required")
        name = str(raw.get("name") or "").strip()
        if not name:
            raise ValidationError("Player name is required")
        return cls(
            id=player_id,
            name=name,
            runs=_as_int(raw, "runs"),
            balls=_as_int(raw, "balls"),
            fours=_as_int(raw, "fours"),
            sixes=_as_int(raw, "sixes"),
            is_out=_as_bool(raw, "isOut"),
            wickets=_as_int(raw, "wickets"),
            overs_bowled=_as_int(raw, "oversBowled"),
            runs_conceded=_as_int(raw, "runsConceded"),
        )


# -----------------------------
# Teams
# -----------------------------
@dataclass
class Team:
    id: str
    name: str
    player_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "playerIds": list(self.player_ids)}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], team_id: str, default_name: str) -> "Team":
        ids: List[str] = []
        for pid in raw.get("playerIds") or []:
            pid = str(pid)
            if pid not in ids:
                ids.append(pid)
        name = str(raw.get("name") or "").strip() or default_name
        return cls(id=team_id, name=name, player_ids=ids)


@dataclass
class TeamsConfig:
    team_a: Team = field(default_factory=lambda: Team(TEAM_A, "Team A"))
    team_b: Team = field(default_factory=lambda: Team(TEAM_B, "Team B"))

    def get(self, team_id: str) -> Team:
        if team_id == TEAM_A:
            return self.team_a
        if team_id == TEAM_B:
            return self.team_b
        raise ValidationError(f"Unknown team id: {team_id!r}")

    def other(self, team_id: str) -> Team:
        return self.team_b if self.get(team_id).id == TEAM_A else self.team_a

    def to_dict(self) -> Dict[str, Any]:
        return {"teamA": self.team_a.to_dict(), "teamB": self.team_b.to_dict()}

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "TeamsConfig":
        raw = raw or {}
        team_a = Team.from_dict(raw.get("teamA") or {}, TEAM_A, "Team A")
        team_b = Team.from_dict(raw.get("teamB") or {}, TEAM_B, "Team B")
        shared = set(team_a.player_ids) & set(team_b.player_ids)
        if shared:
            raise ValidationError(f"Players cannot be on both teams: {sorted(shared)}")
        return cls(team_a=team_a, team_b=team_b)


# -----------------------------
# Deliveries
# -----------------------------
@dataclass(frozen=True)
class Delivery:
    id: str
    runs: int
    is_no_ball: bool
    is_wide: bool
    is_wicket: bool
    batsman_id: str
    bowler_id: str
    timestamp: int

    @property
    def is_extra(self) -> bool:
        return self.is_no_ball or self.is_wide

    @property
    def extra_type(self) -> Optional[str]:
        if self.is_no_ball:
            return "no-ball"
        if self.is_wide:
            return "wide"
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "runs": self.runs,
            "isNoBall": self.is_no_ball,
            "isWide": self.is_wide,
            "isExtra": self.is_extra,
            "extraType": self.extra_type,
            "isWicket": self.is_wicket,
            "batsmanId": self.batsman_id,
            "bowlerId": self.bowler_id,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Delivery":
        is_no_ball = _as_bool(raw, "isNoBall")
        is_wide = _as_bool(raw, "isWide")
        if is_no_ball and is_wide:
            raise ValidationError("Delivery cannot be both a wide and a no-ball")
        runs = _as_int(raw, "runs")
        if runs > 6:
            raise ValidationError(f"Delivery runs must be 0-6, got {runs}")
        batsman_id = _as_optional_str(raw, "batsmanId")
        bowler_id = _as_optional_str(raw, "bowlerId")
        if batsman_id is None or bowler_id is None:
            raise ValidationError("Delivery requires batsmanId and bowlerId")
        return cls(
            id=str(raw.get("id") or ""),
            runs=runs,
            is_no_ball=is_no_ball,
            is_wide=is_wide,
            is_wicket=_as_bool(raw, "isWicket"),
            batsman_id=batsman_id,
            bowler_id=bowler_id,
            timestamp=_as_int(raw, "timestamp"),
        )


@dataclass
class Extras:
    wides: int = 0
    no_balls: int = 0

    @property
    def total(self) -> int:
        return self.wides + self.no_balls

    def to_dict(self) -> Dict[str, int]:
        return {"wides": self.wides, "noBalls": self.no_balls}


@dataclass(frozen=True)
class FirstInningsScore:
    runs: int
    wickets: int
    balls: int
    batting_team_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "runs": self.runs,
            "wickets": self.wickets,
            "balls": self.balls,
            "battingTeamId": self.batting_team_id,
        }


# -----------------------------
# Match (singleton live state)
# -----------------------------
@dataclass
class MatchState:
    name: str = ""
    overs_limit: Optional[int] = None
    batting_team_id: Optional[str] = None
    bowling_team_id: Optional[str] = None

    # [striker, non_striker]; either slot may be empty
    current_batsman_ids: List[Optional[str]] = field(default_factory=lambda: [None, None])
    current_bowler_id: Optional[str] = None
    last_over_bowler_id: Optional[str] = None

    total_runs: int = 0
    wickets: int = 0
    total_balls: int = 0  # legal deliveries only
    extras: Extras = field(default_factory=Extras)
    ball_by_ball: List[Delivery] = field(default_factory=list)

    innings: int = 1
    first_innings_score: Optional[FirstInningsScore] = None
    first_innings_batting_team_id: Optional[str] = None
    status: MatchStatus = "setup"

    @property
    def striker_id(self) -> Optional[str]:
        return self.current_batsman_ids[0]

    @property
    def non_striker_id(self) -> Optional[str]:
        return self.current_batsman_ids[1]

    def clone(self) -> "MatchState":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "oversLimit": self.overs_limit,
            "battingTeamId": self.batting_team_id,
            "bowlingTeamId": self.bowling_team_id,
            "currentBatsmanIds": list(self.current_batsman_ids),
            "currentBowlerId": self.current_bowler_id,
            "lastOverBowlerId": self.last_over_bowler_id,
            "totalRuns": self.total_runs,
            "wickets": self.wickets,
            "totalBalls": self.total_balls,
            "extras": self.extras.to_dict(),
            "ballByBall": [b.to_dict() for b in self.ball_by_ball],
            "innings": self.innings,
            "firstInningsScore": self.first_innings_score.to_dict() if self.first_innings_score else None,
            "firstInningsBattingTeamId": self.first_innings_batting_team_id,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "MatchState":
        """
        Build a MatchState from a stored/posted document.

        Absent fields take the defaults of a fresh `setup` record:
        - extras -> {wides: 0, noBalls: 0}
        - firstInningsScore -> None
        - ballByBall -> []
        - currentBatsmanIds -> padded/truncated to exactly two slots
        """
        raw = raw or {}

        status = raw.get("status") or "setup"
        if status not in MATCH_STATUSES:
            raise ValidationError(f"Invalid match status: {status!r}")

        innings = _as_int(raw, "innings", 1, minimum=1)
        if innings not in (1, 2):
            raise ValidationError(f"innings must be 1 or 2, got {innings}")

        overs_limit = raw.get("oversLimit")
        if overs_limit is not None:
            overs_limit = _as_int(raw, "oversLimit", minimum=1)

        batting = _as_team_id(raw, "battingTeamId")
        bowling = _as_team_id(raw, "bowlingTeamId")
        if batting is not None and batting == bowling:
            raise ValidationError("battingTeamId and bowlingTeamId must differ")

        slots = [(str(x) if x else None) for x in (raw.get("currentBatsmanIds") or [])][:2]
        while len(slots) < 2:
            slots.append(None)

        extras_raw = raw.get("extras") or {}
        extras = Extras(
            wides=_as_int(extras_raw, "wides"),
            no_balls=_as_int(extras_raw, "noBalls"),
        )

        first_raw = raw.get("firstInningsScore")
        first: Optional[FirstInningsScore] = None
        if first_raw:
            first_team = _as_team_id(first_raw, "battingTeamId")
            if first_team is None:
                raise ValidationError("firstInningsScore.battingTeamId is required")
            first = FirstInningsScore(
                runs=_as_int(first_raw, "runs"),
                wickets=_as_int(first_raw, "wickets"),
                balls=_as_int(first_raw, "balls"),
                batting_team_id=first_team,
            )

        state = cls(
            name=str(raw.get("name") or ""),
            overs_limit=overs_limit,
            batting_team_id=batting,
            bowling_team_id=bowling,
            current_batsman_ids=slots,
            current_bowler_id=_as_optional_str(raw, "currentBowlerId"),
            last_over_bowler_id=_as_optional_str(raw, "lastOverBowlerId"),
            total_runs=_as_int(raw, "totalRuns"),
            wickets=_as_int(raw, "wickets"),
            total_balls=_as_int(raw, "totalBalls"),
            extras=extras,
            ball_by_ball=[Delivery.from_dict(b) for b in raw.get("ballByBall") or []],
            innings=innings,
            first_innings_score=first,
            first_innings_batting_team_id=_as_team_id(raw, "firstInningsBattingTeamId"),
            status=status,
        )
        if state.extras.total > state.total_runs:
            raise ValidationError("totalRuns cannot be less than the sum of extras")
        return state


# -----------------------------
# History
# -----------------------------
@dataclass(frozen=True)
class HistoryEntry:
    id: str
    match: MatchState
    players: List[Player]
    teams: TeamsConfig
    date: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "match": self.match.to_dict(),
            "players": [p.to_dict() for p in self.players],
            "teams": self.teams.to_dict(),
            "date": self.date,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            id=str(raw.get("id") or ""),
            match=MatchState.from_dict(raw.get("match")),
            players=[Player.from_dict(p) for p in raw.get("players") or []],
            teams=TeamsConfig.from_dict(raw.get("teams")),
            date=str(raw.get("date") or ""),
            timestamp=_as_int(raw, "timestamp"),
        )
