# scorer_api/match_engine.py
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

from loguru import logger

from scorer_api.classifier import classify_delivery
from scorer_api.errors import (
    IllegalStateError,
    MissingParticipantsError,
    ValidationError,
)
from scorer_api.models import (
    Delivery,
    Extras,
    FirstInningsScore,
    MatchState,
    Player,
    TEAM_IDS,
    TeamsConfig,
)
from scorer_api.player_stats import (
    PlayerStatDelta,
    compute_deltas,
    deltas_for_delivery,
    invert_deltas,
    reset_player_stats,
)
from scorer_api.stats_math import BALLS_PER_OVER, is_over_complete, target_for

STRIKER = 0
NON_STRIKER = 1

ActionKind = Literal["select_bowler", "select_batsman"]


# -----------------------------
# Transition outputs
# -----------------------------
@dataclass(frozen=True)
class PendingAction:
    """Something the operator must resolve before the next delivery."""
    kind: ActionKind
    position: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "position": self.position}


@dataclass
class TransitionResult:
    match: MatchState
    deltas: List[PlayerStatDelta] = field(default_factory=list)
    pending: List[PendingAction] = field(default_factory=list)


@dataclass(frozen=True)
class InningsStatus:
    all_out: bool
    overs_reached: bool
    target_reached: bool

    @property
    def should_end(self) -> bool:
        return self.all_out or self.overs_reached or self.target_reached

    def to_dict(self) -> Dict[str, bool]:
        return {
            "allOut": self.all_out,
            "oversReached": self.overs_reached,
            "targetReached": self.target_reached,
            "shouldEnd": self.should_end,
        }


@dataclass(frozen=True)
class DeliveryInput:
    runs: int = 0
    is_no_ball: bool = False
    is_wide: bool = False
    is_wicket: bool = False


# -----------------------------
# Helpers
# -----------------------------
def default_match() -> MatchState:
    return MatchState()


def _now_ms() -> int:
    return int(time.time() * 1000)


def _require_status(match: MatchState, allowed: Iterable[str], action: str) -> None:
    allowed = tuple(allowed)
    if match.status not in allowed:
        raise IllegalStateError(
            f"Cannot {action} while match status is '{match.status}' (allowed: {list(allowed)})"
        )


def _swap_strike(match: MatchState) -> None:
    match.current_batsman_ids = [match.current_batsman_ids[1], match.current_batsman_ids[0]]


def _roster_size(teams: TeamsConfig, team_id: Optional[str]) -> int:
    if team_id is None:
        return 0
    return len(teams.get(team_id).player_ids)


def _last_over_bowler(ledger: List[Delivery]) -> Optional[str]:
    """Replays over boundaries to find the bowler barred from the next over."""
    barred: Optional[str] = None
    balls = 0
    for d in ledger:
        if barred is not None and barred != d.bowler_id:
            barred = None
        if not d.is_extra:
            balls += 1
            if is_over_complete(balls):
                barred = d.bowler_id
    return barred


def innings_status(match: MatchState, teams: TeamsConfig) -> InningsStatus:
    """
    Advisory innings-end checks; the operator decides whether to end the
    innings or the match.
    """
    roster = _roster_size(teams, match.batting_team_id)
    all_out = roster > 0 and match.wickets >= roster - 1

    overs_reached = (
        match.overs_limit is not None
        and match.total_balls >= match.overs_limit * BALLS_PER_OVER
    )

    target = target_for(match)
    target_reached = target is not None and match.total_runs >= target

    return InningsStatus(all_out=all_out, overs_reached=overs_reached, target_reached=target_reached)


def pending_actions(match: MatchState, teams: Optional[TeamsConfig] = None) -> List[PendingAction]:
    """
    Selections still required before the next delivery, in the order the
    operator should resolve them (bowler first, then empty batsman slots).
    """
    if match.status != "live":
        return []

    batsmen_available = True
    if teams is not None:
        status = innings_status(match, teams)
        if status.overs_reached or status.target_reached:
            return []
        batsmen_available = not status.all_out

    actions: List[PendingAction] = []
    if match.current_bowler_id is None:
        actions.append(PendingAction("select_bowler"))
    if batsmen_available:
        for position in (STRIKER, NON_STRIKER):
            if match.current_batsman_ids[position] is None:
                actions.append(PendingAction("select_batsman", position))
    return actions


# -----------------------------
# Setup
# -----------------------------
def configure(
    match: MatchState,
    teams: TeamsConfig,
    *,
    batting_team_id: Optional[str],
    bowling_team_id: Optional[str],
    name: str = "",
    overs_limit: Optional[int] = None,
) -> MatchState:
    _require_status(match, ("setup",), "configure the match")

    if not batting_team_id or not bowling_team_id:
        raise ValidationError("Both batting and bowling teams must be selected")
    for team_id in (batting_team_id, bowling_team_id):
        if team_id not in TEAM_IDS:
            raise ValidationError(f"Unknown team id: {team_id!r}")
    if batting_team_id == bowling_team_id:
        raise ValidationError("Batting and bowling team must be different")
    for team_id in (batting_team_id, bowling_team_id):
        team = teams.get(team_id)
        if not team.player_ids:
            raise ValidationError(f"{team.name} has no players")

    if overs_limit is not None:
        if isinstance(overs_limit, bool) or not isinstance(overs_limit, int) or overs_limit <= 0:
            raise ValidationError("Overs limit must be a positive whole number")

    configured = default_match()
    configured.name = (name or "").strip()
    configured.overs_limit = overs_limit
    configured.batting_team_id = batting_team_id
    configured.bowling_team_id = bowling_team_id

    logger.info(
        "Match configured: name={!r} overs_limit={} batting={} bowling={}",
        configured.name, overs_limit, batting_team_id, bowling_team_id,
    )
    return configured


def start(match: MatchState, teams: Optional[TeamsConfig] = None) -> TransitionResult:
    _require_status(match, ("setup",), "start the match")
    if match.batting_team_id is None or match.bowling_team_id is None:
        raise ValidationError("Configure batting and bowling teams before starting")

    new = match.clone()
    new.first_innings_batting_team_id = new.batting_team_id
    new.status = "live"

    logger.info("Match started: {} batting first", new.batting_team_id)
    return TransitionResult(new, pending=pending_actions(new, teams))


# -----------------------------
# Selections
# -----------------------------
def select_batsman(
    match: MatchState,
    teams: TeamsConfig,
    players: List[Player],
    player_id: Optional[str],
    position: int = STRIKER,
) -> TransitionResult:
    _require_status(match, ("setup", "live"), "select a batsman")
    if position not in (STRIKER, NON_STRIKER):
        raise ValidationError(f"Batsman position must be 0 (striker) or 1 (non-striker), got {position}")

    if player_id is not None:
        if match.batting_team_id is None:
            raise ValidationError("Batting team is not configured")
        if player_id not in teams.get(match.batting_team_id).player_ids:
            raise ValidationError(f"Player {player_id} is not on the batting team")
        player = next((p for p in players if p.id == player_id), None)
        if player is None:
            raise ValidationError(f"Unknown player id: {player_id}")
        if player.is_out:
            raise ValidationError(f"{player.name} is already out")
        if match.current_batsman_ids[1 - position] == player_id:
            raise ValidationError(f"{player.name} is already at the crease")

    new = match.clone()
    new.current_batsman_ids[position] = player_id
    return TransitionResult(new, pending=pending_actions(new, teams))


def select_bowler(
    match: MatchState,
    teams: TeamsConfig,
    player_id: Optional[str],
) -> TransitionResult:
    _require_status(match, ("setup", "live"), "select a bowler")

    if player_id is not None:
        if match.bowling_team_id is None:
            raise ValidationError("Bowling team is not configured")
        if player_id not in teams.get(match.bowling_team_id).player_ids:
            raise ValidationError(f"Player {player_id} is not on the bowling team")
        if player_id == match.last_over_bowler_id:
            raise ValidationError("A bowler cannot bowl two consecutive overs")

    new = match.clone()
    new.current_bowler_id = player_id
    return TransitionResult(new, pending=pending_actions(new, teams))


def swap_strike(match: MatchState) -> MatchState:
    """Manual correction, e.g. after an undo."""
    _require_status(match, ("live",), "swap strike")
    new = match.clone()
    _swap_strike(new)
    return new


# -----------------------------
# Deliveries
# -----------------------------
def apply_delivery(
    match: MatchState,
    delivery: DeliveryInput,
    teams: Optional[TeamsConfig] = None,
    *,
    delivery_id: Optional[str] = None,
    timestamp: Optional[int] = None,
) -> TransitionResult:
    """
    Fold one delivery into the match.

    Effects, in order:
    1) totals, extras and wickets; ledger append
    2) odd batsman runs swap the strike (wides/no-balls included)
    3) a wicket empties the dismissed batsman's slot
    4) a legal ball completing an over swaps the strike again, clears the
       bowler and bars that bowler from the next over
    """
    _require_status(match, ("live",), "record a delivery")
    outcome = classify_delivery(
        delivery.runs,
        is_no_ball=delivery.is_no_ball,
        is_wide=delivery.is_wide,
        is_wicket=delivery.is_wicket,
    )

    striker_id = match.striker_id
    bowler_id = match.current_bowler_id
    if striker_id is None or bowler_id is None:
        raise MissingParticipantsError("Select a striker and a bowler before recording a delivery")

    new = match.clone()
    new.total_runs += outcome.total_runs
    if outcome.legal_delivery:
        new.total_balls += 1
    if outcome.is_wicket:
        new.wickets += 1
    if outcome.is_wide:
        new.extras.wides += 1
    elif outcome.is_no_ball:
        new.extras.no_balls += 1

    new.ball_by_ball.append(
        Delivery(
            id=delivery_id or uuid.uuid4().hex,
            runs=outcome.batsman_runs,
            is_no_ball=outcome.is_no_ball,
            is_wide=outcome.is_wide,
            is_wicket=outcome.is_wicket,
            batsman_id=striker_id,
            bowler_id=bowler_id,
            timestamp=timestamp if timestamp is not None else _now_ms(),
        )
    )

    # a different bowler has now bowled in the new over
    if new.last_over_bowler_id is not None and new.last_over_bowler_id != bowler_id:
        new.last_over_bowler_id = None

    if outcome.batsman_runs % 2 == 1:
        _swap_strike(new)

    if outcome.is_wicket:
        slot = new.current_batsman_ids.index(striker_id)
        new.current_batsman_ids[slot] = None

    over_completed = outcome.legal_delivery and is_over_complete(new.total_balls)
    if over_completed:
        _swap_strike(new)
        new.current_bowler_id = None
        new.last_over_bowler_id = bowler_id

    logger.debug(
        "Delivery runs={} extra={} wicket={} -> {}/{} after {} balls{}",
        outcome.batsman_runs, outcome.extra_runs, outcome.is_wicket,
        new.total_runs, new.wickets, new.total_balls,
        " (over complete)" if over_completed else "",
    )
    return TransitionResult(
        new,
        deltas=compute_deltas(outcome, striker_id, bowler_id),
        pending=pending_actions(new, teams),
    )


def undo_last_delivery(match: MatchState, teams: Optional[TeamsConfig] = None) -> TransitionResult:
    """
    Pop the last ledger entry and reverse its totals and player stats.

    The consecutive-over bar is recomputed from the remaining ledger, and
    undoing the ball that completed an over puts its bowler back on.
    Strike rotation and emptied batsman slots are NOT reversed; the operator
    fixes those by hand.
    An empty ledger is a no-op.
    """
    _require_status(match, ("live",), "undo a delivery")
    if not match.ball_by_ball:
        return TransitionResult(match.clone(), pending=pending_actions(match, teams))

    new = match.clone()
    last = new.ball_by_ball.pop()

    new.total_runs -= last.runs + (1 if last.is_extra else 0)
    if last.is_wide:
        new.extras.wides -= 1
    elif last.is_no_ball:
        new.extras.no_balls -= 1
    else:
        new.total_balls -= 1
    if last.is_wicket:
        new.wickets -= 1

    new.last_over_bowler_id = _last_over_bowler(new.ball_by_ball)
    if not last.is_extra and is_over_complete(match.total_balls):
        new.current_bowler_id = last.bowler_id

    logger.info("Undid delivery {} -> {}/{} after {} balls", last.id, new.total_runs, new.wickets, new.total_balls)
    return TransitionResult(
        new,
        deltas=invert_deltas(deltas_for_delivery(last)),
        pending=pending_actions(new, teams),
    )


# -----------------------------
# Innings / match lifecycle
# -----------------------------
def end_innings(match: MatchState) -> MatchState:
    _require_status(match, ("live",), "end the innings")
    if match.innings != 1:
        raise IllegalStateError("Only the first innings can be ended; complete the match instead")

    new = match.clone()
    new.status = "innings_complete"
    logger.info("First innings closed at {}/{} ({} balls)", new.total_runs, new.wickets, new.total_balls)
    return new


def start_second_innings(match: MatchState, teams: Optional[TeamsConfig] = None) -> TransitionResult:
    _require_status(match, ("innings_complete", "live"), "start the second innings")
    if match.innings != 1:
        raise IllegalStateError("Second innings has already started")
    if match.batting_team_id is None or match.bowling_team_id is None:
        raise ValidationError("Batting and bowling teams are not configured")

    new = match.clone()
    new.first_innings_score = FirstInningsScore(
        runs=match.total_runs,
        wickets=match.wickets,
        balls=match.total_balls,
        batting_team_id=match.batting_team_id,
    )
    new.batting_team_id, new.bowling_team_id = match.bowling_team_id, match.batting_team_id
    new.current_batsman_ids = [None, None]
    new.current_bowler_id = None
    new.last_over_bowler_id = None
    new.total_runs = 0
    new.wickets = 0
    new.total_balls = 0
    new.extras = Extras()
    new.ball_by_ball = []
    new.innings = 2
    new.status = "live"

    logger.info("Second innings started: {} need {}", new.batting_team_id, target_for(new))
    return TransitionResult(new, pending=pending_actions(new, teams))


def complete_match(match: MatchState) -> MatchState:
    _require_status(match, ("live", "innings_complete"), "complete the match")
    new = match.clone()
    new.status = "complete"
    logger.info("Match complete (innings {})", new.innings)
    return new


def reset_match(players: List[Player]) -> Tuple[MatchState, List[Player]]:
    """Back to a fresh `setup` record from any status; every player's stats are zeroed."""
    logger.info("Match reset; zeroing stats for {} player(s)", len(players))
    return default_match(), reset_player_stats(players)
