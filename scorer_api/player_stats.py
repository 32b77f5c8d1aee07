# scorer_api/player_stats.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from loguru import logger

from scorer_api.classifier import DeliveryOutcome, classify_delivery
from scorer_api.errors import ValidationError
from scorer_api.models import Delivery, Player

_COUNTERS = ("runs", "balls", "fours", "sixes", "wickets", "overs_bowled", "runs_conceded")


@dataclass(frozen=True)
class PlayerStatDelta:
    """
    Signed increments for one player record.

    is_out: True sets the flag, False clears it (undo), None leaves it alone.
    """
    player_id: str
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    wickets: int = 0
    overs_bowled: int = 0
    runs_conceded: int = 0
    is_out: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "playerId": self.player_id,
            "runs": self.runs,
            "balls": self.balls,
            "fours": self.fours,
            "sixes": self.sixes,
            "wickets": self.wickets,
            "oversBowled": self.overs_bowled,
            "runsConceded": self.runs_conceded,
            "isOut": self.is_out,
        }


def compute_deltas(outcome: DeliveryOutcome, striker_id: str, bowler_id: str) -> List[PlayerStatDelta]:
    """
    Striker delta first, bowler delta second.

    Wides and no-balls never count as a ball faced or a ball bowled, but the
    bowler is charged the extra run on top of whatever the batsman scored.
    """
    legal = 1 if outcome.legal_delivery else 0
    striker = PlayerStatDelta(
        player_id=striker_id,
        runs=outcome.batsman_runs,
        balls=legal,
        fours=1 if outcome.batsman_runs == 4 else 0,
        sixes=1 if outcome.batsman_runs == 6 else 0,
        is_out=True if outcome.is_wicket else None,
    )
    bowler = PlayerStatDelta(
        player_id=bowler_id,
        overs_bowled=legal,
        runs_conceded=outcome.total_runs,
        wickets=1 if outcome.is_wicket else 0,
    )
    return [striker, bowler]


def deltas_for_delivery(delivery: Delivery) -> List[PlayerStatDelta]:
    """Deltas a recorded ledger entry produced when it was applied."""
    outcome = classify_delivery(
        delivery.runs,
        is_no_ball=delivery.is_no_ball,
        is_wide=delivery.is_wide,
        is_wicket=delivery.is_wicket,
    )
    return compute_deltas(outcome, delivery.batsman_id, delivery.bowler_id)


def invert_deltas(deltas: List[PlayerStatDelta]) -> List[PlayerStatDelta]:
    inverted: List[PlayerStatDelta] = []
    for d in deltas:
        changes = {name: -getattr(d, name) for name in _COUNTERS}
        inverted.append(replace(d, is_out=False if d.is_out else None, **changes))
    return inverted


def apply_deltas(players: List[Player], deltas: List[PlayerStatDelta]) -> List[Player]:
    """
    Returns a new player list with every delta applied.

    All-or-nothing: unknown ids are rejected before any record is touched.
    Counters are floored at zero.
    """
    known = {p.id for p in players}
    missing = sorted({d.player_id for d in deltas if d.player_id not in known})
    if missing:
        raise ValidationError(f"Unknown player id(s): {missing}")

    by_id: Dict[str, Player] = {p.id: p for p in players}
    for d in deltas:
        current = by_id[d.player_id]
        changes: Dict[str, Any] = {
            name: max(0, getattr(current, name) + getattr(d, name)) for name in _COUNTERS
        }
        if d.is_out is not None:
            changes["is_out"] = d.is_out
        by_id[d.player_id] = replace(current, **changes)

    logger.debug("Applied {} stat delta(s)", len(deltas))
    return [by_id[p.id] for p in players]


def reset_player_stats(players: List[Player]) -> List[Player]:
    return [p.with_reset_stats() for p in players]
