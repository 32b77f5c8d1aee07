# scorer_api/stats_math.py
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from scorer_api.models import MatchState

BALLS_PER_OVER = 6
OversLike = Union[str, int]


def _fixed(value: float, places: int) -> str:
    """
    Fixed-decimal display string, rounding half-up on the exact binary value
    (same digits a browser's Number.toFixed produces for these inputs).
    """
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def overs_to_balls(overs: OversLike) -> int:
    """
    Converts cricket overs notation to balls.

    Supported inputs:
    - 20 (int overs, e.g. an overs limit)
    - "19.4" (string overs notation) -> 19*6 + 4 = 118 balls

    Rule: ".x" means x balls (0-5).
    """
    if overs is None:
        raise ValueError("Overs cannot be None")

    s = str(overs).strip()
    if not s:
        raise ValueError("Overs cannot be empty")

    if "." not in s:
        ov_i = int(s)
        if ov_i < 0:
            raise ValueError(f"Invalid overs: {overs}")
        return ov_i * BALLS_PER_OVER

    ov_part, ball_part = s.split(".", 1)
    ov_i = int(ov_part) if ov_part else 0
    balls_i = int(ball_part) if ball_part.strip() else 0

    if ov_i < 0:
        raise ValueError(f"Invalid overs: {overs}")
    if balls_i < 0 or balls_i > 5:
        raise ValueError(f"Invalid overs format: {overs} (balls part must be 0-5)")

    return ov_i * BALLS_PER_OVER + balls_i


def format_overs(balls: int) -> str:
    """14 balls -> "2.2" """
    return f"{balls // BALLS_PER_OVER}.{balls % BALLS_PER_OVER}"


def is_over_complete(balls: int) -> bool:
    return balls > 0 and balls % BALLS_PER_OVER == 0


def current_over(balls: int) -> int:
    """1-indexed number of the over in progress."""
    return balls // BALLS_PER_OVER + 1


def balls_remaining_in_over(balls: int) -> int:
    return BALLS_PER_OVER - (balls % BALLS_PER_OVER)


def strike_rate(runs: int, balls: int) -> str:
    """Runs per 100 balls faced, one decimal."""
    if balls == 0:
        return "0.0"
    return _fixed(runs / balls * 100, 1)


def economy_rate(runs_conceded: int, balls_bowled: int) -> str:
    """Runs conceded per over, two decimals."""
    if balls_bowled == 0:
        return "0.00"
    return _fixed(runs_conceded / (balls_bowled / BALLS_PER_OVER), 2)


def run_rate(total_runs: int, total_balls: int) -> str:
    if total_balls == 0:
        return "0.00"
    return _fixed(total_runs / (total_balls / BALLS_PER_OVER), 2)


def target_for(match: MatchState) -> Optional[int]:
    if match.innings != 2 or match.first_innings_score is None:
        return None
    return match.first_innings_score.runs + 1


def required_run_rate(match: MatchState) -> Optional[str]:
    """
    Runs needed per over for the chasing side.

    None when:
    - not in a second innings with a first-innings score
    - no overs limit was set
    - no balls remain
    """
    target = target_for(match)
    if target is None or match.overs_limit is None:
        return None

    balls_left = match.overs_limit * BALLS_PER_OVER - match.total_balls
    if balls_left <= 0:
        return None

    runs_needed = target - match.total_runs
    return _fixed(runs_needed / (balls_left / BALLS_PER_OVER), 2)
