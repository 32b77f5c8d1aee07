# scorer_api/classifier.py
from __future__ import annotations

from dataclasses import dataclass

from scorer_api.errors import InvalidDeliveryError

MAX_RUNS_PER_DELIVERY = 6
EXTRA_BALL_PENALTY = 1  # automatic run for a wide / no-ball


@dataclass(frozen=True)
class DeliveryOutcome:
    """
    What a single delivery does to the scoreboard.

    - legal_delivery: counts towards the over (not a wide / no-ball)
    - extra_runs: credited to the batting side, never to the striker
    - batsman_runs: the numeric runs scored (also possible off a no-ball)
    """
    legal_delivery: bool
    extra_runs: int
    batsman_runs: int
    is_wicket: bool
    is_wide: bool
    is_no_ball: bool

    @property
    def total_runs(self) -> int:
        return self.batsman_runs + self.extra_runs


def classify_delivery(
    runs: int,
    is_no_ball: bool = False,
    is_wide: bool = False,
    is_wicket: bool = False,
) -> DeliveryOutcome:
    if is_no_ball and is_wide:
        raise InvalidDeliveryError("A delivery cannot be both a wide and a no-ball")
    if isinstance(runs, bool) or not isinstance(runs, int):
        raise InvalidDeliveryError(f"runs must be an integer, got {runs!r}")
    if runs < 0 or runs > MAX_RUNS_PER_DELIVERY:
        raise InvalidDeliveryError(f"runs must be 0-{MAX_RUNS_PER_DELIVERY}, got {runs}")

    is_extra = is_no_ball or is_wide
    return DeliveryOutcome(
        legal_delivery=not is_extra,
        extra_runs=EXTRA_BALL_PENALTY if is_extra else 0,
        batsman_runs=runs,
        is_wicket=bool(is_wicket),
        is_wide=bool(is_wide),
        is_no_ball=bool(is_no_ball),
    )
