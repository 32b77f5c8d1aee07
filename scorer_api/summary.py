# scorer_api/summary.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from scorer_api.match_engine import innings_status
from scorer_api.models import MatchState, Player, TeamsConfig
from scorer_api.roster import team_players
from scorer_api.stats_math import (
    BALLS_PER_OVER,
    economy_rate,
    format_overs,
    required_run_rate,
    run_rate,
    strike_rate,
    target_for,
)

RUNS_PER_WICKET = 20  # man-of-the-match weighting: 20 runs ~ 1 wicket
INCOMPLETE_RESULT = "Incomplete"


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


def match_result(match: MatchState, teams: TeamsConfig, *, archived: bool = False) -> Optional[str]:
    """
    Definitive result text, or None when the match has no result yet.

    Only a completed (or archived) two-innings match has a result.
    """
    if match.status != "complete" and not archived:
        return None
    if match.innings != 2 or match.first_innings_score is None or match.batting_team_id is None:
        return None

    first = match.first_innings_score
    second_runs = match.total_runs

    if second_runs > first.runs:
        chasing = teams.get(match.batting_team_id)
        wickets_left = max(0, len(chasing.player_ids) - 1 - match.wickets)
        return f"{chasing.name} won by {_plural(wickets_left, 'wicket')}"
    if first.runs > second_runs:
        defending = teams.get(first.batting_team_id)
        return f"{defending.name} won by {_plural(first.runs - second_runs, 'run')}"
    return "Match Tied"


def man_of_the_match(players: List[Player]) -> Optional[Player]:
    """
    Top scorer unless the best bowler's wickets are worth more
    (wickets x RUNS_PER_WICKET). Ties go to the first player encountered.
    """
    top_scorer: Optional[Player] = None
    top_wicket_taker: Optional[Player] = None
    for p in players:
        if top_scorer is None or p.runs > top_scorer.runs:
            top_scorer = p
        if top_wicket_taker is None or p.wickets > top_wicket_taker.wickets:
            top_wicket_taker = p

    if top_scorer is None or top_wicket_taker is None:
        return None
    if top_scorer.runs == 0 and top_wicket_taker.wickets == 0:
        return None

    if top_scorer.runs >= top_wicket_taker.wickets * RUNS_PER_WICKET:
        return top_scorer
    return top_wicket_taker


def batting_card(members: List[Player]) -> List[dict]:
    """Players who batted, most runs first."""
    batted = [p for p in members if p.balls > 0 or p.runs > 0]
    out: List[dict] = []
    for p in sorted(batted, key=lambda r: r.runs, reverse=True):
        out.append({
            "playerId": p.id,
            "name": p.name,
            "runs": p.runs,
            "balls": p.balls,
            "fours": p.fours,
            "sixes": p.sixes,
            "strikeRate": strike_rate(p.runs, p.balls),
            "isOut": p.is_out,
        })
    return out


def bowling_card(members: List[Player]) -> List[dict]:
    """
    Players who bowled, sorted by:
    1) Wickets (desc)
    2) Economy (asc)
    """
    bowled = [p for p in members if p.overs_bowled > 0]

    def key_fn(p: Player):
        return (-p.wickets, float(economy_rate(p.runs_conceded, p.overs_bowled)))

    out: List[dict] = []
    for p in sorted(bowled, key=key_fn):
        out.append({
            "playerId": p.id,
            "name": p.name,
            "overs": format_overs(p.overs_bowled),
            "runsConceded": p.runs_conceded,
            "wickets": p.wickets,
            "economy": economy_rate(p.runs_conceded, p.overs_bowled),
        })
    return out


def _score_line(runs: int, wickets: int, balls: int) -> Dict[str, Any]:
    return {
        "runs": runs,
        "wickets": wickets,
        "balls": balls,
        "overs": format_overs(balls),
        "display": f"{runs}/{wickets}",
        "runRate": run_rate(runs, balls),
    }


def build_summary(
    match: MatchState,
    teams: TeamsConfig,
    players: List[Player],
    *,
    archived: bool = False,
) -> Dict[str, Any]:
    """Full match summary: result, man of the match, innings scores and scorecards."""
    mom = man_of_the_match(players)

    innings: List[Dict[str, Any]] = []
    if match.first_innings_score is not None:
        fis = match.first_innings_score
        innings.append({
            "innings": 1,
            "battingTeamId": fis.batting_team_id,
            "battingTeamName": teams.get(fis.batting_team_id).name,
            **_score_line(fis.runs, fis.wickets, fis.balls),
        })
    if match.batting_team_id is not None:
        innings.append({
            "innings": match.innings,
            "battingTeamId": match.batting_team_id,
            "battingTeamName": teams.get(match.batting_team_id).name,
            **_score_line(match.total_runs, match.wickets, match.total_balls),
            "extras": match.extras.to_dict(),
        })

    cards: List[Dict[str, Any]] = []
    for team in (teams.team_a, teams.team_b):
        members = team_players(teams, players, team.id)
        cards.append({
            "teamId": team.id,
            "teamName": team.name,
            "batting": batting_card(members),
            "bowling": bowling_card(members),
        })

    return {
        "name": match.name,
        "status": match.status,
        "result": match_result(match, teams, archived=archived) or INCOMPLETE_RESULT,
        "manOfTheMatch": mom.to_dict() if mom else None,
        "target": target_for(match),
        "innings": innings,
        "scorecards": cards,
    }


def live_view(match: MatchState, teams: TeamsConfig, players: List[Player]) -> Dict[str, Any]:
    """Read-only snapshot polled by viewers."""
    by_id = {p.id: p for p in players}

    def batsman_line(pid: Optional[str], on_strike: bool) -> Optional[Dict[str, Any]]:
        p = by_id.get(pid) if pid else None
        if p is None:
            return None
        return {
            "playerId": p.id,
            "name": p.name,
            "runs": p.runs,
            "balls": p.balls,
            "fours": p.fours,
            "sixes": p.sixes,
            "strikeRate": strike_rate(p.runs, p.balls),
            "onStrike": on_strike,
        }

    bowler = by_id.get(match.current_bowler_id) if match.current_bowler_id else None

    target = target_for(match)
    chase: Optional[Dict[str, Any]] = None
    if target is not None:
        balls_left = None
        if match.overs_limit is not None:
            balls_left = max(0, match.overs_limit * BALLS_PER_OVER - match.total_balls)
        chase = {
            "target": target,
            "runsNeeded": max(0, target - match.total_runs),
            "ballsLeft": balls_left,
            "requiredRunRate": required_run_rate(match),
        }

    batting_name = teams.get(match.batting_team_id).name if match.batting_team_id else None
    bowling_name = teams.get(match.bowling_team_id).name if match.bowling_team_id else None

    return {
        "name": match.name,
        "status": match.status,
        "innings": match.innings,
        "battingTeam": batting_name,
        "bowlingTeam": bowling_name,
        "score": _score_line(match.total_runs, match.wickets, match.total_balls),
        "oversLimit": match.overs_limit,
        "extras": match.extras.to_dict(),
        "firstInnings": match.first_innings_score.to_dict() if match.first_innings_score else None,
        "chase": chase,
        "batsmen": [
            batsman_line(match.striker_id, True),
            batsman_line(match.non_striker_id, False),
        ],
        "bowler": None if bowler is None else {
            "playerId": bowler.id,
            "name": bowler.name,
            "overs": format_overs(bowler.overs_bowled),
            "runsConceded": bowler.runs_conceded,
            "wickets": bowler.wickets,
            "economy": economy_rate(bowler.runs_conceded, bowler.overs_bowled),
        },
        "recentBalls": [b.to_dict() for b in match.ball_by_ball[-BALLS_PER_OVER:]],
        "inningsStatus": innings_status(match, teams).to_dict(),
    }
