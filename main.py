# main.py (live cricket scorer API)
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from scorer_api.cache import get as cache_get, set as cache_set, invalidate as cache_invalidate, make_key
from scorer_api.config import (
    validate_config,
    LIVE_VIEW_CACHE_TTL_SECONDS,
    LOG_LEVEL,
    SCORER_STORE_PATH,
)
from scorer_api.errors import (
    IllegalStateError,
    InvalidDeliveryError,
    MissingParticipantsError,
    ScoringError,
    ValidationError,
)
from scorer_api.logging_setup import configure_logging
from scorer_api.match_engine import (
    DeliveryInput,
    TransitionResult,
    apply_delivery,
    complete_match,
    configure,
    end_innings,
    innings_status,
    pending_actions,
    reset_match,
    select_batsman,
    select_bowler,
    start,
    start_second_innings,
    swap_strike,
    undo_last_delivery,
)
from scorer_api.models import MatchState, TeamsConfig
from scorer_api.player_stats import apply_deltas, reset_player_stats
from scorer_api.roster import (
    add_player,
    assign_to_team,
    delete_player,
    remove_from_team,
    rename_team,
    update_player,
    validate_teams,
)
from scorer_api.store import DocumentStore, SyncResult
from scorer_api.summary import build_summary, live_view

LIVE_CACHE_KEY = make_key("live", "current")

# -----------------------
# App
# -----------------------
app = FastAPI(
    title="Live Cricket Scorer API",
    version="0.1.0",
    description="Single-scorer live cricket match tracking: roster, teams, ball-by-ball scoring, innings and history",
)

_store: Optional[DocumentStore] = None


def get_store() -> DocumentStore:
    global _store
    if _store is None:
        _store = DocumentStore(SCORER_STORE_PATH or None)
    return _store


@app.on_event("startup")
def on_startup():
    validate_config()
    configure_logging(LOG_LEVEL)


@app.get("/health")
@app.get("/api/health")
def health_check():
    return {"status": "ok", "time": datetime.utcnow().isoformat() + "Z"}


# -----------------------
# Helpers
# -----------------------
def _http_error(e: ScoringError) -> HTTPException:
    if isinstance(e, IllegalStateError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, MissingParticipantsError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, (ValidationError, InvalidDeliveryError)):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=f"Unexpected scoring error: {str(e)}")


def _ensure_player_exists(store: DocumentStore, player_id: str) -> None:
    if not any(p.id == player_id for p in store.get_players()):
        raise HTTPException(status_code=404, detail=f"Player not found: {player_id}")


def _commit(store: DocumentStore, **docs: Any) -> SyncResult:
    """Persist changed documents and drop the cached live view."""
    sync = store.save(**docs)
    cache_invalidate("live")
    if not sync.ok:
        logger.warning("Change kept in memory but not persisted: {}", sync.error)
    return sync


def _transition_response(store: DocumentStore, result: TransitionResult, sync: SyncResult) -> Dict[str, Any]:
    return {
        "match": result.match.to_dict(),
        "pending": [a.to_dict() for a in result.pending],
        "deltas": [d.to_dict() for d in result.deltas],
        "inningsStatus": innings_status(result.match, store.get_teams()).to_dict(),
        "sync": sync.to_dict(),
    }


def _match_response(store: DocumentStore, match: MatchState, sync: SyncResult) -> Dict[str, Any]:
    return _transition_response(
        store,
        TransitionResult(match, pending=pending_actions(match, store.get_teams())),
        sync,
    )


# -----------------------
# Players
# -----------------------
class PlayerIn(BaseModel):
    name: str = Field(..., description="Unique (case-insensitive) player name")


@app.get("/api/players")
def list_players(store: DocumentStore = Depends(get_store)):
    return [p.to_dict() for p in store.get_players()]


@app.post("/api/players")
def create_player(req: PlayerIn, store: DocumentStore = Depends(get_store)):
    try:
        players, player = add_player(store.get_players(), req.name)
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, players=players)
    return {**player.to_dict(), "sync": sync.to_dict()}


@app.put("/api/players/{player_id}")
def edit_player(player_id: str, updates: Dict[str, Any] = Body(...), store: DocumentStore = Depends(get_store)):
    _ensure_player_exists(store, player_id)
    try:
        players, player = update_player(store.get_players(), player_id, updates)
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, players=players)
    return {**player.to_dict(), "sync": sync.to_dict()}


@app.delete("/api/players/{player_id}")
def remove_player(player_id: str, store: DocumentStore = Depends(get_store)):
    _ensure_player_exists(store, player_id)
    players, teams = delete_player(store.get_players(), store.get_teams(), player_id)
    sync = _commit(store, players=players, teams=teams)
    return {"success": True, "sync": sync.to_dict()}


@app.post("/api/players/reset-stats")
def reset_stats(store: DocumentStore = Depends(get_store)):
    sync = _commit(store, players=reset_player_stats(store.get_players()))
    return {"success": True, "sync": sync.to_dict()}


# -----------------------
# Teams
# -----------------------
class TeamMemberIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_id: str = Field(..., alias="playerId")


class TeamNameIn(BaseModel):
    name: str


@app.get("/api/teams")
def get_teams(store: DocumentStore = Depends(get_store)):
    return store.get_teams().to_dict()


@app.put("/api/teams")
def replace_teams(payload: Dict[str, Any] = Body(...), store: DocumentStore = Depends(get_store)):
    try:
        teams = TeamsConfig.from_dict(payload)
        validate_teams(teams, store.get_players())
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, teams=teams)
    return {**teams.to_dict(), "sync": sync.to_dict()}


@app.post("/api/teams/{team_id}/players")
def add_team_member(team_id: str, req: TeamMemberIn, store: DocumentStore = Depends(get_store)):
    _ensure_player_exists(store, req.player_id)
    try:
        teams = assign_to_team(store.get_teams(), store.get_players(), req.player_id, team_id)
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, teams=teams)
    return {**teams.to_dict(), "sync": sync.to_dict()}


@app.delete("/api/teams/{team_id}/players/{player_id}")
def remove_team_member(team_id: str, player_id: str, store: DocumentStore = Depends(get_store)):
    try:
        teams = remove_from_team(store.get_teams(), player_id, team_id)
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, teams=teams)
    return {**teams.to_dict(), "sync": sync.to_dict()}


@app.put("/api/teams/{team_id}/name")
def set_team_name(team_id: str, req: TeamNameIn, store: DocumentStore = Depends(get_store)):
    try:
        teams = rename_team(store.get_teams(), team_id, req.name)
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, teams=teams)
    return {**teams.to_dict(), "sync": sync.to_dict()}


# -----------------------
# Match: record + setup
# -----------------------
class ConfigureIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    overs_limit: Optional[int] = Field(None, alias="oversLimit", description="Overs per innings; omit for unlimited")
    batting_team_id: Optional[str] = Field(None, alias="battingTeamId")
    bowling_team_id: Optional[str] = Field(None, alias="bowlingTeamId")


@app.get("/api/match")
def get_match(store: DocumentStore = Depends(get_store)):
    return store.get_match().to_dict()


@app.put("/api/match")
def replace_match(payload: Dict[str, Any] = Body(...), store: DocumentStore = Depends(get_store)):
    payload = {k: v for k, v in payload.items() if k != "_id"}
    try:
        match = MatchState.from_dict(payload)
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, match=match)
    return {**match.to_dict(), "sync": sync.to_dict()}


@app.post("/api/match/configure")
def configure_match(req: ConfigureIn, store: DocumentStore = Depends(get_store)):
    try:
        match = configure(
            store.get_match(),
            store.get_teams(),
            name=req.name,
            overs_limit=req.overs_limit,
            batting_team_id=req.batting_team_id,
            bowling_team_id=req.bowling_team_id,
        )
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, match=match)
    return _match_response(store, match, sync)


@app.post("/api/match/start")
def start_match(store: DocumentStore = Depends(get_store)):
    try:
        result = start(store.get_match(), store.get_teams())
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, match=result.match)
    return _transition_response(store, result, sync)


# -----------------------
# Match: selections
# -----------------------
class BatsmanIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_id: Optional[str] = Field(None, alias="playerId", description="null clears the slot")
    position: int = Field(0, description="0 = striker, 1 = non-striker")


class BowlerIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_id: Optional[str] = Field(None, alias="playerId", description="null clears the bowler")


@app.post("/api/match/batsman")
def choose_batsman(req: BatsmanIn, store: DocumentStore = Depends(get_store)):
    try:
        result = select_batsman(
            store.get_match(), store.get_teams(), store.get_players(), req.player_id, req.position
        )
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, match=result.match)
    return _transition_response(store, result, sync)


@app.post("/api/match/bowler")
def choose_bowler(req: BowlerIn, store: DocumentStore = Depends(get_store)):
    try:
        result = select_bowler(store.get_match(), store.get_teams(), req.player_id)
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, match=result.match)
    return _transition_response(store, result, sync)


@app.post("/api/match/swap-strike")
def swap_batsmen(store: DocumentStore = Depends(get_store)):
    try:
        match = swap_strike(store.get_match())
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, match=match)
    return _match_response(store, match, sync)


# -----------------------
# Match: deliveries
# -----------------------
class DeliveryIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    runs: int = Field(0, description="Runs off the bat, 0-6 (excludes the automatic extra)")
    is_no_ball: bool = Field(False, alias="isNoBall")
    is_wide: bool = Field(False, alias="isWide")
    is_wicket: bool = Field(False, alias="isWicket")


@app.post("/api/match/deliveries")
def record_delivery(req: DeliveryIn, store: DocumentStore = Depends(get_store)):
    teams = store.get_teams()
    try:
        result = apply_delivery(
            store.get_match(),
            DeliveryInput(
                runs=req.runs,
                is_no_ball=req.is_no_ball,
                is_wide=req.is_wide,
                is_wicket=req.is_wicket,
            ),
            teams,
        )
        players = apply_deltas(store.get_players(), result.deltas)
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, match=result.match, players=players)
    return _transition_response(store, result, sync)


@app.post("/api/match/undo")
def undo_delivery(store: DocumentStore = Depends(get_store)):
    try:
        result = undo_last_delivery(store.get_match(), store.get_teams())
        players = apply_deltas(store.get_players(), result.deltas)
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, match=result.match, players=players)
    return _transition_response(store, result, sync)


# -----------------------
# Match: innings / lifecycle
# -----------------------
@app.get("/api/match/innings-status")
def get_innings_status(store: DocumentStore = Depends(get_store)):
    return innings_status(store.get_match(), store.get_teams()).to_dict()


@app.post("/api/match/end-innings")
def close_innings(store: DocumentStore = Depends(get_store)):
    try:
        match = end_innings(store.get_match())
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, match=match)
    return _match_response(store, match, sync)


@app.post("/api/match/second-innings")
def begin_second_innings(store: DocumentStore = Depends(get_store)):
    try:
        result = start_second_innings(store.get_match(), store.get_teams())
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, match=result.match)
    return _transition_response(store, result, sync)


@app.post("/api/match/complete")
def finish_match(store: DocumentStore = Depends(get_store)):
    try:
        match = complete_match(store.get_match())
    except ScoringError as e:
        raise _http_error(e)
    sync = _commit(store, match=match)
    return _match_response(store, match, sync)


@app.post("/api/match/reset")
def reset_current_match(store: DocumentStore = Depends(get_store)):
    match, players = reset_match(store.get_players())
    sync = _commit(store, match=match, players=players)
    logger.info("Match reset via API")
    return {"success": True, "match": match.to_dict(), "sync": sync.to_dict()}


@app.post("/api/match/archive")
def archive_match(store: DocumentStore = Depends(get_store)):
    entry, sync = store.archive(store.get_match(), store.get_players(), store.get_teams())
    return {"success": True, "id": entry.id, "sync": sync.to_dict()}


@app.get("/api/match/summary")
def get_summary(store: DocumentStore = Depends(get_store)):
    return build_summary(store.get_match(), store.get_teams(), store.get_players())


# -----------------------
# Live view (polled by viewers, cached)
# -----------------------
@app.get("/api/live")
def get_live(store: DocumentStore = Depends(get_store)):
    cached = cache_get(LIVE_CACHE_KEY)
    if cached is not None:
        return {"source": "cache", "data": cached}

    data = live_view(store.get_match(), store.get_teams(), store.get_players())
    cache_set(LIVE_CACHE_KEY, data, ttl_seconds=LIVE_VIEW_CACHE_TTL_SECONDS)
    return {"source": "store", "data": data}


# -----------------------
# History + full reset
# -----------------------
@app.get("/api/history")
def get_history(store: DocumentStore = Depends(get_store)):
    out: List[Dict[str, Any]] = []
    for entry in store.get_history():
        out.append({
            **entry.to_dict(),
            "summary": build_summary(entry.match, entry.teams, entry.players, archived=True),
        })
    return out


@app.post("/api/reset-all")
def reset_everything(store: DocumentStore = Depends(get_store)):
    sync = store.reset_all()
    cache_invalidate("live")
    logger.info("All players, teams and match data reset via API")
    return {"success": True, "sync": sync.to_dict()}
