# scorer_api/store.py
from __future__ import annotations

import copy
import json
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from loguru import logger

from scorer_api.errors import StoreError, ValidationError
from scorer_api.models import HistoryEntry, MatchState, Player, TeamsConfig

# Singleton documents are addressed by constant keys, not generated ids.
TEAMS_DOC_ID = "config"
MATCH_DOC_ID = "current"

SyncStatus = Literal["persisted", "memory_only", "failed"]


@dataclass(frozen=True)
class SyncResult:
    """
    Outcome of persisting one mutation.

    - persisted: written to the store file
    - memory_only: store has no file; change lives in this process only
    - failed: file write failed; the in-memory change is kept anyway
    """
    status: SyncStatus
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "error": self.error}


class DocumentStore:
    """
    Players list, team config, current match and append-only history,
    optionally mirrored to a single JSON file.
    """

    def __init__(self, path: Union[str, Path, None] = None) -> None:
        self.path: Optional[Path] = Path(path) if path else None
        self._players: List[Player] = []
        self._teams = TeamsConfig()
        self._match = MatchState()
        self._history: List[HistoryEntry] = []
        if self.path is not None:
            self._load()

    # -----------------------------
    # File I/O
    # -----------------------------
    def _load(self) -> None:
        if not self.path.exists() or self.path.stat().st_size == 0:
            logger.info("Store file {} not found or empty; starting with defaults", self.path)
            return

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            self._players = [Player.from_dict(p) for p in raw.get("players") or []]
            self._teams = TeamsConfig.from_dict(raw.get("teams"))
            self._match = MatchState.from_dict(raw.get("match"))
            self._history = [HistoryEntry.from_dict(h) for h in raw.get("history") or []]
        except (OSError, json.JSONDecodeError, ValidationError, AttributeError) as e:
            raise StoreError(f"Unable to read store file {self.path}: {e}") from e

        logger.info(
            "Loaded store {}: {} player(s), {} history entr(ies), match status={}",
            self.path, len(self._players), len(self._history), self._match.status,
        )

    def _snapshot(self) -> Dict[str, Any]:
        return {
            "players": [p.to_dict() for p in self._players],
            "teams": {"_id": TEAMS_DOC_ID, **self._teams.to_dict()},
            "match": {"_id": MATCH_DOC_ID, **self._match.to_dict()},
            "history": [h.to_dict() for h in self._history],
        }

    def _flush(self) -> SyncResult:
        if self.path is None:
            return SyncResult("memory_only")

        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(self._snapshot(), indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.warning("Failed to persist store to {}: {}", self.path, e)
            return SyncResult("failed", str(e))
        return SyncResult("persisted")

    # -----------------------------
    # Reads (always copies)
    # -----------------------------
    def get_players(self) -> List[Player]:
        return copy.deepcopy(self._players)

    def get_teams(self) -> TeamsConfig:
        return copy.deepcopy(self._teams)

    def get_match(self) -> MatchState:
        return self._match.clone()

    def get_history(self) -> List[HistoryEntry]:
        """Newest first."""
        return sorted(reversed(self._history), key=lambda h: h.timestamp, reverse=True)

    # -----------------------------
    # Writes (whole-document replace)
    # -----------------------------
    def save(
        self,
        *,
        players: Optional[List[Player]] = None,
        teams: Optional[TeamsConfig] = None,
        match: Optional[MatchState] = None,
    ) -> SyncResult:
        """Replace any of the three live documents in one flush."""
        if players is not None:
            self._players = copy.deepcopy(players)
        if teams is not None:
            self._teams = copy.deepcopy(teams)
        if match is not None:
            self._match = match.clone()
        return self._flush()

    def save_players(self, players: List[Player]) -> SyncResult:
        return self.save(players=players)

    def save_teams(self, teams: TeamsConfig) -> SyncResult:
        return self.save(teams=teams)

    def save_match(self, match: MatchState) -> SyncResult:
        return self.save(match=match)

    def archive(
        self,
        match: MatchState,
        players: List[Player],
        teams: TeamsConfig,
        *,
        now: Optional[datetime] = None,
    ) -> Tuple[HistoryEntry, SyncResult]:
        """Append an independent snapshot of the match, players and teams to history."""
        now = now or datetime.now(timezone.utc)
        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            match=match.clone(),
            players=copy.deepcopy(players),
            teams=copy.deepcopy(teams),
            date=now.isoformat(),
            timestamp=int(now.timestamp() * 1000),
        )
        self._history.append(entry)
        logger.info("Archived match {!r} to history ({} entr(ies))", match.name, len(self._history))
        return copy.deepcopy(entry), self._flush()

    def reset_all(self) -> SyncResult:
        """Drop every player, restore default teams and match. History is kept."""
        self._players = []
        self._teams = TeamsConfig()
        self._match = MatchState()
        logger.info("Store reset: players cleared, teams and match restored to defaults")
        return self._flush()
