"""
REST API for the live scoring console.
Thin wrappers around MatchSession, the player directory and persistence.
"""
from __future__ import annotations

import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from courtside import config
from courtside.directory import PlayerDirectory, get_player, list_players
from courtside.models import MatchStatus
from courtside.persistence import (
    MatchEventRepository,
    MatchRepository,
    SqliteEventSink,
    get_connection,
    get_db_path,
    init_db,
)
from courtside.readiness import readiness
from courtside.scoring.emitter import BackgroundSink
from courtside.scoring.errors import InvariantViolation, MatchFinalizedError
from courtside.scoring.schemas import PointKind, Slot
from courtside.scoring.serialization import event_to_dict, state_to_dict
from courtside.session import MatchSession


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Live sessions ----------
# Process-local: one session (and one background sink) per match id.

_live_sessions: dict[str, MatchSession] = {}
_live_sinks: dict[str, BackgroundSink] = {}
_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


def _get_executor() -> ThreadPoolExecutor:
    """Single writer thread shared by all sessions, so each match's events stay in order."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="courtside-events")
        return _executor


def _shutdown_sessions() -> None:
    global _executor
    for sink in _live_sinks.values():
        sink.flush()
    _live_sessions.clear()
    _live_sinks.clear()
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=True)
            _executor = None


def _get_session(match_id: str) -> MatchSession:
    session = _live_sessions.get(match_id)
    if session is None:
        raise HTTPException(status_code=404, detail="No live session for this match")
    return session


def _drop_session(match_id: str) -> None:
    _live_sessions.pop(match_id, None)
    sink = _live_sinks.pop(match_id, None)
    if sink is not None:
        sink.flush()


def _http_error(e: InvariantViolation) -> HTTPException:
    if isinstance(e, MatchFinalizedError):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


def _player_payload(directory: PlayerDirectory, player_id: str) -> dict[str, Any]:
    profile = directory.get_player(player_id)
    return {
        "id": player_id,
        "display_name": profile.display_name if profile else None,
        "rating": profile.rating if profile else None,
    }


def _session_payload(session: MatchSession) -> dict[str, Any]:
    directory = PlayerDirectory()
    return {
        "match_id": session.match_id,
        "state": state_to_dict(session.state),
        "scoreboard": session.scoreboard(),
        "can_undo": session.can_undo(),
        "players": {slot.value: _player_payload(directory, session.player_id(slot)) for slot in Slot},
        "warnings": session.drain_warnings(),
    }


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config.configure_logging()
    init_db(db_path=get_db_path(), roster_path=config.ROSTER_PATH)
    readiness.ensure_ready()
    yield
    _shutdown_sessions()


# ---------- FastAPI app ----------
app = FastAPI(
    title="Courtside Live Scoring API",
    description="Point-by-point scoring console for tennis matches",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Request models ----------


class StartMatchRequest(BaseModel):
    player1_id: str = Field(..., min_length=1)
    player2_id: str = Field(..., min_length=1)
    match_id: str | None = Field(None, description="Existing scheduled match; a new one is created when omitted")


class AwardPointRequest(BaseModel):
    slot: str = Field(..., description="'a' for player 1, 'b' for player 2")
    point_kind: str = Field(PointKind.NORMAL.value, description="normal, ace, double-fault, winner, unforced-error")


# ---------- Routes ----------


@app.get("/health")
def health() -> dict[str, Any]:
    try:
        readiness.ensure_ready()
    except sqlite3.Error as e:
        raise HTTPException(status_code=503, detail=f"Backend not ready: {e}")
    return {"ready": readiness.is_ready, "live_matches": len(_live_sessions)}


@app.get("/players")
def get_players(limit: int | None = Query(None, ge=1, le=500)) -> dict[str, Any]:
    with db_conn() as conn:
        return {"players": [p.to_dict() for p in list_players(conn, limit=limit)]}


@app.get("/players/{player_id}")
def get_player_by_id(player_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        row = get_player(conn, player_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Player not found")
    return row.to_dict()


@app.get("/matches")
def list_matches(status: str | None = None) -> dict[str, Any]:
    with db_conn() as conn:
        return {"matches": [m.to_dict() for m in MatchRepository().list_all(conn, status=status)]}


@app.post("/matches")
def start_match(req: StartMatchRequest) -> dict[str, Any]:
    """Start live scoring. Creates the stored match when needed and marks it in progress."""
    if req.player1_id == req.player2_id:
        raise HTTPException(status_code=400, detail="A player cannot play against themselves")
    if req.match_id and req.match_id in _live_sessions:
        raise HTTPException(status_code=409, detail="Match already has a live session")
    match_repo = MatchRepository()
    with db_conn() as conn:
        stored = match_repo.get(conn, req.match_id) if req.match_id else None
        if stored is None:
            stored = match_repo.create(conn, req.player1_id, req.player2_id, id=req.match_id)
        elif (stored.player1_id, stored.player2_id) != (req.player1_id, req.player2_id):
            raise HTTPException(status_code=400, detail="Players do not match the stored match")
        elif stored.status == MatchStatus.COMPLETED.value:
            raise HTTPException(status_code=409, detail="Match already completed")
        match_repo.mark_in_progress(conn, stored.id)

    sink = BackgroundSink(SqliteEventSink(db_path=get_db_path()), executor=_get_executor())
    session = MatchSession(stored.id, req.player1_id, req.player2_id, sink)
    sink.on_error = session.report_failure
    session.start()
    _live_sessions[session.match_id] = session
    _live_sinks[session.match_id] = sink
    return _session_payload(session)


@app.get("/matches/{match_id}")
def get_match(match_id: str) -> dict[str, Any]:
    session = _live_sessions.get(match_id)
    if session is not None:
        return _session_payload(session)
    with db_conn() as conn:
        stored = MatchRepository().get(conn, match_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Match not found")
    return {"match_id": match_id, "live": False, "match": stored.to_dict()}


@app.post("/matches/{match_id}/points")
def award_point(match_id: str, req: AwardPointRequest) -> dict[str, Any]:
    session = _get_session(match_id)
    try:
        result = session.award_point(req.slot, req.point_kind)
    except InvariantViolation as e:
        raise _http_error(e)
    payload = _session_payload(session)
    payload["events"] = [e.kind.value for e in result.events]
    return payload


@app.post("/matches/{match_id}/undo")
def undo(match_id: str) -> dict[str, Any]:
    session = _get_session(match_id)
    try:
        previous = session.undo()
    except InvariantViolation as e:
        raise _http_error(e)
    payload = _session_payload(session)
    payload["undone"] = previous is not None
    return payload


@app.post("/matches/{match_id}/finalize")
def finalize(match_id: str) -> dict[str, Any]:
    session = _get_session(match_id)
    try:
        result = session.finalize()
    except InvariantViolation as e:
        raise _http_error(e)
    _drop_session(match_id)
    return {
        "match_id": match_id,
        "winner_slot": result.winner.value,
        "winner_id": session.player_id(result.winner),
        "score": result.score,
        "sets_won": [result.sets_won_a, result.sets_won_b],
        "warnings": session.drain_warnings(),
    }


@app.delete("/matches/{match_id}")
def close_session(match_id: str) -> dict[str, Any]:
    """
    Abandon live scoring without a result. History is discarded and the stored match goes
    back to scheduled; events already logged stay in the timeline.
    """
    session = _get_session(match_id)
    session.close()
    _drop_session(match_id)
    with db_conn() as conn:
        MatchRepository().mark_scheduled(conn, match_id)
    return {"match_id": match_id, "closed": True}


@app.get("/matches/{match_id}/events")
def get_match_events(match_id: str) -> dict[str, Any]:
    """Stored event timeline in emission order (pending deliveries are flushed first)."""
    sink = _live_sinks.get(match_id)
    if sink is not None:
        sink.flush()
    with db_conn() as conn:
        if sink is None and MatchRepository().get(conn, match_id) is None:
            raise HTTPException(status_code=404, detail="Match not found")
        events = MatchEventRepository().list_for_match(conn, match_id)
    return {"match_id": match_id, "events": [event_to_dict(e) for e in events]}


# ---------- Run with: uvicorn courtside.api:app --reload ----------
