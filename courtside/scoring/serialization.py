"""
JSON-safe conversion of score states and match events, for the persistence
collaborator and HTTP payloads.
"""
from __future__ import annotations

from typing import Any

from .schemas import EventKind, MatchEvent, ScoreState, Slot


def state_to_dict(s: ScoreState) -> dict[str, Any]:
    """ScoreState to JSON-serializable dict."""
    return {
        "sets_a": list(s.sets_a),
        "sets_b": list(s.sets_b),
        "games_a": s.games_a,
        "games_b": s.games_b,
        "points_a": s.points_a,
        "points_b": s.points_b,
        "current_set": s.current_set,
        "deuce": s.deuce,
        "advantage": s.advantage.value if s.advantage else None,
        "serving": s.serving.value,
    }


def state_from_dict(d: dict[str, Any]) -> ScoreState:
    advantage = d.get("advantage")
    return ScoreState(
        sets_a=tuple(d.get("sets_a", ())),
        sets_b=tuple(d.get("sets_b", ())),
        games_a=d.get("games_a", 0),
        games_b=d.get("games_b", 0),
        points_a=d.get("points_a", 0),
        points_b=d.get("points_b", 0),
        current_set=d.get("current_set", 1),
        deuce=d.get("deuce", False),
        advantage=Slot(advantage) if advantage else None,
        serving=Slot(d.get("serving", Slot.A.value)),
    )


def event_to_dict(e: MatchEvent) -> dict[str, Any]:
    """MatchEvent to JSON-serializable dict."""
    return {
        "id": e.id,
        "match_id": e.match_id,
        "kind": e.kind.value,
        "player_id": e.player_id,
        "description": e.description,
        "snapshot": state_to_dict(e.snapshot),
        "metadata": dict(e.metadata),
        "created_at": e.created_at,
    }


def event_from_dict(d: dict[str, Any]) -> MatchEvent:
    return MatchEvent(
        id=d["id"],
        match_id=d["match_id"],
        kind=EventKind(d["kind"]),
        player_id=d["player_id"],
        description=d["description"],
        snapshot=state_from_dict(d["snapshot"]),
        metadata=d.get("metadata") or {},
        created_at=d["created_at"],
    )
