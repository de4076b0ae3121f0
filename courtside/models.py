"""
Data models for stored matches.
Domain objects only; no persistence or API logic.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


# ---------- Match status ----------
class MatchStatus(str, Enum):
    """Match lifecycle: scheduled → in_progress → completed."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# ---------- Match ----------
@dataclass
class Match:
    """
    A stored match between two players.
    winner_id and score are set once, when the official finalizes the match.
    """
    id: str
    player1_id: str
    player2_id: str
    status: str
    created_at: datetime
    winner_id: str | None = None
    score: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "player1_id": self.player1_id,
            "player2_id": self.player2_id,
            "status": self.status,
            "winner_id": self.winner_id,
            "score": self.score,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
