"""
Repository interfaces for matches and match events.
No business logic, only read/write operations.
"""
from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import datetime, timezone

from courtside.models import Match, MatchStatus
from courtside.scoring.schemas import EventKind, MatchEvent
from courtside.scoring.serialization import state_from_dict, state_to_dict


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_datetime(s: str | None) -> datetime | None:
    if s is None:
        return None
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


# ---------- MatchRepository ----------


class MatchRepository:
    """CRUD for matches."""

    _COLS = "id, player1_id, player2_id, status, winner_id, score, started_at, completed_at, created_at"

    def create(
        self,
        conn: sqlite3.Connection,
        player1_id: str,
        player2_id: str,
        id: str | None = None,
    ) -> Match:
        mid = id or str(uuid.uuid4())
        now = _now()
        conn.execute(
            "INSERT INTO matches (id, player1_id, player2_id, status, created_at) VALUES (?, ?, ?, ?, ?)",
            (mid, player1_id, player2_id, MatchStatus.SCHEDULED.value, now),
        )
        conn.commit()
        return Match(
            id=mid,
            player1_id=player1_id,
            player2_id=player2_id,
            status=MatchStatus.SCHEDULED.value,
            created_at=datetime.fromisoformat(now),
        )

    def get(self, conn: sqlite3.Connection, match_id: str) -> Match | None:
        row = conn.execute(f"SELECT {self._COLS} FROM matches WHERE id = ?", (match_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_match(row)

    def list_all(self, conn: sqlite3.Connection, status: str | None = None) -> list[Match]:
        if status is None:
            rows = conn.execute(f"SELECT {self._COLS} FROM matches ORDER BY created_at, rowid").fetchall()
        else:
            rows = conn.execute(
                f"SELECT {self._COLS} FROM matches WHERE status = ? ORDER BY created_at, rowid",
                (status,),
            ).fetchall()
        return [self._row_to_match(r) for r in rows]

    def mark_in_progress(self, conn: sqlite3.Connection, match_id: str) -> None:
        """Set status in_progress and started_at. No-op for unknown ids."""
        conn.execute(
            "UPDATE matches SET status = ?, started_at = ? WHERE id = ?",
            (MatchStatus.IN_PROGRESS.value, _now(), match_id),
        )
        conn.commit()

    def mark_scheduled(self, conn: sqlite3.Connection, match_id: str) -> None:
        """Return an abandoned in_progress match to scheduled. Completed matches are left alone."""
        conn.execute(
            "UPDATE matches SET status = ?, started_at = NULL WHERE id = ? AND status = ?",
            (MatchStatus.SCHEDULED.value, match_id, MatchStatus.IN_PROGRESS.value),
        )
        conn.commit()

    def record_result(
        self,
        conn: sqlite3.Connection,
        match_id: str,
        status: str,
        winner_id: str,
        score: str,
    ) -> None:
        conn.execute(
            "UPDATE matches SET status = ?, winner_id = ?, score = ?, completed_at = ? WHERE id = ?",
            (status, winner_id, score, _now(), match_id),
        )
        conn.commit()

    @staticmethod
    def _row_to_match(row: sqlite3.Row) -> Match:
        r = dict(row)
        return Match(
            id=r["id"],
            player1_id=r["player1_id"],
            player2_id=r["player2_id"],
            status=r["status"],
            winner_id=r["winner_id"],
            score=r["score"],
            started_at=_parse_datetime(r["started_at"]),
            completed_at=_parse_datetime(r["completed_at"]),
            created_at=_parse_datetime(r["created_at"]),
        )


# ---------- MatchEventRepository ----------


class MatchEventRepository:
    """Append-only event log. Events come back in emission order."""

    def append(self, conn: sqlite3.Connection, event: MatchEvent) -> None:
        conn.execute(
            """INSERT INTO match_events (
                id, match_id, event_type, player_id, description,
                score_snapshot, metadata, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                event.id,
                event.match_id,
                event.kind.value,
                event.player_id,
                event.description,
                json.dumps(state_to_dict(event.snapshot)),
                json.dumps(event.metadata),
                event.created_at,
            ),
        )
        conn.commit()

    def list_for_match(self, conn: sqlite3.Connection, match_id: str) -> list[MatchEvent]:
        rows = conn.execute(
            """SELECT id, match_id, event_type, player_id, description,
                      score_snapshot, metadata, created_at
               FROM match_events WHERE match_id = ? ORDER BY seq""",
            (match_id,),
        ).fetchall()
        return [
            MatchEvent(
                id=r["id"],
                match_id=r["match_id"],
                kind=EventKind(r["event_type"]),
                player_id=r["player_id"],
                description=r["description"],
                snapshot=state_from_dict(json.loads(r["score_snapshot"])),
                metadata=json.loads(r["metadata"]),
                created_at=r["created_at"],
            )
            for r in rows
        ]

    def count_for_match(self, conn: sqlite3.Connection, match_id: str) -> int:
        row = conn.execute("SELECT COUNT(*) FROM match_events WHERE match_id = ?", (match_id,)).fetchone()
        return int(row[0])
