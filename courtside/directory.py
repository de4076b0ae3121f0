"""
Player directory: SQLite store of competitors and their ratings.
Read-only from the scoring side; used for display names, never for transitions.
"""
from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from courtside.persistence.db import get_connection

DEFAULT_RATING = 1200


@dataclass
class PlayerRow:
    """One row from the players table."""
    id: str
    display_name: str
    rating: int
    country: str | None = None

    def to_tuple(self) -> tuple[Any, ...]:
        return (self.id, self.display_name, self.rating, self.country)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "rating": self.rating,
            "country": self.country,
        }


@dataclass(frozen=True)
class PlayerProfile:
    """What the presentation layer gets back from a lookup."""
    display_name: str
    rating: int


def _slug(name: str) -> str:
    """Stable id from player name (lowercase, spaces to underscores)."""
    return name.strip().lower().replace(" ", "_").replace("-", "_")


def players_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS players (
        id TEXT PRIMARY KEY,
        display_name TEXT NOT NULL,
        rating INTEGER NOT NULL,
        country TEXT
    );
    """


def load_roster_into_db(conn: sqlite3.Connection, roster_path: Path) -> int:
    """
    Load roster JSON ({"players": [{"name", "rating", "country"}]}) into the players table.
    Replaces existing rows with the same id. Returns the number of players loaded.
    """
    data = json.loads(Path(roster_path).read_text())
    rows = [
        PlayerRow(
            id=r.get("id") or _slug(r["name"]),
            display_name=r["name"],
            rating=int(r.get("rating", DEFAULT_RATING)),
            country=r.get("country"),
        )
        for r in data.get("players", [])
    ]
    cur = conn.cursor()
    for row in rows:
        cur.execute(
            "INSERT OR REPLACE INTO players (id, display_name, rating, country) VALUES (?, ?, ?, ?)",
            row.to_tuple(),
        )
    conn.commit()
    return len(rows)


def get_player(conn: sqlite3.Connection, player_id: str) -> PlayerRow | None:
    """Fetch one player by id."""
    row = conn.execute(
        "SELECT id, display_name, rating, country FROM players WHERE id = ?",
        (player_id,),
    ).fetchone()
    if row is None:
        return None
    return PlayerRow(id=row[0], display_name=row[1], rating=row[2], country=row[3])


def list_players(conn: sqlite3.Connection, limit: int | None = None) -> list[PlayerRow]:
    """List players, highest rating first."""
    sql = "SELECT id, display_name, rating, country FROM players ORDER BY rating DESC, display_name"
    if limit is not None:
        sql += f" LIMIT {int(limit)}"
    return [
        PlayerRow(id=r[0], display_name=r[1], rating=r[2], country=r[3])
        for r in conn.execute(sql).fetchall()
    ]


class PlayerDirectory:
    """Lookup by opaque player id; opens a connection per call."""

    def __init__(self, connect: Callable[[], sqlite3.Connection] = get_connection) -> None:
        self._connect = connect

    def get_player(self, player_id: str) -> PlayerProfile | None:
        conn = self._connect()
        try:
            row = get_player(conn, player_id)
        finally:
            conn.close()
        if row is None:
            return None
        return PlayerProfile(display_name=row.display_name, rating=row.rating)
