"""
SQLite-backed persistence sink for the event emitter.
Opens a fresh connection per write so it can run on a background worker thread.
Database and filesystem failures surface as EmissionError.
"""
from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Callable

from courtside.scoring.errors import EmissionError
from courtside.scoring.schemas import MatchEvent, MatchResultUpdate

from .db import get_connection
from .repositories import MatchEventRepository, MatchRepository


class SqliteEventSink:
    """Write-only: appends events and applies the final match update."""

    def __init__(
        self,
        db_path: str | Path | None = None,
        connect: Callable[[], sqlite3.Connection] | None = None,
    ) -> None:
        self._connect = connect or (lambda: get_connection(db_path))
        self._events = MatchEventRepository()
        self._matches = MatchRepository()

    def record_event(self, event: MatchEvent) -> None:
        try:
            conn = self._connect()
            try:
                self._events.append(conn, event)
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise EmissionError(f"Could not store {event.kind.value} event: {e}") from e

    def record_result(self, update: MatchResultUpdate) -> None:
        try:
            conn = self._connect()
            try:
                self._matches.record_result(
                    conn, update.match_id, update.status, update.winner_id, update.score
                )
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise EmissionError(f"Could not store result for match {update.match_id}: {e}") from e
