"""
Process-wide backend readiness: one connectivity check, run once.
ensure_ready() is idempotent; a failed check leaves the flag unset so the next call retries.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from typing import Callable

from courtside.persistence.db import get_connection

logger = logging.getLogger(__name__)


def _check_players_table(conn: sqlite3.Connection) -> None:
    conn.execute("SELECT COUNT(*) FROM players").fetchone()


class BackendReadiness:
    def __init__(
        self,
        connect: Callable[[], sqlite3.Connection] = get_connection,
        check: Callable[[sqlite3.Connection], None] = _check_players_table,
    ) -> None:
        self._connect = connect
        self._check = check
        self._ready = False
        self._lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self._ready

    def ensure_ready(self) -> None:
        """Run the check unless it already succeeded. Concurrent callers wait for one check."""
        if self._ready:
            return
        with self._lock:
            if self._ready:
                return
            try:
                conn = self._connect()
                try:
                    self._check(conn)
                finally:
                    conn.close()
            except sqlite3.Error as e:
                logger.error("Backend readiness check failed: %s", e)
                raise
            self._ready = True
            logger.info("Backend connection ready")

    def reset(self) -> None:
        with self._lock:
            self._ready = False


readiness = BackendReadiness()


def ensure_ready() -> None:
    readiness.ensure_ready()
