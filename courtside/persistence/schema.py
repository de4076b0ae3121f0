"""
SQLite schema for matches and their event log.
Migration-friendly: each table created with IF NOT EXISTS.
"""
from __future__ import annotations


def matches_schema() -> str:
    """One row per match. status: scheduled | in_progress | completed."""
    return """
    CREATE TABLE IF NOT EXISTS matches (
        id TEXT PRIMARY KEY,
        player1_id TEXT NOT NULL,
        player2_id TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'scheduled',
        winner_id TEXT,
        score TEXT,
        started_at TEXT,
        completed_at TEXT,
        created_at TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS ix_matches_status ON matches(status);
    """


def match_events_schema() -> str:
    """Append-only event log. seq keeps emission order; snapshot and metadata are JSON."""
    return """
    CREATE TABLE IF NOT EXISTS match_events (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        id TEXT NOT NULL UNIQUE,
        match_id TEXT NOT NULL,
        event_type TEXT NOT NULL,
        player_id TEXT NOT NULL,
        description TEXT NOT NULL,
        score_snapshot TEXT NOT NULL,
        metadata TEXT NOT NULL,
        created_at REAL NOT NULL
    );
    CREATE INDEX IF NOT EXISTS ix_match_events_match ON match_events(match_id);
    """


def all_schema_sql() -> str:
    return matches_schema() + match_events_schema()
