"""
Persistence layer for matches and match events.
No business logic, no scoring. Only read/write interfaces.
"""
from .db import get_connection, get_db_path, init_db, set_db_path
from .repositories import MatchEventRepository, MatchRepository
from .sink import SqliteEventSink

__all__ = [
    "get_connection",
    "get_db_path",
    "init_db",
    "set_db_path",
    "MatchEventRepository",
    "MatchRepository",
    "SqliteEventSink",
]
