"""
History Manager: bounded snapshot stack for single-step undo.
Oldest entries are evicted first once capacity is reached.
"""
from __future__ import annotations

import time
from collections import deque
from typing import Callable

from .schemas import HistoryEntry, ScoreState

HISTORY_CAPACITY = 50


class HistoryManager:
    """
    Undo log of prior ScoreStates. Snapshots are the frozen states themselves.
    Does not touch emitted events: undo is a console correction, not a ledger rewrite.
    """

    def __init__(
        self,
        capacity: int = HISTORY_CAPACITY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._clock = clock
        self._entries: deque[HistoryEntry] = deque(maxlen=capacity)

    def checkpoint(self, state: ScoreState, action: str) -> HistoryEntry:
        entry = HistoryEntry(state=state, action=action, created_at=self._clock())
        self._entries.append(entry)
        return entry

    def undo(self) -> ScoreState | None:
        """Pop and return the most recent snapshot, or None when empty."""
        if not self._entries:
            return None
        return self._entries.pop().state

    def can_undo(self) -> bool:
        return bool(self._entries)

    def peek(self) -> HistoryEntry | None:
        return self._entries[-1] if self._entries else None

    def entries(self) -> list[HistoryEntry]:
        """Oldest first."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
