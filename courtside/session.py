"""
Match session: the command surface the presentation layer drives.
Each call checkpoints history, runs the scoring engine, then records events.
One session per match; single writer, synchronous.
"""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable

from courtside.models import MatchStatus
from courtside.scoring.completion import finalize_match
from courtside.scoring.emitter import EventEmitter, EventSink
from courtside.scoring.engine import award_point, initial_state, parse_point_kind, parse_slot
from courtside.scoring.errors import InvalidPlayersError, MatchAlreadyStartedError, MatchFinalizedError
from courtside.scoring.formatter import format_points, scoreboard
from courtside.scoring.history import HISTORY_CAPACITY, HistoryManager
from courtside.scoring.schemas import (
    EventKind,
    MatchEvent,
    MatchResult,
    MatchResultUpdate,
    PointKind,
    ScoreState,
    Slot,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """State after a command, the events it emitted, and any delivery warnings."""
    state: ScoreState
    events: tuple[MatchEvent, ...]
    warnings: tuple[str, ...] = ()


class MatchSession:
    """
    Owns one match's ScoreState, HistoryManager and EventEmitter.
    After finalize() or close() every command raises MatchFinalizedError.
    """

    def __init__(
        self,
        match_id: str,
        player1_id: str,
        player2_id: str,
        sink: EventSink,
        history_capacity: int = HISTORY_CAPACITY,
        clock: Callable[[], float] = time.time,
        serving: Slot = Slot.A,
    ) -> None:
        if not player1_id or not player2_id:
            raise InvalidPlayersError("Both player ids are required")
        if player1_id == player2_id:
            raise InvalidPlayersError("A player cannot play against themselves")
        self.match_id = match_id
        self._players = {Slot.A: player1_id, Slot.B: player2_id}
        self._clock = clock
        self._state = initial_state(serving)
        self.history = HistoryManager(capacity=history_capacity, clock=clock)
        self.emitter = EventEmitter(match_id, sink, clock=clock)
        self.warnings: list[str] = []
        self.result: MatchResult | None = None
        self._started_at: float | None = None
        self._closed = False

    # ---------- Read side ----------

    @property
    def state(self) -> ScoreState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def player_id(self, slot: Slot | str) -> str:
        return self._players[parse_slot(slot)]

    def can_undo(self) -> bool:
        return not self._closed and self.history.can_undo()

    def format_points(self, slot: Slot | str) -> str:
        slot = parse_slot(slot)
        return format_points(self._state.points(slot), self._state.deuce, self._state.advantage, slot)

    def scoreboard(self) -> dict[str, Any]:
        board = scoreboard(self._state)
        for slot in Slot:
            board["sides"][slot.value]["player_id"] = self._players[slot]
        return board

    def drain_warnings(self) -> list[str]:
        out, self.warnings = self.warnings, []
        return out

    def report_failure(self, what: str, exc: BaseException) -> None:
        """Callback for deferred delivery failures (see BackgroundSink.on_error)."""
        self.warnings.append(f"Could not record {what}: {exc}")

    # ---------- Commands ----------

    def start(self) -> ScoreState:
        """Emit match-start for player 1 with the initial state. Only once per session."""
        self._ensure_open()
        if self._started_at is not None:
            raise MatchAlreadyStartedError(f"Match {self.match_id} has already started")
        self._started_at = self._clock()
        emission = self.emitter.emit(
            EventKind.MATCH_START,
            self._players[Slot.A],
            "Match has begun",
            self._state,
            {"player1_id": self._players[Slot.A], "player2_id": self._players[Slot.B]},
        )
        if emission.error:
            self.warnings.append(emission.error)
        logger.info("Match %s started: %s vs %s", self.match_id, self._players[Slot.A], self._players[Slot.B])
        return self._state

    def award_point(
        self,
        slot: Slot | str,
        point_kind: PointKind | str | None = PointKind.NORMAL,
    ) -> CommandResult:
        self._ensure_open()
        slot = parse_slot(slot)
        kind = parse_point_kind(point_kind)
        self.history.checkpoint(self._state, f"Point awarded to {slot.label}")
        result = award_point(self._state, slot, kind)
        self._state = result.state

        emitted: list[MatchEvent] = []
        warnings: list[str] = []
        for ev in result.events:
            emission = self.emitter.emit(
                ev.kind, self._players[ev.slot], ev.description, ev.snapshot, ev.metadata
            )
            emitted.append(emission.event)
            if emission.error:
                warnings.append(emission.error)
        self.warnings.extend(warnings)
        return CommandResult(state=self._state, events=tuple(emitted), warnings=tuple(warnings))

    def undo(self) -> ScoreState | None:
        """Restore the state before the last point. None when there is nothing to undo."""
        self._ensure_open()
        entry = self.history.peek()
        previous = self.history.undo()
        if previous is None:
            return None
        self._state = previous
        logger.info("Undid: %s", entry.action)
        return previous

    def finalize(self) -> MatchResult:
        """
        Declare the match over: emit match-end, send the final result, close the session.
        Raises NoSetsRecordedError / UndecidedMatchError and stays open when not decidable.
        """
        self._ensure_open()
        result = finalize_match(self._state)
        winner_id = self._players[result.winner]
        duration = self._clock() - self._started_at if self._started_at is not None else None
        emission = self.emitter.emit(
            EventKind.MATCH_END,
            winner_id,
            f"Match completed. Final score: {result.score}",
            self._state,
            {
                "winner_slot": result.winner.value,
                "score": result.score,
                "duration_seconds": round(duration, 3) if duration is not None else None,
            },
        )
        if emission.error:
            self.warnings.append(emission.error)
        error = self.emitter.send_result(MatchResultUpdate(
            match_id=self.match_id,
            status=MatchStatus.COMPLETED.value,
            winner_id=winner_id,
            score=result.score,
        ))
        if error:
            self.warnings.append(error)
        self.result = result
        self.close()
        logger.info("Match %s finalized: %s won %s", self.match_id, winner_id, result.score)
        return result

    def close(self) -> None:
        """Discard history; later commands are rejected."""
        self.history.clear()
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise MatchFinalizedError(f"Match {self.match_id} is closed")


def start_match(
    player1_id: str,
    player2_id: str,
    sink: EventSink,
    match_id: str | None = None,
    **kwargs: Any,
) -> MatchSession:
    """Create a session with the initial state and emit match-start."""
    session = MatchSession(match_id or str(uuid.uuid4()), player1_id, player2_id, sink, **kwargs)
    session.start()
    return session
