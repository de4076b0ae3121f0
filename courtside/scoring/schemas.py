"""
Score model and shared types for the live scoring engine.
ScoreState is a frozen value: every transition returns a new instance, so a
history snapshot is just a retained reference.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Slot(str, Enum):
    """One of the two fixed competitor roles in a match."""
    A = "a"
    B = "b"

    @property
    def opponent(self) -> Slot:
        return Slot.B if self is Slot.A else Slot.A

    @property
    def label(self) -> str:
        return f"player {self.value.upper()}"


class PointKind(str, Enum):
    """Classification tag attached to a scored point."""
    NORMAL = "normal"
    ACE = "ace"
    DOUBLE_FAULT = "double-fault"
    WINNER = "winner"
    UNFORCED_ERROR = "unforced-error"


POINT_DESCRIPTIONS: dict[PointKind, str] = {
    PointKind.NORMAL: "Point won",
    PointKind.ACE: "Service ace",
    PointKind.DOUBLE_FAULT: "Double fault",
    PointKind.WINNER: "Winner shot",
    PointKind.UNFORCED_ERROR: "Unforced error by opponent",
}


class EventKind(str, Enum):
    """Closed set of emitted match event kinds."""
    MATCH_START = "match-start"
    POINT = "point"
    GAME_WON = "game-won"
    SET_WON = "set-won"
    MATCH_END = "match-end"


@dataclass(frozen=True)
class ScoreState:
    """
    Full state of one match in progress.
    sets_a / sets_b hold the final game tally of each completed set and always
    have equal length (appended in lockstep).
    """
    sets_a: tuple[int, ...] = ()
    sets_b: tuple[int, ...] = ()
    games_a: int = 0
    games_b: int = 0
    points_a: int = 0
    points_b: int = 0
    current_set: int = 1
    deuce: bool = False
    advantage: Slot | None = None
    serving: Slot = Slot.A

    def points(self, slot: Slot) -> int:
        return self.points_a if slot is Slot.A else self.points_b

    def games(self, slot: Slot) -> int:
        return self.games_a if slot is Slot.A else self.games_b

    def sets(self, slot: Slot) -> tuple[int, ...]:
        return self.sets_a if slot is Slot.A else self.sets_b

    @property
    def completed_sets(self) -> int:
        return len(self.sets_a)


@dataclass(frozen=True)
class HistoryEntry:
    """A prior ScoreState plus the action that replaced it."""
    state: ScoreState
    action: str
    created_at: float


@dataclass(frozen=True)
class ScoringEvent:
    """
    Engine-side description of one consequence of a transition.
    The session resolves the slot to a player id before emission.
    """
    kind: EventKind
    slot: Slot
    description: str
    snapshot: ScoreState
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PointResult:
    """New state after award_point, with events in chronological order."""
    state: ScoreState
    events: tuple[ScoringEvent, ...]

    @property
    def game_won(self) -> bool:
        return any(e.kind is EventKind.GAME_WON for e in self.events)

    @property
    def set_won(self) -> bool:
        return any(e.kind is EventKind.SET_WON for e in self.events)


@dataclass(frozen=True)
class MatchEvent:
    """
    Append-only record handed to the persistence collaborator.
    Never read back by the engine.
    """
    id: str
    match_id: str
    kind: EventKind
    player_id: str
    description: str
    snapshot: ScoreState
    metadata: dict[str, Any]
    created_at: float


@dataclass(frozen=True)
class MatchResult:
    """Outcome of finalize_match."""
    winner: Slot
    score: str
    sets_won_a: int
    sets_won_b: int


@dataclass(frozen=True)
class MatchResultUpdate:
    """Final match update sent to the persistence collaborator."""
    match_id: str
    status: str
    winner_id: str
    score: str
