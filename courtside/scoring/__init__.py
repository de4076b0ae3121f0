"""
Live scoring core: score model, point labels, transition function, undo history,
event emission and match completion. No I/O apart from the sink handed to the emitter.
"""
from .schemas import (
    POINT_DESCRIPTIONS,
    EventKind,
    HistoryEntry,
    MatchEvent,
    MatchResult,
    MatchResultUpdate,
    PointKind,
    PointResult,
    ScoreState,
    ScoringEvent,
    Slot,
)
from .errors import (
    EmissionError,
    InvalidPlayersError,
    InvariantViolation,
    MatchAlreadyStartedError,
    MatchFinalizedError,
    NoSetsRecordedError,
    UndecidedMatchError,
    UnknownPointKindError,
    UnknownSlotError,
)
from .formatter import format_points, format_score_line, point_label, scoreboard
from .engine import award_point, initial_state, parse_point_kind, parse_slot, game_won, set_won
from .history import HISTORY_CAPACITY, HistoryManager
from .emitter import BackgroundSink, Emission, EventEmitter, EventSink, InMemorySink
from .completion import finalize_match, score_string, sets_won
from .serialization import event_from_dict, event_to_dict, state_from_dict, state_to_dict

__all__ = [
    "POINT_DESCRIPTIONS",
    "EventKind",
    "HistoryEntry",
    "MatchEvent",
    "MatchResult",
    "MatchResultUpdate",
    "PointKind",
    "PointResult",
    "ScoreState",
    "ScoringEvent",
    "Slot",
    "EmissionError",
    "InvalidPlayersError",
    "InvariantViolation",
    "MatchAlreadyStartedError",
    "MatchFinalizedError",
    "NoSetsRecordedError",
    "UndecidedMatchError",
    "UnknownPointKindError",
    "UnknownSlotError",
    "format_points",
    "format_score_line",
    "point_label",
    "scoreboard",
    "award_point",
    "initial_state",
    "parse_point_kind",
    "parse_slot",
    "game_won",
    "set_won",
    "HISTORY_CAPACITY",
    "HistoryManager",
    "BackgroundSink",
    "Emission",
    "EventEmitter",
    "EventSink",
    "InMemorySink",
    "finalize_match",
    "score_string",
    "sets_won",
    "event_from_dict",
    "event_to_dict",
    "state_from_dict",
    "state_to_dict",
]
