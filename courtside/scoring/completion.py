"""
Match completion: winner and final score from the completed-set tallies.
Invoked explicitly when the official declares the match over.
"""
from __future__ import annotations

from .errors import InvariantViolation, NoSetsRecordedError, UndecidedMatchError
from .schemas import MatchResult, ScoreState, Slot


def sets_won(state: ScoreState) -> tuple[int, int]:
    """
    Sets won by (A, B), comparing the two tallies index by index.
    Relies on sets_a / sets_b being appended in lockstep.
    """
    if len(state.sets_a) != len(state.sets_b):
        raise InvariantViolation(
            f"Set tallies out of step: {len(state.sets_a)} vs {len(state.sets_b)}"
        )
    won_a = sum(1 for a, b in zip(state.sets_a, state.sets_b) if a > b)
    won_b = sum(1 for a, b in zip(state.sets_a, state.sets_b) if b > a)
    return won_a, won_b


def score_string(state: ScoreState) -> str:
    """e.g. '6-3-7 vs 4-6-5': each side's set tallies dash-joined."""
    a = "-".join(str(g) for g in state.sets_a)
    b = "-".join(str(g) for g in state.sets_b)
    return f"{a} vs {b}"


def finalize_match(state: ScoreState) -> MatchResult:
    """Winner is the side with strictly more sets won; level sets are rejected."""
    if not state.sets_a and not state.sets_b:
        raise NoSetsRecordedError("Cannot finalize a match with no completed sets")
    won_a, won_b = sets_won(state)
    if won_a == won_b:
        raise UndecidedMatchError(f"Sets are level at {won_a}-{won_b}")
    return MatchResult(
        winner=Slot.A if won_a > won_b else Slot.B,
        score=score_string(state),
        sets_won_a=won_a,
        sets_won_b=won_b,
    )
