"""
Score Formatter: conventional point labels and display helpers.
Pure functions; no side effects.
"""
from __future__ import annotations

from typing import Any

from .schemas import ScoreState, Slot

_POINT_LABELS = ("0", "15", "30", "40")


def format_points(points: int, deuce: bool, advantage: Slot | None, slot: Slot) -> str:
    """
    Label for one side's points in the current game.
    In deuce the side holding advantage shows "AD"; everyone else shows "40".
    Counts of 4+ outside deuce are unreachable in a valid state and show "40".
    """
    if deuce:
        return "AD" if advantage is slot else "40"
    if 0 <= points < len(_POINT_LABELS):
        return _POINT_LABELS[points]
    return "40"


def point_label(state: ScoreState, slot: Slot) -> str:
    return format_points(state.points(slot), state.deuce, state.advantage, slot)


def scoreboard(state: ScoreState) -> dict[str, Any]:
    """Per-slot view of the state for the presentation layer."""
    sides: dict[str, Any] = {}
    for slot in Slot:
        sides[slot.value] = {
            "points": point_label(state, slot),
            "games": state.games(slot),
            "sets": list(state.sets(slot)),
            "serving": state.serving is slot,
            "advantage": state.advantage is slot,
        }
    return {
        "current_set": state.current_set,
        "deuce": state.deuce,
        "sides": sides,
    }


def format_score_line(state: ScoreState) -> str:
    """One-line summary, e.g. 'Sets 6-4 | Games 2-1 | Points 30-15 | Serving: A'."""
    done = " ".join(f"{a}-{b}" for a, b in zip(state.sets_a, state.sets_b)) or "-"
    return (
        f"Sets {done} | Games {state.games_a}-{state.games_b} | "
        f"Points {point_label(state, Slot.A)}-{point_label(state, Slot.B)} | "
        f"Serving: {state.serving.value.upper()}"
    )
