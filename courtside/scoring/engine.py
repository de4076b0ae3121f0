"""
Scoring Engine: the point-awarding transition function.
Points -> games (4+ points, win by 2) -> sets (6+ games win by 2, or 7 games).
Match completion is not decided here; see completion.finalize_match.
"""
from __future__ import annotations

from dataclasses import replace

from .errors import UnknownPointKindError, UnknownSlotError
from .schemas import (
    POINT_DESCRIPTIONS,
    EventKind,
    PointKind,
    PointResult,
    ScoreState,
    ScoringEvent,
    Slot,
)

GAME_MIN_POINTS = 4
SET_MIN_GAMES = 6
SET_TIEBREAK_GAMES = 7
WIN_BY = 2


def initial_state(serving: Slot = Slot.A) -> ScoreState:
    return ScoreState(serving=serving)


def parse_slot(value: Slot | str) -> Slot:
    """Slot enum from 'a'/'b' (case-insensitive); raises UnknownSlotError otherwise."""
    if isinstance(value, Slot):
        return value
    try:
        return Slot(str(value).strip().lower())
    except ValueError:
        raise UnknownSlotError(f"Unknown slot: {value!r}") from None


def parse_point_kind(value: PointKind | str | None) -> PointKind:
    """PointKind from its tag; None means normal. Accepts underscores for dashes."""
    if value is None:
        return PointKind.NORMAL
    if isinstance(value, PointKind):
        return value
    try:
        return PointKind(str(value).strip().lower().replace("_", "-"))
    except ValueError:
        raise UnknownPointKindError(f"Unknown point kind: {value!r}") from None


def game_won(points_winner: int, points_loser: int) -> bool:
    return points_winner >= GAME_MIN_POINTS and points_winner - points_loser >= WIN_BY


def set_won(games_winner: int, games_loser: int) -> bool:
    # 7 games closes the set outright; there is no point-level tiebreak.
    return (
        games_winner >= SET_MIN_GAMES and games_winner - games_loser >= WIN_BY
    ) or games_winner == SET_TIEBREAK_GAMES


def _increment(state: ScoreState, slot: Slot, prefix: str) -> ScoreState:
    field_name = f"{prefix}_{slot.value}"
    return replace(state, **{field_name: getattr(state, field_name) + 1})


def award_point(
    state: ScoreState,
    slot: Slot | str,
    point_kind: PointKind | str | None = PointKind.NORMAL,
) -> PointResult:
    """
    Award one point to slot and return the new state with the events it caused.
    Events are ordered game-won, set-won (when they occur), then the point itself.
    Each event carries the state as it stood right after that step.
    """
    slot = parse_slot(slot)
    kind = parse_point_kind(point_kind)
    opponent = slot.opponent
    events: list[ScoringEvent] = []

    new = _increment(state, slot, "points")
    ps, po = new.points(slot), new.points(opponent)

    if game_won(ps, po):
        new = _increment(new, slot, "games")
        new = replace(
            new,
            points_a=0,
            points_b=0,
            deuce=False,
            advantage=None,
            serving=new.serving.opponent,
        )
        events.append(ScoringEvent(
            kind=EventKind.GAME_WON,
            slot=slot,
            description=f"Game won by {slot.label}",
            snapshot=new,
        ))

        if set_won(new.games(slot), new.games(opponent)):
            new = replace(
                new,
                sets_a=new.sets_a + (new.games_a,),
                sets_b=new.sets_b + (new.games_b,),
                games_a=0,
                games_b=0,
                current_set=new.current_set + 1,
            )
            events.append(ScoringEvent(
                kind=EventKind.SET_WON,
                slot=slot,
                description=f"Set {new.current_set - 1} won by {slot.label}",
                snapshot=new,
                metadata={"set_index": new.current_set - 1},
            ))
    elif ps >= 3 and po >= 3:
        if ps == po:
            new = replace(new, deuce=True, advantage=None)
        elif ps - po == 1:
            new = replace(new, deuce=True, advantage=slot)

    events.append(ScoringEvent(
        kind=EventKind.POINT,
        slot=slot,
        description=POINT_DESCRIPTIONS[kind],
        snapshot=new,
        metadata={"point_kind": kind.value},
    ))
    return PointResult(state=new, events=tuple(events))
