"""
Tests for the undo history: round-trip, capacity bound, empty undo.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from courtside.scoring.engine import award_point, initial_state
from courtside.scoring.history import HISTORY_CAPACITY, HistoryManager
from courtside.scoring.schemas import ScoreState


def test_capacity_default():
    assert HISTORY_CAPACITY == 50
    assert HistoryManager().capacity == 50


def test_invalid_capacity():
    with pytest.raises(ValueError):
        HistoryManager(capacity=0)


def test_empty_undo_returns_none():
    history = HistoryManager()
    assert history.can_undo() is False
    assert history.undo() is None
    assert history.peek() is None


def test_undo_round_trip():
    history = HistoryManager()
    state = initial_state()
    for ch in "aabab":
        state = award_point(state, ch).state
    history.checkpoint(state, "Point awarded to player A")
    after = award_point(state, "a").state
    assert after != state
    restored = history.undo()
    assert restored == state
    assert restored is state
    assert history.can_undo() is False


def test_undo_is_lifo():
    history = HistoryManager()
    s0 = initial_state()
    s1 = award_point(s0, "a").state
    history.checkpoint(s0, "first")
    history.checkpoint(s1, "second")
    assert history.peek().action == "second"
    assert history.undo() == s1
    assert history.undo() == s0
    assert history.undo() is None


def test_bound_after_sixty_checkpoints():
    history = HistoryManager()
    states = [ScoreState(points_a=i % 4, games_a=i) for i in range(60)]
    for i, s in enumerate(states):
        history.checkpoint(s, f"action {i}")
    assert len(history) == 50
    entries = history.entries()
    assert entries[0].action == "action 10"
    assert entries[-1].action == "action 59"
    popped = []
    while history.can_undo():
        popped.append(history.undo())
    assert len(popped) == 50
    assert states[9] not in popped
    assert popped[-1] == states[10]


def test_checkpoint_timestamps_use_clock():
    ticks = iter([100.0, 101.5])
    history = HistoryManager(clock=lambda: next(ticks))
    e1 = history.checkpoint(initial_state(), "one")
    e2 = history.checkpoint(initial_state(), "two")
    assert (e1.created_at, e2.created_at) == (100.0, 101.5)


def test_clear():
    history = HistoryManager()
    history.checkpoint(initial_state(), "x")
    history.clear()
    assert len(history) == 0
    assert history.undo() is None
