"""
Tests for match completion: winner selection and final score string.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from courtside.scoring.completion import finalize_match, score_string, sets_won
from courtside.scoring.errors import InvariantViolation, NoSetsRecordedError, UndecidedMatchError
from courtside.scoring.schemas import ScoreState, Slot


def test_three_set_winner():
    state = ScoreState(sets_a=(6, 3, 7), sets_b=(4, 6, 5))
    result = finalize_match(state)
    assert result.winner is Slot.A
    assert result.score == "6-3-7 vs 4-6-5"
    assert (result.sets_won_a, result.sets_won_b) == (2, 1)


def test_straight_sets_for_b():
    result = finalize_match(ScoreState(sets_a=(2, 5), sets_b=(6, 7)))
    assert result.winner is Slot.B
    assert result.score == "2-5 vs 6-7"


def test_game_in_progress_is_ignored():
    state = ScoreState(sets_a=(6,), sets_b=(1,), games_a=0, games_b=5, points_b=3)
    assert finalize_match(state).winner is Slot.A


def test_no_sets_recorded():
    with pytest.raises(NoSetsRecordedError):
        finalize_match(ScoreState(games_a=3, games_b=1))


def test_level_sets_rejected():
    with pytest.raises(UndecidedMatchError):
        finalize_match(ScoreState(sets_a=(6, 4), sets_b=(4, 6)))


def test_tallies_out_of_step():
    with pytest.raises(InvariantViolation):
        sets_won(ScoreState(sets_a=(6, 6), sets_b=(4,)))


def test_score_string_single_set():
    assert score_string(ScoreState(sets_a=(7,), sets_b=(6,))) == "7 vs 6"
