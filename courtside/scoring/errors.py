"""
Error taxonomy for the scoring core.
Rejected operations raise InvariantViolation subclasses; sink failures (EmissionError or otherwise)
are reported as warnings, never as failed commands.
"""
from __future__ import annotations


class InvariantViolation(ValueError):
    """Operation rejected at the engine boundary; state is unchanged."""


class UnknownSlotError(InvariantViolation):
    """Point awarded to something other than slot a or b."""


class UnknownPointKindError(InvariantViolation):
    """Point classification outside the known set."""


class NoSetsRecordedError(InvariantViolation):
    """Finalize requested before any set was completed."""


class UndecidedMatchError(InvariantViolation):
    """Finalize requested while both sides have won the same number of sets."""


class MatchFinalizedError(InvariantViolation):
    """Command issued to a session that was finalized or closed."""


class MatchAlreadyStartedError(InvariantViolation):
    """start issued to a session that has already emitted match-start."""


class InvalidPlayersError(InvariantViolation):
    """Missing or identical player ids at match start."""


class EmissionError(RuntimeError):
    """Persistence sink could not accept an event or result."""
