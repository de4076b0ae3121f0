"""
Event Emitter: turns each transition into timestamped MatchEvents and hands them to
the persistence collaborator. Fire-and-forget: a delivery failure is logged and
reported to the caller, never rolled back into the score state.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from .schemas import EventKind, MatchEvent, MatchResultUpdate, ScoreState

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Write-only persistence collaborator."""

    def record_event(self, event: MatchEvent) -> None: ...

    def record_result(self, update: MatchResultUpdate) -> None: ...


class InMemorySink:
    """Keeps everything in lists. Used by the console and tests."""

    def __init__(self) -> None:
        self.events: list[MatchEvent] = []
        self.results: list[MatchResultUpdate] = []

    def record_event(self, event: MatchEvent) -> None:
        self.events.append(event)

    def record_result(self, update: MatchResultUpdate) -> None:
        self.results.append(update)


class BackgroundSink:
    """
    Delivers to an inner sink on a single worker thread so commands return without
    waiting on I/O. One worker keeps delivery in emission order.
    Failures go to on_error(description, exc) once the delivery completes.
    """

    def __init__(
        self,
        inner: EventSink,
        executor: ThreadPoolExecutor | None = None,
        on_error: Callable[[str, BaseException], None] | None = None,
    ) -> None:
        self.inner = inner
        self.on_error = on_error
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="courtside-sink")
        self._outstanding = 0
        self._idle = threading.Condition()

    def record_event(self, event: MatchEvent) -> None:
        self._submit(f"{event.kind.value} event for match {event.match_id}", self.inner.record_event, event)

    def record_result(self, update: MatchResultUpdate) -> None:
        self._submit(f"result for match {update.match_id}", self.inner.record_result, update)

    def _submit(self, what: str, fn: Callable[[Any], None], arg: Any) -> None:
        with self._idle:
            self._outstanding += 1
        future = self._executor.submit(fn, arg)
        future.add_done_callback(lambda f: self._done(what, f))

    def _done(self, what: str, future: Future) -> None:
        try:
            exc = future.exception()
            if exc is not None:
                logger.warning("Background delivery of %s failed: %s", what, exc)
                if self.on_error:
                    self.on_error(what, exc)
        finally:
            with self._idle:
                self._outstanding -= 1
                if self._outstanding == 0:
                    self._idle.notify_all()

    def flush(self, timeout: float | None = None) -> bool:
        """Block until every delivery submitted so far has completed and been reported."""
        with self._idle:
            return self._idle.wait_for(lambda: self._outstanding == 0, timeout=timeout)

    def close(self) -> None:
        self.flush()
        if self._owns_executor:
            self._executor.shutdown(wait=True)


@dataclass(frozen=True)
class Emission:
    """An emitted event and, when delivery failed synchronously, why."""
    event: MatchEvent
    error: str | None = None

    @property
    def delivered(self) -> bool:
        return self.error is None


class EventEmitter:
    """Builds MatchEvents for one match and forwards them to the sink."""

    def __init__(
        self,
        match_id: str,
        sink: EventSink,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.match_id = match_id
        self.sink = sink
        self._clock = clock
        self._id_factory = id_factory

    def emit(
        self,
        kind: EventKind,
        player_id: str,
        description: str,
        snapshot: ScoreState,
        metadata: dict[str, Any] | None = None,
    ) -> Emission:
        event = MatchEvent(
            id=self._id_factory(),
            match_id=self.match_id,
            kind=EventKind(kind),
            player_id=player_id,
            description=description,
            snapshot=snapshot,
            metadata=dict(metadata or {}),
            created_at=self._clock(),
        )
        try:
            self.sink.record_event(event)
        except Exception as e:
            logger.warning(
                "Failed to record %s event for match %s: %s", event.kind.value, self.match_id, e
            )
            return Emission(event=event, error=str(e) or type(e).__name__)
        return Emission(event=event)

    def send_result(self, update: MatchResultUpdate) -> str | None:
        """Forward the final match update; returns the error message on failure."""
        try:
            self.sink.record_result(update)
        except Exception as e:
            logger.warning("Failed to record result for match %s: %s", update.match_id, e)
            return str(e) or type(e).__name__
        return None
