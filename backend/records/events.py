"""
Typed notifications announcing state changes, and the sinks receiving them.

Intent:
    External observers subscribe to role, review and grade-sheet changes.
    Emission is fire-and-forget: the core never waits for delivery and a
    failing sink never changes the outcome of the operation that emitted.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
import logging
from threading import Lock
from typing import Iterable, List, Protocol

logger = logging.getLogger("registrar.events")


@dataclass(frozen=True)
class Event:
    @property
    def name(self) -> str:
        return type(self).__name__

    def payload(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TeacherActivated(Event):
    identity: str
    code: str


@dataclass(frozen=True)
class TeacherDeactivated(Event):
    identity: str
    code: str


@dataclass(frozen=True)
class StudentActivated(Event):
    identity: str
    roll_number: str


@dataclass(frozen=True)
class StudentDeactivated(Event):
    identity: str
    roll_number: str


@dataclass(frozen=True)
class RecruiterActivated(Event):
    identity: str


@dataclass(frozen=True)
class RecruiterDeactivated(Event):
    identity: str


@dataclass(frozen=True)
class ReviewAdded(Event):
    code: str
    subject_code: str
    rating: int


@dataclass(frozen=True)
class GradeSheetPublished(Event):
    roll_number: str
    semester: int
    reference: str


class EventSink(Protocol):
    def emit(self, event: Event) -> None: ...


class LoggingEventSink:
    """Default sink: one INFO line per event on the `registrar.events` logger."""

    def emit(self, event: Event) -> None:
        logger.info("%s %s", event.name, event.payload())


class RecordingEventSink:
    """Keeps emitted events in memory (tests, local debugging)."""

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._lock = Lock()

    def emit(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[Event]:
        with self._lock:
            return list(self._events)

    def names(self) -> List[str]:
        return [e.name for e in self.events]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class FanOutEventSink:
    """Deliver each event to several sinks, isolating their failures."""

    def __init__(self, sinks: Iterable[EventSink]) -> None:
        self._sinks = list(sinks)

    def emit(self, event: Event) -> None:
        for sink in self._sinks:
            emit_safely(sink, event)


def emit_safely(sink: EventSink, event: Event) -> None:
    """Emit without letting sink errors leak into the calling operation."""
    try:
        sink.emit(event)
    except Exception as exc:
        logger.warning("Event sink %s failed for %s: %s", type(sink).__name__, event.name, exc.__class__.__name__)


__all__ = [
    "Event",
    "TeacherActivated",
    "TeacherDeactivated",
    "StudentActivated",
    "StudentDeactivated",
    "RecruiterActivated",
    "RecruiterDeactivated",
    "ReviewAdded",
    "GradeSheetPublished",
    "EventSink",
    "LoggingEventSink",
    "RecordingEventSink",
    "FanOutEventSink",
    "emit_safely",
]
