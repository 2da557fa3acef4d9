"""
Process-wide state shared by all record components.

Why:
    Role sets, identity links, pools and grade sheets all live in one
    key-value store. Holding the store, the owner identity, the event sink and
    the coordinator lock in one explicit object keeps components free of
    module-level globals and lets tests build isolated instances.

Concurrency:
    Every mutating operation runs under `lock` (re-entrant, so composed
    operations like teacher activation may nest). Reads skip the lock and rely
    on the store returning consistent per-key snapshots.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from typing import Any

from backend.records.events import Event, EventSink, LoggingEventSink, emit_safely
from backend.storage.ports import KeyValueStore


@dataclass
class SystemState:
    owner: str
    store: KeyValueStore
    sink: EventSink = field(default_factory=LoggingEventSink)
    lock: Any = field(default_factory=RLock, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.owner, str) or not self.owner.strip():
            raise ValueError("owner identity must be a non-empty string")
        self.owner = self.owner.strip()

    def emit(self, event: Event) -> None:
        emit_safely(self.sink, event)


def mask_identity(identity: object) -> str:
    """Shorten identities for log lines (last six characters)."""
    text = str(identity or "")
    return f"…{text[-6:]}" if len(text) > 6 else text


__all__ = ["SystemState", "mask_identity"]
