"""
In-memory session store for development and tests.

Why: The core never authenticates. An upstream login flow (outside this
service) creates a session for an already-authenticated identity; the web
layer only resolves the opaque session id back to that identity.

Security: Cookies carry only an opaque session id. The identity stays
server-side.
"""
from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional
import secrets
import time


def _now() -> int:
    return int(time.time())


@dataclass
class SessionRecord:
    session_id: str
    identity: str
    expires_at: Optional[int] = None


class SessionStore:
    def __init__(self):
        self._data: Dict[str, SessionRecord] = {}
        self._lock = Lock()

    def create(self, *, identity: str, ttl_seconds: int = 3600) -> SessionRecord:
        if not identity:
            raise ValueError("identity required")
        sid = secrets.token_urlsafe(24)
        rec = SessionRecord(session_id=sid, identity=identity, expires_at=_now() + ttl_seconds)
        with self._lock:
            self._data[sid] = rec
        return rec

    def get(self, session_id: str) -> Optional[SessionRecord]:
        with self._lock:
            rec = self._data.get(session_id)
            if not rec:
                return None
            if rec.expires_at and rec.expires_at < _now():
                self._data.pop(session_id, None)
                return None
            return rec

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._data.pop(session_id, None)
