"""
Storage ports used by the registry, credential and grade-sheet components.

Keep these small and framework-agnostic so tests can supply simple fakes.
"""
from __future__ import annotations

from typing import Any, Callable, Optional, Protocol


class KeyValueStore(Protocol):
    """Minimal key-value interface backing all record state.

    Intent:
        Let the core treat state as if it were in memory while durability is
        handled by whichever adapter is wired in (memory or Postgres).

    Behavior:
        - Values are JSON-compatible (str, int, bool, list, dict, None).
        - `update` is an atomic read-modify-write for a single key: `fn`
          receives the current value (or None) and returns the new value.
          Exceptions raised by `fn` abort the update and leave the key as is.
        - Returning None from `fn` deletes the key.
    """

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...

    def update(self, key: str, fn: Callable[[Optional[Any]], Optional[Any]]) -> Optional[Any]: ...


__all__ = ["KeyValueStore"]
