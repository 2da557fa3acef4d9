"""
In-memory key-value store for development and tests.

Why: Keep the core runnable without a database. For production, wire the
Postgres-backed `DBKeyValueStore` instead (REGISTRAR_STORE_BACKEND=db).

Values are deep-copied on the way in and out so callers never share mutable
state with the store; readers always see a consistent snapshot of a value.
"""
from __future__ import annotations

import copy
from threading import RLock
from typing import Any, Callable, Dict, Optional


class InMemoryKeyValueStore:
    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        self._lock = RLock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        if value is None:
            self.delete(key)
            return
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def update(self, key: str, fn: Callable[[Optional[Any]], Optional[Any]]) -> Optional[Any]:
        with self._lock:
            new_value = fn(copy.deepcopy(self._data.get(key)))
            if new_value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = copy.deepcopy(new_value)
            return copy.deepcopy(new_value)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


__all__ = ["InMemoryKeyValueStore"]
