"""
Database-backed key-value store for production use (Postgres).

Why: The in-memory store is not durable and does not scale across instances.
This store keeps every record key in a single `jsonb` table so the core can
stay unaware of SQL.

Concurrency:
- `update` runs in one transaction guarded by a transaction-scoped advisory
  lock on the key. This makes read-modify-write atomic even when the row does
  not exist yet (e.g. the first redemption of a password).

Note: This module uses psycopg3. It is imported only when enabled via
`REGISTRAR_STORE_BACKEND=db`. Tests can continue to use the in-memory store.

Expected schema::

    create table public.registrar_kv (
        key   text primary key,
        value jsonb not null
    );
"""
from __future__ import annotations

import logging
import os
import re
from typing import Any, Callable, Optional

try:
    import psycopg
    from psycopg.types.json import Jsonb
    HAVE_PSYCOPG = True
except Exception:  # pragma: no cover - optional dependency in dev
    psycopg = None  # type: ignore
    HAVE_PSYCOPG = False

_log = logging.getLogger("registrar.storage")

_TABLE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}(?:\.[A-Za-z_][A-Za-z0-9_]{0,62})?$")


class DBKeyValueStore:
    """Postgres-backed key-value store.

    Parameters
    ----------
    dsn:
        Psycopg3 connection string. Falls back to DATABASE_URL.
    table:
        Fully qualified table name. Defaults to `public.registrar_kv`.
    """

    def __init__(self, dsn: str | None = None, table: str = "public.registrar_kv") -> None:
        if not HAVE_PSYCOPG:
            raise RuntimeError("psycopg3 is required for DBKeyValueStore")
        self._dsn = dsn or os.getenv("DATABASE_URL", "")
        if not self._dsn:
            raise RuntimeError("No database DSN provided for DBKeyValueStore")
        # Table name is interpolated into SQL; only plain identifiers pass.
        if not _TABLE_RE.match(table or ""):
            raise ValueError("Invalid table name")
        self._table = table

    def get(self, key: str) -> Optional[Any]:
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(f"select value from {self._table} where key = %s", (key,))
                row = cur.fetchone()
        return row[0] if row else None

    def set(self, key: str, value: Any) -> None:
        with psycopg.connect(self._dsn, autocommit=True) as conn:
            with conn.cursor() as cur:
                self._write(cur, key, value)

    def delete(self, key: str) -> None:
        with psycopg.connect(self._dsn, autocommit=True) as conn:
            with conn.cursor() as cur:
                cur.execute(f"delete from {self._table} where key = %s", (key,))

    def update(self, key: str, fn: Callable[[Optional[Any]], Optional[Any]]) -> Optional[Any]:
        # Connection context commits on success and rolls back if fn raises.
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute("select pg_advisory_xact_lock(hashtext(%s))", (key,))
                cur.execute(f"select value from {self._table} where key = %s for update", (key,))
                row = cur.fetchone()
                new_value = fn(row[0] if row else None)
                self._write(cur, key, new_value)
        return new_value

    def _write(self, cur: Any, key: str, value: Any) -> None:
        if value is None:
            cur.execute(f"delete from {self._table} where key = %s", (key,))
            return
        cur.execute(
            f"insert into {self._table} (key, value) values (%s, %s) "
            f"on conflict (key) do update set value = excluded.value",
            (key, Jsonb(value)),
        )


def build_store_from_env(config: Any = None) -> Any:
    """Return the store selected by REGISTRAR_STORE_BACKEND (memory|db)."""
    from backend.records.config import load_records_config
    from backend.storage.memory import InMemoryKeyValueStore

    cfg = config or load_records_config()
    if cfg.store_backend == "db":
        _log.info("Key-value store wired: Postgres (%s)", cfg.kv_table)
        return DBKeyValueStore(dsn=cfg.database_url or None, table=cfg.kv_table)
    _log.info("Key-value store wired: in-memory")
    return InMemoryKeyValueStore()


__all__ = ["DBKeyValueStore", "HAVE_PSYCOPG", "build_store_from_env"]
