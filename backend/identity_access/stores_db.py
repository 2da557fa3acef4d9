"""
Database-backed SessionStore for production use (Postgres).

Why: In-memory sessions are not durable, do not scale across instances and
cannot be written by the upstream login flow. This store keeps sessions in a
shared Postgres table: the login flow inserts a row for an authenticated
identity and hands the opaque `session_id` out as the cookie value; the web
layer only resolves it back to the identity.

Security:
- Only the opaque `session_id` is set in the cookie; the identity stays
  server-side.
- Expired rows are filtered in SQL (`expires_at > now()`), so a stale cookie
  resolves to nothing even before cleanup runs.

Note: This module uses psycopg3. It is imported only when enabled via
`SESSIONS_BACKEND=db`. Tests can continue to use the in-memory store.

Expected schema::

    create table public.registrar_sessions (
        session_id text primary key,
        identity   text not null,
        expires_at timestamptz not null
    );
"""
from __future__ import annotations

import os
import re
import time
from typing import Optional

from backend.identity_access.stores import SessionRecord

try:
    import psycopg
    HAVE_PSYCOPG = True
except Exception:  # pragma: no cover - optional dependency in dev
    psycopg = None  # type: ignore
    HAVE_PSYCOPG = False

_TABLE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}(?:\.[A-Za-z_][A-Za-z0-9_]{0,62})?$")


def _now() -> int:
    return int(time.time())


class DBSessionStore:
    """Postgres-backed session store.

    Parameters
    ----------
    dsn:
        Psycopg3 connection string. Falls back to DATABASE_URL.
    table:
        Fully qualified table name. Defaults to `public.registrar_sessions`.
    """

    def __init__(self, dsn: str | None = None, table: str = "public.registrar_sessions") -> None:
        if not HAVE_PSYCOPG:
            raise RuntimeError("psycopg3 is required for DBSessionStore")
        self._dsn = dsn or os.getenv("DATABASE_URL", "")
        if not self._dsn:
            raise RuntimeError("No database DSN provided for DBSessionStore")
        if not _TABLE_RE.match(table or ""):
            raise ValueError("Invalid table name")
        self._table = table

    def create(self, *, identity: str, ttl_seconds: int = 3600) -> SessionRecord:
        if not identity:
            raise ValueError("identity required")
        expires_at = _now() + ttl_seconds
        with psycopg.connect(self._dsn, autocommit=True) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"insert into {self._table} (session_id, identity, expires_at) "
                    f"values (gen_random_uuid()::text, %s, to_timestamp(%s)) returning session_id",
                    (identity, expires_at),
                )
                row = cur.fetchone()
        sid = str(row[0]) if row else ""
        return SessionRecord(session_id=sid, identity=identity, expires_at=expires_at)

    def get(self, session_id: str) -> Optional[SessionRecord]:
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"select session_id, identity, extract(epoch from expires_at)::bigint "
                    f"from {self._table} where session_id = %s and expires_at > now()",
                    (session_id,),
                )
                row = cur.fetchone()
        if not row:
            return None
        return SessionRecord(
            session_id=row[0],
            identity=row[1],
            expires_at=int(row[2]) if row[2] is not None else None,
        )

    def delete(self, session_id: str) -> None:
        with psycopg.connect(self._dsn, autocommit=True) as conn:
            with conn.cursor() as cur:
                cur.execute(f"delete from {self._table} where session_id = %s", (session_id,))


__all__ = ["DBSessionStore", "HAVE_PSYCOPG"]
