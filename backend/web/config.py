"""
Configuration and startup security checks for the registrar web app.

Why: Grade sheets and review credentials must not end up in a volatile or
unencrypted deployment by accident. This module provides a single guard that
enforces minimal production safety constraints without burdening local
development.

Permissions: The caller needs no special privileges. The function simply reads
environment variables and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os

from backend.records.config import is_prod_like


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Intent: Abort process startup when obviously unsafe settings are detected
    in production/staging. Development remains permissive for convenience.

    Checks:
    - REGISTRAR_OWNER_IDENTITY must be set.
    - REGISTRAR_STORE_BACKEND must be `db` (in-memory state is lost on restart).
    - SESSIONS_BACKEND must be `db` (sessions come from the upstream login flow).
    - DATABASE_URL must be set and must not explicitly disable TLS.
    """

    env = os.getenv("REGISTRAR_ENV", "dev")
    if not is_prod_like(env):
        return  # dev/test remain permissive

    # 1) Owner identity
    owner = (os.getenv("REGISTRAR_OWNER_IDENTITY") or "").strip()
    if not owner:
        raise SystemExit("Refusing to start: REGISTRAR_OWNER_IDENTITY is unset in production.")

    # 2) Durable store and shared sessions
    backend = (os.getenv("REGISTRAR_STORE_BACKEND") or "memory").strip().lower()
    if backend != "db":
        raise SystemExit(
            "Refusing to start: REGISTRAR_STORE_BACKEND must be 'db' in production/staging."
        )
    sessions = (os.getenv("SESSIONS_BACKEND") or "memory").strip().lower()
    if sessions != "db":
        raise SystemExit(
            "Refusing to start: SESSIONS_BACKEND must be 'db' in production/staging."
        )

    # 3) Postgres DSN with TLS
    dsn = (os.getenv("DATABASE_URL") or "").strip()
    if not dsn:
        raise SystemExit("Refusing to start: DATABASE_URL is unset in production.")
    if "sslmode=disable" in dsn:
        raise SystemExit(
            "Refusing to start: DATABASE_URL contains sslmode=disable in production. Use sslmode=require or verify TLS."
        )
