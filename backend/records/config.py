"""
Configuration parsing and validation for the record store.

Intent:
    Provide a single place to read environment variables that control the
    owner identity, store backend selection and review rating bounds.

Why:
    Centralising configuration reduces drift across modules and makes
    validation and defaults explicit. It also helps tests exercise config
    behaviour without booting the web app.
"""
from __future__ import annotations

from dataclasses import dataclass
import os


@dataclass(frozen=True)
class RecordsConfig:
    owner_identity: str
    store_backend: str  # "memory" | "db"
    database_url: str
    kv_table: str
    rating_min: int
    rating_max: int


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw!r}")


def is_prod_like(env: str | None = None) -> bool:
    value = env if env is not None else os.getenv("REGISTRAR_ENV", "dev")
    return (value or "").lower() in {"prod", "production", "stage", "staging"}


def load_records_config() -> RecordsConfig:
    """
    Parse and validate record-store configuration from environment variables.

    Behavior:
        - `REGISTRAR_STORE_BACKEND` selects "memory" (default) or "db".
        - `REVIEW_RATING_MIN`/`REVIEW_RATING_MAX` default to 0/10 and must
          form a non-empty range.
        - The owner identity may be empty here; the web app refuses to start
          without one (see backend.web.config).
    """
    backend = (os.getenv("REGISTRAR_STORE_BACKEND") or "memory").strip().lower()
    if backend not in {"memory", "db"}:
        raise ValueError("REGISTRAR_STORE_BACKEND must be 'memory' or 'db'")

    rating_min = _int_env("REVIEW_RATING_MIN", 0)
    rating_max = _int_env("REVIEW_RATING_MAX", 10)
    if rating_min > rating_max:
        raise ValueError(
            f"REVIEW_RATING_MIN ({rating_min}) must not exceed REVIEW_RATING_MAX ({rating_max})"
        )

    return RecordsConfig(
        owner_identity=(os.getenv("REGISTRAR_OWNER_IDENTITY") or "").strip(),
        store_backend=backend,
        database_url=(os.getenv("DATABASE_URL") or "").strip(),
        kv_table=(os.getenv("REGISTRAR_KV_TABLE") or "public.registrar_kv").strip(),
        rating_min=rating_min,
        rating_max=rating_max,
    )


__all__ = ["RecordsConfig", "is_prod_like", "load_records_config"]
