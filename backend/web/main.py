"Registrar web entry point"
from __future__ import annotations

import logging
import os
import sys as _sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.identity_access.stores import SessionStore
from backend.web import config as _cfg
from backend.web.routes.records import records_router


def _under_pytest() -> bool:
    return "pytest" in _sys.modules or bool(os.getenv("PYTEST_CURRENT_TEST"))


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via REGISTRAR_ENABLE_DOTENV (default true
      outside pytest).
    """
    if _under_pytest():
        return False
    flag = (os.getenv("REGISTRAR_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


try:
    from dotenv import load_dotenv
    if _should_load_dotenv():
        load_dotenv()
except ImportError:
    pass

# Minimal production safety checks (fail-fast on insecure config)
_cfg.ensure_secure_config_on_startup()

logger = logging.getLogger("registrar.web")
SESSION_COOKIE_NAME = "registrar_session"


def _build_session_store():
    """Select the session store via SESSIONS_BACKEND (memory|db).

    With `db`, sessions live in a Postgres table that the upstream login flow
    writes to; the in-memory store only serves local development and tests.
    """
    if (os.getenv("SESSIONS_BACKEND") or "memory").strip().lower() == "db":
        from backend.identity_access.stores_db import DBSessionStore

        table = (os.getenv("REGISTRAR_SESSIONS_TABLE") or "public.registrar_sessions").strip()
        logger.info("Session store wired: Postgres (%s)", table)
        return DBSessionStore(table=table)
    return SessionStore()


SESSION_STORE = SessionStore() if _under_pytest() else _build_session_store()

app = FastAPI(title="Registrar", description="Role-gated academic record store", version="0.1.0")
app.include_router(records_router)


def _private_no_store() -> dict:
    return {"Cache-Control": "private, no-store"}


def _is_public_path(path: str) -> bool:
    return path in ("/health", "/favicon.ico")


@app.middleware("http")
async def session_identity(request: Request, call_next):
    """Resolve the session cookie to the caller identity.

    The identity was authenticated upstream; this only maps the opaque
    session id back to it and exposes it as `request.state.identity`.
    """
    path = request.url.path
    if _is_public_path(path):
        return await call_next(request)

    sid = request.cookies.get(SESSION_COOKIE_NAME)
    rec = None
    if sid:
        try:
            rec = SESSION_STORE.get(sid)
        except Exception as exc:
            logger.warning("Session store get failed: %s", exc.__class__.__name__)

    if not rec:
        return JSONResponse({"error": "unauthenticated"}, status_code=401, headers=_private_no_store())

    request.state.identity = rec.identity
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": "bad_request"}, status_code=400, headers=_private_no_store())


@app.get("/health")
async def health():
    return {"status": "ok"}
