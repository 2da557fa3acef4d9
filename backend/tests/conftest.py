"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend to avoid sandbox restrictions
that can affect the Trio backend (e.g., socketpair permission errors), make
the repository root importable, and provide isolated service instances.
"""
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from backend.records.events import RecordingEventSink  # noqa: E402
from backend.records.service import RecordsService  # noqa: E402
from backend.storage.memory import InMemoryKeyValueStore  # noqa: E402

OWNER = "owner-0xA11CE"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _dev_env(monkeypatch: pytest.MonkeyPatch):
    """Keep every test in a permissive dev environment unless it opts out."""
    monkeypatch.setenv("REGISTRAR_ENV", "dev")
    for var in (
        "REGISTRAR_STORE_BACKEND",
        "REGISTRAR_KV_TABLE",
        "REVIEW_RATING_MIN",
        "REVIEW_RATING_MAX",
        "DATABASE_URL",
        "SESSIONS_BACKEND",
        "REGISTRAR_SESSIONS_TABLE",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("REGISTRAR_OWNER_IDENTITY", OWNER)
    yield


@pytest.fixture
def sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def service(store: InMemoryKeyValueStore, sink: RecordingEventSink) -> RecordsService:
    return RecordsService.create(OWNER, store, sink=sink)
