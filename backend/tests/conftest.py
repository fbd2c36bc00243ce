import importlib
import os
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

# cheap hashes for the whole run; read when auth_hash is first imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from openmd.sharing.access import ShareAccessResolver
from openmd.sharing.registry import ShareRegistry
from openmd.sharing.unlock import UnlockTracker
from openmd.storage.event_log import EventLog
from openmd.storage.notes_store import NotesStore
from openmd.storage.sessions_store import SessionsStore
from openmd.storage.shares_store import SharesStore


@pytest.fixture()
def client(tmp_path, monkeypatch):
    # isolate data dir per test
    monkeypatch.setenv("APP_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("JWT_SECRET", "dev-secret-for-tests")
    monkeypatch.setenv("JWT_EXP_MINUTES", "15")
    monkeypatch.delenv("PUBLIC_BASE_URL", raising=False)

    # reload so the shared stores pick up the new data dir
    import openmd.api.deps
    import openmd.main
    importlib.reload(openmd.api.deps)
    importlib.reload(openmd.main)

    return TestClient(openmd.main.app)


@pytest.fixture()
def core(tmp_path):
    """Stores and sharing services wired against a temp dir, no HTTP."""

    c = SimpleNamespace(
        notes=NotesStore(tmp_path),
        shares=SharesStore(tmp_path),
        sessions=SessionsStore(tmp_path, ttl_seconds=3600),
        event_log=EventLog(tmp_path),
    )
    c.registry = ShareRegistry(c.shares, c.notes, code_length=10, max_attempts=5)
    c.tracker = UnlockTracker(c.sessions)
    c.resolver = ShareAccessResolver(c.registry, c.tracker, c.notes, event_log=c.event_log)
    return c
