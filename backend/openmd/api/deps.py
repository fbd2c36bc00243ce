"""Shared stores and request dependencies.

Everything here is built once from the environment at import time; tests
point ``APP_DATA_DIR`` at a temp dir and reload this module.
"""
from typing import Optional

from fastapi import Depends, Request, Response

from openmd import config
from openmd.sharing.access import ShareAccessResolver
from openmd.sharing.registry import ShareRegistry
from openmd.sharing.unlock import UnlockTracker
from openmd.storage.event_log import EventLog
from openmd.storage.notes_store import NotesStore
from openmd.storage.sessions_store import SessionsStore, UnlockSession
from openmd.storage.shares_store import SharesStore
from openmd.storage.users_store import UsersStore
from openmd.utils.jwt_auth import get_optional_user

DATA_DIR = config.data_dir()

notes = NotesStore(DATA_DIR)
shares = SharesStore(DATA_DIR)
sessions = SessionsStore(DATA_DIR, ttl_seconds=config.session_ttl_seconds())
users = UsersStore(DATA_DIR)
event_log = EventLog(DATA_DIR)

registry = ShareRegistry(shares, notes)
tracker = UnlockTracker(sessions)
resolver = ShareAccessResolver(registry, tracker, notes, event_log=event_log)


def get_viewer_session(
    request: Request,
    user_id: Optional[str] = Depends(get_optional_user),
) -> UnlockSession:
    """Current viewer session from the cookie; a fresh, unsaved one if missing or stale."""
    sid = request.cookies.get(config.session_cookie_name())
    return sessions.load_or_create(sid, user_id=user_id)


def attach_session_cookie(response: Response, session: UnlockSession) -> None:
    response.set_cookie(
        key=config.session_cookie_name(),
        value=session.session_id,
        max_age=sessions.ttl_seconds,
        httponly=True,
        samesite="lax",
        path="/",
    )


def base_url(request: Request) -> str:
    return config.public_base_url() or str(request.base_url).rstrip("/")
