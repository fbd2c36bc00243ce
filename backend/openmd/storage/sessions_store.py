import re
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from openmd.errors import StoreFailure
from openmd.storage.notes_store import _atomic_write_json, _read_json

_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]{16,128}$")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(s: str) -> datetime:
    return datetime.fromisoformat(s)


@dataclass(frozen=True)
class UnlockSession:
    """One viewer's session: which password-protected shares it has opened."""

    session_id: str
    unlocked: frozenset[int] = frozenset()
    user_id: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "UnlockSession":
        return cls(
            session_id=raw["session_id"],
            unlocked=frozenset(int(x) for x in raw.get("unlocked_share_ids", [])),
            user_id=raw.get("user_id"),
        )


class SessionsStore:
    def __init__(self, base_dir: Path, ttl_seconds: int = 60 * 60 * 24):
        self.base_dir = base_dir
        self.ttl_seconds = ttl_seconds
        self._lock = threading.Lock()

    def _session_path(self, session_id: str) -> Optional[Path]:
        if not session_id or not _SESSION_ID_RE.match(session_id):
            return None
        return self.base_dir / "sessions" / f"{session_id}.json"

    def _is_expired(self, raw: dict[str, Any]) -> bool:
        return _utc_now() >= _parse_dt(raw["expires_at"])

    def _new_doc(self, session_id: str, user_id: Optional[str]) -> dict[str, Any]:
        now = _utc_now()
        return {
            "session_id": session_id,
            "user_id": user_id,
            "created_at": now.isoformat(),
            "expires_at": (now + timedelta(seconds=self.ttl_seconds)).isoformat(),
            "unlocked_share_ids": [],
        }

    def new_session(self, user_id: Optional[str] = None) -> UnlockSession:
        """Fresh session value, not yet on disk.

        The file is first written by ``add_unlocked``; a viewer who never
        unlocks anything never costs a session file.
        """
        return UnlockSession(session_id=secrets.token_urlsafe(32), user_id=user_id)

    def create(self, user_id: Optional[str] = None) -> UnlockSession:
        session = self.new_session(user_id)
        doc = self._new_doc(session.session_id, user_id)
        with self._lock:
            self._purge_expired()
            _atomic_write_json(self._session_path(session.session_id), doc)
        return UnlockSession.from_dict(doc)

    def _purge_expired(self) -> int:
        # caller holds the store lock
        sessions_dir = self.base_dir / "sessions"
        if not sessions_dir.exists():
            return 0
        removed = 0
        for p in sessions_dir.glob("*.json"):
            try:
                raw = _read_json(p)
            except StoreFailure:
                raw = None  # unreadable: drop it with the expired ones
            if raw is not None and not self._is_expired(raw):
                continue
            try:
                p.unlink()
                removed += 1
            except OSError:
                pass
        return removed

    def purge_expired(self) -> int:
        """Delete every expired session file; returns how many went."""
        with self._lock:
            return self._purge_expired()

    def load(self, session_id: Optional[str]) -> Optional[UnlockSession]:
        p = self._session_path(session_id or "")
        if p is None:
            return None
        raw = _read_json(p)
        if raw is None:
            return None
        if self._is_expired(raw):
            try:
                p.unlink()
            except OSError:
                pass
            return None
        return UnlockSession.from_dict(raw)

    def load_or_create(self, session_id: Optional[str], user_id: Optional[str] = None) -> UnlockSession:
        """Session behind ``session_id``, or an unsaved fresh one.

        A registered viewer identity seen later (login after the cookie was
        issued) is recorded on the existing session.
        """
        session = self.load(session_id)
        if session is None:
            return self.new_session(user_id=user_id)
        if user_id and session.user_id != user_id:
            return self._set_user(session.session_id, user_id)
        return session

    def _set_user(self, session_id: str, user_id: str) -> UnlockSession:
        p = self._session_path(session_id)
        with self._lock:
            raw = _read_json(p)
            if raw is None or self._is_expired(raw):
                return self.new_session(user_id=user_id)
            raw["user_id"] = user_id
            _atomic_write_json(p, raw)
        return UnlockSession.from_dict(raw)

    def add_unlocked(self, session_id: str, share_id: int, user_id: Optional[str] = None) -> UnlockSession:
        p = self._session_path(session_id)
        if p is None:
            raise ValueError("Invalid session id")

        with self._lock:
            raw = _read_json(p)
            if raw is None or self._is_expired(raw):
                # first write for this session (or it lapsed): restart the TTL
                self._purge_expired()
                raw = self._new_doc(session_id, user_id or (raw.get("user_id") if raw else None))

            ids = set(int(x) for x in raw.get("unlocked_share_ids", []))
            if int(share_id) not in ids:
                ids.add(int(share_id))
                raw["unlocked_share_ids"] = sorted(ids)
                _atomic_write_json(p, raw)
        return UnlockSession.from_dict(raw)
