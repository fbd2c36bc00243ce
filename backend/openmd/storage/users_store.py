from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from openmd.storage.notes_store import _atomic_write_json, _read_json


def _safe_username(username: str) -> str:
    # no path separators or parent refs in file names
    if not username or any(ch in username for ch in ["/", "\\"]) or ".." in username:
        raise ValueError("Invalid username")
    return username.lower()


@dataclass(frozen=True)
class UserRecord:
    id: str
    username: str
    email: str
    hashed_password: str
    created_at: str
    last_login: Optional[str] = None

    def public_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "created_at": self.created_at,
            "last_login": self.last_login,
        }


class UsersStore:
    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self._lock = threading.Lock()

    @property
    def users_dir(self) -> Path:
        return self.base_dir / "users"

    def _user_path(self, username: str) -> Path:
        return self.users_dir / f"{_safe_username(username)}.json"

    def _email_path(self, email: str) -> Path:
        return self.users_dir / "by_email" / f"{_safe_username(email)}.json"

    def get(self, username: str) -> Optional[UserRecord]:
        raw = _read_json(self._user_path(username))
        if raw is None:
            return None
        return UserRecord(**raw)

    def get_by_login(self, login: str) -> Optional[UserRecord]:
        """Look a user up by username or, failing that, by email."""
        rec = self.get(login)
        if rec is not None:
            return rec
        ref = _read_json(self._email_path(login))
        if ref is None:
            return None
        return self.get(ref["username"])

    def create(self, username: str, email: str, hashed_password: str) -> UserRecord:
        with self._lock:
            p = self._user_path(username)
            e = self._email_path(email)
            if p.exists() or e.exists():
                raise FileExistsError("User exists")

            rec = UserRecord(
                id=_safe_username(username),
                username=username,
                email=email,
                hashed_password=hashed_password,
                created_at=datetime.now(timezone.utc).isoformat(),
            )
            _atomic_write_json(p, asdict(rec))
            _atomic_write_json(e, {"username": rec.username})
        return rec

    def touch_login(self, username: str) -> None:
        with self._lock:
            p = self._user_path(username)
            raw = _read_json(p)
            if raw is None:
                return
            raw["last_login"] = datetime.now(timezone.utc).isoformat()
            _atomic_write_json(p, raw)
