import re
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from openmd.errors import ShareCodeTaken, ShareExpired
from openmd.storage.notes_store import _atomic_write_json, _next_id, _read_json, _utc_now_iso

_CODE_RE = re.compile(r"^[a-z0-9]{1,64}$")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(s: str) -> datetime:
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class ShareRecord:
    id: int
    note_id: int
    share_code: str
    created_at: str
    password_hash: Optional[str] = None
    expires_at: Optional[str] = None
    views: int = 0

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if not self.expires_at:
            return False
        return _parse_dt(self.expires_at) < (now or _utc_now())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "note_id": self.note_id,
            "share_code": self.share_code,
            "password": self.password_hash,
            "expires_at": self.expires_at,
            "views": self.views,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ShareRecord":
        return cls(
            id=int(raw["id"]),
            note_id=int(raw["note_id"]),
            share_code=raw["share_code"],
            password_hash=raw.get("password"),
            expires_at=raw.get("expires_at"),
            views=int(raw.get("views", 0)),
            created_at=raw["created_at"],
        )


class SharesStore:
    """Share records, one JSON file per share code.

    The code file doubles as the uniqueness constraint; ``by_id/`` maps the
    numeric id back to its code. Every mutation runs under the store lock so
    id allocation, insert and the view counter are atomic per record.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self._lock = threading.Lock()

    @property
    def shares_dir(self) -> Path:
        return self.base_dir / "shares"

    def _code_path(self, share_code: str) -> Optional[Path]:
        if not share_code or not _CODE_RE.match(share_code):
            return None
        return self.shares_dir / "codes" / f"{share_code}.json"

    def _id_path(self, share_id: int) -> Path:
        return self.shares_dir / "by_id" / f"{int(share_id)}.json"

    def insert_share(
        self,
        note_id: int,
        share_code: str,
        password_hash: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> ShareRecord:
        path = self._code_path(share_code)
        if path is None:
            raise ValueError("Invalid share code")

        with self._lock:
            if path.exists():
                raise ShareCodeTaken(share_code)

            record = ShareRecord(
                id=_next_id(self.shares_dir / "_seq.json"),
                note_id=int(note_id),
                share_code=share_code,
                password_hash=password_hash,
                expires_at=expires_at.isoformat() if expires_at else None,
                views=0,
                created_at=_utc_now_iso(),
            )
            _atomic_write_json(path, record.to_dict())
            _atomic_write_json(self._id_path(record.id), {"share_code": share_code})
        return record

    def get_by_code(self, share_code: str) -> Optional[ShareRecord]:
        path = self._code_path(share_code)
        if path is None:
            return None
        raw = _read_json(path)
        if raw is None:
            return None
        return ShareRecord.from_dict(raw)

    def get_by_id(self, share_id: int) -> Optional[ShareRecord]:
        raw = _read_json(self._id_path(share_id))
        if raw is None:
            return None
        return self.get_by_code(raw["share_code"])

    def increment_views(self, share_code: str, now: Optional[datetime] = None) -> Optional[ShareRecord]:
        """Atomically check existence and expiry, then bump ``views`` by one.

        Returns the updated record, ``None`` when the code is unknown, and
        raises ``ShareExpired`` without touching the counter when expired.
        """
        path = self._code_path(share_code)
        if path is None:
            return None

        with self._lock:
            raw = _read_json(path)
            if raw is None:
                return None
            record = ShareRecord.from_dict(raw)
            if record.is_expired(now):
                raise ShareExpired(share_code)

            record = replace(record, views=record.views + 1)
            _atomic_write_json(path, record.to_dict())
        return record
