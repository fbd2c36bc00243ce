import json
import logging
import os
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from openmd.errors import StoreFailure

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except OSError as exc:
        raise StoreFailure(f"write failed: {path.name}") from exc


def _read_json(path: Path) -> Optional[dict[str, Any]]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        raise StoreFailure(f"read failed: {path.name}") from exc


def _next_id(seq_path: Path) -> int:
    # caller holds the store lock
    raw = _read_json(seq_path) or {}
    value = int(raw.get("last_id", 0)) + 1
    _atomic_write_json(seq_path, {"last_id": value})
    return value


@dataclass(frozen=True)
class Note:
    id: int
    title: str
    content: str
    created_at: str
    updated_at: str
    metadata: dict[str, Any] = field(default_factory=dict)
    owner_user_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "metadata": dict(self.metadata),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "owner_user_id": self.owner_user_id,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Note":
        return cls(
            id=int(raw["id"]),
            title=raw["title"],
            content=raw["content"],
            metadata=dict(raw.get("metadata") or {}),
            created_at=raw["created_at"],
            updated_at=raw["updated_at"],
            owner_user_id=raw.get("owner_user_id"),
        )


class NotesStore:
    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self._lock = threading.Lock()

    @property
    def notes_dir(self) -> Path:
        return self.base_dir / "notes"

    def _note_path(self, note_id: int) -> Path:
        return self.notes_dir / f"{int(note_id)}.json"

    def create_note(
        self,
        title: str,
        content: str,
        metadata: Optional[dict[str, Any]] = None,
        owner_user_id: Optional[str] = None,
    ) -> Note:
        now = _utc_now_iso()
        with self._lock:
            note = Note(
                id=_next_id(self.notes_dir / "_seq.json"),
                title=title,
                content=content,
                metadata=dict(metadata or {}),
                created_at=now,
                updated_at=now,
                owner_user_id=owner_user_id,
            )
            _atomic_write_json(self._note_path(note.id), note.to_dict())
        return note

    def exists(self, note_id: int) -> bool:
        return self._note_path(note_id).exists()

    def get_note(self, note_id: int) -> Optional[Note]:
        raw = _read_json(self._note_path(note_id))
        if raw is None:
            return None
        return Note.from_dict(raw)

    def list_notes(self) -> list[Note]:
        if not self.notes_dir.exists():
            return []
        out: list[Note] = []
        for p in self.notes_dir.glob("[0-9]*.json"):
            try:
                out.append(Note.from_dict(json.loads(p.read_text(encoding="utf-8"))))
            except (OSError, ValueError, KeyError):
                logger.warning("skipping unreadable note file %s", p.name)
                continue
        out.sort(key=lambda n: n.updated_at, reverse=True)
        return out

    def update_note(
        self,
        note_id: int,
        title: Optional[str] = None,
        content: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Optional[Note]:
        path = self._note_path(note_id)
        with self._lock:
            raw = _read_json(path)
            if raw is None:
                return None

            if title:
                raw["title"] = title
            if content:
                raw["content"] = content
            if metadata:
                merged = dict(raw.get("metadata") or {})
                merged.update(metadata)
                raw["metadata"] = merged
            raw["updated_at"] = _utc_now_iso()

            _atomic_write_json(path, raw)
        return Note.from_dict(raw)

    def delete_note(self, note_id: int) -> bool:
        # shares pointing at this note are left in place
        path = self._note_path(note_id)
        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as exc:
                raise StoreFailure(f"delete failed: {path.name}") from exc
        return True
