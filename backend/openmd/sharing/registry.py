import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from openmd import config
from openmd.errors import ShareCodeTaken, ShareNotFound, StoreFailure
from openmd.sharing.codes import generate_share_code
from openmd.storage.notes_store import NotesStore
from openmd.storage.shares_store import ShareRecord, SharesStore
from openmd.utils.auth_hash import hash_password

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ShareRegistry:
    """Creates and looks up share records, evaluates expiry, counts views."""

    def __init__(
        self,
        shares: SharesStore,
        notes: NotesStore,
        code_length: Optional[int] = None,
        max_attempts: Optional[int] = None,
        code_factory: Callable[[int], str] = generate_share_code,
    ):
        self.shares = shares
        self.notes = notes
        self.code_length = code_length or config.share_code_length()
        self.max_attempts = max_attempts or config.share_code_max_attempts()
        self._code_factory = code_factory

    def create(
        self,
        note_id: int,
        password: Optional[str] = None,
        expires_in_hours: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> ShareRecord:
        if expires_in_hours is not None and expires_in_hours < 0:
            raise ValueError("expires_in_hours must not be negative")
        if not self.notes.exists(note_id):
            raise ShareNotFound(f"note {note_id}")

        password_hash = hash_password(password) if password else None
        expires_at = None
        if expires_in_hours:
            expires_at = (now or _utc_now()) + timedelta(hours=expires_in_hours)

        for attempt in range(1, self.max_attempts + 1):
            code = self._code_factory(self.code_length)
            try:
                return self.shares.insert_share(
                    note_id=note_id,
                    share_code=code,
                    password_hash=password_hash,
                    expires_at=expires_at,
                )
            except ShareCodeTaken:
                logger.warning("share code collision (attempt %d/%d)", attempt, self.max_attempts)
        raise StoreFailure("could not allocate a unique share code")

    def find_by_code(self, code: str) -> ShareRecord:
        record = self.shares.get_by_code(code)
        if record is None:
            raise ShareNotFound(code)
        return record

    def resolve_for_view(self, code: str, now: Optional[datetime] = None) -> ShareRecord:
        """Counts one view. Raises ``ShareNotFound`` or ``ShareExpired`` instead."""
        record = self.shares.increment_views(code, now=now)
        if record is None:
            raise ShareNotFound(code)
        return record
