from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import AbstractSet, Optional

from openmd.errors import AuthDenied, ShareExpired, ShareNotFound
from openmd.sharing.registry import ShareRegistry
from openmd.sharing.unlock import UnlockTracker
from openmd.storage.event_log import Event, EventLog
from openmd.storage.notes_store import Note, NotesStore
from openmd.storage.sessions_store import UnlockSession
from openmd.storage.shares_store import ShareRecord
from openmd.utils.auth_hash import verify_password


class ViewOutcome(str, Enum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    RENDER = "render"
    CHALLENGE = "challenge"


def decide(record: Optional[ShareRecord], unlocked: AbstractSet[int], now: datetime) -> ViewOutcome:
    """Gate a view request on (share record, session unlock set, current time).

    Expiry wins over everything, including a session that already unlocked
    the share. A password-protected share renders only for sessions holding
    its id.
    """
    if record is None:
        return ViewOutcome.NOT_FOUND
    if record.is_expired(now):
        return ViewOutcome.EXPIRED
    if not record.has_password:
        return ViewOutcome.RENDER
    if record.id in unlocked:
        return ViewOutcome.RENDER
    return ViewOutcome.CHALLENGE


@dataclass(frozen=True)
class ViewResult:
    outcome: ViewOutcome
    record: Optional[ShareRecord] = None
    note: Optional[Note] = None


_VIEW_EVENTS = {
    ViewOutcome.NOT_FOUND: "SHARE_NOT_FOUND",
    ViewOutcome.EXPIRED: "SHARE_EXPIRED",
    ViewOutcome.RENDER: "SHARE_VIEWED",
    ViewOutcome.CHALLENGE: "SHARE_CHALLENGED",
}


class ShareAccessResolver:
    """Runs "view share" and "unlock share" requests for one viewer session.

    Note content is only fetched once the gate says RENDER, and the view
    counter is only bumped after the note was found.
    """

    def __init__(
        self,
        registry: ShareRegistry,
        tracker: UnlockTracker,
        notes: NotesStore,
        event_log: Optional[EventLog] = None,
    ):
        self.registry = registry
        self.tracker = tracker
        self.notes = notes
        self.event_log = event_log

    def _emit(self, event_type: str, session: UnlockSession, record: Optional[ShareRecord], **meta) -> None:
        if self.event_log is None:
            return
        self.event_log.emit(Event(
            event_type=event_type,
            user_id=session.user_id,
            note_id=record.note_id if record else None,
            share_id=record.id if record else None,
            meta=meta or None,
        ))

    def _finish(self, outcome: ViewOutcome, session: UnlockSession, code: str,
                record: Optional[ShareRecord] = None, note: Optional[Note] = None) -> ViewResult:
        self._emit(_VIEW_EVENTS[outcome], session, record, share_code=code)
        if outcome is ViewOutcome.NOT_FOUND:
            record = None
        return ViewResult(outcome=outcome, record=record, note=note)

    def view(self, code: str, session: UnlockSession, now: Optional[datetime] = None) -> ViewResult:
        now = now or datetime.now(timezone.utc)
        try:
            record = self.registry.find_by_code(code)
        except ShareNotFound:
            record = None

        outcome = decide(record, session.unlocked, now)
        if outcome is not ViewOutcome.RENDER:
            return self._finish(outcome, session, code, record)

        # dangling share: the note was deleted after the link was made
        note = self.notes.get_note(record.note_id)
        if note is None:
            return self._finish(ViewOutcome.NOT_FOUND, session, code, record)

        try:
            record = self.registry.resolve_for_view(code, now=now)
        except ShareExpired:
            return self._finish(ViewOutcome.EXPIRED, session, code, record)
        except ShareNotFound:
            return self._finish(ViewOutcome.NOT_FOUND, session, code, record)
        return self._finish(ViewOutcome.RENDER, session, code, record, note)

    def unlock(self, code: str, password: Optional[str], session: UnlockSession) -> UnlockSession:
        """Check ``password`` for the share and remember success in the session.

        Returns the (possibly updated) session. Raises ``ShareNotFound`` or
        ``AuthDenied``; a denial leaves the session untouched.
        """
        try:
            record = self.registry.find_by_code(code)
        except ShareNotFound:
            self._emit("SHARE_NOT_FOUND", session, None, share_code=code)
            raise

        if not record.has_password:
            return session

        if not verify_password(password, record.password_hash):
            self._emit("SHARE_UNLOCK_DENIED", session, record)
            raise AuthDenied(code)

        session = self.tracker.mark_unlocked(session, record.id)
        self._emit("SHARE_UNLOCKED", session, record)
        return session
