from openmd.storage.sessions_store import SessionsStore, UnlockSession


def is_unlocked(session: UnlockSession, share_id: int) -> bool:
    return share_id in session.unlocked


class UnlockTracker:
    """Per-session set of share ids that passed password verification.

    Grows only; there is no re-lock. The set lives with the session, never
    on the share record.
    """

    def __init__(self, sessions: SessionsStore):
        self.sessions = sessions

    def is_unlocked(self, session: UnlockSession, share_id: int) -> bool:
        return is_unlocked(session, share_id)

    def mark_unlocked(self, session: UnlockSession, share_id: int) -> UnlockSession:
        if is_unlocked(session, share_id):
            return session
        return self.sessions.add_unlocked(session.session_id, share_id, user_id=session.user_id)
