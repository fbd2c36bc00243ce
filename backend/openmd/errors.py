class ShareNotFound(LookupError):
    """Share code (or the note behind it) does not resolve to a record."""


class ShareExpired(Exception):
    """The share exists but its expiry time has passed."""


class AuthDenied(Exception):
    """Password verification failed."""


class StoreFailure(OSError):
    """A persistence operation failed; nothing was applied."""


class ShareCodeTaken(Exception):
    """Insert rejected because the share code already exists."""
