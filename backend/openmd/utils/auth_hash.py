"""One-way hashing for share-link passwords and account passwords.

Share passwords are hashed once when the link is created and checked on
every unlock attempt; the plaintext is never stored. bcrypt cost comes from
`BCRYPT_ROUNDS` (tests set it low). Hosts where the bcrypt backend will not
load get pbkdf2_sha256 and a RuntimeWarning at import.
"""
from __future__ import annotations

import os
import warnings
from typing import Optional

from passlib.context import CryptContext


def _rounds_from_env() -> Optional[int]:
    raw = os.environ.get("BCRYPT_ROUNDS")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _build_context(rounds: Optional[int]) -> CryptContext:
    try:
        if rounds:
            ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)
        else:
            ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")
        ctx.hash("startup-check")
        return ctx
    except Exception as exc:
        warnings.warn(
            f"share and account passwords will use pbkdf2_sha256: bcrypt unusable ({exc})",
            RuntimeWarning,
        )
    if rounds:
        return CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto", pbkdf2_sha256__rounds=rounds)
    return CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


pwd_context = _build_context(_rounds_from_env())


def hash_password(plain: str) -> str:
    """Encoded hash for storage on a share record or user record."""
    if plain is None:
        raise ValueError("cannot hash a missing password")
    return pwd_context.hash(plain)


def verify_password(plain: Optional[str], hashed: Optional[str]) -> bool:
    """Verify a plaintext password against a stored hash.

    Only ever answers match / no match; a malformed hash is a mismatch.
    """
    if plain is None or hashed is None:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False
