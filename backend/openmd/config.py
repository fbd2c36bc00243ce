from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

# repository_root/data (we are in backend/openmd/)
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data"


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def data_dir() -> Path:
    return Path(os.getenv("APP_DATA_DIR", str(DEFAULT_DATA_DIR)))


def public_base_url() -> Optional[str]:
    url = os.getenv("PUBLIC_BASE_URL", "").strip()
    return url.rstrip("/") or None


def session_ttl_seconds() -> int:
    return _int_env("SESSION_TTL_SECONDS", 60 * 60 * 24)


def session_cookie_name() -> str:
    return os.getenv("SESSION_COOKIE_NAME", "openmd_session")


def share_code_length() -> int:
    return _int_env("SHARE_CODE_LENGTH", 10)


def share_code_max_attempts() -> int:
    # at least one attempt, whatever the env says
    return max(1, _int_env("SHARE_CODE_MAX_ATTEMPTS", 5))
