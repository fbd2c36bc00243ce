import secrets
import string

ALPHABET = string.ascii_lowercase + string.digits
MIN_LENGTH = 8


def generate_share_code(length: int = 10) -> str:
    """Random public share code, e.g. ``k3v9x0q2mz``.

    36 symbols per character; at the minimum length that is 36**8 codes.
    """
    if length < MIN_LENGTH:
        raise ValueError(f"share code length must be >= {MIN_LENGTH}")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
