from __future__ import annotations

import base64
import hashlib
import secrets

_ITERATIONS = 200_000
_SALT_BYTES = 16
_KEY_BYTES = 32


def hash_password(password: str) -> str:
    """Salted PBKDF2-HMAC-SHA256, base64 encoded as ``salt || key``."""
    salt = secrets.token_bytes(_SALT_BYTES)
    key = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _ITERATIONS)
    return base64.b64encode(salt + key).decode("ascii")


def verify_password(password: str, stored: str) -> bool:
    try:
        raw = base64.b64decode(stored.encode("ascii"), validate=True)
    except ValueError:
        return False
    if len(raw) != _SALT_BYTES + _KEY_BYTES:
        return False
    salt, expected = raw[:_SALT_BYTES], raw[_SALT_BYTES:]
    candidate = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _ITERATIONS)
    return secrets.compare_digest(candidate, expected)
