from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash


class PasswordHasher:
    """Thin wrapper over werkzeug's password hashing."""

    def __init__(self, method: str = "scrypt"):
        self._method = method

    def hash(self, plaintext: str) -> str:
        return generate_password_hash(plaintext, method=self._method)

    def verify(self, plaintext: str, digest: str) -> bool:
        try:
            return check_password_hash(digest, plaintext)
        except (ValueError, TypeError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            return False
