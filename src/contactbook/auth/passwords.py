"""
Password hashing behind a small pluggable interface.

Hashes are self-describing strings::

    scrypt$<n>$<r>$<p>$<salt, urlsafe b64>$<derived key, urlsafe b64>

so the cost parameters can change without invalidating stored hashes.
"""

import base64
import hmac
import os
from typing import Protocol

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

_SCHEME = "scrypt"


class PasswordHasher(Protocol):
    """Protocol for password hashing."""

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, hashed: str) -> bool: ...


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text.encode("ascii"))


class ScryptPasswordHasher:
    """Salted scrypt password hasher."""

    def __init__(
        self,
        n: int = 2**14,
        r: int = 8,
        p: int = 1,
        salt_bytes: int = 16,
        key_length: int = 32,
    ) -> None:
        self.n = n
        self.r = r
        self.p = p
        self.salt_bytes = salt_bytes
        self.key_length = key_length

    def hash(self, password: str) -> str:
        salt = os.urandom(self.salt_bytes)
        key = self._derive(password, salt, self.n, self.r, self.p, self.key_length)
        return "$".join(
            (_SCHEME, str(self.n), str(self.r), str(self.p), _b64encode(salt), _b64encode(key))
        )

    def verify(self, password: str, hashed: str) -> bool:
        try:
            scheme, n, r, p, salt, key = hashed.split("$")
            if scheme != _SCHEME:
                return False
            expected = _b64decode(key)
            actual = self._derive(
                password, _b64decode(salt), int(n), int(r), int(p), len(expected)
            )
        except (ValueError, TypeError):
            return False
        return hmac.compare_digest(actual, expected)

    @staticmethod
    def _derive(password: str, salt: bytes, n: int, r: int, p: int, length: int) -> bytes:
        kdf = Scrypt(salt=salt, length=length, n=n, r=r, p=p)
        return kdf.derive(password.encode("utf-8"))


_default_hasher: PasswordHasher | None = None


def get_password_hasher() -> PasswordHasher:
    """FastAPI dependency returning the process-wide hasher."""
    global _default_hasher
    if _default_hasher is None:
        _default_hasher = ScryptPasswordHasher()
    return _default_hasher
