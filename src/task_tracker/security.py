"""
Password storage capability.

Handlers never compare passwords themselves. They go through a PasswordHasher,
so the storage scheme can change without touching request handling.
"""
from __future__ import annotations

import hmac
from typing import Protocol

import bcrypt

from .errors import ValidationError
from .settings import Settings

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_PASSWORD_BYTES = 72


# PUBLIC_INTERFACE
class PasswordHasher(Protocol):
    """Capability used by registration and login."""

    def hash(self, password: str) -> str:
        """Return the value to persist for ``password``."""
        ...

    def verify(self, stored: str, supplied: str) -> bool:
        """Return True if ``supplied`` matches the persisted ``stored`` value."""
        ...


class PlainTextHasher:
    """
    Stores passwords verbatim. Only for compatibility with data written by a
    deployment that never hashed; never the default.
    """

    def hash(self, password: str) -> str:
        return password

    def verify(self, stored: str, supplied: str) -> bool:
        return hmac.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))


class BcryptHasher:
    """Salted bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = 12) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self._rounds = rounds

    def hash(self, password: str) -> str:
        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def verify(self, stored: str, supplied: str) -> bool:
        encoded = supplied.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, stored.encode("utf-8"))
        except ValueError:
            # stored value is not a bcrypt hash
            return False


# PUBLIC_INTERFACE
def get_password_hasher(settings: Settings) -> PasswordHasher:
    """Return the PasswordHasher selected by settings.password_scheme."""
    if settings.password_scheme == "plain":
        return PlainTextHasher()
    return BcryptHasher(rounds=settings.bcrypt_rounds)
