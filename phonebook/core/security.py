"""Security helpers (hashing and verification)."""

from __future__ import annotations

from typing import Protocol

from argon2 import PasswordHasher as _Argon2Hasher, exceptions as argon_exc

_ph = _Argon2Hasher()
_PREFIX = "argon2$"


def hash_password(password: str) -> str:
    """Create an Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored.startswith(_PREFIX):
        return False
    hashed = stored[len(_PREFIX) :]
    try:
        return _ph.verify(hashed, password)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


class PasswordHasher(Protocol):
    def encode(self, raw: str) -> str: ...

    def matches(self, raw: str, hashed: str | None) -> bool: ...


class Argon2PasswordHasher:
    """PasswordHasher implementation backed by argon2-cffi."""

    def encode(self, raw: str) -> str:
        return hash_password(raw)

    def matches(self, raw: str, hashed: str | None) -> bool:
        return verify_password(raw, hashed)
