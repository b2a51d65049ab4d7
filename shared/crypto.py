"""
Cryptographic helpers: password hashing and reset-token hashing.

Passwords use argon2id (via argon2-cffi). Reset tokens are hashed with
SHA-256 so only the digest is ever written to the users collection.
"""

from __future__ import annotations

import hashlib

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_password_hasher = PasswordHasher()


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id (salt and parameters embedded)."""
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Constant-time check of *plain_password* against an argon2 hash.

    Returns ``False`` for a mismatch as well as for a missing or malformed
    stored hash, so callers can treat every failure the same way.
    """
    if not password_hash:
        return False
    try:
        return _password_hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def hash_reset_token(token: str) -> str:
    """Return the hex-encoded SHA-256 digest of a password reset *token*."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
