"""
auth/passwords.py -- One-way password hashing (bcrypt).

bcrypt salts every hash and its cost factor makes brute force expensive.
Hashes are kept as the raw bytes bcrypt returns and stored as-is.

bcrypt only looks at the first 72 bytes of input. Rather than truncating
(which would let two different long passwords verify against each other),
longer inputs are rejected: the API layer refuses them with InvalidArgument
and hash_password() raises HashingError if one slips through.
"""

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 12
MAX_PASSWORD_BYTES = 72


class HashingError(Exception):
    """Raised when a hash cannot be produced. Fatal to the calling operation."""


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> bytes:
    """Return a salted bcrypt hash of plain."""
    pw_bytes = plain.encode("utf-8")
    if len(pw_bytes) > MAX_PASSWORD_BYTES:
        raise HashingError(f"password exceeds {MAX_PASSWORD_BYTES} bytes")
    try:
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds))
    except (ValueError, TypeError) as exc:
        raise HashingError(str(exc)) from exc


def verify_password(hashed: bytes, plain: str) -> bool:
    """Return True if plain matches hashed. A malformed hash never matches."""
    pw_bytes = plain.encode("utf-8")
    if len(pw_bytes) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed)
    except (ValueError, TypeError):
        return False
