"""
auth/passwords.py -- bcrypt password hashing.

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error.

bcrypt only looks at the first 72 bytes of its input and newer releases raise
on anything longer. Both functions truncate the UTF-8 encoding to 72 bytes
themselves, so a long password hashes and verifies the same way on every
bcrypt release.

Layer rule: no imports from api/, audit/, inventory/, or client/.
"""

from __future__ import annotations

import bcrypt

BCRYPT_ROUNDS = 10
_BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the plaintext password.

    Two calls with the same input return different hashes (random salt).
    """
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash yields False rather than an exception.
    """
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. The service verifies against it when the email
# does not exist, so an unknown email costs the same bcrypt work as a wrong
# password.
DUMMY_HASH: str = hash_password("stocktrack_timing_dummy")
