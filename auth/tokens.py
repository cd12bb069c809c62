"""
auth/tokens.py -- Bearer token (JWT) issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry exactly two claims: sub (the user
       id as a string) and exp (issuance + TOKEN_EXPIRE_SECONDS, seven days by
       default). Nothing is stored server-side; expiry is the only
       invalidation mechanism.

  Verification returns None on any token failure (malformed, bad signature,
       expired, missing subject) -- the auth gate turns that into a 401.

  JWT_SECRET is read from core.config.get_settings() on every call rather
       than once at import. An empty secret raises SigningKeyMissingError from
       both issue and verify, so the server refuses to sign or accept tokens
       instead of operating unsigned.

Layer rule: no imports from api/, audit/, inventory/, or client/. Import from
core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.errors import SigningKeyMissingError
from core.config import get_settings

logger = logging.getLogger("stocktrack.auth")

_ALGORITHM = "HS256"


def _signing_secret() -> str:
    secret = get_settings().jwt_secret
    if not secret:
        logger.error("Token operation refused: JWT_SECRET is not configured")
        raise SigningKeyMissingError()
    return secret


def create_access_token(subject: int | str, expire_seconds: int = 0) -> str:
    """Encode a signed JWT for the given subject.

    Args:
        subject:        User id. Stored as a string in the sub claim.
        expire_seconds: Token lifetime in seconds. If 0 (default), uses
                        Settings.token_expire_seconds.

    Raises SigningKeyMissingError if JWT_SECRET is not configured.
    """
    secret = _signing_secret()
    duration = expire_seconds if expire_seconds > 0 else get_settings().token_expire_seconds
    payload = {
        "sub": str(subject),
        "exp": datetime.now(timezone.utc) + timedelta(seconds=duration),
    }
    return jwt.encode(payload, secret, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> str | None:
    """Verify a JWT and return its subject, or None on any token failure.

    Raises SigningKeyMissingError if JWT_SECRET is not configured -- a
    missing secret is a server fault, not a bad token.
    """
    secret = _signing_secret()
    try:
        payload = jwt.decode(token, secret, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    return subject
