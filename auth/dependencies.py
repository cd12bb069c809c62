"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication (the auth gate).

Only one credential is accepted: the Authorization: Bearer <token> header.

require_user_id() is the hard gate: it raises HTTP 401 before the protected
handler runs when the header is missing, not a Bearer scheme, or carries a
token that fails verification. On success the actor id is stored on
request.state.user_id and returned, so handlers can attribute audit entries.

_current_user_id() does the token checks and returns None instead of raising.

Both are stateless: verification is signature + expiry only, no database read.
A missing JWT_SECRET propagates as SigningKeyMissingError (HTTP 500).

Layer rule: no imports from api/, audit/, inventory/, or client/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.tokens import decode_access_token

_UNAUTHORIZED = {"code": "unauthorized", "message": "Unauthorized"}


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


def _current_user_id(request: Request) -> int | None:
    """Return the authenticated user id, or None if the request is not authenticated."""
    token = _bearer_token(request)
    if token is None:
        return None
    subject = decode_access_token(token)
    if subject is None:
        return None
    try:
        user_id = int(subject)
    except ValueError:
        return None
    request.state.user_id = user_id
    return user_id


def require_user_id(request: Request) -> int:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.post("/protected")
        def route(user_id: int = Depends(require_user_id)): ...
    """
    user_id = _current_user_id(request)
    if user_id is None:
        raise HTTPException(status_code=401, detail=_UNAUTHORIZED)
    return user_id
