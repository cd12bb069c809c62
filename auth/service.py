"""
auth/service.py -- Register, login and password reset.

The functions take the UserStore as their first argument so routes and
tests can pass any store instance.

Information hiding: login raises the same InvalidCredentialsError for an
unknown email and for a wrong password, and runs bcrypt in both cases so the
two are also indistinguishable by response time.

Layer rule: no imports from api/, audit/, inventory/, or client/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.errors import (
    EmailTakenError,
    InvalidCredentialsError,
    PasswordResetDisabledError,
    ValidationFailedError,
)
from auth.models import User
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.store import UserStore
from auth.tokens import create_access_token
from core.config import get_settings

logger = logging.getLogger("stocktrack.auth")


def _require_credentials(email: str | None, password: str | None) -> tuple[str, str]:
    if not email or not password:
        raise ValidationFailedError()
    return email, password


def register_user(store: UserStore, email: str | None, password: str | None) -> User:
    """Create a user and return it (hash included; callers must not expose it).

    Raises ValidationFailedError before touching the store if either field is
    missing, EmailTakenError if the email is already registered.
    """
    email, password = _require_credentials(email, password)
    if store.get_by_email(email) is not None:
        raise EmailTakenError()
    try:
        user_id = store.create_user(User(email=email, hashed_password=hash_password(password)))
    except IntegrityError as exc:
        # A concurrent registration won the race for this email.
        raise EmailTakenError() from exc
    logger.info("Registered user id=%s", user_id)
    return store.get_by_id(user_id)


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Return the user if the password matches, None otherwise.

    Always runs bcrypt whether or not the user exists:
    - Unknown email: bcrypt runs against DUMMY_HASH
    - Wrong password: bcrypt runs against the real hash
    """
    user = store.get_by_email(email)
    if user is None:
        verify_password(password, DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def login_user(store: UserStore, email: str | None, password: str | None) -> tuple[str, User]:
    """Verify credentials and issue a bearer token scoped to the user id.

    Raises ValidationFailedError for missing fields, InvalidCredentialsError
    for unknown email or wrong password, SigningKeyMissingError if JWT_SECRET
    is not configured.
    """
    email, password = _require_credentials(email, password)
    user = authenticate_user(store, email, password)
    if user is None:
        raise InvalidCredentialsError()
    return create_access_token(user.id), user


def reset_password(store: UserStore, email: str | None, password: str | None) -> User:
    """Replace the password hash of an existing account.

    Disabled unless PASSWORD_RESET_ENABLED is set: the operation takes no
    proof of ownership beyond the email address. An unknown email raises
    InvalidCredentialsError, the same signal login uses.
    """
    if not get_settings().password_reset_enabled:
        raise PasswordResetDisabledError()
    email, password = _require_credentials(email, password)
    user = store.get_by_email(email)
    if user is None:
        raise InvalidCredentialsError()
    store.update_password(user.id, hash_password(password))
    logger.info("Password reset for user id=%s", user.id)
    return user
