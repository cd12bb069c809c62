"""
auth/errors.py -- Domain errors raised by the auth service and token layer.

Every error carries the HTTP status, a machine-readable code and a
human-readable message. api/main.py has one exception handler for AppError
that turns any subclass into the standard error envelope, so the service
layer never imports FastAPI.

Layer rule: no imports from api/, audit/, inventory/, or client/.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = 400
    code: str = "bad_request"
    message: str = "Bad request."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationFailedError(AppError):
    status_code = 400
    code = "validation_error"
    message = "email and password are required"


class EmailTakenError(AppError):
    status_code = 409
    code = "conflict"
    message = "email already registered"


class InvalidCredentialsError(AppError):
    """Raised for an unknown email AND for a wrong password.

    Both cases share one error so the response does not reveal whether an
    account exists.
    """

    status_code = 401
    code = "bad_credentials"
    message = "invalid credentials"


class PasswordResetDisabledError(AppError):
    status_code = 403
    code = "reset_disabled"
    message = "password reset is disabled"


class SigningKeyMissingError(AppError):
    """JWT_SECRET is not configured; token operations fail closed."""

    status_code = 500
    code = "misconfigured"
    message = "Server misconfigured (JWT_SECRET)"
