"""
client/session.py -- Explicit holder for the client's bearer token.

The token's lifecycle: set after a successful login, cleared on logout or
when any API call comes back 401. Callbacks registered with on_invalidate()
run every time the token is cleared (e.g. to send the user back to a login
prompt).
"""

from __future__ import annotations

from collections.abc import Callable


class Session:
    def __init__(self, token: str | None = None) -> None:
        self._token = token
        self._callbacks: list[Callable[[], None]] = []

    @property
    def token(self) -> str | None:
        return self._token

    def is_authenticated(self) -> bool:
        return bool(self._token)

    def set_token(self, token: str) -> None:
        self._token = token

    def on_invalidate(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def clear(self) -> None:
        """Drop the token and notify every invalidation callback."""
        self._token = None
        for callback in self._callbacks:
            callback()
