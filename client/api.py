"""
client/api.py -- Thin HTTP client for the StockTrack REST API.

ApiClient wraps an HTTP transport and a Session:
  - every request carries "Authorization: Bearer <token>" when the session
    holds a token;
  - a 401 response clears the session (firing its invalidation callbacks)
    and raises UnauthorizedError;
  - any other 4xx/5xx raises ApiError with the server's error message.

The transport defaults to a requests.Session. Anything exposing a compatible
request(method, url, params=, json=, files=, headers=, timeout=) method can
be injected instead -- the tests pass FastAPI's TestClient with base_url="".

Usage:
    session = Session()
    session.on_invalidate(lambda: print("signed out"))
    api = ApiClient(session, "http://localhost:8000")
    api.login("a@b.com", "secret1")
    api.create_product({"name": "Widget", "sku": "W-1", "price": "9.90", "stock": 3})
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from client.session import Session

logger = logging.getLogger("stocktrack.client")


class ApiError(Exception):
    """The server answered with an error status."""

    def __init__(self, status_code: int, message: str, code: str = "") -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.code = code


class UnauthorizedError(ApiError):
    """The server rejected the bearer token (or its absence). The session has been cleared."""


class ApiClient:
    def __init__(self, session: Session, base_url: str, http: Any = None, timeout: float = 10) -> None:
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        resp = self.http.request(method, self.base_url + path, headers=headers, timeout=self.timeout, **kwargs)

        if resp.status_code == 401:
            logger.info("%s %s returned 401 -- clearing session", method, path)
            self.session.clear()
            message, code = _error_fields(resp)
            raise UnauthorizedError(401, message or "Unauthorized", code)
        if resp.status_code >= 400:
            message, code = _error_fields(resp)
            raise ApiError(resp.status_code, message, code)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def register(self, email: str, password: str) -> dict:
        return self._request("POST", "/api/auth/register", json={"email": email, "password": password})

    def login(self, email: str, password: str) -> dict:
        """Log in and store the returned token on the session."""
        data = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.session.set_token(data["token"])
        return data

    def logout(self) -> None:
        self.session.clear()

    def reset_password(self, email: str, password: str) -> dict:
        return self._request("POST", "/api/auth/reset-password", json={"email": email, "password": password})

    def me(self) -> dict:
        return self._request("GET", "/api/auth/me")

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def list_products(self) -> list[dict]:
        return self._request("GET", "/api/products")

    def create_product(self, fields: dict) -> dict:
        return self._request("POST", "/api/products", json=fields)

    def update_product(self, product_id: int, fields: dict) -> dict:
        return self._request("PUT", f"/api/products/{product_id}", json=fields)

    def delete_product(self, product_id: int) -> None:
        self._request("DELETE", f"/api/products/{product_id}")

    def upload_image(self, product_id: int, filename: str, data: bytes, content_type: str) -> dict:
        files = {"file": (filename, data, content_type)}
        return self._request("POST", f"/api/products/{product_id}/image", files=files)

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------

    def list_logs(self, take: int = 100, skip: int = 0) -> list[dict]:
        return self._request("GET", "/api/logs", params={"take": take, "skip": skip})


def _error_fields(resp) -> tuple[str, str]:
    """Return (message, code) from the error envelope, tolerating non-JSON bodies."""
    try:
        body: Optional[dict] = resp.json()
    except ValueError:
        return resp.text, ""
    if not isinstance(body, dict):
        return str(body), ""
    return str(body.get("error", "")), str(body.get("code", ""))
