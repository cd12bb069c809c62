"""
tests/conftest.py -- Shared test fixtures for StockTrack tests.

This module provides:
  - stores: isolated in-memory stores (users, products, audit) per test module
  - api_client: TestClient with a pre-registered user and its bearer token
  - configured: helper fixture to change settings for one test

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

Environment variables must be set before any api/auth/core import so the
first get_settings() call sees them.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from types import SimpleNamespace

# CRITICAL: set before importing the app -- middleware reads settings at import.
os.environ.setdefault("JWT_SECRET", "test-secret-0123456789abcdef0123456789abcdef")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("PASSWORD_RESET_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from audit.logger import AuditLogger
from audit.store import AuditStore
from auth.models import User
from auth.passwords import hash_password
from auth.store import UserStore
from auth.tokens import create_access_token
from core.config import get_settings
from inventory.images import ImageStorage
from inventory.store import ProductStore

ADMIN_EMAIL = "admin@stocktrack.test"
ADMIN_PASSWORD = "testpass123"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _patch_lifespan(stores: SimpleNamespace):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = stores.users
        app.state.products = stores.products
        app.state.audit_store = stores.audit_store
        app.state.audit = stores.audit
        app.state.images = stores.images
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one set of stores and one TestClient per module
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def stores(request, tmp_path_factory) -> Generator[SimpleNamespace, None, None]:
    """Yield isolated stores sharing one named in-memory database.

    The database name is derived from the test module so modules never see
    each other's rows.
    """
    name = request.module.__name__.rsplit(".", 1)[-1]
    url = f"sqlite:///file:{name}?mode=memory&cache=shared&uri=true"
    ns = SimpleNamespace(
        users=UserStore(url),
        products=ProductStore(url),
        audit_store=AuditStore(url),
        images=ImageStorage(tmp_path_factory.mktemp("media"), "/media", 1024),
    )
    ns.audit = AuditLogger(ns.audit_store)
    yield ns
    ns.users.close()
    ns.products.close()
    ns.audit_store.close()


@pytest.fixture(scope="module")
def api_client(stores: SimpleNamespace) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use isolated in-memory stores.
    The user is created before the client starts and its JWT is generated
    for use in Authorization headers.
    """
    uid = stores.users.create_user(User(email=ADMIN_EMAIL, hashed_password=hash_password(ADMIN_PASSWORD)))
    token = create_access_token(uid)

    app.router.lifespan_context = _patch_lifespan(stores)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, uid


@pytest.fixture
def auth_headers(api_client: tuple[TestClient, str, int]) -> dict[str, str]:
    _client, token, _uid = api_client
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def configured(monkeypatch) -> Generator[Callable[..., None], None, None]:
    """Return a function that overrides settings for the current test.

        def test_x(configured):
            configured(JWT_SECRET="", PASSWORD_RESET_ENABLED="true")

    The settings cache is cleared on the way in and on the way out.
    """

    def apply(**env: str) -> None:
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        get_settings.cache_clear()

    yield apply
    get_settings.cache_clear()
