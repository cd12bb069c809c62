"""Tests for client/session.py and client/api.py.

The ApiClient is driven against the real app: FastAPI's TestClient is passed
as the HTTP transport with an empty base URL.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from client.api import ApiClient, ApiError, UnauthorizedError
from client.session import Session


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def api(api_client, session: Session) -> ApiClient:
    client, _token, _uid = api_client
    return ApiClient(session, "", http=client)


class TestSession:
    def test_starts_signed_out(self, session: Session) -> None:
        assert session.token is None
        assert not session.is_authenticated()

    def test_set_and_clear(self, session: Session) -> None:
        fired = []
        session.on_invalidate(lambda: fired.append(True))
        session.set_token("abc")
        assert session.is_authenticated()
        session.clear()
        assert session.token is None
        assert fired == [True]


class TestApiClient:
    def test_register_login_and_me(self, api: ApiClient, session: Session) -> None:
        created = api.register("client@b.com", "secret1")
        assert created["email"] == "client@b.com"

        api.login("client@b.com", "secret1")
        assert session.is_authenticated()
        assert api.me()["id"] == created["id"]

    def test_bad_login_does_not_store_token(self, api: ApiClient, session: Session) -> None:
        with pytest.raises(UnauthorizedError):
            api.login("client-nobody@b.com", "secret1")
        assert session.token is None

    def test_product_lifecycle(self, api: ApiClient) -> None:
        api.register("crud-client@b.com", "secret1")
        api.login("crud-client@b.com", "secret1")

        product = api.create_product({"name": "Widget", "sku": "CLIENT-1", "price": "9.90", "stock": 3})
        updated = api.update_product(product["id"], {"stock": 1})
        assert updated["stock"] == 1

        uploaded = api.upload_image(product["id"], "w.png", b"\x89PNG", "image/png")
        assert uploaded["ok"] is True

        assert api.delete_product(product["id"]) is None
        actions = [e["action"] for e in api.list_logs(take=3)]
        assert actions == ["product.delete", "product.upload", "product.update"]

    def test_error_carries_message_and_code(self, api: ApiClient) -> None:
        api.register("dup-client@b.com", "secret1")
        with pytest.raises(ApiError) as exc_info:
            api.register("dup-client@b.com", "secret1")
        assert exc_info.value.status_code == 409
        assert exc_info.value.code == "conflict"
        assert exc_info.value.message == "email already registered"

    def test_401_clears_session_and_fires_callback(self, api: ApiClient, session: Session) -> None:
        fired = []
        session.on_invalidate(lambda: fired.append(True))
        session.set_token("expired-or-forged")

        with pytest.raises(UnauthorizedError):
            api.create_product({"name": "X", "sku": "CLIENT-401", "price": "1.00", "stock": 0})

        assert session.token is None
        assert fired == [True]
        assert all(p["sku"] != "CLIENT-401" for p in api.list_products())

    def test_logout(self, api: ApiClient, session: Session) -> None:
        session.set_token("anything")
        api.logout()
        assert not session.is_authenticated()


class TestTransport:
    def test_bearer_header_sent_when_signed_in(self) -> None:
        http = MagicMock()
        http.request.return_value = MagicMock(status_code=200, content=b"[]", json=lambda: [])
        api = ApiClient(Session("tok"), "http://api.example/", http=http)

        api.list_products()

        args, kwargs = http.request.call_args
        assert args == ("GET", "http://api.example/api/products")
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_no_header_when_signed_out(self) -> None:
        http = MagicMock()
        http.request.return_value = MagicMock(status_code=200, content=b"[]", json=lambda: [])
        ApiClient(Session(), "http://api.example", http=http).list_products()
        assert "Authorization" not in http.request.call_args.kwargs["headers"]

    def test_non_json_error_body(self) -> None:
        def not_json():
            raise ValueError("no JSON")

        http = MagicMock()
        http.request.return_value = MagicMock(status_code=502, content=b"Bad Gateway", text="Bad Gateway", json=not_json)
        with pytest.raises(ApiError) as exc_info:
            ApiClient(Session(), "http://api.example", http=http).list_products()
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Bad Gateway"
