"""Unit tests for auth/service.py and auth/store.py against a private in-memory DB."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from auth.errors import (
    EmailTakenError,
    InvalidCredentialsError,
    PasswordResetDisabledError,
    ValidationFailedError,
)
from auth.models import User
from auth.passwords import verify_password
from auth.service import authenticate_user, login_user, register_user, reset_password
from auth.store import UserStore
from auth.tokens import decode_access_token


@pytest.fixture
def store():
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


# ---------------------------------------------------------------------------
# UserStore
# ---------------------------------------------------------------------------


class TestUserStore:
    def test_create_and_lookup(self, store: UserStore) -> None:
        uid = store.create_user(User(email="a@b.com", hashed_password="h"))
        by_email = store.get_by_email("a@b.com")
        by_id = store.get_by_id(uid)
        assert by_email is not None and by_id is not None
        assert by_email.id == by_id.id == uid
        assert by_id.created_at

    def test_email_is_unique(self, store: UserStore) -> None:
        store.create_user(User(email="a@b.com", hashed_password="h"))
        with pytest.raises(IntegrityError):
            store.create_user(User(email="a@b.com", hashed_password="h2"))
        assert store.count_by_email("a@b.com") == 1

    def test_email_lookup_is_exact(self, store: UserStore) -> None:
        store.create_user(User(email="a@b.com", hashed_password="h"))
        assert store.get_by_email("A@B.com") is None

    def test_get_many_skips_unknown_ids(self, store: UserStore) -> None:
        first = store.create_user(User(email="one@b.com", hashed_password="h"))
        second = store.create_user(User(email="two@b.com", hashed_password="h"))
        found = store.get_many({first, second, 9999})
        assert set(found) == {first, second}
        assert store.get_many(set()) == {}

    def test_update_password(self, store: UserStore) -> None:
        uid = store.create_user(User(email="a@b.com", hashed_password="old"))
        assert store.update_password(uid, "new") is True
        assert store.get_by_id(uid).hashed_password == "new"
        assert store.update_password(9999, "new") is False

    def test_ping(self, store: UserStore) -> None:
        assert store.ping() is True


# ---------------------------------------------------------------------------
# register_user
# ---------------------------------------------------------------------------


class TestRegister:
    def test_register_hashes_password(self, store: UserStore) -> None:
        user = register_user(store, "a@b.com", "secret1")
        assert user.id is not None
        assert user.email == "a@b.com"
        assert user.hashed_password != "secret1"
        assert verify_password("secret1", user.hashed_password)

    def test_duplicate_email_rejected(self, store: UserStore) -> None:
        register_user(store, "a@b.com", "secret1")
        with pytest.raises(EmailTakenError):
            register_user(store, "a@b.com", "other-password")
        assert store.count_by_email("a@b.com") == 1

    @pytest.mark.parametrize(
        "email,password",
        [(None, "secret1"), ("a@b.com", None), ("", "secret1"), ("a@b.com", ""), (None, None)],
    )
    def test_missing_fields_rejected_before_store_access(self, email, password) -> None:
        fake_store = MagicMock(spec=UserStore)
        with pytest.raises(ValidationFailedError):
            register_user(fake_store, email, password)
        assert fake_store.method_calls == []

    def test_concurrent_insert_maps_to_conflict(self) -> None:
        """The existence check passes but the INSERT hits the UNIQUE constraint."""
        fake_store = MagicMock(spec=UserStore)
        fake_store.get_by_email.return_value = None
        fake_store.create_user.side_effect = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        with pytest.raises(EmailTakenError):
            register_user(fake_store, "a@b.com", "secret1")


# ---------------------------------------------------------------------------
# login_user / authenticate_user
# ---------------------------------------------------------------------------


class TestLogin:
    def test_login_returns_token_for_user(self, store: UserStore) -> None:
        user = register_user(store, "a@b.com", "secret1")
        token, logged_in = login_user(store, "a@b.com", "secret1")
        assert logged_in.id == user.id
        assert decode_access_token(token) == str(user.id)

    def test_wrong_password_and_unknown_email_raise_same_error(self, store: UserStore) -> None:
        register_user(store, "a@b.com", "secret1")
        with pytest.raises(InvalidCredentialsError) as wrong_password:
            login_user(store, "a@b.com", "wrong")
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            login_user(store, "nobody@b.com", "secret1")
        assert wrong_password.value.message == unknown_email.value.message
        assert wrong_password.value.code == unknown_email.value.code

    def test_missing_fields_rejected(self, store: UserStore) -> None:
        with pytest.raises(ValidationFailedError):
            login_user(store, "a@b.com", None)

    def test_unknown_email_still_runs_bcrypt(self, store: UserStore) -> None:
        with patch("auth.service.verify_password", return_value=False) as mock_verify:
            assert authenticate_user(store, "nobody@b.com", "secret1") is None
        mock_verify.assert_called_once()

    def test_authenticate_success(self, store: UserStore) -> None:
        register_user(store, "a@b.com", "secret1")
        user = authenticate_user(store, "a@b.com", "secret1")
        assert user is not None
        assert user.email == "a@b.com"


# ---------------------------------------------------------------------------
# reset_password
# ---------------------------------------------------------------------------


class TestResetPassword:
    def test_disabled_by_default(self, store: UserStore) -> None:
        register_user(store, "a@b.com", "secret1")
        with pytest.raises(PasswordResetDisabledError):
            reset_password(store, "a@b.com", "newsecret")
        # Old password still works
        login_user(store, "a@b.com", "secret1")

    def test_enabled_replaces_hash(self, store: UserStore, configured) -> None:
        configured(PASSWORD_RESET_ENABLED="true")
        register_user(store, "a@b.com", "secret1")
        reset_password(store, "a@b.com", "newsecret")
        login_user(store, "a@b.com", "newsecret")
        with pytest.raises(InvalidCredentialsError):
            login_user(store, "a@b.com", "secret1")

    def test_enabled_unknown_email(self, store: UserStore, configured) -> None:
        configured(PASSWORD_RESET_ENABLED="true")
        with pytest.raises(InvalidCredentialsError):
            reset_password(store, "nobody@b.com", "newsecret")

    def test_enabled_missing_fields(self, store: UserStore, configured) -> None:
        configured(PASSWORD_RESET_ENABLED="true")
        with pytest.raises(ValidationFailedError):
            reset_password(store, "a@b.com", "")
