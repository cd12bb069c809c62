"""Unit tests for auth/passwords.py -- bcrypt hashing and verification."""

from __future__ import annotations

import bcrypt

from auth.passwords import BCRYPT_ROUNDS, DUMMY_HASH, hash_password, verify_password


class TestHashPassword:
    def test_hash_is_not_plaintext(self) -> None:
        hashed = hash_password("secret1")
        assert hashed != "secret1"
        assert hashed.startswith("$2")

    def test_same_input_gives_different_hashes(self) -> None:
        """Random salt: two hashes of one password must differ but both verify."""
        first = hash_password("secret1")
        second = hash_password("secret1")
        assert first != second
        assert verify_password("secret1", first)
        assert verify_password("secret1", second)

    def test_cost_factor_is_ten(self) -> None:
        hashed = hash_password("secret1")
        # bcrypt hash layout: $2b$<cost>$<salt+digest>
        assert hashed.split("$")[2] == f"{BCRYPT_ROUNDS:02d}"
        assert BCRYPT_ROUNDS == 10


class TestVerifyPassword:
    def test_correct_password(self) -> None:
        assert verify_password("secret1", hash_password("secret1")) is True

    def test_wrong_password(self) -> None:
        assert verify_password("secret2", hash_password("secret1")) is False

    def test_malformed_hash_returns_false(self) -> None:
        """A corrupt stored hash must yield False, never an exception."""
        assert verify_password("secret1", "not-a-bcrypt-hash") is False
        assert verify_password("secret1", "") is False

    def test_long_password_round_trips(self) -> None:
        """Passwords over bcrypt's 72-byte input limit still hash and verify."""
        long_password = "p" * 200
        hashed = hash_password(long_password)
        assert verify_password(long_password, hashed) is True

    def test_unicode_password(self) -> None:
        hashed = hash_password("sénha-ção-密码")
        assert verify_password("sénha-ção-密码", hashed) is True
        assert verify_password("senha-cao-密码", hashed) is False

    def test_dummy_hash_is_a_real_bcrypt_hash(self) -> None:
        """The timing-equalization hash must be verifiable so bcrypt does real work."""
        assert bcrypt.checkpw(b"stocktrack_timing_dummy", DUMMY_HASH.encode("utf-8"))
