"""Tests for password hashing and JWT helpers."""

from datetime import timedelta

import jwt
import pytest

from utils.security import (
    TokenError,
    create_token,
    decode_token,
    generate_jti,
    hash_password,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("secret")
        assert hashed != "secret"
        assert hashed.startswith("$argon2")
        assert verify_password("secret", hashed) is True

    def test_wrong_password_is_rejected(self):
        assert verify_password("nope", hash_password("secret")) is False

    def test_empty_or_garbage_inputs_are_rejected(self):
        assert verify_password("", hash_password("secret")) is False
        assert verify_password(None, hash_password("secret")) is False
        assert verify_password("secret", "not-a-hash") is False


class TestTokens:
    def test_round_trip_carries_claims(self):
        token = create_token(
            subject="user-1",
            token_type="access",
            secret="s3cret",
            expires=timedelta(minutes=5),
            claims={"username": "abc"},
        )
        decoded = decode_token(token, "s3cret", expected_type="access")
        assert decoded["sub"] == "user-1"
        assert decoded["type"] == "access"
        assert decoded["username"] == "abc"
        assert decoded["jti"]

    def test_claims_cannot_override_registered_ones(self):
        token = create_token("user-1", "refresh", "k", timedelta(minutes=1), claims={"sub": "other", "type": "access"})
        decoded = decode_token(token, "k", expected_type="refresh")
        assert decoded["sub"] == "user-1"

    def test_two_tokens_issued_back_to_back_differ(self):
        a = create_token("user-1", "refresh", "k", timedelta(days=1))
        b = create_token("user-1", "refresh", "k", timedelta(days=1))
        assert a != b

    def test_expired_token(self):
        token = create_token("user-1", "access", "k", timedelta(seconds=-10))
        with pytest.raises(TokenError, match="expired"):
            decode_token(token, "k")

    def test_wrong_secret(self):
        token = create_token("user-1", "access", "k", timedelta(minutes=1))
        with pytest.raises(TokenError, match="Invalid token"):
            decode_token(token, "other")

    def test_wrong_type(self):
        token = create_token("user-1", "access", "k", timedelta(minutes=1))
        with pytest.raises(TokenError, match="Wrong token type"):
            decode_token(token, "k", expected_type="refresh")

    def test_token_without_exp_is_rejected(self):
        token = jwt.encode({"sub": "user-1", "type": "access"}, "k", algorithm="HS256")
        with pytest.raises(TokenError):
            decode_token(token, "k")

    def test_unknown_token_type(self):
        with pytest.raises(ValueError):
            create_token("user-1", "id", "k", timedelta(minutes=1))

    def test_jti_is_unique(self):
        assert len({generate_jti() for _ in range(50)}) == 50
