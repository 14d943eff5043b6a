"""
Unit Tests for Security Module
Tests for: password hashing, JWT tokens, reset tokens
"""
import pytest
from datetime import timedelta
from jose import jwt

from unirecords.core.config import settings
from unirecords.core.exceptions import InvalidTokenError, TokenExpiredError
from unirecords.core.security import (
    create_access_token,
    decode_token,
    generate_reset_token,
    generate_temporary_password,
    get_password_hash,
    hash_reset_token,
    verify_password,
)


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_is_not_plaintext(self):
        hashed = get_password_hash("testpassword123")

        assert hashed != "testpassword123"
        assert hashed.startswith("$2")

    def test_hash_different_each_time(self):
        """Bcrypt salts every hash"""
        assert get_password_hash("testpassword123") != get_password_hash("testpassword123")

    def test_verify_password_correct(self):
        hashed = get_password_hash("testpassword123")

        assert verify_password("testpassword123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("testpassword123")

        assert verify_password("wrongpassword", hashed) is False

    def test_verify_against_empty_hash(self):
        assert verify_password("testpassword123", "") is False

    def test_long_password_truncated_to_bcrypt_limit(self):
        long_password = "a" * 100
        hashed = get_password_hash(long_password)

        assert verify_password(long_password, hashed) is True


class TestAccessTokens:
    """Test JWT creation and decoding"""

    def test_round_trip_claims(self):
        token = create_access_token({"sub": "user-1", "role": "admin"})

        payload = decode_token(token)

        assert payload["sub"] == "user-1"
        assert payload["role"] == "admin"
        assert payload["type"] == "access"

    def test_expired_token(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(TokenExpiredError):
            decode_token(token)

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "user-1"}, "another-secret", algorithm=settings.JWT_ALGORITHM)

        with pytest.raises(InvalidTokenError):
            decode_token(token)

    def test_garbage_token(self):
        with pytest.raises(InvalidTokenError):
            decode_token("not.a.token")


class TestResetTokens:

    def test_only_hash_is_returned_for_storage(self):
        token, token_hash = generate_reset_token()

        assert token != token_hash
        assert hash_reset_token(token) == token_hash
        assert len(token_hash) == 64

    def test_tokens_are_unique(self):
        assert generate_reset_token()[0] != generate_reset_token()[0]

    def test_temporary_password_length(self):
        assert len(generate_temporary_password()) == 16
