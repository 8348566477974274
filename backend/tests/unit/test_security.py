"""Unit tests for security utilities."""

from datetime import timedelta

from pressroom.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    verify_password,
)


class TestPasswordHashing:
    """Tests for password hashing."""

    def test_hash_password(self):
        """Test password hashing creates different hash each time."""
        password = "mysecretpassword"
        hash1 = get_password_hash(password)
        hash2 = get_password_hash(password)

        assert hash1 != password
        assert hash1 != hash2  # Different salts

    def test_verify_password_correct(self):
        hashed = get_password_hash("mysecretpassword")

        assert verify_password("mysecretpassword", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("mysecretpassword")

        assert verify_password("wrongpassword", hashed) is False


class TestTokens:
    """Tests for JWT creation and decoding."""

    def test_round_trip_claims(self):
        payload = decode_token(create_access_token(subject=42))

        assert payload is not None
        assert payload["sub"] == "42"
        assert payload["type"] == "access"

    def test_expired_token_is_rejected(self):
        token = create_access_token(subject=1, expires_delta=timedelta(seconds=-5))

        assert decode_token(token) is None

    def test_garbage_token_is_rejected(self):
        assert decode_token("garbage.token.value") is None
