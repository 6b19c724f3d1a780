"""
Notekeeper Backend: Credential Service Unit Tests
==================================================

What we test:
    ✅ Password hashes are salted and verify only the right password
    ✅ Malformed input never raises from verify_password
    ✅ Tokens round-trip to the user id and expire after 720 hours
    ✅ Missing, tampered, foreign-secret and expired tokens map to distinct errors
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from notekeeper.exceptions import (
    ConfigurationError,
    ExpiredTokenError,
    InvalidTokenError,
    MissingTokenError,
    ValidationError,
)
from notekeeper.services.credential_service import CredentialService


class TestPasswords:

    def test_hash_is_salted_and_not_plaintext(self, credentials):
        first = credentials.hash_password("pw")
        second = credentials.hash_password("pw")
        assert first != "pw"
        assert first != second
        assert first.startswith("$2")

    def test_verify_accepts_correct_password(self, credentials):
        hashed = credentials.hash_password("correct horse")
        assert credentials.verify_password("correct horse", hashed) is True

    def test_verify_rejects_wrong_password(self, credentials):
        hashed = credentials.hash_password("correct horse")
        assert credentials.verify_password("battery staple", hashed) is False

    def test_verify_handles_missing_and_malformed_input(self, credentials):
        assert credentials.verify_password(None, "whatever") is False
        assert credentials.verify_password("pw", None) is False
        assert credentials.verify_password("pw", "not-a-bcrypt-hash") is False

    def test_hash_rejects_empty_password(self, credentials):
        with pytest.raises(ValidationError):
            credentials.hash_password("")

    def test_dummy_verify_never_matches(self, credentials):
        assert credentials.dummy_verify() is False


class TestTokens:

    def test_round_trip_returns_user_id(self, credentials):
        user_id = uuid.uuid4()
        issued = credentials.issue_token(user_id)
        assert credentials.verify_token(issued.token) == user_id

    def test_default_expiry_is_720_hours(self, credentials):
        before = datetime.now(timezone.utc)
        issued = credentials.issue_token(uuid.uuid4())
        lifetime = issued.expires_at - before
        assert timedelta(hours=719, minutes=59) <= lifetime <= timedelta(hours=720, seconds=1)

        claims = jwt.get_unverified_claims(issued.token)
        assert claims["exp"] - claims["iat"] == 720 * 3600

    def test_missing_token(self, credentials):
        with pytest.raises(MissingTokenError):
            credentials.verify_token(None)
        with pytest.raises(MissingTokenError):
            credentials.verify_token("")

    def test_expired_token(self, credentials):
        issued = credentials.issue_token(uuid.uuid4(), expires_delta=timedelta(hours=-1))
        with pytest.raises(ExpiredTokenError):
            credentials.verify_token(issued.token)

    def test_expired_is_a_kind_of_invalid(self):
        assert issubclass(ExpiredTokenError, InvalidTokenError)

    def test_tampered_signature(self, credentials):
        token = credentials.issue_token(uuid.uuid4()).token
        header, payload, signature = token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
        with pytest.raises(InvalidTokenError):
            credentials.verify_token(f"{header}.{payload}.{flipped}")

    def test_token_from_other_secret(self, credentials):
        other = CredentialService(secret="some-other-secret", bcrypt_rounds=4)
        token = other.issue_token(uuid.uuid4()).token
        with pytest.raises(InvalidTokenError) as exc_info:
            credentials.verify_token(token)
        assert not isinstance(exc_info.value, ExpiredTokenError)

    def test_garbage_token(self, credentials):
        with pytest.raises(InvalidTokenError):
            credentials.verify_token("not.a.jwt")

    def test_subject_must_be_a_user_id(self, credentials):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {"sub": "admin", "iat": now, "exp": now + 60},
            "unit-test-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            credentials.verify_token(token)

    def test_missing_secret_refuses_to_sign(self):
        service = CredentialService(secret="", bcrypt_rounds=4)
        with pytest.raises(ConfigurationError):
            service.issue_token(uuid.uuid4())
