"""Tests for session token issuing and verification."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from modules.auth.exceptions import InvalidTokenError
from modules.auth.tokens import TokenIssuer

from tests.conftest import TEST_JWT_SECRET
from tests.fakes import FakeClock


class TestTokenIssuer:
    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def issuer(self, clock):
        return TokenIssuer(TEST_JWT_SECRET, clock=clock)

    def test_issue_and_verify(self, issuer):
        """A freshly issued token should verify with its claims."""
        token = issuer.issue("user-123", "test@example.com", "Test User")
        payload = issuer.verify(token)
        assert payload.sub == "user-123"
        assert payload.email == "test@example.com"
        assert payload.name == "Test User"

    def test_expiry_is_thirty_days(self, issuer, clock):
        """exp should be iat plus the 30 day default TTL."""
        payload = issuer.verify(issuer.issue("user-123", "test@example.com"))
        assert payload.iat == int(clock().timestamp())
        assert payload.exp - payload.iat == int(timedelta(days=30).total_seconds())

    def test_valid_just_before_expiry(self, issuer, clock):
        """A token should still verify a day before it expires."""
        token = issuer.issue("user-123", "test@example.com")
        clock.advance(days=29)
        assert issuer.verify(token).sub == "user-123"

    def test_expired_after_thirty_one_days(self, issuer, clock):
        """A token verified at T + 31 days should be rejected."""
        token = issuer.issue("user-123", "test@example.com")
        clock.advance(days=31)
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_expired_exactly_at_exp(self, issuer, clock):
        """exp is exclusive: a token is dead at its expiry second."""
        token = issuer.issue("user-123", "test@example.com")
        clock.advance(days=30)
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_wrong_secret(self, issuer):
        """A token signed with another secret should be rejected."""
        other = TokenIssuer("another-secret-key-of-sufficient-length")
        token = other.issue("user-123", "test@example.com")
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_malformed_token(self, issuer):
        """Garbage should be rejected with the same error type."""
        with pytest.raises(InvalidTokenError):
            issuer.verify("not-a-jwt-at-all")

    def test_tampered_payload(self, issuer):
        """Changing any character of the token should invalidate it."""
        token = issuer.issue("user-123", "test@example.com")
        header, payload, signature = token.split(".")
        flipped = signature[:-2] + ("A" if signature[-2] != "A" else "B") + signature[-1]
        with pytest.raises(InvalidTokenError):
            issuer.verify(".".join([header, payload, flipped]))

    def test_missing_claims(self, issuer, clock):
        """A correctly signed token without required claims is invalid."""
        token = jwt.encode(
            {"sub": "user-123", "iat": int(clock().timestamp())},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_empty_secret_rejected(self):
        """An issuer cannot be built without a secret."""
        with pytest.raises(ValueError):
            TokenIssuer("")

    def test_error_message_does_not_leak_cause(self, issuer, clock):
        """Expired and forged tokens should produce the same message."""
        token = issuer.issue("user-123", "test@example.com")
        clock.advance(days=31)
        with pytest.raises(InvalidTokenError) as expired:
            issuer.verify(token)
        with pytest.raises(InvalidTokenError) as forged:
            issuer.verify("x" * 40)
        assert expired.value.message == forged.value.message
        assert expired.value.code == "INVALID_TOKEN"

    def test_clock_ahead_of_wall_clock(self):
        """Verification depends only on the injected clock, not the host's."""
        clock = FakeClock(datetime.now(timezone.utc) + timedelta(days=2))
        issuer = TokenIssuer(TEST_JWT_SECRET, clock=clock)

        token = issuer.issue("user-123", "test@example.com")

        assert issuer.verify(token).sub == "user-123"
        clock.advance(days=29)
        assert issuer.verify(token).sub == "user-123"
