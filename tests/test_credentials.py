"""
Tests for CredentialService.
"""

import time

import pytest
from cryptography.fernet import Fernet

from staffhub.services.credentials import (
    CredentialClaims,
    CredentialConfigError,
    CredentialService,
    InvalidCredentialError,
    get_credential_service,
)


@pytest.fixture
def valid_key():
    """Generate a valid Fernet key for testing."""
    return Fernet.generate_key().decode()


@pytest.fixture
def service(valid_key):
    return CredentialService(valid_key, ttl_seconds=60)


class TestCredentialServiceInit:
    """Test CredentialService initialization."""

    def test_init_with_empty_key_raises_error(self):
        """Test that empty key raises CredentialConfigError."""
        with pytest.raises(CredentialConfigError, match="Token key is required"):
            CredentialService("")

    def test_init_with_invalid_key_raises_error(self):
        """Test that invalid key raises CredentialConfigError."""
        with pytest.raises(CredentialConfigError, match="Invalid token key"):
            CredentialService("not-a-valid-fernet-key")


class TestIssueVerify:
    """Test token issue and verification."""

    def test_verify_returns_claims(self, service):
        """Test issue/verify roundtrip."""
        token = service.issue("anna", "manager", user_id="42")
        assert service.verify(token) == CredentialClaims(username="anna", role="MANAGER", user_id="42")

    def test_tampered_token_rejected(self, service):
        """Test that a modified token does not verify."""
        token = service.issue("anna", "ADMIN")
        tampered = token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB")
        with pytest.raises(InvalidCredentialError):
            service.verify(tampered)

    def test_token_from_other_key_rejected(self, service):
        """Test that tokens are bound to the key."""
        other = CredentialService(Fernet.generate_key().decode())
        with pytest.raises(InvalidCredentialError):
            service.verify(other.issue("anna", "ADMIN"))

    def test_expired_token_rejected(self, valid_key):
        """Test that tokens older than the TTL are rejected."""
        issuer = CredentialService(valid_key)
        token = issuer.issue("anna", "ADMIN")
        verifier = CredentialService(valid_key, ttl_seconds=1)
        time.sleep(2)
        with pytest.raises(InvalidCredentialError, match="expired"):
            verifier.verify(token)

    def test_claims_without_role_rejected(self, valid_key, service):
        """Test that a sealed payload without role is refused."""
        token = Fernet(valid_key.encode()).encrypt(b'{"username": "anna"}').decode()
        with pytest.raises(InvalidCredentialError, match="username or role"):
            service.verify(token)

    def test_non_json_claims_rejected(self, valid_key, service):
        """Test that a sealed non-JSON payload is refused."""
        token = Fernet(valid_key.encode()).encrypt(b"plain text").decode()
        with pytest.raises(InvalidCredentialError, match="Malformed"):
            service.verify(token)


class TestBearerToken:
    """Test Authorization header parsing."""

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc", "abc"),
            ("bearer   abc  ", "abc"),
            ("Basic abc", None),
            ("Bearer", None),
            ("", None),
            (None, None),
        ],
    )
    def test_bearer_token(self, header, expected):
        """Test extraction of the bearer token."""
        assert CredentialService.bearer_token(header) == expected


class TestGetCredentialService:
    """Test the cached factory."""

    def test_uses_configured_key(self):
        """Test that the factory builds a working service from settings."""
        service = get_credential_service()
        assert service.verify(service.issue("anna", "ADMIN")).username == "anna"
