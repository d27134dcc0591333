"""
Credential service for import requests.

Bearer tokens are Fernet tokens (AES-128-CBC with HMAC) sealing a small
JSON claims object. Fernet embeds the issue timestamp, so expiry is checked
on decryption against the configured TTL.
"""

import json
from dataclasses import asdict, dataclass
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from staffhub.config import get_settings


class CredentialError(Exception):
    """Base exception for credential errors."""

    pass


class CredentialConfigError(CredentialError):
    """Raised when the token key is invalid or missing."""

    pass


class InvalidCredentialError(CredentialError):
    """Raised when a token is expired, tampered with or malformed."""

    pass


@dataclass(frozen=True)
class CredentialClaims:
    """Identity carried by a verified token."""

    username: str
    role: str
    user_id: str | None = None


class CredentialService:
    """
    Issues and verifies signed, time-limited bearer tokens.
    """

    def __init__(self, token_key: str, ttl_seconds: int | None = None):
        """
        Initialize the credential service.

        Args:
            token_key: Base64-encoded Fernet key (32 bytes when decoded)
            ttl_seconds: Maximum token age accepted by `verify`

        Raises:
            CredentialConfigError: If the key is invalid or missing
        """
        if not token_key:
            raise CredentialConfigError("Token key is required")

        try:
            self._fernet = Fernet(token_key.encode())
        except (ValueError, TypeError) as e:
            raise CredentialConfigError(f"Invalid token key: {e}")

        self.ttl_seconds = ttl_seconds

    def issue(self, username: str, role: str, user_id: str | None = None) -> str:
        """
        Issue a token for a user.

        Returns:
            URL-safe token string
        """
        claims = CredentialClaims(username=username, role=role.upper(), user_id=user_id)
        return self._fernet.encrypt(json.dumps(asdict(claims)).encode()).decode()

    def verify(self, token: str) -> CredentialClaims:
        """
        Verify a token and return its claims.

        Raises:
            InvalidCredentialError: If the token is expired, tampered with,
                or does not carry a username and role
        """
        if not token:
            raise InvalidCredentialError("Missing credential")
        try:
            raw = self._fernet.decrypt(token.encode(), ttl=self.ttl_seconds)
        except InvalidToken:
            raise InvalidCredentialError("Invalid or expired credential")

        try:
            data = json.loads(raw.decode())
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidCredentialError(f"Malformed credential claims: {e}")

        if not isinstance(data, dict) or not data.get("username") or not data.get("role"):
            raise InvalidCredentialError("Credential claims lack username or role")

        return CredentialClaims(
            username=str(data["username"]),
            role=str(data["role"]).upper(),
            user_id=data.get("user_id"),
        )

    @staticmethod
    def bearer_token(authorization: str | None) -> str | None:
        """Extract the token from an `Authorization: Bearer <token>` header."""
        if not authorization:
            return None
        scheme, _, token = authorization.strip().partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return token.strip()

    @staticmethod
    def generate_key() -> str:
        """
        Generate a new Fernet key.

        Returns:
            Base64-encoded key string suitable for TOKEN_KEY env var
        """
        return Fernet.generate_key().decode()


@lru_cache
def get_credential_service() -> CredentialService:
    """
    Get a cached credential service instance.

    Raises:
        CredentialConfigError: If the token key is not configured
    """
    settings = get_settings()
    if not settings.token_configured:
        raise CredentialConfigError("Token key not configured. Set TOKEN_KEY in .env")
    return CredentialService(settings.token_key, settings.token_ttl_seconds)
