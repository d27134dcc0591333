"""
Application services for StaffHub.
"""

from staffhub.services.credentials import (
    CredentialClaims,
    CredentialConfigError,
    CredentialError,
    CredentialService,
    InvalidCredentialError,
    get_credential_service,
)

__all__ = [
    # Credentials
    "CredentialClaims",
    "CredentialConfigError",
    "CredentialError",
    "CredentialService",
    "InvalidCredentialError",
    "get_credential_service",
]
