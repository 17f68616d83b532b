"""Identity gate for faucet endpoints."""

from multifaucet.auth.identity import (
    AuthenticationError,
    IdentityVerifier,
    SigningKeyCache,
    extract_user_id,
)

__all__ = [
    "AuthenticationError",
    "IdentityVerifier",
    "SigningKeyCache",
    "extract_user_id",
]
