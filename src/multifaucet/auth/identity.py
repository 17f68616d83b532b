"""Bearer-token verification against the identity provider's signing keys.

Tokens are ES256 JWTs issued by the identity provider. Its public keys are
published as a JWKS document, fetched lazily and cached for a bounded time.
An unknown key id refetches the document at most once per cooldown window.
"""

import asyncio
import logging
import time
from typing import Optional

import httpx
import jwt

from multifaucet.config import Settings

logger = logging.getLogger(__name__)

USER_ID_PREFIX = "did:privy:"


class AuthenticationError(Exception):
    """Bearer credential is missing, malformed, invalid or expired."""


def extract_user_id(subject: str) -> str:
    """Reduce a "did:privy:<id>" subject to "<id>"."""
    if subject.startswith(USER_ID_PREFIX):
        return subject[len(USER_ID_PREFIX):]
    return subject


class SigningKeyCache:
    """Lazily populated, time-bounded cache of the provider's signing keys."""

    def __init__(
        self,
        jwks_url: str,
        ttl: float = 3600.0,
        refresh_cooldown: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.jwks_url = jwks_url
        self.ttl = ttl
        self.refresh_cooldown = refresh_cooldown
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._keys: dict[str, jwt.PyJWK] = {}
        self._fetched_at: Optional[float] = None
        self._attempted_at: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def is_stale(self) -> bool:
        if self._fetched_at is None:
            return True
        return time.monotonic() - self._fetched_at >= self.ttl

    @property
    def in_cooldown(self) -> bool:
        if self._attempted_at is None:
            return False
        return time.monotonic() - self._attempted_at < self.refresh_cooldown

    async def refresh(self) -> None:
        """Fetch the key set, replacing the cached keys."""
        self._attempted_at = time.monotonic()
        try:
            response = await self._client.get(self.jwks_url)
            response.raise_for_status()
            key_set = jwt.PyJWKSet.from_dict(response.json())
        except (httpx.HTTPError, ValueError, jwt.PyJWKSetError) as e:
            raise AuthenticationError(f"Unable to load signing keys: {e}") from e

        self._keys = {key.key_id: key for key in key_set.keys if key.key_id}
        self._fetched_at = time.monotonic()
        logger.info("Loaded %d signing keys from %s", len(self._keys), self.jwks_url)

    async def get_key(self, key_id: str) -> jwt.PyJWK:
        """Get a signing key by id, refreshing when stale or unknown."""
        async with self._lock:
            if self.is_stale:
                await self.refresh()
            elif key_id not in self._keys and not self.in_cooldown:
                logger.info("Unknown signing key %s, refetching key set", key_id)
                await self.refresh()

        key = self._keys.get(key_id)
        if key is None:
            raise AuthenticationError(f"Unknown signing key: {key_id}")
        return key

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class IdentityVerifier:
    """Verifies bearer tokens and yields the authenticated user id."""

    algorithms = ["ES256"]

    def __init__(self, keys: SigningKeyCache, audience: str, issuer: str = "privy.io"):
        self.keys = keys
        self.audience = audience
        self.issuer = issuer

    @classmethod
    def from_settings(cls, settings: Settings) -> "IdentityVerifier":
        keys = SigningKeyCache(
            settings.resolved_jwks_url,
            ttl=settings.jwks_cache_ttl,
            refresh_cooldown=settings.jwks_refresh_cooldown,
        )
        return cls(keys, audience=settings.privy_app_id, issuer=settings.jwt_issuer)

    async def verify(self, token: str) -> str:
        """Verify a token and return the user id from its subject.

        Raises:
            AuthenticationError: If the token cannot be verified
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as e:
            raise AuthenticationError(f"Malformed token: {e}") from e

        key_id = header.get("kid")
        if not key_id:
            raise AuthenticationError("Token has no key id")

        key = await self.keys.get_key(key_id)

        try:
            payload = jwt.decode(
                token,
                key.key,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp", "sub"]},
            )
        except jwt.PyJWTError as e:
            raise AuthenticationError(f"Token verification failed: {e}") from e

        return extract_user_id(payload["sub"])

    async def aclose(self) -> None:
        await self.keys.aclose()
