"""Application configuration using pydantic-settings.

Chain facts live in ``multifaucet.chains``; this module only carries
credentials, endpoints and runtime knobs.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Custody service
    # ======================
    privy_app_id: str = Field(default="", description="Custody/identity provider app id")
    privy_app_secret: str = Field(default="", description="Custody provider app secret")
    privy_api_url: str = Field(
        default="https://api.privy.io", description="Custody REST API base URL"
    )
    ethereum_wallet_id: str = Field(default="", description="Custody wallet id (EVM family)")
    solana_wallet_id: str = Field(default="", description="Custody wallet id (Solana family)")
    custody_timeout: float = Field(default=30.0, description="Custody API timeout (seconds)")

    # ======================
    # Identity
    # ======================
    jwks_url: Optional[str] = Field(
        default=None, description="JWKS URL override (derived from app id if unset)"
    )
    jwt_issuer: str = Field(default="privy.io", description="Expected token issuer")
    jwks_cache_ttl: float = Field(default=3600.0, description="Signing key cache TTL (seconds)")
    jwks_refresh_cooldown: float = Field(
        default=30.0, description="Minimum seconds between unknown-key refetches"
    )

    # ======================
    # Chain RPC / polling
    # ======================
    rpc_timeout: float = Field(default=10.0, description="JSON-RPC request timeout (seconds)")
    poll_interval: float = Field(default=2.0, description="Status poll interval (seconds)")
    poll_max_attempts: int = Field(default=60, description="Maximum status poll attempts")

    # ======================
    # Database
    # ======================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/multifaucet.db",
        description="Database connection URL",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")
    cors_origins: str = Field(
        default="", description="Comma-separated list of allowed CORS origins"
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def allowed_origins(self) -> list[str]:
        """Parse CORS origins into a list."""
        if not self.cors_origins:
            return ["*"] if self.debug else []
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def resolved_jwks_url(self) -> str:
        """JWKS endpoint for the identity provider."""
        if self.jwks_url:
            return self.jwks_url
        return f"https://auth.privy.io/api/v1/apps/{self.privy_app_id}/jwks.json"

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "database_url": self._redact_url(self.database_url),
            "custody": {
                "api_url": self.privy_api_url,
                "app_id": self.privy_app_id or "(not set)",
                "app_secret": "***" if self.privy_app_secret else "(not set)",
                "ethereum_wallet_id": self.ethereum_wallet_id or "(not set)",
                "solana_wallet_id": self.solana_wallet_id or "(not set)",
            },
            "identity": {
                "jwks_url": self.resolved_jwks_url,
                "issuer": self.jwt_issuer,
                "cache_ttl": self.jwks_cache_ttl,
                "refresh_cooldown": self.jwks_refresh_cooldown,
            },
            "polling": {
                "interval": self.poll_interval,
                "max_attempts": self.poll_max_attempts,
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact sensitive parts of database URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
