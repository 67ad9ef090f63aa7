"""Application configuration using pydantic-settings.

Holds the bridge/API endpoints, the well-known token ids used to pick a
bridge branch, and the lifetime of temporary deposit addresses.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NATIVE_TOKEN_ID = "0000000000000000000000000000000000000000000000000000000000000004"
ETHEREUM_TOKEN_ID = "ffd8d42dc40a8d166ea4848baf8b5f6e9fe0e9c30d60062eb7d44a8df9e00854"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PRIVTOKEN_",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")
    log_level: str = Field(default="INFO", description="Log level when debug is off")

    # ======================
    # Collaborators
    # ======================
    provider: str = Field(
        default="dryrun", description="Service provider: dryrun or http"
    )
    bridge_api_url: str = Field(
        default="https://api-service.incognito.org",
        description="Bridge API base URL (deposit addresses, history)",
    )
    api_url: str = Field(
        default="https://api-coinservice.incognito.org",
        description="Coin service base URL (exchange rates)",
    )
    http_timeout: float = Field(default=30.0, description="HTTP request timeout in seconds")

    # ======================
    # Tokens
    # ======================
    native_token_id: str = Field(default=NATIVE_TOKEN_ID, description="Native coin token id")
    ethereum_token_id: str = Field(
        default=ETHEREUM_TOKEN_ID, description="Token id of bridged Ethereum"
    )

    # ======================
    # Bridge
    # ======================
    deposit_address_ttl_minutes: int = Field(
        default=60, gt=0, description="Lifetime of a temporary deposit address"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def deposit_address_ttl(self) -> timedelta:
        """Lifetime of a generated deposit address."""
        return timedelta(minutes=self.deposit_address_ttl_minutes)

    def get_safe_dict(self) -> dict:
        """Return settings dict suitable for logging."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "log_level": self.log_level,
            "provider": self.provider,
            "bridge_api_url": self.bridge_api_url,
            "api_url": self.api_url,
            "http_timeout": self.http_timeout,
            "ethereum_token_id": self.ethereum_token_id,
            "deposit_address_ttl_minutes": self.deposit_address_ttl_minutes,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
