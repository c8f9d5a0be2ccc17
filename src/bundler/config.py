"""
Configuration management for the bundle relay client.

Supports configuration via environment variables and .env files.
"""

from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_RELAY_URL = "https://relay.flashbots.net"


class RelayConfig(BaseSettings):
    """
    Configuration settings for relay clients.

    All settings can be configured via environment variables with the BUNDLER_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="BUNDLER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Signing identity
    signing_key: Optional[SecretStr] = Field(
        default=None,
        description="Hex-encoded private key used to authenticate relay requests"
    )

    # Relay endpoints
    relay_name: str = Field(
        default="flashbots",
        description="Label used to identify the relay in logs and batch responses"
    )
    relay_url: str = Field(
        default=DEFAULT_RELAY_URL,
        description="Relay endpoint that bundles and stats queries are sent to"
    )
    simulation_url: Optional[str] = Field(
        default=None,
        description="Endpoint used for eth_callBundle (simulation disabled when unset)"
    )

    # Transport settings
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout applied to every relay HTTP request"
    )
    max_connections: int = Field(
        default=10,
        ge=1,
        description="Maximum pooled connections per relay client"
    )

    # Batch settings
    batch_max_workers: int = Field(
        default=1,
        ge=1,
        description="Threads used to fan a bundle out to multiple relays (1 = sequential)"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )

    @property
    def simulation_endpoint(self) -> str:
        """Get the simulation endpoint, empty when simulation is disabled."""
        return self.simulation_url or ""


# Global config instance
_config: Optional[RelayConfig] = None


def get_config() -> RelayConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = RelayConfig()
    return _config


def set_config(config: RelayConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
