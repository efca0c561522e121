"""Connection and polling settings for the Portainer client.

Provides centralized configuration using Pydantic BaseSettings with
environment variable (and ``.env``) support.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_SETTLE_DELAY_MS,
    ENV_PORTAINER_API_KEY,
    ENV_PORTAINER_URL,
)
from .exceptions import ConfigurationError


class PortainerSettings(BaseSettings):
    """Portainer client configuration."""

    url: str = Field("", alias="PORTAINER_URL", description="Portainer base URL")

    api_key: str = Field(
        "", alias="PORTAINER_API_KEY", repr=False, description="Portainer API access token"
    )

    environment_id: int | None = Field(
        None,
        alias="PORTAINER_ENVIRONMENT_ID",
        description="Default environment; resolved from the first available one when unset",
    )

    http_timeout: float = Field(
        DEFAULT_HTTP_TIMEOUT_SECONDS,
        gt=0,
        alias="PORTAINER_HTTP_TIMEOUT",
        description="Per-request HTTP timeout in seconds",
    )

    verify_ssl: bool = Field(
        True, alias="PORTAINER_VERIFY_SSL", description="Verify the server TLS certificate"
    )

    poll_interval_ms: int = Field(
        DEFAULT_POLL_INTERVAL_MS,
        ge=0,
        alias="PORTAINER_POLL_INTERVAL_MS",
        description="Delay between verification lookups in milliseconds",
    )

    settle_delay_ms: int = Field(
        DEFAULT_SETTLE_DELAY_MS,
        ge=0,
        alias="PORTAINER_SETTLE_DELAY_MS",
        description="Wait after a creation request before verification starts",
    )

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    def ensure_complete(self) -> None:
        """Raise ``ConfigurationError`` unless both URL and API key are set."""
        missing = []
        if not self.url:
            missing.append(ENV_PORTAINER_URL)
        if not self.api_key:
            missing.append(ENV_PORTAINER_API_KEY)
        if missing:
            raise ConfigurationError(
                f"{' and '.join(missing)} must be defined in environment variables or config"
            )
