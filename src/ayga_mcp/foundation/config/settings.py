"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files and nested configuration.

The connection settings keep the unprefixed variable names used by existing
deployments (``API_URL``, ``REDIS_API_KEY``, ``DYNAMIC_PARSERS``, ``DEBUG``);
tuning knobs live under the ``AYGA_`` prefix.

Example:
    >>> from ayga_mcp.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.registry.cache_ttl
    300.0
    >>> settings.poll.interval
    2.0

    # Or with environment variables:
    # REDIS_API_KEY=ayga_live_xxx
    # AYGA_REGISTRY_CACHE_TTL=60
    # AYGA_LOG_FORMAT=json
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import (
    AliasChoices,
    Field,
    PositiveFloat,
    SecretStr,
    computed_field,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://redis.ayga.tech"

# Keys issued by the current key bot carry this prefix; older keys still work.
VALID_KEY_PREFIX = "ayga_live_"


class RegistrySettings(BaseSettings):
    """Parser registry cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AYGA_REGISTRY_",
        extra="ignore",
    )

    cache_ttl: PositiveFloat = Field(default=300.0, description="Parser/options cache TTL in seconds")


class PollSettings(BaseSettings):
    """Task result polling configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AYGA_POLL_",
        extra="ignore",
    )

    interval: PositiveFloat = Field(default=2.0, description="Delay between not-ready polls")
    default_timeout: PositiveFloat = Field(
        default=60.0,
        description="Wait budget for parsers the control-plane gives no timeout",
    )
    rate_limit_delay: PositiveFloat = Field(
        default=5.0,
        description="Delay after a 429 without a usable Retry-After header",
    )
    queue_name: str = Field(default="aparser_redis_api", min_length=1)


class HttpSettings(BaseSettings):
    """HTTP client default configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AYGA_HTTP_",
        extra="ignore",
    )

    timeout: PositiveFloat = Field(default=30.0, description="Per-request timeout")
    user_agent: str = "ayga-mcp/3.2.0"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AYGA_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class AygaSettings(BaseSettings):
    """Root settings for the ayga MCP server.

    Example environment variables:
        API_URL=https://redis.ayga.tech
        REDIS_API_KEY=ayga_live_xxx
        DYNAMIC_PARSERS=false
        DEBUG=true
        AYGA_POLL_INTERVAL=1.5
        AYGA_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
        validate_default=True,
    )

    api_url: str = Field(
        default=DEFAULT_API_URL,
        validation_alias=AliasChoices("api_url", "API_URL"),
        description="Base URL of the control-plane and queue backend",
    )
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("api_key", "REDIS_API_KEY"),
        description="Value sent in the X-API-Key header",
    )
    dynamic_parsers: bool = Field(
        default=True,
        validation_alias=AliasChoices("dynamic_parsers", "DYNAMIC_PARSERS"),
        description="Fetch the parser catalog from the control-plane",
    )
    debug: bool = Field(default=False, validation_alias=AliasChoices("debug", "DEBUG"))

    # Nested settings (loaded with AYGA_REGISTRY_, AYGA_POLL_, etc.)
    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    poll: PollSettings = Field(default_factory=PollSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("api_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("dynamic_parsers", mode="before")
    @classmethod
    def _dynamic_unless_false(cls, v: object) -> object:
        """Only the exact string ``false`` turns the remote catalog off."""
        return v != "false" if isinstance(v, str) else v

    @field_validator("debug", mode="before")
    @classmethod
    def _debug_if_set(cls, v: object) -> object:
        """Any non-empty value (``1``, ``true``, ``ayga:*``) enables debug."""
        return bool(v.strip()) if isinstance(v, str) else v

    @field_validator("api_key", mode="before")
    @classmethod
    def _blank_key_is_none(cls, v: object) -> object:
        """Treat an empty/whitespace key as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @computed_field
    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None

    @computed_field
    @property
    def api_key_is_current_format(self) -> bool:
        """Whether the key matches the current ``ayga_live_`` format."""
        return self.api_key is not None and self.api_key.get_secret_value().startswith(VALID_KEY_PREFIX)

    @property
    def log_level(self) -> str:
        """Effective log level (DEBUG forces debug output)."""
        return "DEBUG" if self.debug else self.logging.level


# Singleton pattern for settings
@lru_cache(maxsize=1)
def get_settings() -> AygaSettings:
    """Get the global settings instance (cached).

    Returns:
        Cached AygaSettings instance
    """
    return AygaSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
