"""Configuration management using pydantic-settings.

Provides environment-based configuration with type safety and validation.
"""

from .settings import (
    DEFAULT_API_URL,
    VALID_KEY_PREFIX,
    AygaSettings,
    HttpSettings,
    LoggingSettings,
    PollSettings,
    RegistrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "DEFAULT_API_URL",
    "VALID_KEY_PREFIX",
    "AygaSettings",
    "HttpSettings",
    "LoggingSettings",
    "PollSettings",
    "RegistrySettings",
    "clear_settings_cache",
    "get_settings",
]
