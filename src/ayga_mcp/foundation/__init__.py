"""Foundation - Core building blocks for ayga-mcp.

Contains: configuration and error handling.
"""

from __future__ import annotations

__all__ = [
    # Errors
    "ErrorCode", "ToolError", "ToolException", "classify_exception", "describe_exception",
    # Config
    "AygaSettings", "get_settings", "clear_settings_cache",
    "RegistrySettings", "PollSettings", "HttpSettings", "LoggingSettings",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("ErrorCode", "ToolError", "ToolException", "classify_exception", "describe_exception"):
        from . import errors
        return getattr(errors, name)

    if name in ("AygaSettings", "get_settings", "clear_settings_cache",
                "RegistrySettings", "PollSettings", "HttpSettings", "LoggingSettings"):
        from . import config
        return getattr(config, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
