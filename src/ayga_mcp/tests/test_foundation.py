"""Tests for settings and structured errors."""

import httpx
import orjson
import pytest

from ayga_mcp.catalog import RegistryConfig
from ayga_mcp.foundation.config import AygaSettings, clear_settings_cache, get_settings
from ayga_mcp.foundation.errors import ErrorCode, ToolError, ToolException, classify_exception, describe_exception


def test_settings_defaults() -> None:
    settings = AygaSettings(_env_file=None)  # type: ignore[call-arg]
    assert settings.api_url == "https://redis.ayga.tech"
    assert settings.api_key is None
    assert settings.dynamic_parsers is True
    assert settings.registry.cache_ttl == 300.0
    assert settings.poll.interval == 2.0
    assert settings.poll.queue_name == "aparser_redis_api"
    assert settings.log_level == "INFO"


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_URL", "https://example.test/")
    monkeypatch.setenv("REDIS_API_KEY", "ayga_live_abc")
    monkeypatch.setenv("DYNAMIC_PARSERS", "false")
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("AYGA_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("AYGA_LOG_LEVEL", "warning")

    settings = AygaSettings(_env_file=None)  # type: ignore[call-arg]

    assert settings.api_url == "https://example.test"
    assert settings.api_key is not None
    assert settings.api_key.get_secret_value() == "ayga_live_abc"
    assert "ayga_live_abc" not in repr(settings)
    assert settings.dynamic_parsers is False
    assert settings.poll.interval == 0.5
    assert settings.logging.level == "WARNING"
    assert settings.log_level == "DEBUG"
    assert settings.api_key_is_current_format


def test_legacy_key_format_detected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REDIS_API_KEY", "old-style-key")
    settings = AygaSettings(_env_file=None)  # type: ignore[call-arg]
    assert settings.has_api_key
    assert not settings.api_key_is_current_format


def test_blank_key_is_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    settings = AygaSettings(_env_file=None, api_key="   ")  # type: ignore[call-arg]
    assert settings.api_key is None
    assert not settings.has_api_key


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()
    first = get_settings()
    clear_settings_cache()
    assert get_settings() is not first


def test_tool_error_payload() -> None:
    error = ToolError.create("search_web", "Unknown parser: x", ErrorCode.UNKNOWN_PARSER, recoverable=False)
    payload = orjson.loads(error.render())

    assert set(payload) == {"error", "code", "tool", "timestamp"}
    assert payload["error"] == "Unknown parser: x"
    assert payload["code"] == "UNKNOWN_PARSER"
    assert payload["timestamp"].endswith("Z")
    assert str(error) == error.render()


def test_tool_error_flags() -> None:
    assert ToolError.create("t", "slow", ErrorCode.TIMEOUT).is_retryable
    assert ToolError.create("t", "no key", ErrorCode.API_KEY_MISSING).is_auth_error
    assert not ToolError.create("t", "bad", ErrorCode.INVALID_PARAMS).is_retryable


@pytest.mark.parametrize(("exc", "code"), [
    (TimeoutError("read timeout"), ErrorCode.TIMEOUT),
    (ConnectionError("connect failed"), ErrorCode.NETWORK_ERROR),
    (ValueError("bad value"), ErrorCode.INVALID_PARAMS),
    (RuntimeError("boom"), ErrorCode.EXTERNAL_SERVICE_ERROR),
])
def test_classify_exception(exc: Exception, code: ErrorCode) -> None:
    assert classify_exception(exc) is code


def test_tool_exception_wraps_error() -> None:
    exc = ToolException.create("ask_ai", "Query parameter is required", ErrorCode.INVALID_PARAMS)
    assert exc.code is ErrorCode.INVALID_PARAMS
    assert str(exc) == "Query parameter is required"



def test_error_from_exception_with_empty_message() -> None:
    """httpx raises timeouts with no message; the class name stands in."""
    error = ToolError.from_exception("ayga_check_limits", httpx.ReadTimeout(""))
    assert error.message == "ReadTimeout"
    assert error.code is ErrorCode.TIMEOUT

    assert ToolError.from_exception("ask_ai", OSError("  "), "Submit").message == "Submit: OSError"
    assert ToolError(tool_name="ask_ai", message=RuntimeError()).message == "RuntimeError"
    assert describe_exception(ValueError("bad value")) == "bad value"


@pytest.mark.parametrize(("value", "expected"), [
    ("true", True), ("1", True), ("ayga:*", True), ("false", True), ("  ", False),
])
def test_debug_enabled_by_any_value(monkeypatch: pytest.MonkeyPatch, value: str, expected: bool) -> None:
    monkeypatch.setenv("DEBUG", value)
    settings = AygaSettings(_env_file=None)  # type: ignore[call-arg]
    assert settings.debug is expected
    assert (settings.log_level == "DEBUG") is expected


@pytest.mark.parametrize(("value", "expected"), [
    ("false", False), ("true", True), ("0", True), ("no", True), ("False", True),
])
def test_dynamic_parsers_off_only_for_false(monkeypatch: pytest.MonkeyPatch, value: str, expected: bool) -> None:
    monkeypatch.setenv("DYNAMIC_PARSERS", value)
    assert AygaSettings(_env_file=None).dynamic_parsers is expected  # type: ignore[call-arg]


def test_poll_default_timeout_reaches_registry_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AYGA_POLL_DEFAULT_TIMEOUT", "90")
    settings = AygaSettings(_env_file=None)  # type: ignore[call-arg]
    assert settings.poll.default_timeout == 90.0
    assert RegistryConfig.from_settings(settings).default_timeout == 90.0
