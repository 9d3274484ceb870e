"""Async HTTP client for the ayga control plane and task queue.

Wraps a lazily created ``httpx.AsyncClient``. Transport failures surface
as ``httpx.HTTPError``; callers decide whether they are fatal or retryable.
Requests that must carry the API key raise ``ToolException`` with
``API_KEY_MISSING`` before touching the network.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import orjson
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, SecretStr, ValidationError

from ayga_mcp.foundation.errors import ErrorCode, ToolException, describe_exception
from ayga_mcp.runtime.observability import get_logger

from .auth import ApiKeyAuth, AuthStrategy, NoAuth, auth_from_key
from .models import RateLimitStatus

if TYPE_CHECKING:
    from ayga_mcp.foundation.config import AygaSettings

log = get_logger("ayga.api")

LIMITS_PATH = "/me/limits"
PARSERS_PATH = "/parsers"
OPTIONS_PATH = "/parsers/options"


class ApiConfig(BaseModel):
    """Connection parameters for the backend."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = "https://redis.ayga.tech"
    auth: AuthStrategy = Field(default_factory=NoAuth)
    timeout: PositiveFloat = 30.0
    user_agent: str = "ayga-mcp/3.2.0"

    @classmethod
    def from_settings(cls, settings: AygaSettings) -> ApiConfig:
        return cls(
            base_url=settings.api_url,
            auth=auth_from_key(settings.api_key),
            timeout=settings.http.timeout,
            user_agent=settings.http.user_agent,
        )

    @classmethod
    def with_key(cls, key: SecretStr | str | None, **kwargs: object) -> ApiConfig:
        return cls(auth=auth_from_key(key), **kwargs)  # type: ignore[arg-type]

    @property
    def has_key(self) -> bool:
        return self.auth.configured


class ApiClient:
    """Thin async facade over the backend's REST endpoints.

    Args:
        config: Connection parameters
        transport: Optional httpx transport (``httpx.MockTransport`` in tests)
    """

    __slots__ = ("config", "_transport", "_client")

    def __init__(self, config: ApiConfig | None = None, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config or ApiConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def has_key(self) -> bool:
        return self.config.has_key

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                transport=self._transport,
            )
        return self._client

    def headers(self, *, require_auth: bool) -> dict[str, str]:
        """Request headers, with the API key when one is configured."""
        if require_auth and not self.config.has_key:
            raise ToolException.create(
                "ayga", "REDIS_API_KEY environment variable is required",
                ErrorCode.API_KEY_MISSING, recoverable=False,
            )
        return self.config.auth.apply({"Accept": "application/json"})

    async def get(self, path: str, *, require_auth: bool = False) -> httpx.Response:
        headers = self.headers(require_auth=require_auth)
        client = await self._get_client()
        log.debug("GET", path=path)
        return await client.get(path, headers=headers)

    async def post_json(self, path: str, body: object, *, require_auth: bool = True) -> httpx.Response:
        headers = self.headers(require_auth=require_auth)
        headers["Content-Type"] = "application/json"
        client = await self._get_client()
        log.debug("POST", path=path)
        return await client.post(path, content=orjson.dumps(body), headers=headers)

    async def get_json(self, path: str, *, require_auth: bool = False) -> object:
        """GET and decode a JSON body. Non-2xx raises ``httpx.HTTPStatusError``."""
        response = await self.get(path, require_auth=require_auth)
        response.raise_for_status()
        return orjson.loads(response.content)

    async def fetch_limits(self) -> RateLimitStatus:
        """Current rate-limit usage for the configured key."""
        response = await self.get(LIMITS_PATH, require_auth=True)
        if not response.is_success:
            raise ToolException.create(
                "ayga_check_limits",
                f"Failed to check limits ({response.status_code}): {response.text}",
                ErrorCode.API_KEY_INVALID if response.status_code in (401, 403) else ErrorCode.EXTERNAL_SERVICE_ERROR,
                recoverable=response.status_code >= 500,
            )
        try:
            return RateLimitStatus.model_validate(orjson.loads(response.content))
        except (orjson.JSONDecodeError, ValidationError) as e:
            raise ToolException.create(
                "ayga_check_limits", f"Unexpected limits response: {describe_exception(e)}",
                ErrorCode.PARSE_ERROR, recoverable=False,
            ) from e

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    def __repr__(self) -> str:
        return f"ApiClient(base_url={self.config.base_url!r}, has_key={self.has_key})"


__all__ = ["ApiClient", "ApiConfig", "ApiKeyAuth", "NoAuth", "LIMITS_PATH", "PARSERS_PATH", "OPTIONS_PATH"]
