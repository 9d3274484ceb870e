"""Composition root: wires settings, backend client, registries and bridge."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from ayga_mcp.bridge import BridgeConfig, TaskBridge
from ayga_mcp.catalog import ParserRegistry, RegistryConfig
from ayga_mcp.foundation.config import VALID_KEY_PREFIX, AygaSettings, get_settings
from ayga_mcp.io.api import ApiClient, ApiConfig
from ayga_mcp.runtime import SYSTEM_CLOCK, Clock
from ayga_mcp.runtime.observability import get_logger
from ayga_mcp.tools import ToolRegistry, build_tools

SERVER_NAME = "ayga-mcp-client"
SERVER_VERSION = "3.2.0"

log = get_logger("ayga.server")


@dataclass(slots=True)
class AygaApp:
    """Everything a transport adapter needs to serve tools."""

    settings: AygaSettings
    api: ApiClient
    parsers: ParserRegistry
    bridge: TaskBridge
    tools: ToolRegistry = field(default_factory=ToolRegistry)

    def check_api_key(self) -> bool:
        """Log key advisories. Returns False when no key is configured."""
        if not self.settings.has_api_key:
            log.error("REDIS_API_KEY not set, API calls will fail")
            return False
        if not self.settings.api_key_is_current_format:
            log.warning(
                f"API key does not match expected format '{VALID_KEY_PREFIX}*'. "
                "Legacy keys are deprecated. Get a new key at https://t.me/aygamcp_bot"
            )
        return True

    async def prefetch(self) -> int:
        """Warm the parser cache and log the startup summary."""
        parsers = await self.parsers.get_parsers()
        log.info(
            f"{SERVER_NAME} v{SERVER_VERSION} started",
            api_url=self.settings.api_url,
            auth="X-API-Key",
            dynamic=self.settings.dynamic_parsers,
            parsers=len(parsers),
        )
        return len(parsers)

    async def aclose(self) -> None:
        await self.api.aclose()


def build_app(
    settings: AygaSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Clock = SYSTEM_CLOCK,
    environ: Mapping[str, str] | None = None,
) -> AygaApp:
    """Build one fully wired application instance.

    Args:
        settings: Configuration; loaded from the environment when omitted
        transport: httpx transport override (``httpx.MockTransport`` in tests)
        clock: Time source shared by the registry cache and the poll loop
        environ: Source of per-tool default-engine overrides
    """
    settings = settings or get_settings()
    api = ApiClient(ApiConfig.from_settings(settings), transport=transport)
    parsers = ParserRegistry(api, RegistryConfig.from_settings(settings), clock=clock)
    bridge = TaskBridge(api, parsers, BridgeConfig.from_settings(settings), clock=clock)
    app = AygaApp(settings=settings, api=api, parsers=parsers, bridge=bridge)
    for tool in build_tools(parsers, bridge, api, os.environ if environ is None else environ):
        app.tools.register(tool)
    return app
