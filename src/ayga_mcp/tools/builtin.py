"""Concrete tools: six consolidated parser tools plus two utilities."""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, field_validator

from ayga_mcp.bridge import TaskBridge
from ayga_mcp.catalog import ParserRegistry
from ayga_mcp.foundation.errors import ErrorCode
from ayga_mcp.io.api import ApiClient
from ayga_mcp.runtime.observability import get_logger

from .base import PLACEHOLDER_SCHEMA, BaseTool, PlaceholderParams, ToolMetadata, render_json
from .categories import TOOL_CATEGORIES, ToolCategory
from .surface import build_tool_schema, get_parsers_for_tool, resolve_engine

log = get_logger("ayga.tools")


class CategoryParams(BaseModel):
    """Arguments of a consolidated tool."""

    model_config = ConfigDict(extra="ignore")

    query: str = ""
    engine: str | None = None
    timeout: float | None = None

    @field_validator("timeout", mode="after")
    @classmethod
    def _non_positive_is_default(cls, v: float | None) -> float | None:
        return v if v and v > 0 else None


class CategoryTool(BaseTool[CategoryParams]):
    """Routes a query to one parser of a ``ToolCategory`` through the task bridge."""

    params_schema: ClassVar[type[BaseModel]] = CategoryParams

    __slots__ = ("category", "metadata", "_parsers", "_bridge", "_environ")

    def __init__(
        self,
        category: ToolCategory,
        parsers: ParserRegistry,
        bridge: TaskBridge,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.category = category
        self.metadata = ToolMetadata(
            name=category.id,
            description=category.description,
            category="consolidated",
            requires_api_key=True,
        )
        self._parsers = parsers
        self._bridge = bridge
        self._environ = environ

    async def engines(self) -> list[str]:
        return [p.id for p in get_parsers_for_tool(self.category.id, await self._parsers.get_parsers())]

    async def input_schema(self) -> dict[str, object] | None:
        engines = await self.engines()
        if not engines:
            return None
        return build_tool_schema(self.category, engines, self._environ)["inputSchema"]  # type: ignore[return-value]

    async def _run(self, params: CategoryParams) -> str:
        if not params.query:
            self._fail("Query parameter is required", ErrorCode.INVALID_PARAMS)
        engine = resolve_engine(self.category.id, params.engine, self._environ)
        log.info("executing tool", tool=self.category.id, engine=engine, query=params.query[:50])
        outcome = await self._bridge.run(engine, params.query, params.timeout)
        return outcome.raise_for_state(self.metadata.name).render()


class ListParsersTool(BaseTool[PlaceholderParams]):
    """Catalog summary grouped by consolidated tool."""

    metadata = ToolMetadata(
        name="list_parsers",
        description="List all available parsers with their categories",
        category="utility",
    )
    params_schema: ClassVar[type[BaseModel]] = PlaceholderParams

    __slots__ = ("_parsers",)

    def __init__(self, parsers: ParserRegistry) -> None:
        self._parsers = parsers

    async def input_schema(self) -> dict[str, object]:
        return PLACEHOLDER_SCHEMA

    async def summary(self) -> dict[str, object]:
        parsers = await self._parsers.get_parsers()
        mapping: dict[str, object] = {}
        for category in TOOL_CATEGORIES:
            routed = get_parsers_for_tool(category.id, parsers)
            if routed:
                mapping[category.id] = {"tool": category.name, "parsers": [p.id for p in routed]}
        return {
            "total": len(parsers),
            "consolidatedTools": len(TOOL_CATEGORIES),
            "categories": await self._parsers.get_categories(),
            "toolMapping": mapping,
        }

    async def _run(self, params: PlaceholderParams) -> str:
        return render_json(await self.summary())


class CheckLimitsTool(BaseTool[PlaceholderParams]):
    """Rate-limit usage of the configured API key."""

    metadata = ToolMetadata(
        name="ayga_check_limits",
        description=(
            "Check current rate limit status for your API key. "
            "Returns used/remaining requests for minute and day windows."
        ),
        category="utility",
        requires_api_key=True,
    )
    params_schema: ClassVar[type[BaseModel]] = PlaceholderParams

    __slots__ = ("_api",)

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def input_schema(self) -> dict[str, object]:
        return PLACEHOLDER_SCHEMA

    async def _run(self, params: PlaceholderParams) -> str:
        log.info("checking API key rate limits")
        limits = await self._api.fetch_limits()
        return render_json(limits.to_output())


def build_tools(
    parsers: ParserRegistry,
    bridge: TaskBridge,
    api: ApiClient,
    environ: Mapping[str, str] | None = None,
) -> list[BaseTool[BaseModel]]:
    """All tools in listing order."""
    tools: list[BaseTool[BaseModel]] = [
        CategoryTool(category, parsers, bridge, environ) for category in TOOL_CATEGORIES  # type: ignore[misc]
    ]
    tools.append(ListParsersTool(parsers))  # type: ignore[arg-type]
    tools.append(CheckLimitsTool(api))  # type: ignore[arg-type]
    return tools
