"""Tool registry: listing and the single call boundary.

Every failure inside a tool call becomes an error ``ToolResponse``; nothing
raised by a tool escapes ``execute``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError

from ayga_mcp.foundation.errors import ErrorCode, ToolError, ToolException
from ayga_mcp.runtime.observability import get_logger

from .base import BaseTool

log = get_logger("ayga.registry.tools")


class ToolResponse(BaseModel):
    """Text result of a tool call."""

    model_config = ConfigDict(frozen=True)

    text: str
    is_error: bool = False
    code: ErrorCode | None = None

    @classmethod
    def ok(cls, text: str) -> ToolResponse:
        return cls(text=text)

    @classmethod
    def failure(cls, error: ToolError) -> ToolResponse:
        return cls(text=error.render(), is_error=True, code=error.code)


def format_validation_error(exc: ValidationError) -> str:
    """Compact one-line summary of pydantic validation errors."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "input"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


class ToolRegistry:
    """Name-indexed collection of tools.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(ListParsersTool(parsers))
        >>> response = await registry.execute("list_parsers", {"_placeholder": True})
    """

    __slots__ = ("_tools",)

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool[BaseModel]] = {}

    def register(self, tool: BaseTool[BaseModel]) -> None:
        name = tool.metadata.name
        if name in self._tools:
            raise ValueError(f"Tool '{name}' already registered")
        self._tools[name] = tool

    def get(self, name: str) -> BaseTool[BaseModel] | None:
        return self._tools.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def __iter__(self) -> Iterator[BaseTool[BaseModel]]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    async def list_tools(self) -> list[dict[str, object]]:
        """Listing entries for every currently available tool."""
        entries = []
        for tool in self:
            entry = await tool.describe()
            if entry is not None:
                entries.append(entry)
        log.info("listed tools", count=len(entries))
        return entries

    async def execute(self, name: str, arguments: Mapping[str, object] | None = None) -> ToolResponse:
        tool_name = name or "unknown"
        tool = self._tools.get(name)
        if tool is None:
            error = ToolError.create(
                tool_name, f"Unknown tool: {name}. Available: {', '.join(self.names)}",
                ErrorCode.UNKNOWN_TOOL, recoverable=False,
            )
        else:
            try:
                params = tool.validate_params(arguments)
            except ValidationError as e:
                error = ToolError.create(
                    tool_name, f"Invalid parameters: {format_validation_error(e)}",
                    ErrorCode.INVALID_PARAMS, recoverable=False,
                )
            else:
                try:
                    return ToolResponse.ok(await tool.arun(params))
                except ToolException as e:
                    error = e.error if e.error.tool_name == tool_name else e.error.model_copy(update={"tool_name": tool_name})
                except Exception as e:
                    error = ToolError.from_exception(tool_name, e)

        log.bind_tool(tool_name).error("tool execution error", code=error.code.value, error=error.message)
        return ToolResponse.failure(error)

    def __repr__(self) -> str:
        return f"ToolRegistry({self.names})"
