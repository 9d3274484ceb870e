"""Tool abstractions: BaseTool, ToolMetadata, and parameter types.

A tool pairs a pydantic parameter schema with an async ``_run``. Listing
goes through ``describe()``, which may return None to hide a tool whose
backing parsers are currently unavailable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import ClassVar, Generic, NoReturn, TypeVar

import orjson
from pydantic import BaseModel, ConfigDict, Field

from ayga_mcp.foundation.errors import ErrorCode, ToolException


class ToolMetadata(BaseModel):
    """Metadata describing a tool.

    Attributes:
        name: Unique identifier (snake_case, e.g., "search_web")
        description: What the tool does (shown to the model for selection)
        category: Grouping category ("consolidated" or "utility")
        requires_api_key: Whether the tool needs backend credentials
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    description: str = Field(..., min_length=10)
    category: str = Field(default="general")
    requires_api_key: bool = Field(default=False)


class PlaceholderParams(BaseModel):
    """Parameters of the utility tools.

    Some MCP clients reject tools with an empty input schema, so utility
    tools advertise a single boolean the caller always sets to true.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    placeholder: bool = Field(default=True, alias="_placeholder")


PLACEHOLDER_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "_placeholder": {
            "type": "boolean",
            "description": "Placeholder. Always pass true.",
        },
    },
    "required": ["_placeholder"],
}

TParams = TypeVar("TParams", bound=BaseModel)


def render_json(value: object) -> str:
    """Pretty JSON text for tool output."""
    return orjson.dumps(value, option=orjson.OPT_INDENT_2).decode()


class BaseTool(ABC, Generic[TParams]):
    """Abstract base class for all tools.

    Subclasses must:
    - Provide ``metadata`` (class variable or set in ``__init__``)
    - Define ``params_schema`` with the pydantic model type
    - Implement ``_run(params)`` returning the result text
    - Implement ``input_schema()`` returning the advertised JSON schema
    """

    metadata: ToolMetadata
    params_schema: ClassVar[type[BaseModel]]

    @abstractmethod
    async def input_schema(self) -> dict[str, object] | None:
        """JSON schema for the tool input, or None when the tool is unavailable."""
        ...

    async def describe(self) -> dict[str, object] | None:
        """MCP listing entry. None omits the tool from the listing."""
        schema = await self.input_schema()
        if schema is None:
            return None
        return {
            "name": self.metadata.name,
            "description": self.metadata.description,
            "inputSchema": schema,
        }

    def validate_params(self, arguments: Mapping[str, object] | None) -> TParams:
        return self.params_schema.model_validate(dict(arguments or {}))  # type: ignore[return-value]

    async def arun(self, params: TParams) -> str:
        return await self._run(params)

    @abstractmethod
    async def _run(self, params: TParams) -> str:
        ...

    def _fail(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN, *, recoverable: bool = False) -> NoReturn:
        """Abort the call with a structured tool error."""
        raise ToolException.create(self.metadata.name, message, code, recoverable=recoverable)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.metadata.name!r})"
