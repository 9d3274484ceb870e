"""Tool surface: consolidated categories, schemas, tool classes and registry."""

from .base import PLACEHOLDER_SCHEMA, BaseTool, PlaceholderParams, ToolMetadata, render_json
from .builtin import CategoryParams, CategoryTool, CheckLimitsTool, ListParsersTool, build_tools
from .categories import TOOL_CATEGORIES, ToolCategory, get_tool_category
from .registry import ToolRegistry, ToolResponse, format_validation_error
from .surface import (
    build_tool_schema,
    find_tool_for_parser,
    get_default_engine,
    get_parsers_for_tool,
    resolve_engine,
)

__all__ = [
    "BaseTool",
    "CategoryParams",
    "CategoryTool",
    "CheckLimitsTool",
    "ListParsersTool",
    "PLACEHOLDER_SCHEMA",
    "PlaceholderParams",
    "TOOL_CATEGORIES",
    "ToolCategory",
    "ToolMetadata",
    "ToolRegistry",
    "ToolResponse",
    "build_tool_schema",
    "build_tools",
    "find_tool_for_parser",
    "format_validation_error",
    "get_default_engine",
    "get_parsers_for_tool",
    "get_tool_category",
    "render_json",
    "resolve_engine",
]
