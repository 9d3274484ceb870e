"""Pure helpers mapping parsers onto consolidated tools."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping

from ayga_mcp.catalog import ParserDescriptor

from .categories import TOOL_CATEGORIES, ToolCategory, get_tool_category

TIMEOUT_DESCRIPTION = "Timeout in seconds (default: 60)"


def get_parsers_for_tool(tool_id: str, parsers: Iterable[ParserDescriptor]) -> list[ParserDescriptor]:
    """Parsers routed to ``tool_id``; empty for an unknown tool."""
    category = get_tool_category(tool_id)
    if category is None:
        return []
    return [p for p in parsers if p.category in category.categories]


def get_default_engine(tool_id: str, environ: Mapping[str, str] | None = None) -> str:
    """Default engine for ``tool_id``, honoring its environment override."""
    category = get_tool_category(tool_id)
    if category is None:
        return ""
    env = os.environ if environ is None else environ
    return env.get(category.default_env_var) or category.default_engine


def find_tool_for_parser(parser_id: str, parsers: Iterable[ParserDescriptor]) -> ToolCategory | None:
    parser = next((p for p in parsers if p.id == parser_id), None)
    if parser is None:
        return None
    return next((c for c in TOOL_CATEGORIES if parser.category in c.categories), None)


def resolve_engine(tool_id: str, explicit: str | None, environ: Mapping[str, str] | None = None) -> str:
    """Explicit engine verbatim, otherwise the tool's default."""
    return explicit if explicit else get_default_engine(tool_id, environ)


def build_tool_schema(
    category: ToolCategory,
    engines: list[str],
    environ: Mapping[str, str] | None = None,
) -> dict[str, object]:
    """MCP tool listing entry for a consolidated tool."""
    return {
        "name": category.id,
        "description": category.description,
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": category.query_description,
                },
                "engine": {
                    "type": "string",
                    "description": (
                        f"Specific engine to use. Available: {', '.join(engines)}. "
                        f"Default: {get_default_engine(category.id, environ)}"
                    ),
                    "enum": list(engines),
                },
                "timeout": {
                    "type": "number",
                    "description": TIMEOUT_DESCRIPTION,
                },
            },
            "required": ["query"],
        },
    }
