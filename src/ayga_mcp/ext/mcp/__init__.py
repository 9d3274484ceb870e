"""MCP and HTTP transport adapters."""

from .server import (
    HTTPToolServer,
    MCPServer,
    ToolServer,
    Transport,
    create_http_app,
    http_status_for,
    serve_http,
    serve_mcp,
    to_call_result,
)

__all__ = [
    "HTTPToolServer",
    "MCPServer",
    "ToolServer",
    "Transport",
    "create_http_app",
    "http_status_for",
    "serve_http",
    "serve_mcp",
    "to_call_result",
]
