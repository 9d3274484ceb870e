"""Server adapters exposing the tool registry.

1. **MCP** - stdio transport for MCP clients (Claude Desktop, Cursor, VS Code)
2. **HTTP/REST** - plain JSON endpoints for web backends

Example - MCP over stdio:
    >>> from ayga_mcp.ext.mcp import serve_mcp
    >>> serve_mcp(build_app())

Example - HTTP endpoints:
    >>> from ayga_mcp.ext.mcp import create_http_app
    >>> app = create_http_app(build_app())  # Starlette app

Requires: pip install ayga-mcp[http] (for HTTP endpoints)
"""

from __future__ import annotations

import asyncio
import signal
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Literal

import mcp.types as types
import orjson
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from ayga_mcp.app import SERVER_NAME, SERVER_VERSION, AygaApp
from ayga_mcp.foundation.errors import ErrorCode, describe_exception
from ayga_mcp.runtime.observability import get_logger
from ayga_mcp.tools import ToolRegistry, ToolResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

Transport = Literal["stdio", "http"]

log = get_logger("ayga.server")


# ═══════════════════════════════════════════════════════════════════════════════
# Abstract Server Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class ToolServer(ABC):
    """Abstract base for transport adapters sharing one ``AygaApp``."""

    __slots__ = ("_name", "_app")

    def __init__(self, app: AygaApp, name: str = SERVER_NAME) -> None:
        self._name = name
        self._app = app

    @property
    def name(self) -> str:
        return self._name

    @property
    def app(self) -> AygaApp:
        return self._app

    @property
    def registry(self) -> ToolRegistry:
        return self._app.tools

    @abstractmethod
    def run(self, **kwargs: object) -> None:
        """Start the server (blocking)."""
        ...

    async def list_tools(self) -> list[dict[str, object]]:
        return await self._app.tools.list_tools()

    async def invoke(self, tool_name: str, params: dict[str, object] | None) -> ToolResponse:
        """Invoke a tool. Failures come back as error responses, never raised."""
        return await self._app.tools.execute(tool_name, params)


# ═══════════════════════════════════════════════════════════════════════════════
# MCP Adapter (stdio)
# ═══════════════════════════════════════════════════════════════════════════════


class MCPServer(ToolServer):
    """MCP server over stdio.

    Tool schemas are rebuilt on every ``tools/list`` so the listing follows
    the current parser catalog.

    Example:
        >>> server = MCPServer(build_app())
        >>> server.run()
    """

    __slots__ = ("_server",)

    def __init__(self, app: AygaApp, name: str = SERVER_NAME) -> None:
        super().__init__(app, name)
        self._server = self._create_server()

    def _create_server(self) -> Server:
        server: Server = Server(self._name, version=SERVER_VERSION)

        @server.list_tools()
        async def handle_list_tools() -> list[types.Tool]:
            entries = await self.list_tools()
            return [
                types.Tool(name=e["name"], description=e["description"], inputSchema=e["inputSchema"])  # type: ignore[arg-type]
                for e in entries
            ]

        @server.call_tool(validate_input=False)
        async def handle_call_tool(name: str, arguments: dict[str, object] | None) -> types.CallToolResult:
            response = await self.invoke(name, arguments)
            return to_call_result(response)

        return server

    @property
    def server(self) -> Server:
        """Access underlying MCP server instance."""
        return self._server

    async def serve(self) -> None:
        """Serve stdio until EOF or SIGINT/SIGTERM, then release the HTTP client."""
        self._app.check_api_key()
        loop = asyncio.get_running_loop()
        main = asyncio.current_task()
        received: list[str] = []

        def _stop(sig: signal.Signals) -> None:
            received.append(sig.name)
            if main is not None:
                main.cancel()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _stop, sig)

        prefetch: asyncio.Task[int] | None = None
        try:
            async with stdio_server() as (read_stream, write_stream):
                prefetch = asyncio.create_task(self._app.prefetch())
                prefetch.add_done_callback(report_prefetch)
                log.info("server ready", transport="stdio")
                await self._server.run(read_stream, write_stream, self._server.create_initialization_options())
        except asyncio.CancelledError:
            if not received:
                raise
            log.info(f"received {received[0]}, shutting down")
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            if prefetch is not None and not prefetch.done():
                prefetch.cancel()
            await self._app.aclose()

    def run(self, **kwargs: object) -> None:
        asyncio.run(self.serve())


def report_prefetch(task: asyncio.Task[int]) -> None:
    """Done-callback for the background catalog warm-up."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        log.error("parser prefetch failed", error=f"{type(exc).__name__}: {describe_exception(exc)}")


def to_call_result(response: ToolResponse) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=response.text)],
        isError=response.is_error,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# HTTP REST Adapter (Web Backends)
# ═══════════════════════════════════════════════════════════════════════════════


_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.UNKNOWN_TOOL: 404,
    ErrorCode.INVALID_PARAMS: 400,
    ErrorCode.UNKNOWN_PARSER: 400,
    ErrorCode.PARSER_DISABLED: 400,
    ErrorCode.API_KEY_MISSING: 401,
    ErrorCode.API_KEY_INVALID: 401,
    ErrorCode.TIMEOUT: 504,
}


def http_status_for(response: ToolResponse) -> int:
    if not response.is_error:
        return 200
    return _STATUS_BY_CODE.get(response.code, 502) if response.code else 500


class HTTPToolServer(ToolServer):
    """HTTP/REST server for web backend integration.

    - GET  /health              → Liveness and catalog size
    - GET  /tools               → List available tools
    - POST /tools/{name}        → Invoke tool with JSON body
    - GET  /tools/{name}/schema → Input schema of one tool

    Example:
        >>> server = HTTPToolServer(build_app())
        >>> server.run(host="0.0.0.0", port=8000)
    """

    __slots__ = ("_http",)

    def __init__(self, app: AygaApp, name: str = SERVER_NAME) -> None:
        super().__init__(app, name)
        self._http = self._create_app()

    def _create_app(self):
        """Create Starlette app with tool endpoints."""
        try:
            from starlette.applications import Starlette
            from starlette.responses import JSONResponse
            from starlette.routing import Route
        except ImportError as e:
            raise ImportError(
                "HTTP server requires starlette. "
                "Install with: pip install ayga-mcp[http]"
            ) from e

        @asynccontextmanager
        async def lifespan(_: Starlette) -> AsyncIterator[None]:
            self._app.check_api_key()
            await self._app.prefetch()
            try:
                yield
            finally:
                await self._app.aclose()

        async def health(request):
            parsers = await self._app.parsers.get_parsers()
            return JSONResponse({
                "status": "ok",
                "server": self._name,
                "version": SERVER_VERSION,
                "parsers": len(parsers),
            })

        async def list_tools(request):
            return JSONResponse({
                "server": self._name,
                "tools": await self.list_tools(),
            })

        async def invoke_tool(request):
            tool_name = request.path_params["name"]
            raw = await request.body()
            try:
                body = orjson.loads(raw) if raw else {}
            except orjson.JSONDecodeError:
                return JSONResponse({"error": "Request body must be a JSON object"}, status_code=400)
            if not isinstance(body, dict):
                return JSONResponse({"error": "Request body must be a JSON object"}, status_code=400)

            response = await self.invoke(tool_name, body)
            payload = orjson.loads(response.text)
            if response.is_error:
                return JSONResponse(payload, status_code=http_status_for(response))
            return JSONResponse({"result": payload})

        async def get_tool_schema(request):
            tool_name = request.path_params["name"]
            tool = self.registry.get(tool_name)
            entry = await tool.describe() if tool is not None else None
            if entry is None:
                return JSONResponse({"error": f"Tool '{tool_name}' not found"}, status_code=404)
            return JSONResponse(entry)

        routes = [
            Route("/health", health, methods=["GET"]),
            Route("/tools", list_tools, methods=["GET"]),
            Route("/tools/{name}", invoke_tool, methods=["POST"]),
            Route("/tools/{name}/schema", get_tool_schema, methods=["GET"]),
        ]

        return Starlette(routes=routes, lifespan=lifespan)

    def run(self, host: str = "127.0.0.1", port: int = 8000) -> None:  # type: ignore[override]
        """Start HTTP server."""
        try:
            import uvicorn
        except ImportError as e:
            raise ImportError(
                "HTTP server requires uvicorn. "
                "Install with: pip install ayga-mcp[http]"
            ) from e

        uvicorn.run(self._http, host=host, port=port, log_level="warning")

    @property
    def http_app(self):
        """Access ASGI app for embedding in larger applications."""
        return self._http


# ═══════════════════════════════════════════════════════════════════════════════
# Factory Functions
# ═══════════════════════════════════════════════════════════════════════════════


def serve_mcp(app: AygaApp, *, name: str = SERVER_NAME) -> None:
    """Expose tools via MCP over stdio (blocking)."""
    MCPServer(app, name).run()


def serve_http(app: AygaApp, *, name: str = SERVER_NAME, host: str = "127.0.0.1", port: int = 8000) -> None:
    """Expose tools via HTTP REST endpoints (blocking)."""
    HTTPToolServer(app, name).run(host=host, port=port)


def create_http_app(app: AygaApp, *, name: str = SERVER_NAME):
    """Create the Starlette app without starting it."""
    return HTTPToolServer(app, name).http_app
