"""Tests for the HTTP adapter and MCP result mapping."""

import asyncio
from collections.abc import Iterator

import httpx
import mcp.types as types
import pytest
from starlette.testclient import TestClient

from ayga_mcp.app import AygaApp, build_app
from ayga_mcp.ext.mcp import HTTPToolServer, MCPServer, http_status_for, to_call_result
from ayga_mcp.ext.mcp.server import report_prefetch
from ayga_mcp.foundation.config import AygaSettings
from ayga_mcp.foundation.errors import ErrorCode, ToolError
from ayga_mcp.runtime import FakeClock
from ayga_mcp.runtime.observability import CapturingRenderer
from ayga_mcp.tools import ToolResponse

from .conftest import BASE_URL, TEST_KEY, FakeBackend, json_response

READY = json_response(200, {"value": '{"success": 1, "info": {}}'})


@pytest.fixture
def app(backend: FakeBackend) -> AygaApp:
    settings = AygaSettings(_env_file=None, api_url=BASE_URL, api_key=TEST_KEY, dynamic_parsers=False)  # type: ignore[call-arg]
    return build_app(settings, transport=httpx.MockTransport(backend.handler), clock=FakeClock(), environ={})


@pytest.fixture
def client(app: AygaApp) -> Iterator[TestClient]:
    with TestClient(HTTPToolServer(app).http_app) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "server": "ayga-mcp-client", "version": "3.2.0", "parsers": 39}


def test_list_tools(client: TestClient) -> None:
    body = client.get("/tools").json()
    assert body["server"] == "ayga-mcp-client"
    assert len(body["tools"]) == 8


def test_tool_schema(client: TestClient) -> None:
    response = client.get("/tools/translate/schema")
    assert response.status_code == 200
    assert response.json()["inputSchema"]["properties"]["engine"]["enum"][0] == "google_translate"
    assert client.get("/tools/nope/schema").status_code == 404


def test_invoke_tool(client: TestClient, backend: FakeBackend) -> None:
    backend.kv = [httpx.Response(404), READY]

    response = client.post("/tools/search_web", json={"query": "weather today"})

    assert response.status_code == 200
    assert response.json() == {"result": {"success": 1, "info": {}}}
    assert backend.polls == 2


@pytest.mark.parametrize(("name", "body", "status", "code"), [
    ("nope", {}, 404, "UNKNOWN_TOOL"),
    ("ask_ai", {"query": ""}, 400, "INVALID_PARAMS"),
    ("search_web", {"query": "q", "engine": "altavista"}, 400, "UNKNOWN_PARSER"),
])
def test_invoke_errors(client: TestClient, name: str, body: dict[str, object], status: int, code: str) -> None:
    response = client.post(f"/tools/{name}", json=body)
    assert response.status_code == status
    assert response.json()["code"] == code


def test_invoke_rejects_non_object_body(client: TestClient) -> None:
    assert client.post("/tools/ask_ai", content=b"[1, 2]").status_code == 400
    assert client.post("/tools/ask_ai", content=b"{oops").status_code == 400


def test_status_mapping() -> None:
    assert http_status_for(ToolResponse.ok("{}")) == 200
    timeout = ToolResponse.failure(ToolError.create("ask_ai", "slow", ErrorCode.TIMEOUT))
    assert http_status_for(timeout) == 504
    failed = ToolResponse.failure(ToolError.create("ask_ai", "kaput", ErrorCode.POLL_FAILED))
    assert http_status_for(failed) == 502


def test_call_result_mapping() -> None:
    result = to_call_result(ToolResponse.failure(ToolError.create("ask_ai", "Query parameter is required", ErrorCode.INVALID_PARAMS)))
    assert result.isError is True
    assert result.content[0].type == "text"
    assert '"code": "INVALID_PARAMS"' in result.content[0].text  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_mcp_list_tools_handler(app: AygaApp) -> None:
    server = MCPServer(app)
    handler = server.server.request_handlers[types.ListToolsRequest]

    result = await handler(types.ListToolsRequest(method="tools/list"))

    names = [tool.name for tool in result.root.tools]  # type: ignore[union-attr]
    assert names[:2] == ["ask_ai", "search_web"]
    assert names[-2:] == ["list_parsers", "ayga_check_limits"]


@pytest.mark.asyncio
async def test_prefetch_failure_is_logged(logs: CapturingRenderer) -> None:
    async def warm_up() -> int:
        raise RuntimeError("catalog offline")

    task = asyncio.create_task(warm_up())
    await asyncio.wait([task])
    report_prefetch(task)

    [entry] = [e for e in logs.entries if e.event == "parser prefetch failed"]
    assert entry.level == "error"
    assert entry.context["error"] == "RuntimeError: catalog offline"


@pytest.mark.asyncio
async def test_cancelled_prefetch_is_silent(logs: CapturingRenderer) -> None:
    task = asyncio.create_task(asyncio.sleep(10))
    task.cancel()
    await asyncio.wait([task])
    report_prefetch(task)  # type: ignore[arg-type]

    assert logs.events("error") == []
