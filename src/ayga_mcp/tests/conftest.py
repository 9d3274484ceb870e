"""Shared fixtures: scripted backend, virtual clock, captured logs."""

from __future__ import annotations

import os
from collections.abc import Iterator

import httpx
import orjson
import pytest

from ayga_mcp.bridge import BridgeConfig, TaskBridge
from ayga_mcp.catalog import ParserRegistry, RegistryConfig
from ayga_mcp.foundation.config import clear_settings_cache
from ayga_mcp.io.api import ApiClient, ApiConfig
from ayga_mcp.runtime import FakeClock
from ayga_mcp.runtime.observability import CapturingRenderer, NoOpRenderer, set_renderer

TEST_KEY = "ayga_live_test_key"
BASE_URL = "https://backend.test"

Scripted = httpx.Response | Exception


def json_response(status: int, body: object, headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(status, content=orjson.dumps(body), headers={"Content-Type": "application/json", **(headers or {})})


def remote_parser(id: str, category: str, engine: str, **extra: object) -> dict[str, object]:
    return {"id": id, "name": id.title(), "description": f"{id} parser", "category": category, "aparser_name": engine, **extra}


class FakeBackend:
    """Scripted stand-in for the control plane and queue backend.

    Each endpoint pops its next scripted response; the last one repeats.
    Exceptions in a script are raised as transport errors.
    """

    def __init__(self) -> None:
        self.parsers: list[Scripted] = [httpx.Response(503, text="unavailable")]
        self.options: list[Scripted] = [httpx.Response(404, text="no options")]
        self.limits: list[Scripted] = [httpx.Response(404)]
        self.push: list[Scripted] = [httpx.Response(200, json={"result": 1})]
        self.kv: list[Scripted] = [httpx.Response(404)]
        self.requests: list[httpx.Request] = []
        self.pushed: list[list[object]] = []

    @staticmethod
    def _next(script: list[Scripted]) -> httpx.Response:
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        # Fresh copy so a scripted response can be served more than once
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/parsers":
            return self._next(self.parsers)
        if path == "/parsers/options":
            return self._next(self.options)
        if path == "/me/limits":
            return self._next(self.limits)
        if path.startswith("/structures/list/") and path.endswith("/lpush"):
            self.pushed.append(orjson.loads(orjson.loads(request.content)["value"]))
            return self._next(self.push)
        if path.startswith("/kv/"):
            return self._next(self.kv)
        return httpx.Response(404, text=f"no route {path}")

    def count(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)

    @property
    def polls(self) -> int:
        return sum(1 for r in self.requests if r.url.path.startswith("/kv/"))


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def api(backend: FakeBackend) -> ApiClient:
    return ApiClient(ApiConfig.with_key(TEST_KEY, base_url=BASE_URL), transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def keyless_api(backend: FakeBackend) -> ApiClient:
    return ApiClient(ApiConfig(base_url=BASE_URL), transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def static_registry(api: ApiClient, clock: FakeClock) -> ParserRegistry:
    return ParserRegistry(api, RegistryConfig(enable_dynamic=False), clock=clock)


@pytest.fixture
def dynamic_registry(api: ApiClient, clock: FakeClock) -> ParserRegistry:
    return ParserRegistry(api, RegistryConfig(cache_ttl=300.0), clock=clock)


@pytest.fixture
def bridge(api: ApiClient, static_registry: ParserRegistry, clock: FakeClock) -> TaskBridge:
    return TaskBridge(api, static_registry, BridgeConfig(), clock=clock, id_factory=lambda: "task-1")


@pytest.fixture
def logs() -> Iterator[CapturingRenderer]:
    renderer = CapturingRenderer()
    set_renderer(renderer, "DEBUG")
    yield renderer
    set_renderer(NoOpRenderer(), "INFO")


@pytest.fixture(autouse=True)
def quiet_logs() -> Iterator[None]:
    """Keep test output clean unless a test captures logs."""
    set_renderer(NoOpRenderer(), "INFO")
    yield


_ENV_VARS = (
    "API_URL", "REDIS_API_KEY", "DYNAMIC_PARSERS", "DEBUG",
    "DEFAULT_AI_ENGINE", "DEFAULT_SEARCH_ENGINE", "DEFAULT_SOCIAL_ENGINE",
    "DEFAULT_VIDEO_ENGINE", "DEFAULT_TRANSLATION_ENGINE", "DEFAULT_EXTRACTION_ENGINE",
)
_ENV_PREFIXES = ("AYGA_REGISTRY_", "AYGA_POLL_", "AYGA_HTTP_", "AYGA_LOG_")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Settings under test never see the developer's environment."""
    for name in list(os.environ):
        if name in _ENV_VARS or name.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
