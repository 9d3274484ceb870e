"""Tests for the task bridge submit/poll state machine."""

import httpx
import orjson
import pytest

from ayga_mcp.bridge import BridgeConfig, TaskBridge, TaskResult, TaskState
from ayga_mcp.catalog import ParserRegistry, RegistryConfig
from ayga_mcp.foundation.errors import ErrorCode, ToolException
from ayga_mcp.io.api import ApiClient
from ayga_mcp.runtime import FakeClock

from .conftest import FakeBackend, json_response

READY = json_response(200, {"value": orjson.dumps({"success": 1, "info": {}}).decode()})


@pytest.mark.asyncio
async def test_end_to_end_google_search(bridge: TaskBridge, backend: FakeBackend, clock: FakeClock) -> None:
    backend.kv = [httpx.Response(404), READY]

    outcome = await bridge.run("google_search", "weather today")

    assert outcome.state is TaskState.SUCCEEDED
    assert outcome.result is not None
    assert outcome.result.value == {"success": 1, "info": {}}
    assert outcome.phase is TaskState.POLLING
    assert outcome.attempts == 2
    assert backend.polls == 2
    assert backend.pushed == [["task-1", "SE::Google", "default", "weather today", {}, {}]]
    assert clock.sleeps == [2.0]


@pytest.mark.asyncio
async def test_submit_and_poll_wire_format(bridge: TaskBridge, backend: FakeBackend) -> None:
    backend.kv = [READY]

    await bridge.run("perplexity", "hello")

    push, poll = backend.requests
    assert push.method == "POST"
    assert push.url.path == "/structures/list/aparser_redis_api/lpush"
    assert push.headers["X-API-Key"] == "ayga_live_test_key"
    assert isinstance(orjson.loads(push.content)["value"], str)
    assert poll.method == "GET"
    assert poll.url.path == "/kv/aparser_redis_api:task-1"


@pytest.mark.asyncio
async def test_value_may_be_decoded_object(bridge: TaskBridge, backend: FakeBackend) -> None:
    backend.kv = [json_response(200, {"value": {"success": 1, "info": {"k": "v"}, "data": [1, 2], "extra": True}})]

    outcome = await bridge.run("google_search", "q")

    assert outcome.ok
    assert outcome.result.value == {"success": 1, "info": {"k": "v"}, "data": [1, 2], "extra": True}  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_continuous_404_times_out(bridge: TaskBridge, backend: FakeBackend, clock: FakeClock) -> None:
    outcome = await bridge.run("google_search", "q", timeout=10)

    assert outcome.state is TaskState.TIMED_OUT
    assert outcome.code is ErrorCode.TIMEOUT
    assert outcome.attempts == 5
    assert "(5 attempts)" in (outcome.message or "")
    assert clock.now >= 10


@pytest.mark.asyncio
async def test_default_budget_comes_from_parser_options(bridge: TaskBridge, clock: FakeClock) -> None:
    outcome = await bridge.run("google_search", "q")

    assert outcome.state is TaskState.TIMED_OUT
    assert outcome.attempts == 30
    assert clock.now == pytest.approx(60.0)


@pytest.mark.asyncio
async def test_rate_limit_honors_retry_after(bridge: TaskBridge, backend: FakeBackend, clock: FakeClock) -> None:
    backend.kv = [httpx.Response(429, headers={"Retry-After": "3"}), READY]

    outcome = await bridge.run("google_search", "q")

    assert outcome.ok
    assert clock.sleeps == [3.0]


@pytest.mark.asyncio
async def test_rate_limit_without_header_waits_default(bridge: TaskBridge, backend: FakeBackend, clock: FakeClock) -> None:
    backend.kv = [httpx.Response(429), httpx.Response(429, headers={"Retry-After": "soon"}), READY]

    await bridge.run("google_search", "q")

    assert clock.sleeps == [5.0, 5.0]


@pytest.mark.asyncio
async def test_rate_limit_delay_not_clipped_to_budget(bridge: TaskBridge, backend: FakeBackend, clock: FakeClock) -> None:
    backend.kv = [httpx.Response(429, headers={"Retry-After": "30"})]

    outcome = await bridge.run("google_search", "q", timeout=5)

    assert outcome.state is TaskState.TIMED_OUT
    assert clock.sleeps == [30.0]
    assert outcome.attempts == 1


@pytest.mark.asyncio
async def test_unknown_engine_fails_without_submission(bridge: TaskBridge, backend: FakeBackend) -> None:
    outcome = await bridge.run("altavista", "q")

    assert outcome.state is TaskState.FAILED
    assert outcome.code is ErrorCode.UNKNOWN_PARSER
    assert outcome.message == "Unknown parser: altavista"
    assert outcome.phase is TaskState.SUBMITTING
    assert backend.requests == []


@pytest.mark.asyncio
async def test_disabled_parser_fails_without_submission(api: ApiClient, backend: FakeBackend, clock: FakeClock) -> None:
    backend.options = [json_response(200, {"overrides": {"google_search": {"enabled": False}}})]
    registry = ParserRegistry(api, RegistryConfig(), clock=clock)
    bridge = TaskBridge(api, registry, clock=clock)

    outcome = await bridge.run("google_search", "q")

    assert outcome.code is ErrorCode.PARSER_DISABLED
    assert backend.pushed == []


@pytest.mark.asyncio
async def test_missing_key_fails_without_submission(keyless_api: ApiClient, backend: FakeBackend, clock: FakeClock) -> None:
    registry = ParserRegistry(keyless_api, RegistryConfig(enable_dynamic=False), clock=clock)

    outcome = await TaskBridge(keyless_api, registry, clock=clock).run("google_search", "q")

    assert outcome.code is ErrorCode.API_KEY_MISSING
    assert backend.requests == []


@pytest.mark.asyncio
async def test_submission_rejected(bridge: TaskBridge, backend: FakeBackend) -> None:
    backend.push = [httpx.Response(403, text="forbidden")]

    outcome = await bridge.run("google_search", "q")

    assert outcome.state is TaskState.FAILED
    assert outcome.code is ErrorCode.SUBMISSION_FAILED
    assert (outcome.status_code, outcome.body) == (403, "forbidden")
    assert outcome.message == "Task submission failed (403): forbidden"
    assert outcome.phase is TaskState.SUBMITTING
    assert backend.polls == 0


@pytest.mark.asyncio
async def test_submission_transport_error(bridge: TaskBridge, backend: FakeBackend) -> None:
    backend.push = [httpx.ConnectError("refused")]

    outcome = await bridge.run("google_search", "q")

    assert outcome.code is ErrorCode.NETWORK_ERROR


@pytest.mark.asyncio
async def test_unexpected_poll_status_is_terminal(bridge: TaskBridge, backend: FakeBackend) -> None:
    backend.kv = [httpx.Response(404), httpx.Response(500, text="kaput")]

    outcome = await bridge.run("google_search", "q")

    assert outcome.state is TaskState.FAILED
    assert outcome.code is ErrorCode.POLL_FAILED
    assert outcome.attempts == 2
    assert outcome.message == "Failed to get result (500): kaput"
    assert outcome.phase is TaskState.POLLING


@pytest.mark.asyncio
async def test_transport_errors_and_malformed_bodies_are_retried(
    bridge: TaskBridge, backend: FakeBackend, clock: FakeClock
) -> None:
    backend.kv = [
        httpx.ReadTimeout("slow"),
        httpx.Response(200, text="not json"),
        json_response(200, {"value": "{broken"}),
        READY,
    ]

    outcome = await bridge.run("google_search", "q")

    assert outcome.ok
    assert outcome.attempts == 4
    assert clock.sleeps == [2.0, 2.0, 2.0]


@pytest.mark.asyncio
async def test_custom_poll_interval(api: ApiClient, static_registry: ParserRegistry, backend: FakeBackend, clock: FakeClock) -> None:
    bridge = TaskBridge(api, static_registry, BridgeConfig(poll_interval=0.5, queue_name="q2"), clock=clock)
    backend.kv = [httpx.Response(404), READY]

    await bridge.run("google_search", "q")

    assert clock.sleeps == [0.5]
    assert backend.requests[0].url.path == "/structures/list/q2/lpush"


@pytest.mark.asyncio
async def test_execute_raises_for_failed_outcome(bridge: TaskBridge) -> None:
    with pytest.raises(ToolException) as exc_info:
        await bridge.execute("altavista", "q")
    assert exc_info.value.code is ErrorCode.UNKNOWN_PARSER


def test_task_result_decode_keeps_unknown_keys() -> None:
    result = TaskResult.decode('{"success": 0, "info": {}, "sources": [], "custom": {"a": 1}}')
    assert result.to_output() == {"success": 0, "info": {}, "sources": [], "custom": {"a": 1}}


def test_task_result_renders_decoded_value_verbatim() -> None:
    assert TaskResult.decode("[1, 2]").render() == "[\n  1,\n  2\n]"
    assert TaskResult.decode(b"null").value is None
    assert TaskResult.decode({"info": None}).to_output() == {"info": None}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "stored, expected",
    [
        ('{"success": 1, "info": null, "data": "x"}', {"success": 1, "info": None, "data": "x"}),
        ('{"success": "yes", "sources": {"a": 1}}', {"success": "yes", "sources": {"a": 1}}),
        ("[1, 2]", [1, 2]),
        ('"plain text"', "plain text"),
    ],
)
async def test_any_well_formed_result_succeeds_on_first_poll(
    bridge: TaskBridge, backend: FakeBackend, clock: FakeClock, stored: str, expected: object
) -> None:
    backend.kv = [json_response(200, {"value": stored})]

    outcome = await bridge.run("google_search", "q")

    assert outcome.state is TaskState.SUCCEEDED
    assert outcome.result is not None
    assert outcome.result.value == expected
    assert outcome.attempts == 1
    assert backend.polls == 1
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_timeout_reports_polling_phase(bridge: TaskBridge) -> None:
    outcome = await bridge.run("google_search", "q", timeout=4)

    assert outcome.state is TaskState.TIMED_OUT
    assert outcome.phase is TaskState.POLLING


@pytest.mark.asyncio
async def test_configured_default_timeout_bounds_polling(api: ApiClient, clock: FakeClock) -> None:
    registry = ParserRegistry(api, RegistryConfig(enable_dynamic=False, default_timeout=10), clock=clock)

    outcome = await TaskBridge(api, registry, clock=clock).run("google_search", "q")

    assert outcome.state is TaskState.TIMED_OUT
    assert outcome.attempts == 5
    assert outcome.message == "Timeout waiting for result after 10s (5 attempts)"
