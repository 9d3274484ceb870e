"""Submit a task to the remote queue and poll for its result.

State machine per call::

    SUBMITTING -> POLLING -> SUCCEEDED | FAILED | TIMED_OUT

Resolution and submission failures are terminal. While polling, 404 (not
ready), transport errors and bodies that are not JSON wait the poll
interval; 429 waits the server's ``Retry-After``. Any well-formed stored
value is a result. Any other status is terminal. Time is read through an
injected ``Clock``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING
from uuid import uuid4

import httpx
import orjson
from pydantic import BaseModel, ConfigDict, PositiveFloat

from ayga_mcp.catalog import ParserRegistry
from ayga_mcp.foundation.errors import ErrorCode, describe_exception
from ayga_mcp.io.api import ApiClient, TaskQueue, build_task_payload
from ayga_mcp.runtime import SYSTEM_CLOCK, Clock, budget_exhausted, elapsed
from ayga_mcp.runtime.observability import get_logger
from ayga_mcp.runtime.retry import ConstantBackoff, RetryAfterBackoff

from .models import TaskOutcome, TaskResult, TaskState

if TYPE_CHECKING:
    from ayga_mcp.foundation.config import AygaSettings

log = get_logger("ayga.bridge")


class BridgeConfig(BaseModel):
    """Polling behaviour of a ``TaskBridge``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    poll_interval: PositiveFloat = 2.0
    rate_limit_delay: PositiveFloat = 5.0
    queue_name: str = "aparser_redis_api"

    @classmethod
    def from_settings(cls, settings: AygaSettings) -> BridgeConfig:
        return cls(
            poll_interval=settings.poll.interval,
            rate_limit_delay=settings.poll.rate_limit_delay,
            queue_name=settings.poll.queue_name,
        )


def _new_task_id() -> str:
    return str(uuid4())


class TaskBridge:
    """Runs one parser task end to end.

    Args:
        api: Backend client (must carry an API key to submit)
        registry: Resolves engine ids and per-parser options
        config: Poll interval, 429 fallback delay, queue name
        clock: Time source; ``FakeClock`` in tests
        id_factory: Task id generator
    """

    __slots__ = ("_api", "_registry", "_config", "_clock", "_queue", "_not_ready", "_throttled", "_new_id")

    def __init__(
        self,
        api: ApiClient,
        registry: ParserRegistry,
        config: BridgeConfig | None = None,
        *,
        clock: Clock = SYSTEM_CLOCK,
        id_factory: Callable[[], str] = _new_task_id,
    ) -> None:
        self._api = api
        self._registry = registry
        self._config = config or BridgeConfig()
        self._clock = clock
        self._queue = TaskQueue(api, self._config.queue_name)
        self._not_ready = ConstantBackoff(self._config.poll_interval)
        self._throttled = RetryAfterBackoff(self._config.rate_limit_delay)
        self._new_id = id_factory

    @property
    def queue(self) -> TaskQueue:
        return self._queue

    async def run(self, engine_id: str, query: str, timeout: float | None = None) -> TaskOutcome:
        """Submit ``query`` to the parser ``engine_id`` and wait for a terminal outcome.

        ``timeout`` bounds the polling phase; when omitted the parser's
        configured timeout applies.
        """
        started = self._clock.monotonic()
        phase = TaskState.SUBMITTING

        def finish(state: TaskState, **kw: object) -> TaskOutcome:
            return TaskOutcome(
                parser_id=engine_id, state=state, phase=phase,
                elapsed=elapsed(started, self._clock.monotonic()), **kw,  # type: ignore[arg-type]
            )

        parser = await self._registry.get_parser_by_id(engine_id)
        if parser is None:
            return finish(TaskState.FAILED, code=ErrorCode.UNKNOWN_PARSER, message=f"Unknown parser: {engine_id}")

        options = await self._registry.get_parser_options(parser.id)
        if not options.enabled:
            return finish(TaskState.FAILED, code=ErrorCode.PARSER_DISABLED, message=f"Parser is disabled: {parser.id}")

        if not self._api.has_key:
            return finish(
                TaskState.FAILED, code=ErrorCode.API_KEY_MISSING,
                message="REDIS_API_KEY environment variable is required",
            )

        budget = timeout or options.timeout
        task_id = self._new_id()
        task_log = log.bind(task_id=task_id, parser=parser.id)
        task_log.info("submitting task", engine=parser.engine, timeout=budget)

        try:
            response = await self._queue.push(build_task_payload(task_id, parser.engine, query))
        except httpx.HTTPError as e:
            task_log.error("task submission error", error=f"{type(e).__name__}: {e}")
            return finish(
                TaskState.FAILED, task_id=task_id, code=ErrorCode.NETWORK_ERROR,
                message=f"Task submission failed: {describe_exception(e)}",
            )
        if not response.is_success:
            task_log.error("task submission rejected", status=response.status_code)
            return finish(
                TaskState.FAILED, task_id=task_id, code=ErrorCode.SUBMISSION_FAILED,
                message=f"Task submission failed ({response.status_code}): {response.text}",
                status_code=response.status_code, body=response.text,
            )

        phase = TaskState.POLLING
        polling_since = self._clock.monotonic()
        attempts = 0
        while not budget_exhausted(polling_since, self._clock.monotonic(), budget):
            attempts += 1
            try:
                response = await self._queue.read(task_id)
            except httpx.HTTPError as e:
                task_log.debug("poll attempt failed, retrying", attempt=attempts, error=f"{type(e).__name__}: {e}")
                await self._clock.sleep(self._not_ready.delay(attempts))
                continue

            if response.is_success:
                try:
                    result = _decode_result(response)
                except (ValueError, KeyError, TypeError) as e:
                    task_log.debug("unreadable result, retrying", attempt=attempts, error=str(e))
                    await self._clock.sleep(self._not_ready.delay(attempts))
                    continue
                task_log.info("task completed", attempts=attempts)
                return finish(TaskState.SUCCEEDED, task_id=task_id, attempts=attempts, result=result)

            if response.status_code == 404:
                await self._clock.sleep(self._not_ready.delay(attempts))
                continue

            if response.status_code == 429:
                delay = self._throttled.from_header(response.headers.get("Retry-After"))
                task_log.debug("rate limited, waiting", delay=delay)
                await self._clock.sleep(delay)
                continue

            task_log.error("poll failed", status=response.status_code)
            return finish(
                TaskState.FAILED, task_id=task_id, attempts=attempts, code=ErrorCode.POLL_FAILED,
                message=f"Failed to get result ({response.status_code}): {response.text}",
                status_code=response.status_code, body=response.text,
            )

        task_log.warning("task timed out", attempts=attempts, timeout=budget)
        return finish(
            TaskState.TIMED_OUT, task_id=task_id, attempts=attempts, code=ErrorCode.TIMEOUT,
            message=f"Timeout waiting for result after {budget:g}s ({attempts} attempts)",
        )

    async def execute(self, engine_id: str, query: str, timeout: float | None = None) -> TaskResult:
        """Run and return the result, raising ``ToolException`` on any other outcome."""
        return (await self.run(engine_id, query, timeout)).raise_for_state()


def _decode_result(response: httpx.Response) -> TaskResult:
    envelope = orjson.loads(response.content)
    return TaskResult.decode(envelope["value"])
