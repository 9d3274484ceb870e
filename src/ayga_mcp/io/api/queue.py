"""Remote task queue endpoints.

Tasks are pushed onto a list structure and their results read back from a
key-value slot named ``<queue>:<task_id>``.
"""

from __future__ import annotations

import httpx
import orjson

from .client import ApiClient

DEFAULT_QUEUE = "aparser_redis_api"
DEFAULT_PROFILE = "default"


def build_task_payload(task_id: str, engine: str, query: str, profile: str = DEFAULT_PROFILE) -> list[object]:
    """Fixed-shape task tuple understood by the parser workers."""
    return [task_id, engine, profile, query, {}, {}]


class TaskQueue:
    """Push tasks and read results for a single named queue."""

    __slots__ = ("_api", "name")

    def __init__(self, api: ApiClient, name: str = DEFAULT_QUEUE) -> None:
        self._api = api
        self.name = name

    @property
    def push_path(self) -> str:
        return f"/structures/list/{self.name}/lpush"

    def result_path(self, task_id: str) -> str:
        return f"/kv/{self.name}:{task_id}"

    async def push(self, payload: list[object]) -> httpx.Response:
        """Enqueue a task. The payload is serialized into the ``value`` string."""
        body = {"value": orjson.dumps(payload).decode()}
        return await self._api.post_json(self.push_path, body, require_auth=True)

    async def read(self, task_id: str) -> httpx.Response:
        return await self._api.get(self.result_path(task_id), require_auth=True)
