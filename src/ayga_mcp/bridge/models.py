"""Task bridge states, results and outcomes."""

from __future__ import annotations

from enum import StrEnum

import orjson
from pydantic import BaseModel, ConfigDict

from ayga_mcp.foundation.errors import ErrorCode, ToolError, ToolException


class TaskState(StrEnum):
    """Lifecycle of one bridged call. The last three are terminal."""

    SUBMITTING = "submitting"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.SUCCEEDED, TaskState.FAILED, TaskState.TIMED_OUT)


class TaskResult(BaseModel):
    """Worker result, kept exactly as decoded.

    Any well-formed JSON value is a result: objects with unexpected field
    types, arrays and scalars included.
    """

    model_config = ConfigDict(frozen=True)

    value: object = None

    @classmethod
    def decode(cls, value: object) -> TaskResult:
        """Decode a stored result, either serialized JSON or an already-decoded value."""
        if isinstance(value, (str, bytes)):
            value = orjson.loads(value)
        return cls(value=value)

    def to_output(self) -> object:
        return self.value

    def render(self) -> str:
        return orjson.dumps(self.value, option=orjson.OPT_INDENT_2).decode()


class TaskOutcome(BaseModel):
    """Terminal report of one submit-and-poll run."""

    model_config = ConfigDict(frozen=True)

    task_id: str | None = None
    parser_id: str
    state: TaskState
    phase: TaskState = TaskState.SUBMITTING  # last non-terminal state reached
    attempts: int = 0
    elapsed: float = 0.0
    result: TaskResult | None = None
    code: ErrorCode | None = None
    message: str | None = None
    status_code: int | None = None
    body: str | None = None

    @property
    def ok(self) -> bool:
        return self.state is TaskState.SUCCEEDED

    def to_error(self, tool_name: str) -> ToolError:
        return ToolError.create(
            tool_name,
            self.message or f"Task {self.state.value}",
            self.code or ErrorCode.UNKNOWN,
            recoverable=self.state is TaskState.TIMED_OUT or self.code in (ErrorCode.NETWORK_ERROR, ErrorCode.RATE_LIMITED),
        )

    def raise_for_state(self, tool_name: str = "ayga") -> TaskResult:
        """Return the result, or raise ``ToolException`` for a non-success outcome."""
        if self.state is TaskState.SUCCEEDED and self.result is not None:
            return self.result
        raise ToolException(self.to_error(tool_name))
