"""Task bridge: queue submission and result polling."""

from .bridge import BridgeConfig, TaskBridge
from .models import TaskOutcome, TaskResult, TaskState

__all__ = ["BridgeConfig", "TaskBridge", "TaskOutcome", "TaskResult", "TaskState"]
