"""Backend API access: auth, HTTP client, rate-limit models, task queue."""

from .auth import ApiKeyAuth, AuthStrategy, NoAuth, auth_from_key
from .client import LIMITS_PATH, OPTIONS_PATH, PARSERS_PATH, ApiClient, ApiConfig
from .models import DayWindow, MinuteWindow, RateLimitStatus
from .queue import DEFAULT_PROFILE, DEFAULT_QUEUE, TaskQueue, build_task_payload

__all__ = [
    "ApiClient",
    "ApiConfig",
    "ApiKeyAuth",
    "AuthStrategy",
    "DEFAULT_PROFILE",
    "DEFAULT_QUEUE",
    "DayWindow",
    "LIMITS_PATH",
    "MinuteWindow",
    "NoAuth",
    "OPTIONS_PATH",
    "PARSERS_PATH",
    "RateLimitStatus",
    "TaskQueue",
    "auth_from_key",
    "build_task_payload",
]
