"""Runtime - execution support: clock, backoff, observability."""

from .clock import (
    SYSTEM_CLOCK,
    Clock,
    FakeClock,
    SystemClock,
    budget_exhausted,
    elapsed,
    is_fresh,
    remaining_budget,
)

__all__ = [
    "SYSTEM_CLOCK",
    "Clock",
    "FakeClock",
    "SystemClock",
    "budget_exhausted",
    "elapsed",
    "is_fresh",
    "remaining_budget",
]
