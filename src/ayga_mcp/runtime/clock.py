"""Time source abstraction for polling loops and cache expiry.

Polling and TTL logic read time through a ``Clock`` so tests can run the
full state machine in virtual time. Budget arithmetic is kept in pure
functions of (start, now, timeout).
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Monotonic time source with a cooperative sleep."""

    def monotonic(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class SystemClock:
    """Real clock: ``time.monotonic`` and ``asyncio.sleep``."""

    __slots__ = ()

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


@dataclass(slots=True)
class FakeClock:
    """Virtual clock for tests. ``sleep`` advances time instantly and records the delay.

    Example:
        >>> clock = FakeClock()
        >>> asyncio.run(clock.sleep(2.0))
        >>> clock.monotonic(), clock.sleeps
        (2.0, [2.0])
    """

    now: float = 0.0
    sleeps: list[float] = field(default_factory=list)

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += max(seconds, 0.0)
        await asyncio.sleep(0)

    def advance(self, seconds: float) -> None:
        self.now += seconds


SYSTEM_CLOCK = SystemClock()


def elapsed(started_at: float, now: float) -> float:
    """Seconds elapsed since ``started_at`` (never negative)."""
    return max(now - started_at, 0.0)


def remaining_budget(started_at: float, now: float, timeout: float) -> float:
    """Seconds left of a ``timeout`` budget that began at ``started_at``."""
    return max(timeout - elapsed(started_at, now), 0.0)


def budget_exhausted(started_at: float, now: float, timeout: float) -> bool:
    return remaining_budget(started_at, now, timeout) <= 0.0


def is_fresh(stamped_at: float | None, now: float, ttl: float) -> bool:
    """Whether a value stamped at ``stamped_at`` is still within ``ttl``."""
    return stamped_at is not None and elapsed(stamped_at, now) < ttl
