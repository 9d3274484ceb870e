"""Backoff strategies for the result poll loop.

Provides pluggable delay calculation between poll attempts:
- ConstantBackoff: Fixed delay (task not ready yet, transient network faults)
- RetryAfterBackoff: Server-directed delay from a ``Retry-After`` header (429)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation.

    Attempt numbers are 1-indexed poll attempts.
    """

    def delay(self, attempt: int) -> float:
        """Calculate delay in seconds before the next attempt."""
        ...


@dataclass(frozen=True, slots=True)
class ConstantBackoff:
    """Fixed delay between attempts.

    Attributes:
        delay_seconds: Fixed delay in seconds (default: 2.0)
    """

    delay_seconds: float = 2.0

    def delay(self, attempt: int) -> float:
        return self.delay_seconds


@dataclass(frozen=True, slots=True)
class RetryAfterBackoff:
    """Delay dictated by the server's ``Retry-After`` header.

    Only the delta-seconds form is honored; anything else falls back to
    ``default_seconds``. The delay is never clipped to a remaining budget.

    Attributes:
        default_seconds: Delay used when the header is absent or unparseable
    """

    default_seconds: float = 5.0

    def delay(self, attempt: int) -> float:
        return self.default_seconds

    def from_header(self, value: str | None) -> float:
        """Parse a Retry-After header value into seconds."""
        return parse_retry_after(value, self.default_seconds)


def parse_retry_after(value: str | None, default: float = 5.0) -> float:
    """Parse ``Retry-After`` delta-seconds. Falls back to ``default``.

    Example:
        >>> parse_retry_after("3")
        3.0
        >>> parse_retry_after(None), parse_retry_after("soon")
        (5.0, 5.0)
    """
    if value is None:
        return default
    try:
        seconds = float(value.strip())
    except ValueError:
        return default
    if math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        return default
    return seconds
