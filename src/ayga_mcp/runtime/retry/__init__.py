"""Backoff strategies used by the task result poll loop.

Example:
    >>> from ayga_mcp.runtime.retry import ConstantBackoff, RetryAfterBackoff
    >>> ConstantBackoff(2.0).delay(1)
    2.0
    >>> RetryAfterBackoff().from_header("3")
    3.0
"""

from .backoff import (
    Backoff,
    ConstantBackoff,
    RetryAfterBackoff,
    parse_retry_after,
)

__all__ = [
    "Backoff",
    "ConstantBackoff",
    "RetryAfterBackoff",
    "parse_retry_after",
]
