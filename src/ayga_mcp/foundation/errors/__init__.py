"""Unified error handling for ayga-mcp.

- ErrorCode: Standard error codes for tool failures
- ToolError/ToolException: Structured errors and exceptions
- classify_exception: Map arbitrary exceptions onto error codes
"""

from .errors import ErrorCode, ToolError, ToolException, classify_exception, describe_exception

__all__ = ["ErrorCode", "ToolError", "ToolException", "classify_exception", "describe_exception"]
