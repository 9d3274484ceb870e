"""ayga-mcp: scraping parsers as consolidated MCP tools.

Six category tools (ask_ai, search_web, get_social, get_video, translate,
extract) plus ``list_parsers`` and ``ayga_check_limits``. Each call is
submitted to the remote task queue and polled until a result arrives.

Quick Start:
    >>> from ayga_mcp import build_app
    >>> app = build_app()
    >>> response = await app.tools.execute("search_web", {"query": "weather today"})
    >>> print(response.text)
"""

from .app import SERVER_NAME, SERVER_VERSION, AygaApp, build_app
from .bridge import TaskBridge, TaskOutcome, TaskResult, TaskState
from .catalog import STATIC_PARSERS, ParserDescriptor, ParserRegistry, RegistryConfig
from .foundation.config import AygaSettings, get_settings
from .foundation.errors import ErrorCode, ToolError, ToolException
from .tools import TOOL_CATEGORIES, ToolCategory, ToolRegistry, ToolResponse

__version__ = SERVER_VERSION

__all__ = [
    "AygaApp",
    "AygaSettings",
    "ErrorCode",
    "ParserDescriptor",
    "ParserRegistry",
    "RegistryConfig",
    "SERVER_NAME",
    "SERVER_VERSION",
    "STATIC_PARSERS",
    "TOOL_CATEGORIES",
    "TaskBridge",
    "TaskOutcome",
    "TaskResult",
    "TaskState",
    "ToolCategory",
    "ToolError",
    "ToolException",
    "ToolRegistry",
    "ToolResponse",
    "build_app",
    "get_settings",
    "__version__",
]
