"""Consolidated tool categories.

Each category folds one or more parser categories into a single MCP tool
with an ``engine`` argument, so clients see six tools instead of one per
parser.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class ToolCategory(BaseModel):
    """One consolidated tool and the parser categories it serves.

    Attributes:
        id: Tool name exposed to MCP clients
        name: Display name
        description: Tool description shown to the model
        categories: Parser categories routed to this tool
        default_engine: Parser id used when no engine is given
        default_env_var: Environment variable overriding ``default_engine``
        query_description: Description of the ``query`` argument
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    name: str
    description: str = Field(..., min_length=10)
    categories: Annotated[tuple[str, ...], Field(min_length=1)]
    default_engine: str
    default_env_var: str
    query_description: str


TOOL_CATEGORIES: tuple[ToolCategory, ...] = (
    ToolCategory(
        id="ask_ai",
        name="Ask AI",
        description="Query AI models like Perplexity, ChatGPT, Google AI, Kimi, DeepAI, Copilot for answers and analysis",
        categories=("FreeAI",),
        default_engine="perplexity",
        default_env_var="DEFAULT_AI_ENGINE",
        query_description="Question or prompt for the AI model",
    ),
    ToolCategory(
        id="search_web",
        name="Web Search",
        description=(
            "Search the web using Google, Bing, DuckDuckGo, Yandex, Baidu, Yahoo, Rambler, You.com "
            "or get Google Trends data"
        ),
        categories=("SE", "Analytics"),
        default_engine="google_search",
        default_env_var="DEFAULT_SEARCH_ENGINE",
        query_description="Search query",
    ),
    ToolCategory(
        id="get_social",
        name="Social Media",
        description=(
            "Get data from social platforms: Instagram profiles/posts/tags/geo, TikTok, "
            "Reddit posts/comments, Telegram groups, Pinterest"
        ),
        categories=("Social", "Visual"),
        default_engine="instagram_profile",
        default_env_var="DEFAULT_SOCIAL_ENGINE",
        query_description="Username, URL, or search query",
    ),
    ToolCategory(
        id="get_video",
        name="Video Data",
        description="Search YouTube videos, get video details, comments, or channel information",
        categories=("YouTube",),
        default_engine="youtube_search",
        default_env_var="DEFAULT_VIDEO_ENGINE",
        query_description="Search query or video/channel URL",
    ),
    ToolCategory(
        id="translate",
        name="Translate",
        description="Translate text using Google Translate, DeepL, Bing, or Yandex",
        categories=("Translation",),
        default_engine="google_translate",
        default_env_var="DEFAULT_TRANSLATION_ENGINE",
        query_description="Text to translate",
    ),
    ToolCategory(
        id="extract",
        name="Extract Content",
        description="Extract text, articles, or links from web pages",
        categories=("Content",),
        default_engine="text_extractor",
        default_env_var="DEFAULT_EXTRACTION_ENGINE",
        query_description="URL of the web page",
    ),
)

_BY_ID: dict[str, ToolCategory] = {c.id: c for c in TOOL_CATEGORIES}


def get_tool_category(tool_id: str) -> ToolCategory | None:
    return _BY_ID.get(tool_id)
