"""Parser descriptors and the built-in static catalog.

A ``ParserDescriptor`` names one remote scraping engine. Descriptors come
from two places, the static table below and the control-plane's
``GET /parsers`` listing, and both produce the same frozen model.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Self

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ParserDescriptor(BaseModel):
    """One remote scraping engine exposed through the tool surface.

    Attributes:
        id: Unique slug used as the ``engine`` tool argument
        name: Display name
        category: Parser category (FreeAI, SE, Social, ...)
        description: One-line summary
        engine: Remote engine identifier sent in the task payload
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
        populate_by_name=True,
        revalidate_instances="never",
    )

    id: Annotated[str, Field(min_length=1)]
    name: str
    category: Annotated[str, Field(min_length=1)]
    description: str = ""
    engine: Annotated[str, Field(
        min_length=1,
        validation_alias=AliasChoices("engine", "aparser_name"),
        description="Remote engine identifier, e.g. SE::Google",
    )]

    @classmethod
    def from_static(cls, id: str, name: str, category: str, description: str, engine: str) -> Self:
        return cls(id=id, name=name, category=category, description=description, engine=engine)

    @classmethod
    def from_remote(cls, payload: Mapping[str, object]) -> Self:
        """Build from a control-plane entry (engine arrives as ``aparser_name``)."""
        return cls.model_validate(payload)

    def __hash__(self) -> int:
        return hash(self.id)


_P = ParserDescriptor.from_static

STATIC_PARSERS: tuple[ParserDescriptor, ...] = (
    # FreeAI
    _P("perplexity", "Perplexity AI", "FreeAI",
       "Research with Perplexity AI - comprehensive answers with sources", "FreeAI::Perplexity"),
    _P("googleai", "Google AI Mode", "FreeAI",
       "Google AI-powered search with structured sources", "FreeAI::GoogleAI"),
    _P("chatgpt", "ChatGPT", "FreeAI",
       "ChatGPT conversational AI with sources and images", "FreeAI::ChatGPT"),
    _P("kimi", "Kimi AI", "FreeAI",
       "Kimi AI for translations, explanations, summaries", "FreeAI::Kimi"),
    _P("deepai", "Deep AI", "FreeAI",
       "Deep AI with poems, stories, math, and code assistance", "FreeAI::DeepAI"),
    _P("copilot", "Microsoft Copilot", "FreeAI",
       "Microsoft Copilot for code and technical documentation", "FreeAI::Copilot"),
    # Net
    _P("http", "HTTP Fetcher", "Net",
       "Fetch raw content from publicly accessible URLs", "Net::HTTP"),
    # YouTube
    _P("youtube_video", "YouTube Video", "YouTube",
       "Parse YouTube video metadata, subtitles, comments", "SE::YouTube::Video"),
    _P("youtube_search", "YouTube Search", "YouTube",
       "Search YouTube videos by keywords", "SE::YouTube"),
    _P("youtube_suggest", "YouTube Suggestions", "YouTube",
       "Get search suggestions/autocomplete for keywords", "SE::YouTube::Suggest"),
    _P("youtube_channel_videos", "YouTube Channel Videos", "YouTube",
       "Collect all videos from a YouTube channel", "JS::Example::Youtube::Channel::Videos"),
    _P("youtube_channel_about", "YouTube Channel About", "YouTube",
       "Parse channel information from About page", "Net::HTTP"),
    _P("youtube_comments", "YouTube Comments", "YouTube",
       "Parse comments from YouTube videos", "JS::Example::Youtube::Comments"),
    # Social
    _P("telegram_group", "Telegram Group", "Social",
       "Parse messages and members from public Telegram groups", "Telegram::GroupScraper"),
    _P("reddit_posts", "Reddit Posts", "Social",
       "Parse posts from Reddit by keywords or communities", "Reddit::Posts"),
    _P("reddit_post_info", "Reddit Post Info", "Social",
       "Parse detailed information about a specific Reddit post", "Reddit::PostInfo"),
    _P("reddit_comments", "Reddit Comments", "Social",
       "Parse comments from Reddit by keyword or community", "Reddit::Comments"),
    _P("instagram_profile", "Instagram Profile", "Social",
       "Parse Instagram profile data: posts, followers, bio", "Social::Instagram::Profile"),
    _P("instagram_post", "Instagram Post", "Social",
       "Parse Instagram post data: likes, comments, caption", "Social::Instagram::Post"),
    _P("instagram_tag", "Instagram Tag", "Social",
       "Parse posts by hashtag from Instagram", "Social::Instagram::Tag"),
    _P("instagram_geo", "Instagram Geo", "Social",
       "Parse Instagram posts by location/geotag", "Social::Instagram::Geo"),
    _P("instagram_search", "Instagram Search", "Social",
       "Search Instagram: profiles, hashtags, locations", "Social::Instagram::Search"),
    _P("tiktok_profile", "TikTok Profile", "Social",
       "Parse TikTok profile data: videos, followers, bio", "Social::TikTok::Profile"),
    # Translation
    _P("google_translate", "Google Translate", "Translation",
       "Fast translation with transliteration and alternatives", "SE::Google::Translate"),
    _P("deepl_translate", "DeepL Translator", "Translation",
       "High-quality translation via DeepL", "DeepL::Translator"),
    _P("bing_translate", "Bing Translator", "Translation",
       "Reliable translation via Bing Translator", "SE::Bing::Translator"),
    _P("yandex_translate", "Yandex Translate", "Translation",
       "Fast translation via Yandex with captcha bypass", "SE::Yandex::Translate"),
    # SE
    _P("google_search", "Google Search", "SE",
       "Google web search results with all operators", "SE::Google"),
    _P("yandex_search", "Yandex Search", "SE",
       "Yandex search with captcha bypass", "SE::Yandex"),
    _P("bing_search", "Bing Search", "SE",
       "Bing search results up to 200 pages", "SE::Bing"),
    _P("duckduckgo_search", "DuckDuckGo Search", "SE",
       "Privacy-focused DuckDuckGo search", "SE::DuckDuckGo"),
    _P("baidu_search", "Baidu Search", "SE",
       "Chinese search engine Baidu", "SE::Baidu"),
    _P("yahoo_search", "Yahoo Search", "SE",
       "Yahoo search results", "SE::Yahoo"),
    _P("rambler_search", "Rambler Search", "SE",
       "Russian search engine Rambler", "SE::Rambler"),
    _P("you_search", "You.com Search", "SE",
       "You.com AI-powered search", "SE::You"),
    # Content
    _P("article_extractor", "Article Extractor", "Content",
       "Extract articles using Mozilla Readability", "HTML::ArticleExtractor"),
    _P("text_extractor", "Text Extractor", "Content",
       "Parse text blocks from web pages", "HTML::TextExtractor"),
    _P("link_extractor", "Link Extractor", "Content",
       "Extract all links from HTML pages", "HTML::LinkExtractor"),
    # Analytics
    _P("google_trends", "Google Trends", "Analytics",
       "Parse trending keywords from Google Trends", "SE::Google::Trends"),
    # Visual
    _P("pinterest_search", "Pinterest Search", "Visual",
       "Parse Pinterest search results: images, titles", "SE::Pinterest"),
)

del _P


def find_by_id(parsers: tuple[ParserDescriptor, ...], parser_id: str) -> ParserDescriptor | None:
    return next((p for p in parsers if p.id == parser_id), None)


def find_by_engine(parsers: tuple[ParserDescriptor, ...], engine: str) -> ParserDescriptor | None:
    """First descriptor for ``engine`` (several ids may share one engine)."""
    return next((p for p in parsers if p.engine == engine), None)


def filter_by_category(parsers: tuple[ParserDescriptor, ...], category: str) -> tuple[ParserDescriptor, ...]:
    return tuple(p for p in parsers if p.category == category)


def unique_categories(parsers: tuple[ParserDescriptor, ...]) -> list[str]:
    """Distinct categories in first-seen order."""
    return list(dict.fromkeys(p.category for p in parsers))


def get_parser_by_id(parser_id: str) -> ParserDescriptor | None:
    return find_by_id(STATIC_PARSERS, parser_id)


def get_parser_by_engine(engine: str) -> ParserDescriptor | None:
    return find_by_engine(STATIC_PARSERS, engine)


def get_parsers_by_category(category: str) -> tuple[ParserDescriptor, ...]:
    return filter_by_category(STATIC_PARSERS, category)


def get_all_categories() -> list[str]:
    return unique_categories(STATIC_PARSERS)
