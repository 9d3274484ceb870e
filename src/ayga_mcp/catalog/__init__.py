"""Parser catalog: descriptors, static table, options and the cached registry."""

from .options import DEFAULT_TIMEOUT, DefaultOptions, ParserOptions, parse_overrides
from .parsers import (
    STATIC_PARSERS,
    ParserDescriptor,
    get_all_categories,
    get_parser_by_engine,
    get_parser_by_id,
    get_parsers_by_category,
)
from .registry import ParserRegistry, RegistryConfig

__all__ = [
    "DEFAULT_TIMEOUT",
    "DefaultOptions",
    "ParserDescriptor",
    "ParserOptions",
    "ParserRegistry",
    "RegistryConfig",
    "STATIC_PARSERS",
    "get_all_categories",
    "get_parser_by_engine",
    "get_parser_by_id",
    "get_parsers_by_category",
    "parse_overrides",
]
