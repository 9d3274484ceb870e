"""Parser registry: remote catalog with TTL cache and static fallback.

The registry never leaves callers without parsers. A failed first fetch
serves the static catalog (and retries on the next call); a failed later
fetch keeps the last good collection. Concurrent callers during a fetch
share a single in-flight task.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ConfigDict, PositiveFloat

from ayga_mcp.io.api import OPTIONS_PATH, PARSERS_PATH, ApiClient
from ayga_mcp.runtime import SYSTEM_CLOCK, Clock, is_fresh
from ayga_mcp.runtime.observability import get_logger

from .options import DEFAULT_TIMEOUT, DefaultOptions, ParserOptions, parse_overrides
from .parsers import (
    STATIC_PARSERS,
    ParserDescriptor,
    filter_by_category,
    find_by_engine,
    find_by_id,
    unique_categories,
)

if TYPE_CHECKING:
    from ayga_mcp.foundation.config import AygaSettings

log = get_logger("ayga.registry")

_PARSERS = "parsers"
_OPTIONS = "options"


class RegistryConfig(BaseModel):
    """Cache behaviour of a ``ParserRegistry``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cache_ttl: PositiveFloat = 300.0
    enable_dynamic: bool = True
    default_timeout: PositiveFloat = DEFAULT_TIMEOUT

    @classmethod
    def from_settings(cls, settings: AygaSettings) -> RegistryConfig:
        return cls(
            cache_ttl=settings.registry.cache_ttl,
            enable_dynamic=settings.dynamic_parsers,
            default_timeout=settings.poll.default_timeout,
        )


class _ParserListing(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parsers: list[dict[str, object]]


class _OptionsListing(BaseModel):
    model_config = ConfigDict(extra="ignore")

    defaults: dict[str, object] | None = None
    overrides: dict[str, dict[str, object]] | None = None


class ParserRegistry:
    """Authoritative parser list for tool listing and engine resolution.

    Example:
        >>> registry = ParserRegistry(ApiClient(), RegistryConfig(enable_dynamic=False))
        >>> [p.id for p in await registry.get_parsers()][:2]
        ['perplexity', 'googleai']
    """

    __slots__ = (
        "_api", "_config", "_clock", "_parsers", "_fetched_at", "_initialized",
        "_overrides", "_defaults", "_options_fetched_at", "_inflight",
    )

    def __init__(self, api: ApiClient, config: RegistryConfig | None = None, *, clock: Clock = SYSTEM_CLOCK) -> None:
        self._api = api
        self._config = config or RegistryConfig()
        self._clock = clock
        self._parsers: tuple[ParserDescriptor, ...] = ()
        self._fetched_at: float | None = None
        self._initialized = False
        self._overrides: dict[str, ParserOptions] = {}
        self._defaults = DefaultOptions(timeout=self._config.default_timeout)
        self._options_fetched_at: float | None = None
        self._inflight: dict[str, asyncio.Task[object]] = {}

    @property
    def config(self) -> RegistryConfig:
        return self._config

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def default_options(self) -> DefaultOptions:
        return self._defaults

    # ─────────────────────────────────────────────────────────────────
    # Parsers
    # ─────────────────────────────────────────────────────────────────

    async def get_parsers(self) -> tuple[ParserDescriptor, ...]:
        if not self._config.enable_dynamic:
            return STATIC_PARSERS
        if self._initialized and is_fresh(self._fetched_at, self._clock.monotonic(), self._config.cache_ttl):
            return self._parsers
        return await self._shared(_PARSERS, self._fetch_parsers)  # type: ignore[return-value]

    async def get_parser_by_id(self, parser_id: str) -> ParserDescriptor | None:
        return find_by_id(await self.get_parsers(), parser_id)

    async def get_parser_by_engine(self, engine: str) -> ParserDescriptor | None:
        return find_by_engine(await self.get_parsers(), engine)

    async def get_parsers_by_category(self, category: str) -> tuple[ParserDescriptor, ...]:
        return filter_by_category(await self.get_parsers(), category)

    async def get_categories(self) -> list[str]:
        return unique_categories(await self.get_parsers())

    def get_static_parsers(self) -> tuple[ParserDescriptor, ...]:
        return STATIC_PARSERS

    async def refresh(self) -> tuple[ParserDescriptor, ...]:
        """Drop the cache stamp and refetch."""
        self._fetched_at = None
        self._inflight.pop(_PARSERS, None)
        return await self.get_parsers()

    async def _fetch_parsers(self) -> tuple[ParserDescriptor, ...]:
        log.debug("fetching parsers", path=PARSERS_PATH)
        try:
            listing = _ParserListing.model_validate(await self._api.get_json(PARSERS_PATH))
            parsers = tuple(
                ParserDescriptor.from_remote(entry)
                for entry in listing.parsers
                if entry.get("enabled") is not False
            )
        except (httpx.HTTPError, ValueError) as e:
            log.error("parser fetch failed", error=f"{type(e).__name__}: {e}")
            if not self._initialized:
                self._parsers = STATIC_PARSERS
                self._initialized = True
                log.info("falling back to static parsers", count=len(STATIC_PARSERS))
            return self._parsers

        self._parsers = parsers
        self._fetched_at = self._clock.monotonic()
        self._initialized = True
        log.info("loaded parsers", count=len(parsers), source="api")
        return parsers

    # ─────────────────────────────────────────────────────────────────
    # Options
    # ─────────────────────────────────────────────────────────────────

    async def get_parser_options(self, parser_id: str) -> ParserOptions:
        """Override for ``parser_id`` (case-insensitive), else the defaults."""
        await self._ensure_options()
        return self._overrides.get(parser_id.lower()) or self._defaults.for_parser(parser_id)

    async def get_parser_timeout(self, parser_id: str) -> float:
        return (await self.get_parser_options(parser_id)).timeout

    async def is_parser_enabled(self, parser_id: str) -> bool:
        return (await self.get_parser_options(parser_id)).enabled

    async def _ensure_options(self) -> None:
        if not self._config.enable_dynamic:
            return
        if is_fresh(self._options_fetched_at, self._clock.monotonic(), self._config.cache_ttl):
            return
        await self._shared(_OPTIONS, self._fetch_options)

    async def _fetch_options(self) -> None:
        log.debug("fetching parser options", path=OPTIONS_PATH)
        try:
            listing = _OptionsListing.model_validate(await self._api.get_json(OPTIONS_PATH))
            defaults = self._defaults
            if listing.defaults is not None:
                defaults = DefaultOptions.parse(listing.defaults, self._config.default_timeout)
            overrides = parse_overrides(listing.overrides or {}, defaults.timeout)
        except (httpx.HTTPError, ValueError) as e:
            log.debug("parser options unavailable", error=f"{type(e).__name__}: {e}")
            return

        self._defaults = defaults
        self._overrides.update(overrides)
        self._options_fetched_at = self._clock.monotonic()
        log.debug("loaded parser options", count=len(self._overrides))

    # ─────────────────────────────────────────────────────────────────
    # In-flight de-duplication
    # ─────────────────────────────────────────────────────────────────

    async def _shared(self, slot: str, factory: Callable[[], Awaitable[object]]) -> object:
        """Join the fetch running in ``slot`` or start one.

        Waiters are shielded so a cancelled caller leaves the shared fetch running.
        """
        task = self._inflight.get(slot)
        if task is None or task.done():
            task = asyncio.ensure_future(factory())
            self._inflight[slot] = task
            task.add_done_callback(lambda t: self._release(slot, t))
        return await asyncio.shield(task)

    def _release(self, slot: str, task: asyncio.Task[object]) -> None:
        if self._inflight.get(slot) is task:
            del self._inflight[slot]
        if not task.cancelled() and task.exception() is not None:
            log.error("registry fetch crashed", slot=slot, error=str(task.exception()))

    def __repr__(self) -> str:
        return f"ParserRegistry(dynamic={self._config.enable_dynamic}, parsers={len(self._parsers)}, initialized={self._initialized})"
