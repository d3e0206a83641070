"""Conversion orchestrator.

Owns the HTTP session, the per-platform rate limiters and the platform
adapters. A conversion resolves the source link, then fans out to every
target platform concurrently; each target outcome is surfaced independently so
one failing platform never disturbs the others.
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from collections.abc import Iterable
from typing import TYPE_CHECKING, NoReturn

import aiohttp
import certifi

from tunebridge.core.exceptions import ErrorKind, PlatformError
from tunebridge.core.matching.engine import MatchEngine
from tunebridge.core.models.conversion import ConversionReport, TargetOutcome, TargetStatus
from tunebridge.core.models.platform import ContentKind, Platform
from tunebridge.core.models.records import AlbumRecord, MatchResult, Record
from tunebridge.services.http.rate_limiter import EnhancedRateLimiter
from tunebridge.services.http.request_executor import ApiRequestExecutor
from tunebridge.services.platforms.deezer import DeezerClient
from tunebridge.services.platforms.spotify import SpotifyClient
from tunebridge.services.platforms.youtube_music import YouTubeMusicClient
from tunebridge.services.url_parser import SourceReference, parse_source_url

if TYPE_CHECKING:
    from tunebridge.core.models.config_models import AppConfig
    from tunebridge.services.platforms.base import PlatformAdapter


class ConversionOrchestrator:
    """Cross-platform conversion service.

    Attributes:
        config: Validated application configuration
        console_logger: Logger for general output
        error_logger: Logger for errors and warnings
        session: HTTP session shared by every adapter
        rate_limiters: Rate limiter per platform name
        executor: Request executor used by every adapter
        engine: Matching engine used for platforms with search
        adapters: Adapter per platform, created by ``initialize``

    """

    def __init__(
        self,
        config: AppConfig,
        console_logger: logging.Logger,
        error_logger: logging.Logger,
    ) -> None:
        """Initialize the orchestrator with configuration and loggers."""
        self.config = config
        self.console_logger = console_logger
        self.error_logger = error_logger
        self.session: aiohttp.ClientSession | None = None
        self.adapters: dict[Platform, PlatformAdapter] = {}

        self._initialize_rate_limiters()
        self.executor = ApiRequestExecutor(
            rate_limiters=self.rate_limiters,
            console_logger=console_logger,
            error_logger=error_logger,
            user_agent=config.http.user_agent,
            default_max_retries=config.http.max_retries,
            default_retry_delay=config.http.retry_delay_seconds,
            max_retry_delay=config.http.max_retry_delay_seconds,
        )
        self.engine = MatchEngine(
            console_logger,
            error_logger,
            search_limit=config.matching.search_limit,
            max_results=config.matching.max_results,
        )

    def _initialize_rate_limiters(self) -> None:
        """Initialize rate limiters for each platform."""
        limits = self.config.rate_limits
        self.rate_limiters = {
            str(platform): EnhancedRateLimiter(
                requests_per_window=limit.requests_per_window,
                window_seconds=limit.window_seconds,
            )
            for platform, limit in (
                (Platform.DEEZER, limits.deezer),
                (Platform.SPOTIFY, limits.spotify),
                (Platform.YOUTUBE_MUSIC, limits.youtube_music),
            )
        }

    def _initialize_platform_clients(self) -> None:
        """Create adapters with the executor's request functions injected."""
        self.adapters = {
            Platform.DEEZER: DeezerClient(
                self.console_logger,
                self.error_logger,
                self.executor.get_json,
                self.executor.get_text,
                base_url=self.config.deezer.base_url,
                strict_search=self.config.deezer.strict_search,
            ),
            Platform.SPOTIFY: SpotifyClient(self.console_logger, self.error_logger, self.executor.get_json),
            Platform.YOUTUBE_MUSIC: YouTubeMusicClient(
                self.console_logger,
                self.error_logger,
                self.executor.get_json,
                default_thumbnail=self.config.youtube_music.default_thumbnail,
            ),
        }

    async def initialize(self, force: bool = False) -> None:
        """Initialize the aiohttp ClientSession and platform adapters."""
        if force and self.session and not self.session.closed:
            await self.session.close()
            self.session = None

        if self.session is None:
            self.session = self._create_client_session()
            self.executor.set_session(self.session)
            self._initialize_platform_clients()
            self.console_logger.debug("HTTP session initialized with User-Agent: %s", self.config.http.user_agent)

    def _create_client_session(self) -> aiohttp.ClientSession:
        """Create a new aiohttp ClientSession with certifi-backed TLS."""
        timeout = aiohttp.ClientTimeout(total=self.config.http.timeout_seconds, connect=10)

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2

        connector = aiohttp.TCPConnector(limit_per_host=10, limit=30, ttl_dns_cache=300, ssl=ssl_context)
        return aiohttp.ClientSession(timeout=timeout, connector=connector)

    def _ensure_initialized(self) -> None:
        if self.session is None or not self.adapters:
            self._raise_not_initialized()

    @staticmethod
    def _raise_not_initialized() -> NoReturn:
        msg = "HTTP session is not initialized. Call initialize() method first."
        raise RuntimeError(msg)

    async def close(self) -> None:
        """Close the aiohttp ClientSession and log API usage statistics."""
        if self.session is None or self.session.closed:
            return

        self.console_logger.debug("--- API Call Statistics ---")
        total_calls = 0
        for api_name, limiter in self.rate_limiters.items():
            limiter_stats = limiter.get_stats()
            request_stats = self.executor.get_stats(api_name)
            total_calls += request_stats["requests"]
            self.console_logger.debug(
                "API: %-14s | Requests: %-4d | Avg Wait: %.3fs | Avg Duration: %.3fs",
                Platform(api_name).display_name,
                request_stats["requests"],
                limiter_stats["avg_wait_time"],
                request_stats["avg_duration"],
            )
        if total_calls == 0:
            self.console_logger.debug("No API calls were made during this session.")

        await self.session.close()
        self.session = None
        self.executor.set_session(None)
        self.console_logger.debug("HTTP session closed")

    # Conversion

    async def resolve_source(self, reference: SourceReference) -> Record:
        """Fetch the record a parsed link points at.

        Raises:
            PlatformError: When the source platform cannot describe the link

        """
        self._ensure_initialized()
        adapter = self.adapters[reference.platform]

        if reference.is_short_link and isinstance(adapter, DeezerClient):
            return await adapter.resolve_short_link(reference.id)
        if reference.kind is ContentKind.ALBUM:
            return await adapter.get_album(reference.id)
        return await adapter.get_track(reference.id)

    async def convert(self, url: str, targets: Iterable[Platform] | None = None) -> ConversionReport:
        """Resolve a link and convert it to every requested target platform.

        Args:
            url: Source link on any supported platform
            targets: Target platforms; defaults to every platform but the source's

        Returns:
            ConversionReport with one outcome per target, in target order

        Raises:
            UnrecognizedUrlError: If the link is not a supported URL
            PlatformError: If the source record cannot be fetched

        """
        reference = parse_source_url(url)
        source = await self.resolve_source(reference)
        self.console_logger.info(
            "Resolved %s %s: '%s' by '%s'",
            reference.platform.display_name,
            reference.kind,
            source.title,
            source.primary_artist or "unknown artist",
        )

        target_platforms = self._target_platforms(reference.platform, targets)
        results = await asyncio.gather(
            *(self.convert_to(source, platform) for platform in target_platforms),
            return_exceptions=True,
        )

        outcomes: list[TargetOutcome] = []
        for platform, result in zip(target_platforms, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                self.error_logger.error(
                    "Unexpected error converting to %s",
                    platform.display_name,
                    exc_info=result,
                )
                outcomes.append(
                    TargetOutcome(platform, TargetStatus.FAILED, error_kind=ErrorKind.UNKNOWN, error_message=str(result)),
                )
                continue
            outcomes.append(result)

        kind = ContentKind.ALBUM if isinstance(source, AlbumRecord) else ContentKind.TRACK
        return ConversionReport(source_url=url, kind=kind, source=source, outcomes=tuple(outcomes))

    async def convert_to(self, source: Record, platform: Platform) -> TargetOutcome:
        """Convert an already resolved source to one target platform.

        Platform failures become a FAILED outcome instead of propagating.
        """
        self._ensure_initialized()
        adapter = self.adapters[platform]
        is_album = isinstance(source, AlbumRecord)

        try:
            if adapter.has_search:
                result = await self.find_candidates(source, platform)
                status = TargetStatus.MATCHED if result else TargetStatus.NO_MATCH
                return TargetOutcome(platform, status, result=result)

            links: list[Record] = list(
                adapter.build_album_search_link_records(source) if is_album else adapter.build_search_link_records(source),
            )
            status = TargetStatus.SEARCH_LINKS if links else TargetStatus.NO_MATCH
            return TargetOutcome(platform, status, links=tuple(links))
        except PlatformError as e:
            self.error_logger.warning("Conversion to %s failed: %s", platform.display_name, e)
            return TargetOutcome(platform, TargetStatus.FAILED, error_kind=e.kind, error_message=e.user_message())

    async def find_candidates(self, source: Record, platform: Platform) -> MatchResult:
        """Run the matching engine against a platform with public search.

        Raises:
            PlatformError: UNSUPPORTED when the platform has no public search

        """
        self._ensure_initialized()
        adapter = self.adapters[platform]
        if not adapter.has_search:
            msg = f"{platform.display_name} has no public search"
            raise PlatformError(msg, ErrorKind.UNSUPPORTED, platform=str(platform))

        search = adapter.search_albums if isinstance(source, AlbumRecord) else adapter.search_tracks
        return await self.engine.match(source, search)

    @staticmethod
    def _target_platforms(source_platform: Platform, targets: Iterable[Platform] | None) -> list[Platform]:
        requested = list(targets) if targets is not None else list(Platform)
        unique = list(dict.fromkeys(requested))
        return [platform for platform in unique if platform is not source_platform]


def create_conversion_orchestrator(
    config: AppConfig,
    console_logger: logging.Logger,
    error_logger: logging.Logger,
) -> ConversionOrchestrator:
    """Create the configured ConversionOrchestrator instance.

    Args:
        config: Validated application configuration
        console_logger: Logger for general output
        error_logger: Logger for error messages and warnings

    Returns:
        The configured ConversionOrchestrator instance

    """
    return ConversionOrchestrator(config=config, console_logger=console_logger, error_logger=error_logger)
