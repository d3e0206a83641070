"""Shared contract and helpers for platform adapters.

Adapters translate platform payloads into ``TrackRecord`` / ``AlbumRecord``.
Platforms with a public search expose ``search_tracks`` / ``search_albums`` to
the matching engine; the others build deterministic search-link records that
bypass scoring entirely.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any, ClassVar, Protocol, runtime_checkable

from tunebridge.core.exceptions import ErrorKind, PlatformError
from tunebridge.core.models.platform import Platform
from tunebridge.core.models.records import AlbumRecord, Record, TrackRecord

GetJsonFunc = Callable[..., Awaitable[Any]]
GetTextFunc = Callable[..., Awaitable[tuple[str, str]]]

MAX_SEARCH_LIMIT = 5

# "Song - Artist" with hyphen, en dash or em dash surrounded by spaces
TITLE_SEPARATOR_PATTERN = re.compile(r"\s[-–—]\s")


def cap_limit(limit: int) -> int:
    """Clamp a requested result count to 1..MAX_SEARCH_LIMIT."""
    return max(1, min(limit, MAX_SEARCH_LIMIT))


def split_title(text: str) -> tuple[str, str]:
    """Split an embed title on the first dash separator.

    Returns:
        ``(head, tail)`` with the remaining parts re-joined into the tail, or
        ``(text, "")`` when there is no separator

    """
    parts = TITLE_SEPARATOR_PATTERN.split(text)
    if len(parts) < 2:
        return text.strip(), ""
    head, *rest = parts
    return head.strip(), " - ".join(rest).strip()


@runtime_checkable
class PlatformAdapter(Protocol):
    """What the orchestrator needs from a platform."""

    platform: Platform
    has_search: bool

    async def search_tracks(self, query: str, limit: int) -> list[TrackRecord]: ...

    async def search_albums(self, query: str, limit: int) -> list[AlbumRecord]: ...

    async def get_track(self, track_id: str) -> TrackRecord: ...

    async def get_album(self, album_id: str) -> AlbumRecord: ...

    def build_search_link_records(self, source: Record) -> list[TrackRecord]: ...

    def build_album_search_link_records(self, source: Record) -> list[AlbumRecord]: ...


class BasePlatformClient:
    """Base class for platform adapters.

    Subclasses set ``platform`` and ``has_search`` and implement lookups.
    Search methods default to raising ``UNSUPPORTED``; search-link builders
    default to no links.
    """

    platform: ClassVar[Platform]
    has_search: ClassVar[bool] = False

    def __init__(
        self,
        console_logger: logging.Logger,
        error_logger: logging.Logger,
        get_json_func: GetJsonFunc,
    ) -> None:
        """Initialize the client.

        Args:
            console_logger: Logger for console output
            error_logger: Logger for error messages
            get_json_func: Coroutine ``(api_name, url, params)`` returning decoded JSON
                with rate limiting and retries applied

        """
        self.console_logger = console_logger
        self.error_logger = error_logger
        self._get_json = get_json_func

    @property
    def name(self) -> str:
        """Rate-limiter and log key for this platform."""
        return str(self.platform)

    def _unsupported(self, what: str) -> PlatformError:
        msg = f"{self.platform.display_name} has no public {what}"
        return PlatformError(msg, ErrorKind.UNSUPPORTED, platform=self.name)

    async def search_tracks(self, query: str, limit: int) -> list[TrackRecord]:
        """Search tracks. Unsupported unless the platform overrides it."""
        raise self._unsupported("track search")

    async def search_albums(self, query: str, limit: int) -> list[AlbumRecord]:
        """Search albums. Unsupported unless the platform overrides it."""
        raise self._unsupported("album search")

    def build_search_link_records(self, source: Record) -> list[TrackRecord]:
        """Search-link records for a track; none for platforms with search."""
        return []

    def build_album_search_link_records(self, source: Record) -> list[AlbumRecord]:
        """Search-link records for an album; none for platforms with search."""
        return []
