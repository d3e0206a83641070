"""Deezer public API client.

Deezer is the only supported platform with an unauthenticated search, so it is
the one adapter the matching engine actually queries. Raw payloads are parsed
into pydantic models here and converted to ``TrackRecord`` / ``AlbumRecord``.

Deezer reports API errors with HTTP 200 and a body of the form
``{"error": {"type": ..., "message": ..., "code": ...}}``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, TypeVar

from bs4 import BeautifulSoup
from pydantic import BaseModel, Field, ValidationError

from tunebridge.core.exceptions import ErrorKind, PlatformError
from tunebridge.core.matching.query_builder import is_usable_query
from tunebridge.core.models.platform import Platform
from tunebridge.core.models.records import AlbumRecord, Record, TrackRecord
from tunebridge.services.platforms.base import BasePlatformClient, GetJsonFunc, GetTextFunc, cap_limit

SHORT_LINK_BASE = "https://link.deezer.com/s/"
TRACK_PATH_PATTERN = re.compile(r"deezer\.com(?:/[a-z]{2})?/track/(\d+)")
ALBUM_PATH_PATTERN = re.compile(r"deezer\.com(?:/[a-z]{2})?/album/(\d+)")
SONG_ID_PATTERN = re.compile(r'SNG_ID":"(\d+)"')

ModelT = TypeVar("ModelT", bound=BaseModel)

# https://developers.deezer.com/api/errors
DEEZER_ERROR_KINDS: dict[int, ErrorKind] = {
    4: ErrorKind.ACCESS_DENIED,  # quota
    200: ErrorKind.ACCESS_DENIED,  # permission
    300: ErrorKind.ACCESS_DENIED,  # invalid token
    800: ErrorKind.NOT_FOUND,  # data not found
    901: ErrorKind.ACCESS_DENIED,  # individual account not allowed
}


# Deezer payload models
class DeezerArtist(BaseModel):
    """Artist stub embedded in tracks and albums."""

    name: str = ""


class DeezerAlbumStub(BaseModel):
    """Album stub embedded in tracks."""

    title: str = ""
    cover_medium: str | None = None


class DeezerTrack(BaseModel):
    """Track object from ``/track/{id}`` and ``/search``."""

    id: int
    title: str = ""
    duration: int | None = None
    link: str | None = None
    artist: DeezerArtist | None = None
    album: DeezerAlbumStub | None = None


class DeezerAlbum(BaseModel):
    """Album object from ``/album/{id}`` and ``/search/album``."""

    id: int
    title: str = ""
    link: str | None = None
    cover_medium: str | None = None
    nb_tracks: int | None = None
    artist: DeezerArtist | None = None


class DeezerTrackSearch(BaseModel):
    """Paged ``/search`` response."""

    data: list[DeezerTrack] = Field(default_factory=list)
    total: int | None = None


class DeezerAlbumSearch(BaseModel):
    """Paged ``/search/album`` response."""

    data: list[DeezerAlbum] = Field(default_factory=list)
    total: int | None = None


class DeezerErrorDetail(BaseModel):
    """Body of a Deezer ``error`` object."""

    type: str = ""
    message: str = ""
    code: int | None = None


class DeezerClient(BasePlatformClient):
    """Deezer API client for track/album lookups, search and short links."""

    platform = Platform.DEEZER
    has_search = True

    def __init__(
        self,
        console_logger: logging.Logger,
        error_logger: logging.Logger,
        get_json_func: GetJsonFunc,
        get_text_func: GetTextFunc,
        *,
        base_url: str = "https://api.deezer.com",
        strict_search: bool = True,
    ) -> None:
        """Initialize Deezer client.

        Args:
            console_logger: Logger for console output
            error_logger: Logger for error messages
            get_json_func: Coroutine fetching decoded JSON with rate limiting
            get_text_func: Coroutine fetching ``(body, final_url)`` following redirects
            base_url: Deezer API root
            strict_search: Send ``strict=on`` with searches

        """
        super().__init__(console_logger, error_logger, get_json_func)
        self._get_text = get_text_func
        self.base_url = base_url.rstrip("/")
        self.strict_search = strict_search

    # Lookups

    async def get_track(self, track_id: str) -> TrackRecord:
        """Fetch one track by numeric id."""
        payload = await self._request(f"/track/{track_id}")
        return self._to_track(self._validate(DeezerTrack, payload))

    async def get_album(self, album_id: str) -> AlbumRecord:
        """Fetch one album by numeric id."""
        payload = await self._request(f"/album/{album_id}")
        return self._to_album(self._validate(DeezerAlbum, payload))

    # Search

    async def search_tracks(self, query: str, limit: int = 5) -> list[TrackRecord]:
        """Search tracks; at most five results are ever requested."""
        payload = await self._request("/search", self._search_params(query, limit))
        result = self._validate(DeezerTrackSearch, payload)
        self.console_logger.debug("[deezer] Track search '%s' returned %d results", query, len(result.data))
        return [self._to_track(track) for track in result.data]

    async def search_albums(self, query: str, limit: int = 5) -> list[AlbumRecord]:
        """Search albums; at most five results are ever requested."""
        payload = await self._request("/search/album", self._search_params(query, limit))
        result = self._validate(DeezerAlbumSearch, payload)
        self.console_logger.debug("[deezer] Album search '%s' returned %d results", query, len(result.data))
        return [self._to_album(album) for album in result.data]

    def _search_params(self, query: str, limit: int) -> dict[str, str]:
        if not is_usable_query(query):
            msg = f"Invalid search query provided: {query!r}"
            raise PlatformError(msg, ErrorKind.UNKNOWN, platform=self.name)

        params = {"q": query.strip(), "limit": str(cap_limit(limit))}
        if self.strict_search:
            params["strict"] = "on"
        return params

    # Short links

    async def resolve_short_link(self, code: str) -> Record:
        """Resolve a ``link.deezer.com/s/{code}`` share link.

        The redirect target usually carries the track or album id. Otherwise the
        share page is scraped for ``og:`` meta tags and the embedded ``SNG_ID``.
        When nothing can be read a degraded record with an empty title is
        returned so the caller still gets a usable (if unmatched) result.
        """
        short_url = f"{SHORT_LINK_BASE}{code}"
        try:
            html, final_url = await self._get_text(self.name, short_url)
        except PlatformError as e:
            self.error_logger.warning("[deezer] Failed to resolve short link %s: %s", short_url, e)
            return TrackRecord(title="", platform=Platform.DEEZER, url=short_url)

        if match := TRACK_PATH_PATTERN.search(final_url):
            return await self.get_track(match.group(1))
        if match := ALBUM_PATH_PATTERN.search(final_url):
            return await self.get_album(match.group(1))

        return await self._parse_share_page(html, short_url)

    async def _parse_share_page(self, html: str, short_url: str) -> TrackRecord:
        soup = BeautifulSoup(html, "html.parser")

        if song_id := self._find_song_id(soup):
            try:
                return await self.get_track(song_id)
            except PlatformError as e:
                self.console_logger.debug("[deezer] Lookup of scraped track %s failed, using page metadata: %s", song_id, e)

        title = self._meta(soup, "og:title")
        artist = self._meta(soup, "twitter:creator")
        if not artist:
            description = self._meta(soup, "og:description")
            # og:description reads "Artist - title - year"
            artist = description.split(" - ")[0].strip() if description else ""

        duration = self._meta(soup, "music:duration")
        return TrackRecord(
            title=title,
            artists=(artist,) if artist else (),
            duration_seconds=float(duration) if duration.isdigit() and int(duration) > 0 else None,
            cover_url=self._meta(soup, "og:image") or None,
            platform_id=song_id or "",
            platform=Platform.DEEZER,
            url=short_url,
        )

    @staticmethod
    def _meta(soup: BeautifulSoup, prop: str) -> str:
        tag = soup.find("meta", attrs={"property": prop}) or soup.find("meta", attrs={"name": prop})
        if tag is None:
            return ""
        content = tag.get("content")
        return content.strip() if isinstance(content, str) else ""

    @staticmethod
    def _find_song_id(soup: BeautifulSoup) -> str | None:
        for script in soup.find_all("script"):
            if match := SONG_ID_PATTERN.search(script.get_text()):
                return match.group(1)
        return None

    # Transport helpers

    async def _request(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        payload = await self._get_json(self.name, f"{self.base_url}{path}", params)
        if not isinstance(payload, dict):
            msg = "Invalid response structure from Deezer API"
            raise PlatformError(msg, ErrorKind.UNKNOWN, platform=self.name)
        if "error" in payload:
            raise self._api_error(payload["error"])
        return payload

    def _api_error(self, raw_error: Any) -> PlatformError:
        detail = DeezerErrorDetail.model_validate(raw_error) if isinstance(raw_error, dict) else DeezerErrorDetail()
        kind = DEEZER_ERROR_KINDS.get(detail.code, ErrorKind.UNKNOWN) if detail.code is not None else ErrorKind.UNKNOWN
        self.error_logger.warning(
            "[deezer] API error %s (%s): %s",
            detail.code,
            detail.type,
            detail.message,
        )
        return PlatformError(detail.message or "Deezer API error", kind, platform=self.name)

    def _validate(self, model: type[ModelT], payload: dict[str, Any]) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            self.error_logger.warning("[deezer] Unexpected %s payload: %s", model.__name__, e)
            msg = "Invalid response structure from Deezer API"
            raise PlatformError(msg, ErrorKind.UNKNOWN, platform=self.name) from e

    # Conversion

    @staticmethod
    def _to_track(track: DeezerTrack) -> TrackRecord:
        artist = track.artist.name if track.artist else ""
        return TrackRecord(
            title=track.title,
            artists=(artist,) if artist else (),
            duration_seconds=float(track.duration) if track.duration else None,
            cover_url=track.album.cover_medium if track.album else None,
            platform_id=str(track.id),
            platform=Platform.DEEZER,
            url=track.link,
            album_title=track.album.title if track.album and track.album.title else None,
        )

    @staticmethod
    def _to_album(album: DeezerAlbum) -> AlbumRecord:
        artist = album.artist.name if album.artist else ""
        return AlbumRecord(
            title=album.title,
            artists=(artist,) if artist else (),
            track_count=album.nb_tracks,
            cover_url=album.cover_medium,
            platform_id=str(album.id),
            platform=Platform.DEEZER,
            url=album.link,
        )
