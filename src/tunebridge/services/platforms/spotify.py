"""Spotify client built on the public oEmbed endpoint.

Spotify offers no unauthenticated search, so the adapter only resolves source
links (via oEmbed) and builds search-link records for conversions towards
Spotify.
"""

from __future__ import annotations

import urllib.parse
from typing import Any

from pydantic import BaseModel, ValidationError

from tunebridge.core.exceptions import ErrorKind, PlatformError
from tunebridge.core.matching.normalization import clean_for_search
from tunebridge.core.models.platform import Platform
from tunebridge.core.models.records import AlbumRecord, Record, TrackRecord
from tunebridge.services.platforms.base import BasePlatformClient, split_title

OEMBED_URL = "https://open.spotify.com/oembed"
WEB_BASE_URL = "https://open.spotify.com"


class SpotifyOEmbed(BaseModel):
    """Fields of the Spotify oEmbed response we rely on."""

    title: str = ""
    thumbnail_url: str | None = None


class SpotifyClient(BasePlatformClient):
    """Spotify metadata lookups and search-link construction."""

    platform = Platform.SPOTIFY
    has_search = False

    async def get_track(self, track_id: str) -> TrackRecord:
        """Resolve a track id to title, artist and artwork."""
        url = f"{WEB_BASE_URL}/track/{track_id}"
        title, artist, thumbnail = await self._fetch_embed(url, "track")
        return TrackRecord(
            title=title,
            artists=(artist,) if artist else (),
            cover_url=thumbnail,
            platform_id=track_id,
            platform=Platform.SPOTIFY,
            url=url,
        )

    async def get_album(self, album_id: str) -> AlbumRecord:
        """Resolve an album id to title, artist and artwork."""
        url = f"{WEB_BASE_URL}/album/{album_id}"
        title, artist, thumbnail = await self._fetch_embed(url, "album")
        return AlbumRecord(
            title=title,
            artists=(artist,) if artist else (),
            cover_url=thumbnail,
            platform_id=album_id,
            platform=Platform.SPOTIFY,
            url=url,
        )

    async def _fetch_embed(self, url: str, what: str) -> tuple[str, str, str | None]:
        """Fetch oEmbed data and split ``"Title - Artist"``.

        Raises:
            PlatformError: NOT_FOUND when neither title nor artist can be read

        """
        payload: Any = await self._get_json(self.name, OEMBED_URL, {"url": url})
        try:
            embed = SpotifyOEmbed.model_validate(payload)
        except ValidationError as e:
            msg = f"Unexpected oEmbed response from Spotify for {url}"
            raise PlatformError(msg, ErrorKind.UNKNOWN, platform=self.name) from e

        title, artist = split_title(embed.title)
        if not title and not artist:
            msg = f"Unable to extract {what} information from Spotify. Please check the URL and try again."
            raise PlatformError(msg, ErrorKind.NOT_FOUND, platform=self.name)

        self.console_logger.debug("[spotify] oEmbed %s -> title=%r artist=%r", url, title, artist)
        return title, artist, embed.thumbnail_url

    def build_search_link_records(self, source: Record) -> list[TrackRecord]:
        """Spotify web-search links for a track from another platform.

        Artist and title give a general and a tracks-tab search (high quality);
        a title alone gives one low-quality link.
        """
        title = clean_for_search(source.title)
        artist = clean_for_search(source.primary_artist)
        if not title:
            return []

        if artist:
            query = f"{artist} {title}"
            return [
                self._track_link(source, title, artist, "search-1", self._search_url(query), high_quality=True),
                self._track_link(source, title, artist, "search-2", self._search_url(query, "tracks"), high_quality=True),
            ]
        return [self._track_link(source, title, "", "search-fallback", self._search_url(title), high_quality=False)]

    def build_album_search_link_records(self, source: Record) -> list[AlbumRecord]:
        """Spotify album-tab search link for an album from another platform."""
        title = clean_for_search(source.title)
        artist = clean_for_search(source.primary_artist)
        if not title:
            return []

        query = f"{artist} {title}" if artist else title
        return [
            AlbumRecord(
                title=title,
                artists=(artist,) if artist else (),
                cover_url=source.cover_url,
                platform_id="album-search-1" if artist else "album-search-fallback",
                platform=Platform.SPOTIFY,
                url=self._search_url(query, "albums"),
                is_high_quality=bool(artist),
            ),
        ]

    @staticmethod
    def _search_url(query: str, tab: str | None = None) -> str:
        url = f"{WEB_BASE_URL}/search/{urllib.parse.quote(query, safe='')}"
        return f"{url}/{tab}" if tab else url

    @staticmethod
    def _track_link(
        source: Record,
        title: str,
        artist: str,
        link_id: str,
        url: str,
        *,
        high_quality: bool,
    ) -> TrackRecord:
        return TrackRecord(
            title=title,
            artists=(artist,) if artist else (),
            cover_url=source.cover_url,
            platform_id=link_id,
            platform=Platform.SPOTIFY,
            url=url,
            is_high_quality=high_quality,
        )
