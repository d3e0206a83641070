"""YouTube Music client.

There is no public YouTube Music search, so conversions towards YouTube Music
produce search-link records. Source videos and playlists are described through
the public YouTube oEmbed endpoint.
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

from pydantic import BaseModel, ValidationError

from tunebridge.core.exceptions import ErrorKind, PlatformError
from tunebridge.core.matching.normalization import clean_for_search
from tunebridge.core.models.platform import Platform
from tunebridge.core.models.records import AlbumRecord, Record, TrackRecord
from tunebridge.services.platforms.base import BasePlatformClient, GetJsonFunc, split_title

OEMBED_URL = "https://www.youtube.com/oembed"
MUSIC_BASE_URL = "https://music.youtube.com"
YOUTUBE_RESULTS_URL = "https://www.youtube.com/results"
TOPIC_SUFFIX = " - Topic"
DEFAULT_THUMBNAIL = "https://i.ytimg.com/vi/default/mqdefault.jpg"


class YouTubeOEmbed(BaseModel):
    """Fields of the YouTube oEmbed response we rely on."""

    title: str = ""
    author_name: str = ""
    thumbnail_url: str | None = None


def music_search_url(query: str) -> str:
    """YouTube Music search page for a query."""
    return f"{MUSIC_BASE_URL}/search?q={urllib.parse.quote(query, safe='')}"


def youtube_search_url(query: str) -> str:
    """Main YouTube results page for a query."""
    return f"{YOUTUBE_RESULTS_URL}?search_query={urllib.parse.quote(query, safe='')}"


class YouTubeMusicClient(BasePlatformClient):
    """YouTube oEmbed lookups and YouTube Music search-link construction."""

    platform = Platform.YOUTUBE_MUSIC
    has_search = False

    def __init__(
        self,
        console_logger: logging.Logger,
        error_logger: logging.Logger,
        get_json_func: GetJsonFunc,
        *,
        default_thumbnail: str = DEFAULT_THUMBNAIL,
    ) -> None:
        """Initialize YouTube Music client.

        Args:
            console_logger: Logger for console output
            error_logger: Logger for error messages
            get_json_func: Coroutine fetching decoded JSON with rate limiting
            default_thumbnail: Artwork used on search links when the source has none

        """
        super().__init__(console_logger, error_logger, get_json_func)
        self.default_thumbnail = default_thumbnail

    # Lookups

    async def get_track(self, track_id: str) -> TrackRecord:
        """Describe a video by id."""
        embed = await self._fetch_embed(f"https://www.youtube.com/watch?v={track_id}")
        title, artist = self.extract_artist_title(embed.title, embed.author_name)
        return TrackRecord(
            title=title,
            artists=(artist,) if artist else (),
            cover_url=embed.thumbnail_url or f"https://i.ytimg.com/vi/{track_id}/mqdefault.jpg",
            platform_id=track_id,
            platform=Platform.YOUTUBE_MUSIC,
            url=f"{MUSIC_BASE_URL}/watch?v={track_id}",
        )

    async def get_album(self, album_id: str) -> AlbumRecord:
        """Describe an album playlist by list id."""
        embed = await self._fetch_embed(f"https://www.youtube.com/playlist?list={album_id}")
        title, artist = self.extract_artist_title(embed.title, embed.author_name)
        return AlbumRecord(
            title=title,
            artists=(artist,) if artist else (),
            cover_url=embed.thumbnail_url,
            platform_id=album_id,
            platform=Platform.YOUTUBE_MUSIC,
            url=f"{MUSIC_BASE_URL}/playlist?list={album_id}",
        )

    async def _fetch_embed(self, url: str) -> YouTubeOEmbed:
        payload: Any = await self._get_json(self.name, OEMBED_URL, {"url": url, "format": "json"})
        try:
            embed = YouTubeOEmbed.model_validate(payload)
        except ValidationError as e:
            msg = f"Unexpected oEmbed response from YouTube for {url}"
            raise PlatformError(msg, ErrorKind.UNKNOWN, platform=self.name) from e

        if not embed.title:
            msg = "Unable to extract information from YouTube. Please check the URL and try again."
            raise PlatformError(msg, ErrorKind.NOT_FOUND, platform=self.name)
        return embed

    @staticmethod
    def extract_artist_title(video_title: str, channel: str) -> tuple[str, str]:
        """Derive ``(title, artist)`` from a video title and its channel name.

        Auto-generated ``"Artist - Topic"`` channels carry the artist and a plain
        song title. Other channels usually title videos ``"Artist - Title"``;
        failing that the channel name is the best artist guess.
        """
        channel = channel.strip()
        if channel.endswith(TOPIC_SUFFIX):
            return video_title.strip(), channel.removesuffix(TOPIC_SUFFIX).strip()

        head, tail = split_title(video_title)
        if head and tail:
            return tail, head
        return video_title.strip(), channel

    # Search links

    def build_search_link_records(self, source: Record) -> list[TrackRecord]:
        """YouTube Music search links for a track from another platform.

        Artist and title give three high-quality links (plain, "official audio",
        main YouTube search). A title alone gives one low-quality link.
        """
        title = clean_for_search(source.title)
        artist = clean_for_search(source.primary_artist)
        thumbnail = source.cover_url or self.default_thumbnail

        if artist and title:
            query = f"{artist} {title}"
            urls = (
                music_search_url(query),
                music_search_url(f"{query} official audio"),
                youtube_search_url(query),
            )
            return [
                TrackRecord(
                    title=title,
                    artists=(artist,),
                    cover_url=thumbnail,
                    platform_id=f"search-{index}",
                    platform=Platform.YOUTUBE_MUSIC,
                    url=url,
                    is_high_quality=True,
                )
                for index, url in enumerate(urls, start=1)
            ]

        if title:
            return [
                TrackRecord(
                    title=title,
                    cover_url=thumbnail,
                    platform_id="search-fallback",
                    platform=Platform.YOUTUBE_MUSIC,
                    url=music_search_url(title),
                    is_high_quality=False,
                ),
            ]
        return []

    def build_album_search_link_records(self, source: Record) -> list[AlbumRecord]:
        """YouTube Music search links for an album from another platform."""
        title = clean_for_search(source.title)
        artist = clean_for_search(source.primary_artist)
        thumbnail = source.cover_url or self.default_thumbnail

        if artist and title:
            return [
                AlbumRecord(
                    title=title,
                    artists=(artist,),
                    cover_url=thumbnail,
                    platform_id="album-search-1",
                    platform=Platform.YOUTUBE_MUSIC,
                    url=music_search_url(f"{artist} {title} album"),
                    is_high_quality=True,
                ),
                AlbumRecord(
                    title=f"{title} (Full Album)",
                    artists=(artist,),
                    cover_url=thumbnail,
                    platform_id="album-search-2",
                    platform=Platform.YOUTUBE_MUSIC,
                    url=music_search_url(f"{artist} {title} full album"),
                    is_high_quality=True,
                ),
            ]

        if title:
            return [
                AlbumRecord(
                    title=title,
                    cover_url=thumbnail,
                    platform_id="album-search-fallback",
                    platform=Platform.YOUTUBE_MUSIC,
                    url=music_search_url(f"{title} album"),
                    is_high_quality=False,
                ),
            ]
        return []
