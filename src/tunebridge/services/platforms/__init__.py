"""Platform adapters for Deezer, Spotify and YouTube Music."""

from tunebridge.services.platforms.base import MAX_SEARCH_LIMIT, BasePlatformClient, PlatformAdapter
from tunebridge.services.platforms.deezer import DeezerClient
from tunebridge.services.platforms.spotify import SpotifyClient
from tunebridge.services.platforms.youtube_music import YouTubeMusicClient

__all__ = [
    "MAX_SEARCH_LIMIT",
    "BasePlatformClient",
    "DeezerClient",
    "PlatformAdapter",
    "SpotifyClient",
    "YouTubeMusicClient",
]
