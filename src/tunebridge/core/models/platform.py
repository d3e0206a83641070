"""Platform, content-kind and tier enumerations."""

from __future__ import annotations

from enum import StrEnum


class Platform(StrEnum):
    """Supported streaming platforms."""

    SPOTIFY = "spotify"
    DEEZER = "deezer"
    YOUTUBE_MUSIC = "youtube_music"

    @property
    def display_name(self) -> str:
        """Human-readable platform name."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Platform.SPOTIFY: "Spotify",
    Platform.DEEZER: "Deezer",
    Platform.YOUTUBE_MUSIC: "YouTube Music",
}


class ContentKind(StrEnum):
    """What a source link points at."""

    TRACK = "track"
    ALBUM = "album"


class MatchTier(StrEnum):
    """Confidence tier of a scored candidate."""

    CONFIDENT = "confident"
    EXPLORATORY = "exploratory"
