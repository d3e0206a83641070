"""Source URL recognition for Spotify, Deezer and YouTube Music links.

Supported forms:
- Spotify: ``open.spotify.com/(intl-xx/)?(track|album)/ID`` and ``spotify:(track|album):ID``
- Deezer: ``deezer.com/(xx/)?(track|album)/ID`` and ``link.deezer.com/s/CODE``
- YouTube: ``(music|www|m).youtube.com/watch?v=ID``, ``youtu.be/ID`` and
  ``music.youtube.com/playlist?list=ID``

A link is recognized anywhere in the text, such as a pasted message. Hosts and schemes
match case-insensitively.

Examples:
    >>> parse_source_url("https://open.spotify.com/intl-de/track/4uLU6hMCjMI75M1A2tKUQC?si=x")
    SourceReference(platform=<Platform.SPOTIFY: 'spotify'>, kind=<ContentKind.TRACK: 'track'>, id='4uLU6hMCjMI75M1A2tKUQC', is_short_link=False)

"""

from __future__ import annotations

import re
from typing import NamedTuple

from tunebridge.core.exceptions import UnrecognizedUrlError
from tunebridge.core.models.platform import ContentKind, Platform


class SourceReference(NamedTuple):
    """Platform, content kind and platform id parsed from a link."""

    platform: Platform
    kind: ContentKind
    id: str
    is_short_link: bool = False


class _UrlPattern(NamedTuple):
    pattern: re.Pattern[str]
    platform: Platform
    kind: ContentKind
    is_short_link: bool = False


# A link may sit inside pasted text, so patterns are searched rather than
# anchored. The host must not continue a longer word or domain name.
_LINK_START = r"(?<![\w.-])(?:https?://)?"


def _link_pattern(body: str) -> re.Pattern[str]:
    return re.compile(_LINK_START + body, re.IGNORECASE)


_URL_PATTERNS: tuple[_UrlPattern, ...] = (
    _UrlPattern(re.compile(r"(?<![\w.-])spotify:track:([A-Za-z0-9]+)"), Platform.SPOTIFY, ContentKind.TRACK),
    _UrlPattern(re.compile(r"(?<![\w.-])spotify:album:([A-Za-z0-9]+)"), Platform.SPOTIFY, ContentKind.ALBUM),
    _UrlPattern(
        _link_pattern(r"(?:open\.)?spotify\.com/(?:intl-[a-z]{2}(?:-[A-Za-z]{2})?/)?track/([A-Za-z0-9]+)"),
        Platform.SPOTIFY,
        ContentKind.TRACK,
    ),
    _UrlPattern(
        _link_pattern(r"(?:open\.)?spotify\.com/(?:intl-[a-z]{2}(?:-[A-Za-z]{2})?/)?album/([A-Za-z0-9]+)"),
        Platform.SPOTIFY,
        ContentKind.ALBUM,
    ),
    _UrlPattern(_link_pattern(r"(?:www\.)?deezer\.com(?:/[a-z]{2})?/track/(\d+)"), Platform.DEEZER, ContentKind.TRACK),
    _UrlPattern(_link_pattern(r"(?:www\.)?deezer\.com(?:/[a-z]{2})?/album/(\d+)"), Platform.DEEZER, ContentKind.ALBUM),
    _UrlPattern(
        _link_pattern(r"link\.deezer\.com/s/([A-Za-z0-9]+)"),
        Platform.DEEZER,
        ContentKind.TRACK,
        is_short_link=True,
    ),
    _UrlPattern(
        _link_pattern(r"(?:music\.|www\.|m\.)?youtube\.com/watch\?(?:[^#\s]*&)?v=([A-Za-z0-9_-]+)"),
        Platform.YOUTUBE_MUSIC,
        ContentKind.TRACK,
    ),
    _UrlPattern(_link_pattern(r"youtu\.be/([A-Za-z0-9_-]+)"), Platform.YOUTUBE_MUSIC, ContentKind.TRACK),
    _UrlPattern(
        _link_pattern(r"(?:music\.|www\.)?youtube\.com/playlist\?(?:[^#\s]*&)?list=([A-Za-z0-9_-]+)"),
        Platform.YOUTUBE_MUSIC,
        ContentKind.ALBUM,
    ),
)


def parse_source_url(url: str | None) -> SourceReference:
    """Identify the platform, content kind and id behind a link.

    Raises:
        UnrecognizedUrlError: If the link matches no supported form

    """
    candidate = (url or "").strip()
    for entry in _URL_PATTERNS:
        if match := entry.pattern.search(candidate):
            return SourceReference(entry.platform, entry.kind, match.group(1), entry.is_short_link)
    raise UnrecognizedUrlError(candidate)


def detect_platform(url: str | None) -> Platform | None:
    """Platform a link belongs to, or None when it is not a supported link."""
    try:
        return parse_source_url(url).platform
    except UnrecognizedUrlError:
        return None
