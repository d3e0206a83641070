"""Common record shapes exchanged between platform adapters and the matching engine.

Adapters translate raw platform payloads into these value objects; the matching
engine never sees platform JSON.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from tunebridge.core.models.platform import MatchTier, Platform


@dataclass(frozen=True, slots=True)
class TrackRecord:
    """A track as seen on one platform.

    ``title`` is empty only for degraded records (e.g. an unresolvable short link).
    ``is_high_quality`` is set only on synthesized search-link records.
    """

    title: str
    artists: tuple[str, ...] = ()
    duration_seconds: float | None = None
    cover_url: str | None = None
    platform_id: str = ""
    platform: Platform | None = None
    url: str | None = None
    album_title: str | None = None
    is_high_quality: bool | None = None

    @property
    def primary_artist(self) -> str:
        """First non-empty artist, or an empty string."""
        return next((artist for artist in self.artists if artist and artist.strip()), "")

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "type": "track",
            "title": self.title,
            "artists": list(self.artists),
            "duration_seconds": self.duration_seconds,
            "cover_url": self.cover_url,
            "platform_id": self.platform_id,
            "platform": str(self.platform) if self.platform else None,
            "url": self.url,
            "album_title": self.album_title,
            "is_high_quality": self.is_high_quality,
        }


@dataclass(frozen=True, slots=True)
class AlbumRecord:
    """An album as seen on one platform. Albums carry no duration."""

    title: str
    artists: tuple[str, ...] = ()
    track_count: int | None = None
    cover_url: str | None = None
    platform_id: str = ""
    platform: Platform | None = None
    url: str | None = None
    is_high_quality: bool | None = None

    @property
    def primary_artist(self) -> str:
        """First non-empty artist, or an empty string."""
        return next((artist for artist in self.artists if artist and artist.strip()), "")

    @property
    def duration_seconds(self) -> float | None:
        """Albums never take part in duration scoring."""
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "type": "album",
            "title": self.title,
            "artists": list(self.artists),
            "track_count": self.track_count,
            "cover_url": self.cover_url,
            "platform_id": self.platform_id,
            "platform": str(self.platform) if self.platform else None,
            "url": self.url,
            "is_high_quality": self.is_high_quality,
        }


Record = TrackRecord | AlbumRecord


@dataclass(frozen=True, slots=True)
class ScoredCandidate:
    """A candidate record with its transient ranking score and tier."""

    record: Record
    score: float
    tier: MatchTier


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Bounded, ordered result of one matching run.

    Drawn from the confident tier when it has members, otherwise from the
    exploratory tier. An empty result means "no match found".
    """

    candidates: tuple[ScoredCandidate, ...] = field(default_factory=tuple)

    @property
    def records(self) -> list[Record]:
        """Matched records in result order."""
        return [candidate.record for candidate in self.candidates]

    @property
    def tier(self) -> MatchTier | None:
        """Tier the result was drawn from, or None when empty."""
        return self.candidates[0].tier if self.candidates else None

    @property
    def is_empty(self) -> bool:
        """True when no candidate of any tier was found."""
        return not self.candidates

    def __len__(self) -> int:
        return len(self.candidates)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)
