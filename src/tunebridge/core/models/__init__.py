"""Data models: records, enumerations, conversion reports and configuration."""

from tunebridge.core.models.config_models import AppConfig
from tunebridge.core.models.conversion import ConversionReport, TargetOutcome, TargetStatus
from tunebridge.core.models.platform import ContentKind, MatchTier, Platform
from tunebridge.core.models.records import AlbumRecord, MatchResult, Record, ScoredCandidate, TrackRecord

__all__ = [
    "AlbumRecord",
    "AppConfig",
    "ContentKind",
    "ConversionReport",
    "MatchResult",
    "MatchTier",
    "Platform",
    "Record",
    "ScoredCandidate",
    "TargetOutcome",
    "TargetStatus",
    "TrackRecord",
]
