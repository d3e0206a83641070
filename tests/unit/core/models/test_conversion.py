"""Tests for conversion outcomes and reports."""

from __future__ import annotations

from tunebridge.core.exceptions import ErrorKind
from tunebridge.core.models.conversion import ConversionReport, TargetOutcome, TargetStatus
from tunebridge.core.models.platform import ContentKind, MatchTier, Platform
from tunebridge.core.models.records import MatchResult, ScoredCandidate, TrackRecord

HIT = TrackRecord(title="Hello", artists=("Adele",), platform=Platform.DEEZER, platform_id="3135556")


class TestTargetOutcome:
    """Tests for TargetOutcome."""

    def test_matched_records_and_scores(self) -> None:
        """Matched outcomes expose records and rounded scores."""
        outcome = TargetOutcome(
            Platform.DEEZER,
            TargetStatus.MATCHED,
            result=MatchResult((ScoredCandidate(HIT, 104.999, MatchTier.CONFIDENT),)),
        )

        data = outcome.to_dict()

        assert outcome.records == [HIT]
        assert data["tier"] == "confident"
        assert data["scores"] == [105.0]
        assert "error" not in data

    def test_links(self) -> None:
        """Search-link outcomes have records but no tier or scores."""
        link = TrackRecord(title="Hello", platform=Platform.SPOTIFY, platform_id="search-1", is_high_quality=True)
        outcome = TargetOutcome(Platform.SPOTIFY, TargetStatus.SEARCH_LINKS, links=(link,))

        data = outcome.to_dict()

        assert outcome.records == [link]
        assert data["tier"] is None
        assert "scores" not in data

    def test_failed(self) -> None:
        """Failed outcomes carry the error kind and message."""
        outcome = TargetOutcome(
            Platform.DEEZER,
            TargetStatus.FAILED,
            error_kind=ErrorKind.TIMEOUT,
            error_message="Connection timeout.",
        )

        assert outcome.to_dict()["error"] == {"kind": "timeout", "message": "Connection timeout."}


class TestConversionReport:
    """Tests for ConversionReport."""

    def test_outcome_lookup_and_dict(self, spotify_track: TrackRecord) -> None:
        """Outcomes are looked up by platform and serialized in order."""
        outcome = TargetOutcome(Platform.DEEZER, TargetStatus.NO_MATCH)
        report = ConversionReport("https://open.spotify.com/track/x", ContentKind.TRACK, spotify_track, (outcome,))

        assert report.outcome_for(Platform.DEEZER) is outcome
        assert report.outcome_for(Platform.YOUTUBE_MUSIC) is None
        data = report.to_dict()
        assert data["kind"] == "track"
        assert [target["status"] for target in data["targets"]] == ["no_match"]
