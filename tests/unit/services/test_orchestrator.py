"""Tests for ConversionOrchestrator."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import allure
import pytest

from tunebridge.core.exceptions import ErrorKind, PlatformError, UnrecognizedUrlError
from tunebridge.core.models.config_models import AppConfig
from tunebridge.core.models.conversion import TargetStatus
from tunebridge.core.models.platform import ContentKind, MatchTier, Platform
from tunebridge.core.models.records import AlbumRecord, TrackRecord
from tunebridge.services.orchestrator import ConversionOrchestrator, create_conversion_orchestrator
from tunebridge.services.platforms.base import PlatformAdapter
from tunebridge.services.platforms.deezer import DeezerClient
from tunebridge.services.url_parser import SourceReference

DEEZER_HIT = TrackRecord(title="Hello", artists=("Adele",), platform_id="3135556", platform=Platform.DEEZER)


@pytest.fixture
def orchestrator(mock_console_logger: MagicMock, mock_error_logger: MagicMock) -> ConversionOrchestrator:
    """Orchestrator with a fake session and real adapters wired to mock fetchers."""
    orchestrator = create_conversion_orchestrator(AppConfig(), mock_console_logger, mock_error_logger)
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    orchestrator.session = session
    orchestrator.executor.set_session(session)
    orchestrator._initialize_platform_clients()
    return orchestrator


def _stub_source(orchestrator: ConversionOrchestrator, platform: Platform, record: TrackRecord | AlbumRecord) -> None:
    adapter = orchestrator.adapters[platform]
    adapter.get_track = AsyncMock(return_value=record)  # type: ignore[method-assign]
    adapter.get_album = AsyncMock(return_value=record)  # type: ignore[method-assign]


class TestLifecycle:
    """Tests for session setup and teardown."""

    def test_rate_limiters_per_platform(self, orchestrator: ConversionOrchestrator) -> None:
        """One limiter per platform, Deezer at its documented quota."""
        assert set(orchestrator.rate_limiters) == {"spotify", "deezer", "youtube_music"}
        assert orchestrator.rate_limiters["deezer"].requests_per_window == 50

    def test_adapters_created(self, orchestrator: ConversionOrchestrator) -> None:
        """Only Deezer advertises search."""
        assert set(orchestrator.adapters) == set(Platform)
        assert [platform for platform, adapter in orchestrator.adapters.items() if adapter.has_search] == [Platform.DEEZER]

    def test_adapters_satisfy_protocol(self, orchestrator: ConversionOrchestrator) -> None:
        """Every adapter implements the interface the orchestrator relies on."""
        assert all(isinstance(adapter, PlatformAdapter) for adapter in orchestrator.adapters.values())

    @pytest.mark.asyncio
    async def test_not_initialized(self, mock_console_logger: MagicMock, mock_error_logger: MagicMock) -> None:
        """Using the orchestrator before initialize() is a programming error."""
        orchestrator = ConversionOrchestrator(AppConfig(), mock_console_logger, mock_error_logger)

        with pytest.raises(RuntimeError, match="initialize"):
            await orchestrator.convert_to(DEEZER_HIT, Platform.SPOTIFY)

    @pytest.mark.asyncio
    async def test_close(self, orchestrator: ConversionOrchestrator) -> None:
        """Closing releases the session once."""
        session = orchestrator.session
        assert session is not None

        await orchestrator.close()
        await orchestrator.close()

        session.close.assert_awaited_once()
        assert orchestrator.session is None
        assert orchestrator.executor.session is None


class TestResolveSource:
    """Tests for resolve_source."""

    @pytest.mark.asyncio
    async def test_album_reference(self, orchestrator: ConversionOrchestrator, deezer_album: AlbumRecord) -> None:
        """Album links go through get_album."""
        _stub_source(orchestrator, Platform.DEEZER, deezer_album)

        record = await orchestrator.resolve_source(SourceReference(Platform.DEEZER, ContentKind.ALBUM, "11205422"))

        assert record is deezer_album
        orchestrator.adapters[Platform.DEEZER].get_album.assert_awaited_once_with("11205422")  # type: ignore[attr-defined]

    @pytest.mark.asyncio
    async def test_short_link(self, orchestrator: ConversionOrchestrator) -> None:
        """Deezer short links go through resolve_short_link."""
        adapter = orchestrator.adapters[Platform.DEEZER]
        assert isinstance(adapter, DeezerClient)
        adapter.resolve_short_link = AsyncMock(return_value=DEEZER_HIT)  # type: ignore[method-assign]

        record = await orchestrator.resolve_source(
            SourceReference(Platform.DEEZER, ContentKind.TRACK, "abc", is_short_link=True),
        )

        assert record is DEEZER_HIT
        adapter.resolve_short_link.assert_awaited_once_with("abc")


@allure.epic("tunebridge")
@allure.feature("Conversion")
class TestConvert:
    """Tests for end-to-end conversion with stubbed platforms."""

    @allure.story("Spotify source")
    @allure.title("Spotify track converts to a Deezer match and YouTube Music links")
    @pytest.mark.asyncio
    async def test_spotify_track(self, orchestrator: ConversionOrchestrator, spotify_track: TrackRecord) -> None:
        """Deezer is searched, YouTube Music gets search links, Spotify is skipped."""
        _stub_source(orchestrator, Platform.SPOTIFY, spotify_track)
        deezer = orchestrator.adapters[Platform.DEEZER]
        deezer.search_tracks = AsyncMock(return_value=[DEEZER_HIT])  # type: ignore[method-assign]

        with allure.step("Convert"):
            report = await orchestrator.convert("https://open.spotify.com/track/4sPmO7WMQUAf45kwMOtONw")

        with allure.step("Verify outcomes"):
            assert report.kind is ContentKind.TRACK
            assert [outcome.platform for outcome in report.outcomes] == [Platform.DEEZER, Platform.YOUTUBE_MUSIC]

            deezer_outcome = report.outcome_for(Platform.DEEZER)
            assert deezer_outcome is not None
            assert deezer_outcome.status is TargetStatus.MATCHED
            assert deezer_outcome.result.tier is MatchTier.CONFIDENT
            assert deezer_outcome.records == [DEEZER_HIT]

            youtube_outcome = report.outcome_for(Platform.YOUTUBE_MUSIC)
            assert youtube_outcome is not None
            assert youtube_outcome.status is TargetStatus.SEARCH_LINKS
            assert len(youtube_outcome.records) == 3
            assert report.outcome_for(Platform.SPOTIFY) is None

    @pytest.mark.asyncio
    async def test_explicit_targets_are_deduplicated(
        self, orchestrator: ConversionOrchestrator, spotify_track: TrackRecord
    ) -> None:
        """Repeated targets and the source platform are dropped."""
        _stub_source(orchestrator, Platform.SPOTIFY, spotify_track)

        report = await orchestrator.convert(
            "https://open.spotify.com/track/4sPmO7WMQUAf45kwMOtONw",
            [Platform.YOUTUBE_MUSIC, Platform.SPOTIFY, Platform.YOUTUBE_MUSIC],
        )

        assert [outcome.platform for outcome in report.outcomes] == [Platform.YOUTUBE_MUSIC]

    @pytest.mark.asyncio
    async def test_album_source(self, orchestrator: ConversionOrchestrator, deezer_album: AlbumRecord) -> None:
        """Album sources produce album search links."""
        _stub_source(orchestrator, Platform.DEEZER, deezer_album)

        report = await orchestrator.convert("https://www.deezer.com/album/11205422", [Platform.SPOTIFY])

        assert report.kind is ContentKind.ALBUM
        outcome = report.outcomes[0]
        assert outcome.status is TargetStatus.SEARCH_LINKS
        assert all(isinstance(record, AlbumRecord) for record in outcome.records)

    @pytest.mark.asyncio
    async def test_failing_target_is_isolated(self, orchestrator: ConversionOrchestrator, spotify_track: TrackRecord) -> None:
        """A platform error on every Deezer query leaves YouTube Music untouched."""
        _stub_source(orchestrator, Platform.SPOTIFY, spotify_track)
        deezer = orchestrator.adapters[Platform.DEEZER]
        deezer.search_tracks = AsyncMock(side_effect=PlatformError("quota", ErrorKind.ACCESS_DENIED))  # type: ignore[method-assign]

        report = await orchestrator.convert("https://open.spotify.com/track/4sPmO7WMQUAf45kwMOtONw")

        deezer_outcome = report.outcome_for(Platform.DEEZER)
        assert deezer_outcome is not None
        assert deezer_outcome.status is TargetStatus.NO_MATCH
        youtube_outcome = report.outcome_for(Platform.YOUTUBE_MUSIC)
        assert youtube_outcome is not None
        assert youtube_outcome.status is TargetStatus.SEARCH_LINKS

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_failed_outcome(
        self,
        orchestrator: ConversionOrchestrator,
        spotify_track: TrackRecord,
        mock_error_logger: MagicMock,
    ) -> None:
        """Bugs in one target are reported as FAILED with kind UNKNOWN."""
        _stub_source(orchestrator, Platform.SPOTIFY, spotify_track)
        youtube = orchestrator.adapters[Platform.YOUTUBE_MUSIC]
        youtube.build_search_link_records = MagicMock(side_effect=ValueError("boom"))  # type: ignore[method-assign]

        report = await orchestrator.convert(
            "https://open.spotify.com/track/4sPmO7WMQUAf45kwMOtONw",
            [Platform.YOUTUBE_MUSIC],
        )

        outcome = report.outcomes[0]
        assert outcome.status is TargetStatus.FAILED
        assert outcome.error_kind is ErrorKind.UNKNOWN
        assert outcome.error_message == "boom"
        mock_error_logger.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_source_failure_propagates(self, orchestrator: ConversionOrchestrator) -> None:
        """A source that cannot be fetched aborts the conversion."""
        spotify = orchestrator.adapters[Platform.SPOTIFY]
        spotify.get_track = AsyncMock(side_effect=PlatformError("gone", ErrorKind.NOT_FOUND))  # type: ignore[method-assign]

        with pytest.raises(PlatformError):
            await orchestrator.convert("https://open.spotify.com/track/x")

    @pytest.mark.asyncio
    async def test_unrecognized_url(self, orchestrator: ConversionOrchestrator) -> None:
        """Unsupported links are rejected before any request."""
        with pytest.raises(UnrecognizedUrlError):
            await orchestrator.convert("https://example.com/song")


class TestConvertTo:
    """Tests for single-target conversion."""

    @pytest.mark.asyncio
    async def test_no_match(self, orchestrator: ConversionOrchestrator, spotify_track: TrackRecord) -> None:
        """An empty search result is NO_MATCH."""
        deezer = orchestrator.adapters[Platform.DEEZER]
        deezer.search_tracks = AsyncMock(return_value=[])  # type: ignore[method-assign]

        outcome = await orchestrator.convert_to(spotify_track, Platform.DEEZER)

        assert outcome.status is TargetStatus.NO_MATCH
        assert outcome.records == []

    @pytest.mark.asyncio
    async def test_platform_error_becomes_failed(self, orchestrator: ConversionOrchestrator, spotify_track: TrackRecord) -> None:
        """PlatformError raised outside the engine is a FAILED outcome with a user message."""
        orchestrator.engine.match = AsyncMock(side_effect=PlatformError("slow", ErrorKind.TIMEOUT))  # type: ignore[method-assign]

        outcome = await orchestrator.convert_to(spotify_track, Platform.DEEZER)

        assert outcome.status is TargetStatus.FAILED
        assert outcome.error_kind is ErrorKind.TIMEOUT
        assert outcome.error_message is not None
        assert "timeout" in outcome.error_message.lower()

    @pytest.mark.asyncio
    async def test_find_candidates_requires_search(
        self, orchestrator: ConversionOrchestrator, spotify_track: TrackRecord
    ) -> None:
        """Platforms without search cannot be matched against."""
        with pytest.raises(PlatformError) as exc_info:
            await orchestrator.find_candidates(spotify_track, Platform.YOUTUBE_MUSIC)

        assert exc_info.value.kind is ErrorKind.UNSUPPORTED

    @pytest.mark.asyncio
    async def test_find_candidates_uses_album_search(
        self, orchestrator: ConversionOrchestrator, deezer_album: AlbumRecord
    ) -> None:
        """Album sources are searched with search_albums."""
        deezer = orchestrator.adapters[Platform.DEEZER]
        deezer.search_albums = AsyncMock(return_value=[deezer_album])  # type: ignore[method-assign]

        result = await orchestrator.find_candidates(deezer_album, Platform.DEEZER)

        assert result.records == [deezer_album]
        deezer.search_albums.assert_any_await("Adele 25 album", 3)
