"""Pytest configuration and shared fixtures for tunebridge."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from tunebridge.core.models.platform import Platform
from tunebridge.core.models.records import AlbumRecord, TrackRecord


@pytest.fixture
def mock_console_logger() -> MagicMock:
    """Mock console logger for testing."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def mock_error_logger() -> MagicMock:
    """Mock error logger for testing."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def console_logger() -> logging.Logger:
    """Real console logger for tests that exercise log output."""
    return logging.getLogger("test.tunebridge.console")


@pytest.fixture
def error_logger() -> logging.Logger:
    """Real error logger for tests that exercise log output."""
    return logging.getLogger("test.tunebridge.error")


@pytest.fixture
def spotify_track() -> TrackRecord:
    """Source track as resolved from a Spotify link."""
    return TrackRecord(
        title="Hello",
        artists=("Adele",),
        cover_url="https://i.scdn.co/image/hello",
        platform_id="4sPmO7WMQUAf45kwMOtONw",
        platform=Platform.SPOTIFY,
        url="https://open.spotify.com/track/4sPmO7WMQUAf45kwMOtONw",
    )


@pytest.fixture
def deezer_album() -> AlbumRecord:
    """Source album as resolved from a Deezer link."""
    return AlbumRecord(
        title="25",
        artists=("Adele",),
        track_count=11,
        platform_id="11205422",
        platform=Platform.DEEZER,
        url="https://www.deezer.com/album/11205422",
    )
