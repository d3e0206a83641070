"""Tests for error classification messages."""

from __future__ import annotations

import pytest

from tunebridge.core.exceptions import ConfigurationError, ErrorKind, PlatformError, UnrecognizedUrlError


class TestPlatformError:
    """Tests for PlatformError."""

    @pytest.mark.parametrize(
        ("kind", "fragment"),
        [
            (ErrorKind.NOT_FOUND, "Not found on Deezer"),
            (ErrorKind.ACCESS_DENIED, "Unable to access Deezer"),
            (ErrorKind.TIMEOUT, "Connection timeout"),
            (ErrorKind.UNSUPPORTED, "Deezer does not offer"),
            (ErrorKind.UNKNOWN, "Request to Deezer failed: boom"),
        ],
    )
    def test_user_message(self, kind: ErrorKind, fragment: str) -> None:
        """Each kind gets its own explanation."""
        assert fragment in PlatformError("boom", kind, platform="deezer").user_message()

    def test_platform_name_formatting(self) -> None:
        """Underscored platform names are humanized."""
        error = PlatformError("x", ErrorKind.NOT_FOUND, platform="youtube_music")
        assert "Youtube Music" in error.user_message()

    def test_defaults(self) -> None:
        """Kind defaults to UNKNOWN with no platform or status."""
        error = PlatformError("x")
        assert error.kind is ErrorKind.UNKNOWN
        assert error.platform is None
        assert error.status is None
        assert "the platform" in error.user_message()


def test_configuration_error_path() -> None:
    """The offending path is kept."""
    assert ConfigurationError("bad", config_path="config.yaml").config_path == "config.yaml"


def test_unrecognized_url_message() -> None:
    """The URL is quoted in the message."""
    error = UnrecognizedUrlError("https://example.com")
    assert error.url == "https://example.com"
    assert "'https://example.com'" in str(error)
