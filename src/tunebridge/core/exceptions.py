"""Core exceptions shared by the transport, platform adapters and the CLI.

Transport and adapter failures are reduced to a small closed set of error kinds
so callers branch on ``ErrorKind`` rather than on HTTP status details.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Closed classification of platform and transport failures."""

    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


class TuneBridgeError(Exception):
    """Base exception for all tunebridge errors."""


class ConfigurationError(TuneBridgeError):
    """Raised when configuration loading or parsing fails."""

    def __init__(self, message: str, config_path: str | None = None) -> None:
        """Initialize the configuration error.

        Args:
            message: Error description
            config_path: Path to the config file that caused the error

        """
        super().__init__(message)
        self.config_path = config_path


class PlatformError(TuneBridgeError):
    """Raised by the transport and platform adapters when a request cannot be served."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        *,
        platform: str | None = None,
        status: int | None = None,
    ) -> None:
        """Initialize the platform error.

        Args:
            message: Error description
            kind: Classified failure kind
            platform: Platform (or API) name the failure came from
            status: HTTP status code, when the failure came from a response

        """
        super().__init__(message)
        self.kind = kind
        self.platform = platform
        self.status = status

    def user_message(self) -> str:
        """Return a short human-readable explanation for the failure kind."""
        name = self.platform.replace("_", " ").title() if self.platform else "the platform"
        messages = {
            ErrorKind.NOT_FOUND: f"Not found on {name}. Please verify the URL is correct.",
            ErrorKind.ACCESS_DENIED: f"Unable to access {name}. Please try again later.",
            ErrorKind.TIMEOUT: "Connection timeout. Please check your internet connection and try again.",
            ErrorKind.UNSUPPORTED: f"{name} does not offer a public search.",
        }
        return messages.get(self.kind, f"Request to {name} failed: {self}")


class UnrecognizedUrlError(TuneBridgeError):
    """Raised when a URL does not belong to any supported platform."""

    def __init__(self, url: str) -> None:
        """Initialize with the offending URL."""
        super().__init__(f"Unrecognized music URL: {url!r}")
        self.url = url
