"""Command-line interface for tunebridge."""

from __future__ import annotations

import argparse
from typing import Any

from tunebridge.core.models.platform import Platform

PLATFORM_ALIASES = {
    "spotify": Platform.SPOTIFY,
    "deezer": Platform.DEEZER,
    "youtube_music": Platform.YOUTUBE_MUSIC,
    "youtube-music": Platform.YOUTUBE_MUSIC,
    "youtube": Platform.YOUTUBE_MUSIC,
    "ytm": Platform.YOUTUBE_MUSIC,
}


def parse_platform(value: str) -> Platform:
    """Argparse type for platform names, accepting a few common aliases."""
    try:
        return PLATFORM_ALIASES[value.strip().lower()]
    except KeyError:
        choices = ", ".join(sorted(PLATFORM_ALIASES))
        msg = f"unknown platform {value!r} (choose from {choices})"
        raise argparse.ArgumentTypeError(msg) from None


def _add_convert_command(subparsers: Any) -> None:
    """Add convert command."""
    parser = subparsers.add_parser(
        "convert",
        aliases=["c"],
        help="Convert a track or album link to the other platforms",
        description="Resolve the link, then search or build search links on every target platform",
    )
    parser.add_argument("url", help="Spotify, Deezer or YouTube Music link")
    parser.add_argument(
        "--to",
        dest="targets",
        type=parse_platform,
        action="append",
        metavar="PLATFORM",
        help="Target platform (repeatable; default: every platform except the source's)",
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")


def _add_match_command(subparsers: Any) -> None:
    """Add match command."""
    parser = subparsers.add_parser(
        "match",
        aliases=["m"],
        help="Show scored candidates on a platform with public search",
        description="Run the matching engine and print every returned candidate with its score",
    )
    parser.add_argument("url", help="Spotify, Deezer or YouTube Music link")
    parser.add_argument(
        "--to",
        dest="target",
        type=parse_platform,
        default=Platform.DEEZER,
        metavar="PLATFORM",
        help="Platform to search (default: deezer)",
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")


def _add_detect_command(subparsers: Any) -> None:
    """Add detect command."""
    parser = subparsers.add_parser(
        "detect",
        help="Print the platform, content kind and id of a link",
        description="Parse a link without touching the network",
    )
    parser.add_argument("url", help="Link to inspect")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")


class CLI:
    """Command-line interface handler."""

    def __init__(self) -> None:
        """Initialize CLI parser."""
        self.parser = self._create_parser()

    @staticmethod
    def _create_parser() -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog="tunebridge",
            description="Find a Spotify, Deezer or YouTube Music track or album on the other platforms",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
    # Convert a Spotify track to Deezer and YouTube Music
    %(prog)s convert https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC

    # Only Deezer, as JSON
    %(prog)s convert https://music.youtube.com/watch?v=YQHsXMglC9A --to deezer --json

    # Inspect match scores
    %(prog)s match https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC
            """,
        )

        parser.add_argument(
            "--config",
            type=str,
            help="Path to configuration file (default: $CONFIG_PATH, then ./config.yaml, then built-in defaults)",
        )
        parser.add_argument(
            "--verbose",
            "-v",
            action="store_true",
            help="Enable debug logging on the console",
        )

        subparsers = parser.add_subparsers(
            dest="command",
            title="Commands",
            description="Available commands",
            help="Use '%(prog)s COMMAND --help' for command-specific help",
            required=True,
        )
        _add_convert_command(subparsers)
        _add_match_command(subparsers)
        _add_detect_command(subparsers)
        return parser

    def parse_args(self, args: list[str] | None = None) -> argparse.Namespace:
        """Parse command-line arguments (``sys.argv`` when None)."""
        return self.parser.parse_args(args)
