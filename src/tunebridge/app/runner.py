"""Command execution: configuration, logging and orchestrator lifecycle."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console

from tunebridge.app import rendering
from tunebridge.app.app_config import Config
from tunebridge.app.cli import CLI
from tunebridge.core.exceptions import ConfigurationError, PlatformError, UnrecognizedUrlError
from tunebridge.core.logger import LogFormat, SafeQueueListener, get_loggers
from tunebridge.core.models.config_models import AppConfig, LogLevel
from tunebridge.services.orchestrator import ConversionOrchestrator, create_conversion_orchestrator
from tunebridge.services.url_parser import parse_source_url

EXIT_OK = 0
EXIT_UNRESOLVED = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130

COMMAND_ALIASES = {"c": "convert", "m": "match"}


def _load_config(args: argparse.Namespace) -> AppConfig:
    """Load configuration and apply command-line overrides."""
    config = Config(args.config).load()
    if args.verbose:
        config = config.model_copy(deep=True)
        config.logging.levels.console = LogLevel.DEBUG
    return config


def run_detect(args: argparse.Namespace, console: Console) -> int:
    """Parse a link offline and print what it points at."""
    try:
        reference = parse_source_url(args.url)
    except UnrecognizedUrlError as e:
        print(str(e), file=sys.stderr)
        return EXIT_UNRESOLVED

    if args.json:
        print(rendering.dump_json(rendering.reference_to_dict(reference)))
    else:
        suffix = " (short link)" if reference.is_short_link else ""
        console.print(f"{reference.platform.display_name} {reference.kind} {reference.id}{suffix}")
    return EXIT_OK


async def run_convert(
    args: argparse.Namespace,
    orchestrator: ConversionOrchestrator,
    console: Console,
    console_logger: logging.Logger,
) -> int:
    """Convert a link to the requested target platforms and print the report."""
    report = await orchestrator.convert(args.url, args.targets)
    console_logger.debug(
        "Conversion of %s finished with %s outcomes",
        LogFormat.entity(report.source.title or args.url),
        LogFormat.number(len(report.outcomes)),
    )
    if args.json:
        print(rendering.dump_json(report.to_dict()))
    else:
        rendering.render_report(console, report)
    return EXIT_OK


async def run_match(args: argparse.Namespace, orchestrator: ConversionOrchestrator, console: Console) -> int:
    """Run the matching engine against one platform and print scored candidates."""
    reference = parse_source_url(args.url)
    source = await orchestrator.resolve_source(reference)
    result = await orchestrator.find_candidates(source, args.target)

    if args.json:
        print(rendering.dump_json(rendering.candidates_to_dict(source, args.target, result)))
    else:
        rendering.render_candidates(console, source, args.target, result)
    return EXIT_OK


async def _run_online_command(
    command: str,
    args: argparse.Namespace,
    config: AppConfig,
    console: Console,
) -> int:
    """Run a command that needs the HTTP session, owning logging and session lifecycle."""
    console_logger, error_logger, listener = get_loggers(config)
    orchestrator = create_conversion_orchestrator(config, console_logger, error_logger)

    try:
        await orchestrator.initialize()
        if command == "match":
            return await run_match(args, orchestrator, console)
        return await run_convert(args, orchestrator, console, console_logger)
    except UnrecognizedUrlError as e:
        print(str(e), file=sys.stderr)
        return EXIT_UNRESOLVED
    except PlatformError as e:
        error_logger.error("Could not resolve %s: %s", args.url, e)
        print(e.user_message(), file=sys.stderr)
        return EXIT_UNRESOLVED
    finally:
        await orchestrator.close()
        _stop_listener(listener)


def _stop_listener(listener: SafeQueueListener | None) -> None:
    if listener is not None:
        listener.stop()


async def main_async(argv: list[str] | None = None) -> int:
    """Execute the command line and return the process exit code."""
    args = CLI().parse_args(argv)
    command = COMMAND_ALIASES.get(args.command, args.command)
    console = Console()

    if command == "detect":
        return run_detect(args, console)

    try:
        config = _load_config(args)
    except ConfigurationError as e:
        location = f" ({e.config_path})" if e.config_path else ""
        print(f"Configuration error{location}: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    return await _run_online_command(command, args, config, console)


def main() -> None:
    """Execute the main entry point."""
    try:
        exit_code = asyncio.run(main_async())
    except KeyboardInterrupt:
        print("\nInterrupted by user.", file=sys.stderr)
        exit_code = EXIT_INTERRUPTED
    sys.exit(exit_code)
