"""Logging setup: RichHandler for the console, QueueHandler for non-blocking file IO.

Two loggers are handed to every service:

1.  ``console_logger``: progress and debug output rendered by ``rich.logging.RichHandler``
    on the shared Rich console.
2.  ``error_logger``: warnings and failures written to the main log file through a
    ``QueueHandler`` / ``SafeQueueListener`` pair so file IO never blocks the event loop.

When file logging is disabled the error logger writes to the console instead.
"""

from __future__ import annotations

# All runtime and debugging information goes through a configured
# ``logging.Logger``. ``print()`` is reserved for the final end-user result
# and for reporting failures of the logging system itself.
import logging
import queue
import sys
import traceback
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from tunebridge.core.models.config_models import AppConfig

__all__ = [
    "LEVEL_ABBREV",
    "CompactFormatter",
    "LogFormat",
    "LoggerFilter",
    "SafeQueueListener",
    "create_console_logger",
    "create_fallback_loggers",
    "ensure_directory",
    "get_log_file_path",
    "get_log_levels_from_config",
    "get_loggers",
    "get_shared_console",
    "replace_handlers",
    "setup_queue_logging",
]

CONSOLE_LOGGER_NAME = "tunebridge.console"
ERROR_LOGGER_NAME = "tunebridge.error"

# Module-level shared console container (avoids global statement)
_console_holder: dict[str, Console] = {}


def get_shared_console() -> Console:
    """Get or create the shared Rich console instance.

    Every log handler writes through this single stderr Console, which keeps
    stdout free for command results (tables or JSON).
    """
    if "console" not in _console_holder:
        _console_holder["console"] = Console(stderr=True)
    return _console_holder["console"]


class SafeQueueListener(QueueListener):
    """A QueueListener wrapper that safely handles stop() calls."""

    def stop(self) -> None:
        """Stop the listener thread, tolerating a listener that never started."""
        try:
            if getattr(self, "_thread", None) is not None:
                super().stop()
        except (AttributeError, RuntimeError, TypeError) as e:
            print(f"Warning: Error stopping QueueListener: {e}", file=sys.stderr)


LEVEL_ABBREV = {
    "DEBUG": "D",
    "INFO": "I",
    "WARNING": "W",
    "ERROR": "E",
    "CRITICAL": "C",
}


class LogFormat:
    """Rich markup helpers for consistent console log formatting.

    Example:
        from tunebridge.core.logger import LogFormat as LF
        logger.info("Converted %s to %s", LF.entity("Hello"), LF.number(2))
    """

    @staticmethod
    def entity(name: str) -> str:
        """Highlight a track, album or platform name (yellow)."""
        return f"[yellow]{name}[/yellow]"

    @staticmethod
    def number(value: float) -> str:
        """Highlight a number (bright white)."""
        return f"[bright_white]{value}[/bright_white]"

    @staticmethod
    def success(text: str) -> str:
        """Green status text."""
        return f"[green]{text}[/green]"

    @staticmethod
    def error(text: str) -> str:
        """Red status text."""
        return f"[red]{text}[/red]"

    @staticmethod
    def warning(text: str) -> str:
        """Yellow status text."""
        return f"[yellow]{text}[/yellow]"

    @staticmethod
    def dim(text: str) -> str:
        """Dim secondary text."""
        return f"[dim]{text}[/dim]"


class LoggerFilter:
    """Filter that only allows records from specific logger names."""

    def __init__(self, allowed_loggers: list[str]) -> None:
        """Initialize filter with allowed logger names.

        Args:
            allowed_loggers: Logger names that pass the filter. Children of an
                allowed logger (``"name.child"``) pass as well.

        """
        self.allowed_loggers = set(allowed_loggers)

    def filter(self, record: logging.LogRecord) -> bool:
        """True if the record's logger is allowed or a child of an allowed logger."""
        return any(record.name == logger or record.name.startswith(f"{logger}.") for logger in self.allowed_loggers)


class CompactFormatter(logging.Formatter):
    """File log formatter with one-letter level names."""

    def __init__(self, fmt: str | None = None, datefmt: str = "%Y-%m-%d %H:%M:%S") -> None:
        """Initialize with a compact default format."""
        super().__init__(fmt or "%(asctime)s %(levelname)s [%(name)s] %(module)s:%(lineno)d - %(message)s", datefmt)

    def format(self, record: logging.LogRecord) -> str:
        """Format with the level abbreviated, restoring the record afterwards."""
        original_levelname = record.levelname
        record.levelname = LEVEL_ABBREV.get(original_levelname, original_levelname[:1])
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def ensure_directory(path: str, error_logger: logging.Logger | None = None) -> None:
    """Create a directory (and parents) if it does not exist yet."""
    try:
        if path:
            Path(path).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        if error_logger:
            error_logger.exception("Error creating directory %s", path)
        else:
            print(f"ERROR: Error creating directory {path}: {e}", file=sys.stderr)


def get_log_levels_from_config(config: AppConfig) -> dict[str, int]:
    """Map configured level names to ``logging`` constants.

    Returns:
        ``{"console": level, "main_file": level}``

    """
    levels = config.logging.levels
    return {
        "console": logging.getLevelNamesMapping().get(str(levels.console), logging.INFO),
        "main_file": logging.getLevelNamesMapping().get(str(levels.main_file), logging.INFO),
    }


def get_log_file_path(config: AppConfig) -> str:
    """Full path of the main log file, creating its directory."""
    full_path = Path(config.logging.logs_base_dir) / config.logging.main_log_file
    ensure_directory(str(full_path.parent))
    return str(full_path)


def replace_handlers(logger: logging.Logger, handler: logging.Handler) -> logging.Logger:
    """Close and detach every handler of ``logger``, then attach ``handler`` alone."""
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def create_console_logger(level: int) -> logging.Logger:
    """Create the console logger with a RichHandler on the shared console."""
    handler = RichHandler(
        level=level,
        console=get_shared_console(),
        show_path=False,
        enable_link_path=False,
        log_time_format="%H:%M:%S",
        markup=True,
    )
    console_logger = replace_handlers(logging.getLogger(CONSOLE_LOGGER_NAME), handler)
    console_logger.setLevel(level)
    return console_logger


def setup_queue_logging(level: int, log_file: str) -> tuple[logging.Logger, SafeQueueListener]:
    """Route the error logger through a queue to the main log file.

    Returns:
        Tuple of (error_logger, started listener)

    """
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(CompactFormatter())
    file_handler.setLevel(level)
    file_handler.addFilter(LoggerFilter([ERROR_LOGGER_NAME]))

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    listener = SafeQueueListener(log_queue, file_handler, respect_handler_level=True)
    listener.start()

    error_logger = replace_handlers(logging.getLogger(ERROR_LOGGER_NAME), QueueHandler(log_queue))
    error_logger.setLevel(level)
    return error_logger, listener


def _create_console_error_logger() -> logging.Logger:
    handler = RichHandler(level=logging.WARNING, console=get_shared_console(), show_path=False, markup=False)
    error_logger = replace_handlers(logging.getLogger(ERROR_LOGGER_NAME), handler)
    error_logger.setLevel(logging.WARNING)
    return error_logger


def get_loggers(config: AppConfig) -> tuple[logging.Logger, logging.Logger, SafeQueueListener | None]:
    """Create the console and error loggers.

    Never raises: on setup failure basic stream loggers are returned instead.

    Returns:
        Tuple of (console_logger, error_logger, listener). The listener is
        ``None`` when file logging is disabled or setup failed.

    """
    try:
        levels = get_log_levels_from_config(config)
        console_logger = create_console_logger(levels["console"])

        if not config.logging.file_logging:
            return console_logger, _create_console_error_logger(), None

        error_logger, listener = setup_queue_logging(levels["main_file"], get_log_file_path(config))
    except (OSError, ValueError, AttributeError, TypeError) as e:
        return create_fallback_loggers(e)

    console_logger.debug("Logging setup with QueueListener and RichHandler complete.")
    return console_logger, error_logger, listener


def create_fallback_loggers(e: Exception) -> tuple[logging.Logger, logging.Logger, None]:
    """Basic stream loggers used when the regular setup fails."""
    print(f"FATAL ERROR: Failed to configure logging: {e}", file=sys.stderr)
    traceback.print_exc(file=sys.stderr)

    console_fallback = logging.getLogger("tunebridge.console_fallback")
    error_fallback = logging.getLogger("tunebridge.error_fallback")
    if not console_fallback.handlers:
        console_fallback.addHandler(logging.StreamHandler(sys.stderr))
    if not error_fallback.handlers:
        error_fallback.addHandler(logging.StreamHandler(sys.stderr))
    console_fallback.setLevel(logging.INFO)
    error_fallback.setLevel(logging.WARNING)
    return console_fallback, error_fallback, None
