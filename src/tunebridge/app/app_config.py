"""Configuration entry point for the CLI."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from tunebridge.core.core_config import load_config as load_yaml_config
from tunebridge.core.models.config_models import AppConfig

DEFAULT_CONFIG_FILES = ["config.yaml", "config.yml"]


class Config:
    """Locates, loads and caches the application configuration.

    Path resolution order: explicit argument, ``CONFIG_PATH`` from the
    environment (after ``.env`` is loaded), then ``config.yaml`` in the working
    directory. With no file found the built-in defaults are used.
    """

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration.

        Args:
            config_path: Path to the configuration file (search defaults if None)

        """
        load_dotenv()

        if config_path is None:
            config_path = os.getenv("CONFIG_PATH") or None
        if config_path is None:
            config_path = next((name for name in DEFAULT_CONFIG_FILES if Path(name).exists()), None)

        self.config_path = config_path
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """Load configuration from the file, or defaults when there is none.

        Raises:
            ConfigurationError: If a config file was given or found but is invalid

        """
        if self._config is None:
            if self.config_path is None:
                self._config = AppConfig()
            else:
                self._config = load_yaml_config(os.path.expandvars(self.config_path))
        return self._config
