"""YAML configuration loading and validation."""

from __future__ import annotations

import logging
import os
import pathlib
from typing import Any

import yaml
from pydantic import ValidationError

from tunebridge.core.exceptions import ConfigurationError
from tunebridge.core.models.config_models import AppConfig

ConfigValue = dict[str, Any] | list[Any] | str | int | float | bool | None

# Rich is not configured yet when config loads; stay silent until it is
logger = logging.getLogger("tunebridge.config")
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

MAX_CONFIG_SIZE = 1024 * 1024


def resolve_env_vars(config: ConfigValue) -> ConfigValue:
    """Recursively resolve environment variables in config values.

    ``"${VAR}"`` becomes the variable's value (empty when unset); strings with
    ``$VAR`` or ``~`` inside are expanded in place.
    """
    if isinstance(config, dict):
        return {str(key): resolve_env_vars(value) for key, value in config.items()}
    if isinstance(config, list):
        return [resolve_env_vars(item) for item in config]
    if isinstance(config, str):
        if config.startswith("${") and config.endswith("}"):
            return os.getenv(config[2:-1], "")
        if "$" in config or "~" in config:
            expanded = os.path.expandvars(config)
            return str(pathlib.Path(expanded).expanduser()) if expanded.startswith("~") else expanded
    return config


def _validate_config_path(path: str) -> pathlib.Path:
    """Resolve the path and check it is a readable YAML file.

    Raises:
        FileNotFoundError: If the path does not exist or is not a file
        ValueError: If the extension is not .yaml/.yml

    """
    try:
        resolved_path = pathlib.Path(path).expanduser().resolve(strict=True)
    except FileNotFoundError as e:
        msg = f"Config file not found at the specified path: {path}"
        raise FileNotFoundError(msg) from e

    if not resolved_path.is_file():
        msg = f"Config path does not point to a file: {resolved_path}"
        raise FileNotFoundError(msg)

    if resolved_path.suffix.lower() not in (".yaml", ".yml"):
        msg = "Configuration file must have a .yaml or .yml extension"
        raise ValueError(msg)

    return resolved_path


def _read_and_parse_config(path: pathlib.Path) -> ConfigValue:
    """Read and parse the YAML file, refusing oversized files."""
    if path.stat().st_size > MAX_CONFIG_SIZE:
        msg = f"Config file {path} is too large (max {MAX_CONFIG_SIZE} bytes)"
        raise ValueError(msg)

    logger.debug("Loading config from: %s", path)
    parsed: ConfigValue = yaml.safe_load(path.read_text(encoding="utf-8"))
    return parsed


def format_pydantic_errors(error: ValidationError) -> str:
    """Format Pydantic validation errors as ``dotted.path: message`` lines."""
    lines: list[str] = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        if err["type"] == "missing":
            lines.append(f"{location}: Missing required field")
        else:
            lines.append(f"{location}: {err['msg']}")
    return "\n".join(lines)


def build_config(data: ConfigValue) -> AppConfig:
    """Validate an already parsed mapping into ``AppConfig``.

    An empty document (``None``) yields the defaults.

    Raises:
        ConfigurationError: If the data is not a mapping or fails validation

    """
    if data is None:
        return AppConfig()
    if not isinstance(data, dict):
        msg = "Configuration data is not a mapping after parsing."
        raise ConfigurationError(msg)

    try:
        return AppConfig.model_validate(resolve_env_vars(data))
    except ValidationError as e:
        msg = f"Configuration validation failed:\n{format_pydantic_errors(e)}"
        raise ConfigurationError(msg) from e


def load_config(config_path: str) -> AppConfig:
    """Load a YAML file, resolve environment variables and validate it.

    Raises:
        ConfigurationError: If the file is missing, unreadable, malformed or invalid

    """
    try:
        validated_path = _validate_config_path(config_path)
        config_data = _read_and_parse_config(validated_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Configuration loading failed: %s", e)
        raise ConfigurationError(str(e), config_path=config_path) from e

    try:
        config = build_config(config_data)
    except ConfigurationError as e:
        e.config_path = config_path
        raise

    logger.debug("Configuration successfully loaded and validated.")
    return config
