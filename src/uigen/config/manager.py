"""Configuration file manager for loading, saving, and overriding uigen settings."""

import json
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from uigen.config.constants import CONFIG_DIRNAME, CONFIG_FILENAME
from uigen.config.schema import WorkspaceSettings


class ConfigurationError(Exception):
    """Raised when configuration operations fail."""

    pass


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Returns:
        Path to ~/.uigen/settings.json
    """
    return Path.home() / CONFIG_DIRNAME / CONFIG_FILENAME


def load_config(config_path: Path | None = None) -> WorkspaceSettings:
    """Load configuration from JSON file.

    Args:
        config_path: Optional path to config file. Defaults to ~/.uigen/settings.json

    Returns:
        WorkspaceSettings loaded from file, or default settings if the file doesn't exist

    Raises:
        ConfigurationError: If file exists but is invalid JSON or fails validation

    Example:
        >>> settings = load_config()
        >>> settings.editor.max_file_bytes
        1048576
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return WorkspaceSettings()

    try:
        with open(config_path) as f:
            data = json.load(f)

        return WorkspaceSettings(**data)

    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in configuration file {config_path}: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed for {config_path}:\n{e}") from e
    except Exception as e:
        raise ConfigurationError(f"Failed to load configuration from {config_path}: {e}") from e


def save_config(settings: WorkspaceSettings, config_path: Path | None = None) -> None:
    """Save configuration to JSON file, writing only non-default values.

    Args:
        settings: WorkspaceSettings instance to save
        config_path: Optional path to config file. Defaults to ~/.uigen/settings.json

    Raises:
        ConfigurationError: If save operation fails
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(config_path, "w") as f:
            f.write(settings.model_dump_json_minimal())
    except Exception as e:
        raise ConfigurationError(f"Failed to save configuration to {config_path}: {e}") from e


def merge_with_env(settings: WorkspaceSettings) -> dict[str, Any]:
    """Collect environment variable overrides for file settings.

    Environment variables take precedence over file settings.

    Args:
        settings: WorkspaceSettings instance from file

    Returns:
        Dictionary of environment variable overrides, shaped like the settings

    Example:
        >>> overrides = merge_with_env(load_config())
        >>> # {"logging": {"level": "debug"}} when UIGEN_LOG_LEVEL=debug
    """
    env_overrides: dict[str, Any] = {}

    if os.getenv("UIGEN_DATA_DIR"):
        env_overrides.setdefault("storage", {})["data_dir"] = os.getenv("UIGEN_DATA_DIR")

    # Support both UIGEN_LOG_LEVEL and LOG_LEVEL
    log_level = os.getenv("UIGEN_LOG_LEVEL") or os.getenv("LOG_LEVEL")
    if log_level:
        env_overrides.setdefault("logging", {})["level"] = log_level

    if os.getenv("UIGEN_STRICT_SNAPSHOTS"):
        env_overrides.setdefault("snapshot", {})["strict"] = (
            os.getenv("UIGEN_STRICT_SNAPSHOTS", "false").lower() == "true"
        )

    if os.getenv("UIGEN_MAX_FILE_BYTES"):
        try:
            env_overrides.setdefault("editor", {})["max_file_bytes"] = int(
                os.getenv("UIGEN_MAX_FILE_BYTES", "")
            )
        except ValueError:
            # Invalid value, keep the file setting
            env_overrides.setdefault("editor", {})[
                "max_file_bytes"
            ] = settings.editor.max_file_bytes

    return env_overrides


def load_settings(config_path: Path | None = None) -> WorkspaceSettings:
    """Load file settings and apply environment variable overrides.

    Raises:
        ConfigurationError: If the file or the overrides fail validation
    """
    settings = load_config(config_path)
    overrides = merge_with_env(settings)
    if not overrides:
        return settings

    try:
        return WorkspaceSettings(**deep_merge(settings.model_dump(), overrides))
    except ValidationError as e:
        raise ConfigurationError(f"Environment overrides failed validation:\n{e}") from e


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence.

    Args:
        base: Base dictionary
        override: Override dictionary (takes precedence)

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
