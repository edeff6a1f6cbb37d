"""Configuration package for uigen."""

from .constants import DEFAULT_CONFIG_PATH, DEFAULT_DATA_DIR, DEFAULT_MAX_FILE_BYTES
from .manager import (
    ConfigurationError,
    deep_merge,
    get_config_path,
    load_config,
    load_settings,
    merge_with_env,
    save_config,
)
from .schema import (
    EditorConfig,
    LoggingConfig,
    SnapshotConfig,
    StorageConfig,
    WorkspaceSettings,
)

__all__ = [
    # Constants
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_DATA_DIR",
    "DEFAULT_MAX_FILE_BYTES",
    # Schema
    "WorkspaceSettings",
    "EditorConfig",
    "SnapshotConfig",
    "StorageConfig",
    "LoggingConfig",
    # Manager
    "ConfigurationError",
    "get_config_path",
    "load_config",
    "load_settings",
    "save_config",
    "merge_with_env",
    "deep_merge",
]
