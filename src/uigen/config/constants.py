"""Configuration constants for uigen.

Single source of truth for default configuration values. Kept apart from
schema.py and manager.py to avoid circular imports.
"""

from pathlib import Path

# Default paths
CONFIG_DIRNAME = ".uigen"
CONFIG_FILENAME = "settings.json"
DEFAULT_DATA_DIR = Path.home() / CONFIG_DIRNAME
DEFAULT_CONFIG_PATH = DEFAULT_DATA_DIR / CONFIG_FILENAME
DEFAULT_PROJECTS_DIRNAME = "projects"

# Default editor settings
DEFAULT_MAX_FILE_BYTES = 1_048_576  # 1MB

# Default snapshot settings
DEFAULT_STRICT_SNAPSHOTS = False
SNAPSHOT_FORMAT_VERSION = 1

# Default logging settings
DEFAULT_LOG_LEVEL = "warning"
VALID_LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}
