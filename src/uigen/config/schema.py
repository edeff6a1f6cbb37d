"""Pydantic models for uigen configuration schema."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from uigen.config.constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_FILE_BYTES,
    DEFAULT_PROJECTS_DIRNAME,
    DEFAULT_STRICT_SNAPSHOTS,
    VALID_LOG_LEVELS,
)


class EditorConfig(BaseModel):
    """Editor command configuration."""

    max_file_bytes: int = Field(
        default=DEFAULT_MAX_FILE_BYTES,
        description="Maximum file size in bytes produced by create, str_replace and insert",
    )

    @field_validator("max_file_bytes")
    @classmethod
    def validate_max_file_bytes(cls, v: int) -> int:
        """Validate the size limit is positive."""
        if v <= 0:
            raise ValueError("max_file_bytes must be positive")
        return v


class SnapshotConfig(BaseModel):
    """Snapshot decoding configuration."""

    strict: bool = Field(
        default=DEFAULT_STRICT_SNAPSHOTS,
        description=(
            "Reject snapshots listing a file whose parent directory has no record. "
            "When false, missing intermediate directories are created."
        ),
    )


class StorageConfig(BaseModel):
    """Project store configuration."""

    data_dir: str = str(DEFAULT_DATA_DIR)

    @field_validator("data_dir")
    @classmethod
    def expand_data_dir(cls, v: str) -> str:
        """Expand user home directory in data_dir."""
        return str(Path(v).expanduser())


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = DEFAULT_LOG_LEVEL

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        level = v.lower()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Valid levels: {sorted(VALID_LOG_LEVELS)}")
        return level


class WorkspaceSettings(BaseModel):
    """Root configuration model for uigen settings."""

    version: str = "1.0"
    editor: EditorConfig = Field(default_factory=EditorConfig)
    snapshot: SnapshotConfig = Field(default_factory=SnapshotConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def model_dump_json_pretty(self, **kwargs: Any) -> str:
        """Dump model to pretty-printed JSON string."""
        return self.model_dump_json(indent=2, exclude_none=False, **kwargs)

    def model_dump_json_minimal(self) -> str:
        """Dump only values that differ from the defaults (plus the version)."""
        data = {key: value for key, value in self.model_dump(exclude_defaults=True).items() if value}
        data["version"] = self.version
        return json.dumps(data, indent=2)

    @property
    def data_dir(self) -> Path:
        """Root directory for uigen data."""
        return Path(self.storage.data_dir)

    @property
    def projects_dir(self) -> Path:
        """Directory holding stored projects."""
        return self.data_dir / DEFAULT_PROJECTS_DIRNAME

    @property
    def log_level(self) -> str:
        return self.logging.level

    @property
    def max_file_bytes(self) -> int:
        return self.editor.max_file_bytes

    @property
    def strict_snapshots(self) -> bool:
        return self.snapshot.strict
