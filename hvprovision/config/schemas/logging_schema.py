"""Logging configuration schema."""
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    destination: Literal["stdout", "file", "both"] = Field("stdout", description="Where log records go")
    file_path: str = Field("logs/hvprov.log", description="Log file path when logging to a file")
    max_size_mb: int = Field(10, ge=1, description="Size at which the log file rotates")
    backup_count: int = Field(5, ge=0, description="Rotated files to keep")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()
