"""
Runtime settings for configcrunch.

Loaded from environment variables (prefix ``CONFIGCRUNCH_``) and a .env file.
"""

from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class ConfigcrunchConfig(BaseSettings):
    """Configuration settings for document loading."""

    # Reference lookup
    yaml_extension: str = Field(".yml", description="File extension appended to $ref targets")
    lookup_paths: List[Path] = Field(
        default_factory=list,
        description="Default lookup paths for $ref resolution (used by the CLI)"
    )

    # Variables
    max_variable_passes: int = Field(
        25, gt=0, description="Maximum template evaluation passes before giving up"
    )

    # Logging
    log_level: str = Field("WARNING", description="Log level used by the CLI")

    model_config = {
        "env_prefix": "CONFIGCRUNCH_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("yaml_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        if v and not v.startswith("."):
            return "." + v
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError(f"Invalid log level: {v}")
        return level


# Global config instance - loaded from environment
config = ConfigcrunchConfig()
