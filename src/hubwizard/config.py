"""Configuration settings for hubwizard.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: env vars > .env file > defaults.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the HUBWIZARD_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="HUBWIZARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Firmware catalog
    firmware_base_url: str = Field(
        default="https://firmware.pybricks.com/stable",
        description="Root URL of official firmware archives (<url>/<hub>.zip)",
    )
    firmware_dir: Optional[Path] = Field(
        default=None,
        description="Local directory of official archives, used instead of the URL if set",
    )
    catalog_timeout: float = Field(
        default=30.0, gt=0, description="Catalog download timeout in seconds"
    )

    # Flash transport
    flasher_url: str = Field(
        default="http://localhost:9090",
        description="Base URL of the flashing service",
    )

    # Persistence and logging
    preferences_file: Path = Field(
        default=Path("./tmp/preferences.json"),
        description="Preference store location",
    )
    log_file: str = Field(default="./logs/hubwizard.log")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # HTTP server
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=12316, ge=1, le=65535)


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
