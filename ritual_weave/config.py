"""
Configuration management for Ritual Weave.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from WEAVE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WEAVE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Application
    app_name: str = Field(default="Ritual Weave")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=3000)

    # Static assets
    public_dir: Optional[str] = Field(
        default=None,
        description="Directory of static UI assets served at '/'. Unset = no assets.",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="'json' or 'console'")

    # Invocations
    invocation_base_url: str = Field(
        default="https://capabilities.weave.local/invocations",
        description="Base URL for mock capability invocation handles",
    )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
