"""
Configuration Management Module

This module handles all application configuration using Pydantic Settings.
Configuration is loaded from environment variables with strong typing and validation.

Design Decisions:
- Use Pydantic Settings for automatic environment variable loading
- Settings are frozen once loaded; nothing reloads them at runtime
- Validate configuration at startup (fail-fast approach)
- Support both file path and direct content for private key
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when the service cannot start with the given configuration."""
    pass


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All sensitive values are loaded from environment variables only,
    never hardcoded or logged.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True
    )

    # =========================================================================
    # GitHub App Configuration
    # =========================================================================
    github_app_id: int = Field(
        validation_alias=AliasChoices("github_app_id", "github_app_identifier"),
        description="GitHub App identifier set when registering the app"
    )

    github_private_key_path: Optional[str] = Field(
        default=None,
        description="Path to GitHub App private key .pem file"
    )

    github_private_key: Optional[str] = Field(
        default=None,
        description="GitHub App private key content (alternative to path)"
    )

    github_webhook_secret: str = Field(
        min_length=1,
        description="Webhook secret for signature verification"
    )

    # =========================================================================
    # GitHub API
    # =========================================================================
    github_api_base: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API"
    )

    github_api_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for outbound GitHub API calls"
    )

    # =========================================================================
    # Server Configuration
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind the server"
    )

    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port to bind the server"
    )

    # =========================================================================
    # Logging Configuration
    # =========================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    log_json_format: bool = Field(
        default=True,
        description="Enable JSON logging format"
    )

    log_requests: bool = Field(
        default=False,
        description="Enable request/response logging"
    )

    # =========================================================================
    # Validators
    # =========================================================================
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("github_api_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def get_private_key(self) -> str:
        """
        Get the GitHub App private key content.

        Supports two modes:
        1. Direct content via GITHUB_PRIVATE_KEY env var
        2. File path via GITHUB_PRIVATE_KEY_PATH env var

        Returns:
            Private key content as string

        Raises:
            ConfigurationError: If neither option is configured or file doesn't exist
        """
        # Direct content takes precedence
        if self.github_private_key:
            # Env vars carry the PEM with escaped newlines
            return self.github_private_key.replace("\\n", "\n")

        if self.github_private_key_path:
            key_path = Path(self.github_private_key_path)
            if not key_path.exists():
                raise ConfigurationError(f"Private key file not found: {key_path}")
            return key_path.read_text()

        raise ConfigurationError(
            "GitHub private key not configured. "
            "Set either GITHUB_PRIVATE_KEY or GITHUB_PRIVATE_KEY_PATH"
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once per process and shared by every request.

    Returns:
        Settings instance
    """
    return Settings()
