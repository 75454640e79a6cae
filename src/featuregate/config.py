"""
Configuration management for featuregate.

Uses Pydantic Settings to load configuration from environment variables
with sensible defaults for development.

Usage:
    from featuregate.config import settings
    print(settings.session_key)
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings loaded from environment variables or a .env file.

    List values such as DEFAULT_ENABLED_FEATURES are given as JSON,
    e.g. DEFAULT_ENABLED_FEATURES='["Wiki", "Files"]'.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ==========================================================================
    # Feature Gate
    # ==========================================================================

    default_enabled_features: list[str] = Field(
        default_factory=list,
        description="Features enabled for callers whose session holds no list",
    )
    denial_status_code: int = Field(
        default=403,
        description="HTTP status returned when a guarded route is denied",
    )

    # ==========================================================================
    # Session Configuration
    # ==========================================================================

    session_key: str = Field(
        default="enabled_features",
        description="Session key holding the caller's enabled feature names",
    )
    session_secret: str = Field(
        default="featuregate-dev-secret",
        description="Secret used to sign the session cookie",
    )
    session_max_age_seconds: int = Field(
        default=14 * 24 * 60 * 60,
        description="Lifetime of the session cookie",
    )

    # ==========================================================================
    # Logging Configuration
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v

    @field_validator("denial_status_code")
    @classmethod
    def validate_denial_status_code(cls, v: int) -> int:
        if not 400 <= v <= 599:
            raise ValueError("denial_status_code must be an HTTP error status")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias for importing
settings = get_settings()
