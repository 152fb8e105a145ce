"""Application settings using Pydantic BaseSettings."""

import logging
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_VALID_RENDERERS = {"browser", "http"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Organic Certification Verifier"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_VALID_LOG_LEVELS}, got '{v}'")
        return upper

    @field_validator("registry_renderer")
    @classmethod
    def validate_registry_renderer(cls, v: str) -> str:
        lower = v.lower()
        if lower not in _VALID_RENDERERS:
            raise ValueError(f"registry_renderer must be one of {_VALID_RENDERERS}, got '{v}'")
        return lower

    @model_validator(mode="after")
    def validate_timeouts_positive(self) -> "Settings":
        for field_name in (
            "registry_navigation_timeout",
            "registry_label_timeout",
            "registry_scope_timeout",
            "session_completed_retention",
            "session_error_retention",
            "session_reaper_interval",
        ):
            value = getattr(self, field_name)
            if value <= 0:
                raise ValueError(f"{field_name} must be positive, got {value}")
        return self

    @model_validator(mode="after")
    def validate_limits_positive(self) -> "Settings":
        if self.verification_window_size < 1:
            raise ValueError(
                f"verification_window_size must be at least 1, got {self.verification_window_size}"
            )
        if self.upload_max_bytes < 1:
            raise ValueError(f"upload_max_bytes must be positive, got {self.upload_max_bytes}")
        return self

    @model_validator(mode="after")
    def warn_wildcard_origins(self) -> "Settings":
        if self.allowed_origins == ["*"]:
            logging.getLogger(__name__).warning(
                "allowed_origins is set to ['*'], consider restricting in production"
            )
        return self

    # CORS
    allowed_origins: list[str] = ["*"]

    # Registry
    registry_base_url: str = "https://organic.ams.usda.gov/Integrity/CP/OPP"
    registry_id_param: str = "nopid"
    registry_renderer: str = "browser"
    registry_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )

    # Timeouts (seconds)
    registry_navigation_timeout: float = 30.0
    registry_label_timeout: float = 15.0
    registry_scope_timeout: float = 10.0

    # Batch processing
    verification_window_size: int = 5

    # Session retention (seconds)
    session_completed_retention: float = 300.0
    session_error_retention: float = 60.0
    session_reaper_interval: float = 30.0

    # Uploads
    upload_max_bytes: int = 10 * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
