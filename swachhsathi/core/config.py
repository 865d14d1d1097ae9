"""
SwachhSathi - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Google Cloud Vision (primary classifier)
    google_vision_api_key: Optional[str] = None
    vision_api_url: str = "https://vision.googleapis.com/v1/images:annotate"
    vision_max_labels: int = 20

    # Gemini (fallback classifier)
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta/models"

    # Outbound HTTP
    http_timeout_seconds: float = 30.0

    # Firebase (document store + push)
    firebase_credentials_path: Optional[str] = None
    firebase_project_id: Optional[str] = None

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
