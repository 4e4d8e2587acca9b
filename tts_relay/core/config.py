"""
TTS Relay Application Configuration

Configuration management with environment variable support.
Settings are immutable once loaded; the cache directory is prepared by an
explicit initialization step rather than at import time.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from pathlib import Path
from functools import lru_cache
from dotenv import load_dotenv

from ..constants import APP_VERSION
from ..domain.cache.value_objects import RetentionWindow

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation and secure defaults."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )
    SERVICE_NAME: str = Field(default="tts-relay", description="Service name")
    SERVICE_VERSION: str = Field(default=APP_VERSION, description="Service version")

    # API configuration
    API_HOST: str = Field(default="0.0.0.0", description="API server host")
    API_PORT: int = Field(default=3000, ge=1, le=65535, description="API server port")

    # Cache configuration
    CACHE_DIR: Path = Field(
        default=Path("/var/www/html/tts_cache"),
        description="Directory holding the transient audio files",
    )
    CACHE_URL_PREFIX: str = Field(
        default="/tts_cache", description="Public URL prefix of the cache directory"
    )
    CACHE_FILE_EXTENSION: str = Field(
        default="mp3", description="Extension of stored audio files"
    )
    CACHE_RETENTION_SECONDS: float = Field(
        default=20.0,
        gt=0,
        le=86400,
        description="Seconds an audio file stays on disk after download",
    )
    SERVE_CACHE_FILES: bool = Field(
        default=False,
        description="Serve the cache directory under CACHE_URL_PREFIX",
    )

    # TTS provider configuration
    TTS_PROVIDER_URL: str = Field(
        default="https://translate.google.com/translate_tts",
        description="Text-to-speech provider endpoint",
    )
    TTS_LANGUAGE: str = Field(default="de", description="Target speech language")
    TTS_CLIENT_ID: str = Field(default="tw-ob", description="Provider client id")
    TTS_USER_AGENT: str = Field(
        default="Mozilla/5.0",
        description="User-Agent sent upstream (providers reject non-browser agents)",
    )
    TTS_TIMEOUT_SECONDS: float = Field(
        default=10.0, gt=0, le=120, description="Upstream request timeout"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @field_validator("CACHE_URL_PREFIX")
    @classmethod
    def validate_url_prefix(cls, v: str) -> str:
        """Normalize the public prefix to '/name' form."""
        v = "/" + v.strip("/")
        if v == "/":
            raise ValueError("CACHE_URL_PREFIX cannot be the site root")
        return v

    @field_validator("CACHE_FILE_EXTENSION")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        v = v.lstrip(".")
        if not v.isalnum():
            raise ValueError("CACHE_FILE_EXTENSION must be alphanumeric")
        return v

    @property
    def cache_dir(self) -> Path:
        """Absolute cache directory."""
        return self.CACHE_DIR.expanduser().resolve()

    @property
    def retention(self) -> RetentionWindow:
        """Retention window for new cache entries."""
        return RetentionWindow(self.CACHE_RETENTION_SECONDS)


def prepare_cache_directory(settings: Settings) -> Path:
    """Create the cache directory if absent. Safe to call repeatedly.

    Args:
        settings: Application settings

    Returns:
        Absolute path of the cache directory
    """
    cache_dir = settings.cache_dir
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
