"""
Application configuration management using Pydantic Settings.
All settings are loaded from environment variables.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Document Store (Database) Configuration
    # =========================================================================
    postgres_user: str = Field(default="tripmate_user")
    postgres_password: str = Field(default="tripmate_password")
    postgres_db: str = Field(default="tripmate_db")
    postgres_host: str = Field(default="localhost")
    postgres_port: int = Field(default=5432)

    # Full URL override (e.g. sqlite:///./tripmate.db for local runs)
    database_url: str = Field(default="")

    @property
    def sqlalchemy_url(self) -> str:
        """Database URL used by the engine: explicit override or PostgreSQL."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # =========================================================================
    # LLM Provider Configuration
    # =========================================================================
    google_api_key: str = Field(default="")
    openai_api_key: str = Field(default="")
    anthropic_api_key: str = Field(default="")
    llm_provider: Literal["google", "openai", "anthropic"] = Field(default="google")
    gemini_model: str = Field(default="gemini-2.5-flash")
    llm_temperature: float = Field(default=0.2)

    # =========================================================================
    # Object Storage (MinIO)
    # =========================================================================
    minio_host: str = Field(default="localhost")
    minio_port: int = Field(default=9000)
    minio_access_key: str = Field(default="minioadmin")
    minio_secret_key: str = Field(default="minioadmin")
    minio_bucket_name: str = Field(default="tripmate-assets")
    minio_secure: bool = Field(default=False)
    # Base used to build stable retrieval URLs (e.g. a CDN in front of the bucket)
    minio_public_url: str = Field(default="")

    @property
    def object_store_base_url(self) -> str:
        """Base URL that asset paths are appended to."""
        if self.minio_public_url:
            return self.minio_public_url.rstrip("/")
        scheme = "https" if self.minio_secure else "http"
        return f"{scheme}://{self.minio_host}:{self.minio_port}/{self.minio_bucket_name}"

    # =========================================================================
    # Upload Limits & Image Processing
    # =========================================================================
    max_image_upload_bytes: int = Field(default=50 * 1024 * 1024)
    max_video_upload_bytes: int = Field(default=500 * 1024 * 1024)
    image_max_dimension: int = Field(default=1920)
    image_max_compressed_bytes: int = Field(default=500 * 1024)
    thumbnail_max_dimension: int = Field(default=400)
    thumbnail_quality: int = Field(default=75)
    blur_placeholder_dimension: int = Field(default=16)

    # =========================================================================
    # Item Lifecycle
    # =========================================================================
    asset_delete_attempts: int = Field(default=2)
    orphan_grace_period_minutes: int = Field(default=60)
    asset_cache_max_entries: int = Field(default=256)
    asset_cache_max_bytes: int = Field(default=256 * 1024 * 1024)
    asset_cache_max_entry_bytes: int = Field(default=25 * 1024 * 1024)
    download_timeout_seconds: float = Field(default=30.0)

    # =========================================================================
    # Trip Defaults
    # =========================================================================
    default_trip_name: str = Field(default="My Trip")
    default_trip_budget: float = Field(default=10000)
    default_trip_currency: str = Field(default="VND")

    # =========================================================================
    # Logging Configuration
    # =========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="json")

    # =========================================================================
    # Application Settings
    # =========================================================================
    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )


# Global settings instance
settings = Settings()
