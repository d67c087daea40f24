"""Configuration management for the application."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

IMAGE_FALLBACK_POLICIES = ("clear", "random")


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str | None = Field(default=None)

    # WordPress export
    wxr_export_path: str = Field(default="./migration/wordpress-export.xml")
    site_domain: str = Field(default="danie.de")
    upload_path_marker: str = Field(default="wp-content/uploads")

    # Image probing
    image_probe_timeout: float = Field(default=5.0)
    image_probe_batch_size: int = Field(default=10)
    image_probe_batch_delay: float = Field(default=1.0)  # seconds between batches

    # Matching
    image_fuzzy_threshold: float = Field(default=0.4)
    image_fallback: str = Field(default="clear")
    default_category_slug: str = Field(default="hauptgerichte")

    # Read API
    recipes_per_page: int = Field(default=30)
    listing_default_limit: int = Field(default=50)
    listing_max_limit: int = Field(default=100)

    # API
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Reject values the import pipeline cannot work with."""
        if not 0.0 <= self.image_fuzzy_threshold <= 1.0:
            raise ValueError("IMAGE_FUZZY_THRESHOLD must be between 0 and 1")
        if self.image_fallback not in IMAGE_FALLBACK_POLICIES:
            raise ValueError(f"IMAGE_FALLBACK must be one of {', '.join(IMAGE_FALLBACK_POLICIES)}")
        if self.environment == "production" and self.database_url:
            if "localhost" in self.database_url:
                raise ValueError("DATABASE_URL should not use localhost in production")
        return self

    def require_database_url(self) -> str:
        """Return the database URL or fail if it is not configured."""
        if not self.database_url:
            raise ConfigurationError("DATABASE_URL is not set")
        return self.database_url

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
