"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.

The storefront and the CMS read the same settings class; each process
only looks at the fields it needs. REVALIDATE_SECRET must match on both
sides for webhook revalidation to be accepted.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # CMS connection (storefront side)
    WORDPRESS_URL: str = "http://localhost:8080"
    WORDPRESS_TOKEN: Optional[str] = None

    # Revalidation handshake
    REVALIDATE_SECRET: str = ""
    REVALIDATE_WEBHOOK_URL: Optional[str] = None  # Storefront base URL, used by the CMS

    # CMS backend
    CMS_API_TOKEN: Optional[str] = None  # Required bearer token for writes when set
    CMS_DATABASE_URL: Optional[str] = None

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Timeouts
    API_TIMEOUT: float = 10.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase

    @property
    def wordpress_api_url(self) -> str:
        """Base URL of the CMS REST API."""
        return f"{self.WORDPRESS_URL.rstrip('/')}/wp-json"


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
