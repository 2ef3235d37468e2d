"""Configuration settings for catalog sync."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = Field(default="Catalog Sync")
    debug: bool = Field(default=False)
    app_env: str = Field(default="development")

    # Database
    database_url: str = Field(default="sqlite:///./catalog.db")

    # Logging
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    # Midocean gateway
    midocean_environment: str = Field(default="test")
    midocean_api_key: Optional[str] = Field(default=None)
    midocean_test_base_url: str = Field(default="https://apitest.midocean.com")
    midocean_production_base_url: str = Field(default="https://api.midocean.com")

    # XD Connects feeds
    xd_connects_product_data_url: Optional[str] = Field(default=None)

    # Feed fetching; None keeps requests waiting indefinitely
    feed_request_timeout: Optional[float] = Field(default=None)

    # Ingestion
    raw_data_max_bytes: int = Field(default=65536, gt=0)
    error_detail_limit: int = Field(default=10, ge=0)
    sync_max_workers: int = Field(default=2, ge=1)
    auto_import_on_empty: bool = Field(default=False)
    auto_import_delay_seconds: float = Field(default=2.0, ge=0)

    # Quote simulation
    quote_latency_scale: float = Field(default=1.0, ge=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def midocean_base_url(self) -> str:
        """Gateway base URL for the configured Midocean environment."""
        if self.midocean_environment == "production":
            return self.midocean_production_base_url
        return self.midocean_test_base_url


# Create global settings instance
settings = Settings()
