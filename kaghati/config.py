"""
Configuration management.
Simple .env based config for VPS deployment.
"""

from typing import Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Security
    session_secret: str = "change-me-in-production-use-random-string"
    admin_password_hash: str = ""  # bcrypt hash

    # Database
    database_path: str = "./data/app.db"

    # Logging
    log_level: str = "INFO"

    # Shopify
    shopify_shop_domain: str = ""  # e.g. "kaghati.myshopify.com"
    shopify_access_token: str = ""
    shopify_api_version: str = "2025-01"

    # Store coverage rings in km, also used as the per-ring maximum
    default_radius_km: Dict[str, int] = Field(
        default_factory=lambda: {"R1": 3, "R2": 5, "R3": 7, "R4": 10, "R5": 15}
    )

    # Sync status polling
    sync_poll_interval_seconds: int = 5


# Global settings instance
settings = Settings()
