"""Generator settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Cloud page generator settings."""

    model_config = SettingsConfigDict(
        env_prefix="CLOUDPAGES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Defaults for generated configurations
    default_framework: Literal["bootstrap", "tailwind", "vanilla"] = "bootstrap"

    # Data extensions written by generated AMPscript
    form_data_extension: str = Field(default="FormSubmissions", min_length=1)
    page_view_data_extension: str = Field(default="PageViews", min_length=1)
    utm_data_extension: str = Field(default="UTMTracking", min_length=1)

    # Personalization
    fallback_first_name: str = "Valued Customer"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
