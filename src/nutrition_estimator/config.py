"""Application configuration."""

import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    fdc_api_key: str | None = Field(
        default=None, validation_alias=AliasChoices("fdc_api_key", "usda_api_key")
    )
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_page_size: int = 5
    off_base_url: str = "https://world.openfoodfacts.org"
    http_timeout_seconds: float = 15
    scale_by_bbox: bool = Field(
        default=True,
        validation_alias=AliasChoices("scale_by_bbox", "nutri_scale_by_bbox"),
    )
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
